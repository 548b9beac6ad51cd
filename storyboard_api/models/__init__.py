from storyboard_api.db import Base
from storyboard_api.models.project import Project, ProjectCollaborator
from storyboard_api.models.budget import Budget, BudgetCategory, BudgetExpense, BudgetVersion
from storyboard_api.models.schedule import Schedule

__all__ = [
    "Base",
    "Project",
    "ProjectCollaborator",
    "Budget",
    "BudgetCategory",
    "BudgetExpense",
    "BudgetVersion",
    "Schedule",
]
