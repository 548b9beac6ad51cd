from storyboard_api.schemas.project import ProjectCreate, ProjectUpdate, ProjectResponse, CollaboratorIn
from storyboard_api.schemas.budget import (
    BudgetCreate,
    BudgetUpdate,
    BudgetResponse,
    ExpenseCreate,
    ExpenseUpdate,
    ExpenseResponse,
)
from storyboard_api.schemas.schedule import ScheduleCreate, ScheduleUpdate, ScheduleResponse

__all__ = [
    "ProjectCreate",
    "ProjectUpdate",
    "ProjectResponse",
    "CollaboratorIn",
    "BudgetCreate",
    "BudgetUpdate",
    "BudgetResponse",
    "ExpenseCreate",
    "ExpenseUpdate",
    "ExpenseResponse",
    "ScheduleCreate",
    "ScheduleUpdate",
    "ScheduleResponse",
]
