"""
Shared fixtures for the storyboard_api test suite.

No database is needed: services run against ``FakeSession``, which accepts
the calls the services make and hands back preset rows from ``execute``.
"""
import uuid
from datetime import date, datetime, timedelta
from decimal import Decimal

import pytest

import storyboard_api.models  # noqa: F401  (registers every mapper)
from storyboard_api.models.budget import Budget, BudgetCategory, BudgetExpense
from storyboard_api.models.project import Project, ProjectCollaborator
from storyboard_api.models.schedule import Schedule

OWNER_ID = "11111111-1111-1111-1111-111111111111"
OTHER_USER_ID = "22222222-2222-2222-2222-222222222222"

CHILD_COLLECTIONS = ("categories", "expenses", "previous_versions", "collaborators")


def _fill_defaults(obj) -> None:
    """Stand in for the flush: primary keys and timestamps."""
    if getattr(obj, "id", "") is None:
        obj.id = str(uuid.uuid4())
    for attr in ("created_at", "updated_at", "added_at"):
        if hasattr(obj, attr) and getattr(obj, attr) is None:
            setattr(obj, attr, datetime.utcnow())


class FakeResult:
    def __init__(self, rows):
        self._rows = list(rows)

    def scalars(self):
        return self

    def all(self):
        return list(self._rows)

    def first(self):
        return self._rows[0] if self._rows else None

    def scalar_one_or_none(self):
        return self.first()

    def scalar_one(self):
        # only count queries call this
        return len(self._rows)


class FakeSession:
    def __init__(self, rows=()):
        self.rows = list(rows)
        self.statements = []
        self.added = []
        self.deleted = []
        self.commits = 0
        self.rollbacks = 0

    async def execute(self, statement):
        self.statements.append(statement)
        return FakeResult(self.rows)

    def add(self, obj):
        self.added.append(obj)

    async def delete(self, obj):
        self.deleted.append(obj)

    async def commit(self):
        self.commits += 1

    async def rollback(self):
        self.rollbacks += 1

    async def refresh(self, obj):
        _fill_defaults(obj)
        for name in CHILD_COLLECTIONS:
            for child in getattr(obj, name, None) or []:
                _fill_defaults(child)


@pytest.fixture
def fake_session():
    return FakeSession()


@pytest.fixture
def make_project():
    def _make(owner_id=OWNER_ID, collaborators=None, **overrides):
        now = datetime.utcnow()
        fields = dict(
            id=str(uuid.uuid4()),
            title="Night Shoot",
            description=None,
            type="short-film",
            status="planning",
            owner_id=owner_id,
            is_archived=False,
            created_at=now,
            updated_at=now,
        )
        fields.update(overrides)
        project = Project(**fields)
        for user_id, permissions in (collaborators or {}).items():
            project.collaborators.append(
                ProjectCollaborator(
                    id=str(uuid.uuid4()),
                    user_id=user_id,
                    role="crew",
                    permissions=list(permissions),
                    added_at=now,
                )
            )
        return project

    return _make


@pytest.fixture
def make_expense():
    def _make(category="crew", amount="100", status="paid", **overrides):
        fields = dict(
            id=str(uuid.uuid4()),
            date=datetime(2026, 3, 1, 12, 0),
            description=f"{category} expense",
            category=category,
            amount=Decimal(amount),
            payment_method="cash",
            status=status,
            created_by=OWNER_ID,
        )
        fields.update(overrides)
        return BudgetExpense(**fields)

    return _make


@pytest.fixture
def make_budget():
    def _make(categories=None, expenses=(), **overrides):
        """``categories`` maps category name to budgeted amount."""
        now = datetime.utcnow()
        fields = dict(
            id=str(uuid.uuid4()),
            project_id=str(uuid.uuid4()),
            title="Main Budget",
            currency="USD",
            total_budget=Decimal("10000"),
            status="active",
            version=1,
            auto_calculate=True,
            require_approval=False,
            approval_limit=Decimal("1000"),
            warning_threshold=80.0,
            created_by=OWNER_ID,
            created_at=now,
            updated_at=now,
        )
        fields.update(overrides)
        budget = Budget(**fields)

        for name, budgeted in (categories or {"crew": "5000"}).items():
            budget.categories.append(
                BudgetCategory(
                    id=str(uuid.uuid4()),
                    name=name,
                    budgeted=Decimal(budgeted),
                    spent=Decimal("0"),
                    remaining=Decimal(budgeted),
                    percentage=0.0,
                )
            )
        for expense in expenses:
            budget.expenses.append(expense)
        return budget

    return _make


@pytest.fixture
def future_date():
    return date.today() + timedelta(days=7)


@pytest.fixture
def make_schedule(future_date):
    def _make(start_time="09:00", end_time="11:00", **overrides):
        now = datetime.utcnow()
        fields = dict(
            id=str(uuid.uuid4()),
            project_id=str(uuid.uuid4()),
            title="Scene 12 exterior",
            type="shooting",
            date=future_date,
            start_time=start_time,
            end_time=end_time,
            duration_minutes=None,
            scenes=[],
            crew=[],
            cast=[],
            equipment=[],
            emergency_contacts=[],
            estimated_budget=Decimal("0"),
            status="draft",
            priority="medium",
            created_by=OWNER_ID,
            created_at=now,
            updated_at=now,
        )
        fields.update(overrides)
        return Schedule(**fields)

    return _make
