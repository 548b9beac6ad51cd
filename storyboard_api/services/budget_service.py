"""
Budget Service
Budget, category and expense operations on top of the pure calculator.

Derived figures are refreshed by ``recalculate``. Every mutating operation
here calls ``apply_auto_calculate`` before committing, which only
recalculates when the budget's ``auto_calculate`` setting is on.
"""
import csv
import io
import math
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Sequence, Tuple

from sqlalchemy import func
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select

from storyboard_api.config import settings as app_settings
from storyboard_api.exceptions import BadRequestError, NotFoundError
from storyboard_api.logging_config import get_logger
from storyboard_api.models.budget import (
    DEFAULT_CATEGORY_NAMES,
    Budget,
    BudgetCategory,
    BudgetExpense,
    BudgetStatus,
    BudgetVersion,
    ExpenseStatus,
)
from storyboard_api.models.project import Project
from storyboard_api.schemas.budget import (
    BudgetCreate,
    BudgetResponse,
    BudgetUpdate,
    CategoryIn,
    ExpenseCreate,
    ExpenseUpdate,
)
from storyboard_api.services.budget_calculator import (
    BudgetSummary,
    aggregate_categories,
    calculate_summary,
    category_breakdown,
    is_over_warning_threshold,
)
from storyboard_api.services.project_service import get_project, require_permission

logger = get_logger(__name__)

CSV_HEADER = ["Date", "Description", "Category", "Amount", "Status", "Vendor"]


def _naive_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Timestamps are stored as naive UTC."""
    if value is not None and value.tzinfo is not None:
        return value.astimezone(timezone.utc).replace(tzinfo=None)
    return value


def _pagination(page: int, limit: int, total: int) -> Dict[str, int]:
    return {"current": page, "pages": math.ceil(total / limit) if limit else 0, "total": total}


# --- Calculation ---

def recalculate(budget: Budget) -> BudgetSummary:
    """Write category totals and the summary onto ``budget`` and return the summary."""
    totals = aggregate_categories(budget.categories, budget.expenses)
    for category, total in zip(budget.categories, totals):
        category.spent = total.spent
        category.remaining = total.remaining
        category.percentage = total.percentage

    summary = calculate_summary(totals, budget.expenses)
    budget.summary = summary
    return summary


def apply_auto_calculate(budget: Budget) -> None:
    if budget.auto_calculate:
        recalculate(budget)


def is_over_warning(budget: Budget) -> bool:
    return is_over_warning_threshold(budget.summary, budget.warning_threshold)


def _build_categories(categories: Sequence[CategoryIn]) -> List[BudgetCategory]:
    return [
        BudgetCategory(
            position=i,
            name=c.name,
            budgeted=c.budgeted,
            spent=0,
            remaining=c.budgeted,
            percentage=0.0,
        )
        for i, c in enumerate(categories)
    ]


def snapshot_version(budget: Budget, user_id: str) -> BudgetVersion:
    """Store the current state in the version history and bump ``version``."""
    data = BudgetResponse.model_validate(budget).model_dump(mode="json", by_alias=True)
    snapshot = BudgetVersion(
        version=budget.version,
        data=data,
        created_at=datetime.utcnow(),
        created_by=user_id,
    )
    budget.previous_versions.append(snapshot)
    budget.version += 1
    return snapshot


# --- Queries ---

async def get_budget(session: AsyncSession, budget_id: str) -> Optional[Budget]:
    result = await session.execute(select(Budget).filter(Budget.id == budget_id))
    return result.scalar_one_or_none()


async def get_active_budget(session: AsyncSession, project_id: str) -> Optional[Budget]:
    result = await session.execute(
        select(Budget).filter(Budget.project_id == project_id, Budget.status == BudgetStatus.ACTIVE.value)
    )
    return result.scalars().first()


async def list_budgets(
    session: AsyncSession,
    project_id: str,
    status: Optional[str] = None,
    page: int = 1,
    limit: int = 10,
) -> Tuple[List[Budget], Dict[str, int]]:
    """Budgets for a project, highest version first."""
    conditions = [Budget.project_id == project_id]
    if status:
        conditions.append(Budget.status == status)

    total = (
        await session.execute(select(func.count()).select_from(Budget).filter(*conditions))
    ).scalar_one()

    stmt = (
        select(Budget)
        .filter(*conditions)
        .order_by(Budget.version.desc(), Budget.created_at.desc())
        .offset((page - 1) * limit)
        .limit(limit)
    )
    budgets = list((await session.execute(stmt)).scalars().all())
    return budgets, _pagination(page, limit, total)


def filter_expenses(
    expenses: Sequence[BudgetExpense],
    category: Optional[str] = None,
    status: Optional[str] = None,
    start_date: Optional[datetime] = None,
    end_date: Optional[datetime] = None,
) -> List[BudgetExpense]:
    """Filter by category, status and inclusive date range; newest first."""
    start_date, end_date = _naive_utc(start_date), _naive_utc(end_date)
    filtered = [
        e for e in expenses
        if (not category or e.category == category)
        and (not status or e.status == status)
        and (start_date is None or e.date >= start_date)
        and (end_date is None or e.date <= end_date)
    ]
    filtered.sort(key=lambda e: e.date, reverse=True)
    return filtered


def list_expenses(
    budget: Budget,
    category: Optional[str] = None,
    status: Optional[str] = None,
    start_date: Optional[datetime] = None,
    end_date: Optional[datetime] = None,
    page: int = 1,
    limit: int = 10,
) -> Tuple[List[BudgetExpense], Dict[str, int]]:
    expenses = filter_expenses(budget.expenses, category, status, start_date, end_date)
    skip = (page - 1) * limit
    return expenses[skip:skip + limit], _pagination(page, limit, len(expenses))


def categories_summary(budget: Budget) -> List[Dict[str, Any]]:
    """Stored category figures merged with expense counts and pending/paid amounts."""
    breakdown = category_breakdown(budget.categories, budget.expenses)
    merged = []
    for category, extra in zip(budget.categories, breakdown):
        merged.append({
            "id": category.id,
            "name": category.name,
            "budgeted": category.budgeted,
            "spent": category.spent,
            "remaining": category.remaining,
            "percentage": category.percentage,
            "expenses": extra["expenses"],
            "pending_amount": extra["pending_amount"],
            "paid_amount": extra["paid_amount"],
        })
    return merged


# --- Mutations ---

async def create_budget(session: AsyncSession, project: Project, user_id: str, data: BudgetCreate) -> Budget:
    """
    Create a budget for ``project``.

    Raises:
        BadRequestError: the project already has an active budget
    """
    if await get_active_budget(session, project.id):
        raise BadRequestError(
            "Project already has an active budget. Archive the current budget to create a new one."
        )

    budget_settings = data.settings.model_dump() if data.settings else {
        "auto_calculate": True,
        "require_approval": False,
        "approval_limit": app_settings.DEFAULT_APPROVAL_LIMIT,
        "warning_threshold": app_settings.DEFAULT_WARNING_THRESHOLD,
    }

    budget = Budget(
        project_id=project.id,
        title=data.title,
        description=data.description,
        currency=data.currency,
        total_budget=data.total_budget,
        status=data.status,
        version=1,
        categories=_build_categories(data.categories),
        expenses=[],
        previous_versions=[],
        created_by=user_id,
        **budget_settings,
    )
    budget.summary = BudgetSummary()
    apply_auto_calculate(budget)

    session.add(budget)
    await session.commit()
    await session.refresh(budget)

    logger.info(f"Created budget {budget.id} for project {project.id}")
    return budget


async def create_default_budget(session: AsyncSession, project: Project, user_id: str) -> Budget:
    """Active budget with zeroed default categories, used by project budget items."""
    data = BudgetCreate(
        title=f"{project.title} Budget",
        currency=app_settings.DEFAULT_CURRENCY,
        categories=[CategoryIn(name=name) for name in DEFAULT_CATEGORY_NAMES],
        status=BudgetStatus.ACTIVE,
    )
    return await create_budget(session, project, user_id, data)


async def update_budget(session: AsyncSession, budget: Budget, user_id: str, data: BudgetUpdate) -> Budget:
    """
    Raises:
        BadRequestError: activating this budget while another one is active
    """
    payload = data.model_dump(exclude_unset=True)

    if payload.get("status") == BudgetStatus.ACTIVE.value and budget.status != BudgetStatus.ACTIVE.value:
        active = await get_active_budget(session, budget.project_id)
        if active is not None and str(active.id) != str(budget.id):
            raise BadRequestError("Project already has an active budget")

    if "categories" in payload or "total_budget" in payload:
        snapshot_version(budget, user_id)

    categories = payload.pop("categories", None)
    if categories is not None:
        budget.categories = _build_categories(data.categories)

    budget_settings = payload.pop("settings", None) or {}
    for field, value in budget_settings.items():
        if value is not None:
            setattr(budget, field, value)

    for field, value in payload.items():
        setattr(budget, field, value)

    budget.last_modified_by = user_id
    apply_auto_calculate(budget)

    await session.commit()
    await session.refresh(budget)

    logger.info(f"Updated budget {budget.id} (version {budget.version})")
    return budget


async def update_categories(
    session: AsyncSession,
    budget: Budget,
    user_id: str,
    categories: Sequence[CategoryIn],
) -> Budget:
    snapshot_version(budget, user_id)
    budget.categories = _build_categories(categories)
    budget.last_modified_by = user_id
    apply_auto_calculate(budget)

    await session.commit()
    await session.refresh(budget)

    logger.info(f"Replaced categories of budget {budget.id}, now version {budget.version}")
    return budget


def _new_expense(budget: Budget, user_id: str, data: ExpenseCreate, enforce_approval: bool) -> BudgetExpense:
    payload = data.model_dump()
    payload["date"] = _naive_utc(payload.get("date")) or datetime.utcnow()

    if (
        enforce_approval
        and budget.require_approval
        and data.amount > budget.approval_limit
    ):
        payload["status"] = ExpenseStatus.PLANNED.value

    expense = BudgetExpense(created_by=user_id, **payload)
    if expense.status == ExpenseStatus.PAID.value:
        expense.paid_at = datetime.utcnow()
    return expense


async def add_expense(
    session: AsyncSession,
    budget: Budget,
    user_id: str,
    data: ExpenseCreate,
    enforce_approval: bool = True,
) -> BudgetExpense:
    """
    Append an expense to the budget.

    When the budget requires approval and the amount exceeds its approval
    limit, the expense is stored as ``planned`` whatever status was sent.
    """
    expense = _new_expense(budget, user_id, data, enforce_approval)
    budget.expenses.append(expense)
    budget.last_modified_by = user_id
    apply_auto_calculate(budget)

    await session.commit()
    await session.refresh(budget)

    logger.info(f"Added expense {expense.id} ({expense.category}, {expense.amount}) to budget {budget.id}")
    return expense


def _require_expense(budget: Budget, expense_id: str) -> BudgetExpense:
    expense = budget.get_expense(expense_id)
    if not expense:
        raise NotFoundError("Expense not found")
    return expense


async def update_expense(
    session: AsyncSession,
    budget: Budget,
    expense_id: str,
    user_id: str,
    data: ExpenseUpdate,
) -> BudgetExpense:
    expense = _require_expense(budget, expense_id)

    payload = data.model_dump(exclude_unset=True)
    if "date" in payload:
        payload["date"] = _naive_utc(payload["date"]) or expense.date
    for field, value in payload.items():
        setattr(expense, field, value)

    if expense.status == ExpenseStatus.PAID.value and expense.paid_at is None:
        expense.paid_at = datetime.utcnow()

    budget.last_modified_by = user_id
    apply_auto_calculate(budget)

    await session.commit()
    await session.refresh(budget)

    logger.info(f"Updated expense {expense_id} on budget {budget.id}")
    return expense


async def delete_expense(session: AsyncSession, budget: Budget, expense_id: str, user_id: str) -> Budget:
    expense = _require_expense(budget, expense_id)

    budget.expenses.remove(expense)
    budget.last_modified_by = user_id
    apply_auto_calculate(budget)

    await session.commit()
    await session.refresh(budget)

    logger.info(f"Deleted expense {expense_id} from budget {budget.id}")
    return budget


async def approve_expense(session: AsyncSession, budget: Budget, expense_id: str, user_id: str) -> BudgetExpense:
    expense = _require_expense(budget, expense_id)

    expense.status = ExpenseStatus.APPROVED.value
    expense.approved_by = user_id
    expense.approved_at = datetime.utcnow()
    budget.last_modified_by = user_id
    apply_auto_calculate(budget)

    await session.commit()
    await session.refresh(budget)

    logger.info(f"Expense {expense_id} approved by {user_id}")
    return expense


async def mark_expense_paid(session: AsyncSession, budget: Budget, expense_id: str, user_id: str) -> BudgetExpense:
    expense = _require_expense(budget, expense_id)

    expense.status = ExpenseStatus.PAID.value
    expense.paid_at = datetime.utcnow()
    budget.last_modified_by = user_id
    apply_auto_calculate(budget)

    await session.commit()
    await session.refresh(budget)

    logger.info(f"Expense {expense_id} marked paid on budget {budget.id}")
    return expense


async def recalculate_budget(session: AsyncSession, budget: Budget, user_id: str) -> Budget:
    """Explicit recompute, regardless of the auto_calculate setting."""
    summary = recalculate(budget)
    budget.last_modified_by = user_id

    await session.commit()
    await session.refresh(budget)

    logger.info(
        f"Recalculated budget {budget.id}: spent {summary.total_spent} of {summary.total_budgeted}"
    )
    return budget


# --- Project budget items ---

async def get_or_create_project_budget(session: AsyncSession, project: Project, user_id: str) -> Budget:
    budget = await get_active_budget(session, project.id)
    if budget:
        return budget

    result = await session.execute(
        select(Budget).filter(Budget.project_id == project.id).order_by(Budget.version.desc())
    )
    budget = result.scalars().first()
    if budget:
        return budget

    logger.info(f"No budget for project {project.id}, creating default budget")
    return await create_default_budget(session, project, user_id)


async def add_project_budget_item(
    session: AsyncSession,
    project: Project,
    user_id: str,
    data: ExpenseCreate,
) -> BudgetExpense:
    budget = await get_or_create_project_budget(session, project, user_id)
    return await add_expense(session, budget, user_id, data, enforce_approval=False)


async def update_project_budget_item(
    session: AsyncSession,
    project: Project,
    item_id: str,
    user_id: str,
    data: ExpenseUpdate,
) -> BudgetExpense:
    result = await session.execute(
        select(Budget).filter(Budget.project_id == project.id).order_by(Budget.version.desc())
    )
    for budget in result.scalars().all():
        if budget.get_expense(item_id):
            return await update_expense(session, budget, item_id, user_id, data)
    raise NotFoundError("Expense not found")


# --- Reports ---

def build_report(
    budget: Budget,
    project: Project,
    user_id: str,
    start_date: Optional[datetime] = None,
    end_date: Optional[datetime] = None,
    category: Optional[str] = None,
) -> Dict[str, Any]:
    expenses = filter_expenses(budget.expenses, category=category, start_date=start_date, end_date=end_date)
    return {
        "project": {"id": project.id, "title": project.title, "type": project.type},
        "budget": {
            "id": budget.id,
            "title": budget.title,
            "total_budget": budget.total_budget,
            "currency": budget.currency,
            "version": budget.version,
            "status": budget.status,
        },
        "summary": budget.summary,
        "categories": budget.categories,
        "expenses": expenses,
        "filters": {"start_date": start_date, "end_date": end_date, "category": category},
        "generated_at": datetime.utcnow(),
        "generated_by": user_id,
    }


def report_to_csv(expenses: Sequence[BudgetExpense]) -> str:
    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n")
    writer.writerow(CSV_HEADER)
    for expense in expenses:
        writer.writerow([
            expense.date.date().isoformat(),
            expense.description,
            expense.category,
            expense.amount,
            expense.status,
            expense.vendor_name,
        ])
    return buffer.getvalue()


# --- Access ---

async def get_budget_for_user(
    session: AsyncSession,
    budget_id: str,
    user_id: str,
    permission: str,
    detail: str = "Access denied",
) -> Tuple[Budget, Project]:
    """
    Load a budget with its project and check the caller's permission.

    Raises:
        NotFoundError: budget does not exist
        ForbiddenError: caller lacks the permission on the owning project
    """
    budget = await get_budget(session, budget_id)
    if not budget:
        raise NotFoundError("Budget not found")

    project = await get_project(session, budget.project_id)
    if not project or project.is_archived:
        raise NotFoundError("Project not found")
    require_permission(project, user_id, permission, detail)
    return budget, project
