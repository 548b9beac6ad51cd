from datetime import datetime
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from storyboard_api.db import get_db_session
from storyboard_api.dependencies import get_current_user_id
from storyboard_api.exceptions import InternalServerError, NotFoundError
from storyboard_api.logging_config import get_logger
from storyboard_api.models.budget import BudgetStatus, ExpenseStatus
from storyboard_api.models.project import Permission
from storyboard_api.schemas.budget import (
    BudgetCreate,
    BudgetListResponse,
    BudgetReport,
    BudgetResponse,
    BudgetUpdate,
    BudgetVersionResponse,
    CategoriesSummaryResponse,
    CategoriesUpdate,
    CategoriesUpdateResponse,
    ExpenseCreate,
    ExpenseDeleteResponse,
    ExpenseListResponse,
    ExpenseMutationResponse,
    ExpenseResponse,
    ExpenseUpdate,
)
from storyboard_api.services import budget_service
from storyboard_api.services.project_service import get_project_for_user

logger = get_logger(__name__)
router = APIRouter(tags=["budgets"])


def _mutation_response(budget, expense) -> dict:
    return {
        "expense": expense,
        "summary": budget.summary,
        "is_over_warning": budget_service.is_over_warning(budget),
    }


@router.post("/projects/{project_id}/budgets", response_model=BudgetResponse, status_code=status.HTTP_201_CREATED)
async def create_budget(
    project_id: str,
    budget_data: BudgetCreate,
    user_id: str = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db_session),
):
    """Create a budget for a project"""
    try:
        project = await get_project_for_user(db, project_id, user_id, Permission.WRITE.value)
        return await budget_service.create_budget(db, project, user_id, budget_data)

    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error creating budget for project {project_id}: {e}")
        await db.rollback()
        raise InternalServerError("Failed to create budget")


@router.get("/projects/{project_id}/budget", response_model=BudgetResponse)
async def get_project_budget(
    project_id: str,
    user_id: str = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db_session),
):
    """Get the project's active budget"""
    try:
        await get_project_for_user(db, project_id, user_id, Permission.READ.value)
        budget = await budget_service.get_active_budget(db, project_id)
        if not budget:
            raise NotFoundError("No active budget found for this project")
        return budget

    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error fetching budget for project {project_id}: {e}")
        raise InternalServerError("Failed to fetch budget")


@router.get("/projects/{project_id}/budgets", response_model=BudgetListResponse)
async def get_budgets(
    project_id: str,
    status_filter: Optional[BudgetStatus] = Query(default=None, alias="status"),
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=10, ge=1, le=100),
    user_id: str = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db_session),
):
    """List a project's budgets, latest version first"""
    try:
        await get_project_for_user(db, project_id, user_id, Permission.READ.value)
        budgets, pagination = await budget_service.list_budgets(
            db,
            project_id,
            status=status_filter.value if status_filter else None,
            page=page,
            limit=limit,
        )
        return {"budgets": budgets, "pagination": pagination}

    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error listing budgets for project {project_id}: {e}")
        raise InternalServerError("Failed to fetch budgets")


@router.put("/budgets/{budget_id}", response_model=BudgetResponse)
async def update_budget(
    budget_id: str,
    budget_data: BudgetUpdate,
    user_id: str = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db_session),
):
    """Update budget fields; category or total changes start a new version"""
    try:
        budget, _ = await budget_service.get_budget_for_user(db, budget_id, user_id, Permission.WRITE.value)
        return await budget_service.update_budget(db, budget, user_id, budget_data)

    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error updating budget {budget_id}: {e}")
        await db.rollback()
        raise InternalServerError("Failed to update budget")


@router.post(
    "/budgets/{budget_id}/expenses",
    response_model=ExpenseMutationResponse,
    status_code=status.HTTP_201_CREATED,
)
async def add_expense(
    budget_id: str,
    expense_data: ExpenseCreate,
    user_id: str = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db_session),
):
    """Add an expense to a budget"""
    try:
        budget, _ = await budget_service.get_budget_for_user(db, budget_id, user_id, Permission.WRITE.value)
        expense = await budget_service.add_expense(db, budget, user_id, expense_data)
        return _mutation_response(budget, expense)

    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error adding expense to budget {budget_id}: {e}")
        await db.rollback()
        raise InternalServerError("Failed to add expense")


@router.get("/budgets/{budget_id}/expenses", response_model=ExpenseListResponse)
async def get_expenses(
    budget_id: str,
    category: Optional[str] = Query(default=None),
    status_filter: Optional[ExpenseStatus] = Query(default=None, alias="status"),
    start_date: Optional[datetime] = Query(default=None, alias="startDate"),
    end_date: Optional[datetime] = Query(default=None, alias="endDate"),
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=10, ge=1, le=100),
    user_id: str = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db_session),
):
    """List a budget's expenses, newest first"""
    try:
        budget, _ = await budget_service.get_budget_for_user(db, budget_id, user_id, Permission.READ.value)
        expenses, pagination = budget_service.list_expenses(
            budget,
            category=category,
            status=status_filter.value if status_filter else None,
            start_date=start_date,
            end_date=end_date,
            page=page,
            limit=limit,
        )
        return {"expenses": expenses, "pagination": pagination, "summary": budget.summary}

    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error listing expenses of budget {budget_id}: {e}")
        raise InternalServerError("Failed to fetch expenses")


@router.put("/budgets/{budget_id}/expenses/{expense_id}", response_model=ExpenseMutationResponse)
async def update_expense(
    budget_id: str,
    expense_id: str,
    expense_data: ExpenseUpdate,
    user_id: str = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db_session),
):
    """Update an expense"""
    try:
        budget, _ = await budget_service.get_budget_for_user(db, budget_id, user_id, Permission.WRITE.value)
        expense = await budget_service.update_expense(db, budget, expense_id, user_id, expense_data)
        return _mutation_response(budget, expense)

    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error updating expense {expense_id}: {e}")
        await db.rollback()
        raise InternalServerError("Failed to update expense")


@router.delete("/budgets/{budget_id}/expenses/{expense_id}", response_model=ExpenseDeleteResponse)
async def delete_expense(
    budget_id: str,
    expense_id: str,
    user_id: str = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db_session),
):
    """Delete an expense"""
    try:
        budget, _ = await budget_service.get_budget_for_user(db, budget_id, user_id, Permission.DELETE.value)
        budget = await budget_service.delete_expense(db, budget, expense_id, user_id)
        return {"summary": budget.summary, "remaining_expenses": budget.total_expenses}

    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error deleting expense {expense_id}: {e}")
        await db.rollback()
        raise InternalServerError("Failed to delete expense")


@router.patch("/budgets/{budget_id}/expenses/{expense_id}/approve", response_model=ExpenseResponse)
async def approve_expense(
    budget_id: str,
    expense_id: str,
    user_id: str = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db_session),
):
    """Approve an expense (admin only)"""
    try:
        budget, _ = await budget_service.get_budget_for_user(
            db, budget_id, user_id, Permission.ADMIN.value, detail="Admin access required to approve expenses"
        )
        return await budget_service.approve_expense(db, budget, expense_id, user_id)

    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error approving expense {expense_id}: {e}")
        await db.rollback()
        raise InternalServerError("Failed to approve expense")


@router.patch("/budgets/{budget_id}/expenses/{expense_id}/paid", response_model=ExpenseMutationResponse)
async def mark_expense_paid(
    budget_id: str,
    expense_id: str,
    user_id: str = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db_session),
):
    """Mark an expense as paid"""
    try:
        budget, _ = await budget_service.get_budget_for_user(db, budget_id, user_id, Permission.WRITE.value)
        expense = await budget_service.mark_expense_paid(db, budget, expense_id, user_id)
        return _mutation_response(budget, expense)

    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error marking expense {expense_id} paid: {e}")
        await db.rollback()
        raise InternalServerError("Failed to mark expense as paid")


@router.get("/budgets/{budget_id}/categories", response_model=CategoriesSummaryResponse)
async def get_categories_summary(
    budget_id: str,
    user_id: str = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db_session),
):
    """Per-category figures with expense counts and pending/paid amounts"""
    try:
        budget, _ = await budget_service.get_budget_for_user(db, budget_id, user_id, Permission.READ.value)
        return {
            "categories": budget_service.categories_summary(budget),
            "summary": budget.summary,
            "is_over_warning": budget_service.is_over_warning(budget),
        }

    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error summarising categories of budget {budget_id}: {e}")
        raise InternalServerError("Failed to fetch category summary")


@router.get("/budgets/{budget_id}/report", response_model=None)
async def generate_report(
    budget_id: str,
    report_format: str = Query(default="json", alias="format", pattern="^(json|csv)$"),
    start_date: Optional[datetime] = Query(default=None, alias="startDate"),
    end_date: Optional[datetime] = Query(default=None, alias="endDate"),
    category: Optional[str] = Query(default=None),
    user_id: str = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db_session),
):
    """Budget report as JSON or CSV"""
    try:
        budget, project = await budget_service.get_budget_for_user(db, budget_id, user_id, Permission.READ.value)
        report = budget_service.build_report(budget, project, user_id, start_date, end_date, category)

        if report_format == "csv":
            return Response(
                content=budget_service.report_to_csv(report["expenses"]),
                media_type="text/csv",
                headers={"Content-Disposition": f"attachment; filename=budget-report-{budget_id}.csv"},
            )
        return BudgetReport.model_validate(report)

    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error generating report for budget {budget_id}: {e}")
        raise InternalServerError("Failed to generate report")


@router.put("/budgets/{budget_id}/categories", response_model=CategoriesUpdateResponse)
async def update_categories(
    budget_id: str,
    categories_data: CategoriesUpdate,
    user_id: str = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db_session),
):
    """Replace the budget's categories; always starts a new version"""
    try:
        budget, _ = await budget_service.get_budget_for_user(db, budget_id, user_id, Permission.WRITE.value)
        budget = await budget_service.update_categories(db, budget, user_id, categories_data.categories)
        return {"categories": budget.categories, "summary": budget.summary, "version": budget.version}

    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error updating categories of budget {budget_id}: {e}")
        await db.rollback()
        raise InternalServerError("Failed to update categories")


@router.get("/budgets/{budget_id}/versions", response_model=List[BudgetVersionResponse])
async def get_versions(
    budget_id: str,
    user_id: str = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db_session),
):
    """Snapshots stored before each versioned change, newest first"""
    try:
        budget, _ = await budget_service.get_budget_for_user(db, budget_id, user_id, Permission.READ.value)
        return sorted(budget.previous_versions, key=lambda v: v.version, reverse=True)

    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error fetching versions of budget {budget_id}: {e}")
        raise InternalServerError("Failed to fetch budget versions")


@router.post("/budgets/{budget_id}/recalculate", response_model=BudgetResponse)
async def recalculate_budget(
    budget_id: str,
    user_id: str = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db_session),
):
    """Recompute category totals and the summary"""
    try:
        budget, _ = await budget_service.get_budget_for_user(db, budget_id, user_id, Permission.WRITE.value)
        return await budget_service.recalculate_budget(db, budget, user_id)

    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error recalculating budget {budget_id}: {e}")
        await db.rollback()
        raise InternalServerError("Failed to recalculate budget")


@router.post(
    "/projects/{project_id}/budget/items",
    response_model=ExpenseResponse,
    status_code=status.HTTP_201_CREATED,
)
async def add_project_budget_item(
    project_id: str,
    item_data: ExpenseCreate,
    user_id: str = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db_session),
):
    """Add an expense to the project's budget, creating a default budget if needed"""
    try:
        project = await get_project_for_user(db, project_id, user_id, Permission.WRITE.value)
        return await budget_service.add_project_budget_item(db, project, user_id, item_data)

    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error adding budget item to project {project_id}: {e}")
        await db.rollback()
        raise InternalServerError("Failed to add budget item")


@router.put("/projects/{project_id}/budget/items/{item_id}", response_model=ExpenseResponse)
async def update_project_budget_item(
    project_id: str,
    item_id: str,
    item_data: ExpenseUpdate,
    user_id: str = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db_session),
):
    """Update an expense of the project's budget"""
    try:
        project = await get_project_for_user(db, project_id, user_id, Permission.WRITE.value)
        return await budget_service.update_project_budget_item(db, project, item_id, user_id, item_data)

    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error updating budget item {item_id}: {e}")
        await db.rollback()
        raise InternalServerError("Failed to update budget item")
