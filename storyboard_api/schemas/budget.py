"""
Pydantic schemas for budgets, budget categories and expenses.
"""
from datetime import datetime
from decimal import Decimal
from typing import Any, ClassVar, Dict, List, Optional, Tuple

from pydantic import Field, field_validator

from storyboard_api.models.budget import (
    BudgetStatus,
    CategoryName,
    Currency,
    ExpenseStatus,
    PaymentMethod,
)
from storyboard_api.schemas.base import CamelModel, Money, Pagination, PartialUpdate


class CategoryIn(CamelModel):
    name: CategoryName
    budgeted: Money = Field(default=Decimal("0"), ge=0)


class CategoryResponse(CamelModel):
    id: Optional[str] = None
    name: str
    budgeted: Money
    spent: Money
    remaining: Money
    percentage: float


class BudgetSettingsSchema(CamelModel):
    auto_calculate: bool = True
    require_approval: bool = False
    approval_limit: Money = Field(default=Decimal("1000"), ge=0)
    warning_threshold: float = Field(default=80, ge=0)


class BudgetSettingsUpdate(CamelModel):
    auto_calculate: Optional[bool] = None
    require_approval: Optional[bool] = None
    approval_limit: Optional[Money] = Field(default=None, ge=0)
    warning_threshold: Optional[float] = Field(default=None, ge=0)


class BudgetSummaryResponse(CamelModel):
    total_budgeted: Money
    total_spent: Money
    total_remaining: Money
    percentage_used: float
    over_budget: bool
    over_budget_amount: Money
    unallocated_spent: Money


def _unique_category_names(categories: Optional[List[CategoryIn]]) -> Optional[List[CategoryIn]]:
    if categories is None:
        return categories
    names = [c.name for c in categories]
    if len(names) != len(set(names)):
        raise ValueError("Category names must be unique within a budget")
    return categories


class BudgetCreate(CamelModel):
    title: str = Field(..., min_length=1, max_length=200)
    description: Optional[str] = None
    currency: Currency = Currency.USD
    total_budget: Money = Field(default=Decimal("0"), ge=0)
    categories: List[CategoryIn] = Field(default_factory=list)
    settings: Optional[BudgetSettingsSchema] = None
    status: BudgetStatus = BudgetStatus.DRAFT

    @field_validator("title")
    @classmethod
    def strip_title(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Budget title is required")
        return v

    @field_validator("categories")
    @classmethod
    def check_unique_categories(cls, v):
        return _unique_category_names(v)


class BudgetUpdate(PartialUpdate):
    non_nullable: ClassVar[Tuple[str, ...]] = ("title", "currency", "total_budget", "categories", "status")

    title: Optional[str] = Field(default=None, min_length=1, max_length=200)
    description: Optional[str] = None
    currency: Optional[Currency] = None
    total_budget: Optional[Money] = Field(default=None, ge=0)
    categories: Optional[List[CategoryIn]] = None
    settings: Optional[BudgetSettingsUpdate] = None
    status: Optional[BudgetStatus] = None

    @field_validator("categories")
    @classmethod
    def check_unique_categories(cls, v):
        return _unique_category_names(v)


class CategoriesUpdate(CamelModel):
    categories: List[CategoryIn]

    @field_validator("categories")
    @classmethod
    def check_unique_categories(cls, v):
        return _unique_category_names(v)


class Vendor(CamelModel):
    name: Optional[str] = None
    contact: Optional[str] = None
    email: Optional[str] = None
    address: Optional[str] = None


class ExpenseCreate(CamelModel):
    date: Optional[datetime] = None
    description: str = Field(..., min_length=1, max_length=500)
    category: CategoryName
    amount: Money = Field(..., ge=0)
    vendor: Optional[Vendor] = None
    payment_method: PaymentMethod = PaymentMethod.CASH
    status: ExpenseStatus = ExpenseStatus.PLANNED
    receipt_url: Optional[str] = None
    invoice_number: Optional[str] = None
    notes: Optional[str] = None


class ExpenseUpdate(PartialUpdate):
    non_nullable: ClassVar[Tuple[str, ...]] = ("date", "description", "category", "amount", "payment_method", "status")

    date: Optional[datetime] = None
    description: Optional[str] = Field(default=None, min_length=1, max_length=500)
    category: Optional[CategoryName] = None
    amount: Optional[Money] = Field(default=None, ge=0)
    vendor: Optional[Vendor] = None
    payment_method: Optional[PaymentMethod] = None
    status: Optional[ExpenseStatus] = None
    receipt_url: Optional[str] = None
    invoice_number: Optional[str] = None
    notes: Optional[str] = None


class ExpenseResponse(CamelModel):
    id: str
    date: datetime
    description: str
    category: str
    amount: Money
    vendor: Optional[Vendor] = None
    payment_method: str
    status: str
    receipt_url: Optional[str] = None
    invoice_number: Optional[str] = None
    notes: Optional[str] = None
    created_by: str
    approved_by: Optional[str] = None
    approved_at: Optional[datetime] = None
    paid_at: Optional[datetime] = None


class BudgetResponse(CamelModel):
    id: str
    project_id: str
    title: str
    description: Optional[str] = None
    currency: str
    total_budget: Money
    status: str
    version: int
    categories: List[CategoryResponse]
    expenses: List[ExpenseResponse]
    summary: BudgetSummaryResponse
    settings: BudgetSettingsSchema
    total_expenses: int
    pending_expenses: int
    created_by: str
    last_modified_by: Optional[str] = None
    created_at: datetime
    updated_at: datetime


class BudgetListResponse(CamelModel):
    budgets: List[BudgetResponse]
    pagination: Pagination


class ExpenseMutationResponse(CamelModel):
    expense: ExpenseResponse
    summary: BudgetSummaryResponse
    is_over_warning: Optional[bool] = None


class ExpenseListResponse(CamelModel):
    expenses: List[ExpenseResponse]
    pagination: Pagination
    summary: BudgetSummaryResponse


class ExpenseDeleteResponse(CamelModel):
    summary: BudgetSummaryResponse
    remaining_expenses: int


class CategoryBreakdownResponse(CategoryResponse):
    expenses: int
    pending_amount: Money
    paid_amount: Money


class CategoriesSummaryResponse(CamelModel):
    categories: List[CategoryBreakdownResponse]
    summary: BudgetSummaryResponse
    is_over_warning: bool


class CategoriesUpdateResponse(CamelModel):
    categories: List[CategoryResponse]
    summary: BudgetSummaryResponse
    version: int


class BudgetVersionResponse(CamelModel):
    version: int
    data: Dict[str, Any]
    created_at: datetime
    created_by: Optional[str] = None


class ReportProject(CamelModel):
    id: str
    title: str
    type: str


class ReportBudget(CamelModel):
    id: str
    title: str
    total_budget: Money
    currency: str
    version: int
    status: str


class ReportFilters(CamelModel):
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    category: Optional[str] = None


class BudgetReport(CamelModel):
    project: ReportProject
    budget: ReportBudget
    summary: BudgetSummaryResponse
    categories: List[CategoryResponse]
    expenses: List[ExpenseResponse]
    filters: ReportFilters
    generated_at: datetime
    generated_by: str
