"""
Budget models: a project budget with ordered categories, expenses and
version snapshots.

Summary figures and category spent/remaining/percentage are stored
denormalised and written by ``budget_service.recalculate``.
"""
import enum
import uuid
from datetime import datetime

from sqlalchemy import Boolean, Column, DateTime, Float, ForeignKey, Integer, Numeric, String, Text
from sqlalchemy.dialects.postgresql import JSONB, UUID
from sqlalchemy.ext.orderinglist import ordering_list
from sqlalchemy.orm import relationship

from storyboard_api.db import Base
from storyboard_api.services.budget_calculator import BudgetSummary, ZERO


class Currency(str, enum.Enum):
    USD = "USD"
    EUR = "EUR"
    GBP = "GBP"
    INR = "INR"
    CAD = "CAD"
    AUD = "AUD"
    JPY = "JPY"
    CNY = "CNY"


class BudgetStatus(str, enum.Enum):
    DRAFT = "draft"
    ACTIVE = "active"
    COMPLETED = "completed"
    ARCHIVED = "archived"


class CategoryName(str, enum.Enum):
    PRE_PRODUCTION = "pre-production"
    CAST = "cast"
    CREW = "crew"
    EQUIPMENT = "equipment"
    LOCATION = "location"
    TRANSPORTATION = "transportation"
    CATERING = "catering"
    COSTUMES = "costumes"
    MAKEUP = "makeup"
    PROPS = "props"
    SET_DESIGN = "set-design"
    POST_PRODUCTION = "post-production"
    MARKETING = "marketing"
    INSURANCE = "insurance"
    PERMITS = "permits"
    CONTINGENCY = "contingency"
    OTHER = "other"


class ExpenseStatus(str, enum.Enum):
    PLANNED = "planned"
    APPROVED = "approved"
    PAID = "paid"
    OVERDUE = "overdue"
    CANCELLED = "cancelled"


class PaymentMethod(str, enum.Enum):
    CASH = "cash"
    CHECK = "check"
    CREDIT_CARD = "credit-card"
    BANK_TRANSFER = "bank-transfer"
    PAYPAL = "paypal"
    OTHER = "other"


# Categories seeded when a budget is created implicitly for a project
DEFAULT_CATEGORY_NAMES = (
    CategoryName.PRE_PRODUCTION,
    CategoryName.CAST,
    CategoryName.CREW,
    CategoryName.EQUIPMENT,
    CategoryName.LOCATION,
    CategoryName.POST_PRODUCTION,
    CategoryName.OTHER,
)


class Budget(Base):
    __tablename__ = "budgets"

    id = Column(UUID(as_uuid=False), primary_key=True, default=lambda: str(uuid.uuid4()), index=True)
    project_id = Column(UUID(as_uuid=False), ForeignKey('projects.id', ondelete='CASCADE'), nullable=False, index=True)
    title = Column(String(200), nullable=False)
    description = Column(Text, nullable=True)
    currency = Column(String(3), nullable=False, default=Currency.USD.value)
    total_budget = Column(Numeric(precision=14, scale=2), nullable=False, default=0)
    status = Column(String, nullable=False, default=BudgetStatus.DRAFT.value, index=True)
    version = Column(Integer, nullable=False, default=1)

    # Summary (derived)
    total_budgeted = Column(Numeric(precision=14, scale=2), nullable=False, default=0)
    total_spent = Column(Numeric(precision=14, scale=2), nullable=False, default=0)
    total_remaining = Column(Numeric(precision=14, scale=2), nullable=False, default=0)
    percentage_used = Column(Float, nullable=False, default=0.0)
    over_budget = Column(Boolean, nullable=False, default=False)
    over_budget_amount = Column(Numeric(precision=14, scale=2), nullable=False, default=0)
    unallocated_spent = Column(Numeric(precision=14, scale=2), nullable=False, default=0)

    # Settings
    auto_calculate = Column(Boolean, nullable=False, default=True)
    require_approval = Column(Boolean, nullable=False, default=False)
    approval_limit = Column(Numeric(precision=14, scale=2), nullable=False, default=1000)
    warning_threshold = Column(Float, nullable=False, default=80.0)

    created_by = Column(UUID(as_uuid=False), nullable=False)
    last_modified_by = Column(UUID(as_uuid=False), nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    # Relationships
    categories = relationship(
        "BudgetCategory",
        back_populates="budget",
        cascade="all, delete-orphan",
        order_by="BudgetCategory.position",
        collection_class=ordering_list("position"),
        lazy="selectin",
    )
    expenses = relationship(
        "BudgetExpense",
        back_populates="budget",
        cascade="all, delete-orphan",
        order_by="BudgetExpense.position",
        collection_class=ordering_list("position"),
        lazy="selectin",
    )
    previous_versions = relationship(
        "BudgetVersion",
        back_populates="budget",
        cascade="all, delete-orphan",
        order_by="BudgetVersion.version",
        lazy="selectin",
    )

    @property
    def summary(self) -> BudgetSummary:
        return BudgetSummary(
            total_budgeted=self.total_budgeted if self.total_budgeted is not None else ZERO,
            total_spent=self.total_spent if self.total_spent is not None else ZERO,
            total_remaining=self.total_remaining if self.total_remaining is not None else ZERO,
            percentage_used=self.percentage_used or 0.0,
            over_budget=bool(self.over_budget),
            over_budget_amount=self.over_budget_amount if self.over_budget_amount is not None else ZERO,
            unallocated_spent=self.unallocated_spent if self.unallocated_spent is not None else ZERO,
        )

    @summary.setter
    def summary(self, value: BudgetSummary) -> None:
        self.total_budgeted = value.total_budgeted
        self.total_spent = value.total_spent
        self.total_remaining = value.total_remaining
        self.percentage_used = value.percentage_used
        self.over_budget = value.over_budget
        self.over_budget_amount = value.over_budget_amount
        self.unallocated_spent = value.unallocated_spent

    @property
    def settings(self) -> dict:
        return {
            "auto_calculate": self.auto_calculate,
            "require_approval": self.require_approval,
            "approval_limit": self.approval_limit,
            "warning_threshold": self.warning_threshold,
        }

    @property
    def total_expenses(self) -> int:
        return len(self.expenses)

    @property
    def pending_expenses(self) -> int:
        pending = (ExpenseStatus.PLANNED.value, ExpenseStatus.APPROVED.value)
        return sum(1 for e in self.expenses if e.status in pending)

    def get_expense(self, expense_id: str):
        return next((e for e in self.expenses if str(e.id) == str(expense_id)), None)

    def __repr__(self):
        return f"<Budget(id={self.id}, project_id={self.project_id}, version={self.version}, status={self.status})>"


class BudgetCategory(Base):
    __tablename__ = "budget_categories"

    id = Column(UUID(as_uuid=False), primary_key=True, default=lambda: str(uuid.uuid4()), index=True)
    budget_id = Column(UUID(as_uuid=False), ForeignKey('budgets.id', ondelete='CASCADE'), nullable=False, index=True)
    position = Column(Integer, nullable=False, default=0)
    name = Column(String, nullable=False)
    budgeted = Column(Numeric(precision=14, scale=2), nullable=False, default=0)
    spent = Column(Numeric(precision=14, scale=2), nullable=False, default=0)
    remaining = Column(Numeric(precision=14, scale=2), nullable=False, default=0)
    percentage = Column(Float, nullable=False, default=0.0)

    budget = relationship("Budget", back_populates="categories")


class BudgetExpense(Base):
    __tablename__ = "budget_expenses"

    id = Column(UUID(as_uuid=False), primary_key=True, default=lambda: str(uuid.uuid4()), index=True)
    budget_id = Column(UUID(as_uuid=False), ForeignKey('budgets.id', ondelete='CASCADE'), nullable=False, index=True)
    position = Column(Integer, nullable=False, default=0)
    date = Column(DateTime, nullable=False, default=datetime.utcnow, index=True)
    description = Column(String(500), nullable=False)
    category = Column(String, nullable=False, index=True)
    amount = Column(Numeric(precision=14, scale=2), nullable=False)
    vendor = Column(JSONB, nullable=True)  # {"name", "contact", "email", "address"}
    payment_method = Column(String, nullable=False, default=PaymentMethod.CASH.value)
    status = Column(String, nullable=False, default=ExpenseStatus.PLANNED.value, index=True)
    receipt_url = Column(String, nullable=True)
    invoice_number = Column(String, nullable=True)
    notes = Column(Text, nullable=True)
    created_by = Column(UUID(as_uuid=False), nullable=False)
    approved_by = Column(UUID(as_uuid=False), nullable=True)
    approved_at = Column(DateTime, nullable=True)
    paid_at = Column(DateTime, nullable=True)

    budget = relationship("Budget", back_populates="expenses")

    @property
    def vendor_name(self) -> str:
        return (self.vendor or {}).get("name") or ""


class BudgetVersion(Base):
    """Snapshot of a budget taken before a structural change."""
    __tablename__ = "budget_versions"

    id = Column(UUID(as_uuid=False), primary_key=True, default=lambda: str(uuid.uuid4()), index=True)
    budget_id = Column(UUID(as_uuid=False), ForeignKey('budgets.id', ondelete='CASCADE'), nullable=False, index=True)
    version = Column(Integer, nullable=False)
    data = Column(JSONB, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    created_by = Column(UUID(as_uuid=False), nullable=True)

    budget = relationship("Budget", back_populates="previous_versions")
