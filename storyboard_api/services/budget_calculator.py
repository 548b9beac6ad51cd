"""
Budget Calculator
Pure aggregation of expenses into per-category totals and a budget summary.

Nothing in this module touches the database; callers pass in whatever
category and expense records they hold (ORM rows, schemas, plain objects)
as long as they expose the attributes used below.
"""
from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Dict, Iterable, List, Sequence

PAID = "paid"
PENDING_STATUSES = ("planned", "approved")

ZERO = Decimal("0")


@dataclass(frozen=True)
class CategoryTotals:
    name: str
    budgeted: Decimal
    spent: Decimal
    remaining: Decimal
    percentage: float


@dataclass(frozen=True)
class BudgetSummary:
    total_budgeted: Decimal = ZERO
    total_spent: Decimal = ZERO
    total_remaining: Decimal = ZERO
    percentage_used: float = 0.0
    over_budget: bool = False
    over_budget_amount: Decimal = ZERO
    # Paid expenses whose category is not in the budget's category list.
    # Reported for visibility, never included in total_spent.
    unallocated_spent: Decimal = ZERO


def _amount(value: Any) -> Decimal:
    if value is None:
        return ZERO
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def _percentage(part: Decimal, whole: Decimal) -> float:
    if whole > 0:
        return float(part / whole * 100)
    return 0.0


def aggregate_categories(categories: Sequence[Any], expenses: Iterable[Any]) -> List[CategoryTotals]:
    """
    Compute spent / remaining / percentage for every category.

    Only expenses with status ``paid`` count toward ``spent``. Expenses whose
    category is not in ``categories`` are ignored here.

    Args:
        categories: records with ``name`` and ``budgeted``
        expenses: records with ``category``, ``amount`` and ``status``

    Returns:
        One CategoryTotals per input category, in input order
    """
    paid_by_category: Dict[str, Decimal] = {}
    for expense in expenses:
        if expense.status != PAID:
            continue
        paid_by_category[expense.category] = (
            paid_by_category.get(expense.category, ZERO) + _amount(expense.amount)
        )

    totals = []
    for category in categories:
        budgeted = _amount(category.budgeted)
        spent = paid_by_category.get(category.name, ZERO)
        totals.append(
            CategoryTotals(
                name=category.name,
                budgeted=budgeted,
                spent=spent,
                remaining=budgeted - spent,
                percentage=_percentage(spent, budgeted),
            )
        )
    return totals


def calculate_summary(category_totals: Sequence[CategoryTotals], expenses: Iterable[Any] = ()) -> BudgetSummary:
    """
    Roll category totals up into the overall budget summary.

    ``expenses`` is optional and only used to report ``unallocated_spent``.
    """
    total_budgeted = sum((c.budgeted for c in category_totals), ZERO)
    total_spent = sum((c.spent for c in category_totals), ZERO)
    over_budget = total_spent > total_budgeted

    known = {c.name for c in category_totals}
    unallocated = sum(
        (_amount(e.amount) for e in expenses if e.status == PAID and e.category not in known),
        ZERO,
    )

    return BudgetSummary(
        total_budgeted=total_budgeted,
        total_spent=total_spent,
        total_remaining=total_budgeted - total_spent,
        percentage_used=_percentage(total_spent, total_budgeted),
        over_budget=over_budget,
        over_budget_amount=total_spent - total_budgeted if over_budget else ZERO,
        unallocated_spent=unallocated,
    )


def is_over_warning_threshold(summary: BudgetSummary, warning_threshold: Any) -> bool:
    return summary.percentage_used >= float(warning_threshold)


def category_breakdown(categories: Sequence[Any], expenses: Sequence[Any]) -> List[Dict[str, Any]]:
    """Per-category expense count with pending and paid amounts."""
    breakdown = []
    for category in categories:
        matching = [e for e in expenses if e.category == category.name]
        breakdown.append({
            "name": category.name,
            "expenses": len(matching),
            "pending_amount": sum(
                (_amount(e.amount) for e in matching if e.status in PENDING_STATUSES), ZERO
            ),
            "paid_amount": sum((_amount(e.amount) for e in matching if e.status == PAID), ZERO),
        })
    return breakdown
