from datetime import date, timedelta
from decimal import Decimal

import pytest
from pydantic import ValidationError

from storyboard_api.schemas.budget import BudgetCreate, BudgetUpdate, CategoriesUpdate, ExpenseCreate, ExpenseUpdate
from storyboard_api.schemas.schedule import CrewMemberAdd, ScheduleCreate, ScheduleUpdate, TimeSlot, TimeSlotUpdate


def schedule_payload(**overrides):
    payload = {
        "title": "  Day 1 - warehouse  ",
        "date": (date.today() + timedelta(days=3)).isoformat(),
        "timeSlot": {"startTime": "09:00", "endTime": "17:30"},
    }
    payload.update(overrides)
    return payload


class TestExpenseCreate:

    def test_camel_case_input(self):
        expense = ExpenseCreate.model_validate({
            "description": "Camera rental",
            "category": "equipment",
            "amount": 1250.5,
            "paymentMethod": "credit-card",
            "invoiceNumber": "INV-7",
        })
        assert expense.amount == Decimal("1250.5")
        assert expense.payment_method == "credit-card"
        assert expense.status == "planned"
        assert expense.invoice_number == "INV-7"

    def test_negative_amount_rejected(self):
        with pytest.raises(ValidationError):
            ExpenseCreate(description="Refund?", category="crew", amount=-1)

    def test_unknown_category_rejected(self):
        with pytest.raises(ValidationError):
            ExpenseCreate(description="Snacks", category="snacks", amount=10)

    def test_unknown_status_rejected(self):
        with pytest.raises(ValidationError):
            ExpenseCreate(description="Snacks", category="catering", amount=10, status="lost")

    def test_amount_serialises_as_number(self):
        expense = ExpenseCreate(description="Lunch", category="catering", amount=Decimal("12.50"))
        assert expense.model_dump(mode="json", by_alias=True)["amount"] == 12.5


class TestBudgetCreate:

    def test_defaults(self):
        budget = BudgetCreate(title=" Feature budget ")
        assert budget.title == "Feature budget"
        assert budget.currency == "USD"
        assert budget.status == "draft"
        assert budget.categories == []

    def test_blank_title_rejected(self):
        with pytest.raises(ValidationError):
            BudgetCreate(title="   ")

    def test_duplicate_categories_rejected(self):
        with pytest.raises(ValidationError):
            BudgetCreate(
                title="Budget",
                categories=[{"name": "crew", "budgeted": 10}, {"name": "crew", "budgeted": 20}],
            )
        with pytest.raises(ValidationError):
            CategoriesUpdate(categories=[{"name": "cast"}, {"name": "cast"}])

    def test_settings_from_camel_case(self):
        budget = BudgetCreate.model_validate({
            "title": "Budget",
            "totalBudget": 5000,
            "settings": {"requireApproval": True, "approvalLimit": 250, "warningThreshold": 90},
        })
        assert budget.total_budget == Decimal("5000")
        assert budget.settings.require_approval is True
        assert budget.settings.auto_calculate is True
        assert budget.settings.approval_limit == Decimal("250")

    def test_unsupported_currency_rejected(self):
        with pytest.raises(ValidationError):
            BudgetCreate(title="Budget", currency="XYZ")


class TestTimeSlot:

    def test_end_must_follow_start(self):
        with pytest.raises(ValidationError, match="End time must be after start time"):
            TimeSlot(start_time="11:00", end_time="11:00")
        with pytest.raises(ValidationError):
            TimeSlot(start_time="22:00", end_time="02:00")

    def test_malformed_time_rejected(self):
        with pytest.raises(ValidationError):
            TimeSlot(start_time="9am", end_time="11:00")

    def test_single_digit_hour_is_zero_padded(self):
        slot = TimeSlot(start_time="9:00", end_time="10:05")
        assert slot.start_time == "09:00"
        assert slot.end_time == "10:05"

    def test_partial_slot_is_zero_padded(self):
        slot = TimeSlotUpdate.model_validate({"startTime": "7:30"})
        assert slot.start_time == "07:30"
        assert slot.end_time is None


class TestScheduleCreate:

    def test_valid_payload(self):
        schedule = ScheduleCreate.model_validate(schedule_payload())
        assert schedule.title == "Day 1 - warehouse"
        assert schedule.type == "shooting"
        assert schedule.status == "draft"
        assert schedule.time_slot.end_time == "17:30"

    def test_past_date_rejected(self):
        yesterday = (date.today() - timedelta(days=1)).isoformat()
        with pytest.raises(ValidationError, match="Schedule date cannot be in the past"):
            ScheduleCreate.model_validate(schedule_payload(date=yesterday))

    def test_today_is_allowed(self):
        schedule = ScheduleCreate.model_validate(schedule_payload(date=date.today().isoformat()))
        assert schedule.date == date.today()

    def test_short_title_rejected(self):
        with pytest.raises(ValidationError):
            ScheduleCreate.model_validate(schedule_payload(title="ab"))

    def test_nested_assignments(self):
        schedule = ScheduleCreate.model_validate(schedule_payload(
            crew=[{"memberId": "u-1", "role": "Gaffer", "callTime": "07:30"}],
            equipment=[{"name": "ARRI Alexa", "category": "camera", "quantity": 2}],
            location={"name": "Pier 4", "coordinates": {"lat": 40.7, "lng": -74.0}},
        ))
        assert schedule.crew[0].status == "pending"
        assert schedule.equipment[0].status == "reserved"
        assert schedule.location.coordinates.lat == 40.7

    def test_invalid_coordinates_rejected(self):
        with pytest.raises(ValidationError):
            ScheduleCreate.model_validate(schedule_payload(
                location={"coordinates": {"lat": 91, "lng": 0}},
            ))


def test_crew_member_role_is_stripped():
    member = CrewMemberAdd.model_validate({"userId": "u-9", "role": "  Boom operator "})
    assert member.role == "Boom operator"


class TestPartialUpdates:

    @pytest.mark.parametrize("field", ["amount", "category", "description", "status", "date"])
    def test_expense_required_field_cannot_be_null(self, field):
        with pytest.raises(ValidationError, match="cannot be null"):
            ExpenseUpdate.model_validate({field: None})

    def test_expense_nullable_fields_can_be_cleared(self):
        update = ExpenseUpdate.model_validate({"notes": None, "vendor": None})
        assert update.model_dump(exclude_unset=True) == {"notes": None, "vendor": None}

    @pytest.mark.parametrize("field", ["title", "totalBudget", "categories", "status", "currency"])
    def test_budget_required_field_cannot_be_null(self, field):
        with pytest.raises(ValidationError):
            BudgetUpdate.model_validate({field: None})

    @pytest.mark.parametrize("field", ["title", "status", "type", "priority", "date", "timeSlot"])
    def test_schedule_required_field_cannot_be_null(self, field):
        with pytest.raises(ValidationError, match="cannot be null"):
            ScheduleUpdate.model_validate({field: None})

    def test_schedule_lists_can_be_cleared(self):
        update = ScheduleUpdate.model_validate({"cast": None, "location": None})
        assert update.model_dump(exclude_unset=True) == {"cast": None, "location": None}

    def test_time_slot_start_cannot_be_null(self):
        with pytest.raises(ValidationError):
            TimeSlotUpdate.model_validate({"startTime": None})
