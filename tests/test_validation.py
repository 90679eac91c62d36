from __future__ import annotations

from datetime import date

from rent_to_own.schedule.dynamic_rent import generate_dynamic_rent_plan
from rent_to_own.schedule.models import PaymentScheduleEntry, PaymentStatus
from rent_to_own.schedule.validation import validate_schedule

TODAY = date(2025, 6, 15)


def _entry(d, amount=100.0, status=PaymentStatus.UPCOMING, paid_date=None):
    return PaymentScheduleEntry(due_date=d, amount=amount, status=status, paid_date=paid_date)


def test_generated_plan_is_valid():
    plan = generate_dynamic_rent_plan(
        vehicle_price=50_000,
        down_payment=10_000,
        tenure="12 Months",
        annual_rental_rate=0.12,
        start_date=date(2025, 1, 1),
        today=TODAY,
    )
    assert validate_schedule(plan.schedule, today=TODAY) == []
    assert validate_schedule([], today=TODAY) == []


def test_amount_must_be_positive():
    errors = validate_schedule([_entry(date(2025, 7, 1), amount=0.0)], today=TODAY)
    assert errors == ["Payment #1: Amount must be greater than 0"]


def test_paid_entries_need_a_plausible_paid_date():
    errors = validate_schedule(
        [
            _entry(date(2025, 1, 1), status=PaymentStatus.PAID),
            _entry(date(2025, 2, 1), status=PaymentStatus.PAID, paid_date=date(2025, 7, 1)),
            _entry(date(2025, 3, 1), status=PaymentStatus.PAID, paid_date=date(2024, 1, 1)),
        ],
        today=TODAY,
    )
    assert len(errors) == 3
    assert "required" in errors[0]
    assert "future" in errors[1]
    assert "too early" in errors[2]


def test_duplicate_and_out_of_order_dates():
    errors = validate_schedule(
        [_entry(date(2025, 8, 1)), _entry(date(2025, 7, 1)), _entry(date(2025, 7, 1))],
        today=TODAY,
    )
    assert any("Duplicate" in e for e in errors)
    assert any("out of order" in e for e in errors)


def test_gap_between_payments():
    errors = validate_schedule([_entry(date(2025, 7, 1)), _entry(date(2025, 10, 1))], today=TODAY)
    assert errors == ["Gap detected: Payment dates should be sequential. Found gap between Jul 2025 and Oct 2025"]
