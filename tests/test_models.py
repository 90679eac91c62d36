from __future__ import annotations

from datetime import date

import pytest

from rent_to_own.schedule.models import (
    InstallmentPlan,
    PaymentScheduleEntry,
    PaymentStatus,
    ProjectedStatus,
    apply_actual_status,
)
from rent_to_own.schedule.projection import project_status


def _entry():
    return PaymentScheduleEntry(
        due_date=date(2025, 5, 1),
        amount=100.0,
        status=PaymentStatus.UPCOMING,
        projected_status=ProjectedStatus.UPCOMING,
    )


def test_actual_status_keeps_projection():
    e = apply_actual_status(_entry(), PaymentStatus.PARTIALLY_PAID, paid_amount=40.0)
    assert e.status == PaymentStatus.PARTIALLY_PAID
    assert e.projected_status == ProjectedStatus.UPCOMING
    assert abs(e.remaining_amount - 60.0) < 1e-9
    assert e.paid_date is None


def test_actual_paid_defaults_to_full_amount():
    e = apply_actual_status(_entry(), PaymentStatus.PAID, paid_date=date(2025, 4, 28))
    assert e.paid_amount == 100.0
    assert e.remaining_amount == 0.0
    assert e.paid_date == date(2025, 4, 28)


def test_actual_status_rejects_negative_amount():
    with pytest.raises(ValueError):
        apply_actual_status(_entry(), PaymentStatus.PARTIALLY_PAID, paid_amount=-1.0)


def test_project_status_granularity():
    today = date(2025, 5, 15)
    assert project_status(date(2025, 5, 1), today, daily=False) == ProjectedStatus.ACTIVE
    assert project_status(date(2025, 5, 1), today, daily=True) == ProjectedStatus.PAID
    assert project_status(date(2025, 5, 15), today, daily=True) == ProjectedStatus.ACTIVE
    assert project_status(date(2025, 6, 1), today, daily=False) == ProjectedStatus.UPCOMING


def test_plan_properties():
    plan = InstallmentPlan(tenure="2 Years", interval="Daily", monthly_amount=0.0, total_amount=0.0, schedule=())
    assert plan.tenure_months == 24
    assert plan.is_daily
    assert plan.installments == ()
