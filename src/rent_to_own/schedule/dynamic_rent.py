"""
Dynamic-rent schedules.

Each period the customer pays a fixed slice of the financed principal plus rent
on whatever share of the vehicle the company still owns at the start of that
period. Because the company's share shrinks with every payment, rent (and the
total payment) decreases over the life of the plan.
"""

from __future__ import annotations

import logging
from datetime import date

from rent_to_own.financing.ownership import calculate_ownership
from rent_to_own.financing.tenure import is_daily_interval, parse_tenure
from rent_to_own.schedule.dates import add_months, days_in_month, iter_month_days, month_start
from rent_to_own.schedule.models import (
    CalculationMethod,
    InstallmentPlan,
    PaymentScheduleEntry,
    PaymentType,
)
from rent_to_own.schedule.projection import projected_entry

logger = logging.getLogger(__name__)

MONTHS_PER_YEAR = 12
DAYS_PER_YEAR = 365


def _check_inputs(vehicle_price: float, down_payment: float, annual_rate: float) -> None:
    if vehicle_price < 0:
        raise ValueError("vehicle_price must be >= 0")
    if down_payment < 0:
        raise ValueError("down_payment must be >= 0")
    if vehicle_price > 0 and down_payment > vehicle_price:
        raise ValueError("down_payment must be in [0, vehicle_price]")
    if annual_rate < 0:
        raise ValueError("annual_rental_rate must be >= 0")


def down_payment_entry(
    *, amount: float, start_date: date, today: date, daily: bool
) -> PaymentScheduleEntry:
    return projected_entry(
        due_date=month_start(start_date),
        amount=amount,
        today=today,
        daily=daily,
        payment_type=PaymentType.DOWN_PAYMENT,
        principal=amount,
        rent=0.0,
    )


def monthly_installments(
    *,
    vehicle_price: float,
    down_payment: float,
    tenure_months: int,
    annual_rental_rate: float,
    start_date: date,
    today: date,
) -> list[PaymentScheduleEntry]:
    rate = annual_rental_rate / MONTHS_PER_YEAR
    first_due = month_start(start_date)
    entries = []
    for i in range(tenure_months):
        # Ownership after the previous installment == position at the start of this period.
        opening = calculate_ownership(
            vehicle_price=vehicle_price,
            down_payment=down_payment,
            tenure_months=tenure_months,
            payment_index=i - 1,
        )
        rent = opening.company_ownership * rate
        principal = opening.principal_per_month
        entries.append(
            projected_entry(
                due_date=add_months(first_due, i),
                amount=principal + rent,
                today=today,
                daily=False,
                principal=principal,
                rent=rent,
            )
        )
    return entries


def daily_installments(
    *,
    vehicle_price: float,
    down_payment: float,
    tenure_months: int,
    annual_rental_rate: float,
    start_date: date,
    today: date,
) -> list[PaymentScheduleEntry]:
    """
    One entry per calendar day for `tenure_months` whole months.

    A month's principal slice is spread evenly over its actual days, so every
    month still retires exactly loan_amount / tenure_months.
    """
    rate = annual_rental_rate / DAYS_PER_YEAR
    principal_per_month = (vehicle_price - down_payment) / tenure_months
    principal_paid = 0.0
    entries = []
    for _, day in iter_month_days(start_date, tenure_months):
        principal = principal_per_month / days_in_month(day)
        company = max(vehicle_price - (down_payment + principal_paid), 0.0)
        rent = company * rate
        principal_paid += principal
        entries.append(
            projected_entry(
                due_date=day,
                amount=principal + rent,
                today=today,
                daily=True,
                principal=principal,
                rent=rent,
            )
        )
    return entries


def generate_dynamic_rent_plan(
    *,
    vehicle_price: float,
    down_payment: float,
    tenure: str,
    annual_rental_rate: float,
    start_date: date,
    today: date,
    interval: str = "Monthly",
) -> InstallmentPlan:
    """
    Down payment entry (if any) followed by one installment per period.

    interval: "Daily" for daily installments; anything else is calculated monthly
    but kept verbatim on the plan.
    today: reference date for projected statuses.
    """
    _check_inputs(vehicle_price, down_payment, annual_rental_rate)
    tenure_months = parse_tenure(tenure)
    daily = is_daily_interval(interval)
    loan_amount = vehicle_price - down_payment

    schedule: list[PaymentScheduleEntry] = []
    if down_payment > 0:
        schedule.append(down_payment_entry(amount=down_payment, start_date=start_date, today=today, daily=daily))

    monthly_amount = 0.0
    if vehicle_price > 0 and loan_amount > 0:
        build = daily_installments if daily else monthly_installments
        schedule.extend(
            build(
                vehicle_price=vehicle_price,
                down_payment=down_payment,
                tenure_months=tenure_months,
                annual_rental_rate=annual_rental_rate,
                start_date=start_date,
                today=today,
            )
        )
        monthly_amount = loan_amount / tenure_months + loan_amount * annual_rental_rate / MONTHS_PER_YEAR
    else:
        logger.debug("nothing to finance (vehicle_price=%s, down_payment=%s)", vehicle_price, down_payment)

    total_rent = sum(e.rent or 0.0 for e in schedule)
    total_amount = sum(e.amount for e in schedule)
    logger.debug(
        "dynamic rent plan: %d entries, interval=%s, total=%.2f, rent=%.2f",
        len(schedule),
        interval,
        total_amount,
        total_rent,
    )
    return InstallmentPlan(
        tenure=tenure,
        interval=interval,
        monthly_amount=float(monthly_amount),
        total_amount=float(total_amount),
        schedule=tuple(schedule),
        calculation_method=CalculationMethod.DYNAMIC_RENT,
        down_payment=float(down_payment),
        annual_rental_rate=float(annual_rental_rate),
        total_rent=float(total_rent),
    )
