"""
Balloon-payment schedules.

The vehicle price is split into three tranches: a down payment, an installment
tranche retired evenly over the term, and a balloon settled in one final
payment. Rent is charged on everything the customer has not yet paid for,
balloon tranche included, so the balloon costs rent every period until it is
paid off.
"""

from __future__ import annotations

import logging
from datetime import date, timedelta

from rent_to_own.errors import PaymentStructureError, ValidationError
from rent_to_own.financing.tenure import format_months_to_tenure, is_daily_interval
from rent_to_own.schedule.dates import add_months, days_in_month, iter_month_days, month_start
from rent_to_own.schedule.dynamic_rent import DAYS_PER_YEAR, MONTHS_PER_YEAR, down_payment_entry
from rent_to_own.schedule.models import (
    CalculationMethod,
    InstallmentPlan,
    PaymentScheduleEntry,
    PaymentStructure,
    PaymentType,
)
from rent_to_own.schedule.projection import projected_entry

logger = logging.getLogger(__name__)

PERCENT_TOLERANCE = 0.01


def validate_payment_structure(structure: PaymentStructure) -> None:
    total = structure.total_percent
    if abs(total - 100.0) > PERCENT_TOLERANCE:
        raise PaymentStructureError(
            f"Payment structure percentages must sum to 100%. Current total: {total:.2f}%",
            constraint="sum",
        )
    if min(structure.down_payment_percent, structure.installment_percent, structure.balloon_percent) < 0:
        raise PaymentStructureError(
            "Payment structure percentages cannot be negative",
            constraint="negative",
        )


def _installments(
    *,
    vehicle_price: float,
    down_payment_amount: float,
    principal_per_month: float,
    term_months: int,
    rate: float,
    start_date: date,
    today: date,
    daily: bool,
) -> list[PaymentScheduleEntry]:
    entries = []
    if daily:
        paid = 0.0
        for _, day in iter_month_days(start_date, term_months):
            principal = principal_per_month / days_in_month(day)
            rent = (vehicle_price - (down_payment_amount + paid)) * rate
            paid += principal
            entries.append(
                projected_entry(due_date=day, amount=principal + rent, today=today, daily=True, principal=principal, rent=rent)
            )
        return entries

    first_due = month_start(start_date)
    for i in range(term_months):
        rent = (vehicle_price - (down_payment_amount + principal_per_month * i)) * rate
        entries.append(
            projected_entry(
                due_date=add_months(first_due, i),
                amount=principal_per_month + rent,
                today=today,
                daily=False,
                principal=principal_per_month,
                rent=rent,
            )
        )
    return entries


def generate_balloon_plan(
    *,
    vehicle_price: float,
    structure: PaymentStructure,
    term_months: int,
    annual_rental_rate: float,
    start_date: date,
    today: date,
    interval: str = "Monthly",
) -> InstallmentPlan:
    """
    Down payment, `term_months` installments, then the balloon one period later.

    Raises PaymentStructureError when the percentages do not add up to 100
    (within 0.01) or any of them is negative; nothing is generated in that case.
    """
    validate_payment_structure(structure)
    if term_months <= 0:
        raise ValidationError("term_months must be > 0", field="term_months", constraint="positive")
    if annual_rental_rate < 0:
        raise ValueError("annual_rental_rate must be >= 0")

    daily = is_daily_interval(interval)
    price = max(float(vehicle_price), 0.0)
    down_payment_amount = price * structure.down_payment_percent / 100.0
    total_installment_amount = price * structure.installment_percent / 100.0
    balloon_amount = price * structure.balloon_percent / 100.0
    principal_per_month = total_installment_amount / term_months
    rate = annual_rental_rate / (DAYS_PER_YEAR if daily else MONTHS_PER_YEAR)

    schedule: list[PaymentScheduleEntry] = []
    if down_payment_amount > 0:
        schedule.append(
            down_payment_entry(amount=down_payment_amount, start_date=start_date, today=today, daily=daily)
        )
    installments = _installments(
        vehicle_price=price,
        down_payment_amount=down_payment_amount,
        principal_per_month=principal_per_month,
        term_months=term_months,
        rate=rate,
        start_date=start_date,
        today=today,
        daily=daily,
    )
    schedule.extend(installments)

    if daily:
        balloon_due = installments[-1].due_date + timedelta(days=1)
    else:
        balloon_due = add_months(month_start(start_date), term_months)
    balloon_rent = balloon_amount * rate
    schedule.append(
        projected_entry(
            due_date=balloon_due,
            amount=balloon_amount + balloon_rent,
            today=today,
            daily=daily,
            payment_type=PaymentType.BALLOON_PAYMENT,
            principal=balloon_amount,
            rent=balloon_rent,
        )
    )

    total_rent = sum(e.rent or 0.0 for e in schedule)
    logger.debug(
        "balloon plan: %d entries, balloon=%.2f, rent=%.2f",
        len(schedule),
        balloon_amount,
        total_rent,
    )
    return InstallmentPlan(
        tenure=format_months_to_tenure(term_months),
        interval=interval,
        monthly_amount=installments[0].amount,
        total_amount=float(price + total_rent),
        schedule=tuple(schedule),
        calculation_method=CalculationMethod.BALLOON_PAYMENT,
        down_payment=float(down_payment_amount),
        annual_rental_rate=float(annual_rental_rate),
        total_rent=float(total_rent),
        balloon_payment=float(balloon_amount),
        payment_structure=structure,
    )
