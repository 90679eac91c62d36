from __future__ import annotations

import logging
from datetime import date

from rent_to_own.financing.loan import floored_monthly_payment
from rent_to_own.financing.tenure import parse_tenure
from rent_to_own.schedule.dates import add_months, month_start
from rent_to_own.schedule.dynamic_rent import down_payment_entry
from rent_to_own.schedule.models import CalculationMethod, InstallmentPlan, PaymentScheduleEntry
from rent_to_own.schedule.projection import projected_entry

logger = logging.getLogger(__name__)


def generate_amortized_plan(
    *,
    vehicle_price: float,
    down_payment: float,
    tenure: str,
    annual_rate: float,
    start_date: date,
    today: date,
    interval: str = "Monthly",
) -> InstallmentPlan:
    """
    Fixed-payment plan: the same floored annuity payment every month.

    Always monthly; `interval` is only carried through for display.
    """
    if down_payment < 0:
        raise ValueError("down_payment must be >= 0")
    tenure_months = parse_tenure(tenure)
    principal = vehicle_price - down_payment
    payment = floored_monthly_payment(principal=principal, apr=annual_rate, term_months=tenure_months)

    schedule: list[PaymentScheduleEntry] = []
    if down_payment > 0:
        schedule.append(down_payment_entry(amount=down_payment, start_date=start_date, today=today, daily=False))
    if payment > 0:
        first_due = month_start(start_date)
        schedule.extend(
            projected_entry(due_date=add_months(first_due, i), amount=payment, today=today, daily=False)
            for i in range(tenure_months)
        )

    total_amount = sum(e.amount for e in schedule)
    logger.debug("amortized plan: %d entries, payment=%.2f", len(schedule), payment)
    return InstallmentPlan(
        tenure=tenure,
        interval=interval,
        monthly_amount=payment,
        total_amount=float(total_amount),
        schedule=tuple(schedule),
        calculation_method=CalculationMethod.AMORTIZED_FIXED,
        down_payment=float(down_payment),
        annual_rental_rate=float(annual_rate),
        total_rent=float(max(payment * tenure_months - max(principal, 0.0), 0.0)),
    )
