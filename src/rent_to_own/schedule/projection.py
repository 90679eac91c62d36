from __future__ import annotations

from datetime import date

from rent_to_own.schedule.dates import month_key
from rent_to_own.schedule.models import PaymentScheduleEntry, PaymentType, ProjectedStatus


def project_status(due_date: date, today: date, *, daily: bool) -> ProjectedStatus:
    """past -> paid, same period -> active, future -> upcoming (day or month granularity)."""
    if daily:
        due, now = due_date.toordinal(), today.toordinal()
    else:
        due, now = month_key(due_date), month_key(today)
    if due < now:
        return ProjectedStatus.PAID
    if due == now:
        return ProjectedStatus.ACTIVE
    return ProjectedStatus.UPCOMING


def projected_entry(
    *,
    due_date: date,
    amount: float,
    today: date,
    daily: bool,
    payment_type: PaymentType = PaymentType.INSTALLMENT,
    principal: float | None = None,
    rent: float | None = None,
) -> PaymentScheduleEntry:
    projected = project_status(due_date, today, daily=daily)
    return PaymentScheduleEntry(
        due_date=due_date,
        amount=float(amount),
        status=projected.as_payment_status(),
        projected_status=projected,
        paid_date=due_date if projected == ProjectedStatus.PAID else None,
        payment_type=payment_type,
        is_balloon=payment_type == PaymentType.BALLOON_PAYMENT,
        principal=None if principal is None else float(principal),
        rent=None if rent is None else float(rent),
    )
