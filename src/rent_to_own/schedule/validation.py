from __future__ import annotations

from collections.abc import Sequence
from datetime import date

from rent_to_own.schedule.dates import add_months, months_between
from rent_to_own.schedule.models import PaymentScheduleEntry, PaymentStatus

MAX_GAP_MONTHS = 1.5


def validate_schedule(schedule: Sequence[PaymentScheduleEntry], *, today: date) -> list[str]:
    """
    Sanity checks for a schedule entered or edited by hand.

    Returns human-readable problems; an empty list means the schedule is usable.
    An empty schedule is fine (nothing generated yet).
    """
    errors: list[str] = []
    if not schedule:
        return errors

    for n, entry in enumerate(schedule, start=1):
        if entry.amount is None or entry.amount <= 0:
            errors.append(f"Payment #{n}: Amount must be greater than 0")
        if entry.status == PaymentStatus.PAID:
            if entry.paid_date is None:
                errors.append(f"Payment #{n}: Paid date is required for paid payments")
            elif entry.paid_date > today:
                errors.append(f"Payment #{n}: Paid date cannot be in the future")
            elif entry.paid_date < add_months(entry.due_date, -12):
                errors.append(f"Payment #{n}: Paid date seems too early (more than 1 year before due date)")

    dates = [e.due_date for e in schedule if not e.is_down_payment]
    if len(set(dates)) < len(dates):
        errors.append("Duplicate payment dates found. Each payment must have a unique due date.")

    for prev, current in zip(dates, dates[1:]):
        if current < prev:
            errors.append(
                f"Payment dates are out of order. {current:%b %Y} comes before {prev:%b %Y}"
            )
        elif months_between(prev, current) > MAX_GAP_MONTHS:
            errors.append(
                f"Gap detected: Payment dates should be sequential. "
                f"Found gap between {prev:%b %Y} and {current:%b %Y}"
            )

    return errors
