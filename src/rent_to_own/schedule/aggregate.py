from __future__ import annotations

from collections import defaultdict
from collections.abc import Iterable, Sequence

from rent_to_own.schedule.dates import month_key
from rent_to_own.schedule.models import PaymentScheduleEntry, PaymentStatus, PaymentType

# Worst first.
_STATUS_PRIORITY = (
    PaymentStatus.UNPAID,
    PaymentStatus.PARTIALLY_PAID,
    PaymentStatus.DUE,
    PaymentStatus.ACTIVE,
    PaymentStatus.UPCOMING,
)


def is_schedule_likely_daily(schedule: Iterable[PaymentScheduleEntry]) -> bool:
    """True if any calendar month holds more than one entry."""
    seen: set[tuple[int, int]] = set()
    for entry in schedule:
        key = month_key(entry.due_date)
        if key in seen:
            return True
        seen.add(key)
    return False


def aggregate_month_status(entries: Sequence[PaymentScheduleEntry]) -> PaymentStatus:
    statuses = {e.status for e in entries if e.status}
    if not statuses:
        return PaymentStatus.UPCOMING
    if statuses == {PaymentStatus.PAID}:
        return PaymentStatus.PAID
    for status in _STATUS_PRIORITY:
        if status in statuses:
            return status
    return PaymentStatus.UPCOMING


def _fold_month(entries: list[PaymentScheduleEntry]) -> PaymentScheduleEntry:
    entries = sorted(entries, key=lambda e: e.due_date)
    status = aggregate_month_status(entries)

    paid_date = None
    if status == PaymentStatus.PAID:
        paid_dates = [e.paid_date for e in entries if e.paid_date is not None]
        paid_date = max(paid_dates) if paid_dates else None

    def _sum(attr: str) -> float | None:
        values = [getattr(e, attr) for e in entries]
        if any(v is None for v in values):
            return None
        return float(sum(values))

    types = {e.payment_type for e in entries}
    payment_type = types.pop() if len(types) == 1 else PaymentType.INSTALLMENT

    return PaymentScheduleEntry(
        due_date=entries[-1].due_date,
        amount=float(sum(e.amount for e in entries)),
        status=status,
        paid_date=paid_date,
        payment_type=payment_type,
        is_balloon=any(e.is_balloon for e in entries),
        principal=_sum("principal"),
        rent=_sum("rent"),
        is_deferred=any(e.is_deferred for e in entries),
        is_partially_deferred=any(e.is_partially_deferred for e in entries),
    )


def aggregate_to_monthly(schedule: Iterable[PaymentScheduleEntry]) -> list[PaymentScheduleEntry]:
    """
    One synthetic entry per calendar month, in month order.

    amount is the month's sum; status is paid only when every entry is paid,
    otherwise the worst status present wins; paid_date is the latest one among
    the month's entries. Months that sum to zero are dropped. The input is not
    modified.
    """
    groups: dict[tuple[int, int], list[PaymentScheduleEntry]] = defaultdict(list)
    for entry in schedule:
        groups[month_key(entry.due_date)].append(entry)

    folded = (_fold_month(groups[key]) for key in sorted(groups))
    return [e for e in folded if e.amount > 0]


def monthly_view(schedule: Sequence[PaymentScheduleEntry]) -> list[PaymentScheduleEntry]:
    """
    The schedule as a customer sees it month by month.

    Down payments stay separate entries; the rest is aggregated only when the
    schedule looks daily. Monthly schedules come back unchanged.
    """
    down_payments = [e for e in schedule if e.is_down_payment]
    rest = [e for e in schedule if not e.is_down_payment]
    if not is_schedule_likely_daily(rest):
        return list(schedule)
    return down_payments + aggregate_to_monthly(rest)
