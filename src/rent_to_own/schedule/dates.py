from __future__ import annotations

import calendar
from datetime import date, timedelta

from dateutil.relativedelta import relativedelta


def add_months(d: date, months: int) -> date:
    # relativedelta clamps the day (Jan 31 + 1 month -> Feb 28/29).
    return d + relativedelta(months=months)


def month_start(d: date) -> date:
    return d.replace(day=1)


def month_end(d: date) -> date:
    return d.replace(day=days_in_month(d))


def days_in_month(d: date) -> int:
    return calendar.monthrange(d.year, d.month)[1]


def month_key(d: date) -> tuple[int, int]:
    return (d.year, d.month)


def months_between(start: date, end: date) -> float:
    """
    Fractional months from `start` to `end` (negative when end < start).

    Whole calendar months are counted first; the leftover days are expressed
    as a fraction of the month they fall in, so 2025-01-01 -> 2025-02-15 is
    1 + 14/28.
    """
    if end < start:
        return -months_between(end, start)

    whole = (end.year - start.year) * 12 + (end.month - start.month)
    anchor = add_months(start, whole)
    if anchor > end:
        whole -= 1
        anchor = add_months(start, whole)
    next_anchor = add_months(start, whole + 1)
    span = (next_anchor - anchor).days
    return whole + ((end - anchor).days / span if span else 0.0)


def iter_month_days(first_month: date, months: int):
    """Yield (month_index, day) for every calendar day of `months` months starting at first_month's month."""
    current = month_start(first_month)
    for month_index in range(months):
        n_days = days_in_month(current)
        for offset in range(n_days):
            yield month_index, current + timedelta(days=offset)
        current = add_months(current, 1)
