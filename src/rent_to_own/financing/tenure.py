from __future__ import annotations

import re

DEFAULT_TENURE_MONTHS = 12

_YEAR_RE = re.compile(r"(\d+)\s*year", re.IGNORECASE)
_MONTH_RE = re.compile(r"(\d+)\s*month", re.IGNORECASE)
_NON_DIGIT_RE = re.compile(r"\D")


def parse_tenure(tenure: str | None) -> int:
    """
    Tenure string -> number of months.

    "3 Years" -> 36, "36 Months" -> 36, "2 Years 6 Months" -> 30, "" -> 12.
    Never raises; unparseable input falls back to the default.
    """
    if not tenure:
        return DEFAULT_TENURE_MONTHS

    text = str(tenure)
    year_match = _YEAR_RE.search(text)
    month_match = _MONTH_RE.search(text)
    if year_match or month_match:
        years = int(year_match.group(1)) if year_match else 0
        months = int(month_match.group(1)) if month_match else 0
        total = years * 12 + months
        return max(total, 1)

    # WARNING: a bare number is read as YEARS ("3" -> 36 months), not months.
    # Persisted plans depend on this; do not change it without migrating them.
    digits = _NON_DIGIT_RE.sub("", text)
    n = int(digits) if digits else 0
    return (n if n > 0 else 1) * 12


def format_months_to_tenure(months: int) -> str:
    if months <= 0:
        return f"{DEFAULT_TENURE_MONTHS} Months"
    years, rest = divmod(months, 12)
    if years > 0 and rest == 0:
        return f"{years} Year{'s' if years > 1 else ''}"
    return f"{months} Months"


def normalize_interval(interval: str | None) -> str:
    """'daily' | 'monthly' | 'other'. Anything but daily is calculated monthly."""
    v = (interval or "").strip().lower()
    if v in ("daily", "monthly"):
        return v
    return "other"


def is_daily_interval(interval: str | None) -> bool:
    return normalize_interval(interval) == "daily"
