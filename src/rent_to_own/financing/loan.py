from __future__ import annotations

import math


def _monthly_rate_from_apr(apr: float) -> float:
    # Treat APR as nominal annual with monthly compounding for payments.
    return apr / 12.0


def monthly_payment(
    *,
    principal: float,
    apr: float,
    term_months: int,
) -> float:
    """
    Standard fixed-rate (annuity) payment for an amortized_fixed plan.

    principal: amount financed after the down payment
    apr: nominal annual rate as a fraction (e.g. 0.12 for 12%)
    term_months: number of monthly payments

    Returns 0 for a non-positive principal or term.
    """
    if apr < 0:
        raise ValueError("apr must be >= 0")
    if principal <= 0 or term_months <= 0:
        return 0.0

    r = _monthly_rate_from_apr(apr)
    n = term_months
    if abs(r) < 1e-12:
        return float(principal) / n

    growth = (1.0 + r) ** n
    return float(principal) * r * growth / (growth - 1.0)


def floored_monthly_payment(*, principal: float, apr: float, term_months: int) -> float:
    """Annuity payment rounded down to a whole currency unit."""
    return float(max(0, math.floor(monthly_payment(principal=principal, apr=apr, term_months=term_months))))
