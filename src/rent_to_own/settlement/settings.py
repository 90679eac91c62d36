from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from typing import Any

from rent_to_own.errors import ValidationError

logger = logging.getLogger(__name__)

PERCENTAGE = "percentage"
FIXED = "fixed"
DISCOUNT_TYPES = (PERCENTAGE, FIXED)


@dataclass(frozen=True)
class TieredDiscount:
    min_months_early: float
    principal_discount: float
    interest_discount: float
    principal_discount_type: str = PERCENTAGE
    interest_discount_type: str = PERCENTAGE
    max_months_early: float | None = None  # None = no upper bound

    def matches(self, months_early: float) -> bool:
        if months_early < self.min_months_early:
            return False
        return self.max_months_early is None or months_early <= self.max_months_early


@dataclass(frozen=True)
class SettlementDiscountSettings:
    principal_discount_enabled: bool = False
    principal_discount_type: str = PERCENTAGE
    principal_discount_value: float = 0.0
    principal_discount_min_amount: float = 0.0

    interest_discount_enabled: bool = False
    interest_discount_type: str = PERCENTAGE
    interest_discount_value: float = 0.0
    interest_discount_min_amount: float = 0.0

    is_active: bool = True
    min_settlement_amount: float = 0.0
    min_remaining_payments: int = 1
    # 0 / None both mean "no cap".
    max_discount_amount: float | None = None
    max_discount_percentage: float | None = None

    tiered_discounts: tuple[TieredDiscount, ...] = ()
    name: str = "Default Settings"


def _get(d: Mapping[str, Any], camel: str, snake: str, default: Any = None) -> Any:
    if camel in d and d[camel] is not None:
        return d[camel]
    if snake in d and d[snake] is not None:
        return d[snake]
    return default


def _discount_type(value: Any, field: str) -> str:
    v = str(value or PERCENTAGE).strip().lower()
    if v not in DISCOUNT_TYPES:
        raise ValidationError(
            f"{field} must be one of {', '.join(DISCOUNT_TYPES)}; got {value!r}",
            field=field,
            constraint="discount_type",
        )
    return v


def _number(value: Any, field: str) -> float:
    try:
        return float(value)
    except (TypeError, ValueError) as e:
        raise ValidationError(f"{field} must be a number; got {value!r}", field=field, constraint="number") from e


def _optional_cap(value: Any, field: str) -> float | None:
    if value is None:
        return None
    cap = _number(value, field)
    return cap if cap > 0 else None


def tier_from_dict(d: Mapping[str, Any]) -> TieredDiscount:
    """Accepts camelCase or snake_case, and the legacy minMonthsIntoLoan/maxMonthsIntoLoan keys."""
    min_early = _get(d, "minMonthsEarly", "min_months_early")
    if min_early is None:
        min_early = _get(d, "minMonthsIntoLoan", "min_months_into_loan", 1)
    max_early = _get(d, "maxMonthsEarly", "max_months_early")
    if max_early is None:
        max_early = _get(d, "maxMonthsIntoLoan", "max_months_into_loan")

    return TieredDiscount(
        min_months_early=_number(min_early, "min_months_early"),
        max_months_early=None if max_early is None else _number(max_early, "max_months_early"),
        principal_discount=_number(_get(d, "principalDiscount", "principal_discount", 0), "principal_discount"),
        interest_discount=_number(_get(d, "interestDiscount", "interest_discount", 0), "interest_discount"),
        principal_discount_type=_discount_type(
            _get(d, "principalDiscountType", "principal_discount_type"), "principal_discount_type"
        ),
        interest_discount_type=_discount_type(
            _get(d, "interestDiscountType", "interest_discount_type"), "interest_discount_type"
        ),
    )


def settings_from_dict(d: Mapping[str, Any]) -> SettlementDiscountSettings:
    """
    Build settings from an admin-supplied mapping (e.g. a decoded JSON document).

    Missing keys take the defaults the admin screen starts from. Overlapping
    tiers are accepted but logged; see find_overlapping_tiers.
    """
    tiers = tuple(tier_from_dict(t) for t in (_get(d, "tieredDiscounts", "tiered_discounts", ()) or ()))
    settings = SettlementDiscountSettings(
        name=str(_get(d, "name", "name", "Default Settings")),
        principal_discount_enabled=bool(_get(d, "principalDiscountEnabled", "principal_discount_enabled", False)),
        principal_discount_type=_discount_type(
            _get(d, "principalDiscountType", "principal_discount_type"), "principal_discount_type"
        ),
        principal_discount_value=_number(
            _get(d, "principalDiscountValue", "principal_discount_value", 0), "principal_discount_value"
        ),
        principal_discount_min_amount=_number(
            _get(d, "principalDiscountMinAmount", "principal_discount_min_amount", 0), "principal_discount_min_amount"
        ),
        interest_discount_enabled=bool(_get(d, "interestDiscountEnabled", "interest_discount_enabled", False)),
        interest_discount_type=_discount_type(
            _get(d, "interestDiscountType", "interest_discount_type"), "interest_discount_type"
        ),
        interest_discount_value=_number(
            _get(d, "interestDiscountValue", "interest_discount_value", 0), "interest_discount_value"
        ),
        interest_discount_min_amount=_number(
            _get(d, "interestDiscountMinAmount", "interest_discount_min_amount", 0), "interest_discount_min_amount"
        ),
        is_active=bool(_get(d, "isActive", "is_active", True)),
        min_settlement_amount=_number(_get(d, "minSettlementAmount", "min_settlement_amount", 0), "min_settlement_amount"),
        min_remaining_payments=int(
            _number(_get(d, "minRemainingPayments", "min_remaining_payments", 1), "min_remaining_payments")
        ),
        max_discount_amount=_optional_cap(_get(d, "maxDiscountAmount", "max_discount_amount"), "max_discount_amount"),
        max_discount_percentage=_optional_cap(
            _get(d, "maxDiscountPercentage", "max_discount_percentage"), "max_discount_percentage"
        ),
        tiered_discounts=tiers,
    )
    find_overlapping_tiers(settings.tiered_discounts)
    return settings


def _upper(tier: TieredDiscount) -> float:
    return float("inf") if tier.max_months_early is None else tier.max_months_early


def tier_overlaps(tiers: Sequence[TieredDiscount]) -> list[str]:
    """
    One message per pair of tiers whose month ranges overlap.

    Overlaps are legal: the calculator takes the first tier in list order that
    matches. The messages are for the admin configuring the tiers.
    """
    warnings: list[str] = []
    for i, a in enumerate(tiers):
        for j in range(i + 1, len(tiers)):
            b = tiers[j]
            if a.min_months_early <= _upper(b) and b.min_months_early <= _upper(a):
                msg = (
                    f"Discount tiers #{i + 1} and #{j + 1} overlap "
                    f"({a.min_months_early}-{a.max_months_early or 'any'} vs "
                    f"{b.min_months_early}-{b.max_months_early or 'any'} months early); "
                    f"tier #{i + 1} wins where both match"
                )
                warnings.append(msg)
    return warnings


def find_overlapping_tiers(tiers: Sequence[TieredDiscount]) -> list[str]:
    """tier_overlaps, with each message logged at WARNING."""
    warnings = tier_overlaps(tiers)
    for msg in warnings:
        logger.warning(msg)
    return warnings
