"""
Early-settlement discounts.

A customer paying off the remaining schedule early owes the remaining
principal plus the rent still to come. Admin-configured settings decide
whether part of that is waived: a tier chosen by how many months early the
settlement is, or the flat principal/interest rules when no tier applies,
both subject to an absolute and a percentage cap.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass
from datetime import date, timedelta

from rent_to_own.financing.ownership import calculate_ownership
from rent_to_own.financing.tenure import DEFAULT_TENURE_MONTHS
from rent_to_own.money import round_money, round_tenth
from rent_to_own.schedule.aggregate import monthly_view
from rent_to_own.schedule.dates import add_months, days_in_month, month_key, month_start, months_between
from rent_to_own.schedule.dynamic_rent import DAYS_PER_YEAR, MONTHS_PER_YEAR
from rent_to_own.schedule.models import (
    CalculationMethod,
    InstallmentPlan,
    LoanApplication,
    PaymentScheduleEntry,
)
from rent_to_own.settlement.settings import PERCENTAGE, SettlementDiscountSettings, TieredDiscount

logger = logging.getLogger(__name__)

MIN_MONTHS_EARLY = 1.0

NOT_EARLY_ENOUGH = "not_early_enough"
BELOW_MIN_SETTLEMENT_AMOUNT = "below_min_settlement_amount"
TOO_FEW_REMAINING_PAYMENTS = "too_few_remaining_payments"
INACTIVE = "inactive"


@dataclass(frozen=True)
class SettlementDiscountCalculation:
    original_principal: float
    original_interest: float
    original_total: float
    principal_discount: float
    interest_discount: float
    total_discount: float
    discounted_principal: float
    discounted_interest: float
    final_amount: float
    months_early: float
    months_into_loan: float
    settlement_date: date
    settings: SettlementDiscountSettings
    eligible: bool
    ineligible_reason: str | None = None
    applied_tier: TieredDiscount | None = None


def loan_start_date(application: LoanApplication, settlement_date: date) -> date:
    """One period before the first installment, else the creation date, else the settlement date."""
    plan = application.plan
    installments = plan.installments if plan is not None else ()
    if installments:
        first_due = installments[0].due_date
        return first_due - timedelta(days=1) if plan.is_daily else add_months(first_due, -1)
    if application.created_at is not None:
        return application.created_at
    return settlement_date


def calculate_months_into_loan(application: LoanApplication, settlement_date: date) -> float:
    start = loan_start_date(application, settlement_date)
    return round_tenth(max(0.0, months_between(start, settlement_date)))


def calculate_months_early(application: LoanApplication, settlement_date: date) -> float:
    plan = application.plan
    tenure_months = plan.tenure_months if plan is not None else DEFAULT_TENURE_MONTHS
    months_into_loan = calculate_months_into_loan(application, settlement_date)
    return round_tenth(max(0.0, tenure_months - months_into_loan))


def _first_remaining_index(
    installments: Sequence[PaymentScheduleEntry], remaining: Sequence[PaymentScheduleEntry]
) -> int:
    if not remaining:
        return 0
    key = month_key(remaining[0].due_date)
    for i, entry in enumerate(installments):
        if month_key(entry.due_date) == key:
            return i
    return 0


def calculate_principal_and_interest(
    application: LoanApplication, remaining_payments: Sequence[PaymentScheduleEntry]
) -> tuple[float, float]:
    """
    (principal, rent) still owed across the remaining entries, each rounded to cents.

    Monthly plans: rent for the installment at index i is charged on the
    company's share after installment i, at the monthly rate. Daily plans are
    charged day by day: each remaining day's principal slice plus rent on the
    company's share at the start of that day, at the daily rate.
    """
    plan = application.plan
    if plan is None or not remaining_payments:
        return 0.0, 0.0

    vehicle_price = float(application.vehicle_price or 0.0)
    down_payment = application.down_payment or plan.down_payment or 0.0
    tenure_months = plan.tenure_months
    if plan.is_daily:
        return _daily_principal_and_interest(
            plan,
            remaining_payments,
            vehicle_price=vehicle_price,
            down_payment=down_payment,
            tenure_months=tenure_months,
        )
    rate = plan.annual_rental_rate / MONTHS_PER_YEAR

    installments = monthly_view(plan.installments)
    remaining = [e for e in monthly_view(list(remaining_payments)) if not e.is_down_payment]
    unpaid_down_payment = sum(e.amount for e in remaining_payments if e.is_down_payment)
    first_index = _first_remaining_index(installments, remaining)

    total_principal = float(unpaid_down_payment)
    total_interest = 0.0
    for k, entry in enumerate(remaining):
        principal, rent = _period_cost(
            plan,
            entry,
            vehicle_price=vehicle_price,
            down_payment=down_payment,
            tenure_months=tenure_months,
            payment_index=first_index + k,
            rate=rate,
        )
        total_principal += principal
        total_interest += rent

    return round_money(total_principal), round_money(total_interest)


def _period_cost(
    plan: InstallmentPlan,
    entry: PaymentScheduleEntry,
    *,
    vehicle_price: float,
    down_payment: float,
    tenure_months: int,
    payment_index: int,
    rate: float,
) -> tuple[float, float]:
    structure = plan.payment_structure
    if plan.calculation_method == CalculationMethod.BALLOON_PAYMENT and structure is not None:
        if entry.is_balloon:
            balloon = plan.balloon_payment or vehicle_price * structure.balloon_percent / 100.0
            return balloon, balloon * rate
        per_month = vehicle_price * structure.installment_percent / 100.0 / tenure_months
        outstanding = vehicle_price - (down_payment + per_month * payment_index)
        return per_month, max(outstanding, 0.0) * rate

    ownership = calculate_ownership(
        vehicle_price=vehicle_price,
        down_payment=down_payment,
        tenure_months=tenure_months,
        payment_index=payment_index,
    )
    return ownership.principal_per_month, ownership.company_ownership * rate


def _daily_principal_and_interest(
    plan: InstallmentPlan,
    remaining_payments: Sequence[PaymentScheduleEntry],
    *,
    vehicle_price: float,
    down_payment: float,
    tenure_months: int,
) -> tuple[float, float]:
    installments = plan.installments
    if not installments:
        return round_money(sum(e.amount for e in remaining_payments if e.is_down_payment)), 0.0

    rate = plan.annual_rental_rate / DAYS_PER_YEAR
    first_month = month_start(installments[0].due_date)
    structure = plan.payment_structure
    is_balloon_plan = plan.calculation_method == CalculationMethod.BALLOON_PAYMENT and structure is not None
    if is_balloon_plan:
        per_month = vehicle_price * structure.installment_percent / 100.0 / tenure_months
    else:
        per_month = (vehicle_price - down_payment) / tenure_months

    total_principal = 0.0
    total_interest = 0.0
    for entry in remaining_payments:
        if entry.is_down_payment:
            total_principal += entry.amount
            continue
        if is_balloon_plan and entry.is_balloon:
            balloon = plan.balloon_payment or vehicle_price * structure.balloon_percent / 100.0
            total_principal += balloon
            total_interest += balloon * rate
            continue
        day = entry.due_date
        n_days = days_in_month(day)
        month_index = (day.year - first_month.year) * 12 + (day.month - first_month.month)
        paid_before = per_month * (month_index + (day.day - 1) / n_days)
        total_principal += per_month / n_days
        total_interest += max(vehicle_price - (down_payment + paid_before), 0.0) * rate

    return round_money(total_principal), round_money(total_interest)


def select_tier(tiers: Sequence[TieredDiscount], months_early: float) -> TieredDiscount | None:
    """First tier in list order whose range contains months_early."""
    for tier in tiers:
        if tier.matches(months_early):
            return tier
    return None


def _discount(amount: float, value: float, discount_type: str) -> float:
    if discount_type == PERCENTAGE:
        return amount * value / 100.0
    return float(value)


def apply_caps(
    principal_discount: float,
    interest_discount: float,
    *,
    original_total: float,
    max_discount_amount: float | None,
    max_discount_percentage: float | None,
) -> tuple[float, float]:
    """
    Amount cap first, then percentage cap.

    Each cap scales both components by the same factor, starting from the
    values left by the previous step.
    """
    total = principal_discount + interest_discount
    if max_discount_amount and total > max_discount_amount:
        scale = max_discount_amount / total
        principal_discount *= scale
        interest_discount *= scale

    total = principal_discount + interest_discount
    if max_discount_percentage:
        limit = original_total * max_discount_percentage / 100.0
        if total > limit:
            scale = limit / total
            principal_discount *= scale
            interest_discount *= scale

    return principal_discount, interest_discount


def _ineligibility(
    settings: SettlementDiscountSettings,
    *,
    months_early: float,
    original_total: float,
    remaining_count: int,
) -> str | None:
    if months_early < MIN_MONTHS_EARLY:
        return NOT_EARLY_ENOUGH
    if original_total < settings.min_settlement_amount:
        return BELOW_MIN_SETTLEMENT_AMOUNT
    if remaining_count < settings.min_remaining_payments:
        return TOO_FEW_REMAINING_PAYMENTS
    if not settings.is_active:
        return INACTIVE
    return None


def calculate_settlement_discount(
    application: LoanApplication,
    remaining_payments: Sequence[PaymentScheduleEntry],
    settings: SettlementDiscountSettings,
    *,
    settlement_date: date,
) -> SettlementDiscountCalculation:
    months_into_loan = calculate_months_into_loan(application, settlement_date)
    months_early = calculate_months_early(application, settlement_date)
    total_principal, total_interest = calculate_principal_and_interest(application, remaining_payments)
    original_total = round_money(total_principal + total_interest)

    def _result(principal_discount: float, interest_discount: float, **extra) -> SettlementDiscountCalculation:
        return SettlementDiscountCalculation(
            original_principal=total_principal,
            original_interest=total_interest,
            original_total=original_total,
            principal_discount=round_money(principal_discount),
            interest_discount=round_money(interest_discount),
            total_discount=round_money(principal_discount + interest_discount),
            discounted_principal=round_money(total_principal - principal_discount),
            discounted_interest=round_money(total_interest - interest_discount),
            final_amount=round_money(original_total - principal_discount - interest_discount),
            months_early=months_early,
            months_into_loan=months_into_loan,
            settlement_date=settlement_date,
            settings=settings,
            **extra,
        )

    reason = _ineligibility(
        settings,
        months_early=months_early,
        original_total=original_total,
        remaining_count=len(remaining_payments),
    )
    if reason is not None:
        logger.info("settlement not eligible for discount: %s (months_early=%.1f)", reason, months_early)
        return _result(0.0, 0.0, eligible=False, ineligible_reason=reason)

    tier = select_tier(settings.tiered_discounts, months_early)
    if tier is not None:
        principal_discount = _discount(total_principal, tier.principal_discount, tier.principal_discount_type)
        interest_discount = _discount(total_interest, tier.interest_discount, tier.interest_discount_type)
    else:
        principal_discount = 0.0
        interest_discount = 0.0
        if settings.principal_discount_enabled and total_principal >= settings.principal_discount_min_amount:
            principal_discount = _discount(
                total_principal, settings.principal_discount_value, settings.principal_discount_type
            )
        if settings.interest_discount_enabled and total_interest >= settings.interest_discount_min_amount:
            interest_discount = _discount(
                total_interest, settings.interest_discount_value, settings.interest_discount_type
            )

    principal_discount, interest_discount = apply_caps(
        principal_discount,
        interest_discount,
        original_total=original_total,
        max_discount_amount=settings.max_discount_amount,
        max_discount_percentage=settings.max_discount_percentage,
    )
    logger.info(
        "settlement discount %.2f on %.2f (months_early=%.1f, tier=%s)",
        principal_discount + interest_discount,
        original_total,
        months_early,
        "yes" if tier is not None else "no",
    )
    return _result(principal_discount, interest_discount, eligible=True, applied_tier=tier)
