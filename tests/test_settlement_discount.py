from __future__ import annotations

from datetime import date

import pytest

from rent_to_own.schedule.balloon import generate_balloon_plan
from rent_to_own.schedule.dynamic_rent import generate_dynamic_rent_plan
from rent_to_own.schedule.models import LoanApplication, PaymentStructure
from rent_to_own.settlement.discount import (
    BELOW_MIN_SETTLEMENT_AMOUNT,
    INACTIVE,
    NOT_EARLY_ENOUGH,
    TOO_FEW_REMAINING_PAYMENTS,
    apply_caps,
    calculate_months_early,
    calculate_months_into_loan,
    calculate_principal_and_interest,
    calculate_settlement_discount,
    loan_start_date,
    select_tier,
)
from rent_to_own.settlement.settings import FIXED, SettlementDiscountSettings, TieredDiscount


def _application(**kw):
    args = dict(
        vehicle_price=50_000,
        down_payment=10_000,
        tenure="12 Months",
        annual_rental_rate=0.12,
        start_date=date(2025, 2, 1),
        today=date(2025, 1, 15),
    )
    args.update(kw)
    plan = generate_dynamic_rent_plan(**args)
    return LoanApplication(vehicle_price=args["vehicle_price"], down_payment=args["down_payment"], plan=plan)


def _remaining_from(app, first_due):
    return [e for e in app.plan.installments if e.due_date >= first_due]


FLAT = SettlementDiscountSettings(
    principal_discount_enabled=True,
    principal_discount_value=10,
    interest_discount_enabled=True,
    interest_discount_value=50,
)


def test_loan_start_is_one_period_before_first_installment():
    app = _application()
    assert loan_start_date(app, date(2025, 6, 1)) == date(2025, 1, 1)
    assert calculate_months_into_loan(app, date(2025, 12, 1)) == 11.0
    assert calculate_months_early(app, date(2025, 12, 1)) == 1.0

    assert loan_start_date(LoanApplication(vehicle_price=1.0, created_at=date(2024, 5, 5)), date(2025, 1, 1)) == date(2024, 5, 5)
    assert loan_start_date(LoanApplication(vehicle_price=1.0), date(2025, 1, 1)) == date(2025, 1, 1)


def test_one_month_early_is_the_eligibility_boundary():
    app = _application()

    on_time = date(2025, 12, 1)
    calc = calculate_settlement_discount(app, _remaining_from(app, on_time), FLAT, settlement_date=on_time)
    assert calc.months_early == 1.0
    assert calc.eligible

    late = date(2025, 12, 4)
    calc = calculate_settlement_discount(app, _remaining_from(app, on_time), FLAT, settlement_date=late)
    assert calc.months_early == 0.9
    assert not calc.eligible
    assert calc.ineligible_reason == NOT_EARLY_ENOUGH
    assert calc.total_discount == 0.0
    assert calc.final_amount == calc.original_total


def test_principal_and_rent_for_remaining_installments():
    app = _application()
    principal, interest = calculate_principal_and_interest(app, _remaining_from(app, date(2025, 12, 1)))
    assert principal == 6666.67
    assert interest == 33.33

    assert calculate_principal_and_interest(app, []) == (0.0, 0.0)
    assert calculate_principal_and_interest(LoanApplication(vehicle_price=50_000), []) == (0.0, 0.0)


def test_flat_discounts():
    app = _application()
    d = date(2025, 12, 1)
    calc = calculate_settlement_discount(app, _remaining_from(app, d), FLAT, settlement_date=d)
    assert calc.original_total == 6700.0
    assert calc.principal_discount == 666.67
    assert calc.interest_discount == pytest.approx(16.67, abs=0.01)
    assert calc.final_amount == pytest.approx(6700.0 - 666.67 - 16.67, abs=0.02)
    assert calc.applied_tier is None


def test_flat_discount_min_amount():
    app = _application()
    d = date(2025, 12, 1)
    settings = SettlementDiscountSettings(
        principal_discount_enabled=True,
        principal_discount_value=10,
        principal_discount_min_amount=100_000,
    )
    calc = calculate_settlement_discount(app, _remaining_from(app, d), settings, settlement_date=d)
    assert calc.eligible
    assert calc.principal_discount == 0.0


def test_tier_takes_precedence_over_flat_rules():
    app = _application()
    d = date(2025, 6, 1)
    tier = TieredDiscount(
        min_months_early=6,
        principal_discount=10,
        interest_discount=200,
        interest_discount_type=FIXED,
    )
    settings = SettlementDiscountSettings(
        principal_discount_enabled=True,
        principal_discount_value=90,
        tiered_discounts=(tier,),
    )
    calc = calculate_settlement_discount(app, _remaining_from(app, d), settings, settlement_date=d)
    assert calc.months_early == 7.0
    assert calc.eligible
    assert calc.applied_tier == tier
    assert calc.original_principal == pytest.approx(26_666.67, abs=0.01)
    assert calc.original_interest == pytest.approx(933.33, abs=0.01)
    assert calc.principal_discount == pytest.approx(2666.67, abs=0.01)
    assert calc.interest_discount == 200.0
    assert calc.final_amount == pytest.approx(27_600.0 - 2866.67, abs=0.02)


def test_first_matching_tier_wins():
    a = TieredDiscount(min_months_early=1, max_months_early=6, principal_discount=5, interest_discount=5)
    b = TieredDiscount(min_months_early=3, principal_discount=20, interest_discount=20)
    assert select_tier([a, b], 4) is a
    assert select_tier([b, a], 4) is b
    assert select_tier([a, b], 7) is b
    assert select_tier([a, b], 0.5) is None


def test_amount_cap_scales_proportionally():
    p, i = apply_caps(700, 300, original_total=10_000, max_discount_amount=500, max_discount_percentage=None)
    assert (p, i) == (350.0, 150.0)


def test_caps_apply_in_sequence():
    p, i = apply_caps(700, 300, original_total=10_000, max_discount_amount=500, max_discount_percentage=4)
    assert p == pytest.approx(280.0)
    assert i == pytest.approx(120.0)

    p, i = apply_caps(700, 300, original_total=10_000, max_discount_amount=None, max_discount_percentage=None)
    assert (p, i) == (700, 300)


def test_eligibility_gates():
    app = _application()
    d = date(2025, 12, 1)
    remaining = _remaining_from(app, d)

    calc = calculate_settlement_discount(
        app, remaining, SettlementDiscountSettings(is_active=False), settlement_date=d
    )
    assert calc.ineligible_reason == INACTIVE

    calc = calculate_settlement_discount(
        app, remaining, SettlementDiscountSettings(min_settlement_amount=100_000), settlement_date=d
    )
    assert calc.ineligible_reason == BELOW_MIN_SETTLEMENT_AMOUNT

    calc = calculate_settlement_discount(
        app, remaining, SettlementDiscountSettings(min_remaining_payments=5), settlement_date=d
    )
    assert calc.ineligible_reason == TOO_FEW_REMAINING_PAYMENTS


def _daily_application():
    return _application(
        vehicle_price=7000,
        down_payment=1000,
        tenure="2 Months",
        annual_rental_rate=0.0365,
        start_date=date(2025, 1, 1),
        today=date(2025, 1, 1),
        interval="Daily",
    )


def test_daily_plan_is_settled_day_by_day():
    app = _daily_application()
    remaining = _remaining_from(app, date(2025, 2, 1))
    assert len(remaining) == 28
    principal, interest = calculate_principal_and_interest(app, remaining)
    assert principal == pytest.approx(3000.0, abs=0.01)
    # rent on 3000 shrinking to 3000/28 over February at 0.0001 a day
    assert interest == pytest.approx(4.35, abs=0.01)
    assert interest == pytest.approx(sum(e.rent for e in remaining), abs=0.01)
    assert loan_start_date(app, date(2025, 1, 31)) == date(2024, 12, 31)


def test_daily_tail_starting_mid_month_is_pro_rated():
    app = _daily_application()
    remaining = _remaining_from(app, date(2025, 2, 15))
    assert len(remaining) == 14
    principal, interest = calculate_principal_and_interest(app, remaining)
    assert principal == pytest.approx(1500.0, abs=0.01)
    assert principal == pytest.approx(sum(e.principal for e in remaining), abs=0.01)
    assert interest == pytest.approx(sum(e.rent for e in remaining), abs=0.01)


def test_single_remaining_day_is_charged_one_day():
    app = _daily_application()
    remaining = _remaining_from(app, date(2025, 2, 28))
    assert len(remaining) == 1
    principal, interest = calculate_principal_and_interest(app, remaining)
    assert principal == 107.14
    assert interest == 0.01


def test_daily_balloon_plan_settlement_matches_schedule():
    plan = generate_balloon_plan(
        vehicle_price=100_000,
        structure=PaymentStructure(20, 60, 20),
        term_months=1,
        annual_rental_rate=0.12,
        start_date=date(2025, 2, 1),
        today=date(2025, 1, 1),
        interval="Daily",
    )
    app = LoanApplication(vehicle_price=100_000, down_payment=20_000, plan=plan)
    remaining = list(plan.schedule[-2:])
    principal, interest = calculate_principal_and_interest(app, remaining)
    assert principal == pytest.approx(60_000 / 28 + 20_000, abs=0.01)
    assert interest == pytest.approx(sum(e.rent for e in remaining), abs=0.01)



def test_balloon_plan_settlement_includes_balloon():
    plan = generate_balloon_plan(
        vehicle_price=100_000,
        structure=PaymentStructure(20, 60, 20),
        term_months=12,
        annual_rental_rate=0.12,
        start_date=date(2025, 1, 1),
        today=date(2024, 12, 1),
    )
    app = LoanApplication(vehicle_price=100_000, down_payment=20_000, plan=plan)
    principal, interest = calculate_principal_and_interest(app, list(plan.schedule[-2:]))
    assert principal == 25_000.0
    assert interest == 450.0
