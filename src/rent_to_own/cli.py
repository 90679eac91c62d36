from __future__ import annotations

import argparse
import json
import logging
import os
from datetime import date
from typing import Any

from rent_to_own.export import to_jsonable, write_schedule_csv
from rent_to_own.financing.tenure import parse_tenure
from rent_to_own.schedule.aggregate import monthly_view
from rent_to_own.schedule.amortized import generate_amortized_plan
from rent_to_own.schedule.balloon import generate_balloon_plan
from rent_to_own.schedule.dates import add_months, month_start
from rent_to_own.schedule.dynamic_rent import generate_dynamic_rent_plan
from rent_to_own.schedule.models import CalculationMethod, InstallmentPlan, LoanApplication, PaymentStatus, PaymentStructure
from rent_to_own.settlement.discount import calculate_settlement_discount
from rent_to_own.settlement.settings import settings_from_dict, tier_overlaps
from rent_to_own.timeline.ownership_timeline import build_ownership_timeline

logger = logging.getLogger(__name__)


def _mkdirp(path: str) -> None:
    d = os.path.dirname(path)
    if d:
        os.makedirs(d, exist_ok=True)


def _date(value: str) -> date:
    try:
        return date.fromisoformat(value)
    except ValueError as e:
        raise argparse.ArgumentTypeError(f"expected YYYY-MM-DD, got {value!r}") from e


def _print(out: Any) -> None:
    print(json.dumps(to_jsonable(out), indent=2, sort_keys=True))


def _load_json_file(path: str) -> dict[str, Any]:
    try:
        with open(path, encoding="utf-8") as fh:
            d = json.load(fh)
    except (OSError, json.JSONDecodeError) as e:
        raise SystemExit(f"--settings-json must point to a readable JSON file: {e}") from e
    if not isinstance(d, dict):
        raise SystemExit("--settings-json must decode to an object/dict")
    return d


def _build_plan(args: argparse.Namespace) -> InstallmentPlan:
    today = args.today or date.today()
    start = args.start_date or add_months(month_start(today), 1)
    method = CalculationMethod(args.method)

    if method == CalculationMethod.BALLOON_PAYMENT:
        structure = PaymentStructure(
            down_payment_percent=args.down_payment_percent,
            installment_percent=args.installment_percent,
            balloon_percent=args.balloon_percent,
        )
        return generate_balloon_plan(
            vehicle_price=args.vehicle_price,
            structure=structure,
            term_months=parse_tenure(args.tenure),
            annual_rental_rate=args.annual_rate,
            start_date=start,
            today=today,
            interval=args.interval,
        )
    if method == CalculationMethod.AMORTIZED_FIXED:
        return generate_amortized_plan(
            vehicle_price=args.vehicle_price,
            down_payment=args.down_payment,
            tenure=args.tenure,
            annual_rate=args.annual_rate,
            start_date=start,
            today=today,
            interval=args.interval,
        )
    return generate_dynamic_rent_plan(
        vehicle_price=args.vehicle_price,
        down_payment=args.down_payment,
        tenure=args.tenure,
        annual_rental_rate=args.annual_rate,
        start_date=start,
        today=today,
        interval=args.interval,
    )


def _application(args: argparse.Namespace, plan: InstallmentPlan) -> LoanApplication:
    return LoanApplication(vehicle_price=args.vehicle_price, down_payment=plan.down_payment, plan=plan)


def cmd_schedule(args: argparse.Namespace) -> int:
    plan = _build_plan(args)
    schedule = monthly_view(plan.schedule) if args.monthly_view else list(plan.schedule)

    out: dict[str, Any] = {
        "tenure": plan.tenure,
        "tenure_months": plan.tenure_months,
        "interval": plan.interval,
        "calculation_method": plan.calculation_method,
        "monthly_amount": plan.monthly_amount,
        "total_amount": plan.total_amount,
        "total_rent": plan.total_rent,
        "down_payment": plan.down_payment,
        "balloon_payment": plan.balloon_payment,
        "n_entries": len(schedule),
    }
    if args.out_csv:
        _mkdirp(args.out_csv)
        write_schedule_csv(schedule, args.out_csv)
        out["out_csv"] = args.out_csv
    else:
        out["schedule"] = schedule
    _print(out)
    return 0


def cmd_timeline(args: argparse.Namespace) -> int:
    plan = _build_plan(args)
    timeline = build_ownership_timeline(_application(args, plan), today=args.today or date.today())
    _print(timeline)
    return 0


def cmd_settle(args: argparse.Namespace) -> int:
    plan = _build_plan(args)
    raw = _load_json_file(args.settings_json) if args.settings_json else {}
    settings = settings_from_dict(raw)
    remaining = [e for e in plan.schedule if e.status != PaymentStatus.PAID]
    settlement_date = args.settlement_date or args.today or date.today()

    calc = calculate_settlement_discount(
        _application(args, plan),
        remaining,
        settings,
        settlement_date=settlement_date,
    )
    _print(
        {
            "remaining_payments": len(remaining),
            "tier_warnings": tier_overlaps(settings.tiered_discounts),
            "calculation": calc,
        }
    )
    return 0


def _add_plan_args(p: argparse.ArgumentParser) -> None:
    p.add_argument("--vehicle-price", type=float, required=True)
    p.add_argument("--down-payment", type=float, default=0.0)
    p.add_argument("--tenure", default="12 Months", help='e.g. "3 Years", "36 Months". A bare number means YEARS.')
    p.add_argument("--interval", default="Monthly", help="Monthly or Daily; anything else is calculated monthly.")
    p.add_argument("--annual-rate", type=float, default=0.12, help="Annual rate as a fraction (e.g. 0.12).")
    p.add_argument(
        "--method",
        choices=[m.value for m in CalculationMethod],
        default=CalculationMethod.DYNAMIC_RENT.value,
    )
    p.add_argument("--start-date", type=_date, default=None, help="Defaults to the first of next month.")
    p.add_argument("--today", type=_date, default=None, help="Reference date for statuses (default: today).")
    p.add_argument("--down-payment-percent", type=float, default=20.0)
    p.add_argument("--installment-percent", type=float, default=60.0)
    p.add_argument("--balloon-percent", type=float, default=20.0)


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="rent-to-own")
    p.add_argument("--log-level", default="WARNING", choices=["DEBUG", "INFO", "WARNING", "ERROR"])
    sub = p.add_subparsers(dest="cmd", required=True)

    s = sub.add_parser("schedule", help="Generate an installment plan and print it as JSON.")
    _add_plan_args(s)
    s.add_argument("--monthly-view", action="store_true", default=False, help="Fold daily entries into months.")
    s.add_argument("--out-csv", default=None, help="Write the schedule to CSV instead of printing it.")
    s.set_defaults(func=cmd_schedule)

    t = sub.add_parser("timeline", help="Ownership milestones for a generated plan.")
    _add_plan_args(t)
    t.set_defaults(func=cmd_timeline)

    st = sub.add_parser("settle", help="Early-settlement discount for the unpaid tail of a generated plan.")
    _add_plan_args(st)
    st.add_argument("--settings-json", default=None, help="Path to discount settings JSON.")
    st.add_argument("--settlement-date", type=_date, default=None)
    st.set_defaults(func=cmd_settle)

    return p


def main(argv: list[str] | None = None) -> int:
    p = build_parser()
    args = p.parse_args(argv)
    logging.basicConfig(level=getattr(logging, args.log_level), format="%(levelname)s %(name)s: %(message)s")
    try:
        return int(args.func(args))
    except ValueError as e:
        logger.debug("rejected input", exc_info=True)
        raise SystemExit(f"error: {e}") from e


if __name__ == "__main__":
    raise SystemExit(main())
