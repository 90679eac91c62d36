from __future__ import annotations

import json
import logging

import pytest

from rent_to_own.cli import main

PLAN_ARGS = [
    "--vehicle-price",
    "50000",
    "--down-payment",
    "10000",
    "--tenure",
    "12 Months",
    "--start-date",
    "2025-02-01",
    "--today",
    "2025-01-15",
]


def test_schedule_command(capsys):
    assert main(["schedule", *PLAN_ARGS]) == 0
    out = json.loads(capsys.readouterr().out)
    assert out["n_entries"] == 13
    assert out["tenure_months"] == 12
    assert abs(out["total_amount"] - 52_600.0) < 1e-6
    assert out["schedule"][0]["payment_type"] == "down_payment"


def test_schedule_command_writes_csv(tmp_path, capsys):
    path = tmp_path / "out" / "schedule.csv"
    assert main(["schedule", *PLAN_ARGS, "--out-csv", str(path)]) == 0
    out = json.loads(capsys.readouterr().out)
    assert out["out_csv"] == str(path)
    assert "schedule" not in out
    assert path.exists()


def test_invalid_balloon_structure_exits():
    with pytest.raises(SystemExit):
        main(
            [
                "schedule",
                *PLAN_ARGS,
                "--method",
                "balloon_payment",
                "--down-payment-percent",
                "20",
                "--installment-percent",
                "70",
                "--balloon-percent",
                "5",
            ]
        )


def test_timeline_command(capsys):
    assert main(["timeline", *PLAN_ARGS]) == 0
    out = json.loads(capsys.readouterr().out)
    assert len(out["milestones"]) == 13
    assert out["current_ownership"] == 20.0
    assert out["target_ownership"] == 100.0


def test_settle_command(tmp_path, capsys):
    settings = tmp_path / "settings.json"
    settings.write_text(
        json.dumps({"principalDiscountEnabled": True, "principalDiscountValue": 10}),
        encoding="utf-8",
    )
    args = [
        "settle",
        "--vehicle-price",
        "50000",
        "--down-payment",
        "10000",
        "--tenure",
        "12 Months",
        "--start-date",
        "2025-02-01",
        "--today",
        "2025-11-15",
        "--settlement-date",
        "2025-12-01",
        "--settings-json",
        str(settings),
    ]
    assert main(args) == 0
    out = json.loads(capsys.readouterr().out)
    assert out["remaining_payments"] == 3
    assert out["tier_warnings"] == []
    calc = out["calculation"]
    assert calc["eligible"] is True
    assert calc["months_early"] == 1.0
    assert calc["principal_discount"] > 0


def test_settle_reports_each_tier_overlap_once(tmp_path, capsys, caplog):
    settings = tmp_path / "settings.json"
    settings.write_text(
        json.dumps(
            {
                "tieredDiscounts": [
                    {"minMonthsEarly": 1, "maxMonthsEarly": 6, "principalDiscount": 5},
                    {"minMonthsEarly": 3, "principalDiscount": 20},
                ]
            }
        ),
        encoding="utf-8",
    )
    with caplog.at_level(logging.WARNING, logger="rent_to_own.settlement.settings"):
        assert main(["settle", *PLAN_ARGS, "--settings-json", str(settings)]) == 0
    out = json.loads(capsys.readouterr().out)
    assert len(out["tier_warnings"]) == 1
    overlaps = [r for r in caplog.records if "overlap" in r.getMessage()]
    assert len(overlaps) == 1
