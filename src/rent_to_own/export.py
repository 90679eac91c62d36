from __future__ import annotations

from collections.abc import Iterable
from dataclasses import asdict, is_dataclass
from datetime import date
from enum import Enum
from typing import Any

import pandas as pd

from rent_to_own.schedule.models import PaymentScheduleEntry

SCHEDULE_COLUMNS = [
    "due_date",
    "payment_type",
    "amount",
    "principal",
    "rent",
    "status",
    "projected_status",
    "paid_date",
    "is_balloon",
]


def to_jsonable(obj: Any) -> Any:
    """Dataclasses/enums/dates -> plain JSON-compatible values."""
    if is_dataclass(obj) and not isinstance(obj, type):
        return to_jsonable(asdict(obj))
    if isinstance(obj, Enum):
        return obj.value
    if isinstance(obj, date):
        return obj.isoformat()
    if isinstance(obj, dict):
        return {k: to_jsonable(v) for k, v in obj.items()}
    if isinstance(obj, (list, tuple)):
        return [to_jsonable(v) for v in obj]
    return obj


def schedule_frame(schedule: Iterable[PaymentScheduleEntry]) -> pd.DataFrame:
    rows = [to_jsonable(e) for e in schedule]
    df = pd.DataFrame(rows, columns=SCHEDULE_COLUMNS)
    if not df.empty:
        df["due_date"] = pd.to_datetime(df["due_date"]).dt.date
    return df


def write_schedule_csv(schedule: Iterable[PaymentScheduleEntry], path: str) -> int:
    df = schedule_frame(schedule)
    df.to_csv(path, index=False, float_format="%.2f")
    return int(len(df))
