from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import date
from enum import Enum

from rent_to_own.financing.tenure import normalize_interval, parse_tenure


class PaymentStatus(str, Enum):
    DUE = "due"
    ACTIVE = "active"
    PAID = "paid"
    UNPAID = "unpaid"
    PARTIALLY_PAID = "partially_paid"
    UPCOMING = "upcoming"


class ProjectedStatus(str, Enum):
    # Presentation default derived from the due date at generation time.
    # It says nothing about whether money actually arrived.
    PAID = "paid"
    ACTIVE = "active"
    UPCOMING = "upcoming"

    def as_payment_status(self) -> PaymentStatus:
        return PaymentStatus(self.value)


class PaymentType(str, Enum):
    DOWN_PAYMENT = "down_payment"
    INSTALLMENT = "installment"
    BALLOON_PAYMENT = "balloon_payment"


class CalculationMethod(str, Enum):
    DYNAMIC_RENT = "dynamic_rent"
    AMORTIZED_FIXED = "amortized_fixed"
    BALLOON_PAYMENT = "balloon_payment"


@dataclass(frozen=True)
class PaymentScheduleEntry:
    due_date: date
    amount: float
    status: PaymentStatus
    projected_status: ProjectedStatus | None = None
    paid_date: date | None = None
    paid_amount: float | None = None
    remaining_amount: float | None = None
    payment_type: PaymentType = PaymentType.INSTALLMENT
    is_balloon: bool = False
    # Components of `amount`; None when the entry did not come from a generator.
    principal: float | None = None
    rent: float | None = None
    is_deferred: bool = False
    is_partially_deferred: bool = False

    @property
    def is_down_payment(self) -> bool:
        return self.payment_type == PaymentType.DOWN_PAYMENT


@dataclass(frozen=True)
class PaymentStructure:
    down_payment_percent: float
    installment_percent: float
    balloon_percent: float

    @property
    def total_percent(self) -> float:
        return self.down_payment_percent + self.installment_percent + self.balloon_percent


@dataclass(frozen=True)
class InstallmentPlan:
    tenure: str
    interval: str
    monthly_amount: float
    total_amount: float
    schedule: tuple[PaymentScheduleEntry, ...]
    calculation_method: CalculationMethod = CalculationMethod.DYNAMIC_RENT
    down_payment: float = 0.0
    annual_rental_rate: float = 0.0
    total_rent: float = 0.0
    balloon_payment: float | None = None
    payment_structure: PaymentStructure | None = None

    @property
    def tenure_months(self) -> int:
        return parse_tenure(self.tenure)

    @property
    def is_daily(self) -> bool:
        return normalize_interval(self.interval) == "daily"

    @property
    def installments(self) -> tuple[PaymentScheduleEntry, ...]:
        return tuple(e for e in self.schedule if not e.is_down_payment)


@dataclass(frozen=True)
class LoanApplication:
    """
    The slice of an application the engine needs.

    vehicle_price is None until a vehicle has been selected; plan is None until
    one has been generated. Both states are valid and yield empty results.
    """

    vehicle_price: float | None
    down_payment: float = 0.0
    plan: InstallmentPlan | None = None
    created_at: date | None = None


def apply_actual_status(
    entry: PaymentScheduleEntry,
    status: PaymentStatus,
    *,
    paid_amount: float | None = None,
    paid_date: date | None = None,
) -> PaymentScheduleEntry:
    """
    Overlay the live payment state recorded by the owning application.

    The projected status is kept so both views stay available.
    """
    if paid_amount is None and status == PaymentStatus.PAID:
        paid_amount = entry.amount
    if paid_amount is not None and paid_amount < 0:
        raise ValueError("paid_amount must be >= 0")

    remaining = None
    if paid_amount is not None:
        remaining = max(entry.amount - paid_amount, 0.0)

    return replace(
        entry,
        status=status,
        paid_amount=paid_amount,
        remaining_amount=remaining,
        paid_date=paid_date if paid_date is not None else (entry.paid_date if status == PaymentStatus.PAID else None),
    )
