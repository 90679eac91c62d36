from __future__ import annotations

from dataclasses import dataclass
from datetime import date

from rent_to_own.financing.ownership import Ownership, calculate_balloon_ownership, calculate_ownership
from rent_to_own.money import round_money
from rent_to_own.schedule.aggregate import monthly_view
from rent_to_own.schedule.dates import add_months
from rent_to_own.schedule.models import (
    CalculationMethod,
    InstallmentPlan,
    LoanApplication,
    PaymentScheduleEntry,
    PaymentStatus,
)

TARGET_OWNERSHIP = 100.0

# (lower bound inclusive, upper bound exclusive, milestone, label), ascending.
MILESTONE_THRESHOLDS = (
    (25.0, 50.0, "quarter", "25% Ownership"),
    (50.0, 75.0, "halfway", "50% Ownership - Halfway!"),
    (75.0, 95.0, "three_quarters", "75% Ownership"),
    (95.0, 100.0, "almost_there", "95% Ownership - Almost There!"),
    (100.0, float("inf"), "full_owner", "100% Ownership - Full Owner!"),
)


@dataclass(frozen=True)
class OwnershipMilestone:
    date: date
    ownership_percentage: float
    ownership_amount: float
    payment_index: int
    payment_status: str  # "paid" | "upcoming" | "missed"
    milestone: str | None
    label: str


@dataclass(frozen=True)
class OwnershipTimeline:
    milestones: tuple[OwnershipMilestone, ...]
    current_ownership: float
    target_ownership: float
    progress_percentage: float
    estimated_completion_date: date | None
    total_payments: int
    completed_payments: int


EMPTY_TIMELINE = OwnershipTimeline(
    milestones=(),
    current_ownership=0.0,
    target_ownership=TARGET_OWNERSHIP,
    progress_percentage=0.0,
    estimated_completion_date=None,
    total_payments=0,
    completed_payments=0,
)


def milestone_for(index: int, percentage: float) -> tuple[str | None, str]:
    if index == 0:
        return "first_payment", "First Payment"
    for lo, hi, milestone, label in MILESTONE_THRESHOLDS:
        if lo <= percentage < hi:
            return milestone, label
    return None, f"Payment {index + 1}"


def milestone_label(percentage: float) -> str:
    if percentage >= 100:
        return "Full Owner"
    if percentage >= 95:
        return "Almost There"
    if percentage >= 75:
        return "Three Quarters"
    if percentage >= 50:
        return "Halfway"
    if percentage >= 25:
        return "Quarter"
    return "Getting Started"


def _ownership_at(
    plan: InstallmentPlan,
    entry: PaymentScheduleEntry,
    *,
    vehicle_price: float,
    down_payment: float,
    tenure_months: int,
    installment_index: int,
) -> Ownership:
    structure = plan.payment_structure
    if plan.calculation_method == CalculationMethod.BALLOON_PAYMENT and structure is not None:
        return calculate_balloon_ownership(
            vehicle_price=vehicle_price,
            down_payment=down_payment,
            tenure_months=tenure_months,
            payment_index=installment_index,
            installment_percent=structure.installment_percent,
            balloon_percent=structure.balloon_percent,
            balloon_paid=entry.is_balloon,
        )
    return calculate_ownership(
        vehicle_price=vehicle_price,
        down_payment=down_payment,
        tenure_months=tenure_months,
        payment_index=installment_index,
    )


def build_ownership_timeline(application: LoanApplication, *, today: date) -> OwnershipTimeline:
    """
    Ownership milestones for every entry of the application's schedule.

    Down payment entries sit at installment index -1 (ownership == down
    payment). Daily plans are walked month by month, but the payment counts
    refer to the entries of the schedule itself. An application without
    a vehicle price or a schedule gets EMPTY_TIMELINE.
    """
    plan = application.plan
    if plan is None or not plan.schedule or not application.vehicle_price:
        return EMPTY_TIMELINE

    vehicle_price = float(application.vehicle_price)
    down_payment = application.down_payment or plan.down_payment or 0.0
    tenure_months = plan.tenure_months
    schedule = monthly_view(plan.schedule)

    milestones: list[OwnershipMilestone] = []
    completed_periods = 0
    last_paid = -1
    installment_index = -1
    for index, entry in enumerate(schedule):
        if entry.is_down_payment:
            ownership_index = -1
        else:
            installment_index += 1
            ownership_index = installment_index
        ownership = _ownership_at(
            plan,
            entry,
            vehicle_price=vehicle_price,
            down_payment=down_payment,
            tenure_months=tenure_months,
            installment_index=ownership_index,
        )
        percentage = ownership.percentage(vehicle_price)

        if entry.status == PaymentStatus.PAID:
            completed_periods += 1
            last_paid = index
            payment_status = "paid"
        elif entry.due_date < today:
            payment_status = "missed"
        else:
            payment_status = "upcoming"

        milestone, label = milestone_for(index, percentage)
        milestones.append(
            OwnershipMilestone(
                date=entry.due_date,
                ownership_percentage=round_money(percentage),
                ownership_amount=round_money(ownership.customer_ownership),
                payment_index=index,
                payment_status=payment_status,
                milestone=milestone,
                label=label,
            )
        )

    if last_paid >= 0:
        current = milestones[last_paid].ownership_percentage
    else:
        current = down_payment / vehicle_price * 100.0

    remaining = len(schedule) - completed_periods
    estimated = None
    if remaining > 0 and last_paid >= 0:
        estimated = add_months(schedule[last_paid].due_date, remaining)

    return OwnershipTimeline(
        milestones=tuple(milestones),
        current_ownership=round_money(current),
        target_ownership=TARGET_OWNERSHIP,
        progress_percentage=round_money(current),
        estimated_completion_date=estimated,
        total_payments=len(plan.schedule),
        completed_payments=sum(1 for e in plan.schedule if e.status == PaymentStatus.PAID),
    )
