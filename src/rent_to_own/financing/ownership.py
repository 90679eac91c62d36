from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class Ownership:
    customer_ownership: float
    company_ownership: float
    loan_amount: float
    principal_per_month: float

    def percentage(self, vehicle_price: float) -> float:
        if vehicle_price <= 0:
            return 0.0
        return self.customer_ownership / vehicle_price * 100.0


def calculate_ownership(
    *,
    vehicle_price: float,
    down_payment: float,
    tenure_months: int,
    payment_index: int,
) -> Ownership:
    """
    Customer/company split of the vehicle value right after payment `payment_index`.

    payment_index is zero-based over installments (0 = first installment);
    -1 gives the position straight after the down payment.
    """
    loan_amount = float(vehicle_price) - float(down_payment)
    principal_per_month = loan_amount / tenure_months if tenure_months > 0 else 0.0

    customer = min(down_payment + principal_per_month * (payment_index + 1), vehicle_price)
    company = max(vehicle_price - customer, 0.0)
    return Ownership(
        customer_ownership=float(customer),
        company_ownership=float(company),
        loan_amount=float(loan_amount),
        principal_per_month=float(principal_per_month),
    )


def calculate_balloon_ownership(
    *,
    vehicle_price: float,
    down_payment: float,
    tenure_months: int,
    payment_index: int,
    installment_percent: float,
    balloon_percent: float,
    balloon_paid: bool = False,
) -> Ownership:
    """
    Ownership for balloon plans.

    Installments only ever buy the installment tranche, so ownership stops at
    (100 - balloon_percent)% of the price until the balloon itself is paid,
    at which point the customer owns the whole vehicle.
    """
    total_installment_amount = vehicle_price * installment_percent / 100.0
    principal_per_month = total_installment_amount / tenure_months if tenure_months > 0 else 0.0
    max_without_balloon = vehicle_price * (100.0 - balloon_percent) / 100.0

    if balloon_paid:
        customer = float(vehicle_price)
    else:
        paid = down_payment + principal_per_month * (payment_index + 1)
        customer = max(min(paid, max_without_balloon), 0.0)

    return Ownership(
        customer_ownership=float(customer),
        company_ownership=float(max(vehicle_price - customer, 0.0)),
        loan_amount=float(vehicle_price - down_payment),
        principal_per_month=float(principal_per_month),
    )
