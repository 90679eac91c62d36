from __future__ import annotations


class ValidationError(ValueError):
    """
    Bad configuration input, reported back to whoever configured it.

    field: name of the offending input (e.g. "payment_structure")
    constraint: short machine-readable name of the rule that failed
    """

    def __init__(self, message: str, *, field: str, constraint: str) -> None:
        super().__init__(message)
        self.message = message
        self.field = field
        self.constraint = constraint

    def to_dict(self) -> dict[str, str]:
        return {"field": self.field, "constraint": self.constraint, "message": self.message}


class PaymentStructureError(ValidationError):
    def __init__(self, message: str, *, constraint: str) -> None:
        super().__init__(message, field="payment_structure", constraint=constraint)
