"""
Form-level validation for bundle create/update.

Nothing here raises: every check returns a ValidationResult carrying
structured, per-field issues so the form can show them next to the field.
"""
from dataclasses import dataclass, field
from enum import Enum
from typing import Iterable, Optional

from .currency import to_decimal
from .models import DiscountStrategy, FixedStrategy, PricingStrategy

MIN_SERVICES = 2
NAME_MIN_LENGTH = 2
NAME_MAX_LENGTH = 100
DESCRIPTION_MAX_LENGTH = 500


class IssueCode(str, Enum):
    REQUIRED_FIELD_MISSING = "RequiredFieldMissing"
    OUT_OF_RANGE = "OutOfRange"
    BELOW_MINIMUM = "BelowMinimum"
    MALFORMED_NUMERIC = "MalformedNumeric"
    TOO_SHORT = "TooShort"
    TOO_LONG = "TooLong"
    UNKNOWN_SERVICE = "UnknownService"


@dataclass
class ValidationIssue:
    """A single per-field validation message."""
    field: str
    code: IssueCode
    message: str

    def to_dict(self) -> dict:
        return {"field": self.field, "code": self.code.value, "message": self.message}


@dataclass
class ValidationResult:
    """Result of a validation pass."""
    valid: bool = True
    errors: list[ValidationIssue] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    def add_error(self, field_name: str, code: IssueCode, message: str):
        self.errors.append(ValidationIssue(field=field_name, code=code, message=message))
        self.valid = False

    def merge(self, other: 'ValidationResult') -> 'ValidationResult':
        """Fold another result into this one."""
        self.errors.extend(other.errors)
        self.warnings.extend(other.warnings)
        self.valid = self.valid and other.valid
        return self

    def errors_for(self, field_name: str) -> list[ValidationIssue]:
        return [e for e in self.errors if e.field == field_name]

    def codes(self) -> set[IssueCode]:
        return {e.code for e in self.errors}

    def to_dict(self) -> dict:
        return {
            "valid": self.valid,
            "errors": [e.to_dict() for e in self.errors],
            "warnings": list(self.warnings),
        }


def validate_strategy(strategy: PricingStrategy) -> ValidationResult:
    """Check the active strategy's payload. O(1); runs on every keystroke."""
    result = ValidationResult()

    if isinstance(strategy, FixedStrategy):
        if strategy.fixed_price_minor is None:
            result.add_error("fixedPriceAmountMinor", IssueCode.REQUIRED_FIELD_MISSING,
                             "Fixed price is required")
        elif strategy.fixed_price_minor < 0:
            result.add_error("fixedPriceAmountMinor", IssueCode.OUT_OF_RANGE,
                             "Fixed price must be greater than or equal to 0")

    elif isinstance(strategy, DiscountStrategy):
        if strategy.discount_percentage is None:
            result.add_error("discountPercentage", IssueCode.REQUIRED_FIELD_MISSING,
                             "Discount percentage is required")
        else:
            pct = to_decimal(strategy.discount_percentage)
            if pct is None:
                result.add_error("discountPercentage", IssueCode.MALFORMED_NUMERIC,
                                 "Discount percentage must be a number")
            elif pct < 0:
                result.add_error("discountPercentage", IssueCode.OUT_OF_RANGE,
                                 "Discount percentage must be at least 0")
            elif pct > 100:
                result.add_error("discountPercentage", IssueCode.OUT_OF_RANGE,
                                 "Discount percentage must not exceed 100")

    return result


def validate_service_selection(selected_ids: Iterable, touched: bool = True) -> ValidationResult:
    """
    Require at least two distinct services.

    The error is suppressed until the selection has been touched so an
    empty form does not open with an error on it.
    """
    result = ValidationResult()
    if touched and len(set(selected_ids or ())) < MIN_SERVICES:
        result.add_error("serviceIds", IssueCode.BELOW_MINIMUM,
                         f"Select at least {MIN_SERVICES} services")
    return result


def validate_name(name: Optional[str]) -> ValidationResult:
    result = ValidationResult()
    value = (name or "").strip()
    if not value:
        result.add_error("name", IssueCode.REQUIRED_FIELD_MISSING, "Bundle name is required")
    elif len(value) < NAME_MIN_LENGTH:
        result.add_error("name", IssueCode.TOO_SHORT,
                         f"Bundle name must be at least {NAME_MIN_LENGTH} characters")
    elif len(value) > NAME_MAX_LENGTH:
        result.add_error("name", IssueCode.TOO_LONG,
                         f"Bundle name must not exceed {NAME_MAX_LENGTH} characters")
    return result


def validate_description(description: Optional[str]) -> ValidationResult:
    result = ValidationResult()
    value = (description or "").strip()
    if len(value) > DESCRIPTION_MAX_LENGTH:
        result.add_error("description", IssueCode.TOO_LONG,
                         f"Description must not exceed {DESCRIPTION_MAX_LENGTH} characters")
    return result
