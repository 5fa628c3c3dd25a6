from __future__ import annotations
from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    from ..rules.base import FieldRule
    from .types import ValueRange


class CalfieldError(Exception):
    """Base error."""


class InvalidArgumentError(CalfieldError, ValueError):
    """Raised when a required argument, usually a field rule, is missing."""


class OutOfRangeError(CalfieldError, ValueError):
    """Raised when a field value is validated and falls outside its range."""

    def __init__(self, rule: "FieldRule", value: int, value_range: Optional["ValueRange"] = None):
        self.rule = rule
        self.value = value
        self.value_range = value_range if value_range is not None else rule.value_range()
        super().__init__(
            f"Value {value} for {rule.id} is outside the range "
            f"{self.value_range.minimum} to {self.value_range.maximum}"
        )


class FieldUnsupportedError(CalfieldError):
    """Raised when a field is neither stored nor derivable."""

    def __init__(self, rule: "FieldRule", message: Optional[str] = None):
        self.rule = rule
        super().__init__(message or f"Field {rule.id} is not available")


class InconsistentError(CalfieldError):
    """Raised when two sources give different values for the same field."""

    def __init__(self, rule: "FieldRule", message: Optional[str] = None):
        self.rule = rule
        super().__init__(message or f"Field {rule.id} is inconsistent with other information")


class ConversionFailedError(CalfieldError):
    """Raised when there is not enough, or contradictory, information to build a result."""
