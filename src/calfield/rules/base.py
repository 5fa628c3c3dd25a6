"""
calfield.rules.base
-------------------
The FieldRule: identity and metadata of one named calendrical field.

A rule knows three things about its field:
  * its legal range, optionally narrowed by context (day-of-month in February),
  * how to read itself from a canonical date or time,
  * how to derive itself from other fields, and how to merge with companion
    fields into something more significant (a bigger field, a date or a time).

The derivation graph therefore lives in code: each rule only ever asks its
context for the rules it depends on.
"""

from __future__ import annotations

from datetime import date, time
from enum import Enum
from typing import TYPE_CHECKING, Any, Optional, Tuple

from ..core.errors import InvalidArgumentError, OutOfRangeError
from ..core.types import PeriodUnit, ValueRange

if TYPE_CHECKING:
    from ..core.calendrical import Calendrical
    from ..core.merge import FieldMerger


class Source(Enum):
    """Where a resolved field value came from."""
    NO_INFO = "no-info"
    FROM_DATE = "date"
    FROM_TIME = "time"
    FROM_FIELDS = "fields"
    DERIVED = "derived"


class FieldRule:
    def __init__(
        self,
        name: str,
        period_unit: PeriodUnit,
        period_range: Optional[PeriodUnit],
        minimum: int,
        maximum: int,
        *,
        chronology: str = "ISO",
        largest_minimum: Optional[int] = None,
        smallest_maximum: Optional[int] = None,
        date_based: bool = False,
        time_based: bool = False,
    ):
        if not name:
            raise InvalidArgumentError("Rule name must not be empty")
        if minimum > maximum:
            raise InvalidArgumentError(f"Rule {name}: minimum {minimum} exceeds maximum {maximum}")
        self._chronology = chronology
        self._name = name
        self._id = f"{chronology}.{name}"
        self._period_unit = period_unit
        self._period_range = period_range
        self._minimum = minimum
        self._maximum = maximum
        self._largest_minimum = minimum if largest_minimum is None else largest_minimum
        self._smallest_maximum = maximum if smallest_maximum is None else smallest_maximum
        self._date_based = date_based
        self._time_based = time_based

    # ---------------------------------------------------------
    # Identity and metadata
    # ---------------------------------------------------------

    @property
    def id(self) -> str:
        return self._id

    @property
    def name(self) -> str:
        return self._name

    @property
    def chronology(self) -> str:
        return self._chronology

    @property
    def period_unit(self) -> PeriodUnit:
        return self._period_unit

    @property
    def period_range(self) -> Optional[PeriodUnit]:
        return self._period_range

    @property
    def minimum(self) -> int:
        return self._minimum

    @property
    def maximum(self) -> int:
        return self._maximum

    @property
    def largest_minimum(self) -> int:
        return self._largest_minimum

    @property
    def smallest_maximum(self) -> int:
        return self._smallest_maximum

    @property
    def is_date_based(self) -> bool:
        return self._date_based

    @property
    def is_time_based(self) -> bool:
        return self._time_based

    @property
    def order_key(self) -> Tuple[float, float, str]:
        """Larger units first, then larger ranges (unbounded first), then id."""
        rng = self._period_range.seconds if self._period_range is not None else float("inf")
        return (-self._period_unit.seconds, -rng, self._id)

    # ---------------------------------------------------------
    # Ranges
    # ---------------------------------------------------------

    def value_range(self, context: Optional["Calendrical"] = None) -> ValueRange:
        if context is None:
            return ValueRange(self._minimum, self._maximum)
        return self._context_range(context)

    def _context_range(self, context: "Calendrical") -> ValueRange:
        # override where the range depends on other fields
        return ValueRange(self._minimum, self._maximum)

    def is_valid_value(self, value: int) -> bool:
        return self._minimum <= value <= self._maximum

    def check_value(self, value: int, context: Optional["Calendrical"] = None) -> int:
        rng = self.value_range(context)
        if value not in rng:
            raise OutOfRangeError(self, value, rng)
        return value

    # ---------------------------------------------------------
    # Derivation
    # ---------------------------------------------------------

    def from_date(self, d: date) -> Optional[int]:
        return None

    def from_time(self, t: time) -> Optional[int]:
        return None

    def from_canonical(self, d: Optional[date], t: Optional[time]) -> Optional[int]:
        if self._date_based and d is not None:
            return self.from_date(d)
        if self._time_based and t is not None:
            return self.from_time(t)
        return None

    def derive_from(self, context: "Calendrical") -> Optional[int]:
        """Value of this field implied by the context, never read back from its own entry."""
        if context is None:
            raise InvalidArgumentError("Derivation context must not be None")
        value = self.from_canonical(context.date, context.time)
        if value is not None:
            return value
        return self.derive(context)

    def derive(self, context: "Calendrical") -> Optional[int]:
        # override if this field can be derived from other fields
        return None

    def merge(self, merger: "FieldMerger") -> None:
        # override if this field can merge into something more significant
        return None

    # ---------------------------------------------------------
    # Comparator
    # ---------------------------------------------------------

    def sort_key(self, calendrical: "Calendrical") -> Tuple[bool, int]:
        value = calendrical.derive_value_quiet(self)
        return (value is None, value if value is not None else 0)

    def compare(self, cal1: "Calendrical", cal2: "Calendrical") -> int:
        k1, k2 = self.sort_key(cal1), self.sort_key(cal2)
        return (k1 > k2) - (k1 < k2)

    # ---------------------------------------------------------

    def __reduce__(self) -> Tuple[Any, Tuple[str]]:
        from .registry import rule_for_id
        return (rule_for_id, (self._id,))

    def __str__(self) -> str:
        return self._id

    def __repr__(self) -> str:
        return f"FieldRule({self._id!r})"
