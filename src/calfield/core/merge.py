"""
calfield.core.merge
-------------------
The merge engine. Reduces a field map by promoting fields into more
significant ones (quarter + month-of-quarter -> month-of-year), into a date
or a time, and then discarding whatever the merged result already implies.

Each rule owns its merge step (`FieldRule.merge`); the merger only loops until
no rule produces anything new, records what was consumed, and cross-checks the
leftovers.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, time, timedelta
from typing import TYPE_CHECKING, Dict, FrozenSet, NamedTuple, Optional, Set

from ..rules.base import FieldRule
from ..rules.iso import TRUSTED_CORE
from .errors import CalfieldError, FieldUnsupportedError, InconsistentError, InvalidArgumentError, OutOfRangeError
from .fields import FieldValueMap
from .logging import get_logger
from .time import MAX_JDN, MIN_JDN, from_jdn, split_nano_of_day

if TYPE_CHECKING:
    from .calendrical import Calendrical

logger = get_logger(__name__)

MAX_ROUNDS = 100


@dataclass(frozen=True)
class MergeContext:
    """
    strict:              validate values against their ranges; otherwise let them roll over.
    check_unused_fields: a leftover field that disagrees with the merged result is an error;
                         otherwise it is dropped.
    trusted:             fields that are an error on disagreement even when unused fields
                         are not checked.
    """
    strict: bool = True
    check_unused_fields: bool = True
    trusted: FrozenSet[FieldRule] = field(default_factory=frozenset)

    def verifies(self, rule: FieldRule) -> bool:
        return self.check_unused_fields or rule in self.trusted


MergeContext.STRICT = MergeContext(strict=True, check_unused_fields=True)
MergeContext.LENIENT = MergeContext(strict=False, check_unused_fields=False, trusted=TRUSTED_CORE)


class MergedTime(NamedTuple):
    time: time
    overflow_days: int = 0


class FieldMerger:
    def __init__(
        self,
        fields: FieldValueMap,
        context: MergeContext,
        *,
        date: Optional[date] = None,
        time: Optional[time] = None,
    ):
        if fields is None:
            raise InvalidArgumentError("The field-value map must not be None")
        if context is None:
            raise InvalidArgumentError("The merge context must not be None")
        self.original_fields = fields
        self.context = context
        self._values: Dict[FieldRule, int] = fields.to_dict()
        self._processed: Set[FieldRule] = set()
        self._changed = False
        self.merged_date: Optional[date] = date
        self.merged_time: Optional[MergedTime] = MergedTime(time) if time is not None else None

    @property
    def is_strict(self) -> bool:
        return self.context.strict

    @property
    def processed_rules(self) -> FrozenSet[FieldRule]:
        return frozenset(self._processed)

    # ---------------------------------------------------------
    # Access used by rule merge hooks
    # ---------------------------------------------------------

    def get(self, rule: FieldRule) -> Optional[int]:
        if rule is None:
            raise InvalidArgumentError("Field rule must not be None")
        return self._values.get(rule)

    def get_value(self, rule: FieldRule) -> int:
        value = self.get(rule)
        if value is None:
            raise FieldUnsupportedError(rule)
        return value

    def as_context(self) -> "Calendrical":
        from .calendrical import Calendrical
        return Calendrical(FieldValueMap(self._values))

    def checked(self, rule: FieldRule, value: int) -> int:
        """In strict mode, check the value against its range given the current fields."""
        if self.is_strict:
            rule.check_value(value, self.as_context())
        return value

    def date_from_jdn(self, jdn: int, rule: FieldRule) -> date:
        if not (MIN_JDN <= jdn <= MAX_JDN):
            raise OutOfRangeError(rule, self._values.get(rule, 0))
        return from_jdn(jdn)

    def mark_processed(self, *rules: FieldRule) -> None:
        for rule in rules:
            if rule is None:
                raise InvalidArgumentError("Field rule must not be None")
            self._processed.add(rule)

    # ---------------------------------------------------------
    # Storing results
    # ---------------------------------------------------------

    def store_merged_date(self, d: date, rule: FieldRule) -> None:
        if self.merged_date is not None and self.merged_date != d:
            raise InconsistentError(
                rule,
                f"Merge resulted in two different dates, {self.merged_date} and {d}, "
                f"for input fields {self.original_fields}",
            )
        # storing a date never enables further merges, so no change flag
        self.merged_date = d

    def store_merged_time(self, merged: MergedTime, rule: FieldRule) -> None:
        if self.merged_time is not None and self.merged_time != merged:
            raise InconsistentError(
                rule,
                f"Merge resulted in two different times, {self.merged_time.time} and {merged.time}, "
                f"for input fields {self.original_fields}",
            )
        self.merged_time = merged

    def store_merged_nano_of_day(self, nanos: int, rule: FieldRule) -> None:
        days, t = split_nano_of_day(nanos)
        self.store_merged_time(MergedTime(t, days), rule)

    def store_merged_field(self, rule: FieldRule, value: int) -> None:
        old = self._values.get(rule)
        if old is not None:
            if old != value:
                raise InconsistentError(
                    rule,
                    f"Merge resulted in two different values, {value} and {old}, "
                    f"for {rule.id} within input fields {self.original_fields}",
                )
            return
        self._values[rule] = value
        self._changed = True

    # ---------------------------------------------------------
    # Results
    # ---------------------------------------------------------

    @property
    def result_date(self) -> Optional[date]:
        if self.merged_date is not None and self.merged_time is not None and self.merged_time.overflow_days:
            return self.merged_date + timedelta(days=self.merged_time.overflow_days)
        return self.merged_date

    @property
    def result_time(self) -> Optional[time]:
        return self.merged_time.time if self.merged_time is not None else None

    def merged_fields(self) -> FieldValueMap:
        return FieldValueMap(self._values)

    # ---------------------------------------------------------
    # The merge
    # ---------------------------------------------------------

    def merge(self) -> "FieldMerger":
        if self._values:
            # fields the date or time slots already answer never take part in the loop
            self._check_canonical_fields(self.merged_date, self.result_time)
            # keep all fields during the loop so later rules can still see them
            self._merge_loop()
            for rule in self._processed:
                self._values.pop(rule, None)
            self._check_derivable_fields()
        logger.debug(
            "merge_completed",
            fields=str(self.original_fields),
            strict=self.is_strict,
            date=str(self.result_date) if self.result_date else None,
            time=str(self.result_time) if self.result_time else None,
            remaining=str(self.merged_fields()),
        )
        return self

    def _merge_loop(self) -> None:
        self._processed.clear()
        for _ in range(MAX_ROUNDS):
            self._changed = False
            for rule in sorted(self._values, key=lambda r: r.order_key):
                rule.merge(self)
            if not self._changed:
                return
        raise CalfieldError("Merge failed, infinite loop blocked, probably caused by an incorrectly implemented field rule")

    def _check_canonical_fields(self, d: Optional[date], t: Optional[time]) -> None:
        if d is None and t is None:
            return
        for rule, value in list(self._values.items()):
            merged_value = rule.from_canonical(d, t)
            if merged_value is not None:
                self._resolve_leftover(rule, value, merged_value)

    def _check_derivable_fields(self) -> None:
        self._check_canonical_fields(self.result_date, self.result_time)

        for rule, value in list(self._values.items()):
            merged_value = rule.derive(self.as_context())
            if merged_value is not None:
                self._resolve_leftover(rule, value, merged_value)

    def _resolve_leftover(self, rule: FieldRule, value: int, merged_value: int) -> None:
        if merged_value == value:
            del self._values[rule]
        elif not self.context.verifies(rule):
            logger.debug("field_dropped", rule=rule.id, value=value, merged_value=merged_value)
            del self._values[rule]
        else:
            raise InconsistentError(
                rule,
                f"Merge resulted in a value {merged_value} that is inconsistent with the input value "
                f"{value} for {rule.id} within input fields {self.original_fields}",
            )
