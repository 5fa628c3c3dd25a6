"""
calfield.core.calendrical
-------------------------
The Calendrical: everything known about a moment, held in four independent,
optional slots (a field map, a date, a time, an offset and a zone) behind a
single field-access API.

Resolution order for a field:
  1. the date slot, for date-based rules
  2. the time slot, for time-based rules
  3. the field map, if it stores the rule directly
  4. the rule's own derivation over the field map alone
Values are returned as stored; range checks happen only on request.
"""

from __future__ import annotations

import pickle
from collections.abc import Mapping
from dataclasses import dataclass, replace
from datetime import date, datetime, time
from typing import Any, FrozenSet, NamedTuple, Optional

from ..rules.base import FieldRule, Source
from ..rules.iso import DATE_FIELDS, TIME_FIELDS
from .errors import (
    CalfieldError,
    ConversionFailedError,
    FieldUnsupportedError,
    InconsistentError,
    InvalidArgumentError,
)
from .fields import EMPTY_FIELDS, FieldValueMap
from .logging import get_logger
from .merge import FieldMerger, MergeContext
from .types import OffsetDate, OffsetDateTime, OffsetTime, TimeZone, ZonedDateTime, ZoneOffset

logger = get_logger(__name__)


class Resolution(NamedTuple):
    source: Source
    value: Optional[int] = None


_NO_INFO = Resolution(Source.NO_INFO)


@dataclass(frozen=True, eq=False, repr=False)
class Calendrical:
    fields: FieldValueMap = EMPTY_FIELDS
    date: Optional[date] = None
    time: Optional[time] = None
    offset: Optional[ZoneOffset] = None
    zone: Optional[TimeZone] = None

    def __post_init__(self):
        if self.fields is None:
            object.__setattr__(self, "fields", EMPTY_FIELDS)
        elif not isinstance(self.fields, FieldValueMap):
            if not isinstance(self.fields, Mapping):
                raise InvalidArgumentError(f"Expected a field map, got {type(self.fields).__name__}")
            object.__setattr__(self, "fields", FieldValueMap(self.fields))
        if isinstance(self.date, datetime):
            raise InvalidArgumentError("Use separate date and time slots, not a datetime")
        for slot, kind in (("date", date), ("time", time), ("offset", ZoneOffset), ("zone", TimeZone)):
            value = getattr(self, slot)
            if value is not None and not isinstance(value, kind):
                raise InvalidArgumentError(
                    f"The {slot} slot takes a {kind.__name__}, got {type(value).__name__}"
                )

    @classmethod
    def of(cls, *rule_values: Any) -> "Calendrical":
        """Calendrical.of(YEAR, 2008, MONTH_OF_YEAR, 6)"""
        return cls(FieldValueMap.of(*rule_values))

    # ---------------------------------------------------------
    # Immutable updates
    # ---------------------------------------------------------

    def with_fields(self, fields: Optional[FieldValueMap]) -> "Calendrical":
        fields = fields if fields is not None else EMPTY_FIELDS
        if fields == self.fields:
            return self
        return replace(self, fields=fields)

    def with_date(self, d: Optional[date]) -> "Calendrical":
        return self if d == self.date else replace(self, date=d)

    def with_time(self, t: Optional[time]) -> "Calendrical":
        return self if t == self.time else replace(self, time=t)

    def with_offset(self, offset: Optional[ZoneOffset]) -> "Calendrical":
        return self if offset == self.offset else replace(self, offset=offset)

    def with_zone(self, zone: Optional[TimeZone]) -> "Calendrical":
        return self if zone == self.zone else replace(self, zone=zone)

    def is_empty(self) -> bool:
        return not self.fields and self.date is None and self.time is None \
            and self.offset is None and self.zone is None

    # ---------------------------------------------------------
    # Derivation engine
    # ---------------------------------------------------------

    def _field_context(self) -> "Calendrical":
        if self.date is None and self.time is None:
            return self
        return Calendrical(self.fields)

    def resolve(self, rule: Optional[FieldRule]) -> Resolution:
        if rule is None:
            return _NO_INFO
        if self.date is not None and rule.is_date_based:
            value = rule.from_date(self.date)
            if value is not None:
                return Resolution(Source.FROM_DATE, value)
        if self.time is not None and rule.is_time_based:
            value = rule.from_time(self.time)
            if value is not None:
                return Resolution(Source.FROM_TIME, value)
        value = self.fields.get(rule)
        if value is not None:
            return Resolution(Source.FROM_FIELDS, value)
        if self.fields:
            value = rule.derive_from(self._field_context())
            if value is not None:
                return Resolution(Source.DERIVED, value)
        return _NO_INFO

    def is_derivable(self, rule: Optional[FieldRule]) -> bool:
        return self.resolve(rule).source is not Source.NO_INFO

    def derive_value(self, rule: FieldRule, *, validate: bool = False) -> int:
        if rule is None:
            raise InvalidArgumentError("Field rule must not be None")
        res = self.resolve(rule)
        if res.source is Source.NO_INFO:
            raise FieldUnsupportedError(rule)
        if validate:
            rule.check_value(res.value, self)
        return res.value

    def derive_value_quiet(self, rule: Optional[FieldRule]) -> Optional[int]:
        return self.resolve(rule).value

    # ---------------------------------------------------------
    # Consistency checker
    # ---------------------------------------------------------

    def check_consistent(self) -> None:
        for rule, value in self.fields.items():
            canonical = rule.from_canonical(self.date, self.time)
            if canonical is not None and canonical != value:
                logger.debug("inconsistent_field", rule=rule.id, value=value, canonical=canonical)
                raise InconsistentError(
                    rule,
                    f"Field {rule.id}={value} disagrees with value {canonical} from {self._canonical_text()}",
                )

    def _canonical_text(self) -> str:
        return " ".join(x.isoformat() for x in (self.date, self.time) if x is not None)

    # ---------------------------------------------------------
    # Merge engine
    # ---------------------------------------------------------

    def remove_derivable(self) -> "Calendrical":
        """Drop every field whose value is implied by the date, the time or the other fields."""
        values = self.fields.to_dict()
        changed = True
        while changed:
            changed = False
            for rule in list(values):
                value = values[rule]
                derived = rule.from_canonical(self.date, self.time)
                if derived is None:
                    others = FieldValueMap({r: v for r, v in values.items() if r is not rule})
                    derived = rule.derive_from(Calendrical(others))
                if derived is not None and derived == value:
                    logger.debug("derivable_removed", rule=rule.id, value=value)
                    del values[rule]
                    changed = True
        return self.with_fields(FieldValueMap(values))

    def merge(self, context: MergeContext) -> "Calendrical":
        merger = FieldMerger(self.fields, context, date=self.date, time=self.time).merge()
        return Calendrical(
            merger.merged_fields(),
            merger.result_date,
            merger.result_time,
            self.offset,
            self.zone,
        )

    def merge_strict(self) -> "Calendrical":
        return self.merge(MergeContext.STRICT)

    def merge_lenient(self, context: MergeContext = MergeContext.LENIENT) -> "Calendrical":
        """
        Merge letting out-of-range values roll over. A time that rolls past
        midnight moves the date forward; with no date, merged or in the slot,
        the overflow days are discarded and only the time of day is kept.
        """
        return self.merge(context)

    # ---------------------------------------------------------
    # Conversion layer
    # ---------------------------------------------------------

    def _merged_for(self, target: str) -> "Calendrical":
        if self.is_empty():
            raise ConversionFailedError(f"Cannot convert to {target}: no information available")
        try:
            return self.merge_strict()
        except CalfieldError as ex:
            logger.debug("conversion_failed", target=target, calendrical=str(self), error=str(ex))
            raise ConversionFailedError(f"Cannot convert {self} to {target}: {ex}") from ex

    def _require_offset(self, target: str) -> ZoneOffset:
        if self.offset is None:
            raise ConversionFailedError(f"Cannot convert {self} to {target}: no offset available")
        return self.offset

    def to_local_date(self) -> date:
        if self.date is not None:
            return self.date
        merged = self._merged_for("LocalDate")
        if merged.date is None:
            raise ConversionFailedError(f"Cannot convert {self} to LocalDate: insufficient fields")
        return merged.date

    def to_local_time(self) -> time:
        if self.time is not None:
            return self.time
        merged = self._merged_for("LocalTime")
        if merged.time is None:
            raise ConversionFailedError(f"Cannot convert {self} to LocalTime: insufficient fields")
        return merged.time

    def to_local_date_time(self) -> datetime:
        if self.date is not None and self.time is not None:
            return datetime.combine(self.date, self.time)
        merged = self._merged_for("LocalDateTime")
        if merged.date is None or merged.time is None:
            raise ConversionFailedError(f"Cannot convert {self} to LocalDateTime: insufficient fields")
        return datetime.combine(merged.date, merged.time)

    def to_offset_date(self) -> OffsetDate:
        offset = self._require_offset("OffsetDate")
        return OffsetDate(self.to_local_date(), offset)

    def to_offset_time(self) -> OffsetTime:
        offset = self._require_offset("OffsetTime")
        return OffsetTime(self.to_local_time(), offset)

    def to_offset_date_time(self) -> OffsetDateTime:
        offset = self._require_offset("OffsetDateTime")
        return OffsetDateTime(self.to_local_date_time(), offset)

    def to_zoned_date_time(self) -> ZonedDateTime:
        offset = self._require_offset("ZonedDateTime")
        if self.zone is None:
            raise ConversionFailedError(f"Cannot convert {self} to ZonedDateTime: no time zone available")
        if self.zone.is_fixed and self.zone.fixed_offset != offset:
            raise ConversionFailedError(
                f"Cannot convert {self} to ZonedDateTime: offset {offset} is not valid for zone {self.zone}"
            )
        return ZonedDateTime(self.to_local_date_time(), offset, self.zone)

    def to_date_time_fields(self) -> FieldValueMap:
        return self.fields

    def to_calendrical(self) -> "Calendrical":
        return replace(self)

    # ---------------------------------------------------------
    # Snapshots
    # ---------------------------------------------------------

    def to_bytes(self) -> bytes:
        return pickle.dumps(self, protocol=pickle.HIGHEST_PROTOCOL)

    @classmethod
    def from_bytes(cls, data: bytes) -> "Calendrical":
        obj = pickle.loads(data)
        if not isinstance(obj, cls):
            raise InvalidArgumentError(f"Snapshot holds {type(obj).__name__}, not {cls.__name__}")
        return obj

    # ---------------------------------------------------------
    # Equality is over effective field values, not slots
    # ---------------------------------------------------------

    def _primary_rules(self) -> FrozenSet[FieldRule]:
        rules = set(self.fields)
        if self.date is not None:
            rules.update(DATE_FIELDS)
        if self.time is not None:
            rules.update(TIME_FIELDS)
        return frozenset(rules)

    def __eq__(self, other: object) -> bool:
        if self is other:
            return True
        if not isinstance(other, Calendrical):
            return NotImplemented
        if self.offset != other.offset or self.zone != other.zone:
            return False
        rules = self._primary_rules() | other._primary_rules()
        return all(self.derive_value_quiet(r) == other.derive_value_quiet(r) for r in rules)

    def __hash__(self) -> int:
        # only rules that are never derived from other fields, so equal instances agree
        return hash((self.offset, self.zone, tuple(self.derive_value_quiet(r) for r in DATE_FIELDS)))

    def __str__(self) -> str:
        parts = []
        if self.fields:
            parts.append(str(self.fields))
        if self.date is not None:
            parts.append(self.date.isoformat())
        if self.time is not None:
            parts.append(self.time.isoformat())
        if self.offset is not None:
            parts.append(str(self.offset))
        if self.zone is not None:
            parts.append(str(self.zone))
        return " ".join(parts) or "{}"

    def __repr__(self) -> str:
        return f"Calendrical({self})"
