from __future__ import annotations
from collections.abc import Mapping
from datetime import date, time
from typing import Any, Dict, Iterable, Iterator, Optional, Tuple

from ..rules.base import FieldRule
from .errors import InvalidArgumentError


def _check_rule(rule: Any) -> FieldRule:
    if rule is None:
        raise InvalidArgumentError("Field rule must not be None")
    if not isinstance(rule, FieldRule):
        raise InvalidArgumentError(f"Expected a FieldRule, got {type(rule).__name__}")
    return rule


class FieldValueMap(Mapping):
    """
    Immutable map of field rule to integer value.

    Values are stored as given, so out-of-range values survive until
    `validate()` is called. Iteration follows rule order (larger periods first).
    """

    __slots__ = ("_values",)

    def __init__(self, values: Optional[Mapping] = None):
        pairs: Iterable[Tuple[Any, Any]] = values.items() if values is not None else ()
        self._values = self._build(pairs)

    @staticmethod
    def _build(pairs: Iterable[Tuple[Any, Any]]) -> Dict[FieldRule, int]:
        out: Dict[FieldRule, int] = {}
        for rule, value in pairs:
            out[_check_rule(rule)] = int(value)
        return dict(sorted(out.items(), key=lambda kv: kv[0].order_key))

    @classmethod
    def of(cls, *rule_values: Any) -> "FieldValueMap":
        """Build from alternating rule, value arguments; later duplicates win."""
        if len(rule_values) % 2:
            raise InvalidArgumentError("Expected rule, value pairs")
        out = cls.__new__(cls)
        out._values = cls._build(zip(rule_values[0::2], rule_values[1::2]))
        return out

    # ---------------------------------------------------------
    # Mapping protocol
    # ---------------------------------------------------------

    def __getitem__(self, rule: FieldRule) -> int:
        return self._values[rule]

    def __iter__(self) -> Iterator[FieldRule]:
        return iter(self._values)

    def __len__(self) -> int:
        return len(self._values)

    def size(self) -> int:
        return len(self._values)

    def get(self, rule: Optional[FieldRule], default: Optional[int] = None) -> Optional[int]:
        if rule is None:
            return default
        return self._values.get(rule, default)

    # ---------------------------------------------------------
    # Copy-on-write updates
    # ---------------------------------------------------------

    def with_value(self, rule: FieldRule, value: int) -> "FieldValueMap":
        _check_rule(rule)
        if self._values.get(rule) == value:
            return self
        values = dict(self._values)
        values[rule] = value
        return FieldValueMap(values)

    def with_fields(self, other: Mapping) -> "FieldValueMap":
        if not other:
            return self
        values = dict(self._values)
        for rule, value in other.items():
            values[_check_rule(rule)] = value
        return FieldValueMap(values)

    def without(self, *rules: FieldRule) -> "FieldValueMap":
        if not any(r in self._values for r in rules):
            return self
        return FieldValueMap({r: v for r, v in self._values.items() if r not in rules})

    # ---------------------------------------------------------
    # Validation
    # ---------------------------------------------------------

    def validate(self) -> "FieldValueMap":
        for rule, value in self._values.items():
            rule.check_value(value)
        return self

    def is_valid(self) -> bool:
        return all(rule.is_valid_value(value) for rule, value in self._values.items())

    def matches_date(self, d: date) -> bool:
        """True if every date-based field here agrees with the date."""
        return all(
            rule.from_date(d) == value
            for rule, value in self._values.items()
            if rule.is_date_based
        )

    def matches_time(self, t: time) -> bool:
        return all(
            rule.from_time(t) == value
            for rule, value in self._values.items()
            if rule.is_time_based
        )

    # ---------------------------------------------------------

    def to_dict(self) -> Dict[FieldRule, int]:
        return dict(self._values)

    def __eq__(self, other: object) -> bool:
        if isinstance(other, FieldValueMap):
            return self._values == other._values
        return NotImplemented

    def __hash__(self) -> int:
        return hash(frozenset(self._values.items()))

    def __reduce__(self):
        return (FieldValueMap, (self._values,))

    def __str__(self) -> str:
        inner = ", ".join(f"{rule.name}={value}" for rule, value in self._values.items())
        return "{" + inner + "}"

    def __repr__(self) -> str:
        return f"FieldValueMap({self})"


EMPTY_FIELDS = FieldValueMap()
