from __future__ import annotations
import re
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta, timezone
from enum import Enum
from typing import Dict, Optional

from .errors import InvalidArgumentError

MAX_OFFSET_SECONDS = 18 * 3600

_OFFSET_RE = re.compile(r"^([+-])(\d{2}):(\d{2})(?::(\d{2}))?$")


class PeriodUnit(Enum):
    """Units a field counts in, or the period it repeats within."""
    NANOS = "Nanos"
    MILLIS = "Millis"
    SECONDS = "Seconds"
    MINUTES = "Minutes"
    HOURS = "Hours"
    TWELVE_HOURS = "12Hours"
    DAYS = "Days"
    WEEKS = "Weeks"
    MONTHS = "Months"
    QUARTERS = "Quarters"
    YEARS = "Years"
    WEEK_BASED_YEARS = "WeekBasedYears"

    @property
    def seconds(self) -> float:
        """Estimated duration, used only to order units."""
        return _UNIT_SECONDS[self]

    def __str__(self) -> str:
        return self.value


_UNIT_SECONDS: Dict[PeriodUnit, float] = {
    PeriodUnit.NANOS: 1e-9,
    PeriodUnit.MILLIS: 1e-3,
    PeriodUnit.SECONDS: 1.0,
    PeriodUnit.MINUTES: 60.0,
    PeriodUnit.HOURS: 3600.0,
    PeriodUnit.TWELVE_HOURS: 43200.0,
    PeriodUnit.DAYS: 86400.0,
    PeriodUnit.WEEKS: 7 * 86400.0,
    PeriodUnit.MONTHS: 31556952.0 / 12,
    PeriodUnit.QUARTERS: 31556952.0 / 4,
    PeriodUnit.YEARS: 31556952.0,
    PeriodUnit.WEEK_BASED_YEARS: 31556952.0,
}


@dataclass(frozen=True)
class ValueRange:
    minimum: int
    maximum: int

    def __contains__(self, value: object) -> bool:
        return isinstance(value, int) and self.minimum <= value <= self.maximum

    def __str__(self) -> str:
        return f"[{self.minimum}, {self.maximum}]"


# ============================================================
# Offsets and zones
# ============================================================

@dataclass(frozen=True)
class ZoneOffset:
    """A fixed amount of time by which a zone differs from UTC."""
    total_seconds: int

    def __post_init__(self):
        if abs(self.total_seconds) > MAX_OFFSET_SECONDS:
            raise InvalidArgumentError(f"Zone offset {self.total_seconds}s is outside +/-18:00")

    @classmethod
    def of(cls, hours: int, minutes: int = 0, seconds: int = 0) -> "ZoneOffset":
        return cls(hours * 3600 + minutes * 60 + seconds)

    @classmethod
    def parse(cls, text: str) -> "ZoneOffset":
        if text == "Z":
            return cls(0)
        m = _OFFSET_RE.match(text)
        if m is None:
            raise InvalidArgumentError(f"Invalid zone offset '{text}'")
        sign = -1 if m.group(1) == "-" else 1
        total = int(m.group(2)) * 3600 + int(m.group(3)) * 60 + int(m.group(4) or 0)
        return cls(sign * total)

    @property
    def id(self) -> str:
        if self.total_seconds == 0:
            return "Z"
        sign = "-" if self.total_seconds < 0 else "+"
        h, rem = divmod(abs(self.total_seconds), 3600)
        m, s = divmod(rem, 60)
        out = f"{sign}{h:02d}:{m:02d}"
        if s:
            out += f":{s:02d}"
        return out

    def to_tzinfo(self) -> timezone:
        return timezone(timedelta(seconds=self.total_seconds))

    def __str__(self) -> str:
        return self.id


ZoneOffset.UTC = ZoneOffset(0)


@dataclass(frozen=True)
class TimeZone:
    """A time zone id. Region rules are not loaded; only fixed zones know their offset."""
    id: str
    fixed_offset: Optional[ZoneOffset] = None

    @classmethod
    def of(cls, offset: ZoneOffset) -> "TimeZone":
        if offset.total_seconds == 0:
            return cls("UTC", offset)
        return cls(f"UTC{offset.id}", offset)

    @classmethod
    def region(cls, zone_id: str) -> "TimeZone":
        if not zone_id:
            raise InvalidArgumentError("Time zone id must not be empty")
        return cls(zone_id)

    @property
    def is_fixed(self) -> bool:
        return self.fixed_offset is not None

    def __str__(self) -> str:
        return self.id


TimeZone.UTC = TimeZone("UTC", ZoneOffset.UTC)


# ============================================================
# Combined results of the conversion layer
# ============================================================

@dataclass(frozen=True)
class OffsetDate:
    date: date
    offset: ZoneOffset

    def to_local_date(self) -> date:
        return self.date

    def __str__(self) -> str:
        return f"{self.date.isoformat()}{self.offset}"


@dataclass(frozen=True)
class OffsetTime:
    time: time
    offset: ZoneOffset

    def to_local_time(self) -> time:
        return self.time

    def __str__(self) -> str:
        return f"{self.time.isoformat()}{self.offset}"


@dataclass(frozen=True)
class OffsetDateTime:
    date_time: datetime
    offset: ZoneOffset

    def to_local_date_time(self) -> datetime:
        return self.date_time

    def to_datetime(self) -> datetime:
        """Aware stdlib datetime carrying the offset."""
        return self.date_time.replace(tzinfo=self.offset.to_tzinfo())

    def __str__(self) -> str:
        return f"{self.date_time.isoformat()}{self.offset}"


@dataclass(frozen=True)
class ZonedDateTime:
    date_time: datetime
    offset: ZoneOffset
    zone: TimeZone

    def to_local_date_time(self) -> datetime:
        return self.date_time

    def to_offset_date_time(self) -> OffsetDateTime:
        return OffsetDateTime(self.date_time, self.offset)

    def __str__(self) -> str:
        return f"{self.date_time.isoformat()}{self.offset}[{self.zone}]"
