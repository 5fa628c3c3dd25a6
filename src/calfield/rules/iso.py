"""
calfield.rules.iso
------------------
The ISO-8601 chronology: one singleton rule per field, registered on import.

Date-based rules read themselves from a `datetime.date`, time-based rules from a
`datetime.time`. Field-to-field derivations:
  QuarterOfYear, MonthOfQuarter  <- MonthOfYear
  AmPmOfDay, HourOfAmPm          <- HourOfDay
  HourOfDay, MinuteOfHour,
  SecondOfMinute, NanoOfSecond   <- MilliOfDay
Merges (towards more significant information):
  QuarterOfYear + MonthOfQuarter                 -> MonthOfYear
  AmPmOfDay + HourOfAmPm                         -> HourOfDay
  Year + MonthOfYear + DayOfMonth                -> date
  Year + DayOfYear                               -> date
  WeekBasedYear + WeekOfWeekBasedYear + DayOfWeek -> date
  HourOfDay [+ MinuteOfHour + SecondOfMinute + NanoOfSecond] -> time
  MilliOfDay                                     -> time
"""

from __future__ import annotations

from datetime import date, time
from typing import TYPE_CHECKING, Optional

from ..core.errors import OutOfRangeError
from ..core.time import (
    MAX_YEAR,
    MILLIS_PER_DAY,
    MIN_YEAR,
    lenient_jdn,
    lenient_week_date_jdn,
    lenient_year_day_jdn,
    milli_of_day,
    month_length,
    nano_of_day,
    weeks_in_week_based_year,
    year_length,
)
from ..core.types import PeriodUnit, ValueRange
from .base import FieldRule
from .registry import register_rule

if TYPE_CHECKING:
    from ..core.calendrical import Calendrical
    from ..core.merge import FieldMerger

CHRONOLOGY = "ISO"


def _valid(rule: FieldRule, value: Optional[int]) -> Optional[int]:
    if value is None or not rule.is_valid_value(value):
        return None
    return value


def _context_value(context: "Calendrical", rule: FieldRule) -> Optional[int]:
    return _valid(rule, context.derive_value_quiet(rule))


# ============================================================
# Date fields
# ============================================================

class _YearRule(FieldRule):
    def __init__(self):
        super().__init__("Year", PeriodUnit.YEARS, None, MIN_YEAR, MAX_YEAR, date_based=True)

    def from_date(self, d: date) -> Optional[int]:
        return d.year

    def merge(self, merger: "FieldMerger") -> None:
        year = merger.get_value(self)
        moy = merger.get(MONTH_OF_YEAR)
        dom = merger.get(DAY_OF_MONTH)
        if moy is not None and dom is not None:
            if merger.is_strict:
                merger.checked(self, year)
                merger.checked(MONTH_OF_YEAR, moy)
                merger.checked(DAY_OF_MONTH, dom)
                d = date(year, moy, dom)
            else:
                d = merger.date_from_jdn(lenient_jdn(year, moy, dom), self)
            merger.store_merged_date(d, self)
            merger.mark_processed(self, MONTH_OF_YEAR, DAY_OF_MONTH)

        doy = merger.get(DAY_OF_YEAR)
        if doy is not None:
            if merger.is_strict:
                merger.checked(self, year)
                merger.checked(DAY_OF_YEAR, doy)
                d = date.fromordinal(date(year, 1, 1).toordinal() + doy - 1)
            else:
                d = merger.date_from_jdn(lenient_year_day_jdn(year, doy), self)
            merger.store_merged_date(d, DAY_OF_YEAR)
            merger.mark_processed(self, DAY_OF_YEAR)


class _QuarterOfYearRule(FieldRule):
    def __init__(self):
        super().__init__("QuarterOfYear", PeriodUnit.QUARTERS, PeriodUnit.YEARS, 1, 4, date_based=True)

    def from_date(self, d: date) -> Optional[int]:
        return (d.month - 1) // 3 + 1

    def derive(self, context: "Calendrical") -> Optional[int]:
        moy = _context_value(context, MONTH_OF_YEAR)
        return (moy - 1) // 3 + 1 if moy is not None else None

    def merge(self, merger: "FieldMerger") -> None:
        moq = merger.get(MONTH_OF_QUARTER)
        if moq is None:
            return
        qoy = merger.get_value(self)
        if merger.is_strict:
            merger.checked(self, qoy)
            merger.checked(MONTH_OF_QUARTER, moq)
        merger.store_merged_field(MONTH_OF_YEAR, (qoy - 1) * 3 + moq)
        merger.mark_processed(self, MONTH_OF_QUARTER)


class _MonthOfQuarterRule(FieldRule):
    def __init__(self):
        super().__init__("MonthOfQuarter", PeriodUnit.MONTHS, PeriodUnit.QUARTERS, 1, 3, date_based=True)

    def from_date(self, d: date) -> Optional[int]:
        return (d.month - 1) % 3 + 1

    def derive(self, context: "Calendrical") -> Optional[int]:
        moy = _context_value(context, MONTH_OF_YEAR)
        return (moy - 1) % 3 + 1 if moy is not None else None


class _MonthOfYearRule(FieldRule):
    def __init__(self):
        super().__init__("MonthOfYear", PeriodUnit.MONTHS, PeriodUnit.YEARS, 1, 12, date_based=True)

    def from_date(self, d: date) -> Optional[int]:
        return d.month


class _DayOfMonthRule(FieldRule):
    def __init__(self):
        super().__init__(
            "DayOfMonth", PeriodUnit.DAYS, PeriodUnit.MONTHS, 1, 31,
            smallest_maximum=28, date_based=True,
        )

    def from_date(self, d: date) -> Optional[int]:
        return d.day

    def _context_range(self, context: "Calendrical") -> ValueRange:
        moy = _context_value(context, MONTH_OF_YEAR)
        if moy is None:
            return ValueRange(1, 31)
        year = _context_value(context, YEAR)
        return ValueRange(1, month_length(moy, year))


class _DayOfYearRule(FieldRule):
    def __init__(self):
        super().__init__(
            "DayOfYear", PeriodUnit.DAYS, PeriodUnit.YEARS, 1, 366,
            smallest_maximum=365, date_based=True,
        )

    def from_date(self, d: date) -> Optional[int]:
        return d.timetuple().tm_yday

    def _context_range(self, context: "Calendrical") -> ValueRange:
        year = _context_value(context, YEAR)
        return ValueRange(1, year_length(year) if year is not None else 366)


class _DayOfWeekRule(FieldRule):
    def __init__(self):
        super().__init__("DayOfWeek", PeriodUnit.DAYS, PeriodUnit.WEEKS, 1, 7, date_based=True)

    def from_date(self, d: date) -> Optional[int]:
        # Monday=1 .. Sunday=7
        return d.isoweekday()


class _WeekBasedYearRule(FieldRule):
    def __init__(self):
        super().__init__("WeekBasedYear", PeriodUnit.WEEK_BASED_YEARS, None, MIN_YEAR, MAX_YEAR, date_based=True)

    def from_date(self, d: date) -> Optional[int]:
        return d.isocalendar()[0]

    def merge(self, merger: "FieldMerger") -> None:
        week = merger.get(WEEK_OF_WEEK_BASED_YEAR)
        dow = merger.get(DAY_OF_WEEK)
        if week is None or dow is None:
            return
        wby = merger.get_value(self)
        if merger.is_strict:
            merger.checked(self, wby)
            merger.checked(WEEK_OF_WEEK_BASED_YEAR, week)
            merger.checked(DAY_OF_WEEK, dow)
            try:
                d = date.fromisocalendar(wby, week, dow)
            except ValueError:
                raise OutOfRangeError(self, wby) from None
        else:
            d = merger.date_from_jdn(lenient_week_date_jdn(wby, week, dow), self)
        merger.store_merged_date(d, self)
        merger.mark_processed(self, WEEK_OF_WEEK_BASED_YEAR, DAY_OF_WEEK)


class _WeekOfWeekBasedYearRule(FieldRule):
    def __init__(self):
        super().__init__(
            "WeekOfWeekBasedYear", PeriodUnit.WEEKS, PeriodUnit.WEEK_BASED_YEARS, 1, 53,
            smallest_maximum=52, date_based=True,
        )

    def from_date(self, d: date) -> Optional[int]:
        return d.isocalendar()[1]

    def _context_range(self, context: "Calendrical") -> ValueRange:
        wby = _context_value(context, WEEK_BASED_YEAR)
        return ValueRange(1, weeks_in_week_based_year(wby) if wby is not None else 53)


# ============================================================
# Time fields
# ============================================================

class _HourOfDayRule(FieldRule):
    def __init__(self):
        super().__init__("HourOfDay", PeriodUnit.HOURS, PeriodUnit.DAYS, 0, 23, time_based=True)

    def from_time(self, t: time) -> Optional[int]:
        return t.hour

    def derive(self, context: "Calendrical") -> Optional[int]:
        milli = _context_value(context, MILLI_OF_DAY)
        return milli // 3_600_000 if milli is not None else None

    def merge(self, merger: "FieldMerger") -> None:
        hour = merger.get_value(self)
        minute = merger.get(MINUTE_OF_HOUR)
        second = merger.get(SECOND_OF_MINUTE)
        nano = merger.get(NANO_OF_SECOND)
        if merger.is_strict:
            merger.checked(self, hour)
            for rule, value in ((MINUTE_OF_HOUR, minute), (SECOND_OF_MINUTE, second), (NANO_OF_SECOND, nano)):
                if value is not None:
                    merger.checked(rule, value)
        merger.store_merged_nano_of_day(
            nano_of_day(hour, minute or 0, second or 0, nano or 0), self,
        )
        merger.mark_processed(self, MINUTE_OF_HOUR, SECOND_OF_MINUTE, NANO_OF_SECOND)


class _AmPmOfDayRule(FieldRule):
    def __init__(self):
        super().__init__("AmPmOfDay", PeriodUnit.TWELVE_HOURS, PeriodUnit.DAYS, 0, 1, time_based=True)

    def from_time(self, t: time) -> Optional[int]:
        # AM=0, PM=1
        return t.hour // 12

    def derive(self, context: "Calendrical") -> Optional[int]:
        hour = _context_value(context, HOUR_OF_DAY)
        return hour // 12 if hour is not None else None

    def merge(self, merger: "FieldMerger") -> None:
        hoa = merger.get(HOUR_OF_AMPM)
        if hoa is None:
            return
        ampm = merger.get_value(self)
        if merger.is_strict:
            merger.checked(self, ampm)
            merger.checked(HOUR_OF_AMPM, hoa)
        merger.store_merged_field(HOUR_OF_DAY, ampm * 12 + hoa)
        merger.mark_processed(self, HOUR_OF_AMPM)


class _HourOfAmPmRule(FieldRule):
    def __init__(self):
        super().__init__("HourOfAmPm", PeriodUnit.HOURS, PeriodUnit.TWELVE_HOURS, 0, 11, time_based=True)

    def from_time(self, t: time) -> Optional[int]:
        return t.hour % 12

    def derive(self, context: "Calendrical") -> Optional[int]:
        hour = _context_value(context, HOUR_OF_DAY)
        return hour % 12 if hour is not None else None


class _MinuteOfHourRule(FieldRule):
    def __init__(self):
        super().__init__("MinuteOfHour", PeriodUnit.MINUTES, PeriodUnit.HOURS, 0, 59, time_based=True)

    def from_time(self, t: time) -> Optional[int]:
        return t.minute

    def derive(self, context: "Calendrical") -> Optional[int]:
        milli = _context_value(context, MILLI_OF_DAY)
        return (milli // 60_000) % 60 if milli is not None else None


class _SecondOfMinuteRule(FieldRule):
    def __init__(self):
        super().__init__("SecondOfMinute", PeriodUnit.SECONDS, PeriodUnit.MINUTES, 0, 59, time_based=True)

    def from_time(self, t: time) -> Optional[int]:
        return t.second

    def derive(self, context: "Calendrical") -> Optional[int]:
        milli = _context_value(context, MILLI_OF_DAY)
        return (milli // 1000) % 60 if milli is not None else None


class _NanoOfSecondRule(FieldRule):
    def __init__(self):
        super().__init__("NanoOfSecond", PeriodUnit.NANOS, PeriodUnit.SECONDS, 0, 999_999_999, time_based=True)

    def from_time(self, t: time) -> Optional[int]:
        return t.microsecond * 1000

    def derive(self, context: "Calendrical") -> Optional[int]:
        milli = _context_value(context, MILLI_OF_DAY)
        return (milli % 1000) * 1_000_000 if milli is not None else None


class _MilliOfDayRule(FieldRule):
    def __init__(self):
        super().__init__("MilliOfDay", PeriodUnit.MILLIS, PeriodUnit.DAYS, 0, MILLIS_PER_DAY - 1, time_based=True)

    def from_time(self, t: time) -> Optional[int]:
        return milli_of_day(t)

    def merge(self, merger: "FieldMerger") -> None:
        milli = merger.get_value(self)
        if merger.is_strict:
            merger.checked(self, milli)
        merger.store_merged_nano_of_day(milli * 1_000_000, self)
        merger.mark_processed(self)


# ============================================================
# Singletons
# ============================================================

YEAR = register_rule(_YearRule())
QUARTER_OF_YEAR = register_rule(_QuarterOfYearRule())
MONTH_OF_QUARTER = register_rule(_MonthOfQuarterRule())
MONTH_OF_YEAR = register_rule(_MonthOfYearRule())
DAY_OF_MONTH = register_rule(_DayOfMonthRule())
DAY_OF_YEAR = register_rule(_DayOfYearRule())
DAY_OF_WEEK = register_rule(_DayOfWeekRule())
WEEK_BASED_YEAR = register_rule(_WeekBasedYearRule())
WEEK_OF_WEEK_BASED_YEAR = register_rule(_WeekOfWeekBasedYearRule())

HOUR_OF_DAY = register_rule(_HourOfDayRule())
AMPM_OF_DAY = register_rule(_AmPmOfDayRule())
HOUR_OF_AMPM = register_rule(_HourOfAmPmRule())
MINUTE_OF_HOUR = register_rule(_MinuteOfHourRule())
SECOND_OF_MINUTE = register_rule(_SecondOfMinuteRule())
NANO_OF_SECOND = register_rule(_NanoOfSecondRule())
MILLI_OF_DAY = register_rule(_MilliOfDayRule())

# Fields a lenient merge still refuses to drop when they disagree.
TRUSTED_CORE = frozenset({
    YEAR, MONTH_OF_YEAR, DAY_OF_MONTH, DAY_OF_YEAR,
    HOUR_OF_DAY, MINUTE_OF_HOUR, SECOND_OF_MINUTE, NANO_OF_SECOND,
})

# Fields a canonical date or time contributes directly.
DATE_FIELDS = (YEAR, MONTH_OF_YEAR, DAY_OF_MONTH)
TIME_FIELDS = (HOUR_OF_DAY, MINUTE_OF_HOUR, SECOND_OF_MINUTE, NANO_OF_SECOND)
