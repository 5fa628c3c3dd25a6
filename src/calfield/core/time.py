from __future__ import annotations
from datetime import date, time
from typing import Tuple

MIN_YEAR = 1
MAX_YEAR = 9999

NANOS_PER_SECOND = 1_000_000_000
NANOS_PER_MINUTE = 60 * NANOS_PER_SECOND
NANOS_PER_HOUR = 60 * NANOS_PER_MINUTE
NANOS_PER_DAY = 24 * NANOS_PER_HOUR
MILLIS_PER_DAY = 24 * 60 * 60 * 1000

_MONTH_LENGTHS = (31, 28, 31, 30, 31, 30, 31, 31, 30, 31, 30, 31)


def is_leap_year(year: int) -> bool:
    return (year % 4 == 0) and (year % 100 != 0 or year % 400 == 0)


def month_length(month: int, year: int | None = None) -> int:
    """Days in an ISO month. Without a year February is taken as 29 days."""
    if month == 2:
        if year is None or is_leap_year(year):
            return 29
        return 28
    return _MONTH_LENGTHS[month - 1]


def year_length(year: int) -> int:
    return 366 if is_leap_year(year) else 365


def weeks_in_week_based_year(year: int) -> int:
    """52 or 53: a year has 53 ISO weeks when Dec 28 falls in week 53."""
    return date(year, 12, 28).isocalendar()[1]


def to_jdn(year: int, month: int, day: int) -> int:
    """Convert a proleptic Gregorian date to Julian Day Number (JDN)."""
    a = (14 - month) // 12
    y2 = year + 4800 - a
    m2 = month + 12 * a - 3
    return day + (153 * m2 + 2) // 5 + 365 * y2 + y2 // 4 - y2 // 100 + y2 // 400 - 32045


def from_jdn(jdn: int) -> date:
    """Fliegel-Van Flandern inverse of to_jdn (Gregorian)."""
    a = jdn + 32044
    b = (4 * a + 3) // 146097
    c = a - (146097 * b) // 4
    d = (4 * c + 3) // 1461
    e = c - (1461 * d) // 4
    m = (5 * e + 2) // 153
    day = e - (153 * m + 2) // 5 + 1
    month = m + 3 - 12 * (m // 10)
    year = 100 * b + d - 4800 + (m // 10)
    return date(year, month, day)


MIN_JDN = to_jdn(MIN_YEAR, 1, 1)
MAX_JDN = to_jdn(MAX_YEAR, 12, 31)


# ============================================================
# Lenient construction: out of range values roll over
# ============================================================

def lenient_jdn(year: int, month: int, day: int) -> int:
    """JDN of year-01-01 plus (month - 1) months plus (day - 1) days."""
    y = year + (month - 1) // 12
    m = (month - 1) % 12 + 1
    return to_jdn(y, m, 1) + day - 1


def lenient_year_day_jdn(year: int, day_of_year: int) -> int:
    return to_jdn(year, 1, 1) + day_of_year - 1


def week_one_monday_jdn(week_based_year: int) -> int:
    """JDN of the Monday starting ISO week 1 (the week containing Jan 4)."""
    jan4 = to_jdn(week_based_year, 1, 4)
    # JDN mod 7 is 0 on Mondays
    return jan4 - jan4 % 7


def lenient_week_date_jdn(week_based_year: int, week: int, day_of_week: int) -> int:
    return week_one_monday_jdn(week_based_year) + (week - 1) * 7 + (day_of_week - 1)


def split_nano_of_day(nanos: int) -> Tuple[int, time]:
    """Split a nano-of-day count into whole overflow days and a time of day."""
    days, rem = divmod(nanos, NANOS_PER_DAY)
    hour, rem = divmod(rem, NANOS_PER_HOUR)
    minute, rem = divmod(rem, NANOS_PER_MINUTE)
    second, nano = divmod(rem, NANOS_PER_SECOND)
    return days, time(hour, minute, second, nano // 1000)


def nano_of_day(hour: int, minute: int = 0, second: int = 0, nano: int = 0) -> int:
    return hour * NANOS_PER_HOUR + minute * NANOS_PER_MINUTE + second * NANOS_PER_SECOND + nano


def milli_of_day(t: time) -> int:
    return ((t.hour * 60 + t.minute) * 60 + t.second) * 1000 + t.microsecond // 1000
