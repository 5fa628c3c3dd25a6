# tests/test_calendrical.py

from datetime import date, datetime, time

import pytest

from calfield import (
    AMPM_OF_DAY,
    DAY_OF_MONTH,
    DAY_OF_WEEK,
    HOUR_OF_DAY,
    MILLI_OF_DAY,
    MINUTE_OF_HOUR,
    MONTH_OF_YEAR,
    NANO_OF_SECOND,
    QUARTER_OF_YEAR,
    SECOND_OF_MINUTE,
    YEAR,
    Calendrical,
    EMPTY_FIELDS,
    FieldUnsupportedError,
    FieldValueMap,
    InvalidArgumentError,
    OutOfRangeError,
    Source,
    TimeZone,
    ZoneOffset,
)

D = date(2008, 6, 30)
T = time(11, 30)
OFFSET = ZoneOffset.of(1)
ZONE = TimeZone.region("Europe/Paris")


@pytest.fixture
def full():
    return Calendrical(FieldValueMap.of(DAY_OF_WEEK, 1), D, T, OFFSET, ZONE)


def test_empty():
    cal = Calendrical()
    assert cal.fields == EMPTY_FIELDS
    assert cal.date is None and cal.time is None
    assert cal.offset is None and cal.zone is None
    assert cal.is_empty()
    assert str(cal) == "{}"


def test_construction_shapes():
    assert Calendrical.of(YEAR, 2008).fields == FieldValueMap.of(YEAR, 2008)
    assert Calendrical({YEAR: 2008}).fields == FieldValueMap.of(YEAR, 2008)
    assert Calendrical(None, D).fields == EMPTY_FIELDS
    cal = Calendrical(FieldValueMap.of(YEAR, 2008), offset=OFFSET, zone=ZONE)
    assert cal.date is None
    assert cal.offset == OFFSET
    assert cal.zone == ZONE


def test_datetime_is_not_a_date():
    with pytest.raises(InvalidArgumentError):
        Calendrical(date=datetime(2008, 6, 30, 11, 30))


@pytest.mark.parametrize(
    "kwargs",
    [
        dict(fields=FieldValueMap.of(YEAR, 2008), date=ZoneOffset.of(1)),
        dict(time=date(2008, 6, 30)),
        dict(offset="+01:00"),
        dict(zone="UTC"),
        dict(fields=[1, 2]),
    ],
)
def test_slots_are_type_checked(kwargs):
    with pytest.raises(InvalidArgumentError):
        Calendrical(**kwargs)


@pytest.mark.parametrize(
    "rule_values",
    [
        (None, 1),
        (YEAR, 2008, None, 6),
        (None, 2008, MONTH_OF_YEAR, 6),
    ],
)
def test_of_rejects_none_rule(rule_values):
    with pytest.raises(InvalidArgumentError):
        Calendrical.of(*rule_values)


def test_with_returns_self_when_unchanged(full):
    assert full.with_date(D) is full
    assert full.with_time(T) is full
    assert full.with_offset(OFFSET) is full
    assert full.with_zone(ZONE) is full
    assert full.with_fields(FieldValueMap.of(DAY_OF_WEEK, 1)) is full


def test_with_builds_new_instance(full):
    other = full.with_date(date(2008, 7, 1))
    assert other is not full
    assert full.date == D
    assert other.date == date(2008, 7, 1)
    assert other.time == T

    assert full.with_fields(None).fields == EMPTY_FIELDS
    assert full.with_zone(None).zone is None


@pytest.mark.parametrize("value", [2008, -1, 13, 0])
def test_stored_value_round_trip(value):
    cal = Calendrical.of(MONTH_OF_YEAR, value)
    assert cal.derive_value(MONTH_OF_YEAR) == value
    assert cal.resolve(MONTH_OF_YEAR).source is Source.FROM_FIELDS


def test_validate_on_request():
    cal = Calendrical.of(MONTH_OF_YEAR, 13)
    assert cal.derive_value(MONTH_OF_YEAR) == 13
    with pytest.raises(OutOfRangeError):
        cal.derive_value(MONTH_OF_YEAR, validate=True)


def test_date_and_time_win_over_fields():
    cal = Calendrical(FieldValueMap.of(YEAR, 2000, HOUR_OF_DAY, 3), D, T)
    assert cal.derive_value(YEAR) == 2008
    assert cal.derive_value(HOUR_OF_DAY) == 11
    assert cal.resolve(YEAR).source is Source.FROM_DATE
    assert cal.resolve(HOUR_OF_DAY).source is Source.FROM_TIME


def test_derived_source():
    cal = Calendrical.of(MONTH_OF_YEAR, 8)
    assert cal.resolve(QUARTER_OF_YEAR) == (Source.DERIVED, 3)
    assert cal.derive_value(QUARTER_OF_YEAR) == 3


def test_chained_derivation():
    cal = Calendrical.of(MILLI_OF_DAY, 45_045_500)
    assert cal.derive_value(AMPM_OF_DAY) == 1
    assert cal.derive_value(HOUR_OF_DAY) == 12


def test_fields_answer_what_the_slots_cannot():
    cal = Calendrical(FieldValueMap.of(HOUR_OF_DAY, 14), date=D)
    assert cal.derive_value(YEAR) == 2008
    assert cal.resolve(AMPM_OF_DAY) == (Source.DERIVED, 1)

    # a time slot answers time rules directly
    cal = cal.with_time(time(9, 0))
    assert cal.resolve(AMPM_OF_DAY) == (Source.FROM_TIME, 0)


def test_unanswerable_field():
    cal = Calendrical.of(YEAR, 2008)
    assert not cal.is_derivable(DAY_OF_WEEK)
    assert cal.derive_value_quiet(DAY_OF_WEEK) is None
    assert cal.resolve(DAY_OF_WEEK).source is Source.NO_INFO
    with pytest.raises(FieldUnsupportedError) as ex:
        cal.derive_value(DAY_OF_WEEK)
    assert ex.value.rule is DAY_OF_WEEK


def test_none_rule():
    cal = Calendrical.of(YEAR, 2008)
    assert cal.is_derivable(None) is False
    assert cal.derive_value_quiet(None) is None
    with pytest.raises(InvalidArgumentError):
        cal.derive_value(None)


def test_equal_fields_and_date():
    by_fields = Calendrical.of(YEAR, 2008, MONTH_OF_YEAR, 6, DAY_OF_MONTH, 30)
    by_date = Calendrical(date=D)
    assert by_fields == by_date
    assert hash(by_fields) == hash(by_date)

    extra = Calendrical(FieldValueMap.of(YEAR, 2008, MONTH_OF_YEAR, 6, DAY_OF_MONTH, 30, DAY_OF_WEEK, 5))
    assert extra != by_date


def test_equal_fields_and_time():
    by_fields = Calendrical.of(HOUR_OF_DAY, 11, MINUTE_OF_HOUR, 30, SECOND_OF_MINUTE, 0, NANO_OF_SECOND, 0)
    assert by_fields == Calendrical(time=T)
    assert Calendrical.of(HOUR_OF_DAY, 11, MINUTE_OF_HOUR, 30) != Calendrical(time=T)


def test_offset_and_zone_take_part_in_equality():
    assert Calendrical(date=D, offset=OFFSET) != Calendrical(date=D)
    assert Calendrical(date=D, offset=OFFSET) == Calendrical(date=D, offset=ZoneOffset.parse("+01:00"))
    assert Calendrical(date=D, zone=ZONE) != Calendrical(date=D, zone=TimeZone.UTC)


def test_str(full):
    assert str(Calendrical.of(YEAR, 2008, MONTH_OF_YEAR, 6)) == "{Year=2008, MonthOfYear=6}"
    assert str(Calendrical(date=D, time=T, offset=OFFSET)) == "2008-06-30 11:30:00 +01:00"
    assert str(full) == "{DayOfWeek=1} 2008-06-30 11:30:00 +01:00 Europe/Paris"
    assert repr(Calendrical()) == "Calendrical({})"


@pytest.mark.parametrize(
    "cal",
    [
        Calendrical(),
        Calendrical.of(YEAR, 2008, MONTH_OF_YEAR, -1),
        Calendrical(date=D),
        Calendrical(time=time(23, 59, 59, 999_999)),
        Calendrical(FieldValueMap.of(DAY_OF_WEEK, 1), D, T, OFFSET, ZONE),
        Calendrical(date=D, offset=ZoneOffset.UTC, zone=TimeZone.of(ZoneOffset.UTC)),
    ],
)
def test_snapshot_round_trip(cal):
    restored = Calendrical.from_bytes(cal.to_bytes())
    assert restored == cal
    assert str(restored) == str(cal)
    for rule in restored.fields:
        assert rule in (YEAR, MONTH_OF_YEAR, DAY_OF_WEEK)


def test_snapshot_of_wrong_type():
    import pickle

    with pytest.raises(InvalidArgumentError):
        Calendrical.from_bytes(pickle.dumps({"not": "a calendrical"}))


def test_to_calendrical_is_equal_copy(full):
    copy = full.to_calendrical()
    assert copy == full
    assert copy is not full


def test_to_date_time_fields():
    assert Calendrical(date=D).to_date_time_fields() == EMPTY_FIELDS
    assert Calendrical.of(YEAR, 2008).to_date_time_fields() == FieldValueMap.of(YEAR, 2008)
