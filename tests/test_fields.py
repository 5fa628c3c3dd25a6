# tests/test_fields.py

from datetime import date, time

import pytest

from calfield import (
    DAY_OF_MONTH,
    DAY_OF_WEEK,
    HOUR_OF_DAY,
    MINUTE_OF_HOUR,
    MONTH_OF_YEAR,
    YEAR,
    EMPTY_FIELDS,
    FieldValueMap,
    InvalidArgumentError,
    OutOfRangeError,
)


@pytest.mark.parametrize(
    "args",
    [
        (None, 1),
        (YEAR, 2008, None, 6),
        (None, 2008, MONTH_OF_YEAR, 6),
    ],
)
def test_none_rule_in_any_position(args):
    with pytest.raises(InvalidArgumentError):
        FieldValueMap.of(*args)


def test_none_rule_in_mapping():
    with pytest.raises(InvalidArgumentError):
        FieldValueMap({None: 1})
    with pytest.raises(InvalidArgumentError):
        EMPTY_FIELDS.with_value(None, 1)


def test_odd_arguments():
    with pytest.raises(InvalidArgumentError):
        FieldValueMap.of(YEAR)


def test_last_write_wins():
    fvm = FieldValueMap.of(YEAR, 2007, YEAR, 2008)
    assert len(fvm) == 1
    assert fvm[YEAR] == 2008


def test_values_stored_without_validation():
    fvm = FieldValueMap.of(MONTH_OF_YEAR, -1, DAY_OF_MONTH, 99)
    assert fvm[MONTH_OF_YEAR] == -1
    assert fvm.get(DAY_OF_MONTH) == 99
    assert not fvm.is_valid()


def test_validate():
    assert FieldValueMap.of(MONTH_OF_YEAR, 6).validate()[MONTH_OF_YEAR] == 6
    with pytest.raises(OutOfRangeError) as ex:
        FieldValueMap.of(YEAR, 2008, MONTH_OF_YEAR, 13).validate()
    assert ex.value.rule is MONTH_OF_YEAR


def test_mapping_protocol():
    fvm = FieldValueMap.of(DAY_OF_MONTH, 30, YEAR, 2008, MONTH_OF_YEAR, 6)
    assert list(fvm) == [YEAR, MONTH_OF_YEAR, DAY_OF_MONTH]
    assert YEAR in fvm
    assert HOUR_OF_DAY not in fvm
    assert fvm.size() == 3
    assert fvm.get(HOUR_OF_DAY) is None
    assert fvm.get(None) is None
    assert fvm.to_dict() == {YEAR: 2008, MONTH_OF_YEAR: 6, DAY_OF_MONTH: 30}


def test_updates_copy_on_write():
    fvm = FieldValueMap.of(YEAR, 2008)
    assert fvm.with_value(YEAR, 2008) is fvm
    assert fvm.without(MONTH_OF_YEAR) is fvm
    assert fvm.with_fields({}) is fvm

    more = fvm.with_value(MONTH_OF_YEAR, 6)
    assert more is not fvm
    assert len(fvm) == 1
    assert more == FieldValueMap.of(YEAR, 2008, MONTH_OF_YEAR, 6)
    assert more.without(YEAR) == FieldValueMap.of(MONTH_OF_YEAR, 6)
    assert fvm.with_fields({YEAR: 2009, DAY_OF_MONTH: 1}) == FieldValueMap.of(YEAR, 2009, DAY_OF_MONTH, 1)


def test_equality_is_order_independent():
    a = FieldValueMap.of(YEAR, 2008, MONTH_OF_YEAR, 6)
    b = FieldValueMap.of(MONTH_OF_YEAR, 6, YEAR, 2008)
    assert a == b
    assert hash(a) == hash(b)
    assert a != FieldValueMap.of(YEAR, 2008)


def test_matches():
    fvm = FieldValueMap.of(YEAR, 2008, DAY_OF_WEEK, 1, HOUR_OF_DAY, 11)
    assert fvm.matches_date(date(2008, 6, 30))
    assert not fvm.matches_date(date(2008, 7, 1))
    assert fvm.matches_time(time(11, 30))
    assert not fvm.matches_time(time(12, 0))


def test_str():
    assert str(EMPTY_FIELDS) == "{}"
    fvm = FieldValueMap.of(MINUTE_OF_HOUR, 30, YEAR, 2008, MONTH_OF_YEAR, 6)
    assert str(fvm) == "{Year=2008, MonthOfYear=6, MinuteOfHour=30}"
