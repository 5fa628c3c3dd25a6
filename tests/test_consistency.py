# tests/test_consistency.py

from datetime import date, time

import pytest

from calfield import (
    AMPM_OF_DAY,
    DAY_OF_WEEK,
    DAY_OF_YEAR,
    HOUR_OF_DAY,
    MONTH_OF_YEAR,
    QUARTER_OF_YEAR,
    YEAR,
    Calendrical,
    FieldValueMap,
    InconsistentError,
)

D = date(2008, 6, 30)


def test_quarter_disagrees_with_date():
    cal = Calendrical(FieldValueMap.of(QUARTER_OF_YEAR, 1), date=D)
    with pytest.raises(InconsistentError) as ex:
        cal.check_consistent()
    assert ex.value.rule is QUARTER_OF_YEAR


def test_agreeing_fields():
    cal = Calendrical(
        FieldValueMap.of(YEAR, 2008, QUARTER_OF_YEAR, 2, DAY_OF_WEEK, 1, DAY_OF_YEAR, 182, AMPM_OF_DAY, 0),
        D,
        time(11, 30),
    )
    assert cal.check_consistent() is None


def test_first_mismatch_in_rule_order():
    cal = Calendrical(FieldValueMap.of(DAY_OF_WEEK, 3, YEAR, 2007), date=D)
    with pytest.raises(InconsistentError) as ex:
        cal.check_consistent()
    assert ex.value.rule is YEAR


def test_time_fields_checked_against_time():
    cal = Calendrical(FieldValueMap.of(HOUR_OF_DAY, 12), time=time(11, 30))
    with pytest.raises(InconsistentError) as ex:
        cal.check_consistent()
    assert ex.value.rule is HOUR_OF_DAY


def test_nothing_to_check_against():
    # only the slots are authoritative; fields are not checked against each other
    Calendrical.of(MONTH_OF_YEAR, 6, QUARTER_OF_YEAR, 1).check_consistent()
    Calendrical(FieldValueMap.of(HOUR_OF_DAY, 25), date=D).check_consistent()
