"""calfield public API.

Keep this surface small: users should mostly interact with Calendrical and the
ISO rule singletons re-exported here.
"""

# Register the ISO rules on import
from .rules import iso as _iso  # noqa: F401

from .core.calendrical import Calendrical, Resolution
from .core.errors import (
    CalfieldError,
    ConversionFailedError,
    FieldUnsupportedError,
    InconsistentError,
    InvalidArgumentError,
    OutOfRangeError,
)
from .core.fields import EMPTY_FIELDS, FieldValueMap
from .core.merge import FieldMerger, MergeContext
from .core.types import (
    OffsetDate,
    OffsetDateTime,
    OffsetTime,
    PeriodUnit,
    TimeZone,
    ValueRange,
    ZonedDateTime,
    ZoneOffset,
)
from .rules.base import FieldRule, Source
from .rules.iso import (
    AMPM_OF_DAY,
    DAY_OF_MONTH,
    DAY_OF_WEEK,
    DAY_OF_YEAR,
    HOUR_OF_AMPM,
    HOUR_OF_DAY,
    MILLI_OF_DAY,
    MINUTE_OF_HOUR,
    MONTH_OF_QUARTER,
    MONTH_OF_YEAR,
    NANO_OF_SECOND,
    QUARTER_OF_YEAR,
    SECOND_OF_MINUTE,
    TRUSTED_CORE,
    WEEK_BASED_YEAR,
    WEEK_OF_WEEK_BASED_YEAR,
    YEAR,
)
from .rules.registry import list_rules, register_rule, rule_for_id, rule_for_name

__all__ = [
    "Calendrical",
    "Resolution",
    "FieldValueMap",
    "EMPTY_FIELDS",
    "FieldRule",
    "Source",
    "FieldMerger",
    "MergeContext",
    "CalfieldError",
    "ConversionFailedError",
    "FieldUnsupportedError",
    "InconsistentError",
    "InvalidArgumentError",
    "OutOfRangeError",
    "OffsetDate",
    "OffsetDateTime",
    "OffsetTime",
    "PeriodUnit",
    "TimeZone",
    "ValueRange",
    "ZonedDateTime",
    "ZoneOffset",
    "YEAR",
    "QUARTER_OF_YEAR",
    "MONTH_OF_QUARTER",
    "MONTH_OF_YEAR",
    "DAY_OF_MONTH",
    "DAY_OF_YEAR",
    "DAY_OF_WEEK",
    "WEEK_BASED_YEAR",
    "WEEK_OF_WEEK_BASED_YEAR",
    "HOUR_OF_DAY",
    "AMPM_OF_DAY",
    "HOUR_OF_AMPM",
    "MINUTE_OF_HOUR",
    "SECOND_OF_MINUTE",
    "NANO_OF_SECOND",
    "MILLI_OF_DAY",
    "TRUSTED_CORE",
    "list_rules",
    "register_rule",
    "rule_for_id",
    "rule_for_name",
]
