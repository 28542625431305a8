"""dashrecord - schema-constrained records for Python."""

from importlib.metadata import PackageNotFoundError, version

from loguru import logger

from dashrecord.errors import (
    DashRecordError,
    InvalidRuleError,
    PropertyNotDefined,
    RequiredPropertyMissing,
    ReservedPropertyName,
    ValidationFailed,
)
from dashrecord.record import Property, Record
from dashrecord.schema import (
    CLEAR,
    NUMBER_SET,
    NUMERIC,
    STRING,
    STRING_SET,
    Pattern,
    PropertySchema,
    ValidationReason,
    ValidationRule,
)

try:
    __version__ = version("dashrecord")
except PackageNotFoundError:  # pragma: no cover
    __version__ = "0.0.0"

# Silent unless the application opts in via setup_logging()
logger.disable("dashrecord")

__all__ = [
    "CLEAR",
    "NUMBER_SET",
    "NUMERIC",
    "STRING",
    "STRING_SET",
    "DashRecordError",
    "InvalidRuleError",
    "Pattern",
    "Property",
    "PropertyNotDefined",
    "PropertySchema",
    "Record",
    "RequiredPropertyMissing",
    "ReservedPropertyName",
    "ValidationFailed",
    "ValidationReason",
    "ValidationRule",
]
