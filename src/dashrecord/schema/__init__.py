"""Schema system for dashrecord.

Provides the property registry shared by every record of a type and the
validation rules checked on each write.
"""

from dashrecord.schema.registry import (
    CLEAR,
    UNSET,
    PropertyInfo,
    PropertySchema,
)
from dashrecord.schema.rules import (
    NUMBER_SET,
    NUMERIC,
    STRING,
    STRING_SET,
    Pattern,
    RuleKind,
    ValidationReason,
    ValidationRule,
    coerce_rule,
    validate,
)

__all__ = [
    # Registry
    "CLEAR",
    "UNSET",
    "PropertyInfo",
    "PropertySchema",
    # Rules
    "NUMBER_SET",
    "NUMERIC",
    "STRING",
    "STRING_SET",
    "Pattern",
    "RuleKind",
    "ValidationReason",
    "ValidationRule",
    "coerce_rule",
    "validate",
]
