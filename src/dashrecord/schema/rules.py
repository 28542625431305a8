"""Validation rules for record properties.

A rule is a closed variant over five kinds:

  Rule          Passes when
  -----------------------------------------------------------
  NUMERIC       value is a number (bool excluded)
  STRING        value is a str
  Pattern(p)    value is a str and re.search(p, value) matches
  STRING_SET    value is a flat collection of str
  NUMBER_SET    value is a flat collection of numbers

Properties without a rule accept anything. Rules are immutable and
evaluating them has no side effects.
"""

import re
from collections.abc import Collection, Mapping
from dataclasses import dataclass
from enum import Enum
from numbers import Number
from typing import Any

from dashrecord.errors import InvalidRuleError, ValidationFailed


class RuleKind(Enum):
    """Kind of validation rule."""

    NUMERIC = "n"
    STRING = "s"
    PATTERN = "pattern"
    STRING_SET = "ss"
    NUMBER_SET = "ns"


class ValidationReason(Enum):
    """Why a value failed its rule."""

    TYPE_MISMATCH = "type_mismatch"
    PATTERN_MISMATCH = "pattern_mismatch"
    NOT_A_COLLECTION = "not_a_collection"
    NESTED_COLLECTION = "nested_collection"
    ELEMENT_TYPE_MISMATCH = "element_type_mismatch"


@dataclass(frozen=True)
class ValidationRule:
    """A declared constraint on a property value."""

    kind: RuleKind
    pattern: re.Pattern | None = None

    def __post_init__(self):
        if self.kind is RuleKind.PATTERN:
            if not isinstance(self.pattern, re.Pattern):
                raise InvalidRuleError("A PATTERN rule needs a compiled regex; use Pattern()")
            if not isinstance(self.pattern.pattern, str):
                raise InvalidRuleError("PATTERN rules need a str regex, not bytes")
        elif self.pattern is not None:
            raise InvalidRuleError(f"{self.kind.name} rules do not take a pattern")

    def __str__(self) -> str:
        if self.kind is RuleKind.PATTERN and self.pattern is not None:
            return f"Pattern(/{self.pattern.pattern}/)"
        return self.kind.name


NUMERIC = ValidationRule(RuleKind.NUMERIC)
STRING = ValidationRule(RuleKind.STRING)
STRING_SET = ValidationRule(RuleKind.STRING_SET)
NUMBER_SET = ValidationRule(RuleKind.NUMBER_SET)


def Pattern(pattern: str | re.Pattern) -> ValidationRule:  # noqa: N802
    """Build a rule requiring string values that match ``pattern``."""
    if isinstance(pattern, (bytes, bytearray)):
        raise InvalidRuleError("PATTERN rules need a str regex, not bytes")
    try:
        compiled = pattern if isinstance(pattern, re.Pattern) else re.compile(pattern)
    except re.error as exc:
        raise InvalidRuleError(f"Invalid regex {pattern!r}: {exc}") from exc
    return ValidationRule(RuleKind.PATTERN, compiled)


# Short tags accepted for compatibility with the original declaration syntax
_TAGS = {
    "n": NUMERIC,
    "s": STRING,
    "ss": STRING_SET,
    "ns": NUMBER_SET,
}


def coerce_rule(rule: Any) -> ValidationRule | None:
    """Turn a user-supplied ``validate`` option into a ValidationRule.

    Accepts a ValidationRule, a RuleKind (other than PATTERN), a compiled
    regex, one of the short tags ``"n"``, ``"s"``, ``"ss"``, ``"ns"``, or
    None for "no rule".

    Raises:
        InvalidRuleError: If the value is not a recognized rule.
    """
    if rule is None or isinstance(rule, ValidationRule):
        return rule
    if isinstance(rule, re.Pattern):
        return Pattern(rule)
    if isinstance(rule, RuleKind) and rule is not RuleKind.PATTERN:
        return _TAGS[rule.value]
    if isinstance(rule, str) and rule in _TAGS:
        return _TAGS[rule]
    raise InvalidRuleError(f"Unrecognized validation rule: {rule!r}")


# --- Evaluation ---


def is_numeric(value: Any) -> bool:
    return isinstance(value, Number) and not isinstance(value, bool)


def is_collection(value: Any) -> bool:
    """True for sized, re-iterable containers (strings, bytes and mappings excluded)."""
    if isinstance(value, (str, bytes, bytearray, Mapping)):
        return False
    return isinstance(value, Collection)


def validate(rule: ValidationRule | None, value: Any, name: str = "value") -> None:
    """Check ``value`` against ``rule``.

    Args:
        rule: The rule to evaluate, or None (always passes).
        value: The candidate value.
        name: Property name used in the error.

    Raises:
        ValidationFailed: If the value does not satisfy the rule.
    """
    if rule is None:
        return

    def fail(reason: ValidationReason, detail: str) -> ValidationFailed:
        return ValidationFailed(name, rule, value, reason, detail)

    if rule.kind is RuleKind.NUMERIC and not is_numeric(value):
        raise fail(
            ValidationReason.TYPE_MISMATCH,
            f"is not Numeric, it is a {type(value).__name__}.",
        )
    elif rule.kind is RuleKind.STRING and not isinstance(value, str):
        raise fail(
            ValidationReason.TYPE_MISMATCH,
            f"is not a String, it is a {type(value).__name__}.",
        )
    elif rule.kind is RuleKind.PATTERN:
        if not isinstance(value, str) or rule.pattern.search(value) is None:
            raise fail(
                ValidationReason.PATTERN_MISMATCH,
                f"must match regexp /{rule.pattern.pattern}/.",
            )
    elif rule.kind in (RuleKind.STRING_SET, RuleKind.NUMBER_SET):
        _validate_collection(rule, value, fail)


def _validate_collection(rule: ValidationRule, value: Any, fail) -> None:
    """Validate a flat collection element by element, in iteration order."""
    if not is_collection(value):
        raise fail(ValidationReason.NOT_A_COLLECTION, "is not a Collection.")

    if rule.kind is RuleKind.STRING_SET:
        element_ok, element_type = (lambda v: isinstance(v, str)), "String"
    else:
        element_ok, element_type = is_numeric, "Numeric"

    for element in value:
        if is_collection(element):
            raise fail(ValidationReason.NESTED_COLLECTION, "has nested collections.")
        if not element_ok(element):
            raise fail(
                ValidationReason.ELEMENT_TYPE_MISMATCH,
                f"has elements not of type {element_type}.",
            )
