"""
Custom exceptions for record declaration, access and validation.
"""

from typing import Any


class DashRecordError(Exception):
    """Base exception for all dashrecord errors."""

    pass


class PropertyNotDefined(DashRecordError, LookupError):
    """Raised when reading or writing a name the record type never declared."""

    def __init__(self, name: str, owner: str | None = None):
        self.name = name
        self.owner = owner
        target = owner or "this record"
        super().__init__(f"The property '{name}' is not defined for {target}.")


class RequiredPropertyMissing(DashRecordError, ValueError):
    """Raised when a required property is unset after construction or cleared later."""

    def __init__(self, name: str, owner: str | None = None):
        self.name = name
        self.owner = owner
        target = owner or "this record"
        super().__init__(f"The property '{name}' is required for {target}.")


class ValidationFailed(DashRecordError, ValueError):
    """Raised when a written value does not satisfy the property's rule."""

    def __init__(self, name: str, rule: Any, value: Any, reason: Any, detail: str):
        self.name = name
        self.rule = rule
        self.value = value
        self.reason = reason
        super().__init__(f"The property '{name}' v({value!r}) {detail}")


class InvalidRuleError(DashRecordError, TypeError):
    """Raised when a declaration names a validation rule that is not recognized."""

    pass


class ReservedPropertyName(DashRecordError, ValueError):
    """Raised when a class-body Property would shadow a Record attribute."""

    def __init__(self, name: str, owner: str | None = None):
        self.name = name
        self.owner = owner
        target = owner or "this record"
        super().__init__(
            f"The property '{name}' on {target} shadows a Record attribute; "
            f"declare it with declare('{name}') instead."
        )
