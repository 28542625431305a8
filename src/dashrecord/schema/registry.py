"""Property schema registry.

A PropertySchema holds the declared properties of one record type together
with their defaults, validation rules and required flags. Schemas form a
tree: ``derive()`` snapshots a schema for a subtype and links the copy back
so later declarations on the parent cascade into every schema derived from
it, however deeply nested.

Schemas are shared, process-lifetime state and are not locked. Declare
properties during single-threaded initialization, before records are used
from multiple threads.
"""

import copy
import weakref
from collections.abc import Callable, Iterator
from dataclasses import dataclass
from enum import Enum
from typing import Any

from loguru import logger

from dashrecord.config import OptionPolicy, get_config
from dashrecord.schema.rules import ValidationRule, coerce_rule
from dashrecord.utils import canonical_name


class _Sentinel(Enum):
    UNSET = "UNSET"
    CLEAR = "CLEAR"

    def __repr__(self) -> str:
        return self.value


# Option was not passed
UNSET = _Sentinel.UNSET
# Remove a previously registered default or validator
CLEAR = _Sentinel.CLEAR


@dataclass(frozen=True)
class PropertyInfo:
    """Read-only view of one declared property."""

    name: str
    required: bool
    rule: ValidationRule | None
    has_default: bool
    default: Any = None
    default_factory: Callable[[], Any] | None = None


class PropertySchema:
    """Mutable registry of the properties declared for one record type."""

    def __init__(self, owner: str, policy: OptionPolicy | str | None = None):
        self.owner = owner
        self.policy = OptionPolicy(policy) if policy is not None else get_config().option_policy
        # dict used as an insertion-ordered set
        self.properties: dict[str, None] = {}
        self.defaults: dict[str, Any] = {}
        self.factories: dict[str, Callable[[], Any]] = {}
        self.validators: dict[str, ValidationRule] = {}
        self.required: set[str] = set()
        # Weak: schemas of discarded record types drop out of the cascade
        self.descendants: weakref.WeakSet["PropertySchema"] = weakref.WeakSet()

    # --- Declaration ---

    def declare(
        self,
        name: Any,
        *,
        default: Any = UNSET,
        default_factory: Callable[[], Any] | _Sentinel = UNSET,
        required: bool | None = None,
        validate: Any = UNSET,
    ) -> None:
        """Declare ``name`` on this schema and on every schema derived from it.

        Args:
            name: Property name (str or str-valued Enum member).
            default: Value written into every new record. ``CLEAR`` removes a
                previously registered default.
            default_factory: Zero-argument callable producing a fresh default
                per record. Replaces any plain default.
            required: True marks the property required; False clears the flag.
                None leaves it as it was.
            validate: A rule accepted by ``coerce_rule``. ``CLEAR`` (or None)
                removes a previously registered rule.

        Omitted options are kept from earlier declarations under the sticky
        policy. Under the replace policy an omitted ``default`` or
        ``validate`` removes the earlier registration.

        Raises:
            ValueError: If both default and default_factory are given.
            InvalidRuleError: If ``validate`` is not a recognized rule.
            TypeError: If the name is not a string.
        """
        name = canonical_name(name)
        if default is not UNSET and default_factory is not UNSET:
            raise ValueError(f"Cannot give both default and default_factory for '{name}'")
        if default_factory not in (UNSET, CLEAR) and not callable(default_factory):
            raise TypeError(f"default_factory for '{name}' must be callable")

        rule = validate if validate in (UNSET, CLEAR) else coerce_rule(validate)
        self._register(name, default, default_factory, required, rule)

    def _register(
        self,
        name: str,
        default: Any,
        default_factory: Any,
        required: bool | None,
        rule: Any,
    ) -> None:
        """Apply a declaration locally, then forward it depth-first to descendants."""
        replace = self.policy is OptionPolicy.REPLACE
        self.properties[name] = None

        # --- Default / factory ---
        # Trigger: a new default, an explicit CLEAR, or (replace policy) omission
        # Outcome: at most one of defaults/factories holds the name
        if default is not UNSET and default is not CLEAR:
            self.factories.pop(name, None)
            self.defaults[name] = default
        elif default_factory is not UNSET and default_factory is not CLEAR:
            self.defaults.pop(name, None)
            self.factories[name] = default_factory
        elif default is CLEAR or default_factory is CLEAR or replace:
            self.defaults.pop(name, None)
            self.factories.pop(name, None)

        # --- Validator ---
        if rule is CLEAR or rule is None or (rule is UNSET and replace):
            self.validators.pop(name, None)
        elif rule is not UNSET:
            self.validators[name] = rule

        # --- Required ---
        # Replace policy keeps the classic additive-only behaviour
        if required:
            self.required.add(name)
        elif required is False and not replace:
            self.required.discard(name)

        logger.debug(f"Declared property {name} on {self.owner}")

        for descendant in list(self.descendants):
            logger.trace(f"Cascading property {name} from {self.owner} to {descendant.owner}")
            descendant._register(name, default, default_factory, required, rule)

    # --- Inheritance ---

    def derive(self, owner: str) -> "PropertySchema":
        """Snapshot this schema for a derived type and link it for cascading.

        The child gets independent copies of every registry and an empty
        descendant set of its own. Later declarations on this schema are
        forwarded to it.
        """
        child = PropertySchema(owner, self.policy)
        child.properties = copy.copy(self.properties)
        child.defaults = copy.copy(self.defaults)
        child.factories = copy.copy(self.factories)
        child.validators = copy.copy(self.validators)
        child.required = copy.copy(self.required)
        self.descendants.add(child)
        logger.debug(f"Derived schema {owner} from {self.owner} ({len(child)} properties)")
        return child

    # --- Queries ---

    def is_declared(self, name: Any) -> bool:
        return canonical_name(name) in self.properties

    def is_required(self, name: Any) -> bool:
        return canonical_name(name) in self.required

    def has_default(self, name: Any) -> bool:
        name = canonical_name(name)
        return name in self.defaults or name in self.factories

    def rule_for(self, name: Any) -> ValidationRule | None:
        return self.validators.get(canonical_name(name))

    def initial_values(self) -> Iterator[tuple[str, Any]]:
        """Yield (name, default) pairs for a new record, calling factories."""
        for name in self.properties:
            if name in self.defaults:
                yield name, self.defaults[name]
            elif name in self.factories:
                yield name, self.factories[name]()

    def describe(self, name: Any) -> PropertyInfo:
        """Return a read-only snapshot of one declared property.

        Raises:
            KeyError: If the property is not declared.
        """
        name = canonical_name(name)
        if name not in self.properties:
            raise KeyError(name)
        return PropertyInfo(
            name=name,
            required=name in self.required,
            rule=self.validators.get(name),
            has_default=self.has_default(name),
            default=self.defaults.get(name),
            default_factory=self.factories.get(name),
        )

    def __contains__(self, name: object) -> bool:
        try:
            return self.is_declared(name)
        except TypeError:
            return False

    def __iter__(self) -> Iterator[str]:
        return iter(list(self.properties))

    def __len__(self) -> int:
        return len(self.properties)

    def __repr__(self) -> str:
        return f"<PropertySchema {self.owner} properties={list(self.properties)!r}>"
