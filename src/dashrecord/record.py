"""Schema-bound records.

A Record is a string-keyed mutable mapping whose legal keys are fixed by its
type. Properties are declared on the class, either in the class body::

    class Person(Record):
        name = Property(required=True, validate=STRING)
        age = Property(default=0, validate=NUMERIC)

or afterwards with ``Person.declare("email", validate=Pattern(r"@"))``.

Subclasses start with a copy of their parent's properties. Declarations made
on a parent after a subclass exists cascade to that subclass, and every
record consults its type's schema at call time, so existing records see the
change too. Declare properties during single-threaded initialization;
schemas are not locked.
"""

import json
from collections.abc import Callable, Iterator, Mapping, MutableMapping
from typing import Any, ClassVar

from dashrecord.config import OptionPolicy, get_config
from dashrecord.errors import PropertyNotDefined, RequiredPropertyMissing, ReservedPropertyName
from dashrecord.schema.registry import UNSET, PropertySchema
from dashrecord.schema.rules import validate as validate_rule
from dashrecord.utils import canonical_name


class Property:
    """Class-body declaration of a record property.

    Stays on the class as a data descriptor, so ``record.name`` reads and
    writes go through the same checks as ``record["name"]``.
    """

    def __init__(
        self,
        *,
        default: Any = UNSET,
        default_factory: Any = UNSET,
        required: bool | None = None,
        validate: Any = UNSET,
    ):
        self.name: str | None = None
        self.options = {
            "default": default,
            "default_factory": default_factory,
            "required": required,
            "validate": validate,
        }

    def __set_name__(self, owner: type, name: str) -> None:
        self.name = name

    def __get__(self, instance: "Record | None", owner: type | None = None) -> Any:
        if instance is None:
            return self
        return instance[self.name]

    def __set__(self, instance: "Record", value: Any) -> None:
        instance[self.name] = value

    def __delete__(self, instance: "Record") -> None:
        del instance[self.name]

    def __repr__(self) -> str:
        return f"Property({self.name!r})"


class Record(MutableMapping[str, Any]):
    """A mapping that only accepts the properties declared for its type.

    Construct with a mapping (or iterable of pairs) and/or keyword arguments.
    Defaults are applied first, then the given attributes in order, then
    every required property is checked for a non-None value.

    Raises (on construction and writes):
        PropertyNotDefined: For names the type did not declare.
        RequiredPropertyMissing: When a required property ends up None.
        ValidationFailed: When a value breaks the property's rule.
    """

    __schema__: ClassVar[PropertySchema]

    def __init_subclass__(cls, *, option_policy: OptionPolicy | str | None = None, **kwargs):
        super().__init_subclass__(**kwargs)

        properties = [
            (name, attr) for name, attr in cls.__dict__.items() if isinstance(attr, Property)
        ]
        for name, _ in properties:
            if name == "_storage" or hasattr(Record, name):
                raise ReservedPropertyName(name, cls.__qualname__)

        parent = next(base for base in cls.__bases__ if issubclass(base, Record))
        schema = parent.__schema__.derive(cls.__qualname__)

        # --- Option policy ---
        # Trigger: explicit class keyword, or a direct subclass of Record
        # Why: the root schema is built at import time, before apps configure
        # Outcome: the policy is read from config when the type tree is started
        if option_policy is not None:
            schema.policy = OptionPolicy(option_policy)
        elif parent is Record:
            schema.policy = get_config().option_policy
        cls.__schema__ = schema

        for name, attr in properties:
            schema.declare(name, **attr.options)

    def __init__(self, attributes: Mapping[str, Any] | Any = None, /, **kwargs: Any):
        self._storage: dict[str, Any] = {}

        for name, value in self.__schema__.initial_values():
            self[name] = value

        if attributes is not None:
            pairs = attributes.items() if isinstance(attributes, Mapping) else attributes
            for name, value in pairs:
                self[name] = value

        for name, value in kwargs.items():
            self[name] = value

        self._assert_required_properties_set()

    # --- Declaration API ---

    @classmethod
    def declare(cls, name: Any, **options: Any) -> None:
        """Declare a property on this type and every type derived from it.

        See PropertySchema.declare for the accepted options.
        """
        cls.__schema__.declare(name, **options)

    @classmethod
    def is_declared(cls, name: Any) -> bool:
        return cls.__schema__.is_declared(name)

    @classmethod
    def is_required(cls, name: Any) -> bool:
        return cls.__schema__.is_required(name)

    @classmethod
    def property_names(cls) -> list[str]:
        return list(cls.__schema__)

    # --- Mapping interface ---

    def __getitem__(self, name: Any) -> Any:
        name = self._assert_property_exists(name)
        return self._storage.get(name)

    def get(self, name: Any, default: Any = None) -> Any:
        name = self._assert_property_exists(name)
        return self._storage.get(name, default)

    def __setitem__(self, name: Any, value: Any) -> None:
        name = self._assert_property_exists(name)
        schema = self.__schema__
        if value is None and schema.is_required(name):
            raise RequiredPropertyMissing(name, schema.owner)
        validate_rule(schema.rule_for(name), value, name)
        self._storage[name] = value

    def __delitem__(self, name: Any) -> None:
        name = self._assert_property_exists(name)
        if self.__schema__.is_required(name):
            raise RequiredPropertyMissing(name, self.__schema__.owner)
        del self._storage[name]

    def setdefault(self, name: Any, default: Any = None) -> Any:
        name = self._assert_property_exists(name)
        if name not in self._storage:
            self[name] = default
        return self._storage[name]

    def pop(self, name: Any, default: Any = UNSET) -> Any:
        name = self._assert_property_exists(name)
        if name not in self._storage:
            if default is UNSET:
                raise KeyError(name)
            return default
        value = self._storage[name]
        del self[name]
        return value

    def clear(self) -> None:
        """Remove every stored property; fails up front if any is required."""
        for name in self._storage:
            if self.__schema__.is_required(name):
                raise RequiredPropertyMissing(name, self.__schema__.owner)
        self._storage.clear()

    def popitem(self) -> tuple[str, Any]:
        """Remove and return the most recently stored optional property."""
        for name in reversed(self._storage):
            if not self.__schema__.is_required(name):
                return name, self._storage.pop(name)
        raise KeyError("popitem(): no optional properties stored")

    def __contains__(self, name: object) -> bool:
        try:
            return canonical_name(name) in self._storage
        except TypeError:
            return False

    def __iter__(self) -> Iterator[str]:
        return iter(self._storage)

    def __len__(self) -> int:
        return len(self._storage)

    # --- Conversions ---

    def fetch(self, name: Any, callback: Callable[[Any], Any] | None = None) -> Any:
        """Read ``name`` and hand the value to ``callback`` before returning it."""
        value = self[name]
        if callback is not None:
            callback(value)
        return value

    def to_dict(self) -> dict[str, Any]:
        """Return a plain dict, converting nested records recursively."""
        return {name: _plain(value) for name, value in self._storage.items()}

    def to_json(self, **kwargs: Any) -> str:
        return json.dumps(self.to_dict(), **kwargs)

    def copy(self) -> "Record":
        """Shallow copy of this record with the same type."""
        duplicate = type(self).__new__(type(self))
        duplicate._storage = dict(self._storage)
        return duplicate

    __copy__ = copy

    def __repr__(self) -> str:
        fields = "".join(f" {name}={value!r}" for name, value in self._storage.items())
        return f"<{type(self).__qualname__}{fields}>"

    __str__ = __repr__

    def __rich_repr__(self):
        yield from self._storage.items()

    __rich_repr__.angular = True  # type: ignore[attr-defined]

    # --- Assertions ---

    def _assert_property_exists(self, name: Any) -> str:
        name = canonical_name(name)
        if not self.__schema__.is_declared(name):
            raise PropertyNotDefined(name, self.__schema__.owner)
        return name

    def _assert_required_properties_set(self) -> None:
        for name in self.__schema__:
            if self.__schema__.is_required(name) and self._storage.get(name) is None:
                raise RequiredPropertyMissing(name, self.__schema__.owner)


def _plain(value: Any) -> Any:
    if isinstance(value, Record):
        return value.to_dict()
    if isinstance(value, Mapping):
        return {key: _plain(item) for key, item in value.items()}
    if isinstance(value, list):
        return [_plain(item) for item in value]
    if isinstance(value, tuple):
        return tuple(_plain(item) for item in value)
    return value


Record.__schema__ = PropertySchema("Record", OptionPolicy.STICKY)
