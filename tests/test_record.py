"""Tests for dashrecord.record -- schema-bound records."""

import copy
import json
from collections.abc import MutableMapping
from enum import Enum

import pytest

from dashrecord import (
    CLEAR,
    NUMERIC,
    STRING,
    STRING_SET,
    Pattern,
    Property,
    PropertyNotDefined,
    Record,
    RequiredPropertyMissing,
    ReservedPropertyName,
    ValidationFailed,
    ValidationReason,
)
from dashrecord.config import OptionPolicy


class Person(Record):
    name = Property(required=True, validate=STRING)
    email = Property(validate=Pattern(r"@"))
    age = Property(default=0, validate=NUMERIC)
    tags = Property(default_factory=list, validate=STRING_SET)


# --- Declaration ---


class TestDeclaration:
    def test_class_body_properties_declared_in_order(self):
        assert Person.property_names() == ["name", "email", "age", "tags"]

    def test_queries(self):
        assert Person.is_declared("email")
        assert not Person.is_declared("phone")
        assert Person.is_required("name")
        assert not Person.is_required("age")

    def test_descriptor_stays_on_class(self):
        assert isinstance(Person.name, Property)
        assert repr(Person.name) == "Property('name')"

    def test_declare_after_definition(self):
        class Note(Record):
            pass

        Note.declare("title", required=True)
        assert Note.is_required("title")
        with pytest.raises(RequiredPropertyMissing):
            Note()

    @pytest.mark.parametrize("name", ["items", "keys", "get", "update", "copy", "fetch", "declare"])
    def test_property_cannot_shadow_record_attribute(self, name):
        with pytest.raises(ReservedPropertyName) as exc_info:
            type("Shadowing", (Record,), {name: Property()})
        assert exc_info.value.name == name

    def test_shadowing_names_allowed_through_declare(self):
        class Order(Record):
            pass

        Order.declare("items", default_factory=list)
        order = Order()
        assert order["items"] == []
        assert order == {"items": []}

    def test_is_a_mutable_mapping(self):
        assert isinstance(Person(name="Bob"), MutableMapping)


# --- Construction ---


class TestConstruction:
    def test_defaults_applied(self):
        person = Person(name="Bob")
        assert person["age"] == 0
        assert person["tags"] == []

    def test_defaults_precede_seeds(self):
        class Counter(Record):
            count = Property(default=5)

        assert Counter({"count": 7})["count"] == 7
        assert Counter(count=7)["count"] == 7

    def test_mapping_then_keywords(self):
        person = Person({"name": "Ann", "age": 30}, age=31)
        assert person["name"] == "Ann"
        assert person["age"] == 31

    def test_iterable_of_pairs(self):
        person = Person([("name", "Ann"), ("age", 2)])
        assert person["age"] == 2

    def test_factory_gives_fresh_value_per_record(self):
        first, second = Person(name="a"), Person(name="b")
        first["tags"].append("x")
        assert second["tags"] == []

    def test_missing_required_fails(self):
        with pytest.raises(RequiredPropertyMissing) as exc_info:
            Person(age=3)
        assert exc_info.value.name == "name"
        assert exc_info.value.owner == "Person"

    def test_undeclared_seed_fails(self):
        with pytest.raises(PropertyNotDefined):
            Person(name="Bob", phone="555")

    def test_invalid_seed_fails(self):
        with pytest.raises(ValidationFailed):
            Person(name="Bob", age="old")

    def test_required_default_satisfies_requirement(self):
        class Job(Record):
            state = Property(default="queued", required=True)

        assert Job()["state"] == "queued"

    def test_invalid_default_fails_construction(self):
        class Broken(Record):
            count = Property(default="zero", validate=NUMERIC)

        with pytest.raises(ValidationFailed):
            Broken()

    def test_enum_keys(self):
        class Key(str, Enum):
            NAME = "name"

        person = Person({Key.NAME: "Bob"})
        assert person["name"] == "Bob"
        assert person[Key.NAME] == "Bob"
        assert Key.NAME in person
        assert list(person) == ["age", "tags", "name"]


# --- Reads ---


class TestRead:
    def test_undeclared_read_fails(self):
        person = Person(name="Bob")
        with pytest.raises(PropertyNotDefined):
            person["phone"]
        with pytest.raises(PropertyNotDefined):
            person.get("phone")

    def test_declared_but_unset_reads_none(self):
        person = Person(name="Bob")
        assert person["email"] is None
        assert person.get("email") is None
        assert person.get("email", "none@example.com") == "none@example.com"
        assert "email" not in person

    def test_attribute_access(self):
        person = Person(name="Bob")
        assert person.name == "Bob"
        person.age = 40
        assert person["age"] == 40

    def test_fetch_passes_value_to_callback(self):
        seen = []
        person = Person(name="Bob")
        assert person.fetch("name", seen.append) == "Bob"
        assert seen == ["Bob"]
        assert person.fetch("age") == 0


# --- Writes ---


class TestWrite:
    def test_undeclared_write_fails(self):
        person = Person(name="Bob")
        with pytest.raises(PropertyNotDefined):
            person["phone"] = "555"
        assert "phone" not in person

    def test_validation_round_trip(self):
        class Aged(Record):
            pass

        Aged.declare("age", validate=NUMERIC)
        record = Aged()
        with pytest.raises(ValidationFailed) as exc_info:
            record["age"] = "x"
        assert exc_info.value.reason is ValidationReason.TYPE_MISMATCH
        assert "age" not in record

        record["age"] = 5
        assert record["age"] == 5

    def test_failed_write_leaves_value(self):
        person = Person(name="Bob", age=10)
        with pytest.raises(ValidationFailed):
            person["age"] = "eleven"
        assert person["age"] == 10

    def test_required_cannot_be_cleared(self):
        class Keyed(Record):
            pass

        Keyed.declare("id", required=True)
        record = Keyed({"id": 1})
        with pytest.raises(RequiredPropertyMissing):
            record["id"] = None
        assert record["id"] == 1

    def test_required_cannot_be_cleared_via_attribute(self):
        person = Person(name="Bob")
        with pytest.raises(RequiredPropertyMissing):
            person.name = None
        assert person.name == "Bob"

    def test_string_set_rule(self):
        class Tagged(Record):
            pass

        Tagged.declare("tags", validate=STRING_SET)
        record = Tagged()
        record["tags"] = ["a", "b"]

        with pytest.raises(ValidationFailed) as nested:
            record["tags"] = [["x"]]
        assert nested.value.reason is ValidationReason.NESTED_COLLECTION

        with pytest.raises(ValidationFailed) as element:
            record["tags"] = [1, 2]
        assert element.value.reason is ValidationReason.ELEMENT_TYPE_MISMATCH

        assert record["tags"] == ["a", "b"]

    def test_none_is_checked_against_rule(self):
        person = Person(name="Bob")
        with pytest.raises(ValidationFailed):
            person["age"] = None

    def test_update_goes_through_validation(self):
        person = Person(name="Bob")
        with pytest.raises(PropertyNotDefined):
            person.update({"age": 4, "phone": "555"})
        assert person["age"] == 4

    def test_setdefault(self):
        person = Person(name="Bob")
        assert person.setdefault("email", "bob@example.com") == "bob@example.com"
        assert person.setdefault("email", "other@example.com") == "bob@example.com"
        with pytest.raises(ValidationFailed):
            Person(name="Ann").setdefault("email", "no-at-sign")


# --- Deletes ---


class TestDelete:
    def test_delete_optional(self):
        person = Person(name="Bob", email="bob@example.com")
        del person["email"]
        assert "email" not in person
        assert person["email"] is None

    def test_delete_required_fails(self):
        person = Person(name="Bob")
        with pytest.raises(RequiredPropertyMissing):
            del person["name"]
        assert person["name"] == "Bob"

    def test_delete_unset_raises_key_error(self):
        person = Person(name="Bob")
        with pytest.raises(KeyError):
            del person["email"]

    def test_delete_undeclared(self):
        with pytest.raises(PropertyNotDefined):
            del Person(name="Bob")["phone"]

    def test_pop(self):
        person = Person(name="Bob", email="bob@example.com")
        assert person.pop("email") == "bob@example.com"
        assert person.pop("email", "gone") == "gone"
        with pytest.raises(KeyError):
            person.pop("email")
        with pytest.raises(RequiredPropertyMissing):
            person.pop("name")

    def test_clear_with_required_leaves_record_unchanged(self):
        person = Person(name="Bob", email="bob@example.com")
        before = dict(person)
        with pytest.raises(RequiredPropertyMissing):
            person.clear()
        assert dict(person) == before

    def test_clear_without_required(self):
        class Loose(Record):
            note = Property(default="x")

        record = Loose()
        record.clear()
        assert len(record) == 0
        assert record["note"] is None

    def test_popitem_skips_required(self):
        person = Person(name="Bob", email="bob@example.com")
        assert person.popitem() == ("email", "bob@example.com")
        assert person.popitem() == ("tags", [])
        assert person.popitem() == ("age", 0)
        with pytest.raises(KeyError):
            person.popitem()
        assert dict(person) == {"name": "Bob"}


# --- Mapping behaviour ---


class TestMappingBehaviour:
    def test_only_written_keys_are_visible(self):
        person = Person(name="Bob")
        assert list(person) == ["age", "tags", "name"]
        assert len(person) == 3
        assert dict(person) == {"age": 0, "tags": [], "name": "Bob"}

    def test_equality_by_contents(self):
        person = Person(name="Bob")
        assert person == {"name": "Bob", "age": 0, "tags": []}
        assert person == Person(name="Bob")
        assert person != Person(name="Ann")

    def test_non_string_membership(self):
        assert 1 not in Person(name="Bob")

    def test_copy_is_independent(self):
        person = Person(name="Bob")
        duplicate = person.copy()
        duplicate["age"] = 9
        assert type(duplicate) is Person
        assert person["age"] == 0
        assert copy.copy(person) == person

    def test_to_dict_and_json(self):
        class Team(Record):
            lead = Property()
            members = Property(default_factory=list)

        team = Team(lead=Person(name="Bob"), members=[Person(name="Ann", age=2)])
        plain = team.to_dict()
        assert plain == {
            "members": [{"age": 2, "tags": [], "name": "Ann"}],
            "lead": {"age": 0, "tags": [], "name": "Bob"},
        }
        assert type(plain["lead"]) is dict
        assert json.loads(team.to_json()) == plain

    def test_to_dict_converts_records_inside_mappings(self):
        class Crew(Record):
            roles = Property(default_factory=dict)

        crew = Crew(roles={"lead": Person(name="Bob"), "others": [Person(name="Ann")]})
        plain = crew.to_dict()
        assert type(plain["roles"]["lead"]) is dict
        assert plain["roles"]["lead"]["name"] == "Bob"
        assert plain["roles"]["others"][0]["name"] == "Ann"
        assert json.loads(crew.to_json())["roles"]["lead"]["name"] == "Bob"

    def test_repr(self):
        person = Person(name="Bob")
        assert repr(person) == "<Person age=0 tags=[] name='Bob'>"
        assert str(person) == repr(person)


# --- Inheritance ---


class TestInheritance:
    def test_subclass_inherits_properties(self):
        class Employee(Person):
            salary = Property(validate=NUMERIC)

        employee = Employee(name="Bob", salary=10)
        assert Employee.property_names() == ["name", "email", "age", "tags", "salary"]
        assert employee["age"] == 0
        assert not Person.is_declared("salary")

    def test_late_base_declaration_cascades(self):
        class Base(Record):
            pass

        class Middle(Base):
            pass

        class Leaf(Middle):
            pass

        leaf = Leaf()
        Base.declare("kind", default="generic", validate=STRING)

        assert Leaf.is_declared("kind")
        assert Middle.is_declared("kind")
        assert Leaf()["kind"] == "generic"
        # Existing records see the property but get no retroactive default
        assert leaf["kind"] is None
        with pytest.raises(ValidationFailed):
            leaf["kind"] = 5

    def test_late_required_applies_to_new_records(self):
        class Base(Record):
            pass

        class Child(Base):
            pass

        Base.declare("id", required=True)
        with pytest.raises(RequiredPropertyMissing):
            Child()
        assert Child(id=1)["id"] == 1

    def test_subclass_override_does_not_touch_parent(self):
        class Base(Record):
            level = Property(default=1)

        class Child(Base):
            level = Property(default=2)

        assert Base()["level"] == 1
        assert Child()["level"] == 2

    def test_clear_in_subclass(self):
        class Base(Record):
            code = Property(validate=NUMERIC)

        class Child(Base):
            pass

        Child.declare("code", validate=CLEAR)
        assert Child(code="abc")["code"] == "abc"
        with pytest.raises(ValidationFailed):
            Base(code="abc")


class TestOptionPolicy:
    def test_class_keyword(self):
        class Classic(Record, option_policy="replace"):
            pass

        class Derived(Classic):
            pass

        assert Classic.__schema__.policy is OptionPolicy.REPLACE
        assert Derived.__schema__.policy is OptionPolicy.REPLACE

        Classic.declare("size", default=1, validate=NUMERIC)
        Classic.declare("size")
        assert Derived()["size"] is None
        assert Derived(size="big")["size"] == "big"

    def test_policy_from_environment(self, monkeypatch):
        from dashrecord.config import reset_config

        monkeypatch.setenv("DASHRECORD_OPTION_POLICY", "replace")
        reset_config()

        class Configured(Record):
            pass

        assert Configured.__schema__.policy is OptionPolicy.REPLACE
