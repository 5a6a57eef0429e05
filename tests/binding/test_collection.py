"""Tests for FieldCollection.apply."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

import pytest
from pydantic import BaseModel
from pydantic import Field as ModelField

from fieldbind.binding.collection import FieldCollection
from fieldbind.binding.extract import extract_fields
from fieldbind.binding.result import FieldErrorCode
from fieldbind.domain.capabilities import BUILTIN_REGISTRY
from fieldbind.domain.convert import ValueConverter
from fieldbind.domain.field import Field
from fieldbind.domain.types import NO_SELECTION
from fieldbind.errors import CollectionConsumedError, InvalidTargetKindError
from tests.conftest import Person, Profile, unchanged


def edits(values: dict[str, str]) -> Any:
    """per_field callback returning *values* for named fields, value_str otherwise."""

    def per_field(f: Field[Any]) -> tuple[str, bool]:
        return values.get(f.name, f.value_str), True

    return per_field


@dataclass(frozen=True)
class FrozenPerson:
    name: str
    age: float
    on: bool


@dataclass
class NameOnly:
    name: str = ""


@dataclass
class Limits:
    n: int | None = None
    label: str | None = None
    note: str | None = ""


class Counter(BaseModel):
    model_config = {"validate_assignment": True}

    name: str = "a"
    count: int = ModelField(default=1, ge=0)


class FrozenCounter(BaseModel):
    model_config = {"frozen": True}

    name: str = "a"


class TestApply:
    def test_edit_round_trip(self) -> None:
        person = Person(name="Joe", age=30.5, on=False)
        fields = extract_fields(person)
        result = fields.apply(person, edits({"name": "Jane", "age": "31", "on": "true"}))
        assert result.ok
        assert result.applied == ["name", "age", "on"]
        assert person == Person(name="Jane", age=31.0, on=True)
        assert isinstance(person.age, float)

    def test_unchanged_strings_are_idempotent(self) -> None:
        profile = Profile()
        result = extract_fields(profile).apply(profile, unchanged)
        assert result.ok, result.errors
        assert profile == Profile()

    def test_apply_to_other_record(self) -> None:
        source = Person(name="Joe", age=30.5, on=False)
        target = Person(name="", age=0.0, on=True)
        extract_fields(source).apply(target, unchanged)
        assert target == source

    def test_soft_errors_do_not_stop_other_fields(self) -> None:
        person = Person(name="Joe", age=30.5, on=False)
        result = extract_fields(person).apply(
            person, edits({"name": "Jane", "age": "abc", "on": "true"})
        )
        assert not result.ok
        assert result.applied == ["name", "on"]
        error = result.error_for("age")
        assert error is not None
        assert error.code == FieldErrorCode.CONVERSION
        assert error.type_tag == "float64"
        assert error.text == "abc"
        assert person.name == "Jane"
        assert person.age == 30.5
        assert person.on is True

    def test_bool_is_case_sensitive(self) -> None:
        person = Person(name="Joe", age=30.5, on=False)
        result = extract_fields(person).apply(person, edits({"on": "True"}))
        assert result.error_for("on") is not None
        assert person.on is False

    def test_integer_width_enforced(self) -> None:
        profile = Profile()
        result = extract_fields(profile).apply(profile, edits({"level": "300"}))
        assert result.error_for("level").code == FieldErrorCode.CONVERSION
        assert profile.level == -3

    def test_legacy_converter_wraps(self) -> None:
        profile = Profile()
        converter = ValueConverter(BUILTIN_REGISTRY, legacy=True)
        result = extract_fields(profile).apply(
            profile, edits({"level": "300"}), converter=converter
        )
        assert result.ok
        assert profile.level == 44

    def test_sequence_edit(self) -> None:
        profile = Profile()
        result = extract_fields(profile).apply(
            profile, edits({"int_array": "[4 5]", "float_array": "[]"})
        )
        assert result.ok
        assert profile.int_array == [4, 5]
        assert profile.float_array == []

    def test_domain_string_edit(self) -> None:
        profile = Profile()
        original = profile.password
        result = extract_fields(profile).apply(
            profile, edits({"password": "hunter2", "option": "blue"})
        )
        assert result.ok
        assert profile.password.value == "hunter2"
        assert original.value == "s3cret"
        assert profile.option.selected == 2

    def test_radio_unknown_label_clears_selection(self) -> None:
        profile = Profile()
        extract_fields(profile).apply(profile, edits({"option": "purple"}))
        assert profile.option.selected == NO_SELECTION


class TestAppliedFlag:
    def test_false_writes_stored_value(self) -> None:
        person = Person(name="Joe", age=30.5, on=False)
        fields = extract_fields(person)
        fields.get("name").value = "Ann"
        result = fields.apply(person, lambda f: ("ignored", False))
        assert result.ok
        assert person.name == "Ann"
        assert person.age == 30.5

    def test_set_field_value_then_false(self) -> None:
        profile = Profile()
        fields = extract_fields(profile)

        def per_field(f: Field[Any]) -> tuple[str, bool]:
            if f.name == "option":
                assert fields.registry.set_field_value(f, "blue")
                return "", False
            return f.value_str, True

        result = fields.apply(profile, per_field)
        assert result.ok
        assert profile.option.selected == 2
        assert profile.option.selected_label() == "blue"

    def test_stale_radio_index_is_clamped(self) -> None:
        profile = Profile()
        fields = extract_fields(profile)

        def per_field(f: Field[Any]) -> tuple[str, bool]:
            if f.name == "option":
                f.value.selected = 7
                return "", False
            return f.value_str, True

        fields.apply(profile, per_field)
        assert profile.option.selected == NO_SELECTION


class TestAtomic:
    def test_conversion_error_writes_nothing(self) -> None:
        person = Person(name="Joe", age=30.5, on=False)
        result = extract_fields(person).apply(
            person, edits({"name": "Jane", "age": "abc", "on": "true"}), atomic=True
        )
        assert not result.ok
        assert result.atomic
        assert result.rolled_back
        assert result.applied == []
        assert person == Person(name="Joe", age=30.5, on=False)

    def test_success_writes_everything(self) -> None:
        person = Person(name="Joe", age=30.5, on=False)
        result = extract_fields(person).apply(
            person, edits({"name": "Jane", "age": "31", "on": "true"}), atomic=True
        )
        assert result.ok
        assert not result.rolled_back
        assert result.applied == ["name", "age", "on"]
        assert person == Person(name="Jane", age=31.0, on=True)

    def test_assignment_error_rolls_back(self) -> None:
        counter = Counter(name="a", count=1)
        result = extract_fields(counter).apply(
            counter, edits({"name": "b", "count": "-5"}), atomic=True
        )
        assert result.rolled_back
        assert result.error_for("count").code == FieldErrorCode.ASSIGNMENT
        assert counter.name == "a"
        assert counter.count == 1

    def test_mapping_rollback_removes_new_keys(self) -> None:
        record = {"a": 1, "b": "x"}
        fields = extract_fields(record)
        target: dict[str, Any] = {}

        class Picky(dict):
            def __setitem__(self, key: str, value: Any) -> None:
                if key == "b":
                    raise ValueError("read-only")
                super().__setitem__(key, value)

        picky = Picky()
        result = fields.apply(picky, unchanged, atomic=True)
        assert result.rolled_back
        assert dict(picky) == target


class TestNullable:
    def test_unset_optionals_round_trip(self) -> None:
        limits = Limits()
        fields = extract_fields(limits)
        assert [f.value_str for f in fields] == ["", "", ""]
        result = fields.apply(limits, unchanged)
        assert result.ok
        assert limits == Limits(n=None, label=None, note="")

    def test_empty_text_clears_optional_int(self) -> None:
        limits = Limits(n=5)
        result = extract_fields(limits).apply(limits, edits({"n": ""}))
        assert result.ok
        assert limits.n is None

    def test_text_sets_optional_int(self) -> None:
        limits = Limits()
        result = extract_fields(limits).apply(limits, edits({"n": "7"}))
        assert result.ok
        assert limits.n == 7

    def test_empty_text_on_required_int_fails(self) -> None:
        record: dict[str, Any] = {"count": 3}
        result = extract_fields(record).apply(record, edits({"count": ""}))
        assert result.error_for("count").code == FieldErrorCode.CONVERSION
        assert record == {"count": 3}


class TestTargets:
    def test_mapping_target(self) -> None:
        record: dict[str, Any] = {"name": "Joe", "count": 3, "tags": [1, 2.5]}
        result = extract_fields(record).apply(
            record, edits({"count": "4", "tags": "[3 4.5]"})
        )
        assert result.ok
        assert record == {"name": "Joe", "count": 4, "tags": [3, 4.5]}

    def test_null_member_is_unsupported(self) -> None:
        record: dict[str, Any] = {"name": "Joe", "nothing": None}
        result = extract_fields(record).apply(record, unchanged)
        assert result.error_for("nothing").code == FieldErrorCode.UNSUPPORTED_TYPE
        assert result.applied == ["name"]

    def test_unknown_member_is_assignment_error(self) -> None:
        person = Person(name="Joe", age=30.5, on=False)
        target = NameOnly()
        result = extract_fields(person).apply(target, unchanged)
        assert target.name == "Joe"
        assert result.error_for("age").code == FieldErrorCode.ASSIGNMENT
        assert result.error_for("on").code == FieldErrorCode.ASSIGNMENT
        assert not hasattr(target, "age")

    def test_model_target(self) -> None:
        counter = Counter()
        result = extract_fields(counter).apply(counter, edits({"count": "9"}))
        assert result.ok
        assert counter.count == 9

    def test_model_assignment_validation_is_soft(self) -> None:
        counter = Counter()
        result = extract_fields(counter).apply(counter, edits({"name": "z", "count": "-1"}))
        assert result.applied == ["name"]
        assert result.error_for("count").code == FieldErrorCode.ASSIGNMENT
        assert counter.count == 1

    @pytest.mark.parametrize(
        "target",
        [
            FrozenPerson(name="Joe", age=1.0, on=False),
            FrozenCounter(),
            ("Joe", 1.0, False),
            Person,
            "text",
            {"name": "Joe"}.items(),
        ],
    )
    def test_invalid_targets(self, target: Any) -> None:
        fields = extract_fields(Person(name="Joe", age=30.5, on=False))
        with pytest.raises(InvalidTargetKindError):
            fields.apply(target, unchanged)
        assert not fields.consumed

    def test_invalid_target_is_not_partially_written(self) -> None:
        fields = extract_fields(Person(name="Joe", age=30.5, on=False))
        calls: list[str] = []

        def per_field(f: Field[Any]) -> tuple[str, bool]:
            calls.append(f.name)
            return f.value_str, True

        with pytest.raises(InvalidTargetKindError):
            fields.apply((), per_field)
        assert calls == []


class TestConsumption:
    def test_second_apply_raises(self) -> None:
        person = Person(name="Joe", age=30.5, on=False)
        fields = extract_fields(person)
        fields.apply(person, unchanged)
        assert fields.consumed
        with pytest.raises(CollectionConsumedError):
            fields.apply(person, unchanged)

    def test_collection_protocol(self) -> None:
        fields = extract_fields(Person(name="Joe", age=30.5, on=False))
        assert len(fields) == 3
        assert fields[1].name == "age"
        assert fields.get("missing") is None
        assert repr(fields) == "FieldCollection(['name', 'age', 'on'])"

    def test_manual_collection(self) -> None:
        field: Field[None] = Field("count", "Count", "uint8", "1", 1)
        record: dict[str, Any] = {"count": 1}
        result = FieldCollection([field]).apply(record, lambda f: ("200", True))
        assert result.ok
        assert record["count"] == 200
