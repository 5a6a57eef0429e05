"""Tests for the exception hierarchy."""

import pytest

from fieldbind.errors import (
    CollectionConsumedError,
    ConversionError,
    FieldBindError,
    InvalidInputKindError,
    InvalidTargetKindError,
    UnsupportedTypeError,
    ValidationError,
)


class TestMessages:
    def test_conversion(self) -> None:
        exc = ConversionError("int8", "300", reason="value out of range")
        assert str(exc) == "can't convert '300' to int8: value out of range"
        assert exc.type_tag == "int8"
        assert exc.text == "300"

    def test_unsupported(self) -> None:
        exc = UnsupportedTypeError("Point", "1,2")
        assert str(exc) == "can't convert '1,2' to Point: unsupported type"
        assert isinstance(exc, ConversionError)

    def test_validation_default_message(self) -> None:
        exc = ValidationError("age", "float64")
        assert str(exc) == "type of age value should be float64"
        assert exc.field == "age"

    def test_invalid_input_names_kind(self) -> None:
        assert "got list" in str(InvalidInputKindError([1]))

    def test_invalid_target_reason(self) -> None:
        assert str(InvalidTargetKindError((), "read-only")).endswith("got tuple (read-only)")


class TestHierarchy:
    @pytest.mark.parametrize(
        ("exc", "builtin"),
        [
            (InvalidInputKindError(1), TypeError),
            (InvalidTargetKindError(1), TypeError),
            (CollectionConsumedError("x"), RuntimeError),
            (ConversionError("int", "x"), ValueError),
            (ValidationError("f", "int"), ValueError),
        ],
    )
    def test_builtin_bases(self, exc: Exception, builtin: type[Exception]) -> None:
        assert isinstance(exc, FieldBindError)
        assert isinstance(exc, builtin)
