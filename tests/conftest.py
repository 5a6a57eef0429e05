"""Shared pytest fixtures and sample records for fieldbind tests."""

from __future__ import annotations

import os
from dataclasses import dataclass, field

import pytest

from fieldbind.domain.capabilities import CapabilityRegistry, builtin_registry
from fieldbind.domain.kinds import Float32, Int8, Uint8
from fieldbind.domain.types import Email, Multiline, Password, RadioGroup


@dataclass
class Person:
    name: str
    age: float
    on: bool


@dataclass
class Profile:
    """Record mixing primitive widths, sequences and domain types."""

    name: str = "Joe"
    age: float = 30.5
    tst: int = 7
    level: Int8 = -3
    flags: Uint8 = 200
    ratio: Float32 = 0.5
    on: bool = False
    int_array: list[int] = field(default_factory=lambda: [1, 2, 3])
    float_array: list[float] = field(default_factory=lambda: [1.5, 2.5])
    email: Email = field(default_factory=lambda: Email("joe@example.com"))
    password: Password = field(default_factory=lambda: Password(value="s3cret"))
    notes: Multiline = field(default_factory=lambda: Multiline(value="a\nb", multiline_rows=4))
    option: RadioGroup = field(
        default_factory=lambda: RadioGroup(options=["red", "green", "blue"], selected=1)
    )
    _cache: dict = field(default_factory=dict)


@pytest.fixture
def registry() -> CapabilityRegistry:
    """Fresh, unfrozen registry with the built-in capabilities."""
    return builtin_registry()


def unchanged(f):
    """per_field callback that feeds each descriptor its own value_str."""
    return f.value_str, True


@pytest.fixture(autouse=True)
def _isolate_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep FIELDBIND_* variables of the outer environment out of tests."""
    for key in list(os.environ):
        if key.startswith("FIELDBIND_"):
            monkeypatch.delenv(key)
