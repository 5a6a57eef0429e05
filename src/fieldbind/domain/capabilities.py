"""Type capability ABC and registry.

Domain value types take part in extraction and apply through a
:class:`TypeCapability` registered under a stable type tag. The core only
ever talks to the capability, never to the concrete value type, so new
types can be added (directly or from plugins) without touching the
extractor or the converter.

An unregistered tag is not an error at this layer: lookups return None
and the caller falls back on the generic converter and validator.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from collections.abc import Callable, Iterator
from typing import TYPE_CHECKING, Any

from fieldbind.domain.types import (
    EMAIL_PATTERN,
    EMAIL_PATTERN_MESSAGE,
    NO_SELECTION,
    Email,
    Multiline,
    Password,
    RadioGroup,
    RenderHint,
)
from fieldbind.errors import ConversionError, UnsupportedTypeError, ValidationError

if TYPE_CHECKING:
    from fieldbind.domain.field import Field

logger = logging.getLogger(__name__)

EMAIL = "email"
PASSWORD = "password"
MULTILINE = "multiline"
RADIO_GROUP = "radio_group"


class TypeCapability(ABC):
    """Behavior of one domain value type, keyed by :attr:`tag`."""

    @property
    @abstractmethod
    def tag(self) -> str:
        """Type tag identifier (e.g. 'email', 'radio_group')."""
        ...

    @property
    @abstractmethod
    def value_type(self) -> type:
        """Python type of the values this capability handles."""
        ...

    @abstractmethod
    def parse_string(self, current: Any, text: str) -> Any:
        """Return a new value built from *text*, using *current* as template."""
        ...

    @abstractmethod
    def to_string(self, value: Any) -> str:
        """Canonical string form of *value*."""
        ...

    def validate(self, text: str, *, field_name: str = "") -> None:
        """Raise :class:`ValidationError` if *text* is syntactically invalid."""

    def render_hint(self, value: Any) -> tuple[RenderHint | None, bool]:
        """Return ``(hint, hint_available)`` for renderers."""
        return None, False

    def domain_setter(self, value: Any) -> Any:
        """Value to write back when the field needs no string round-trip."""
        return value


class ChoiceCapability(ABC):
    """Extra contract for choice-style capabilities."""

    @abstractmethod
    def selected_index(self, value: Any) -> int:
        ...

    @abstractmethod
    def set_selected_by_label(self, value: Any, label: str) -> None:
        ...


class DomainValueCapability(TypeCapability):
    """Capability for any type following the get_value/set_value contract.

    Parameterized by tag and type so plain domain types need no subclass.
    *factory* builds the template value when the field has none (a mapping
    member decoded from JSON, for example).
    """

    def __init__(
        self,
        tag: str,
        value_type: type,
        factory: Callable[[], Any] | None = None,
    ) -> None:
        self._tag = tag
        self._value_type = value_type
        self._factory = factory

    @property
    def tag(self) -> str:
        return self._tag

    @property
    def value_type(self) -> type:
        return self._value_type

    def _template(self, current: Any, text: str) -> Any:
        if isinstance(current, self._value_type):
            return current
        if self._factory is None:
            raise ConversionError(self._tag, text, reason="no value to update")
        return self._factory()

    def parse_string(self, current: Any, text: str) -> Any:
        return self._template(current, text).set_value(text)

    def to_string(self, value: Any) -> str:
        if isinstance(value, self._value_type):
            return value.get_value()
        return "" if value is None else str(value)

    def render_hint(self, value: Any) -> tuple[RenderHint | None, bool]:
        if isinstance(value, self._value_type):
            return value.new_render_hint()
        return None, False


class EmailCapability(DomainValueCapability):
    """Email addresses, checked against :data:`EMAIL_PATTERN`."""

    def __init__(self) -> None:
        super().__init__(EMAIL, Email, factory=lambda: Email(""))

    def validate(self, text: str, *, field_name: str = "") -> None:
        if not EMAIL_PATTERN.search(text):
            raise ValidationError(field_name, self.tag, EMAIL_PATTERN_MESSAGE)


class RadioGroupCapability(DomainValueCapability, ChoiceCapability):
    """Single-choice groups.

    Renderers usually update the group in place (selection by index or
    label) and apply it with ``applied_flag=False``; :meth:`domain_setter`
    then clamps a stale index before it is written back.
    """

    def __init__(self) -> None:
        super().__init__(RADIO_GROUP, RadioGroup)

    def selected_index(self, value: RadioGroup) -> int:
        return value.selected_index()

    def set_selected_by_label(self, value: RadioGroup, label: str) -> None:
        value.set_selected(label)

    def domain_setter(self, value: Any) -> Any:
        if isinstance(value, RadioGroup) and not 0 <= value.selected < len(value.options):
            value.selected = NO_SELECTION
        return value


class CapabilityRegistry:
    """Type tag -> capability table, with reverse lookup by Python type."""

    def __init__(self) -> None:
        self._by_tag: dict[str, TypeCapability] = {}
        self._by_type: dict[type, str] = {}
        self._frozen = False

    # ------------------------------------------------------------------
    # Registration
    # ------------------------------------------------------------------

    def register(self, capability: TypeCapability, *, replace: bool = False) -> None:
        """Add *capability* under its tag.

        Raises ValueError on a duplicate tag unless *replace* is set, and
        RuntimeError once the registry is frozen.
        """
        if self._frozen:
            msg = f"Cannot register {capability.tag!r}: registry is frozen"
            raise RuntimeError(msg)
        if not isinstance(capability, TypeCapability):
            msg = f"{type(capability).__name__} is not a TypeCapability"
            raise TypeError(msg)

        tag = capability.tag.strip()
        if not tag:
            msg = "Capability tag must not be empty"
            raise ValueError(msg)
        if tag in self._by_tag and not replace:
            msg = f"Capability {tag!r} is already registered"
            raise ValueError(msg)

        previous = self._by_tag.get(tag)
        if previous is not None:
            self._by_type.pop(previous.value_type, None)
        self._by_tag[tag] = capability
        self._by_type[capability.value_type] = tag
        logger.debug("Registered capability %s for %s", tag, capability.value_type.__name__)

    def freeze(self) -> CapabilityRegistry:
        """Reject further registrations. Returns self."""
        self._frozen = True
        return self

    @property
    def frozen(self) -> bool:
        return self._frozen

    def copy(self) -> CapabilityRegistry:
        """Unfrozen copy with the same registrations."""
        clone = CapabilityRegistry()
        clone._by_tag = dict(self._by_tag)
        clone._by_type = dict(self._by_type)
        return clone

    # ------------------------------------------------------------------
    # Lookup
    # ------------------------------------------------------------------

    def get(self, tag: str) -> TypeCapability | None:
        return self._by_tag.get(tag)

    def __contains__(self, tag: object) -> bool:
        return tag in self._by_tag

    def __iter__(self) -> Iterator[TypeCapability]:
        return iter(self._by_tag.values())

    def __len__(self) -> int:
        return len(self._by_tag)

    def tags(self) -> list[str]:
        return list(self._by_tag)

    def tag_for_type(self, py_type: type) -> str | None:
        """Tag registered for *py_type* or its nearest registered base."""
        for klass in getattr(py_type, "__mro__", (py_type,)):
            tag = self._by_type.get(klass)
            if tag is not None:
                return tag
        return None

    def tag_for_value(self, value: Any) -> str | None:
        return self.tag_for_type(type(value))

    def _require(self, tag: str) -> TypeCapability:
        capability = self._by_tag.get(tag)
        if capability is None:
            raise UnsupportedTypeError(tag)
        return capability

    # ------------------------------------------------------------------
    # Dispatch
    # ------------------------------------------------------------------

    def parse_string(self, tag: str, current: Any, text: str) -> Any:
        return self._require(tag).parse_string(current, text)

    def to_string(self, tag: str, value: Any) -> str:
        return self._require(tag).to_string(value)

    def validate(self, tag: str, text: str, *, field_name: str = "") -> None:
        """Run the domain check for *tag*; unregistered tags always pass."""
        capability = self._by_tag.get(tag)
        if capability is not None:
            capability.validate(text, field_name=field_name)

    def render_hint(self, tag: str, value: Any) -> tuple[RenderHint | None, bool]:
        capability = self._by_tag.get(tag)
        if capability is None:
            return None, False
        return capability.render_hint(value)

    def domain_setter(self, tag: str, value: Any) -> Any:
        capability = self._by_tag.get(tag)
        if capability is None:
            return value
        return capability.domain_setter(value)

    def set_field_value(self, field: Field[Any], text: str) -> bool:
        """Update ``field.value`` from *text* for a domain tag.

        Renderers call this before apply and then report
        ``applied_flag=False`` for the field. Returns False when the
        field's tag is not a registered domain type.
        """
        capability = self._by_tag.get(field.type_tag)
        if capability is None:
            return False
        field.value = capability.parse_string(field.value, text)
        field.value_str = capability.to_string(field.value)
        return True


def builtin_registry() -> CapabilityRegistry:
    """Fresh, unfrozen registry holding the built-in domain types."""
    registry = CapabilityRegistry()
    registry.register(EmailCapability())
    registry.register(DomainValueCapability(PASSWORD, Password, factory=Password))
    registry.register(DomainValueCapability(MULTILINE, Multiline, factory=Multiline))
    registry.register(RadioGroupCapability())
    return registry


BUILTIN_REGISTRY: CapabilityRegistry = builtin_registry().freeze()
