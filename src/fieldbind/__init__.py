"""fieldbind — typed field descriptors for records and mappings.

Extract a dataclass, pydantic model or mapping into ordered field
descriptors, let a renderer edit their string forms, then apply the
edits back with type conversion.
"""

from fieldbind.binding import (
    ApplyResult,
    Binder,
    FieldCollection,
    FieldError,
    FieldErrorCode,
    extract_fields,
)
from fieldbind.domain.capabilities import (
    BUILTIN_REGISTRY,
    CapabilityRegistry,
    TypeCapability,
    builtin_registry,
)
from fieldbind.domain.convert import ValueConverter, convert_value
from fieldbind.domain.field import Field
from fieldbind.domain.kinds import TypeTag
from fieldbind.domain.types import NO_SELECTION, Email, Multiline, Password, RadioGroup
from fieldbind.domain.validate import validate_value
from fieldbind.errors import (
    CollectionConsumedError,
    ConversionError,
    FieldBindError,
    InvalidInputKindError,
    InvalidTargetKindError,
    UnsupportedTypeError,
    ValidationError,
)

__version__ = "0.1.0"

__all__ = [
    "BUILTIN_REGISTRY",
    "NO_SELECTION",
    "ApplyResult",
    "Binder",
    "CapabilityRegistry",
    "CollectionConsumedError",
    "ConversionError",
    "Email",
    "Field",
    "FieldBindError",
    "FieldCollection",
    "FieldError",
    "FieldErrorCode",
    "InvalidInputKindError",
    "InvalidTargetKindError",
    "Multiline",
    "Password",
    "RadioGroup",
    "TypeCapability",
    "TypeTag",
    "UnsupportedTypeError",
    "ValidationError",
    "ValueConverter",
    "__version__",
    "builtin_registry",
    "convert_value",
    "extract_fields",
    "validate_value",
]
