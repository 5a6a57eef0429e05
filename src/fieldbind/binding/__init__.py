"""Binding layer — extraction, field collections, and the apply pass."""

from fieldbind.binding.binder import Binder
from fieldbind.binding.collection import FieldCollection
from fieldbind.binding.extract import extract_fields
from fieldbind.binding.result import ApplyResult, FieldError, FieldErrorCode

__all__ = [
    "ApplyResult",
    "Binder",
    "FieldCollection",
    "FieldError",
    "FieldErrorCode",
    "extract_fields",
]
