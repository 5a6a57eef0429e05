"""ApplyResult and FieldError — the outcome contract of an apply pass.

Per-field failures never abort an apply; they are reported here so the
caller can show them next to the offending entries.
"""

from __future__ import annotations

from enum import StrEnum

from pydantic import BaseModel, Field


class FieldErrorCode(StrEnum):
    """Why a single field was not written."""

    CONVERSION = "CONVERSION"
    UNSUPPORTED_TYPE = "UNSUPPORTED_TYPE"
    ASSIGNMENT = "ASSIGNMENT"


class FieldError(BaseModel):
    """Structured per-field error payload within an ApplyResult."""

    model_config = {"frozen": True}

    field: str
    type_tag: str
    code: FieldErrorCode
    message: str
    text: str | None = None


class ApplyResult(BaseModel):
    """Return type of :meth:`FieldCollection.apply`.

    Attributes:
        ok: True when every field was written.
        op: Name of the operation (always ``"apply"`` for now).
        applied: Names written into the target, in field order.
        errors: Fields that failed conversion or assignment.
        atomic: Whether the pass ran all-or-nothing.
        rolled_back: True when an atomic pass wrote nothing because of errors.
    """

    model_config = {"frozen": True}

    ok: bool
    op: str = "apply"
    applied: list[str] = Field(default_factory=list)
    errors: list[FieldError] = Field(default_factory=list)
    atomic: bool = False
    rolled_back: bool = False

    def error_for(self, name: str) -> FieldError | None:
        for error in self.errors:
            if error.field == name:
                return error
        return None
