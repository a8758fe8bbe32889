"""
Structured error types for stepkit.

Two very different kinds of exception live here and must not be confused:

- **Programmer errors** (``StepkitError`` and subclasses): a step type was
  declared wrongly, or a record was built without its required inputs.
  These surface immediately and are not recoverable by the core.
- **Business failure** (``Failure``): raised by ``Context.fail`` to abort the
  current step.  It is the expected control-flow path, carries the failed
  record, and is meant to be caught by whoever invoked the step.

Hierarchy::

    StepkitError  (category, context, cause)
      ├── SchemaError               ── declaration misuse
      │     ├── SchemaConflictError   ── name re-declared with another kind
      │     └── InvalidFieldNameError ── name is not a usable accessor
      └── MissingFieldsError        ── required names absent at build (TypeError)

    Failure  ── control-flow signal carrying the record (plain Exception)

Examples:
    >>> error = SchemaConflictError("amount", existing="required", requested="held")
    >>> error.category
    <ErrorCategory.SCHEMA: 'SCHEMA'>
    >>> error.to_dict()["context"]["field"]
    'amount'

Tags:
    error-handling, exception-hierarchy, schema, failure-signal, stepkit

Doc-Types:
    - API Reference
    - Error Handling Guide
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field as dc_field
from enum import Enum
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from stepkit.context import Context


class ErrorCategory(str, Enum):
    """Standard error categories for classification and logging."""

    SCHEMA = "SCHEMA"  # Bad declaration on a step type
    VALIDATION = "VALIDATION"  # Required input missing at build time
    FAILURE = "FAILURE"  # Business failure raised by Context.fail
    INTERNAL = "INTERNAL"


@dataclass
class ErrorContext:
    """
    Structured metadata attached to a ``StepkitError``.

    Attributes:
        step: Name of the step type involved
        record_type: Name of the generated record type involved
        field: Field name the error is about
        metadata: Additional key-value pairs
    """

    step: str | None = None
    record_type: str | None = None
    field: str | None = None
    metadata: dict[str, Any] = dc_field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for logging."""
        result = {}
        for key in ["step", "record_type", "field"]:
            value = getattr(self, key)
            if value is not None:
                result[key] = value
        if self.metadata:
            result.update(self.metadata)
        return result


class StepkitError(Exception):
    """
    Base exception for all stepkit programmer errors.

    Subclasses set ``default_category`` so callers can route on it without
    matching on the class.
    """

    default_category: ErrorCategory = ErrorCategory.INTERNAL

    def __init__(
        self,
        message: str,
        *,
        category: ErrorCategory | None = None,
        context: ErrorContext | None = None,
        cause: Exception | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.category = category or self.default_category
        self.context = context or ErrorContext()
        self.cause = cause

        if cause is not None:
            self.__cause__ = cause

    def with_context(self, **kwargs: Any) -> StepkitError:
        """
        Add context to this error (fluent API).

        Usage:
            raise SchemaError("bad layer").with_context(step="ChargeCard")
        """
        for key, value in kwargs.items():
            if hasattr(self.context, key):
                setattr(self.context, key, value)
            else:
                self.context.metadata[key] = value
        return self

    def to_dict(self) -> dict[str, Any]:
        """Convert error to dictionary for logging/serialization."""
        result = {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "category": self.category.value,
        }
        context_dict = self.context.to_dict()
        if context_dict:
            result["context"] = context_dict
        if self.cause is not None:
            result["cause"] = str(self.cause)
        return result

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.message!r}, category={self.category.value})"


# =============================================================================
# SCHEMA ERRORS (declaration time)
# =============================================================================


class SchemaError(StepkitError):
    """Base for errors raised while declaring fields on a step type."""

    default_category = ErrorCategory.SCHEMA


class SchemaConflictError(SchemaError):
    """Raised when a field name is re-declared with an incompatible kind."""

    def __init__(self, name: str, *, existing: Any, requested: Any, step: str | None = None):
        self.field_name = name
        self.existing = getattr(existing, "value", existing)
        self.requested = getattr(requested, "value", requested)
        where = f" on {step}" if step else ""
        super().__init__(
            f"Field '{name}' is already declared as {self.existing}{where}; "
            f"cannot re-declare it as {self.requested}",
            context=ErrorContext(step=step, field=name),
        )


class InvalidFieldNameError(SchemaError):
    """Raised when a name cannot be used as a field accessor."""

    def __init__(self, name: Any, reason: str, step: str | None = None):
        self.field_name = name
        super().__init__(
            f"Invalid field name {name!r}: {reason}",
            context=ErrorContext(step=step, field=str(name)),
        )


# =============================================================================
# BUILD ERRORS
# =============================================================================


class MissingFieldsError(StepkitError, TypeError):
    """
    Raised by ``Context.build`` when required fields are absent.

    Subclasses ``TypeError`` because it plays the role of a missing keyword
    argument: ``except TypeError`` around a build keeps working.
    """

    default_category = ErrorCategory.VALIDATION

    def __init__(self, missing: Iterable[str], record_type: str | None = None):
        self.missing = tuple(missing)
        names = ", ".join(self.missing)
        target = record_type or "context"
        super().__init__(
            f"{target} is missing required fields: {names}",
            context=ErrorContext(record_type=record_type, metadata={"missing": list(self.missing)}),
        )


# =============================================================================
# FAILURE SIGNAL
# =============================================================================


class Failure(Exception):
    """
    Control-flow signal raised by ``Context.fail``.

    Carries the record as it was at the moment of failure.  By the time this
    is raised the record's ``failure`` flag is already set and any
    last-moment fields have been merged, so the catcher only needs to look
    at ``exc.context``.

    Not a ``StepkitError``: catching ``StepkitError`` for bad declarations
    must never swallow a business failure.
    """

    category = ErrorCategory.FAILURE

    def __init__(self, context: Context):
        super().__init__(context)
        self.context = context

    def __repr__(self) -> str:
        return f"Failure({self.context!r})"


__all__ = [
    "ErrorCategory",
    "ErrorContext",
    "StepkitError",
    "SchemaError",
    "SchemaConflictError",
    "InvalidFieldNameError",
    "MissingFieldsError",
    "Failure",
]
