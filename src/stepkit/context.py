"""
Context - the mutable record that flows through business-logic steps.

A ``Context`` is built from caller input, read and written by a step's
business logic, and handed back to whoever invoked the step.  It carries:

- ``error`` / ``error_cause``: free-form failure details (always present)
- every field declared on its step type (see :mod:`stepkit.declaration`)
- a success/failure flag that only :meth:`Context.fail` can flip

Example:
    >>> ctx = Context.build({"error": None, "unknown": 1})
    >>> ctx.success
    True
    >>> ctx.to_dict()
    {'error': None}
    >>> try:
    ...     ctx.fail(error="card declined")
    ... except Failure as exc:
    ...     exc.context is ctx
    True
    >>> ctx.failure, ctx.error
    (True, 'card declined')

Manifesto:
    Steps in a pipeline should be able to pass either a plain mapping or an
    already-built context to the next step without caring which one they
    hold.  ``build`` is therefore idempotent on contexts, and
    ``assign_attributes`` accepts a superset mapping and keeps only what the
    receiving record type knows about.

Tags:
    stepkit, context, execution-context, failure-signal

Doc-Types:
    api-reference
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, ClassVar, NoReturn

from stepkit.core.errors import Failure, MissingFieldsError
from stepkit.core.logging import get_logger
from stepkit.core.settings import get_settings
from stepkit.schema import FieldKind, Schema

logger = get_logger(__name__)

_BASE_ATTRIBUTES = ("error", "error_cause")


def _as_mapping(value: Any) -> Mapping[Any, Any]:
    """Coerce build/assign input into a mapping."""
    if value is None:
        return {}
    if isinstance(value, Mapping):
        return value
    to_dict = getattr(value, "to_dict", None)
    if callable(to_dict):
        result = to_dict()
        if isinstance(result, Mapping):
            return result
        raise TypeError(f"{type(value).__name__}.to_dict() did not return a mapping")
    raise TypeError(f"Cannot build a context from {type(value).__name__}")


class Context:
    """
    Execution context passed through a step.

    The base class knows only ``error`` and ``error_cause``.  Step types
    derive record types from it by declaring fields; each declaration yields
    a subclass whose ``__schema__`` holds the accumulated layers.

    Attributes:
        error: Failure details, usually a message (default None)
        error_cause: Underlying cause of the failure (default None)
    """

    __schema__: ClassVar[Schema] = Schema()

    def __init__(self) -> None:
        self._values: dict[str, Any] = {}
        self._failed = False
        self.error: Any = None
        self.error_cause: Any = None

    # =========================================================================
    # Factories
    # =========================================================================

    @classmethod
    def build(cls, source: Any = None, /, **fields: Any) -> Context:
        """
        Build a record of this type, or pass an existing one through.

        Args:
            source: A ``Context`` (returned as-is), a mapping, an object with
                ``to_dict()``, or None.
            **fields: Extra fields merged over ``source``.

        Raises:
            MissingFieldsError: if any required field of the accumulated
                schema is absent. Every missing name is reported.
        """
        if isinstance(source, Context):
            if fields:
                source.assign_attributes(fields)
            return source

        data = {**_as_mapping(source), **fields}
        schema = cls.__schema__

        missing = [name for name in schema.required_names() if name not in data]
        if missing:
            raise MissingFieldsError(missing, record_type=cls.__name__)

        instance = cls()
        specs = schema.fields()
        rest: dict[Any, Any] = {}
        for key, value in data.items():
            if isinstance(key, str) and key in specs:
                # Present optional fields are stored eagerly, skipping the default
                instance._values[key] = value
            else:
                rest[key] = value
        instance.assign_attributes(rest)
        return instance

    # =========================================================================
    # Attributes
    # =========================================================================

    def _has_writer(self, key: Any) -> bool:
        return isinstance(key, str) and (key in _BASE_ATTRIBUTES or key in self.__schema__)

    def assign_attributes(self, fields: Any) -> None:
        """
        Write every key this record has a writer for; drop the rest.

        Never raises: unknown keys, non-string keys and inputs that are not
        mappings are ignored (and logged).
        """
        if fields is None:
            return
        try:
            items = list(_as_mapping(fields).items())
        except TypeError:
            logger.debug("context_assign_ignored", input_type=type(fields).__name__)
            return

        dropped = []
        for key, value in items:
            if self._has_writer(key):
                setattr(self, key, value)
            else:
                dropped.append(key)

        if dropped:
            log = logger.warning if get_settings().warn_unknown_fields else logger.debug
            log(
                "context_unknown_fields_dropped",
                record_type=type(self).__name__,
                fields=[str(key) for key in dropped],
            )

    def is_set(self, name: str) -> bool:
        """Whether a declared field holds a value (written or already defaulted)."""
        return name in self._values

    # =========================================================================
    # Outcome
    # =========================================================================

    @property
    def success(self) -> bool:
        """True until :meth:`fail` is called."""
        return not self._failed

    @property
    def failure(self) -> bool:
        """True once :meth:`fail` has been called. Never reverts."""
        return self._failed

    def fail(self, fields: Mapping[str, Any] | None = None, /, **more: Any) -> NoReturn:
        """
        Mark the context failed and abort the current step.

        ``fields`` and keyword arguments are merged into the record first,
        so the catcher sees the final state.

        Raises:
            Failure: always, carrying this context.
        """
        self.assign_attributes(fields)
        self.assign_attributes(more)
        self._failed = True
        logger.debug("context_failed", record_type=type(self).__name__, error=self.error)
        raise Failure(self)

    # =========================================================================
    # Serialization
    # =========================================================================

    def to_dict(self) -> dict[str, Any]:
        """
        ``{"error": ..., <declared fields>}`` with current values.

        Covers every layer of the schema.  Reading an unset optional field
        here evaluates (and caches) its default, exactly like attribute
        access would.
        """
        result: dict[str, Any] = {"error": self.error}
        for name in self.__schema__.fields():
            result[name] = getattr(self, name)
        return result

    def __str__(self) -> str:
        return str(self.to_dict())

    def __repr__(self) -> str:
        # Lazy defaults are shown as pending, never evaluated
        parts = ["failed" if self._failed else "ok"]
        if self.error is not None:
            parts.append(f"error={self.error!r}")
        for name, spec in self.__schema__.fields().items():
            if name in self._values:
                parts.append(f"{name}={self._values[name]!r}")
            elif spec.kind is FieldKind.OPTIONAL:
                parts.append(f"{name}=<default>")
        return f"<{type(self).__name__} {' '.join(parts)}>"


__all__ = ["Context", "Failure"]
