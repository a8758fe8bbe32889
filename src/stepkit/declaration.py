"""Declaration — what a step type receives and what it holds.

Step types describe their context with two classmethod calls, usually made
right after the class body::

    class ChargeCard(Step):
        def call(self):
            ...

    ChargeCard.receive("amount", currency="USD", total=lambda ctx: ctx.amount * 2)
    ChargeCard.hold("charge_id")

Each call appends one :class:`~stepkit.schema.SchemaLayer` and produces a new
record type that subclasses the step's previous one.  The step's
``context_class`` pointer then moves to the new type.

ARCHITECTURE
────────────
::

    Context                         (empty schema)
      └── ChargeCardContext         receive(amount, currency=...)
            └── ChargeCardContext   hold(charge_id)
                  └── RefundContext receive(reason)   ← subclass step branches here

Field kinds
───────────
- required : must be present at build; absence raises MissingFieldsError
- optional : default produced lazily on first read, then cached
- held     : plain storage, no default and no presence check

Rules
─────
- Re-declaring a required (or held) name with the same kind is a no-op.
- Re-declaring an optional name replaces its default in the new layer.
- Any other re-declaration raises SchemaConflictError.
- Each field also gets a delegated property on the step class, so business
  logic can write ``self.amount`` instead of ``self.context.amount``.

Related modules:
    schema.py  — the layer/field descriptors built here
    context.py — the base record type
    step.py    — the Step base that mixes this in
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import Any, ClassVar

from stepkit.context import Context
from stepkit.core.errors import InvalidFieldNameError, SchemaConflictError
from stepkit.core.logging import get_logger
from stepkit.schema import FieldAccessor, FieldKind, FieldSpec, Schema, SchemaLayer, validate_name

logger = get_logger(__name__)

_RESERVED = frozenset(dir(Context)) | {"context", "error", "error_cause"}
_MISSING = object()


class ContextField(property):
    """Property on a step class that forwards to ``self.context.<name>``."""

    def __init__(self, name: str):
        self.field_name = name
        super().__init__(
            lambda step: getattr(step.context, name),
            lambda step, value: setattr(step.context, name, value),
            doc=f"Delegates to ``self.context.{name}``.",
        )


class Declaration:
    """Mixin giving a class ``receive``/``hold`` and a ``context_class``."""

    context_class: ClassVar[type[Context]] = Context

    @classmethod
    def schema(cls) -> Schema:
        """Accumulated schema of the current record type."""
        return cls.context_class.__schema__

    @classmethod
    def receive(cls, *required: str, **optional: Any) -> type[Context]:
        """
        Declare required and optional fields.

        Args:
            *required: Names that must be supplied at build time.
            **optional: Name -> default producer, run on first read.
                ``lambda ctx: ...`` receives the record; zero-argument
                callables and classes (``list``) are called bare; other
                values are used verbatim.

        Returns:
            The new record type (or the current one if nothing was added).

        Raises:
            SchemaConflictError: a name is already declared with another kind.
            InvalidFieldNameError: a name cannot be used as an accessor.
        """
        schema = cls.schema()
        specs: list[FieldSpec] = []

        for name in dict.fromkeys(required):
            if name in optional:
                raise SchemaConflictError(
                    name, existing=FieldKind.REQUIRED, requested=FieldKind.OPTIONAL, step=cls.__name__
                )
            existing = schema.kind_of(name)
            if existing is FieldKind.REQUIRED:
                continue
            cls._check_kind(name, existing, FieldKind.REQUIRED)
            specs.append(FieldSpec(name, FieldKind.REQUIRED))

        for name, default in optional.items():
            existing = schema.kind_of(name)
            if existing is not FieldKind.OPTIONAL:
                cls._check_kind(name, existing, FieldKind.OPTIONAL)
            specs.append(FieldSpec(name, FieldKind.OPTIONAL, default))

        return cls._declare(specs, "receive")

    @classmethod
    def hold(cls, *names: str) -> type[Context]:
        """
        Declare held fields: plain read/write storage with no default and no
        presence check.

        Raises:
            SchemaConflictError: a name is already required or optional.
            InvalidFieldNameError: a name cannot be used as an accessor.
        """
        schema = cls.schema()
        specs: list[FieldSpec] = []

        for name in dict.fromkeys(names):
            existing = schema.kind_of(name)
            if existing is FieldKind.HELD:
                continue
            cls._check_kind(name, existing, FieldKind.HELD)
            specs.append(FieldSpec(name, FieldKind.HELD))

        return cls._declare(specs, "hold")

    # =========================================================================
    # Internals
    # =========================================================================

    @classmethod
    def _check_kind(cls, name: str, existing: FieldKind | None, requested: FieldKind) -> None:
        if existing is not None and existing is not requested:
            raise SchemaConflictError(name, existing=existing, requested=requested, step=cls.__name__)

    @classmethod
    def _check_names(cls, names: Iterable[str]) -> None:
        for name in names:
            validate_name(name, _RESERVED, step=cls.__name__)
            attr = getattr(cls, name, _MISSING)
            if attr is not _MISSING and not isinstance(attr, ContextField):
                raise InvalidFieldNameError(
                    name, f"shadows {cls.__name__}.{name}", step=cls.__name__
                )

    @classmethod
    def _declare(cls, specs: list[FieldSpec], via: str) -> type[Context]:
        if not specs:
            return cls.context_class

        # Validate everything before touching the class
        cls._check_names(spec.name for spec in specs)

        parent = cls.context_class
        layer = SchemaLayer(tuple(specs), origin=cls.__qualname__)
        namespace: dict[str, Any] = {spec.name: FieldAccessor(spec) for spec in specs}
        namespace["__schema__"] = parent.__schema__.extend(layer)
        namespace["__module__"] = cls.__module__
        namespace["__qualname__"] = f"{cls.__qualname__}Context"
        record_type = type(f"{cls.__name__}Context", (parent,), namespace)

        for spec in specs:
            if not isinstance(getattr(cls, spec.name, None), ContextField):
                setattr(cls, spec.name, ContextField(spec.name))

        cls.context_class = record_type
        logger.debug(
            "schema_layer_declared",
            step=cls.__qualname__,
            via=via,
            fields=list(layer.names),
            depth=len(record_type.__schema__.layers),
        )
        return record_type


__all__ = ["Declaration", "ContextField"]
