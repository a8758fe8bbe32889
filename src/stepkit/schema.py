"""Schema descriptors — the shape of a context record, one layer at a time.

A step type's record shape is not a class body; it is data:

::

    Schema
      └── layers: (SchemaLayer, SchemaLayer, ...)    one per receive/hold call
            └── fields: (FieldSpec, FieldSpec, ...)  name + kind + default

``Schema.fields()`` folds the layers into one ordered mapping.  Everything
that needs "all fields of this record" (``build``, ``to_dict``,
``assign_attributes``) reads that fold instead of walking a class hierarchy.

``FieldAccessor`` is the descriptor that gives each field its read/write
pair on the record.  All values live in the record's single ``_values``
mapping; a name that is absent from it is *unset*.

Related modules:
    context.py      — the record type the accessors are installed on
    declaration.py  — builds layers from receive()/hold() calls
"""

from __future__ import annotations

import inspect
import keyword
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from enum import Enum
from functools import cached_property
from types import MappingProxyType
from typing import Any

from stepkit.core.errors import InvalidFieldNameError


class FieldKind(str, Enum):
    """How a declared field behaves at build time and on first read."""

    REQUIRED = "required"  # Must be present at build
    OPTIONAL = "optional"  # Lazily defaulted on first read
    HELD = "held"  # Pass-through storage, no contract


_NO_DEFAULT = object()

_POSITIONAL = (
    inspect.Parameter.POSITIONAL_ONLY,
    inspect.Parameter.POSITIONAL_OR_KEYWORD,
    inspect.Parameter.VAR_POSITIONAL,
)


@dataclass(frozen=True)
class FieldSpec:
    """
    One declared field.

    Attributes:
        name: Accessor name on the record
        kind: REQUIRED, OPTIONAL or HELD
        default: Default producer for OPTIONAL fields. A callable that takes
            a positional parameter is invoked with the record; any other
            callable, classes included (``list``, ``dict``), is invoked with
            no arguments.  Anything else is used verbatim (and therefore
            shared between records).
    """

    name: str
    kind: FieldKind
    default: Any = _NO_DEFAULT

    @property
    def has_default(self) -> bool:
        return self.default is not _NO_DEFAULT

    @cached_property
    def _takes_record(self) -> bool:
        if isinstance(self.default, type):
            return False
        try:
            signature = inspect.signature(self.default)
        except (TypeError, ValueError):
            # Builtins without introspectable signatures are treated as factories
            return False
        return any(
            parameter.kind in _POSITIONAL for parameter in signature.parameters.values()
        )

    def resolve_default(self, record: Any) -> Any:
        """Produce the default value for ``record``."""
        if not self.has_default:
            return None
        if not callable(self.default):
            return self.default
        if self._takes_record:
            return self.default(record)
        return self.default()


@dataclass(frozen=True)
class SchemaLayer:
    """Fields added by a single receive/hold declaration."""

    fields: tuple[FieldSpec, ...]
    origin: str | None = None

    @property
    def names(self) -> tuple[str, ...]:
        return tuple(spec.name for spec in self.fields)


@dataclass(frozen=True)
class Schema:
    """
    Ordered chain of layers describing a record type.

    Schemas are immutable: ``extend`` returns a new schema, so a parent step
    type's schema is never affected by a child's declarations.
    """

    layers: tuple[SchemaLayer, ...] = ()

    def extend(self, layer: SchemaLayer) -> Schema:
        return Schema(self.layers + (layer,))

    @cached_property
    def _folded(self) -> Mapping[str, FieldSpec]:
        folded: dict[str, FieldSpec] = {}
        for layer in self.layers:
            for spec in layer.fields:
                # Re-declared optional fields keep their first position
                folded[spec.name] = spec
        return MappingProxyType(folded)

    def fields(self) -> Mapping[str, FieldSpec]:
        """All fields across every layer, in declaration order."""
        return self._folded

    def required_names(self) -> tuple[str, ...]:
        return tuple(
            name for name, spec in self._folded.items() if spec.kind is FieldKind.REQUIRED
        )

    def names_of_kind(self, kind: FieldKind) -> tuple[str, ...]:
        return tuple(name for name, spec in self._folded.items() if spec.kind is kind)

    def kind_of(self, name: str) -> FieldKind | None:
        spec = self._folded.get(name)
        return spec.kind if spec else None

    def __contains__(self, name: object) -> bool:
        return name in self._folded

    def __len__(self) -> int:
        return len(self._folded)


class FieldAccessor:
    """
    Data descriptor backing one declared field.

    Reading an unset OPTIONAL field runs its default producer once and
    caches the result; any explicit write (including a falsy value) wins
    over the default for good.  Unset REQUIRED and HELD fields read as None.
    """

    def __init__(self, spec: FieldSpec):
        self.spec = spec
        self.name = spec.name

    def __get__(self, instance: Any, owner: type | None = None) -> Any:
        if instance is None:
            return self
        values = instance._values
        if self.name in values:
            return values[self.name]
        if self.spec.kind is not FieldKind.OPTIONAL:
            return None
        value = self.spec.resolve_default(instance)
        values[self.name] = value
        return value

    def __set__(self, instance: Any, value: Any) -> None:
        instance._values[self.name] = value

    def __repr__(self) -> str:
        return f"FieldAccessor({self.name!r}, kind={self.spec.kind.value})"


def validate_name(name: Any, reserved: Iterable[str] = (), step: str | None = None) -> str:
    """Check that ``name`` can be installed as a field accessor.

    Raises:
        InvalidFieldNameError: if the name is not a public identifier or
            collides with one of ``reserved``.
    """
    if not isinstance(name, str) or not name.isidentifier():
        raise InvalidFieldNameError(name, "not a valid identifier", step=step)
    if keyword.iskeyword(name):
        raise InvalidFieldNameError(name, "is a Python keyword", step=step)
    if name.startswith("_"):
        raise InvalidFieldNameError(name, "names starting with '_' are reserved", step=step)
    if name in reserved:
        raise InvalidFieldNameError(name, "shadows a built-in context attribute", step=step)
    return name


__all__ = [
    "FieldKind",
    "FieldSpec",
    "SchemaLayer",
    "Schema",
    "FieldAccessor",
    "validate_name",
]
