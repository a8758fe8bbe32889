"""Tests for schema descriptors — FieldSpec, SchemaLayer, Schema, FieldAccessor."""

from __future__ import annotations

import pytest

from stepkit.core.errors import InvalidFieldNameError
from stepkit.schema import (
    FieldAccessor,
    FieldKind,
    FieldSpec,
    Schema,
    SchemaLayer,
    validate_name,
)


def _layer(*specs: FieldSpec) -> SchemaLayer:
    return SchemaLayer(tuple(specs), origin="test")


class TestFieldSpec:
    def test_callable_default_receives_record(self):
        spec = FieldSpec("total", FieldKind.OPTIONAL, lambda record: record * 2)
        assert spec.resolve_default(21) == 42

    def test_zero_argument_callable_called_without_record(self):
        spec = FieldSpec("token", FieldKind.OPTIONAL, lambda: "abc")
        assert spec.resolve_default(object()) == "abc"

    @pytest.mark.parametrize("factory, expected", [(list, []), (dict, {}), (set, set())])
    def test_class_default_is_a_factory(self, factory, expected):
        spec = FieldSpec("bag", FieldKind.OPTIONAL, factory)
        assert spec.resolve_default(object()) == expected

    def test_keyword_only_callable_called_without_record(self):
        spec = FieldSpec("n", FieldKind.OPTIONAL, lambda *, step=2: step)
        assert spec.resolve_default(object()) == 2

    def test_literal_default_verbatim(self):
        marker = object()
        spec = FieldSpec("x", FieldKind.OPTIONAL, marker)
        assert spec.resolve_default(None) is marker

    def test_no_default(self):
        spec = FieldSpec("x", FieldKind.REQUIRED)
        assert spec.has_default is False
        assert spec.resolve_default(None) is None

    def test_none_is_a_real_default(self):
        assert FieldSpec("x", FieldKind.OPTIONAL, None).has_default is True


class TestSchema:
    def test_empty(self):
        schema = Schema()
        assert len(schema) == 0
        assert dict(schema.fields()) == {}
        assert schema.required_names() == ()

    def test_extend_returns_new_schema(self):
        base = Schema()
        extended = base.extend(_layer(FieldSpec("a", FieldKind.REQUIRED)))
        assert base.layers == ()
        assert len(extended.layers) == 1
        assert "a" in extended
        assert "a" not in base

    def test_fields_fold_in_declaration_order(self):
        schema = (
            Schema()
            .extend(_layer(FieldSpec("a", FieldKind.REQUIRED), FieldSpec("b", FieldKind.OPTIONAL, 1)))
            .extend(_layer(FieldSpec("c", FieldKind.HELD)))
        )
        assert list(schema.fields()) == ["a", "b", "c"]
        assert schema.required_names() == ("a",)
        assert schema.kind_of("b") is FieldKind.OPTIONAL
        assert schema.kind_of("c") is FieldKind.HELD
        assert schema.kind_of("missing") is None

    def test_later_optional_replaces_default_in_place(self):
        schema = (
            Schema()
            .extend(_layer(FieldSpec("a", FieldKind.OPTIONAL, 1), FieldSpec("b", FieldKind.HELD)))
            .extend(_layer(FieldSpec("a", FieldKind.OPTIONAL, 2)))
        )
        assert list(schema.fields()) == ["a", "b"]
        assert schema.fields()["a"].default == 2

    def test_fields_view_is_read_only(self):
        schema = Schema().extend(_layer(FieldSpec("a", FieldKind.REQUIRED)))
        with pytest.raises(TypeError):
            schema.fields()["b"] = FieldSpec("b", FieldKind.HELD)

    def test_layer_names(self):
        layer = _layer(FieldSpec("a", FieldKind.REQUIRED), FieldSpec("b", FieldKind.HELD))
        assert layer.names == ("a", "b")


class _Holder:
    def __init__(self):
        self._values = {}
        self.base = 3


class TestFieldAccessor:
    def _holder_type(self, *specs):
        namespace = {spec.name: FieldAccessor(spec) for spec in specs}
        return type("Holder", (_Holder,), namespace)

    def test_class_access_returns_descriptor(self):
        Holder = self._holder_type(FieldSpec("a", FieldKind.REQUIRED))
        assert isinstance(Holder.a, FieldAccessor)

    def test_unset_required_and_held_read_none(self):
        Holder = self._holder_type(FieldSpec("a", FieldKind.REQUIRED), FieldSpec("b", FieldKind.HELD))
        holder = Holder()
        assert holder.a is None
        assert holder.b is None
        assert holder._values == {}

    def test_write_goes_to_values(self):
        Holder = self._holder_type(FieldSpec("a", FieldKind.HELD))
        holder = Holder()
        holder.a = 5
        assert holder._values == {"a": 5}

    def test_optional_default_cached(self):
        calls = []
        Holder = self._holder_type(
            FieldSpec("a", FieldKind.OPTIONAL, lambda h: calls.append(1) or h.base + 1)
        )
        holder = Holder()
        assert holder.a == 4
        holder.base = 100
        assert holder.a == 4
        assert calls == [1]


class TestValidateName:
    def test_accepts_identifier(self):
        assert validate_name("amount") == "amount"

    @pytest.mark.parametrize("name", [1, None, "", "a-b", "2x", "def", "_x", "__dict__"])
    def test_rejects(self, name):
        with pytest.raises(InvalidFieldNameError):
            validate_name(name)

    def test_rejects_reserved(self):
        with pytest.raises(InvalidFieldNameError) as exc_info:
            validate_name("error", reserved={"error"}, step="Pay")
        assert exc_info.value.context.step == "Pay"
        assert "shadows" in str(exc_info.value)
