"""
Test Suite for the Value Layer
===============================
Tags, textual forms, compatibility, equality, numeric projection,
threshold change detection and type conversion.
"""

from __future__ import annotations

import math
from pathlib import Path

import pytest

import sys
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from vss_types import (
    StructValue,
    Value,
    ValueType,
    are_types_compatible,
    array_type,
    convert_value_type,
    element_type,
    get_value_type,
    is_array,
    is_empty,
    is_numeric,
    is_primitive,
    is_struct,
    to_double,
    value_changed_beyond_threshold,
    value_type_aliases,
    value_type_from_string,
    value_type_to_string,
    values_equal,
)


NON_EMPTY_TYPES = [t for t in ValueType if t != ValueType.UNSPECIFIED]

SAMPLE_VALUES = [
    Value(),
    Value(ValueType.BOOL, True),
    Value(ValueType.INT8, -5),
    Value(ValueType.INT32, 42),
    Value(ValueType.UINT64, 2 ** 64 - 1),
    Value(ValueType.FLOAT, 3.5),
    Value(ValueType.DOUBLE, float("nan")),
    Value(ValueType.STRING, "test"),
    Value(ValueType.BOOL_ARRAY, [True, False]),
    Value(ValueType.INT32_ARRAY, [1, 2, 3]),
    Value(ValueType.STRING_ARRAY, ["a", "b", "c"]),
    Value.struct(StructValue("Test", {"X": Value(ValueType.INT32, 1)})),
    Value.struct_array([StructValue("Test"), StructValue("Test")]),
]


# ===========================================================================
# Fixtures
# ===========================================================================


@pytest.fixture
def position() -> StructValue:
    return StructValue("Position", {
        "Latitude": Value(ValueType.DOUBLE, 37.7749),
        "Longitude": Value(ValueType.DOUBLE, -122.4194),
    })


# ===========================================================================
# Tags
# ===========================================================================


class TestValueType:
    """ValueType codes and tag groups."""

    def test_numeric_codes(self) -> None:
        assert ValueType.UNSPECIFIED == 0
        assert ValueType.STRING == 1
        assert ValueType.DOUBLE == 12
        assert ValueType.STRING_ARRAY == 20
        assert ValueType.DOUBLE_ARRAY == 31
        assert ValueType.STRUCT == 40
        assert ValueType.STRUCT_ARRAY == 41

    def test_array_codes_offset_from_scalars(self) -> None:
        for scalar in ValueType:
            if is_primitive(scalar):
                assert array_type(scalar) == scalar + 19
                assert element_type(array_type(scalar)) == scalar

    def test_struct_array_pairing(self) -> None:
        assert array_type(ValueType.STRUCT) == ValueType.STRUCT_ARRAY
        assert element_type(ValueType.STRUCT_ARRAY) == ValueType.STRUCT

    def test_groups(self) -> None:
        assert is_primitive(ValueType.BOOL)
        assert not is_primitive(ValueType.BOOL_ARRAY)
        assert is_array(ValueType.FLOAT_ARRAY)
        assert is_array(ValueType.STRUCT_ARRAY)
        assert not is_array(ValueType.STRUCT)
        assert is_struct(ValueType.STRUCT)
        assert is_struct(ValueType.STRUCT_ARRAY)
        assert not is_struct(ValueType.STRING)

    def test_bool_is_not_numeric(self) -> None:
        assert not is_numeric(ValueType.BOOL)
        assert is_numeric(ValueType.UINT8)
        assert is_numeric(ValueType.DOUBLE)
        assert not is_numeric(ValueType.INT32_ARRAY)


class TestTypeStrings:
    """Textual form of tags."""

    def test_float_array_scenario(self) -> None:
        assert value_type_from_string("float[]") == ValueType.FLOAT_ARRAY
        assert value_type_to_string(ValueType.FLOAT_ARRAY) == "FLOAT_ARRAY"

    @pytest.mark.parametrize("value_type", NON_EMPTY_TYPES)
    def test_round_trip(self, value_type: ValueType) -> None:
        text = value_type_to_string(value_type)
        assert value_type_from_string(text) == value_type
        assert value_type_from_string(text.lower()) == value_type
        assert value_type_from_string(text.upper().lower().upper()) == value_type

    def test_aliases(self) -> None:
        assert value_type_from_string("boolean") == ValueType.BOOL
        assert value_type_from_string("int") == ValueType.INT32
        assert value_type_from_string("Long") == ValueType.INT64
        assert value_type_from_string("unsigned") == ValueType.UINT32
        assert value_type_from_string("ULONG") == ValueType.UINT64
        assert value_type_from_string("boolean[]") == ValueType.BOOL_ARRAY
        assert value_type_from_string("struct[]") == ValueType.STRUCT_ARRAY

    def test_surrounding_whitespace_rejected(self) -> None:
        assert value_type_from_string("  double ") is None
        assert value_type_from_string("double") == ValueType.DOUBLE

    def test_unknown_and_unspecified_not_parseable(self) -> None:
        assert value_type_from_string("quaternion") is None
        assert value_type_from_string("") is None
        assert value_type_from_string("UNSPECIFIED") is None

    def test_value_type_aliases(self) -> None:
        aliases = value_type_aliases(ValueType.BOOL)
        assert "BOOLEAN" in aliases
        assert "BOOL" not in aliases
        assert value_type_aliases(ValueType.STRUCT) == []


# ===========================================================================
# Value construction
# ===========================================================================


class TestValue:
    """Tag/payload agreement and payload checks."""

    def test_empty_value(self) -> None:
        v = Value()
        assert is_empty(v)
        assert v.is_empty()
        assert get_value_type(v) == ValueType.UNSPECIFIED
        assert repr(v) == "Value()"

    @pytest.mark.parametrize("value", SAMPLE_VALUES, ids=repr)
    def test_tag_matches_alternative(self, value: Value) -> None:
        assert get_value_type(value) == value.type

    def test_integer_code_accepted_as_tag(self) -> None:
        assert Value(5, 7).type == ValueType.INT32

    def test_arrays_stored_as_tuples(self) -> None:
        source = [1, 2, 3]
        v = Value(ValueType.INT32_ARRAY, source)
        source.append(4)
        assert v.data == (1, 2, 3)

    def test_float_accepts_int_payload(self) -> None:
        v = Value(ValueType.DOUBLE, 16)
        assert isinstance(v.data, float)

    def test_bool_is_not_an_integer(self) -> None:
        with pytest.raises(TypeError):
            Value(ValueType.INT32, True)
        with pytest.raises(TypeError):
            Value(ValueType.BOOL, 1)

    def test_integer_range_checked(self) -> None:
        with pytest.raises(ValueError):
            Value(ValueType.INT8, 128)
        with pytest.raises(ValueError):
            Value(ValueType.UINT8, -1)
        assert Value(ValueType.INT8, -128).data == -128

    def test_wrong_payload_type(self) -> None:
        with pytest.raises(TypeError):
            Value(ValueType.STRING, 3)
        with pytest.raises(TypeError):
            Value(ValueType.STRING_ARRAY, "abc")
        with pytest.raises(TypeError):
            Value(ValueType.STRUCT, {"Latitude": 1.0})
        with pytest.raises(TypeError):
            Value(ValueType.UNSPECIFIED, 1)

    def test_value_is_immutable(self) -> None:
        v = Value(ValueType.INT32, 1)
        with pytest.raises(AttributeError):
            v.data = 2  # type: ignore[misc]

    def test_struct_shared_by_reference(self, position: StructValue) -> None:
        a = Value.struct(position)
        b = Value.struct(position)
        position.set_field("Altitude", Value(ValueType.DOUBLE, 16.0))
        assert a.data.has_field("Altitude")
        assert b.data is a.data

    def test_repr(self) -> None:
        assert repr(Value(ValueType.INT32, 42)) == "Value(INT32, 42)"


# ===========================================================================
# Compatibility
# ===========================================================================


class TestCompatibility:
    """are_types_compatible."""

    @pytest.mark.parametrize("value_type", list(ValueType))
    def test_reflexive(self, value_type: ValueType) -> None:
        assert are_types_compatible(value_type, value_type)

    def test_symmetric(self) -> None:
        for a in ValueType:
            for b in ValueType:
                assert are_types_compatible(a, b) == are_types_compatible(b, a)

    def test_unspecified_matches_everything(self) -> None:
        for t in ValueType:
            assert are_types_compatible(ValueType.UNSPECIFIED, t)

    def test_families(self) -> None:
        assert are_types_compatible(ValueType.FLOAT, ValueType.DOUBLE)
        assert are_types_compatible(ValueType.INT8, ValueType.INT64)
        assert are_types_compatible(ValueType.UINT16, ValueType.UINT32)
        assert are_types_compatible(ValueType.INT32_ARRAY, ValueType.INT8_ARRAY)
        assert are_types_compatible(ValueType.FLOAT_ARRAY, ValueType.DOUBLE_ARRAY)

    def test_incompatible_pairs(self) -> None:
        assert not are_types_compatible(ValueType.INT32, ValueType.UINT32)
        assert not are_types_compatible(ValueType.INT32, ValueType.FLOAT)
        assert not are_types_compatible(ValueType.INT32, ValueType.INT32_ARRAY)
        assert not are_types_compatible(ValueType.BOOL, ValueType.INT8)
        assert not are_types_compatible(ValueType.STRING, ValueType.STRING_ARRAY)
        assert not are_types_compatible(ValueType.STRUCT, ValueType.STRUCT_ARRAY)
        assert not are_types_compatible(ValueType.BOOL_ARRAY, ValueType.STRING_ARRAY)


# ===========================================================================
# Equality and numeric projection
# ===========================================================================


class TestEquality:
    """values_equal and struct equality."""

    @pytest.mark.parametrize("value", SAMPLE_VALUES, ids=repr)
    def test_reflexive(self, value: Value) -> None:
        assert values_equal(value, value)

    def test_no_widening(self) -> None:
        assert not values_equal(Value(ValueType.INT32, 1), Value(ValueType.INT64, 1))
        assert not values_equal(Value(ValueType.BOOL, True), Value(ValueType.INT32, 1))
        assert not values_equal(Value(ValueType.FLOAT, 1.0), Value(ValueType.DOUBLE, 1.0))

    def test_arrays_element_wise(self) -> None:
        a = Value(ValueType.INT32_ARRAY, [1, 2, 3])
        assert a == Value(ValueType.INT32_ARRAY, (1, 2, 3))
        assert a != Value(ValueType.INT32_ARRAY, [1, 2])
        assert a != Value(ValueType.INT32_ARRAY, [1, 2, 4])

    def test_structs_ignore_insertion_order(self) -> None:
        a = StructValue("Position")
        a.set_field("Latitude", Value(ValueType.DOUBLE, 1.0))
        a.set_field("Longitude", Value(ValueType.DOUBLE, 2.0))
        b = StructValue("Position")
        b.set_field("Longitude", Value(ValueType.DOUBLE, 2.0))
        b.set_field("Latitude", Value(ValueType.DOUBLE, 1.0))
        assert a is not b
        assert values_equal(Value.struct(a), Value.struct(b))

    def test_structs_differ(self, position: StructValue) -> None:
        other = StructValue("Location", dict(position.fields))
        assert Value.struct(position) != Value.struct(other)
        fewer = StructValue("Position", {"Latitude": position.fields["Latitude"]})
        assert Value.struct(position) != Value.struct(fewer)

    def test_struct_arrays(self, position: StructValue) -> None:
        copy = StructValue("Position", dict(position.fields))
        assert Value.struct_array([position]) == Value.struct_array([copy])
        assert Value.struct_array([position]) != Value.struct_array([position, copy])

    def test_cyclic_structs(self) -> None:
        def loop(label: str) -> StructValue:
            node = StructValue("Node", {"Label": Value(ValueType.STRING, label)})
            node.set_field("Next", Value.struct(node))
            return node

        a, b = loop("x"), loop("x")
        assert a == b
        assert Value.struct(a) == Value.struct(b)
        assert a != loop("y")

    def test_empty_values_equal(self) -> None:
        assert values_equal(Value(), Value())

    def test_not_hashable(self) -> None:
        with pytest.raises(TypeError):
            hash(Value(ValueType.INT32, 1))


class TestToDouble:
    """Numeric projection."""

    def test_numeric(self) -> None:
        assert to_double(Value(ValueType.INT8, -3)) == -3.0
        assert to_double(Value(ValueType.UINT32, 7)) == 7.0
        assert to_double(Value(ValueType.FLOAT, 2.5)) == 2.5

    def test_bool(self) -> None:
        assert to_double(Value(ValueType.BOOL, True)) == 1.0
        assert to_double(Value(ValueType.BOOL, False)) == 0.0

    def test_non_numeric(self) -> None:
        assert to_double(Value(ValueType.STRING, "5")) == 0.0
        assert to_double(Value(ValueType.INT32_ARRAY, [1])) == 0.0
        assert to_double(Value()) == 0.0


# ===========================================================================
# Threshold change detection
# ===========================================================================


class TestThreshold:
    """value_changed_beyond_threshold."""

    def test_double_scenario(self) -> None:
        old = Value(ValueType.DOUBLE, 100.0)
        assert not value_changed_beyond_threshold(old, Value(ValueType.DOUBLE, 100.5), 1.0)
        assert value_changed_beyond_threshold(old, Value(ValueType.DOUBLE, 105.0), 1.0)

    def test_boundary_inclusive(self) -> None:
        a = Value(ValueType.INT32, 10)
        b = Value(ValueType.INT32, 15)
        assert value_changed_beyond_threshold(a, b, 5.0)
        assert not value_changed_beyond_threshold(a, b, 5.000001)

    def test_monotonic(self) -> None:
        a = Value(ValueType.FLOAT, 1.0)
        b = Value(ValueType.FLOAT, 3.0)
        thresholds = [0.0, 0.5, 1.0, 2.0, 2.5, 10.0]
        results = [value_changed_beyond_threshold(a, b, t) for t in thresholds]
        for i in range(1, len(results)):
            if results[i]:
                assert results[i - 1]

    def test_zero_threshold_is_exact(self) -> None:
        a = Value(ValueType.DOUBLE, 1.0)
        assert not value_changed_beyond_threshold(a, Value(ValueType.DOUBLE, 1.0), 0.0)
        assert value_changed_beyond_threshold(a, Value(ValueType.DOUBLE, 1.0000001), 0.0)
        assert value_changed_beyond_threshold(a, Value(ValueType.DOUBLE, 1.5), -1.0)

    def test_type_change(self) -> None:
        assert value_changed_beyond_threshold(
            Value(ValueType.INT32, 1), Value(ValueType.INT64, 1), 100.0
        )

    def test_both_empty(self) -> None:
        assert not value_changed_beyond_threshold(Value(), Value(), 1.0)

    def test_non_numeric_ignores_threshold(self) -> None:
        assert value_changed_beyond_threshold(
            Value(ValueType.BOOL, False), Value(ValueType.BOOL, True), 10.0
        )
        assert value_changed_beyond_threshold(
            Value(ValueType.STRING, "a"), Value(ValueType.STRING, "b"), 10.0
        )
        assert value_changed_beyond_threshold(
            Value(ValueType.INT32_ARRAY, [1]), Value(ValueType.INT32_ARRAY, [2]), 10.0
        )
        assert not value_changed_beyond_threshold(
            Value(ValueType.STRING, "a"), Value(ValueType.STRING, "a"), 10.0
        )


# ===========================================================================
# Conversion
# ===========================================================================


class TestConversion:
    """convert_value_type."""

    def test_narrowing_scenario(self) -> None:
        assert convert_value_type(Value(ValueType.INT64, 300), ValueType.INT8) == Value()
        assert convert_value_type(Value(ValueType.INT64, 100), ValueType.INT8) == Value(
            ValueType.INT8, 100
        )

    @pytest.mark.parametrize("value", SAMPLE_VALUES, ids=repr)
    def test_idempotent(self, value: Value) -> None:
        assert convert_value_type(value, get_value_type(value)) is value

    def test_result_is_target_or_empty(self) -> None:
        sources = [v for v in SAMPLE_VALUES if not v.is_empty()]
        for value in sources:
            for target in NON_EMPTY_TYPES:
                result = convert_value_type(value, target)
                assert result.type in (target, ValueType.UNSPECIFIED)

    def test_empty_value_unchanged(self) -> None:
        assert convert_value_type(Value(), ValueType.INT32).is_empty()

    def test_widening(self) -> None:
        assert convert_value_type(Value(ValueType.INT8, -5), ValueType.INT64) == Value(
            ValueType.INT64, -5
        )
        assert convert_value_type(Value(ValueType.UINT8, 200), ValueType.UINT64) == Value(
            ValueType.UINT64, 200
        )

    def test_unsigned_narrowing(self) -> None:
        assert convert_value_type(Value(ValueType.UINT32, 70000), ValueType.UINT16).is_empty()
        assert convert_value_type(Value(ValueType.UINT32, 65535), ValueType.UINT16) == Value(
            ValueType.UINT16, 65535
        )

    def test_float_double(self) -> None:
        assert convert_value_type(Value(ValueType.FLOAT, 2.5), ValueType.DOUBLE) == Value(
            ValueType.DOUBLE, 2.5
        )
        converted = convert_value_type(Value(ValueType.DOUBLE, math.pi), ValueType.FLOAT)
        assert converted.type == ValueType.FLOAT

    def test_incompatible(self) -> None:
        assert convert_value_type(Value(ValueType.INT32, 1), ValueType.UINT32).is_empty()
        assert convert_value_type(Value(ValueType.INT32, 1), ValueType.DOUBLE).is_empty()
        assert convert_value_type(Value(ValueType.STRING, "1"), ValueType.INT32).is_empty()
        assert convert_value_type(Value(ValueType.INT32, 1), ValueType.INT32_ARRAY).is_empty()

    def test_to_unspecified_is_empty(self) -> None:
        assert convert_value_type(Value(ValueType.INT32, 1), ValueType.UNSPECIFIED).is_empty()

    def test_arrays_element_wise(self) -> None:
        assert convert_value_type(
            Value(ValueType.INT64_ARRAY, [1, -2, 3]), ValueType.INT8_ARRAY
        ) == Value(ValueType.INT8_ARRAY, [1, -2, 3])
        assert convert_value_type(
            Value(ValueType.INT64_ARRAY, [1, 300]), ValueType.INT8_ARRAY
        ).is_empty()
        assert convert_value_type(
            Value(ValueType.FLOAT_ARRAY, [1.5]), ValueType.DOUBLE_ARRAY
        ) == Value(ValueType.DOUBLE_ARRAY, [1.5])


# ===========================================================================
# Entry point
# ===========================================================================

if __name__ == "__main__":
    pytest.main([__file__, "-v"])
