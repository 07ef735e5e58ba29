"""
Value Model – Core
===================
Backend-agnostic runtime representation of VSS values.

This module defines the ``ValueType`` tag enumeration, the ``Value`` tagged
record that carries any single signal datum (primitive, array, struct or
struct array), and the pure functions operating on tags and values:
textual form of a tag, compatibility, deep equality, numeric projection and
threshold-based change detection.

Example::

    from vss_types import Value, ValueType, get_value_type

    speed = Value(ValueType.FLOAT, 120.5)
    get_value_type(speed)                      # ValueType.FLOAT
    value_type_to_string(ValueType.FLOAT_ARRAY)  # "FLOAT_ARRAY"
"""

from __future__ import annotations

import math
from collections.abc import Iterable
from dataclasses import dataclass
from enum import IntEnum
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from .struct import StructValue


# ---------------------------------------------------------------------------
# Tag enumeration
# ---------------------------------------------------------------------------

class ValueType(IntEnum):
    """
    VSS data type tag.

    Numeric codes are stable so that external enumerations (for example a
    databroker wire-format type field) map onto them without a lookup table:

    - 0        Unspecified
    - 1 – 12   Primitive scalars
    - 20 – 31  Arrays of primitives
    - 40 – 41  Struct and struct array
    """
    UNSPECIFIED = 0

    STRING = 1
    BOOL = 2
    INT8 = 3
    INT16 = 4
    INT32 = 5
    INT64 = 6
    UINT8 = 7
    UINT16 = 8
    UINT32 = 9
    UINT64 = 10
    FLOAT = 11
    DOUBLE = 12

    STRING_ARRAY = 20
    BOOL_ARRAY = 21
    INT8_ARRAY = 22
    INT16_ARRAY = 23
    INT32_ARRAY = 24
    INT64_ARRAY = 25
    UINT8_ARRAY = 26
    UINT16_ARRAY = 27
    UINT32_ARRAY = 28
    UINT64_ARRAY = 29
    FLOAT_ARRAY = 30
    DOUBLE_ARRAY = 31

    STRUCT = 40
    STRUCT_ARRAY = 41


SIGNED_INTEGER_TYPES = frozenset({
    ValueType.INT8, ValueType.INT16, ValueType.INT32, ValueType.INT64,
})
UNSIGNED_INTEGER_TYPES = frozenset({
    ValueType.UINT8, ValueType.UINT16, ValueType.UINT32, ValueType.UINT64,
})
FLOATING_TYPES = frozenset({ValueType.FLOAT, ValueType.DOUBLE})

# Inclusive (min, max) per integer tag.
INTEGER_BOUNDS: dict[ValueType, tuple[int, int]] = {
    ValueType.INT8: (-(2 ** 7), 2 ** 7 - 1),
    ValueType.INT16: (-(2 ** 15), 2 ** 15 - 1),
    ValueType.INT32: (-(2 ** 31), 2 ** 31 - 1),
    ValueType.INT64: (-(2 ** 63), 2 ** 63 - 1),
    ValueType.UINT8: (0, 2 ** 8 - 1),
    ValueType.UINT16: (0, 2 ** 16 - 1),
    ValueType.UINT32: (0, 2 ** 32 - 1),
    ValueType.UINT64: (0, 2 ** 64 - 1),
}

# Scalar <-> array pairing. Array codes are the scalar code + 19.
_ARRAY_OF: dict[ValueType, ValueType] = {
    scalar: ValueType(scalar + 19)
    for scalar in ValueType
    if ValueType.STRING <= scalar <= ValueType.DOUBLE
}
_ELEMENT_OF: dict[ValueType, ValueType] = {array: scalar for scalar, array in _ARRAY_OF.items()}
_ARRAY_OF[ValueType.STRUCT] = ValueType.STRUCT_ARRAY
_ELEMENT_OF[ValueType.STRUCT_ARRAY] = ValueType.STRUCT


# ---------------------------------------------------------------------------
# Tag groups
# ---------------------------------------------------------------------------

def is_primitive(value_type: ValueType) -> bool:
    """True for scalar tags (STRING through DOUBLE)."""
    return ValueType.STRING <= value_type <= ValueType.DOUBLE


def is_array(value_type: ValueType) -> bool:
    """True for array tags, including STRUCT_ARRAY."""
    return (
        ValueType.STRING_ARRAY <= value_type <= ValueType.DOUBLE_ARRAY
        or value_type == ValueType.STRUCT_ARRAY
    )


def is_struct(value_type: ValueType) -> bool:
    return value_type in (ValueType.STRUCT, ValueType.STRUCT_ARRAY)


def is_numeric(value_type: ValueType) -> bool:
    """True for integer and floating scalars. BOOL is not numeric."""
    return (
        value_type in SIGNED_INTEGER_TYPES
        or value_type in UNSIGNED_INTEGER_TYPES
        or value_type in FLOATING_TYPES
    )


def element_type(value_type: ValueType) -> ValueType | None:
    """Scalar tag of an array tag, or None for non-array tags."""
    return _ELEMENT_OF.get(value_type)


def array_type(value_type: ValueType) -> ValueType | None:
    """Array tag for a scalar (or STRUCT) tag, or None."""
    return _ARRAY_OF.get(value_type)


# ---------------------------------------------------------------------------
# Value
# ---------------------------------------------------------------------------

def _struct_value_class() -> type:
    # struct.py imports this module; resolve the class lazily.
    from .struct import StructValue
    return StructValue


def _check_scalar(value_type: ValueType, data: Any) -> Any:
    """Validate and normalise one scalar payload for ``value_type``."""
    if value_type == ValueType.BOOL:
        if not isinstance(data, bool):
            raise TypeError(f"BOOL payload must be bool, got {type(data).__name__}")
        return data

    if value_type in INTEGER_BOUNDS:
        if isinstance(data, bool) or not isinstance(data, int):
            raise TypeError(
                f"{value_type.name} payload must be int, got {type(data).__name__}"
            )
        low, high = INTEGER_BOUNDS[value_type]
        if not low <= data <= high:
            raise ValueError(f"{data} is out of range for {value_type.name} [{low}, {high}]")
        return data

    if value_type in FLOATING_TYPES:
        if isinstance(data, bool) or not isinstance(data, (int, float)):
            raise TypeError(
                f"{value_type.name} payload must be float, got {type(data).__name__}"
            )
        return float(data)

    if value_type == ValueType.STRING:
        if not isinstance(data, str):
            raise TypeError(f"STRING payload must be str, got {type(data).__name__}")
        return data

    if value_type == ValueType.STRUCT:
        if not isinstance(data, _struct_value_class()):
            raise TypeError(
                f"STRUCT payload must be StructValue, got {type(data).__name__}"
            )
        return data

    raise TypeError(f"{value_type.name} is not a scalar tag")


@dataclass(frozen=True, eq=False)
class Value:
    """
    A single VSS datum: a tag plus the payload matching that tag.

    ``Value()`` is the empty value (tag UNSPECIFIED, payload None). Array
    payloads are stored as tuples, so a Value exclusively owns its sequence.
    STRUCT and STRUCT_ARRAY payloads hold references to ``StructValue``
    instances that may be shared with other Values; mutating a shared
    instance is visible through every Value referencing it.

    Payloads are checked against the tag on construction. A payload of the
    wrong Python type raises TypeError, an integer outside the tag's range
    raises ValueError.
    """
    type: ValueType = ValueType.UNSPECIFIED
    data: Any = None

    def __post_init__(self) -> None:
        value_type = ValueType(self.type)
        object.__setattr__(self, "type", value_type)

        if value_type == ValueType.UNSPECIFIED:
            if self.data is not None:
                raise TypeError("UNSPECIFIED value cannot carry a payload")
            return

        scalar = element_type(value_type)
        if scalar is None:
            object.__setattr__(self, "data", _check_scalar(value_type, self.data))
            return

        if isinstance(self.data, (str, bytes)) or not isinstance(self.data, Iterable):
            raise TypeError(
                f"{value_type.name} payload must be a sequence, got {type(self.data).__name__}"
            )
        items = tuple(_check_scalar(scalar, item) for item in self.data)
        object.__setattr__(self, "data", items)

    @classmethod
    def struct(cls, instance: StructValue) -> Value:
        """Wrap a struct instance (shared, not copied)."""
        return cls(ValueType.STRUCT, instance)

    @classmethod
    def struct_array(cls, instances: Iterable[StructValue]) -> Value:
        return cls(ValueType.STRUCT_ARRAY, instances)

    def is_empty(self) -> bool:
        return self.type == ValueType.UNSPECIFIED

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Value):
            return NotImplemented
        return values_equal(self, other)

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        if self.type == ValueType.UNSPECIFIED:
            return "Value()"
        return f"Value({self.type.name}, {self.data!r})"


def is_empty(value: Value) -> bool:
    """True if ``value`` holds the empty (UNSPECIFIED) alternative."""
    return value.type == ValueType.UNSPECIFIED


def get_value_type(value: Value) -> ValueType:
    """Return the tag of the active alternative."""
    return value.type


# ---------------------------------------------------------------------------
# Textual form of tags
# ---------------------------------------------------------------------------

_SCALAR_ALIASES: dict[ValueType, tuple[str, ...]] = {
    ValueType.BOOL: ("BOOLEAN",),
    ValueType.INT32: ("INT",),
    ValueType.INT64: ("LONG",),
    ValueType.UINT32: ("UNSIGNED",),
    ValueType.UINT64: ("ULONG",),
}


def _build_parse_table() -> dict[str, ValueType]:
    table: dict[str, ValueType] = {}
    for scalar, array in _ARRAY_OF.items():
        spellings = (scalar.name, *_SCALAR_ALIASES.get(scalar, ()))
        for spelling in spellings:
            table[spelling] = scalar
            table[f"{spelling}[]"] = array
        table[array.name] = array
    return table


_PARSE_TABLE = _build_parse_table()


def value_type_to_string(value_type: ValueType) -> str:
    """Canonical upper-case name, e.g. ``FLOAT_ARRAY`` or ``STRUCT``."""
    return ValueType(value_type).name


def value_type_from_string(text: str) -> ValueType | None:
    """
    Parse a tag name, case-insensitively.

    Accepts canonical names, ``<T>[]`` array spellings and the aliases
    BOOLEAN, INT, LONG, UNSIGNED and ULONG. Returns None for unknown input.
    """
    return _PARSE_TABLE.get(text.upper())


def value_type_aliases(value_type: ValueType) -> list[str]:
    """All spellings ``value_type_from_string`` maps to ``value_type``."""
    return sorted(s for s, t in _PARSE_TABLE.items() if t == value_type and s != value_type.name)


# ---------------------------------------------------------------------------
# Compatibility
# ---------------------------------------------------------------------------

_SCALAR_FAMILIES = (SIGNED_INTEGER_TYPES, UNSIGNED_INTEGER_TYPES, FLOATING_TYPES)


def are_types_compatible(expected: ValueType, actual: ValueType) -> bool:
    """
    True if values tagged ``actual`` may stand in for ``expected``.

    Compatible pairs: identical tags; anything with UNSPECIFIED; two floating
    scalars; two signed integer scalars; two unsigned integer scalars; and
    the array analogue of each of those families. Signed and unsigned never
    mix, scalars never match arrays, and BOOL, STRING and the struct tags
    only match themselves.
    """
    if expected == actual:
        return True
    if ValueType.UNSPECIFIED in (expected, actual):
        return True

    expected_elem = element_type(expected)
    actual_elem = element_type(actual)
    if (expected_elem is None) != (actual_elem is None):
        return False
    if expected_elem is not None:
        expected, actual = expected_elem, actual_elem

    return any(expected in family and actual in family for family in _SCALAR_FAMILIES)


# ---------------------------------------------------------------------------
# Equality and numeric projection
# ---------------------------------------------------------------------------

def _scalars_equal(a: Any, b: Any) -> bool:
    if isinstance(a, float) and isinstance(b, float) and math.isnan(a) and math.isnan(b):
        return True
    return a == b


def _structs_equal(a: StructValue, b: StructValue, seen: set[tuple[int, int]]) -> bool:
    if a is b:
        return True
    # A pair already under comparison is assumed equal; this ends cycles.
    pair = (id(a), id(b))
    if pair in seen:
        return True
    if a.type_name != b.type_name or a.fields.keys() != b.fields.keys():
        return False
    seen.add(pair)
    return all(_values_equal(value, b.fields[name], seen) for name, value in a.fields.items())


def _values_equal(a: Value, b: Value, seen: set[tuple[int, int]]) -> bool:
    if a.type != b.type:
        return False
    value_type = a.type
    if value_type == ValueType.UNSPECIFIED:
        return True
    if value_type == ValueType.STRUCT:
        return _structs_equal(a.data, b.data, seen)
    if value_type == ValueType.STRUCT_ARRAY:
        return len(a.data) == len(b.data) and all(
            _structs_equal(x, y, seen) for x, y in zip(a.data, b.data)
        )
    if is_array(value_type):
        return len(a.data) == len(b.data) and all(
            _scalars_equal(x, y) for x, y in zip(a.data, b.data)
        )
    return _scalars_equal(a.data, b.data)


def struct_values_equal(a: StructValue, b: StructValue) -> bool:
    """
    Same type name, same field names, and pairwise-equal field values.

    Struct graphs that refer back to themselves compare without recursing
    forever.
    """
    return _structs_equal(a, b, set())


def values_equal(a: Value, b: Value) -> bool:
    """
    Deep equality with exact tag matching.

    No widening happens: ``Value(INT32, 1)`` does not equal
    ``Value(INT64, 1)`` and ``Value(BOOL, True)`` does not equal
    ``Value(INT32, 1)``. Sequences compare element-wise, structs compare
    by type name and field-wise under the same predicate.
    """
    return _values_equal(a, b, set())


def to_double(value: Value) -> float:
    """
    Project a numeric or boolean scalar to float.

    BOOL maps to 0.0/1.0. Strings, arrays, structs and the empty value map
    to 0.0. Only meant for threshold comparisons; it is not a conversion.
    """
    if value.type == ValueType.BOOL:
        return 1.0 if value.data else 0.0
    if is_numeric(value.type):
        return float(value.data)
    return 0.0


def value_changed_beyond_threshold(old: Value, new: Value, threshold: float) -> bool:
    """
    Decide whether ``new`` differs significantly from ``old``.

    - Different tags: changed.
    - Both empty: unchanged.
    - Numeric scalars with ``threshold > 0``: changed when the absolute
      difference is at least ``threshold`` (inclusive boundary).
    - Everything else, including arrays, structs and ``threshold <= 0``:
      changed when the values are not equal.
    """
    if old.type != new.type:
        return True
    if old.type == ValueType.UNSPECIFIED:
        return False
    if is_numeric(old.type) and threshold > 0:
        return abs(to_double(new) - to_double(old)) >= threshold
    return not values_equal(old, new)
