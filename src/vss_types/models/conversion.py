"""
Value Type Conversion
======================
Safe widening/narrowing between compatible value tags.

Failure is never raised: a conversion that cannot be performed returns the
empty ``Value()`` and the caller inspects the tag.

Example::

    convert_value_type(Value(ValueType.INT64, 100), ValueType.INT8)
    # Value(INT8, 100)
    convert_value_type(Value(ValueType.INT64, 300), ValueType.INT8)
    # Value()  – out of range
"""

from __future__ import annotations

from typing import Any

from .value import (
    FLOATING_TYPES,
    INTEGER_BOUNDS,
    SIGNED_INTEGER_TYPES,
    UNSIGNED_INTEGER_TYPES,
    Value,
    ValueType,
    are_types_compatible,
    element_type,
)


class _OutOfRange(Exception):
    """Internal signal: one element does not fit the target tag."""


def _convert_scalar(data: Any, source: ValueType, target: ValueType) -> Any:
    if source in SIGNED_INTEGER_TYPES and target in SIGNED_INTEGER_TYPES:
        low, high = INTEGER_BOUNDS[target]
        if not low <= data <= high:
            raise _OutOfRange
        return int(data)

    if source in UNSIGNED_INTEGER_TYPES and target in UNSIGNED_INTEGER_TYPES:
        _, high = INTEGER_BOUNDS[target]
        if data > high:
            raise _OutOfRange
        return int(data)

    if source in FLOATING_TYPES and target in FLOATING_TYPES:
        return float(data)

    raise _OutOfRange


def convert_value_type(value: Value, target: ValueType) -> Value:
    """
    Coerce ``value`` to ``target``.

    - Same tag or an empty value: returned unchanged.
    - Incompatible tags (see ``are_types_compatible``): empty value.
    - Signed/unsigned integers: range-checked against the target width;
      out of range yields the empty value.
    - FLOAT <-> DOUBLE: direct cast, never fails.
    - Arrays: converted element-wise; one out-of-range element makes the
      whole conversion yield the empty value.
    - Anything else: empty value.
    """
    source = value.type
    if target == source or source == ValueType.UNSPECIFIED:
        return value
    if not are_types_compatible(target, source):
        return Value()

    source_elem = element_type(source)
    target_elem = element_type(target)
    try:
        if source_elem is None and target_elem is None:
            return Value(target, _convert_scalar(value.data, source, target))
        if source_elem is not None and target_elem is not None:
            return Value(
                target,
                [_convert_scalar(item, source_elem, target_elem) for item in value.data],
            )
    except _OutOfRange:
        return Value()
    return Value()
