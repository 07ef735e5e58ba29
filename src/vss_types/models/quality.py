"""
Signal Quality – Qualified Values
==================================
Quality and timestamp metadata attached to a value.

``QualifiedValue[T]`` wraps a value of a known Python type, while
``DynamicQualifiedValue`` wraps a ``Value`` whose tag is only known at
runtime. Both carry a ``SignalQuality`` and a UTC timestamp taken at
construction unless one is supplied.

Example::

    temp = QualifiedValue(22.5)
    temp.is_valid()       # True
    temp.age()            # timedelta(...)

    speed = DynamicQualifiedValue(Value(ValueType.INT64, 100))
    convert_qualified_value_type(speed, ValueType.INT8).value
    # Value(INT8, 100)
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from enum import IntEnum
from typing import Generic, TypeVar

from .conversion import convert_value_type
from .value import Value, ValueType, value_changed_beyond_threshold, values_equal

T = TypeVar("T")


class SignalQuality(IntEnum):
    """
    Trust in a signal's current value.

    UNKNOWN       – quality not specified.
    VALID         – value is reliable.
    INVALID       – sensor error, failed conversion, failed validation.
    NOT_AVAILABLE – sensor absent, disconnected or not yet initialised.
    STALE         – value not refreshed within its expected period.
    OUT_OF_RANGE  – value outside the signal's allowed range.
    """
    UNKNOWN = 0
    VALID = 1
    INVALID = 2
    NOT_AVAILABLE = 3
    STALE = 4
    OUT_OF_RANGE = 5


_QUALITY_ALIASES: dict[str, SignalQuality] = {
    "NOTAVAILABLE": SignalQuality.NOT_AVAILABLE,
    "N/A": SignalQuality.NOT_AVAILABLE,
    "OUTOFRANGE": SignalQuality.OUT_OF_RANGE,
    "OOR": SignalQuality.OUT_OF_RANGE,
}


def signal_quality_to_string(quality: SignalQuality) -> str:
    return SignalQuality(quality).name


def signal_quality_from_string(text: str) -> SignalQuality | None:
    """Case-insensitive parse; also accepts NOTAVAILABLE, N/A, OUTOFRANGE, OOR."""
    upper = text.upper()
    if upper in SignalQuality.__members__:
        return SignalQuality[upper]
    return _QUALITY_ALIASES.get(upper)


class QualifiedValueError(ValueError):
    """Raised when the payload of an empty qualified value is requested."""


def _now() -> datetime:
    return datetime.now(tz=timezone.utc)


def _as_utc(timestamp: datetime) -> datetime:
    """Naive timestamps are taken to be UTC."""
    if timestamp.tzinfo is None:
        return timestamp.replace(tzinfo=timezone.utc)
    return timestamp


def _age(timestamp: datetime) -> timedelta:
    # Clock adjustments can put the timestamp in the future.
    return max(_now() - timestamp, timedelta(0))


# ---------------------------------------------------------------------------
# Statically typed wrapper
# ---------------------------------------------------------------------------

@dataclass(eq=False)
class QualifiedValue(Generic[T]):
    """
    An optional value of type ``T`` with quality and timestamp.

    Quality defaults to VALID when a value is given and UNKNOWN otherwise.
    A timestamp without tzinfo is read as UTC. Equality compares value and
    quality; the timestamp is ignored.
    """
    value: T | None = None
    quality: SignalQuality | None = None
    timestamp: datetime = field(default_factory=_now)

    def __post_init__(self) -> None:
        if self.quality is None:
            self.quality = SignalQuality.UNKNOWN if self.value is None else SignalQuality.VALID
        self.timestamp = _as_utc(self.timestamp)

    def has_value(self) -> bool:
        return self.value is not None

    def is_valid(self) -> bool:
        return self.value is not None and self.quality == SignalQuality.VALID

    def is_invalid(self) -> bool:
        return self.quality == SignalQuality.INVALID

    def is_not_available(self) -> bool:
        return self.quality == SignalQuality.NOT_AVAILABLE

    def age(self) -> timedelta:
        return _age(self.timestamp)

    def value_or(self, default: T) -> T:
        return default if self.value is None else self.value

    def value_or_throw(self) -> T:
        if self.value is None:
            raise QualifiedValueError("QualifiedValue has no value")
        return self.value

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, QualifiedValue):
            return NotImplemented
        return self.value == other.value and self.quality == other.quality

    __hash__ = None  # type: ignore[assignment]


def qualified_values_equal(a: QualifiedValue[T], b: QualifiedValue[T]) -> bool:
    return a == b


def _is_arithmetic(payload: object) -> bool:
    return isinstance(payload, (int, float)) and not isinstance(payload, bool)


def qualified_value_changed_beyond_threshold(
    old: QualifiedValue[T],
    new: QualifiedValue[T],
    threshold: float,
) -> bool:
    """
    True if ``new`` differs significantly from ``old``.

    A quality change always counts. Two empty values never differ, an empty
    and a present value always do. Arithmetic (non-bool) payloads compare
    against ``threshold`` when it is positive, inclusive of the boundary;
    anything else compares by inequality.
    """
    if old.quality != new.quality:
        return True
    if old.value is None and new.value is None:
        return False
    if (old.value is None) != (new.value is None):
        return True
    if threshold > 0 and _is_arithmetic(old.value) and _is_arithmetic(new.value):
        return abs(float(new.value) - float(old.value)) >= threshold
    return old.value != new.value


# ---------------------------------------------------------------------------
# Dynamic wrapper
# ---------------------------------------------------------------------------

@dataclass(eq=False)
class DynamicQualifiedValue:
    """
    A ``Value`` with quality and timestamp.

    "No value" is the empty ``Value()``. Quality defaults to VALID for a
    non-empty value and UNKNOWN otherwise.
    """
    value: Value = field(default_factory=Value)
    quality: SignalQuality | None = None
    timestamp: datetime = field(default_factory=_now)

    def __post_init__(self) -> None:
        if self.quality is None:
            self.quality = SignalQuality.UNKNOWN if self.value.is_empty() else SignalQuality.VALID
        self.timestamp = _as_utc(self.timestamp)

    def has_value(self) -> bool:
        return not self.value.is_empty()

    def is_valid(self) -> bool:
        return not self.value.is_empty() and self.quality == SignalQuality.VALID

    def is_invalid(self) -> bool:
        return self.quality == SignalQuality.INVALID

    def is_not_available(self) -> bool:
        return self.quality == SignalQuality.NOT_AVAILABLE

    def age(self) -> timedelta:
        return _age(self.timestamp)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, DynamicQualifiedValue):
            return NotImplemented
        return values_equal(self.value, other.value) and self.quality == other.quality

    __hash__ = None  # type: ignore[assignment]


def dynamic_qualified_values_equal(a: DynamicQualifiedValue, b: DynamicQualifiedValue) -> bool:
    """Deep value equality plus quality equality. Timestamps are ignored."""
    return a == b


def dynamic_qualified_value_changed_beyond_threshold(
    old: DynamicQualifiedValue,
    new: DynamicQualifiedValue,
    threshold: float,
) -> bool:
    if old.quality != new.quality:
        return True
    return value_changed_beyond_threshold(old.value, new.value, threshold)


def convert_qualified_value_type(
    qvalue: DynamicQualifiedValue,
    target: ValueType,
) -> DynamicQualifiedValue:
    """
    Convert the wrapped value to ``target``, keeping the timestamp.

    Values whose quality is not VALID, and empty values, are returned
    unchanged. A failed conversion produces an empty value with quality
    INVALID; a successful one keeps the original quality.
    """
    if qvalue.quality != SignalQuality.VALID or qvalue.value.is_empty():
        return qvalue

    converted = convert_value_type(qvalue.value, target)
    if converted.is_empty():
        return DynamicQualifiedValue(Value(), SignalQuality.INVALID, qvalue.timestamp)
    return DynamicQualifiedValue(converted, qvalue.quality, qvalue.timestamp)
