"""
Examples for vss-types
=======================
Three complete examples demonstrating the value, struct and quality layers.

Run:
    python examples/examples.py
"""

from __future__ import annotations

import sys
import time
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from vss_types import (
    DynamicQualifiedValue,
    QualifiedValue,
    SignalQuality,
    StructDefinitionBuilder,
    StructRegistry,
    StructValidator,
    StructValue,
    Value,
    ValueType,
    convert_qualified_value_type,
    convert_value_type,
    dynamic_qualified_value_changed_beyond_threshold,
    value_changed_beyond_threshold,
    value_type_from_string,
    value_type_to_string,
    validate_struct,
)
from vss_types.loader.vss_json import load_vss_json


# ---------------------------------------------------------------------------
# Example 1: Values and conversion
# ---------------------------------------------------------------------------


def example_values() -> None:
    """
    Example 1: Tagged values, textual tags and safe conversion.

    A databroker reports Vehicle.Speed as INT64 while the consumer declares
    INT8. Conversion succeeds while the value fits and yields the empty
    value otherwise.
    """
    print("\n" + "="*60)
    print("EXAMPLE 1: Values and Conversion")
    print("="*60)

    tag = value_type_from_string("float[]")
    print(f"\n'float[]' parses to {value_type_to_string(tag)}")

    for raw in (100, 300):
        speed = Value(ValueType.INT64, raw)
        converted = convert_value_type(speed, ValueType.INT8)
        status = "ok" if not converted.is_empty() else "out of range"
        print(f"  {speed!r:<22} -> INT8: {converted!r} ({status})")

    old = Value(ValueType.DOUBLE, 100.0)
    for raw in (100.5, 105.0):
        new = Value(ValueType.DOUBLE, raw)
        changed = value_changed_beyond_threshold(old, new, 1.0)
        print(f"  100.0 -> {raw}: changed beyond 1.0? {changed}")


# ---------------------------------------------------------------------------
# Example 2: Struct schemas and validation
# ---------------------------------------------------------------------------


def example_structs() -> None:
    """
    Example 2: Registering struct types and validating instances.

    A delivery record nests a Position struct. Validation recurses into the
    nested value and reports the first problem it finds.
    """
    print("\n" + "="*60)
    print("EXAMPLE 2: Struct Types")
    print("="*60)

    registry = StructRegistry()
    (
        StructDefinitionBuilder("Position", "Geographic position")
        .field("Latitude", ValueType.DOUBLE)
        .field("Longitude", ValueType.DOUBLE)
        .field("Altitude", ValueType.DOUBLE)
        .register(registry)
    )
    (
        StructDefinitionBuilder("DeliveryInfo", "Delivery information")
        .field("Address", ValueType.STRING)
        .field("Receiver", ValueType.STRING)
        .field("Priority", ValueType.INT32, default=Value(ValueType.INT32, 3))
        .struct("Location", "Position")
        .register(registry)
    )
    print(f"\nRegistry: {registry!r}")

    position = (
        StructValue("Position")
        .set_field("Latitude", Value(ValueType.DOUBLE, 37.7749))
        .set_field("Longitude", Value(ValueType.DOUBLE, -122.4194))
        .set_field("Altitude", Value(ValueType.DOUBLE, 16.0))
    )
    delivery = (
        StructValue("DeliveryInfo")
        .set_field("Address", Value(ValueType.STRING, "123 Main St"))
        .set_field("Location", Value.struct(position))
    )

    print(f"  Partial delivery: {validate_struct(delivery, registry)}")

    delivery.set_field("Receiver", Value(ValueType.STRING, "John Doe"))
    print(f"  Complete delivery: {validate_struct(delivery, registry) or 'valid'}")

    result = StructValidator(registry).validate(delivery)
    print(f"  {result}")
    for issue in result.issues:
        print(f"    [{issue.severity.value}] {issue.rule_id}: {issue.message}")

    tests_dir = Path(__file__).parent.parent / "tests"
    vss_registry = StructRegistry()
    names = load_vss_json(tests_dir / "vss_test.json", vss_registry)
    print(f"\nLoaded from VSS JSON: {', '.join(names)}")


# ---------------------------------------------------------------------------
# Example 3: Quality
# ---------------------------------------------------------------------------


def example_quality() -> None:
    """
    Example 3: Quality-qualified values.

    A temperature reading ages over time; a speed reading whose sensor
    fails changes quality, which always counts as a change.
    """
    print("\n" + "="*60)
    print("EXAMPLE 3: Signal Quality")
    print("="*60)

    temp = QualifiedValue(22.5)
    time.sleep(0.05)
    print(f"\nTemperature valid={temp.is_valid()} age={temp.age().total_seconds() * 1000:.0f} ms")

    ok = DynamicQualifiedValue(Value(ValueType.DOUBLE, 100.0))
    failed = DynamicQualifiedValue(Value(ValueType.DOUBLE, 100.0), SignalQuality.INVALID)
    changed = dynamic_qualified_value_changed_beyond_threshold(ok, failed, 1000.0)
    print(f"  VALID 100.0 -> INVALID 100.0, changed? {changed}")

    big = DynamicQualifiedValue(Value(ValueType.INT64, 300))
    narrowed = convert_qualified_value_type(big, ValueType.INT8)
    print(f"  INT64 300 -> INT8: {narrowed.value!r} quality={narrowed.quality.name}")


if __name__ == "__main__":
    example_values()
    example_structs()
    example_quality()
