"""
vss-types – Runtime Types for VSS Signals
==========================================
Backend-agnostic value, struct and quality types for the Vehicle Signal
Specification (VSS 4.0, including struct types).

- Value layer: ``ValueType`` tags and the ``Value`` tagged record, plus
  compatibility, equality, conversion and change-detection helpers.
- Struct layer: ``StructDefinition`` schemas, ``StructValue`` instances,
  an explicit ``StructRegistry`` and ``validate_struct``.
- Quality layer: ``SignalQuality`` and the ``QualifiedValue`` /
  ``DynamicQualifiedValue`` wrappers.

Quick Start::

    from vss_types import (
        StructDefinitionBuilder, StructRegistry, StructValue,
        Value, ValueType, validate_struct,
    )

    registry = StructRegistry()
    (
        StructDefinitionBuilder("Position", "Geographic position")
        .field("Latitude", ValueType.DOUBLE)
        .field("Longitude", ValueType.DOUBLE)
        .register(registry)
    )

    pos = StructValue("Position")
    pos.set_field("Latitude", Value(ValueType.DOUBLE, 37.7749))
    pos.set_field("Longitude", Value(ValueType.DOUBLE, -122.4194))

    assert validate_struct(pos, registry) is None
"""

__version__ = "0.1.0"

# Value layer
from .models.value import (
    Value,
    ValueType,
    are_types_compatible,
    array_type,
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
from .models.conversion import convert_value_type

# Struct layer
from .models.struct import (
    FieldDefinition,
    StructDefinition,
    StructRegistry,
    StructValue,
    create_default_struct,
)

# Quality layer
from .models.quality import (
    DynamicQualifiedValue,
    QualifiedValue,
    QualifiedValueError,
    SignalQuality,
    convert_qualified_value_type,
    dynamic_qualified_value_changed_beyond_threshold,
    dynamic_qualified_values_equal,
    qualified_value_changed_beyond_threshold,
    qualified_values_equal,
    signal_quality_from_string,
    signal_quality_to_string,
)

# Builder
from .builder.struct_builder import StructDefinitionBuilder

# Validator
from .validator.struct_validator import (
    Severity,
    StructValidator,
    ValidationIssue,
    ValidationResult,
    validate_struct,
)

__all__ = [
    # Value layer
    "Value",
    "ValueType",
    "are_types_compatible",
    "array_type",
    "element_type",
    "get_value_type",
    "is_array",
    "is_empty",
    "is_numeric",
    "is_primitive",
    "is_struct",
    "to_double",
    "value_changed_beyond_threshold",
    "value_type_aliases",
    "value_type_from_string",
    "value_type_to_string",
    "values_equal",
    "convert_value_type",
    # Struct layer
    "FieldDefinition",
    "StructDefinition",
    "StructRegistry",
    "StructValue",
    "create_default_struct",
    # Quality layer
    "DynamicQualifiedValue",
    "QualifiedValue",
    "QualifiedValueError",
    "SignalQuality",
    "convert_qualified_value_type",
    "dynamic_qualified_value_changed_beyond_threshold",
    "dynamic_qualified_values_equal",
    "qualified_value_changed_beyond_threshold",
    "qualified_values_equal",
    "signal_quality_from_string",
    "signal_quality_to_string",
    # Builder
    "StructDefinitionBuilder",
    # Validation
    "StructValidator",
    "ValidationResult",
    "ValidationIssue",
    "Severity",
    "validate_struct",
]
