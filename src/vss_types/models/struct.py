"""
Struct Types – Schema and Instances
====================================
Runtime representation of VSS 4.0 struct types.

- ``FieldDefinition`` / ``StructDefinition`` describe a struct type (schema).
  They are pydantic models because they usually arrive from external
  metadata (vss-tools output, a databroker's metadata response, …).
- ``StructValue`` is a runtime instance: a type name plus field values. It
  is shared by reference between the ``Value`` objects that wrap it.
- ``StructRegistry`` maps type names to definitions. It is an explicit
  object handed to every consumer; there is no process-wide default.

Example::

    registry = StructRegistry()
    registry.register(StructDefinition(
        type_name="Position",
        description="Geographic position",
        fields=[
            FieldDefinition(name="Latitude", type=ValueType.DOUBLE),
            FieldDefinition(name="Longitude", type=ValueType.DOUBLE),
        ],
    ))

    pos = StructValue("Position")
    pos.set_field("Latitude", Value(ValueType.DOUBLE, 37.7749))
"""

from __future__ import annotations

import copy
from collections.abc import Iterator, Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any

from pydantic import BaseModel, Field, InstanceOf, field_validator, model_validator

from .value import (
    Value,
    ValueType,
    are_types_compatible,
    is_struct,
    struct_values_equal,
    value_type_from_string,
    value_type_to_string,
)


# ---------------------------------------------------------------------------
# Schema models
# ---------------------------------------------------------------------------

class FieldDefinition(BaseModel):
    """A single field of a struct type."""
    name: str = Field(..., min_length=1, description="Field name, unique within its struct")
    type: ValueType = Field(..., description="Declared value tag")
    description: str | None = Field(None, description="Human-readable description")
    default_value: InstanceOf[Value] | None = Field(
        None, description="Value used when the field is omitted"
    )
    struct_type_name: str | None = Field(
        None,
        description="Referenced struct type for STRUCT / STRUCT_ARRAY fields (weak reference)",
    )

    @field_validator("type", mode="before")
    @classmethod
    def coerce_type(cls, v: Any) -> Any:
        """Accept a ValueType, its integer code, or any parseable tag name."""
        if isinstance(v, str):
            parsed = value_type_from_string(v)
            if parsed is None:
                raise ValueError(f"unknown value type {v!r}")
            return parsed
        return v

    @model_validator(mode="after")
    def validate_default_matches_type(self) -> "FieldDefinition":
        if self.default_value is not None and not are_types_compatible(
            self.type, self.default_value.type
        ):
            raise ValueError(
                f"default for field {self.name!r} has type "
                f"{value_type_to_string(self.default_value.type)} "
                f"but the field is declared {value_type_to_string(self.type)}"
            )
        return self

    @model_validator(mode="after")
    def validate_struct_reference(self) -> "FieldDefinition":
        if self.struct_type_name is not None and not is_struct(self.type):
            raise ValueError(
                f"struct_type_name is only allowed on STRUCT / STRUCT_ARRAY fields, "
                f"field {self.name!r} is {value_type_to_string(self.type)}"
            )
        return self

    def has_default(self) -> bool:
        return self.default_value is not None


class StructDefinition(BaseModel):
    """
    Schema of one struct type.

    ``fields`` maps field name to definition. A list of definitions is also
    accepted on construction; it must not contain duplicate names.
    """
    type_name: str = Field(..., min_length=1, description="Type name, unique within a registry")
    description: str | None = Field(None)
    fields: dict[str, FieldDefinition] = Field(default_factory=dict)

    @field_validator("fields", mode="before")
    @classmethod
    def coerce_fields(cls, v: Any) -> Any:
        if isinstance(v, (list, tuple)):
            keyed: dict[str, Any] = {}
            for item in v:
                name = item.name if isinstance(item, FieldDefinition) else item["name"]
                if name in keyed:
                    raise ValueError(f"duplicate field name {name!r}")
                keyed[name] = item
            return keyed
        return v

    @model_validator(mode="after")
    def validate_field_keys(self) -> "StructDefinition":
        for key, definition in self.fields.items():
            if key != definition.name:
                raise ValueError(
                    f"field key {key!r} does not match field name {definition.name!r}"
                )
        return self

    def add_field(self, definition: FieldDefinition) -> "StructDefinition":
        """Add (or replace) a field. Returns self for chaining."""
        self.fields[definition.name] = definition
        return self

    def get_field(self, name: str) -> FieldDefinition | None:
        return self.fields.get(name)

    def has_field(self, name: str) -> bool:
        return name in self.fields

    def field_names(self) -> set[str]:
        return set(self.fields)

    def required_fields(self) -> list[FieldDefinition]:
        """Fields that carry no default and must be present in an instance."""
        return [f for f in self.fields.values() if not f.has_default()]

    def __repr__(self) -> str:
        return f"StructDefinition(type_name={self.type_name!r}, fields={sorted(self.fields)})"


# ---------------------------------------------------------------------------
# Runtime instance
# ---------------------------------------------------------------------------

@dataclass(eq=False)
class StructValue:
    """
    Runtime instance of a struct: a type name and field values.

    An instance may omit fields that have schema defaults and may carry
    fields unknown to its schema; ``validate_struct`` decides whether that
    is acceptable. Equality is deep and ignores field insertion order.
    """
    type_name: str = ""
    fields: dict[str, Value] = field(default_factory=dict)

    def set_field(self, name: str, value: Value) -> "StructValue":
        if not isinstance(value, Value):
            raise TypeError(f"field {name!r} must be set to a Value, got {type(value).__name__}")
        self.fields[name] = value
        return self

    def get_field(self, name: str) -> Value | None:
        return self.fields.get(name)

    def has_field(self, name: str) -> bool:
        return name in self.fields

    def remove_field(self, name: str) -> bool:
        """Remove a field. Returns False if it was not set."""
        return self.fields.pop(name, None) is not None

    def clear(self) -> None:
        self.fields.clear()

    def field_names(self) -> set[str]:
        return set(self.fields)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, StructValue):
            return NotImplemented
        return struct_values_equal(self, other)

    __hash__ = None  # type: ignore[assignment]


# ---------------------------------------------------------------------------
# Registry
# ---------------------------------------------------------------------------

class StructRegistry:
    """
    Type name -> StructDefinition.

    Registration is one-shot per name. Reads are safe from several threads
    once registration has finished; ``register`` and ``clear`` need
    external synchronisation.
    """

    def __init__(self, definitions: list[StructDefinition] | None = None) -> None:
        self._structs: dict[str, StructDefinition] = {}
        for definition in definitions or []:
            self.register(definition)

    def register(self, definition: StructDefinition) -> bool:
        """Insert ``definition``. Returns False if the name is already taken."""
        if definition.type_name in self._structs:
            return False
        self._structs[definition.type_name] = definition
        return True

    def get(self, type_name: str) -> StructDefinition | None:
        return self._structs.get(type_name)

    def has(self, type_name: str) -> bool:
        return type_name in self._structs

    def all(self) -> Mapping[str, StructDefinition]:
        """Read-only view of every registered definition."""
        return MappingProxyType(self._structs)

    def clear(self) -> None:
        self._structs.clear()

    def __contains__(self, type_name: object) -> bool:
        return type_name in self._structs

    def __len__(self) -> int:
        return len(self._structs)

    def __iter__(self) -> Iterator[str]:
        return iter(self._structs)

    def __repr__(self) -> str:
        return f"StructRegistry(types={sorted(self._structs)})"


def create_default_struct(type_name: str, registry: StructRegistry) -> StructValue | None:
    """
    Instance of ``type_name`` holding a copy of every schema default.

    Fields without a default are left absent. Returns None if the type is
    not registered.
    """
    definition = registry.get(type_name)
    if definition is None:
        return None

    instance = StructValue(type_name)
    for name, field_def in definition.fields.items():
        if field_def.default_value is not None:
            instance.set_field(name, copy.deepcopy(field_def.default_value))
    return instance
