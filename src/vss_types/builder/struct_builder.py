"""
Struct Definition Builder
==========================
Fluent builder API for constructing StructDefinition objects.

Example::

    from vss_types import StructDefinitionBuilder, StructRegistry, ValueType

    registry = StructRegistry()
    (
        StructDefinitionBuilder("DeliveryInfo", "Delivery information")
        .field("Address", ValueType.STRING, "Destination address")
        .field("Receiver", ValueType.STRING)
        .field("Priority", ValueType.INT32, default=Value(ValueType.INT32, 3))
        .struct("Location", "Position")
        .register(registry)
    )
"""

from __future__ import annotations

from ..models.struct import FieldDefinition, StructDefinition, StructRegistry
from ..models.value import Value, ValueType


class StructDefinitionBuilder:
    """
    Fluent builder for StructDefinition objects.

    Fields are validated when added, so a bad default or a struct reference
    on a scalar field fails at the offending call.
    """

    def __init__(self, type_name: str, description: str | None = None) -> None:
        self._type_name = type_name
        self._description = description
        self._fields: list[FieldDefinition] = []

    # ------------------------------------------------------------------
    # Builder chain methods
    # ------------------------------------------------------------------

    def field(
        self,
        name: str,
        type: ValueType | str,
        description: str | None = None,
        default: Value | None = None,
    ) -> "StructDefinitionBuilder":
        """Primitive or array field. ``type`` may be a tag name such as "float[]"."""
        self._fields.append(
            FieldDefinition(name=name, type=type, description=description, default_value=default)
        )
        return self

    def struct(
        self, name: str, struct_type: str, description: str | None = None
    ) -> "StructDefinitionBuilder":
        """Nested struct field referencing ``struct_type``."""
        self._fields.append(
            FieldDefinition(
                name=name,
                type=ValueType.STRUCT,
                description=description,
                struct_type_name=struct_type,
            )
        )
        return self

    def struct_array(
        self, name: str, struct_type: str, description: str | None = None
    ) -> "StructDefinitionBuilder":
        """Array-of-struct field whose elements are ``struct_type`` instances."""
        self._fields.append(
            FieldDefinition(
                name=name,
                type=ValueType.STRUCT_ARRAY,
                description=description,
                struct_type_name=struct_type,
            )
        )
        return self

    # --- Build ---

    def build(self) -> StructDefinition:
        """Construct the definition. Duplicate field names raise ValidationError."""
        return StructDefinition(
            type_name=self._type_name,
            description=self._description,
            fields=self._fields,
        )

    def register(self, registry: StructRegistry) -> StructDefinition:
        """Build and register. Raises ValueError if the type name is taken."""
        definition = self.build()
        if not registry.register(definition):
            raise ValueError(f"struct type {self._type_name!r} is already registered")
        return definition
