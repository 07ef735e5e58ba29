"""
VSS JSON Loader
================
Populates a ``StructRegistry`` from a VSS tree exported as JSON (the
``vss-tools`` JSON exporter format).

The core value/struct/quality layers never import this module: struct
definitions may just as well come from a databroker's metadata response.

Example::

    registry = StructRegistry()
    names = load_vss_json("vss.json", registry)
    # ["Vehicle.Test.Position", "Vehicle.Test.DeliveryInfo", ...]
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from ..models.struct import FieldDefinition, StructDefinition, StructRegistry
from ..models.value import Value, ValueType, element_type, is_struct

_LOGGER = logging.getLogger(__name__)

ROOT_NODE = "Vehicle"

VSS_DATATYPES: dict[str, ValueType] = {
    "boolean": ValueType.BOOL,
    "string": ValueType.STRING,
    "int8": ValueType.INT8,
    "int16": ValueType.INT16,
    "int32": ValueType.INT32,
    "int64": ValueType.INT64,
    "uint8": ValueType.UINT8,
    "uint16": ValueType.UINT16,
    "uint32": ValueType.UINT32,
    "uint64": ValueType.UINT64,
    "float": ValueType.FLOAT,
    "double": ValueType.DOUBLE,
    "boolean[]": ValueType.BOOL_ARRAY,
    "string[]": ValueType.STRING_ARRAY,
    "int8[]": ValueType.INT8_ARRAY,
    "int16[]": ValueType.INT16_ARRAY,
    "int32[]": ValueType.INT32_ARRAY,
    "int64[]": ValueType.INT64_ARRAY,
    "uint8[]": ValueType.UINT8_ARRAY,
    "uint16[]": ValueType.UINT16_ARRAY,
    "uint32[]": ValueType.UINT32_ARRAY,
    "uint64[]": ValueType.UINT64_ARRAY,
    "float[]": ValueType.FLOAT_ARRAY,
    "double[]": ValueType.DOUBLE_ARRAY,
    "struct": ValueType.STRUCT,
    "struct[]": ValueType.STRUCT_ARRAY,
}


class VSSLoadError(Exception):
    """Raised when a VSS JSON document cannot be turned into struct definitions."""


def vss_datatype_to_value_type(datatype: str) -> ValueType | None:
    """Map a VSS ``datatype`` string (e.g. ``"uint8[]"``) to its tag, or None."""
    return VSS_DATATYPES.get(datatype)


# ---------------------------------------------------------------------------
# Tree walk
# ---------------------------------------------------------------------------


def parse_vss_tree(document: dict[str, Any], registry: StructRegistry) -> list[str]:
    """
    Register every struct node found under the ``Vehicle`` root.

    Struct types are named by their dotted path (``Vehicle.Test.Position``).
    Returns the names registered, in document order. A struct whose name is
    already registered is skipped.
    """
    if not isinstance(document, dict) or ROOT_NODE not in document:
        raise VSSLoadError(f"VSS JSON must contain a '{ROOT_NODE}' root node")

    registered: list[str] = []
    _walk(document[ROOT_NODE], ROOT_NODE, registry, registered)
    _LOGGER.info("Registered %d struct type(s) from VSS tree", len(registered))
    return registered


def _walk(
    node: Any,
    path: str,
    registry: StructRegistry,
    registered: list[str],
) -> None:
    if not isinstance(node, dict) or "type" not in node:
        return

    if node["type"] == "struct":
        definition = _parse_struct(node, path)
        if registry.register(definition):
            registered.append(path)
        else:
            _LOGGER.debug("Struct type %s already registered, skipped", path)

    for child_name, child in (node.get("children") or {}).items():
        _walk(child, f"{path}.{child_name}", registry, registered)


def _parse_struct(node: dict[str, Any], path: str) -> StructDefinition:
    fields: list[FieldDefinition] = []
    for name, child in (node.get("children") or {}).items():
        if not isinstance(child, dict) or "datatype" not in child:
            _LOGGER.debug("%s.%s has no datatype, skipped", path, name)
            continue

        value_type = vss_datatype_to_value_type(child["datatype"])
        if value_type is None:
            _LOGGER.debug("%s.%s has unknown datatype %r, skipped", path, name, child["datatype"])
            continue

        struct_type_name = child.get("struct_type") if is_struct(value_type) else None
        try:
            fields.append(FieldDefinition(
                name=name,
                type=value_type,
                description=child.get("description"),
                default_value=_parse_default(child.get("default"), value_type),
                struct_type_name=struct_type_name,
            ))
        except (TypeError, ValueError, OverflowError) as e:
            # pydantic's ValidationError is a ValueError subclass.
            raise VSSLoadError(f"Invalid field '{path}.{name}': {e}") from e

    try:
        return StructDefinition(
            type_name=path,
            description=node.get("description"),
            fields=fields,
        )
    except ValidationError as e:
        raise VSSLoadError(f"Invalid struct '{path}': {e}") from e


def _parse_default(raw: Any, value_type: ValueType) -> Value | None:
    if raw is None or is_struct(value_type):
        return None
    # Integral defaults are often written as floats ("default": 0.0).
    scalar = element_type(value_type) or value_type
    if scalar not in (ValueType.FLOAT, ValueType.DOUBLE, ValueType.STRING, ValueType.BOOL):
        if isinstance(raw, list):
            raw = [_as_int(item) for item in raw]
        else:
            raw = _as_int(raw)
    return Value(value_type, raw)


def _as_int(raw: Any) -> Any:
    if isinstance(raw, float) and raw.is_integer():
        return int(raw)
    return raw


# ---------------------------------------------------------------------------
# File entry point
# ---------------------------------------------------------------------------


def load_vss_json(path: str | Path, registry: StructRegistry) -> list[str]:
    """Read a VSS JSON file and register its struct types. See ``parse_vss_tree``."""
    path = Path(path)
    try:
        document = json.loads(path.read_text(encoding="utf-8"))
    except OSError as e:
        raise VSSLoadError(f"Failed to open file: {path}") from e
    except json.JSONDecodeError as e:
        raise VSSLoadError(f"JSON parsing error in {path}: {e}") from e
    except UnicodeDecodeError as e:
        raise VSSLoadError(f"{path} is not valid UTF-8: {e}") from e

    _LOGGER.debug("Loaded VSS JSON document %s", path)
    return parse_vss_tree(document, registry)
