"""
Struct Validator
=================
Validates ``StructValue`` instances against the definitions held in a
``StructRegistry``.

Two entry points:

- ``validate_struct(instance, registry, strict=True)`` returns ``None`` on
  success or the first error message.
- ``StructValidator`` returns a ``ValidationResult`` listing every issue,
  each tagged with a rule id and a severity.

Example::

    error = validate_struct(delivery, registry)
    if error is not None:
        print(error)

    result = StructValidator(registry, strict=False).validate(delivery)
    for issue in result.issues:
        print(f"[{issue.severity}] {issue.rule_id}: {issue.message}")
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from enum import Enum

from ..models.struct import StructRegistry, StructValue
from ..models.value import (
    Value,
    ValueType,
    are_types_compatible,
    value_type_to_string,
)


# ---------------------------------------------------------------------------
# Result types
# ---------------------------------------------------------------------------


class Severity(str, Enum):
    ERROR = "ERROR"
    WARNING = "WARNING"
    INFO = "INFO"


@dataclass
class ValidationIssue:
    rule_id: str
    severity: Severity
    message: str
    field: str | None = None


@dataclass
class ValidationResult:
    """Result of validating one struct instance."""
    passed: bool
    type_name: str
    issues: list[ValidationIssue] = field(default_factory=list)
    rule_count: int = 0

    @property
    def errors(self) -> list[ValidationIssue]:
        return [i for i in self.issues if i.severity == Severity.ERROR]

    @property
    def warnings(self) -> list[ValidationIssue]:
        return [i for i in self.issues if i.severity == Severity.WARNING]

    @property
    def first_error(self) -> str | None:
        """Message of the first ERROR issue, or None if the instance passed."""
        errors = self.errors
        return errors[0].message if errors else None

    def __str__(self) -> str:
        status = "PASS" if self.passed else "FAIL"
        return (
            f"[{status}] {self.type_name} "
            f"– {len(self.errors)} error(s), {len(self.warnings)} warning(s)"
        )


AddIssue = Callable[..., None]


# ---------------------------------------------------------------------------
# Struct Validator
# ---------------------------------------------------------------------------


class StructValidator:
    """
    Validates struct instances against a registry.

    Rules implemented:
    - ST-001  Struct type must be registered
    - ST-002  Fields without a default must be present
    - ST-003  Field value type must be compatible with the declared type
    - ST-004  Nested structs (and struct-array elements) must validate and
              must not refer back to a struct on the current path
    - ST-005  Extra fields: error in strict mode, info in lax mode
    - ST-006  Nested struct type name must match the field's struct reference
    - ST-007  Omitted field falls back to its schema default
    - ST-008  Struct-array elements of an unregistered type are not checked
    """

    def __init__(self, registry: StructRegistry, *, strict: bool = True) -> None:
        self.registry = registry
        self.strict = strict
        # Instances on the current validation path, by id.
        self._active: set[int] = set()

    def validate(self, instance: StructValue) -> ValidationResult:
        self._active.add(id(instance))
        try:
            return self._validate(instance)
        finally:
            self._active.discard(id(instance))

    def _validate(self, instance: StructValue) -> ValidationResult:
        issues: list[ValidationIssue] = []
        rules_run = 0

        def add(rule_id: str, sev: Severity, msg: str, fld: str | None = None) -> None:
            issues.append(ValidationIssue(rule_id, sev, msg, fld))

        # ST-001 Registered type
        rules_run += 1
        definition = self.registry.get(instance.type_name)
        if definition is None:
            add(
                "ST-001",
                Severity.ERROR,
                f"Struct type '{instance.type_name}' not found in registry",
            )
            return ValidationResult(
                passed=False,
                type_name=instance.type_name,
                issues=issues,
                rule_count=rules_run,
            )

        # ST-002 .. ST-004, ST-006 .. ST-008 Declared fields
        rules_run += 6
        for name, field_def in definition.fields.items():
            value = instance.get_field(name)
            if value is None:
                if field_def.default_value is None:
                    add(
                        "ST-002",
                        Severity.ERROR,
                        f"Required field '{name}' missing in struct '{instance.type_name}'",
                        name,
                    )
                else:
                    add(
                        "ST-007",
                        Severity.INFO,
                        f"Field '{name}' omitted, schema default applies",
                        name,
                    )
                continue

            if not are_types_compatible(field_def.type, value.type):
                add(
                    "ST-003",
                    Severity.ERROR,
                    f"Field '{name}' in struct '{instance.type_name}' has type "
                    f"{value_type_to_string(value.type)} but expected "
                    f"{value_type_to_string(field_def.type)}",
                    name,
                )
                continue

            if field_def.type == ValueType.STRUCT and value.type == ValueType.STRUCT:
                self._check_nested(name, name, value.data, field_def.struct_type_name, add)
            elif field_def.type == ValueType.STRUCT_ARRAY and value.type == ValueType.STRUCT_ARRAY:
                self._check_elements(name, value, field_def.struct_type_name, add)

        # ST-005 Extra fields
        rules_run += 1
        for name in instance.fields:
            if not definition.has_field(name):
                add(
                    "ST-005",
                    Severity.ERROR if self.strict else Severity.INFO,
                    f"Extra field '{name}' not defined in struct type '{instance.type_name}'",
                    name,
                )

        passed = not any(i.severity == Severity.ERROR for i in issues)
        return ValidationResult(
            passed=passed,
            type_name=instance.type_name,
            issues=issues,
            rule_count=rules_run,
        )

    def validate_batch(self, instances: list[StructValue]) -> list[ValidationResult]:
        """Validate a list of struct instances and return all results."""
        return [self.validate(instance) for instance in instances]

    # ------------------------------------------------------------------
    # Nested structs
    # ------------------------------------------------------------------

    def _check_nested(
        self,
        name: str,
        label: str,
        nested: StructValue,
        expected_type: str | None,
        add: AddIssue,
    ) -> None:
        # ST-006 Referenced type name
        if expected_type is not None and nested.type_name != expected_type:
            add(
                "ST-006",
                Severity.ERROR,
                f"Field '{label}' holds struct '{nested.type_name}' "
                f"but expected '{expected_type}'",
                name,
            )
            return

        if id(nested) in self._active:
            add(
                "ST-004",
                Severity.ERROR,
                f"Nested struct field '{label}': cyclic reference to struct '{nested.type_name}'",
                name,
            )
            return

        # ST-004 Recursive validation, first nested error only
        nested_error = self.validate(nested).first_error
        if nested_error is not None:
            add(
                "ST-004",
                Severity.ERROR,
                f"Nested struct field '{label}': {nested_error}",
                name,
            )

    def _check_elements(
        self, name: str, value: Value, expected_type: str | None, add: AddIssue
    ) -> None:
        for index, element in enumerate(value.data):
            element_type = expected_type or element.type_name
            if not self.registry.has(element_type):
                # ST-008
                add(
                    "ST-008",
                    Severity.WARNING,
                    f"Elements of field '{name}' not validated: "
                    f"struct type '{element_type}' is not registered",
                    name,
                )
                return
            self._check_nested(name, f"{name}[{index}]", element, expected_type, add)


def validate_struct(
    instance: StructValue,
    registry: StructRegistry,
    strict: bool = True,
) -> str | None:
    """
    Validate ``instance`` against its registered definition.

    Returns None when the instance is valid, otherwise a message describing
    the first failure: unknown type, missing required field, incompatible
    field type, invalid nested struct (prefixed with the field name) or, in
    strict mode, an extra field.
    """
    return StructValidator(registry, strict=strict).validate(instance).first_error
