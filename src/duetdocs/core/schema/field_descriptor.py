#!/usr/bin/env python3
"""
Purpose:
    Implements the FieldDescriptor model for DuetDocs schemas, handling
    authoring normalization, packing/unpacking of type-specific specs and
    constraints, flat serialization, and two-phase value checking.
"""
from __future__ import annotations

import math
import re
from typing import Any, Dict, List, Type

from pydantic import (
    BaseModel,
    Field,
    ConfigDict,
    field_validator,
    model_validator,
    model_serializer,
)

from duetdocs.core.errors import (
    AboveMaximumError,
    BelowMinimumError,
    InvalidEnumValueError,
    PatternMismatchError,
    RequiredFieldMissingError,
    SchemaError,
    TooLongError,
    TooShortError,
    TypeMismatchError,
)
from duetdocs.core.schema.field_type import FieldType
from duetdocs.core.schema.field_specs import (
    FieldSpec,
    TextSpec,
    NumberSpec,
    BooleanSpec,
    EnumSpec,
    DateSpec,
    FieldValidation,
    VALIDATION_KEYS,
)
from duetdocs.core.constants import FIELD_ID_ALLOWED_RE
from duetdocs.core.utils import is_valid_field_id
from duetdocs.core.values import Value, ValueKind, parse_iso_date, to_jsonable


# --- Spec key registry --- #
# Which flat keys belong to which FieldType.
SPEC_REGISTRY: Dict[FieldType, tuple[Type[BaseModel], set[str]]] = {
    FieldType.TEXT:    (TextSpec, set()),
    FieldType.NUMBER:  (NumberSpec, set()),
    FieldType.BOOLEAN: (BooleanSpec, set()),
    FieldType.ENUM:    (EnumSpec, {"options"}),
    FieldType.DATE:    (DateSpec, set()),
}

# Expected-type wording used in type mismatch errors
_EXPECTED: Dict[FieldType, str] = {
    FieldType.TEXT: "text",
    FieldType.NUMBER: "number",
    FieldType.BOOLEAN: "boolean",
    FieldType.ENUM: "enum",
    FieldType.DATE: "date (date object or ISO-8601 string)",
}


# --- Model --- #

class FieldDescriptor(BaseModel):
    """
    One field in a DuetDocs schema.

    Flat authoring:
      - Common keys: id, label, type (or fieldtype), description, default
      - Type-specific keys live at top-level but are packed into `spec`
      - Constraint keys (min, max, minLength, maxLength, pattern, required)
        live at top-level but are packed into `validation`

    Type-specific (live in `spec`; authored flat):
      - enum: options
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    # Common
    id: str = Field(..., description="Field identifier (also the patch path segment).")
    label: str = Field(..., description="Human-readable label.")
    fieldtype: FieldType = Field(default=FieldType.TEXT, description="Field type.")
    description: str | None = Field(default=None, description="Longer human-readable description.")
    default: Any | None = Field(default=None, description="Default value.")

    # Per-type spec (packed/unpacked automatically)
    spec: FieldSpec | None = Field(default=None, description="Type-specific parameters.")
    validation: FieldValidation | None = Field(default=None, description="Optional constraints.")

    # --- Pre-parse: pack flat keys into spec/validation --- #
    @model_validator(mode="before")
    @classmethod
    def _pack_flat(cls, data: Any) -> Any:
        """
        Convert flat authoring keys into a typed `spec` and `validation` based on
        `fieldtype`, default the label to the id, and accept `type` as an alias.
        """
        if not isinstance(data, dict):
            return data

        data = cls._fd_alias_type_key(dict(data))
        if not str(data.get("label") or "").strip():
            data["label"] = data.get("id")
        data = cls._fd_pack_validation(data)

        ft = cls._fd_parse_fieldtype(data.get("fieldtype"))
        spec_model, allowed_keys = SPEC_REGISTRY.get(ft, (None, set()))
        if not spec_model:
            return data  # unknown type handled later

        flat = {k: v for k, v in data.items() if k in allowed_keys}
        has_flat = bool(flat)
        has_spec = isinstance(data.get("spec"), dict)
        if has_flat and has_spec:
            raise ValueError("Provide either flat type-specific keys or 'spec', not both")
        cls._fd_raise_if_stray_keys(data, ft, allowed_keys)

        if has_flat:
            data = {k: v for k, v in data.items() if k not in allowed_keys}
            data["spec"] = {"kind": ft.value, **flat}
        elif not has_spec and ft != FieldType.ENUM:
            data["spec"] = {"kind": ft.value}

        return data

    # --- Validators --- #

    @field_validator("fieldtype", mode="before")
    @classmethod
    def _parse_fieldtype(cls, v: Any) -> FieldType:
        """Coerce incoming values to FieldType (unknowns → INVALID)."""
        return FieldType.parse(v)

    @field_validator("id", mode="before")
    @classmethod
    def _normalize_and_validate_id(cls, v: Any) -> str:
        """Strip whitespace and enforce FIELD_ID_ALLOWED_RE."""
        s = "" if v is None else str(v).strip()
        if not s:
            raise ValueError("The 'id' key is not set")
        if not is_valid_field_id(s):
            raise ValueError(
                f"The field id {s!r} must match the pattern {FIELD_ID_ALLOWED_RE.pattern!r}"
            )
        return s

    @field_validator("label", mode="before")
    @classmethod
    def _normalize_label(cls, v: Any) -> str:
        return "" if v is None else str(v).strip()

    @model_validator(mode="after")
    def _post(self) -> "FieldDescriptor":
        """
        Final validation:
        - fieldtype must be known
        - enum requires options; spec.kind must match fieldtype
        - enum options non-blank and unique
        - a declared default must pass this field's own checks
        """
        if self.fieldtype == FieldType.INVALID:
            raise ValueError("Unknown fieldtype; valid types are: text, number, boolean, enum, date")
        if self.spec is None:
            raise ValueError(f"{self.fieldtype.value} requires 'options'")
        if self.spec.kind != self.fieldtype.value:
            raise ValueError(f"'spec.kind' ({self.spec.kind}) does not match fieldtype '{self.fieldtype.value}'")

        self._validate_enum_options()
        if self.default is not None:
            try:
                self.check(self.default)
            except SchemaError as e:
                raise ValueError(f"Invalid default for field {self.id!r}: {e}") from e
        return self

    # --- Serializer: flatten spec/validation back to top level --- #
    @model_serializer(mode="plain")
    def _dump_flat(self) -> Dict[str, Any]:
        """Emit the flat authoring shape (JSON-compatible)."""
        out: Dict[str, Any] = {
            "id": self.id,
            "label": self.label,
            "type": self.fieldtype.value,
        }
        if self.description is not None:
            out["description"] = self.description
        if self.default is not None:
            out["default"] = to_jsonable(self.default)
        if self.fieldtype == FieldType.ENUM:
            out["options"] = list(self.options)
        if self.validation is not None:
            dumped = self.validation.model_dump(by_alias=True, exclude_none=True)
            if not dumped.get("required"):
                dumped.pop("required", None)
            out.update(dumped)
        return out

    # --- Convenience --- #

    @property
    def options(self) -> List[str]:
        """Enum options (empty for non-enum fields)."""
        if isinstance(self.spec, EnumSpec):
            return list(self.spec.options)
        return []

    @property
    def required(self) -> bool:
        return bool(self.validation and self.validation.required)

    @property
    def type_description(self) -> str:
        """Type name for prompts, e.g. 'number' or 'enum(low|medium|high)'."""
        if self.fieldtype == FieldType.ENUM:
            return f"enum({'|'.join(self.options)})"
        return self.fieldtype.value

    # --- Value checking --- #

    def check(self, value: Any) -> Any:
        """
        Validate `value` against this field and return its normalized form.

        Phase 1 checks type compatibility (dates given as ISO strings are parsed);
        phase 2 applies the attached constraints. Stops at the first violation.

        Raises:
            SchemaError: the concrete subclass describing the first violation.
        """
        v = Value.of(value)
        if v.kind is ValueKind.ABSENT:
            if self.required:
                raise RequiredFieldMissingError(self.id)
            raise TypeMismatchError(self.id, _EXPECTED[self.fieldtype], v.type_name)

        normalized = self._check_type(v)
        if self.validation is not None:
            self._check_constraints(Value.of(normalized))
        return normalized

    def _check_type(self, v: Value) -> Any:
        ft = self.fieldtype
        if ft == FieldType.ENUM:
            if v.kind is not ValueKind.STRING or v.raw not in self.options:
                raise InvalidEnumValueError(self.id, self.options, v.raw)
            return v.raw

        if not ft.accepts(v.kind):
            raise TypeMismatchError(self.id, _EXPECTED[ft], v.type_name)

        # ints of any size compare exactly against float bounds; only floats can be nan/inf
        if ft.is_numeric() and isinstance(v.raw, float) and not math.isfinite(v.raw):
            raise TypeMismatchError(self.id, "finite number", str(v.raw))

        if ft == FieldType.DATE and v.kind is ValueKind.STRING:
            try:
                return parse_iso_date(v.raw)
            except ValueError:
                raise TypeMismatchError(self.id, _EXPECTED[ft], f"string {v.raw!r}") from None

        return v.raw

    def _check_constraints(self, v: Value) -> None:
        rules: FieldValidation = self.validation  # type: ignore[assignment]

        if v.kind is ValueKind.NUMBER:
            if rules.min is not None and v.raw < rules.min:
                raise BelowMinimumError(self.id, rules.min, v.raw)
            if rules.max is not None and v.raw > rules.max:
                raise AboveMaximumError(self.id, rules.max, v.raw)

        if v.kind is ValueKind.STRING:
            n = len(v.raw)
            if rules.min_length is not None and n < rules.min_length:
                raise TooShortError(self.id, rules.min_length, n)
            if rules.max_length is not None and n > rules.max_length:
                raise TooLongError(self.id, rules.max_length, n)
            if rules.pattern is not None and not re.search(rules.pattern, v.raw):
                raise PatternMismatchError(self.id, rules.pattern, v.raw)

    # --- Pack Helpers --- #
    @staticmethod
    def _fd_alias_type_key(data: dict) -> dict:
        if "type" in data:
            if "fieldtype" in data:
                raise ValueError("Provide either 'type' or 'fieldtype', not both")
            data["fieldtype"] = data.pop("type")
        return data

    @staticmethod
    def _fd_parse_fieldtype(raw_ft) -> FieldType:
        return FieldType.parse(raw_ft) if raw_ft is not None else FieldType.TEXT

    @staticmethod
    def _fd_raise_if_stray_keys(data: dict, ft: FieldType, allowed_keys: set[str]) -> None:
        stray = {k for k in data.keys() if k not in (_fd_common_keys() | VALIDATION_KEYS | allowed_keys)}
        suspicious = stray & _fd_other_type_keys(ft)
        if suspicious:
            allowed_fmt = "[" + ", ".join(repr(k) for k in sorted(allowed_keys)) + "]"
            raise ValueError(
                f"Unexpected key(s) for fieldtype {ft.value!r}: {sorted(suspicious)}. "
                f"Allowed: {allowed_fmt}"
            )

    @staticmethod
    def _fd_pack_validation(data: dict) -> dict:
        flat = {k: v for k, v in data.items() if k in VALIDATION_KEYS}
        if not flat:
            return data
        if isinstance(data.get("validation"), (dict, FieldValidation)):
            raise ValueError("Provide either flat constraint keys or 'validation', not both")
        data = {k: v for k, v in data.items() if k not in VALIDATION_KEYS}
        data["validation"] = flat
        return data

    # --- Post Helpers --- #
    def _validate_enum_options(self) -> None:
        if self.fieldtype != FieldType.ENUM:
            return
        opts = [str(o) for o in self.options]
        if any(s.strip() == "" for s in opts):
            raise ValueError("ENUM 'options' must not contain empty strings")
        if len(set(opts)) != len(opts):
            raise ValueError("ENUM 'options' contain duplicates")


def _fd_common_keys() -> set[str]:
    return {"id", "label", "fieldtype", "description", "default", "spec", "validation"}


def _fd_other_type_keys(this_ft: FieldType) -> set[str]:
    keys: set[str] = set()
    for t, (_, ks) in SPEC_REGISTRY.items():
        if t != this_ft:
            keys |= ks
    return keys
