#!/usr/bin/env python3
"""
Purpose:
    Typed function/tool-calling descriptor for editing a document type.

    The parameter schema is generated from the same definitions the patch
    engine enforces (`PatchOpKind`, `PATCH_PATH_RE`) and from the schema's field
    types, so the advertised shape cannot drift from what `apply_patch` accepts.
"""
from __future__ import annotations

import json
from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

from duetdocs.core.constants import PATCH_PATH_RE
from duetdocs.core.patch.ops import PatchOpKind
from duetdocs.core.schema.document_schema import DocumentSchema
from duetdocs.core.schema.field_type import FieldType


def _json_type(ft: FieldType) -> str:
    """JSON type a patch value takes for `ft` (dates travel as ISO strings)."""
    if ft.is_numeric():
        return "number"
    if ft is FieldType.BOOLEAN:
        return "boolean"
    return "string"


class DescriptorModel(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)


class JsonTypeRef(DescriptorModel):
    type: str


class OpProperty(DescriptorModel):
    type: Literal["string"] = "string"
    enum: List[str] = Field(default_factory=PatchOpKind.names)
    description: str = "Operation type"


class PathProperty(DescriptorModel):
    type: Literal["string"] = "string"
    description: str = "JSON Pointer path to a top-level field (e.g., /fieldName)"
    pattern: str = PATCH_PATH_RE.pattern


class ValueProperty(DescriptorModel):
    # omitted when the schema has no fields: an empty oneOf matches nothing
    one_of: Optional[List[JsonTypeRef]] = Field(default=None, alias="oneOf")
    description: str = "New value"


class PatchItemProperties(DescriptorModel):
    op: OpProperty = Field(default_factory=OpProperty)
    path: PathProperty = Field(default_factory=PathProperty)
    value: ValueProperty


class PatchItemSchema(DescriptorModel):
    type: Literal["object"] = "object"
    properties: PatchItemProperties
    required: List[str] = Field(default_factory=lambda: ["op", "path", "value"])


class PatchArrayProperty(DescriptorModel):
    type: Literal["array"] = "array"
    description: str = "JSON Patch operations (RFC 6902 subset: replace/add on top-level fields)"
    items: PatchItemSchema


class MessageProperty(DescriptorModel):
    type: Literal["string"] = "string"
    description: str = "Optional message or insight for the user"
    nullable: bool = True


class PatchParameterProperties(DescriptorModel):
    patch: PatchArrayProperty
    message: MessageProperty = Field(default_factory=MessageProperty)


class PatchParameters(DescriptorModel):
    type: Literal["object"] = "object"
    properties: PatchParameterProperties
    required: List[str] = Field(default_factory=lambda: ["patch"])


class ToolDescriptor(DescriptorModel):
    """Function-calling descriptor (name, description, JSON-schema parameters)."""
    name: str
    description: str
    parameters: PatchParameters

    def to_dict(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True)

    def to_json(self, indent: Optional[int] = 2) -> str:
        return json.dumps(self.to_dict(), indent=indent)


# --- Public API --- #

def tool_name(schema: DocumentSchema) -> str:
    """'edit_' plus the lowercased schema name with spaces replaced by underscores."""
    return "edit_" + schema.name.lower().replace(" ", "_")


def build_patch_parameters(schema: DocumentSchema) -> PatchParameters:
    """Parameter schema for `patch` + `message`, restricted to the value types `schema` accepts."""
    json_types = list(dict.fromkeys(_json_type(fd.fieldtype) for fd in schema.fields))
    value = ValueProperty(one_of=[JsonTypeRef(type=t) for t in json_types] or None)
    item = PatchItemSchema(properties=PatchItemProperties(value=value))
    return PatchParameters(properties=PatchParameterProperties(patch=PatchArrayProperty(items=item)))


def build_tool_descriptor(schema: DocumentSchema) -> ToolDescriptor:
    """Descriptor for registering an edit tool with an LLM tool-calling API."""
    return ToolDescriptor(
        name=tool_name(schema),
        description=f"Edit fields in the {schema.name} document using JSON Patch (RFC 6902)",
        parameters=build_patch_parameters(schema),
    )
