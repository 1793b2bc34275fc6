#!/usr/bin/env python3
"""
Purpose:
    Exposes a Document to an external resource-access protocol (MCP-style):
    a stable URI derived from the schema name, the exported JSON content, and
    the edit tool definition.
"""
from __future__ import annotations

from typing import Any, Dict

from pydantic import Field

from duetdocs.core.bridge.tool import PatchParameters, DescriptorModel, build_patch_parameters, tool_name
from duetdocs.core.constants import RESOURCE_URI_PREFIX
from duetdocs.core.document.document import Document


class ResourceTool(DescriptorModel):
    """Tool definition in resource-protocol form (`inputSchema` instead of `parameters`)."""
    name: str
    description: str
    input_schema: PatchParameters = Field(alias="inputSchema")

    def to_dict(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True)


class DocumentResource:
    """Resource view of one document."""

    def __init__(self, document: Document):
        self._document = document

    @property
    def uri(self) -> str:
        """Document-type scoped identifier, e.g. 'kit://documents/budget'."""
        return f"{RESOURCE_URI_PREFIX}{self._document.schema.name.lower()}"

    @property
    def content(self) -> str:
        return self._document.export_json()

    @property
    def edit_tool(self) -> ResourceTool:
        schema = self._document.schema
        return ResourceTool(
            name=tool_name(schema),
            description=f"Edit the {schema.name} document",
            input_schema=build_patch_parameters(schema),
        )
