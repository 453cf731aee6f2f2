"""API request and response schemas.

Pydantic v2 models for API serialization/deserialization. Binary
attachments travel base64-encoded with camelCase field names, as the
workflow host stores them.
"""

import base64
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from report_generator.interfaces.node import BinaryData, NodeExecutionData


# =============================================================================
# Binary Data Schemas
# =============================================================================


class BinaryDataSchema(BaseModel):
    """A base64-encoded binary attachment."""

    model_config = ConfigDict(populate_by_name=True)

    data: str = Field(description="Base64-encoded file content")
    mime_type: str = Field(
        default="application/octet-stream", alias="mimeType", description="MIME type"
    )
    file_name: str | None = Field(default=None, alias="fileName")
    file_extension: str | None = Field(default=None, alias="fileExtension")
    file_size: int | None = Field(default=None, alias="fileSize")

    @field_validator("data")
    @classmethod
    def validate_base64(cls, v: str) -> str:
        """Reject content that is not valid base64."""
        try:
            base64.b64decode(v, validate=True)
        except ValueError as e:
            raise ValueError("data must be base64-encoded") from e
        return v

    def to_binary_data(self) -> BinaryData:
        content = base64.b64decode(self.data)
        return BinaryData(
            data=content,
            mime_type=self.mime_type,
            file_name=self.file_name,
            file_extension=self.file_extension,
            file_size=len(content),
        )

    @classmethod
    def from_binary_data(cls, binary: BinaryData) -> "BinaryDataSchema":
        return cls(
            data=base64.b64encode(binary.data).decode("ascii"),
            mime_type=binary.mime_type,
            file_name=binary.file_name,
            file_extension=binary.file_extension,
            file_size=binary.file_size,
        )


# =============================================================================
# Item Schemas
# =============================================================================


class ItemSchema(BaseModel):
    """One record of a batch."""

    model_config = ConfigDict(populate_by_name=True)

    json_data: dict[str, Any] = Field(default_factory=dict, alias="json")
    binary: dict[str, BinaryDataSchema] | None = None
    paired_item: int | None = Field(default=None, alias="pairedItem")

    def to_execution_data(self) -> NodeExecutionData:
        binary = None
        if self.binary is not None:
            binary = {key: value.to_binary_data() for key, value in self.binary.items()}
        return NodeExecutionData(json=self.json_data, binary=binary, paired_item=self.paired_item)

    @classmethod
    def from_execution_data(cls, item: NodeExecutionData) -> "ItemSchema":
        binary = None
        if item.binary is not None:
            binary = {
                key: BinaryDataSchema.from_binary_data(value)
                for key, value in item.binary.items()
                if isinstance(value, BinaryData)
            }
        return cls(json_data=item.json, binary=binary, paired_item=item.paired_item)


class ExecuteItemSchema(ItemSchema):
    """An input record, with optional parameter overrides for this record only."""

    parameters: dict[str, Any] | None = Field(
        default=None, description="Parameter values that apply to this item only"
    )


# =============================================================================
# Execution Schemas
# =============================================================================


class ExecuteNodeRequest(BaseModel):
    """Request schema for running a node over a batch."""

    parameters: dict[str, Any] = Field(
        default_factory=dict, description="Node-level parameter values"
    )
    items: list[ExecuteItemSchema] = Field(default_factory=list, description="Input records")


class ExecuteNodeResponse(BaseModel):
    """Response schema for a node run."""

    node: str
    items: list[ItemSchema]


class NodeErrorResponse(BaseModel):
    """Error payload for a failed node run."""

    detail: str
    node: str
    item_index: int | None = None
    description: str | None = None


# =============================================================================
# Node Description Schemas
# =============================================================================


class NodePropertySchema(BaseModel):
    """One parameter of a node."""

    model_config = ConfigDict(from_attributes=True)

    display_name: str
    name: str
    type: str
    default: Any = None
    required: bool = False
    placeholder: str | None = None
    description: str | None = None
    options: list["NodePropertySchema"] = Field(default_factory=list)


class NodeDescriptionSchema(BaseModel):
    """Static metadata of a node."""

    model_config = ConfigDict(from_attributes=True)

    display_name: str
    name: str
    description: str
    version: int
    icon: str | None = None
    group: list[str]
    defaults: dict[str, Any]
    inputs: list[str]
    outputs: list[str]
    properties: list[NodePropertySchema]
