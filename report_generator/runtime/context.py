"""In-process execution context.

Implements the host services a node needs, so nodes can run from the
HTTP API, scripts and tests without a workflow host.
"""

import logging
import mimetypes
from collections.abc import Mapping
from pathlib import PurePath
from typing import Any

import structlog

from report_generator.interfaces.node import (
    BaseExecutionContext,
    BaseNode,
    BinaryData,
    NodeDescription,
    NodeExecutionData,
    NodeOperationError,
)

logger = logging.getLogger(__name__)

DEFAULT_MIME_TYPE = "application/octet-stream"

# Not every platform's mime database knows Office formats
_KNOWN_MIME_TYPES = {
    ".docx": "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
}

_MISSING = object()


def resolve_binary_property(binary: Mapping[str, Any] | None, key: str) -> BinaryData | None:
    """Find an attachment by key.

    An exact key wins. Otherwise the key is split on dots and walked
    through nested mappings, so "level1.level2.file" reaches
    ``binary["level1"]["level2"]["file"]``.

    Args:
        binary: The record's attachments.
        key: Attachment key, optionally in dot-notation.

    Returns:
        The attachment, or None if nothing is stored under the key.
    """
    if not binary:
        return None

    value = binary.get(key)
    if isinstance(value, BinaryData):
        return value

    node: Any = binary
    for part in key.split("."):
        if not isinstance(node, Mapping) or part not in node:
            return None
        node = node[part]
    return node if isinstance(node, BinaryData) else None


def make_binary_data(data: bytes, file_name: str, mime_type: str | None = None) -> BinaryData:
    """Wrap raw bytes into an attachment, inferring the MIME type from the name."""
    extension = PurePath(file_name).suffix.lstrip(".") or None
    return BinaryData(
        data=data,
        mime_type=mime_type or guess_mime_type(file_name),
        file_name=file_name,
        file_extension=extension,
        file_size=len(data),
    )


def guess_mime_type(file_name: str) -> str:
    suffix = PurePath(file_name).suffix.lower()
    if suffix in _KNOWN_MIME_TYPES:
        return _KNOWN_MIME_TYPES[suffix]
    mime_type, _ = mimetypes.guess_type(file_name)
    return mime_type or DEFAULT_MIME_TYPE


class LocalExecutionContext(BaseExecutionContext):
    """Execution context backed by in-memory records and parameters.

    Parameters are resolved per record in this order: the record's own
    override, the node-level value, the caller's default, the property
    default from the node description. Callable values are evaluated
    with ``(item, item_index)``.

    Example:
        ```python
        context = LocalExecutionContext(
            node,
            items=[NodeExecutionData(binary={"template": template})],
            parameters={"data": '{"name": "Alice"}'},
        )
        outputs = await node.execute(context)
        ```
    """

    def __init__(
        self,
        node: BaseNode,
        items: list[NodeExecutionData],
        parameters: Mapping[str, Any] | None = None,
        item_parameters: list[Mapping[str, Any] | None] | None = None,
    ) -> None:
        """Initialize the context.

        Args:
            node: The node being run.
            items: Input records.
            parameters: Node-level parameter values.
            item_parameters: Per-record overrides, aligned with ``items``.
        """
        self._node = node
        self._items = items
        self._parameters = dict(parameters or {})
        self._item_parameters = list(item_parameters or [])
        self._logger = structlog.get_logger("report_generator.node").bind(
            node=node.description.name
        )

    @property
    def logger(self) -> Any:
        return self._logger

    def get_node(self) -> NodeDescription:
        return self._node.description

    def get_input_data(self) -> list[NodeExecutionData]:
        return self._items

    def get_node_parameter(self, name: str, item_index: int, default: Any = _MISSING) -> Any:
        """Resolve a parameter value for one record.

        Raises:
            NodeOperationError: If the parameter is unknown and no default is given.
        """
        value = self._lookup(name, item_index)

        if value is _MISSING:
            if default is not _MISSING:
                return default
            prop = self._node.description.get_property(name)
            if prop is None:
                raise NodeOperationError(
                    self._node.description.name,
                    f'Could not get parameter "{name}"',
                    item_index=item_index,
                )
            return prop.default

        if callable(value):
            return value(self._items[item_index], item_index)
        return value

    def _lookup(self, name: str, item_index: int) -> Any:
        if item_index < len(self._item_parameters):
            overrides = self._item_parameters[item_index] or {}
            if name in overrides:
                return overrides[name]
        return self._parameters.get(name, _MISSING)

    async def get_binary_data_buffer(self, item_index: int, property_name: str) -> bytes:
        """Read an attachment of a record into memory.

        Raises:
            NodeOperationError: If no attachment exists under the key.
        """
        item = self._items[item_index]
        binary = resolve_binary_property(item.binary, property_name)
        if binary is None:
            raise NodeOperationError(
                self._node.description.name,
                f'Item has no binary property called "{property_name}"',
                item_index=item_index,
            )

        logger.debug(f"Read binary property {property_name} ({binary.file_size} bytes)")
        return binary.data

    async def prepare_binary_data(
        self,
        data: bytes,
        file_name: str,
        mime_type: str | None = None,
    ) -> BinaryData:
        return make_binary_data(data, file_name, mime_type)
