"""Workflow node interfaces.

Defines the plugin contract between the workflow host and a node: the
records that flow through a run, the node's parameter schema, the
execution context the host hands to the node, and the node error type.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True)
class BinaryData:
    """A binary attachment carried by a record.

    Attributes:
        data: The raw file content.
        mime_type: MIME type of the content.
        file_name: File name including extension.
        file_extension: Extension without the leading dot.
        file_size: Size of ``data`` in bytes.
    """

    data: bytes
    mime_type: str
    file_name: str | None = None
    file_extension: str | None = None
    file_size: int = 0


@dataclass
class NodeExecutionData:
    """One record of a batch.

    Attributes:
        json: Structured fields of the record.
        binary: Attachments keyed by name. Values are BinaryData or, for
            nested storage, mappings of further keys.
        paired_item: Index of the input record this one derives from.
    """

    json: dict[str, Any] = field(default_factory=dict)
    binary: dict[str, Any] | None = None
    paired_item: int | None = None


@dataclass(frozen=True)
class NodeProperty:
    """One entry of a node's parameter schema."""

    display_name: str
    name: str
    type: str
    default: Any = None
    required: bool = False
    placeholder: str | None = None
    description: str | None = None
    options: tuple["NodeProperty", ...] = ()


@dataclass(frozen=True)
class NodeDescription:
    """Static metadata the host reads to list and configure a node."""

    display_name: str
    name: str
    description: str
    version: int = 1
    icon: str | None = None
    group: tuple[str, ...] = ()
    defaults: dict[str, Any] = field(default_factory=dict)
    inputs: tuple[str, ...] = ("main",)
    outputs: tuple[str, ...] = ("main",)
    properties: tuple[NodeProperty, ...] = ()

    def get_property(self, name: str) -> NodeProperty | None:
        for prop in self.properties:
            if prop.name == name:
                return prop
        return None


class NodeOperationError(Exception):
    """Error raised by a node while processing a batch.

    Attributes:
        node: Name of the node that failed.
        message: Human-readable error message.
        item_index: Index of the record being processed, if any.
        description: Optional extra detail for the user.
    """

    def __init__(
        self,
        node: str,
        message: str,
        item_index: int | None = None,
        description: str | None = None,
    ) -> None:
        super().__init__(message)
        self.node = node
        self.message = message
        self.item_index = item_index
        self.description = description

    def __str__(self) -> str:
        if self.item_index is None:
            return f"[{self.node}] {self.message}"
        return f"[{self.node}] item {self.item_index}: {self.message}"


class BaseExecutionContext(ABC):
    """Services the host exposes to a node during one run."""

    @property
    @abstractmethod
    def logger(self) -> Any:
        """Logger bound to the running node."""

    @abstractmethod
    def get_node(self) -> NodeDescription:
        """Return the description of the running node."""

    @abstractmethod
    def get_input_data(self) -> list[NodeExecutionData]:
        """Return the batch of input records."""

    @abstractmethod
    def get_node_parameter(self, name: str, item_index: int, default: Any = None) -> Any:
        """Resolve a parameter value for one record.

        Raises:
            NodeOperationError: If the parameter is unknown and no default is given.
        """

    @abstractmethod
    async def get_binary_data_buffer(self, item_index: int, property_name: str) -> bytes:
        """Read an attachment of a record into memory.

        Args:
            item_index: Index of the record.
            property_name: Attachment key. Dot-notation reaches nested storage.

        Raises:
            NodeOperationError: If no attachment exists under the key.
        """

    @abstractmethod
    async def prepare_binary_data(
        self,
        data: bytes,
        file_name: str,
        mime_type: str | None = None,
    ) -> BinaryData:
        """Wrap raw bytes into an attachment."""


class BaseNode(ABC):
    """Abstract base class for workflow nodes.

    Example:
        ```python
        class UppercaseNode(BaseNode):
            description = NodeDescription(...)

            async def execute(self, context):
                return [[...]]
        ```
    """

    description: NodeDescription

    @abstractmethod
    async def execute(self, context: BaseExecutionContext) -> list[list[NodeExecutionData]]:
        """Process the input batch.

        Args:
            context: Host services for this run.

        Returns:
            One list of output records per node output.

        Raises:
            NodeOperationError: If a record cannot be processed.
        """
