"""Abstract base classes for nodes and template rendering strategies."""

from report_generator.interfaces.node import (
    BaseExecutionContext,
    BaseNode,
    BinaryData,
    NodeDescription,
    NodeExecutionData,
    NodeOperationError,
    NodeProperty,
)
from report_generator.interfaces.template import (
    BaseTemplateRenderer,
    TagDelimiters,
    TemplateRenderError,
)

__all__ = [
    "BaseExecutionContext",
    "BaseNode",
    "BinaryData",
    "NodeDescription",
    "NodeExecutionData",
    "NodeOperationError",
    "NodeProperty",
    "BaseTemplateRenderer",
    "TagDelimiters",
    "TemplateRenderError",
]
