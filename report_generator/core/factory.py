"""Component Factory for strategy and node instantiation.

Picks the template renderer implementation from settings and builds
nodes by the name the host knows them under.
"""

import logging

from report_generator.core.config import Settings, get_settings
from report_generator.interfaces.node import BaseNode, NodeDescription
from report_generator.interfaces.template import BaseTemplateRenderer
from report_generator.nodes import GenerateReportNode
from report_generator.strategies.template_engine import DocxTemplateRenderer

logger = logging.getLogger(__name__)

NODE_TYPES: dict[str, type[GenerateReportNode]] = {
    GenerateReportNode.description.name: GenerateReportNode,
}


class ComponentFactory:
    """Factory for creating renderers and nodes based on configuration.

    Example:
        ```python
        factory = ComponentFactory(get_settings())
        node = factory.get_node("generateReport")
        ```
    """

    def __init__(self, settings: Settings | None = None) -> None:
        """Initialize the factory with optional settings.

        Args:
            settings: Application settings. If None, uses global settings.
        """
        self._settings = settings or get_settings()
        self._renderer_cache: BaseTemplateRenderer | None = None

    def get_template_renderer(self, engine: str | None = None) -> BaseTemplateRenderer:
        """Get a template renderer instance.

        Args:
            engine: The renderer type to instantiate. If None, uses settings.

        Returns:
            A BaseTemplateRenderer implementation instance.

        Raises:
            ValueError: If the renderer type is unknown.
        """
        if self._renderer_cache is None or engine is not None:
            engine = engine or self._settings.template_engine

            logger.info(f"Instantiating template renderer: {engine}")

            match engine:
                case "docxtpl":
                    self._renderer_cache = DocxTemplateRenderer(
                        strict=self._settings.strict_tags,
                        autoescape=self._settings.autoescape,
                    )
                case _:
                    raise ValueError(
                        f"Unknown template engine: {engine}. Valid options: 'docxtpl'"
                    )

        return self._renderer_cache

    def get_node(self, name: str) -> BaseNode:
        """Build the node registered under a name.

        Raises:
            KeyError: If no node is registered under the name.
        """
        if name not in NODE_TYPES:
            raise KeyError(name)
        return NODE_TYPES[name](renderer=self.get_template_renderer())

    @staticmethod
    def list_nodes() -> list[NodeDescription]:
        return [node_type.description for node_type in NODE_TYPES.values()]
