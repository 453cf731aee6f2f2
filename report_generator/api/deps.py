"""FastAPI dependencies for dependency injection."""

import logging

from fastapi import Depends, HTTPException, Request, status

from report_generator.core.factory import ComponentFactory
from report_generator.interfaces.node import BaseNode

logger = logging.getLogger(__name__)


def get_factory(request: Request) -> ComponentFactory:
    """Return the component factory created at application startup."""
    return request.app.state.factory


def get_node(
    node_name: str,
    factory: ComponentFactory = Depends(get_factory),
) -> BaseNode:
    """Resolve the node addressed by the ``node_name`` path parameter.

    Raises:
        HTTPException: If no node is registered under the name.
    """
    try:
        return factory.get_node(node_name)
    except KeyError as e:
        logger.warning(f"Unknown node requested: {node_name}")
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Unknown node: {node_name}",
        ) from e
