"""API routers for the report generator service."""

from report_generator.api.nodes import router as nodes_router

__all__ = [
    "nodes_router",
]
