"""FastAPI application entry point.

Application setup with routing, exception handling and lifecycle management.
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from report_generator import __version__
from report_generator.api import nodes_router
from report_generator.core.config import Settings, get_settings
from report_generator.core.factory import ComponentFactory
from report_generator.core.logging_config import setup_logging

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager.

    Builds the component factory on startup so a misconfigured template
    engine fails fast.
    """
    settings: Settings = app.state.settings

    logger.info("Starting report generator API...")
    factory = ComponentFactory(settings)
    factory.get_template_renderer()
    app.state.factory = factory

    yield

    logger.info("Shutting down report generator API...")


def create_app(settings: Settings | None = None) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        settings: Optional settings. If None, loads from environment.

    Returns:
        Configured FastAPI application instance.
    """
    settings = settings or get_settings()
    setup_logging(settings)

    app = FastAPI(
        title="Report Generator",
        description="Render DOCX templates with JSON data",
        version=__version__,
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.include_router(nodes_router)

    @app.get("/health", tags=["health"])
    async def health_check():
        """Health check endpoint for load balancers and monitoring."""
        return {
            "status": "healthy",
            "service": settings.app_name,
            "version": __version__,
        }

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request, exc):
        """Handle Pydantic validation errors."""
        logger.warning(f"Validation error: {exc.errors()}")
        return JSONResponse(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            content={
                "detail": "Validation error",
                "errors": jsonable_encoder(exc.errors()),
            },
        )

    logger.info("FastAPI application created")
    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    settings = get_settings()
    logger.info(f"Starting uvicorn server on port {settings.api_port}...")
    uvicorn.run(
        "report_generator.main:app",
        host=settings.api_host,
        port=settings.api_port,
        log_level=settings.log_level.lower(),
    )
