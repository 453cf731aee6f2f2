"""Application configuration using Pydantic v2 Settings.

Centralized configuration that loads from environment variables
and provides type-safe access throughout the application.
"""

import logging
from pathlib import Path

import structlog
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)


class Settings(BaseSettings):
    """Application settings loaded from environment variables.

    All settings have sensible defaults and can be overridden via
    environment variables or a .env file.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    app_name: str = Field(
        default="docx-report-generator",
        description="Service name reported by the health endpoint.",
    )

    # Rendering
    template_engine: str = Field(
        default="docxtpl",
        description="Template renderer strategy to use: 'docxtpl'.",
    )
    strict_tags: bool = Field(
        default=False,
        description="Fail rendering when a tag cannot be resolved from the data.",
    )
    autoescape: bool = Field(
        default=True,
        description="XML-escape substituted values.",
    )

    # API
    api_host: str = Field(default="0.0.0.0", description="Bind address for uvicorn.")
    api_port: int = Field(default=8000, description="Bind port for uvicorn.")

    # Logging
    log_level: str = Field(
        default="INFO",
        description="Logging level: DEBUG, INFO, WARNING, ERROR.",
    )
    log_format: str = Field(
        default="console",
        description="structlog renderer: 'console' or 'json'.",
    )
    log_dir: Path | None = Field(
        default=None,
        description="Directory for info.log / error.log. Console only when unset.",
    )

    @field_validator("log_level")
    @classmethod
    def normalize_log_level(cls, v: str) -> str:
        """Normalize log level to uppercase."""
        return v.upper()

    @field_validator("log_format", "template_engine")
    @classmethod
    def normalize_choice(cls, v: str) -> str:
        return v.strip().lower()

    @field_validator("log_dir")
    @classmethod
    def ensure_log_dir(cls, v: Path | None) -> Path | None:
        """Ensure the log directory exists when one is configured."""
        if v is None:
            return None
        v.mkdir(parents=True, exist_ok=True)
        return v.resolve()

    def configure_logging(self) -> None:
        """Configure structlog on top of the stdlib logging tree."""
        renderer = (
            structlog.processors.JSONRenderer()
            if self.log_format == "json"
            else structlog.dev.ConsoleRenderer(colors=False)
        )

        structlog.configure(
            processors=[
                structlog.stdlib.filter_by_level,
                structlog.stdlib.add_logger_name,
                structlog.stdlib.add_log_level,
                structlog.stdlib.PositionalArgumentsFormatter(),
                structlog.processors.TimeStamper(fmt="iso"),
                structlog.processors.StackInfoRenderer(),
                structlog.processors.format_exc_info,
                renderer,
            ],
            wrapper_class=structlog.stdlib.BoundLogger,
            context_class=dict,
            logger_factory=structlog.stdlib.LoggerFactory(),
            cache_logger_on_first_use=True,
        )

        logger.setLevel(getattr(logging, self.log_level, logging.INFO))


# Global settings instance
_settings: Settings | None = None


def get_settings() -> Settings:
    """Get or create the global Settings instance.

    Returns:
        The singleton Settings instance.
    """
    global _settings
    if _settings is None:
        _settings = Settings()
        _settings.configure_logging()
    return _settings
