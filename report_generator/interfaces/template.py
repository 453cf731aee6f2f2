"""Template rendering interfaces.

Defines the delimiter configuration and the abstract base class for
strategies that fill a DOCX template with data.
"""

from abc import ABC, abstractmethod
from collections.abc import Mapping
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, model_validator

DEFAULT_TAG_START = "{{"
DEFAULT_TAG_END = "}}"
DEFAULT_CONTAINER_TAG_OPEN = "#"
DEFAULT_CONTAINER_TAG_CLOSE = "/"


class TagDelimiters(BaseModel):
    """Markers that delimit tags inside a template.

    Field aliases are the host parameter names, so the model can be
    validated straight from the ``tagDelimiters`` collection.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    tag_start: str = Field(default=DEFAULT_TAG_START, alias="tagStart", min_length=1)
    tag_end: str = Field(default=DEFAULT_TAG_END, alias="tagEnd", min_length=1)
    container_tag_open: str = Field(
        default=DEFAULT_CONTAINER_TAG_OPEN, alias="containerTagOpen", min_length=1
    )
    container_tag_close: str = Field(
        default=DEFAULT_CONTAINER_TAG_CLOSE, alias="containerTagClose", min_length=1
    )

    @model_validator(mode="after")
    def check_container_markers(self) -> "TagDelimiters":
        if self.container_tag_open == self.container_tag_close:
            raise ValueError("containerTagOpen and containerTagClose must differ")
        return self

    @property
    def is_default_tag_start(self) -> bool:
        return self.tag_start == DEFAULT_TAG_START


class TemplateRenderError(Exception):
    """Exception raised when a template cannot be rendered."""

    pass


class BaseTemplateRenderer(ABC):
    """Abstract base class for template rendering strategies.

    Example:
        ```python
        renderer = DocxTemplateRenderer()
        document = await renderer.render(template_bytes, {"name": "Alice"})
        ```
    """

    @abstractmethod
    async def render(
        self,
        template: bytes,
        data: Mapping[str, Any],
        delimiters: TagDelimiters | None = None,
    ) -> bytes:
        """Fill a template with data.

        Args:
            template: The raw template document.
            data: Values keyed by tag name.
            delimiters: Tag markers used by the template. Defaults apply when None.

        Returns:
            The rendered document.

        Raises:
            TemplateRenderError: If the template is malformed or rendering fails.
        """

    @property
    @abstractmethod
    def supported_extensions(self) -> set[str]:
        """Return supported file extensions."""
