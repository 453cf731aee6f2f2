"""docxtpl template renderer strategy.

Fills Word templates with data using docxtpl, after translating the
configured tag delimiters into the Jinja2 syntax docxtpl understands.
"""

import asyncio
import io
import logging
from collections.abc import Mapping
from typing import Any

from docxtpl import DocxTemplate
from jinja2 import Environment, StrictUndefined, Undefined

from report_generator.interfaces.template import (
    BaseTemplateRenderer,
    TagDelimiters,
    TemplateRenderError,
)
from report_generator.strategies.template_engine.delimiters import (
    SECTION_FUNCTION,
    TagTranslator,
    section,
)

logger = logging.getLogger(__name__)


class DataEnvironment(Environment):
    """Jinja2 environment that prefers mapping keys over attributes.

    ``order.items`` reads the ``items`` key of the data, not ``dict.items``.
    """

    def getattr(self, obj: Any, attribute: str) -> Any:
        if isinstance(obj, Mapping) and attribute in obj:
            return obj[attribute]
        return super().getattr(obj, attribute)


class DelimitedDocxTemplate(DocxTemplate):
    """DocxTemplate that translates custom tags before docxtpl patches the XML.

    ``patch_xml`` runs once per document part (body, headers, footers,
    footnotes), so every part goes through the translator.
    """

    def __init__(self, template_file: Any, delimiters: TagDelimiters) -> None:
        super().__init__(template_file)
        self._translator = TagTranslator(delimiters)

    def patch_xml(self, src_xml: str) -> str:
        return super().patch_xml(self._translator.translate(src_xml))


class DocxTemplateRenderer(BaseTemplateRenderer):
    """Renders DOCX templates with docxtpl.

    Tags are substituted with Jinja2 after delimiter translation, so data
    values keep the style of the run that held the tag.
    """

    def __init__(self, strict: bool = False, autoescape: bool = True) -> None:
        """Initialize the renderer.

        Args:
            strict: Raise on tags that cannot be resolved from the data
                instead of rendering them empty.
            autoescape: XML-escape substituted values.
        """
        self._strict = strict
        self._autoescape = autoescape

    async def render(
        self,
        template: bytes,
        data: Mapping[str, Any],
        delimiters: TagDelimiters | None = None,
    ) -> bytes:
        """Render a template in a worker thread.

        Args:
            template: The raw .docx template.
            data: Values keyed by tag name.
            delimiters: Tag markers used by the template. Defaults apply when None.

        Returns:
            The rendered .docx document.

        Raises:
            TemplateRenderError: If the template is malformed or rendering fails.
        """
        delimiters = delimiters or TagDelimiters()
        logger.info(
            f"Rendering template ({len(template)} bytes) with tags "
            f"{delimiters.tag_start}...{delimiters.tag_end}"
        )

        try:
            document = await asyncio.to_thread(
                self._render_sync, template, dict(data), delimiters
            )
        except Exception as e:
            logger.error(f"Template rendering failed: {e}", exc_info=True)
            raise TemplateRenderError(str(e) or type(e).__name__) from e

        logger.info(f"Rendered document: {len(document)} bytes")
        return document

    def _render_sync(
        self,
        template: bytes,
        context: dict[str, Any],
        delimiters: TagDelimiters,
    ) -> bytes:
        doc = DelimitedDocxTemplate(io.BytesIO(template), delimiters)
        doc.render(context, jinja_env=self._build_environment(), autoescape=self._autoescape)

        output = io.BytesIO()
        doc.save(output)
        return output.getvalue()

    def _build_environment(self) -> Environment:
        env = DataEnvironment(undefined=StrictUndefined if self._strict else Undefined)
        env.globals[SECTION_FUNCTION] = section
        return env

    @property
    def supported_extensions(self) -> set[str]:
        """Return supported file extensions."""
        return {".docx"}
