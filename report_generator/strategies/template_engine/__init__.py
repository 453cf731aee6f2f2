"""Template engine strategies.

Implements DOCX rendering with docxtpl and configurable tag delimiters.
"""

from report_generator.strategies.template_engine.delimiters import TagSyntaxError, TagTranslator
from report_generator.strategies.template_engine.renderer import DocxTemplateRenderer

__all__ = [
    "DocxTemplateRenderer",
    "TagSyntaxError",
    "TagTranslator",
]
