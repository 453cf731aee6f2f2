"""Concrete strategy implementations."""

from report_generator.strategies.template_engine import DocxTemplateRenderer

__all__ = [
    "DocxTemplateRenderer",
]
