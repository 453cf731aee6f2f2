"""Workflow node that renders DOCX templates with JSON data."""

__version__ = "0.1.0"
