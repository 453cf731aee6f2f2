"""Shared fixtures for building and reading .docx documents."""

import pytest

from report_generator.runtime import make_binary_data
from tests.docx_helpers import build_docx, read_texts


@pytest.fixture
def make_docx():
    """Factory fixture: paragraphs in, .docx bytes out."""
    return build_docx


@pytest.fixture
def docx_texts():
    return read_texts


@pytest.fixture
def template_binary():
    """A template attachment with a single ``Hello {{name}}!`` paragraph."""
    return make_binary_data(build_docx("Hello {{name}}!"), "template.docx")
