"""In-process runtime for executing nodes."""

from report_generator.runtime.context import (
    LocalExecutionContext,
    make_binary_data,
    resolve_binary_property,
)

__all__ = [
    "LocalExecutionContext",
    "make_binary_data",
    "resolve_binary_property",
]
