"""Core configuration and factory components."""

from report_generator.core.config import Settings, get_settings
from report_generator.core.factory import ComponentFactory

__all__ = [
    "Settings",
    "get_settings",
    "ComponentFactory",
]
