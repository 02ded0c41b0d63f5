"""Core modules of the Premium Submission Helper host."""

from .config import AppConfig
from .directory import Directory
from .hooks import HookManager
from .plugins import PluginManager
from .sanitize import Sanitizer
from .templates import TemplateRenderer

__all__ = [
    "AppConfig",
    "Directory",
    "HookManager",
    "PluginManager",
    "Sanitizer",
    "TemplateRenderer",
]
