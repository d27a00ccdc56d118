"""Output plugin system for tokenloom."""

# Import plugins to trigger registration
import tokenloom.plugin.css as _css  # noqa: F401
from tokenloom.plugin.base import BuildContext, Plugin, PluginError, TransformContext
from tokenloom.plugin.registry import PluginRegistry, UnsupportedPluginError
from tokenloom.plugin.runner import build
from tokenloom.plugin.transforms import TransformEntry, TransformStore

__all__ = [
    "BuildContext",
    "Plugin",
    "PluginError",
    "PluginRegistry",
    "TransformContext",
    "TransformEntry",
    "TransformStore",
    "UnsupportedPluginError",
    "build",
]
