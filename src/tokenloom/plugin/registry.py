"""Plugin registry: discover and register output plugin implementations."""

from __future__ import annotations

from typing import Any

from tokenloom.plugin.base import Plugin


class UnsupportedPluginError(Exception):
    """Raised when a requested plugin is not registered."""

    def __init__(self, name: str, available: list[str]) -> None:
        self.plugin_name = name
        self.available = available
        super().__init__(f"Unsupported plugin '{name}'. Available: {', '.join(available)}")


class PluginRegistry:
    """Registry for output plugins."""

    _plugins: dict[str, type[Plugin]] = {}

    @classmethod
    def register(cls, plugin_class: type[Plugin]) -> type[Plugin]:
        """Register a plugin class. Can be used as a decorator."""
        # Instantiate with default options to read the name property
        instance = plugin_class()
        cls._plugins[instance.name] = plugin_class
        return plugin_class

    @classmethod
    def get(cls, name: str, **options: Any) -> Plugin:
        """Get an instance of the named plugin, configured with ``options``."""
        if name not in cls._plugins:
            raise UnsupportedPluginError(name, available=cls.available())
        return cls._plugins[name](**options)

    @classmethod
    def available(cls) -> list[str]:
        """List registered plugin names."""
        return sorted(cls._plugins.keys())

    @classmethod
    def reset(cls) -> None:
        """Clear all registered plugins (for testing)."""
        cls._plugins.clear()
