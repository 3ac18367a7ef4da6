# folio/core/registry.py
"""
Plugin registries for parsers and content protections.

A plugin is a class defined in a module of the plugin package, exposing a
`plugin_name` and the plugin method (`parse` for parsers, `open` for
protections). Configurations refer to plugins by name:

    streamer:
      content_protections: [lcp_fallback]

The package is scanned the first time a registry is queried.
"""

from __future__ import annotations

import importlib
import inspect
import pkgutil
from typing import Any, Dict, Iterator, List, Optional, Type

from folio.core.exceptions import FolioError
from folio.logging.logger import get_logger
from folio.logging.tags import REGISTRY

logger = get_logger(__name__)


class PluginRegistryError(FolioError):
    """A plugin class cannot be registered."""

    pass


class PluginNotFoundError(PluginRegistryError):
    """No plugin with the requested name."""

    pass


class DuplicatePluginError(PluginRegistryError):
    """Two plugin classes claim the same name."""

    pass


class PluginRegistry:
    """
    Plugins of one kind, by name.

    Args:
        kind: Plugin kind, used in messages ("parser", "protection").
        package: Package whose modules are scanned, or None for manual
            registration only.
        method: Method every plugin class must define.
    """

    def __init__(self, kind: str, package: Optional[str], method: str) -> None:
        self.kind = kind
        self.package = package
        self.method = method
        self._plugins: Dict[str, Type[Any]] = {}
        self._scanned = package is None

    def get(self, name: str) -> Type[Any]:
        """Return the plugin class registered as `name`."""
        self._scan()
        try:
            return self._plugins[name]
        except KeyError:
            raise PluginNotFoundError(
                f"Unknown {self.kind} plugin: {name!r}. Available: {self.names()}"
            ) from None

    def names(self) -> List[str]:
        self._scan()
        return sorted(self._plugins)

    def register(self, plugin_class: Type[Any]) -> Type[Any]:
        """Register `plugin_class` under its `plugin_name`; usable as a decorator."""
        name = getattr(plugin_class, "plugin_name", None)
        if not isinstance(name, str) or not name:
            raise PluginRegistryError(f"{plugin_class.__name__} has no plugin_name")
        if not callable(getattr(plugin_class, self.method, None)):
            raise PluginRegistryError(
                f"{self.kind} plugin {name!r} must define {self.method}()"
            )

        existing = self._plugins.setdefault(name, plugin_class)
        if existing is not plugin_class:
            raise DuplicatePluginError(
                f"{self.kind} plugin {name!r} defined by both "
                f"{existing.__module__}.{existing.__name__} and "
                f"{plugin_class.__module__}.{plugin_class.__name__}"
            )
        return plugin_class

    def _scan(self) -> None:
        if self._scanned:
            return
        self._scanned = True

        for plugin_class in self._candidates():
            try:
                self.register(plugin_class)
            except PluginRegistryError as e:
                logger.debug(f"{REGISTRY} Skipping {plugin_class.__name__}: {e}")

        logger.debug(f"{REGISTRY} {self.kind} plugins: {sorted(self._plugins)}")

    def _candidates(self) -> Iterator[Type[Any]]:
        """Public classes defined in the plugin package's modules, with the plugin method."""
        package = importlib.import_module(self.package)
        for info in pkgutil.iter_modules(package.__path__, prefix=f"{self.package}."):
            module = importlib.import_module(info.name)
            for attr, obj in inspect.getmembers(module, inspect.isclass):
                if attr.startswith("_") or obj.__module__ != module.__name__:
                    continue
                if hasattr(obj, self.method) and hasattr(obj, "plugin_name"):
                    yield obj


PARSER_REGISTRY = PluginRegistry("parser", "folio.parser.plugins", method="parse")
PROTECTION_REGISTRY = PluginRegistry("protection", "folio.protection.plugins", method="open")


def get_parser_plugin(plugin_name: str) -> Type[Any]:
    return PARSER_REGISTRY.get(plugin_name)


def available_parser_plugins() -> List[str]:
    return PARSER_REGISTRY.names()


def get_protection_plugin(plugin_name: str) -> Type[Any]:
    return PROTECTION_REGISTRY.get(plugin_name)


def available_protection_plugins() -> List[str]:
    return PROTECTION_REGISTRY.names()


__all__ = [
    "PluginRegistryError",
    "PluginNotFoundError",
    "DuplicatePluginError",
    "PluginRegistry",
    "PARSER_REGISTRY",
    "PROTECTION_REGISTRY",
    "get_parser_plugin",
    "available_parser_plugins",
    "get_protection_plugin",
    "available_protection_plugins",
]
