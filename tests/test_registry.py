# tests/test_registry.py
"""
Tests for the plugin registries.

Verifies:
1. Built-in plugins are discovered by name
2. Unknown names raise PluginNotFoundError listing what is available
3. Manual registration validates the plugin shape
"""

from __future__ import annotations

import pytest

from folio.core.registry import (
    DuplicatePluginError,
    PluginNotFoundError,
    PluginRegistry,
    PluginRegistryError,
    available_parser_plugins,
    available_protection_plugins,
    get_parser_plugin,
    get_protection_plugin,
)
from folio.parser.plugins.image import ImageParser
from folio.protection.plugins.fallback import LcpFallbackProtection

pytestmark = pytest.mark.tier1


class TestDiscovery:
    def test_parsers_discovered(self):
        assert available_parser_plugins() == ["image", "webpub"]
        assert get_parser_plugin("image") is ImageParser

    def test_protections_discovered(self):
        assert available_protection_plugins() == ["adept_fallback", "lcp_fallback"]
        assert get_protection_plugin("lcp_fallback") is LcpFallbackProtection

    def test_unknown_plugin(self):
        with pytest.raises(PluginNotFoundError) as exc_info:
            get_parser_plugin("pdf")

        assert "webpub" in str(exc_info.value)


class TestRegistration:
    @pytest.fixture
    def registry(self):
        return PluginRegistry("test", None, method="parse")

    def test_register(self, registry):
        class Parser:
            plugin_name = "custom"

            def parse(self):
                pass

        registry.register(Parser)
        registry.register(Parser)

        assert registry.get("custom") is Parser

    def test_duplicate_name(self, registry):
        class First:
            plugin_name = "same"

            def parse(self):
                pass

        class Second(First):
            pass

        registry.register(First)
        with pytest.raises(DuplicatePluginError):
            registry.register(Second)

    def test_missing_method(self, registry):
        class NotAParser:
            plugin_name = "broken"

        with pytest.raises(PluginRegistryError):
            registry.register(NotAParser)

    def test_missing_name(self, registry):
        class Nameless:
            def parse(self):
                pass

        with pytest.raises(PluginRegistryError):
            registry.register(Nameless)

    def test_register_as_decorator(self, registry):
        @registry.register
        class Parser:
            plugin_name = "decorated"

            def parse(self):
                pass

        assert registry.names() == ["decorated"]
        assert registry.get("decorated") is Parser
