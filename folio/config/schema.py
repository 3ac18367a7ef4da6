# folio/config/schema.py
"""
Configuration schema for the Folio streamer.

This is the SINGLE source of truth for streamer configuration.

Schema hierarchy:
- StreamerConfig: The main config consumed by Streamer.from_config()
- PluginConfig: Generic plugin configuration block (parsers, protections)
- LoggingConfig: Logging settings
"""

from __future__ import annotations

import logging
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

# =============================================================================
# Plugin Configuration
# =============================================================================


class PluginConfig(BaseModel):
    """
    Generic plugin configuration block.

    Examples:
        >>> config = PluginConfig(plugin_name="lcp_fallback")
        >>> config = PluginConfig(plugin_name="image", kwargs={"supported_extensions": [".png"]})
    """

    plugin_name: str = Field(..., description="Plugin name in the central registry")
    kwargs: dict[str, Any] = Field(default_factory=dict, description="Plugin init kwargs")

    model_config = ConfigDict(extra="forbid")

    @field_validator("plugin_name")
    @classmethod
    def strip_name(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("plugin_name must not be empty")
        return v


# =============================================================================
# Logging Configuration
# =============================================================================


class LoggingConfig(BaseModel):
    """Logging settings applied by the CLI."""

    level: str = Field(default="INFO", description="Root log level")

    model_config = ConfigDict(extra="forbid")

    @field_validator("level")
    @classmethod
    def validate_level(cls, v: str) -> str:
        level = v.upper()
        if not isinstance(logging.getLevelName(level), int):
            raise ValueError(f"Unknown log level: {v!r}")
        return level


# =============================================================================
# Streamer Configuration
# =============================================================================


class StreamerConfig(BaseModel):
    """
    Streamer configuration.

    Examples:
        >>> config = StreamerConfig(
        ...     content_protections=[PluginConfig(plugin_name="lcp_fallback")],
        ...     workers=2,
        ... )
    """

    parsers: list[PluginConfig] = Field(
        default_factory=list,
        description="Parsers tried before the default parsers, in order",
    )
    ignore_default_parsers: bool = Field(
        default=False, description="Only use the configured parsers"
    )
    content_protections: list[PluginConfig] = Field(
        default_factory=list,
        description="Content protections, tried in order",
    )
    workers: int = Field(default=4, ge=1, description="Worker pool size")
    delivery_thread_name: str = Field(
        default="folio-delivery", min_length=1, description="Delivery thread name prefix"
    )
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    model_config = ConfigDict(extra="forbid")

    @field_validator("parsers", "content_protections", mode="before")
    @classmethod
    def normalize_plugins(cls, v: Any) -> Any:
        """Accept bare plugin names: ["lcp_fallback"] == [{"plugin_name": "lcp_fallback"}]."""
        if v is None:
            return []
        if isinstance(v, list):
            return [{"plugin_name": item} if isinstance(item, str) else item for item in v]
        return v


__all__ = ["PluginConfig", "LoggingConfig", "StreamerConfig"]
