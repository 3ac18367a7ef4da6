# folio/config/__init__.py
"""Streamer configuration: pydantic schema and layered YAML loading."""

from folio.config.loader import deep_merge, load_streamer_config
from folio.config.schema import LoggingConfig, PluginConfig, StreamerConfig

__all__ = [
    "StreamerConfig",
    "PluginConfig",
    "LoggingConfig",
    "load_streamer_config",
    "deep_merge",
]
