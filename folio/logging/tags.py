# folio/logging/tags.py
"""
Central place for logging subsystem tags.

Tags prefix log messages so output stays searchable per subsystem.
Changing a tag here updates it project-wide.
"""

STREAMER = "[STREAMER]"
FETCHER = "[FETCHER]"
PROTECTION = "[PROTECTION]"
PARSER = "[PARSER]"
REGISTRY = "[REGISTRY]"
CONFIG = "[CONFIG]"
CLI = "[CLI]"
