# folio/protection/plugins/__init__.py
"""Built-in content protection plugins (discovered by PROTECTION_REGISTRY)."""
