# folio/parser/plugins/__init__.py
"""Built-in publication parser plugins (discovered by PARSER_REGISTRY)."""
