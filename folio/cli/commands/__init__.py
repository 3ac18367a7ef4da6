# folio/cli/commands/__init__.py
