# folio/cli/__init__.py
"""Folio command line interface."""
