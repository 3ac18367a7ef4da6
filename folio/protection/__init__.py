# folio/protection/__init__.py
"""
Content protections unlock protected publications.

Protections are tried in order by the ProtectionChain; the first one that
recognizes the file wins.
"""

from folio.protection.base import ContentProtection, ProtectedFile
from folio.protection.chain import ProtectionChain
from folio.protection.plugins.fallback import (
    AdeptFallbackProtection,
    LcpFallbackProtection,
)

__all__ = [
    "ContentProtection",
    "ProtectedFile",
    "ProtectionChain",
    "LcpFallbackProtection",
    "AdeptFallbackProtection",
]
