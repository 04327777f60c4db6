"""Discovery — scanning installed apps and caching their actions."""

from intentbridge.discovery.catalog import ActionCatalog
from intentbridge.discovery.models import ActionRecord, ParameterSpec
from intentbridge.discovery.scanner import ActionScanner, BundleScanner

__all__ = [
    "ActionCatalog",
    "ActionRecord",
    "ActionScanner",
    "BundleScanner",
    "ParameterSpec",
]
