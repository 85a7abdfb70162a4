"""Collectors for discovering bundles and extracting their metadata."""

from .discovery import DiscoveredBundle, find_application_bundles
from .manifest import ManifestInfo, IconReference, IconSource, load_manifest_info
from .icons import find_icon_file, resolve_icon, select_best_rendition

__all__ = [
    "DiscoveredBundle",
    "find_application_bundles",
    "ManifestInfo",
    "IconReference",
    "IconSource",
    "load_manifest_info",
    "find_icon_file",
    "resolve_icon",
    "select_best_rendition",
]
