"""Enumerate installed macOS applications with their names, bundle IDs and icons."""

__version__ = "0.1.0"

from macos_apps.config import ScanConfig, load_config
from macos_apps.engine import AppScanner, get_application, scan_applications
from macos_apps.errors import (
    AppScanError,
    DiscoveryError,
    IconProcessingError,
    IconResolutionError,
    InvalidBundleError,
    MacAppsError,
    ManifestReadError,
)
from macos_apps.models import ApplicationRecord, ScanReport

__all__ = [
    "__version__",
    "AppScanner",
    "ApplicationRecord",
    "ScanReport",
    "ScanConfig",
    "load_config",
    "scan_applications",
    "get_application",
    "MacAppsError",
    "AppScanError",
    "DiscoveryError",
    "ManifestReadError",
    "IconResolutionError",
    "IconProcessingError",
    "InvalidBundleError",
]
