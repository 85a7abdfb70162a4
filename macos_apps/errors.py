"""Exception types raised by the application scanner."""


class MacAppsError(Exception):
    """Base class for all scanner errors."""


class AppScanError(MacAppsError):
    """A scan (or a single-bundle lookup) failed as a whole."""


class DiscoveryError(AppScanError):
    """Spotlight discovery failed or exceeded its timeout."""


class ManifestReadError(MacAppsError):
    """An Info.plist could not be read or parsed."""

    def __init__(self, message: str, manifest_path: str):
        super().__init__(message)
        self.manifest_path = manifest_path


class IconError(MacAppsError):
    """Base class for icon failures scoped to one application."""

    def __init__(self, message: str, icon_path: str | None = None):
        super().__init__(message)
        self.icon_path = icon_path


class IconResolutionError(IconError):
    """The icon asset could not be located or unpacked into renditions."""


class IconProcessingError(IconError):
    """The chosen rendition could not be decoded, resized or encoded."""


class InvalidBundleError(MacAppsError, ValueError):
    """A path given for single-bundle extraction is not an application bundle."""
