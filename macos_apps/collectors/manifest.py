"""Info.plist reading and application identity extraction."""

import plistlib
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any
from xml.parsers.expat import ExpatError

from macos_apps.errors import ManifestReadError

UNKNOWN = "Unknown"

# Fallback order for the human-readable application name
NAME_KEYS = ("CFBundleDisplayName", "CFBundleName", "CFBundleExecutable")


class IconSource(str, Enum):
    """Which Info.plist shape declared the icon."""

    ICON_FILE = "CFBundleIconFile"
    PRIMARY_ICON = "CFBundlePrimaryIcon"
    ICON_NAME = "CFBundleIconName"


@dataclass(frozen=True)
class IconReference:
    """Icon name or file stem as declared by the manifest."""

    source: IconSource
    name: str


@dataclass(frozen=True)
class ManifestInfo:
    """Identity fields extracted from one Info.plist."""

    name: str
    bundle_id: str
    icon: IconReference | None = None

    @property
    def icon_name(self) -> str | None:
        return self.icon.name if self.icon else None


def read_manifest(manifest_path: Path | str) -> dict[str, Any]:
    """
    Load an Info.plist (XML or binary format).

    Args:
        manifest_path: Path to the Info.plist file

    Returns:
        Top-level plist dictionary

    Raises:
        ManifestReadError: If the file is unreadable, malformed, or not a dictionary
    """
    try:
        with open(manifest_path, "rb") as f:
            data = plistlib.load(f)
    except (OSError, plistlib.InvalidFileException, ExpatError, ValueError) as e:
        raise ManifestReadError(
            f"Failed to read plist at {manifest_path}: {e}", str(manifest_path)
        ) from e

    if not isinstance(data, dict):
        raise ManifestReadError(
            f"Plist at {manifest_path} is a {type(data).__name__}, expected a dictionary",
            str(manifest_path)
        )

    return data


def extract_manifest_info(data: dict[str, Any]) -> ManifestInfo:
    """
    Extract name, bundle identifier and icon reference from plist data.

    Name falls back through CFBundleDisplayName, CFBundleName and
    CFBundleExecutable before settling on "Unknown".

    Example:
        >>> info = extract_manifest_info({"CFBundleName": "Safari", "CFBundleIconFile": "AppIcon"})
        >>> info.name, info.bundle_id, info.icon_name
        ('Safari', 'Unknown', 'AppIcon')
    """
    name = next((value for value in (_string(data, key) for key in NAME_KEYS) if value), None)

    return ManifestInfo(
        name=name or UNKNOWN,
        bundle_id=_string(data, "CFBundleIdentifier") or UNKNOWN,
        icon=_icon_reference(data)
    )


def load_manifest_info(manifest_path: Path | str) -> ManifestInfo:
    """Read an Info.plist and extract its identity fields."""
    return extract_manifest_info(read_manifest(manifest_path))


def _icon_reference(data: dict[str, Any]) -> IconReference | None:
    """Resolve the icon reference in priority order: file, primary icon, symbolic name."""
    icon_file = _string(data, "CFBundleIconFile")
    if icon_file:
        return IconReference(IconSource.ICON_FILE, icon_file)

    primary = _primary_icon_file(data)
    if primary:
        return IconReference(IconSource.PRIMARY_ICON, primary)

    icon_name = _string(data, "CFBundleIconName")
    if icon_name:
        return IconReference(IconSource.ICON_NAME, icon_name)

    return None


def _primary_icon_file(data: dict[str, Any]) -> str | None:
    """First entry of CFBundleIcons.CFBundlePrimaryIcon.CFBundleIconFiles."""
    icons = data.get("CFBundleIcons")
    if not isinstance(icons, dict):
        return None

    primary = icons.get("CFBundlePrimaryIcon")
    if not isinstance(primary, dict):
        return None

    files = primary.get("CFBundleIconFiles")
    if isinstance(files, list):
        first = files[0] if files else None
        return first if isinstance(first, str) and first else None
    if isinstance(files, str) and files:
        return files
    return None


def _string(data: dict[str, Any], key: str) -> str | None:
    value = data.get(key)
    return value if isinstance(value, str) and value else None
