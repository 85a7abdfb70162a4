"""Icon lookup, iconset extraction and rendition selection for .app bundles."""

import logging
import os
import re
import tempfile
from contextlib import contextmanager
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, Iterator

from macos_apps.errors import IconError, IconResolutionError
from macos_apps.util.image import encode_png_data_uri
from macos_apps.util.shell import run

logger = logging.getLogger(__name__)

ICNS_EXTENSION = ".icns"
SUPPORTED_EXTENSIONS = (ICNS_EXTENSION, ".png", ".ico", ".tiff", ".tif")
RASTER_EXTENSIONS = (".png", ".tiff", ".tif")

# iconutil names renditions like icon_32x32.png and icon_32x32@2x.png
_RENDITION_RE = re.compile(r"(\d+)x(\d+)(?:@(\d+)x)?$")


@dataclass(frozen=True)
class Rendition:
    """One size variant unpacked from an .icns container."""

    filename: str
    width: int
    height: int
    scale: int = 1

    @property
    def area(self) -> int:
        # Nominal size only; the @Nx density tag marks a separate rendition
        return self.width * self.height


def find_icon_file(bundle_path: Path | str, icon_name: str) -> Path | None:
    """
    Locate an icon file inside an application bundle.

    Searches Contents/Resources, then the bundle root. In each location the
    name is tried as given, then with each supported extension appended.

    Args:
        bundle_path: Path to the .app bundle
        icon_name: Icon file name or stem from Info.plist

    Returns:
        Path to an existing icon file, or None if nothing matches
    """
    bundle = Path(bundle_path)

    for directory in (bundle / "Contents" / "Resources", bundle):
        for candidate in _candidate_names(icon_name):
            path = directory / candidate
            if path.is_file():
                return path

    return None


def _candidate_names(icon_name: str) -> list[str]:
    names = [icon_name]
    if not icon_name.lower().endswith(SUPPORTED_EXTENSIONS):
        names.extend(icon_name + ext for ext in SUPPORTED_EXTENSIONS)
    return names


def parse_rendition_name(filename: str) -> Rendition | None:
    """
    Parse an iconset file name such as ``icon_128x128@2x.png``.

    Returns None for files that are not raster renditions.
    """
    stem, ext = os.path.splitext(filename)
    if ext.lower() not in RASTER_EXTENSIONS:
        return None

    match = _RENDITION_RE.search(stem)
    if not match:
        return None

    width, height, scale = match.groups()
    return Rendition(
        filename=filename,
        width=int(width),
        height=int(height),
        scale=int(scale) if scale else 1
    )


def select_best_rendition(filenames: Iterable[str]) -> str | None:
    """
    Pick the rendition with the largest nominal width x height.

    Ties keep the first file encountered.

    Example:
        >>> select_best_rendition(["icon_16x16.png", "icon_32x32@2x.png", "icon_128x128.png"])
        'icon_128x128.png'
    """
    best: Rendition | None = None

    for filename in filenames:
        rendition = parse_rendition_name(filename)
        if rendition is None:
            continue
        if best is None or rendition.area > best.area:
            best = rendition

    return best.filename if best else None


@contextmanager
def iconset_workspace() -> Iterator[Path]:
    """Yield a uniquely named temporary directory, removed on every exit path."""
    with tempfile.TemporaryDirectory(prefix="macos-apps-iconset-") as workspace:
        yield Path(workspace)


def extract_iconset(icns_path: Path | str, workspace: Path, timeout: float = 10) -> Path:
    """
    Unpack an .icns container with iconutil.

    Args:
        icns_path: Path to the .icns file
        workspace: Directory that receives the .iconset folder
        timeout: Seconds allowed for iconutil

    Returns:
        Path to the extracted .iconset directory

    Raises:
        IconResolutionError: If iconutil is missing, times out, or fails
    """
    icns = Path(icns_path)
    iconset = workspace / f"{icns.stem}.iconset"

    try:
        result = run(
            ["iconutil", "-c", "iconset", str(icns), "-o", str(iconset)],
            timeout=timeout
        )
    except FileNotFoundError as e:
        raise IconResolutionError(
            "iconutil not found. Are you running on macOS?", icon_path=str(icns)
        ) from e
    except TimeoutError as e:
        raise IconResolutionError(str(e), icon_path=str(icns)) from e

    if not result.success:
        raise IconResolutionError(
            f"iconutil failed with exit code {result.code} for {icns}: {result.err}",
            icon_path=str(icns)
        )

    if not iconset.is_dir():
        raise IconResolutionError(
            f"iconutil produced no iconset for {icns}", icon_path=str(icns)
        )

    return iconset


def render_icon(icon_path: Path | str, size: int = 256, timeout: float = 10) -> str:
    """
    Convert an icon file to a PNG data URI bounded to ``size`` pixels.

    .icns containers are unpacked into a private temporary workspace and the
    largest rendition is encoded; other formats are encoded directly.

    Raises:
        IconResolutionError: If the container cannot be unpacked or holds no renditions
        IconProcessingError: If the chosen image cannot be encoded
    """
    path = Path(icon_path)

    if path.suffix.lower() != ICNS_EXTENSION:
        return encode_png_data_uri(path, size)

    try:
        with iconset_workspace() as workspace:
            iconset = extract_iconset(path, workspace, timeout=timeout)
            best = select_best_rendition(sorted(entry.name for entry in iconset.iterdir()))

            if best is None:
                raise IconResolutionError(
                    f"No valid icons found in ICNS file {path}", icon_path=str(path)
                )

            logger.debug("Selected rendition %s from %s", best, path)
            return encode_png_data_uri(iconset / best, size)
    except OSError as e:
        raise IconResolutionError(
            f"Failed to unpack ICNS file {path}: {e}", icon_path=str(path)
        ) from e


def resolve_icon(
    bundle_path: Path | str,
    icon_name: str | None,
    size: int = 256,
    include_image: bool = False,
    timeout: float = 10
) -> tuple[str | None, str | None]:
    """
    Locate a bundle's icon and optionally render it.

    Returns:
        Tuple of (icon_path, icon_base64). icon_base64 is only set when
        include_image is True and rendering succeeded.

    Raises:
        IconResolutionError: If looking up the icon file itself fails
    """
    if not icon_name:
        return None, None

    try:
        found = find_icon_file(bundle_path, icon_name)
    except OSError as e:
        raise IconResolutionError(
            f"Failed to look up icon {icon_name!r} in {bundle_path}: {e}"
        ) from e

    if found is None:
        return None, None

    if not include_image:
        return str(found), None

    try:
        icon_base64 = render_icon(found, size, timeout=timeout)
    except IconError as e:
        logger.warning("Failed to convert icon for %s: %s", bundle_path, e)
        icon_base64 = None

    return str(found), icon_base64
