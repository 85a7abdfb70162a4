"""Spotlight-based discovery of application bundles."""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable

from macos_apps.errors import DiscoveryError
from macos_apps.util.shell import run

logger = logging.getLogger(__name__)

APPLICATION_QUERY = 'kMDItemContentType == "com.apple.application-bundle"'
APP_SUFFIX = ".app"


@dataclass(frozen=True)
class DiscoveredBundle:
    """An application bundle together with its Info.plist."""

    bundle_path: Path
    manifest_path: Path


def manifest_path_for(bundle_path: Path | str) -> Path:
    """Standard Info.plist location inside a bundle."""
    return Path(bundle_path) / "Contents" / "Info.plist"


def find_application_bundles(
    search_roots: Iterable[str],
    timeout: float = 30,
    excluded_paths: Iterable[str] = ()
) -> list[DiscoveredBundle]:
    """
    Find .app bundles under the given roots using mdfind.

    Roots that do not exist are skipped; when none exist the result is empty
    and mdfind is never invoked.

    Args:
        search_roots: Directories to constrain the Spotlight query to
        timeout: Seconds allowed for mdfind
        excluded_paths: Directories whose bundles are dropped

    Returns:
        Bundles in the order mdfind reported them, each with an existing Info.plist

    Raises:
        DiscoveryError: If mdfind is missing, times out, or fails
    """
    roots = [root for root in search_roots if Path(root).is_dir()]
    if not roots:
        logger.debug("No existing search roots, skipping discovery")
        return []

    cmd = ["mdfind"]
    for root in roots:
        cmd.extend(["-onlyin", root])
    cmd.append(APPLICATION_QUERY)

    try:
        result = run(cmd, timeout=timeout)
    except TimeoutError as e:
        raise DiscoveryError(f"Application discovery timed out: {e}") from e
    except FileNotFoundError as e:
        raise DiscoveryError(
            "mdfind not found. Are you running on macOS?"
        ) from e
    except OSError as e:
        raise DiscoveryError(f"Failed to run mdfind: {e}") from e

    if not result.success:
        raise DiscoveryError(
            f"mdfind failed with exit code {result.code}: {result.err}"
        )

    return parse_mdfind_output(result.lines(), excluded_paths)


def parse_mdfind_output(
    lines: Iterable[str],
    excluded_paths: Iterable[str] = ()
) -> list[DiscoveredBundle]:
    """Turn mdfind output lines into bundles that actually contain an Info.plist."""
    excluded = [Path(path) for path in excluded_paths]
    seen: set[str] = set()
    bundles: list[DiscoveredBundle] = []

    for line in lines:
        app_path = line.strip()
        if not app_path.endswith(APP_SUFFIX) or app_path in seen:
            continue
        seen.add(app_path)

        bundle = Path(app_path)
        if is_excluded(bundle, excluded):
            logger.debug("Skipping excluded bundle %s", bundle)
            continue

        manifest = manifest_path_for(bundle)
        if not manifest.is_file():
            logger.debug("Skipping %s: no Info.plist", bundle)
            continue

        bundles.append(DiscoveredBundle(bundle_path=bundle, manifest_path=manifest))

    logger.debug("Discovered %d application bundles", len(bundles))
    return bundles


def is_excluded(bundle: Path, excluded: Iterable[Path]) -> bool:
    return any(bundle.is_relative_to(path) for path in excluded)
