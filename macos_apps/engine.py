"""Scan engine orchestrating application discovery and metadata extraction."""

import logging
import re
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass
from pathlib import Path

from rich.console import Console
from rich.progress import Progress, SpinnerColumn, TextColumn, BarColumn, TaskProgressColumn, TimeRemainingColumn

from macos_apps.collectors.discovery import (
    APP_SUFFIX,
    DiscoveredBundle,
    find_application_bundles,
    manifest_path_for,
)
from macos_apps.collectors.icons import resolve_icon
from macos_apps.collectors.manifest import load_manifest_info
from macos_apps.config import ScanConfig
from macos_apps.errors import (
    AppScanError,
    IconResolutionError,
    InvalidBundleError,
    ManifestReadError,
)
from macos_apps.models import ApplicationRecord, ScanReport

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ItemOutcome:
    """Result of processing one discovered bundle: a record or the error that dropped it."""

    index: int
    bundle: DiscoveredBundle
    record: ApplicationRecord | None = None
    error: BaseException | None = None

    @property
    def ok(self) -> bool:
        return self.record is not None


class AppScanner:
    """
    Scanner for installed macOS applications.

    Example:
        >>> scanner = AppScanner(ScanConfig(include_icon_image=True, icon_size=128))
        >>> safari = scanner.get_application_by_bundle_id("com.apple.Safari")
    """

    def __init__(self, config: ScanConfig | None = None):
        self.config = config or ScanConfig()

    def scan_applications(self, console: Console | None = None) -> list[ApplicationRecord]:
        """
        Discover, extract and deduplicate all applications.

        Args:
            console: Optional rich console for progress display

        Returns:
            Deduplicated records in discovery order (possibly empty)

        Raises:
            DiscoveryError: If Spotlight discovery fails or times out
            AppScanError: If orchestration fails unexpectedly
        """
        bundles = self._discover(console)

        try:
            outcomes = self._process_bundles(bundles, console)
        except Exception as e:
            raise AppScanError(f"Failed to scan applications: {e}") from e

        records = []
        for outcome in outcomes:
            if outcome.ok:
                records.append(outcome.record)
            else:
                logger.warning("Skipping %s: %s", outcome.bundle.bundle_path, outcome.error)

        return deduplicate_applications(records, self.config.primary_root)

    def run_scan(self, console: Console | None = None) -> ScanReport:
        """Scan and wrap the result in a timestamped report."""
        applications = self.scan_applications(console=console)
        return ScanReport.create(applications, search_roots=self.config.search_roots)

    def get_application_by_bundle_id(self, bundle_id: str) -> ApplicationRecord | None:
        """First application whose bundle identifier matches exactly, or None."""
        return next(
            (app for app in self.scan_applications() if app.bundle_id == bundle_id),
            None
        )

    def get_applications_by_name(self, pattern: str | re.Pattern[str]) -> list[ApplicationRecord]:
        """All applications whose name matches the pattern (strings match case-insensitively)."""
        regex = re.compile(pattern, re.IGNORECASE) if isinstance(pattern, str) else pattern
        return [app for app in self.scan_applications() if regex.search(app.name)]

    def get_application_info(self, bundle_path: Path | str) -> ApplicationRecord:
        """
        Extract metadata for one explicitly given .app bundle, bypassing discovery.

        Raises:
            InvalidBundleError: If the path is not an .app bundle directory
            AppScanError: If the bundle has no readable Info.plist
        """
        path_str = str(bundle_path).rstrip("/")
        if not path_str.endswith(APP_SUFFIX):
            raise InvalidBundleError(f"Not an application bundle (expected {APP_SUFFIX}): {bundle_path}")

        bundle = Path(path_str)
        if not bundle.is_dir():
            raise InvalidBundleError(f"Application bundle not found: {bundle}")

        manifest = manifest_path_for(bundle)
        if not manifest.is_file():
            raise AppScanError(f"No Info.plist found in {bundle}")

        try:
            return self._build_record(DiscoveredBundle(bundle_path=bundle, manifest_path=manifest))
        except ManifestReadError as e:
            raise AppScanError(f"Failed to process application at {bundle}: {e}") from e

    def _discover(self, console: Console | None) -> list[DiscoveredBundle]:
        """Run Spotlight discovery, with a spinner when a console is attached."""
        def discover() -> list[DiscoveredBundle]:
            return find_application_bundles(
                self.config.search_roots,
                timeout=self.config.timeout,
                excluded_paths=self.config.excluded_paths
            )

        if console is None:
            return discover()

        with Progress(
            SpinnerColumn(),
            TextColumn("[bold blue]Discovering applications..."),
            console=console,
            transient=True
        ) as progress:
            progress.add_task("scan", total=None)
            bundles = discover()
        console.print("[green]✓[/green] Found [bold]{} application bundles[/bold]".format(len(bundles)))
        return bundles

    def _process_bundles(
        self,
        bundles: list[DiscoveredBundle],
        console: Console | None
    ) -> list[ItemOutcome]:
        """Run per-bundle extraction concurrently; outcomes come back in discovery order."""
        if not bundles:
            return []

        outcomes: list[ItemOutcome | None] = [None] * len(bundles)
        max_workers = min(self.config.max_workers, len(bundles))

        with ThreadPoolExecutor(max_workers=max_workers) as executor:
            future_to_index = {
                executor.submit(self._build_record, bundle): index
                for index, bundle in enumerate(bundles)
            }

            if console is None:
                for future in as_completed(future_to_index):
                    index = future_to_index[future]
                    outcomes[index] = _outcome(index, bundles[index], future)
            else:
                with Progress(
                    SpinnerColumn(),
                    TextColumn("[bold cyan]{task.description}"),
                    BarColumn(),
                    TaskProgressColumn(),
                    TimeRemainingColumn(),
                    console=console,
                    transient=True
                ) as progress:
                    task = progress.add_task(f"Reading {len(bundles)} applications...", total=len(bundles))

                    for future in as_completed(future_to_index):
                        index = future_to_index[future]
                        outcomes[index] = _outcome(index, bundles[index], future)
                        progress.update(task, description=f"Read [cyan]{bundles[index].bundle_path.stem}[/cyan]")
                        progress.advance(task)

        return [outcome for outcome in outcomes if outcome is not None]

    def _build_record(self, bundle: DiscoveredBundle) -> ApplicationRecord:
        """Read one bundle's manifest and resolve its icon."""
        info = load_manifest_info(bundle.manifest_path)

        try:
            icon_path, icon_base64 = resolve_icon(
                bundle.bundle_path,
                info.icon_name,
                size=self.config.icon_size,
                include_image=self.config.include_icon_image,
                timeout=self.config.iconutil_timeout
            )
        except IconResolutionError as e:
            logger.warning("Failed to resolve icon for %s: %s", info.name, e)
            icon_path, icon_base64 = None, None

        return ApplicationRecord(
            name=info.name,
            path=str(bundle.bundle_path),
            bundle_id=info.bundle_id,
            icon_name=info.icon_name,
            icon_path=icon_path,
            icon_base64=icon_base64
        )


def _outcome(index: int, bundle: DiscoveredBundle, future) -> ItemOutcome:
    try:
        return ItemOutcome(index=index, bundle=bundle, record=future.result())
    except Exception as e:
        return ItemOutcome(index=index, bundle=bundle, error=e)


def deduplicate_applications(
    records: list[ApplicationRecord],
    primary_root: str = "/Applications"
) -> list[ApplicationRecord]:
    """
    Keep one record per display name.

    Within a group the first record under primary_root wins; otherwise the
    first record encountered. Groups keep first-seen order.
    """
    root = Path(primary_root)
    groups: dict[str, list[ApplicationRecord]] = {}

    for record in records:
        groups.setdefault(record.name, []).append(record)

    survivors = []
    for group in groups.values():
        preferred = next((app for app in group if Path(app.path).is_relative_to(root)), None)
        survivors.append(preferred or group[0])

    return survivors


def scan_applications(config: ScanConfig | None = None) -> list[ApplicationRecord]:
    """Scan all applications with the given (or default) configuration."""
    return AppScanner(config).scan_applications()


def get_application(bundle_id: str, config: ScanConfig | None = None) -> ApplicationRecord | None:
    """Find one application by bundle identifier."""
    return AppScanner(config).get_application_by_bundle_id(bundle_id)
