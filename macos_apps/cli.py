"""Command-line interface for the macOS application scanner."""

import logging
import platform
import re
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.logging import RichHandler

from macos_apps import __version__
from macos_apps.config import ScanConfig, load_config, save_example_config
from macos_apps.engine import AppScanner
from macos_apps.errors import AppScanError, InvalidBundleError
from macos_apps.models import ScanReport
from macos_apps.output.render import render_human, render_json

app = typer.Typer(
    add_completion=False,
    no_args_is_help=True,
    help="List installed macOS applications with their names, bundle IDs and icons."
)

err_console = Console(stderr=True)


def version_callback(value: bool):
    """Print version and exit."""
    if value:
        print(f"macos-apps version {__version__}")
        raise typer.Exit()


@app.callback()
def main_callback(
    version: Optional[bool] = typer.Option(
        None,
        "--version",
        callback=version_callback,
        is_eager=True,
        help="Show version and exit"
    )
) -> None:
    """List installed macOS applications with their names, bundle IDs and icons."""


def _setup_logging(verbose: bool, quiet: bool) -> None:
    if verbose:
        level = logging.DEBUG
    elif quiet:
        level = logging.ERROR
    else:
        level = logging.WARNING

    logging.basicConfig(
        level=level,
        format="%(message)s",
        handlers=[RichHandler(console=err_console, show_path=False)],
        force=True
    )


def _require_macos() -> None:
    if platform.system() != "Darwin":
        err_console.print("[red]Error:[/red] This tool only works on macOS")
        raise typer.Exit(code=2)


def _build_config(
    config_file: Optional[Path],
    icons: bool,
    icon_size: Optional[int],
    search_path: Optional[list[str]],
    timeout: Optional[float],
    workers: Optional[int]
) -> ScanConfig:
    """Load the config file and apply CLI overrides (CLI wins)."""
    try:
        config = load_config(config_file)
    except FileNotFoundError as e:
        err_console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(code=2)
    except ValueError as e:
        err_console.print(f"[yellow]Error loading configuration:[/yellow] {e}")
        err_console.print("Continuing with default settings...")
        config = ScanConfig()

    try:
        return config.with_overrides(
            include_icon_image=True if icons else None,
            icon_size=icon_size,
            search_roots=tuple(search_path) if search_path else None,
            timeout=timeout,
            max_workers=workers
        )
    except ValueError as e:
        err_console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(code=2)


def _write_output(output: str, out: Optional[Path]) -> None:
    if out is None:
        print(output)
        return

    if not out.parent.exists():
        err_console.print(f"[red]Error:[/red] Directory does not exist: {out.parent}")
        raise typer.Exit(code=2)
    out.write_text(output)
    err_console.print(f"[green]✓[/green] Report written to {out}")


# Options shared by every command that scans
IconsOption = typer.Option(False, "--icons", help="Render each icon as a data:image/png;base64 payload")
IconSizeOption = typer.Option(None, "--icon-size", help="Bounding box in pixels for rendered icons (default: 256)")
SearchPathOption = typer.Option(
    None,
    "--search-path",
    help="Directory to search. Can be specified multiple times (default: /Applications, ~/Applications, /System/Applications)"
)
TimeoutOption = typer.Option(None, "--timeout", help="Seconds allowed for application discovery (default: 30)")
WorkersOption = typer.Option(None, "--workers", help="Concurrent per-application workers (default: 8)")
ConfigOption = typer.Option(None, "--config", help="Path to configuration file (default: ~/.macos-apps.yaml)")
JsonOption = typer.Option(False, "--json", help="Output results in JSON format")
CamelCaseOption = typer.Option(False, "--camel-case", help="Use appName/appPath/... keys in JSON output")
VerboseOption = typer.Option(False, "--verbose", "-v", help="Show debug logging")
QuietOption = typer.Option(False, "--quiet", "-q", help="Hide progress and warnings")


@app.command()
def scan(
    json: bool = JsonOption,
    camel_case: bool = CamelCaseOption,
    out: Optional[Path] = typer.Option(None, "--out", help="Write output to file instead of stdout"),
    icons: bool = IconsOption,
    icon_size: Optional[int] = IconSizeOption,
    search_path: Optional[list[str]] = SearchPathOption,
    timeout: Optional[float] = TimeoutOption,
    workers: Optional[int] = WorkersOption,
    config_file: Optional[Path] = ConfigOption,
    generate_config: Optional[Path] = typer.Option(
        None,
        "--generate-config",
        help="Generate example configuration file at specified path and exit"
    ),
    verbose: bool = VerboseOption,
    quiet: bool = QuietOption
) -> None:
    """
    Scan for installed applications.

    Examples:
        macos-apps scan                                # Table of all applications
        macos-apps scan --json --out apps.json         # Save JSON report
        macos-apps scan --json --icons --icon-size 64  # Include rendered icons
        macos-apps scan --search-path /Applications    # Only /Applications
        macos-apps scan --generate-config ~/.macos-apps.yaml
    """
    if generate_config:
        try:
            save_example_config(generate_config)
        except OSError as e:
            err_console.print(f"[red]Error generating config:[/red] {e}")
            raise typer.Exit(code=2)
        err_console.print(f"[green]✓[/green] Example configuration saved to {generate_config}")
        raise typer.Exit()

    _setup_logging(verbose, quiet)
    _require_macos()
    config = _build_config(config_file, icons, icon_size, search_path, timeout, workers)

    try:
        report = AppScanner(config).run_scan(console=None if quiet else err_console)
    except AppScanError as e:
        err_console.print(f"[red]Scan failed:[/red] {e}")
        raise typer.Exit(code=3)

    output = render_json(report, camel_case=camel_case) if json else render_human(report)
    _write_output(output, out)


@app.command()
def find(
    bundle_id: str = typer.Argument(..., help="Bundle identifier, e.g. com.apple.Safari"),
    json: bool = JsonOption,
    camel_case: bool = CamelCaseOption,
    icons: bool = IconsOption,
    icon_size: Optional[int] = IconSizeOption,
    search_path: Optional[list[str]] = SearchPathOption,
    timeout: Optional[float] = TimeoutOption,
    config_file: Optional[Path] = ConfigOption,
    verbose: bool = VerboseOption,
    quiet: bool = QuietOption
) -> None:
    """Find one application by bundle identifier (exit 1 if not found)."""
    _setup_logging(verbose, quiet)
    _require_macos()
    config = _build_config(config_file, icons, icon_size, search_path, timeout, None)

    try:
        record = AppScanner(config).get_application_by_bundle_id(bundle_id)
    except AppScanError as e:
        err_console.print(f"[red]Scan failed:[/red] {e}")
        raise typer.Exit(code=3)

    if record is None:
        err_console.print(f"No application with bundle ID {bundle_id}")
        raise typer.Exit(code=1)

    report = ScanReport.create([record], search_roots=config.search_roots)
    print(render_json(report, camel_case=camel_case) if json else render_human(report))


@app.command()
def search(
    pattern: str = typer.Argument(..., help="Regular expression matched case-insensitively against names"),
    json: bool = JsonOption,
    camel_case: bool = CamelCaseOption,
    icons: bool = IconsOption,
    icon_size: Optional[int] = IconSizeOption,
    search_path: Optional[list[str]] = SearchPathOption,
    timeout: Optional[float] = TimeoutOption,
    config_file: Optional[Path] = ConfigOption,
    verbose: bool = VerboseOption,
    quiet: bool = QuietOption
) -> None:
    """List applications whose name matches a pattern."""
    _setup_logging(verbose, quiet)
    try:
        re.compile(pattern)
    except re.error as e:
        err_console.print(f"[red]Error:[/red] Invalid pattern '{pattern}': {e}")
        raise typer.Exit(code=2)

    _require_macos()
    config = _build_config(config_file, icons, icon_size, search_path, timeout, None)

    try:
        records = AppScanner(config).get_applications_by_name(pattern)
    except AppScanError as e:
        err_console.print(f"[red]Scan failed:[/red] {e}")
        raise typer.Exit(code=3)

    report = ScanReport.create(records, search_roots=config.search_roots)
    print(render_json(report, camel_case=camel_case) if json else render_human(report))


@app.command()
def inspect(
    bundle_path: Path = typer.Argument(..., help="Path to an .app bundle"),
    json: bool = JsonOption,
    camel_case: bool = CamelCaseOption,
    icons: bool = IconsOption,
    icon_size: Optional[int] = IconSizeOption,
    config_file: Optional[Path] = ConfigOption,
    verbose: bool = VerboseOption,
    quiet: bool = QuietOption
) -> None:
    """Read one application bundle directly, without Spotlight discovery."""
    _setup_logging(verbose, quiet)
    config = _build_config(config_file, icons, icon_size, None, None, None)

    try:
        record = AppScanner(config).get_application_info(bundle_path)
    except InvalidBundleError as e:
        err_console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(code=2)
    except AppScanError as e:
        err_console.print(f"[red]Inspect failed:[/red] {e}")
        raise typer.Exit(code=3)

    if json:
        print(record.to_json(by_alias=camel_case))
    else:
        print(render_human(ScanReport.create([record])))


def main() -> None:
    """Entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
