"""Output rendering for scan reports."""

from io import StringIO

from rich import box
from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from macos_apps.models import ApplicationRecord, ScanReport


def render_json(report: ScanReport, camel_case: bool = False) -> str:
    """
    Render a scan report as JSON.

    Args:
        report: ScanReport to render
        camel_case: Use appName/appPath/... keys instead of snake_case

    Returns:
        Indented JSON string with sorted keys
    """
    return report.to_json(indent=2, by_alias=camel_case)


def render_human(report: ScanReport) -> str:
    """
    Render a scan report in human-readable format using Rich.

    Returns:
        Formatted string suitable for terminal display
    """
    output_buffer = StringIO()
    console = Console(file=output_buffer, width=140, force_terminal=True)

    console.print()
    header_text = Text()
    header_text.append("macOS Applications", style="bold cyan")
    header_text.append(f"  {report.timestamp}", style="dim")
    console.print(Panel(header_text, border_style="cyan", box=box.ROUNDED))

    summary = report.summary()
    summary_text = Text()
    summary_text.append(f"{summary['total']} applications  ", style="bold")
    summary_text.append(f"{summary['with_icon']} with icon  ", style="bold green" if summary["with_icon"] else "dim")
    summary_text.append(f"{summary['with_image']} rendered", style="bold blue" if summary["with_image"] else "dim")
    console.print(Panel(summary_text, title="[bold]Summary[/bold]", border_style="yellow", box=box.ROUNDED))
    console.print()

    if not report.applications:
        console.print(Panel(Text("No applications found", style="bold yellow"), border_style="yellow", box=box.ROUNDED))
        console.print()
        return output_buffer.getvalue()

    console.print(applications_table(report.applications))
    console.print()
    return output_buffer.getvalue()


def applications_table(applications: list[ApplicationRecord]) -> Table:
    """Build a rich table with one row per application."""
    table = Table(box=box.SIMPLE_HEAVY, show_lines=False, header_style="bold magenta")
    table.add_column("Name", style="bold white", no_wrap=True)
    table.add_column("Bundle ID", style="cyan")
    table.add_column("Path", style="dim")
    table.add_column("Icon", justify="center")

    for app in sorted(applications, key=lambda a: a.name.lower()):
        if app.icon_base64:
            icon = "[green]rendered[/green]"
        elif app.icon_path:
            icon = "[blue]found[/blue]"
        else:
            icon = "[dim]-[/dim]"
        table.add_row(app.name, app.bundle_id, app.path, icon)

    return table
