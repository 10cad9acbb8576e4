"""Output formatting utilities"""

import traceback
from typing import List

import yaml
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.syntax import Syntax

from ...models import AssetVersion, InstallResult, OperationStatus, PushResult

console = Console()


def format_push_result(result: PushResult) -> None:
    """Format and display push operation result"""
    title = "Dry Run Result" if result.dry_run else "Push Result"
    if result.references:
        lines = [
            "[green]✓[/green] Dry run completed" if result.dry_run else "[green]✓[/green] Push completed",
            "",
            f"[bold]Main branch:[/bold] {'yes' if result.main_branch else 'no'}",
            "",
            "[bold]Versions:[/bold]",
        ]
        for reference in result.references:
            lines.append(f"  • {escape(reference)}")
    else:
        lines = ["[yellow]No versions were published[/yellow]"]

    if result.tags:
        lines.append("")
        lines.append("[bold]Tags:[/bold]")
        for tag in result.tags:
            if tag.is_success:
                lines.append(f"  [green]✓[/green] {escape(tag.tag)}")
            else:
                lines.append(f"  [yellow]⚠[/yellow] {escape(tag.tag)}: {escape(tag.error or '')}")

    console.print(Panel("\n".join(lines), title=title, border_style="green"))


def format_install_results(results: List[InstallResult], title: str = "Install Result") -> None:
    """Format and display install or uninstall results"""
    failed = [r for r in results if r.status == OperationStatus.FAILED]
    lines = []
    for result in results:
        if result.status == OperationStatus.SUCCESS:
            lines.append(f"[green]✓[/green] {escape(result.reference)}  [dim]{escape(result.path or '')}[/dim]")
        elif result.status == OperationStatus.SKIPPED:
            lines.append(f"[dim]-[/dim] {escape(result.reference)}  [dim](skipped)[/dim]")
        else:
            lines.append(f"[red]✗[/red] {escape(result.reference)}: {escape(result.error or '')}")

    if not lines:
        lines.append("[yellow]Nothing to do[/yellow]")

    console.print(Panel(
        "\n".join(lines),
        title=title,
        border_style="red" if failed else "green"
    ))


def format_asset_version(asset_version: AssetVersion) -> None:
    """Display a version record as YAML"""
    content = yaml.safe_dump(asset_version.to_dict(), default_flow_style=False, sort_keys=False)
    console.print(Syntax(content, "yaml", background_color="default"))


def print_failure(title: str, error: Exception, verbose: bool = False) -> None:
    """Print a failed command: a one-line message, or the traceback when verbose"""
    console.print(f"[red]✗ {escape(title)}[/red]")
    if verbose:
        console.print(escape("".join(traceback.format_exception(type(error), error, error.__traceback__))))
    else:
        console.print(f"  {escape(str(error))}")
    error_code = getattr(error, 'error_code', None)
    if error_code:
        console.print(f"  [dim]Error code: {error_code}[/dim]")
