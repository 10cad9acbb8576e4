"""Progress display utilities"""

from typing import Any, Optional

from rich.console import Console
from rich.markup import escape

from ...constants import EMOJI_ERROR, EMOJI_SUCCESS, EMOJI_WARNING
from ...core.progress import ProgressReporter


class ConsoleProgressReporter(ProgressReporter):
    """Prints pipeline steps to a rich console, indented by nesting"""

    def __init__(self, console: Console = None, verbose: bool = False, quiet: bool = False):
        self.console = console or Console()
        self.verbose = verbose
        self.quiet = quiet
        self._depth = 0

    def _print(self, message: str, style: Optional[str] = None) -> None:
        if self.quiet:
            return
        indent = "  " * self._depth
        if style:
            self.console.print(f"{indent}[{style}]{escape(message)}[/{style}]")
        else:
            self.console.print(f"{indent}{escape(message)}")

    def start(self, title: str) -> None:
        self._print(f"{title}...", "bold")
        self._depth += 1

    def end(self, title: str, success: bool) -> None:
        self._depth = max(0, self._depth - 1)
        self._mark(title, success)

    def _mark(self, title: str, success: bool) -> None:
        if self.quiet:
            return
        indent = "  " * self._depth
        if success:
            self.console.print(f"{indent}[green]{EMOJI_SUCCESS}[/green] {escape(title)}")
        else:
            self.console.print(f"{indent}[red]{EMOJI_ERROR}[/red] {escape(title)}")

    def check(self, message: str, ok: bool) -> bool:
        self._mark(message, ok)
        return ok

    def show_value(self, label: str, value: Any) -> None:
        if self.quiet:
            return
        indent = "  " * self._depth
        self.console.print(f"{indent}{escape(label)}: [cyan]{escape(str(value))}[/cyan]")

    def info(self, message: str) -> None:
        self._print(message)

    def warn(self, message: str) -> None:
        self._print(f"{EMOJI_WARNING} {message}", "yellow")

    def error(self, message: str) -> None:
        # Errors are shown even in quiet mode
        indent = "  " * self._depth
        self.console.print(f"{indent}[red]{escape(message)}[/red]")

    def debug(self, message: str) -> None:
        if self.verbose:
            self._print(message, "dim")
