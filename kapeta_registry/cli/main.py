"""Main CLI entry point for kapeta-registry"""

import sys
import logging
from typing import Optional

import click
from rich.console import Console
from rich.logging import RichHandler

from ..__version__ import __version__
from ..constants import APP_NAME, LOG_FORMAT
from ..core import PathResolver
from ..models import Config
from ..services import ConfigService
from .utils.progress import ConsoleProgressReporter

# Import all commands
from .commands import (
    push,
    install,
    uninstall,
    clone,
    link,
    view,
)

console = Console()


def setup_logging(verbose: bool = False, debug: bool = False) -> None:
    """Setup logging configuration

    Args:
        verbose: Enable verbose output (INFO level)
        debug: Enable debug output (DEBUG level)
    """
    if debug:
        level = logging.DEBUG
    elif verbose:
        level = logging.INFO
    else:
        level = logging.WARNING

    logging.basicConfig(
        level=level,
        format=LOG_FORMAT,
        handlers=[
            RichHandler(
                console=console,
                show_time=debug,
                show_path=debug,
                rich_tracebacks=True,
                tracebacks_suppress=[click]
            )
        ]
    )

    # Adjust third-party loggers
    logging.getLogger("asyncio").setLevel(logging.WARNING)
    logging.getLogger("aiofiles").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)


class Context:
    """CLI context object with lazy configuration loading"""

    def __init__(self):
        self.verbose: bool = False
        self.debug: bool = False
        self.quiet: bool = False
        self._config: Optional[Config] = None
        self._progress: Optional[ConsoleProgressReporter] = None

    @property
    def config(self) -> Config:
        """Registry configuration, loaded on first use"""
        if self._config is None:
            self._config = ConfigService().config
        return self._config

    @property
    def path_resolver(self) -> PathResolver:
        return PathResolver(self.config.kapeta_home)

    @property
    def progress(self) -> ConsoleProgressReporter:
        if self._progress is None:
            self._progress = ConsoleProgressReporter(
                console=console,
                verbose=self.verbose or self.debug,
                quiet=self.quiet
            )
        return self._progress


@click.group(name=APP_NAME)
@click.option('-v', '--verbose', is_flag=True, help='Enable verbose output')
@click.option('-d', '--debug', is_flag=True, help='Enable debug output')
@click.option('-q', '--quiet', is_flag=True, help='Suppress all output except errors')
@click.version_option(__version__, prog_name=APP_NAME)
@click.pass_context
def cli(ctx, verbose, debug, quiet):
    """Kapeta registry tool - publish and install Kapeta assets

    Pushes the asset in a directory to the Kapeta registry: builds and tests
    it, reserves a version, pushes its artifact and commits the version.
    Local dependencies are pushed first.
    """
    if quiet:
        logging.disable(logging.CRITICAL)
    else:
        setup_logging(verbose=verbose, debug=debug)

    ctx.obj = Context()
    ctx.obj.verbose = verbose
    ctx.obj.debug = debug
    ctx.obj.quiet = quiet


# Register commands
cli.add_command(push.push)
cli.add_command(install.install)
cli.add_command(uninstall.uninstall)
cli.add_command(clone.clone)
cli.add_command(link.link)
cli.add_command(view.view)


def main():
    """Main entry point for the CLI application

    This function handles:
    - Keyboard interrupts
    - Unexpected exceptions with proper error display
    """
    try:
        cli(prog_name=APP_NAME)

    except KeyboardInterrupt:
        console.print("\n[yellow]Operation cancelled by user[/yellow]")
        sys.exit(130)

    except Exception as e:
        console.print(f"[red]Unexpected error: {e}[/red]")
        if '--debug' in sys.argv or '-d' in sys.argv:
            console.print_exception()
        sys.exit(1)


if __name__ == "__main__":
    main()
