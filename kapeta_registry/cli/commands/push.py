"""Push command implementation"""

import sys

import click

from ..utils.output import format_push_result, print_failure
from ...api import Pusher
from ...constants import DEFAULT_MAX_DEPTH
from ...models import PushOptions


@click.command()
@click.argument('path', required=False, type=click.Path(file_okay=True, dir_okay=True))
@click.option('--registry', '-r', default=None, help='Registry URL to push to')
@click.option('--dry-run', is_flag=True,
              help='Build, test and reserve versions without pushing or committing')
@click.option('--skip-tests', is_flag=True, help='Do not run tests')
@click.option('--skip-install', is_flag=True, help='Do not install the pushed versions locally')
@click.option('--skip-linking', is_flag=True, help='Do not link the working copy locally')
@click.option('--ignore-working-directory', is_flag=True,
              help='Push even if the working directory is dirty or behind its remote')
@click.option('--max-depth', default=DEFAULT_MAX_DEPTH, show_default=True, type=int,
              help='Maximum nesting of local dependency pushes')
@click.option('--interactive', '-i', is_flag=True,
              help='Prompt before making changes')
@click.option('--verbose', '-v', 'verbose_flag', is_flag=True, help='Show stack traces on failure')
@click.pass_context
def push(ctx, path, registry, dry_run, skip_tests, skip_install, skip_linking,
         ignore_working_directory, max_depth, interactive, verbose_flag):
    """Push the asset in PATH (default: current directory)

    Local dependencies (version "local") are pushed first and the asset is
    rewritten to reference the versions they got.

    Examples:
        # Push the asset in the current directory
        kapeta-registry push

        # Check what would be pushed
        kapeta-registry push --dry-run ./my-block
    """
    verbose = verbose_flag or ctx.obj.verbose or ctx.obj.debug
    options = PushOptions(
        dry_run=dry_run,
        skip_tests=skip_tests,
        skip_install=skip_install,
        skip_linking=skip_linking,
        ignore_working_directory=ignore_working_directory,
        verbose=verbose,
        interactive=interactive,
        registry=registry,
        max_depth=max_depth
    )

    if interactive and not dry_run:
        click.confirm(f"Push {path or 'current directory'} to the registry?", abort=True)

    try:
        pusher = Pusher(config=ctx.obj.config, progress=ctx.obj.progress)
        result = pusher.push(path, options)
    except Exception as e:
        print_failure("Push failed", e, verbose)
        sys.exit(1)

    format_push_result(result)
