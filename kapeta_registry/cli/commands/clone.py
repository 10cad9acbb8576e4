"""Clone command implementation"""

import sys

import click

from ..utils.output import console, print_failure
from ...api import clone as clone_asset


@click.command()
@click.argument('uri')
@click.option('--target', '-t', default=None, type=click.Path(file_okay=False),
              help='Directory to clone into (default: ./<handle>/<name>)')
@click.option('--registry', '-r', default=None, help='Registry URL')
@click.option('--skip-linking', is_flag=True, help='Do not link the clone locally')
@click.pass_context
def clone(ctx, uri, target, registry, skip_linking):
    """Clone the source code of a published asset

    Use version "current" to check out the branch instead of the commit.
    """
    try:
        path = clone_asset(
            uri,
            target=target,
            skip_linking=skip_linking,
            registry_url=registry,
            config=ctx.obj.config,
            progress=ctx.obj.progress
        )
    except Exception as e:
        print_failure("Clone failed", e, ctx.obj.verbose or ctx.obj.debug)
        sys.exit(1)

    console.print(f"[green]✓[/green] Cloned into {path}")
