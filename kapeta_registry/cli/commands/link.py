"""Link command implementation"""

import sys

import click

from ..utils.output import console, print_failure
from ...api import link as link_asset


@click.command()
@click.argument('source', required=False, type=click.Path(exists=True, file_okay=False))
@click.pass_context
def link(ctx, source):
    """Link the asset in SOURCE as its "local" version"""
    try:
        links = link_asset(source, config=ctx.obj.config, progress=ctx.obj.progress)
    except Exception as e:
        print_failure("Link failed", e, ctx.obj.verbose or ctx.obj.debug)
        sys.exit(1)

    for path in links:
        console.print(f"[green]✓[/green] {path}")
