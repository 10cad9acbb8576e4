"""Uninstall command implementation"""

import sys

import click

from ..utils.output import format_install_results, print_failure
from ...api import uninstall as uninstall_assets


@click.command()
@click.argument('uris', nargs=-1, required=True)
@click.pass_context
def uninstall(ctx, uris):
    """Remove installed asset versions from the local repository"""
    try:
        results = uninstall_assets(list(uris), config=ctx.obj.config, progress=ctx.obj.progress)
    except Exception as e:
        print_failure("Uninstall failed", e, ctx.obj.verbose or ctx.obj.debug)
        sys.exit(1)

    format_install_results(results, title="Uninstall Result")
