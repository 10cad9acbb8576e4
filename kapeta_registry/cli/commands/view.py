"""View command implementation"""

import sys

import click

from ..utils.output import format_asset_version, print_failure
from ...api import view as view_asset


@click.command()
@click.argument('uri')
@click.option('--registry', '-r', default=None, help='Registry URL')
@click.pass_context
def view(ctx, uri, registry):
    """Show the published record of an asset version"""
    try:
        asset_version = view_asset(uri, registry_url=registry, config=ctx.obj.config)
    except Exception as e:
        print_failure("View failed", e, ctx.obj.verbose or ctx.obj.debug)
        sys.exit(1)

    format_asset_version(asset_version)
