"""Install command implementation"""

import sys

import click

from ..utils.output import format_install_results, print_failure
from ...api import install as install_assets
from ...models import OperationStatus


@click.command()
@click.argument('uris', nargs=-1, required=True)
@click.option('--registry', '-r', default=None, help='Registry URL to install from')
@click.option('--skip-dependencies', is_flag=True, help='Do not install dependencies')
@click.pass_context
def install(ctx, uris, registry, skip_dependencies):
    """Install asset versions into the local repository

    Examples:
        kapeta-registry install kapeta://kapeta/user-service:1.2.0
    """
    try:
        results = install_assets(
            list(uris),
            skip_dependencies=skip_dependencies,
            registry_url=registry,
            config=ctx.obj.config,
            progress=ctx.obj.progress
        )
    except Exception as e:
        print_failure("Install failed", e, ctx.obj.verbose or ctx.obj.debug)
        sys.exit(1)

    format_install_results(results)
    if any(r.status == OperationStatus.FAILED for r in results):
        sys.exit(1)
