"""Install, uninstall, link, clone and view operations"""

from pathlib import Path
from typing import List, Optional, Union

from .exceptions import AssetNotFoundError
from ..constants import CURRENT_VERSION
from ..core import LoggingProgressReporter, PathResolver, ProgressReporter
from ..models import AssetVersion, Config, InstallResult
from ..services import ConfigService, InstallService, LinkService, RegistryService
from ..utils.async_utils import run_async
from ..utils.uri_utils import parse_asset_uri


def _context(config: Optional[Config], registry_url: Optional[str]):
    config = config or ConfigService().config
    registry = RegistryService(
        (registry_url or config.registry.url).rstrip('/'),
        access_token=config.registry.access_token,
        handle=config.registry.handle
    )
    return config, registry


def install(uris: List[str],
            skip_dependencies: bool = False,
            registry_url: Optional[str] = None,
            config: Optional[Config] = None,
            progress: Optional[ProgressReporter] = None) -> List[InstallResult]:
    """
    Install asset versions into the local repository

    Args:
        uris: Asset references, e.g. ``kapeta://handle/name:1.0.0``
        skip_dependencies: Do not install dependencies
        registry_url: Registry URL override
        config: Tool configuration
        progress: Progress reporter

    Returns:
        One result per attempted reference
    """
    config, registry = _context(config, registry_url)

    async def _install():
        try:
            service = InstallService(
                registry,
                config.registry,
                PathResolver(config.kapeta_home),
                progress=progress or LoggingProgressReporter()
            )
            return await service.install(uris, skip_dependencies=skip_dependencies)
        finally:
            await registry.close()

    return run_async(_install())


def uninstall(uris: List[str],
              config: Optional[Config] = None,
              progress: Optional[ProgressReporter] = None) -> List[InstallResult]:
    """Remove installed asset versions"""
    config = config or ConfigService().config
    service = InstallService(
        registry=None,
        registry_config=config.registry,
        path_resolver=PathResolver(config.kapeta_home),
        progress=progress
    )
    return service.uninstall(uris)


def link(source: Union[str, Path, None] = None,
         config: Optional[Config] = None,
         progress: Optional[ProgressReporter] = None) -> List[Path]:
    """Link a working copy as the ``local`` version of its asset"""
    config = config or ConfigService().config
    return LinkService(PathResolver(config.kapeta_home), progress).link(source)


def clone(uri: str,
          target: Union[str, Path, None] = None,
          skip_linking: bool = False,
          registry_url: Optional[str] = None,
          config: Optional[Config] = None,
          progress: Optional[ProgressReporter] = None) -> Path:
    """
    Clone the source code of a published version

    Returns:
        Directory of the asset inside the clone
    """
    config, registry = _context(config, registry_url)
    service = LinkService(PathResolver(config.kapeta_home), progress)

    async def _clone():
        try:
            return await service.clone(registry, uri, target, skip_linking)
        finally:
            await registry.close()

    return run_async(_clone())


def view(uri: str,
         registry_url: Optional[str] = None,
         config: Optional[Config] = None) -> AssetVersion:
    """
    Fetch the published record of a version

    Raises:
        AssetNotFoundError: If the registry does not know the version
    """
    config, registry = _context(config, registry_url)
    asset_uri = parse_asset_uri(uri, default_handle=config.registry.handle)
    version = asset_uri.version or CURRENT_VERSION

    async def _view():
        try:
            return await registry.get_version(asset_uri.full_name, version)
        finally:
            await registry.close()

    asset_version = run_async(_view())
    if asset_version is None:
        raise AssetNotFoundError(asset_uri.full_name, version)
    return asset_version
