"""Install and uninstall published assets in the local repository"""

import logging
import shutil
import tempfile
from pathlib import Path
from typing import List, Optional, Set, Type

import yaml

from ..api.exceptions import AssetNotFoundError, InstallError
from ..artifacts import ArtifactFactory
from ..constants import ASSET_FILE, CURRENT_VERSION, EMOJI_SUCCESS
from ..core import LoggingProgressReporter, PathResolver, ProgressReporter, RegistryClient
from ..models import AssetVersion, InstallResult, OperationStatus, RegistryConfig
from ..utils.file_utils import safe_remove
from ..utils.uri_utils import AssetUri, parse_asset_uri


class InstallService:
    """Pulls published versions into ``<home>/repository``"""

    def __init__(self,
                 registry: RegistryClient,
                 registry_config: RegistryConfig = None,
                 path_resolver: PathResolver = None,
                 artifact_factory: Type[ArtifactFactory] = ArtifactFactory,
                 progress: ProgressReporter = None):
        """
        Initialize install service

        Args:
            registry: Registry client
            registry_config: Registry settings for the artifact backends
            path_resolver: Local repository path conventions
            artifact_factory: Artifact backend factory
            progress: Progress reporter
        """
        self.registry = registry
        self.registry_config = registry_config or RegistryConfig()
        self.path_resolver = path_resolver or PathResolver()
        self.artifact_factory = artifact_factory
        self.progress = progress or LoggingProgressReporter()
        self.logger = logging.getLogger(self.__class__.__name__)

    async def install(self,
                      uris: List[str],
                      skip_dependencies: bool = False,
                      attempted: Optional[Set[str]] = None) -> List[InstallResult]:
        """
        Install asset versions and, unless skipped, their dependencies

        A failing asset does not stop the others from being installed.

        Args:
            uris: Asset references
            skip_dependencies: Only install the given references
            attempted: References already tried in this run

        Returns:
            One result per attempted reference
        """
        attempted = attempted if attempted is not None else set()
        dependencies: List[str] = []
        results = []

        for uri in uris:
            try:
                asset_uri = parse_asset_uri(uri, default_handle=self.registry_config.handle)
                asset_version = await self.progress.progress(
                    f"Loading {uri}",
                    self.registry.get_version(asset_uri.full_name, asset_uri.version or CURRENT_VERSION)
                )
                if asset_version is None:
                    raise AssetNotFoundError(asset_uri.full_name, asset_uri.version or CURRENT_VERSION)

                attempted.add(f"{asset_uri.full_name}:{asset_version.version}")
                results.append(await self._install_version(asset_uri, asset_version))

                for dependency in asset_version.dependencies:
                    if dependency.name not in dependencies:
                        dependencies.append(dependency.name)
            except Exception as e:
                self.logger.debug("Install failed", exc_info=True)
                self.progress.error(f"Failed to install {uri}: {e}")
                results.append(InstallResult(reference=uri, status=OperationStatus.FAILED, error=str(e)))

        if skip_dependencies:
            return results

        remaining = [d for d in dependencies if self._dependency_key(d) not in attempted]
        if remaining:
            results.extend(await self.progress.progress(
                f"Installing {len(remaining)} dependencies",
                self.install(remaining, skip_dependencies, attempted)
            ))
        return results

    def _dependency_key(self, reference: str) -> str:
        try:
            return parse_asset_uri(reference, default_handle=self.registry_config.handle).id
        except ValueError:
            return reference

    async def _install_version(self, asset_uri: AssetUri, asset_version: AssetVersion) -> InstallResult:
        reference = f"{asset_uri.full_name}:{asset_version.version}"
        if not asset_version.artifact or not asset_version.artifact.type:
            raise InstallError(f"Registration is missing artifact information: {reference}")

        install_path = self.path_resolver.get_repository_asset_path(
            asset_uri.handle, asset_uri.name, asset_version.version
        )
        if self.path_resolver.get_version_file(install_path).is_file():
            self.progress.check(f"Asset already installed at {install_path}", True)
            return InstallResult(reference=reference, status=OperationStatus.SKIPPED, path=str(install_path))

        temp_dir = Path(tempfile.mkdtemp(prefix='kapeta-asset-install-'))
        source_dir = temp_dir / 'source'
        target_dir = temp_dir / 'install'
        source_dir.mkdir()
        target_dir.mkdir()

        backend = self.artifact_factory.create_by_type(
            asset_version.artifact.type,
            source_dir,
            self.registry_config,
            self.registry_config.access_token,
            self.progress
        )

        try:
            await self.progress.progress(
                f"Downloading using {backend.name}",
                backend.pull(asset_version.artifact.details, source_dir, self.registry)
            )
            await self.progress.progress(
                f"Installing in {target_dir}",
                backend.install(source_dir, target_dir)
            )

            # The package may hold several definitions, the record holds the published one
            asset_file = target_dir / ASSET_FILE
            asset_file.write_text(
                yaml.safe_dump(asset_version.content.to_dict(), default_flow_style=False, sort_keys=False),
                encoding='utf-8'
            )
            version_file = self.path_resolver.get_version_file(target_dir)
            version_file.parent.mkdir(parents=True, exist_ok=True)
            version_file.write_text(
                yaml.safe_dump(asset_version.to_dict(), default_flow_style=False, sort_keys=False),
                encoding='utf-8'
            )

            install_path.parent.mkdir(parents=True, exist_ok=True)
            safe_remove(install_path)
            shutil.move(str(target_dir), str(install_path))
        finally:
            backend.cleanup()
            shutil.rmtree(temp_dir, ignore_errors=True)

        self.progress.info(f"{EMOJI_SUCCESS} Installed {reference} in {install_path}")
        return InstallResult(reference=reference, status=OperationStatus.SUCCESS, path=str(install_path))

    def uninstall(self, uris: List[str]) -> List[InstallResult]:
        """
        Remove installed asset versions

        Args:
            uris: Asset references with version

        Returns:
            One result per reference; SKIPPED when not installed
        """
        self.progress.info("Removing assets")
        results = []
        for uri in uris:
            asset_uri = parse_asset_uri(uri, default_handle=self.registry_config.handle)
            path = self.path_resolver.get_repository_asset_path(
                asset_uri.handle, asset_uri.name, asset_uri.version or CURRENT_VERSION
            )

            if not path.exists() and not path.is_symlink():
                self.progress.check(f"Asset not installed: {uri}", False)
                results.append(InstallResult(reference=uri, status=OperationStatus.SKIPPED, path=str(path)))
                continue

            if not safe_remove(path):
                raise InstallError(f"Failed to remove {path}")

            self.progress.check(f"Removed asset: {uri}", True)
            results.append(InstallResult(reference=uri, status=OperationStatus.SUCCESS, path=str(path)))
        return results
