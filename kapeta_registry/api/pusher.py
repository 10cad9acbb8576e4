"""Pusher API for publishing assets"""

import logging
import os
from pathlib import Path
from typing import Optional, Type, Union

from ..artifacts import ArtifactFactory
from ..core import LoggingProgressReporter, PathResolver, ProgressReporter, PushContext, RegistryClient
from ..models import Config, PushOptions, PushResult
from ..services import ConfigService, InstallService, LinkService, PushOperation, RegistryService
from ..utils.async_utils import run_async
from ..vcs import VCSFactory


class Pusher:
    """Links, publishes and installs the asset in a directory"""

    def __init__(self,
                 config: Optional[Config] = None,
                 registry: Optional[RegistryClient] = None,
                 progress: Optional[ProgressReporter] = None,
                 path_resolver: Optional[PathResolver] = None,
                 vcs_factory: Type[VCSFactory] = VCSFactory,
                 artifact_factory: Type[ArtifactFactory] = ArtifactFactory):
        """
        Initialize pusher

        Args:
            config: Tool configuration. Loaded from disk if not given
            registry: Registry client. Built from config if not given
            progress: Progress reporter
            path_resolver: Local repository path conventions
            vcs_factory: Version control backend factory
            artifact_factory: Artifact backend factory
        """
        self.config = config or ConfigService().config
        self.registry = registry
        self.progress = progress or LoggingProgressReporter()
        self.path_resolver = path_resolver or PathResolver(self.config.kapeta_home)
        self.vcs_factory = vcs_factory
        self.artifact_factory = artifact_factory
        self.logger = logging.getLogger(self.__class__.__name__)

    def _create_registry(self, options: PushOptions) -> RegistryClient:
        url = (options.registry or self.config.registry.url).rstrip('/')
        return RegistryService(
            url,
            access_token=self.config.registry.access_token,
            handle=self.config.registry.handle
        )

    def push(self, path: Union[str, Path, None] = None, options: Optional[PushOptions] = None) -> PushResult:
        """
        Push the asset in a directory

        Args:
            path: Asset directory or definition file. Defaults to the current directory
            options: Push flags

        Returns:
            PushResult: References of the published versions
        """
        return run_async(self.push_async(path, options))

    async def push_async(self,
                         path: Union[str, Path, None] = None,
                         options: Optional[PushOptions] = None) -> PushResult:
        """Async push implementation"""
        options = options or PushOptions()
        path = Path(path or os.getcwd())
        registry = self.registry or self._create_registry(options)

        operation = PushOperation(
            path,
            options=options,
            registry=registry,
            context=PushContext(max_depth=options.max_depth),
            config=self.config,
            vcs_factory=self.vcs_factory,
            artifact_factory=self.artifact_factory,
            path_resolver=self.path_resolver,
            progress=self.progress
        )

        title = f"Push {operation.file}"
        self.progress.start(title)
        try:
            if not options.skip_linking and not options.dry_run:
                self.progress.info("Linking local version")
                LinkService(self.path_resolver, self.progress, operation.loader).link(operation.directory)

            result = await operation.perform()

            if result.main_branch and not options.skip_install and not options.dry_run and result.references:
                service = InstallService(
                    registry,
                    self.config.registry,
                    self.path_resolver,
                    artifact_factory=self.artifact_factory,
                    progress=self.progress
                )
                await self.progress.progress(
                    "Installing new versions",
                    service.install(result.references, skip_dependencies=True)
                )
            self.progress.end(title, True)
            return result
        except Exception as e:
            self.progress.end(title, False)
            self.progress.error("Push failed")
            self.logger.debug(f"Push of {path} failed: {e}", exc_info=True)
            raise
        finally:
            if self.registry is None:
                await registry.close()


def push(path: Union[str, Path, None] = None, **options) -> PushResult:
    """
    Push an asset (convenience function)

    Args:
        path: Asset directory or definition file
        **options: PushOptions fields, e.g. dry_run=True, skip_tests=True

    Returns:
        PushResult: Push result
    """
    return Pusher().push(path, PushOptions.from_dict(options))
