"""Artifact backend abstract base class"""

import shutil
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Dict, Optional

from ..core.progress import LoggingProgressReporter, ProgressReporter
from ..core.registry_client import RegistryClient
from ..models import Artifact, RegistryConfig
from ..utils.process_utils import CommandResult, run_command, which
from ..api.exceptions import ArtifactBackendNotFoundError


class ArtifactBackend(ABC):
    """Abstract base class for artifact backends

    A backend packages the asset in one directory with an external
    toolchain (docker, npm, maven) and pushes the result to its registry.
    """

    #: Artifact type stored in published version records
    type: str = ""

    #: Display name
    name: str = ""

    def __init__(self,
                 directory: Path,
                 registry_config: RegistryConfig = None,
                 access_token: Optional[str] = None,
                 progress: ProgressReporter = None):
        """
        Initialize artifact backend

        Args:
            directory: Asset directory
            registry_config: Registry settings (docker/npm/maven hosts)
            access_token: Bearer token for the artifact registries
            progress: Progress reporter
        """
        self.directory = Path(directory)
        self.registry_config = registry_config or RegistryConfig()
        self.access_token = access_token
        self.progress = progress or LoggingProgressReporter()

    @classmethod
    def is_supported(cls, directory: Path) -> bool:
        """Check if this backend can package the asset in a directory"""
        return False

    def _require_executable(self, executable: str) -> None:
        if which(executable) is None:
            raise ArtifactBackendNotFoundError(
                f"{executable} was not found on PATH, it is required for {self.name} assets"
            )

    async def run(self, *args: str, cwd: Path = None, env: Dict[str, str] = None) -> CommandResult:
        """Run a toolchain command in the asset directory"""
        return await run_command(list(args), cwd=cwd or self.directory, env=env)

    @abstractmethod
    async def verify(self) -> None:
        """Check that the toolchain is usable"""
        pass

    @abstractmethod
    async def calculate_checksum(self) -> str:
        """Checksum of the artifact content"""
        pass

    @abstractmethod
    async def build(self) -> None:
        pass

    @abstractmethod
    async def test(self) -> None:
        pass

    @abstractmethod
    async def push(self, name: str, version: str, commit: Optional[str]) -> Artifact:
        """
        Push the artifact

        Args:
            name: Full asset name (handle/name)
            version: Reserved version
            commit: VCS commit id, if any

        Returns:
            Artifact details for the published record
        """
        pass

    @abstractmethod
    async def pull(self, details: Dict[str, Any], target: Path, registry: RegistryClient) -> None:
        """
        Download a published artifact into a directory

        Args:
            details: Artifact details from the version record
            target: Download directory
            registry: Registry client
        """
        pass

    async def install(self, source: Path, target: Path) -> None:
        """Move a pulled artifact into its install location"""
        if target.exists():
            shutil.rmtree(target)
        target.parent.mkdir(parents=True, exist_ok=True)
        shutil.move(str(source), str(target))

    def cleanup(self) -> None:
        """Remove temporary files holding registry credentials"""
        pass
