"""YAML artifact backend for assets that are only a definition file"""

from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from .base import ArtifactBackend
from ..api.exceptions import AssetNotFoundError
from ..constants import ArtifactType
from ..core.registry_client import RegistryClient
from ..models import Artifact


class YAMLBackend(ArtifactBackend):
    """The published definition is the artifact. Nothing is built"""

    type = ArtifactType.YAML.value
    name = "YAML File"

    @classmethod
    def is_supported(cls, directory: Path) -> bool:
        return True

    async def verify(self) -> None:
        pass

    async def calculate_checksum(self) -> str:
        return ''

    async def build(self) -> None:
        pass

    async def test(self) -> None:
        pass

    async def push(self, name: str, version: str, commit: Optional[str]) -> Artifact:
        return Artifact(
            type=self.type,
            details={
                'name': name,
                'version': version,
                'commit': commit
            }
        )

    async def pull(self, details: Dict[str, Any], target: Path, registry: RegistryClient) -> None:
        name, version = details['name'], details['version']
        asset_version = await self.progress.progress(
            f"Downloading YAML for {name}:{version}",
            registry.get_version(name, version)
        )
        if asset_version is None:
            raise AssetNotFoundError(name, version)

        target.mkdir(parents=True, exist_ok=True)
        destination = target / f"{name.replace('/', '-')}-{version}.yaml"
        destination.write_text(
            yaml.safe_dump(asset_version.content.to_dict(), default_flow_style=False, sort_keys=False),
            encoding='utf-8'
        )
        self.progress.info(f"Wrote YAML to {destination}")
