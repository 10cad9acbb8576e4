"""Docker artifact backend"""

import base64
import json
import logging
import shlex
import shutil
import tempfile
from pathlib import Path
from typing import Any, Dict, List, Optional
from urllib.parse import urlparse

from .base import ArtifactBackend
from ..constants import ArtifactType
from ..core.registry_client import RegistryClient
from ..models import Artifact
from ..utils.hash_utils import calculate_paths_hash
from ..utils.process_utils import run_command
from ..utils.version_utils import VersionFormatter

DOCKERFILE = "Dockerfile"
DOCKER_INFO_FILE = "docker-info.json"


def parse_build_context_entries(dockerfile: Path) -> List[str]:
    """
    Find the build context paths a Dockerfile copies into the image

    Args:
        dockerfile: Path to Dockerfile

    Returns:
        Relative source paths of COPY/ADD instructions
    """
    entries = []
    for raw_line in dockerfile.read_text(encoding='utf-8').splitlines():
        line = raw_line.strip()
        parts = line.split(None, 1)
        if len(parts) < 2 or parts[0].upper() not in ('COPY', 'ADD'):
            continue

        rest = parts[1].strip()
        if rest.startswith('['):
            try:
                args = json.loads(rest)
            except ValueError:
                continue
        else:
            args = shlex.split(rest)

        # Copies between build stages do not read the build context
        if any(arg.startswith('--from') for arg in args):
            continue

        sources = [a for a in args if not a.startswith('--')][:-1]
        for source in sources:
            if '://' in source:
                continue
            entries.append(source)
    return entries


class DockerBackend(ArtifactBackend):
    """Builds and pushes multi-platform docker images"""

    type = ArtifactType.DOCKER.value
    name = "Docker"

    def __init__(self, directory, registry_config=None, access_token=None, progress=None):
        super().__init__(directory, registry_config, access_token, progress)
        host = self.registry_config.docker
        self.host = urlparse(host).netloc if '://' in host else host
        self._config_dir: Optional[Path] = None
        self.logger = logging.getLogger(self.__class__.__name__)

    @classmethod
    def is_supported(cls, directory: Path) -> bool:
        return (Path(directory) / DOCKERFILE).is_file()

    def get_image_name(self, name: str) -> str:
        if self.host:
            return f"{self.host}/{name}".lower()
        return name.lower()

    def get_tags(self, name: str, version: str, commit: Optional[str] = None) -> List[str]:
        """Full, minor and major version tags plus the commit id"""
        image = self.get_image_name(name)
        formatter = VersionFormatter(version)
        tags = [
            f"{image}:{formatter.to_full()}",
            f"{image}:{formatter.to_minor()}",
            f"{image}:{formatter.to_major()}",
        ]
        if commit:
            tags.append(f"{image}:{commit}")
        return tags

    def _ensure_config(self) -> Path:
        """Write a docker client config holding registry credentials"""
        if self._config_dir is None:
            self._config_dir = Path(tempfile.mkdtemp(prefix='kapeta-docker-'))
            token = self.access_token or 'anonymous'
            auth = base64.b64encode(f"kapeta:{token}".encode('utf-8')).decode('ascii')
            config = {
                'auths': {self.host: {'auth': auth}},
                'credHelpers': {self.host: ''}
            }
            (self._config_dir / 'config.json').write_text(json.dumps(config, indent=2))
            self.logger.debug(f"Wrote docker configuration to {self._config_dir}")
        return self._config_dir

    def _docker_env(self) -> Dict[str, str]:
        return {'DOCKER_CONFIG': str(self._ensure_config())}

    def cleanup(self) -> None:
        if self._config_dir is not None:
            shutil.rmtree(self._config_dir, ignore_errors=True)
            self._config_dir = None

    async def verify(self) -> None:
        await self.progress.progress("Checking docker", self.run('docker', 'version'))

    async def calculate_checksum(self) -> str:
        dockerfile = self.directory / DOCKERFILE
        entries = [dockerfile]
        for entry in parse_build_context_entries(dockerfile):
            path = (self.directory / entry).resolve()
            if path.exists() and self.directory.resolve() in (path, *path.parents):
                entries.append(path)
        checksum = await calculate_paths_hash(self.directory.resolve(), [e.resolve() for e in entries])
        self.progress.info(f"Checksum: {checksum}")
        return checksum

    async def build(self) -> None:
        # Images are built during push
        pass

    async def test(self) -> None:
        pass

    async def _platforms(self) -> List[str]:
        platforms = ['linux/amd64']
        result = await run_command(
            ['docker', 'buildx', 'inspect'],
            cwd=self.directory,
            env=self._docker_env(),
            check=False
        )
        if result.ok and 'linux/arm64' in result.stdout:
            platforms.append('linux/arm64')
        return platforms

    async def push(self, name: str, version: str, commit: Optional[str]) -> Artifact:
        tags = self.get_tags(name, version, commit)
        platforms = await self._platforms()

        args = ['docker', 'buildx', 'build', '--platform', ','.join(platforms)]
        for tag in tags:
            args.extend(['-t', tag])
        args.extend(['--push', '.'])

        await self.progress.progress(
            f"Building docker image for {name}:{version}",
            self.run(*args, env=self._docker_env())
        )

        image = self.get_image_name(name)
        return Artifact(
            type=self.type,
            details={
                'name': image,
                'primary': f"{image}:{version}",
                'tags': tags
            }
        )

    async def pull(self, details: Dict[str, Any], target: Path, registry: RegistryClient) -> None:
        primary = details['primary']
        image, _, tag = primary.rpartition(':')
        if not image or '/' in tag:
            image, tag = primary, 'latest'

        await self.progress.progress(
            f"Pulling docker image: {primary}",
            self.run('docker', 'pull', f"{image}:{tag}", env=self._docker_env())
        )

        target.mkdir(parents=True, exist_ok=True)
        (target / DOCKER_INFO_FILE).write_text(json.dumps(details, indent=2))
