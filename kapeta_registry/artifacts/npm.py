"""NPM artifact backend"""

import json
import logging
import shutil
import tarfile
from pathlib import Path
from typing import Any, Dict, List, Optional
from urllib.parse import urlparse

from .base import ArtifactBackend
from ..api.exceptions import BuildError, CommandError, InstallError
from ..constants import ArtifactType
from ..core.registry_client import RegistryClient
from ..models import Artifact
from ..utils.process_utils import run_command

PACKAGE_FILE = "package.json"
BACKUP_SUFFIX = ".original"


class NPMBackend(ArtifactBackend):
    """Publishes assets as scoped NPM packages"""

    type = ArtifactType.NPM.value
    name = "NPM"

    def __init__(self, directory, registry_config=None, access_token=None, progress=None):
        super().__init__(directory, registry_config, access_token, progress)
        self.registry_url = self.registry_config.npm.rstrip('/') + '/'
        self.logger = logging.getLogger(self.__class__.__name__)

    @classmethod
    def is_supported(cls, directory: Path) -> bool:
        return (Path(directory) / PACKAGE_FILE).is_file()

    def _read_package(self) -> Dict[str, Any]:
        return json.loads((self.directory / PACKAGE_FILE).read_text(encoding='utf-8'))

    def _write_package(self, package: Dict[str, Any]) -> None:
        (self.directory / PACKAGE_FILE).write_text(json.dumps(package, indent=2), encoding='utf-8')

    def _backup(self, filenames: List[str]) -> None:
        for filename in filenames:
            original = self.directory / filename
            backup = self.directory / (filename + BACKUP_SUFFIX)
            if backup.exists():
                backup.unlink()
            if original.exists():
                shutil.copy2(original, backup)

    def _restore(self, filenames: List[str]) -> None:
        for filename in filenames:
            original = self.directory / filename
            backup = self.directory / (filename + BACKUP_SUFFIX)
            if backup.exists():
                backup.replace(original)
            elif original.exists():
                # File did not exist before we wrote it
                original.unlink()

    def _npmrc_lines(self, scope: str, registry_url: str) -> List[str]:
        host = urlparse(registry_url).netloc
        return [
            f"@{scope}:registry={registry_url}",
            f"//{host}/:_authToken={self.access_token or ''}",
        ]

    def _configure_access(self, scope: str, registry_url: Optional[str] = None) -> None:
        """Point the scope at the registry in a project level .npmrc"""
        self._backup(['.npmrc'])
        npmrc = self.directory / '.npmrc'
        existing = npmrc.read_text(encoding='utf-8') if npmrc.exists() else ''
        lines = [existing.rstrip('\n')] if existing else []
        lines.extend(self._npmrc_lines(scope, registry_url or self.registry_url))
        npmrc.write_text('\n'.join(lines) + '\n', encoding='utf-8')

    async def verify(self) -> None:
        self._require_executable('npm')
        self.progress.check("Finding NPM executable", True)

    async def calculate_checksum(self) -> str:
        result = await self.progress.progress(
            "Calculating checksum",
            self.run('npm', 'pack', '--dry-run', '--json')
        )
        try:
            pack_info = json.loads(result.stdout) if result.stdout.strip() else []
        except ValueError:
            pack_info = []

        if pack_info:
            info = pack_info[0]
            if info.get('integrity'):
                return info['integrity']
            if info.get('shasum'):
                return info['shasum']

        raise BuildError("Failed to get checksum using npm pack")

    async def build(self) -> None:
        await self.progress.progress(
            "Installing NPM package",
            self.run('npm', 'install', env={'NODE_ENV': 'development'})
        )
        if 'build' in (self._read_package().get('scripts') or {}):
            await self.progress.progress(
                "Building NPM package",
                self.run('npm', 'run', 'build', env={'NODE_ENV': 'development'})
            )
        else:
            self.progress.warn("Not building using NPM - no build script found")

    async def test(self) -> None:
        if 'test' in (self._read_package().get('scripts') or {}):
            await self.progress.progress(
                "Testing NPM package",
                self.run('npm', 'run', 'test', env={'NODE_ENV': 'development'})
            )
        else:
            self.progress.warn("Not testing using NPM - no test script found")

    async def version_exists(self, package_name: str, version: str) -> bool:
        result = await run_command(
            ['npm', 'view', '--registry', self.registry_url, f"{package_name}@{version}", 'version'],
            cwd=self.directory,
            check=False
        )
        return result.ok and result.stdout.strip() == version

    async def push(self, name: str, version: str, commit: Optional[str]) -> Artifact:
        scope = name.split('/', 1)[0]
        npm_name = f"@{name}"
        changed_package = False

        self._configure_access(scope)
        try:
            if await self.version_exists(npm_name, version):
                raise BuildError(f"NPM version already exists [{npm_name}:{version}] - can not be overwritten")
            self.progress.info("NPM registry did not contain version. Proceeding...")

            package = self._read_package()
            if package.get('name') != npm_name or package.get('version') != version:
                self._backup([PACKAGE_FILE, 'package-lock.json'])
                package['name'] = npm_name
                package['version'] = version
                self._write_package(package)
                changed_package = True

            await self.progress.progress(
                f"Pushing NPM package: {npm_name}:{version}",
                self.run('npm', 'publish', '--registry', self.registry_url)
            )
        finally:
            if changed_package:
                self._restore([PACKAGE_FILE, 'package-lock.json'])
            self._restore(['.npmrc'])

        return Artifact(
            type=self.type,
            details={
                'name': name,
                'version': version,
                'registry': self.registry_url
            }
        )

    async def pull(self, details: Dict[str, Any], target: Path, registry: RegistryClient) -> None:
        scope = details['name'].split('/', 1)[0]
        registry_url = details.get('registry') or self.registry_url
        target.mkdir(parents=True, exist_ok=True)

        self._configure_access(scope, registry_url)
        try:
            await self.progress.progress(
                f"Pulling NPM package: {details['name']}:{details['version']}",
                self.run(
                    'npm', 'pack',
                    '--registry', registry_url,
                    f"--pack-destination={target}",
                    f"@{details['name']}@{details['version']}"
                )
            )
        finally:
            self._restore(['.npmrc'])

    async def install(self, source: Path, target: Path) -> None:
        archives = sorted(source.glob('*.tgz'))
        if len(archives) != 1:
            raise InstallError(f"Invalid kapeta asset: expected one package archive in {source}")

        if target.exists():
            shutil.rmtree(target)
        target.mkdir(parents=True)

        self.progress.info(f"Extracting tar file: {archives[0]} to {target}")
        with tarfile.open(archives[0], 'r:gz') as archive:
            for member in archive.getmembers():
                # Drop the archive's root directory
                parts = Path(member.name).parts[1:]
                if not parts or '..' in parts:
                    continue
                member.name = str(Path(*parts))
                archive.extract(member, target)

        package = json.loads((target / PACKAGE_FILE).read_text(encoding='utf-8'))
        if not package.get('bundledDependencies') and not package.get('bundleDependencies'):
            try:
                await run_command(
                    ['npm', 'install', '--omit=dev'],
                    cwd=target,
                    env={'NODE_ENV': 'production'}
                )
            except CommandError as e:
                raise InstallError(f"Failed to install NPM dependencies: {e}")
