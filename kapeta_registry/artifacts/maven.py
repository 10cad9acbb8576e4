"""Maven artifact backend"""

import logging
import shutil
import tempfile
import xml.etree.ElementTree as ET
from pathlib import Path
from typing import Any, Dict, Optional

from .base import ArtifactBackend
from ..api.exceptions import BuildError
from ..constants import ArtifactType
from ..core.registry_client import RegistryClient
from ..models import Artifact
from ..utils.hash_utils import calculate_paths_hash

POM_FILE = "pom.xml"
MAVEN_SERVER_ID = "kapeta"
POM_NAMESPACE = "http://maven.apache.org/POM/4.0.0"
SETTINGS_NAMESPACE = "http://maven.apache.org/SETTINGS/1.1.0"


def _local_name(tag: str) -> str:
    return tag.rsplit('}', 1)[-1]


def _find_child(parent: ET.Element, name: str) -> Optional[ET.Element]:
    for child in parent:
        if _local_name(child.tag) == name:
            return child
    return None


def _namespaced(parent: ET.Element, name: str) -> str:
    """Tag name in the namespace of ``parent``"""
    if parent.tag.startswith('{'):
        return parent.tag.split('}', 1)[0] + '}' + name
    return name


def set_pom_coordinates(pom_path: Path, group_id: str, artifact_id: str, version: str) -> None:
    """
    Rewrite groupId, artifactId and version of a pom.xml

    Args:
        pom_path: Path to pom.xml
        group_id: New groupId
        artifact_id: New artifactId
        version: New version
    """
    ET.register_namespace('', POM_NAMESPACE)
    tree = ET.parse(pom_path)
    project = tree.getroot()

    for name, value in (('groupId', group_id), ('artifactId', artifact_id), ('version', version)):
        element = _find_child(project, name)
        if element is None:
            element = ET.SubElement(project, _namespaced(project, name))
        element.text = value

    tree.write(pom_path, encoding='utf-8', xml_declaration=True)


class MavenBackend(ArtifactBackend):
    """Builds with maven and deploys jars to the Kapeta maven repository"""

    type = ArtifactType.MAVEN.value
    name = "Maven"

    def __init__(self, directory, registry_config=None, access_token=None, progress=None):
        super().__init__(directory, registry_config, access_token, progress)
        self.repository_url = self.registry_config.maven
        self._settings_file: Optional[Path] = None
        self.logger = logging.getLogger(self.__class__.__name__)

    @classmethod
    def is_supported(cls, directory: Path) -> bool:
        return (Path(directory) / POM_FILE).is_file()

    def _ensure_settings(self) -> Path:
        """Write maven settings with the Kapeta server credentials

        Starts from the user's ~/.m2/settings.xml when there is one; the
        result is always written to a temporary file.
        """
        if self._settings_file is not None:
            return self._settings_file

        ET.register_namespace('', SETTINGS_NAMESPACE)
        user_settings = Path.home() / '.m2' / 'settings.xml'
        if user_settings.is_file():
            root = ET.parse(user_settings).getroot()
        else:
            root = ET.Element(f"{{{SETTINGS_NAMESPACE}}}settings")

        servers = _find_child(root, 'servers')
        if servers is None:
            servers = ET.SubElement(root, _namespaced(root, 'servers'))

        for server in list(servers):
            server_id = _find_child(server, 'id')
            if server_id is not None and server_id.text == MAVEN_SERVER_ID:
                servers.remove(server)

        server = ET.SubElement(servers, _namespaced(root, 'server'))
        ET.SubElement(server, _namespaced(root, 'id')).text = MAVEN_SERVER_ID
        configuration = ET.SubElement(server, _namespaced(root, 'configuration'))
        headers = ET.SubElement(configuration, _namespaced(root, 'httpHeaders'))
        header = ET.SubElement(headers, _namespaced(root, 'property'))
        ET.SubElement(header, _namespaced(root, 'name')).text = 'Authorization'
        ET.SubElement(header, _namespaced(root, 'value')).text = (
            f"Bearer {self.access_token}" if self.access_token else 'anonymous'
        )

        handle, path = tempfile.mkstemp(prefix='kapeta-maven-', suffix='.xml')
        with open(handle, 'wb') as f:
            ET.ElementTree(root).write(f, encoding='utf-8', xml_declaration=True)
        self._settings_file = Path(path)
        self.logger.debug(f"Wrote maven settings to {self._settings_file}")
        return self._settings_file

    def cleanup(self) -> None:
        if self._settings_file is not None:
            self._settings_file.unlink(missing_ok=True)
            self._settings_file = None

    async def verify(self) -> None:
        self._require_executable('mvn')
        self.progress.check("Checking if MVN is available", True)

    async def calculate_checksum(self) -> str:
        target_dir = self.directory / 'target'
        jars = sorted(target_dir.glob('*.jar')) if target_dir.is_dir() else []
        if not jars:
            raise BuildError(f"No jar files found in {target_dir}. Build the project first")
        return await calculate_paths_hash(target_dir, jars)

    async def build(self) -> None:
        await self.progress.progress(
            "Building maven package",
            self.run('mvn', '-U', 'clean', 'package', '-B')
        )

    async def test(self) -> None:
        await self.progress.progress(
            "Testing maven package",
            self.run('mvn', '-U', 'test', '-B')
        )

    async def push(self, name: str, version: str, commit: Optional[str]) -> Artifact:
        group_id, artifact_id = name.split('/', 1)
        pom = self.directory / POM_FILE
        backup = self.directory / (POM_FILE + '.original')
        shutil.copy2(pom, backup)

        try:
            set_pom_coordinates(pom, group_id, artifact_id, version)
            await self.progress.progress(
                f"Deploying maven package: {group_id}:{artifact_id}[{version}]",
                self.run(
                    'mvn', '--settings', str(self._ensure_settings()),
                    'deploy', '-B', '-DskipTests=1',
                    f"-DaltDeploymentRepository={MAVEN_SERVER_ID}::default::{self.repository_url}"
                )
            )
        finally:
            backup.replace(pom)

        return Artifact(
            type=self.type,
            details={
                'groupId': group_id,
                'artifactId': artifact_id,
                'version': version,
                'registry': self.repository_url
            }
        )

    async def pull(self, details: Dict[str, Any], target: Path, registry: RegistryClient) -> None:
        artifact = f"{details['groupId']}:{details['artifactId']}:{details['version']}"
        repository = f"{MAVEN_SERVER_ID}::default::{details.get('registry') or self.repository_url}"
        target.mkdir(parents=True, exist_ok=True)
        await self.progress.progress(
            "Pulling maven package",
            self.run(
                'mvn', '-U', '--settings', str(self._ensure_settings()),
                'dependency:get', '-B',
                f"-Ddest={target}",
                f"-Dartifact={artifact}",
                f"-DremoteRepositories={repository}",
                cwd=target
            )
        )
