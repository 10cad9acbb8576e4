"""
Shared test fixtures and in-memory collaborators for the kapeta-registry test suite.
"""

from pathlib import Path
from typing import Any, Dict, List, Optional

import pytest
import yaml

from kapeta_registry.artifacts import ArtifactBackend
from kapeta_registry.core import PushContext, RegistryClient
from kapeta_registry.models import (
    Artifact,
    AssetDefinition,
    AssetReference,
    AssetVersion,
    Config,
    PushOptions,
    RegistryConfig,
    Reservation,
    ReservedVersion,
)
from kapeta_registry.services import PushOperation
from kapeta_registry.vcs import BranchInfo, VCSBackend


# ============================================================================
# Fake registry
# ============================================================================


class FakeRegistry(RegistryClient):
    """Registry keeping everything in memory and recording every call"""

    def __init__(self, events: List[tuple]):
        self.events = events
        self.dependencies: Dict[str, List[AssetReference]] = {}
        self.next_versions: Dict[str, str] = {}
        self.existing: set = set()
        self.latest: Dict[str, AssetVersion] = {}
        self.versions: Dict[str, AssetVersion] = {}
        self.requests = []
        self.committed: Dict[str, List[AssetVersion]] = {}
        self.fail_commit: Optional[Exception] = None
        self.fail_abort: Optional[Exception] = None
        self.return_no_reservation = False
        self._reservations = 0

    async def resolve_dependencies(self, asset):
        self.events.append(('resolve', asset.name))
        return list(self.dependencies.get(asset.name, []))

    async def update_dependencies(self, asset, mappings):
        self.events.append(('update', asset.name, [(m.from_ref, m.to_ref) for m in mappings]))
        updated = asset.copy()
        updated.spec['resolved'] = [m.to_ref for m in mappings]
        return updated

    async def reserve_versions(self, request):
        self.requests.append(request)
        self.events.append(('reserve', [a.name for a in request.assets]))
        if self.return_no_reservation:
            return None

        self._reservations += 1
        versions = [
            ReservedVersion(
                owner_id='owner',
                version=self.next_versions.get(asset.name, '1.0.0'),
                content=asset.copy(),
                exists=asset.name in self.existing
            )
            for asset in request.assets
        ]
        return Reservation(id=f"reservation-{self._reservations}", expires='2099-01-01', versions=versions)

    async def commit_reservation(self, reservation_id, versions):
        self.events.append(('commit', reservation_id, [f"{v.content.name}:{v.version}" for v in versions]))
        if self.fail_commit:
            raise self.fail_commit
        self.committed[reservation_id] = list(versions)
        for version in versions:
            self.versions[f"{version.content.name}:{version.version}"] = version

    async def abort_reservation(self, reservation):
        self.events.append(('abort', reservation.id))
        if self.fail_abort:
            raise self.fail_abort

    async def get_version(self, name, version=None):
        self.events.append(('get_version', name, version))
        return self.versions.get(f"{name}:{version}")

    async def get_latest_version(self, name):
        self.events.append(('get_latest_version', name))
        return self.latest.get(name)

    def calls(self, kind: str) -> List[tuple]:
        return [e for e in self.events if e[0] == kind]


# ============================================================================
# Fake version control
# ============================================================================


class FakeVCS(VCSBackend):
    """Version control backend answering from attributes"""

    type = "git"
    name = "Git"

    def __init__(self, events: List[tuple]):
        super().__init__()
        self.events = events
        self.clean = True
        self.up_to_date = True
        self.commit = 'abc123'
        self.branch = BranchInfo(branch='master', main=True)
        self.commit_messages: List[str] = []
        self.tags: List[str] = []
        self.fail_tag: Optional[Exception] = None
        self.fail_push_tags: Optional[Exception] = None
        self.pushed_tags = 0

    @classmethod
    async def detect(cls, directory):
        return True

    async def get_latest_commit(self, directory):
        return self.commit

    async def get_commits_since(self, directory, commit):
        self.events.append(('commits_since', commit))
        return list(self.commit_messages)

    async def get_branch(self, directory):
        return self.branch

    async def get_checkout_info(self, directory):
        return {'url': 'https://github.com/acme/assets', 'remote': 'origin', 'branch': 'master', 'path': '.'}

    async def is_working_directory_clean(self, directory):
        return self.clean

    async def is_working_directory_up_to_date(self, directory):
        return self.up_to_date

    async def tag(self, directory, tag):
        if self.fail_tag:
            raise self.fail_tag
        self.tags.append(tag)
        self.events.append(('tag', tag))
        return True

    async def push_tags(self, directory):
        if self.fail_push_tags:
            raise self.fail_push_tags
        self.pushed_tags += 1

    async def clone(self, checkout_info, checkout_id, target):
        self.events.append(('clone', checkout_info['url'], checkout_id, str(target)))
        target = Path(target)
        target.mkdir(parents=True, exist_ok=True)
        return target


class FakeVCSFactory:
    """Hands out one shared FakeVCS, or none"""

    def __init__(self, vcs: Optional[FakeVCS]):
        self.vcs = vcs

    async def create_for_directory(self, directory, progress=None):
        return self.vcs

    def create_by_type(self, vcs_type, progress=None):
        return self.vcs


# ============================================================================
# Fake artifacts
# ============================================================================


class FakeArtifactBackend(ArtifactBackend):
    """Artifact backend recording build steps instead of running tools"""

    type = "fake"
    name = "Fake"

    def __init__(self, directory, events: List[tuple], failures: Dict[str, Exception]):
        super().__init__(directory)
        self.events = events
        self.failures = failures

    def _step(self, step: str, *args: Any) -> None:
        self.events.append((step, self.directory.name) + args)
        if step in self.failures:
            raise self.failures[step]

    async def verify(self):
        self._step('verify')

    async def calculate_checksum(self):
        self._step('checksum')
        return f"sha256:{self.directory.name}"

    async def build(self):
        self._step('build')

    async def test(self):
        self._step('test')

    async def push(self, name, version, commit):
        self._step('push', name, version)
        return Artifact(type=self.type, details={'name': name, 'version': version, 'commit': commit})

    async def pull(self, details, target, registry):
        self._step('pull')

    def cleanup(self):
        self.events.append(('cleanup', self.directory.name))


class FakeArtifactFactory:
    def __init__(self, events: List[tuple]):
        self.events = events
        self.failures: Dict[str, Exception] = {}
        self.kinds: List[str] = []

    def create(self, base_kind, directory, registry_config=None, access_token=None, progress=None):
        self.kinds.append(base_kind)
        return FakeArtifactBackend(directory, self.events, self.failures)

    def create_by_type(self, artifact_type, directory, registry_config=None, access_token=None, progress=None):
        return FakeArtifactBackend(directory, self.events, self.failures)


# ============================================================================
# Helpers
# ============================================================================


def write_assets(directory: Path, *documents: Dict[str, Any]) -> Path:
    """Write a kapeta.yml holding the given documents"""
    directory.mkdir(parents=True, exist_ok=True)
    path = directory / 'kapeta.yml'
    path.write_text(yaml.safe_dump_all(list(documents), sort_keys=False))
    return path


def block(name: str, kind: str = 'core/block-type') -> Dict[str, Any]:
    return {'kind': kind, 'metadata': {'name': name}, 'spec': {}}


def event_names(events: List[tuple]) -> List[str]:
    return [e[0] for e in events]


@pytest.fixture
def events():
    return []


@pytest.fixture
def registry(events):
    return FakeRegistry(events)


@pytest.fixture
def vcs(events):
    return FakeVCS(events)


@pytest.fixture
def artifacts(events):
    return FakeArtifactFactory(events)


@pytest.fixture
def kapeta_home(tmp_path):
    home = tmp_path / 'kapeta-home'
    home.mkdir()
    return home


@pytest.fixture
def config(kapeta_home):
    return Config(registry=RegistryConfig(url='http://registry.test'), kapeta_home=kapeta_home)


@pytest.fixture
def make_operation(registry, vcs, artifacts, config):
    """Build a PushOperation wired to the in-memory collaborators"""

    def _make(directory: Path, with_vcs: bool = True, context: PushContext = None, **options):
        return PushOperation(
            directory,
            options=PushOptions(**options),
            registry=registry,
            context=context,
            config=config,
            vcs_factory=FakeVCSFactory(vcs if with_vcs else None),
            artifact_factory=artifacts
        )

    return _make


@pytest.fixture
def published_version():
    """Build an AssetVersion as the registry would return it"""

    def _make(name: str, version: str, commit: Optional[str] = None, artifact_type: str = 'yaml'):
        data = {
            'version': version,
            'content': {'kind': 'core/block-type', 'metadata': {'name': name}, 'spec': {}},
            'artifact': {'type': artifact_type, 'details': {'name': name, 'version': version}},
        }
        if commit:
            data['repository'] = {
                'type': 'git',
                'main': True,
                'commit': commit,
                'branch': 'master',
                'details': {'url': 'https://github.com/acme/assets', 'path': name.split('/')[-1]},
            }
        return AssetVersion.from_dict(data)

    return _make


__all__ = [
    'AssetDefinition',
    'FakeRegistry',
    'FakeVCS',
    'FakeVCSFactory',
    'FakeArtifactBackend',
    'FakeArtifactFactory',
    'write_assets',
    'block',
    'event_names',
]
