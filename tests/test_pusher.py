"""
Tests for the Pusher API: link, publish and install
"""

import pytest

from kapeta_registry.api import Pusher
from kapeta_registry.core import LoggingProgressReporter
from kapeta_registry.models import PushOptions
from kapeta_registry.vcs import BranchInfo

from conftest import FakeVCSFactory, block, event_names, write_assets


class RecordingProgress(LoggingProgressReporter):
    def __init__(self):
        super().__init__()
        self.errors = []

    def error(self, message):
        self.errors.append(message)
        super().error(message)


@pytest.fixture
def pusher(config, registry, vcs, artifacts):
    return Pusher(
        config=config,
        registry=registry,
        progress=RecordingProgress(),
        vcs_factory=FakeVCSFactory(vcs),
        artifact_factory=artifacts
    )


class TestPusher:

    def test_push_links_publishes_and_installs(self, tmp_path, pusher, events, kapeta_home):
        directory = tmp_path / 'a'
        write_assets(directory, block('acme/a'))

        result = pusher.push(directory, PushOptions())

        link = kapeta_home / 'repository' / 'acme' / 'a' / 'local'
        installed = kapeta_home / 'repository' / 'acme' / 'a' / '1.0.0'
        assert result.references == ['kapeta://acme/a:1.0.0']
        assert link.is_symlink()
        assert link.resolve() == directory.resolve()
        assert (installed / '.kapeta' / 'version.yml').is_file()
        assert (installed / 'kapeta.yml').is_file()
        assert 'pull' in event_names(events)

    def test_dry_run_skips_linking_and_install(self, tmp_path, pusher, events, kapeta_home):
        directory = tmp_path / 'a'
        write_assets(directory, block('acme/a'))

        result = pusher.push(directory, PushOptions(dry_run=True))

        assert result.dry_run is True
        assert not (kapeta_home / 'repository').exists()
        assert 'pull' not in event_names(events)

    def test_skip_flags(self, tmp_path, pusher, events, kapeta_home):
        directory = tmp_path / 'a'
        write_assets(directory, block('acme/a'))

        pusher.push(directory, PushOptions(skip_linking=True, skip_install=True))

        assert not (kapeta_home / 'repository' / 'acme' / 'a' / 'local').exists()
        assert 'pull' not in event_names(events)

    def test_no_install_outside_main_branch(self, tmp_path, pusher, vcs, events):
        directory = tmp_path / 'a'
        write_assets(directory, block('acme/a'))
        vcs.branch = BranchInfo(branch='feature', main=False)

        pusher.push(directory, PushOptions(skip_linking=True))

        assert 'pull' not in event_names(events)

    def test_failure_is_reported_and_raised(self, tmp_path, pusher, artifacts):
        directory = tmp_path / 'a'
        write_assets(directory, block('acme/a'))
        artifacts.failures['build'] = RuntimeError('boom')

        with pytest.raises(RuntimeError, match="boom"):
            pusher.push(directory, PushOptions(skip_linking=True))

        assert pusher.progress.errors == ['Push failed']
