"""
Tests for the command line interface
"""

import pytest
from click.testing import CliRunner

from kapeta_registry.api.exceptions import ValidationError
from kapeta_registry.cli.commands import push as push_command
from kapeta_registry.cli.main import cli
from kapeta_registry.models import PushResult


@pytest.fixture
def runner(tmp_path, monkeypatch):
    monkeypatch.setenv('KAPETA_HOME', str(tmp_path / 'home'))
    for name in ('KAPETA_REGISTRY_URL', 'KAPETA_ACCESS_TOKEN'):
        monkeypatch.delenv(name, raising=False)
    return CliRunner()


class RecordingPusher:
    """Stands in for Pusher and remembers how it was called"""

    calls = []
    result = None
    error = None

    def __init__(self, config=None, progress=None, **kwargs):
        self.config = config

    def push(self, path, options):
        RecordingPusher.calls.append((path, options))
        if RecordingPusher.error:
            raise RecordingPusher.error
        return RecordingPusher.result


@pytest.fixture
def pusher(monkeypatch):
    RecordingPusher.calls = []
    RecordingPusher.result = PushResult(references=['kapeta://acme/users:1.0.0'], main_branch=True)
    RecordingPusher.error = None
    monkeypatch.setattr(push_command, 'Pusher', RecordingPusher)
    return RecordingPusher


class TestCli:

    def test_help(self, runner):
        result = runner.invoke(cli, ['--help'])

        assert result.exit_code == 0
        for command in ('push', 'install', 'uninstall', 'clone', 'link', 'view'):
            assert command in result.output

    def test_push_options(self, runner, pusher):
        result = runner.invoke(cli, [
            'push', 'my-block', '--dry-run', '--skip-tests', '--registry', 'https://registry.test',
            '--max-depth', '4'
        ])

        assert result.exit_code == 0, result.output
        path, options = pusher.calls[0]
        assert path == 'my-block'
        assert options.dry_run is True
        assert options.skip_tests is True
        assert options.skip_install is False
        assert options.registry == 'https://registry.test'
        assert options.max_depth == 4
        assert 'kapeta://acme/users:1.0.0' in result.output

    def test_push_failure(self, runner, pusher):
        pusher.error = ValidationError('kapeta.yml is missing metadata.name')

        result = runner.invoke(cli, ['push'])

        assert result.exit_code == 1
        assert 'Push failed' in result.output
        assert 'missing metadata.name' in result.output
        assert 'Traceback' not in result.output

    def test_push_failure_verbose(self, runner, pusher):
        pusher.error = ValidationError('broken')

        result = runner.invoke(cli, ['push', '--verbose'])

        assert result.exit_code == 1
        assert 'Push failed' in result.output
        assert 'Traceback' in result.output

    def test_uninstall_not_installed(self, runner):
        result = runner.invoke(cli, ['uninstall', 'kapeta://acme/users:1.0.0'])

        assert result.exit_code == 0, result.output
        assert 'skipped' in result.output
