"""
Tests for file, hash and process helpers
"""

import base64

import pytest

from kapeta_registry.api.exceptions import CommandError
from kapeta_registry.utils.file_utils import (
    collect_attachments,
    ensure_symlink,
    find_script,
    read_readme,
)
from kapeta_registry.utils.hash_utils import calculate_directory_hash, calculate_paths_hash
from kapeta_registry.utils.process_utils import run_command


class TestAssetFiles:

    @pytest.mark.asyncio
    async def test_readme_preference(self, tmp_path):
        (tmp_path / 'README').write_text('plain')
        (tmp_path / 'README.md').write_text('# markdown')

        readme = await read_readme(tmp_path)

        assert readme.type == 'markdown'
        assert readme.content == '# markdown'

    @pytest.mark.asyncio
    async def test_no_readme(self, tmp_path):
        assert await read_readme(tmp_path) is None

    @pytest.mark.asyncio
    async def test_attachments_are_base64(self, tmp_path):
        (tmp_path / '.kapeta.env').write_text('PORT=80\n')

        attachments = await collect_attachments(tmp_path)

        assert len(attachments) == 1
        assert attachments[0].filename == '.kapeta.env'
        assert attachments[0].content_type == 'text/plain+dotenv'
        assert base64.b64decode(attachments[0].value) == b'PORT=80\n'
        assert attachments[0].to_dict()['content']['format'] == 'base64'

    def test_find_script_order(self, tmp_path):
        (tmp_path / 'build.sh').write_text('')
        (tmp_path / 'scripts').mkdir()
        (tmp_path / 'scripts' / 'build.sh').write_text('')

        assert find_script(tmp_path, 'build') == tmp_path / 'scripts' / 'build.sh'
        assert find_script(tmp_path, 'test') is None

    def test_ensure_symlink(self, tmp_path):
        source = tmp_path / 'source'
        source.mkdir()
        link = tmp_path / 'repo' / 'local'

        assert ensure_symlink(source, link) is True
        assert ensure_symlink(source, link) is False
        assert link.resolve() == source.resolve()


class TestHashing:

    @pytest.mark.asyncio
    async def test_hash_depends_on_paths_and_content(self, tmp_path):
        (tmp_path / 'a.txt').write_text('one')
        first = await calculate_directory_hash(tmp_path)

        (tmp_path / 'a.txt').rename(tmp_path / 'b.txt')
        renamed = await calculate_directory_hash(tmp_path)

        assert first != renamed

    @pytest.mark.asyncio
    async def test_hidden_files_are_ignored(self, tmp_path):
        (tmp_path / 'a.txt').write_text('one')
        before = await calculate_directory_hash(tmp_path)

        (tmp_path / '.cache').write_text('noise')

        assert await calculate_directory_hash(tmp_path) == before

    @pytest.mark.asyncio
    async def test_selected_entries(self, tmp_path):
        (tmp_path / 'src').mkdir()
        (tmp_path / 'src' / 'main.js').write_text('x')
        (tmp_path / 'other.txt').write_text('y')
        before = await calculate_paths_hash(tmp_path, [tmp_path / 'src'])

        (tmp_path / 'other.txt').write_text('changed')

        assert await calculate_paths_hash(tmp_path, [tmp_path / 'src']) == before


class TestRunCommand:

    @pytest.mark.asyncio
    async def test_captures_output(self, tmp_path):
        result = await run_command(['sh', '-c', 'echo hello'], cwd=tmp_path)

        assert result.ok
        assert result.stdout.strip() == 'hello'

    @pytest.mark.asyncio
    async def test_failure_raises(self, tmp_path):
        with pytest.raises(CommandError) as info:
            await run_command(['sh', '-c', 'echo broken >&2; exit 3'], cwd=tmp_path)

        assert info.value.exit_code == 3
        assert 'broken' in str(info.value)

    @pytest.mark.asyncio
    async def test_missing_executable(self, tmp_path):
        result = await run_command(['definitely-not-a-real-command'], check=False)

        assert result.returncode == 127
