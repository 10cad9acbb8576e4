"""Git version control backend"""

import logging
import os
import re
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

from .base import BranchInfo, VCSBackend
from ..api.exceptions import CommandError, VCSError
from ..constants import ENV_RELEASE_BRANCH, VCSType
from ..utils.process_utils import CommandResult, run_command

_HEAD_BRANCH_PATTERN = re.compile(r"HEAD branch: (.+)")
_BEHIND_PATTERN = re.compile(r"behind (\d+)")
_CLOUD_REMOTE_PATTERN = re.compile(r"bitbucket|github|gitlab", re.IGNORECASE)

# Separates messages in git log output
_LOG_SEPARATOR = "\x00"


class GitBackend(VCSBackend):
    """Version control backend that shells out to the git client"""

    type = VCSType.GIT.value
    name = "Git"

    def __init__(self, progress=None):
        super().__init__(progress)
        self.logger = logging.getLogger(self.__class__.__name__)

    @classmethod
    async def detect(cls, directory: Path) -> bool:
        result = await run_command(
            ['git', 'rev-parse', '--is-inside-work-tree'],
            cwd=directory,
            check=False
        )
        return result.ok and result.stdout.strip() == 'true'

    async def _git(self, directory: Path, *args: str, check: bool = True) -> CommandResult:
        return await run_command(['git', *args], cwd=directory, check=check)

    async def _status(self, directory: Path) -> Tuple[str, List[str]]:
        """Get the branch header line and the file lines of git status"""
        result = await self._git(directory, 'status', '--porcelain=v1', '--branch')
        lines = [line for line in result.stdout.splitlines() if line]
        header = ''
        if lines and lines[0].startswith('## '):
            header = lines.pop(0)[3:]
        return header, lines

    async def _remotes(self, directory: Path) -> Dict[str, Dict[str, str]]:
        """Get remotes with their fetch and push urls"""
        result = await self._git(directory, 'remote', '-v')
        remotes: Dict[str, Dict[str, str]] = {}
        for line in result.stdout.splitlines():
            parts = line.split()
            if len(parts) < 3:
                continue
            name, url, kind = parts[0], parts[1], parts[2].strip('()')
            remotes.setdefault(name, {})[kind] = url
        return remotes

    async def get_remote(self, directory: Path) -> Tuple[str, str]:
        """
        Identify the remote and branch to use

        Args:
            directory: Repository directory

        Returns:
            Tuple of (remote, branch)
        """
        header, _ = await self._status(directory)
        local, _, rest = header.partition('...')
        tracking = rest.split(' ', 1)[0] if rest else ''

        if tracking and '/' in tracking:
            remote, branch = tracking.split('/', 1)
            return remote.strip(), branch.strip()

        branch = local.strip()
        if not branch or branch.startswith('HEAD') or branch.startswith('No commits'):
            raise VCSError("Failed to identify current branch in git repository.")

        remotes = await self._remotes(directory)
        if not remotes:
            raise VCSError("No remotes defined for git repository.")

        if len(remotes) == 1:
            return next(iter(remotes)), branch

        if 'origin' in remotes:
            return 'origin', branch

        for name, urls in remotes.items():
            if _CLOUD_REMOTE_PATTERN.search(urls.get('push', '')):
                return name, branch

        raise VCSError("Failed to identify remote to use and local branch is not tracking any.")

    async def get_latest_commit(self, directory: Path) -> Optional[str]:
        result = await self._git(directory, 'log', '-n', '1', '--format=%H', check=False)
        commit = result.stdout.strip()
        return commit if result.ok and commit else None

    async def get_commits_since(self, directory: Path, commit: str) -> List[str]:
        log_format = f'--format=%B{_LOG_SEPARATOR}'
        try:
            result = await self._git(directory, 'log', log_format, f'{commit}..HEAD')
        except CommandError as e:
            # Unknown commit, e.g. after a force push. Use the latest commit instead
            self.logger.warning(f"Failed to get git log from commit {commit}, using latest commit: {e}")
            result = await self._git(directory, 'log', '-n', '1', log_format)

        return [
            message.strip()
            for message in result.stdout.split(_LOG_SEPARATOR)
            if message.strip()
        ]

    async def get_branch(self, directory: Path) -> BranchInfo:
        remote, branch = await self.get_remote(directory)
        result = await self._git(directory, 'remote', 'show', remote)

        match = _HEAD_BRANCH_PATTERN.search(result.stdout)
        default_branch = match.group(1).strip() if match else ''
        if not default_branch:
            raise VCSError(
                f"Could not determine default branch from git remote: {remote}, current branch: {branch}"
            )

        release_branch = os.environ.get(ENV_RELEASE_BRANCH)
        return BranchInfo(
            branch=branch,
            main=branch == default_branch or (bool(release_branch) and branch == release_branch)
        )

    async def get_checkout_info(self, directory: Path) -> Dict[str, Any]:
        remote, branch = await self.get_remote(directory)
        remotes = await self._remotes(directory)

        result = await self._git(directory, 'rev-parse', '--show-toplevel')
        top_level = Path(result.stdout.strip()).resolve()

        try:
            relative = Path(directory).resolve().relative_to(top_level).as_posix()
        except ValueError:
            relative = '.'
        relative_path = '.' if relative in ('', '.') else f'./{relative}'

        url = remotes.get(remote, {}).get('fetch')
        if not url:
            raise VCSError(
                "Failed to identify remote checkout url to use. "
                "Verify that your local repository is properly configured."
            )

        return {
            'url': url,
            'remote': remote,
            'branch': branch,
            'path': relative_path
        }

    async def is_working_directory_clean(self, directory: Path) -> bool:
        await self._git(directory, 'remote', 'update')
        _, files = await self._status(directory)
        tracked = [line for line in files if not line.startswith('??')]
        return len(tracked) == 0

    async def is_working_directory_up_to_date(self, directory: Path) -> bool:
        await self._git(directory, 'remote', 'update')
        header, _ = await self._status(directory)
        match = _BEHIND_PATTERN.search(header)
        return match is None or int(match.group(1)) == 0

    async def tag(self, directory: Path, tag: str) -> bool:
        remote, _ = await self.get_remote(directory)
        result = await self._git(directory, 'tag', '--list', tag)

        if tag in [t.strip() for t in result.stdout.splitlines()]:
            # Replace existing tag locally and remotely
            await self._git(directory, 'tag', '-d', tag)
            await self._git(directory, 'push', remote, '--delete', tag, check=False)

        self.logger.debug(f"Tagging latest commit: {tag}")
        await self._git(directory, 'tag', tag)
        return True

    async def push_tags(self, directory: Path) -> None:
        remote, _ = await self.get_remote(directory)
        self.logger.debug(f"Pushing tags to git remote: {remote}")
        await self._git(directory, 'push', remote, '--tags')

    async def clone(self, checkout_info: Dict[str, Any], checkout_id: str, target: Path) -> Path:
        target = Path(target)
        url = checkout_info['url']
        sub_path = checkout_info.get('path') or '.'

        if target.exists() and await self.detect(target):
            existing = await self.get_checkout_info(target)
            if existing['url'] != url:
                raise VCSError(f"Git repository already exists in {target} and does not match {url}")
            self.progress.check("Git repository existed and matched", True)
        else:
            clone_url = url
            if clone_url.startswith('https://github.com/'):
                clone_url = clone_url.replace('https://github.com/', 'git@github.com:') + '.git'

            target.parent.mkdir(parents=True, exist_ok=True)
            if sub_path != '.':
                await self.progress.progress(
                    f"Cloning sparse git repository {clone_url} to {target}",
                    self._sparse_clone(clone_url, target, sub_path)
                )
            else:
                await self.progress.progress(
                    f"Cloning git repository {clone_url} to {target}",
                    run_command(['git', 'clone', clone_url, str(target)])
                )

        await self.progress.progress(
            f"Checking out {checkout_id}",
            self._git(target, 'checkout', checkout_id)
        )

        return target / sub_path

    async def _sparse_clone(self, url: str, target: Path, sub_path: str) -> None:
        await run_command(['git', 'clone', '--no-checkout', url, str(target)])
        await self._git(target, 'config', 'core.sparsecheckout', 'true')
        sparse_file = target / '.git' / 'info' / 'sparse-checkout'
        sparse_file.parent.mkdir(parents=True, exist_ok=True)
        sparse_file.write_text(sub_path[2:] if sub_path.startswith('./') else sub_path)
