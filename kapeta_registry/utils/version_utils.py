"""Version management utilities"""

import logging
import re
from typing import Iterable, List, Optional

from packaging.version import InvalidVersion, Version, parse

from ..constants import (
    COMMIT_BREAKING_HEADER_PATTERN,
    COMMIT_BREAKING_NOTE_KEYWORDS,
    COMMIT_HEADER_PATTERN,
    TAG_PREFIX,
    VERSION_PATTERN,
    VersionIncrement,
)

logger = logging.getLogger(__name__)

_NOTE_PATTERN = re.compile(
    r"^[\s|*]*(" + "|".join(re.escape(k) for k in COMMIT_BREAKING_NOTE_KEYWORDS) + r")[:\s]+(.*)",
    re.IGNORECASE
)


def parse_version(version_str: str) -> Optional[Version]:
    """
    Parse version string

    Args:
        version_str: Version string

    Returns:
        Version object or None if invalid
    """
    try:
        return parse(version_str)
    except InvalidVersion:
        return None


def is_valid_version(version: str) -> bool:
    """
    Check if version string is a semantic version

    Args:
        version: Version string

    Returns:
        True if valid
    """
    return bool(version) and VERSION_PATTERN.match(version) is not None


def compare_versions(version1: str, version2: str) -> int:
    """
    Compare two versions

    Args:
        version1: First version
        version2: Second version

    Returns:
        -1 if version1 < version2, 0 if equal, 1 if version1 > version2
    """
    v1 = parse_version(version1)
    v2 = parse_version(version2)

    if v1 is None or v2 is None:
        # Fallback to string comparison
        return (version1 > version2) - (version1 < version2)

    return (v1 > v2) - (v1 < v2)


def highest_version(versions: Iterable[str]) -> Optional[str]:
    """Get the highest of the given versions"""
    result = None
    for version in versions:
        if result is None or compare_versions(version, result) > 0:
            result = version
    return result


class VersionFormatter:
    """Shortened renderings of a semantic version

    Pre-release and build suffixes are kept on every rendering, so
    ``1.2.3-beta.1`` has the major version ``1-beta.1``.
    """

    def __init__(self, version: str):
        match = VERSION_PATTERN.match(version or '')
        if not match:
            raise ValueError(f"Invalid version: {version}")
        self.major = int(match.group('major'))
        self.minor = int(match.group('minor'))
        self.patch = int(match.group('patch'))
        self.suffix = match.group('suffix') or ''

    def to_major(self) -> str:
        return f"{self.major}{self.suffix}"

    def to_minor(self) -> str:
        return f"{self.major}.{self.minor}{self.suffix}"

    def to_full(self) -> str:
        return f"{self.major}.{self.minor}.{self.patch}{self.suffix}"

    def __str__(self) -> str:
        return self.to_full()


def _classify_commit(message: str) -> Optional[VersionIncrement]:
    """Classify a single commit message

    Returns None for messages that are not conventional commits.
    """
    lines = (message or '').strip().splitlines()
    if not lines:
        return None

    header = lines[0].strip()
    match = COMMIT_HEADER_PATTERN.match(header)
    if not match or not match.group(1):
        return None

    if COMMIT_BREAKING_HEADER_PATTERN.match(header):
        return VersionIncrement.MAJOR

    if any(_NOTE_PATTERN.match(line) for line in lines[1:]):
        return VersionIncrement.MAJOR

    commit_type = match.group(1).lower()
    if commit_type == 'feat':
        return VersionIncrement.MINOR
    if commit_type == 'fix':
        return VersionIncrement.PATCH
    return VersionIncrement.NONE


def calculate_version_increment(commit_messages: List[str]) -> VersionIncrement:
    """
    Calculate the minimum version increment from a commit log

    ``feat`` commits require a minor bump, ``fix`` commits a patch bump and
    breaking changes (``type!:`` headers or ``BREAKING CHANGE`` notes) a
    major bump. A log without any feat/fix/breaking commit still gets a
    patch bump; an empty log gets none.

    Args:
        commit_messages: Full commit messages, newest first

    Returns:
        Highest increment seen
    """
    if not commit_messages:
        return VersionIncrement.NONE

    increment = VersionIncrement.NONE
    for message in commit_messages:
        classified = _classify_commit(message)
        if classified is None:
            logger.debug(f"Ignoring non-conventional commit: {message.splitlines()[0] if message else ''}")
            continue
        increment = max_increment(increment, classified)
        if increment == VersionIncrement.MAJOR:
            break

    if increment == VersionIncrement.NONE:
        return VersionIncrement.PATCH
    return increment


def max_increment(*increments: VersionIncrement) -> VersionIncrement:
    """Get the most severe of the given increments"""
    result = VersionIncrement.NONE
    for increment in increments:
        if increment.rank > result.rank:
            result = increment
    return result


def generate_version_tag(version: str, asset_name: Optional[str] = None, prefix: str = TAG_PREFIX) -> str:
    """
    Generate version tag for git

    Args:
        version: Version string
        asset_name: Asset name, appended when a definition file holds several assets
        prefix: Tag prefix

    Returns:
        Version tag
    """
    tag = f"{prefix}{version}"
    if asset_name:
        tag += f"-{asset_name}"
    return tag
