"""File operation utilities"""

import base64
import os
import shutil
import tempfile
from pathlib import Path
from typing import List, Optional, Union

import aiofiles

from ..constants import ATTACHMENT_FILES, README_FILES, SCRIPT_LOCATIONS
from ..models.asset import Attachment, ReadmeData


async def read_readme(directory: Path) -> Optional[ReadmeData]:
    """
    Read the first README file found in a directory

    Args:
        directory: Asset directory

    Returns:
        README content and type, or None if there is none
    """
    for filename, readme_type in README_FILES:
        path = directory / filename
        if path.is_file():
            async with aiofiles.open(path, 'r', encoding='utf-8', errors='replace') as f:
                content = await f.read()
            return ReadmeData(type=readme_type, content=content)
    return None


async def collect_attachments(directory: Path) -> List[Attachment]:
    """
    Collect well-known config files as base64 attachments

    Args:
        directory: Asset directory

    Returns:
        Attachments for the files that exist
    """
    attachments = []
    for filename, content_type in ATTACHMENT_FILES:
        path = directory / filename
        if not path.is_file():
            continue
        async with aiofiles.open(path, 'rb') as f:
            content = await f.read()
        attachments.append(Attachment(
            filename=filename,
            content_type=content_type,
            value=base64.b64encode(content).decode('ascii')
        ))
    return attachments


def find_script(directory: Path, name: str) -> Optional[Path]:
    """
    Find a user supplied script such as ``build.sh``

    Args:
        directory: Asset directory
        name: Script name without extension

    Returns:
        Script path or None
    """
    for pattern in SCRIPT_LOCATIONS:
        path = directory / pattern.format(name=name)
        if path.is_file():
            return path
    return None


def ensure_symlink(source: Path, link_path: Path) -> bool:
    """
    Point ``link_path`` at ``source``, replacing whatever is there

    Args:
        source: Link target
        link_path: Link location

    Returns:
        True if the link was changed
    """
    source = source.resolve()
    if link_path.is_symlink():
        if Path(os.readlink(link_path)) == source:
            return False
        link_path.unlink()
    elif link_path.exists():
        safe_remove(link_path)

    link_path.parent.mkdir(parents=True, exist_ok=True)
    link_path.symlink_to(source, target_is_directory=True)
    return True


def safe_remove(path: Path) -> bool:
    """
    Safely remove file, directory or link

    Args:
        path: Path to remove

    Returns:
        True if removed
    """
    try:
        if path.is_symlink() or path.is_file():
            path.unlink()
        elif path.is_dir():
            shutil.rmtree(path)
        else:
            return False
        return True
    except OSError:
        return False


def atomic_write(file_path: Path,
                 content: Union[str, bytes],
                 mode: str = 'w') -> None:
    """
    Write file atomically

    Args:
        file_path: Target file path
        content: Content to write
        mode: Write mode
    """
    file_path.parent.mkdir(parents=True, exist_ok=True)
    temp_fd, temp_path = tempfile.mkstemp(dir=file_path.parent)

    try:
        with os.fdopen(temp_fd, mode) as f:
            f.write(content)
        os.replace(temp_path, file_path)
    except Exception:
        if os.path.exists(temp_path):
            os.unlink(temp_path)
        raise
