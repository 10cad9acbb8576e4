"""Hash calculation utilities"""

import hashlib
from pathlib import Path
from typing import Iterable

import aiofiles


async def calculate_file_hash_async(file_path: Path,
                                    algorithm: str = "sha256",
                                    chunk_size: int = 8192) -> str:
    """
    Calculate file hash asynchronously

    Args:
        file_path: Path to file
        algorithm: Hash algorithm
        chunk_size: Read chunk size

    Returns:
        Hex digest string
    """
    hash_func = hashlib.new(algorithm)

    async with aiofiles.open(file_path, 'rb') as f:
        while True:
            chunk = await f.read(chunk_size)
            if not chunk:
                break
            hash_func.update(chunk)

    return hash_func.hexdigest()


def _collect_files(base_dir: Path, entries: Iterable[Path], include_hidden: bool):
    files = {}
    for entry in entries:
        candidates = sorted(entry.rglob('*')) if entry.is_dir() else [entry]
        for file_path in candidates:
            if not file_path.is_file():
                continue
            rel_path = file_path.relative_to(base_dir)
            if not include_hidden and any(part.startswith('.') for part in rel_path.parts):
                continue
            files[rel_path.as_posix()] = file_path
    return sorted(files.items())


async def calculate_paths_hash(base_dir: Path,
                               entries: Iterable[Path],
                               algorithm: str = "sha256",
                               include_hidden: bool = False) -> str:
    """
    Calculate hash over a set of files and directories

    Each file contributes its path relative to ``base_dir`` and its content,
    in sorted path order, so the digest is stable across machines.

    Args:
        base_dir: Directory paths are made relative to
        entries: Files or directories under base_dir
        algorithm: Hash algorithm
        include_hidden: Include hidden files

    Returns:
        Hex digest string
    """
    hash_func = hashlib.new(algorithm)

    for rel_path, file_path in _collect_files(base_dir, entries, include_hidden):
        hash_func.update(rel_path.encode('utf-8'))
        hash_func.update(b'\x00')  # Separator

        async with aiofiles.open(file_path, 'rb') as f:
            while True:
                chunk = await f.read(8192)
                if not chunk:
                    break
                hash_func.update(chunk)

        hash_func.update(b'\x00')  # File separator

    return hash_func.hexdigest()


async def calculate_directory_hash(directory: Path,
                                   algorithm: str = "sha256",
                                   include_hidden: bool = False) -> str:
    """
    Calculate hash of directory contents

    Args:
        directory: Directory path
        algorithm: Hash algorithm
        include_hidden: Include hidden files

    Returns:
        Hex digest of directory structure
    """
    return await calculate_paths_hash(directory, [directory], algorithm, include_hidden)
