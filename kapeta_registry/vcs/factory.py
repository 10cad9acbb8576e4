"""Version control backend factory"""

from pathlib import Path
from typing import List, Optional, Type

from .base import VCSBackend
from .git import GitBackend
from ..core.progress import ProgressReporter


class VCSFactory:
    """Factory for creating version control backend instances"""

    # Backends in probing order
    _backends: List[Type[VCSBackend]] = [
        GitBackend,
    ]

    @classmethod
    async def create_for_directory(cls,
                                   directory: Path,
                                   progress: ProgressReporter = None) -> Optional[VCSBackend]:
        """Create backend for the version control system managing a directory

        Args:
            directory: Asset directory
            progress: Progress reporter

        Returns:
            Backend instance, or None if the directory is not under version control
        """
        for backend_class in cls._backends:
            if await backend_class.detect(directory):
                return backend_class(progress)
        return None

    @classmethod
    def create_by_type(cls, vcs_type: str, progress: ProgressReporter = None) -> Optional[VCSBackend]:
        """Create backend from a repository type such as ``git``"""
        for backend_class in cls._backends:
            if backend_class.type.lower() == (vcs_type or '').lower():
                return backend_class(progress)
        return None

    @classmethod
    def register_backend(cls, backend_class: Type[VCSBackend]) -> None:
        """Register a new backend, probed before the built-in ones"""
        cls._backends.insert(0, backend_class)

    @classmethod
    def get_supported_types(cls) -> List[str]:
        return [b.type for b in cls._backends]
