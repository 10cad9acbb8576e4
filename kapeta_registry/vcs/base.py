"""Version control backend abstract base class"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Optional

from ..core.progress import LoggingProgressReporter, ProgressReporter


@dataclass
class BranchInfo:
    """Current branch and whether it is a main (release) branch"""
    branch: str
    main: bool


class VCSBackend(ABC):
    """Abstract base class for version control backends"""

    #: Type stored in published repository records
    type: str = ""

    #: Display name
    name: str = ""

    def __init__(self, progress: ProgressReporter = None):
        self.progress = progress or LoggingProgressReporter()

    @classmethod
    @abstractmethod
    async def detect(cls, directory: Path) -> bool:
        """Check if directory is under this kind of version control"""
        pass

    async def is_repo(self, directory: Path) -> bool:
        return await self.detect(directory)

    @abstractmethod
    async def get_latest_commit(self, directory: Path) -> Optional[str]:
        """Get id of the checked out commit"""
        pass

    @abstractmethod
    async def get_commits_since(self, directory: Path, commit: str) -> List[str]:
        """Get full messages of commits made after ``commit``"""
        pass

    @abstractmethod
    async def get_branch(self, directory: Path) -> BranchInfo:
        pass

    @abstractmethod
    async def get_checkout_info(self, directory: Path) -> Dict[str, Any]:
        """Get details needed to clone this directory again"""
        pass

    @abstractmethod
    async def is_working_directory_clean(self, directory: Path) -> bool:
        pass

    @abstractmethod
    async def is_working_directory_up_to_date(self, directory: Path) -> bool:
        pass

    @abstractmethod
    async def tag(self, directory: Path, tag: str) -> bool:
        """Tag the checked out commit"""
        pass

    @abstractmethod
    async def push_tags(self, directory: Path) -> None:
        pass

    @abstractmethod
    async def clone(self, checkout_info: Dict[str, Any], checkout_id: str, target: Path) -> Path:
        """
        Clone a repository and check out a commit

        Args:
            checkout_info: Details from get_checkout_info
            checkout_id: Commit to check out
            target: Target directory

        Returns:
            Directory of the asset inside the clone
        """
        pass
