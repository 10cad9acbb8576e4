"""Version control backends"""

from .base import BranchInfo, VCSBackend
from .git import GitBackend
from .factory import VCSFactory

__all__ = [
    'BranchInfo',
    'VCSBackend',
    'GitBackend',
    'VCSFactory',
]
