"""Operation result models"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional

from .asset import AssetVersion


class OperationStatus(Enum):
    """Operation status"""
    SUCCESS = "success"
    FAILED = "failed"
    SKIPPED = "skipped"


@dataclass
class PushResult:
    """Result of publishing one asset definition file"""
    references: List[str] = field(default_factory=list)
    main_branch: bool = False
    dry_run: bool = False
    versions: List[AssetVersion] = field(default_factory=list)
    tags: List['TagResult'] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'references': list(self.references),
            'mainBranch': self.main_branch,
            'dryRun': self.dry_run,
            'versions': [v.to_dict() for v in self.versions],
            'tags': [t.to_dict() for t in self.tags]
        }


@dataclass
class TagResult:
    """Outcome of a best-effort tagging operation

    A failed tag never fails a publish. The error is kept so callers can
    report it.
    """
    tag: str
    status: OperationStatus
    error: Optional[str] = None

    @property
    def is_success(self) -> bool:
        return self.status == OperationStatus.SUCCESS

    @classmethod
    def ok(cls, tag: str) -> 'TagResult':
        return cls(tag=tag, status=OperationStatus.SUCCESS)

    @classmethod
    def failed(cls, tag: str, error: Exception) -> 'TagResult':
        return cls(tag=tag, status=OperationStatus.FAILED, error=str(error))

    def to_dict(self) -> Dict[str, Any]:
        return {'tag': self.tag, 'status': self.status.value, 'error': self.error}


@dataclass
class InstallResult:
    """Result of installing one asset version locally"""
    reference: str
    status: OperationStatus
    path: Optional[str] = None
    error: Optional[str] = None

    @property
    def is_success(self) -> bool:
        return self.status != OperationStatus.FAILED

    def to_dict(self) -> Dict[str, Any]:
        return {
            'reference': self.reference,
            'status': self.status.value,
            'path': self.path,
            'error': self.error
        }
