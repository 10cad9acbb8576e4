"""Reservation models for kapeta-registry"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional

from .asset import AssetDefinition
from ..constants import VersionIncrement


class ReservationState(Enum):
    UNRESERVED = "unreserved"
    RESERVED = "reserved"
    # Every reserved version already existed, nothing to settle
    EMPTY = "empty"
    COMMITTED = "committed"
    ABORTED = "aborted"


@dataclass
class ReservationRequest:
    """Request for version numbers for the assets of one definition file"""
    assets: List[AssetDefinition]
    main_branch: bool
    branch_name: Optional[str]
    commit: Optional[str]
    checksum: Optional[str]
    minimum_increment: VersionIncrement = VersionIncrement.NONE

    def to_dict(self) -> Dict[str, Any]:
        return {
            'assets': [a.to_dict() for a in self.assets],
            'mainBranch': self.main_branch,
            'branchName': self.branch_name,
            'commit': self.commit,
            'checksum': self.checksum,
            'minimumIncrement': self.minimum_increment.value
        }


@dataclass
class ReservedVersion:
    owner_id: str
    version: str
    content: AssetDefinition
    exists: bool = False

    @property
    def name(self) -> Optional[str]:
        return self.content.name

    def to_dict(self) -> Dict[str, Any]:
        return {
            'ownerId': self.owner_id,
            'version': self.version,
            'content': self.content.to_dict(),
            'exists': self.exists
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'ReservedVersion':
        return cls(
            owner_id=data.get('ownerId', ''),
            version=data['version'],
            content=AssetDefinition.from_dict(data.get('content') or {}),
            exists=bool(data.get('exists', False))
        )


@dataclass
class Reservation:
    """Server issued, time bounded claim on version numbers"""
    id: str
    expires: Optional[str] = None
    versions: List[ReservedVersion] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'expires': self.expires,
            'versions': [v.to_dict() for v in self.versions]
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Reservation':
        expires = data.get('expires')
        return cls(
            id=data['id'],
            expires=str(expires) if expires is not None else None,
            versions=[ReservedVersion.from_dict(v) for v in data.get('versions') or []]
        )
