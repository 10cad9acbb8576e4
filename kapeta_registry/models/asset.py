"""Asset models for kapeta-registry"""

import copy
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from ..constants import ATTACHMENT_FORMAT_BASE64


@dataclass
class Attachment:
    """File embedded in a published asset record"""
    filename: str
    content_type: str
    value: str
    format: str = ATTACHMENT_FORMAT_BASE64

    def to_dict(self) -> Dict[str, Any]:
        return {
            'filename': self.filename,
            'contentType': self.content_type,
            'content': {
                'format': self.format,
                'value': self.value
            }
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Attachment':
        content = data.get('content') or {}
        return cls(
            filename=data['filename'],
            content_type=data.get('contentType', 'application/octet-stream'),
            value=content.get('value', ''),
            format=content.get('format', ATTACHMENT_FORMAT_BASE64)
        )


@dataclass
class AssetDefinition:
    """One document of an asset definition file

    Unknown top-level keys are carried in ``extra`` so that the document
    survives a round trip through the registry unchanged.
    """
    kind: str
    metadata: Dict[str, Any]
    spec: Dict[str, Any] = field(default_factory=dict)
    attachments: List[Attachment] = field(default_factory=list)
    extra: Dict[str, Any] = field(default_factory=dict)

    @property
    def name(self) -> Optional[str]:
        """Full asset name (handle/name)"""
        return self.metadata.get('name')

    @property
    def handle(self) -> Optional[str]:
        name = self.name or ''
        return name.split('/', 1)[0] if '/' in name else None

    def set_attachment(self, attachment: Attachment) -> None:
        """Add attachment, replacing any existing one with the same filename"""
        self.attachments = [a for a in self.attachments if a.filename != attachment.filename]
        self.attachments.append(attachment)

    def copy(self) -> 'AssetDefinition':
        return copy.deepcopy(self)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON/YAML serialization"""
        data = {
            'kind': self.kind,
            'metadata': copy.deepcopy(self.metadata),
        }
        if self.spec:
            data['spec'] = copy.deepcopy(self.spec)
        data.update(copy.deepcopy(self.extra))
        if self.attachments:
            data['attachments'] = [a.to_dict() for a in self.attachments]
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'AssetDefinition':
        """Create from dictionary"""
        extra = {
            k: copy.deepcopy(v) for k, v in data.items()
            if k not in ('kind', 'metadata', 'spec', 'attachments')
        }
        return cls(
            kind=data.get('kind') or '',
            metadata=copy.deepcopy(data.get('metadata') or {}),
            spec=copy.deepcopy(data.get('spec') or {}),
            attachments=[Attachment.from_dict(a) for a in data.get('attachments') or []],
            extra=extra
        )


@dataclass
class AssetReference:
    """Dependency pointer. ``name`` has the form handle/name:version"""
    name: str
    type: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        data = {'name': self.name}
        if self.type:
            data['type'] = self.type
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'AssetReference':
        return cls(name=data['name'], type=data.get('type'))


@dataclass
class ReferenceMap:
    """Rewrite of a local dependency to its published reference"""
    from_ref: str
    to_ref: str

    def to_dict(self) -> Dict[str, str]:
        return {'from': self.from_ref, 'to': self.to_ref}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'ReferenceMap':
        return cls(from_ref=data['from'], to_ref=data['to'])


@dataclass
class ReadmeData:
    type: str
    content: str

    def to_dict(self) -> Dict[str, str]:
        return {'type': self.type, 'content': self.content}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'ReadmeData':
        return cls(type=data.get('type', 'text'), content=data.get('content', ''))


@dataclass
class Artifact:
    """Pushed artifact as reported by an artifact backend"""
    type: str
    details: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {'type': self.type, 'details': dict(self.details)}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Artifact':
        return cls(type=data['type'], details=data.get('details') or {})


@dataclass
class Repository:
    """Version control provenance of a published version"""
    type: Optional[str]
    main: bool
    commit: Optional[str] = None
    branch: Optional[str] = None
    details: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'type': self.type,
            'main': self.main,
            'commit': self.commit,
            'branch': self.branch,
            'details': dict(self.details)
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Repository':
        return cls(
            type=data.get('type'),
            main=bool(data.get('main', False)),
            commit=data.get('commit'),
            branch=data.get('branch'),
            details=data.get('details') or {}
        )


@dataclass
class AssetVersion:
    """Published version record"""
    version: str
    content: AssetDefinition
    checksum: Optional[str] = None
    artifact: Optional[Artifact] = None
    repository: Optional[Repository] = None
    dependencies: List[AssetReference] = field(default_factory=list)
    readme: Optional[ReadmeData] = None
    current: bool = False

    def to_dict(self) -> Dict[str, Any]:
        data = {
            'version': self.version,
            'content': self.content.to_dict(),
            'checksum': self.checksum,
            'current': self.current,
            'dependencies': [d.to_dict() for d in self.dependencies],
        }
        if self.artifact:
            data['artifact'] = self.artifact.to_dict()
        if self.repository:
            data['repository'] = self.repository.to_dict()
        if self.readme:
            data['readme'] = self.readme.to_dict()
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'AssetVersion':
        return cls(
            version=data['version'],
            content=AssetDefinition.from_dict(data.get('content') or {}),
            checksum=data.get('checksum'),
            artifact=Artifact.from_dict(data['artifact']) if data.get('artifact') else None,
            repository=Repository.from_dict(data['repository']) if data.get('repository') else None,
            dependencies=[AssetReference.from_dict(d) for d in data.get('dependencies') or []],
            readme=ReadmeData.from_dict(data['readme']) if data.get('readme') else None,
            current=bool(data.get('current', False))
        )
