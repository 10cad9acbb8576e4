"""Data models for kapeta-registry"""

from .asset import (
    AssetDefinition,
    AssetReference,
    AssetVersion,
    Artifact,
    Attachment,
    ReadmeData,
    ReferenceMap,
    Repository,
)
from .reservation import (
    Reservation,
    ReservationRequest,
    ReservationState,
    ReservedVersion,
)
from .config import Config, RegistryConfig, PushOptions
from .result import InstallResult, OperationStatus, PushResult, TagResult

__all__ = [
    'AssetDefinition',
    'AssetReference',
    'AssetVersion',
    'Artifact',
    'Attachment',
    'ReadmeData',
    'ReferenceMap',
    'Repository',
    'Reservation',
    'ReservationRequest',
    'ReservationState',
    'ReservedVersion',
    'Config',
    'RegistryConfig',
    'PushOptions',
    'InstallResult',
    'OperationStatus',
    'PushResult',
    'TagResult',
]
