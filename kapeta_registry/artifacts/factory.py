"""Artifact backend factory"""

from pathlib import Path
from typing import Callable, Dict, List, Optional, Tuple, Type

from .base import ArtifactBackend
from .docker import DockerBackend
from .maven import MavenBackend
from .npm import NPMBackend
from .yaml_file import YAMLBackend
from ..api.exceptions import ArtifactBackendNotFoundError, ValidationError
from ..constants import KIND_BLOCK_TYPE_EXECUTABLE
from ..core.progress import ProgressReporter
from ..models import RegistryConfig

KindPredicate = Callable[[str, Path], bool]


def _for_directory(backend_class: Type[ArtifactBackend]) -> KindPredicate:
    return lambda kind, directory: backend_class.is_supported(directory)


class ArtifactFactory:
    """Factory for creating artifact backends for an asset directory"""

    # Kinds always published with a specific backend
    _kinds: Dict[str, Type[ArtifactBackend]] = {
        KIND_BLOCK_TYPE_EXECUTABLE: YAMLBackend,
    }

    # (predicate, backend) pairs in priority order
    _registrations: List[Tuple[KindPredicate, Type[ArtifactBackend]]] = [
        (_for_directory(DockerBackend), DockerBackend),
        (_for_directory(NPMBackend), NPMBackend),
        (_for_directory(MavenBackend), MavenBackend),
        (_for_directory(YAMLBackend), YAMLBackend),
    ]

    @classmethod
    def find_backend_class(cls, base_kind: str, directory: Path) -> Optional[Type[ArtifactBackend]]:
        kind = (base_kind or '').lower()
        if kind in cls._kinds:
            return cls._kinds[kind]

        for predicate, backend_class in cls._registrations:
            if predicate(kind, Path(directory)):
                return backend_class

        return None

    @classmethod
    def create(cls,
               base_kind: str,
               directory: Path,
               registry_config: RegistryConfig = None,
               access_token: Optional[str] = None,
               progress: ProgressReporter = None) -> ArtifactBackend:
        """Create backend for an asset

        Args:
            base_kind: Kind of the asset's kind, e.g. ``core/block-type``
            directory: Asset directory
            registry_config: Registry settings
            access_token: Bearer token
            progress: Progress reporter

        Returns:
            Artifact backend instance

        Raises:
            ArtifactBackendNotFoundError: If no backend can package the directory
        """
        if not base_kind:
            raise ValidationError(f"Could not determine the asset type of {directory}")

        backend_class = cls.find_backend_class(base_kind, directory)
        if backend_class is None:
            raise ArtifactBackendNotFoundError(
                f"Could not find an artifact handler for {directory} (kind: {base_kind})"
            )
        return backend_class(directory, registry_config, access_token, progress)

    @classmethod
    def create_by_type(cls,
                       artifact_type: str,
                       directory: Path,
                       registry_config: RegistryConfig = None,
                       access_token: Optional[str] = None,
                       progress: ProgressReporter = None) -> ArtifactBackend:
        """Create backend from an artifact type in a published record

        Raises:
            ArtifactBackendNotFoundError: If the type is not supported
        """
        for backend_class in cls.get_backends():
            if backend_class.type == (artifact_type or '').lower():
                return backend_class(directory, registry_config, access_token, progress)
        raise ArtifactBackendNotFoundError(f"Unsupported artifact type: {artifact_type}")

    @classmethod
    def register(cls,
                 backend_class: Type[ArtifactBackend],
                 predicate: KindPredicate = None,
                 kind: str = None) -> None:
        """Register a backend ahead of the built-in ones

        Args:
            backend_class: Backend class
            predicate: Called with (base kind, directory); defaults to the
                backend's ``is_supported``
            kind: Base kind always handled by this backend
        """
        if kind:
            cls._kinds[kind.lower()] = backend_class
        else:
            cls._registrations.insert(0, (predicate or _for_directory(backend_class), backend_class))

    @classmethod
    def get_backends(cls) -> List[Type[ArtifactBackend]]:
        backends = []
        for backend_class in [b for _, b in cls._registrations] + list(cls._kinds.values()):
            if backend_class not in backends:
                backends.append(backend_class)
        return backends

    @classmethod
    def get_supported_types(cls) -> List[str]:
        return [b.type for b in cls.get_backends()]
