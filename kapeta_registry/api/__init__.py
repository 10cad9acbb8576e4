"""API layer for kapeta-registry"""

from .exceptions import (
    RegistryToolError,
    ValidationError,
    PreconditionError,
    DependencyNotFoundError,
    DependencyCycleError,
    ReservationError,
    BuildError,
    TestsFailedError,
    RegistryError,
    RegistryUnavailableError,
    RegistryResponseError,
    AssetNotFoundError,
    ArtifactBackendNotFoundError,
    VCSError,
    CommandError,
    ConfigError,
    InstallError,
)
from .pusher import Pusher, push
from .actions import install, uninstall, link, clone, view

__all__ = [
    # Main classes
    "Pusher",

    # Convenience functions
    "push",
    "install",
    "uninstall",
    "link",
    "clone",
    "view",

    # Exceptions
    "RegistryToolError",
    "ValidationError",
    "PreconditionError",
    "DependencyNotFoundError",
    "DependencyCycleError",
    "ReservationError",
    "BuildError",
    "TestsFailedError",
    "RegistryError",
    "RegistryUnavailableError",
    "RegistryResponseError",
    "AssetNotFoundError",
    "ArtifactBackendNotFoundError",
    "VCSError",
    "CommandError",
    "ConfigError",
    "InstallError",
]
