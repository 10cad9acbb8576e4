"""Kapeta registry tool - publish versioned assets to the Kapeta registry.

Pushes assets through build, test and artifact packaging, reserves version
numbers from the registry and commits them, publishing any local
dependencies first.
"""

from .__version__ import __version__, __version_info__, __author__, __license__

# Core API
from .api import Pusher, push, install, uninstall, link, clone, view

# Data models
from .models import (
    AssetDefinition,
    AssetVersion,
    PushOptions,
    PushResult,
    InstallResult,
    TagResult,
)

# Exceptions
from .api.exceptions import (
    RegistryToolError,
    ValidationError,
    PreconditionError,
    DependencyNotFoundError,
    DependencyCycleError,
    ReservationError,
    BuildError,
    TestsFailedError,
    RegistryUnavailableError,
    RegistryResponseError,
    AssetNotFoundError,
)

__all__ = [
    # Version information
    "__version__",
    "__version_info__",
    "__author__",
    "__license__",

    # Main classes
    "Pusher",

    # Core API functions
    "push",
    "install",
    "uninstall",
    "link",
    "clone",
    "view",

    # Data models
    "AssetDefinition",
    "AssetVersion",
    "PushOptions",
    "PushResult",
    "InstallResult",
    "TagResult",

    # Exceptions
    "RegistryToolError",
    "ValidationError",
    "PreconditionError",
    "DependencyNotFoundError",
    "DependencyCycleError",
    "ReservationError",
    "BuildError",
    "TestsFailedError",
    "RegistryUnavailableError",
    "RegistryResponseError",
    "AssetNotFoundError",
]
