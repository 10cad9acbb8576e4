"""Core push pipeline components"""

from .path_resolver import PathResolver
from .progress import LoggingProgressReporter, ProgressReporter
from .registry_client import RegistryClient
from .asset_loader import AssetLoader
from .reservation import ReservationTransaction
from .dependency_resolver import DependencyResolver, LocalVersionCache, PushContext

__all__ = [
    'PathResolver',
    'LoggingProgressReporter',
    'ProgressReporter',
    'RegistryClient',
    'AssetLoader',
    'ReservationTransaction',
    'DependencyResolver',
    'LocalVersionCache',
    'PushContext',
]
