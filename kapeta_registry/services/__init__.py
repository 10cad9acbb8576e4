"""Service layer for kapeta-registry"""

from .config_service import ConfigService
from .registry_service import RegistryService
from .push_operation import PushOperation
from .install_service import InstallService
from .link_service import LinkService

__all__ = [
    'ConfigService',
    'RegistryService',
    'PushOperation',
    'InstallService',
    'LinkService',
]
