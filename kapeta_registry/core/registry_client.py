"""Registry client contract used by the push pipeline"""

from abc import ABC, abstractmethod
from typing import List, Optional

from ..models import (
    AssetDefinition,
    AssetReference,
    AssetVersion,
    ReferenceMap,
    Reservation,
    ReservationRequest,
)


class RegistryClient(ABC):
    """Remote registry operations needed to publish assets"""

    @abstractmethod
    async def resolve_dependencies(self, asset: AssetDefinition) -> List[AssetReference]:
        """Get the dependencies declared by an asset"""
        pass

    @abstractmethod
    async def update_dependencies(self,
                                  asset: AssetDefinition,
                                  mappings: List[ReferenceMap]) -> AssetDefinition:
        """Rewrite dependency references of an asset"""
        pass

    @abstractmethod
    async def reserve_versions(self, request: ReservationRequest) -> Optional[Reservation]:
        """Reserve the next versions for the assets of one definition file"""
        pass

    @abstractmethod
    async def commit_reservation(self, reservation_id: str, versions: List[AssetVersion]) -> None:
        """Publish the reserved versions"""
        pass

    @abstractmethod
    async def abort_reservation(self, reservation: Reservation) -> None:
        """Release a reservation without publishing"""
        pass

    @abstractmethod
    async def get_version(self, name: str, version: str = None) -> Optional[AssetVersion]:
        """Get one version of an asset, or None if unknown"""
        pass

    @abstractmethod
    async def get_latest_version(self, name: str) -> Optional[AssetVersion]:
        """Get the most recently committed version of an asset"""
        pass

    async def close(self) -> None:
        """Release client resources"""
        pass
