"""Version reservation lifecycle"""

import logging
from typing import List, Optional

from .registry_client import RegistryClient
from ..api.exceptions import ReservationError
from ..models import (
    AssetVersion,
    Reservation,
    ReservationRequest,
    ReservationState,
    ReservedVersion,
)


class ReservationTransaction:
    """Owns one reservation from request until commit or abort

    Once versions are reserved exactly one of ``commit`` or ``abort`` reaches
    the registry. A reservation where every version already exists needs
    neither and ends in the EMPTY state.
    """

    def __init__(self, registry: RegistryClient):
        self.registry = registry
        self.state = ReservationState.UNRESERVED
        self.reservation: Optional[Reservation] = None
        self.existing_versions: List[ReservedVersion] = []
        self.new_versions: List[ReservedVersion] = []
        self.logger = logging.getLogger(self.__class__.__name__)

    @property
    def is_open(self) -> bool:
        """True while the reservation still needs a commit or abort"""
        return self.state == ReservationState.RESERVED

    async def reserve(self, request: ReservationRequest) -> Reservation:
        """
        Reserve versions and split them into existing and new ones

        Args:
            request: Reservation request

        Returns:
            The reservation

        Raises:
            ReservationError: If the registry returned no reservation
        """
        if self.state != ReservationState.UNRESERVED:
            raise ReservationError(f"Reservation already requested (state: {self.state.value})")

        reservation = await self.registry.reserve_versions(request)
        if not reservation:
            raise ReservationError("Failed to reserve version - no reservation returned from registry")

        self.reservation = reservation
        self.existing_versions = [v for v in reservation.versions if v.exists]
        self.new_versions = [v for v in reservation.versions if not v.exists]

        if self.new_versions:
            self.state = ReservationState.RESERVED
        else:
            self.state = ReservationState.EMPTY

        self.logger.debug(
            f"Reservation {reservation.id}: {len(self.new_versions)} new, "
            f"{len(self.existing_versions)} existing"
        )
        return reservation

    async def commit(self, versions: List[AssetVersion]) -> None:
        """
        Commit the reservation with the assembled versions

        Raises:
            ReservationError: If there is no open reservation
        """
        if not self.is_open:
            raise ReservationError(f"Cannot commit reservation in state {self.state.value}")

        await self.registry.commit_reservation(self.reservation.id, versions)
        self.state = ReservationState.COMMITTED

    async def abort(self) -> bool:
        """
        Abort the reservation if it is still open

        Failures are logged and never raised, so the error that caused the
        abort is the one the caller sees.

        Returns:
            True if an abort was sent to the registry
        """
        if not self.is_open:
            return False

        self.state = ReservationState.ABORTED
        try:
            await self.registry.abort_reservation(self.reservation)
        except Exception as e:
            self.logger.warning(f"Failed to abort reservation {self.reservation.id}: {e}")
        return True
