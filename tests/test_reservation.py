"""
Tests for the reservation lifecycle
"""

import pytest

from kapeta_registry.api.exceptions import RegistryUnavailableError, ReservationError
from kapeta_registry.core import ReservationTransaction
from kapeta_registry.models import AssetDefinition, ReservationRequest, ReservationState

from conftest import block


def _request(*names):
    return ReservationRequest(
        assets=[AssetDefinition.from_dict(block(name)) for name in names],
        main_branch=True,
        branch_name='master',
        commit='abc123',
        checksum='sha256:x'
    )


class TestReservationTransaction:

    @pytest.mark.asyncio
    async def test_reserve_splits_existing_and_new(self, registry):
        registry.existing = {'acme/a'}
        transaction = ReservationTransaction(registry)

        await transaction.reserve(_request('acme/a', 'acme/b'))

        assert [v.name for v in transaction.existing_versions] == ['acme/a']
        assert [v.name for v in transaction.new_versions] == ['acme/b']
        assert transaction.state == ReservationState.RESERVED
        assert transaction.is_open

    @pytest.mark.asyncio
    async def test_all_existing_is_empty(self, registry):
        registry.existing = {'acme/a'}
        transaction = ReservationTransaction(registry)

        await transaction.reserve(_request('acme/a'))

        assert transaction.state == ReservationState.EMPTY
        assert not transaction.is_open
        assert await transaction.abort() is False
        assert registry.calls('abort') == []

    @pytest.mark.asyncio
    async def test_no_reservation_returned(self, registry):
        registry.return_no_reservation = True
        transaction = ReservationTransaction(registry)

        with pytest.raises(ReservationError, match="no reservation returned"):
            await transaction.reserve(_request('acme/a'))

        assert transaction.state == ReservationState.UNRESERVED

    @pytest.mark.asyncio
    async def test_reserve_only_once(self, registry):
        transaction = ReservationTransaction(registry)
        await transaction.reserve(_request('acme/a'))

        with pytest.raises(ReservationError):
            await transaction.reserve(_request('acme/a'))

    @pytest.mark.asyncio
    async def test_commit_then_abort_is_noop(self, registry):
        transaction = ReservationTransaction(registry)
        await transaction.reserve(_request('acme/a'))

        await transaction.commit([])

        assert transaction.state == ReservationState.COMMITTED
        assert await transaction.abort() is False
        assert len(registry.calls('commit')) == 1
        assert registry.calls('abort') == []

    @pytest.mark.asyncio
    async def test_commit_after_abort_fails(self, registry):
        transaction = ReservationTransaction(registry)
        await transaction.reserve(_request('acme/a'))

        assert await transaction.abort() is True

        with pytest.raises(ReservationError):
            await transaction.commit([])
        assert registry.calls('commit') == []

    @pytest.mark.asyncio
    async def test_failed_commit_leaves_reservation_open(self, registry):
        registry.fail_commit = RegistryUnavailableError('http://registry.test')
        transaction = ReservationTransaction(registry)
        await transaction.reserve(_request('acme/a'))

        with pytest.raises(RegistryUnavailableError):
            await transaction.commit([])

        assert transaction.is_open
        assert await transaction.abort() is True
        assert transaction.state == ReservationState.ABORTED

    @pytest.mark.asyncio
    async def test_abort_failure_is_not_raised(self, registry):
        registry.fail_abort = RegistryUnavailableError('http://registry.test')
        transaction = ReservationTransaction(registry)
        await transaction.reserve(_request('acme/a'))

        assert await transaction.abort() is True
        assert transaction.state == ReservationState.ABORTED
