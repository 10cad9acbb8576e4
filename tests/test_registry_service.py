"""
Tests for the HTTP registry client
"""

import json

import httpx
import pytest

from kapeta_registry.api.exceptions import RegistryResponseError, RegistryUnavailableError
from kapeta_registry.models import (
    AssetDefinition,
    AssetVersion,
    ReferenceMap,
    Reservation,
    ReservationRequest,
)
from kapeta_registry.services import RegistryService

from conftest import block

BASE_URL = 'http://registry.test'


def _version_body(name, version):
    return {
        'version': version,
        'content': block(name),
        'artifact': {'type': 'docker', 'details': {'primary': f"{name}:{version}"}},
    }


class Recorder:
    """Mock transport handler answering from a route table"""

    def __init__(self, routes=None):
        self.routes = routes or {}
        self.requests = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        key = (request.method, request.url.path)
        if key not in self.routes:
            return httpx.Response(404)
        status, body = self.routes[key]
        if body is None:
            return httpx.Response(status)
        return httpx.Response(status, json=body)


def _service(recorder, **kwargs):
    return RegistryService(BASE_URL, transport=httpx.MockTransport(recorder), **kwargs)


class TestRequests:

    @pytest.mark.asyncio
    async def test_get_version(self):
        recorder = Recorder({
            ('GET', '/v1/registry/acme/users/1.0.0'): (200, _version_body('acme/users', '1.0.0'))
        })

        async with _service(recorder, access_token='secret') as service:
            version = await service.get_version('acme/users', '1.0.0')

        assert isinstance(version, AssetVersion)
        assert version.version == '1.0.0'
        assert version.content.name == 'acme/users'
        assert recorder.requests[0].headers['Authorization'] == 'Bearer secret'
        assert recorder.requests[0].headers['Accept'] == 'application/json'

    @pytest.mark.asyncio
    async def test_get_version_defaults_to_current(self):
        recorder = Recorder({
            ('GET', '/v1/registry/acme/users/current'): (200, _version_body('acme/users', '2.0.0'))
        })

        async with _service(recorder) as service:
            version = await service.get_version('acme/users')

        assert version.version == '2.0.0'
        assert 'Authorization' not in recorder.requests[0].headers

    @pytest.mark.asyncio
    async def test_default_handle(self):
        recorder = Recorder({
            ('GET', '/v1/registry/acme/users/latest'): (200, _version_body('acme/users', '3.0.0'))
        })

        async with _service(recorder, handle='acme') as service:
            version = await service.get_latest_version('users')

        assert version.version == '3.0.0'

    @pytest.mark.asyncio
    async def test_not_found_is_none(self):
        async with _service(Recorder()) as service:
            assert await service.get_version('acme/users', '9.9.9') is None
            assert await service.get_latest_version('acme/users') is None

    @pytest.mark.asyncio
    async def test_previous_version(self):
        recorder = Recorder({
            ('GET', '/v1/registry/acme/users/2.0.0/previous'): (200, _version_body('acme/users', '1.0.0'))
        })

        async with _service(recorder) as service:
            version = await service.get_latest_version_before('acme/users', '2.0.0')

        assert version.version == '1.0.0'

    @pytest.mark.asyncio
    async def test_resolve_and_update_dependencies(self):
        updated = block('acme/a')
        updated['spec'] = {'dependency': 'kapeta://acme/b:1.0.0'}
        recorder = Recorder({
            ('POST', '/v1/registry/dependencies/resolve'): (200, [{'name': 'kapeta://acme/b:local'}]),
            ('POST', '/v1/registry/dependencies/update'): (200, updated),
        })
        asset = AssetDefinition.from_dict(block('acme/a'))

        async with _service(recorder) as service:
            references = await service.resolve_dependencies(asset)
            result = await service.update_dependencies(
                asset, [ReferenceMap('kapeta://acme/b:local', 'kapeta://acme/b:1.0.0')]
            )

        assert [r.name for r in references] == ['kapeta://acme/b:local']
        assert result.spec == {'dependency': 'kapeta://acme/b:1.0.0'}
        body = json.loads(recorder.requests[1].content)
        assert body['dependencies'] == [{'from': 'kapeta://acme/b:local', 'to': 'kapeta://acme/b:1.0.0'}]
        assert body['asset']['metadata']['name'] == 'acme/a'


class TestReservations:

    @pytest.mark.asyncio
    async def test_reserve(self):
        recorder = Recorder({
            ('POST', '/v1/registry/reserve'): (200, {
                'id': 'res-1',
                'expires': 1700000000,
                'versions': [{'ownerId': 'o', 'version': '1.0.0', 'content': block('acme/a'), 'exists': False}],
            })
        })
        request = ReservationRequest(
            assets=[AssetDefinition.from_dict(block('acme/a'))],
            main_branch=True,
            branch_name='master',
            commit='abc',
            checksum='sha256:x'
        )

        async with _service(recorder) as service:
            reservation = await service.reserve_versions(request)

        assert reservation.id == 'res-1'
        assert reservation.expires == '1700000000'
        assert reservation.versions[0].version == '1.0.0'
        body = json.loads(recorder.requests[0].content)
        assert body['mainBranch'] is True
        assert body['minimumIncrement'] == 'NONE'

    @pytest.mark.asyncio
    async def test_commit_sends_reservation_id(self):
        recorder = Recorder({('POST', '/v1/registry/commit'): (200, None)})
        versions = [AssetVersion.from_dict(_version_body('acme/a', '1.0.0'))]

        async with _service(recorder) as service:
            await service.commit_reservation('res-1', versions)

        request = recorder.requests[0]
        assert request.headers['If-Match'] == 'res-1'
        assert json.loads(request.content)[0]['version'] == '1.0.0'

    @pytest.mark.asyncio
    async def test_abort(self):
        recorder = Recorder({('DELETE', '/v1/registry/reservations/res-1/abort'): (200, None)})

        async with _service(recorder) as service:
            await service.abort_reservation(Reservation(id='res-1'))

        assert recorder.requests[0].method == 'DELETE'


class TestErrors:

    @pytest.mark.asyncio
    async def test_server_message_is_surfaced(self):
        recorder = Recorder({
            ('POST', '/v1/registry/commit'): (409, {'message': 'Reservation has expired'})
        })

        async with _service(recorder) as service:
            with pytest.raises(RegistryResponseError, match="Reservation has expired") as info:
                await service.commit_reservation('res-1', [])

        assert info.value.status_code == 409

    @pytest.mark.asyncio
    async def test_error_without_message(self):
        recorder = Recorder({('POST', '/v1/registry/reserve'): (500, None)})
        request = ReservationRequest(assets=[], main_branch=False, branch_name=None, commit=None, checksum=None)

        async with _service(recorder) as service:
            with pytest.raises(RegistryResponseError, match="HTTP 500"):
                await service.reserve_versions(request)

    @pytest.mark.asyncio
    async def test_connection_refused(self):
        def refuse(request):
            raise httpx.ConnectError("Connection refused", request=request)

        async with RegistryService(BASE_URL, transport=httpx.MockTransport(refuse)) as service:
            with pytest.raises(RegistryUnavailableError, match="registry.test"):
                await service.get_version('acme/users', '1.0.0')
