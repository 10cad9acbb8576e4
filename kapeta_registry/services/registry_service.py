"""HTTP client for the Kapeta registry API"""

import logging
from typing import Any, Dict, List, Optional
from urllib.parse import quote

import httpx

from ..api.exceptions import RegistryResponseError, RegistryUnavailableError
from ..constants import CURRENT_VERSION, DEFAULT_HTTP_TIMEOUT, REGISTRY_API_PATH
from ..core.registry_client import RegistryClient
from ..models import (
    AssetDefinition,
    AssetReference,
    AssetVersion,
    ReferenceMap,
    Reservation,
    ReservationRequest,
)
from ..utils.uri_utils import parse_asset_uri


def _segment(value: str) -> str:
    return quote(value, safe='')


class RegistryService(RegistryClient):
    """Registry client talking JSON over HTTP"""

    def __init__(self,
                 base_url: str,
                 access_token: Optional[str] = None,
                 handle: Optional[str] = None,
                 timeout: float = DEFAULT_HTTP_TIMEOUT,
                 client: Optional[httpx.AsyncClient] = None,
                 transport: Optional[httpx.AsyncBaseTransport] = None):
        """
        Initialize registry service

        Args:
            base_url: Registry base URL
            access_token: Bearer token sent with every request
            handle: Default handle for names without one
            timeout: Request timeout in seconds
            client: Preconfigured HTTP client
            transport: HTTP transport, mainly for tests
        """
        self.base_url = base_url.rstrip('/')
        self.access_token = access_token
        self.handle = handle
        self.timeout = timeout
        self._transport = transport
        self._client = client
        self._owns_client = client is None
        self.logger = logging.getLogger(self.__class__.__name__)

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            headers = {'Accept': 'application/json'}
            if self.access_token:
                headers['Authorization'] = f"Bearer {self.access_token}"
            self._client = httpx.AsyncClient(
                base_url=self.base_url + REGISTRY_API_PATH,
                headers=headers,
                timeout=httpx.Timeout(self.timeout),
                transport=self._transport
            )
        return self._client

    async def close(self) -> None:
        if self._client is not None and self._owns_client:
            await self._client.aclose()
        self._client = None

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()

    async def _request(self,
                       method: str,
                       path: str,
                       body: Any = None,
                       headers: Dict[str, str] = None) -> Any:
        """
        Send a request and decode the JSON response

        Returns:
            Decoded body, or None for 404 and empty responses

        Raises:
            RegistryUnavailableError: If the registry cannot be reached
            RegistryResponseError: For any other error status
        """
        self.logger.debug(f"{method} {REGISTRY_API_PATH}{path}")
        try:
            response = await self._get_client().request(method, path, json=body, headers=headers)
        except (httpx.ConnectError, httpx.ConnectTimeout) as e:
            self.logger.debug(f"Connection to {self.base_url} failed: {e}")
            raise RegistryUnavailableError(self.base_url)

        if response.status_code == 404:
            return None

        if response.status_code >= 400:
            message = None
            try:
                error_body = response.json()
                if isinstance(error_body, dict):
                    message = error_body.get('message')
            except ValueError:
                pass
            raise RegistryResponseError(
                message or f"Registry request failed: {method} {path} returned HTTP {response.status_code}",
                response.status_code
            )

        if not response.content:
            return None
        return response.json()

    def _split_name(self, name: str):
        handle = self.handle
        if '/' in name:
            handle, name = name.split('/', 1)
        return handle, name

    async def resolve_dependencies(self, asset: AssetDefinition) -> List[AssetReference]:
        data = await self._request('POST', '/dependencies/resolve', asset.to_dict())
        return [AssetReference.from_dict(d) for d in data or []]

    async def update_dependencies(self,
                                  asset: AssetDefinition,
                                  mappings: List[ReferenceMap]) -> AssetDefinition:
        data = await self._request('POST', '/dependencies/update', {
            'asset': asset.to_dict(),
            'dependencies': [m.to_dict() for m in mappings]
        })
        if not data:
            return asset
        return AssetDefinition.from_dict(data)

    async def reserve_versions(self, request: ReservationRequest) -> Optional[Reservation]:
        data = await self._request('POST', '/reserve', request.to_dict())
        return Reservation.from_dict(data) if data else None

    async def commit_reservation(self, reservation_id: str, versions: List[AssetVersion]) -> None:
        await self._request(
            'POST', '/commit',
            [v.to_dict() for v in versions],
            headers={'If-Match': reservation_id}
        )

    async def abort_reservation(self, reservation: Reservation) -> None:
        await self._request('DELETE', f"/reservations/{_segment(reservation.id)}/abort")

    async def get_version(self, name: str, version: str = None) -> Optional[AssetVersion]:
        handle, name = self._split_name(name)
        path = f"/{_segment(handle or '')}/{_segment(name)}/{_segment(version or CURRENT_VERSION)}"
        data = await self._request('GET', path)
        return AssetVersion.from_dict(data) if data else None

    async def get_latest_version(self, name: str) -> Optional[AssetVersion]:
        uri = parse_asset_uri(name, default_handle=self.handle)
        data = await self._request('GET', f"/{_segment(uri.handle)}/{_segment(uri.name)}/latest")
        return AssetVersion.from_dict(data) if data else None

    async def get_latest_version_before(self, name: str, version: str) -> Optional[AssetVersion]:
        """Get the version published before ``version``"""
        handle, name = self._split_name(name)
        path = f"/{_segment(handle or '')}/{_segment(name)}/{_segment(version)}/previous"
        data = await self._request('GET', path)
        return AssetVersion.from_dict(data) if data else None
