"""Asset URI parsing utilities"""

from dataclasses import dataclass
from typing import Optional

from ..constants import LOCAL_VERSION, REFERENCE_SCHEME


@dataclass(frozen=True)
class AssetUri:
    """Parsed ``[kapeta://]handle/name[:version]`` reference"""
    handle: str
    name: str
    version: Optional[str] = None

    @property
    def full_name(self) -> str:
        return f"{self.handle}/{self.name}"

    @property
    def id(self) -> str:
        if self.version:
            return f"{self.full_name}:{self.version}"
        return self.full_name

    @property
    def is_local(self) -> bool:
        return self.version == LOCAL_VERSION

    def to_reference(self) -> str:
        return f"{REFERENCE_SCHEME}{self.id}"

    def matches(self, other: 'AssetUri') -> bool:
        """Check that both point at the same handle/name, ignoring version"""
        return self.handle.lower() == other.handle.lower() and self.name.lower() == other.name.lower()


def parse_asset_uri(uri: str, default_handle: Optional[str] = None) -> AssetUri:
    """
    Parse an asset reference

    Args:
        uri: Reference such as ``kapeta://handle/name:1.0.0`` or ``handle/name``
        default_handle: Handle used when the reference has none

    Returns:
        Parsed AssetUri

    Raises:
        ValueError: If the reference cannot be parsed
    """
    if not uri or not uri.strip():
        raise ValueError("Empty asset reference")

    value = uri.strip()
    if value.startswith(REFERENCE_SCHEME):
        value = value[len(REFERENCE_SCHEME):]

    version = None
    if ':' in value:
        value, version = value.rsplit(':', 1)
        if not version:
            raise ValueError(f"Invalid asset reference: {uri}")

    if '/' in value:
        handle, name = value.split('/', 1)
    else:
        handle, name = default_handle, value

    if not handle or not name or '/' in name:
        raise ValueError(f"Invalid asset reference: {uri}")

    return AssetUri(handle=handle, name=name, version=version)


def to_reference(name: str, version: str) -> str:
    """
    Format a published reference

    Args:
        name: Full asset name (handle/name)
        version: Version string

    Returns:
        Reference of the form ``kapeta://handle/name:version``
    """
    return f"{REFERENCE_SCHEME}{name}:{version}"
