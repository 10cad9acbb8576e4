"""Utility functions for kapeta-registry"""

from .async_utils import run_async
from .uri_utils import AssetUri, parse_asset_uri, to_reference
from .version_utils import (
    VersionFormatter,
    calculate_version_increment,
    compare_versions,
    generate_version_tag,
    max_increment,
)

__all__ = [
    'run_async',
    'AssetUri',
    'parse_asset_uri',
    'to_reference',
    'VersionFormatter',
    'calculate_version_increment',
    'compare_versions',
    'generate_version_tag',
    'max_increment',
]
