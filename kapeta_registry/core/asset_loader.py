"""Asset definition loading and validation"""

import json
import logging
from pathlib import Path
from typing import Dict, List, Optional

import yaml

from .registry_client import RegistryClient
from ..api.exceptions import ValidationError
from ..constants import ASSET_FILE_GLOB, CORE_KIND_PREFIX
from ..models import AssetDefinition
from ..utils.uri_utils import parse_asset_uri


class AssetLoader:
    """Loads asset definition files and resolves their artifact kind"""

    def __init__(self, registry: Optional[RegistryClient] = None):
        """Initialize asset loader

        Args:
            registry: Registry used to resolve custom kinds
        """
        self.registry = registry
        self.logger = logging.getLogger(self.__class__.__name__)

    @staticmethod
    def parse_documents(content: str, source: str = "") -> List[dict]:
        """Parse every YAML (or JSON) document in a string"""
        if source.endswith('.json'):
            data = json.loads(content)
            return data if isinstance(data, list) else [data]
        return [doc for doc in yaml.safe_load_all(content) if doc is not None]

    def load(self, file_path: Path) -> List[AssetDefinition]:
        """
        Load and validate all asset definitions in a file

        Args:
            file_path: Definition file (usually kapeta.yml)

        Returns:
            Asset definitions in document order

        Raises:
            ValidationError: If the file is missing or any document is invalid
        """
        file_path = Path(file_path)

        if not file_path.exists():
            raise ValidationError(f"{file_path} was not found")

        if not file_path.is_file():
            raise ValidationError(f"{file_path} is not a file. A valid file must be specified")

        try:
            documents = self.parse_documents(file_path.read_text(encoding='utf-8'), file_path.name)
        except (yaml.YAMLError, ValueError) as e:
            raise ValidationError(f"{file_path} could not be parsed: {e}")

        if not documents:
            raise ValidationError(f"{file_path} does not contain any asset definitions")

        assets = []
        for document in documents:
            if not isinstance(document, dict) or not isinstance(document.get('metadata'), dict):
                raise ValidationError(
                    f"{file_path} is missing metadata. A valid block definition file must be specified"
                )
            if not document['metadata'].get('name'):
                raise ValidationError(
                    f"{file_path} is missing metadata.name. A valid block definition file must be specified"
                )
            assets.append(AssetDefinition.from_dict(document))

        self.logger.debug(f"Loaded {len(assets)} asset definition(s) from {file_path}")
        return assets

    async def resolve_base_kind(self, kind: Optional[str]) -> Optional[str]:
        """
        Resolve the kind that decides how an asset is packaged

        Built-in ``core/`` kinds are returned as is. Any other kind is a
        reference to a published asset whose own kind is used instead.

        Args:
            kind: Kind of the first asset in the file

        Returns:
            Base kind

        Raises:
            ValidationError: If the kind reference is malformed or unknown
        """
        if not kind or kind.startswith(CORE_KIND_PREFIX):
            return kind

        try:
            uri = parse_asset_uri(kind)
        except ValueError:
            uri = None

        if uri is None or not uri.version:
            raise ValidationError(
                f"Invalid asset kind: {kind} expected format: handle/name:version"
            )

        if self.registry is None:
            raise ValidationError(f"Cannot resolve asset kind {kind} without a registry")

        kind_version = await self.registry.get_version(uri.full_name, uri.version)
        if kind_version is None:
            raise ValidationError(f"Asset kind {kind} was not found in the registry")

        self.logger.debug(f"Resolved kind {kind} to {kind_version.content.kind}")
        return kind_version.content.kind

    def find_assets_in_path(self, base_dir: Path) -> Dict[str, Path]:
        """
        Index asset definitions found in sub-directories

        Args:
            base_dir: Directory to scan

        Returns:
            Mapping of full asset name to the directory holding its definition
        """
        local_assets = {}
        for asset_file in sorted(Path(base_dir).glob(ASSET_FILE_GLOB)):
            if not asset_file.is_file():
                continue
            try:
                documents = self.parse_documents(asset_file.read_text(encoding='utf-8'))
            except (yaml.YAMLError, UnicodeDecodeError, OSError) as e:
                self.logger.warning(f"Skipping unreadable asset file {asset_file}: {e}")
                continue
            for document in documents:
                name = (document.get('metadata') or {}).get('name') if isinstance(document, dict) else None
                if name:
                    local_assets[name] = asset_file.parent
        return local_assets
