"""Link working copies into the local repository and clone published sources"""

import logging
import os
from pathlib import Path
from typing import List, Optional, Type, Union

from ..api.exceptions import AssetNotFoundError, ValidationError, VCSError
from ..constants import ASSET_FILE, ASSET_FILE_GLOB, CURRENT_VERSION, KIND_PLAN, LOCAL_VERSION
from ..core import AssetLoader, LoggingProgressReporter, PathResolver, ProgressReporter, RegistryClient
from ..utils.file_utils import ensure_symlink
from ..utils.uri_utils import parse_asset_uri
from ..vcs import VCSFactory


class LinkService:
    """Makes working copies visible as the ``local`` version of their asset"""

    def __init__(self,
                 path_resolver: PathResolver = None,
                 progress: ProgressReporter = None,
                 loader: AssetLoader = None):
        self.path_resolver = path_resolver or PathResolver()
        self.progress = progress or LoggingProgressReporter()
        self.loader = loader or AssetLoader()
        self.logger = logging.getLogger(self.__class__.__name__)

    def link(self, source: Union[str, Path, None] = None) -> List[Path]:
        """
        Symlink an asset directory to ``<home>/repository/<handle>/<name>/local``

        Plans also link every asset defined below them. A file holding
        several assets gets a single link, named after the first one.

        Args:
            source: Asset directory. Defaults to the current directory

        Returns:
            Link paths created or refreshed

        Raises:
            ValidationError: If the directory holds no asset definition
        """
        directory = Path(os.path.abspath(source or os.getcwd()))
        asset_file = directory / ASSET_FILE
        if not asset_file.is_file():
            raise ValidationError(
                f"{directory} is not a valid kapeta asset. Expected a {ASSET_FILE} file"
            )

        assets = self.loader.load(asset_file)
        uri = parse_asset_uri(assets[0].name)
        target = self.path_resolver.get_repository_asset_path(uri.handle, uri.name, LOCAL_VERSION)

        linked = []
        for asset in assets:
            if asset.kind == KIND_PLAN:
                nested_files = sorted(directory.glob(ASSET_FILE_GLOB))
                if nested_files:
                    self.progress.info("Linking local plan assets")
                for nested_file in nested_files:
                    linked.extend(self.link(nested_file.parent))
            self.progress.info(f"Linked asset {asset.name}:{LOCAL_VERSION}\n  {directory} --> {target}")

        ensure_symlink(directory, target)
        linked.append(target)
        self.progress.check("Linking done", True)
        return linked

    async def clone(self,
                    registry: RegistryClient,
                    uri: str,
                    target: Optional[Union[str, Path]] = None,
                    skip_linking: bool = False,
                    vcs_factory: Type[VCSFactory] = VCSFactory) -> Path:
        """
        Clone the source of a published version

        Args:
            registry: Registry client
            uri: Asset reference; version ``current`` checks out the branch
            target: Clone directory. Defaults to ``./<handle>/<name>``
            skip_linking: Do not link the clone into the local repository
            vcs_factory: Version control backend factory

        Returns:
            Directory of the asset inside the clone
        """
        asset_uri = parse_asset_uri(uri)
        version = asset_uri.version or CURRENT_VERSION

        registration = await registry.get_version(asset_uri.full_name, version)
        if registration is None:
            raise AssetNotFoundError(asset_uri.full_name, version)

        repository = registration.repository
        if not repository or not repository.type:
            raise VCSError(f"Registration is missing version control information: {uri}")
        if not (repository.details or {}).get('url'):
            raise VCSError(f"Registration does not say where the source is hosted: {uri}")

        backend = vcs_factory.create_by_type(repository.type, self.progress)
        if backend is None:
            raise VCSError(f"No version control handler found for type: {repository.type}")

        target = Path(target) if target else Path.cwd() / registration.content.name
        self.progress.info(f"Clone repository to {target}")
        target.parent.mkdir(parents=True, exist_ok=True)

        checkout_id = repository.branch if version == CURRENT_VERSION else repository.commit
        if not checkout_id:
            raise VCSError(f"Registration does not say what to check out: {uri}")

        cloned_path = await backend.clone(repository.details, checkout_id, target)
        self.progress.check("Asset source code was cloned", True)

        if not skip_linking:
            self.progress.info("Linking code to local repository")
            self.link(cloned_path)

        return cloned_path
