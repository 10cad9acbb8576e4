"""Resolution of local dependencies during a push"""

import logging
import os
from contextlib import contextmanager
from pathlib import Path
from typing import Awaitable, Callable, Dict, Iterator, List, Optional

from .asset_loader import AssetLoader
from .path_resolver import PathResolver
from .progress import LoggingProgressReporter, ProgressReporter
from .registry_client import RegistryClient
from ..api.exceptions import DependencyCycleError, DependencyNotFoundError, ValidationError
from ..constants import DEFAULT_MAX_DEPTH
from ..models import AssetDefinition, PushResult, ReferenceMap
from ..utils.uri_utils import AssetUri, parse_asset_uri
from ..utils.version_utils import highest_version


class LocalVersionCache:
    """Local dependency reference to published reference, for one push run"""

    def __init__(self):
        self._mappings: Dict[str, str] = {}

    @staticmethod
    def _key(reference: str) -> str:
        try:
            return parse_asset_uri(reference).id.lower()
        except ValueError:
            return reference

    def get(self, reference: str) -> Optional[str]:
        return self._mappings.get(self._key(reference))

    def set(self, reference: str, resolved: str) -> None:
        self._mappings[self._key(reference)] = resolved

    def __contains__(self, reference: str) -> bool:
        return self._key(reference) in self._mappings

    def __len__(self) -> int:
        return len(self._mappings)


class PushContext:
    """State shared by a top-level push and every nested dependency push

    Holds the mapping cache and the stack of directories currently being
    pushed, which guards against dependency cycles and runaway nesting.
    """

    def __init__(self, max_depth: int = DEFAULT_MAX_DEPTH, cache: LocalVersionCache = None):
        self.max_depth = max_depth
        self.cache = cache if cache is not None else LocalVersionCache()
        self._stack: List[Path] = []

    @property
    def depth(self) -> int:
        return len(self._stack)

    @property
    def stack(self) -> List[Path]:
        return list(self._stack)

    @contextmanager
    def enter(self, directory: Path) -> Iterator[None]:
        """
        Mark a directory as being pushed for the duration of the block

        Raises:
            DependencyCycleError: If the directory is already being pushed
                or the nesting limit is reached
        """
        directory = Path(os.path.realpath(directory))
        chain = [str(p) for p in self._stack] + [str(directory)]

        if directory in self._stack:
            raise DependencyCycleError(
                "Circular local dependency detected: " + " -> ".join(chain),
                chain
            )

        if len(self._stack) >= self.max_depth:
            raise DependencyCycleError(
                f"Local dependencies nested deeper than {self.max_depth} levels",
                chain
            )

        self._stack.append(directory)
        try:
            yield
        finally:
            self._stack.pop()


class DependencyResolver:
    """Replaces ``local`` dependency versions with freshly published ones

    Dependencies are pushed one at a time, in declaration order, since a
    nested push may add mappings that later dependencies reuse.
    """

    def __init__(self,
                 registry: RegistryClient,
                 context: PushContext,
                 spawn: Callable[[Path], Awaitable[PushResult]],
                 loader: AssetLoader = None,
                 path_resolver: PathResolver = None,
                 progress: ProgressReporter = None):
        """
        Initialize dependency resolver

        Args:
            registry: Registry client
            context: Push context shared across the push tree
            spawn: Pushes the asset in a directory and returns its result
            loader: Asset loader used to index sibling assets
            path_resolver: Local repository path conventions
            progress: Progress reporter
        """
        self.registry = registry
        self.context = context
        self.spawn = spawn
        self.loader = loader or AssetLoader(registry)
        self.path_resolver = path_resolver or PathResolver()
        self.progress = progress or LoggingProgressReporter()
        self.logger = logging.getLogger(self.__class__.__name__)

    async def resolve(self, assets: List[AssetDefinition], base_dir: Path) -> List[AssetDefinition]:
        """
        Resolve local dependencies of every asset

        Args:
            assets: Asset definitions of one file
            base_dir: Directory of the definition file

        Returns:
            Asset definitions with local dependencies rewritten
        """
        local_assets = self.loader.find_assets_in_path(base_dir)
        self.logger.debug(f"Found {len(local_assets)} asset(s) below {base_dir}")

        resolved = []
        for asset in assets:
            resolved.append(await self.resolve_asset(asset, local_assets))
        return resolved

    async def resolve_asset(self, asset: AssetDefinition, local_assets: Dict[str, Path]) -> AssetDefinition:
        """
        Resolve local dependencies of one asset

        Args:
            asset: Asset definition
            local_assets: Index of asset name to directory

        Returns:
            The asset, rewritten by the registry if any dependency changed
        """
        dependencies = await self.registry.resolve_dependencies(asset)
        changes: List[ReferenceMap] = []

        for dependency in dependencies:
            try:
                uri = parse_asset_uri(dependency.name)
            except ValueError as e:
                raise ValidationError(f"Invalid dependency reference in {asset.name}: {e}")

            if not uri.is_local:
                continue

            cached = self.context.cache.get(dependency.name)
            if cached:
                self.logger.debug(f"Reusing resolved version for {dependency.name}: {cached}")
                changes.append(ReferenceMap(from_ref=dependency.name, to_ref=cached))
                continue

            directory = self._locate(uri, local_assets)
            reference = await self.progress.progress(
                f"Pushing local version for {uri.full_name}",
                self._publish(uri, directory)
            )
            if reference is None:
                raise DependencyNotFoundError(
                    dependency.name,
                    message=f"Pushing {directory} did not produce a version for {uri.full_name}"
                )

            self.progress.info(f"Resolved version for local dependency: {dependency.name} > {reference}")
            self.context.cache.set(dependency.name, reference)
            changes.append(ReferenceMap(from_ref=dependency.name, to_ref=reference))

        if not changes:
            return asset

        return await self.registry.update_dependencies(asset, changes)

    def _locate(self, uri: AssetUri, local_assets: Dict[str, Path]) -> Path:
        """Find the working copy of a local dependency"""
        if uri.full_name in local_assets:
            directory = local_assets[uri.full_name]
            self.progress.info(f"Resolved local version for {uri.full_name} from path: {directory}")
            return directory

        local_path = self.path_resolver.get_repository_asset_path(uri.handle, uri.name, uri.version)
        if not local_path.exists():
            raise DependencyNotFoundError(uri.id, str(local_path))

        directory = Path(os.path.realpath(local_path))
        if not directory.exists():
            raise DependencyNotFoundError(uri.id, str(directory))

        self.progress.info(f"Resolved local version for {uri.full_name} from local repository: {directory}")
        return directory

    async def _publish(self, uri: AssetUri, directory: Path) -> Optional[str]:
        """Push a dependency and pick the reference matching it"""
        result = await self.spawn(directory)

        candidates = {}
        for reference in result.references:
            reference_uri = parse_asset_uri(reference)
            if reference_uri.matches(uri) and reference_uri.version and not reference_uri.is_local:
                candidates[reference_uri.version] = reference

        if not candidates:
            return None

        return candidates[highest_version(candidates.keys())]
