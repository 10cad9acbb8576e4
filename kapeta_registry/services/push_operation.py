"""Publish orchestration for one asset definition file"""

import logging
import os
from pathlib import Path
from typing import List, Optional, Type, Union

import yaml

from .config_service import ConfigService
from .registry_service import RegistryService
from ..api.exceptions import (
    BuildError,
    CommandError,
    PreconditionError,
    TestsFailedError,
)
from ..artifacts import ArtifactBackend, ArtifactFactory
from ..constants import ASSET_FILE, DEFAULT_BRANCH, VersionIncrement
from ..core import (
    AssetLoader,
    DependencyResolver,
    LoggingProgressReporter,
    PathResolver,
    ProgressReporter,
    PushContext,
    RegistryClient,
    ReservationTransaction,
)
from ..models import (
    AssetDefinition,
    AssetVersion,
    Config,
    PushOptions,
    PushResult,
    Repository,
    ReservationRequest,
    ReservedVersion,
    TagResult,
)
from ..utils.file_utils import collect_attachments, find_script, read_readme
from ..utils.process_utils import run_command
from ..utils.uri_utils import to_reference
from ..utils.version_utils import calculate_version_increment, generate_version_tag, max_increment
from ..vcs import BranchInfo, VCSBackend, VCSFactory


class PushOperation:
    """Publishes the assets of one definition file

    A push runs inside a ``PushContext``. Local dependencies are published
    by nested operations sharing that context, so the mapping cache and the
    recursion guard cover the whole push tree.
    """

    def __init__(self,
                 directory: Union[str, Path],
                 options: Optional[PushOptions] = None,
                 registry: Optional[RegistryClient] = None,
                 context: Optional[PushContext] = None,
                 config: Optional[Config] = None,
                 vcs_factory: Type[VCSFactory] = VCSFactory,
                 artifact_factory: Type[ArtifactFactory] = ArtifactFactory,
                 loader: Optional[AssetLoader] = None,
                 path_resolver: Optional[PathResolver] = None,
                 progress: Optional[ProgressReporter] = None):
        """
        Initialize push operation

        Args:
            directory: Asset directory, or the definition file itself
            options: Push flags
            registry: Registry client. Built from config if not given
            context: Context shared with the parent push, if nested
            config: Tool configuration. Loaded from disk if not given
            vcs_factory: Version control backend factory
            artifact_factory: Artifact backend factory
            loader: Asset definition loader
            path_resolver: Local repository path conventions
            progress: Progress reporter
        """
        path = Path(os.path.abspath(directory))
        if path.is_file():
            self.file = path
        else:
            self.file = path / ASSET_FILE
        self.directory = self.file.parent

        self.options = options or PushOptions()
        self.config = config or ConfigService().config
        if self.options.registry:
            self.config.registry.url = self.options.registry.rstrip('/')

        self.registry = registry or RegistryService(
            self.config.registry.url,
            access_token=self.config.registry.access_token,
            handle=self.config.registry.handle
        )
        self.context = context or PushContext(max_depth=self.options.max_depth)
        self.vcs_factory = vcs_factory
        self.artifact_factory = artifact_factory
        self.loader = loader or AssetLoader(self.registry)
        self.path_resolver = path_resolver or PathResolver(self.config.kapeta_home)
        self.progress = progress or LoggingProgressReporter()
        self.logger = logging.getLogger(self.__class__.__name__)

        self.assets: List[AssetDefinition] = []
        self.asset_kind: Optional[str] = None
        self.base_kind: Optional[str] = None
        self.transaction: Optional[ReservationTransaction] = None

        self._vcs: Optional[VCSBackend] = None
        self._vcs_detected = False
        self._artifact: Optional[ArtifactBackend] = None

    async def vcs_backend(self) -> Optional[VCSBackend]:
        """Version control backend for the asset directory, if any"""
        if not self._vcs_detected:
            self._vcs = await self.vcs_factory.create_for_directory(self.directory, self.progress)
            self._vcs_detected = True
            if self._vcs:
                self.progress.show_value("Identified version control system", self._vcs.name)
            else:
                self.progress.check("Identified version control system", False)
        return self._vcs

    async def artifact_backend(self) -> ArtifactBackend:
        """Artifact backend for the asset kind, with its toolchain verified"""
        if self._artifact is None:
            backend = self.artifact_factory.create(
                self.base_kind,
                self.directory,
                self.config.registry,
                self.config.registry.access_token,
                self.progress
            )
            self.progress.show_value("Identified artifact type", backend.name)
            await self.progress.progress("Verifying artifact type handler", backend.verify())
            self._artifact = backend
        return self._artifact

    async def check_exists(self) -> None:
        """Load and validate the definition file, then resolve its base kind"""
        self.assets = self.loader.load(self.file)
        self.asset_kind = self.assets[0].kind
        self.base_kind = await self.loader.resolve_base_kind(self.asset_kind)

    async def check_working_directory(self) -> None:
        """
        Require a clean working directory that is up to date with its remote

        Raises:
            PreconditionError: If either check fails
        """
        vcs = await self.vcs_backend()
        if not vcs or self.options.ignore_working_directory:
            return

        clean = await self.progress.progress(
            "Checking that working directory is clean",
            vcs.is_working_directory_clean(self.directory)
        )
        if not clean:
            raise PreconditionError(
                "Working directory is not clean. Make sure everything is committed "
                "or use --ignore-working-directory to ignore"
            )

        up_to_date = await self.progress.progress(
            "Checking that working directory is up to date with remote",
            vcs.is_working_directory_up_to_date(self.directory)
        )
        if not up_to_date:
            raise PreconditionError(
                "Working directory is not up to date with remote. Pull the latest changes "
                "or use --ignore-working-directory to continue."
            )

    async def calculate_conventional_increment(self, vcs: VCSBackend, asset_name: str) -> VersionIncrement:
        """Increment required by commits made since the last committed version"""
        latest = await self.registry.get_latest_version(asset_name)
        if not latest or not latest.repository or not latest.repository.commit:
            return VersionIncrement.NONE

        commits = await vcs.get_commits_since(self.directory, latest.repository.commit)
        return calculate_version_increment(commits)

    async def calculate_minimum_increment(self, vcs: VCSBackend) -> VersionIncrement:
        increment = VersionIncrement.NONE
        for asset in self.assets:
            increment = max_increment(increment, await self.calculate_conventional_increment(vcs, asset.name))
            if increment == VersionIncrement.MAJOR:
                break

        if increment != VersionIncrement.NONE:
            self.progress.info(f"Calculated minimum increment from commit messages: {increment.value}")
        return increment

    async def _push_dependency(self, directory: Path) -> PushResult:
        dependency = PushOperation(
            directory,
            options=self.options.for_dependency(),
            registry=self.registry,
            context=self.context,
            config=self.config,
            vcs_factory=self.vcs_factory,
            artifact_factory=self.artifact_factory,
            loader=self.loader,
            path_resolver=self.path_resolver,
            progress=self.progress
        )
        return await dependency.perform()

    async def check_dependencies(self) -> None:
        """Publish local dependencies and rewrite the assets to reference them"""
        resolver = DependencyResolver(
            self.registry,
            self.context,
            self._push_dependency,
            loader=self.loader,
            path_resolver=self.path_resolver,
            progress=self.progress
        )
        self.assets = await self.progress.progress(
            f"Checking dependencies of {len(self.assets)} asset(s)",
            resolver.resolve(self.assets, self.directory)
        )

    async def _run_script(self, script: Path) -> None:
        if os.access(script, os.X_OK):
            args = [str(script)]
        else:
            args = ['bash', str(script)]
        result = await run_command(args, cwd=self.directory)
        if result.stdout:
            self.logger.debug(result.stdout)

    async def _build(self, artifact: ArtifactBackend) -> None:
        script = find_script(self.directory, 'build')
        if script:
            await self._run_script(script)
        else:
            await artifact.build()

    async def _test(self, artifact: ArtifactBackend) -> None:
        script = find_script(self.directory, 'test')
        if script:
            await self._run_script(script)
        else:
            await artifact.test()

    async def run_build(self, artifact: ArtifactBackend) -> None:
        """
        Build with the asset's build script, or the artifact backend

        Raises:
            BuildError: If the build command fails
        """
        try:
            await self.progress.progress("Building block", self._build(artifact))
        except CommandError as e:
            raise BuildError(f"Build failed: {e}") from e

    async def run_tests(self, artifact: ArtifactBackend) -> None:
        """
        Run tests with the asset's test script, or the artifact backend

        Raises:
            TestsFailedError: If the tests fail for any reason
        """
        if self.options.skip_tests:
            self.progress.info("Skipping tests...")
            return

        try:
            await self.progress.progress("Running tests", self._test(artifact))
        except Exception as e:
            self.logger.error(f"Tests failed: {e}")
            raise TestsFailedError() from e

    async def get_branch(self, vcs: Optional[VCSBackend]) -> BranchInfo:
        if vcs:
            return await vcs.get_branch(self.directory)
        return BranchInfo(branch=DEFAULT_BRANCH, main=True)

    def get_version_tags(self, versions: List[ReservedVersion]) -> List[str]:
        """One tag per new version, suffixed with the full asset name (handle included) in multi-asset files"""
        if len(self.assets) > 1 or len(versions) > 1:
            return [generate_version_tag(v.version, v.name) for v in versions]
        return [generate_version_tag(v.version) for v in versions]

    async def apply_tags(self, vcs: VCSBackend, tags: List[str]) -> List[TagResult]:
        """
        Tag the pushed commit and push the tags

        Tagging never fails a push. Each failure is logged and returned as
        a failed TagResult.
        """
        results = []
        for tag in tags:
            try:
                if await vcs.tag(self.directory, tag):
                    results.append(TagResult.ok(tag))
                else:
                    results.append(TagResult.failed(tag, Exception("tag was not created")))
            except Exception as e:
                self.logger.warning(f"Failed to tag commit with {tag}: {e}")
                results.append(TagResult.failed(tag, e))

        if any(r.is_success for r in results):
            try:
                await vcs.push_tags(self.directory)
            except Exception as e:
                self.logger.warning(f"Failed to push tags: {e}")
                results = [TagResult.failed(r.tag, e) if r.is_success else r for r in results]

        for result in results:
            if result.is_success:
                self.progress.debug(f"Tagged commit: {result.tag}")
            else:
                self.progress.warn(f"Could not tag commit with {result.tag}: {result.error}")
        return results

    async def _repository(self,
                          vcs: Optional[VCSBackend],
                          branch: BranchInfo,
                          commit: Optional[str]) -> Optional[Repository]:
        if not vcs:
            return None
        return Repository(
            type=vcs.type,
            main=branch.main,
            commit=commit,
            branch=branch.branch,
            details=await vcs.get_checkout_info(self.directory)
        )

    async def perform(self) -> PushResult:
        """
        Publish the assets of the definition file

        Any failure after versions were reserved aborts the reservation
        before the error propagates.

        Returns:
            References to the published (or already existing) versions

        Raises:
            DependencyCycleError: If this directory is already being pushed
                higher up in the same push tree
        """
        with self.context.enter(self.directory):
            try:
                return await self._perform()
            finally:
                if self._artifact is not None:
                    self._artifact.cleanup()

    async def _perform(self) -> PushResult:
        dry_run = self.options.dry_run
        vcs = await self.vcs_backend()

        await self.progress.progress("Verifying files exist", self.check_exists())
        await self.progress.progress("Verifying working directory", self.check_working_directory())

        artifact = await self.artifact_backend()

        commit = await vcs.get_latest_commit(self.directory) if vcs else None

        minimum_increment = VersionIncrement.NONE
        if vcs:
            minimum_increment = await self.progress.progress(
                "Calculating conventional commit increment",
                self.calculate_minimum_increment(vcs)
            )

        await self.check_dependencies()
        await self.run_build(artifact)
        await self.run_tests(artifact)

        branch = await self.get_branch(vcs)
        checksum = await artifact.calculate_checksum()

        self.transaction = ReservationTransaction(self.registry)
        await self.progress.progress(
            "Create version reservation",
            self.transaction.reserve(ReservationRequest(
                assets=self.assets,
                main_branch=branch.main,
                branch_name=branch.branch,
                commit=commit,
                checksum=checksum,
                minimum_increment=minimum_increment
            ))
        )

        existing = [to_reference(v.name, v.version) for v in self.transaction.existing_versions]
        if existing:
            self.progress.info("Version already existed remotely:")
            for version in self.transaction.existing_versions:
                self.progress.info(f" - {version.name}:{version.version}")

        new_versions = self.transaction.new_versions
        if not new_versions:
            self.progress.info("No new versions found.")
            return PushResult(references=existing, main_branch=branch.main, dry_run=dry_run)

        self.progress.info("Got new versions:")
        for version in new_versions:
            self.progress.info(f" - {version.name}:{version.version}")

        try:
            repository = await self._repository(vcs, branch, commit)
            tags = []
            if vcs and branch.main:
                self.progress.info(
                    f"Assigning {vcs.name} commit id to version: {commit} > "
                    f"[{', '.join(v.version for v in new_versions)}]"
                )
                tags = self.get_version_tags(new_versions)

            self.progress.info(f"Calculated checksum for artifact: {checksum}")

            readme = await read_readme(self.directory)
            attachments = await collect_attachments(self.directory)
            for attachment in attachments:
                self.progress.info(f"Adding attachment: {attachment.filename}")

            versions = []
            for reserved in new_versions:
                for attachment in attachments:
                    reserved.content.set_attachment(attachment)

                artifact_info = None
                if not dry_run:
                    artifact_info = await artifact.push(reserved.name, reserved.version, commit)

                versions.append(AssetVersion(
                    version=reserved.version,
                    content=reserved.content,
                    checksum=checksum,
                    artifact=artifact_info,
                    repository=repository,
                    readme=readme,
                    current=not dry_run
                ))

            result = PushResult(
                references=existing + [to_reference(v.content.name, v.version) for v in versions],
                main_branch=branch.main,
                dry_run=dry_run,
                versions=versions
            )

            if dry_run:
                self.progress.info("Result:")
                self.progress.info(yaml.safe_dump(
                    [v.to_dict() for v in versions],
                    default_flow_style=False,
                    sort_keys=False
                ))
                await self.progress.progress("Releasing dry run reservation", self.transaction.abort())
                self.progress.check("Dry run completed", True)
                return result

            await self.progress.progress(
                f"Committing versions: {', '.join(v.version for v in versions)}",
                self.transaction.commit(versions)
            )
        except BaseException:
            # Reservation must be settled even when the push is cancelled
            if self.transaction.is_open:
                await self.progress.progress("Aborting version", self.transaction.abort())
            raise

        if vcs and tags:
            result.tags = await self.progress.progress("Tagging commit", self.apply_tags(vcs, tags))

        self.progress.check("Push completed", True)
        return result

