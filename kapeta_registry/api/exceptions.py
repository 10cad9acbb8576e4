"""Exception definitions for kapeta-registry API"""

from typing import List, Optional

from ..constants import ErrorCode


class RegistryToolError(Exception):
    """Base exception for kapeta-registry"""

    def __init__(self, message: str, error_code: str = None):
        super().__init__(message)
        self.error_code = error_code


class ValidationError(RegistryToolError):
    """Asset definition is missing or malformed"""

    def __init__(self, message: str):
        super().__init__(message, ErrorCode.VALIDATION_FAILED)


class PreconditionError(RegistryToolError):
    """Working directory is not in a publishable state"""

    def __init__(self, message: str):
        super().__init__(message, ErrorCode.PRECONDITION_FAILED)


class DependencyNotFoundError(RegistryToolError):
    """Local dependency could not be located on disk"""

    def __init__(self, dependency: str, path: Optional[str] = None, message: Optional[str] = None):
        if message is None:
            if path:
                message = f"Path for local dependency not found: {path}"
            else:
                message = f"Local dependency not found: {dependency}"
        super().__init__(message, ErrorCode.DEPENDENCY_NOT_FOUND)
        self.dependency = dependency
        self.path = path


class DependencyCycleError(RegistryToolError):
    """Local dependencies form a cycle or nest too deeply"""

    def __init__(self, message: str, stack: Optional[List[str]] = None):
        super().__init__(message, ErrorCode.DEPENDENCY_CYCLE)
        self.stack = stack or []


class ReservationError(RegistryToolError):
    """Registry refused or returned no reservation"""

    def __init__(self, message: str = "Failed to reserve versions"):
        super().__init__(message, ErrorCode.RESERVATION_FAILED)


class BuildError(RegistryToolError):
    """Build step failed"""

    def __init__(self, message: str):
        super().__init__(message, ErrorCode.BUILD_FAILED)


class TestsFailedError(RegistryToolError):
    """Test step failed. The underlying cause is chained, not shown"""

    __test__ = False

    def __init__(self):
        super().__init__("Tests failed", ErrorCode.TESTS_FAILED)


class RegistryError(RegistryToolError):
    """Registry communication error"""
    pass


class RegistryUnavailableError(RegistryError):
    """Registry could not be reached"""

    def __init__(self, base_url: str):
        message = (
            f"Failed to reach Kapeta registry on {base_url}. "
            "Please check your settings and try again."
        )
        super().__init__(message, ErrorCode.REGISTRY_UNAVAILABLE)
        self.base_url = base_url


class RegistryResponseError(RegistryError):
    """Registry answered with an error status"""

    def __init__(self, message: str, status_code: int):
        super().__init__(message, ErrorCode.REGISTRY_RESPONSE_ERROR)
        self.status_code = status_code


class AssetNotFoundError(RegistryError):
    """Asset version not found in the registry"""

    def __init__(self, name: str, version: str):
        message = f"Asset not found: {name}:{version}"
        super().__init__(message, ErrorCode.ASSET_NOT_FOUND)
        self.name = name
        self.version = version


class ArtifactBackendNotFoundError(RegistryToolError):
    """No artifact backend handles the asset"""

    def __init__(self, message: str):
        super().__init__(message, ErrorCode.ARTIFACT_BACKEND_NOT_FOUND)


class VCSError(RegistryToolError):
    """Version control operation failed"""

    def __init__(self, message: str):
        super().__init__(message, ErrorCode.VCS_ERROR)


class CommandError(RegistryToolError):
    """External command exited with a non-zero status"""

    def __init__(self, command: List[str], exit_code: int, output: str = ""):
        message = f"Command failed with exit code {exit_code}: {' '.join(command)}"
        if output:
            message += f"\n{output.strip()}"
        super().__init__(message, ErrorCode.COMMAND_FAILED)
        self.command = command
        self.exit_code = exit_code
        self.output = output


class ConfigError(RegistryToolError):
    """Configuration error"""

    def __init__(self, message: str):
        super().__init__(message, ErrorCode.CONFIG_ERROR)


class InstallError(RegistryToolError):
    """Installing an asset into the local repository failed"""

    def __init__(self, message: str):
        super().__init__(message, ErrorCode.INSTALL_FAILED)
