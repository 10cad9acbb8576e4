"""Global constants for kapeta-registry"""

from enum import Enum
import re

APP_NAME = "kapeta-registry"

# Asset definition files
ASSET_FILE = "kapeta.yml"
ASSET_FILE_GLOB = "*/**/kapeta.yml"
VERSION_FILE = ".kapeta/version.yml"

# Reference handling
REFERENCE_SCHEME = "kapeta://"
LOCAL_VERSION = "local"
CURRENT_VERSION = "current"
CORE_KIND_PREFIX = "core/"
KIND_PLAN = "core/plan"
KIND_BLOCK_TYPE_EXECUTABLE = "core/block-type-executable"

# Published record extras
README_FILES = [
    ("README.md", "markdown"),
    ("README.txt", "text"),
    ("README", "text"),
]

ATTACHMENT_FILES = [
    ("kapeta.config.yml", "application/yaml"),
    (".kapeta.env", "text/plain+dotenv"),
]
ATTACHMENT_FORMAT_BASE64 = "base64"

# User supplied scripts, searched in order relative to the asset directory
SCRIPT_LOCATIONS = [
    "scripts/{name}.sh",
    "{name}.sh",
]

# Tagging
TAG_PREFIX = "v"

# Default master branch for assets outside version control
DEFAULT_BRANCH = "master"

# Recursion guard for nested local dependency pushes
DEFAULT_MAX_DEPTH = 16

# Registry defaults
DEFAULT_KAPETA_HOME = "~/.kapeta"
DEFAULT_REGISTRY_URL = "https://registry.kapeta.com"
DEFAULT_DOCKER_REGISTRY = "docker.kapeta.com"
DEFAULT_NPM_REGISTRY = "https://npm.kapeta.com"
DEFAULT_MAVEN_REGISTRY = "https://maven.kapeta.com/repository/maven-releases"
DEFAULT_HTTP_TIMEOUT = 60.0
REGISTRY_API_PATH = "/v1/registry"
REGISTRY_CONFIG_FILES = [
    "registry.yml",
    "registry.yaml",
    "registry.json",
]
REPOSITORY_DIR = "repository"

# Environment variables
ENV_KAPETA_HOME = "KAPETA_HOME"
ENV_REGISTRY_URL = "KAPETA_REGISTRY_URL"
ENV_ACCESS_TOKEN = "KAPETA_ACCESS_TOKEN"
ENV_RELEASE_BRANCH = "KAPETA_RELEASE_BRANCH"

# Logging
LOG_FORMAT = "%(message)s"

# Conventional commit parsing
COMMIT_HEADER_PATTERN = re.compile(r"^(\w*)(?:\((.*)\))?!?: (.*)$")
COMMIT_BREAKING_HEADER_PATTERN = re.compile(r"^(\w*)(?:\((.*)\))?!: (.*)$")
COMMIT_BREAKING_NOTE_KEYWORDS = ["BREAKING CHANGE", "BREAKING-CHANGE"]

VERSION_PATTERN = re.compile(
    r"^(?P<major>\d+)\.(?P<minor>\d+)\.(?P<patch>\d+)"
    r"(?P<suffix>[-+].*)?$"
)


class VersionIncrement(Enum):
    """Version increment severity, ordered NONE < PATCH < MINOR < MAJOR"""
    NONE = "NONE"
    PATCH = "PATCH"
    MINOR = "MINOR"
    MAJOR = "MAJOR"

    @property
    def rank(self) -> int:
        return _INCREMENT_RANK[self]


_INCREMENT_RANK = {
    VersionIncrement.NONE: 0,
    VersionIncrement.PATCH: 1,
    VersionIncrement.MINOR: 2,
    VersionIncrement.MAJOR: 3,
}


class ArtifactType(Enum):
    DOCKER = "docker"
    NPM = "npm"
    MAVEN = "maven"
    YAML = "yaml"


class VCSType(Enum):
    GIT = "git"


# Error codes
class ErrorCode:
    VALIDATION_FAILED = "KR001"
    PRECONDITION_FAILED = "KR002"
    DEPENDENCY_NOT_FOUND = "KR003"
    DEPENDENCY_CYCLE = "KR004"
    RESERVATION_FAILED = "KR005"
    BUILD_FAILED = "KR006"
    TESTS_FAILED = "KR007"
    REGISTRY_UNAVAILABLE = "KR008"
    REGISTRY_RESPONSE_ERROR = "KR009"
    ARTIFACT_BACKEND_NOT_FOUND = "KR010"
    VCS_ERROR = "KR011"
    COMMAND_FAILED = "KR012"
    CONFIG_ERROR = "KR013"
    INSTALL_FAILED = "KR014"
    ASSET_NOT_FOUND = "KR015"

# Display constants
EMOJI_SUCCESS = "✓"
EMOJI_ERROR = "✗"
EMOJI_WARNING = "⚠"
EMOJI_ARROW = "→"
