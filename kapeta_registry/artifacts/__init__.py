"""Artifact backends"""

from .base import ArtifactBackend
from .docker import DockerBackend
from .npm import NPMBackend
from .maven import MavenBackend
from .yaml_file import YAMLBackend
from .factory import ArtifactFactory

__all__ = [
    'ArtifactBackend',
    'DockerBackend',
    'NPMBackend',
    'MavenBackend',
    'YAMLBackend',
    'ArtifactFactory',
]
