"""Configuration data models"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional

from ..constants import (
    DEFAULT_DOCKER_REGISTRY,
    DEFAULT_KAPETA_HOME,
    DEFAULT_MAVEN_REGISTRY,
    DEFAULT_MAX_DEPTH,
    DEFAULT_NPM_REGISTRY,
    DEFAULT_REGISTRY_URL,
)


@dataclass
class RegistryConfig:
    """Remote registry settings"""

    url: str = DEFAULT_REGISTRY_URL
    organisation_id: Optional[str] = None
    docker: str = DEFAULT_DOCKER_REGISTRY
    npm: str = DEFAULT_NPM_REGISTRY
    maven: str = DEFAULT_MAVEN_REGISTRY
    access_token: Optional[str] = None

    @property
    def handle(self) -> Optional[str]:
        """Default handle used for names without one"""
        return self.organisation_id

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary. The access token is never written"""
        data = {
            'url': self.url,
            'docker': self.docker,
            'npm': self.npm,
            'maven': self.maven,
        }
        if self.organisation_id:
            data['organisationId'] = self.organisation_id
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'RegistryConfig':
        return cls(
            url=(data.get('url') or DEFAULT_REGISTRY_URL).rstrip('/'),
            organisation_id=data.get('organisationId'),
            docker=data.get('docker') or DEFAULT_DOCKER_REGISTRY,
            npm=data.get('npm') or DEFAULT_NPM_REGISTRY,
            maven=data.get('maven') or DEFAULT_MAVEN_REGISTRY,
            access_token=data.get('accessToken')
        )


@dataclass
class Config:
    """Complete tool configuration"""

    registry: RegistryConfig = field(default_factory=RegistryConfig)
    kapeta_home: Path = field(default_factory=lambda: Path(DEFAULT_KAPETA_HOME).expanduser())
    release_branch: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {'registry': self.registry.to_dict()}

    @classmethod
    def from_dict(cls, data: Dict[str, Any], kapeta_home: Optional[Path] = None) -> 'Config':
        data = data or {}
        config = cls(registry=RegistryConfig.from_dict(data.get('registry') or {}))
        if kapeta_home is not None:
            config.kapeta_home = Path(kapeta_home)
        return config


@dataclass
class PushOptions:
    """Flags controlling a push"""

    dry_run: bool = False
    skip_tests: bool = False
    skip_install: bool = False
    skip_linking: bool = False
    ignore_working_directory: bool = False
    verbose: bool = False
    interactive: bool = False
    registry: Optional[str] = None
    max_depth: int = DEFAULT_MAX_DEPTH

    def for_dependency(self) -> 'PushOptions':
        """Options for a nested push of a local dependency

        Dependencies are always really published, even for a dry run
        of the asset that depends on them.
        """
        return PushOptions(
            dry_run=False,
            skip_tests=self.skip_tests,
            skip_install=self.skip_install,
            skip_linking=self.skip_linking,
            ignore_working_directory=self.ignore_working_directory,
            verbose=self.verbose,
            interactive=self.interactive,
            registry=self.registry,
            max_depth=self.max_depth
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            'dry_run': self.dry_run,
            'skip_tests': self.skip_tests,
            'skip_install': self.skip_install,
            'skip_linking': self.skip_linking,
            'ignore_working_directory': self.ignore_working_directory,
            'verbose': self.verbose,
            'interactive': self.interactive,
            'registry': self.registry,
            'max_depth': self.max_depth
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'PushOptions':
        return cls(**{k: v for k, v in data.items() if k in cls.__dataclass_fields__})
