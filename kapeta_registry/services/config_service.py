"""Registry configuration service"""

import json
import logging
import os
from pathlib import Path
from typing import Optional, Union

import yaml

from ..api.exceptions import ConfigError
from ..constants import (
    DEFAULT_KAPETA_HOME,
    ENV_ACCESS_TOKEN,
    ENV_KAPETA_HOME,
    ENV_REGISTRY_URL,
    ENV_RELEASE_BRANCH,
    REGISTRY_CONFIG_FILES,
)
from ..models.config import Config
from ..utils.file_utils import atomic_write


class ConfigService:
    """Loads and saves the registry configuration in the Kapeta home directory"""

    def __init__(self, kapeta_home: Optional[Union[str, Path]] = None):
        """Initialize config service

        Args:
            kapeta_home: Kapeta home directory. Defaults to $KAPETA_HOME or ~/.kapeta
        """
        if kapeta_home is None:
            kapeta_home = os.environ.get(ENV_KAPETA_HOME, DEFAULT_KAPETA_HOME)
        self.kapeta_home = Path(kapeta_home).expanduser()
        self._config: Optional[Config] = None
        self.logger = logging.getLogger(self.__class__.__name__)

    @property
    def config_path(self) -> Path:
        """First existing config file, or the default location for a new one"""
        for filename in REGISTRY_CONFIG_FILES:
            path = self.kapeta_home / filename
            if path.is_file():
                return path
        return self.kapeta_home / REGISTRY_CONFIG_FILES[0]

    @property
    def config(self) -> Config:
        """Get current configuration (lazy load)"""
        if self._config is None:
            self.load_config()
        return self._config

    def load_config(self) -> Config:
        """Load configuration, falling back to defaults when no file exists

        Returns:
            Loaded configuration with environment overrides applied

        Raises:
            ConfigError: If the file cannot be parsed
        """
        path = self.config_path
        data = {}

        if path.is_file():
            content = path.read_text(encoding='utf-8')
            try:
                if path.suffix == '.json':
                    data = json.loads(content) if content.strip() else {}
                else:
                    data = yaml.safe_load(content) or {}
            except (yaml.YAMLError, ValueError) as e:
                raise ConfigError(f"Failed to parse {path}: {e}")

            if not isinstance(data, dict):
                raise ConfigError(f"Invalid configuration in {path}: expected a mapping")
            self.logger.debug(f"Loaded configuration from {path}")
        else:
            self.logger.debug(f"No configuration found in {self.kapeta_home}, using defaults")

        config = Config.from_dict(data, kapeta_home=self.kapeta_home)
        self._apply_environment(config)
        self._config = config
        return config

    @staticmethod
    def _apply_environment(config: Config) -> None:
        url = os.environ.get(ENV_REGISTRY_URL)
        if url:
            config.registry.url = url.rstrip('/')

        token = os.environ.get(ENV_ACCESS_TOKEN)
        if token:
            config.registry.access_token = token

        release_branch = os.environ.get(ENV_RELEASE_BRANCH)
        if release_branch:
            config.release_branch = release_branch

    def save_config(self, config: Optional[Config] = None) -> Path:
        """Save configuration in the format of the file it was loaded from

        Args:
            config: Configuration to save (uses current if not provided)

        Returns:
            Path written
        """
        if config:
            self._config = config

        if not self._config:
            raise ConfigError("No configuration to save")

        path = self.config_path
        data = self._config.to_dict()
        if path.suffix == '.json':
            content = json.dumps(data, indent=2) + '\n'
        else:
            content = yaml.safe_dump(data, default_flow_style=False, sort_keys=False)

        atomic_write(path, content)
        self.logger.info(f"Saved configuration to {path}")
        return path
