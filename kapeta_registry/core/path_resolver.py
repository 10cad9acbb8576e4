"""Path resolution module for the local asset repository"""

import os
from pathlib import Path
from typing import Optional, Union

from ..constants import (
    DEFAULT_KAPETA_HOME,
    ENV_KAPETA_HOME,
    REPOSITORY_DIR,
    VERSION_FILE,
)


class PathResolver:
    """Resolves paths within the local Kapeta home directory

    Installed and linked assets live under
    ``<home>/repository/<handle>/<name>/<version>``; linked working copies
    use the version ``local``.
    """

    def __init__(self, kapeta_home: Optional[Union[str, Path]] = None):
        """Initialize path resolver

        Args:
            kapeta_home: Kapeta home directory. Defaults to $KAPETA_HOME or ~/.kapeta
        """
        if kapeta_home is None:
            kapeta_home = os.environ.get(ENV_KAPETA_HOME, DEFAULT_KAPETA_HOME)
        self.kapeta_home = Path(kapeta_home).expanduser()

    def get_repository_dir(self) -> Path:
        """Get local repository directory path"""
        return self.kapeta_home / REPOSITORY_DIR

    def get_asset_dir(self, handle: str, name: str) -> Path:
        """Get directory holding every version of an asset"""
        return self.get_repository_dir() / handle / name

    def get_repository_asset_path(self, handle: str, name: str, version: str) -> Path:
        """Get path of one asset version in the local repository

        Args:
            handle: Asset handle
            name: Asset name without handle
            version: Version or ``local``

        Returns:
            Path to the version directory (may not exist)
        """
        return self.get_asset_dir(handle, name) / version

    @staticmethod
    def get_version_file(asset_path: Path) -> Path:
        """Get the marker file written into installed versions"""
        return asset_path / VERSION_FILE

    def is_installed(self, handle: str, name: str, version: str) -> bool:
        path = self.get_repository_asset_path(handle, name, version)
        return self.get_version_file(path).is_file()
