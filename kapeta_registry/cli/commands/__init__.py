"""CLI commands"""

from . import push
from . import install
from . import uninstall
from . import clone
from . import link
from . import view

__all__ = [
    "push",
    "install",
    "uninstall",
    "clone",
    "link",
    "view",
]
