"""CLI utility functions"""

from .progress import ConsoleProgressReporter
from .output import (
    console,
    format_asset_version,
    format_install_results,
    format_push_result,
    print_failure,
)

__all__ = [
    # Progress utilities
    'ConsoleProgressReporter',

    # Output utilities
    'console',
    'format_asset_version',
    'format_install_results',
    'format_push_result',
    'print_failure',
]
