"""
version.py - Version management utilities

This module provides version information for chainscore.
"""

from typing import Any, Dict

from ..core.checker import RESULT_VERSION

# Version information
__version__ = "0.1.0"
__release_date__ = "2026-10-19"


def get_version() -> str:
    """
    Get chainscore version

    Returns:
        Version string
    """
    return __version__


def get_version_info() -> Dict[str, Any]:
    """
    Get detailed version information

    Returns:
        Dictionary with version, release date, etc.
    """
    return {
        "version": __version__,
        "release_date": __release_date__,
        "release_year": int(__release_date__.split("-")[0]),
        "result_version": RESULT_VERSION,
    }
