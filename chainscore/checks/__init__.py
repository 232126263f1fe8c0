"""
checks package for chainscore

This package contains the Token-Permissions and Pinned-Dependencies checks,
their helpers and the check engine.
"""

from .base import Check
from .engine import CheckEngine, create_check_engine, scan_repository
from .permissions import TokenPermissionsCheck, PermissionScanState
from .pinned_dependencies import PinnedDependenciesCheck
from .pinning import PinningState

__all__ = [
    # Base class
    "Check",
    # Check engine
    "CheckEngine",
    "create_check_engine",
    "scan_repository",
    # Checks
    "TokenPermissionsCheck",
    "PinnedDependenciesCheck",
    # Scan state
    "PermissionScanState",
    "PinningState",
]
