"""
chainscore - supply-chain risk scoring for repositories

Scores the write permissions GitHub workflows grant to their tokens and how
well a repository pins its dependencies: actions, container base images,
downloaded scripts and package manager lock files.
"""

from typing import Optional, cast

from chainscore.utils.version import __version__, get_version, get_version_info

from .core import (
    MAX_RESULT_SCORE,
    MIN_RESULT_SCORE,
    INCONCLUSIVE_RESULT_SCORE,
    CheckResult,
    ConfigurationError,
    DetailLogger,
    LocalRepoClient,
    aggregate_scores,
    disable_checks,
    generate_default_config,
    load_config,
    save_config,
)
from .checks import (
    Check,
    CheckEngine,
    PinnedDependenciesCheck,
    TokenPermissionsCheck,
    create_check_engine,
    scan_repository,
)
from .reports import generate_report, print_report, save_report

__all__ = [
    "__version__",
    "get_version",
    "get_version_info",
    "MAX_RESULT_SCORE",
    "MIN_RESULT_SCORE",
    "INCONCLUSIVE_RESULT_SCORE",
    "CheckResult",
    "DetailLogger",
    "LocalRepoClient",
    "aggregate_scores",
    "load_config",
    "generate_default_config",
    "save_config",
    "disable_checks",
    "ConfigurationError",
    "Check",
    "CheckEngine",
    "TokenPermissionsCheck",
    "PinnedDependenciesCheck",
    "create_check_engine",
    "scan_repository",
    "generate_report",
    "save_report",
    "print_report",
]


def main() -> Optional[int]:
    """Main entry point for the chainscore CLI tool"""
    from .cli import cli

    return cast(Optional[int], cli())
