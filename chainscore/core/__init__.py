"""
core package for chainscore

This package contains the scoring primitives, the repository client, the file
iteration helpers and configuration handling.
"""

from .checker import (
    INCONCLUSIVE_RESULT_SCORE,
    MAX_RESULT_SCORE,
    MIN_RESULT_SCORE,
    CheckDetail,
    CheckResult,
    DetailLogger,
    DetailType,
    aggregate_scores,
    create_inconclusive_result,
    create_max_score_result,
    create_min_score_result,
    create_proportional_score_result,
    create_result_with_score,
    create_runtime_error_result,
)
from .config import (
    ConfigurationError,
    disable_checks,
    generate_default_config,
    load_config,
    merge_configs,
    save_config,
    validate_config,
)
from .errors import (
    ChainscoreError,
    InternalError,
    InvalidDockerfileError,
    InvalidWorkflowError,
    RepoClientError,
)
from .files import CheckRequest, check_file_contains_commands, check_files_content, check_if_file_exists
from .repo import LocalRepoClient

__all__ = [
    "MAX_RESULT_SCORE",
    "MIN_RESULT_SCORE",
    "INCONCLUSIVE_RESULT_SCORE",
    "CheckDetail",
    "CheckResult",
    "DetailLogger",
    "DetailType",
    "aggregate_scores",
    "create_inconclusive_result",
    "create_max_score_result",
    "create_min_score_result",
    "create_proportional_score_result",
    "create_result_with_score",
    "create_runtime_error_result",
    "ConfigurationError",
    "disable_checks",
    "generate_default_config",
    "load_config",
    "merge_configs",
    "save_config",
    "validate_config",
    "ChainscoreError",
    "InternalError",
    "InvalidDockerfileError",
    "InvalidWorkflowError",
    "RepoClientError",
    "CheckRequest",
    "check_file_contains_commands",
    "check_files_content",
    "check_if_file_exists",
    "LocalRepoClient",
]
