"""
permissions.py - Token-Permissions check

This module infers the write permissions GitHub workflows grant to the
GITHUB_TOKEN and scores them. Findings from every workflow file accumulate in
one PermissionScanState owned by the check for the duration of a scan.

See https://docs.github.com/en/actions/reference/authentication-in-a-workflow
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Set

from ..core.checker import (
    MAX_RESULT_SCORE,
    MIN_RESULT_SCORE,
    CheckResult,
    DetailLogger,
    create_max_score_result,
    create_result_with_score,
    create_runtime_error_result,
)
from ..core.errors import ChainscoreError
from ..core.files import CheckRequest, check_file_contains_commands, check_files_content
from ..parsers.workflow import (
    WORKFLOW_PATTERN,
    PermissionsKind,
    is_workflow_file,
    iter_raw_jobs,
    load_workflow_mapping,
    read_permissions,
)
from .base import Check
from .packaging import is_codeql_analysis_workflow, is_packaging_workflow

CHECK_TOKEN_PERMISSIONS = "Token-Permissions"

# Special marker, not a GitHub permission: every permission is treated as write.
ALL_PERMISSIONS = "all"

# Score deductions per permission granted write access, in the order they
# are listed by GitHub.
PERMISSION_PENALTIES: Dict[str, float] = {
    # May change the result of pre-submits and get a PR merged.
    "statuses": 0.5,
    # May edit checks to remove pre-submits.
    "checks": 0.5,
    # May read vulnerability reports before a patch is available.
    "security-events": 1,
    # May trigger VM runs billed to the repository owner.
    "deployments": 1,
    # Commit unreviewed code.
    "contents": MAX_RESULT_SCORE,
    # Publish packages.
    "packages": MAX_RESULT_SCORE,
    # Steal secrets by adding a malicious workflow.
    "actions": MAX_RESULT_SCORE,
}
SENSITIVE_PERMISSIONS = tuple(PERMISSION_PENALTIES)


@dataclass
class PermissionScanState:
    """Write permissions observed across all workflows of a repository"""

    top_level_write_permissions: Dict[str, bool] = field(default_factory=dict)
    run_level_write_permissions: Dict[str, bool] = field(default_factory=dict)

    def is_present(self, name: str) -> bool:
        return (
            name in self.top_level_write_permissions or name in self.run_level_write_permissions
        )


def is_permission_of_interest(name: str, ignored_permissions: Set[str]) -> bool:
    """Check if a permission is sensitive and not exempted for the current file"""
    name = name.lower()
    return name in SENSITIVE_PERMISSIONS and name not in ignored_permissions


def create_ignored_permissions(content: str, path: str, dl: DetailLogger) -> Set[str]:
    """
    Compute the permissions exempted for one workflow file

    Args:
        content: Raw workflow text
        path: Repository-relative path
        dl: Detail logger

    Returns:
        Set of permission names not to record for this file
    """
    ignored: Set[str] = set()
    if is_packaging_workflow(content, path, dl):
        ignored.add("packages")
    if is_codeql_analysis_workflow(content, path, dl):
        ignored.add("security-events")
    return ignored


def _validate_map_permissions(
    values: Dict[str, str],
    path: str,
    dl: DetailLogger,
    permissions: Dict[str, bool],
    ignored_permissions: Set[str],
) -> None:
    for key, value in values.items():
        if value.lower() != "write":
            dl.info("'%s' permission set to '%s' in %s", key, value, path)
            continue

        if is_permission_of_interest(key, ignored_permissions):
            dl.warn("'%s' permission set to '%s' in %s", key, value, path)
            permissions[key.lower()] = True
        else:
            # Not scored; only useful when debugging.
            dl.debug("'%s' permission set to '%s' in %s", key, value, path)


def validate_permissions(
    mapping: Dict[Any, Any],
    path: str,
    dl: DetailLogger,
    permissions: Dict[str, bool],
    ignored_permissions: Set[str],
) -> None:
    """
    Classify the ``permissions`` declaration of a workflow or job

    Args:
        mapping: Raw workflow or job mapping holding the declaration
        path: Repository-relative path
        dl: Detail logger
        permissions: Mapping receiving permissions observed as write
        ignored_permissions: Permissions exempted for this file

    Raises:
        InvalidWorkflowError: If the declaration has an unexpected type
    """
    decl = read_permissions(mapping)

    if decl.kind == PermissionsKind.EMPTY:
        dl.info("permissions set to 'none' in %s", path)
    elif decl.kind == PermissionsKind.STRING:
        if decl.value.lower() != "read-all":
            dl.warn("permissions set to '%s' in %s", decl.value, path)
            permissions[ALL_PERMISSIONS] = True
        else:
            dl.info("permissions set to '%s' in %s", decl.value, path)
    elif decl.kind == PermissionsKind.MAPPING:
        _validate_map_permissions(decl.value, path, dl, permissions, ignored_permissions)


def validate_top_level_permissions(
    workflow: Dict[Any, Any],
    path: str,
    dl: DetailLogger,
    state: PermissionScanState,
    ignored_permissions: Set[str],
) -> None:
    """Record workflow-scope permissions; a missing declaration grants everything"""
    if "permissions" not in workflow:
        dl.warn("no permission defined in %s", path)
        state.top_level_write_permissions[ALL_PERMISSIONS] = True
        return

    validate_permissions(
        workflow, path, dl, state.top_level_write_permissions, ignored_permissions
    )


def validate_run_level_permissions(
    workflow: Dict[Any, Any],
    path: str,
    dl: DetailLogger,
    state: PermissionScanState,
    ignored_permissions: Set[str],
) -> None:
    """Record job-scope permissions; jobs without a declaration are skipped"""
    for job_id, job in iter_raw_jobs(workflow):
        # Most jobs need no write access, so top-level read-only permissions
        # are enough and job-level declarations stay optional.
        if "permissions" not in job:
            dl.debug("no permission defined for job '%s' in %s", job_id, path)
            continue

        validate_permissions(job, path, dl, state.run_level_write_permissions, ignored_permissions)


def validate_token_permissions(
    path: str, content: bytes, dl: DetailLogger, state: PermissionScanState
) -> bool:
    """
    Per-file callback recording the permissions declared by one workflow

    Args:
        path: Repository-relative path
        content: Raw file content
        dl: Detail logger
        state: Accumulator shared across workflow files

    Returns:
        True, the scan always continues with the next file

    Raises:
        InvalidWorkflowError: If the workflow cannot be decoded
    """
    if not is_workflow_file(path):
        dl.debug("skipping non-YAML file in workflows directory: %s", path)
        return True

    if not check_file_contains_commands(content, "#"):
        return True

    workflow = load_workflow_mapping(content)
    ignored_permissions = create_ignored_permissions(
        content.decode("utf-8", errors="replace"), path, dl
    )

    validate_top_level_permissions(workflow, path, dl, state, ignored_permissions)
    validate_run_level_permissions(workflow, path, dl, state, ignored_permissions)

    return True


def calculate_score(state: PermissionScanState) -> int:
    """
    Score the permissions observed across a repository

    Args:
        state: Accumulated permission findings

    Returns:
        Integer score between MIN_RESULT_SCORE and MAX_RESULT_SCORE
    """
    if state.is_present(ALL_PERMISSIONS):
        return MIN_RESULT_SCORE

    score = float(MAX_RESULT_SCORE)
    for name, penalty in PERMISSION_PENALTIES.items():
        if state.is_present(name):
            score -= penalty

    if score < MIN_RESULT_SCORE:
        return MIN_RESULT_SCORE

    return int(score)


def create_result_for_least_privilege_tokens(
    state: PermissionScanState, error: Optional[Exception] = None
) -> CheckResult:
    """Convert the accumulated state, or the error that aborted the scan, into a result"""
    if error is not None:
        return create_runtime_error_result(CHECK_TOKEN_PERMISSIONS, error)

    score = calculate_score(state)
    if score != MAX_RESULT_SCORE:
        return create_result_with_score(
            CHECK_TOKEN_PERMISSIONS,
            "non read-only tokens detected in GitHub workflows",
            score,
        )

    return create_max_score_result(
        CHECK_TOKEN_PERMISSIONS, "tokens are read-only in GitHub workflows"
    )


class TokenPermissionsCheck(Check):
    """Check that workflow tokens are restricted to read-only access"""

    def __init__(self) -> None:
        super().__init__(
            name=CHECK_TOKEN_PERMISSIONS,
            description="Determines whether GitHub workflow tokens are read-only by default",
            remediation=(
                "Set 'permissions: read-all' at the top of each workflow and grant "
                "write permissions only to the jobs that need them"
            ),
        )

    def run(self, request: CheckRequest) -> CheckResult:
        state = PermissionScanState()
        try:
            check_files_content(
                WORKFLOW_PATTERN, False, request, validate_token_permissions, state
            )
        except ChainscoreError as e:
            return create_result_for_least_privilege_tokens(state, e)

        return create_result_for_least_privilege_tokens(state)
