"""
pinned_dependencies.py - Pinned-Dependencies check

Runs the six pinning sub-checks in order and combines their scores. A
structural error in any sub-check aborts the check with a runtime error.
"""

import logging

from ..core.checker import (
    MAX_RESULT_SCORE,
    MIN_RESULT_SCORE,
    CheckResult,
    aggregate_scores,
    create_max_score_result,
    create_proportional_score_result,
    create_runtime_error_result,
)
from ..core.errors import ChainscoreError
from ..core.files import CheckRequest
from .base import Check
from .downloads import (
    is_dockerfile_free_of_insecure_downloads,
    is_github_workflow_script_free_of_insecure_downloads,
    is_shell_script_free_of_insecure_downloads,
)
from .pinning import (
    is_dockerfile_pinned,
    is_github_actions_workflow_pinned,
    is_package_manager_lock_file_present,
)

logger = logging.getLogger(__name__)

CHECK_PINNED_DEPENDENCIES = "Pinned-Dependencies"

SUB_CHECKS = (
    is_package_manager_lock_file_present,
    is_github_actions_workflow_pinned,
    is_dockerfile_pinned,
    is_dockerfile_free_of_insecure_downloads,
    is_shell_script_free_of_insecure_downloads,
    is_github_workflow_script_free_of_insecure_downloads,
)


class PinnedDependenciesCheck(Check):
    """Check that dependencies are pinned by hash and locked"""

    def __init__(self) -> None:
        super().__init__(
            name=CHECK_PINNED_DEPENDENCIES,
            description=(
                "Determines whether the project pins its dependencies: actions, "
                "container images, downloaded scripts and package manager lock files"
            ),
            remediation=(
                "Pin actions to a full commit SHA, images to a sha256 digest, verify "
                "downloads by hash and commit lock files for package managers"
            ),
        )

    def run(self, request: CheckRequest) -> CheckResult:
        scores = []
        for sub_check in SUB_CHECKS:
            try:
                score = sub_check(request)
            except ChainscoreError as e:
                logger.debug("%s failed in %s: %s", self.name, sub_check.__name__, e)
                return create_runtime_error_result(self.name, e)

            # Missing evidence counts as the worst case.
            scores.append(max(MIN_RESULT_SCORE, score))

        score = aggregate_scores(*scores)
        if score == MAX_RESULT_SCORE:
            return create_max_score_result(self.name, "all dependencies are pinned")

        return create_proportional_score_result(
            self.name, "unpinned dependencies detected", score, MAX_RESULT_SCORE
        )
