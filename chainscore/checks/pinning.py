"""
pinning.py - Pin verification for actions, container images and lock files

Each sub-check walks the repository with the file helpers, folding per-file
outcomes into a PinningState with a logical AND, and turns the final state
into a score on the check scale.
"""

import re
from dataclasses import dataclass
from typing import Dict, Optional

from ..core.checker import (
    INCONCLUSIVE_RESULT_SCORE,
    MAX_RESULT_SCORE,
    MIN_RESULT_SCORE,
    DetailLogger,
)
from ..core.errors import InvalidDockerfileError
from ..core.files import (
    CheckRequest,
    check_file_contains_commands,
    check_files_content,
    check_if_file_exists,
)
from ..parsers.dockerfile import parse_dockerfile
from ..parsers.workflow import WORKFLOW_PATTERN, is_workflow_file, parse_workflow
from .shell import is_shell_script_file

DOCKERFILE_PATTERN = "*Dockerfile*"

ACTION_DIGEST_RE = re.compile(r"@[a-f0-9]{40,}")
IMAGE_DIGEST_RE = re.compile(r"@sha256:[a-f0-9]{64}")

# Lower-cased root entries accepted as evidence of locked dependencies,
# with the ecosystem named in diagnostics. requirements.txt is not a lock
# file: it does not cover transitive dependencies.
LOCK_FILES: Dict[str, str] = {
    "go.sum": "go lock file detected: %s",
    "vendor/": "vendoring detected in: %s",
    "third_party/": "vendoring detected in: %s",
    "third-party/": "vendoring detected in: %s",
    "package-lock.json": "javascript lock file detected: %s",
    "npm-shrinkwrap.json": "javascript lock file detected: %s",
    "pipfile.lock": "python lock file detected: %s",
    "poetry.lock": "python lock file detected: %s",
    "gemfile.lock": "ruby lock file detected: %s",
    "cargo.lock": "rust lock file detected: %s",
    "yarn.lock": "yarn lock file detected: %s",
    "composer.lock": "composer lock file detected: %s",
}


@dataclass
class PinningState:
    """Outcome of a pinning sub-check, AND-ed across files"""

    pinned: bool = True

    def record(self, pinned: bool) -> None:
        self.pinned = self.pinned and pinned


def create_return_values(pinned: bool, info_msg: str, dl: DetailLogger) -> int:
    """
    Turn a sub-check outcome into a score

    Args:
        pinned: Whether every file passed
        info_msg: Message logged at info level on success
        dl: Detail logger

    Returns:
        MAX_RESULT_SCORE on success, MIN_RESULT_SCORE otherwise
    """
    if not pinned:
        return MIN_RESULT_SCORE

    dl.info(info_msg)
    return MAX_RESULT_SCORE


def is_action_pinned(uses: str) -> bool:
    """Check if a ``uses`` reference carries a commit-grade digest"""
    return ACTION_DIGEST_RE.search(uses) is not None


def is_image_pinned(image: str) -> bool:
    """Check if an image reference carries a sha256 digest"""
    return IMAGE_DIGEST_RE.search(image) is not None


def validate_github_action_workflow(
    path: str, content: bytes, dl: DetailLogger, state: PinningState
) -> bool:
    """
    Per-file callback checking that every ``uses`` reference is pinned

    Args:
        path: Repository-relative path
        content: Raw file content
        dl: Detail logger
        state: Accumulator for the sub-check

    Returns:
        False once an unpinned reference has been found in this file

    Raises:
        InvalidWorkflowError: If the workflow cannot be decoded
    """
    if not is_workflow_file(path):
        dl.debug("skipping non-YAML file in workflows directory: %s", path)
        return True

    if not check_file_contains_commands(content, "#"):
        return True

    workflow = parse_workflow(content)

    pinned = True
    for job in workflow.jobs:
        for step in job.steps:
            if not step.uses:
                continue
            # A hash at least as long as SHA-1 is required, e.g. action@<sha>.
            if not is_action_pinned(step.uses):
                pinned = False
                dl.warn(
                    "unpinned dependency detected in %s: '%s' (job '%s')",
                    path,
                    step.uses,
                    job.display_name,
                )

    state.record(pinned)
    return pinned


def is_github_actions_workflow_pinned(request: CheckRequest) -> int:
    """Score the pinning of actions referenced by workflows"""
    state = PinningState()
    check_files_content(WORKFLOW_PATTERN, True, request, validate_github_action_workflow, state)
    return create_return_values(state.pinned, "GitHub actions are pinned", request.dlogger)


def validate_dockerfile_is_pinned(
    path: str, content: bytes, dl: DetailLogger, state: PinningState
) -> bool:
    """
    Per-file callback checking that every base image is pinned by digest

    Files are matched by name, so shell scripts and templates named like
    Dockerfiles are expected here.

    Args:
        path: Repository-relative path
        content: Raw file content
        dl: Detail logger
        state: Accumulator for the sub-check

    Returns:
        True, all files are scanned

    Raises:
        InvalidDockerfileError: If a FROM instruction has an unexpected shape
    """
    if is_shell_script_file(path, content):
        return True

    if not check_file_contains_commands(content, "#"):
        return True

    dockerfile = parse_dockerfile(content)

    pinned = True
    pinned_stages: Dict[str, bool] = {}
    for instruction in dockerfile.from_instructions():
        args = instruction.args

        if args and args[0].lower() == "scratch":
            if len(args) == 3 and args[1].lower() == "as":
                pinned_stages[args[2]] = True
            continue

        if len(args) == 3 and args[1].lower() == "as":
            name, alias = args[0], args[2]
            if pinned_stages.get(name) or is_image_pinned(name):
                pinned_stages[alias] = True
                continue

            pinned = False
            dl.warn("unpinned dependency detected in %s: '%s'", path, name)

        elif len(args) == 1:
            name = args[0]
            if not pinned_stages.get(name) and not is_image_pinned(name):
                pinned = False
                dl.warn("unpinned dependency detected in %s: '%s'", path, name)

        else:
            raise InvalidDockerfileError(
                f"invalid FROM instruction at line {instruction.line} in {path}: "
                f"unexpected arguments {list(args)}"
            )

    # A file without FROM, e.g. an included partial, is vacuously pinned.
    state.record(pinned)
    return True


def is_dockerfile_pinned(request: CheckRequest) -> int:
    """Score the pinning of Dockerfile base images"""
    state = PinningState()
    check_files_content(DOCKERFILE_PATTERN, False, request, validate_dockerfile_is_pinned, state)
    return create_return_values(state.pinned, "Dockerfile dependencies are pinned", request.dlogger)


def validate_package_manager_file(path: str, dl: DetailLogger, state: PinningState) -> bool:
    """
    Existence callback recognizing lock files and vendoring directories

    Args:
        path: Repository-relative entry, directories end with ``/``
        dl: Detail logger
        state: Set to found once a lock artifact is seen

    Returns:
        True, all entries are inspected
    """
    message: Optional[str] = LOCK_FILES.get(path.lower())
    if message is None:
        return True

    dl.info(message, path)
    state.pinned = True
    return True


def is_package_manager_lock_file_present(request: CheckRequest) -> int:
    """
    Score the presence of package manager lock files

    Returns:
        MAX_RESULT_SCORE if a lock artifact exists, INCONCLUSIVE_RESULT_SCORE otherwise
    """
    state = PinningState(pinned=False)
    check_if_file_exists(request, validate_package_manager_file, state)
    if not state.pinned:
        request.dlogger.warn("no lock files detected for a package manager")
        return INCONCLUSIVE_RESULT_SCORE

    return MAX_RESULT_SCORE
