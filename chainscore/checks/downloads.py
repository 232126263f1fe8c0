"""
downloads.py - Insecure-download delegation

Shell scripts, Dockerfile RUN bodies and workflow inline scripts are turned
into shell text and handed to the insecure-download detector in shell.py.
"""

import re
from dataclasses import dataclass, field
from typing import List, Tuple

from ..core.checker import DetailLogger
from ..core.errors import InvalidDockerfileError
from ..core.files import CheckRequest, check_file_contains_commands, check_files_content
from ..parsers.dockerfile import parse_dockerfile
from ..parsers.workflow import WORKFLOW_PATTERN, is_workflow_file, parse_workflow
from .pinning import DOCKERFILE_PATTERN, PinningState, create_return_values
from .shell import (
    DEFAULT_SUPPORTED_SHELLS,
    is_shell_script_file,
    is_supported_shell,
    validate_shell_file,
)

DEFAULT_WORKFLOW_SHELL = "bash"
GITHUB_REDACTED_VAR = "GITHUB_REDACTED_VAR"

# Expression interpolation such as ${{ github.event.issue.title }}.
_GITHUB_EXPRESSION_RE = re.compile(r"{{[^{}]*}}")


@dataclass
class WorkflowScriptState(PinningState):
    """Pinning state for workflow scripts, with the shells that get analysed"""

    supported_shells: Tuple[str, ...] = field(default=DEFAULT_SUPPORTED_SHELLS)


def validate_shell_script_is_free_of_insecure_downloads(
    path: str, content: bytes, dl: DetailLogger, state: PinningState
) -> bool:
    """Per-file callback running the detector on shell scripts, other files are ignored"""
    if not is_shell_script_file(path, content):
        return True

    state.record(validate_shell_file(path, content, dl))
    return True


def is_shell_script_free_of_insecure_downloads(request: CheckRequest) -> int:
    """Score insecure downloads in repository shell scripts"""
    state = PinningState()
    check_files_content(
        "*", False, request, validate_shell_script_is_free_of_insecure_downloads, state
    )
    return create_return_values(
        state.pinned,
        "no insecure (unpinned) dependency downloads found in shell scripts",
        request.dlogger,
    )


def validate_dockerfile_is_free_of_insecure_downloads(
    path: str, content: bytes, dl: DetailLogger, state: PinningState
) -> bool:
    """
    Per-file callback running the detector on the RUN bodies of a Dockerfile

    Args:
        path: Repository-relative path
        content: Raw file content
        dl: Detail logger
        state: Accumulator for the sub-check

    Returns:
        True, all files are scanned

    Raises:
        InvalidDockerfileError: If a RUN instruction has no arguments
    """
    # Scripts such as build_dockerfile.sh match the Dockerfile pattern.
    if is_shell_script_file(path, content):
        return True

    if not check_file_contains_commands(content, "#"):
        return True

    dockerfile = parse_dockerfile(content)

    script = []
    for instruction in dockerfile.run_instructions():
        if not instruction.args:
            raise InvalidDockerfileError(
                f"invalid RUN instruction at line {instruction.line} in {path}: no arguments"
            )
        script.append(" ".join(instruction.args) + "\n")

    state.record(validate_shell_file(path, "".join(script).encode("utf-8"), dl))
    return True


def is_dockerfile_free_of_insecure_downloads(request: CheckRequest) -> int:
    """Score insecure downloads in Dockerfile RUN instructions"""
    state = PinningState()
    check_files_content(
        DOCKERFILE_PATTERN, False, request, validate_dockerfile_is_free_of_insecure_downloads, state
    )
    return create_return_values(
        state.pinned,
        "no insecure (unpinned) dependency downloads found in Dockerfiles",
        request.dlogger,
    )


def redact_github_expressions(script: str) -> str:
    """Replace ``{{ ... }}`` spans so templating is not parsed as shell"""
    return _GITHUB_EXPRESSION_RE.sub(GITHUB_REDACTED_VAR, script)


def validate_github_workflow_is_free_of_insecure_downloads(
    path: str, content: bytes, dl: DetailLogger, state: WorkflowScriptState
) -> bool:
    """
    Per-file callback running the detector on the inline scripts of a workflow

    Steps whose shell is not a supported POSIX shell, such as ``pwsh`` or
    ``cmd``, are skipped.

    Args:
        path: Repository-relative path
        content: Raw file content
        dl: Detail logger
        state: Accumulator for the sub-check

    Returns:
        True, all files are scanned

    Raises:
        InvalidWorkflowError: If the workflow cannot be decoded
    """
    if not is_workflow_file(path):
        dl.debug("skipping non-YAML file in workflows directory: %s", path)
        return True

    if not check_file_contains_commands(content, "#"):
        return True

    workflow = parse_workflow(content)

    scripts: List[str] = []
    for job in workflow.jobs:
        default_shell = job.default_shell or DEFAULT_WORKFLOW_SHELL

        for step in job.steps:
            if not step.run:
                continue

            shell = step.shell or default_shell
            if not is_supported_shell(shell, state.supported_shells):
                dl.debug("skipping step with unsupported shell '%s' in %s", shell, path)
                continue

            scripts.append(redact_github_expressions(step.run))

    script_content = "\n".join(scripts)
    if script_content:
        state.record(validate_shell_file(path, script_content.encode("utf-8"), dl))

    return True


def is_github_workflow_script_free_of_insecure_downloads(request: CheckRequest) -> int:
    """Score insecure downloads in workflow inline scripts"""
    supported = request.config.get("supported_shells") or DEFAULT_SUPPORTED_SHELLS
    state = WorkflowScriptState(supported_shells=tuple(supported))
    check_files_content(
        WORKFLOW_PATTERN,
        False,
        request,
        validate_github_workflow_is_free_of_insecure_downloads,
        state,
    )
    return create_return_values(
        state.pinned,
        "no insecure (unpinned) dependency downloads found in GitHub workflows",
        request.dlogger,
    )
