"""
files.py - File iteration helpers used by the checks

Checks hand a glob pattern and a per-file callback to these helpers, together
with an accumulator they own for the duration of one scan. Callbacks are
invoked sequentially in listing order.
"""

import fnmatch
from dataclasses import dataclass, field
from typing import Any, Callable, Dict

from .checker import DetailLogger
from .repo import LocalRepoClient

FileContentCallback = Callable[[str, bytes, DetailLogger, Any], bool]
FileExistsCallback = Callable[[str, DetailLogger, Any], bool]


@dataclass
class CheckRequest:
    """Everything a check needs to run against one repository"""

    repo: LocalRepoClient
    dlogger: DetailLogger
    config: Dict[str, Any] = field(default_factory=dict)


def check_file_contains_commands(content: bytes, comment: str) -> bool:
    """
    Check whether a file has at least one line that is not blank or a comment

    Args:
        content: Raw file content
        comment: Comment prefix, e.g. ``#``

    Returns:
        True if the file contains something other than comments
    """
    if not content:
        return False

    text = content.decode("utf-8", errors="replace")
    for line in text.splitlines():
        stripped = line.strip()
        if stripped and not stripped.startswith(comment):
            return True
    return False


def is_matching_path(pattern: str, path: str) -> bool:
    """
    Match a repository path against a glob pattern, ignoring case

    Patterns containing a slash are matched segment by segment against the
    full path, so ``*`` never crosses a directory boundary. Other patterns
    are matched against the file name.

    Args:
        pattern: Glob pattern
        path: Repository-relative POSIX path

    Returns:
        True if the path matches
    """
    pattern = pattern.lower()
    path = path.lower()

    if "/" not in pattern:
        return fnmatch.fnmatchcase(path.rsplit("/", 1)[-1], pattern)

    pattern_parts = pattern.split("/")
    path_parts = path.split("/")
    if len(pattern_parts) != len(path_parts):
        return False

    return all(
        fnmatch.fnmatchcase(part, pattern_part)
        for part, pattern_part in zip(path_parts, pattern_parts)
    )


def check_files_content(
    pattern: str,
    short_circuit: bool,
    request: CheckRequest,
    callback: FileContentCallback,
    data: Any,
) -> None:
    """
    Run a callback over the content of every file matching a pattern

    Args:
        pattern: Glob pattern selecting files
        short_circuit: Stop at the first callback returning False
        request: Check request holding the repository and logger
        callback: Called as ``callback(path, content, dlogger, data)``
        data: Accumulator shared by all invocations

    Raises:
        InternalError: Propagated from the callback
        RepoClientError: If a file cannot be read
    """
    for path in request.repo.list_files():
        if not is_matching_path(pattern, path):
            continue

        content = request.repo.get_file_content(path)
        keep_going = callback(path, content, request.dlogger, data)
        if not keep_going and short_circuit:
            return


def check_if_file_exists(request: CheckRequest, callback: FileExistsCallback, data: Any) -> None:
    """
    Run a callback over every file and directory name until it returns False

    Args:
        request: Check request holding the repository and logger
        callback: Called as ``callback(path, dlogger, data)``
        data: Accumulator shared by all invocations
    """
    for path in request.repo.list_entries():
        if not callback(path, request.dlogger, data):
            return
