"""
repo.py - Local repository access for chainscore

This module lists the files of a repository checked out on disk and reads
their content. Checks only ever see repository-relative POSIX paths.
"""

import logging
import os
from pathlib import Path
from typing import Iterator, List

from .errors import RepoClientError

logger = logging.getLogger(__name__)

SKIPPED_DIRECTORIES = {".git", ".hg", ".svn"}


def is_git_repository(path: str) -> bool:
    """
    Check if a directory is a git repository

    Args:
        path: Directory path to check

    Returns:
        True if the directory contains a .git entry
    """
    return os.path.exists(os.path.join(path, ".git"))


class LocalRepoClient:
    """Repository client backed by a directory on the local filesystem"""

    def __init__(self, root: str) -> None:
        """
        Initialize the client

        Args:
            root: Path to the repository root

        Raises:
            RepoClientError: If the root is not a directory
        """
        self.root = Path(root).resolve()
        if not self.root.is_dir():
            raise RepoClientError(f"repository path is not a directory: {root}")
        if not is_git_repository(str(self.root)):
            logger.info("%s is not a git checkout, scanning it as a plain directory", self.root)
        self._files: List[str] = []
        self._directories: List[str] = []
        self._walked = False

    def _walk(self) -> None:
        if self._walked:
            return

        files: List[str] = []
        directories: List[str] = []
        for current, dirnames, filenames in os.walk(self.root):
            dirnames[:] = sorted(d for d in dirnames if d not in SKIPPED_DIRECTORIES)
            rel_dir = Path(current).relative_to(self.root)

            for dirname in dirnames:
                directories.append((rel_dir / dirname).as_posix() + "/")

            for filename in sorted(filenames):
                full_path = Path(current) / filename
                if not full_path.is_file():
                    continue
                if self.root not in full_path.resolve().parents:
                    logger.debug("skipping %s, it resolves outside the repository", full_path)
                    continue
                files.append((rel_dir / filename).as_posix())

        self._files = sorted(files)
        self._directories = sorted(directories)
        self._walked = True
        logger.debug(
            "listed %d files and %d directories in %s",
            len(self._files),
            len(self._directories),
            self.root,
        )

    def list_files(self) -> List[str]:
        """
        List regular files in the repository

        Returns:
            Sorted repository-relative POSIX paths
        """
        self._walk()
        return list(self._files)

    def list_entries(self) -> Iterator[str]:
        """
        List files and directories in the repository

        Directories carry a trailing slash, e.g. ``vendor/``.

        Returns:
            Iterator over repository-relative POSIX paths
        """
        self._walk()
        yield from self._files
        yield from self._directories

    def get_file_content(self, path: str) -> bytes:
        """
        Read a repository file

        Args:
            path: Repository-relative path

        Returns:
            Raw file content

        Raises:
            RepoClientError: If the file cannot be read
        """
        full_path = (self.root / path).resolve()
        if self.root not in full_path.parents:
            raise RepoClientError(f"path escapes repository root: {path}")

        try:
            return full_path.read_bytes()
        except OSError as e:
            raise RepoClientError(f"cannot read {path}: {e}") from e
