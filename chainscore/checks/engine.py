"""
engine.py - Check engine for chainscore

This module registers the checks, applies configuration to them and runs them
against a repository.
"""

import logging
from datetime import datetime
from typing import Any, Dict, Iterable, List, Optional, Tuple

from ..core.checker import CheckResult, DetailLogger, aggregate_scores
from ..core.files import CheckRequest
from ..core.repo import LocalRepoClient
from .base import Check
from .permissions import TokenPermissionsCheck
from .pinned_dependencies import PinnedDependenciesCheck

logger = logging.getLogger(__name__)


class CheckEngine:
    """Engine for managing and running repository checks"""

    def __init__(self, config: Optional[Dict[str, Any]] = None) -> None:
        """
        Initialize the check engine

        Args:
            config: Configuration dictionary
        """
        self.config = config or {}
        self.checks: List[Check] = []

        self._register_default_checks()

        self._apply_config()

    def _register_default_checks(self) -> None:
        """Register the default set of checks"""
        self.checks.append(TokenPermissionsCheck())
        self.checks.append(PinnedDependenciesCheck())

    def _apply_config(self) -> None:
        """Apply ``check_*`` toggles from the configuration"""
        for check in self.checks:
            if check.config_key in self.config:
                check.enabled = bool(self.config[check.config_key])

    def register_check(self, check: Check) -> None:
        """
        Register a custom check

        Args:
            check: Check instance to register
        """
        self.checks.append(check)

    def get_check(self, name: str) -> Optional[Check]:
        """
        Get a check by name, ignoring case

        Args:
            name: Check name, e.g. ``Pinned-Dependencies``

        Returns:
            Check instance or None if not found
        """
        for check in self.checks:
            if check.name.lower() == name.lower():
                return check
        return None

    def list_checks(self) -> List[Dict[str, Any]]:
        """
        Get information about all registered checks

        Returns:
            List of check information dictionaries
        """
        return [
            {
                "name": check.name,
                "enabled": check.enabled,
                "description": check.description,
                "remediation": check.remediation,
                "category": check.category,
            }
            for check in self.checks
        ]

    def enable_check(self, name: str) -> bool:
        """
        Enable a check

        Returns:
            True if the check was found and enabled, False otherwise
        """
        check = self.get_check(name)
        if check:
            check.enabled = True
            return True
        return False

    def disable_check(self, name: str) -> bool:
        """
        Disable a check

        Returns:
            True if the check was found and disabled, False otherwise
        """
        check = self.get_check(name)
        if check:
            check.enabled = False
            return True
        return False

    def run_checks(
        self, repo: LocalRepoClient, names: Optional[Iterable[str]] = None
    ) -> List[CheckResult]:
        """
        Run checks against a repository

        Args:
            repo: Repository client
            names: Only run these checks; all enabled checks when None

        Returns:
            Results in registration order, with their details attached
        """
        selected = None if names is None else {name.lower() for name in names}
        results = []

        for check in self.checks:
            if selected is None:
                if not check.enabled:
                    continue
            elif check.name.lower() not in selected:
                continue

            dlogger = DetailLogger(check.name)
            request = CheckRequest(repo=repo, dlogger=dlogger, config=self.config)

            logger.info("Running check %s", check.name)
            result = check.run(request)
            result.details = dlogger.flush() + result.details

            if result.is_runtime_error:
                logger.warning("Check %s failed: %s", check.name, result.error)
            else:
                logger.info("Check %s scored %d", check.name, result.score)

            results.append(result)

        return results


def create_check_engine(config: Optional[Dict[str, Any]] = None) -> CheckEngine:
    """
    Create a check engine with the default checks

    Args:
        config: Configuration dictionary

    Returns:
        Configured CheckEngine
    """
    return CheckEngine(config=config)


def scan_repository(
    repo_path: str,
    config: Optional[Dict[str, Any]] = None,
    checks: Optional[Iterable[str]] = None,
) -> Tuple[List[CheckResult], Dict[str, Any]]:
    """
    Run the checks against a local repository

    Args:
        repo_path: Path to the repository
        config: Configuration dictionary
        checks: Only run these checks; all enabled checks when None

    Returns:
        Tuple of (results, stats)

    Raises:
        RepoClientError: If the repository cannot be read
    """
    stats: Dict[str, Any] = {
        "start_time": datetime.now().isoformat(),
        "repo_path": repo_path,
        "total_checks": 0,
        "passed_checks": 0,
        "runtime_errors": 0,
        "aggregate_score": None,
    }

    repo = LocalRepoClient(repo_path)
    engine = create_check_engine(config)
    results = engine.run_checks(repo, checks)

    scores = []
    for result in results:
        stats["total_checks"] += 1
        if result.is_runtime_error:
            stats["runtime_errors"] += 1
            continue
        if result.passed:
            stats["passed_checks"] += 1
        scores.append(result.score)

    stats["aggregate_score"] = aggregate_scores(*scores)
    stats["end_time"] = datetime.now().isoformat()

    return results, stats
