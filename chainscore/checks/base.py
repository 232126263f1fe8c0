"""
base.py - Base class for chainscore checks

A check inspects a whole repository through a CheckRequest and produces one
CheckResult with a score between MIN_RESULT_SCORE and MAX_RESULT_SCORE.
"""

from abc import ABC, abstractmethod

from ..core.checker import CheckResult
from ..core.config import check_config_key
from ..core.files import CheckRequest


class Check(ABC):
    """Base class for all chainscore checks"""

    def __init__(
        self,
        name: str,
        description: str,
        remediation: str,
        category: str = "supply-chain",
    ):
        """
        Initialize a check

        Args:
            name: Unique name of the check, e.g. ``Token-Permissions``
            description: Human-readable description of the check
            remediation: Generic remediation advice for this check
            category: Category of the check
        """
        self.name = name
        self.description = description
        self.remediation = remediation
        self.category = category
        self.enabled = True

    @property
    def config_key(self) -> str:
        """Configuration key toggling this check, e.g. ``check_token_permissions``"""
        return check_config_key(self.name)

    @abstractmethod
    def run(self, request: CheckRequest) -> CheckResult:
        """
        Run the check against a repository

        Args:
            request: Repository, detail logger and configuration

        Returns:
            Check result; internal errors are reported as runtime-error results
        """
        pass
