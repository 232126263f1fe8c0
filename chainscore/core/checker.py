"""
checker.py - Check results and scoring primitives for chainscore

This module holds the score bounds, the result constructors used by every
check, the detail logger that collects per-check diagnostics, and the
aggregator that combines sub-check scores.
"""

import logging
import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional

MAX_RESULT_SCORE = 10
MIN_RESULT_SCORE = 0
INCONCLUSIVE_RESULT_SCORE = -1

RESULT_VERSION = 2


class DetailType(Enum):
    """Level of a check detail."""

    WARN = "Warn"
    INFO = "Info"
    DEBUG = "Debug"


@dataclass
class CheckDetail:
    """A single diagnostic line emitted while a check runs"""

    type: DetailType
    message: str

    def to_dict(self) -> Dict[str, str]:
        return {"type": self.type.value, "message": self.message}


class DetailLogger:
    """Leveled sink for check diagnostics

    Details are recorded in emission order so they can be reported with the
    check result, and are mirrored to the standard logging tree under
    ``chainscore.details.<check name>``.
    """

    def __init__(self, check_name: str = "") -> None:
        self.check_name = check_name
        self.details: List[CheckDetail] = []
        suffix = check_name.lower() if check_name else "root"
        self._logger = logging.getLogger(f"chainscore.details.{suffix}")

    def _record(self, detail_type: DetailType, level: int, fmt: str, args: Any) -> None:
        message = fmt % args if args else fmt
        self.details.append(CheckDetail(type=detail_type, message=message))
        self._logger.log(level, message)

    def warn(self, fmt: str, *args: Any) -> None:
        self._record(DetailType.WARN, logging.WARNING, fmt, args)

    def info(self, fmt: str, *args: Any) -> None:
        self._record(DetailType.INFO, logging.INFO, fmt, args)

    def debug(self, fmt: str, *args: Any) -> None:
        self._record(DetailType.DEBUG, logging.DEBUG, fmt, args)

    def flush(self) -> List[CheckDetail]:
        """
        Return the recorded details and reset the logger

        Returns:
            Details recorded since the last flush
        """
        details = self.details
        self.details = []
        return details


@dataclass
class CheckResult:
    """Outcome of a single check"""

    name: str
    score: int
    reason: str
    details: List[CheckDetail] = field(default_factory=list)
    error: Optional[Exception] = None
    version: int = RESULT_VERSION

    @property
    def passed(self) -> bool:
        return self.error is None and self.score == MAX_RESULT_SCORE

    @property
    def is_runtime_error(self) -> bool:
        return self.error is not None

    def to_dict(self) -> Dict[str, Any]:
        result: Dict[str, Any] = {
            "name": self.name,
            "score": self.score,
            "reason": self.reason,
            "version": self.version,
            "details": [detail.to_dict() for detail in self.details],
        }
        if self.error is not None:
            result["error"] = str(self.error)
        return result


def create_max_score_result(name: str, reason: str) -> CheckResult:
    """Create a result with the maximum score"""
    return CheckResult(name=name, score=MAX_RESULT_SCORE, reason=reason)


def create_min_score_result(name: str, reason: str) -> CheckResult:
    """Create a result with the minimum score"""
    return CheckResult(name=name, score=MIN_RESULT_SCORE, reason=reason)


def create_result_with_score(name: str, reason: str, score: int) -> CheckResult:
    """Create a result with an explicit score"""
    return CheckResult(name=name, score=score, reason=reason)


def create_proportional_score_result(name: str, reason: str, b: int, t: int) -> CheckResult:
    """
    Create a result whose score is ``b`` out of ``t`` scaled to the score range

    Args:
        name: Check name
        reason: Human-readable reason
        b: Obtained points
        t: Total points

    Returns:
        CheckResult with the normalized score
    """
    score = int(MAX_RESULT_SCORE * b / t)
    return CheckResult(
        name=name,
        score=score,
        reason=f"{reason} -- score normalized to {score}",
    )


def create_inconclusive_result(name: str, reason: str) -> CheckResult:
    """Create a result for which no evidence was found"""
    return CheckResult(name=name, score=INCONCLUSIVE_RESULT_SCORE, reason=reason)


def create_runtime_error_result(name: str, error: Exception) -> CheckResult:
    """Create a result for a check that could not complete"""
    return CheckResult(
        name=name,
        score=INCONCLUSIVE_RESULT_SCORE,
        reason=str(error),
        error=error,
    )


def aggregate_scores(*scores: int) -> int:
    """
    Combine sub-check scores into one score

    The result is the floor of the arithmetic mean, so it only reaches
    MAX_RESULT_SCORE when every input does.

    Args:
        *scores: Scores in the [MIN_RESULT_SCORE, MAX_RESULT_SCORE] range

    Returns:
        Aggregated score
    """
    if not scores:
        return INCONCLUSIVE_RESULT_SCORE
    return int(math.floor(sum(scores) / len(scores)))
