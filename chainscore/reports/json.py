"""
json.py - JSON reporting for chainscore

This module provides functionality for formatting check results as JSON,
suitable for machine processing or integration with other tools.
"""

import json
from datetime import datetime
from typing import Any, Dict, List

from ..core.checker import CheckResult, DetailType
from ..utils.version import __version__


def result_to_dict(result: CheckResult, include_debug: bool = False) -> Dict[str, Any]:
    """
    Convert a CheckResult to a dictionary suitable for JSON serialization

    Args:
        result: Result to convert
        include_debug: Whether to keep debug-level details

    Returns:
        Dictionary representation of the result
    """
    data = result.to_dict()
    if not include_debug:
        data["details"] = [
            d.to_dict() for d in result.details if d.type != DetailType.DEBUG
        ]
    return data


def generate_json_report(
    results: List[CheckResult],
    stats: Dict[str, Any],
    include_stats: bool = True,
    include_debug: bool = False,
) -> str:
    """
    Generate a JSON report of results and statistics

    Args:
        results: List of check results
        stats: Statistics dictionary
        include_stats: Whether to include statistics in the output
        include_debug: Whether to keep debug-level details

    Returns:
        JSON string representation of the report
    """
    report: Dict[str, Any] = {
        "chainscore_version": __version__,
        "generated_at": datetime.now().isoformat(),
        "checks": [result_to_dict(r, include_debug) for r in results],
    }

    if include_stats:
        clean_stats: Dict[str, Any] = {}
        for key, value in stats.items():
            if isinstance(value, (str, int, float, bool, list, dict)) or value is None:
                clean_stats[key] = value

        report["stats"] = clean_stats

    return json.dumps(report, indent=2)


def save_json_report(
    results: List[CheckResult],
    stats: Dict[str, Any],
    output_path: str,
    include_stats: bool = True,
    include_debug: bool = False,
) -> None:
    """
    Generate a JSON report and save it to a file

    Args:
        results: List of check results
        stats: Statistics dictionary
        output_path: Path to save the report to
        include_stats: Whether to include statistics in the output
        include_debug: Whether to keep debug-level details

    Raises:
        IOError: If the file cannot be written
    """
    report = generate_json_report(results, stats, include_stats, include_debug)

    with open(output_path, "w", encoding="utf-8") as f:
        f.write(report)
