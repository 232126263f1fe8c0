"""
report.py - Main reporting interface for chainscore

This module provides a unified interface for generating reports in different formats.
"""

import os
import sys
from typing import Any, Dict, List

from ..core.checker import CheckResult

from .console import format_console_report, print_console_report
from .json import generate_json_report

REPORT_FORMATS = ("text", "json")


def generate_report(
    results: List[CheckResult],
    stats: Dict[str, Any],
    format: str = "text",
    show_details: bool = False,
    show_debug: bool = False,
    show_summary: bool = True,
) -> str:
    """
    Generate a report in the specified format

    Args:
        results: List of check results
        stats: Statistics dictionary
        format: Output format ('text', 'json')
        show_details: Whether to include warn and info details in text output
        show_debug: Whether to include debug details
        show_summary: Whether to include summary statistics

    Returns:
        Generated report as a string

    Raises:
        ValueError: If an invalid format is specified
    """
    if format == "text":
        return format_console_report(
            results,
            stats,
            show_details=show_details,
            show_debug=show_debug,
            show_summary=show_summary,
        )
    elif format == "json":
        return generate_json_report(
            results, stats, include_stats=show_summary, include_debug=show_debug
        )
    else:
        raise ValueError(f"Invalid report format: {format}")


def save_report(
    results: List[CheckResult],
    stats: Dict[str, Any],
    output_path: str,
    format: str = "text",
    show_details: bool = False,
    show_debug: bool = False,
    show_summary: bool = True,
) -> None:
    """
    Generate a report and save it to a file

    Args:
        results: List of check results
        stats: Statistics dictionary
        output_path: Path to save the report to
        format: Output format ('text', 'json')
        show_details: Whether to include warn and info details in text output
        show_debug: Whether to include debug details
        show_summary: Whether to include summary statistics

    Raises:
        IOError: If the file cannot be written
        ValueError: If an invalid format is specified
    """
    os.makedirs(os.path.dirname(os.path.abspath(output_path)), exist_ok=True)

    report = generate_report(
        results,
        stats,
        format=format,
        show_details=show_details,
        show_debug=show_debug,
        show_summary=show_summary,
    )

    with open(output_path, "w", encoding="utf-8") as f:
        f.write(report)


def print_report(
    results: List[CheckResult],
    stats: Dict[str, Any],
    format: str = "text",
    show_details: bool = False,
    show_debug: bool = False,
    show_summary: bool = True,
) -> None:
    """
    Generate a report and print it to stdout

    Raises:
        ValueError: If an invalid format is specified
    """
    if format == "text":
        print_console_report(
            results,
            stats,
            show_details=show_details,
            show_debug=show_debug,
            show_summary=show_summary,
            output_stream=sys.stdout,
        )
    else:
        report = generate_report(
            results,
            stats,
            format=format,
            show_details=show_details,
            show_debug=show_debug,
            show_summary=show_summary,
        )
        print(report)
