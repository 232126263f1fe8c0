"""
console.py - Console/terminal reporting for chainscore

This module provides functionality for formatting and displaying check
results in a human-readable format for terminal output.
"""

import os
import sys
from datetime import datetime
from typing import List, Dict, Any, Optional, TextIO
import click

from ..core.checker import MAX_RESULT_SCORE, CheckDetail, CheckResult, DetailType

COLORS = {
    "ERROR": "bright_red",
    "LOW": "red",
    "MEDIUM": "yellow",
    "HIGH": "green",
    "Warn": "yellow",
    "Info": "blue",
    "Debug": "white",
}

# Scores at or above this value are shown as medium rather than low.
MEDIUM_SCORE = 5


def colorize(text: str, color: str) -> str:
    """
    Apply color to text if color output is enabled

    Args:
        text: Text to colorize
        color: Color to apply

    Returns:
        Colorized text or original text if color is disabled
    """
    if os.environ.get("NO_COLOR"):
        return text

    if color in ("bold", "underline"):
        return click.style(text, **{color: True})
    return click.style(text, fg=color)


def score_color(result: CheckResult) -> str:
    """Pick the color used for a result's score"""
    if result.is_runtime_error:
        return COLORS["ERROR"]
    if result.score >= MAX_RESULT_SCORE:
        return COLORS["HIGH"]
    if result.score >= MEDIUM_SCORE:
        return COLORS["MEDIUM"]
    return COLORS["LOW"]


def format_score(result: CheckResult) -> str:
    """Format a result's score, e.g. ``7 / 10`` or ``?`` for runtime errors"""
    if result.is_runtime_error:
        return "?"
    return f"{result.score} / {MAX_RESULT_SCORE}"


def _visible_details(
    details: List[CheckDetail], show_details: bool, show_debug: bool
) -> List[CheckDetail]:
    if not show_details:
        return []
    if show_debug:
        return list(details)
    return [d for d in details if d.type != DetailType.DEBUG]


def format_result(result: CheckResult, show_details: bool = False, show_debug: bool = False) -> str:
    """
    Format a single check result for console output

    Args:
        result: Result to format
        show_details: Whether to include warn and info details
        show_debug: Whether to also include debug details

    Returns:
        Formatted result as string
    """
    score = colorize(format_score(result), score_color(result))
    formatted = f"{colorize(result.name, 'bold')}: {score}\n"

    if result.is_runtime_error:
        formatted += f"  Error: {result.reason}\n"
    else:
        formatted += f"  Reason: {result.reason}\n"

    details = _visible_details(result.details, show_details, show_debug)
    if details:
        formatted += "  Details:\n"
        for detail in details:
            label = colorize(detail.type.value, COLORS[detail.type.value])
            formatted += f"    {label}: {detail.message}\n"

    return formatted


def format_summary(stats: Dict[str, Any]) -> str:
    """
    Format summary statistics

    Args:
        stats: Statistics dictionary

    Returns:
        Formatted summary as string
    """
    output = f"\n{colorize('Scan Summary', 'bold')}\n"
    output += "=" * 50 + "\n"

    output += f"Repository: {stats.get('repo_path', '')}\n"
    output += f"Checks run: {stats.get('total_checks', 0)}\n"
    output += f"Checks with maximum score: {stats.get('passed_checks', 0)}\n"

    runtime_errors = stats.get("runtime_errors", 0)
    if runtime_errors:
        output += f"Runtime errors: {colorize(str(runtime_errors), COLORS['ERROR'])}\n"

    aggregate = stats.get("aggregate_score")
    if aggregate is not None and aggregate >= 0:
        output += f"Aggregate score: {aggregate} / {MAX_RESULT_SCORE}\n"

    start_time = stats.get("start_time")
    end_time = stats.get("end_time")
    if start_time and end_time:
        try:
            start = datetime.fromisoformat(start_time)
            end = datetime.fromisoformat(end_time)
            duration = (end - start).total_seconds()
            output += f"\nScan duration: {duration:.2f} seconds\n"
        except (ValueError, TypeError):
            pass

    return output


def format_console_report(
    results: List[CheckResult],
    stats: Dict[str, Any],
    show_details: bool = False,
    show_debug: bool = False,
    show_summary: bool = True,
) -> str:
    """
    Generate a complete console report

    Args:
        results: List of check results
        stats: Statistics dictionary
        show_details: Whether to include warn and info details
        show_debug: Whether to also include debug details
        show_summary: Whether to include summary statistics

    Returns:
        Complete formatted report as string
    """
    if not results:
        output = "No checks were run.\n"
    else:
        output = "\n".join(format_result(r, show_details, show_debug) for r in results)

    if show_summary:
        output += format_summary(stats)

    return output


def print_console_report(
    results: List[CheckResult],
    stats: Dict[str, Any],
    show_details: bool = False,
    show_debug: bool = False,
    show_summary: bool = True,
    output_stream: Optional[TextIO] = None,
) -> None:
    """
    Print console report to output stream

    Args:
        results: List of check results
        stats: Statistics dictionary
        show_details: Whether to include warn and info details
        show_debug: Whether to also include debug details
        show_summary: Whether to include summary statistics
        output_stream: Output stream to write to (defaults to sys.stdout)
    """
    report = format_console_report(
        results,
        stats,
        show_details=show_details,
        show_debug=show_debug,
        show_summary=show_summary,
    )

    if output_stream is None:
        output_stream = sys.stdout

    output_stream.write(report)
    output_stream.flush()
