"""
reports package for chainscore

This package contains reporting functionality for presenting check results
as console text or JSON.
"""

from .report import REPORT_FORMATS, generate_report, save_report, print_report

from .console import (
    format_console_report,
    print_console_report,
    format_result,
    format_summary,
)

from .json import generate_json_report, result_to_dict, save_json_report

__all__ = [
    "REPORT_FORMATS",
    "generate_report",
    "save_report",
    "print_report",
    "format_console_report",
    "print_console_report",
    "format_result",
    "format_summary",
    "generate_json_report",
    "result_to_dict",
    "save_json_report",
]
