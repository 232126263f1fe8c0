"""
cli.py - Command-line interface for chainscore

This module provides the command-line interface for the chainscore tool,
allowing users to score a repository's token permissions and dependency
pinning.
"""

import json
import logging
import os
import sys
from typing import Any, Dict, List, Optional, Tuple, cast

import click

from .checks import create_check_engine, scan_repository
from .core import (
    ConfigurationError,
    RepoClientError,
    disable_checks,
    generate_default_config,
    load_config,
)
from .core.checker import CheckResult
from .core.config import LOG_LEVELS
from .reports import REPORT_FORMATS, print_report, save_report
from .utils.version import __version__

CHECK_NAMES = [check["name"] for check in create_check_engine().list_checks()]

logger = logging.getLogger(__name__)


def configure_logging(level: str) -> None:
    """
    Configure the root logger for command-line use

    Args:
        level: Logging level name, e.g. ``WARNING``
    """
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.WARNING),
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
        force=True,
    )


def _load_config_or_exit(config: Optional[str]) -> Dict[str, Any]:
    try:
        return load_config(config)
    except ConfigurationError as e:
        click.echo(f"Error loading config file: {e}", err=True)
        sys.exit(1)


def _should_fail(results: List[CheckResult], stats: Dict[str, Any], fail_under: Optional[int]) -> bool:
    """Decide the exit status of a scan"""
    if stats.get("runtime_errors", 0) > 0:
        return True

    if fail_under is None:
        return False

    return any(r.score < fail_under for r in results if not r.is_runtime_error)


@click.group()
@click.version_option(version=__version__)
def cli() -> None:
    """chainscore - supply-chain risk scoring for repositories

    Scores how much write access GitHub workflow tokens receive and how well
    dependencies are pinned: actions, container images, downloaded scripts
    and package manager lock files.
    """


@cli.command()
@click.argument("repo_path", type=click.Path())
@click.option("--config", type=click.Path(), help="Path to YAML config file for check settings")
@click.option(
    "--check",
    "selected",
    multiple=True,
    type=click.Choice(CHECK_NAMES, case_sensitive=False),
    help="Only run the named check(s)",
)
@click.option(
    "--disable",
    multiple=True,
    type=click.Choice(CHECK_NAMES, case_sensitive=False),
    help="Disable specific check(s)",
)
@click.option(
    "--output",
    type=click.Choice(REPORT_FORMATS),
    default="text",
    help="Output format for results",
)
@click.option(
    "--output-file",
    type=click.Path(),
    help="Write output to file instead of stdout",
)
@click.option("--show-details", is_flag=True, help="Show warn and info details for each check")
@click.option("--show-debug", is_flag=True, help="Also show debug details")
@click.option(
    "--fail-under",
    type=click.IntRange(0, 10),
    help="Exit with status 1 when a check scores below this value",
)
@click.option(
    "--log-level",
    type=click.Choice(LOG_LEVELS, case_sensitive=False),
    help="Logging level for diagnostics written to stderr",
)
@click.option("--no-color", is_flag=True, help="Disable colored output")
def scan(
    repo_path: str,
    config: Optional[str],
    selected: Tuple[str, ...],
    disable: Tuple[str, ...],
    output: str,
    output_file: Optional[str],
    show_details: bool,
    show_debug: bool,
    fail_under: Optional[int],
    log_level: Optional[str],
    no_color: bool,
) -> None:
    """Score a local repository (read-only)

    REPO_PATH: Path to the repository root
    """
    config_data = _load_config_or_exit(config)
    configure_logging(log_level or cast(str, config_data.get("log_level", "WARNING")))

    if disable:
        config_data = disable_checks(config_data, list(disable))

    report_config = config_data.get("report", {})
    show_details = show_details or bool(report_config.get("show_details", False))
    show_debug = show_debug or bool(report_config.get("show_debug", False))
    if show_debug:
        show_details = True

    if no_color or not report_config.get("color_output", True):
        os.environ["NO_COLOR"] = "1"

    if output == "text" and not output_file:
        click.echo(f"Scanning repository: {repo_path}")

    try:
        results, stats = scan_repository(
            repo_path, config=config_data, checks=list(selected) or None
        )
    except RepoClientError as e:
        click.echo(f"Error reading repository: {e}", err=True)
        sys.exit(1)

    if output_file:
        save_report(
            results,
            stats,
            output_path=output_file,
            format=output,
            show_details=show_details,
            show_debug=show_debug,
        )
        click.echo(f"Results written to {output_file}")

        summary = ", ".join(
            f"{r.name}: {'error' if r.is_runtime_error else r.score}" for r in results
        )
        click.echo(f"Scan complete ({summary})")
    else:
        print_report(
            results,
            stats,
            format=output,
            show_details=show_details,
            show_debug=show_debug,
        )

    if _should_fail(results, stats, fail_under):
        sys.exit(1)


@cli.command()
@click.option("--config", type=click.Path(exists=True), help="Path to YAML config file to validate")
@click.option("--generate", is_flag=True, help="Generate a default config file")
@click.option("--output", type=click.Path(), help="Output path for generated config")
def config(config: Optional[str], generate: bool, output: Optional[str]) -> None:
    """View or validate current config"""
    if generate:
        try:
            config_str = generate_default_config(output_path=output)
        except ConfigurationError as e:
            click.echo(f"Error writing config: {e}", err=True)
            sys.exit(1)

        if output:
            click.echo(f"Default config written to {output}")
        else:
            click.echo(config_str)
        return

    try:
        config_data = load_config(config)
    except ConfigurationError as e:
        click.echo(f"Config validation failed: {e}", err=True)
        sys.exit(1)

    click.echo("Config loaded and valid.")

    engine = create_check_engine(config_data)
    for check_info in engine.list_checks():
        click.echo(
            f" - {check_info['name']}: {'enabled' if check_info['enabled'] else 'disabled'}"
        )
    click.echo(f" - supported shells: {', '.join(config_data['supported_shells'])}")


@cli.command()
@click.option(
    "--format",
    type=click.Choice(["table", "json"]),
    default="table",
    help="Output format",
)
def checks(format: str) -> None:
    """List all available checks and what they do"""

    engine = create_check_engine()
    checks_list = engine.list_checks()

    if format == "json":
        click.echo(json.dumps(checks_list, indent=2))
        return

    click.echo("chainscore runs the following checks:")
    for check in checks_list:
        enabled_text = "enabled" if check["enabled"] else "disabled"
        click.echo(f" - {click.style(check['name'], bold=True)}: {enabled_text}")
        click.echo(f"   {check['description']}")
        click.echo(f"   Remediation: {check['remediation']}")


if __name__ == "__main__":
    cli()
