"""
config.py - Configuration management for chainscore

This module handles loading, validating, and managing configuration for the chainscore tool.
"""

import copy
import logging
import os
import yaml
from typing import Any, Dict, Optional, List, cast

from .errors import ChainscoreError

logger = logging.getLogger(__name__)

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR")

DEFAULT_CONFIG = {
    "check_token_permissions": True,
    "check_pinned_dependencies": True,
    "supported_shells": ["sh", "bash", "mksh"],
    "report": {
        "show_details": False,
        "show_debug": False,
        "color_output": True,
    },
    "log_level": "WARNING",
}

CHECK_KEYS = ("check_token_permissions", "check_pinned_dependencies")


class ConfigurationError(ChainscoreError):
    """Exception raised for configuration errors"""

    pass


def get_config_paths() -> List[str]:
    """
    Get list of possible config file locations in priority order

    Returns:
        List of config file paths to check
    """
    paths = []

    paths.append(os.path.join(os.getcwd(), "chainscore.yml"))
    paths.append(os.path.join(os.getcwd(), "chainscore.yaml"))
    paths.append(os.path.join(os.getcwd(), ".chainscore.yml"))
    paths.append(os.path.join(os.getcwd(), ".chainscore.yaml"))

    home_dir = os.path.expanduser("~")
    paths.append(os.path.join(home_dir, ".chainscore.yml"))
    paths.append(os.path.join(home_dir, ".config", "chainscore", "config.yml"))

    if os.name == "posix":
        paths.append("/etc/chainscore/config.yml")

    return paths


def merge_configs(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    """
    Recursively merge two config dictionaries

    Args:
        base: Base configuration
        override: Configuration to override base

    Returns:
        Merged configuration dictionary
    """
    result = base.copy()

    for key, override_value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(override_value, dict):
            result[key] = merge_configs(result[key], override_value)
        else:
            result[key] = override_value

    return result


def _validate_supported_shells(config: Dict[str, Any]) -> None:
    """Validate the list of shells analysed in workflow steps"""

    if "supported_shells" in config:
        shells = config["supported_shells"]
        if not isinstance(shells, list) or not shells:
            raise ConfigurationError("'supported_shells' must be a non-empty list")

        for shell in shells:
            if not isinstance(shell, str) or not shell.strip():
                raise ConfigurationError(f"Invalid shell name in 'supported_shells': {shell!r}")


def _validate_report(config: Dict[str, Any]) -> None:
    """Validate report configuration"""

    if "report" in config:
        if not isinstance(config["report"], dict):
            raise ConfigurationError("'report' must be a dictionary")

        for key, value in config["report"].items():
            if key not in DEFAULT_CONFIG["report"]:
                raise ConfigurationError(f"Unknown report option '{key}'")
            if not isinstance(value, bool):
                raise ConfigurationError(f"'report.{key}' must be a boolean")


def _validate_log_level(config: Dict[str, Any]) -> None:
    """Validate the logging level"""

    if "log_level" in config:
        level = config["log_level"]
        if not isinstance(level, str) or level.upper() not in LOG_LEVELS:
            valid = ", ".join(LOG_LEVELS)
            raise ConfigurationError(f"Invalid log level '{level}'. Must be one of: {valid}")


def validate_config(config: Dict[str, Any]) -> None:
    """Validate configuration structure and values"""

    if not isinstance(config, dict):
        raise ConfigurationError("Configuration must be a mapping")

    # Check for unknown top-level keys in the provided config
    for key in config.keys():
        if key not in DEFAULT_CONFIG:
            raise ConfigurationError(f"Unknown configuration option '{key}'")

    for check_key in CHECK_KEYS:
        if check_key in config and not isinstance(config[check_key], bool):
            raise ConfigurationError(f"Check '{check_key}' must be a boolean (true/false)")

    _validate_supported_shells(config)
    _validate_report(config)
    _validate_log_level(config)


def _read_config_file(path: str) -> Optional[Dict[str, Any]]:
    """Read and validate one configuration file"""
    try:
        with open(path, "r", encoding="utf-8") as f:
            user_config = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Error parsing YAML configuration: {e}") from e
    except OSError as e:
        raise ConfigurationError(f"Error loading configuration: {e}") from e

    if user_config:
        validate_config(user_config)
    return user_config


def load_config(config_path: Optional[str] = None) -> Dict[str, Any]:
    """
    Load configuration from file or use defaults

    Args:
        config_path: Path to configuration file, or None to auto-detect

    Returns:
        Loaded configuration dictionary

    Raises:
        ConfigurationError: If configuration file is invalid
    """
    config = copy.deepcopy(DEFAULT_CONFIG)

    if config_path:
        if not os.path.exists(config_path):
            raise ConfigurationError(f"Configuration file not found: {config_path}")

        user_config = _read_config_file(config_path)
        if user_config:
            config = merge_configs(config, user_config)
    else:
        for path in get_config_paths():
            if not os.path.exists(path):
                continue

            try:
                user_config = _read_config_file(path)
            except ConfigurationError as e:
                logger.warning("Ignoring configuration file %s: %s", path, e)
                continue

            if user_config:
                logger.debug("Loaded configuration from %s", path)
                config = merge_configs(config, user_config)
                break

    return config


def save_config(config: Dict[str, Any], config_path: str) -> None:
    """
    Save configuration to file

    Args:
        config: Configuration dictionary to save
        config_path: Path to save configuration to

    Raises:
        ConfigurationError: If configuration cannot be saved
    """
    try:
        os.makedirs(os.path.dirname(os.path.abspath(config_path)), exist_ok=True)

        with open(config_path, "w", encoding="utf-8") as f:
            yaml.safe_dump(config, f, default_flow_style=False, sort_keys=False)
    except OSError as e:
        raise ConfigurationError(f"Error saving configuration: {e}") from e


def generate_default_config(output_path: Optional[str] = None) -> str:
    """
    Generate default configuration YAML

    Args:
        output_path: Path to save default configuration to, or None to return as string

    Returns:
        Default configuration YAML

    Raises:
        ConfigurationError: If configuration cannot be saved
    """
    default_config_yaml = cast(
        str,
        yaml.safe_dump(DEFAULT_CONFIG, default_flow_style=False, sort_keys=False),
    )

    if output_path:
        try:
            os.makedirs(os.path.dirname(os.path.abspath(output_path)), exist_ok=True)

            with open(output_path, "w", encoding="utf-8") as f:
                f.write(default_config_yaml)
        except OSError as e:
            raise ConfigurationError(f"Error saving default configuration: {e}") from e

    return default_config_yaml


def check_config_key(name: str) -> str:
    """Map a check name such as ``Token-Permissions`` to its configuration key"""
    return "check_" + name.lower().replace("-", "_")


def disable_checks(config: Dict[str, Any], checks: List[str]) -> Dict[str, Any]:
    """
    Disable specific checks in a configuration

    Args:
        config: Configuration dictionary
        checks: Check names or configuration keys to disable

    Returns:
        Updated configuration dictionary
    """
    updated_config = config.copy()

    for check in checks:
        key = check if check.startswith("check_") else check_config_key(check)
        if key in CHECK_KEYS:
            updated_config[key] = False

    return updated_config
