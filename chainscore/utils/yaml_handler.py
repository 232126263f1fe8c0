"""
yaml_handler.py - Utilities for YAML processing

This module provides the YAML loader used to decode GitHub Actions workflow
files.
"""

from typing import Any

import yaml


class WorkflowLoader(yaml.SafeLoader):
    """Safe YAML loader tuned for GitHub Actions workflow files"""


# YAML 1.1 resolves plain on, off, yes and no to booleans, which turns the
# workflow trigger key ``on`` into True. The bool resolver is dropped from a
# copy of the table, the one on SafeLoader is shared with every other loader.
WorkflowLoader.yaml_implicit_resolvers = {
    first_char: [(tag, regexp) for tag, regexp in resolvers if tag != "tag:yaml.org,2002:bool"]
    for first_char, resolvers in yaml.SafeLoader.yaml_implicit_resolvers.items()
}


def load_yaml(content: str) -> Any:
    """
    Load YAML content with the workflow loader

    Args:
        content: YAML content as string

    Returns:
        Decoded document, or None for an empty document

    Raises:
        yaml.YAMLError: If YAML parsing fails
    """
    return yaml.load(content, Loader=WorkflowLoader)
