"""
parsers package for chainscore

This package decodes GitHub Actions workflows and Dockerfiles into typed
structures consumed by the checks.
"""

from .dockerfile import Dockerfile, Instruction, parse_dockerfile
from .workflow import (
    WORKFLOW_PATTERN,
    is_workflow_file,
    Job,
    PermissionsDecl,
    PermissionsKind,
    Step,
    Workflow,
    iter_raw_jobs,
    load_workflow_mapping,
    parse_workflow,
    read_permissions,
)

__all__ = [
    "Dockerfile",
    "Instruction",
    "parse_dockerfile",
    "Job",
    "Step",
    "Workflow",
    "PermissionsDecl",
    "PermissionsKind",
    "iter_raw_jobs",
    "load_workflow_mapping",
    "parse_workflow",
    "read_permissions",
    "WORKFLOW_PATTERN",
    "is_workflow_file",
]
