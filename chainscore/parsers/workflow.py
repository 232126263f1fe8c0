"""
workflow.py - GitHub Actions workflow decoding

This module decodes workflow YAML into a small typed tree of jobs and steps,
and exposes the ``permissions`` declarations as a tagged value. Only the
fields the checks need are decoded.

See https://docs.github.com/en/actions/reference/workflow-syntax-for-github-actions
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple

import yaml

from ..core.errors import InvalidWorkflowError
from ..utils.yaml_handler import load_yaml

WORKFLOW_PATTERN = ".github/workflows/*"
WORKFLOW_EXTENSIONS = (".yml", ".yaml")


def is_workflow_file(path: str) -> bool:
    """Check if a path under the workflows directory is a YAML workflow"""
    return path.lower().endswith(WORKFLOW_EXTENSIONS)


@dataclass(frozen=True)
class Step:
    """A single step of a job"""

    name: Optional[str] = None
    id: Optional[str] = None
    uses: Optional[str] = None
    shell: Optional[str] = None
    run: Optional[str] = None


@dataclass(frozen=True)
class Job:
    """A job and the fields of it the checks care about"""

    job_id: str
    name: Optional[str] = None
    steps: Tuple[Step, ...] = ()
    default_shell: Optional[str] = None

    @property
    def display_name(self) -> str:
        return self.name or self.job_id


@dataclass(frozen=True)
class Workflow:
    """Decoded workflow file"""

    name: Optional[str] = None
    jobs: Tuple[Job, ...] = ()


class PermissionsKind(Enum):
    """Shape of a ``permissions`` declaration."""

    ABSENT = "absent"
    EMPTY = "empty"
    STRING = "string"
    MAPPING = "mapping"


@dataclass(frozen=True)
class PermissionsDecl:
    """A ``permissions`` declaration at workflow or job level"""

    kind: PermissionsKind
    value: Any = None


def _decode(content: bytes) -> Any:
    try:
        return load_yaml(content.decode("utf-8"))
    except (yaml.YAMLError, UnicodeDecodeError) as e:
        raise InvalidWorkflowError(f"invalid workflow YAML: {e}") from e


def load_workflow_mapping(content: bytes) -> Dict[Any, Any]:
    """
    Decode a workflow file into its raw top-level mapping

    Args:
        content: Raw file content

    Returns:
        Top-level mapping; empty for an empty document

    Raises:
        InvalidWorkflowError: If the content is not valid YAML or not a mapping
    """
    document = _decode(content)
    if document is None:
        return {}
    if not isinstance(document, dict):
        raise InvalidWorkflowError("workflow document is not a mapping")
    return document


def _optional_str(mapping: Dict[Any, Any], key: str, where: str) -> Optional[str]:
    value = mapping.get(key)
    if value is None:
        return None
    if isinstance(value, (dict, list)):
        raise InvalidWorkflowError(f"'{key}' in {where} must be a scalar")
    return str(value)


def _parse_step(raw: Any, where: str) -> Step:
    if raw is None:
        return Step()
    if not isinstance(raw, dict):
        raise InvalidWorkflowError(f"step in {where} is not a mapping")

    return Step(
        name=_optional_str(raw, "name", where),
        id=_optional_str(raw, "id", where),
        uses=_optional_str(raw, "uses", where),
        shell=_optional_str(raw, "shell", where),
        run=_optional_str(raw, "run", where),
    )


def _parse_default_shell(raw_job: Dict[Any, Any], where: str) -> Optional[str]:
    defaults = raw_job.get("defaults")
    if defaults is None:
        return None
    if not isinstance(defaults, dict):
        raise InvalidWorkflowError(f"'defaults' in {where} is not a mapping")

    run = defaults.get("run")
    if run is None:
        return None
    if not isinstance(run, dict):
        raise InvalidWorkflowError(f"'defaults.run' in {where} is not a mapping")

    return _optional_str(run, "shell", where)


def _parse_job(job_id: str, raw_job: Any) -> Job:
    where = f"job '{job_id}'"
    if raw_job is None:
        return Job(job_id=job_id)
    if not isinstance(raw_job, dict):
        raise InvalidWorkflowError(f"{where} is not a mapping")

    raw_steps = raw_job.get("steps")
    if raw_steps is None:
        raw_steps = []
    if not isinstance(raw_steps, list):
        raise InvalidWorkflowError(f"'steps' in {where} is not a list")

    return Job(
        job_id=job_id,
        name=_optional_str(raw_job, "name", where),
        steps=tuple(_parse_step(step, where) for step in raw_steps),
        default_shell=_parse_default_shell(raw_job, where),
    )


def iter_raw_jobs(workflow: Dict[Any, Any]) -> List[Tuple[str, Dict[Any, Any]]]:
    """
    Return the raw job mappings of a workflow

    Args:
        workflow: Raw top-level workflow mapping

    Returns:
        List of (job id, job mapping) pairs in declaration order

    Raises:
        InvalidWorkflowError: If ``jobs`` or any job is not a mapping
    """
    jobs = workflow.get("jobs")
    if jobs is None:
        return []
    if not isinstance(jobs, dict):
        raise InvalidWorkflowError("'jobs' is not a mapping")

    result = []
    for job_id, job in jobs.items():
        if not isinstance(job, dict):
            raise InvalidWorkflowError(f"job '{job_id}' is not a mapping")
        result.append((str(job_id), job))
    return result


def parse_workflow(content: bytes) -> Workflow:
    """
    Decode a workflow file into a typed tree

    Args:
        content: Raw file content

    Returns:
        Decoded Workflow

    Raises:
        InvalidWorkflowError: If the document does not have the workflow shape
    """
    raw = load_workflow_mapping(content)

    jobs = raw.get("jobs")
    if jobs is None:
        jobs = {}
    if not isinstance(jobs, dict):
        raise InvalidWorkflowError("'jobs' is not a mapping")

    return Workflow(
        name=_optional_str(raw, "name", "workflow"),
        jobs=tuple(_parse_job(str(job_id), job) for job_id, job in jobs.items()),
    )


def read_permissions(mapping: Dict[Any, Any]) -> PermissionsDecl:
    """
    Read the ``permissions`` field of a workflow or job mapping

    Args:
        mapping: Raw workflow or job mapping

    Returns:
        PermissionsDecl tagged with the declaration's shape

    Raises:
        InvalidWorkflowError: If the field has any other type, or a mapping
            with non-string keys or values
    """
    if "permissions" not in mapping:
        return PermissionsDecl(kind=PermissionsKind.ABSENT)

    value = mapping["permissions"]
    if value is None or value == "":
        return PermissionsDecl(kind=PermissionsKind.EMPTY)

    if isinstance(value, str):
        return PermissionsDecl(kind=PermissionsKind.STRING, value=value)

    if isinstance(value, dict):
        for key, level in value.items():
            if not isinstance(key, str) or not isinstance(level, str):
                raise InvalidWorkflowError(
                    f"invalid permission entry '{key}: {level}', keys and values must be strings"
                )
        return PermissionsDecl(kind=PermissionsKind.MAPPING, value=dict(value))

    raise InvalidWorkflowError(f"invalid 'permissions' type: {type(value).__name__}")
