"""
packaging.py - Heuristics recognizing publishing and CodeQL workflows

Packaging workflows legitimately need ``packages: write`` and CodeQL analysis
workflows need ``security-events: write``; the permission check exempts those
permissions for such files. Detection works on the raw workflow text.
"""

import re

from ..core.checker import DetailLogger

CODEQL_ANALYZE_ACTION = "github/codeql-action/analyze@"

_NPM_REGISTRY_RE = re.compile(r"registry-url.*https://registry\.npmjs\.org", re.DOTALL)
_NPM_PUBLISH_RE = re.compile(r"npm.*publish", re.DOTALL)
_MAVEN_DEPLOY_RE = re.compile(r"mvn.*deploy", re.DOTALL)
_GRADLE_PUBLISH_RE = re.compile(r"gradle.*publish", re.DOTALL)
_GEM_PUSH_RE = re.compile(r"gem.*push", re.DOTALL)
_NUGET_PUSH_RE = re.compile(r"nuget.*push", re.DOTALL)
_DOCKER_PUSH_RE = re.compile(r"docker.*push", re.DOTALL)
_CARGO_PUBLISH_RE = re.compile(r"cargo.*publish", re.DOTALL)


def is_packaging_workflow(content: str, path: str, dl: DetailLogger) -> bool:
    """
    Check whether a workflow publishes packages

    Args:
        content: Raw workflow text
        path: Repository-relative path used in diagnostics
        dl: Detail logger

    Returns:
        True if the workflow looks like a publishing workflow
    """
    if "uses: actions/setup-node@" in content:
        if _NPM_REGISTRY_RE.search(content) and _NPM_PUBLISH_RE.search(content):
            dl.info("candidate node publishing workflow using npm: %s", path)
            return True

    if "uses: actions/setup-java@" in content:
        if _MAVEN_DEPLOY_RE.search(content):
            dl.info("candidate java publishing workflow using maven: %s", path)
            return True
        if _GRADLE_PUBLISH_RE.search(content):
            dl.info("candidate java publishing workflow using gradle: %s", path)
            return True

    if _GEM_PUSH_RE.search(content):
        dl.info("candidate ruby publishing workflow using gem: %s", path)
        return True

    if _NUGET_PUSH_RE.search(content):
        dl.info("candidate nuget publishing workflow: %s", path)
        return True

    if "docker/build-push-action@" in content:
        dl.info("candidate docker publishing workflow: %s", path)
        return True

    if _DOCKER_PUSH_RE.search(content):
        dl.info("candidate docker publishing workflow: %s", path)
        return True

    if "actions/setup-python@" in content and "pypa/gh-action-pypi-publish@" in content:
        dl.info("candidate python publishing workflow using pypi: %s", path)
        return True

    if "actions/setup-go@" in content and "goreleaser/goreleaser-action@" in content:
        dl.info("candidate golang publishing workflow: %s", path)
        return True

    if _CARGO_PUBLISH_RE.search(content):
        dl.info("candidate rust publishing workflow using cargo: %s", path)
        return True

    dl.debug("not a packaging workflow: %s", path)
    return False


def is_codeql_analysis_workflow(content: str, path: str, dl: DetailLogger) -> bool:
    """
    Check whether a workflow runs CodeQL analysis

    Args:
        content: Raw workflow text
        path: Repository-relative path used in diagnostics
        dl: Detail logger

    Returns:
        True if the workflow invokes the CodeQL analyze action
    """
    if CODEQL_ANALYZE_ACTION in content:
        dl.debug("codeql workflow detected: %s", path)
        return True

    dl.debug("not a codeql workflow: %s", path)
    return False
