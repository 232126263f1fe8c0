"""
conftest.py - Pytest fixtures for chainscore tests
"""

import tempfile
from pathlib import Path

import pytest

from chainscore.core.checker import CheckDetail, CheckResult, DetailLogger, DetailType
from chainscore.core.errors import InvalidDockerfileError
from chainscore.core.files import CheckRequest
from chainscore.core.repo import LocalRepoClient

SHA1 = "a81bbbf8298c0fa03ea29cdc473d45769f953675"
SHA256 = "9d0e5c7b1a0c2f6f3b9f1b1e8c2a1f0e4d6c8b7a5e3f2d1c0b9a8f7e6d5c4b3a"


@pytest.fixture
def temp_dir():
    """Create a temporary directory that is removed after the test."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield tmpdir


@pytest.fixture
def make_repo(temp_dir):
    """Return a helper writing ``{path: content}`` into a temporary repository."""

    def _make(files):
        root = Path(temp_dir)
        for rel_path, content in files.items():
            target = root / rel_path
            if rel_path.endswith("/"):
                target.mkdir(parents=True, exist_ok=True)
                continue
            target.parent.mkdir(parents=True, exist_ok=True)
            if isinstance(content, bytes):
                target.write_bytes(content)
            else:
                target.write_text(content)
        return temp_dir

    return _make


@pytest.fixture
def make_request(make_repo):
    """Return a helper building a CheckRequest over a temporary repository."""

    def _make(files, config=None):
        root = make_repo(files)
        return CheckRequest(
            repo=LocalRepoClient(root),
            dlogger=DetailLogger("test"),
            config=config or {},
        )

    return _make


@pytest.fixture
def dl():
    """A fresh detail logger."""
    return DetailLogger("test")


@pytest.fixture
def read_only_workflow_content():
    """Workflow with read-only token permissions and pinned actions."""
    return f"""
name: CI

on:
  push:
    branches: [ main ]

permissions: read-all

jobs:
  build:
    runs-on: ubuntu-latest
    steps:
      - uses: actions/checkout@{SHA1}
      - name: Run tests
        run: make test
"""


@pytest.fixture
def insecure_workflow_content():
    """Workflow without permissions, with an unpinned action and a piped download."""
    return """
name: Release

on: push

jobs:
  release:
    name: Release job
    runs-on: ubuntu-latest
    steps:
      - uses: actions/checkout@v2
      - name: Install tool
        run: curl -sSL https://example.com/install.sh | bash
"""


@pytest.fixture
def pinned_dockerfile_content():
    """Multi-stage Dockerfile whose base images are all pinned."""
    return f"""
FROM golang@sha256:{SHA256} AS build
RUN go build ./...

FROM build
COPY --from=build /out /out
"""


@pytest.fixture
def pinned_repo_files(read_only_workflow_content, pinned_dockerfile_content):
    """Files of a repository where every dependency is pinned."""
    return {
        ".github/workflows/ci.yml": read_only_workflow_content,
        "Dockerfile": pinned_dockerfile_content,
        "scripts/build.sh": "#!/bin/bash\nset -e\nmake all\n",
        "go.sum": "",
        "README.md": "# Pinned repository\n",
    }


@pytest.fixture
def insecure_repo_files(insecure_workflow_content):
    """Files of a repository with unpinned dependencies and no lock file."""
    return {
        ".github/workflows/release.yml": insecure_workflow_content,
        "Dockerfile": "FROM alpine:3.14\nRUN wget https://example.com/run.sh -O - | sh\n",
        "install.sh": "#!/bin/sh\npip install requests\n",
    }


@pytest.fixture
def mock_results():
    """Check results for testing reporting functions."""
    return [
        CheckResult(
            name="Token-Permissions",
            score=9,
            reason="non read-only tokens detected in GitHub workflows",
            details=[
                CheckDetail(
                    DetailType.WARN, "'statuses' permission set to 'write' in .github/workflows/ci.yml"
                ),
                CheckDetail(DetailType.INFO, "permissions set to 'read-all' in .github/workflows/ci.yml"),
                CheckDetail(DetailType.DEBUG, "not a packaging workflow: .github/workflows/ci.yml"),
            ],
        ),
        CheckResult(
            name="Pinned-Dependencies",
            score=-1,
            reason="invalid FROM instruction at line 1 in Dockerfile",
            error=InvalidDockerfileError("invalid FROM instruction at line 1 in Dockerfile"),
        ),
    ]


@pytest.fixture
def mock_stats():
    """Statistics for testing reporting functions."""
    return {
        "start_time": "2026-10-01T12:00:00",
        "end_time": "2026-10-01T12:00:02",
        "repo_path": "/path/to/repo",
        "total_checks": 2,
        "passed_checks": 0,
        "runtime_errors": 1,
        "aggregate_score": 9,
    }
