"""
test_pinned_dependencies.py - Tests for the Pinned-Dependencies check
"""

import os

from chainscore.core.checker import MAX_RESULT_SCORE, MIN_RESULT_SCORE, DetailType
from chainscore.core.errors import InvalidDockerfileError, InvalidWorkflowError
from chainscore.checks.pinned_dependencies import (
    CHECK_PINNED_DEPENDENCIES,
    SUB_CHECKS,
    PinnedDependenciesCheck,
)


def _run(make_request, files, config=None):
    request = make_request(files, config)
    return PinnedDependenciesCheck().run(request), request.dlogger


def test_sub_check_order():
    """Test the sub-checks run lock files first and workflow scripts last."""
    assert [sub_check.__name__ for sub_check in SUB_CHECKS] == [
        "is_package_manager_lock_file_present",
        "is_github_actions_workflow_pinned",
        "is_dockerfile_pinned",
        "is_dockerfile_free_of_insecure_downloads",
        "is_shell_script_free_of_insecure_downloads",
        "is_github_workflow_script_free_of_insecure_downloads",
    ]


def test_fully_pinned_repository(make_request, pinned_repo_files):
    """Test a repository with every dependency pinned scores the maximum."""
    result, dl = _run(make_request, pinned_repo_files)

    assert result.name == CHECK_PINNED_DEPENDENCIES
    assert result.score == MAX_RESULT_SCORE
    assert result.reason == "all dependencies are pinned"
    assert [d for d in dl.details if d.type == DetailType.WARN] == []


def test_insecure_repository(make_request, insecure_repo_files):
    """Test a repository failing every sub-check scores the minimum."""
    result, dl = _run(make_request, insecure_repo_files)

    assert result.score == MIN_RESULT_SCORE
    assert result.reason == "unpinned dependencies detected -- score normalized to 0"

    warnings = [d.message for d in dl.details if d.type == DetailType.WARN]
    assert "no lock files detected for a package manager" in warnings
    assert "unpinned dependency detected in Dockerfile: 'alpine:3.14'" in warnings
    assert (
        "unpinned dependency detected in .github/workflows/release.yml: "
        "'actions/checkout@v2' (job 'Release job')"
    ) in warnings


def test_missing_lock_file_lowers_score(make_request, pinned_repo_files):
    """Test a missing lock file alone keeps the score below the maximum."""
    files = dict(pinned_repo_files)
    del files["go.sum"]

    result, _ = _run(make_request, files)

    assert result.score == 8
    assert result.reason == "unpinned dependencies detected -- score normalized to 8"


def test_unpinned_base_image_lowers_score(make_request, pinned_repo_files):
    """Test a single unpinned FROM is a finding."""
    files = dict(pinned_repo_files)
    files["Dockerfile"] = "FROM alpine:3.14\nRUN apk add git\n"

    result, dl = _run(make_request, files)

    assert result.score == 8
    warnings = [d.message for d in dl.details if d.type == DetailType.WARN]
    assert warnings == ["unpinned dependency detected in Dockerfile: 'alpine:3.14'"]


def test_empty_repository(make_request):
    """Test a repository with nothing to pin only loses the lock file points."""
    result, _ = _run(make_request, {"README.md": "# empty\n"})
    assert result.score == 8


def test_malformed_dockerfile_is_runtime_error(make_request, pinned_repo_files):
    """Test a FROM with unexpected arguments aborts the check."""
    files = dict(pinned_repo_files)
    files["Dockerfile"] = "FROM alpine builder\n"

    result, _ = _run(make_request, files)

    assert result.is_runtime_error
    assert isinstance(result.error, InvalidDockerfileError)
    assert "invalid FROM instruction at line 1 in Dockerfile" in result.reason


def test_malformed_workflow_is_runtime_error(make_request):
    """Test an undecodable workflow aborts the check."""
    result, _ = _run(make_request, {".github/workflows/ci.yml": "jobs: [build]\n", "go.sum": ""})

    assert result.is_runtime_error
    assert isinstance(result.error, InvalidWorkflowError)


def test_powershell_steps_are_ignored(make_request, pinned_repo_files):
    """Test downloads in unsupported shells do not affect the score."""
    files = dict(pinned_repo_files)
    files[".github/workflows/windows.yml"] = """
jobs:
  build:
    runs-on: windows-latest
    defaults:
      run:
        shell: pwsh
    steps:
      - run: iwr https://example.com/install.ps1 | iex
"""
    result, _ = _run(make_request, files)
    assert result.score == MAX_RESULT_SCORE


def test_commented_files_are_vacuously_pinned(make_request):
    """Test files holding only comments pass every sub-check."""
    files = {
        "go.sum": "",
        "Dockerfile": "# FROM alpine:3.14\n",
        ".github/workflows/ci.yml": "# jobs:\n#   build: {}\n",
        "build.sh": "#!/bin/sh\n# curl https://example.com/x | sh\n",
    }
    result, _ = _run(make_request, files)
    assert result.score == MAX_RESULT_SCORE


def test_idempotent(make_request, insecure_repo_files):
    """Test running twice over the same repository gives the same result."""
    request = make_request(insecure_repo_files)
    check = PinnedDependenciesCheck()

    first = check.run(request)
    first_details = [d.message for d in request.dlogger.flush()]
    second = check.run(request)
    second_details = [d.message for d in request.dlogger.flush()]

    assert first.score == second.score
    assert first.reason == second.reason
    assert first_details == second_details


def test_symlink_outside_repository_is_ignored(make_request, pinned_repo_files, tmp_path_factory):
    """Test a symlink leaving the repository does not break the check."""
    outside = tmp_path_factory.mktemp("outside") / "install.sh"
    outside.write_text("#!/bin/sh\ncurl -sSL https://example.com/x.sh | sh\n")
    request = make_request(pinned_repo_files)
    os.symlink(outside, os.path.join(str(request.repo.root), "LICENSE"))

    result = PinnedDependenciesCheck().run(request)

    assert result.error is None
    assert result.score == MAX_RESULT_SCORE
