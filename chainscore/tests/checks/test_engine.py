"""
test_engine.py - Tests for the check engine
"""

import pytest

from chainscore.core.checker import MAX_RESULT_SCORE, create_result_with_score
from chainscore.core.errors import RepoClientError
from chainscore.core.repo import LocalRepoClient
from chainscore.checks.base import Check
from chainscore.checks.engine import CheckEngine, create_check_engine, scan_repository


class ReadmeCheck(Check):
    """Test check scoring whether a README is present"""

    def __init__(self):
        super().__init__(
            name="Has-Readme",
            description="Checks for a README",
            remediation="Add a README",
            category="docs",
        )

    def run(self, request):
        request.dlogger.info("looking for README")
        score = MAX_RESULT_SCORE if "README.md" in request.repo.list_files() else 0
        return create_result_with_score(self.name, "README check", score)


def test_default_checks():
    """Test the engine registers both checks in order."""
    engine = create_check_engine()
    names = [check["name"] for check in engine.list_checks()]

    assert names == ["Token-Permissions", "Pinned-Dependencies"]
    assert all(check["enabled"] for check in engine.list_checks())
    assert engine.list_checks()[0]["category"] == "supply-chain"


def test_config_disables_checks():
    """Test ``check_*`` keys toggle checks."""
    engine = CheckEngine({"check_token_permissions": False})

    assert engine.get_check("Token-Permissions").enabled is False
    assert engine.get_check("Pinned-Dependencies").enabled is True


def test_get_enable_disable():
    """Test looking up and toggling checks by name."""
    engine = CheckEngine()

    assert engine.get_check("pinned-dependencies").name == "Pinned-Dependencies"
    assert engine.get_check("Nonexistent") is None

    assert engine.disable_check("Pinned-Dependencies") is True
    assert engine.get_check("Pinned-Dependencies").enabled is False
    assert engine.enable_check("Pinned-Dependencies") is True
    assert engine.get_check("Pinned-Dependencies").enabled is True
    assert engine.disable_check("Nonexistent") is False


def test_run_checks(make_repo, pinned_repo_files):
    """Test running every enabled check attaches details."""
    repo = LocalRepoClient(make_repo(pinned_repo_files))
    results = CheckEngine().run_checks(repo)

    assert [r.name for r in results] == ["Token-Permissions", "Pinned-Dependencies"]
    assert [r.score for r in results] == [MAX_RESULT_SCORE, MAX_RESULT_SCORE]
    assert any("go lock file detected: go.sum" == d.message for d in results[1].details)


def test_run_checks_skips_disabled(make_repo, pinned_repo_files):
    """Test disabled checks do not run."""
    repo = LocalRepoClient(make_repo(pinned_repo_files))
    results = CheckEngine({"check_pinned_dependencies": False}).run_checks(repo)

    assert [r.name for r in results] == ["Token-Permissions"]


def test_run_checks_by_name(make_repo, pinned_repo_files):
    """Test explicitly named checks run even when disabled."""
    repo = LocalRepoClient(make_repo(pinned_repo_files))
    engine = CheckEngine({"check_pinned_dependencies": False})

    results = engine.run_checks(repo, ["PINNED-DEPENDENCIES"])

    assert [r.name for r in results] == ["Pinned-Dependencies"]


def test_register_check(make_repo):
    """Test custom checks run with their own detail logger."""
    repo = LocalRepoClient(make_repo({"README.md": "# hi\n"}))
    engine = CheckEngine()
    engine.register_check(ReadmeCheck())

    results = engine.run_checks(repo, ["Has-Readme"])

    assert results[0].score == MAX_RESULT_SCORE
    assert [d.message for d in results[0].details] == ["looking for README"]


def test_scan_repository(make_repo, pinned_repo_files):
    """Test scanning a repository collects statistics."""
    results, stats = scan_repository(make_repo(pinned_repo_files))

    assert len(results) == 2
    assert stats["total_checks"] == 2
    assert stats["passed_checks"] == 2
    assert stats["runtime_errors"] == 0
    assert stats["aggregate_score"] == MAX_RESULT_SCORE
    assert "start_time" in stats
    assert "end_time" in stats


def test_scan_repository_with_runtime_error(make_repo, pinned_repo_files):
    """Test runtime errors are counted but left out of the aggregate."""
    files = dict(pinned_repo_files)
    files["Dockerfile"] = "FROM\n"

    results, stats = scan_repository(make_repo(files))

    assert results[1].is_runtime_error
    assert stats["runtime_errors"] == 1
    assert stats["passed_checks"] == 1
    assert stats["aggregate_score"] == MAX_RESULT_SCORE


def test_scan_repository_selected_checks(make_repo, insecure_repo_files):
    """Test scanning a subset of checks."""
    results, stats = scan_repository(
        make_repo(insecure_repo_files), checks=["Token-Permissions"]
    )

    assert [r.name for r in results] == ["Token-Permissions"]
    assert results[0].score == 0
    assert stats["aggregate_score"] == 0


def test_scan_repository_missing_path(temp_dir):
    """Test a path that is not a directory is rejected."""
    with pytest.raises(RepoClientError):
        scan_repository(f"{temp_dir}/missing")
