"""
test_files.py - Tests for the file iteration helpers
"""

import pytest

from chainscore.core.errors import InvalidWorkflowError
from chainscore.core.files import (
    check_file_contains_commands,
    check_files_content,
    check_if_file_exists,
    is_matching_path,
)


@pytest.mark.parametrize(
    "content,expected",
    [
        (b"", False),
        (b"\n\n   \n", False),
        (b"# comment\n  # indented comment\n", False),
        (b"# comment\nFROM alpine\n", True),
        (b"echo hi", True),
    ],
)
def test_check_file_contains_commands(content, expected):
    """Test empty and fully-commented files are trivial."""
    assert check_file_contains_commands(content, "#") is expected


@pytest.mark.parametrize(
    "pattern,path,expected",
    [
        (".github/workflows/*", ".github/workflows/ci.yml", True),
        (".github/workflows/*", ".GitHub/Workflows/CI.yml", True),
        (".github/workflows/*", ".github/workflows/sub/ci.yml", False),
        (".github/workflows/*", "ci.yml", False),
        ("*Dockerfile*", "Dockerfile", True),
        ("*Dockerfile*", "docker/dockerfile.aarch64", True),
        ("*Dockerfile*", "docker/Dockerfile_template", True),
        ("*Dockerfile*", "docker/compose.yml", False),
        ("*", "any/nested/file.sh", True),
    ],
)
def test_is_matching_path(pattern, path, expected):
    """Test glob matching on repository paths."""
    assert is_matching_path(pattern, path) is expected


def test_check_files_content_visits_matching_files(make_request):
    """Test the callback sees every matching file in listing order."""
    request = make_request(
        {
            ".github/workflows/b.yml": "b",
            ".github/workflows/a.yml": "a",
            "README.md": "readme",
        }
    )
    seen = []

    def callback(path, content, dl, data):
        data.append((path, content))
        return True

    check_files_content(".github/workflows/*", False, request, callback, seen)

    assert seen == [(".github/workflows/a.yml", b"a"), (".github/workflows/b.yml", b"b")]


@pytest.mark.parametrize("short_circuit,expected", [(True, 1), (False, 3)])
def test_check_files_content_short_circuit(make_request, short_circuit, expected):
    """Test a False return stops iteration only when short-circuiting."""
    request = make_request({"a.txt": "a", "b.txt": "b", "c.txt": "c"})
    calls = []

    def callback(path, content, dl, data):
        data.append(path)
        return False

    check_files_content("*.txt", short_circuit, request, callback, calls)

    assert len(calls) == expected


def test_check_files_content_propagates_errors(make_request):
    """Test callback errors are not swallowed."""
    request = make_request({"a.txt": "a"})

    def callback(path, content, dl, data):
        raise InvalidWorkflowError("boom")

    with pytest.raises(InvalidWorkflowError):
        check_files_content("*", False, request, callback, None)


def test_check_if_file_exists_stops_on_false(make_request):
    """Test the existence callback stops at the first False."""
    request = make_request({"a.txt": "a", "b.txt": "b", "vendor/": None})
    seen = []

    def callback(path, dl, data):
        data.append(path)
        return path != "b.txt"

    check_if_file_exists(request, callback, seen)

    assert seen == ["a.txt", "b.txt"]
