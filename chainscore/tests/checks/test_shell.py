"""
test_shell.py - Tests for shell script recognition and download detection
"""

import pytest

from chainscore.core.checker import DetailType
from chainscore.checks.shell import (
    find_insecure_downloads,
    is_shell_script_file,
    is_supported_shell,
    validate_shell_file,
)

SHA1 = "a81bbbf8298c0fa03ea29cdc473d45769f953675"


@pytest.mark.parametrize(
    "path,content,expected",
    [
        ("install.sh", b"", True),
        ("scripts/BUILD.BASH", b"", True),
        ("run.mksh", b"", True),
        ("bin/run", b"#!/bin/sh\necho hi\n", True),
        ("bin/run", b"#!/usr/bin/env bash\necho hi\n", True),
        ("bin/run", b"#!/usr/bin/env -S bash -e\necho hi\n", True),
        ("bin/run", b"#!/usr/bin/python3\nprint(1)\n", False),
        ("bin/run", b"#!/usr/bin/env\n", False),
        ("bin/run", b"#!\n", False),
        ("Dockerfile", b"FROM alpine\n", False),
        ("README.md", b"# title\n", False),
    ],
)
def test_is_shell_script_file(path, content, expected):
    """Test recognition by extension and shebang."""
    assert is_shell_script_file(path, content) is expected


@pytest.mark.parametrize(
    "shell,expected",
    [
        ("bash", True),
        ("sh", True),
        ("/bin/sh -e {0}", True),
        ("bash --noprofile --norc -eo pipefail {0}", True),
        ("pwsh", False),
        ("powershell", False),
        ("cmd", False),
        ("python", False),
        ("", False),
    ],
)
def test_is_supported_shell(shell, expected):
    """Test the default set of analysable shells."""
    assert is_supported_shell(shell) is expected


def test_is_supported_shell_custom_set():
    """Test a configured set of shells replaces the defaults."""
    assert is_supported_shell("zsh", ("zsh",))
    assert not is_supported_shell("bash", ("zsh",))


@pytest.mark.parametrize(
    "script",
    [
        "curl -sSL https://example.com/install.sh | bash",
        "wget -qO- https://example.com/install.sh | sh",
        "curl -fsSL https://example.com/install.sh | sudo -E bash -s -- --yes",
        "curl https://example.com/setup.py | python3",
        'bash -c "$(curl -fsSL https://example.com/install.sh)"',
        "sh -c \"$(wget -O- https://example.com/install.sh)\"",
        "bash <(curl -s https://example.com/install.sh)",
        "eval `curl -s https://example.com/env.sh`",
        "pip install requests",
        "pip3 install --upgrade flask==2.0",
        "python -m pip install -r requirements.txt",
        "sudo pip install --user awscli",
        "npm install",
        "npm i -g typescript",
        "go get github.com/example/tool",
        "GO111MODULE=on go install github.com/example/tool@latest",
        "cd tools && curl -L https://example.com/x.sh | bash",
    ],
)
def test_find_insecure_downloads_detects(script):
    """Test unpinned fetches and installs are reported."""
    findings, unparsed = find_insecure_downloads(script.encode())

    assert findings == [script]
    assert unparsed == []


@pytest.mark.parametrize(
    "script",
    [
        "echo hello",
        "curl -o archive.tar.gz https://example.com/archive.tar.gz && tar xzf archive.tar.gz",
        "curl -sSL https://example.com/data.json | jq .",
        "pip install --require-hashes -r requirements.txt",
        "pip install .",
        "pip install -e ./plugins/local",
        "npm ci",
        "go build ./...",
        "go install ./cmd/tool",
        f"go install github.com/example/tool@{SHA1}",
        "# curl https://example.com/install.sh | bash",
        "",
    ],
)
def test_find_insecure_downloads_clean(script):
    """Test pinned installs and non-executed downloads are not reported."""
    findings, _ = find_insecure_downloads(script.encode())
    assert findings == []


@pytest.mark.parametrize(
    "script",
    [
        "n=${#ARGS[@]}; curl -sSL https://x.example/i.sh | bash",
        "curl -sSL https://x.example/i.sh#v2 | bash",
    ],
)
def test_hash_inside_words_is_not_a_comment(script):
    """Test a '#' inside a word does not hide the rest of the line."""
    findings, unparsed = find_insecure_downloads(script.encode())

    assert findings == [script]
    assert unparsed == []


def test_trailing_comment_is_ignored():
    """Test a word starting with '#' comments out the rest of the line."""
    findings, _ = find_insecure_downloads(b"make all # curl -sSL https://x.example/i.sh | bash\n")
    assert findings == []


def test_download_then_execute():
    """Test a downloaded file executed on a later line is reported."""
    script = b"""#!/bin/bash
set -e
curl -o install.sh https://example.com/install.sh
chmod +x install.sh
bash install.sh
"""
    findings, _ = find_insecure_downloads(script)
    assert findings == ["bash install.sh"]


def test_download_then_execute_by_path():
    """Test executing a downloaded file by its path is reported."""
    script = b"wget https://example.com/tool.sh\n./tool.sh --flag\n"
    findings, _ = find_insecure_downloads(script)
    assert findings == ["./tool.sh --flag"]


def test_download_redirected_then_sourced():
    """Test a download redirected into a file and sourced is reported."""
    script = b"curl -sSL https://example.com/env.sh > env.sh; source env.sh\n"
    findings, _ = find_insecure_downloads(script)
    assert len(findings) == 1


def test_line_continuations_are_joined():
    """Test a command split over several lines is analysed as one."""
    script = b"curl -sSL \\\n  https://example.com/install.sh \\\n  | bash\n"
    findings, _ = find_insecure_downloads(script)
    assert len(findings) == 1
    assert "| bash" in findings[0]


def test_unparseable_lines_are_reported_separately():
    """Test shell text that cannot be tokenized is not a finding."""
    findings, unparsed = find_insecure_downloads(b'echo "unterminated\npip install requests\n')

    assert unparsed == ['echo "unterminated']
    assert findings == ["pip install requests"]


def test_validate_shell_file_logs(dl):
    """Test findings are warned and parse failures logged at debug."""
    content = b"echo 'open\ncurl https://example.com/x.sh | sh\n"

    assert validate_shell_file("ci.sh", content, dl) is False

    warnings = [d.message for d in dl.details if d.type == DetailType.WARN]
    debug = [d.message for d in dl.details if d.type == DetailType.DEBUG]
    assert warnings == [
        "insecure (unpinned) download detected in ci.sh: 'curl https://example.com/x.sh | sh'"
    ]
    assert debug == ["cannot parse shell command in ci.sh: 'echo 'open'"]


def test_validate_shell_file_clean(dl):
    """Test a clean script passes without warnings."""
    assert validate_shell_file("build.sh", b"#!/bin/sh\nmake all\n", dl) is True
    assert dl.details == []
