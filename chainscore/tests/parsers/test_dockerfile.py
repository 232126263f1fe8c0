"""
test_dockerfile.py - Tests for Dockerfile decoding
"""

from chainscore.parsers.dockerfile import parse_dockerfile


def test_parse_instructions_and_stages():
    """Test commands are lower-cased and linked to their build stage."""
    content = b"""ARG VERSION=3.14
FROM alpine:${VERSION} AS base
RUN apk add curl
from base
COPY --from=base /etc/os-release /tmp/
"""
    dockerfile = parse_dockerfile(content)
    commands = [(i.command, i.stage) for i in dockerfile.instructions]

    assert commands == [("arg", -1), ("from", 0), ("run", 0), ("from", 1), ("copy", 1)]
    assert dockerfile.from_instructions()[0].args == ("alpine:${VERSION}", "AS", "base")
    assert dockerfile.from_instructions()[1].args == ("base",)
    assert dockerfile.instructions[4].flags == ("--from=base",)
    assert dockerfile.instructions[4].args == ("/etc/os-release", "/tmp/")


def test_parse_line_numbers_and_continuations():
    """Test continued lines are joined and keep their first line number."""
    content = b"""# comment

FROM alpine
RUN apk add \\
    # interleaved comment
    curl \\
    git
"""
    run = parse_dockerfile(content).run_instructions()[0]

    assert run.line == 4
    assert run.args == ("apk add     curl     git",)


def test_parse_escape_directive():
    """Test the escape parser directive changes the continuation character."""
    content = b"""# escape=`
FROM mcr.microsoft.com/windows/servercore
RUN powershell -Command `
    Write-Host hi
"""
    dockerfile = parse_dockerfile(content)

    assert dockerfile.escape == "`"
    assert dockerfile.run_instructions()[0].args == ("powershell -Command     Write-Host hi",)


def test_parse_json_form():
    """Test exec-form arguments are decoded from JSON."""
    content = b"""FROM alpine
RUN ["/bin/sh", "-c", "echo hi"]
CMD [not json
ENTRYPOINT []
"""
    dockerfile = parse_dockerfile(content)
    run, cmd, entrypoint = dockerfile.instructions[1:]

    assert run.args == ("/bin/sh", "-c", "echo hi")
    assert cmd.args == ("[not json",)
    assert entrypoint.args == ()


def test_parse_run_flags():
    """Test builder flags are separated from RUN arguments."""
    content = b"FROM alpine\nRUN --mount=type=cache,target=/root/.cache pip install -r req.txt\n"
    run = parse_dockerfile(content).run_instructions()[0]

    assert run.flags == ("--mount=type=cache,target=/root/.cache",)
    assert run.args == ("pip install -r req.txt",)


def test_parse_instruction_without_arguments():
    """Test an instruction with nothing after the keyword has no arguments."""
    dockerfile = parse_dockerfile(b"FROM\nRUN\n")
    assert [i.args for i in dockerfile.instructions] == [(), ()]


def test_parse_undecodable_bytes():
    """Test binary content does not raise."""
    dockerfile = parse_dockerfile(b"\xff\xfe\xfd FROM\n")
    assert len(dockerfile.instructions) == 1


def test_parse_empty():
    """Test an empty file has no instructions."""
    assert parse_dockerfile(b"").instructions == ()
