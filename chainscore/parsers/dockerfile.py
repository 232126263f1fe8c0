"""
dockerfile.py - Dockerfile decoding

This module turns a Dockerfile into an ordered list of instructions, each with
its lower-cased command keyword and argument tokens. It follows the BuildKit
front-end grammar closely enough for the pinning checks: parser directives,
line continuations, comments, builder flags and the JSON (exec) form.
"""

import json
import re
from dataclasses import dataclass
from typing import List, Optional, Tuple

# Commands whose arguments may be written as a JSON array of strings.
JSON_FORM_COMMANDS = {"run", "cmd", "entrypoint", "shell"}

_DIRECTIVE_RE = re.compile(r"^#\s*([a-zA-Z][a-zA-Z0-9]*)\s*=\s*(.+?)\s*$")
_FLAG_RE = re.compile(r"^--[a-zA-Z][a-zA-Z0-9-]*(=\S*)?$")


@dataclass(frozen=True)
class Instruction:
    """A single Dockerfile instruction"""

    command: str
    args: Tuple[str, ...]
    line: int
    stage: int = -1
    flags: Tuple[str, ...] = ()


@dataclass(frozen=True)
class Dockerfile:
    """Decoded Dockerfile"""

    instructions: Tuple[Instruction, ...] = ()
    escape: str = "\\"

    def from_instructions(self) -> List[Instruction]:
        return [i for i in self.instructions if i.command == "from"]

    def run_instructions(self) -> List[Instruction]:
        return [i for i in self.instructions if i.command == "run"]


def _read_directives(lines: List[str]) -> Tuple[str, int]:
    """Return the escape character and the index of the first non-directive line"""
    escape = "\\"
    seen = set()
    index = 0

    for index, line in enumerate(lines):
        match = _DIRECTIVE_RE.match(line.strip())
        if not match:
            return escape, index

        name = match.group(1).lower()
        if name in seen:
            return escape, index
        seen.add(name)

        if name == "escape":
            value = match.group(2)
            if value in ("\\", "`"):
                escape = value

    return escape, len(lines)


def _logical_lines(lines: List[str], start: int, escape: str) -> List[Tuple[int, str]]:
    """Join continued physical lines, dropping comments and blank lines"""
    result: List[Tuple[int, str]] = []
    buffer: List[str] = []
    first_line: Optional[int] = None

    for index in range(start, len(lines)):
        stripped = lines[index].strip()

        if not stripped or stripped.startswith("#"):
            continue

        body = lines[index].rstrip()
        if first_line is None:
            first_line = index + 1
            body = body.lstrip()

        if body.endswith(escape):
            buffer.append(body[: -len(escape)])
            continue

        buffer.append(body)
        result.append((first_line, "".join(buffer)))
        buffer = []
        first_line = None

    if buffer and first_line is not None:
        result.append((first_line, "".join(buffer)))

    return result


def _split_flags(rest: str) -> Tuple[Tuple[str, ...], str]:
    flags: List[str] = []
    remaining = rest.lstrip()

    while remaining.startswith("--"):
        parts = remaining.split(None, 1)
        if not _FLAG_RE.match(parts[0]):
            break
        flags.append(parts[0])
        remaining = parts[1] if len(parts) > 1 else ""

    return tuple(flags), remaining.strip()


def _parse_args(command: str, rest: str) -> Tuple[str, ...]:
    if not rest:
        return ()

    if command in JSON_FORM_COMMANDS:
        if rest.startswith("["):
            try:
                decoded = json.loads(rest)
            except ValueError:
                decoded = None
            if isinstance(decoded, list) and all(isinstance(item, str) for item in decoded):
                return tuple(decoded)
        return (rest,)

    return tuple(rest.split())


def parse_dockerfile(content: bytes) -> Dockerfile:
    """
    Decode a Dockerfile into instructions

    Args:
        content: Raw file content

    Returns:
        Decoded Dockerfile. Instructions carry the index of the build stage
        they belong to; anything before the first FROM has stage -1.
    """
    text = content.decode("utf-8", errors="replace")
    lines = text.splitlines()

    escape, start = _read_directives(lines)

    instructions: List[Instruction] = []
    stage = -1
    for line_number, logical in _logical_lines(lines, start, escape):
        parts = logical.split(None, 1)
        command = parts[0].lower()
        rest = parts[1] if len(parts) > 1 else ""

        flags, rest = _split_flags(rest)
        if command == "from":
            stage += 1

        instructions.append(
            Instruction(
                command=command,
                args=_parse_args(command, rest),
                line=line_number,
                stage=stage,
                flags=flags,
            )
        )

    return Dockerfile(instructions=tuple(instructions), escape=escape)
