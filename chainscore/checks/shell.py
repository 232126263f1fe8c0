"""
shell.py - Shell script recognition and insecure download detection

This module recognizes shell scripts, decides which workflow shells can be
analysed, and scans shell text for network fetches of executable or
installable content that are not pinned to a specific version or hash.

Detected patterns:
- curl/wget output piped into an interpreter (``curl ... | bash``)
- an interpreter running a fetch substitution (``bash -c "$(curl ...)"``,
  ``bash <(curl ...)``)
- a downloaded file that is executed later in the same script
- ``pip install`` without ``--require-hashes``
- ``npm install`` (``npm ci`` installs from the lock file)
- ``go get`` / ``go install`` of a module not pinned to a commit hash
"""

import os
import re
import shlex
from dataclasses import dataclass, field
from typing import Iterable, List, Optional, Set, Tuple

from ..core.checker import DetailLogger

SHELL_EXTENSIONS = (".sh", ".bash", ".mksh")
DEFAULT_SUPPORTED_SHELLS = ("sh", "bash", "mksh")

FETCHERS = {"curl", "wget"}
INTERPRETERS = {
    "sh",
    "bash",
    "mksh",
    "dash",
    "ksh",
    "zsh",
    "python",
    "perl",
    "ruby",
    "node",
    "php",
}
SOURCING_COMMANDS = {"source", ".", "eval"}

_VERSIONED_RE = re.compile(r"^(python|pip)\d(\.\d+)?$")
_ASSIGNMENT_RE = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*=")
_SUBSTITUTION_RE = re.compile(r"(?:\$|<)\(([^()]*)\)|`([^`]*)`")
_PLACEHOLDER_RE = re.compile(r"__CHAINSCORE_SUBST_(\d+)__")
_COMMIT_PIN_RE = re.compile(r"@[a-f0-9]{40,}$")

_SEPARATORS = {";", "&&", "||", "&", "(", ")", "{", "}", ";;"}
_PIPES = {"|", "|&"}
_REDIRECT_CHARS = set("<>&|")
_KEYWORDS = {"if", "then", "else", "elif", "do", "while", "until", "!", "time"}
_WRAPPERS = {"nohup", "exec", "command", "builtin"}
_SUDO_OPTIONS_WITH_VALUE = {"-u", "-g", "-C", "-h", "-p", "-r", "-t"}

PIP_OPTIONS_WITH_VALUE = {
    "-c",
    "--constraint",
    "-i",
    "--index-url",
    "--extra-index-url",
    "-f",
    "--find-links",
    "-t",
    "--target",
    "--prefix",
    "--root",
    "--src",
    "--platform",
    "--python-version",
    "--implementation",
    "--abi",
    "--trusted-host",
    "--cache-dir",
    "--progress-bar",
    "--upgrade-strategy",
}
NPM_INSTALL_SUBCOMMANDS = {"install", "i", "add", "in", "ins", "inst", "insta", "instal", "isntall"}


def is_shell_script_file(path: str, content: bytes) -> bool:
    """
    Check if a file is a shell script

    A file is a shell script when its name carries a shell extension or its
    shebang names sh, bash or mksh, directly or through ``env``.

    Args:
        path: Repository-relative path
        content: Raw file content

    Returns:
        True if the file is a shell script
    """
    if path.lower().endswith(SHELL_EXTENSIONS):
        return True

    first_line = content.split(b"\n", 1)[0].decode("utf-8", errors="replace").strip()
    if not first_line.startswith("#!"):
        return False

    parts = first_line[2:].split()
    if not parts:
        return False

    interpreter = os.path.basename(parts[0])
    if interpreter == "env":
        remaining = [p for p in parts[1:] if not p.startswith("-") and "=" not in p]
        if not remaining:
            return False
        interpreter = os.path.basename(remaining[0])

    return interpreter in DEFAULT_SUPPORTED_SHELLS


def is_supported_shell(shell: str, supported: Iterable[str] = DEFAULT_SUPPORTED_SHELLS) -> bool:
    """
    Check if a workflow ``shell`` value names a POSIX shell we can analyse

    Args:
        shell: Shell specification, e.g. ``bash``, ``/bin/sh -e {0}``, ``pwsh``
        supported: Accepted shell basenames

    Returns:
        True if the shell is supported
    """
    words = shell.split()
    if not words:
        return False
    return os.path.basename(words[0]) in set(supported)


@dataclass
class _Command:
    argv: List[str] = field(default_factory=list)
    stdout_file: Optional[str] = None


def _tokenize(line: str) -> List[str]:
    lexer = shlex.shlex(line, posix=True, punctuation_chars=True)
    lexer.whitespace_split = True
    # Only a word starting with '#' opens a comment; ${#VAR} and URL fragments do not.
    lexer.commenters = ""
    tokens: List[str] = []
    for token in lexer:
        if token.startswith("#"):
            break
        tokens.append(token)
    return tokens


def _is_redirection(token: str) -> bool:
    return bool(token) and token[0] in "<>&" and set(token) <= _REDIRECT_CHARS


def _parse_pipelines(tokens: List[str]) -> List[List[_Command]]:
    pipelines: List[List[_Command]] = []
    pipeline: List[_Command] = []
    command = _Command()
    index = 0

    def close_command() -> None:
        nonlocal command
        if command.argv:
            pipeline.append(command)
        command = _Command()

    def close_pipeline() -> None:
        nonlocal pipeline
        close_command()
        if pipeline:
            pipelines.append(pipeline)
        pipeline = []

    while index < len(tokens):
        token = tokens[index]
        if token in _SEPARATORS:
            close_pipeline()
        elif token in _PIPES:
            close_command()
        elif _is_redirection(token):
            target = tokens[index + 1] if index + 1 < len(tokens) else None
            if ">" in token and target and not target.isdigit():
                command.stdout_file = target
            index += 1
        else:
            command.argv.append(token)
        index += 1

    close_pipeline()
    return pipelines


def _strip_prefixes(argv: List[str]) -> List[str]:
    """Drop keywords, variable assignments and wrapper commands before the real command"""
    index = 0
    while index < len(argv):
        word = argv[index]
        if word in _KEYWORDS or word in _WRAPPERS or _ASSIGNMENT_RE.match(word):
            index += 1
        elif word == "sudo":
            index += 1
            while index < len(argv) and argv[index].startswith("-"):
                if argv[index] in _SUDO_OPTIONS_WITH_VALUE:
                    index += 1
                index += 1
        elif word == "env":
            index += 1
            while index < len(argv) and (
                argv[index].startswith("-") or _ASSIGNMENT_RE.match(argv[index])
            ):
                index += 1
        else:
            break
    return argv[index:]


def _name(argv: List[str]) -> str:
    return os.path.basename(argv[0]) if argv else ""


def _is_interpreter(name: str) -> bool:
    if name in INTERPRETERS:
        return True
    match = _VERSIONED_RE.match(name)
    return bool(match) and match.group(1) == "python"


def _url_basename(args: List[str]) -> Optional[str]:
    for arg in args:
        if "://" not in arg:
            continue
        url = arg.split("?", 1)[0].split("#", 1)[0].rstrip("/")
        name = url.rsplit("/", 1)[-1]
        if name and "://" not in name:
            return name
    return None


def _short_option_value(args: List[str], index: int, letter: str) -> Optional[str]:
    """Value of a short option given as ``-xo value``, ``-xovalue`` or ``-o value``"""
    cluster = args[index][1:]
    value = cluster[cluster.index(letter) + 1 :]
    if value:
        return value
    return args[index + 1] if index + 1 < len(args) else None


def _downloaded_file(argv: List[str], stdout_file: Optional[str]) -> Optional[str]:
    """Return the local file a curl or wget command writes to, if any"""
    name = _name(argv)
    args = argv[1:]

    for index, arg in enumerate(args):
        if name == "curl":
            if arg == "--output" and index + 1 < len(args):
                return args[index + 1]
            if arg.startswith("--output="):
                return arg.split("=", 1)[1]
            if arg == "--remote-name":
                return _url_basename(args)
            if arg.startswith("-") and not arg.startswith("--"):
                if "o" in arg[1:]:
                    return _short_option_value(args, index, "o")
                if "O" in arg[1:]:
                    return _url_basename(args)
        else:
            target = None
            if arg == "--output-document" and index + 1 < len(args):
                target = args[index + 1]
            elif arg.startswith("--output-document="):
                target = arg.split("=", 1)[1]
            elif arg.startswith("-") and not arg.startswith("--") and "O" in arg[1:]:
                target = _short_option_value(args, index, "O") or "-"
            if target is not None:
                return None if target == "-" else target

    if name == "wget" and stdout_file is None:
        return _url_basename(args)
    return stdout_file


def _first_operand(args: List[str]) -> Optional[str]:
    for arg in args:
        if not arg.startswith("-"):
            return arg
    return None


def _executed_file(argv: List[str]) -> Optional[str]:
    """Return the file a command executes, if it runs a local script"""
    name = _name(argv)
    if _is_interpreter(name) or name in SOURCING_COMMANDS:
        return _first_operand(argv[1:])
    if "/" in argv[0]:
        return argv[0]
    return None


def _pip_install_args(argv: List[str]) -> Optional[List[str]]:
    """Return the arguments of a ``pip install`` command, or None for other commands"""
    name = _name(argv)
    match = _VERSIONED_RE.match(name)
    if name == "pip" or (match and match.group(1) == "pip"):
        rest = argv[1:]
    elif _is_interpreter(name) and name.startswith("python") and argv[1:3] == ["-m", "pip"]:
        rest = argv[3:]
    else:
        return None

    if not rest or rest[0] != "install":
        return None
    return rest[1:]


def _is_local_path(target: str) -> bool:
    return target.startswith((".", "/", "~", "file:"))


def _pip_install_is_pinned(args: List[str]) -> bool:
    if "--require-hashes" in args:
        return True

    targets: List[str] = []
    index = 0
    while index < len(args):
        arg = args[index]
        if arg in ("-r", "--requirement") or arg.startswith("--requirement="):
            return False
        if arg in ("-e", "--editable"):
            if index + 1 < len(args):
                targets.append(args[index + 1])
            index += 2
            continue
        if arg in PIP_OPTIONS_WITH_VALUE:
            index += 2
            continue
        if not arg.startswith("-"):
            targets.append(arg)
        index += 1

    return all(_is_local_path(target) for target in targets)


def _is_npm_install(argv: List[str]) -> bool:
    return _name(argv) == "npm" and len(argv) > 1 and argv[1] in NPM_INSTALL_SUBCOMMANDS


def _is_unpinned_go_download(argv: List[str]) -> bool:
    if _name(argv) != "go" or len(argv) < 2 or argv[1] not in ("get", "install"):
        return False

    targets = [arg for arg in argv[2:] if not arg.startswith("-")]
    return not all(_is_local_path(t) or _COMMIT_PIN_RE.search(t) for t in targets)


@dataclass
class _ScanState:
    downloaded: Set[str] = field(default_factory=set)


def _split_substitutions(text: str) -> Tuple[str, List[str]]:
    """Replace command and process substitutions with placeholders"""
    inner: List[str] = []

    def replace(match: "re.Match[str]") -> str:
        body = match.group(1) if match.group(1) is not None else match.group(2)
        inner.append(body)
        return f"__CHAINSCORE_SUBST_{len(inner) - 1}__"

    outer = text
    # Innermost first, so nested substitutions end up as placeholders too.
    while True:
        replaced = _SUBSTITUTION_RE.sub(replace, outer)
        if replaced == outer:
            break
        outer = replaced
    return outer, inner


def _expand(text: str, inner: List[str]) -> str:
    while _PLACEHOLDER_RE.search(text):
        text = _PLACEHOLDER_RE.sub(lambda m: inner[int(m.group(1))], text)
    return text


def _contains_fetch(text: str) -> bool:
    for pipeline in _parse_pipelines(_tokenize(text)):
        for command in pipeline:
            if _name(_strip_prefixes(command.argv)) in FETCHERS:
                return True
    return False


def _command_is_unpinned(argv: List[str], inner: List[str], state: _ScanState) -> bool:
    name = _name(argv)

    if _is_interpreter(name) or name in SOURCING_COMMANDS:
        for arg in argv[1:]:
            for match in _PLACEHOLDER_RE.finditer(arg):
                if _contains_fetch(_expand(inner[int(match.group(1))], inner)):
                    return True

    executed = _executed_file(argv)
    if executed and os.path.basename(executed) in state.downloaded:
        return True

    pip_args = _pip_install_args(argv)
    if pip_args is not None and not _pip_install_is_pinned(pip_args):
        return True

    return _is_npm_install(argv) or _is_unpinned_go_download(argv)


def _scan_text(text: str, state: _ScanState) -> bool:
    """Scan one logical shell line; returns True on the first insecure download"""
    outer, inner = _split_substitutions(text)

    for body in inner:
        if _scan_text(_expand(body, inner), state):
            return True

    for pipeline in _parse_pipelines(_tokenize(outer)):
        commands = [(_strip_prefixes(c.argv), c.stdout_file) for c in pipeline]
        commands = [(argv, stdout_file) for argv, stdout_file in commands if argv]
        names = [_name(argv) for argv, _ in commands]

        for position, (argv, stdout_file) in enumerate(commands):
            if names[position] in FETCHERS:
                if any(_is_interpreter(n) for n in names[position + 1 :]):
                    return True
                downloaded = _downloaded_file(argv, stdout_file)
                if downloaded:
                    state.downloaded.add(os.path.basename(downloaded))
                continue

            if _command_is_unpinned(argv, inner, state):
                return True

    return False


def _script_lines(content: bytes) -> List[str]:
    text = content.decode("utf-8", errors="replace").replace("\r\n", "\n")
    text = text.replace("\\\n", " ")
    return [line.strip() for line in text.split("\n")]


def find_insecure_downloads(content: bytes) -> Tuple[List[str], List[str]]:
    """
    Scan shell text for unpinned downloads

    Args:
        content: Shell script or command sequence

    Returns:
        Tuple of (offending lines, lines that could not be parsed)
    """
    state = _ScanState()
    findings: List[str] = []
    unparsed: List[str] = []

    for line in _script_lines(content):
        if not line or line.startswith("#"):
            continue
        try:
            if _scan_text(line, state):
                findings.append(line)
        except ValueError:
            unparsed.append(line)

    return findings, unparsed


def validate_shell_file(path: str, content: bytes, dl: DetailLogger) -> bool:
    """
    Check that a shell script only fetches pinned dependencies

    Args:
        path: Repository-relative path used in diagnostics
        content: Shell script or command sequence
        dl: Detail logger

    Returns:
        True if no insecure download was found
    """
    findings, unparsed = find_insecure_downloads(content)

    for line in unparsed:
        dl.debug("cannot parse shell command in %s: '%s'", path, line)

    for line in findings:
        dl.warn("insecure (unpinned) download detected in %s: '%s'", path, line)

    return not findings
