"""
Sub-command dispatcher: "<tool> [options] COMMAND [ARGUMENTS...]".

A directory holds one executable per sub-command (optionally sharing a name
prefix, e.g. "tool-build", "tool-clean"). dispatch() parses the tool's own
options, stops at the first positional token, and runs the matching executable
as a separate process with the remaining tokens forwarded untouched.

    >>> import sys
    >>> sys.exit(dispatch("/usr/libexec/tool", sys.argv, prefix="tool-"))
"""
import difflib
import os
import pathlib
import subprocess

from .faults import ArityError, UnknownCommandError
from .parser import OptionParser


def discover(directory, prefix=""):
    """
    List sub-command names found in `directory`.

    - only executable regular files whose name starts with `prefix` count.
    - names are returned sorted, with the prefix stripped.
    """
    commands = []
    for path in sorted(pathlib.Path(directory).iterdir()):
        if not path.name.startswith(prefix) or not (name := path.name[len(prefix):]):
            continue
        if path.is_file() and os.access(path, os.X_OK):
            commands.append(name)
    return commands


def execute(path, arguments):
    """
    Run one sub-command executable and return its exit status.
    """
    return subprocess.run([os.fspath(path), *arguments], check=False).returncode


def dispatch(directory, argv, *, prefix="", context=None, description=None, version=None):
    """
    Parse the tool's options, then run the named sub-command.

    Parameters
    - directory: where the sub-command executables live.
    - argv: full argument vector (argv[0] is the tool itself).
    - prefix: shared file-name prefix of the executables.
    - context: ProgramContext for output and program name.
    - description / version: forwarded to the tool's OptionParser.

    Returns
    - the sub-command's exit status.

    Raises
    - Terminate: help/version, a missing command (WRONG_VALUE_COUNT) or an
      unknown one (UNKNOWN_COMMAND).
    """
    directory = pathlib.Path(directory)
    commands = discover(directory, prefix)

    parser = OptionParser(
        usage="%prog [options] COMMAND [ARGUMENTS...]",
        description=description,
        epilog="commands: %s" % ", ".join(commands) if commands else None,
        version=version,
        context=context,
        interspersed=False,
    )
    _, positional = parser.parse_args(argv)

    if not positional:
        parser.error(ArityError("missing command", expected=1, received=0))

    command, *arguments = positional
    if command not in commands:
        suggestions = difflib.get_close_matches(command, commands, 1)
        message = "unknown command: %r" % command
        if suggestions:
            message += " (did you mean %r?)" % suggestions[0]
        parser.error(UnknownCommandError(message, command=command, suggestions=suggestions))

    return execute(directory / (prefix + command), arguments)


__all__ = (
    "discover",
    "execute",
    "dispatch",
)
