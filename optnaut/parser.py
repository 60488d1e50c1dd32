r"""
Optnaut option parser: the token walk, termination and rendering.

Overview
- OptionParser(Registry)
  • Owns the registry of options (see registry.py) plus the presentation
    settings: usage, description, epilog, version and the ProgramContext.
  • parse_args(argv, values=None) → ParseResult(values, positional)

Token walk (left to right over argv[1:])
- "--": every remaining token is positional, walk ends.
- not starting with "-", or exactly "-": positional (or, with interspersed
  parsing disabled, the start of the positional tail).
- "--name[=value]": long option. An attached value is the first value.
- "-abc": short cluster, characters resolve one by one as "-a", "-b", "-c".
  The first option in the cluster that takes values consumes the rest of the
  token as its first value (glued form) and ends the cluster.

Values
- An attached value ("--opt=value" or the glued "-ovalue") is always taken
  verbatim as the first value; the remaining nargs-1 values come from the
  following tokens, one per token, and are never parsed as options.
- zero-arity options receive True; nargs=1 the string; nargs>=2 a tuple.

Termination
- help/version write to the context's stdout and raise Terminate(0).
- unknown options, wrong value counts and rejected values print the usage
  banner and "<prog>: error: <message>" to the context's stderr and raise
  Terminate(code) with the matching FaultCode.

Quick example:
    >>> from optnaut import OptionParser
    >>> parser = OptionParser(prog="tool")
    >>> verbose = parser.add_option("-v", "--verbose", action="count")
    >>> output = parser.add_option("-o", "--output")
    >>> parser.parse_args(["tool", "-vv", "--output=out.txt", "file1"])
    ParseResult(values={'verbose': 2, 'output': 'out.txt'}, positional=['file1'])
"""
import io
from collections import deque
from collections.abc import Mapping
from typing import NamedTuple

from rich.console import Console, Group
from rich.panel import Panel
from rich.text import Text

from .actions import take_action
from .context import ProgramContext
from .faults import *
from .options import SUPPRESS_HELP, Option
from .registry import Registry
from .utils import *


SUPPRESS_USAGE = "SUPPRESS" + "USAGE"
"""
Usage marker: a parser created with usage=SUPPRESS_USAGE prints no usage banner.
"""


class ParseResult(NamedTuple):
    values: dict
    positional: list


class OptionParser(Registry):
    """
    Option parser bound to a ProgramContext.

    Configuration (keywords)
    - usage: usage template, "%prog" is replaced by the program name.
      Defaults to "%prog [options]"; a leading "usage: " is dropped.
    - description / epilog: paragraphs shown before/after the option list.
    - version: version string; when non-empty a --version option is added.
    - option_list: options registered right after the built-in ones.
    - option_class: factory used by add_option() for plain settings.
    - conflict_handler: "error" (default) or "resolve".
    - add_help_option: register -h/--help (default True).
    - prog: overrides the context's program name.
    - context: ProgramContext; ProgramContext.from_process() when omitted.
    - interspersed: allow options after positionals (default True).

    Parse state
    - rargs (deque), largs (list) and values (dict) are available to
      callbacks while parse_args() runs and reset to None afterwards.
    """
    usage = mirror("usage")
    description = mirror("description")
    epilog = mirror("epilog")
    version = mirror("version")
    context = mirror("context")

    def __init__(
            self,
            usage=None,
            option_list=(),
            option_class=Option,
            version=None,
            conflict_handler="error",
            description=None,
            epilog=None,
            add_help_option=True,
            prog=None,
            context=None,
            interspersed=True
    ):
        super().__init__(option_class=option_class, conflict_handler=conflict_handler)

        if context is None:
            context = ProgramContext.from_process()
        elif not isinstance(context, ProgramContext):
            raise ConfigurationError(f"'context' must be a ProgramContext, not {type(context).__name__}")
        if prog is not None:
            context = context.renamed(prog)
        self._context = context

        self.set_usage(usage)
        self._description = description
        self._epilog = epilog
        self._version = version
        self._interspersed = bool(interspersed)

        self.rargs = None
        self.largs = None
        self.values = None

        if add_help_option:
            self.add_option("-h", "--help", action="help", help="show this help message and exit")
        if version:
            self.add_option("--version", action="version", help="show program's version number and exit")
        self.add_options(option_list)

    @property
    def prog(self):
        return self._context.prog

    def get_prog_name(self):
        return self._context.prog

    def expand_prog_name(self, text, /):
        return text.replace("%prog", self._context.prog)

    def set_usage(self, usage, /):
        if usage is None:
            self._usage = "%prog [options]"
        elif usage == SUPPRESS_USAGE:
            self._usage = SUPPRESS_USAGE
        elif usage.lower().startswith("usage: "):
            self._usage = usage[7:]
        else:
            self._usage = usage

    def enable_interspersed_args(self):
        self._interspersed = True

    def disable_interspersed_args(self):
        self._interspersed = False

    # ---- token walk -------------------------------------------------------

    def parse_args(self, argv, values=None):
        """
        Parse a full argument vector (argv[0] is the program and is skipped).

        Parameters
        - argv: sequence of strings.
        - values: optional mapping merged over the defaults (wins per key).

        Returns
        - ParseResult(values, positional).

        Raises
        - ConfigurationError: values is not a mapping.
        - Terminate: help, version, or a user-facing fault.
        """
        if values is not None and not isinstance(values, Mapping):
            raise ConfigurationError(f"'values' must be a mapping, not {type(values).__name__}")

        self.values = self.get_default_values() | dict(values or {})
        self.rargs = deque(list(argv)[1:])
        self.largs = []
        try:
            self._process_args(self.largs, self.rargs, self.values)
            return ParseResult(self.values, self.largs)
        finally:
            self.rargs = None
            self.largs = None
            self.values = None

    def _process_args(self, largs, rargs, values):
        while rargs:
            token = rargs[0]
            if token == "--":
                rargs.popleft()
                break
            elif token.startswith("--"):
                self._process_long_opt(rargs, values)
            elif token.startswith("-") and token != "-":
                self._process_short_opts(rargs, values)
            elif self._interspersed:
                largs.append(rargs.popleft())
            else:
                break

        # "--", or the first positional when not interspersed: the rest is positional.
        largs.extend(rargs)
        rargs.clear()

    def _resolve(self, spelling):
        if (option := self.lookup(spelling)) is None:
            self.error(UnknownOptionError("no such option: %s" % spelling, spelling=spelling))
        return option

    def _process_long_opt(self, rargs, values):
        spelling, separator, payload = rargs.popleft().partition("=")
        option = self._resolve(spelling)
        value = self._take_values(option, spelling, payload if separator else None, rargs)
        take_action(option, spelling, value, values, self)

    def _process_short_opts(self, rargs, values):
        cluster = rargs.popleft()[1:]
        for index, character in enumerate(cluster):
            option = self._resolve(spelling := "-" + character)
            if option.takes_value:
                value = self._take_values(option, spelling, cluster[index + 1:] or None, rargs)
                take_action(option, spelling, value, values, self)
                break
            take_action(option, spelling, True, values, self)

    def _take_values(self, option, spelling, attached, rargs):
        """
        Collect exactly option.nargs values, starting with the attached one (if any).
        """
        nargs = option.nargs
        collected = []

        if attached is not None:
            if nargs == 0:
                self.error(ArityError(
                    "%s option does not take a value" % spelling,
                    spelling=spelling,
                    option=option,
                    expected=0,
                    received=1,
                ))
            if not attached:
                trigger(EmptyValueWarning("empty value for option %s" % spelling, spelling=spelling, option=option))
            collected.append(attached)

        if nargs == 0:
            return True

        while len(collected) < nargs and rargs:
            collected.append(rargs.popleft())

        if len(collected) < nargs:
            self.error(ArityError(
                "%s option takes %s" % (spelling, "a value" if nargs == 1 else "%d %s" % (nargs, pluralize("value"))),
                spelling=spelling,
                option=option,
                expected=nargs,
                received=len(collected),
            ))

        return collected[0] if nargs == 1 else tuple(collected)

    # ---- termination ------------------------------------------------------

    def exit(self, status=0, message=None):
        """
        End the parse: optional message on stderr, then Terminate(status).
        """
        if message:
            self._context.stderr.print(Text(message, self._context.style("error-message")))
        raise Terminate(status, message)

    def error(self, fault, /):
        """
        Report a user-facing fault: usage banner and "<prog>: error: <message>"
        on stderr, then Terminate with the fault's status.

        A plain string is reported as a rejected value (OptionValueError).
        """
        if isinstance(fault, str):
            fault = OptionValueError(fault)
        elif not isinstance(fault, ParseError):
            raise TypeError(f"error() argument must be a string or a ParseError, not {type(fault).__name__}")
        self.print_usage(self._context.stderr)
        trigger(fault, context=self._context)

    # ---- rendering --------------------------------------------------------

    def _text(self, fragment, style, /):
        return Text(fragment, self._context.style(style))

    def _panel(self, renderable, label, /):
        if not self._context.fancy:
            return renderable
        return Panel(
            renderable,
            title=Text.assemble("[", " ", f"{self.prog} {label}".upper(), " ", "]", style=self._context.style("panel-title")),
            title_align="left",
        )

    def _usage_text(self):
        if self._usage == SUPPRESS_USAGE:
            return None
        usage = Text()
        usage.append(self._text("usage", "usage-label")).append(":")
        usage.append(" ")
        usage.append(self._text(self.expand_prog_name(self._usage), "usage-section"))
        if self._context.colorful:
            usage.highlight_words([self.prog], self._context.style("program-name"))
        return usage

    def _option_strings(self, option):
        metavar = Text(" ").join(self._text(option.metavar, "metavar") for _ in range(option.nargs))
        strings = []
        for string in option.short_strings:
            strings.append(Text.assemble(self._text(string, "option-name"), *((" ", metavar) if option.takes_value else ())))
        for string in option.long_strings:
            strings.append(Text.assemble(self._text(string, "option-name"), *(("=", metavar) if option.takes_value else ())))
        return Text(", ").join(strings)

    def _helper(self, console):
        renders = []
        width = console.width - 4 * self._context.fancy

        if usage := self._usage_text():
            renders.append(usage.append("\n"))

        if self._description:
            renders.append(self._text(self.expand_prog_name(self._description), "description-section").append("\n"))

        if listed := [option for option in self._options if option.help != SUPPRESS_HELP]:
            padding = 2
            rows = [(self._option_strings(option), option) for option in listed]
            indent = min(max(len(strings) for strings, _ in rows) + padding * 2, 24)

            section = Text()
            section.append(self._text("options", "group-label")).append(":")
            section.append("\n")
            for strings, option in rows:
                line = Text(" " * padding).append(strings)
                if option.help:
                    if len(line) > indent - padding:
                        line.append("\n").append(" " * indent)
                    else:
                        line.append(" " * (indent - len(line)))
                    help = self._text(self.expand_prog_name(option.help), "option-help")
                    for index, segment in enumerate(help.wrap(console, max(width - indent, 16))):
                        if index:
                            line.append("\n").append(" " * indent)
                        line.append(segment)
                section.append(line).append("\n")
            renders.append(section)

        if self._epilog:
            renders.append(self._text(self.expand_prog_name(self._epilog), "epilog-section"))

        if renders:
            renders[-1].rstrip()
        return Group(*renders)

    def get_usage(self):
        if (usage := self._usage_text()) is None:
            return ""
        return usage.plain

    def print_usage(self, console=None):
        if (usage := self._usage_text()) is not None:
            (console or self._context.stdout).print(usage)

    def format_help(self):
        """
        Help as plain text, rendered at the width of the context's stdout.
        """
        console = Console(file=io.StringIO(), width=self._context.stdout.width, color_system=None)
        console.print(self._panel(self._helper(console), "help"))
        return console.file.getvalue()

    def print_help(self, console=None):
        console = console or self._context.stdout
        console.print(self._panel(self._helper(console), "help"))

    def get_version(self):
        if not self._version:
            return ""
        return self.expand_prog_name(self._version)

    def print_version(self, console=None):
        if version := self.get_version():
            (console or self._context.stdout).print(self._panel(self._text(version, "program-version"), "version"))


__all__ = (
    "OptionParser",
    "ParseResult",
    "SUPPRESS_USAGE",
)
