"""
Optnaut faults (errors, warnings and termination) and rendering.

Scope
- FaultCode: stable exit statuses, one per user-facing error class.
- Construction-time errors (ConfigurationError, ConflictError, NotFoundError):
  programmer-facing, raised as ordinary exceptions and never rendered.
- Parse-time faults (UnknownOptionError, ArityError, OptionValueError): user-facing,
  they know how to render themselves with rich as "<prog>: error: <message>".
- Terminate: the single way a parse ends early (help, version, or any fault).
  It is a SystemExit, so an uncaught Terminate ends the process with its status
  while tests and embedding code can still catch it.
- trigger(): central entry point to surface any fault with runtime options.

Protocol
- A fault provides __replace__(**options) returning an updated copy and
  __trigger__() which surfaces it. trigger(fault, **options) combines both.
- When the options carry a "context" (ProgramContext), a fault prints itself on
  the context's stderr console and raises Terminate(code). Without a context the
  fault itself is raised, which is how library code consumes it.
"""
import warnings
from enum import IntEnum
from types import MappingProxyType

from rich.console import Group
from rich.panel import Panel
from rich.text import Text

from .utils import Unset, coalesce


class FaultCode(IntEnum):
    """
    canonical exit statuses for user-facing faults (stable identifiers).

    - UNKNOWN_OPTION: a token looked like an option but no option owns that spelling.
    - WRONG_VALUE_COUNT: too few values for an option's arity, or a value given
      to an option that takes none.
    - REJECTED_VALUE: a callback refused the value it was given.
    - UNKNOWN_COMMAND: the dispatcher found no sub-command with that name.
    """
    UNKNOWN_OPTION = 1
    WRONG_VALUE_COUNT = 2
    REJECTED_VALUE = 3
    UNKNOWN_COMMAND = 4


class OptnautError(Exception):
    """Root of every exception raised by optnaut."""


class ConfigurationError(OptnautError, TypeError):
    """
    A bad option or parser declaration.

    Always a programming error, raised while options are being built or
    registered. `keys` lists unrecognized settings when that is the cause.
    """

    def __init__(self, message, /, *, option=None, keys=()):
        super().__init__(message)
        self.message = message
        self.option = option
        self.keys = tuple(keys)

    def __str__(self):
        if self.option is not None:
            return f"option {self.option}: {self.message}"
        return self.message


class ConflictError(ConfigurationError):
    """
    A spelling is already registered and the conflict handler is "error".
    """

    def __init__(self, spelling, /, *, option=None):
        super().__init__(f"conflicting option string: {spelling}", option=option)
        self.spelling = spelling


class NotFoundError(OptnautError, KeyError):
    """
    No registered option owns the given spelling.
    """

    def __init__(self, spelling, /):
        super().__init__(spelling)
        self.spelling = spelling

    def __str__(self):
        return f"no such option {self.spelling!r}"


class ParseError(OptnautError):
    """
    Base of user-facing faults found while walking the argument vector.

    Options (all optional, merged through __replace__)
    - context: ProgramContext used to render and terminate.
    - code: FaultCode overriding the class default.
    - spelling: the option spelling as typed by the user.
    - option: the resolved Option, when there is one.
    """
    code = None

    def __init__(self, message=Unset, /, **options):
        assert isinstance(message, str | Unset)
        super().__init__(coalesce(message, ""))
        self.message = coalesce(message, "")
        self.options = MappingProxyType(options)

    def __str__(self):
        return self.message

    @property
    def status(self):
        return int(self.options.get("code", type(self).code))

    @property
    def spelling(self):
        return self.options.get("spelling")

    @property
    def option(self):
        return self.options.get("option")

    def __rich__(self):
        context = self.options["context"]

        line = Text.assemble(
            Text(context.prog, context.style("program-name")),
            ": ",
            Text("error", context.style("error-label")),
            ": ",
            Text(self.message, context.style("error-message")),
        )
        if context.fancy:
            return Panel(Group(line), title=Text("error", context.style("panel-title")), title_align="left")
        return line

    def __trigger__(self):
        context = self.options.get("context")
        if context is None:
            raise self from None
        context.stderr.print(self)
        raise Terminate(self.status, self.message) from self

    def __replace__(self, *unused, **overrides):
        assert not unused, "positional arguments are not allowed"
        return type(self)(self.message, **{**self.options, **overrides})


class UnknownOptionError(ParseError):
    code = FaultCode.UNKNOWN_OPTION


class ArityError(ParseError):
    """
    Wrong number of values for an option.

    Extra options
    - expected: the option's arity.
    - received: how many values were actually available.
    """
    code = FaultCode.WRONG_VALUE_COUNT

    @property
    def expected(self):
        return self.options.get("expected")

    @property
    def received(self):
        return self.options.get("received")


class OptionValueError(ParseError, ValueError):
    """
    Raised by callbacks to reject a supplied value with a human-readable reason.
    """
    code = FaultCode.REJECTED_VALUE


class UnknownCommandError(ParseError):
    code = FaultCode.UNKNOWN_COMMAND


class Terminate(SystemExit):
    """
    Early end of a parse: help, version, or a user-facing fault.

    Attributes
    - status: process exit status (0 for help/version, a FaultCode otherwise).
    - message: the fault message, or None for help/version.
    """

    def __init__(self, status=0, message=None, /):
        super().__init__(int(status))
        self.status = int(status)
        self.message = message

    def __repr__(self):
        return f"Terminate(status={self.status!r}, message={self.message!r})"


class ParserWarning(UserWarning):
    """
    Non-fatal parse condition, emitted through the warnings module.
    """

    def __init__(self, message=Unset, /, **options):
        assert isinstance(message, str | Unset)
        super().__init__(coalesce(message, ""))
        self.message = coalesce(message, "")
        self.options = MappingProxyType(options)

    def __str__(self):
        return self.message

    def __trigger__(self):
        warnings.warn(self, stacklevel=4)

    def __replace__(self, *unused, **overrides):
        assert not unused, "positional arguments are not allowed"
        return type(self)(self.message, **{**self.options, **overrides})


class EmptyValueWarning(ParserWarning): ...


def trigger(fault, /, **options):
    """
    surface a fault with the given runtime options.

    contract
    - fault must provide __trigger__ and __replace__ methods (see base classes).
    - options are merged into the fault via __replace__(**options) before triggering.
    - with a "context" option, errors are printed and end in Terminate; without one
      they are raised as-is. warnings always go through warnings.warn.
    """
    if (
        not hasattr(fault, "__trigger__") or
        not callable(fault.__trigger__) or
        not hasattr(fault, "__replace__") or
        not callable(fault.__replace__)
    ):
        raise TypeError("trigger() argument must have a __trigger__ and __replace__ methods")
    fault.__replace__(**options).__trigger__()


__all__ = (
    "FaultCode",
    "OptnautError",
    "ConfigurationError",
    "ConflictError",
    "NotFoundError",
    "ParseError",
    "UnknownOptionError",
    "ArityError",
    "OptionValueError",
    "UnknownCommandError",
    "Terminate",
    "ParserWarning",
    "EmptyValueWarning",
    "trigger",
)
