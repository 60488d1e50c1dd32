r"""
Optnaut option descriptors.

Overview
- Action
  • Closed vocabulary of mutations applied when an option fires
    (store, store_const, store_true, store_false, append, append_const,
    count, callback, help, version).

- Option
  • One switch: its spellings (e.g. -o/--output), destination key, arity,
    action, const payload, default, callback and help text.
  • Immutable after construction, except for the active/disabled spellings
    which the registry moves around during conflict resolution.

Metadata (sanitized on construction)
- Settings schema: action, dest, nargs, default, const, callback, help.
  Any other keyword is rejected with a single ConfigurationError naming every
  offending key.
- Action-implied settings are applied first, explicit settings always win:
  • store            → nargs=1
  • store_const      → nargs=0
  • store_true       → nargs=0, default=False
  • store_false      → nargs=0, default=True
  • append           → nargs=1, default=[]
  • append_const     → nargs=0, default=[]
  • count            → nargs=0, default=0
  • callback/help/version → nargs=0, dest=None
- dest: defaults to the longest spelling with leading dashes stripped
  (first one wins on ties), e.g. "--dry-run" → "dry-run".
- nargs: non-negative integer.

Validation highlights
- Spellings are either short ("-x") or long ("--name"); "=" and whitespace are
  never part of a spelling. Duplicate spellings within one option are rejected.
- callback must be callable; the callback action requires one.

Quick example:
    >>> from optnaut.options import Option
    >>> output = Option("-o", "--output", help="write result to FILE")
    >>> output.dest, output.nargs, output.action
    ('output', 1, <Action.STORE: 'store'>)
    >>> str(output)
    '-o/--output'
"""
import functools
import operator
import re
from enum import StrEnum

from .faults import ConfigurationError
from .utils import *


SUPPRESS_HELP = "SUPPRESS" + "HELP"
"""
Help text marker: options declared with help=SUPPRESS_HELP are hidden from help output.
"""


class Action(StrEnum):
    """
    Mutation semantics applied when an option fires.

    Values are the conventional lowercase names so either the member or its
    string can be passed as the `action` setting.
    """
    STORE = "store"
    STORE_CONST = "store_const"
    STORE_TRUE = "store_true"
    STORE_FALSE = "store_false"
    APPEND = "append"
    APPEND_CONST = "append_const"
    COUNT = "count"
    CALLBACK = "callback"
    HELP = "help"
    VERSION = "version"


# Recognized per-option settings (strict schema).
SETTINGS = (
    "action",
    "dest",
    "nargs",
    "default",
    "const",
    "callback",
    "help",
)


def _implied(action, /):
    """
    Settings implied by an action; fresh containers on every call.
    """
    match action:
        case Action.STORE:
            return {"nargs": 1}
        case Action.STORE_CONST:
            return {"nargs": 0}
        case Action.STORE_TRUE:
            return {"nargs": 0, "default": False}
        case Action.STORE_FALSE:
            return {"nargs": 0, "default": True}
        case Action.APPEND:
            return {"nargs": 1, "default": []}
        case Action.APPEND_CONST:
            return {"nargs": 0, "default": []}
        case Action.COUNT:
            return {"nargs": 0, "default": 0}
        case Action.CALLBACK | Action.HELP | Action.VERSION:
            return {"nargs": 0, "dest": None}


def _sanitize_strings(cls, metadata, /):
    """
    Internal: validate the spelling list.

    - at least one spelling is required.
    - each spelling is "-x" (one non-dash character) or "--name".
    - duplicates are rejected; declaration order is kept.
    """
    if not metadata["strings"]:
        raise ConfigurationError(f"{cls.__typename__} must specify at least one option string")

    strings = []
    for string in metadata["strings"]:
        if not isinstance(string, str):
            raise ConfigurationError(f"{cls.__typename__} strings must be strings, not {type(string).__name__}")
        elif not re.fullmatch(r"-[^-\s=]|--[^-\s=][^\s=]*", string):
            raise ConfigurationError(
                "invalid option string %r: must be a dash followed by one character (-x) "
                "or two dashes followed by a name (--name)" % string
            )
        elif string in strings:
            raise ConfigurationError(f"{cls.__typename__} strings cannot contain duplicates ({string!r})")
        strings.append(string)

    metadata["strings"] = strings


def _sanitize_action(cls, metadata, /):
    """
    Internal: resolve the action and apply its implied settings.

    Implied settings only fill what the caller left Unset, so explicit
    settings always win.
    """
    action = coalesce(metadata["action"], Action.STORE)
    try:
        action = Action(action)
    except ValueError:
        raise ConfigurationError(f"invalid action: {action!r}") from None
    metadata["action"] = action

    for name, object in _implied(action).items():
        if metadata[name] is Unset:
            metadata[name] = object


def _sanitize_dest(cls, metadata, /):
    """
    Internal: derive or validate the destination key.

    - Unset: the longest spelling with leading dashes stripped.
    - None: only meaningful for actions that never store (callback/help/version).
    - otherwise a non-empty string.
    """
    if (dest := metadata["dest"]) is Unset:
        metadata["dest"] = max(metadata["strings"], key=len).lstrip("-")
    elif dest is not None and not isinstance(dest, str):
        raise ConfigurationError(f"{cls.__typename__} 'dest' must be a string or None")
    elif isinstance(dest, str) and not dest.strip():
        raise ConfigurationError(f"{cls.__typename__} 'dest' cannot be empty")

    if metadata["dest"] is None and metadata["action"] not in (Action.CALLBACK, Action.HELP, Action.VERSION):
        raise ConfigurationError(f"{metadata['action']} {cls.__typename__} requires a 'dest'")


def _sanitize_nargs(cls, metadata, /):
    """
    Internal: arity must be a non-negative integer (bool is not an arity).
    """
    nargs = metadata["nargs"]
    if isinstance(nargs, bool) or not isinstance(nargs, int):
        raise ConfigurationError(f"{cls.__typename__} 'nargs' must be an integer, not {type(nargs).__name__}")
    if nargs < 0:
        raise ConfigurationError(f"{cls.__typename__} 'nargs' must be non-negative (got {nargs})")


def _sanitize_callback(cls, metadata, /):
    """
    Internal: callback must be callable when given; the callback action needs one.
    """
    callback = coalesce(metadata["callback"])
    if callback is not None and not callable(callback):
        raise ConfigurationError(f"{cls.__typename__} 'callback' must be callable, not {type(callback).__name__}")
    if metadata["action"] is Action.CALLBACK and callback is None:
        raise ConfigurationError(f"callback {cls.__typename__} requires a 'callback'")
    metadata["callback"] = callback


def _sanitize_help(cls, metadata, /):
    if not isinstance(help := coalesce(metadata["help"]), str | None):
        raise ConfigurationError(f"{cls.__typename__} 'help' must be a string")
    metadata["help"] = help.strip() if isinstance(help, str) else None


class Option:
    """
    Named option descriptor.

    Construction
    - Option(*strings, **settings), settings drawn from
      action, dest, nargs, default, const, callback, help.

    Properties (read-only; containers are handed out as copies)
    - strings: active spellings, declaration order.
    - disabled_strings: spellings withdrawn by conflict resolution.
    - dest, nargs, action, const, default, callback, help.
    - short_strings / long_strings, takes_value, metavar.

    Notes
    - default is Unset when neither the caller nor the action supplied one.
    - The registry moves spellings between `strings` and `disabled_strings`
      through _disable()/_enable(); nothing else mutates an option.
    """
    __typename__ = "option"

    __introspectable__ = (
        "strings",
        "disabled_strings",
        "dest",
        "nargs",
        "action",
        "const",
        "default",
        "callback",
        "help",
    )

    strings = mirror("strings")
    disabled_strings = mirror("disabled_strings")
    dest = mirror("dest")
    nargs = mirror("nargs")
    action = mirror("action")
    const = mirror("const")
    default = mirror("default")
    callback = mirror("callback")
    help = mirror("help")

    def __init__(self, *strings, **settings):
        if unknown := sorted(settings.keys() - set(SETTINGS)):
            raise ConfigurationError(
                "invalid keyword arguments: %s" % ", ".join(unknown),
                option="/".join(map(str, strings)) or None,
                keys=unknown,
            )

        metadata = {"strings": strings} | {name: settings.get(name, Unset) for name in SETTINGS}
        metadata["const"] = coalesce(metadata["const"])

        _sanitize_strings(type(self), metadata)
        _sanitize_action(type(self), metadata)
        _sanitize_dest(type(self), metadata)
        _sanitize_nargs(type(self), metadata)
        _sanitize_callback(type(self), metadata)
        _sanitize_help(type(self), metadata)

        for name, object in metadata.items():
            setattr(self, "_" + name, object)
        self._disabled_strings = []

    @property
    def short_strings(self):
        return [string for string in self._strings if not string.startswith("--")]

    @property
    def long_strings(self):
        return [string for string in self._strings if string.startswith("--")]

    @property
    def takes_value(self):
        return self._nargs > 0

    @property
    def metavar(self):
        """
        Placeholder shown after value-taking spellings in help, e.g. "FILE".
        """
        if self._dest is None:
            return "VALUE"
        return self._dest.replace("-", "_").upper()

    def get_opt_string(self):
        """
        Preferred spelling for messages: the first long spelling, else the first short one.
        """
        if self.long_strings:
            return self.long_strings[0]
        if self._strings:
            return self._strings[0]
        return self._disabled_strings[0]

    def _disable(self, string, /):
        self._strings.remove(string)
        self._disabled_strings.append(string)

    def _enable(self, string, /):
        self._disabled_strings.remove(string)
        self._strings.append(string)

    def __str__(self):
        return "/".join(self._strings)

    def __rich_repr__(self):
        for name in type(self).__introspectable__:
            yield name, getattr(self, name)

    def __repr__(self):
        return f"{type(self).__typename__}({', '.join(map(functools.partial(operator.mod, '%s=%r'), self.__rich_repr__()))})"


__all__ = (
    # Classes
    "Action",
    "Option",

    # Constants
    "SUPPRESS_HELP",
    "SETTINGS",
)
