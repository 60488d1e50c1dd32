"""
Action dispatcher: apply an option's action to the result mapping.

take_action() is an exhaustive match over Action. Every branch either writes
`values[option.dest]`, delegates to the option's callback, or ends the parse
through the parser (help/version).

Value shapes received here
- zero-arity options: True
- arity 1: the string
- arity >= 2: a tuple of strings

Accumulating actions (append, append_const, count) never mutate what they find
in `values`; they store a new object. Defaults seeded from the registry and
caller overrides are therefore never touched by a parse.
"""
from collections.abc import Sequence

from .faults import OptionValueError
from .options import Action


def _extended(current, item, /):
    if isinstance(current, Sequence) and not isinstance(current, str):
        return [*current, item]
    return [item]


def _counted(current, /):
    if isinstance(current, int) and not isinstance(current, bool):
        return current + 1
    return 1


def _invoke(option, spelling, value, parser, /):
    """
    Call the option's callback; a rejected value becomes a usage error.

    Only OptionValueError is translated. Any other exception is a bug in the
    callback and propagates to the caller of parse_args().
    """
    try:
        option.callback(option, spelling, value, parser)
    except OptionValueError as error:
        parser.error(OptionValueError(
            "option %s: %s" % (spelling, error.message),
            **(dict(error.options) | {"spelling": spelling, "option": option}),
        ))


def take_action(option, spelling, value, values, parser):
    """
    Apply `option.action` for one invocation.

    Parameters
    - option: the resolved Option.
    - spelling: the spelling the user typed ("-v", "--verbose").
    - value: the collected value(s), see module notes for shapes.
    - values: the result mapping being built by the parse.
    - parser: the running OptionParser (for callbacks and termination).
    """
    match option.action:
        case Action.STORE:
            values[option.dest] = value
        case Action.STORE_CONST:
            values[option.dest] = option.const
        case Action.STORE_TRUE:
            values[option.dest] = True
        case Action.STORE_FALSE:
            values[option.dest] = False
        case Action.APPEND:
            values[option.dest] = _extended(values.get(option.dest), value)
        case Action.APPEND_CONST:
            values[option.dest] = _extended(values.get(option.dest), option.const)
        case Action.COUNT:
            values[option.dest] = _counted(values.get(option.dest))
        case Action.CALLBACK:
            _invoke(option, spelling, value, parser)
        case Action.HELP:
            if option.callback is not None:
                _invoke(option, spelling, value, parser)
            else:
                parser.print_help()
            parser.exit()
        case Action.VERSION:
            if option.callback is not None:
                _invoke(option, spelling, value, parser)
            else:
                parser.print_version()
            parser.exit()


__all__ = (
    "take_action",
)
