"""
Option registry: insertion, lookup by spelling, conflict handling and defaults.

Scope
- Keeps the ordered list of live options (insertion order drives help output
  and "newest wins" conflict resolution).
- Aggregates the default value of every destination.

Conflict handlers
- "error": registering a spelling that another live option owns raises
  ConflictError and leaves the registry untouched.
- "resolve": the newest option takes the spelling. The previous owner loses it
  (moved to its disabled spellings), or is dropped entirely when that spelling
  was the last one it had.

Removal
- remove_option(spelling) drops the owning option and hands each of its
  spellings back to the most recently added option that had it disabled.

Defaults
- An option with a destination and an explicit (or action-implied) default
  writes it. An option whose default is Unset only writes None when no other
  option sharing the destination contributed a default first.
"""
import copy

from .faults import ConfigurationError, ConflictError, NotFoundError
from .options import Option
from .utils import *


CONFLICT_HANDLERS = ("error", "resolve")


class Registry:
    """
    Ordered container of Option instances.

    Properties
    - option_list: live options in insertion order (a copy).
    - defaults: destination → default mapping (a copy).
    - conflict_handler: "error" or "resolve".
    - option_class: factory used by add_option() for plain settings.
    """
    option_list = mirror("options")
    defaults = mirror("defaults")
    conflict_handler = mirror("conflict_handler")
    option_class = mirror("option_class")

    def __init__(self, option_class=Option, conflict_handler="error"):
        if not callable(option_class):
            raise ConfigurationError(f"'option_class' must be callable, not {type(option_class).__name__}")
        self._option_class = option_class
        self._options = []
        self._defaults = {}
        self.set_conflict_handler(conflict_handler)

    def set_conflict_handler(self, handler, /):
        if handler not in CONFLICT_HANDLERS:
            raise ConfigurationError(
                "invalid conflict_resolution value %r (expected one of %s)" % (handler, ", ".join(map(repr, CONFLICT_HANDLERS)))
            )
        self._conflict_handler = handler

    def set_default(self, dest, value, /):
        self._defaults[dest] = value

    def set_defaults(self, **values):
        self._defaults.update(values)

    def get_default_values(self):
        """
        Fresh mapping of defaults for one parse; container values are copied.
        """
        return {dest: copy.copy(value) for dest, value in self._defaults.items()}

    def _check_conflict(self, option):
        for string in option.strings:
            if (owner := self.lookup(string)) is None:
                continue
            if self._conflict_handler == "error":
                raise ConflictError(string, option=str(option))
            if len(owner.strings) == 1:
                self._options.remove(owner)
            else:
                owner._disable(string)

    def add_option(self, *args, **settings):
        """
        Register an option.

        Forms
        - add_option(Option(...)): register a pre-built option.
        - add_option("-o", "--output", **settings): build one with option_class.

        Returns the registered option.
        """
        match args:
            case [Option() as option] if not settings:
                pass
            case [Option()]:
                raise ConfigurationError("add_option() takes no settings when given an Option instance")
            case _:
                option = self._option_class(*args, **settings)
                if not isinstance(option, Option):
                    raise ConfigurationError(
                        f"'option_class' must build Option instances, not {type(option).__name__}"
                    )

        if any(other is option for other in self._options):
            raise ConfigurationError("option already registered", option=str(option))

        self._check_conflict(option)
        self._options.append(option)

        if option.dest is not None:
            if option.default is not Unset:
                self._defaults[option.dest] = option.default
            elif option.dest not in self._defaults:
                self._defaults[option.dest] = None

        return option

    def add_options(self, options, /):
        for option in options:
            self.add_option(option)

    def lookup(self, spelling, /):
        """
        Return the live option owning `spelling`, or None.
        """
        for option in self._options:
            if spelling in option.strings:
                return option
        return None

    get_option = lookup

    def has_option(self, spelling, /):
        return self.lookup(spelling) is not None

    def remove_option(self, spelling, /):
        """
        Remove the option owning `spelling` (all of its spellings go with it).

        Each active spelling of the removed option is reinstated on the most
        recently added option that has it disabled, if there is one.

        Raises
        - NotFoundError: no live option owns `spelling`.
        """
        if (option := self.lookup(spelling)) is None:
            raise NotFoundError(spelling)

        self._options = [other for other in self._options if other is not option]

        for string in option.strings:
            for other in reversed(self._options):
                if string in other.disabled_strings:
                    other._enable(string)
                    break
        return option


__all__ = (
    "Registry",
    "CONFLICT_HANDLERS",
)
