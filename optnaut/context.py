"""
Program context: everything the parser needs from the hosting process.

The parser never reads sys.argv or writes to sys.stdout/sys.stderr on its own.
It receives a ProgramContext carrying the program name and two rich consoles,
which keeps parsing testable without a real process environment:

    >>> import io
    >>> from rich.console import Console
    >>> context = ProgramContext(
    ...     prog="tool",
    ...     stdout=Console(file=io.StringIO(), color_system=None),
    ...     stderr=Console(file=io.StringIO(), color_system=None),
    ...     colorful=False,
    ... )

ProgramContext.from_process() is the one place that consults the real process
(basename of sys.argv[0], the terminal's stdout and stderr).
"""
import os.path
import sys
from dataclasses import dataclass, field, replace
from types import MappingProxyType

from rich.console import Console


# Named styles used by help, version and error renderers. A context may
# override any entry through its `styles` mapping.
PALETTE = MappingProxyType({
    # usage / help head
    "usage-label": "bold #00E6FF",
    "program-name": "bold #FF4D94",
    "usage-section": "bold #36C5F0",
    "description-section": "italic #A3A3A3",
    "epilog-section": "#737373",

    # option listing
    "group-label": "bold #FFFFFF",
    "option-name": "bold #00E6FF",
    "metavar": "bold #FFD600",
    "option-help": "#9CA3AF",

    # version
    "program-version": "bold #00E6FF",

    # faults
    "error-label": "bold #FF4DA6",
    "error-message": "#C8C8D0",

    # panel chrome
    "panel-title": "bold #FF4D94",
})


@dataclass(frozen=True)
class ProgramContext:
    """
    Injected program environment.

    Fields
    - prog: program name substituted for %prog and used in error lines.
    - stdout: console receiving help and version output.
    - stderr: console receiving usage banners and error lines.
    - colorful: apply the style palette (False renders plain text).
    - fancy: wrap help, version and errors in a rich Panel.
    - styles: per-context overrides merged over PALETTE.
    """
    prog: str
    stdout: Console = field(default_factory=Console)
    stderr: Console = field(default_factory=lambda: Console(stderr=True))
    colorful: bool = True
    fancy: bool = False
    styles: MappingProxyType = field(default_factory=lambda: MappingProxyType({}))

    def __post_init__(self):
        if not isinstance(self.prog, str) or not self.prog.strip():
            raise TypeError("ProgramContext 'prog' must be a non-empty string")
        # Freeze whatever mapping was handed in.
        object.__setattr__(self, "styles", MappingProxyType(dict(self.styles)))

    @classmethod
    def from_process(cls, **overrides):
        """
        Build a context from the running process: prog is the basename of sys.argv[0].
        """
        argv = getattr(sys, "argv", None) or [""]
        prog = os.path.basename(argv[0]) or "python"
        return cls(**({"prog": prog} | overrides))

    def style(self, name, /):
        """
        Resolve a palette entry, honoring overrides; empty when colorful is off.
        """
        if not self.colorful:
            return ""
        return self.styles.get(name, PALETTE.get(name, ""))

    def renamed(self, prog, /):
        """
        Return a copy of this context with another program name.
        """
        return replace(self, prog=prog)


__all__ = (
    "ProgramContext",
    "PALETTE",
)
