"""
Cliwire faults: what can go wrong while building or running a command, and how it is shown.

Setup time
- UnsupportedTypeError (a TypeError): a parameter's type tag has no registered converter.
  Raised while a CommandSpec is built, together with plain TypeError/ValueError for
  malformed declarations. End users never see these.

Dispatch time
- CommandException subclasses, one per syntax fault the matcher can detect:
  UnknownOptionError, MissingSeparatorError, UnexpectedPositionalError, ConversionError.
  Each aborts the dispatch call and maps to exit status 1.
- CommandWarning subclasses for notices that let the call proceed:
  DuplicatedOptionWarning.

Every fault carries a one-sentence message that leads with the argv position
("... at third position") and a read-only `options` mapping with its context
(code, title, hint, index, input, ...). Runtime flags (shell, colorful, fancy, prog)
are merged in by trigger() through copy.replace().

Surfacing
- trigger(fault, **options) outside shell mode raises errors and routes warnings
  through the warnings module; in shell mode both are rendered to stderr with rich,
  and errors terminate the process with status 1.
- Hosts may restyle output via a __styles__ mapping, relabel codes via __codes__
  and rename the program via __prog__, all looked up in __main__.

Routine failures are never wrapped: whatever the routine raises propagates untouched.
"""
import copy
import sys
import warnings
from collections import defaultdict
from enum import IntEnum
from types import MappingProxyType

from rich.console import Console, Group
from rich.panel import Panel
from rich.text import Text

from .utils import Unset, coalesce

stderr = Console(stderr=True)


class FaultCode(IntEnum):
    """
    Stable numeric identifiers for dispatch-time faults.

    - 111xx: errors (11x1x options, 11x2x positionals, 11x3x conversions)
    - 121xx: warnings
    """
    UNKNOWN_OPTION          = 11111
    MISSING_SEPARATOR       = 11112
    UNEXPECTED_POSITIONAL   = 11121
    CONVERSION_FAILURE      = 11131
    DUPLICATED_OPTION       = 12111

    def normalize(self):
        """
        Display label for this code: the host's ``__main__.__codes__`` entry, else the number.
        """
        labels = getattr(sys.modules["__main__"], "__codes__", {})
        return str(labels.get(self, self.value))


class UnsupportedTypeError(TypeError):
    """
    Raised while building a spec when a parameter's type tag has no registered converter.
    """

    def __init__(self, tag, /):
        super().__init__(f"no converter registered for type {tag!r}")
        self.tag = tag


def _render(fault):
    main = sys.modules["__main__"]
    colorful = fault.options.get("colorful", False)
    styles = defaultdict(str, type(fault).__palette__ | getattr(main, "__styles__", {}))
    kind = type(fault).__kind__

    def paint(fragment, style):
        return Text(str(fragment or ""), styles[style] if colorful else "")

    code = fault.options.get("code")
    header = Text.assemble(
        "[ ",
        paint(getattr(main, "__prog__", fault.options.get("prog")), "prog-name"),
        " — ",
        paint(code.normalize() if code else "", "code"),
        " | ",
        paint(fault.options.get("title", kind).title(), "title"),
        " ]",
    )
    lines = [paint(fault.message, "message")]
    if hint := fault.options.get("hint"):
        lines.append(Text.assemble(paint(" → ", "hint-arrow"), paint(hint, "hint")))

    if fault.options.get("fancy", False):
        return Panel(Group(*lines), title=header, title_align="left")
    return Group(header, *lines)


class _Fault:
    # Shared payload of errors and warnings; concrete bases mix in Exception or Warning.
    __kind__ = "fault"
    __palette__ = {}

    def __init__(self, message=Unset, /, **options):
        if not isinstance(message, str | Unset):
            raise TypeError(f"{type(self).__name__}() message must be a string")
        super().__init__(message)
        self.message = message
        self.options = MappingProxyType(options)

    @property
    def code(self):
        return self.options.get("code")

    def __str__(self):
        return coalesce(self.message, "")

    def __rich__(self):
        return _render(self)

    def __replace__(self, /, **changes):
        return type(self)(self.message, **(dict(self.options) | changes))


class CommandException(_Fault, Exception):
    """
    Base class for every syntax fault detected while matching argv.
    """
    __kind__ = "error"
    __palette__ = {
        "prog-name": "bold #F4F4F8",
        "code": "bold #5FD7FF",
        "title": "bold #FF5F87",
        "message": "#D0D0D8",
        "hint-arrow": "dim #87D787",
        "hint": "italic #87D787",
    }

    def __trigger__(self):
        if not self.options.get("shell", False):
            raise self from None
        stderr.print(self)
        sys.exit(1)


class UnknownOptionError(CommandException): ...
class MissingSeparatorError(CommandException): ...
class UnexpectedPositionalError(CommandException): ...


class ConversionError(CommandException):
    """
    A value was present but its parse function rejected it.
    """

    @property
    def parameter(self):
        return self.options.get("parameter")

    @property
    def raw(self):
        return self.options.get("raw")

    @property
    def reason(self):
        return self.options.get("reason")


class CommandWarning(_Fault, Warning):
    """
    Base class for non-fatal dispatch notices; the dispatch still succeeds.
    """
    __kind__ = "warning"
    __palette__ = {
        "prog-name": "bold #F4F4F8",
        "code": "bold #FFAF00",
        "title": "bold #FFAFD7",
        "message": "#DADAE2",
        "hint-arrow": "dim #AFD7AF",
        "hint": "italic #AFD7AF",
    }

    def __trigger__(self):
        if self.options.get("shell", False):
            stderr.print(self)
        else:
            warnings.warn(self, stacklevel=3)


class DuplicatedOptionWarning(CommandWarning): ...


def trigger(fault, /, **options):
    """
    Surface a fault after merging runtime options into a copy of it.

    The fault must implement __replace__ (used by copy.replace) and __trigger__,
    as CommandException and CommandWarning do.
    """
    if not all(callable(getattr(fault, name, None)) for name in ("__replace__", "__trigger__")):
        raise TypeError("trigger() argument must implement __replace__ and __trigger__")
    copy.replace(fault, **options).__trigger__()


__all__ = (
    "FaultCode",
    "UnsupportedTypeError",
    "CommandException",
    "UnknownOptionError",
    "MissingSeparatorError",
    "UnexpectedPositionalError",
    "ConversionError",
    "CommandWarning",
    "DuplicatedOptionWarning",
    "trigger",
)
