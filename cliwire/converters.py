"""
Cliwire converter registry: type tags to parse/render behavior.

Overview
- Converter: named tuple (parse, render, typename).
  • parse(text) -> value; raises (ConversionFailure or any exception) on bad input.
  • render(value) -> text; the literal it produces must parse back to an equal value.
  • typename: short display string used in the help table ("int", "float", ...).

- ConverterRegistry: mapping from a hashable type tag to its Converter.
  • register(tag, parse, render=str, *, typename=...) installs or overrides a converter.
  • register(tag) used alone returns a decorator that registers the decorated parse function.
  • lookup(tag) returns the Converter or raises UnsupportedTypeError.
  • Built-ins cover int, float, str and bool.

- Composite helpers (never auto-derived, always registered explicitly):
  • delimited(item, separator=",", container=list)
  • enumerated(EnumType)

Lifecycle
- Registrations happen at setup time. A CommandSpec resolves the converters it needs
  when it is built and keeps them, so later registrations never change a built spec.

Quick example:
    >>> from cliwire.converters import ConverterRegistry, delimited
    >>> registry = ConverterRegistry()
    >>> registry.register(list[int], delimited(registry.lookup(int)))
    >>> registry.lookup(list[int]).parse("1,2,3")
    [1, 2, 3]
"""
import enum
from typing import NamedTuple

from .faults import UnsupportedTypeError
from .utils import Unset, coalesce, rename


class ConversionFailure(ValueError):
    """
    Raised by parse functions to reject raw input with a readable reason.
    """

    def __init__(self, raw, reason, /):
        super().__init__(reason)
        self.raw = raw
        self.reason = reason


class Converter(NamedTuple):
    parse: object
    render: object
    typename: str


_TRUTHY = frozenset(("true", "t", "yes", "y", "on", "1"))
_FALSY = frozenset(("false", "f", "no", "n", "off", "0"))


def _parse_int(text):
    try:
        return int(text)
    except ValueError:
        pass
    try:
        # Prefixed literals: 0x.., 0o.., 0b..
        return int(text, 0)
    except ValueError:
        raise ConversionFailure(text, "expected an integer") from None


def _parse_float(text):
    try:
        return float(text)
    except ValueError:
        raise ConversionFailure(text, "expected a floating point number") from None


def _parse_bool(text):
    if (folded := text.strip().lower()) in _TRUTHY:
        return True
    if folded in _FALSY:
        return False
    raise ConversionFailure(text, "expected one of: %s" % ", ".join(sorted(_TRUTHY | _FALSY)))


def _render_bool(value):
    return "true" if value else "false"


def _typename(tag):
    return tag.__name__ if isinstance(tag, type) else str(tag)


class ConverterRegistry:
    """
    Extensible mapping from a type tag to its Converter.

    Tags are any hashable value: plain types (int), parameterized generics
    (list[int]) or plain strings ("path") all work as long as the same tag is
    used when declaring parameters.
    """

    def __init__(self, *, defaults=True):
        self._converters = {}
        if defaults:
            self.register(int, _parse_int, str)
            self.register(float, _parse_float, repr)
            self.register(str, str, str)
            self.register(bool, _parse_bool, _render_bool)

    def register(self, tag, parse=Unset, render=str, *, typename=Unset):
        """
        Install (or override) the converter for a type tag.

        Parameters
        - tag: hashable
          The identifier parameters use to select this converter.
        - parse: Callable[[str], Any] | Converter
          String to typed value. Raise ConversionFailure (or any exception) on bad input.
          When omitted, a decorator is returned that registers the decorated function.
          A Converter (see delimited/enumerated) supplies parse, render and typename at once.
        - render: Callable[[Any], str]
          Typed value to the literal text shown as a default in help.
        - typename: str
          Short type display; defaults to the tag's __name__ (or str(tag)).

        Returns
        - None in direct form; the decorated function in decorator form.
        """
        try:
            hash(tag)
        except TypeError:
            raise TypeError("register() 'tag' must be hashable") from None

        if isinstance(parse, Converter):
            parse, render, typename = parse.parse, parse.render, coalesce(typename, parse.typename)
        elif parse is Unset:
            @rename("register")
            def wrapper(parse, /):
                self.register(tag, parse, render, typename=typename)
                return parse
            return wrapper

        if not callable(parse):
            raise TypeError("register() 'parse' must be callable")
        if not callable(render):
            raise TypeError("register() 'render' must be callable")
        if not isinstance(typename := coalesce(typename, _typename(tag)), str):
            raise TypeError("register() 'typename' must be a string")
        elif not (typename := typename.strip()):
            raise ValueError("register() 'typename' cannot be empty")

        self._converters[tag] = Converter(parse, render, typename)

    def lookup(self, tag):
        """
        Return the Converter registered for a tag, or raise UnsupportedTypeError.
        """
        try:
            return self._converters[tag]
        except (KeyError, TypeError):
            raise UnsupportedTypeError(tag) from None

    def copy(self):
        """
        Return an independent registry with the same registrations.
        """
        clone = type(self)(defaults=False)
        clone._converters.update(self._converters)
        return clone

    def __contains__(self, tag):
        try:
            return tag in self._converters
        except TypeError:
            return False

    def __iter__(self):
        return iter(self._converters)

    def __len__(self):
        return len(self._converters)

    def __repr__(self):
        return f"converter-registry({', '.join(map(_typename, self._converters))})"


def delimited(item, /, separator=",", container=list):
    """
    Build a converter for a separated sequence of `item` values.

    The decomposition policy is plain splitting on `separator`; empty text parses
    to an empty container. The rendered form joins each item's rendering, so a
    rendered default parses back to an equal container.

    Returns
    - Converter, ready to be passed as ConverterRegistry.register(tag, converter).
    """
    if not isinstance(item, Converter):
        raise TypeError("delimited() argument must be a converter")
    if not isinstance(separator, str) or not separator:
        raise ValueError("delimited() 'separator' must be a non-empty string")

    @rename("parse")
    def parse(text):
        if not text:
            return container()
        return container(item.parse(part) for part in text.split(separator))

    @rename("render")
    def render(value):
        return separator.join(map(item.render, value))

    return Converter(parse, render, f"{container.__name__}[{item.typename}]")


def enumerated(enumeration, /):
    """
    Build a converter for an Enum type: members are matched by name, case-insensitively.
    """
    if not isinstance(enumeration, type) or not issubclass(enumeration, enum.Enum):
        raise TypeError("enumerated() argument must be an enum type")

    members = {name.lower(): member for name, member in enumeration.__members__.items()}

    @rename("parse")
    def parse(text):
        try:
            return members[text.strip().lower()]
        except KeyError:
            raise ConversionFailure(text, "expected one of: %s" % ", ".join(enumeration.__members__)) from None

    @rename("render")
    def render(value):
        return value.name

    return Converter(parse, render, "|".join(enumeration.__members__))


# Process-wide default registry used by specs built without an explicit one.
registry = ConverterRegistry()


__all__ = (
    "ConversionFailure",
    "Converter",
    "ConverterRegistry",
    "delimited",
    "enumerated",
    "registry",
)
