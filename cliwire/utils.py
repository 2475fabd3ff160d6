"""
Cliwire utilities shared by the specs, matcher and dispatcher layers.

- Unset: sentinel for "argument not given", distinct from None (a legitimate default).
  It is falsey, prints as "Unset" and composes into isinstance unions (``str | Unset``).
- coalesce(value, default): Unset becomes the default; every other value passes through.
- rename(name): decorator fixing __name__/__qualname__ of generated functions.
- mirror(name): read-only property over ``self._<name>`` that hands out copies of containers.
- ordinal(number): "first" ... "tenth", then "11th", "22nd", "103rd".
"""
import enum
import functools
from collections.abc import Mapping, Sequence, Set


class UnsetType(enum.Enum):
    """
    Type of the Unset sentinel (a single-member enum, hence a process-wide singleton
    that survives copying and pickling and cannot be subclassed).
    """
    UNSET = "Unset"

    def __bool__(self):
        return False

    def __repr__(self):
        return "Unset"

    __str__ = __repr__

    def __or__(self, other, /):
        try:
            return type(self) | other
        except TypeError:
            return NotImplemented

    def __ror__(self, other, /):
        try:
            return other | type(self)
        except TypeError:
            return NotImplemented


Unset = UnsetType.UNSET


def coalesce(object, default=None, /):
    """
    Replace Unset with `default`; None, 0, "" and other falsey values are kept.
    """
    return default if object is Unset else object


def rename(name, /):
    """
    Decorator giving a generated function a stable __name__ and __qualname__.
    """
    if not isinstance(name, str):
        raise TypeError("rename() argument must be a string")

    def decorate(function):
        function.__name__ = function.__qualname__ = name
        return function

    return decorate


def _detach(value):
    match value:
        case str() | bytes() | bytearray():
            return value
        case tuple() if hasattr(value, "_fields"):
            return type(value)(*map(_detach, value))
        case tuple():
            return tuple(map(_detach, value))
        case Sequence():
            return list(map(_detach, value))
        case Mapping():
            return {key: _detach(item) for key, item in value.items()}
        case Set() if not isinstance(value, frozenset):
            return set(map(_detach, value))
    return value


def mirror(name, /):
    """
    Read-only property exposing ``self._<name>``; lists, dicts and sets are copied on read.
    """
    if not isinstance(name, str):
        raise TypeError("mirror() argument must be a string")
    attribute = "_" + name
    return property(rename(name)(lambda self: _detach(getattr(self, attribute))))


_WORDS = ("first", "second", "third", "fourth", "fifth", "sixth", "seventh", "eighth", "ninth", "tenth")


@functools.cache
def ordinal(number, /):
    if 0 < number <= len(_WORDS):
        return _WORDS[number - 1]
    if number % 100 in (11, 12, 13):
        return f"{number}th"
    return f"{number}{ {1: 'st', 2: 'nd', 3: 'rd'}.get(number % 10, 'th') }"


__all__ = (
    "UnsetType",
    "Unset",
    "coalesce",
    "rename",
    "mirror",
    "ordinal",
)
