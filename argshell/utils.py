"""
Small helpers shared by the argshell modules.

- Unset: falsey singleton meaning "not given", distinct from None.
- coalesce(): resolve Unset to a fallback while keeping None/0/"" intact.
- rename(): decorator fixing __name__/__qualname__ of generated functions.
- mirror(): read-only property over "_{name}" returning immutable copies.
- ordinal(): "first", "second", ..., "11th", "22nd" for position-first messages.

    >>> coalesce(Unset, ","), coalesce(None, ",")
    (',', None)
    >>> ordinal(3), ordinal(12), ordinal(23)
    ('third', '12th', '23rd')
"""
import functools
from collections.abc import Mapping, Sequence, Set
from typing import final

_WORDS = ("first", "second", "third", "fourth", "fifth", "sixth", "seventh", "eighth", "ninth", "tenth")


@final
class UnsetType:
    """Type of the Unset singleton; usable in unions (str | Unset)."""

    @functools.cache
    def __new__(cls):
        return super().__new__(cls)

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

    def __bool__(self):
        return False

    def __repr__(self):
        return "Unset"

    def __init_subclass__(cls, **options):
        raise TypeError("type 'UnsetType' is not an acceptable base type")


Unset = UnsetType()


def coalesce(object, default=None, /):
    """Return 'object', or 'default' when it is Unset."""
    return default if object is Unset else object


def rename(name, /):
    """
    Decorator giving a generated function a stable name in reprs and tracebacks.

        @rename("__repr__")
        def __repr__(self): ...
    """
    if not isinstance(name, str):
        raise TypeError("rename() argument must be a string")

    def decorator(function):
        function.__name__ = function.__qualname__ = name
        return function

    return decorator


def _freeze(object):
    match object:
        case str():
            return object
        case Mapping():
            return {key: _freeze(value) for key, value in object.items()}
        case Sequence():
            return tuple(map(_freeze, object))
        case Set():
            return frozenset(map(_freeze, object))
    return object


def mirror(name, /):
    """
    Property exposing the private attribute "_{name}".

    Lists become tuples and sets frozensets on the way out; mappings are
    copied, so callers never hold a reference to the model's own containers.
    """
    if not isinstance(name, str):
        raise TypeError("mirror() argument must be a string")

    @rename(name)
    def getter(self):
        return _freeze(getattr(self, "_" + name))

    return property(getter)


@functools.cache
def ordinal(number, /):
    """Spell a 1-based position: words up to ten, then 11th, 21st, 102nd, ..."""
    if 1 <= number <= len(_WORDS):
        return _WORDS[number - 1]
    if number % 100 in (11, 12, 13):
        return "%dth" % number
    return "%d%s" % (number, {1: "st", 2: "nd", 3: "rd"}.get(number % 10, "th"))


__all__ = (
    "UnsetType",
    "Unset",
    "coalesce",
    "rename",
    "mirror",
    "ordinal",
)
