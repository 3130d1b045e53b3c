"""
Tokopt utilities (internal helpers, carefully exposed)

Scope
- Small building blocks shared by the tokenizer, extractors, options and parser.

Overview
- UnsetType / Unset
  • Singleton sentinel to represent “value not provided” without conflating with None.
  • Falsey (bool(Unset) is False), printable as "Unset", and non-subclassable.

- coalesce(value, default=None)
  • Replace Unset with a concrete default, but preserve legitimate falsey values like None/0/"".

- rename(callable, name) / @rename("name")
  • Assign stable __name__/__qualname__ to generated callables for clean tracebacks.

- mirror("attr")
  • Read-only property factory exposing a private backing field (self._attr); containers
    are handed out as fresh copies (sets as frozensets) so registry state cannot be mutated
    through the public API.

- splitnames(text)
  • Split a name list such as "aa, bb;cc dd" on commas, colons, semicolons and whitespace.

Quick examples
    >>> coalesce(Unset, "fallback")
    'fallback'
    >>> splitnames("a_b, aa:bb")
    ('a_b', 'aa', 'bb')
"""
import builtins
import functools
import re
from collections.abc import Sequence, Mapping, Set
from typing import final


@final
class UnsetType:
    """
    Singleton sentinel representing “no value provided”.

    Distinguishes omitted parameters from user-supplied values (None, 0, ""),
    which matters for option defaults: a callback default of None is a real
    default, Unset means the slot is required.
    """

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

    @functools.cache
    def __new__(cls):
        return super().__new__(cls)

    def __bool__(self):
        return False

    def __repr__(self):
        return "Unset"

    def __init_subclass__(cls, **options):
        raise TypeError("type 'UnsetType' is not an acceptable base type")


Unset = UnsetType()


def coalesce(object, default=None, /):
    """
    Return object unless it is Unset, in which case return default.

    Falsey values (None, 0, "", []) are preserved as-is.

    Examples
    - coalesce("name", "fallback") -> "name"
    - coalesce(Unset, "fallback")  -> "fallback"
    - coalesce(None, "fallback")   -> None
    """
    return object if object is not Unset else default


def rename(*parameters):
    """
    Set a stable __name__/__qualname__ on a callable, or return a decorator
    that will do so later.

    Forms
    - rename(callable, name) -> callable (renamed in place)
    - rename(name) -> decorator
    """
    match len(parameters):
        case 2:
            callable, name = parameters
            if not builtins.callable(callable):
                raise TypeError("rename() first argument must be callable")
            if not isinstance(name, str):
                raise TypeError("rename() second argument must be a string")
            try:
                callable.__qualname__ = name
                callable.__name__ = name
            except (AttributeError, TypeError):
                raise TypeError("rename() first argument must be a updatable callable") from None
            return callable
        case 1:
            name, = parameters
            if not isinstance(name, str):
                raise TypeError("@rename() argument must be a string")

            def wrapper(callable):
                if not builtins.callable(callable):
                    raise TypeError("@rename() must be applied to a callable")
                return rename(callable, name)

            return rename(wrapper, "rename")
        case _:
            raise TypeError("rename takes 1 to 2 arguments but %d were given" % len(parameters))


def _immortalize(object):
    """
    Copy container values so callers never hold the backing container.

    - tuple: returned as-is (already immutable)
    - other sequences (non-string): new tuple
    - mappings: new dict with processed values
    - sets: new frozenset
    """
    if isinstance(object, tuple):
        return object
    elif isinstance(object, Sequence) and not isinstance(object, str):
        return tuple(map(_immortalize, object))
    elif isinstance(object, Mapping):
        return dict(zip(object.keys(), map(_immortalize, object.values())))
    elif isinstance(object, Set):
        return frozenset(object)
    else:
        return object


def mirror(name, /):
    """
    Define a read-only property that mirrors the private field "_{name}".

    Example
    - Given self._required, declare required = mirror("required").
    """
    if not isinstance(name, str):
        raise TypeError("mirror() argument must be a string")

    @rename(name)
    def getter(self):
        return _immortalize(getattr(self, "_" + name))

    return property(getter)


_SEPARATORS = re.compile(r"[,:;\s]+")


def splitnames(text, /):
    """
    Split a list of option names separated by commas, colons, semicolons or
    whitespace. Empty fragments are dropped and order is preserved.

    Raises
    - TypeError: when text is not a string.
    """
    if not isinstance(text, str):
        raise TypeError("splitnames() argument must be a string")
    return tuple(name for name in _SEPARATORS.split(text) if name)


__all__ = (
    "UnsetType",
    "Unset",
    "coalesce",
    "rename",
    "mirror",
    "splitnames",
)
