r"""
Tokopt option descriptor.

Overview
- Option: binds a callback to one or more names. The callback's positional
  parameters become typed slots (see tokopt.extractors for the kinds); a
  parameter with a default value is an optional slot. An option can be bound
  to a context object, passed to the callback as its first argument.
- Slot: (name, kind, default) record describing a single parameter.

Contract (extract, execute, describe)
- extract(stream): pull every slot left to right; the first failure aborts the
  whole option and no partial values survive.
- execute(values): call the bound callback with the extracted values.
- usage: the usage labels of all slots joined with a space, e.g.
  "<int> <string>" or "<int>(optional=14)".

Dependencies
- require(*names): the option needs every named option in the same run.
- exclude(*names): the option cannot run together with any named option.
- isolate(): the option cannot run together with any other option.

Quick example:
    >>> from tokopt.options import Option
    >>> def repeat(text: str, times: int = 1): ...
    >>> Option(repeat, "repeat,r", "prints text a few times").usage
    '<string> <int>(optional=1)'
"""
import functools
import inspect
import operator
import re
from collections import namedtuple
from collections.abc import Iterable

from rich.text import Text

from .extractors import Kind, extract, resolve
from .faults import ExtractionError, SelfDependencyError
from .tokens import DELIMITERS, get_next_token
from .utils import *

MAX_SLOTS = 5
_PARAM = re.compile(r"@param\s+(\w+)")


class Slot(namedtuple("Slot", ("name", "kind", "default"))):
    __slots__ = ()

    @property
    def optional(self):
        return self.default is not Unset

    @property
    def usage(self):
        if self.optional:
            return "%s(optional=%s)" % (self.kind.usage, self.default)
        return self.kind.usage


class DescriptorType(type):
    """
    Metaclass giving option and parser classes a stable __typename__, read-only
    properties for every name in __introspectable__ and readable
    __repr__/__rich_repr__ implementations.
    """
    __introspectable__ = ()
    __displayable__ = Unset

    def __new__(cls, name, bases, namespace, **options):
        self = super().__new__(
            cls,
            name,
            bases,
            namespace | {
                "__typename__": re.sub(r"(?<!^)(?=[A-Z])", r"-", name).lower(),
            } | {
                name: mirror(name) for name in namespace.get("__introspectable__", ())
            },
        )

        @rename("__repr__")
        def __repr__(self):
            return f"{type(self).__typename__}({', '.join(map(functools.partial(operator.mod, '%s=%r'), self.__rich_repr__()))})"
        self.__repr__ = __repr__

        @rename("__rich_repr__")
        def __rich_repr__(self):
            for name in coalesce(type(self).__displayable__, type(self).__introspectable__):
                yield name, getattr(self, name)
        self.__rich_repr__ = __rich_repr__

        return self


def _sanitize_names(cls, names, /):
    if isinstance(names, str):
        names = splitnames(names) if names else ("",)
    elif isinstance(names, Iterable):
        names = tuple(names)
    else:
        raise TypeError(f"{cls.__typename__} 'names' must be a string or an iterable of strings")

    if not names:
        raise ValueError(f"{cls.__typename__} must have at least one name")

    for name in names:
        if not isinstance(name, str):
            raise TypeError(f"{cls.__typename__} 'names' must be a string or an iterable of strings")
        if name and (set(name) & set(DELIMITERS) or name != name.strip() or " " in name):
            raise ValueError(f"{cls.__typename__} name {name!r} cannot contain quotes or whitespace")
    if "" in names and len(names) > 1:
        raise ValueError(f"{cls.__typename__} the default option cannot have aliases")
    if len(set(names)) != len(names):
        raise ValueError(f"{cls.__typename__} 'names' cannot contain duplicates")
    return names


def _sanitize_descr(cls, descr, /):
    if not isinstance(descr, str | Text | Unset):
        raise TypeError(f"{cls.__typename__} 'descr' must be a string")
    elif isinstance(descr, str) and not (descr := descr.strip()):
        raise ValueError(f"{cls.__typename__} 'descr' cannot be empty")
    return coalesce(descr)


def _sanitize_slots(cls, callback, context, /):
    if not callable(callback):
        raise TypeError(f"{cls.__typename__} 'callback' must be callable")
    try:
        signature = inspect.signature(callback, eval_str=True)
    except ValueError:
        raise TypeError(f"{cls.__typename__} 'callback' signature cannot be inspected") from None

    parameters = list(signature.parameters.values())
    positional = (inspect.Parameter.POSITIONAL_ONLY, inspect.Parameter.POSITIONAL_OR_KEYWORD)

    if context is not Unset:
        if not parameters or parameters[0].kind not in positional:
            raise TypeError(f"{cls.__typename__} 'callback' must take the context as its first parameter")
        parameters.pop(0)

    slots = []
    for parameter in parameters:
        if parameter.kind is inspect.Parameter.KEYWORD_ONLY and parameter.default is parameter.empty:
            raise TypeError(f"{cls.__typename__} parameter {parameter.name!r} cannot be keyword-only")
        if parameter.kind not in positional:
            continue
        kind = Kind.STRING if parameter.annotation is parameter.empty else resolve(parameter.annotation)
        default = Unset if parameter.default is parameter.empty else parameter.default
        slots.append(Slot(parameter.name, kind, default))

    if len(slots) > MAX_SLOTS:
        raise TypeError(f"{cls.__typename__} 'callback' takes at most {MAX_SLOTS} parameters, got {len(slots)}")
    return tuple(slots)


def _sanitize_params(cls, descr, slots, /):
    # a description documenting parameters must document each of them
    text = descr.plain if isinstance(descr, Text) else descr or ""
    if (described := set(_PARAM.findall(text))) and len(described) != len(slots):
        raise ValueError(
            f"{cls.__typename__} 'descr' documents {len(described)} of {len(slots)} parameters"
        )


class Option(metaclass=DescriptorType):
    """
    A named handler with a fixed list of typed parameters.

    Parameters
    - callback: function called with the extracted values.
    - names: "name" or "name,alias" (comma/colon/semicolon/space separated) or
      an iterable of names. The empty string makes the default option.
    - descr: short human description used by help.
    - context: object passed to callback as its first argument.
    - id: registration index assigned by the parser.
    """
    __introspectable__ = (
        "names",
        "descr",
        "slots",
        "required",
        "unwanted",
        "standalone",
        "id",
    )
    __displayable__ = (
        "names",
        "usage",
        "descr",
        "required",
        "unwanted",
        "standalone",
    )

    def __init__(self, callback, names, descr=Unset, /, *, context=Unset, id=None):
        cls = type(self)
        self._names = _sanitize_names(cls, names)
        self._descr = _sanitize_descr(cls, descr)
        self._slots = _sanitize_slots(cls, callback, context)
        _sanitize_params(cls, self._descr, self._slots)
        self._callback = callback
        self._context = context
        self._required = set()
        self._unwanted = set()
        self._standalone = False
        self._id = id

    @property
    def context(self):
        return self._context

    @property
    def name(self):
        return self._names[0]

    @property
    def usage(self):
        return " ".join(slot.usage for slot in self._slots)

    @property
    def default(self):
        """whether this is the default (nameless) option."""
        return self._names == ("",)

    def extract(self, stream, /, reserved=()):
        """
        Extract every slot from stream, left to right.

        Optional slots take their default, with the cursor rewound, when the
        next token is missing, is one of the reserved words (usually the
        registered option names) or does not convert.

        Raises
        - ExtractionError: a required slot could not be extracted.
        """
        values = []
        for slot in self._slots:
            if not slot.optional:
                values.append(extract(slot.kind, stream))
                continue

            position = stream.tell()
            token = get_next_token(stream)
            stream.seek(position)
            if not token or token in reserved:
                values.append(slot.default)
                continue
            try:
                values.append(extract(slot.kind, stream))
            except ExtractionError:
                stream.seek(position)
                values.append(slot.default)
        return tuple(values)

    def execute(self, values, /):
        if len(values) != len(self._slots):
            raise TypeError(f"{type(self).__typename__} {self.name!r} takes {len(self._slots)} values, got {len(values)}")
        if self._context is Unset:
            return self._callback(*values)
        return self._callback(self._context, *values)

    def require(self, *names):
        self._dependencies(self._required, self._unwanted, names, "require")

    def exclude(self, *names):
        self._dependencies(self._unwanted, self._required, names, "exclude")

    def isolate(self):
        self._standalone = True

    def _dependencies(self, target, opposite, names, verb, /):
        for name in names:
            if not isinstance(name, str) or not name:
                raise TypeError(f"{type(self).__typename__} dependency names must be non-empty strings")
            if name in self._names:
                raise SelfDependencyError(f"option {self.name!r} cannot {verb} itself")
            if name in opposite:
                raise ValueError(f"option {self.name!r} cannot both require and exclude {name!r}")
        target.update(names)

    def __call__(self, *args, **kwargs):
        return self._callback(*args, **kwargs)


__all__ = (
    "DescriptorType",
    "Slot",
    "Option",
)
