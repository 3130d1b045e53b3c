"""
Tokopt value extractors.

Every option parameter has a Kind. The kind is resolved once, when the option
is registered, from the callback's annotation; at parse time extract(kind,
stream) pulls exactly one token and converts it, or raises ExtractionError
carrying the kind's usage label and the literal text that failed.

Kinds and their rules
- integers (INT, LONG, SHORT and their unsigned variants): optional leading
  "-" (rejected for unsigned kinds); decimal first, then hexadecimal when the
  token starts with a digit but is not plain decimal ("3afD", "0x1aB4");
  values outside the C range of the kind are rejected.
- characters (CHAR, SCHAR, UCHAR): the token must be exactly one character;
  SCHAR/UCHAR also require a single-byte code point.
- reals (FLOAT, DOUBLE, LDOUBLE): optional leading "-" and a decimal literal;
  the unsigned variants (UFLOAT, UDOUBLE) reject a leading "-"; literals
  that do not round to a finite value of the C type are rejected.
- STRING: the token as-is; it must not be empty.

Annotations
    >>> from tokopt.extractors import UInt, Char
    >>> def seek(offset: UInt, whence: Char): ...
    >>> def greet(name: str, times: int = 1): ...

Bare builtins map to INT (int), DOUBLE (float) and STRING (str).
"""
import enum
import math
import re
import struct
from typing import Annotated, get_origin

from .faults import ExtractionError
from .tokens import get_next_token


class Kind(enum.Enum):
    """
    Scalar kinds an option parameter can be extracted as.

    The value of each member is its usage label, shown in error messages and
    in help output.
    """
    INT = "<int>"
    UINT = "<unsigned int>"
    LONG = "<long>"
    ULONG = "<unsigned long>"
    SHORT = "<short>"
    USHORT = "<unsigned short>"
    CHAR = "<char>"
    SCHAR = "<signed char>"
    UCHAR = "<unsigned char>"
    FLOAT = "<float>"
    DOUBLE = "<double>"
    LDOUBLE = "<long double>"
    UFLOAT = "<unsigned float>"
    UDOUBLE = "<unsigned double>"
    STRING = "<string>"

    @property
    def usage(self):
        return self.value

    def __repr__(self):
        return f"Kind.{self.name}"


# kind -> (bits, signed)
_INTEGERS = {
    Kind.INT: (32, True),
    Kind.UINT: (32, False),
    Kind.LONG: (64, True),
    Kind.ULONG: (64, False),
    Kind.SHORT: (16, True),
    Kind.USHORT: (16, False),
}

# kind -> (struct format of the C type, signed)
_REALS = {
    Kind.FLOAT: ("f", True),
    Kind.DOUBLE: ("d", True),
    Kind.LDOUBLE: ("d", True),
    Kind.UFLOAT: ("f", False),
    Kind.UDOUBLE: ("d", False),
}

# kind -> highest code point (None: any)
_CHARACTERS = {
    Kind.CHAR: None,
    Kind.SCHAR: 0xFF,
    Kind.UCHAR: 0xFF,
}

_DECIMAL = re.compile(r"[0-9]+")
_HEXADECIMAL = re.compile(r"(?:0[xX])?[0-9a-fA-F]+")
_REAL = re.compile(r"(?:[0-9]+\.?[0-9]*|\.[0-9]+)(?:[eE][-+]?[0-9]+)?")


def _integer(kind, token, /):
    bits, signed = _INTEGERS[kind]
    digits = token
    negative = digits.startswith("-")
    if negative:
        if not signed:
            raise ExtractionError(kind.usage, token)
        digits = digits[1:]

    if _DECIMAL.fullmatch(digits):
        value = int(digits, 10)
    elif _DECIMAL.match(digits) and _HEXADECIMAL.fullmatch(digits):
        # decimal stopped early, same token read again as hexadecimal
        value = int(digits, 16)
    else:
        raise ExtractionError(kind.usage, token)

    value = -value if negative else value
    if signed:
        lower, upper = -(1 << (bits - 1)), (1 << (bits - 1)) - 1
    else:
        lower, upper = 0, (1 << bits) - 1
    if not lower <= value <= upper:
        raise ExtractionError(kind.usage, token)
    return value


def _real(kind, token, /):
    code, signed = _REALS[kind]
    digits = token
    negative = digits.startswith("-")
    if negative:
        if not signed:
            raise ExtractionError(kind.usage, token)
        digits = digits[1:]

    if not _REAL.fullmatch(digits):
        raise ExtractionError(kind.usage, token)

    if math.isinf(value := float(digits)):
        raise ExtractionError(kind.usage, token)
    try:
        # overflows only when the literal does not round to a finite value
        struct.pack(code, value)
    except OverflowError:
        raise ExtractionError(kind.usage, token) from None
    return -value if negative else value


def _character(kind, token, /):
    if len(token) != 1:
        raise ExtractionError(kind.usage, token)
    if (limit := _CHARACTERS[kind]) is not None and ord(token) > limit:
        raise ExtractionError(kind.usage, token)
    return token


def _string(kind, token, /):
    if not token:
        raise ExtractionError(kind.usage, token)
    return token


def extract(kind, stream, /):
    """
    Consume one token from stream and convert it according to kind.

    Raises
    - TypeError: kind is not a Kind.
    - ExtractionError: the token is missing or does not convert.
    """
    if not isinstance(kind, Kind):
        raise TypeError("extract() first argument must be a kind")

    token = get_next_token(stream)
    if kind in _INTEGERS:
        return _integer(kind, token)
    if kind in _REALS:
        return _real(kind, token)
    if kind in _CHARACTERS:
        return _character(kind, token)
    return _string(kind, token)


Int = Annotated[int, Kind.INT]
UInt = Annotated[int, Kind.UINT]
Long = Annotated[int, Kind.LONG]
ULong = Annotated[int, Kind.ULONG]
Short = Annotated[int, Kind.SHORT]
UShort = Annotated[int, Kind.USHORT]
Char = Annotated[str, Kind.CHAR]
SChar = Annotated[str, Kind.SCHAR]
UChar = Annotated[str, Kind.UCHAR]
Float = Annotated[float, Kind.FLOAT]
Double = Annotated[float, Kind.DOUBLE]
LongDouble = Annotated[float, Kind.LDOUBLE]
UFloat = Annotated[float, Kind.UFLOAT]
UDouble = Annotated[float, Kind.UDOUBLE]
String = Annotated[str, Kind.STRING]

_BUILTINS = {
    int: Kind.INT,
    float: Kind.DOUBLE,
    str: Kind.STRING,
}


def resolve(annotation, /):
    """
    Map a parameter annotation to its Kind.

    Accepted
    - a Kind member;
    - typing.Annotated[..., Kind.X] (e.g. the aliases of this module);
    - the builtins int, float and str.

    Raises
    - TypeError: the annotation cannot be extracted from a token.
    """
    if isinstance(annotation, Kind):
        return annotation
    if get_origin(annotation) is Annotated:
        for metadata in annotation.__metadata__:
            if isinstance(metadata, Kind):
                return metadata
    try:
        return _BUILTINS[annotation]
    except (KeyError, TypeError):
        raise TypeError(f"cannot extract parameters of type {annotation!r}") from None


__all__ = (
    "Kind",
    "extract",
    "resolve",
    "Int",
    "UInt",
    "Long",
    "ULong",
    "Short",
    "UShort",
    "Char",
    "SChar",
    "UChar",
    "Float",
    "Double",
    "LongDouble",
    "UFloat",
    "UDouble",
    "String",
)
