"""
Tokopt tokenizer.

The parser sees the command line as one string in which every process
argument is wrapped in double quotes: ["a_b", "x y"] becomes '"a_b""x y"'.
Tokens are pulled one at a time with get_next_token(), which skips leading
delimiters and stops at (and consumes) the next one. Spaces inside an
argument are therefore kept, and empty arguments disappear.

Public API
- TokenStream: a rewindable cursor over the composed command line.
- get_next_token(stream, delimiters='"'): pull the next token.
- compose(arguments): build the command-line string from process arguments.
"""
from collections.abc import Iterable

DELIMITERS = '"'


class TokenStream:
    """
    Ordered, mutable cursor over a command-line string.

    Reading is destructive: get_next_token() advances position. A consumed
    token can only be read again after an explicit seek() to a position
    previously obtained from tell().
    """

    def __init__(self, source="", /):
        if not isinstance(source, str):
            raise TypeError("token-stream 'source' must be a string")
        self._source = source
        self._position = 0

    @property
    def source(self):
        return self._source

    @property
    def position(self):
        return self._position

    @property
    def exhausted(self):
        return self._position >= len(self._source)

    def tell(self):
        return self._position

    def seek(self, position, /):
        if not isinstance(position, int):
            raise TypeError("token-stream position must be an integer")
        if not 0 <= position <= len(self._source):
            raise ValueError("token-stream position %d is out of range" % position)
        self._position = position

    def __repr__(self):
        return f"token-stream(source={self._source!r}, position={self._position!r})"


def get_next_token(stream, delimiters=DELIMITERS, /):
    """
    Return the next token of stream and advance past it.

    Rules
    - a leading run of delimiter characters is skipped (adjacent delimiters
      never produce empty tokens);
    - the token ends at the next delimiter, which is consumed as well;
    - without a trailing delimiter the rest of the stream is the token;
    - at the end of the stream the empty string is returned.
    """
    if not isinstance(stream, TokenStream):
        raise TypeError("get_next_token() first argument must be a token-stream")
    if not isinstance(delimiters, str) or not delimiters:
        raise TypeError("get_next_token() delimiters must be a non-empty string")

    source, start = stream.source, stream.position
    while start < len(source) and source[start] in delimiters:
        start += 1

    end = start
    while end < len(source) and source[end] not in delimiters:
        end += 1

    stream.seek(min(end + 1, len(source)))
    return source[start:end]


def compose(arguments, /):
    """
    Join process arguments into a command-line string, each one surrounded
    by double quotes; trailing whitespace of the result is dropped.

    Example
    - compose(["a_b", "x y"]) -> '"a_b""x y"'
    """
    if isinstance(arguments, str) or not isinstance(arguments, Iterable):
        raise TypeError("compose() argument must be an iterable of strings")
    line = ""
    for argument in arguments:
        if not isinstance(argument, str):
            raise TypeError("compose() argument must be an iterable of strings")
        line += DELIMITERS[0] + argument + DELIMITERS[0]
    return line.rstrip(" \t\n\r")


__all__ = (
    "TokenStream",
    "get_next_token",
    "compose",
)
