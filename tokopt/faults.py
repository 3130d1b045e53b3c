"""
Tokopt faults (errors) and rendering.

Scope
- FaultCode: canonical, stable numeric identifiers for every user-facing issue.
  Codes are grouped by domain to keep copy consistent and logs searchable.
- OptionException: base type of run-time faults. Carries message + options and
  knows how to render itself in a friendly, lowercased, actionable way.
- OptionExit: groups the dependency faults of a single run into one report.
- RegistrationError: setup-time faults, raised immediately to the caller.
- ExtractionError: raised by the value extractors; the parser turns it into a
  MalformedParameterError that also shows the option usage.
- trigger(): central entry point to surface a run-time fault.

UX goals
- Soft but technical language: short titles, one-sentence bodies, a single clear hint.
- Lowercased tone with readable styling (configurable via __styles__ in __main__).

Integration
- The parser builds faults while parsing/validating and calls trigger(fault, **ctx).
- In shell mode faults are rendered via rich and run() reports failure;
  otherwise they are raised to the caller.
"""
from collections import defaultdict
from enum import IntEnum
from types import MappingProxyType

from rich.console import Console, Group
from rich.panel import Panel
from rich.text import Text

from .utils import Unset

console = Console(stderr=True)


class FaultCode(IntEnum):
    """
    canonical fault codes used across tokopt (stable identifiers).

    grouping (by high-level domain)
    - parsing (111xx)
      • UNKNOWN_OPTION, MISSING_OPTIONS, MALFORMED_PARAMETER
    - dependencies (112xx)
      • MISSING_REQUIREMENTS, UNWANTED_OPTIONS, STANDALONE_OPTION,
        REQUIRED_OPTIONS, REQUIRED_ANY_OPTION
    - delegated errors (113xx)
      • DELEGATED_ERROR
    - registration (131xx)
      • DUPLICATE_OPTION, DEFAULT_OPTION, UNKNOWN_DEPENDENCY,
        SELF_DEPENDENCY, RESERVED_OPTION

    normalize() lets the host remap codes to its own labels.
    """
    # --- parsing errors (111xx) ---
    UNKNOWN_OPTION              = 11101
    MISSING_OPTIONS             = 11102
    MALFORMED_PARAMETER         = 11111

    # --- dependency errors (112xx) ---
    MISSING_REQUIREMENTS        = 11201
    UNWANTED_OPTIONS            = 11202
    STANDALONE_OPTION           = 11203
    REQUIRED_OPTIONS            = 11204
    REQUIRED_ANY_OPTION         = 11205

    # --- delegated errors (113xx) ---
    DELEGATED_ERROR             = 11301

    # --- registration errors (131xx) ---
    DUPLICATE_OPTION            = 13101
    DEFAULT_OPTION              = 13102
    UNKNOWN_DEPENDENCY          = 13103
    SELF_DEPENDENCY             = 13104
    RESERVED_OPTION             = 13105

    def normalize(self):
        """
        return a host-normalized string for this code.

        the host application can provide a __codes__ mapping in __main__
        to override numeric ids with friendlier labels. when no mapping
        is present, the numeric value is returned as a string.
        """
        return str(getattr(__import__("__main__"), "__codes__", {}).get(self, self.value))


def _palette(defaults, /):
    return defaultdict(str, defaults | getattr(__import__("__main__"), "__styles__", {}))


def _prog(options, /):
    tool = options.get("tool")
    return getattr(__import__("__main__"), "__prog__", tool.name if tool is not None else "tokopt")


class OptionException(Exception):
    __code__ = FaultCode.DELEGATED_ERROR
    __title__ = "error"

    def __init__(self, message=Unset, /, **options):
        assert isinstance(message, str | Unset)
        super().__init__(message or "")
        self.message = message
        self.options = MappingProxyType(options)

    @property
    def code(self):
        return self.options.get("code", type(self).__code__)

    @property
    def title(self):
        return self.options.get("title", type(self).__title__)

    @property
    def hint(self):
        return self.options.get("hint", Unset)

    def __rich__(self):
        colorful = self.options.get("colorful", False)
        fancy = self.options.get("fancy", False)
        styles = _palette({
            # header parts
            "prog-name": "bold #E6E6F0",  # near-white program name
            "code": "bold #00E5FF",  # neon cyan fault code
            "error-title": "bold #FF4DA6",  # friendly pinky title

            # body
            "error-message": "#C8C8D0",  # soft light gray message
            "hint-arrow": "#9CE19C dim",  # gentle green arrow
            "hint": "italic #9CE19C",  # gentle green hint text
        })

        def text(fragment, style=""):
            if not fragment:
                return Text("")
            if not colorful:
                return Text(str(fragment))
            if isinstance(fragment, Text):
                return fragment
            return Text(str(fragment), styles[style])

        header = Text.assemble(
            "[ ",
            text(_prog(self.options), "prog-name"),
            " — ",
            text(self.code.normalize(), "code"),
            " | ",
            text(self.title.title(), "error-title"),
            " ]"
        )
        renders = [text(self.message, "error-message")]
        if self.hint:
            renders.append(Text.assemble(text(" → ", "hint-arrow"), text(self.hint, "hint")))

        if fancy:
            return Panel(Group(*renders), title=header, title_align="left")

        return Group(header, *renders)

    def __trigger__(self) -> None:
        if not self.options.get("shell", False):
            raise self from None
        self.options.get("console", console).print(self)

    def __replace__(self, *unused, **overrides):
        assert not unused, "unused arguments are not allowed"
        return type(self)(self.message, **{**self.options, **overrides})


class UnknownOptionError(OptionException):
    __code__ = FaultCode.UNKNOWN_OPTION
    __title__ = "unknown option"
class MissingOptionsError(OptionException):
    __code__ = FaultCode.MISSING_OPTIONS
    __title__ = "missing options"
class MalformedParameterError(OptionException):
    __code__ = FaultCode.MALFORMED_PARAMETER
    __title__ = "malformed parameter"
class MissingRequirementsError(OptionException):
    __code__ = FaultCode.MISSING_REQUIREMENTS
    __title__ = "missing requirements"
class UnwantedOptionsError(OptionException):
    __code__ = FaultCode.UNWANTED_OPTIONS
    __title__ = "unwanted options"
class StandaloneOptionError(OptionException):
    __code__ = FaultCode.STANDALONE_OPTION
    __title__ = "standalone option"
class RequiredOptionsError(OptionException):
    __code__ = FaultCode.REQUIRED_OPTIONS
    __title__ = "required options"
class RequiredAnyOptionError(OptionException):
    __code__ = FaultCode.REQUIRED_ANY_OPTION
    __title__ = "required options"
class DelegatedOptionError(OptionException):
    __code__ = FaultCode.DELEGATED_ERROR
    __title__ = "delegated error"


class OptionExit(ExceptionGroup[OptionException]):
    def __new__(cls, exceptions, **options):
        return super().__new__(cls, "bad exit", exceptions)

    def __init__(self, exceptions, **options):
        super().__init__("bad exit", tuple(exceptions))
        self.options = MappingProxyType(options)

    def __rich__(self):
        colorful = self.options.get("colorful", False)
        styles = _palette({
            "prog-name": "bold #E6E6F0",  # near-white program name
            "title": "bold #FF4DA6",  # friendly pinky group title (Bad Exit)
        })

        def text(fragment, style=""):
            if not fragment:
                return Text("")
            if not colorful:
                return Text(str(fragment))
            return Text(str(fragment), styles[style])

        header = Text.assemble("[ ", text(_prog(self.options), "prog-name"), " — ", text(self.message.title(), "title"), " ]")

        renders = []
        for exception in self.exceptions:
            renders.append(exception.__replace__(**self.options))

        if self.options.get("fancy", False):
            return Panel(Group(*renders), title=header, title_align="left")

        return Group(header, *renders)

    def __trigger__(self) -> None:
        if not self.options.get("shell", False):
            raise self from None
        self.options.get("console", console).print(self)

    def __replace__(self, *unused, **overrides):
        assert not unused, "positional arguments are not allowed"
        return type(self)(self.exceptions, **{**self.options, **overrides})


class RegistrationError(Exception):
    """
    raised at setup time (add_option, setup_* helpers) and never caught by
    the parser: a misconfigured parser is a programming error of the host.
    """
    __code__ = Unset

    @property
    def code(self):
        return type(self).__code__


class DuplicateOptionError(RegistrationError):
    __code__ = FaultCode.DUPLICATE_OPTION
class DefaultOptionError(RegistrationError):
    __code__ = FaultCode.DEFAULT_OPTION
class UnknownDependencyError(RegistrationError):
    __code__ = FaultCode.UNKNOWN_DEPENDENCY
class SelfDependencyError(RegistrationError):
    __code__ = FaultCode.SELF_DEPENDENCY
class ReservedOptionError(RegistrationError):
    __code__ = FaultCode.RESERVED_OPTION


class ExtractionError(ValueError):
    """
    a token could not be converted to the expected kind.

    attributes
    - usage: the usage label of the expected kind (e.g. "<int>").
    - text: the literal token that failed ("" when the stream was exhausted).
    """

    def __init__(self, usage, text, /):
        super().__init__('%s, got "%s".' % (usage, text))
        self.usage = usage
        self.text = text


def trigger(fault, /, **options):
    """
    surface a fault with the given runtime options.

    contract
    - fault must provide __trigger__ and __replace__ methods (see base classes).
    - options are merged into the fault via __replace__(**options) before triggering.
    - in shell mode, rendering happens via rich console; otherwise, the fault is raised.

    typical options
    - tool, shell, fancy, colorful, console, title, code, hint.
    """
    if (
        not hasattr(fault, "__trigger__") or
        not callable(fault.__trigger__) or
        not hasattr(fault, "__replace__") or
        not callable(fault.__replace__)
    ):
        raise TypeError("trigger() argument must have a __trigger__ and __replace__ methods")
    fault.__replace__(**options).__trigger__()


__all__ = (
    "FaultCode",
    "OptionException",
    "UnknownOptionError",
    "MissingOptionsError",
    "MalformedParameterError",
    "MissingRequirementsError",
    "UnwantedOptionsError",
    "StandaloneOptionError",
    "RequiredOptionsError",
    "RequiredAnyOptionError",
    "DelegatedOptionError",
    "OptionExit",
    "RegistrationError",
    "DuplicateOptionError",
    "DefaultOptionError",
    "UnknownDependencyError",
    "SelfDependencyError",
    "ReservedOptionError",
    "ExtractionError",
    "trigger",
)
