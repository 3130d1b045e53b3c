"""
Tokopt parser: option registry and dispatcher.

Overview
- Parser owns every Option registered on it, keyed by name (and aliases).
- run() goes through two phases:
  1. parse: tokens are read one by one; a help keyword shows help and ends
     the run; a known option name extracts that option's parameters and
     queues it; anything else is an unknown option (or, when a handler for
     other arguments is installed, is collected for that handler).
  2. validate-then-execute: the dependency constraints of the whole queue are
     checked (tokopt.dependencies); on success every queued callback runs in
     input order, then the handler for other arguments.
- Any fault empties the queue before anything executes. In shell mode faults
  are rendered on the console and run() returns False; otherwise they are
  raised to the caller.

Help layout
    <prog>, version: <version>

    <description>

    Use "?" or "help" to print more information.

    Available options:

      name  : description
        usage : <prog> name <int> <string>

Quick example
    >>> from tokopt import Parser, UInt
    >>> parser = Parser("tool", "does things", "1.0.0")
    >>> @parser.option("repeat", "repeat a word")
    ... def repeat(word: str, times: UInt = 1):
    ...     print(" ".join([word] * times))
    >>> parser.run(["repeat", "hey", "3"])
    hey hey hey
    True
"""
import difflib
import os
import shlex
import sys
from collections import defaultdict
from collections.abc import Iterable

from rich.console import Console, Group
from rich.panel import Panel
from rich.text import Text

from . import faults
from .dependencies import validate
from .faults import *
from .options import DescriptorType, Option
from .tokens import TokenStream, compose, get_next_token
from .utils import *

HELPERS = ("?", "help")


def _sanitize_text(cls, value, label, /):
    if not isinstance(value, str | Text | Unset):
        raise TypeError(f"{cls.__typename__} {label!r} must be a string")
    elif isinstance(value, str) and not (value := value.strip()):
        raise ValueError(f"{cls.__typename__} {label!r} cannot be empty")
    return value


class Parser(metaclass=DescriptorType):
    """
    Registry of options plus the run loop that parses, validates and
    dispatches them.

    Parameters
    - name: program name shown in help and faults (default: base name of sys.argv[0]).
    - descr: program description shown in help.
    - version: program version shown in help (default: "(not set)").
    - shell: render faults and report failure (True) or raise them (False).
    - fancy: wrap help and faults in panels.
    - colorful: enable the palette (overridable with __styles__ in __main__).
    - console: rich Console used for help and faults (default: stdout for
      help, stderr for faults).
    """
    __introspectable__ = (
        "name",
        "descr",
        "version",
        "shell",
        "fancy",
        "colorful",
        "options",
        "queue",
        "executed",
    )
    __displayable__ = (
        "name",
        "version",
        "descr",
        "options",
    )

    def __init__(
            self,
            name=Unset,
            descr=Unset,
            version=Unset,
            /,
            *,
            shell=True,
            fancy=False,
            colorful=False,
            console=Unset,
    ):
        cls = type(self)
        if not isinstance(name, str | Unset):
            raise TypeError(f"{cls.__typename__} 'name' must be a string")
        if not isinstance(console, Console | Unset):
            raise TypeError(f"{cls.__typename__} 'console' must be a rich console")
        for flag, value in (("shell", shell), ("fancy", fancy), ("colorful", colorful)):
            if not isinstance(value, bool):
                raise TypeError(f"{cls.__typename__} {flag!r} must be a boolean")

        self._name = coalesce(name, os.path.basename(sys.argv[0]))
        self._descr = coalesce(_sanitize_text(cls, descr, "descr"))
        self._version = coalesce(_sanitize_text(cls, version, "version"), "(not set)")
        self._shell = shell
        self._fancy = fancy
        self._colorful = colorful
        self._console = console

        self._options = {}
        self._registered = []
        self._every = []
        self._some = []
        self._others = Unset

        self._queue = []
        self._pending = []
        self._executed = []

    def set_description(self, descr, /):
        self._descr = coalesce(_sanitize_text(type(self), descr, "descr"))

    def set_version(self, version, /):
        self._version = coalesce(_sanitize_text(type(self), version, "version"), "(not set)")

    def add_option(self, callback, name, descr=Unset, /, *, context=Unset):
        """
        Register callback under name and return the new Option.

        name may list aliases ("a,optiona"); the empty string registers the
        default option, whose parameters are read without a leading name.

        Raises
        - TypeError/ValueError: bad callback, names or description.
        - ReservedOptionError: a name is a help keyword.
        - DuplicateOptionError: a name is already registered.
        - DefaultOptionError: default and named options would coexist.
        """
        option = Option(callback, name, descr, context=context, id=len(self._registered))

        for alias in option.names:
            if alias in HELPERS:
                raise ReservedOptionError('option "%s" is reserved for help' % alias)
            if alias in self._options:
                raise DuplicateOptionError('option "%s" already exists' % alias)
        if option.default and self._options:
            raise DefaultOptionError("the default option cannot be added next to named options")
        if not option.default and "" in self._options:
            raise DefaultOptionError('option "%s" cannot be added next to the default option' % option.name)

        for alias in option.names:
            self._options[alias] = option
        self._registered.append(option)
        return option

    def option(self, name, descr=Unset, /, *, context=Unset):
        """
        Decorator form of add_option().

        Example
            >>> @parser.option("hello,h", "says hello")
            ... def hello(times: int): ...
        """
        def wrapper(callback, /):
            return self.add_option(callback, name, descr, context=context)
        return rename(wrapper, "option")

    def add_handler_for_other_arguments(self, callback, /):
        """
        Collect every token that is not an option name (nor one of its
        parameters) instead of failing; callback receives them as a list
        after all option callbacks ran.
        """
        if not callable(callback):
            raise TypeError(f"{type(self).__typename__} other arguments handler must be callable")
        self._others = callback
        return callback

    def setup_required_options(self, name, names, /):
        """option name needs every option in names (e.g. "aa, bb") in the same run."""
        self._lookup(name).require(*self._resolve(names))

    def setup_not_wanted_options(self, name, names, /):
        """option name cannot be used with any option in names."""
        self._lookup(name).exclude(*self._resolve(names))

    def setup_option_as_standalone(self, name, /):
        """option name cannot be used with any other option."""
        self._lookup(name).isolate()

    def setup_options_require_all(self, names, /):
        """every option in names must be given."""
        for name in self._resolve(names):
            if name not in self._every:
                self._every.append(name)

    def setup_options_require_any_of(self, names, /):
        """at least one option in names must be given."""
        for name in self._resolve(names):
            if name not in self._some:
                self._some.append(name)

    def _lookup(self, name, /):
        if not isinstance(name, str):
            raise TypeError(f"{type(self).__typename__} option names must be strings")
        try:
            return self._options[name]
        except KeyError:
            raise UnknownDependencyError('option "%s" does not exist' % name) from None

    def _resolve(self, names, /):
        if isinstance(names, str):
            names = splitnames(names)
        elif not isinstance(names, Iterable):
            raise TypeError(f"{type(self).__typename__} option names must be a string or an iterable of strings")
        return [self._lookup(name).name for name in names]

    def run(self, args=Unset, /, *, argv=Unset):
        """
        Parse, validate and execute a command line.

        Parameters
        - args:
          • Unset: read tokens from sys.argv[1:].
          • str: shell-like string; will be split via shlex.split.
          • Iterable[str]: pre-tokenized arguments.
        - argv: full argument vector, program path first; the program name is
          taken from its base name. Cannot be combined with args.

        Returns
        - True when the queued options executed (or none were given and none
          were required), False otherwise (help shown, unknown option,
          malformed parameter, dependency violation, failing callback).
        """
        self._queue.clear()
        self._pending.clear()
        self._executed.clear()

        stream = TokenStream(compose(self._prompt(args, argv)))
        try:
            if (others := self._parseargs(stream)) is None:
                return False
            if violations := validate([option for option, _ in self._pending], self._every, self._some):
                raise OptionExit(violations)
            self._finalize(others)
        except (OptionException, OptionExit) as fault:
            self._queue.clear()
            self._pending.clear()
            self.trigger(fault)
            return False
        return True

    def _prompt(self, args, argv, /):
        if argv is not Unset:
            if args is not Unset:
                raise TypeError("run() takes either 'args' or 'argv', not both")
            if isinstance(argv, str) or not isinstance(argv, Iterable):
                raise TypeError("run() 'argv' must be an iterable of strings")
            if not (argv := list(argv)) or not isinstance(argv[0], str):
                raise ValueError("run() 'argv' must start with the program path")
            self._name = os.path.basename(argv[0].replace("\\", "/"))
            args = argv[1:]

        if args is Unset:
            tokens = sys.argv[1:]
        elif isinstance(args, str):
            tokens = shlex.split(args)
        elif isinstance(args, Iterable):
            tokens = list(args)
        else:
            raise TypeError("run() argument must be a string or an iterable of strings")

        for token in tokens:
            if not isinstance(token, str):
                raise TypeError("run() argument must be a string or an iterable of strings")
        return tokens

    def _parseargs(self, stream, /):
        """
        Parse phase. Returns the tokens left for the other arguments handler,
        or None when help was requested.
        """
        reserved = frozenset(self._options) | frozenset(HELPERS)
        others = []

        if (default := self._options.get("")) is not None:
            position = stream.tell()
            if get_next_token(stream) in HELPERS:
                self.display_help()
                return None
            stream.seek(position)
            self._extract(default, stream, reserved)

        while token := get_next_token(stream):
            if token in HELPERS:
                self._queue.clear()
                self._pending.clear()
                self.display_help()
                return None

            try:
                option = self._options[token]
            except KeyError:
                if self._others is not Unset:
                    others.append(token)
                    continue
                suggestions = difflib.get_close_matches(token, [name for name in self._options if name], 5)
                try:
                    hint = 'did you mean "%s"? you can also try "?" or "help" to see usage' % suggestions[0]
                except IndexError:
                    hint = 'try "?" or "help" to see usage'
                raise UnknownOptionError('"%s": no such option' % token, hint=hint) from None

            self._extract(option, stream, reserved)

        return others

    def _extract(self, option, stream, reserved, /):
        try:
            values = option.extract(stream, reserved=reserved)
        except ExtractionError as error:
            raise MalformedParameterError(
                "error when parsing parameters, expected: %s" % error,
                hint="usage: %s" % self._usage(option),
            ) from error
        self._queue.append(option.name)
        self._pending.append((option, values))

    def _finalize(self, others, /):
        for option, values in self._pending:
            try:
                option.execute(values)
            except Exception as exception:
                raise DelegatedOptionError(
                    'something occurred in option "%s": %s' % (option.name, exception),
                    hint="the option callback raised %s" % type(exception).__name__,
                ) from exception
            self._executed.append(option.id)

        if others:
            try:
                self._others(others)
            except Exception as exception:
                raise DelegatedOptionError(
                    "something occurred while handling other arguments: %s" % exception,
                    hint="the other arguments handler raised %s" % type(exception).__name__,
                ) from exception

    def trigger(self, fault, /):
        """surface a fault with this parser's runtime options."""
        trigger(
            fault,
            tool=self,
            shell=self._shell,
            fancy=self._fancy,
            colorful=self._colorful,
            console=coalesce(self._console, faults.console),
        )

    def _usage(self, option, /):
        return " ".join(part for part in (self._name, option.name, option.usage) if part)

    def display_help(self):
        """Render help to the console."""
        coalesce(self._console, Console()).print(self._helper())

    def _helper(self):
        """
        Build the help renderable.

        Palette keys
        - program-name, version, description-section, notice, group-label
        - option-name, argument-description, usage-label, metavar
        - panel-title

        Customization
        - Define a mapping named __styles__ in __main__ to override any palette entry.
        - When colorful is False, styling is suppressed.
        """
        styles = defaultdict(str, {
            "program-name": "bold #FF4D94",  # MAGENTA-PINK → brand pop
            "version": "bold #36C5F0",  # SKY-BLUE
            "description-section": "italic #A3A3A3",  # Neutral gray
            "notice": "#737373",  # Dim gray
            "group-label": "bold #FFFFFF",  # Pure white headers
            "option-name": "bold #00E6FF",  # CYAN for options
            "argument-description": "#9CA3AF",  # Muted gray
            "usage-label": "bold #22C55E",  # GREEN usage label
            "metavar": "bold #FFD600",  # AMBER for parameters
            "panel-title": "bold #FF4D94",
        } | getattr(__import__("__main__"), "__styles__", {}))

        def text(fragment, style=""):
            if not fragment:
                return Text("")
            if not self._colorful:
                return Text(str(fragment))
            if isinstance(fragment, Text):
                return fragment
            return Text(str(fragment), styles[style])

        prog = getattr(__import__("__main__"), "__prog__", self._name)
        renders = [Text.assemble("\n", text(prog, "program-name"), ", version: ", text(self._version, "version"), "\n")]
        if self._descr:
            renders.append(text(self._descr, "description-section"))
        renders.append(Text.assemble("\n", text('Use "?" or "help" to print more information.', "notice"), "\n"))
        renders.append(Text.assemble(text("Available options:", "group-label"), "\n"))

        labels = {option: ", ".join(option.names) if not option.default else "(default)" for option in self._registered}
        width = max(map(len, labels.values()), default=0) + 1

        for option in sorted(self._registered, key=labels.get):
            label = labels[option]
            section = Text("  ")
            section.append(text(label, "option-name")).append(" " * (width - len(label))).append(": ")
            section.append(text(option.descr, "argument-description")).append("\n")
            section.append(" " * max(width - 4, 0)).append(text("usage", "usage-label")).append(" : ")
            section.append(text(" ".join(part for part in (prog, option.name) if part)))
            if option.usage:
                section.append(" ").append(text(option.usage, "metavar"))
            renders.append(section.append("\n"))

        if self._fancy:
            return Panel(Group(*renders), title=text(prog, "panel-title"), title_align="left")
        return Group(*renders)


__all__ = (
    "HELPERS",
    "Parser",
)
