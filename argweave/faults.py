"""
Argweave faults (errors and warnings) and rendering.

Scope
- FaultCode: stable numeric identifiers for every user-facing parse issue.
- ParserException / ParserWarning: base types that carry a message plus options
  and know how to render and surface themselves.
- ConfigurationError / IndexOutOfRangeError: programmer errors raised right away
  by the builder and query surfaces (never rendered, never deferred).
- trigger(): central entry point to surface a fault with runtime options.
- getdoc(): optional description lookup for a code from the host application.

UX goals
- Position-first messages: parse faults name the ordinal position of the token
  that caused them ("unknown argument '--bogus' at second position").
- Short title, one-sentence body, a single clear hint.

Integration
- The parser raises a fault as soon as the offending token is processed (or as
  soon as validation runs), then hands it to Parser.trigger(), which merges the
  parser options in and calls trigger().
- In shell mode the fault is printed through rich; otherwise it is raised.
"""
import inspect
import warnings
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
    canonical fault codes used by the parser (stable identifiers).

    grouping
    - tokens (211xx)
      • UNKNOWN_ARGUMENT, UNKNOWN_SHORT_ARGUMENT
    - values (212xx)
      • MALFORMED_INTEGER
    - validation (213xx)
      • INVALID_ARGUMENT, NOT_ENOUGH_VALUES, POSITIONAL_MISMATCH
    - warnings (221xx)
      • EMPTY_INLINE_VALUE

    normalize() lets the host remap codes to its own labels.
    """
    # --- token errors (211xx) ---
    UNKNOWN_ARGUMENT            = 21101
    UNKNOWN_SHORT_ARGUMENT      = 21102

    # --- value errors (212xx) ---
    MALFORMED_INTEGER           = 21201

    # --- validation errors (213xx) ---
    INVALID_ARGUMENT            = 21301
    NOT_ENOUGH_VALUES           = 21302
    POSITIONAL_MISMATCH         = 21303

    # --- warnings (221xx) ---
    EMPTY_INLINE_VALUE          = 22101

    def normalize(self):
        """
        return a host-normalized string for this code.

        the host application can provide a __codes__ mapping in __main__
        to override numeric ids with friendlier labels. when no mapping
        is present, the numeric value is returned as a string.
        """
        return str(getattr(__import__("__main__"), "__codes__", {}).get(self, self.value))


def _program(options):
    """
    Resolve the program name shown in fault headers.

    __prog__ in __main__ wins, then the name of the parser that raised the
    fault, then a generic label.
    """
    main = __import__("__main__")
    parser = options.get("parser")
    return getattr(main, "__prog__", getattr(parser, "name", None) or "argweave")


def _render(fault, palette):
    """
    Build the rich renderable shared by exceptions and warnings.

    Layout
    - header: [ prog — code | Title ]
    - body:   message
    - hint:    → hint
    Wrapped in a Panel when the 'fancy' option is set.
    """
    styles = defaultdict(str, palette | getattr(__import__("__main__"), "__styles__", {}))
    colorful = fault.options.get("colorful", False)
    fancy = fault.options.get("fancy", False)

    def text(fragment, style=""):
        if not fragment:
            return Text("")
        if not colorful:
            return Text(str(fragment))
        if isinstance(fragment, Text):
            return fragment
        return Text(str(fragment), styles[style])

    code = fault.options.get("code")
    title = fault.options.get("title") or type(fault).__name__

    header = Text.assemble(
        "[ ",
        text(_program(fault.options), "prog-name"),
        " — ",
        text(code.normalize() if isinstance(code, FaultCode) else "?", "code"),
        " | ",
        text(title.title(), "title"),
        " ]"
    )
    message = text(fault.message, "message")
    parts = [message]
    if hint := fault.options.get("hint"):
        parts.append(Text.assemble(text(" → ", "hint-arrow"), text(hint, "hint")))

    if fancy:
        return Panel(Group(*parts), title=header, title_align="left")

    return Group(header, *parts)


class ParserException(Exception):
    """
    Base class for parse-time failures.

    Carries a message plus free-form options (title, code, hint, input, index,
    argument, parser, shell, fancy, colorful). Faults are immutable; use
    __replace__ to derive a copy with extra options.
    """

    def __init__(self, message=Unset, /, **options):
        assert isinstance(message, str | Unset)
        super().__init__(message)
        self.message = message
        self.options = MappingProxyType(options)

    def __str__(self):
        return str(self.message) if self.message is not Unset else ""

    def __rich__(self):
        return _render(self, {
            # header parts
            "prog-name": "bold #E6E6F0",  # near-white program name
            "code": "bold #00E5FF",  # neon cyan fault code
            "title": "bold #FF4DA6",  # pinky title

            # body
            "message": "#C8C8D0",  # soft light gray message
            "hint-arrow": "#9CE19C dim",  # green arrow
            "hint": "italic #9CE19C",  # green hint text
        })

    def __trigger__(self) -> None:
        if not self.options.get("shell", False):
            raise self from None
        console.print(self)

    def __replace__(self, *unused, **overrides):
        assert not unused, "unused arguments are not allowed"
        return type(self)(self.message, **{**self.options, **overrides})


class UnknownArgumentError(ParserException): ...
class ArgumentInvalidError(ParserException): ...
class PositionalMismatchError(ParserException): ...
class ValueParseError(ParserException, ValueError): ...


class ParserWarning(Warning):
    """
    Base class for non-fatal parse notices.

    Rendered like ParserException; in shell mode it is printed, otherwise it
    goes through warnings.warn so callers can filter or record it.
    """

    def __init__(self, message=Unset, /, **options):
        assert isinstance(message, str | Unset)
        super().__init__(message)
        self.message = message
        self.options = MappingProxyType(options)

    def __str__(self):
        return str(self.message) if self.message is not Unset else ""

    def __rich__(self):
        return _render(self, {
            # header parts
            "prog-name": "bold #E6E6F0",  # near-white program name
            "code": "bold #FFB400",  # amber fault code for warnings
            "title": "bold #FFC2E0",  # softer pinky title

            # body
            "message": "#D6D6DE",  # lighter gray body
            "hint-arrow": "#B8EFAF dim",  # softer green arrow
            "hint": "italic #B8EFAF",  # softer green hint text
        })

    def __trigger__(self) -> None:
        if not self.options.get("shell", False):
            return warnings.warn(self, stacklevel=len(inspect.stack()))
        console.print(self)

    def __replace__(self, *unused, **overrides):
        assert not unused, "positional arguments are not allowed"
        return type(self)(self.message, **{**self.options, **overrides})


class EmptyInlineValueWarning(ParserWarning): ...


class ConfigurationError(ValueError):
    """
    Builder misuse detected at registration time (wrong default shape, wrong
    storage shape, duplicate names, modifiers after parsing started, ...).
    """


class IndexOutOfRangeError(IndexError):
    """
    A value query asked for an index that neither the parsed values nor the
    default can answer.
    """


def trigger(fault, /, **options):
    """
    surface a fault with the given runtime options.

    contract
    - fault must provide __trigger__ and __replace__ methods (see base classes).
    - options, when given, are merged into the fault via __replace__(**options)
      before triggering; without options the fault itself is surfaced.
    - in shell mode the fault is printed through rich; otherwise exceptions are
      raised and warnings are emitted through the warnings module.
    """
    if (
        not hasattr(fault, "__trigger__") or
        not callable(fault.__trigger__) or
        not hasattr(fault, "__replace__") or
        not callable(fault.__replace__)
    ):
        raise TypeError("trigger() argument must have a __trigger__ and __replace__ methods")
    if options:
        fault = fault.__replace__(**options)
    fault.__trigger__()


def getdoc(code, /):
    """
    optional documentation fetch for a fault code.

    the host application may expose a __docs__ mapping in __main__ where keys
    are FaultCode members and values are short documentation strings. returns
    None when no entry exists.
    """
    if not isinstance(code, FaultCode):
        raise TypeError("getdoc() argument must be a fault-code")
    try:
        return getattr(__import__("__main__"), "__docs__", {})[code]
    except KeyError:
        return None


__all__ = (
    "ParserException",
    "UnknownArgumentError",
    "ArgumentInvalidError",
    "PositionalMismatchError",
    "ValueParseError",
    "ParserWarning",
    "EmptyInlineValueWarning",
    "ConfigurationError",
    "IndexOutOfRangeError",
    "FaultCode",
    "trigger",
    "getdoc",
)
