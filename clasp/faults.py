"""
Clasp faults (errors) and rendering.

Scope
- FaultCode: canonical, stable numeric identifiers for all user-facing issues.
  Codes are grouped by domain to keep copy consistent and make logs/searches predictable.
- CommandException: base type that carries message + options and knows how to
  render itself in a friendly, lowercased, and actionable way.
- CoercionError: plain ValueError raised by the type-coercion library; the parser
  wraps it into an InvalidValueError that knows which argument was being parsed.
- trigger(): central entry point to surface any fault (respecting shell/fancy/colorful).
- getdoc(): optional description lookup for a code from the host application.

UX goals
- Soft but technical language: short titles, one-sentence bodies, a single clear hint.
- Lowercased tone with readable styling (configurable via __styles__ in __main__).

Integration
- The parser and tokenizer raise faults directly; every fault carries enough context
  in its options (chain, input, argument, command) for the caller to report it.
- The interactive shell catches faults and calls trigger(fault, shell=True, ...),
  which renders them via rich instead of raising, so the session keeps going.
"""
import copy
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
    canonical fault codes used across the toolkit (stable identifiers).

    grouping (by high-level domain)
    - routing (1110x)
      • UNKNOWN_COMMAND
    - named arguments (1111x/1112x)
      • MISSING_ARGUMENT_NAME, UNKNOWN_ARGUMENT, MISSING_VALUE,
        REQUIRED_ARGUMENT, INVALID_VALUE
    - delegated errors (1113x)
      • DELEGATED_ERROR
    - tokenizer (1115x)
      • UNTERMINATED_QUOTE
    - registration (1116x)
      • DUPLICATE_ARGUMENT, DUPLICATE_COMMAND
    - lifecycle (1117x)
      • RESET_FAILURE

    codes are normalized to a string via normalize() so hosts can remap them
    if desired (e.g., to shorter labels).
    """
    # --- routing errors (1110x) ---
    UNKNOWN_COMMAND             = 11101

    # --- named argument errors (1111x/1112x) ---
    MISSING_ARGUMENT_NAME       = 11111
    UNKNOWN_ARGUMENT            = 11112
    MISSING_VALUE               = 11117
    REQUIRED_ARGUMENT           = 11125
    INVALID_VALUE               = 11126

    # --- delegated errors (1113x) ---
    DELEGATED_ERROR             = 11131

    # --- tokenizer errors (1115x) ---
    UNTERMINATED_QUOTE          = 11151

    # --- registration errors (1116x) ---
    DUPLICATE_ARGUMENT          = 11161
    DUPLICATE_COMMAND           = 11162

    # --- lifecycle errors (1117x) ---
    RESET_FAILURE               = 11171

    def normalize(self):
        """
        return a host-normalized string for this code.

        the host application can provide a __codes__ mapping in __main__
        to override numeric ids with friendlier labels. when no mapping
        is present, the numeric value is returned as a string.
        """
        return str(getattr(__import__("__main__"), "__codes__", {}).get(self, self.value))


class CoercionError(ValueError):
    """
    a token (or default value) could not be converted to the requested storage kind.
    """


class CommandException(Exception):
    def __init__(self, message=Unset, /, **options):
        assert isinstance(message, str | Unset)
        super().__init__(message)
        self.message = message
        self.options = MappingProxyType(options)

    @property
    def code(self):
        return self.options.get("code")

    @property
    def chain(self):
        """
        command names traversed before the fault surfaced (root first).
        """
        return tuple(self.options.get("chain", ()))

    def __rich__(self):
        main = __import__("__main__")

        styles = defaultdict(str, {
            # header parts
            "prog-name": "bold #E6E6F0",  # near-white program name
            "code": "bold #00E5FF",  # neon cyan fault code
            "error-title": "bold #FF4DA6",  # friendly pinky title

            # body
            "error-message": "#C8C8D0",  # soft light gray message
            "hint-arrow": "#9CE19C dim",  # gentle green arrow
            "hint": "italic #9CE19C",  # gentle green hint text
        } | getattr(main, "__styles__", {}))

        colorful = self.options.get("colorful", False)
        fancy = self.options.get("fancy", False)

        def styler(style):
            return styles[style] if colorful else ""

        def text(fragment, style=""):
            if not fragment:
                return Text("")
            if not colorful:
                return Text(str(fragment))
            if isinstance(fragment, Text):
                return fragment
            return Text(str(fragment), style)

        prog = text(getattr(main, "__prog__", self.options.get("prog") or next(iter(self.chain), "clasp")), styler("prog-name"))

        header = Text.assemble(
            "[ ",
            prog,
            " — ",
            text(self.code.normalize() if self.code else "?", styler("code")),
            " | ",
            text(str(self.options.get("title", "error")).title(), styler("error-title")),
            " ]"
        )
        message = text(self.message, styler("error-message"))
        hint = Text.assemble(text(" → ", styler("hint-arrow")), text(self.options.get("hint"), styler("hint")))

        if fancy:
            return Panel(Group(message, hint), title=header, title_align="left")

        return Group(header, message, hint)

    def __trigger__(self) -> None:
        if not self.options.get("shell", False):
            raise self from None
        self.options.get("console", console).print(self)

    def __replace__(self, *unused, **overrides):
        assert not unused, "unused arguments are not allowed"
        replaced = type(self)(self.message, **{**self.options, **overrides})
        replaced.__cause__ = self.__cause__
        return replaced


class UnknownCommandError(CommandException): ...
class MissingArgumentNameError(CommandException): ...
class UnknownArgumentError(CommandException): ...
class MissingValueError(CommandException): ...
class RequiredArgumentError(CommandException): ...
class InvalidValueError(CommandException): ...
class DelegatedCommandError(CommandException): ...
class UnterminatedQuoteError(CommandException): ...
class DuplicateArgumentError(CommandException): ...
class DuplicateCommandError(CommandException): ...
class ResetError(CommandException): ...


def trigger(fault, /, **options):
    """
    surface a fault with the given runtime options.

    contract
    - fault must provide __trigger__ and __replace__ methods (see CommandException).
    - options are merged into the fault via __replace__(**options) before triggering.
    - in shell mode, rendering happens via rich console; otherwise, the fault is raised.

    typical options
    - shell, fancy, colorful, console, prog, and any other context the reporter
      may want to show (e.g., chain/input/argument).
    """
    if (
        not hasattr(fault, "__trigger__") or
        not callable(fault.__trigger__) or
        not hasattr(fault, "__replace__") or
        not callable(fault.__replace__)
    ):
        raise TypeError("trigger() argument must have a __trigger__ and __replace__ methods")
    copy.replace(fault, **options).__trigger__()


def getdoc(code, /):
    """
    optional documentation fetch for a fault code.

    lookup
    - the host application may expose a __docs__ mapping in __main__ where keys
      are FaultCode instances and values are short documentation strings.
    - when not found, returns None (renderers treat docs as optional).
    """
    if not isinstance(code, FaultCode):
        raise TypeError("getdoc() argument must be a fault-code")
    try:
        return getattr(__import__("__main__"), "__docs__", {})[code]
    except KeyError:
        return None


__all__ = (
    "CommandException",
    "UnknownCommandError",
    "MissingArgumentNameError",
    "UnknownArgumentError",
    "MissingValueError",
    "RequiredArgumentError",
    "InvalidValueError",
    "DelegatedCommandError",
    "UnterminatedQuoteError",
    "DuplicateArgumentError",
    "DuplicateCommandError",
    "ResetError",
    "CoercionError",
    "FaultCode",
    "trigger",
    "getdoc",
)
