"""
Clasp type coercion: text tokens to typed values and back.

Kinds
- Kind is the closed set of storage kinds an argument can be bound to:
  INT/INT64 (signed), UINT/UINT64 (unsigned), FLOAT64, BOOL and STRING.
  The "word width" kinds (INT/UINT) are 64 bits wide, like their fixed-width peers.

Parsing (parse)
- integers: optional sign (signed kinds only), then an auto-detected base:
  • "0x"/"0X" prefix → base 16
  • leading "0"      → base 8
  • otherwise        → base 10
  values outside the kind's range are rejected.
- floats: ASCII decimal literals with an optional exponent, "inf" and "nan"; finite literals
  that overflow to infinity are rejected, as are blanks, "_" separators and non-ASCII digits.
- booleans: case-insensitive "true", "false", "t", "f", "1", "0".
- strings: copied verbatim, never fail.

Formatting (format)
- the inverse, used to keep default values as text: integers in decimal,
  booleans as "true"/"false", floats in fixed-point notation with the shortest
  digits that read back to the same float, strings verbatim.

Every failure is a CoercionError (a ValueError) with a lowercased message.
"""
import builtins
import math
import re
from decimal import Decimal
from enum import Enum

from .faults import CoercionError


class Kind(Enum):
    """
    storage kinds an argument binding can point at.
    """
    INT = "int"
    INT64 = "int64"
    UINT = "uint"
    UINT64 = "uint64"
    FLOAT64 = "float64"
    BOOL = "bool"
    STRING = "string"

    @property
    def signed(self):
        return self in (Kind.INT, Kind.INT64)

    @property
    def integral(self):
        return self in (Kind.INT, Kind.INT64, Kind.UINT, Kind.UINT64)

    @property
    def bounds(self):
        """
        inclusive (low, high) range of an integral kind.
        """
        if self.signed:
            return -(1 << 63), (1 << 63) - 1
        if self.integral:
            return 0, (1 << 64) - 1
        raise TypeError(f"kind {self.value!r} has no integral bounds")

    @property
    def type(self):
        """
        the Python type values of this kind are stored as.
        """
        match self:
            case Kind.INT | Kind.INT64 | Kind.UINT | Kind.UINT64:
                return int
            case Kind.FLOAT64:
                return float
            case Kind.BOOL:
                return bool
            case Kind.STRING:
                return str


_TRUTHS = frozenset({"true", "t", "1"})
_FALSEHOODS = frozenset({"false", "f", "0"})

_INTEGER = re.compile(r"(?P<sign>[+-]?)(?:0[xX](?P<hex>[0-9a-fA-F]+)|0(?P<oct>[0-7]*)|(?P<dec>[1-9][0-9]*))")
_INFINITY = re.compile(r"[+-]?inf(inity)?", re.IGNORECASE)
_FLOAT = re.compile(r"[+-]?(?:(?:[0-9]+\.?[0-9]*|\.[0-9]+)(?:[eE][+-]?[0-9]+)?|inf(?:inity)?|nan)", re.IGNORECASE)


def _parse_integer(kind, text):
    if not (match := _INTEGER.fullmatch(text)):
        raise CoercionError(f"invalid {kind.value} literal {text!r}")

    if match["sign"] and not kind.signed:
        raise CoercionError(f"invalid {kind.value} literal {text!r}, sign is not allowed")

    if match["hex"] is not None:
        value = int(match["hex"], 16)
    elif match["oct"] is not None:
        value = int(match["oct"] or "0", 8)
    else:
        value = int(match["dec"], 10)

    if match["sign"] == "-":
        value = -value

    low, high = kind.bounds
    if not low <= value <= high:
        raise CoercionError(f"{kind.value} literal {text!r} is out of range")
    return value


def _parse_float(text):
    if not _FLOAT.fullmatch(text):
        raise CoercionError(f"invalid float64 literal {text!r}")
    try:
        value = float(text)
    except ValueError:
        raise CoercionError(f"invalid float64 literal {text!r}") from None
    if math.isinf(value) and not _INFINITY.fullmatch(text):
        raise CoercionError(f"float64 literal {text!r} is out of range")
    return value


def _parse_bool(text):
    if (lowered := text.lower()) in _TRUTHS:
        return True
    if lowered in _FALSEHOODS:
        return False
    raise CoercionError(f"invalid bool literal {text!r}")


def parse(kind, text, /):
    """
    convert a text token into a value of the given kind.

    raises
    - TypeError: when kind is not a Kind or text is not a string.
    - CoercionError: when the token does not spell a valid value of the kind.
    """
    if not isinstance(kind, Kind):
        raise TypeError("parse() first argument must be a kind")
    if not isinstance(text, str):
        raise TypeError("parse() second argument must be a string")

    match kind:
        case Kind.INT | Kind.INT64 | Kind.UINT | Kind.UINT64:
            return _parse_integer(kind, text)
        case Kind.FLOAT64:
            return _parse_float(text)
        case Kind.BOOL:
            return _parse_bool(text)
        case Kind.STRING:
            return text


def is_bool(text, /):
    """
    tell whether a token is a valid boolean literal (used for flag lookahead).
    """
    return isinstance(text, str) and text.lower() in _TRUTHS | _FALSEHOODS


def format(kind, value, /):
    """
    render a value of the given kind as text that parse() reads back.

    raises
    - TypeError: when kind is not a Kind or value is not of the kind's Python type.
    - CoercionError: when an integer lies outside the kind's range.
    """
    if not isinstance(kind, Kind):
        raise TypeError("format() first argument must be a kind")

    match kind:
        case Kind.INT | Kind.INT64 | Kind.UINT | Kind.UINT64:
            # bool is an int subclass, but True is not a meaningful integer default
            if not isinstance(value, int) or isinstance(value, bool):
                raise TypeError(f"format() {kind.value} value must be an integer")
            low, high = kind.bounds
            if not low <= value <= high:
                raise CoercionError(f"{kind.value} value {value} is out of range")
            return "%d" % value
        case Kind.FLOAT64:
            if not isinstance(value, int | float) or isinstance(value, bool):
                raise TypeError("format() float64 value must be a number")
            if math.isnan(value := float(value)):
                return "nan"
            if math.isinf(value):
                return "inf" if value > 0 else "-inf"
            text = builtins.format(Decimal(repr(value)), "f")
            return text if "." in text else text + ".0"
        case Kind.BOOL:
            if not isinstance(value, bool):
                raise TypeError("format() bool value must be a boolean")
            return "true" if value else "false"
        case Kind.STRING:
            if not isinstance(value, str):
                raise TypeError("format() string value must be a string")
            return value


__all__ = (
    "Kind",
    "parse",
    "format",
    "is_bool",
)
