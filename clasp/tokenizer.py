r"""
Clasp line tokenizer: split one command line into tokens.

Rules
- leading and trailing blanks of the line are ignored.
- outside quotes, blanks separate tokens (runs of blanks never yield empty tokens).
- a double quote opens a quoted section: everything up to the closing quote is
  accumulated verbatim, blanks included, and the closing quote ends the token
  (so '""' yields an empty token and 'a"b c"' yields 'ab c').
- inside quotes a backslash escapes the character after it, looking one raw
  character back:
  • '\"' keeps a literal quote and does not close the section.
  • '\\' keeps a single backslash; the backslash it leaves behind no longer
    escapes what follows, so '"a\\"' yields 'a\'.
  • a backslash before any other character is kept as is ('\n' stays '\n').
- an unterminated quoted section is an error.

Example
    >>> tokenize(r'cmd qarg1="Hello, \"World\"" arg=not-quoted')
    ['cmd', 'qarg1=Hello, "World"', 'arg=not-quoted']
"""
from .faults import FaultCode, UnterminatedQuoteError, getdoc


def tokenize(line, /):
    """
    Split a command line into tokens (see the module docstring for the rules).

    Raises
    - TypeError: line is not a string.
    - UnterminatedQuoteError: a quoted section is still open at the end of the line.
    """
    if not isinstance(line, str):
        raise TypeError("tokenize() argument must be a string")

    line = line.strip()
    tokens = []
    buffer = []
    quoted = False
    # set when the previous backslash was consumed by a '\\' pair
    spent = False

    for index, char in enumerate(line):
        escaped = index > 0 and line[index - 1] == "\\" and not spent

        if quoted:
            if char == '"':
                if escaped:
                    buffer[-1] = '"'
                else:
                    tokens.append("".join(buffer))
                    buffer.clear()
                    quoted = False
                spent = False
            elif char == "\\" and escaped:
                buffer[-1] = "\\"
                spent = True
            else:
                buffer.append(char)
                spent = False
        elif char == '"':
            quoted = True
        elif char.isspace():
            if buffer:
                tokens.append("".join(buffer))
                buffer.clear()
        else:
            buffer.append(char)

    if quoted:
        raise UnterminatedQuoteError(
            "unterminated quoted section in %r" % line,
            title="unterminated quote",
            code=FaultCode.UNTERMINATED_QUOTE,
            hint='close the quoted section with a matching \'"\'',
            input=line,
            partial=tuple(tokens),
            docs=getdoc(FaultCode.UNTERMINATED_QUOTE),
        )

    if buffer:
        tokens.append("".join(buffer))
    return tokens


__all__ = (
    "tokenize",
)
