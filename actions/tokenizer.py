"""Quote-aware command lexer.

Splits a substituted command line into an argument vector without a shell:

- whitespace separates tokens outside quotes
- '...' keeps its content verbatim (no escapes inside)
- "..." keeps its content; backslash escapes only \\ and " inside
- a backslash outside quotes escapes the next character
- adjacent quoted and unquoted parts join into one token (a"b c"d -> ab cd)
- an empty quoted string is an empty token ("" -> '')
- a trailing backslash is kept as a literal backslash
- an unterminated quote runs to the end of the input
"""

from enum import Enum


class _State(Enum):
    NORMAL = "normal"
    SINGLE = "single"
    DOUBLE = "double"
    ESCAPED = "escaped"
    DOUBLE_ESCAPED = "double_escaped"


def tokenize(command: str) -> list[str]:
    """Split command into [executable, *args]."""
    tokens: list[str] = []
    current: list[str] = []
    # A token exists once quotes were opened, even if it stays empty
    in_token = False
    state = _State.NORMAL

    for ch in command:
        if state is _State.NORMAL:
            if ch.isspace():
                if in_token:
                    tokens.append("".join(current))
                    current = []
                    in_token = False
            elif ch == "'":
                state = _State.SINGLE
                in_token = True
            elif ch == '"':
                state = _State.DOUBLE
                in_token = True
            elif ch == "\\":
                state = _State.ESCAPED
                in_token = True
            else:
                current.append(ch)
                in_token = True
        elif state is _State.ESCAPED:
            current.append(ch)
            state = _State.NORMAL
        elif state is _State.SINGLE:
            if ch == "'":
                state = _State.NORMAL
            else:
                current.append(ch)
        elif state is _State.DOUBLE:
            if ch == '"':
                state = _State.NORMAL
            elif ch == "\\":
                state = _State.DOUBLE_ESCAPED
            else:
                current.append(ch)
        else:  # DOUBLE_ESCAPED
            if ch not in ('"', "\\"):
                current.append("\\")
            current.append(ch)
            state = _State.DOUBLE

    if state in (_State.ESCAPED, _State.DOUBLE_ESCAPED):
        current.append("\\")
    if in_token:
        tokens.append("".join(current))
    return tokens
