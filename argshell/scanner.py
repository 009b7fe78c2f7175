"""
Argshell token scanner: purely lexical classification of argv.

Classification, in priority order
1. a terminator ("--") was already seen     → POSITIONAL (verbatim)
2. exactly "--"                             → TERMINATOR (consumed, never a value)
3. "--" followed by one or more characters  → LONG, split at the first "=" into name/value
4. "-" followed by exactly one non-dash     → SHORT
5. anything else                            → POSITIONAL

The scanner never looks at a schema. Value consumption is the matcher's decision:
Cursor.take() hands back raw tokens verbatim, without classifying them, so that
option-like strings (even "--") can be passed as values.

Scanner objects are restartable: every iteration starts a fresh Cursor at the
first token with the terminator flag cleared.
"""
from enum import Enum
from typing import NamedTuple


class TokenKind(Enum):
    LONG = "long"
    SHORT = "short"
    TERMINATOR = "terminator"
    POSITIONAL = "positional"


class Token(NamedTuple):
    """
    One classified token.

    - kind: TokenKind.
    - text: the raw token as received.
    - name: the switch spelling ("--name", "-n") for LONG/SHORT, else None.
    - value: the inline value after "=" for LONG (possibly ""), else None.
    - index: 1-based position in argv.
    """
    kind: TokenKind
    text: str
    name: str | None
    value: str | None
    index: int


def classify(text, index, terminated=False):
    """Classify a single token (see module docstring for the rules)."""
    if terminated:
        return Token(TokenKind.POSITIONAL, text, None, None, index)
    if text == "--":
        return Token(TokenKind.TERMINATOR, text, None, None, index)
    if text.startswith("--"):
        name, equals, value = text[2:].partition("=")
        return Token(TokenKind.LONG, text, "--" + name, value if equals else None, index)
    if len(text) == 2 and text[0] == "-" and text[1] != "-":
        return Token(TokenKind.SHORT, text, text, None, index)
    return Token(TokenKind.POSITIONAL, text, None, None, index)


class Cursor:
    """
    Single pass over a Scanner's tokens.

    Iterating yields classified tokens; take() pulls raw tokens without
    classification. Both advance the same position.
    """

    def __init__(self, argv):
        self._argv = argv
        self._position = 0
        self._terminated = False

    @property
    def position(self):
        """Number of tokens consumed so far."""
        return self._position

    @property
    def terminated(self):
        """True once a terminator token has been yielded."""
        return self._terminated

    def __iter__(self):
        return self

    def __next__(self):
        if self._position >= len(self._argv):
            raise StopIteration
        token = classify(self._argv[self._position], self._position + 1, self._terminated)
        self._position += 1
        self._terminated |= token.kind is TokenKind.TERMINATOR
        return token

    def take(self, count, /):
        """Pull up to 'count' raw tokens verbatim; fewer are returned at end of input."""
        taken = list(self._argv[self._position:self._position + count])
        self._position += len(taken)
        return taken


class Scanner:
    """Restartable, lazy token source over an argv slice (program name excluded)."""

    def __init__(self, argv, /):
        argv = tuple(argv)
        if not all(isinstance(token, str) for token in argv):
            raise TypeError("Scanner() argument must be an iterable of strings")
        self._argv = argv

    def __iter__(self):
        return Cursor(self._argv)

    def __len__(self):
        return len(self._argv)

    def __repr__(self):
        return f"scanner({list(self._argv)!r})"


__all__ = (
    "TokenKind",
    "Token",
    "Cursor",
    "Scanner",
    "classify",
)
