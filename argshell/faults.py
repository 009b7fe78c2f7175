"""
Argshell faults (errors) and rendering.

Scope
- FaultCode: canonical, stable numeric identifiers for every failure the tool can
  surface. Codes are grouped by domain so logs and searches stay predictable.
- SchemaError: the argument document is malformed or self-contradictory. Always a
  packaging/programmer error, raised before any argv token is examined.
- MatchError: the command line does not satisfy the compiled schema. A usage error
  for the person running the script.
- HandoffError: the target executable could not replace the current process.
- trigger(): central entry point to surface a fault (raise, or print and exit).

UX goals
- Position-first messages: parse faults name the ordinal position of the token.
- Short titles, one-sentence bodies, a single clear hint.
- Styling configurable via __styles__ in __main__; code labels via __codes__.

Every fault is terminal: nothing in the package catches one and carries on.
"""
import copy
import sys
from collections import defaultdict
from enum import IntEnum
from types import MappingProxyType

from rich.console import Console, Group
from rich.panel import Panel
from rich.text import Text

from .utils import Unset, coalesce

console = Console(stderr=True)


class FaultCode(IntEnum):
    """
    canonical fault codes (stable identifiers).

    grouping
    - matching (11xxx)
      • routing: UNKNOWN_SUBCOMMAND, MISSING_SUBCOMMAND
      • switches: UNKNOWN_ARGUMENT, UNEXPECTED_VALUE, MISSING_VALUE
      • positionals: UNEXPECTED_ARGUMENT
      • post-parse: MISSING_REQUIRED
    - schema (21xxx)
      • document shape: MALFORMED_DOCUMENT, INVALID_FIELD
      • argument semantics: INVALID_ACTION, INVALID_ARITY, ACTION_ARITY_MISMATCH
      • cross-argument: DUPLICATED_KEY, DUPLICATED_SPELLING, MISPLACED_UNBOUNDED,
        ENV_NAME_COLLISION
      • command: MISSING_EXECUTABLE
    - handoff (31xxx)
      • HANDOFF_FAILED
    """
    # --- matching errors (11xxx) ---
    UNKNOWN_SUBCOMMAND          = 11102
    MISSING_SUBCOMMAND          = 11103
    UNKNOWN_ARGUMENT            = 11112
    UNEXPECTED_VALUE            = 11113
    UNEXPECTED_ARGUMENT         = 11121
    MISSING_VALUE               = 11122
    MISSING_REQUIRED            = 11125

    # --- schema errors (21xxx) ---
    MALFORMED_DOCUMENT          = 21101
    INVALID_FIELD               = 21111
    INVALID_ACTION              = 21112
    INVALID_ARITY               = 21113
    ACTION_ARITY_MISMATCH       = 21114
    DUPLICATED_KEY              = 21121
    DUPLICATED_SPELLING         = 21122
    MISPLACED_UNBOUNDED         = 21123
    ENV_NAME_COLLISION          = 21124
    MISSING_EXECUTABLE          = 21131

    # --- handoff errors (31xxx) ---
    HANDOFF_FAILED              = 31101

    def normalize(self):
        """label shown in fault headers: __main__.__codes__[self] if defined, else the number."""
        labels = getattr(__import__("__main__"), "__codes__", {})
        return str(labels.get(self, self.value))


class ArgshellException(Exception):
    """
    base fault: a message plus read-only keyword context.

    context keys commonly present: code, title, hint, key, token, index, shortfall.
    they are readable as attributes (fault.key) or through fault.options.
    """
    exitcode = 1
    palette = {
        "prog-name": "bold #E6E6F0",
        "code": "bold #00E5FF",
        "error-title": "bold #FF4DA6",
        "error-message": "#C8C8D0",
        "hint-arrow": "#9CE19C dim",
        "hint": "italic #9CE19C",
    }

    def __init__(self, message=Unset, /, **options):
        if not isinstance(message, str | Unset):
            raise TypeError("%s() message must be a string" % type(self).__name__)
        super().__init__(coalesce(message, ""))
        self.message = coalesce(message, "")
        self.options = MappingProxyType(dict(options))

    def __getattr__(self, name):
        if name == "options":
            raise AttributeError(name)
        try:
            return self.options[name]
        except KeyError:
            raise AttributeError(f"{type(self).__name__!r} has no context {name!r}") from None

    def __rich__(self):
        main = __import__("__main__")
        colorful = self.options.get("colorful", True)
        fancy = self.options.get("fancy", False)

        styles = defaultdict(str, self.palette | getattr(main, "__styles__", {}))

        def paint(fragment, style):
            return Text(str(fragment), styles[style] if colorful else "")

        code = self.options.get("code")
        header = Text.assemble(
            "[ ",
            paint(getattr(main, "__prog__", self.options.get("prog", "argshell")), "prog-name"),
            " — ",
            paint(code.normalize() if code else "", "code"),
            " | ",
            paint(str(self.options.get("title", "error")).title(), "error-title"),
            " ]",
        )
        body = [paint(self.message, "error-message")]
        if hint := self.options.get("hint"):
            body.append(Text.assemble(paint(" → ", "hint-arrow"), paint(hint, "hint")))

        if fancy:
            return Panel(Group(*body), title=header, title_align="left", width=console.width - 4)
        return Group(header, *body)

    def __trigger__(self):
        if self.options.get("shell", False):
            console.print(self)
            sys.exit(self.exitcode)
        raise self from None

    def __replace__(self, /, **changes):
        return type(self)(self.message, **(dict(self.options) | changes))


class SchemaError(ArgshellException):
    """the argument document cannot be compiled (packaging error)."""


class MalformedDocumentError(SchemaError): ...
class InvalidFieldError(SchemaError): ...
class InvalidActionError(SchemaError): ...
class InvalidArityError(SchemaError): ...
class ActionArityMismatchError(SchemaError): ...
class DuplicatedKeyError(SchemaError): ...
class DuplicatedSpellingError(SchemaError): ...
class MisplacedUnboundedError(SchemaError): ...
class EnvNameCollisionError(SchemaError): ...
class MissingExecutableError(SchemaError): ...


class MatchError(ArgshellException):
    """the command line does not satisfy the schema (usage error)."""
    exitcode = 2


class UnknownArgumentError(MatchError): ...
class UnexpectedValueError(MatchError): ...
class MissingValueError(MatchError): ...
class UnexpectedArgumentError(MatchError): ...
class MissingRequiredError(MatchError): ...
class UnknownSubcommandError(MatchError): ...
class MissingSubcommandError(MatchError): ...


class HandoffError(ArgshellException):
    """the target executable could not be started."""


def trigger(fault, /, **options):
    """
    merge runtime options (shell, fancy, colorful, prog) into 'fault' and surface it.

    shell=True renders the fault on stderr and exits with fault.exitcode;
    otherwise the updated copy is raised.
    """
    if not isinstance(fault, ArgshellException):
        raise TypeError("trigger() argument must be an ArgshellException, not %s" % type(fault).__name__)
    copy.replace(fault, **options).__trigger__()


__all__ = (
    "FaultCode",
    "ArgshellException",
    "SchemaError",
    "MalformedDocumentError",
    "InvalidFieldError",
    "InvalidActionError",
    "InvalidArityError",
    "ActionArityMismatchError",
    "DuplicatedKeyError",
    "DuplicatedSpellingError",
    "MisplacedUnboundedError",
    "EnvNameCollisionError",
    "MissingExecutableError",
    "MatchError",
    "UnknownArgumentError",
    "UnexpectedValueError",
    "MissingValueError",
    "UnexpectedArgumentError",
    "MissingRequiredError",
    "UnknownSubcommandError",
    "MissingSubcommandError",
    "HandoffError",
    "trigger",
)
