"""
Argshell matching engine: drive scanned tokens against a compiled Schema.

Phases
- loop (single left-to-right pass)
  • LONG/SHORT: resolve the spelling to its ArgumentSpec (UnknownArgumentError
    otherwise), consume its values (the inline value, or raw tokens taken
    literally) and apply its action.
  • POSITIONAL: either route into a subcommand (first positional of a schema with
    children) or fill the head of the not-yet-saturated positional specs.
  • TERMINATOR: skipped; the scanner classifies everything after it as positional.
  • HELP/VERSION actions stop the loop and record the request.
- post-pass
  • a positional left partially filled → MissingValueError.
  • required, unseen keys → MissingRequiredError (first in declaration order).
  • a routing-only schema whose subcommand was never named → MissingSubcommandError.

Every fault is raised immediately; a partial ParseState never escapes.
"""
import difflib
import logging
import shlex
from collections import deque
from collections.abc import Iterable

from .faults import *
from .scanner import Scanner, TokenKind
from .schema import Action
from .utils import *

logger = logging.getLogger(__name__)


class ParseState:
    """
    Mutable accumulator for one schema level.

    - schema: the Schema these values belong to.
    - parent: the ParseState of the enclosing schema when a subcommand was routed, else None.
    - values: key → list of raw string values (value-bearing arguments).
    - counts: key → number of occurrences (COUNT arguments).
    - seen: keys matched at least once (drives the required check).
    - position: tokens consumed so far when matching stopped.
    - terminated: True once a literal "--" was consumed.
    - request: Action.HELP / Action.VERSION when one of them stopped matching, else None.
    """
    __slots__ = ("schema", "parent", "values", "counts", "seen", "position", "terminated", "request")

    def __init__(self, schema, parent=None):
        self.schema = schema
        self.parent = parent
        self.values = {}
        self.counts = {}
        self.seen = set()
        self.position = 0
        self.terminated = False
        self.request = None

    def __repr__(self):
        return f"parse-state(schema={self.schema.name!r}, values={self.values!r}, counts={self.counts!r}, seen={sorted(self.seen)!r})"


class Matcher:
    """
    Match argv tokens against a Schema.

    Usage
        state = Matcher(schema).run(Scanner(["--tag", "a", "file"]))
    """

    def __init__(self, schema, /):
        self._schema = schema

    def _resolve(self, schema, token):
        """
        Return the ArgumentSpec for a LONG/SHORT token or raise UnknownArgumentError.
        """
        try:
            return schema.switches[token.name]
        except KeyError:
            pass
        suggestions = difflib.get_close_matches(token.name, schema.switches.keys(), 5)
        try:
            hint = "did you mean %r? run '%s --help' to see all options" % (suggestions[0], schema.route)
        except IndexError:
            hint = "run '%s --help' to see all available options" % schema.route
        raise UnknownArgumentError(
            "unknown option %r at %s position" % (token.name, ordinal(token.index)),
            title="unknown argument",
            code=FaultCode.UNKNOWN_ARGUMENT,
            token=token.text,
            index=token.index,
            suggestions=suggestions,
            hint=hint,
        )

    def _getvalues(self, argument, token, cursor):
        """
        Consume the values of one option occurrence.

        - presence-only: no values; an inline "=value" is an UnexpectedValueError.
        - value-bearing: an inline "=value" is the only value of the occurrence (more
          are not taken from the stream); otherwise the values are taken verbatim
          from the stream. A shortfall is a MissingValueError.
        """
        if argument.nargs == 0:
            if token.value is not None:
                raise UnexpectedValueError(
                    "switch %r at %s position does not take a value" % (token.name, ordinal(token.index)),
                    title="unexpected value",
                    code=FaultCode.UNEXPECTED_VALUE,
                    key=argument.key,
                    token=token.text,
                    index=token.index,
                    hint="remove everything from '=' (for example: %s)" % token.name,
                )
            return []

        values = [token.value] if token.value is not None else cursor.take(argument.nargs)

        if shortfall := argument.nargs - len(values):
            raise MissingValueError(
                "option %r at %s position requires %d value%s but %d %s given" % (
                    token.name, ordinal(token.index), argument.nargs, "s" * (argument.nargs != 1),
                    len(values), "was" if len(values) == 1 else "were",
                ),
                title="missing value",
                code=FaultCode.MISSING_VALUE,
                key=argument.key,
                token=token.text,
                index=token.index,
                expected=argument.nargs,
                shortfall=shortfall,
                hint="pass all %d values as separate tokens after %s" % (argument.nargs, token.name)
                if token.value is not None else
                "add the missing value%s after %s" % ("s" * (shortfall != 1), token.name),
            )
        return values

    def _apply(self, state, argument, values):
        """Record one occurrence according to the argument's action."""
        match argument.action:
            case Action.SET:
                state.values[argument.key] = list(values)
            case Action.APPEND:
                state.values.setdefault(argument.key, []).extend(values)
            case Action.COUNT:
                state.counts[argument.key] = state.counts.get(argument.key, 0) + 1
            case Action.SET_TRUE | Action.SET_FALSE:
                pass
            case Action.HELP | Action.VERSION:
                state.request = argument.action
        state.seen.add(argument.key)

    def _finalize(self, state, pending, filled, cursor):
        """Post-pass checks for one schema level (see module docstring)."""
        schema = state.schema

        if filled and pending and not pending[0].unbounded:
            argument = pending[0]
            raise MissingValueError(
                "positional %r requires %d values but %d were given" % (argument.value_name, argument.nargs, filled),
                title="missing value",
                code=FaultCode.MISSING_VALUE,
                key=argument.key,
                index=cursor.position,
                expected=argument.nargs,
                shortfall=argument.nargs - filled,
                hint="add the missing value%s for %s" % ("s" * (argument.nargs - filled != 1), argument.value_name),
            )

        for argument in schema.arguments:
            if argument.required and argument.key not in state.seen:
                raise MissingRequiredError(
                    "required argument %r was not provided" % argument.label,
                    title="missing required argument",
                    code=FaultCode.MISSING_REQUIRED,
                    key=argument.key,
                    hint="run '%s --help' to see the expected usage" % schema.route,
                )

    def run(self, tokens, /):
        """
        Match a Scanner (or any iterable of strings) and return the leaf ParseState.

        Raises
        - MatchError subclasses on the first violation.
        """
        scanner = tokens if isinstance(tokens, Scanner) else Scanner(tokens)
        cursor = iter(scanner)
        state = ParseState(schema := self._schema)
        pending = deque(schema.positionals)
        filled = 0
        consumed = False

        for token in cursor:
            logger.debug("token %d %s %r", token.index, token.kind.value, token.text)

            match token.kind:
                case TokenKind.TERMINATOR:
                    continue

                case TokenKind.LONG | TokenKind.SHORT:
                    argument = self._resolve(schema, token)
                    self._apply(state, argument, self._getvalues(argument, token, cursor))
                    if state.request:
                        logger.debug("matching stopped by %s at %s position", token.name, ordinal(token.index))
                        break

                case TokenKind.POSITIONAL:
                    if schema.children and not consumed and not cursor.terminated:
                        if (child := schema.children.get(token.text)) is not None:
                            self._finalize(state, pending, filled, cursor)
                            logger.debug("routing into subcommand %r", child.route)
                            state = ParseState(schema := child, state)
                            pending = deque(schema.positionals)
                            filled = 0
                            continue
                        if not pending:
                            suggestions = difflib.get_close_matches(token.text, schema.children.keys(), 5)
                            try:
                                hint = "did you mean %r? run '%s --help' to see available subcommands" % (
                                    suggestions[0], schema.route
                                )
                            except IndexError:
                                hint = "run '%s --help' to see available subcommands" % schema.route
                            raise UnknownSubcommandError(
                                "unknown subcommand %r at %s position" % (token.text, ordinal(token.index)),
                                title="unknown subcommand",
                                code=FaultCode.UNKNOWN_SUBCOMMAND,
                                token=token.text,
                                index=token.index,
                                suggestions=suggestions,
                                hint=hint,
                            )

                    if not pending:
                        raise UnexpectedArgumentError(
                            "unexpected positional argument %r at %s position" % (token.text, ordinal(token.index)),
                            title="unexpected argument",
                            code=FaultCode.UNEXPECTED_ARGUMENT,
                            token=token.text,
                            index=token.index,
                            hint="remove this extra value or run '%s --help' to see the expected usage" % schema.route,
                        )

                    consumed = True
                    argument = pending[0]
                    state.values.setdefault(argument.key, []).append(token.text)
                    state.seen.add(argument.key)
                    filled += 1
                    if not argument.unbounded and filled == argument.nargs:
                        pending.popleft()
                        filled = 0

        state.position = cursor.position
        state.terminated = cursor.terminated

        if state.request:
            return state

        self._finalize(state, pending, filled, cursor)

        if schema.executable is None and schema.children:
            raise MissingSubcommandError(
                "%r requires a subcommand" % schema.route,
                title="missing subcommand",
                code=FaultCode.MISSING_SUBCOMMAND,
                key=schema.name,
                hint="use one of: %s" % " · ".join(schema.children),
            )

        return state


def match(schema, tokens, /):
    """
    Convenience runner: match 'tokens' against 'schema'.

    tokens
    - str: split with shlex.split.
    - Iterable[str]: used as-is (a Scanner is accepted too).
    """
    if isinstance(tokens, str):
        tokens = shlex.split(tokens)
    elif not isinstance(tokens, Iterable):
        raise TypeError("match() second argument must be a string or an iterable of strings")
    return Matcher(schema).run(tokens)


__all__ = (
    "ParseState",
    "Matcher",
    "match",
)
