"""
Argshell binding formatter: ParseState → immutable environment mapping.

Conventions
- Name: the argument's env_var when declared, otherwise its key transliterated by
  schema.envname() ("output-dir" → OUTPUT_DIR).
- SET / APPEND / positionals: collected values joined with the schema separator
  (default ","). A single value is bound verbatim. Values containing the
  separator are not escaped.
- SET_TRUE: "true" on presence. SET_FALSE: "false" on presence.
- COUNT: decimal number of occurrences.
- HELP / VERSION: never bound.
- Arguments never supplied: their declared default (joined like values), otherwise
  omitted. An omitted argument is simply absent from the mapping.

Only the matched (leaf) schema's arguments are bound.
"""
from types import MappingProxyType

from .schema import Action

TRUE = "true"
FALSE = "false"


def format_value(argument, state):
    """
    Return the string payload for one argument, or None when it is omitted.
    """
    key = argument.key
    separator = state.schema.separator

    if argument.action.terminal:
        return None
    if key not in state.seen:
        if argument.default is None:
            return None
        return separator.join(argument.default)

    match argument.action:
        case Action.SET | Action.APPEND:
            return separator.join(state.values.get(key, ()))
        case Action.COUNT:
            return str(state.counts.get(key, 0))
        case Action.SET_TRUE:
            return TRUE
        case Action.SET_FALSE:
            return FALSE


def format_bindings(state, /):
    """
    Build the read-only Bindings mapping (env name → string) from a completed ParseState.

    Pure and total: a ParseState produced by the matcher always formats.
    """
    bindings = {}
    for argument in state.schema.arguments:
        if (value := format_value(argument, state)) is not None:
            bindings[argument.env] = value
    return MappingProxyType(bindings)


__all__ = (
    "TRUE",
    "FALSE",
    "format_value",
    "format_bindings",
)
