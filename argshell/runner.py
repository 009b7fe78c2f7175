"""
Argshell runner: orchestration of one run against a compiled Schema.

Order of effects
1. match argv (MatchError → surfaced, exit status 2 in shell mode);
2. help/version requests → rendered, status 0, no handoff;
3. format the bindings (pure);
4. either print them (print_env) or hand off to the executable (never returns
   on success; HandoffError → surfaced).

The handoff is reachable only after every fallible step succeeded.
"""
import logging
import os.path
import sys

from rich.console import Console

from .bindings import format_bindings
from .faults import *
from .process import handoff
from .helper import render_help, render_version
from .matching import match
from .schema import Action
from .utils import *

logger = logging.getLogger(__name__)


def identity(schema, /, program=Unset):
    """
    Environment describing argshell itself, exported with --add-self-to-env.

    - ARGSHELL_BIN: absolute path of the running argshell program.
    - ARGSHELL_PROG: route of the matched schema (e.g. "deploy push").
    """
    return {
        "ARGSHELL_BIN": os.path.abspath(coalesce(program, sys.argv[0])),
        "ARGSHELL_PROG": schema.route,
    }


def run(schema, argv, /, *, add_self=False, print_env=False, shell=True, fancy=False, colorful=True, console=Unset):
    """
    Match 'argv' against 'schema' and hand off to the matched executable.

    Parameters
    - add_self: also export identity() variables to the child.
    - print_env: print NAME=value lines instead of handing off.
    - shell / fancy / colorful: fault presentation (see faults.trigger).
    - console: rich Console used for help, version and print_env output.

    Returns
    - 0 after help, version or print_env; never returns after a successful handoff.
    """
    console = coalesce(console, Console())
    options = {"shell": shell, "fancy": fancy, "colorful": colorful, "prog": schema.route}

    try:
        state = match(schema, argv)
    except MatchError as fault:
        trigger(fault, **options)

    match state.request:
        case Action.HELP:
            render_help(state.schema, console, colorful=colorful)
            return 0
        case Action.VERSION:
            render_version(state.schema, console, colorful=colorful)
            return 0

    bindings = format_bindings(state)
    extra = identity(state.schema) if add_self else {}
    logger.info("matched %r: %d bindings", state.schema.route, len(bindings))

    if print_env:
        for name, value in (dict(bindings) | extra).items():
            # verbatim: no markup, emoji or tab expansion
            console.file.write(f"{name}={value}\n")
        console.file.flush()
        return 0

    try:
        handoff(state.schema.executable, bindings, extra=extra)
    except HandoffError as fault:
        trigger(fault, **options)


__all__ = (
    "identity",
    "run",
)
