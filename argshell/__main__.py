"""
argshell command-line entry point.

    argshell (--json JSON | --json-file FILE) [--add-self-to-env] [--print-env]
             [-v...] [--fancy] [--no-color] -- ARGS...

The tool's own interface is an argshell schema, matched by the same engine it
exposes; everything after "--" is the argv matched against the user's schema.
"""
import logging
import sys

from rich.console import Console
from rich.logging import RichHandler

from . import __version__
from .compiler import compile_schema, load_schema
from .faults import *
from .helper import render_help, render_version
from .matching import match
from .runner import run
from .schema import Action
from .utils import *

TOOL = {
    "name": "argshell",
    "about": "Declarative argument parsing for shell scripts: match ARGS against a JSON schema, "
             "export the values as environment variables and run the schema's executable.",
    "version": __version__,
    # matched only, never handed off
    "executable": "argshell",
    "args": [
        {"json": {
            "long": "json",
            "value_name": "JSON",
            "help": "schema document as a JSON string",
        }},
        {"json_file": {
            "long": "json-file",
            "value_name": "FILE",
            "help": "path of a JSON schema document",
        }},
        {"add_self_to_env": {
            "long": "add-self-to-env",
            "arg_action": "set_true",
            "help": "export ARGSHELL_BIN and ARGSHELL_PROG to the executable",
        }},
        {"print_env": {
            "long": "print-env",
            "arg_action": "set_true",
            "help": "print the bindings instead of running the executable",
        }},
        {"verbose": {
            "long": "verbose",
            "short": "v",
            "arg_action": "count",
            "help": "log matching decisions (-vv for token traces)",
        }},
        {"fancy": {
            "long": "fancy",
            "arg_action": "set_true",
            "help": "render errors inside panels",
        }},
        {"no_color": {
            "long": "no-color",
            "arg_action": "set_true",
            "help": "render errors without colors",
        }},
        {"args": {
            "value_name": "ARGS",
            "number_of_values": "*",
            "help": "arguments matched against the schema (after --)",
        }},
    ],
}


def _configure_logging(verbosity):
    level = {0: logging.WARNING, 1: logging.INFO}.get(verbosity, logging.DEBUG)
    logging.basicConfig(
        level=level,
        format="%(message)s",
        handlers=[RichHandler(console=Console(stderr=True), show_time=False, show_path=verbosity > 1)],
        force=True,
    )


def _read(path):
    try:
        with open(path, encoding="utf-8") as file:
            return file.read()
    except OSError as exception:
        raise MalformedDocumentError(
            "cannot read schema file %r: %s" % (path, exception.strerror or exception),
            title="unreadable schema",
            code=FaultCode.MALFORMED_DOCUMENT,
            key=path,
            hint="check the --json-file path",
        ) from None
    except UnicodeDecodeError as exception:
        raise MalformedDocumentError(
            "schema file %r is not valid UTF-8 (byte offset %d): %s" % (path, exception.start, exception.reason),
            title="unreadable schema",
            code=FaultCode.MALFORMED_DOCUMENT,
            key=path,
            hint="save the schema file as UTF-8",
        ) from None


def main(argv=Unset, /):
    """
    Run argshell with 'argv' (defaults to sys.argv[1:]); returns an exit status
    or never returns after a successful handoff.
    """
    tool = compile_schema(TOOL, name="argshell")
    argv = list(coalesce(argv, sys.argv[1:]))

    try:
        state = match(tool, argv)
    except MatchError as fault:
        trigger(fault, shell=True, prog=tool.name)

    match state.request:
        case Action.HELP:
            render_help(tool)
            return 0
        case Action.VERSION:
            render_version(tool)
            return 0

    flags = state.seen
    options = {"shell": True, "fancy": "fancy" in flags, "colorful": "no_color" not in flags}
    _configure_logging(state.counts.get("verbose", 0))

    if ("json" in flags) == ("json_file" in flags):
        fault = UnexpectedArgumentError(
            "--json and --json-file cannot be combined",
            title="conflicting schema sources",
            code=FaultCode.UNEXPECTED_ARGUMENT,
            token="--json-file",
            hint="pass the schema once, either inline or as a file",
        ) if flags >= {"json", "json_file"} else MissingRequiredError(
            "a schema is required",
            title="missing schema",
            code=FaultCode.MISSING_REQUIRED,
            key="json",
            hint="pass --json '{...}' or --json-file FILE",
        )
        trigger(fault, prog=tool.name, **options)

    try:
        if "json" in flags:
            schema = load_schema(state.values["json"][0])
        else:
            schema = load_schema(_read(state.values["json_file"][0]))
    except SchemaError as fault:
        trigger(fault, prog=tool.name, **options)

    return run(
        schema,
        state.values.get("args", []),
        add_self="add_self_to_env" in flags,
        print_env="print_env" in flags,
        **options,
    )


if __name__ == "__main__":
    sys.exit(main())
