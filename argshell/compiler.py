"""
Argshell schema compiler: loosely-typed JSON document → validated Schema.

Document shape
    {
        "name": "deploy",                      # program name (optional)
        "about": "Ship a build",               # or "description" (optional)
        "version": "1.2.0",                    # enables -V/--version (optional)
        "executable": "/usr/lib/deploy/run",   # target of the handoff
        "separator": ",",                      # joins multi-value bindings (optional)
        "args": [
            {"target": {"required": true}},
            {"tag": {"long": "tag", "short": "t", "arg_action": "append"}},
            {"verbose": {"short": "v", "arg_action": "count"}}
        ],
        "subcommands": {"rollback": {...}}     # nested documents (optional)
    }

Per-argument fields: long, short, value_name, help, required, arg_action (alias
action), number_of_values, default (alias default_value), env_var. Unknown fields
are rejected.

Contract
- compile_schema() is pure: it either returns a Schema or raises the first
  SchemaError it finds, naming the offending key and the violated rule.
- Field-level checks (types, ranges, spellings) live here; cross-argument
  invariants are enforced by the Schema/ArgumentSpec constructors.
- Builtin -h/--help (and -V/--version when a version is declared) are added
  unless the document already claims those keys or spellings.
"""
import json
import logging
import os.path
import re
from collections.abc import Mapping, Sequence

from .faults import *
from .schema import Action, ArgumentSpec, Schema
from .utils import *

logger = logging.getLogger(__name__)

_FIELDS = frozenset((
    "long",
    "short",
    "value_name",
    "help",
    "required",
    "arg_action",
    "action",
    "number_of_values",
    "default",
    "default_value",
    "env_var",
))

_DOCUMENT_FIELDS = frozenset((
    "name",
    "about",
    "description",
    "version",
    "executable",
    "separator",
    "args",
    "subcommands",
))

_ACTIONS = {
    "set": Action.SET,
    "append": Action.APPEND,
    "count": Action.COUNT,
    "settrue": Action.SET_TRUE,
    "flag": Action.SET_TRUE,
    "setfalse": Action.SET_FALSE,
    "help": Action.HELP,
    "version": Action.VERSION,
}


def _invalid(key, field, message, hint):
    return InvalidFieldError(
        "argument %r field %r %s" % (key, field, message),
        title="invalid field",
        code=FaultCode.INVALID_FIELD,
        key=key,
        field=field,
        hint=hint,
    )


def _alias(key, metadata, name, alias):
    """Fold an alias field into its canonical name; giving both is ambiguous."""
    if alias not in metadata:
        return
    if name in metadata:
        raise _invalid(key, alias, "duplicates %r" % name, "keep only one of %r and %r" % (name, alias))
    metadata[name] = metadata.pop(alias)


def _sanitize_strings(key, metadata):
    """
    Validate the free-text fields: value_name, help, env_var.

    - must be strings, non-empty after trimming;
    - env_var must be a valid shell identifier.
    """
    for field in ("value_name", "help", "env_var"):
        if (object := metadata.get(field, Unset)) is Unset:
            continue
        if not isinstance(object, str):
            raise _invalid(key, field, "must be a string", "quote the %r value" % field)
        if not (object := object.strip()):
            raise _invalid(key, field, "cannot be empty", "remove %r or give it a value" % field)
        metadata[field] = object

    if (env_var := metadata.get("env_var", Unset)) and not re.fullmatch(r"[A-Za-z_][A-Za-z0-9_]*", env_var):
        raise _invalid(key, "env_var", "must be a valid environment variable name", "use letters, digits and '_' only")


def _sanitize_spellings(key, metadata):
    """
    Validate long/short spellings (given without their leading dashes).

    - long: non-empty, does not start with '-', no '=' and no whitespace.
    - short: exactly one character, neither '-' nor whitespace.
    """
    if (long := metadata.get("long", Unset)) is not Unset:
        if not isinstance(long, str):
            raise _invalid(key, "long", "must be a string", "use a name like \"output\" for --output")
        if not long or long.startswith("-") or re.search(r"[=\s]", long):
            raise _invalid(
                key, "long", "must be a name without leading dashes, '=' or spaces",
                "use a name like \"output\" for --output",
            )

    if (short := metadata.get("short", Unset)) is not Unset:
        if not isinstance(short, str):
            raise _invalid(key, "short", "must be a string", "use a single character like \"o\" for -o")
        if len(short) != 1 or short == "-" or short.isspace():
            raise _invalid(key, "short", "must be exactly one non-dash character", "use a single character like \"o\" for -o")


def _sanitize_semantics(key, metadata):
    """
    Validate required, arg_action, number_of_values and default.

    - required: strict boolean.
    - arg_action: case-insensitive name; '_' and '-' are ignored ("SetTrue", "set_true").
    - number_of_values: non-negative integer, or "*" / "..." for unbounded (Ellipsis).
    - default: string or list of strings, normalized to a list.
    """
    if (required := metadata.get("required", Unset)) is not Unset and not isinstance(required, bool):
        raise _invalid(key, "required", "must be a boolean", "use true or false")

    if (action := metadata.get("arg_action", Unset)) is not Unset:
        if not isinstance(action, str):
            raise InvalidActionError(
                "argument %r action must be a string" % key,
                title="invalid action",
                code=FaultCode.INVALID_ACTION,
                key=key,
                hint="use one of: %s" % " · ".join(_ACTIONS),
            )
        try:
            metadata["arg_action"] = _ACTIONS[re.sub(r"[_\-]", "", action.lower())]
        except KeyError:
            raise InvalidActionError(
                "argument %r has unknown action %r" % (key, action),
                title="invalid action",
                code=FaultCode.INVALID_ACTION,
                key=key,
                hint="use one of: %s" % " · ".join(_ACTIONS),
            ) from None

    if (nargs := metadata.get("number_of_values", Unset)) is not Unset:
        if nargs in ("*", "..."):
            metadata["number_of_values"] = Ellipsis
        elif not isinstance(nargs, int) or isinstance(nargs, bool) or nargs < 0:
            raise InvalidArityError(
                "argument %r number_of_values must be a non-negative integer or \"*\"" % key,
                title="invalid arity",
                code=FaultCode.INVALID_ARITY,
                key=key,
                hint="use 0 for switches, 1 or more for values, \"*\" for a trailing positional",
            )

    if (default := metadata.get("default", Unset)) is not Unset:
        if isinstance(default, str):
            default = [default]
        if not isinstance(default, Sequence) or not all(isinstance(item, str) for item in default):
            raise _invalid(key, "default", "must be a string or a list of strings", "quote every default value")
        metadata["default"] = list(default)


def _compile_argument(key, fields):
    if not isinstance(key, str) or not key.strip():
        raise MalformedDocumentError(
            "argument keys must be non-empty strings (got %r)" % (key,),
            title="malformed document",
            code=FaultCode.MALFORMED_DOCUMENT,
            key=key,
            hint="name every entry of 'args'",
        )
    if not isinstance(fields, Mapping):
        raise MalformedDocumentError(
            "argument %r must map to an object of fields" % key,
            title="malformed document",
            code=FaultCode.MALFORMED_DOCUMENT,
            key=key,
            hint="use {\"%s\": {}} for a plain positional" % key,
        )

    metadata = dict(fields)
    if unknown := sorted(metadata.keys() - _FIELDS):
        raise _invalid(key, unknown[0], "is not a known field", "known fields: %s" % ", ".join(sorted(_FIELDS)))

    _alias(key, metadata, "arg_action", "action")
    _alias(key, metadata, "default", "default_value")
    _sanitize_strings(key, metadata)
    _sanitize_spellings(key, metadata)
    _sanitize_semantics(key, metadata)

    return ArgumentSpec(
        key,
        metadata.get("long"),
        metadata.get("short"),
        metadata.get("value_name"),
        metadata.get("help"),
        required=metadata.get("required", False),
        action=metadata.get("arg_action", Action.SET),
        nargs=metadata.get("number_of_values", Unset),
        default=metadata.get("default"),
        env_var=metadata.get("env_var"),
    )


def _entries(where, field, object):
    """
    Yield (name, value) pairs from an ordered list of single-key objects or from an object.
    """
    if isinstance(object, Mapping):
        yield from object.items()
        return
    if not isinstance(object, Sequence) or isinstance(object, str):
        raise MalformedDocumentError(
            "%r field %r must be a list of single-key objects" % (where, field),
            title="malformed document",
            code=FaultCode.MALFORMED_DOCUMENT,
            key=where,
            hint="write %r as [{\"name\": {...}}, ...]" % field,
        )
    for entry in object:
        if not isinstance(entry, Mapping) or len(entry) != 1:
            raise MalformedDocumentError(
                "%r field %r entries must be objects with exactly one key" % (where, field),
                title="malformed document",
                code=FaultCode.MALFORMED_DOCUMENT,
                key=where,
                hint="split %r into one object per entry" % (entry,),
            )
        yield from entry.items()


def _builtins(arguments, version):
    """Return the builtin help/version specs that do not clash with declared ones."""
    keys = {argument.key for argument in arguments}
    spellings = {spelling for argument in arguments for spelling in argument.spellings}

    candidates = [("help", "h", Action.HELP, "print help and exit")]
    if version:
        candidates.append(("version", "V", Action.VERSION, "print version and exit"))

    builtins = []
    for long, short, action, help in candidates:
        if long in keys or "--" + long in spellings:
            continue
        short = short if "-" + short not in spellings else None
        builtins.append(ArgumentSpec(long, long, short, help=help, action=action))
    return builtins


def compile_schema(document, /, *, name=Unset):
    """
    Compile a parsed JSON document into a Schema (see module docstring for the shape).

    Parameters
    - document: Mapping — the decoded JSON object.
    - name: str (keyword-only) — fallback program name, used for subcommands.

    Raises
    - SchemaError subclasses, fail-fast, on the first violated rule.
    """
    where = coalesce(name, "document")
    if not isinstance(document, Mapping):
        raise MalformedDocumentError(
            "%r must be a JSON object" % where,
            title="malformed document",
            code=FaultCode.MALFORMED_DOCUMENT,
            key=where,
            hint="wrap the schema in {...}",
        )
    if unknown := sorted(document.keys() - _DOCUMENT_FIELDS):
        raise InvalidFieldError(
            "%r field %r is not a known field" % (where, unknown[0]),
            title="invalid field",
            code=FaultCode.INVALID_FIELD,
            key=where,
            field=unknown[0],
            hint="known fields: %s" % ", ".join(sorted(_DOCUMENT_FIELDS)),
        )
    if "about" in document and "description" in document:
        raise InvalidFieldError(
            "%r field 'about' duplicates 'description'" % where,
            title="invalid field",
            code=FaultCode.INVALID_FIELD,
            key=where,
            field="about",
            hint="keep only one of 'about' and 'description'",
        )

    metadata = {
        "name": document.get("name", Unset),
        "description": document.get("description", document.get("about", Unset)),
        "version": document.get("version", Unset),
        "executable": document.get("executable", Unset),
        "separator": document.get("separator", ","),
    }
    for field, object in metadata.items():
        if object is Unset:
            continue
        if not isinstance(object, str) or (field != "separator" and not object.strip()):
            raise InvalidFieldError(
                "%r field %r must be a non-empty string" % (where, field),
                title="invalid field",
                code=FaultCode.INVALID_FIELD,
                key=where,
                field=field,
                hint="quote the %r value" % field,
            )
    if len(metadata["separator"]) != 1:
        raise InvalidFieldError(
            "%r separator must be exactly one character" % where,
            title="invalid field",
            code=FaultCode.INVALID_FIELD,
            key=where,
            field="separator",
            hint="use a single character such as \",\" or \":\"",
        )

    if metadata["name"] is Unset:
        executable = metadata["executable"]
        metadata["name"] = coalesce(name, os.path.basename(executable) if executable else "command")

    arguments = [_compile_argument(key, fields) for key, fields in _entries(where, "args", document.get("args", []))]
    arguments += _builtins(arguments, metadata["version"])

    children = {}
    for child, subdocument in _entries(where, "subcommands", document.get("subcommands", {})):
        if not isinstance(child, str) or not child.strip() or child.startswith("-"):
            raise MalformedDocumentError(
                "%r subcommand names must be non-empty and not start with '-'" % where,
                title="malformed document",
                code=FaultCode.MALFORMED_DOCUMENT,
                key=child,
                hint="rename the subcommand %r" % (child,),
            )
        if child in children:
            raise DuplicatedKeyError(
                "%r subcommand %r is declared more than once" % (where, child),
                title="duplicated key",
                code=FaultCode.DUPLICATED_KEY,
                key=child,
                hint="rename one of the %r subcommands" % child,
            )
        subdocument = dict(subdocument) if isinstance(subdocument, Mapping) else subdocument
        if isinstance(subdocument, dict):
            if subdocument.setdefault("name", child) != child:
                raise InvalidFieldError(
                    "%r subcommand %r declares the different name %r" % (where, child, subdocument["name"]),
                    title="invalid field",
                    code=FaultCode.INVALID_FIELD,
                    key=child,
                    field="name",
                    hint="remove 'name' from %r or make it match the subcommand key" % child,
                )
            subdocument.setdefault("separator", metadata["separator"])
        children[child] = compile_schema(subdocument, name=child)

    if metadata["executable"] is Unset and not children:
        raise MissingExecutableError(
            "%r declares neither an executable nor subcommands" % where,
            title="missing executable",
            code=FaultCode.MISSING_EXECUTABLE,
            key=where,
            hint="add an 'executable' path to %r" % where,
        )

    schema = Schema(
        metadata["name"],
        arguments,
        description=coalesce(metadata["description"]),
        version=coalesce(metadata["version"]),
        executable=coalesce(metadata["executable"]),
        separator=metadata["separator"],
        children=children,
    )
    logger.debug("compiled schema %r: %d arguments, %d subcommands", schema.name, len(arguments), len(children))
    return schema


def load_schema(source, /):
    """
    Decode a JSON string (or bytes) and compile it.

    Raises
    - MalformedDocumentError when the text is not valid JSON (or bytes not valid UTF-8).
    - any other SchemaError raised by compile_schema().
    """
    try:
        document = json.loads(source)
    except json.JSONDecodeError as exception:
        raise MalformedDocumentError(
            "schema is not valid JSON (line %d, column %d): %s" % (exception.lineno, exception.colno, exception.msg),
            title="malformed document",
            code=FaultCode.MALFORMED_DOCUMENT,
            key="document",
            hint="check the JSON syntax near line %d" % exception.lineno,
        ) from None
    except UnicodeDecodeError as exception:
        raise MalformedDocumentError(
            "schema is not valid UTF-8 (byte offset %d): %s" % (exception.start, exception.reason),
            title="malformed document",
            code=FaultCode.MALFORMED_DOCUMENT,
            key="document",
            hint="encode the schema as UTF-8",
        ) from None
    return compile_schema(document)


__all__ = (
    "compile_schema",
    "load_schema",
)
