r"""
Argshell schema model: the validated, immutable grammar a command line is matched against.

Overview
- Action: closed set of accumulation policies applied when an argument is matched.
  • SET: last occurrence wins.
  • APPEND: every occurrence's values accumulate in arrival order.
  • COUNT: occurrences are counted; no value is consumed.
  • SET_TRUE / SET_FALSE: presence-only switches.
  • HELP / VERSION: presence-only switches that stop matching and print help/version.
- ArgumentSpec: one declared argument (identity, spellings, arity, action, defaults).
- Schema: ordered unique specs plus program metadata and optional named children.

Invariants (enforced on construction, raised as SchemaError subclasses)
- ArgumentSpec
  • number_of_values == 0 if and only if the action is presence-only.
  • unbounded arity (Ellipsis) only on positional, value-bearing specs.
  • presence-only actions require a long or short spelling.
- Schema
  • no two specs share a key, a long spelling or a short spelling;
  • at most one unbounded positional and it is the last positional;
  • environment names are injective across bound specs.

Instances are read-only: every field is exposed through mirror() properties.
Nothing downstream ever looks at the raw document again; only these types.
"""
import functools
import operator
import re
from enum import Enum
from types import MappingProxyType

from .faults import *
from .utils import *


class Action(Enum):
    SET = "set"
    APPEND = "append"
    COUNT = "count"
    SET_TRUE = "set_true"
    SET_FALSE = "set_false"
    HELP = "help"
    VERSION = "version"

    @property
    def bearing(self):
        """True for actions that consume values."""
        return self in (Action.SET, Action.APPEND)

    @property
    def terminal(self):
        """True for actions that stop matching (help/version)."""
        return self in (Action.HELP, Action.VERSION)


def envname(key, /):
    """
    Transliterate an argument key into an environment variable name.

    Every character outside [A-Za-z0-9_] becomes '_', a leading character that is
    not a letter becomes '_', and the result is upper-cased.

    >>> envname("output-dir"), envname("2fa")
    ('OUTPUT_DIR', '_FA')
    """
    name = re.sub(r"[^A-Za-z0-9_]", "_", key)
    if name and not re.match(r"[A-Za-z_]", name):
        name = "_" + name[1:]
    return name.upper()


class SpecType(type):
    """
    Metaclass giving model classes read-only fields and stable representations.

    - __typename__ is derived from the class name (camel-case split with hyphens).
    - every name in __introspectable__ becomes a mirror() property over "_{name}".
    - __repr__/__rich_repr__ list the __displayable__ (or __introspectable__) fields.
    """
    __introspectable__ = ()
    __displayable__ = Unset

    def __new__(cls, name, bases, namespace, **options):
        self = super().__new__(
            cls,
            name,
            bases,
            namespace | {
                "__typename__": re.sub(r"(?<!^)(?=[A-Z])", r"-", name).lower(),
            } | {
                name: mirror(name) for name in namespace.get("__introspectable__", ())
            },
        )

        @rename("__repr__")
        def __repr__(self):
            return f"{type(self).__typename__}({
                ", ".join(map(functools.partial(operator.mod, "%s=%r"), self.__rich_repr__()))
            })"
        self.__repr__ = __repr__

        @rename("__rich_repr__")
        def __rich_repr__(self):
            for name in coalesce(type(self).__displayable__, type(self).__introspectable__):
                yield name, getattr(self, name)
        self.__rich_repr__ = __rich_repr__

        return self


class ArgumentSpec(metaclass=SpecType):
    """
    One declared argument.

    Fields
    - key: unique identifier, also the source of the environment name.
    - long / short: optional spellings without dashes ("name" → --name, "n" → -n).
      Absence of both marks the argument positional.
    - value_name: label used in help output.
    - help: one-line description used in help output.
    - required: a missing required argument is a MissingRequiredError.
    - action: an Action member.
    - nargs: values consumed per occurrence; an int >= 0, or Ellipsis (unbounded).
    - default: tuple of strings bound when the argument is never supplied, or None.
    - env_var: explicit environment name, or None to derive it from key.
    """

    __introspectable__ = (
        "key",
        "long",
        "short",
        "value_name",
        "help",
        "required",
        "action",
        "nargs",
        "default",
        "env_var",
    )

    __displayable__ = (
        "key",
        "long",
        "short",
        "required",
        "action",
        "nargs",
    )

    def __init__(
            self,
            key,
            /,
            long=None,
            short=None,
            value_name=None,
            help=None,
            *,
            required=False,
            action=Action.SET,
            nargs=Unset,
            default=None,
            env_var=None,
    ):
        self._key = key
        self._long = long
        self._short = short
        self._help = help
        self._required = bool(required)
        self._action = action
        self._nargs = coalesce(nargs, 1 if action.bearing else 0)
        self._default = tuple(default) if default is not None else None
        self._env_var = env_var
        self._value_name = value_name or envname(key)

        if self._nargs == 0 and action.bearing:
            raise ActionArityMismatchError(
                "argument %r takes no values but its action %r stores values" % (key, action.value),
                title="action and arity disagree",
                code=FaultCode.ACTION_ARITY_MISMATCH,
                key=key,
                hint="use a presence-only action (set_true, count) or set number_of_values >= 1",
            )
        if self._nargs != 0 and not action.bearing:
            raise ActionArityMismatchError(
                "argument %r takes values but its action %r is presence-only" % (key, action.value),
                title="action and arity disagree",
                code=FaultCode.ACTION_ARITY_MISMATCH,
                key=key,
                hint="use a value-bearing action (set, append) or set number_of_values to 0",
            )
        if self.positional and not action.bearing:
            raise ActionArityMismatchError(
                "positional argument %r cannot use the presence-only action %r" % (key, action.value),
                title="presence-only positional",
                code=FaultCode.ACTION_ARITY_MISMATCH,
                key=key,
                hint="give %r a long or short spelling" % key,
            )
        if self._nargs is Ellipsis and not self.positional:
            raise InvalidArityError(
                "option %r cannot take an unbounded number of values" % key,
                title="unbounded option",
                code=FaultCode.INVALID_ARITY,
                key=key,
                hint="use a fixed number_of_values with the append action and repeat the option",
            )
        if self._default is not None and not action.bearing:
            raise InvalidFieldError(
                "presence-only argument %r cannot declare a default" % key,
                title="invalid field",
                code=FaultCode.INVALID_FIELD,
                key=key,
                hint="remove 'default' from %r" % key,
            )

    @property
    def positional(self):
        return self._long is None and self._short is None

    @property
    def unbounded(self):
        return self._nargs is Ellipsis

    @property
    def spellings(self):
        """Command-line spellings, long first ("--name", "-n")."""
        spellings = []
        if self._long is not None:
            spellings.append("--" + self._long)
        if self._short is not None:
            spellings.append("-" + self._short)
        return tuple(spellings)

    @property
    def env(self):
        """Environment variable name for this argument."""
        return self._env_var or envname(self._key)

    @property
    def label(self):
        """Preferred display name: the first spelling, or the value name for positionals."""
        return self.spellings[0] if self.spellings else self._value_name


class Schema(metaclass=SpecType):
    """
    Ordered collection of ArgumentSpecs plus program metadata.

    Fields
    - name: program name used in usage lines and fault headers.
    - description / version: help and version metadata (None when absent).
    - executable: target path run after a successful match (None when the schema
      only routes to children).
    - separator: single character joining multi-value bindings.
    - arguments: tuple of ArgumentSpec in declaration order.
    - children: mapping of child name to Schema (subcommands).

    Derived lookups
    - switches: spelling ("--name"/"-n") → ArgumentSpec.
    - positionals: positional specs in declaration order.
    - parent / path: ancestry, root first.
    """

    __introspectable__ = (
        "name",
        "description",
        "version",
        "executable",
        "separator",
        "arguments",
        "children",
    )

    __displayable__ = (
        "name",
        "executable",
        "arguments",
        "children",
    )

    def __init__(
            self,
            name,
            arguments=(),
            /,
            description=None,
            version=None,
            executable=None,
            separator=",",
            children=None,
    ):
        self._name = name
        self._description = description
        self._version = version
        self._executable = executable
        self._separator = separator
        self._arguments = tuple(arguments)
        self._children = dict(children or {})
        self._parent = None

        keys = set()
        switches = {}
        envs = {}
        unbounded = None

        for argument in self._arguments:
            if argument.key in keys:
                raise DuplicatedKeyError(
                    "argument key %r is declared more than once" % argument.key,
                    title="duplicated key",
                    code=FaultCode.DUPLICATED_KEY,
                    key=argument.key,
                    hint="rename one of the %r entries" % argument.key,
                )
            keys.add(argument.key)

            for spelling in argument.spellings:
                if (other := switches.setdefault(spelling, argument)) is not argument:
                    raise DuplicatedSpellingError(
                        "spelling %r of argument %r is already used by %r" % (spelling, argument.key, other.key),
                        title="duplicated spelling",
                        code=FaultCode.DUPLICATED_SPELLING,
                        key=argument.key,
                        token=spelling,
                        hint="pick a different long or short name for %r" % argument.key,
                    )

            if argument.positional:
                if unbounded is not None:
                    raise MisplacedUnboundedError(
                        "positional %r follows the unbounded positional %r" % (argument.key, unbounded.key),
                        title="misplaced unbounded positional",
                        code=FaultCode.MISPLACED_UNBOUNDED,
                        key=unbounded.key,
                        hint="move %r after every other positional" % unbounded.key,
                    )
                if argument.unbounded:
                    unbounded = argument

            if argument.action.terminal:
                continue
            if (other := envs.setdefault(argument.env, argument)) is not argument:
                raise EnvNameCollisionError(
                    "arguments %r and %r both bind the environment variable %r" % (other.key, argument.key, argument.env),
                    title="environment name collision",
                    code=FaultCode.ENV_NAME_COLLISION,
                    key=argument.key,
                    hint="rename one of the keys or give it an explicit 'env_var'",
                )

        self._switches = MappingProxyType(switches)
        self._positionals = tuple(filter(lambda x: x.positional, self._arguments))

        for child in self._children.values():
            child._parent = self

    @property
    def switches(self):
        return self._switches

    @property
    def positionals(self):
        return self._positionals

    @property
    def parent(self):
        return self._parent

    @property
    def path(self):
        """Ancestry from root to this schema."""
        path = [schema := self]
        while schema.parent:
            path.append(schema := schema.parent)
        return tuple(reversed(path))

    @property
    def route(self):
        """Space-joined program route, e.g. 'deploy push'."""
        return " ".join(step.name for step in self.path)


__all__ = (
    "Action",
    "ArgumentSpec",
    "Schema",
    "envname",
)
