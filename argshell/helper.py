"""
Argshell help and version renderers (rich).

render_help(schema) prints
- a usage line: route, [-h] style switches, [--name VALUE] options, positionals;
- the description paragraph;
- a subcommands table when the schema has children;
- an arguments section with spellings, value names, help text and a
  "(required)" marker.

render_version(schema) prints "<name> — <version>".

Styles can be overridden through __main__.__styles__ (same keys as below);
colorful=False strips every style.
"""
from collections import defaultdict

from rich.box import ROUNDED
from rich.console import Console, Group
from rich.table import Table
from rich.text import Text

from .utils import *

_STYLES = {
    "usage-label": "bold #FFD600",
    "program-name": "bold #FF4D94",
    "program-version": "bold #00E6FF",
    "usage-section": "#E5E7EB",
    "description-section": "#C8C8D0",
    "children-title": "bold #36C5F0",
    "children": "bold #E5E7EB",
    "group-label": "bold #FFD600",
    "argument-names": "bold #00E6FF",
    "argument-metavar": "italic #9CA3AF",
    "argument-description": "#C8C8D0",
    "required-marker": "#FF4DA6",
}


def _styles(colorful):
    styles = defaultdict(str, _STYLES | getattr(__import__("__main__"), "__styles__", {}))

    def styler(style):
        return styles[style] if colorful else ""

    return styler


def _metavar(argument):
    if argument.unbounded:
        return "%s..." % argument.value_name
    return " ".join([argument.value_name] * argument.nargs)


def usage(schema, /, colorful=True):
    """Return the usage line for 'schema' as rich Text."""
    styler = _styles(colorful)
    text = Text()
    text.append("usage", styler("usage-label")).append(": ")
    text.append(schema.route, styler("program-name"))

    for argument in filter(lambda x: not x.positional, schema.arguments):
        segment = argument.spellings[-1] if argument.nargs == 0 else "%s %s" % (argument.label, _metavar(argument))
        text.append(" ")
        text.append(segment if argument.required else "[%s]" % segment, styler("usage-section"))

    if schema.children:
        text.append(" ")
        text.append("<subcommand>", styler("usage-section"))

    for argument in schema.positionals:
        text.append(" ")
        text.append(_metavar(argument) if argument.required else "[%s]" % _metavar(argument), styler("usage-section"))

    return text


def render_help(schema, /, console=Unset, *, colorful=True):
    """Print the help screen for 'schema'."""
    console = coalesce(console, Console())
    styler = _styles(colorful)
    renders = [usage(schema, colorful).append("\n")]

    if schema.description:
        renders.append(Text(schema.description, styler("description-section")).append("\n"))

    if schema.children:
        table = Table(
            "name", "help",
            title=Text("subcommands", styler("children-title")),
            box=ROUNDED,
            header_style=styler("children-title"),
        )
        for name, child in schema.children.items():
            table.add_row(Text(name, styler("children")), Text(child.description or "run '%s --help' for details" % child.route))
        renders.append(table)

    sections = Text()
    for title, arguments in (
            ("arguments", schema.positionals),
            ("options", tuple(filter(lambda x: not x.positional, schema.arguments))),
    ):
        if not arguments:
            continue
        sections.append(title, styler("group-label")).append(":\n")
        for argument in arguments:
            line = Text("  ")
            if argument.positional:
                line.append(_metavar(argument), styler("argument-names"))
            else:
                line.append(", ".join(argument.spellings), styler("argument-names"))
                if argument.nargs:
                    line.append(" ").append(_metavar(argument), styler("argument-metavar"))
            if argument.help:
                line.append(" " * max(2, 24 - len(line))).append(argument.help, styler("argument-description"))
            if argument.required:
                line.append(" (required)", styler("required-marker"))
            sections.append(line).append("\n")
        sections.append("\n")

    if sections:
        sections.rstrip()
        renders.append(sections)

    console.print(Group(*renders))


def render_version(schema, /, console=Unset, *, colorful=True):
    """Print "<route> — <version>"; a subcommand without a version falls back to the root's."""
    console = coalesce(console, Console())
    styler = _styles(colorful)
    console.print(Text(" — ").join((
        Text(schema.route, styler("program-name")),
        Text(schema.version or schema.path[0].version or "unknown", styler("program-version")),
    )))


__all__ = (
    "usage",
    "render_help",
    "render_version",
)
