r"""
Cliwire help formatter: render usage/help text purely from a CommandSpec.

Template placeholders (see cliwire.specs.USAGE for the default template)
- {command}: the program name.
- {optPos}: "[optional-params] [<capture-name>]" when a capture slot exists,
  otherwise "[optional-params]".
- {options}: a column-aligned table, one row per option, preceded by the built-in
  help row (and the version row when the spec has a version) and followed by a
  "[name]" row for the capture slot when it has help text.
- {doc}: the command's doc string followed by a blank line, or nothing when the
  doc is empty.
Any other braces in the template are kept verbatim.

Table columns
- names: "-x=, --name=" for value-bearing options; "-x, --name" for bool toggles.
- type: the converter's typename.
- default: the converter's rendering of the default (parses back to the default).
  Renderings that are blank-padded or contain control characters ("\n", "\t") are
  shown as Python string literals instead; those cells do not parse back verbatim.
- help: the parameter's help text; extra lines hang under the help column.
Each column is padded to its widest cell across the whole table; trailing blanks are trimmed.

Every emitted line is prefixed with the spec's prefix.
"""
import re

_PLACEHOLDER = re.compile(r"\{(command|optPos|options|doc)\}")
_GUTTER = "  "


def _names(parameter):
    tail = "" if parameter.toggle else "="
    names = []
    if parameter.short:
        names.append("-" + parameter.short + tail)
    names.append(parameter.long + tail)
    return ", ".join(names)


def _cell(text):
    # Blank, padded or multi-line renderings would vanish in the table; quote them.
    if text and (not text.isprintable() or text.strip() != text):
        return repr(text)
    return text


def rows(spec, /):
    """
    Build the (names, type, default, help) cells of the options table.

    The capture slot gets a trailing "[name]" row only when it carries help text.
    """
    table = [("-?, --help", "", "", "print this help message and exit")]
    if spec.version is not None:
        table.append(("--version", "", "", "print version information and exit"))
    for parameter in spec.options:
        converter = spec.converter(parameter.name)
        table.append((
            _names(parameter),
            converter.typename,
            _cell(converter.render(parameter.default)),
            parameter.help,
        ))
    if (capture := spec.capture) is not None and capture.help:
        table.append(("[%s]" % capture.name, spec.converter(capture.name).typename, "", capture.help))
    return table


def render_options(spec, /):
    """
    Render the aligned options table (no trailing newline).
    """
    table = rows(spec)
    widths = [max(len(row[column]) for row in table) for column in range(3)]
    # Column where the help text starts; used for hanging continuation lines.
    indent = len(_GUTTER) + sum(widths) + len(_GUTTER) * 3

    lines = []
    for *cells, help in table:
        head, *rest = help.splitlines() or [""]
        line = _GUTTER + _GUTTER.join(cell.ljust(width) for cell, width in zip(cells, widths))
        lines.append((line + _GUTTER + head).rstrip())
        lines.extend((" " * indent + continuation).rstrip() for continuation in rest)
    return "\n".join(lines)


def render_optpos(spec, /):
    if (capture := spec.capture) is not None:
        return "[optional-params] [%s]" % capture.name
    return "[optional-params]"


def render_help(spec, /):
    """
    Render the full help text for a spec (no trailing newline).
    """
    values = {
        "command": spec.name,
        "optPos": render_optpos(spec),
        "options": render_options(spec),
        "doc": spec.doc + "\n\n" if spec.doc else "",
    }
    text = _PLACEHOLDER.sub(lambda match: values[match[1]], spec.usage)
    return "\n".join(spec.prefix + line for line in text.split("\n"))


__all__ = (
    "rows",
    "render_options",
    "render_optpos",
    "render_help",
)
