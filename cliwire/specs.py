r"""
Cliwire declarative specifications: parameters and commands.

Overview
- Parameter: one declared parameter of a command (name, type tag, default, short
  alias, help text, positional-capture marker).
- CommandSpec: the immutable description of one command (ordered parameters, doc,
  usage template, indentation prefix, optional version) plus the converters resolved
  for each parameter from a ConverterRegistry.
- capture(...): shorthand for the single positional-capture Parameter.

Metadata (sanitized on construction)
- Parameter
  • name: Python identifier, not a keyword, not "help" (reserved for --help).
  • type: hashable tag resolvable in the registry the command is built with.
  • default: required for options, forbidden for the capture slot; when the tag is a
    plain class the default must be an instance of it (int is accepted for float; a
    bool is accepted only for bool). Reads hand out deep copies of the default.
  • short: Unset (auto-assign) | "" (no alias) | one character other than '?', '-', '=', ':'.
  • help: Unset | str (trimmed; defaults to "").
- CommandSpec
  • parameters: unique names, at most one capture slot, "version" reserved when a
    version string is configured.
  • help / short: mappings from parameter name to help text / alias override; keys
    naming a nonexistent parameter are rejected with ValueError.
  • usage: template with {command}, {optPos}, {options} and {doc} placeholders.
  • prefix: indentation applied to every rendered help line (kept verbatim).

Short alias policy (deterministic)
- Explicit aliases (per-parameter or from the 'short' mapping) are claimed first;
  duplicates among them are a ValueError.
- Then, in declaration order, each remaining option takes the first free alphanumeric
  character of its own name, else the first free lowercase ASCII letter, else none.
- '?' is never assigned ('-?' requests help). The capture slot has no alias.

Quick example:
    >>> from cliwire.specs import CommandSpec, Parameter, capture
    >>> spec = CommandSpec((
    ...     Parameter("foo", int, 1, help="how many"),
    ...     Parameter("verbose", bool, False),
    ...     capture("files"),
    ... ), name="tool", doc="Frobnicate files.")
    >>> spec.alias("f").name, spec.option("verbose").short
    ('foo', 'v')
"""
import copy
import keyword
import os.path
import re
import string
import sys
from collections.abc import Iterable, Mapping

from .converters import ConverterRegistry, registry as _registry
from .utils import *

USAGE = "usage:\n  {command} {optPos}\n\n{doc}options:\n{options}"


def _record_repr(self):
    return "%s(%s)" % (type(self).__typename__, ", ".join("%s=%r" % pair for pair in self.__rich_repr__()))


def _record_rich_repr(self):
    for field in type(self).__displayable__:
        yield field, getattr(self, field)


class SpecType(type):
    """
    Metaclass for the declarative records of this package (Parameter, CommandSpec, Command).

    - __typename__: the class name split on capitals and hyphenated ("command-spec"),
      used as the subject of validation messages.
    - every field named in __introspectable__ becomes a read-only property over "_<field>".
    - __repr__/__rich_repr__ show the fields in __displayable__ (all fields by default).
    """

    def __new__(cls, name, bases, namespace, **options):
        fields = namespace.get("__introspectable__", ())
        defaults = {
            "__typename__": "-".join(re.findall(r"[A-Z][a-z0-9]*", name)).lower() or name.lower(),
            "__displayable__": fields,
            "__repr__": _record_repr,
            "__rich_repr__": _record_rich_repr,
        }
        defaults.update((field, mirror(field)) for field in fields)
        return super().__new__(cls, name, bases, defaults | namespace, **options)


def _sanitize_parameter(cls, metadata, /):
    """
    Internal: validate and normalize the metadata of one Parameter (mutates in place).

    Raises
    - TypeError: wrong field types, a missing option default, a capture default or alias,
      or a default that does not match a class type tag.
    - ValueError: malformed or reserved names, empty/illegal short aliases.
    """
    if not isinstance(name := metadata["name"], str):
        raise TypeError(f"{cls.__typename__} 'name' must be a string")
    elif not (name := name.strip()):
        raise ValueError(f"{cls.__typename__} 'name' cannot be empty")
    elif not name.isidentifier() or keyword.iskeyword(name):
        raise ValueError(f"{cls.__typename__} 'name' must be a valid identifier, got {name!r}")
    elif name == "help":
        raise ValueError(f"{cls.__typename__} 'name' cannot be 'help' (reserved for --help)")
    metadata["name"] = name

    try:
        hash(metadata["type"])
    except TypeError:
        raise TypeError(f"{cls.__typename__} {name!r} 'type' must be hashable") from None

    capture = metadata["capture"] = bool(metadata["capture"])
    default = metadata["default"]
    if capture and default is not Unset:
        raise TypeError(f"{cls.__typename__} {name!r} capture slot cannot have a default")
    if not capture:
        if default is Unset:
            raise TypeError(f"{cls.__typename__} {name!r} must have a default")
        tag = metadata["type"]
        if isinstance(tag, type) and tag is not object:
            if isinstance(default, bool):
                accepted = tag is bool
            else:
                accepted = isinstance(default, tag) or (tag is float and isinstance(default, int))
            if not accepted:
                raise TypeError(
                    f"{cls.__typename__} {name!r} default {default!r} is not a {tag.__name__}"
                )

    if not isinstance(short := metadata["short"], str | Unset):
        raise TypeError(f"{cls.__typename__} {name!r} 'short' must be a string")
    if capture and short:
        raise TypeError(f"{cls.__typename__} {name!r} capture slot cannot have a short alias")
    if isinstance(short, str):
        _check_short(cls, name, short)

    if not isinstance(help := metadata["help"], str | Unset):
        raise TypeError(f"{cls.__typename__} {name!r} 'help' must be a string")
    metadata["help"] = coalesce(help, "").strip()


def _check_short(cls, name, short, /):
    if short and (len(short) != 1 or short in "?-=:" or short.isspace()):
        raise ValueError(
            f"{cls.__typename__} {name!r} 'short' must be a single character other than '?', '-', '=' and ':'"
        )


class Parameter(metaclass=SpecType):
    """
    One declared parameter of a command.

    A Parameter is either an option (--name=value, -x=value, or bare --name for bool
    parameters) or the command's single positional-capture slot, which receives every
    positional token, converted through its type, as a list.

    Properties
    - name, type, default, short, help, capture (read-only; see module docstring).
    - long: the long option spelling, underscores rendered as dashes ("--dry-run").
    - toggle: True for bool-typed options, which may be given without a value.
    """

    __introspectable__ = (
        "name",
        "type",
        "default",
        "short",
        "help",
        "capture",
    )

    def __new__(
            cls,
            name,
            /,
            type=str,
            default=Unset,
            *,
            short=Unset,
            help=Unset,
            capture=False,
    ):
        metadata = {
            "name": name,
            "type": type,
            "default": default,
            "short": short,
            "help": help,
            "capture": capture,
        }
        _sanitize_parameter(cls, metadata)

        self = super().__new__(cls)
        for name, object in metadata.items():
            setattr(self, "_" + name, object)
        return self

    @property
    def default(self):
        # Deep copy keeps the default's own type (deque stays deque, Counter stays Counter).
        return copy.deepcopy(self._default)

    @property
    def long(self):
        return "--" + self._name.replace("_", "-")

    @property
    def toggle(self):
        return self._type is bool and not self._capture

    def __replace__(self, *unused, **overrides):
        assert not unused, "positional arguments are not allowed"
        fields = {name: getattr(self, "_" + name) for name in type(self).__introspectable__} | overrides
        return type(self)(fields.pop("name"), **fields)


def capture(name, /, type=str, *, help=Unset):
    """
    Declare the positional-capture slot: every non-option token, in argv order.
    """
    return Parameter(name, type, capture=True, help=help)


def _process_strings(cls, metadata):
    """
    Normalize the scalar string settings of a CommandSpec (mutates in place).

    - name: defaults to the basename of sys.argv[0]; trimmed, non-empty.
    - doc: defaults to ""; trimmed.
    - usage: defaults to USAGE; kept verbatim, non-empty.
    - prefix: defaults to ""; kept verbatim (it is indentation).
    - version: Unset -> None; trimmed, non-empty.
    """
    defaults = {
        "name": os.path.basename(sys.argv[0]) or "command",
        "doc": "",
        "usage": USAGE,
        "prefix": "",
        "version": None,
    }
    for name in ("name", "doc", "usage", "prefix", "version"):
        if not isinstance(object := metadata[name], str | Unset):
            raise TypeError(f"{cls.__typename__} {name!r} must be a string")
        if name in ("name", "doc", "version") and isinstance(object, str):
            object = object.strip()
            if not object and name != "doc":
                raise ValueError(f"{cls.__typename__} {name!r} cannot be empty")
        if name == "usage" and isinstance(object, str) and not object.strip():
            raise ValueError(f"{cls.__typename__} 'usage' cannot be empty")
        metadata[name] = coalesce(object, defaults[name])


def _process_parameters(cls, metadata):
    """
    Validate the ordered parameter list: types, unique names, one capture slot, reserved names.
    """
    if not isinstance(metadata["parameters"], Iterable) or isinstance(metadata["parameters"], str):
        raise TypeError(f"{cls.__typename__} 'parameters' must be an iterable of parameters")

    parameters = []
    names = set()
    capture = None
    for parameter in metadata["parameters"]:
        if not isinstance(parameter, Parameter):
            raise TypeError(f"{cls.__typename__} 'parameters' must be an iterable of parameters")
        if parameter.name in names:
            raise ValueError(f"{cls.__typename__} parameter name {parameter.name!r} is already in use")
        if parameter.capture:
            if capture is not None:
                raise ValueError(
                    f"{cls.__typename__} cannot capture positionals in both {capture!r} and {parameter.name!r}"
                )
            capture = parameter.name
        if parameter.name == "version" and metadata["version"] is not None:
            raise ValueError(f"{cls.__typename__} parameter name 'version' is reserved when a version is set")
        names.add(parameter.name)
        parameters.append(parameter)

    metadata["parameters"] = parameters


def _process_mappings(cls, metadata):
    """
    Merge the 'help' and 'short' mappings over the declared parameters.

    Keys must name declared parameters; an unknown key is a ValueError instead of
    being silently dropped.
    """
    names = {parameter.name for parameter in metadata["parameters"]}

    for field in ("help", "short"):
        mapping = coalesce(metadata.pop(field), {})
        if not isinstance(mapping, Mapping):
            raise TypeError(f"{cls.__typename__} {field!r} must be a mapping of parameter names to strings")
        for name, object in mapping.items():
            if name not in names:
                raise ValueError(f"{cls.__typename__} {field!r} refers to unknown parameter {name!r}")
            if not isinstance(object, str):
                raise TypeError(f"{cls.__typename__} {field!r} values must be strings")

        metadata["parameters"] = [
            copy.replace(parameter, **{field: mapping[parameter.name]}) if parameter.name in mapping else parameter
            for parameter in metadata["parameters"]
        ]


def _process_shorts(cls, metadata):
    """
    Resolve every option's short alias (see the module docstring for the policy).
    """
    taken = {}
    for parameter in metadata["parameters"]:
        if parameter.short:
            if parameter.short in taken:
                raise ValueError(
                    f"{cls.__typename__} short alias {parameter.short!r} of {parameter.name!r}"
                    f" is already used by {taken[parameter.short]!r}"
                )
            taken[parameter.short] = parameter.name

    resolved = []
    for parameter in metadata["parameters"]:
        if parameter.capture or parameter.short is not Unset:
            resolved.append(parameter)
            continue
        candidates = [char for char in parameter.name if char.isalnum()] + list(string.ascii_lowercase)
        short = next((char for char in candidates if char not in taken), "")
        if short:
            taken[short] = parameter.name
        resolved.append(copy.replace(parameter, short=short))

    metadata["parameters"] = tuple(resolved)


def _process_converters(cls, metadata):
    """
    Resolve each parameter's converter now, so unsupported types fail at setup time.
    """
    registry = coalesce(metadata.pop("registry"), _registry)
    if not isinstance(registry, ConverterRegistry):
        raise TypeError(f"{cls.__typename__} 'registry' must be a converter registry")
    metadata["converters"] = {
        parameter.name: registry.lookup(parameter.type) for parameter in metadata["parameters"]
    }


class CommandSpec(metaclass=SpecType):
    """
    Immutable, declarative description of one command.

    Built once at setup time; the Matcher, Dispatcher and Help Formatter only read it.

    Properties
    - name, parameters, doc, usage, prefix, version (read-only).
    - options: the non-capture parameters, in declaration order.
    - capture: the positional-capture Parameter, or None.

    Lookups
    - option(name): parameter addressed by a long option name ('-' and '_' interchangeable).
    - alias(char): parameter addressed by a short alias.
    - converter(name): the Converter resolved for a parameter at construction time.
    - defaults(): fresh mapping of option names to (copied) default values.
    """

    __introspectable__ = (
        "name",
        "parameters",
        "doc",
        "usage",
        "prefix",
        "version",
    )

    __displayable__ = (
        "name",
        "parameters",
        "doc",
        "version",
    )

    def __new__(
            cls,
            parameters,
            /,
            name=Unset,
            doc=Unset,
            help=Unset,
            short=Unset,
            usage=Unset,
            prefix=Unset,
            version=Unset,
            registry=Unset,
    ):
        """
        Build and validate a command description.

        Parameters
        - parameters: Iterable[Parameter]
          Ordered parameter declarations; at most one capture slot.
        - name: str
          Program name substituted for {command}; defaults to basename(sys.argv[0]).
        - doc: str
          Overall description substituted for {doc}.
        - help, short: Mapping[str, str]
          Per-parameter help text and short alias overrides ("" disables the alias).
        - usage: str
          Help template; see USAGE for the default.
        - prefix: str
          Indentation applied to every rendered help line.
        - version: str
          Enables --version, which prints this string.
        - registry: ConverterRegistry
          Source of converters; defaults to cliwire.converters.registry.

        Raises
        - UnsupportedTypeError when a type tag has no converter.
        - TypeError/ValueError on malformed settings (see module docstring).
        """
        metadata = {
            "parameters": parameters,
            "name": name,
            "doc": doc,
            "help": help,
            "short": short,
            "usage": usage,
            "prefix": prefix,
            "version": version,
            "registry": registry,
        }
        _process_strings(cls, metadata)
        _process_parameters(cls, metadata)
        _process_mappings(cls, metadata)
        _process_shorts(cls, metadata)
        _process_converters(cls, metadata)

        self = super().__new__(cls)
        for name, object in metadata.items():
            setattr(self, "_" + name, object)

        self._longs = {parameter.long: parameter for parameter in self._parameters if not parameter.capture}
        self._shorts = {parameter.short: parameter for parameter in self._parameters if parameter.short}
        return self

    @property
    def options(self):
        return tuple(parameter for parameter in self._parameters if not parameter.capture)

    @property
    def capture(self):
        return next((parameter for parameter in self._parameters if parameter.capture), None)

    def option(self, name, /):
        """
        Return the option addressed by a long name (without the leading dashes).

        Raises KeyError when no option matches.
        """
        return self._longs["--" + name.replace("_", "-")]

    def alias(self, char, /):
        """
        Return the option addressed by a short alias. Raises KeyError when unassigned.
        """
        return self._shorts[char]

    def converter(self, name, /):
        return self._converters[name]

    def defaults(self):
        return {parameter.name: parameter.default for parameter in self._parameters if not parameter.capture}


__all__ = (
    "USAGE",
    "Parameter",
    "CommandSpec",
    "capture",
)
