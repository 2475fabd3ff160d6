"""
Cliwire option matcher: classify argv tokens and resolve them against a CommandSpec.

Token grammar (priority order)
1. "--help" or "-?"                    → HelpRequest (wins regardless of position)
2. "--name", "--name=value", "--name:value"
                                       → LongOption(name, value | None)
3. "-x", "-x=value", "-x:value"        → ShortOption(char, value | None)
4. anything else ("-", "file", "-12", "-ab") → Positional(raw)

The value separator is the first '=' or ':' after the option name; everything after
it (separators included) is the value, so "--define=a=b" carries "a=b".

Matching
- Long names resolve through CommandSpec.option() ('-' and '_' are interchangeable);
  short aliases through CommandSpec.alias().
- A value-less option is legal only for bool (toggle) parameters, where it means True.
- Values are converted with the parameter's resolved converter; positionals are
  converted with the capture slot's converter and kept in argv order.
- The first fault aborts the whole match (nothing is bound):
  UnknownOptionError, MissingSeparatorError, UnexpectedPositionalError, ConversionError.
- An option given more than once keeps its last value; each repeat is reported as a
  DuplicatedOptionWarning on the resulting Match.
- When the spec has a version, a bare "--version" yields a VersionRequest, unless
  a help request is also present.
"""
import difflib
import re
from typing import NamedTuple

from .faults import *
from .utils import ordinal


class LongOption(NamedTuple):
    name: str
    value: str | None = None


class ShortOption(NamedTuple):
    char: str
    value: str | None = None


class Positional(NamedTuple):
    raw: str


class HelpRequest(NamedTuple):
    pass


class VersionRequest(NamedTuple):
    pass


class Match(NamedTuple):
    """
    Result of matching one argv list.

    - request: HelpRequest | VersionRequest | None
    - values: converted option values keyed by parameter name (only those given)
    - positionals: converted capture-slot values in argv order
    - warnings: non-fatal notices collected while matching
    """
    request: object
    values: dict
    positionals: list
    warnings: tuple = ()


_LONG = re.compile(r"--(?P<name>[^=:]+)(?:[=:](?P<value>.*))?", re.DOTALL)
_SHORT = re.compile(r"-(?P<char>[^-=:])(?:[=:](?P<value>.*))?", re.DOTALL)


def classify(token, /):
    """
    Classify one raw argv entry into a token (see the module docstring for the grammar).
    """
    if not isinstance(token, str):
        raise TypeError("classify() argument must be a string")
    if token in ("--help", "-?"):
        return HelpRequest()
    if token.startswith("--"):
        if match := _LONG.fullmatch(token):
            return LongOption(match["name"], match["value"])
        # "--", "--=x": an option with an empty name
        return LongOption("", token[3:] if len(token) > 2 else None)
    if match := _SHORT.fullmatch(token):
        return ShortOption(match["char"], match["value"])
    return Positional(token)


def tokenize(argv, /):
    """
    Classify every argv entry, preserving order.
    """
    return [classify(token) for token in argv]


class Matcher:
    """
    Resolves a token stream against one CommandSpec.

    The matcher is stateless between calls: every match() builds fresh values,
    positionals and warnings, and discards them when a fault is raised.
    """

    def __init__(self, spec, /):
        self._spec = spec

    @property
    def spec(self):
        return self._spec

    def match(self, argv, /):
        """
        Match argv (program name already stripped) and return a Match.

        Raises
        - CommandException subclasses on the first syntax fault.
        """
        tokens = tokenize(argv)

        if any(isinstance(token, HelpRequest) for token in tokens):
            return Match(HelpRequest(), {}, [])
        if self._spec.version is not None and LongOption("version") in tokens:
            return Match(VersionRequest(), {}, [])

        values = {}
        positionals = []
        warnings = []

        for index, token in enumerate(tokens, start=1):
            match token:
                case LongOption(name, value):
                    input = "--" + name
                    parameter = self._resolve(self._spec.option, name, input, index)
                case ShortOption(char, value):
                    input = "-" + char
                    parameter = self._resolve(self._spec.alias, char, input, index)
                case Positional(raw):
                    positionals.append(self._positional(raw, index))
                    continue
                case _:
                    raise RuntimeError("unexpected token")

            if value is None:
                if not parameter.toggle:
                    converter = self._spec.converter(parameter.name)
                    raise MissingSeparatorError(
                        "option %r at %s position requires a value" % (input, ordinal(index)),
                        title="missing value separator",
                        code=FaultCode.MISSING_SEPARATOR,
                        input=input,
                        index=index,
                        parameter=parameter.name,
                        hint="use %s=<%s> or %s:<%s>" % (input, converter.typename, input, converter.typename),
                    )
                object = True
            else:
                object = self._convert(parameter, value, input, index)

            if parameter.name in values:
                warnings.append(DuplicatedOptionWarning(
                    "option %r at %s position was already provided, the last value wins" % (input, ordinal(index)),
                    title="duplicated option",
                    code=FaultCode.DUPLICATED_OPTION,
                    input=input,
                    index=index,
                    parameter=parameter.name,
                    hint="keep a single %s to silence this warning" % parameter.long,
                ))
            values[parameter.name] = object

        return Match(None, values, positionals, tuple(warnings))

    def _resolve(self, lookup, key, input, index):
        try:
            return lookup(key)
        except KeyError:
            pass

        names = [parameter.long for parameter in self._spec.options]
        names += ["-" + parameter.short for parameter in self._spec.options if parameter.short]
        suggestions = difflib.get_close_matches(input, names, 5)
        try:
            hint = "did you mean %r? you can also run '%s --help' to see all options" % (
                suggestions[0], self._spec.name
            )
        except IndexError:
            hint = "try '%s --help' to see all available options" % self._spec.name

        raise UnknownOptionError(
            "unknown option %r at %s position" % (input, ordinal(index)),
            title="unknown option",
            code=FaultCode.UNKNOWN_OPTION,
            input=input,
            index=index,
            suggestions=suggestions,
            hint=hint,
        )

    def _positional(self, raw, index):
        if (capture := self._spec.capture) is None:
            raise UnexpectedPositionalError(
                "unexpected positional argument %r at %s position" % (raw, ordinal(index)),
                title="unexpected positional",
                code=FaultCode.UNEXPECTED_POSITIONAL,
                input=raw,
                index=index,
                hint="remove this extra value or run '%s --help' to see the expected usage" % self._spec.name,
            )
        return self._convert(capture, raw, None, index)

    def _convert(self, parameter, raw, input, index):
        converter = self._spec.converter(parameter.name)
        try:
            return converter.parse(raw)
        except Exception as exception:
            reason = getattr(exception, "reason", None) or str(exception) or type(exception).__name__
            if input is None:
                message = "positional value %r at %s position cannot be converted: %s" % (
                    raw, ordinal(index), reason
                )
                hint = "use a valid %s; run '%s --help' to see examples" % (converter.typename, self._spec.name)
            else:
                message = "value %r for option %r at %s position cannot be converted: %s" % (
                    raw, input, ordinal(index), reason
                )
                hint = "use a valid %s for %r (for example: %s=<%s>)" % (
                    converter.typename, input, input, converter.typename
                )
            raise ConversionError(
                message,
                title="conversion error",
                code=FaultCode.CONVERSION_FAILURE,
                input=input,
                index=index,
                parameter=parameter.name,
                raw=raw,
                reason=reason,
                hint=hint,
                exception=exception,
            ) from exception


__all__ = (
    "LongOption",
    "ShortOption",
    "Positional",
    "HelpRequest",
    "VersionRequest",
    "Match",
    "classify",
    "tokenize",
    "Matcher",
)
