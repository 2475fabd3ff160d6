"""
Cliwire command layer: bind a routine to a CommandSpec and run it.

What this module provides
- Command: pairs a CommandSpec with the routine it drives and offers:
  • dispatch(argv): the pure state machine (match, bind, invoke) returning an outcome.
  • __invoke__(prompt): the process-facing runner that prints and exits.
  • __call__: forwards straight to the routine, so a Command stays usable as a function.

- Outcomes (one per dispatch call, each with an exit `code`):
  • Invoked(code, result, warnings): the routine ran; code is derived from its result,
    warnings holds the notices raised while matching (e.g. duplicated options).
  • HelpShown(text): '--help' or '-?' was present; the routine never ran.
  • VersionShown(text): '--version' was present (only when the spec has a version).
  • Rejected(fault): a syntax fault aborted the call; the routine never ran.

- Factories and helpers:
  • command(*parameters, **options): decorator building the spec and the Command.
  • invoke(object, prompt): convenience runner for anything with __invoke__.

Exit codes
- 0 on help, version, and routines returning None (or a non-integral result).
- result & 0xFF for integral results (bool, int, objects with __index__). Objects that
  merely convert with int() (float, Decimal, Fraction, UUID) are not integral.
- 1 for every syntax fault.
- Routine exceptions are never caught here.

Quick start
    from cliwire import command, Parameter, capture, invoke

    @command(
        Parameter("count", int, 1, help="how many times"),
        Parameter("loud", bool, False),
        capture("names"),
        shell=True,
    )
    def greet(count, loud, names):
        \"\"\"Say hello to everyone.\"\"\"
        for name in names * count:
            print(("HELLO %s" if loud else "hello %s") % name)

    if __name__ == "__main__":
        invoke(greet)
"""
import inspect
import operator
import shlex
import sys
from collections.abc import Iterable
from typing import NamedTuple

from rich.console import Console

from .faults import *
from .faults import trigger as _trigger
from .formatter import render_help
from .matcher import HelpRequest, Matcher, VersionRequest
from .specs import CommandSpec, SpecType
from .utils import *


class Invoked(NamedTuple):
    code: int
    result: object
    warnings: tuple = ()


class HelpShown(NamedTuple):
    text: str

    @property
    def code(self):
        return 0


class VersionShown(NamedTuple):
    text: str

    @property
    def code(self):
        return 0


class Rejected(NamedTuple):
    fault: CommandException

    @property
    def code(self):
        return 1

    @property
    def kind(self):
        return self.fault.code

    @property
    def detail(self):
        return self.fault.message


def _status(result):
    """
    Return the exit status for an integral result, or None when the result is not integral.
    """
    try:
        return operator.index(result) & 0xFF
    except TypeError:
        return None


def _sanitize_command(cls, metadata):
    if not isinstance(metadata["spec"], CommandSpec):
        raise TypeError(f"{cls.__typename__} 'spec' must be a command spec")
    if not callable(metadata["routine"]):
        raise TypeError(f"{cls.__typename__} 'routine' must be callable")
    for name in ("shell", "colorful", "fancy", "echo"):
        if not isinstance(metadata[name], bool):
            raise TypeError(f"{cls.__typename__} {name!r} must be a boolean")


class Command(metaclass=SpecType):
    """
    A CommandSpec bound to the routine it dispatches to.

    Runtime flags
    - shell: behave like a process entry point (render faults to stderr, exit with the code).
    - colorful: style fault output with the rich palette (see __styles__ overrides).
    - fancy: draw fault output inside a panel.
    - echo: print non-integral routine results to stdout when run through __invoke__.
    """

    __introspectable__ = (
        "spec",
        "routine",
        "shell",
        "colorful",
        "fancy",
        "echo",
    )

    __displayable__ = (
        "spec",
        "shell",
        "colorful",
        "fancy",
    )

    def __new__(cls, spec, routine, /, *, shell=False, colorful=False, fancy=False, echo=True):
        metadata = {
            "spec": spec,
            "routine": routine,
            "shell": shell,
            "colorful": colorful,
            "fancy": fancy,
            "echo": echo,
        }
        _sanitize_command(cls, metadata)

        self = super().__new__(cls)
        for name, object in metadata.items():
            setattr(self, "_" + name, object)
        self._matcher = Matcher(spec)
        return self

    def __call__(self, *args, **kwargs):
        return self._routine(*args, **kwargs)

    def trigger(self, fault, /, **options):
        """
        Surface a fault with this command's runtime flags merged in.
        """
        _trigger(
            fault,
            **options,
            prog=self._spec.name,
            shell=self._shell,
            colorful=self._colorful,
            fancy=self._fancy,
        )

    def dispatch(self, argv, /):
        """
        Run one dispatch over argv (program name already stripped).

        Steps
        - Match the whole argv; a help request wins over everything, then a version request.
        - On a syntax fault, return Rejected without calling the routine.
        - Otherwise bind defaults overwritten by the converted values (plus the capture
          list), call routine(**bound) and map its result.

        Nothing is printed and nothing exits here: duplicate-option warnings are handed
        back on Invoked.warnings.

        Returns
        - Invoked | HelpShown | VersionShown | Rejected

        Raises
        - Whatever the routine raises, unchanged.
        """
        return self._dispatch(argv)

    def _dispatch(self, argv, notify=None, /):
        # notify(warning) is called for each warning before the routine runs.
        if isinstance(argv, str) or not isinstance(argv, Iterable):
            raise TypeError("dispatch() argument must be an iterable of strings")
        argv = list(argv)
        if not all(isinstance(token, str) for token in argv):
            raise TypeError("dispatch() argument must be an iterable of strings")

        try:
            outcome = self._matcher.match(argv)
        except CommandException as fault:
            return Rejected(fault)

        if isinstance(outcome.request, HelpRequest):
            return HelpShown(render_help(self._spec))
        if isinstance(outcome.request, VersionRequest):
            return VersionShown(self._spec.version)

        if notify is not None:
            for warning in outcome.warnings:
                notify(warning)

        bound = self._spec.defaults() | outcome.values
        if (capture := self._spec.capture) is not None:
            bound[capture.name] = outcome.positionals

        result = self._routine(**bound)
        return Invoked(_status(result) or 0, result, tuple(outcome.warnings))

    def __invoke__(self, prompt=Unset):
        """
        Execute this command like a program entry point.

        Parameters
        - prompt:
          • Unset: read tokens from sys.argv[1:].
          • str: shell-like string; split via shlex.split.
          • Iterable[str]: pre-tokenized sequence, used as-is.

        Behavior
        - Help and version texts go to stdout; non-integral results are echoed when echo is on.
        - Faults go through trigger(): rendered to stderr and exit 1 in shell mode,
          raised otherwise. Warnings go through trigger() before the routine runs.
        - In shell mode the process exits with the outcome code; otherwise the code is returned.
        """
        if prompt is Unset:
            tokens = sys.argv[1:]
        elif isinstance(prompt, str):
            tokens = shlex.split(prompt)
        elif isinstance(prompt, Iterable):
            tokens = list(prompt)
            if not all(isinstance(token, str) for token in tokens):
                raise TypeError("__invoke__() argument must be a string or an iterable of strings")
        else:
            raise TypeError("__invoke__() argument must be a string or an iterable of strings")

        outcome = self._dispatch(tokens, self.trigger)
        console = Console(markup=False, emoji=False, highlight=False, soft_wrap=True)

        match outcome:
            case HelpShown(text) | VersionShown(text):
                console.print(text)
            case Rejected(fault):
                self.trigger(fault)
            case Invoked(_, result) if self._echo and result is not None and _status(result) is None:
                console.print(str(result))

        if self._shell:
            sys.exit(outcome.code)
        return outcome.code


_RUNTIME = ("shell", "colorful", "fancy", "echo")


def command(*parameters, **options):
    """
    Build a Command from declared parameters, or return a decorator that does.

    Invocation modes
    - Decorator:
        @command(Parameter("count", int, 1), capture("files"), version="1.0")
        def tool(count, files): ...

    - Bare decorator (a command without options):
        @command
        def tool(): ...

    Parameters
    - *parameters: Parameter
      Ordered declarations; the routine receives each one as a keyword argument.
    - **options: CommandSpec settings (name, doc, help, short, usage, prefix, version,
      registry) plus the Command runtime flags (shell, colorful, fancy, echo).
      name defaults to the routine's __name__ and doc to its docstring.

    Returns
    - Command | Callable[[Callable], Command]
    """
    runtime = {name: options.pop(name) for name in _RUNTIME if name in options}

    @rename("command")
    def wrapper(routine, /):
        if not callable(routine):
            raise TypeError("@command() must be applied to a callable")
        settings = {
            "name": getattr(routine, "__name__", Unset),
            "doc": inspect.getdoc(routine) or Unset,
        } | options
        return Command(CommandSpec(parameters, **settings), routine, **runtime)

    # Bare @command: the only positional is the routine itself.
    if len(parameters) == 1 and callable(parameters[0]) and not options and not runtime:
        routine, parameters = parameters[0], ()
        return wrapper(routine)
    return wrapper


def invoke(object, prompt=Unset, /):
    """
    Convenience runner: call object.__invoke__(prompt) and return its exit code.

    Raises
    - TypeError: when 'object' does not implement __invoke__.
    """
    if hasattr(object, "__invoke__") and callable(object.__invoke__):
        return object.__invoke__(prompt)

    target = "argument" if prompt is Unset else "first argument"
    raise TypeError(f"invoke() {target} must implement __invoke__ method")


__all__ = (
    "Invoked",
    "HelpShown",
    "VersionShown",
    "Rejected",
    "Command",
    "command",
    "invoke",
)
