from rich.pretty import pprint

from cliwire import *

__prog__ = "demo"


@command(
    Parameter("foo", int, 1),
    Parameter("bar", float, 2.0),
    Parameter("baz", str, "hi"),
    Parameter("verb", bool, False),
    capture("args"),
    help={
        "foo": "how many times to repeat",
        "bar": "scale factor",
        "baz": "greeting to print",
        "verb": "print the bound values first",
        "args": "words to greet",
    },
    version="0.1.0",
    shell=True,
    colorful=True,
)
def demo(foo, bar, baz, verb, args):
    """Print a greeting for every positional argument."""
    if verb:
        pprint(dict(foo=foo, bar=bar, baz=baz, verb=verb, args=args))
    for arg in args * foo:
        print(f"{baz} {arg} ({bar * len(arg):g})")


if __name__ == '__main__':
    invoke(demo)
