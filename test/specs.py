"""
Specs module tests (Parameter and CommandSpec construction and normalization).

Scope
- Validate Parameter metadata rules (names, defaults, shorts, capture slot).
- Validate CommandSpec validation (duplicates, capture count, reserved names).
- Validate help/short mappings, short alias assignment and converter resolution.

Conventions
- Test method names follow CamelCase per project convention.
"""

from __future__ import annotations

import copy
import unittest
from collections import Counter, OrderedDict, deque
from unittest import TestCase

from cliwire import CommandSpec, ConverterRegistry, Parameter, USAGE, capture
from cliwire.faults import UnsupportedTypeError
from cliwire.utils import Unset


def sample(**options):
    return CommandSpec((
        Parameter("foo", int, 1),
        Parameter("bar", float, 2.0),
        Parameter("baz", str, "hi"),
        Parameter("verb", bool, False),
        capture("args"),
    ), **{"name": "demo"} | options)


class TestParameter(TestCase):

    def testDefaultsAndProperties(self):
        parameter = Parameter("dry_run", bool, False, help="  only pretend  ")
        self.assertEqual(parameter.name, "dry_run")
        self.assertIs(parameter.type, bool)
        self.assertIs(parameter.default, False)
        self.assertEqual(parameter.help, "only pretend")
        self.assertEqual(parameter.long, "--dry-run")
        self.assertTrue(parameter.toggle)
        self.assertFalse(parameter.capture)

    def testNameMustBeIdentifier(self):
        with self.assertRaises(TypeError):
            Parameter(1, int, 0)
        with self.assertRaises(ValueError):
            Parameter("", int, 0)
        with self.assertRaises(ValueError):
            Parameter("two words", int, 0)
        with self.assertRaises(ValueError):
            Parameter("class", int, 0)

    def testHelpNameIsReserved(self):
        with self.assertRaises(ValueError):
            Parameter("help", bool, False)

    def testOptionRequiresDefault(self):
        with self.assertRaises(TypeError):
            Parameter("foo", int)

    def testDefaultMustMatchClassTag(self):
        with self.assertRaises(TypeError):
            Parameter("foo", int, "1")
        # ints are accepted where floats are declared
        self.assertEqual(Parameter("ratio", float, 2).default, 2)
        # non-class tags are not checked
        self.assertEqual(Parameter("ids", list[int], [1]).default, [1])

    def testBoolDefaultOnlyForBoolTag(self):
        for tag in (int, float):
            with self.assertRaises(TypeError, msg=tag):
                Parameter("count", tag, True)
        self.assertIs(Parameter("on", bool, True).default, True)
        with self.assertRaises(TypeError):
            Parameter("on", bool, 1)

    def testUnhashableTypeRejected(self):
        with self.assertRaises(TypeError):
            Parameter("foo", [], 0)

    def testShortValidation(self):
        self.assertEqual(Parameter("foo", int, 0, short="x").short, "x")
        self.assertEqual(Parameter("foo", int, 0, short="").short, "")
        for short in ("?", "-", "=", ":", "ab", " "):
            with self.assertRaises(ValueError, msg=short):
                Parameter("foo", int, 0, short=short)
        with self.assertRaises(TypeError):
            Parameter("foo", int, 0, short=1)

    def testCaptureSlotRules(self):
        slot = capture("files", help="inputs")
        self.assertTrue(slot.capture)
        self.assertFalse(slot.toggle)
        self.assertIs(slot.type, str)
        with self.assertRaises(TypeError):
            Parameter("files", str, "x", capture=True)
        with self.assertRaises(TypeError):
            Parameter("files", str, capture=True, short="f")

    def testReplaceRevalidates(self):
        parameter = Parameter("foo", int, 1)
        self.assertEqual(copy.replace(parameter, help="count").help, "count")
        with self.assertRaises(TypeError):
            copy.replace(parameter, default="one")

    def testDefaultIsCopiedOnRead(self):
        parameter = Parameter("ids", list[int], [1, 2])
        parameter.default.append(3)
        self.assertEqual(parameter.default, [1, 2])

    def testDefaultKeepsItsContainerType(self):
        for default in (deque([1, 2]), OrderedDict(a=1), Counter("aab"), frozenset({1})):
            parameter = Parameter("items", type(default), default)
            self.assertIs(type(parameter.default), type(default))
            self.assertEqual(parameter.default, default)

    def testRepr(self):
        self.assertTrue(repr(Parameter("foo", int, 1)).startswith("parameter(name='foo'"))


class TestCommandSpec(TestCase):

    def testBasicSettings(self):
        spec = sample(doc="  Does things.  ", prefix="  ")
        self.assertEqual(spec.name, "demo")
        self.assertEqual(spec.doc, "Does things.")
        self.assertEqual(spec.prefix, "  ")
        self.assertEqual(spec.usage, USAGE)
        self.assertIsNone(spec.version)
        self.assertEqual([parameter.name for parameter in spec.options], ["foo", "bar", "baz", "verb"])
        self.assertEqual(spec.capture.name, "args")

    def testDefaults(self):
        self.assertEqual(sample().defaults(), {"foo": 1, "bar": 2.0, "baz": "hi", "verb": False})

    def testDuplicateNamesRejected(self):
        with self.assertRaises(ValueError):
            CommandSpec((Parameter("foo", int, 1), Parameter("foo", str, "")))

    def testSingleCaptureSlot(self):
        with self.assertRaises(ValueError):
            CommandSpec((capture("a"), capture("b")))

    def testParametersMustBeParameters(self):
        with self.assertRaises(TypeError):
            CommandSpec(("foo",))
        with self.assertRaises(TypeError):
            CommandSpec("foo")

    def testVersionReservesParameterName(self):
        CommandSpec((Parameter("version", str, "x"),))
        with self.assertRaises(ValueError):
            CommandSpec((Parameter("version", str, "x"),), version="1.0")

    def testEmptyStringsRejected(self):
        with self.assertRaises(ValueError):
            CommandSpec((), name="  ")
        with self.assertRaises(ValueError):
            CommandSpec((), usage="")
        with self.assertRaises(ValueError):
            CommandSpec((), version="")
        with self.assertRaises(TypeError):
            CommandSpec((), doc=1)

    def testHelpMappingMerged(self):
        spec = sample(help={"foo": "how many"})
        self.assertEqual(spec.option("foo").help, "how many")
        self.assertEqual(spec.option("bar").help, "")

    def testUnknownHelpOrShortKeyRejected(self):
        with self.assertRaises(ValueError):
            sample(help={"nope": "text"})
        with self.assertRaises(ValueError):
            sample(short={"nope": "n"})
        with self.assertRaises(TypeError):
            sample(help=["foo"])

    def testAutomaticShortAliases(self):
        spec = sample()
        self.assertEqual(
            {parameter.name: parameter.short for parameter in spec.options},
            {"foo": "f", "bar": "b", "baz": "a", "verb": "v"},
        )
        self.assertEqual(spec.capture.short, Unset)

    def testShortAliasFallsBackToAlphabet(self):
        spec = CommandSpec((
            Parameter("alpha", int, 0),
            Parameter("apple", int, 0),
            Parameter("aa", int, 0),
        ))
        self.assertEqual([parameter.short for parameter in spec.options], ["a", "p", "b"])

    def testExplicitShortsClaimedFirst(self):
        spec = CommandSpec((
            Parameter("alpha", int, 0),
            Parameter("beta", int, 0, short="a"),
        ))
        self.assertEqual(spec.alias("a").name, "beta")
        self.assertEqual(spec.option("alpha").short, "l")

    def testShortMappingOverridesAndDisables(self):
        spec = sample(short={"foo": "x", "bar": ""})
        self.assertEqual(spec.option("foo").short, "x")
        self.assertEqual(spec.option("bar").short, "")
        # the freed letter goes to the next option that wants it
        self.assertEqual(spec.alias("b").name, "baz")

    def testDuplicateExplicitShortsRejected(self):
        with self.assertRaises(ValueError):
            sample(short={"foo": "x", "bar": "x"})

    def testShortAliasesAreInjective(self):
        names = ["a", "ab", "abc", "b", "ba", "c", "cab", "x1", "x2", "y_1", "zz"]
        spec = CommandSpec([Parameter(name, int, 0) for name in names])
        shorts = [parameter.short for parameter in spec.options if parameter.short]
        self.assertEqual(len(shorts), len(set(shorts)))
        self.assertNotIn("?", shorts)

    def testAliasesRunOutGracefully(self):
        spec = CommandSpec([Parameter("a%d" % index, int, 0) for index in range(40)])
        shorts = [parameter.short for parameter in spec.options]
        self.assertEqual(len(set(filter(None, shorts))), len(list(filter(None, shorts))))
        self.assertEqual(shorts[-1], "")

    def testLongNamesAcceptDashesAndUnderscores(self):
        spec = CommandSpec((Parameter("dry_run", bool, False),))
        self.assertIs(spec.option("dry-run"), spec.option("dry_run"))
        with self.assertRaises(KeyError):
            spec.option("dry")

    def testUnsupportedTypeFailsAtSetup(self):
        with self.assertRaises(UnsupportedTypeError):
            CommandSpec((Parameter("when", complex, 0j),))

    def testConvertersAreFrozenAtConstruction(self):
        registry = ConverterRegistry()
        registry.register(complex, complex)
        spec = CommandSpec((Parameter("when", complex, 0j),), registry=registry)
        registry.register(complex, lambda text: 1j, typename="other")
        self.assertEqual(spec.converter("when").typename, "complex")

    def testRegistryMustBeRegistry(self):
        with self.assertRaises(TypeError):
            CommandSpec((), registry={})


if __name__ == "__main__":
    unittest.main()
