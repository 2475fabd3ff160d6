"""
Utils module tests (sentinel, coalescing, renaming, read-only mirrors, ordinals).

Conventions
- Test method names follow CamelCase per project convention.
"""

from __future__ import annotations

import copy
import pickle
import unittest
from collections import namedtuple
from unittest import TestCase

from cliwire.utils import Unset, UnsetType, coalesce, mirror, ordinal, rename


class TestUnset(TestCase):

    def testUnsetIsSingleton(self):
        self.assertIs(UnsetType("Unset"), Unset)
        self.assertEqual(len(UnsetType), 1)
        self.assertIs(copy.copy(Unset), Unset)
        self.assertIs(copy.deepcopy(Unset), Unset)

    def testUnsetIsFalseyAndPrintable(self):
        self.assertFalse(Unset)
        self.assertEqual(repr(Unset), "Unset")

    def testUnsetSurvivesPickling(self):
        self.assertIs(pickle.loads(pickle.dumps(Unset)), Unset)

    def testUnsetSupportsUnions(self):
        self.assertTrue(isinstance("x", str | Unset))
        self.assertTrue(isinstance(Unset, str | Unset))
        self.assertFalse(isinstance(1, str | Unset))

    def testUnsetTypeIsSealed(self):
        with self.assertRaises(TypeError):
            class Subclass(UnsetType):  # NOQA: F-841
                pass


class TestHelpers(TestCase):

    def testCoalescePreservesFalseyValues(self):
        self.assertEqual(coalesce(Unset, "fallback"), "fallback")
        self.assertIsNone(coalesce(Unset))
        self.assertIsNone(coalesce(None, "fallback"))
        self.assertEqual(coalesce(0, 5), 0)
        self.assertEqual(coalesce("", "x"), "")

    def testRenameDecorator(self):
        @rename("decorated")
        def other():
            pass

        self.assertEqual(other.__name__, "decorated")
        self.assertEqual(other.__qualname__, "decorated")

    def testRenameRejectsNonStrings(self):
        with self.assertRaises(TypeError):
            rename(1)

    def testMirrorCopiesContainers(self):
        class Holder:
            items = mirror("items")
            pair = mirror("pair")

        Point = namedtuple("Point", "x y")
        holder = Holder()
        holder._items = [1, [2, 3]]
        holder._pair = Point(1, [2])

        items = holder.items
        items[1].append(4)
        self.assertEqual(holder._items, [1, [2, 3]])
        self.assertIsInstance(holder.pair, Point)
        self.assertIsNot(holder.pair.y, holder._pair.y)

        with self.assertRaises(AttributeError):
            holder.items = []

    def testOrdinalWordsAndSuffixes(self):
        self.assertEqual(ordinal(1), "first")
        self.assertEqual(ordinal(3), "third")
        self.assertEqual(ordinal(10), "tenth")
        self.assertEqual(ordinal(11), "11th")
        self.assertEqual(ordinal(12), "12th")
        self.assertEqual(ordinal(21), "21st")
        self.assertEqual(ordinal(22), "22nd")
        self.assertEqual(ordinal(23), "23rd")
        self.assertEqual(ordinal(111), "111th")
        self.assertEqual(ordinal(101), "101st")


if __name__ == "__main__":
    unittest.main()
