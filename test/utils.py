"""
Tests for the internal utilities.

This module verifies the guarantees the rest of the package relies on:
- Unset is a falsy, final singleton distinct from None.
- coalesce() only replaces Unset.
- mirror() exposes read-only copies of backing containers.
- splitnames() accepts the separators used by the setup helpers.
"""
import copy
import unittest
from unittest import TestCase

from tokopt.utils import *


class TestUnset(TestCase):
    """Semantics of the Unset sentinel."""

    def testSingleton(self):
        self.assertIs(UnsetType(), Unset)
        self.assertIs(copy.copy(Unset), Unset)
        self.assertIs(copy.deepcopy(Unset), Unset)

    def testFalsy(self):
        self.assertFalse(Unset)
        self.assertIsNot(Unset, None)

    def testRepr(self):
        self.assertEqual(repr(Unset), "Unset")

    def testFinal(self):
        with self.assertRaises(TypeError):
            type("Subclass", (UnsetType,), {})

    def testUnion(self):
        self.assertIsInstance("x", str | Unset)
        self.assertIsInstance(Unset, str | Unset)
        self.assertNotIsInstance(1, str | Unset)


class TestHelpers(TestCase):
    """coalesce(), rename(), mirror() and splitnames()."""

    def testCoalesce(self):
        self.assertEqual(coalesce(Unset, "fallback"), "fallback")
        self.assertIsNone(coalesce(None, "fallback"))
        self.assertEqual(coalesce(0, 1), 0)
        self.assertIsNone(coalesce(Unset))

    def testRename(self):
        @rename("renamed")
        def original():
            pass

        self.assertEqual(original.__name__, "renamed")
        self.assertEqual(original.__qualname__, "renamed")
        with self.assertRaises(TypeError):
            rename(1, "x")

    def testMirror(self):
        class Holder:
            items = mirror("items")
            names = mirror("names")

            def __init__(self):
                self._items = {"a"}
                self._names = ["x"]

        holder = Holder()
        self.assertEqual(holder.items, frozenset({"a"}))
        self.assertEqual(holder.names, ("x",))
        with self.assertRaises(AttributeError):
            holder.items = set()

    def testSplitNames(self):
        self.assertEqual(splitnames("aa, bb"), ("aa", "bb"))
        self.assertEqual(splitnames("a;b:c d,,e"), ("a", "b", "c", "d", "e"))
        self.assertEqual(splitnames(""), ())
        with self.assertRaises(TypeError):
            splitnames(["aa"])


if __name__ == "__main__":
    unittest.main()
