"""
Tests for the shared helpers.

Scope
- Unset sentinel: singleton identity, falsy semantics, union syntax, finality.
- coalesce(): only the sentinel is replaced.
- rename() / mirror(): naming of generated callables and read-only copies.
- ordinal(): spelled-out and suffixed forms used by fault messages.

Conventions
- Test method names follow CamelCase per project convention.
"""
import unittest
from unittest import TestCase

from argweave.utils import *


class UnsetTest(TestCase):
    """Behavioral tests for the Unset sentinel."""

    def testSingleton(self):
        self.assertIs(UnsetType(), Unset)
        self.assertIs(UnsetType(), UnsetType())

    def testFalsyAndRepr(self):
        self.assertFalse(Unset)
        self.assertEqual(repr(Unset), "Unset")

    def testNotEqualToOtherFalsyValues(self):
        for value in (None, 0, "", False, []):
            with self.subTest(value=value):
                self.assertNotEqual(Unset, value)

    def testUnionWithTypes(self):
        self.assertIsInstance(Unset, str | Unset)
        self.assertIsInstance("text", str | Unset)
        self.assertNotIsInstance(3, str | Unset)

    def testSubclassRejected(self):
        with self.assertRaises(TypeError):
            class Derived(UnsetType):  # NOQA: Intentional
                pass


class CoalesceTest(TestCase):

    def testReplacesUnset(self):
        self.assertEqual(coalesce(Unset, "fallback"), "fallback")
        self.assertIsNone(coalesce(Unset))

    def testKeepsFalsyValues(self):
        for value in (None, 0, "", False):
            with self.subTest(value=value):
                self.assertIs(coalesce(value, "fallback"), value)


class RenameTest(TestCase):

    def testDirectForm(self):
        def original():
            pass

        renamed = rename(original, "renamed")
        self.assertIs(renamed, original)
        self.assertEqual(renamed.__name__, "renamed")
        self.assertEqual(renamed.__qualname__, "renamed")

    def testDecoratorForm(self):
        @rename("pretty")
        def ugly():
            pass

        self.assertEqual(ugly.__name__, "pretty")

    def testInvalidArguments(self):
        with self.assertRaises(TypeError):
            rename(42, "name")
        with self.assertRaises(TypeError):
            rename(print, 42)
        with self.assertRaises(TypeError):
            rename()
        with self.assertRaises(TypeError):
            rename(print, "a", "b")


class MirrorTest(TestCase):

    def testReadOnlyDetachedCopy(self):
        class Holder:
            items = mirror("items")

            def __init__(self):
                self._items = ["a", ["b"]]

        holder = Holder()
        items = holder.items
        items.append("c")
        items[1].append("d")
        self.assertEqual(holder._items, ["a", ["b"]])
        with self.assertRaises(AttributeError):
            holder.items = []

    def testNameMustBeString(self):
        with self.assertRaises(TypeError):
            mirror(1)


class OrdinalTest(TestCase):

    def testSpelledOut(self):
        self.assertEqual(ordinal(1), "first")
        self.assertEqual(ordinal(2), "second")
        self.assertEqual(ordinal(3), "third")
        self.assertEqual(ordinal(10), "tenth")

    def testSuffixes(self):
        expected = {
            11: "11th",
            12: "12th",
            13: "13th",
            21: "21st",
            22: "22nd",
            23: "23rd",
            101: "101st",
            111: "111th",
            0: "0th",
        }
        for number, label in expected.items():
            with self.subTest(number=number):
                self.assertEqual(ordinal(number), label)

    def testRejectsNonIntegers(self):
        ordinal(1)
        with self.assertRaises(TypeError):
            ordinal(True)
        with self.assertRaises(TypeError):
            ordinal(1.0)


if __name__ == "__main__":
    unittest.main()
