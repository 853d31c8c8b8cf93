"""
Arguments module behavioral tests (kinds, defaults, storage, cardinality).

Scope
- Validate names and descriptions (short/long forms, malformed and missing names).
- Validate Flag toggling, Parametric state machine (unset / default / set).
- Validate default shape rules and multi_value ordering constraints.
- Validate values_count, is_correct, default_value and get_value indexing.
- Validate caller-bound storage (attribute, mapping key, mutable sequence).

Conventions
- Test method names follow CamelCase per project convention.
- Arguments are exercised directly; parser-level behavior lives in test/parser.py.
"""
import math
import unittest
from types import SimpleNamespace
from unittest import TestCase

from argweave import Flag, String, Int, Owned, BoundTo
from argweave import ConfigurationError, IndexOutOfRangeError, ValueParseError, FaultCode


class TestNames(TestCase):
    """Name and description normalization shared by every kind."""

    def testLongAndShortName(self):
        argument = String("-i", "--input")
        self.assertEqual(argument.short, "i")
        self.assertEqual(argument.name, "input")

    def testLongNameOnly(self):
        argument = Int("--number")
        self.assertIsNone(argument.short)
        self.assertEqual(argument.name, "number")

    def testOrderDoesNotMatter(self):
        argument = Flag("--verbose", "-v")
        self.assertEqual((argument.short, argument.name), ("v", "verbose"))

    def testHyphenatedLongName(self):
        self.assertEqual(String("--dry-run").name, "dry-run")

    def testMissingLongNameRejected(self):
        with self.assertRaises(ConfigurationError):
            Flag("-v")

    def testMalformedNamesRejected(self):
        for names in (("verbose",), ("-vv",), ("--_x",), ("--x_y",), ("---x",), ("--1x",), ("",)):
            with self.subTest(names=names):
                with self.assertRaises(ConfigurationError):
                    Flag(*names)

    def testRepeatedNamesRejected(self):
        with self.assertRaises(ConfigurationError):
            Flag("-a", "-b", "--all")
        with self.assertRaises(ConfigurationError):
            Flag("--all", "--every")

    def testNonStringNameRejected(self):
        with self.assertRaises(TypeError):
            Flag("--ok", 3)

    def testDescrNormalization(self):
        self.assertIsNone(String("--a").descr)
        self.assertIsNone(String("--a", descr="   ").descr)
        self.assertEqual(String("--a", descr=" input file ").descr, "input file")
        with self.assertRaises(TypeError):
            String("--a", descr=3)

    def testTypename(self):
        self.assertEqual(Flag.__typename__, "flag")
        self.assertEqual(String.__typename__, "string")
        self.assertEqual(Int.__typename__, "int")

    def testRepr(self):
        self.assertEqual(
            repr(Flag("-v", "--verbose")),
            "flag(short='v', name='verbose', descr=None, is_set=False, has_default=True)",
        )


class TestFlag(TestCase):

    def testDefaultsToFalse(self):
        flag = Flag("--verbose")
        self.assertFalse(flag.get_value())
        self.assertEqual(flag.default_value(), "false")
        self.assertFalse(flag.is_set)

    def testSetNegatesDefault(self):
        flag = Flag("--verbose")
        flag.set_value()
        self.assertTrue(flag.get_value())
        self.assertTrue(flag.is_set)

        inverted = Flag("--color").default(True)
        self.assertEqual(inverted.default_value(), "true")
        inverted.set_value("ignored")
        self.assertFalse(inverted.get_value())

    def testAlwaysCorrectAndValueless(self):
        flag = Flag("--verbose")
        self.assertTrue(flag.is_correct())
        self.assertEqual(flag.values_count(), 0)
        self.assertFalse(flag.is_positional())
        self.assertFalse(flag.is_multi_value())

    def testIndexIgnored(self):
        flag = Flag("--verbose")
        flag.set_value()
        self.assertTrue(flag.get_value(5))

    def testDefaultMustBeBoolean(self):
        with self.assertRaises(ConfigurationError):
            Flag("--verbose").default(1)

    def testBoundToMapping(self):
        storage = {}
        flag = Flag("--verbose").bind_storage(storage, "verbose")
        self.assertFalse(flag.owned)
        self.assertFalse(flag.get_value())
        self.assertEqual(storage, {})
        flag.set_value()
        self.assertEqual(storage, {"verbose": True})
        self.assertTrue(flag.get_value())

    def testBindRequiresKey(self):
        with self.assertRaises(ConfigurationError):
            Flag("--verbose").bind_storage([])


class TestSingleValue(TestCase):

    def testUnsetWithoutDefaultIsIncorrect(self):
        argument = String("--name")
        self.assertFalse(argument.is_correct())
        self.assertEqual(argument.values_count(), 1)
        self.assertEqual(argument.default_value(), "")
        with self.assertRaises(IndexOutOfRangeError):
            argument.get_value()

    def testDefaultAnswersReads(self):
        argument = Int("--jobs").default(4)
        self.assertTrue(argument.is_correct())
        self.assertEqual(argument.get_value(), 4)
        self.assertEqual(argument.default_value(), "4")

    def testLastValueWins(self):
        argument = String("--name")
        argument.set_value("first")
        argument.set_value("second")
        self.assertEqual(argument.get_value(), "second")
        self.assertTrue(argument.is_correct())

    def testOnlyIndexZeroAnswers(self):
        argument = String("--name").default("x")
        self.assertEqual(argument.get_value(0), "x")
        for index in (1, -1):
            with self.subTest(index=index):
                with self.assertRaises(IndexOutOfRangeError):
                    argument.get_value(index)

    def testIndexMustBeInteger(self):
        with self.assertRaises(TypeError):
            String("--name").default("x").get_value("0")

    def testDefaultShape(self):
        with self.assertRaises(ConfigurationError):
            String("--name").default(["a"])
        with self.assertRaises(ConfigurationError):
            Int("--jobs").default("4")
        with self.assertRaises(ConfigurationError):
            Int("--jobs").default(True)

    def testBoundToAttribute(self):
        target = SimpleNamespace()
        argument = Int("--jobs").default(2).bind_storage(target, "jobs")
        self.assertFalse(hasattr(target, "jobs"))
        self.assertEqual(argument.get_value(), 2)
        argument.set_value("8")
        self.assertEqual(target.jobs, 8)
        self.assertEqual(argument.get_value(), 8)

    def testBindRequiresKey(self):
        with self.assertRaises(ConfigurationError):
            String("--name").bind_storage([])


class TestMultiValue(TestCase):

    def testGreedyWithoutMinimum(self):
        argument = String("--files").multi_value()
        self.assertTrue(argument.is_multi_value())
        self.assertEqual(argument.values_count(), math.inf)
        self.assertEqual(argument.minimum, 0)
        self.assertTrue(argument.is_correct())

    def testMinimumCount(self):
        argument = String("--files").multi_value(2)
        self.assertEqual(argument.values_count(), 2)
        argument.set_value("a")
        self.assertFalse(argument.is_correct())
        argument.set_value("b")
        self.assertTrue(argument.is_correct())
        self.assertEqual([argument.get_value(0), argument.get_value(1)], ["a", "b"])

    def testDefaultCountsTowardsMinimum(self):
        argument = Int("--ports").multi_value(2).default([80, 443])
        self.assertTrue(argument.is_correct())
        self.assertEqual(argument.get_value(1), 443)
        self.assertEqual(argument.default_value(), "80 443")

    def testParsedValuesReplaceDefault(self):
        argument = String("--files").multi_value().default(["a", "b"])
        argument.set_value("c")
        self.assertEqual(argument.get_value(0), "c")
        with self.assertRaises(IndexOutOfRangeError):
            argument.get_value(1)

    def testDefaultShape(self):
        with self.assertRaises(ConfigurationError):
            String("--files").multi_value().default("a")
        with self.assertRaises(ConfigurationError):
            Int("--ports").multi_value().default([80, "443"])

    def testDefaultIsCopied(self):
        values = ["a"]
        argument = String("--files").multi_value().default(values)
        values.append("b")
        with self.assertRaises(IndexOutOfRangeError):
            argument.get_value(1)

    def testScalarDefaultBlocksMultiValue(self):
        with self.assertRaises(ConfigurationError):
            String("--files").default("a").multi_value()

    def testScalarBindingBlocksMultiValue(self):
        with self.assertRaises(ConfigurationError):
            String("--files").bind_storage({}, "files").multi_value()

    def testNegativeCountRejected(self):
        with self.assertRaises(ConfigurationError):
            String("--files").multi_value(-1)

    def testBoundToSequence(self):
        storage = ["kept"]
        argument = Int("--ports").multi_value().bind_storage(storage)
        argument.set_value("80")
        argument.set_value("443")
        self.assertEqual(storage, ["kept", 80, 443])
        self.assertEqual(argument.get_value(2), 443)

    def testSequenceBindingShape(self):
        with self.assertRaises(ConfigurationError):
            String("--files").multi_value().bind_storage({}, "files")
        with self.assertRaises(ConfigurationError):
            String("--files").multi_value().bind_storage("abc")

    def testReprShowsMinimum(self):
        argument = String("-i", "--input").multi_value(1)
        self.assertEqual(repr(argument).split(", ")[3], "minimum=1")


class TestInt(TestCase):

    def testSignedDecimals(self):
        argument = Int("--n").multi_value()
        for raw in ("42", "+7", "-3", "007"):
            argument.set_value(raw)
        self.assertEqual([argument.get_value(i) for i in range(4)], [42, 7, -3, 7])

    def testMalformedInteger(self):
        for raw in ("", "abc", "4.2", "0x10", " 1", "1e3"):
            with self.subTest(raw=raw):
                argument = Int("--n")
                with self.assertRaises(ValueParseError) as context:
                    argument.set_value(raw)
                self.assertEqual(context.exception.options["code"], FaultCode.MALFORMED_INTEGER)
                self.assertEqual(context.exception.options["input"], raw)
                self.assertFalse(argument.is_set)


class TestLifecycle(TestCase):

    def testModifiersRejectedOnceFrozen(self):
        argument = String("--name")
        argument._freeze()
        for modifier, args in (
                (argument.positional, ()),
                (argument.default, ("x",)),
                (argument.multi_value, ()),
                (argument.bind_storage, ({}, "name")),
        ):
            with self.subTest(modifier=modifier.__name__):
                with self.assertRaises(ConfigurationError):
                    modifier(*args)

    def testStorageTags(self):
        self.assertTrue(Owned().owned)
        self.assertFalse(BoundTo([]).owned)
        self.assertTrue(BoundTo([]).sequence)
        self.assertFalse(BoundTo({}, "k").sequence)
        with self.assertRaises(TypeError):
            BoundTo({})
        with self.assertRaises(TypeError):
            BoundTo(SimpleNamespace(), 3)


if __name__ == "__main__":
    unittest.main()
