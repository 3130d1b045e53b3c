"""
Option descriptor behavioral tests.

Scope
- Validate slot construction from callback signatures (kinds, defaults, context).
- Validate usage strings, all-or-nothing extraction and optional-slot rewinding.
- Validate dependency-set bookkeeping and metadata sanitization.

Conventions
- Test method names follow CamelCase per project convention.
- Tests use the public API (Option, Kind, TokenStream, compose).
"""
import unittest
from unittest import TestCase

from tokopt import (
    Option,
    Kind,
    ExtractionError,
    SelfDependencyError,
    TokenStream,
    compose,
    get_next_token,
    UInt,
    Char,
)


def _stream(*arguments):
    return TokenStream(compose(arguments))


class TestOptionConstruction(TestCase):
    """Slots, names and usage derived at construction."""

    def testSlotsFollowAnnotations(self):
        def callback(letter: Char, offset: UInt, ratio: float, label):
            pass

        option = Option(callback, "go", "goes")
        self.assertEqual([slot.kind for slot in option.slots], [Kind.CHAR, Kind.UINT, Kind.DOUBLE, Kind.STRING])
        self.assertEqual(option.usage, "<char> <unsigned int> <double> <string>")

    def testNoParameters(self):
        option = Option(lambda: None, "bare")
        self.assertEqual(option.slots, ())
        self.assertEqual(option.usage, "")

    def testOptionalSlotUsage(self):
        def callback(count: int = 14):
            pass

        self.assertEqual(Option(callback, "dp").usage, "<int>(optional=14)")

    def testAliases(self):
        option = Option(lambda: None, "a,optiona")
        self.assertEqual(option.names, ("a", "optiona"))
        self.assertEqual(option.name, "a")

    def testDefaultOption(self):
        self.assertTrue(Option(lambda: None, "").default)
        self.assertFalse(Option(lambda: None, "x").default)

    def testDuplicateAliasesRaise(self):
        with self.assertRaises(ValueError):
            Option(lambda: None, "a,a")

    def testQuotedNameRaises(self):
        with self.assertRaises(ValueError):
            Option(lambda: None, 'say"hi')

    def testTooManyParametersRaise(self):
        def callback(a: int, b: int, c: int, d: int, e: int, f: int):
            pass

        with self.assertRaises(TypeError):
            Option(callback, "six")

    def testFiveParametersAreAccepted(self):
        def callback(a: int, b: int, c: int, d: int, e: int):
            pass

        self.assertEqual(len(Option(callback, "five").slots), 5)

    def testUnsupportedAnnotationRaises(self):
        def callback(flag: bool):
            pass

        with self.assertRaises(TypeError):
            Option(callback, "flag")

    def testKeywordOnlyParameterRaises(self):
        def callback(*, value: int):
            pass

        with self.assertRaises(TypeError):
            Option(callback, "kw")

    def testNonCallableRaises(self):
        with self.assertRaises(TypeError):
            Option(None, "nothing")

    def testEmptyDescriptionRaises(self):
        with self.assertRaises(ValueError):
            Option(lambda: None, "x", "   ")

    def testParameterDocumentation(self):
        def callback(letter: Char, num: int):
            pass

        Option(callback, "b", "@brief takes 2 arguments. @param letter some letter. @param num a number.")
        Option(callback, "c", "@brief takes 2 arguments.")
        with self.assertRaises(ValueError):
            Option(callback, "d", "@brief takes 2 arguments. @param letter some letter.")

    def testContextIsNotASlot(self):
        def callback(target, value: int):
            pass

        option = Option(callback, "ctx", context=[])
        self.assertEqual(option.usage, "<int>")

    def testContextRequiresFirstParameter(self):
        with self.assertRaises(TypeError):
            Option(lambda: None, "ctx", context=object())

    def testRepr(self):
        self.assertTrue(repr(Option(lambda: None, "x")).startswith("option("))


class TestOptionExtraction(TestCase):
    """Extraction and execution."""

    def testExtractLeftToRight(self):
        def callback(letter: Char, value: float, text: str):
            pass

        option = Option(callback, "mix")
        self.assertEqual(option.extract(_stream("c", "-1.5", "some text")), ("c", -1.5, "some text"))

    def testFailureAbortsWholeOption(self):
        def callback(first: int, second: int):
            pass

        option = Option(callback, "pair")
        with self.assertRaises(ExtractionError) as context:
            option.extract(_stream("1", "x"))
        self.assertEqual(context.exception.usage, "<int>")

    def testOptionalSlotUsesDefaultWhenMissing(self):
        def callback(count: int = 14):
            pass

        self.assertEqual(Option(callback, "dp").extract(_stream()), (14,))

    def testOptionalSlotRewindsOnMismatch(self):
        def callback(count: int = 14):
            pass

        stream = _stream("other")
        self.assertEqual(Option(callback, "dp").extract(stream), (14,))
        self.assertEqual(get_next_token(stream), "other")

    def testOptionalSlotLeavesReservedNames(self):
        def callback(text: str = "none"):
            pass

        stream = _stream("next")
        self.assertEqual(Option(callback, "dp").extract(stream, reserved={"next"}), ("none",))
        self.assertEqual(get_next_token(stream), "next")

    def testOptionalSlotTakesValue(self):
        def callback(count: int = 14):
            pass

        self.assertEqual(Option(callback, "dp").extract(_stream("3")), (3,))

    def testExecutePassesValues(self):
        received = []

        def callback(a: int, b: str):
            received.append((a, b))

        option = Option(callback, "rec")
        option.execute((1, "x"))
        self.assertEqual(received, [(1, "x")])

    def testExecutePassesContextFirst(self):
        received = []

        def callback(target, value: int):
            target.append(value)

        option = Option(callback, "ctx", context=received)
        option.execute((5,))
        self.assertEqual(received, [5])

    def testExecuteChecksArity(self):
        option = Option(lambda value: None, "one")
        with self.assertRaises(TypeError):
            option.execute(())

    def testOptionIsCallable(self):
        option = Option(lambda value: value * 2, "double")
        self.assertEqual(option(4), 8)


class TestOptionDependencies(TestCase):
    """Dependency-set bookkeeping."""

    def testRequireAndExclude(self):
        option = Option(lambda: None, "a_b")
        option.require("aa", "bb")
        option.exclude("cc")
        self.assertEqual(option.required, frozenset({"aa", "bb"}))
        self.assertEqual(option.unwanted, frozenset({"cc"}))

    def testDependencySetsAreReadOnlyViews(self):
        option = Option(lambda: None, "a_b")
        option.require("aa")
        with self.assertRaises(AttributeError):
            option.required.add("bb")
        self.assertEqual(option.required, frozenset({"aa"}))

    def testSelfDependencyRaises(self):
        option = Option(lambda: None, "a,optiona")
        with self.assertRaises(SelfDependencyError):
            option.require("optiona")
        with self.assertRaises(SelfDependencyError):
            option.exclude("a")

    def testRequireAndExcludeSameNameRaises(self):
        option = Option(lambda: None, "a_b")
        option.require("aa")
        with self.assertRaises(ValueError):
            option.exclude("aa")

    def testIsolate(self):
        option = Option(lambda: None, "standalone")
        self.assertFalse(option.standalone)
        option.isolate()
        self.assertTrue(option.standalone)


if __name__ == "__main__":
    unittest.main()
