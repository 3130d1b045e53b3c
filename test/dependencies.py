"""
Dependency validator behavioral tests.

Scope
- Validate requires-all, must-not-co-occur and standalone checks over a queue.
- Validate parser-wide groups (all of / any of) and the empty-queue case.
- Validate deterministic, sorted messages independent of input order.

Conventions
- Test method names follow CamelCase per project convention.
- Queues are built from plain Option instances; no parser is involved.
"""
import unittest
from unittest import TestCase

from tokopt import Option
from tokopt.dependencies import validate
from tokopt.faults import (
    MissingOptionsError,
    MissingRequirementsError,
    UnwantedOptionsError,
    StandaloneOptionError,
    RequiredOptionsError,
    RequiredAnyOptionError,
)


def _options(*names):
    return {name: Option(lambda: None, name) for name in names}


class TestValidate(TestCase):
    """Behavioral tests for validate()."""

    def setUp(self):
        self.options = _options("a_b", "aa", "bb", "b_only", "standalone")
        self.options["a_b"].require("aa", "bb")
        self.options["b_only"].exclude("a_b", "aa")
        self.options["standalone"].isolate()

    def queue(self, *names):
        return [self.options[name] for name in names]

    def testEmptyQueueIsValid(self):
        self.assertEqual(validate([]), [])

    def testMissingRequirementsAreCombined(self):
        faults = validate(self.queue("a_b"))
        self.assertEqual(len(faults), 1)
        self.assertIsInstance(faults[0], MissingRequirementsError)
        self.assertEqual(faults[0].message, 'option "a_b" requires also: "aa", "bb"')

    def testOnlyMissingRequirementsAreListed(self):
        faults = validate(self.queue("bb", "a_b"))
        self.assertEqual(faults[0].message, 'option "a_b" requires also: "aa"')

    def testSatisfiedRequirements(self):
        self.assertEqual(validate(self.queue("a_b", "aa", "bb")), [])
        self.assertEqual(validate(self.queue("bb", "aa", "a_b")), [])

    def testUnwantedOptionsAreCombinedAndSorted(self):
        faults = validate(self.queue("b_only", "aa", "bb", "a_b"))
        self.assertEqual(len(faults), 1)
        self.assertIsInstance(faults[0], UnwantedOptionsError)
        self.assertEqual(faults[0].message, 'option "b_only" can\'t be used with: "a_b", "aa"')

    def testStandaloneWithOthers(self):
        faults = validate(self.queue("standalone", "bb", "aa"))
        self.assertEqual(len(faults), 1)
        self.assertIsInstance(faults[0], StandaloneOptionError)
        self.assertEqual(
            faults[0].message,
            'option "standalone" can\'t be used with other options, but specified with: "aa", "bb"'
        )

    def testStandaloneAlone(self):
        self.assertEqual(validate(self.queue("standalone")), [])
        self.assertEqual(validate(self.queue("standalone", "standalone")), [])

    def testRepeatedOptionIsCheckedOnce(self):
        faults = validate(self.queue("a_b", "a_b"))
        self.assertEqual(len(faults), 1)

    def testSelfIsExcludedFromOthers(self):
        self.options["aa"].require("bb")
        faults = validate(self.queue("aa", "aa"))
        self.assertEqual(faults[0].message, 'option "aa" requires also: "bb"')

    def testRequireAll(self):
        faults = validate(self.queue("aa"), every=["a_b", "aa", "bb"])
        self.assertEqual(len(faults), 1)
        self.assertIsInstance(faults[0], RequiredOptionsError)
        self.assertIn('(missing: "a_b", "bb")', faults[0].message)
        self.assertEqual(validate(self.queue("aa", "bb"), every=["aa", "bb"]), [])

    def testRequireAnyOf(self):
        faults = validate(self.queue("bb"), some=["aa", "a_b"])
        self.assertEqual(len(faults), 1)
        self.assertIsInstance(faults[0], RequiredAnyOptionError)
        self.assertEqual(validate(self.queue("aa"), some=["aa", "a_b"]), [])

    def testEmptyQueueWithRequirements(self):
        faults = validate([], every=["aa"])
        self.assertEqual(len(faults), 1)
        self.assertIsInstance(faults[0], MissingOptionsError)
        faults = validate([], some=["aa"])
        self.assertIsInstance(faults[0], MissingOptionsError)

    def testEveryViolationIsReported(self):
        faults = validate(self.queue("a_b", "b_only"))
        self.assertEqual(
            [type(fault) for fault in faults],
            [MissingRequirementsError, UnwantedOptionsError],
        )


if __name__ == "__main__":
    unittest.main()
