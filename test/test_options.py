"""
Option descriptor tests (settings schema, implied defaults, validation, introspection).

Scope
- Action-implied nargs/default/dest and "explicit settings always win".
- dest derivation from the longest spelling.
- Construction errors: unknown settings, bad spellings, bad arity, callbacks.
- Read-only introspection helpers used by help output and messages.

Conventions
- Test method names follow CamelCase per project convention.
"""
import unittest
from unittest import TestCase

from optnaut import Action, Option, ConfigurationError, SUPPRESS_HELP
from optnaut.utils import Unset


def _callback(option, spelling, value, parser):
    pass


class TestImpliedSettings(TestCase):
    """Settings each action implies when the caller leaves them out."""

    def testStoreIsTheDefaultAction(self):
        option = Option("-o", "--output")
        self.assertIs(option.action, Action.STORE)
        self.assertEqual(option.nargs, 1)
        self.assertIs(option.default, Unset)
        self.assertEqual(option.dest, "output")

    def testImpliedTable(self):
        expectations = {
            "store_const": (0, Unset),
            "store_true": (0, False),
            "store_false": (0, True),
            "append": (1, []),
            "append_const": (0, []),
            "count": (0, 0),
        }
        for action, (nargs, default) in expectations.items():
            with self.subTest(action=action):
                option = Option("--flag", action=action)
                self.assertEqual(option.nargs, nargs)
                if default is Unset:
                    self.assertIs(option.default, Unset)
                else:
                    self.assertEqual(option.default, default)
                self.assertEqual(option.dest, "flag")

    def testTerminalActionsHaveNoDest(self):
        self.assertIsNone(Option("-h", "--help", action="help").dest)
        self.assertIsNone(Option("--version", action="version").dest)
        self.assertIsNone(Option("--hook", action="callback", callback=_callback).dest)

    def testExplicitSettingsWin(self):
        self.assertIsNone(Option("-q", action="store_true", default=None).default)
        self.assertEqual(Option("-c", action="count", default=10).default, 10)
        self.assertEqual(Option("--point", nargs=2).nargs, 2)
        self.assertEqual(Option("--hook", action="callback", callback=_callback, dest="hook").dest, "hook")
        self.assertEqual(Option("--hook", action="callback", callback=_callback, nargs=1).nargs, 1)

    def testActionAcceptsMembers(self):
        self.assertIs(Option("--all", action=Action.STORE_TRUE).action, Action.STORE_TRUE)

    def testAppendDefaultIsNotShared(self):
        first = Option("--include", action="append")
        second = Option("--exclude", action="append")
        self.assertIsNot(first.default, second.default)
        first.default.append("leak")
        self.assertEqual(first.default, [])


class TestDest(TestCase):

    def testLongestSpelling(self):
        self.assertEqual(Option("-n", "--dry-run").dest, "dry-run")
        self.assertEqual(Option("-x").dest, "x")

    def testFirstLongestWinsOnTies(self):
        self.assertEqual(Option("--ab", "--cd").dest, "ab")

    def testExplicitDest(self):
        self.assertEqual(Option("-o", "--output", dest="target").dest, "target")

    def testStoringActionRequiresDest(self):
        with self.assertRaises(ConfigurationError):
            Option("-o", dest=None)

    def testBadDest(self):
        with self.assertRaises(ConfigurationError):
            Option("-o", dest="  ")
        with self.assertRaises(ConfigurationError):
            Option("-o", dest=42)


class TestValidation(TestCase):
    """Construction-time errors."""

    def testUnknownSettingsAreNamed(self):
        with self.assertRaises(ConfigurationError) as context:
            Option("-o", "--output", type="int", bogus=True)
        self.assertEqual(context.exception.keys, ("bogus", "type"))
        self.assertIn("bogus", str(context.exception))
        self.assertIn("type", str(context.exception))

    def testConfigurationErrorIsTypeError(self):
        with self.assertRaises(TypeError):
            Option("-o", bogus=True)

    def testAtLeastOneSpelling(self):
        with self.assertRaises(ConfigurationError):
            Option()

    def testBadSpellings(self):
        for string in ("x", "-", "--", "---x", "-xy", "--a=b", "-=", "--a b", 42):
            with self.subTest(string=string):
                with self.assertRaises(ConfigurationError):
                    Option(string)

    def testDuplicateSpellings(self):
        with self.assertRaises(ConfigurationError):
            Option("-v", "-v")

    def testNegativeNargs(self):
        with self.assertRaises(ConfigurationError):
            Option("--point", nargs=-1)

    def testNonIntegerNargs(self):
        for nargs in ("2", 1.5, True, None):
            with self.subTest(nargs=nargs):
                with self.assertRaises(ConfigurationError):
                    Option("--point", nargs=nargs)

    def testUnknownAction(self):
        with self.assertRaises(ConfigurationError):
            Option("-o", action="frobnicate")

    def testCallbackMustBeCallable(self):
        with self.assertRaises(ConfigurationError):
            Option("--hook", action="callback", callback="not callable")

    def testCallbackActionRequiresCallback(self):
        with self.assertRaises(ConfigurationError):
            Option("--hook", action="callback")

    def testHelpMustBeString(self):
        with self.assertRaises(ConfigurationError):
            Option("-o", help=42)


class TestIntrospection(TestCase):

    def testStringsKeepDeclarationOrder(self):
        option = Option("--output", "-o")
        self.assertEqual(option.strings, ["--output", "-o"])
        self.assertEqual(option.short_strings, ["-o"])
        self.assertEqual(option.long_strings, ["--output"])
        self.assertEqual(option.disabled_strings, [])

    def testStringsAreReadOnlyCopies(self):
        option = Option("-o", "--output")
        option.strings.append("--other")
        self.assertEqual(option.strings, ["-o", "--output"])

    def testStr(self):
        self.assertEqual(str(Option("-o", "--output")), "-o/--output")

    def testOptString(self):
        self.assertEqual(Option("-o", "--output").get_opt_string(), "--output")
        self.assertEqual(Option("-o").get_opt_string(), "-o")

    def testTakesValue(self):
        self.assertTrue(Option("-o").takes_value)
        self.assertFalse(Option("-v", action="count").takes_value)

    def testMetavar(self):
        self.assertEqual(Option("-n", "--dry-run", nargs=1).metavar, "DRY_RUN")
        self.assertEqual(Option("--hook", action="callback", callback=_callback, nargs=1).metavar, "VALUE")

    def testHelpIsTrimmed(self):
        self.assertEqual(Option("-o", help="  write output  ").help, "write output")
        self.assertEqual(Option("-o", help=SUPPRESS_HELP).help, SUPPRESS_HELP)
        self.assertIsNone(Option("-o").help)

    def testConst(self):
        self.assertIsNone(Option("--fast", action="store_const").const)
        self.assertEqual(Option("--fast", action="store_const", const=3).const, 3)

    def testRepr(self):
        representation = repr(Option("-o", "--output"))
        self.assertTrue(representation.startswith("option("))
        self.assertIn("strings=['-o', '--output']", representation)
        self.assertIn("dest='output'", representation)


if __name__ == '__main__':
    unittest.main()
