"""
Action dispatcher tests (take_action over the whole action vocabulary).

Scope
- Each storing action writes the expected value under the option's dest.
- Accumulating actions build new objects and never mutate what they find.
- callback delegates with (option, spelling, value, parser) and stores nothing.
- help/version print on stdout and terminate with status 0.
- A callback rejecting its value ends in a usage error with REJECTED_VALUE.
"""
import io
import unittest
from unittest import TestCase

from rich.console import Console

from optnaut import (
    FaultCode,
    Option,
    OptionParser,
    OptionValueError,
    ProgramContext,
    Terminate,
)
from optnaut.actions import take_action


def _context():
    return ProgramContext(
        prog="prog",
        stdout=Console(file=io.StringIO(), width=100, color_system=None),
        stderr=Console(file=io.StringIO(), width=100, color_system=None),
        colorful=False,
    )


class TestStoringActions(TestCase):

    def setUp(self) -> None:
        self.parser = OptionParser(context=_context())
        self.values = {}

    def testStore(self):
        take_action(Option("-o", "--output"), "-o", "out.txt", self.values, self.parser)
        take_action(Option("-o", "--output"), "-o", "other.txt", self.values, self.parser)
        self.assertEqual(self.values, {"output": "other.txt"})

    def testStoreConst(self):
        take_action(Option("--fast", action="store_const", const=9), "--fast", True, self.values, self.parser)
        self.assertEqual(self.values, {"fast": 9})

    def testStoreTrueAndFalse(self):
        take_action(Option("--yes", action="store_true"), "--yes", True, self.values, self.parser)
        take_action(Option("--no", action="store_false"), "--no", True, self.values, self.parser)
        self.assertEqual(self.values, {"yes": True, "no": False})

    def testAppendStartsFromEmpty(self):
        option = Option("-I", "--include", action="append")
        take_action(option, "-I", "a", self.values, self.parser)
        take_action(option, "-I", "b", self.values, self.parser)
        self.assertEqual(self.values, {"include": ["a", "b"]})

    def testAppendDoesNotMutateExistingSequence(self):
        existing = ["seed"]
        self.values["include"] = existing
        take_action(Option("-I", "--include", action="append"), "-I", "a", self.values, self.parser)
        self.assertEqual(self.values["include"], ["seed", "a"])
        self.assertEqual(existing, ["seed"])

    def testAppendReplacesNonSequence(self):
        self.values["include"] = None
        take_action(Option("-I", "--include", action="append"), "-I", "a", self.values, self.parser)
        self.assertEqual(self.values["include"], ["a"])

    def testAppendConst(self):
        option = Option("--fast", action="append_const", const="fast", dest="modes")
        take_action(option, "--fast", True, self.values, self.parser)
        take_action(option, "--fast", True, self.values, self.parser)
        self.assertEqual(self.values, {"modes": ["fast", "fast"]})

    def testCount(self):
        option = Option("-v", action="count")
        for _ in range(3):
            take_action(option, "-v", True, self.values, self.parser)
        self.assertEqual(self.values, {"v": 3})

    def testCountFromExistingInteger(self):
        self.values["v"] = 5
        take_action(Option("-v", action="count"), "-v", True, self.values, self.parser)
        self.assertEqual(self.values, {"v": 6})


class TestCallbackAction(TestCase):

    def setUp(self) -> None:
        self.context = _context()
        self.parser = OptionParser(context=self.context)

    def testCallbackReceivesInvocation(self):
        calls = []
        option = Option("--hook", action="callback", callback=lambda *args: calls.append(args), nargs=1)
        values = {}
        take_action(option, "--hook", "payload", values, self.parser)
        self.assertEqual(calls, [(option, "--hook", "payload", self.parser)])
        # No implicit store for callbacks.
        self.assertEqual(values, {})

    def testRejectedValueIsUsageError(self):
        def reject(option, spelling, value, parser):
            raise OptionValueError("must be positive")

        option = Option("--size", action="callback", callback=reject, nargs=1)
        with self.assertRaises(Terminate) as context:
            take_action(option, "--size", "-3", {}, self.parser)

        self.assertEqual(context.exception.status, FaultCode.REJECTED_VALUE)
        self.assertEqual(context.exception.code, 3)
        stderr = self.context.stderr.file.getvalue()
        self.assertIn("usage: prog [options]", stderr)
        self.assertIn("prog: error: option --size: must be positive", stderr)

        fault = context.exception.__cause__
        self.assertIsInstance(fault, OptionValueError)
        self.assertEqual(fault.spelling, "--size")
        self.assertIs(fault.option, option)

    def testOtherExceptionsPropagate(self):
        def broken(option, spelling, value, parser):
            raise ZeroDivisionError

        option = Option("--hook", action="callback", callback=broken)
        with self.assertRaises(ZeroDivisionError):
            take_action(option, "--hook", True, {}, self.parser)
        self.assertEqual(self.context.stderr.file.getvalue(), "")


class TestTerminalActions(TestCase):

    def setUp(self) -> None:
        self.context = _context()
        self.parser = OptionParser(context=self.context, version="%prog 1.2.3")

    def testHelp(self):
        with self.assertRaises(Terminate) as context:
            take_action(self.parser.lookup("--help"), "--help", True, {}, self.parser)
        self.assertEqual(context.exception.status, 0)
        stdout = self.context.stdout.file.getvalue()
        self.assertIn("usage: prog [options]", stdout)
        self.assertIn("-h, --help", stdout)
        self.assertEqual(self.context.stderr.file.getvalue(), "")

    def testVersion(self):
        with self.assertRaises(Terminate) as context:
            take_action(self.parser.lookup("--version"), "--version", True, {}, self.parser)
        self.assertEqual(context.exception.status, 0)
        self.assertEqual(self.context.stdout.file.getvalue().strip(), "prog 1.2.3")

    def testHelpWithCallback(self):
        calls = []
        option = Option("--manual", action="help", callback=lambda *args: calls.append(args[1]))
        with self.assertRaises(Terminate) as context:
            take_action(option, "--manual", True, {}, self.parser)
        self.assertEqual(context.exception.status, 0)
        self.assertEqual(calls, ["--manual"])
        # The callback replaces the built-in printer.
        self.assertEqual(self.context.stdout.file.getvalue(), "")


if __name__ == '__main__':
    unittest.main()
