"""
Fault model tests.

Scope
- Context access on faults (attributes and read-only options).
- trigger(): option merging, raise vs. shell mode exit statuses.
- Rich rendering of headers, messages and hints.
"""
import io
import unittest
from unittest import TestCase
from unittest.mock import patch

from rich.console import Console

from argshell import (
    FaultCode,
    HandoffError,
    InvalidFieldError,
    MissingRequiredError,
    trigger,
)


def fault(**options):
    return MissingRequiredError(
        "required argument 'target' was not provided",
        title="missing required argument",
        code=FaultCode.MISSING_REQUIRED,
        key="target",
        hint="run 'deploy --help' to see the expected usage",
    ).__replace__(**options)


class TestFaultContext(TestCase):

    def testMessageIsTheStringForm(self):
        self.assertEqual(str(fault()), "required argument 'target' was not provided")

    def testContextIsReadableAsAttributes(self):
        self.assertEqual(fault().key, "target")
        self.assertIs(fault().code, FaultCode.MISSING_REQUIRED)

    def testMissingContextIsAnAttributeError(self):
        with self.assertRaises(AttributeError):
            fault().shortfall

    def testOptionsAreReadOnly(self):
        with self.assertRaises(TypeError):
            fault().options["key"] = "other"

    def testCodeNormalizesToNumber(self):
        self.assertEqual(FaultCode.MISSING_REQUIRED.normalize(), "11125")

    def testExitStatusesByFamily(self):
        self.assertEqual(fault().exitcode, 2)
        self.assertEqual(InvalidFieldError("x").exitcode, 1)
        self.assertEqual(HandoffError("x").exitcode, 1)


class TestTrigger(TestCase):

    def testTriggerRaisesWithMergedOptions(self):
        with self.assertRaises(MissingRequiredError) as context:
            trigger(fault(), prog="deploy")
        self.assertEqual(context.exception.options["prog"], "deploy")
        self.assertEqual(context.exception.key, "target")

    def testTriggerRejectsPlainExceptions(self):
        with self.assertRaises(TypeError):
            trigger(ValueError("nope"))

    def testShellModePrintsAndExits(self):
        output = io.StringIO()
        with patch("argshell.faults.console", Console(file=output, width=120, color_system=None)):
            with self.assertRaises(SystemExit) as context:
                trigger(fault(), shell=True, prog="deploy")
        self.assertEqual(context.exception.code, 2)
        rendered = output.getvalue()
        self.assertIn("[ deploy — 11125 | Missing Required Argument ]", rendered)
        self.assertIn("required argument 'target' was not provided", rendered)
        self.assertIn("→ run 'deploy --help'", rendered)

    def testFancyModeRendersAPanel(self):
        output = io.StringIO()
        with patch("argshell.faults.console", Console(file=output, width=120, color_system=None)):
            with self.assertRaises(SystemExit):
                trigger(fault(), shell=True, fancy=True, colorful=False)
        self.assertIn("╭", output.getvalue())

    def testSchemaFaultsExitWithOne(self):
        output = io.StringIO()
        with patch("argshell.faults.console", Console(file=output, width=120, color_system=None)):
            with self.assertRaises(SystemExit) as context:
                trigger(InvalidFieldError("bad field", code=FaultCode.INVALID_FIELD), shell=True)
        self.assertEqual(context.exception.code, 1)


if __name__ == "__main__":
    unittest.main()
