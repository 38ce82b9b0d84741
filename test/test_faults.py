"""
Faults module tests (codes, options, rendering and triggering).

Conventions
- Test method names follow CamelCase per project convention.
"""

from __future__ import annotations

import copy
import io
import unittest
from unittest import TestCase

from rich.console import Console

from clasp.faults import (
    CommandException,
    UnknownArgumentError,
    FaultCode,
    trigger,
    getdoc,
)


def fault():
    return UnknownArgumentError(
        "unknown argument 'x'",
        title="unknown argument",
        code=FaultCode.UNKNOWN_ARGUMENT,
        hint="run 'tool --help' to see all available arguments",
        chain=("tool",),
    )


class TestFaults(TestCase):
    """Behavioral tests for CommandException and trigger."""

    def testOptionsAreReadOnly(self):
        error = fault()
        with self.assertRaises(TypeError):
            error.options["code"] = None
        self.assertEqual(error.code, FaultCode.UNKNOWN_ARGUMENT)
        self.assertEqual(error.chain, ("tool",))
        self.assertEqual(str(error), "unknown argument 'x'")

    def testReplaceMergesOptionsAndKeepsCause(self):
        error = fault()
        error.__cause__ = ValueError("inner")
        replaced = copy.replace(error, chain=("root", "tool"))
        self.assertIsInstance(replaced, UnknownArgumentError)
        self.assertEqual(replaced.chain, ("root", "tool"))
        self.assertEqual(replaced.options["hint"], error.options["hint"])
        self.assertIs(replaced.__cause__, error.__cause__)

    def testTriggerRaisesOutsideShell(self):
        with self.assertRaises(UnknownArgumentError):
            trigger(fault())

    def testTriggerPrintsInShell(self):
        buffer = io.StringIO()
        console = Console(file=buffer, color_system=None, force_terminal=False, width=120)
        trigger(fault(), shell=True, console=console)
        output = buffer.getvalue()
        self.assertIn("[ tool — 11112 | Unknown Argument ]", output)
        self.assertIn("unknown argument 'x'", output)
        self.assertIn(" → run 'tool --help'", output)

    def testTriggerFancyUsesPanel(self):
        buffer = io.StringIO()
        console = Console(file=buffer, color_system=None, force_terminal=False, width=120)
        trigger(fault(), shell=True, fancy=True, colorful=True, console=console)
        self.assertIn("Unknown Argument", buffer.getvalue())
        self.assertIn("╭", buffer.getvalue())

    def testTriggerRejectsPlainExceptions(self):
        with self.assertRaises(TypeError):
            trigger(ValueError("x"))

    def testNormalizeAndDocs(self):
        self.assertEqual(FaultCode.MISSING_VALUE.normalize(), "11117")
        self.assertIsNone(getdoc(FaultCode.MISSING_VALUE))
        with self.assertRaises(TypeError):
            getdoc(11117)

    def testBaseWithoutCode(self):
        buffer = io.StringIO()
        console = Console(file=buffer, color_system=None, force_terminal=False, width=120)
        trigger(CommandException("plain"), shell=True, console=console)
        self.assertIn("[ clasp — ? | Error ]", buffer.getvalue())


if __name__ == "__main__":
    unittest.main()
