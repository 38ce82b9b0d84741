"""
Arguments module tests (bindings, variables and argument specs).

Conventions
- Test method names follow CamelCase per project convention.
- Tests cover validation paths and the read-only/introspection surface.
"""

from __future__ import annotations

import unittest
from types import SimpleNamespace
from unittest import TestCase

from clasp import Argument, Binding, Variable, Kind
from clasp.faults import CoercionError


class TestBinding(TestCase):
    """Behavioral tests for Binding."""

    def testAttributeTarget(self):
        holder = SimpleNamespace(count=1)
        binding = Binding(Kind.INT, holder, "count")
        self.assertEqual(binding.get(), 1)
        binding.set(5)
        self.assertEqual(holder.count, 5)

    def testMappingTarget(self):
        settings = {}
        binding = Binding(Kind.STRING, settings, "name")
        binding.set("x")
        self.assertEqual(settings, {"name": "x"})
        self.assertEqual(binding.get(), "x")

    def testMappingKeysNeedNotBeStrings(self):
        settings = {}
        Binding(Kind.BOOL, settings, 3).set(True)
        self.assertEqual(settings, {3: True})

    def testValidation(self):
        with self.assertRaises(TypeError):
            Binding("int", SimpleNamespace(), "count")
        with self.assertRaises(TypeError):
            Binding(Kind.INT, SimpleNamespace(), 3)
        with self.assertRaises(ValueError):
            Binding(Kind.INT, SimpleNamespace(), "not an attribute")

    def testOfAcceptsKindNames(self):
        self.assertIs(Binding.of("uint64", SimpleNamespace(), "size").kind, Kind.UINT64)
        with self.assertRaises(ValueError):
            Binding.of("int128", SimpleNamespace(), "size")

    def testPropertiesAreReadOnly(self):
        binding = Binding(Kind.INT, SimpleNamespace(), "count")
        with self.assertRaises(AttributeError):
            binding.kind = Kind.BOOL


class TestVariable(TestCase):
    """Behavioral tests for Variable."""

    def testZeroValues(self):
        self.assertEqual(Variable(Kind.INT).value, 0)
        self.assertEqual(Variable(Kind.FLOAT64).value, 0.0)
        self.assertIs(Variable(Kind.BOOL).value, False)
        self.assertEqual(Variable(Kind.STRING).value, "")

    def testBindingWritesThrough(self):
        variable = Variable(Kind.STRING, "a")
        variable.binding.set("b")
        self.assertEqual(variable.value, "b")
        self.assertIs(variable.binding.kind, Kind.STRING)


class TestArgument(TestCase):
    """Behavioral tests for Argument specs."""

    def testDefaultKeptAsText(self):
        variable = Variable(Kind.FLOAT64)
        argument = Argument("ratio", "r", variable.binding, 0.5, help="a ratio")
        self.assertEqual(argument.default, "0.5")
        self.assertEqual(argument.names, ("ratio", "r"))
        self.assertEqual(argument.help, "a ratio")
        self.assertFalse(argument.required)
        self.assertFalse(argument.supplied)

    def testHelpDefaultsToNone(self):
        argument = Argument("name", None, Variable(Kind.STRING).binding, "")
        self.assertIsNone(argument.help)
        self.assertEqual(argument.names, ("name",))

    def testNameValidation(self):
        binding = Variable(Kind.STRING).binding
        for name, error in ((None, TypeError), ("", ValueError), ("-x", ValueError), ("a=b", ValueError), ("a b", ValueError)):
            with self.subTest(name=name), self.assertRaises(error):
                Argument(name, "n", binding, "")

    def testAliasMustDifferFromName(self):
        with self.assertRaises(ValueError):
            Argument("name", "name", Variable(Kind.STRING).binding, "")

    def testBindingMustBeBinding(self):
        with self.assertRaises(TypeError):
            Argument("name", "n", Variable(Kind.STRING), "")

    def testAssignRestoreReset(self):
        variable = Variable(Kind.INT)
        argument = Argument("count", "c", variable.binding, 7)
        argument.restore()
        self.assertEqual(variable.value, 7)

        argument.assign("0x10")
        self.assertEqual(variable.value, 16)
        self.assertTrue(argument.supplied)

        argument.reset()
        self.assertEqual(variable.value, 7)
        self.assertFalse(argument.supplied)

    def testRequiredResetKeepsValue(self):
        variable = Variable(Kind.INT)
        argument = Argument("count", "c", variable.binding, 7, required=True)
        argument.assign("3")
        argument.reset()
        self.assertEqual(variable.value, 3)

    def testAssignFailureLeavesValue(self):
        variable = Variable(Kind.UINT, 4)
        argument = Argument("count", "c", variable.binding, 4)
        with self.assertRaises(CoercionError):
            argument.assign("-1")
        self.assertEqual(variable.value, 4)
        self.assertFalse(argument.supplied)

    def testRepr(self):
        argument = Argument("count", "c", Variable(Kind.INT).binding, 7, required=True)
        self.assertEqual(repr(argument), "argument(name='count', alias='c', default='7', required=True)")


if __name__ == "__main__":
    unittest.main()
