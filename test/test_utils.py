"""
Tests for the Unset sentinel and the small helpers built around it.

This module verifies:
- Singleton identity and falsy/representation behavior of Unset.
- Finality (UnsetType cannot be subclassed).
- coalesce() preserving legitimate falsy values.
- rename() in both call forms and mirror() handing out snapshots.
"""
import unittest
from threading import Thread, Lock
from unittest import TestCase

from clasp.utils import *


class UnsetTest(TestCase):
    """
    Test suite for the `UnsetType` singleton.
    """

    def testSingleton(self) -> None:
        """
        The constructor returns the same object reference on every call.
        """
        self.assertIs(UnsetType(), Unset)

    def testFalsyAndRepr(self) -> None:
        self.assertFalse(Unset)
        self.assertEqual(repr(Unset), "Unset")

    def testUnionWithTypes(self) -> None:
        self.assertIsInstance(Unset, str | Unset)
        self.assertIsInstance("x", Unset | str)

    def testFinal(self) -> None:
        with self.assertRaises(TypeError):
            type("Derived", (UnsetType,), {})

    def testThreadSafety(self) -> None:
        """
        Concurrent constructions all observe the same instance.
        """
        seen, lock = [], Lock()

        def worker():
            instance = UnsetType()
            with lock:
                seen.append(instance)

        threads = [Thread(target=worker) for _ in range(16)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()
        self.assertTrue(all(instance is Unset for instance in seen))


class HelpersTest(TestCase):
    """
    Test suite for coalesce, rename and mirror.
    """

    def testCoalesce(self) -> None:
        self.assertEqual(coalesce(Unset, "fallback"), "fallback")
        self.assertIsNone(coalesce(Unset))
        self.assertEqual(coalesce(0, 1), 0)
        self.assertIsNone(coalesce(None, 1))

    def testRenameForms(self) -> None:
        def original():
            pass

        self.assertIs(rename(original, "renamed"), original)
        self.assertEqual(original.__name__, "renamed")

        @rename("decorated")
        def other():
            pass

        self.assertEqual(other.__qualname__, "decorated")

        with self.assertRaises(TypeError):
            rename(1, "x")
        with self.assertRaises(TypeError):
            rename()

    def testMirrorSnapshots(self) -> None:
        class Holder:
            items = mirror("items")
            lookup = mirror("lookup")
            missing = mirror("missing")

            def __init__(self):
                self._items = ["a"]
                self._lookup = {"k": 1}
                self._missing = Unset

        holder = Holder()
        self.assertEqual(holder.items, ("a",))
        snapshot = holder.lookup
        snapshot["k"] = 2
        self.assertEqual(holder.lookup, {"k": 1})
        self.assertIsNone(holder.missing)
        with self.assertRaises(AttributeError):
            holder.items = ()


if __name__ == "__main__":
    unittest.main()
