"""
Arguments module behavioral tests (construction, derived rules, type markers).

Scope
- Validate Argument construction: names, type, descr, index and boolean flags.
- Validate derived rules: required (effectively mandatory), greedy, injectable, label.
- Validate the @greedy/@injectable class decorators and __replace__.
- Validate that every package module compiles without syntax warnings.

Conventions
- Test method names follow CamelCase per project convention.
- Never pass explicit None for any parameter; omit instead.
"""

from __future__ import annotations

import pathlib
import unittest
import warnings
from unittest import TestCase

import helmsman
from helmsman import Argument, greedy, injectable
from helmsman.utils import Unset


class TestArgumentConstruction(TestCase):
    """Behavioral tests for Argument metadata validation."""

    def testDefaults(self):
        a = Argument()
        self.assertIs(a.name, Unset)
        self.assertIs(a.longname, Unset)
        self.assertIs(a.parameter, Unset)
        self.assertIsNone(a.descr)
        self.assertIs(a.index, Unset)
        self.assertIs(a.type, str)
        self.assertTrue(a.mandatory)

    def testNamesAreTrimmed(self):
        a = Argument("  t ", " text ")
        self.assertEqual(a.name, "t")
        self.assertEqual(a.longname, "text")

    def testEmptyNameRejected(self):
        with self.assertRaises(ValueError):
            Argument("  ")

    def testDashedFlagNameRejected(self):
        with self.assertRaises(ValueError):
            Argument("-t")
        with self.assertRaises(ValueError):
            Argument("t", "--text")

    def testNonStringNameRejected(self):
        with self.assertRaises(TypeError):
            Argument(1)

    def testTypeMustBeAClass(self):
        with self.assertRaises(TypeError):
            Argument(type="str")
        with self.assertRaises(TypeError):
            Argument(type=int | str)

    def testOptionalTypeAccepted(self):
        a = Argument(type=int | None, mandatory=False)
        self.assertEqual(a.type, int | None)

    def testDescrEmptyRejected(self):
        with self.assertRaises(ValueError):
            Argument(descr="   ")

    def testDescrExplicitNoneRejected(self):
        with self.assertRaises(TypeError):
            Argument(descr=None)

    def testIndexValidation(self):
        self.assertEqual(Argument(index=2).index, 2)
        with self.assertRaises(ValueError):
            Argument(index=-1)
        with self.assertRaises(TypeError):
            Argument(index=True)
        with self.assertRaises(TypeError):
            Argument(index="1")

    def testBooleanFlagsValidation(self):
        for key in ("mandatory", "injectable", "greedy"):
            with self.subTest(key=key), self.assertRaises(TypeError):
                Argument(**{key: "yes"})

    def testReprListsDisplayableFields(self):
        text = repr(Argument("t", "text"))
        self.assertTrue(text.startswith("argument("))
        self.assertIn("name='t'", text)
        self.assertIn("required=True", text)

    def testReadOnlyProperties(self):
        a = Argument("t")
        with self.assertRaises(AttributeError):
            a.name = "x"  # type: ignore[misc]


class TestArgumentDerivedRules(TestCase):
    """Behavioral tests for the derived (computed) argument rules."""

    def testPrimitiveIsEffectivelyMandatory(self):
        for kind in (bool, int, float, complex):
            with self.subTest(kind=kind):
                self.assertTrue(Argument(type=kind, mandatory=False).required)

    def testOptionalPrimitiveIsNotRequired(self):
        self.assertFalse(Argument(type=int | None, mandatory=False).required)

    def testOptionalTextIsNotRequired(self):
        self.assertFalse(Argument(type=str, mandatory=False).required)

    def testTextIsGreedyByDefault(self):
        self.assertTrue(Argument(type=str).greedy)
        self.assertFalse(Argument(type=str).explicit)
        self.assertFalse(Argument(type=int).greedy)

    def testGreedyFlag(self):
        a = Argument(type=int, greedy=True)
        self.assertTrue(a.greedy)
        self.assertTrue(a.explicit)

    def testGreedyDecoratedType(self):
        @greedy
        class Sentence:
            def __init__(self, text):
                self.text = text

        a = Argument(type=Sentence)
        self.assertTrue(a.greedy)
        self.assertTrue(a.explicit)

    def testInjectableDecoratedType(self):
        @injectable
        class Session:
            pass

        self.assertTrue(Argument(type=Session).injectable)
        self.assertTrue(Argument(type=Session | None).injectable)
        self.assertFalse(Argument(type=str).injectable)

    def testDecoratorsRequireClasses(self):
        with self.assertRaises(TypeError):
            greedy(lambda: None)
        with self.assertRaises(TypeError):
            injectable("session")

    def testLabelPrecedence(self):
        self.assertEqual(Argument("t", "text").label, "--text")
        self.assertEqual(Argument("t").label, "t")
        self.assertEqual(Argument(parameter="text").label, "text")
        self.assertEqual(Argument(index=3).label, "arg3")


class TestArgumentReplace(TestCase):
    """Behavioral tests for __replace__ (copy with overrides)."""

    def testReplaceKeepsUntouchedFields(self):
        a = Argument("t", "text", type=str, descr="some text", mandatory=False)
        b = a.__replace__(parameter="text", index=0)
        self.assertIsNot(a, b)
        self.assertEqual(b.name, "t")
        self.assertEqual(b.longname, "text")
        self.assertEqual(b.descr, "some text")
        self.assertFalse(b.mandatory)
        self.assertEqual(b.parameter, "text")
        self.assertEqual(b.index, 0)
        self.assertIs(a.parameter, Unset)

    def testReplaceValidates(self):
        with self.assertRaises(ValueError):
            Argument().__replace__(index=-2)

    def testReplaceRejectsPositionals(self):
        with self.assertRaises(AssertionError):
            Argument().__replace__("t")


class TestModuleSources(TestCase):
    """Every package module compiles cleanly."""

    def testNoInvalidEscapeSequences(self):
        for path in sorted(pathlib.Path(helmsman.__file__).parent.glob("*.py")):
            with self.subTest(module=path.name), warnings.catch_warnings():
                warnings.simplefilter("error", SyntaxWarning)
                compile(path.read_text(encoding="utf-8"), str(path), "exec")


if __name__ == "__main__":
    unittest.main()
