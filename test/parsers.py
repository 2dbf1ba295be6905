"""
Type-parser table behavioral tests.

Scope
- Validate the builtin entries (scalars, bool literals, decimal/fraction, uuid,
  ISO dates, paths) and the enum fallback.
- Validate registration (direct and decorator), MRO lookup and optional types.
- Validate conversion faults (uncastable value, unparsable type).

Conventions
- Test method names follow CamelCase per project convention.
"""

from __future__ import annotations

import datetime
import decimal
import enum
import fractions
import pathlib
import unittest
import uuid
from unittest import TestCase

from helmsman import Parsers, UncastableValueError, UnparsableTypeError, FaultCode


class Color(enum.Enum):
    RED = 1
    GREEN = 2


class Level(enum.IntEnum):
    LOW = 1
    HIGH = 2


class TestBuiltinParsers(TestCase):
    """Behavioral tests for the builtin conversions."""

    def setUp(self):
        self.parsers = Parsers()

    def testScalars(self):
        self.assertEqual(self.parsers.convert("foo", str), "foo")
        self.assertEqual(self.parsers.convert("42", int), 42)
        self.assertEqual(self.parsers.convert("2.5", float), 2.5)
        self.assertEqual(self.parsers.convert("1+2j", complex), 1 + 2j)

    def testBooleanLiterals(self):
        for text, expected in (("true", True), ("TRUE", True), ("1", True), ("false", False), ("False", False), ("0", False)):
            with self.subTest(text=text):
                self.assertIs(self.parsers.convert(text, bool), expected)

    def testBooleanRejectsOtherWords(self):
        with self.assertRaises(UncastableValueError):
            self.parsers.convert("yes", bool)

    def testExactNumbers(self):
        self.assertEqual(self.parsers.convert("0.1", decimal.Decimal), decimal.Decimal("0.1"))
        self.assertEqual(self.parsers.convert("1/3", fractions.Fraction), fractions.Fraction(1, 3))

    def testInvalidDecimalIsUncastable(self):
        with self.assertRaises(UncastableValueError):
            self.parsers.convert("abc", decimal.Decimal)

    def testIdentifiersAndDates(self):
        value = "12345678-1234-5678-1234-567812345678"
        self.assertEqual(self.parsers.convert(value, uuid.UUID), uuid.UUID(value))
        self.assertEqual(self.parsers.convert("2024-01-31", datetime.date), datetime.date(2024, 1, 31))
        self.assertEqual(self.parsers.convert("10:30", datetime.time), datetime.time(10, 30))
        self.assertEqual(
            self.parsers.convert("2024-01-31T10:30:00", datetime.datetime),
            datetime.datetime(2024, 1, 31, 10, 30),
        )
        self.assertEqual(self.parsers.convert("/tmp/x", pathlib.Path), pathlib.Path("/tmp/x"))

    def testOptionalTypeIsUnwrapped(self):
        self.assertEqual(self.parsers.convert("5", int | None), 5)

    def testNonePassesThrough(self):
        self.assertIsNone(self.parsers.convert(None, int))

    def testEnumByName(self):
        self.assertIs(self.parsers.convert("red", Color), Color.RED)
        self.assertIs(self.parsers.convert("HIGH", Level), Level.HIGH)

    def testEnumUnknownMember(self):
        with self.assertRaises(UncastableValueError):
            self.parsers.convert("blue", Color)


class TestParserTable(TestCase):
    """Behavioral tests for registration and lookup."""

    def testEmptyTable(self):
        parsers = Parsers(builtins=False)
        self.assertEqual(len(parsers), 0)
        self.assertNotIn(int, parsers)

    def testMissingParserIsUnparsable(self):
        class Opaque:
            pass

        with self.assertRaises(UnparsableTypeError) as caught:
            Parsers().convert("x", Opaque)
        self.assertEqual(caught.exception.code, FaultCode.UNPARSABLE_TYPE)

    def testRegisterDirectly(self):
        class Point:
            def __init__(self, x, y):
                self.x, self.y = x, y

        parsers = Parsers()
        parsers.register(Point, lambda text: Point(*map(int, text.split(","))))
        point = parsers.convert("1,2", Point)
        self.assertEqual((point.x, point.y), (1, 2))

    def testRegisterAsDecorator(self):
        parsers = Parsers()

        @parsers.register(bytes)
        def parse_bytes(text):
            return text.encode()

        self.assertEqual(parsers.convert("ab", bytes), b"ab")
        self.assertIs(parsers.lookup(bytes), parse_bytes)

    def testRegisterValidation(self):
        with self.assertRaises(TypeError):
            Parsers().register("int", int)
        with self.assertRaises(TypeError):
            Parsers().register(int, "int")

    def testSubclassesUseBaseParser(self):
        class Name(str):
            pass

        self.assertIn(Name, Parsers())
        self.assertEqual(Parsers().convert("x", Name), "x")

    def testUncastableCarriesText(self):
        with self.assertRaises(UncastableValueError) as caught:
            Parsers().convert("abc", int)
        self.assertEqual(caught.exception.text, "abc")
        self.assertEqual(caught.exception.code, FaultCode.UNCASTABLE_VALUE)
        self.assertIsInstance(caught.exception.__cause__, ValueError)


if __name__ == "__main__":
    unittest.main()
