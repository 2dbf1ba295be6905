"""
Argument parsing engine behavioral tests (positional and named modes).

Scope
- Validate tokenize(): whitespace splitting, double-quoted spans, escaped quotes.
- Validate positional parsing: in-order conversion, greedy tail, optional
  omission, effectively-mandatory faults, injection.
- Validate named parsing: short/long flags in any order, quoted values,
  unknown flags, missing values/arguments, injectable values discarded.

Conventions
- Test method names follow CamelCase per project convention.
- Commands are declared with the public API; parse() is called directly with
  a hand-built Context.
"""

from __future__ import annotations

import itertools
import unittest
import uuid
from unittest import TestCase

from helmsman import (
    Argument,
    Context,
    Injector,
    MissingArgumentError,
    MissingValueError,
    Parsers,
    UncastableValueError,
    UnknownArgumentError,
    command,
)
from helmsman.parsing import parse, tokenize


def run(cmd, text):
    context = Context(cmd, text)
    values = parse(cmd, text, context, Parsers(), Injector())
    return {argument.parameter: value for argument, value in values.items()}, context


class TestTokenize(TestCase):
    """Behavioral tests for the quote-aware tokenizer."""

    def testWhitespace(self):
        self.assertEqual(tokenize("  a   b\tc "), ["a", "b", "c"])

    def testQuotedSpan(self):
        self.assertEqual(tokenize('-t "a b c" -n 1'), ["-t", "a b c", "-n", "1"])

    def testEscapedQuote(self):
        self.assertEqual(tokenize(r'say \"hi\"'), ["say", '"hi"'])

    def testEmptyQuotedSpan(self):
        self.assertEqual(tokenize('-t "" -n 1'), ["-t", "", "-n", "1"])

    def testQuotesJoinAdjacentText(self):
        self.assertEqual(tokenize('a"b c"d'), ["ab cd"])

    def testEmpty(self):
        self.assertEqual(tokenize(""), [])


class TestPositionalParsing(TestCase):
    """Behavioral tests for positional mode."""

    def setUp(self):
        @command(name="test echo-optional")
        def echo(
                text=Argument(type=str),
                number=Argument(type=int | None, mandatory=False),
                decimal=Argument(type=float | None, mandatory=False),
                /,
        ):
            pass

        self.echo = echo

    def testOptionalOmission(self):
        values, _ = run(self.echo, "foo")
        self.assertEqual(values, {"text": "foo", "number": None, "decimal": None})

        values, _ = run(self.echo, "foo 5")
        self.assertEqual(values, {"text": "foo", "number": 5, "decimal": None})

    def testAllSupplied(self):
        values, _ = run(self.echo, "this-is-string 42 2.5")
        self.assertEqual(values, {"text": "this-is-string", "number": 42, "decimal": 2.5})

    def testGreedyTail(self):
        @command
        def say(text=Argument(type=str), rest=Argument(type=str), /):
            pass

        values, _ = run(say, "one two three")
        self.assertEqual(values, {"text": "one", "rest": "two three"})

    def testExplicitGreedyTail(self):
        @command
        def numbers(first=Argument(type=int), rest=Argument(type=str, greedy=True), /):
            pass

        values, _ = run(numbers, "1   2  3")
        self.assertEqual(values, {"first": 1, "rest": "2 3"})

    def testMissingMandatoryArgument(self):
        @command
        def pair(first=Argument(type=str), second=Argument(type=str), /):
            pass

        with self.assertRaises(MissingArgumentError) as caught:
            run(pair, "one")
        self.assertEqual(caught.exception.options["index"], 1)
        self.assertIn("2nd", str(caught.exception))

    def testEffectivelyMandatoryPrimitive(self):
        @command
        def count(number=Argument(type=int, mandatory=False), /):
            pass

        with self.assertRaises(MissingArgumentError):
            run(count, "")

    def testUncastableValue(self):
        with self.assertRaises(UncastableValueError) as caught:
            run(self.echo, "foo bar")
        self.assertEqual(caught.exception.text, "bar")

    def testExtraTokensIgnored(self):
        @command
        def one(number=Argument(type=int), /):
            pass

        values, _ = run(one, "1 2 3")
        self.assertEqual(values, {"number": 1})

    def testInjectablesConsumeNothing(self):
        @command
        def echo(context=Argument(type=Context), number=Argument(type=int), /):
            pass

        values, context = run(echo, "7")
        self.assertIs(values["context"], context)
        self.assertEqual(values["number"], 7)

    def testOnlyInjectables(self):
        @command
        def ping(context=Argument(type=Context), /):
            pass

        values, context = run(ping, "ignored words")
        self.assertEqual(values, {"context": context})


class TestNamedParsing(TestCase):
    """Behavioral tests for named mode."""

    def setUp(self):
        @command(name="test named", named=True)
        def named(
                text=Argument("t", "text", type=str),
                number=Argument("n", "number", type=int),
                decimal=Argument("d", "decimal", type=float),
                boolean=Argument("b", "boolean", type=bool),
                identifier=Argument("u", "uuid", type=uuid.UUID),
                /,
        ):
            pass

        self.named = named
        self.identifier = "12345678-1234-5678-1234-567812345678"

    def testOrderIndependence(self):
        flags = [
            ("-t", "--text", '"a b c"'),
            ("-n", "--number", "1"),
            ("-d", "--decimal", "2.5"),
            ("-b", "--boolean", "true"),
            ("-u", "--uuid", self.identifier),
        ]
        expected = {
            "text": "a b c",
            "number": 1,
            "decimal": 2.5,
            "boolean": True,
            "identifier": uuid.UUID(self.identifier),
        }
        for order in itertools.permutations(flags):
            for forms in ((0,) * 5, (1,) * 5, (0, 1, 0, 1, 0)):
                line = " ".join(f"{flag[form]} {flag[2]}" for flag, form in zip(order, forms))
                with self.subTest(line=line):
                    values, _ = run(self.named, line)
                    self.assertEqual(values, expected)

    def testValuesAreInDeclarationOrder(self):
        values, _ = run(self.named, f"-u {self.identifier} -b 0 -d 1 -n 2 -t x")
        self.assertEqual(list(values), ["text", "number", "decimal", "boolean", "identifier"])

    def testQuotedValueIsOneToken(self):
        @command(named=True)
        def tool(text=Argument("t", type=str), number=Argument("n", type=int), /):
            pass

        values, _ = run(tool, '-t "a b c" -n 1')
        self.assertEqual(values, {"text": "a b c", "number": 1})

    def testUnquotedValueJoinsTokens(self):
        @command(named=True)
        def tool(text=Argument("t", type=str), /):
            pass

        values, _ = run(tool, "-t a   b c")
        self.assertEqual(values, {"text": "a b c"})

    def testUnknownFlag(self):
        with self.assertRaises(UnknownArgumentError):
            run(self.named, "-x 1")
        with self.assertRaises(UnknownArgumentError):
            run(self.named, "--nope 1")

    def testMissingValue(self):
        with self.assertRaises(MissingValueError):
            run(self.named, f"-t -n 1 -d 1 -b 1 -u {self.identifier}")

    def testMissingArgument(self):
        with self.assertRaises(MissingArgumentError):
            run(self.named, "-t x -n 1")

    def testOptionalFlags(self):
        @command(named=True)
        def tool(
                text=Argument("t", type=str),
                number=Argument("n", type=int | None, mandatory=False),
                /,
        ):
            pass

        values, _ = run(tool, "-t x")
        self.assertEqual(values, {"text": "x", "number": None})
        values, _ = run(tool, "-t x -n")
        self.assertEqual(values, {"text": "x", "number": None})

    def testLongFlagFallsBackToParameterName(self):
        @command(named=True)
        def tool(count=Argument("c", type=int), /):
            pass

        values, _ = run(tool, "--count 3")
        self.assertEqual(values, {"count": 3})

    def testLeadingBareTokensIgnored(self):
        @command(named=True)
        def tool(text=Argument("t", type=str), /):
            pass

        values, _ = run(tool, "stray -t x")
        self.assertEqual(values, {"text": "x"})

    def testInjectableValuesDiscarded(self):
        @command(named=True)
        def tool(context=Argument("c", type=Context), text=Argument("t", type=str), /):
            pass

        values, context = run(tool, "-c junk -t x")
        self.assertIs(values["context"], context)
        self.assertEqual(values["text"], "x")


if __name__ == "__main__":
    unittest.main()
