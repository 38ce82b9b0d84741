r"""
Tokenizer behavioral tests (blanks, quoted sections, backslash escapes).

Conventions
- Test method names follow CamelCase per project convention.
- Lines are written as raw strings so backslashes read as typed at a prompt.
"""

from __future__ import annotations

import unittest
from unittest import TestCase

from clasp import tokenize
from clasp.faults import UnterminatedQuoteError, FaultCode


class TestTokenize(TestCase):
    """Behavioral tests for tokenize."""

    def testTrailingBlankIgnored(self):
        self.assertEqual(tokenize("cmd "), ["cmd"])

    def testPlainWords(self):
        self.assertEqual(tokenize("cmd arg1 arg2 arg3"), ["cmd", "arg1", "arg2", "arg3"])

    def testRunsOfBlanks(self):
        self.assertEqual(tokenize("  cmd \t a   b  "), ["cmd", "a", "b"])

    def testEmptyLine(self):
        self.assertEqual(tokenize(""), [])
        self.assertEqual(tokenize("   "), [])

    def testQuotedSectionsAndEscapes(self):
        line = r'cmd qarg1="Hello, \"World\"" arg=not-quoted qarg2 "Hello, Again" qarg3 "Hello\\" qarg4 "Hello \\\"Quote\\\""'
        self.assertEqual(tokenize(line), [
            "cmd",
            'qarg1=Hello, "World"',
            "arg=not-quoted",
            "qarg2",
            "Hello, Again",
            "qarg3",
            "Hello\\",
            "qarg4",
            'Hello \\"Quote\\"',
        ])

    def testEmptyQuotedToken(self):
        self.assertEqual(tokenize('cmd ""'), ["cmd", ""])

    def testQuoteJoinsWithPrecedingText(self):
        self.assertEqual(tokenize('a"b c" d'), ["ab c", "d"])

    def testBackslashBeforeOtherCharacterKept(self):
        self.assertEqual(tokenize(r'"a\nb"'), [r"a\nb"])

    def testBackslashOutsideQuotesIsLiteral(self):
        self.assertEqual(tokenize(r"a\b c\\"), [r"a\b", "c\\\\"])

    def testUnterminatedQuoteRaises(self):
        with self.assertRaises(UnterminatedQuoteError) as context:
            tokenize('cmd "open')
        self.assertEqual(context.exception.code, FaultCode.UNTERMINATED_QUOTE)

    def testEscapedClosingQuoteStaysOpen(self):
        with self.assertRaises(UnterminatedQuoteError):
            tokenize(r'cmd "still open\"')

    def testRejectsNonString(self):
        with self.assertRaises(TypeError):
            tokenize(["cmd"])


if __name__ == "__main__":
    unittest.main()
