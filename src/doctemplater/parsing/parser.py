"""
Parser for comment directives.

This module turns the text of a single reviewer comment into a Directive.
The language is intentionally tiny:

    (empty)             -> EmptyDirective
    42, -3.5            -> NumberDirective
    'text', "text"      -> TextDirective
    customer.name       -> KeyDirective
    orders[]            -> ForeachDirective
    money(total, 'EUR') -> CallDirective
"""

import logging
import re

from doctemplater.exceptions import DirectiveSyntaxError
from doctemplater.parsing.directives import (
    CallDirective,
    Directive,
    EmptyDirective,
    ForeachDirective,
    KeyDirective,
    NumberDirective,
    TextDirective,
)

logger = logging.getLogger(__name__)


class DirectiveParser:
    """Recursive descent parser for comment directives."""

    WHITESPACE = " \t\n\r\0\x0b"
    DIGITS = "0123456789"
    QUOTES = "'\""
    KEY_DELIMITERS = "[](),"

    KEY_PATTERN = re.compile(r"^[a-zA-Z0-9_.]+$")

    def parse(self, raw: str) -> Directive:
        """
        Parse one directive.

        Params:
            raw: The comment text

        Returns:
            The parsed Directive

        Raises:
            DirectiveSyntaxError: If the text is not a valid directive
        """
        text = raw.strip(self.WHITESPACE)
        if not text:
            return EmptyDirective()

        directive, position = self._parse(text, 0, in_arguments=False)
        if position != len(text):
            raise DirectiveSyntaxError(
                f"Unexpected char: {text[position]}", text, position
            )

        logger.debug("Parsed directive %r as %s", text, directive.kind.value)
        return directive

    def _skip_whitespace(self, text: str, position: int) -> int:
        while position < len(text) and text[position] in self.WHITESPACE:
            position += 1
        return position

    def _char_at(self, text: str, position: int) -> str:
        """Character at position, or an empty string past the end of input."""
        return text[position] if position < len(text) else ""

    def _is_digit(self, char: str) -> bool:
        return char != "" and char in self.DIGITS

    def _parse(
        self, text: str, position: int, in_arguments: bool
    ) -> tuple[Directive, int]:
        """
        Parse a single directive starting at position.

        Params:
            text: The trimmed directive text
            position: Offset to start parsing at
            in_arguments: Whether a function argument is being parsed

        Returns:
            Tuple of (directive, offset just past it)
        """
        position = self._skip_whitespace(text, position)
        char = self._char_at(text, position)

        if char == "-" and self._is_digit(self._char_at(text, position + 1)):
            value, position = self._parse_number(text, position + 1)
            return NumberDirective(-value), position
        if self._is_digit(char):
            value, position = self._parse_number(text, position)
            return NumberDirective(value), position
        if char and char in self.QUOTES:
            value, position = self._parse_string(text, position)
            return TextDirective(value), position

        key_start = position
        while position < len(text) and text[position] not in self.KEY_DELIMITERS:
            position += 1

        if position == key_start:
            raise DirectiveSyntaxError("Syntax error", text, position)

        key = text[key_start:position].strip(self.WHITESPACE)
        self._validate_key(key, text, key_start)

        char = self._char_at(text, position)
        if not char or (in_arguments and char in ",)"):
            return KeyDirective(key), position

        if not in_arguments and char == "[":
            position = self._skip_whitespace(text, position + 1)
            if self._char_at(text, position) != "]":
                raise DirectiveSyntaxError(
                    f"Unexpected char: {self._char_at(text, position) or 'end of input'}",
                    text,
                    position,
                )
            return ForeachDirective(key), position + 1

        if char != "(":
            raise DirectiveSyntaxError(f"Unexpected char: {char}", text, position)

        arguments, position = self._parse_arguments(text, position + 1)
        return CallDirective(key, tuple(arguments)), position

    def _validate_key(self, key: str, text: str, position: int) -> None:
        """
        Check a bareword key.

        Keys are dotted paths of [A-Za-z0-9_] segments: no leading or
        trailing dot and no empty segment.

        Raises:
            DirectiveSyntaxError: If the key is malformed
        """
        if (
            not key
            or not self.KEY_PATTERN.match(key)
            or key.startswith(".")
            or key.endswith(".")
            or ".." in key
        ):
            raise DirectiveSyntaxError(f"Invalid key: '{key}'", text, position)

    def _parse_arguments(
        self, text: str, position: int
    ) -> tuple[list[Directive], int]:
        """
        Parse call arguments up to and including the closing parenthesis.

        A trailing comma directly before the closing parenthesis is accepted;
        whitespace between an opening parenthesis or comma and the closing
        parenthesis is a syntax error.

        Params:
            text: The trimmed directive text
            position: Offset just past the opening parenthesis

        Returns:
            Tuple of (argument directives, offset past the closing parenthesis)
        """
        arguments: list[Directive] = []

        while position < len(text) and text[position] != ")":
            argument, position = self._parse(text, position, in_arguments=True)
            arguments.append(argument)

            position = self._skip_whitespace(text, position)
            char = self._char_at(text, position)
            if char == ",":
                position += 1
                continue
            if char == ")":
                break
            if not char:
                break
            raise DirectiveSyntaxError(f"Unexpected char: {char}", text, position)

        if self._char_at(text, position) != ")":
            raise DirectiveSyntaxError("Unexpected end of string", text, position)

        return arguments, position + 1

    def _parse_number(self, text: str, position: int) -> tuple[int | float, int]:
        """Consume digits and at most one decimal point."""
        start = position
        has_dot = False
        while position < len(text):
            char = text[position]
            if self._is_digit(char):
                position += 1
            elif char == "." and not has_dot:
                has_dot = True
                position += 1
            else:
                break

        literal = text[start:position]
        if has_dot:
            return float(literal), position
        return int(literal), position

    def _parse_string(self, text: str, position: int) -> tuple[str, int]:
        """
        Consume a quoted literal starting at the opening quote.

        A backslash directly followed by the opening quote character yields a
        literal quote; any other character, a lone backslash included, is kept
        verbatim.

        Raises:
            DirectiveSyntaxError: If input ends before the closing quote
        """
        quote = text[position]
        position += 1
        output = []

        while position < len(text) and text[position] != quote:
            if text[position] == "\\" and self._char_at(text, position + 1) == quote:
                position += 1
            output.append(text[position])
            position += 1

        if position >= len(text):
            raise DirectiveSyntaxError(
                "Unexpected end of string literal", text, position
            )

        return "".join(output), position + 1


def parse_directive(raw: str) -> Directive:
    """
    Convenience function to parse a directive string.

    Params:
        raw: The directive text

    Returns:
        The parsed Directive

    Raises:
        DirectiveSyntaxError: If the directive is malformed
    """
    parser = DirectiveParser()
    return parser.parse(raw)
