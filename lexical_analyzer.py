"""
Lexical Analyzer for the Arithmetic Token Alphabet

Scans raw text into Token values for the parsing engine. The alphabet is
fixed: integers, decimals, the `cos` operator and the single-character
operators + - * !.
"""

import re
from enum import Enum
from typing import List, Tuple

from slr_parser import Token


class TokenName(Enum):
    """Token names; the values are the terminal names used in grammars."""
    FLOAT = "float"
    INT = "int"
    COS = "cos"
    PLUS = "+"
    MINUS = "-"
    MULT = "*"
    FACTORIAL = "!"


class InvalidCharError(Exception):
    """Raised when the input contains a character outside the token alphabet."""

    def __init__(self, char: str, position: int):
        self.char = char
        self.position = position
        super().__init__(f"'{char}' at position {position} is an invalid character in the input")


class LexicalAnalyzer:
    """
    Lexical analyzer for the arithmetic alphabet.

    Whitespace separates tokens and is otherwise ignored. A number
    followed by '.' is a float even without fractional digits ("3." is 3.0).
    """

    NUMBER_RE = re.compile(r'(\d+)(\.\d*)?')
    OPERATORS = {
        '+': TokenName.PLUS,
        '-': TokenName.MINUS,
        '*': TokenName.MULT,
        '!': TokenName.FACTORIAL,
    }

    def tokenize(self, input_string: str) -> List[Token]:
        """
        Tokenize an input string.

        Raises:
            InvalidCharError: At the first character that starts no token
        """
        tokens = []
        position = 0

        while position < len(input_string):
            char = input_string[position]

            if char.isspace():
                position += 1
                continue

            if input_string.startswith('cos', position):
                tokens.append(Token(TokenName.COS.value, 'cos', position))
                position += 3
                continue

            match = self.NUMBER_RE.match(input_string, position)
            if match:
                tokens.append(self._number_token(match.group(1), match.group(2), position))
                position = match.end()
                continue

            if char in self.OPERATORS:
                tokens.append(Token(self.OPERATORS[char].value, char, position))
                position += 1
                continue

            raise InvalidCharError(*self._offending_char(input_string, position))

        return tokens

    def tokenize_file(self, path: str) -> List[Token]:
        with open(path, encoding='utf-8') as f:
            return self.tokenize(f.read())

    def _number_token(self, integer_part: str, fraction: str, position: int) -> Token:
        if fraction is None:
            return Token(TokenName.INT.value, int(integer_part), position)
        return Token(TokenName.FLOAT.value, float(integer_part + fraction), position)

    def _offending_char(self, input_string: str, position: int) -> Tuple[str, int]:
        # A partial "cos" is reported at the first character that breaks it
        if input_string[position] == 'c':
            for offset, expected in enumerate('cos'):
                index = position + offset
                if index >= len(input_string):
                    break
                if input_string[index] != expected:
                    return input_string[index], index
        return input_string[position], position
