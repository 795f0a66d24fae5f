from enum import Enum, auto
from typing import List, NamedTuple

from formula_engine.errors import TokenizerError
from formula_engine.utils import CELL_ID_REGEX


class TokenType(Enum):
    NUMBER = auto()
    STRING = auto()
    CELL_REF = auto()
    OPERATOR = auto()
    FUNCTION = auto()
    LEFT_PAREN = auto()
    RIGHT_PAREN = auto()
    COMMA = auto()
    COLON = auto()
    EOF = auto()


class Token(NamedTuple):
    type: TokenType
    value: str
    position: int


class FormulaTokenizer:
    """Split the body of a formula (without its leading '=') into tokens."""

    OPERATORS = "+-*/"
    SINGLE_CHAR_TOKENS = {
        "(": TokenType.LEFT_PAREN,
        ")": TokenType.RIGHT_PAREN,
        ",": TokenType.COMMA,
        ":": TokenType.COLON,
    }

    def __init__(self, formula: str):
        self.formula = formula
        self.pos = 0
        self.length = len(self.formula)

    def tokenize(self) -> List[Token]:
        """Tokenize the formula. The returned list always ends with one EOF token."""
        tokens = []
        while self.pos < self.length:
            char = self.formula[self.pos]

            if char.isspace():
                self.pos += 1
                continue
            elif self._is_digit(char) or (
                char == "." and self._is_digit(self._peek_char(1))
            ):
                tokens.append(self._tokenize_number())
            elif char == '"':
                tokens.append(self._tokenize_string())
            elif self._is_letter(char):
                tokens.append(self._tokenize_identifier())
            elif char in self.SINGLE_CHAR_TOKENS:
                tokens.append(Token(self.SINGLE_CHAR_TOKENS[char], char, self.pos))
                self.pos += 1
            elif char in self.OPERATORS:
                tokens.append(Token(TokenType.OPERATOR, char, self.pos))
                self.pos += 1
            else:
                raise TokenizerError(f"无法识别的字符: {char}")

        tokens.append(Token(TokenType.EOF, "", self.pos))
        return tokens

    # str.isdigit/isalpha accept non-ASCII digits and letters, formulas don't.
    @staticmethod
    def _is_digit(char: str) -> bool:
        return "0" <= char <= "9"

    @staticmethod
    def _is_letter(char: str) -> bool:
        return "a" <= char <= "z" or "A" <= char <= "Z"

    def _peek_char(self, offset: int) -> str:
        index = self.pos + offset
        return self.formula[index] if index < self.length else ""

    def _tokenize_number(self) -> Token:
        """Tokenize a number: digits with at most one decimal point."""
        start = self.pos
        seen_decimal = False
        while self.pos < self.length:
            char = self.formula[self.pos]
            if self._is_digit(char):
                self.pos += 1
            elif char == "." and not seen_decimal:
                seen_decimal = True
                self.pos += 1
            else:
                break

        return Token(TokenType.NUMBER, self.formula[start : self.pos], start)

    def _tokenize_string(self) -> Token:
        """Tokenize a string literal.

        The string runs up to the next double quote. There are no escape
        sequences, so a backslash before a quote does not protect it.
        """
        start = self.pos
        self.pos += 1  # Skip opening quote
        end = self.formula.find('"', self.pos)
        if end == -1:
            raise TokenizerError("未闭合的字符串")

        value = self.formula[self.pos : end]
        self.pos = end + 1
        return Token(TokenType.STRING, value, start)

    def _tokenize_identifier(self) -> Token:
        """Tokenize a function name or a cell reference."""
        start = self.pos
        while self.pos < self.length and (
            self._is_letter(self.formula[self.pos])
            or self._is_digit(self.formula[self.pos])
            or self.formula[self.pos] == "_"
        ):
            self.pos += 1

        value = self.formula[start : self.pos]
        # A name directly followed by '(' is a function call, with no space allowed
        if self._peek_char(0) == "(":
            return Token(TokenType.FUNCTION, value, start)
        if CELL_ID_REGEX.fullmatch(value):
            return Token(TokenType.CELL_REF, value, start)
        raise TokenizerError(f"无效的单元格引用或函数名: {value}")
