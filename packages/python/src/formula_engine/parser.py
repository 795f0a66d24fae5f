from typing import Callable, List

from formula_engine.errors import ParseError
from formula_engine.types import parse_number
from .tokenizer import Token, TokenType, FormulaTokenizer
from .ast import (
    ASTNode,
    BinaryOperation,
    CellRange,
    CellReference,
    FunctionCall,
    NumberLiteral,
    StringLiteral,
)


def parse_formula(formula: str) -> ASTNode:
    """Helper function to parse a formula body (without '=') into an AST."""
    tokens = FormulaTokenizer(formula).tokenize()
    return FormulaParser(tokens).parse()


class FormulaParser:
    """Recursive descent parser with two left-associative precedence tiers.

    Grammar::

        expression := additive
        additive   := term (('+' | '-') term)*
        term       := primary (('*' | '/') primary)*
        primary    := NUMBER | STRING
                    | CELL_REF (':' CELL_REF)?
                    | FUNCTION '(' (expression (',' expression)*)? ')'
                    | '(' expression ')'

    Parsing stops after the first complete expression, whatever follows it.
    """

    def __init__(self, tokens: List[Token]):
        if not tokens or tokens[-1].type != TokenType.EOF:
            raise ValueError("Token sequence must end with an EOF token")
        self.tokens = tokens
        self.current = 0

    def parse(self) -> ASTNode:
        """Parse tokens into an AST."""
        self.current = 0
        return self.parse_expression()

    # The EOF token is never consumed, so peek() always has a token to return.
    def peek(self) -> Token:
        """Look at the current token without consuming it."""
        return self.tokens[self.current]

    def read(self) -> Token:
        """Consume and return the current token."""
        tok = self.tokens[self.current]
        if tok.type != TokenType.EOF:
            self.current += 1
        return tok

    def read_if_match(self, *types: TokenType) -> Token | None:
        """Consume and return current token if it matches any of the given types."""
        token = self.peek()
        if token.type != TokenType.EOF and token.type in types:
            self.current += 1
            return token
        return None

    def expect(self, token_type: TokenType, message: str) -> Token:
        """Consume a token of the given type, or fail with the given message."""
        token = self.read_if_match(token_type)
        if token is None:
            raise ParseError(message)
        return token

    def _parse_binary_operation(
        self, parse_operand: Callable[[], ASTNode], valid_operators: set[str]
    ) -> ASTNode:
        """Parse a left-associative chain of operands joined by the given operators."""
        left = parse_operand()

        while True:
            next_tok = self.peek()
            if (
                next_tok.type != TokenType.OPERATOR
                or next_tok.value not in valid_operators
            ):
                break

            self.read()  # consume operator
            right = parse_operand()
            left = BinaryOperation(left=left, operator=next_tok.value, right=right)

        return left

    def parse_expression(self) -> ASTNode:
        """Parse an expression (lowest precedence: addition and subtraction)."""
        return self.parse_additive()

    def parse_additive(self) -> ASTNode:
        """Parse addition/subtraction (+, -)."""
        return self._parse_binary_operation(self.parse_term, {"+", "-"})

    def parse_term(self) -> ASTNode:
        """Parse multiplication/division (*, /)."""
        return self._parse_binary_operation(self.parse_primary, {"*", "/"})

    def parse_primary(self) -> ASTNode:
        """Parse a literal, reference, function call or parenthesized expression."""
        if token := self.read_if_match(TokenType.NUMBER):
            return NumberLiteral(parse_number(token.value))

        if token := self.read_if_match(TokenType.STRING):
            return StringLiteral(token.value)

        if token := self.read_if_match(TokenType.CELL_REF):
            return self.parse_reference(token)

        if token := self.read_if_match(TokenType.FUNCTION):
            return self.parse_function_call(token.value)

        if self.read_if_match(TokenType.LEFT_PAREN):
            expr = self.parse_expression()
            self.expect(TokenType.RIGHT_PAREN, "预期表达式结束有 ')'")
            return expr

        raise ParseError(f"无法解析的表达式: {self.peek().value}")

    def parse_reference(self, token: Token) -> ASTNode:
        """Parse a cell reference, or a range if a colon and a second cell follow."""
        # A colon not followed by a cell reference is dropped and the start
        # cell is returned on its own.
        if self.read_if_match(TokenType.COLON) and (
            end_token := self.read_if_match(TokenType.CELL_REF)
        ):
            return CellRange(start=token.value, end=end_token.value)
        return CellReference(cell_id=token.value)

    def parse_function_call(self, name: str) -> FunctionCall:
        """Parse the parenthesized argument list of a function call."""
        self.expect(TokenType.LEFT_PAREN, f"预期函数 {name} 后跟随的是 '('")

        args = []
        if self.peek().type != TokenType.RIGHT_PAREN:
            args.append(self.parse_expression())
            while self.read_if_match(TokenType.COMMA):
                args.append(self.parse_expression())

        self.expect(TokenType.RIGHT_PAREN, "预期函数参数结束有 ')'")
        return FunctionCall(name=name, arguments=tuple(args))
