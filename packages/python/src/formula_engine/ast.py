from typing import NamedTuple


class NumberLiteral(NamedTuple):
    value: int | float


class StringLiteral(NamedTuple):
    value: str


class CellReference(NamedTuple):
    cell_id: str


class CellRange(NamedTuple):
    start: str
    end: str


class BinaryOperation(NamedTuple):
    left: "ASTNode"
    operator: str
    right: "ASTNode"


class FunctionCall(NamedTuple):
    name: str
    arguments: "tuple[ASTNode, ...]"


# Type alias for all possible AST nodes
ASTNode = (
    NumberLiteral
    | StringLiteral
    | CellReference
    | CellRange
    | BinaryOperation
    | FunctionCall
)
