import logging

from .ast import (
    ASTNode,
    BinaryOperation,
    CellRange,
    CellReference,
    FunctionCall,
    NumberLiteral,
    StringLiteral,
)
from formula_engine.errors import CoercionError
from formula_engine.functions import lookup_function
from formula_engine.parser import FormulaParser
from formula_engine.provider import CellDataProvider
from formula_engine.tokenizer import FormulaTokenizer
from formula_engine.types import (
    DIV_ZERO,
    ERROR_PREFIX,
    NOT_NUMERIC,
    UNKNOWN_NODE,
    EvaluatedValue,
    FormulaValue,
    coerce_to_number,
)

logger = logging.getLogger(__name__)


class FormulaInterpreter:
    """Evaluate formulas against the cells of a CellDataProvider.

    Nothing is cached: every call to evaluate tokenizes, parses and
    evaluates the formula again, reading cells from the provider as needed.
    """

    def __init__(self, provider: CellDataProvider):
        self.provider = provider

    def evaluate(self, formula: str) -> FormulaValue:
        """Evaluate a formula and return its value.

        Text that doesn't start with '=' is returned unchanged. Any failure
        while tokenizing, parsing or evaluating is returned as an error value
        ("#ERROR: <message>") rather than raised.
        """
        if not formula.startswith("="):
            # Raw string value, not a formula
            return formula

        body = formula[1:].strip()
        logger.debug("Evaluating formula: %s", body)
        try:
            tokens = FormulaTokenizer(body).tokenize()
            node = FormulaParser(tokens).parse()
            value = self.evaluate_node(node)
        except Exception as e:
            logger.debug("Formula %r failed: %r", formula, e)
            message = str(e)
            return f"{ERROR_PREFIX}: {message}" if message else ERROR_PREFIX

        if isinstance(value, list):
            # A bare range, e.g. "=A1:B2", isn't a single value
            return ERROR_PREFIX
        return value

    def evaluate_node(self, node: ASTNode) -> EvaluatedValue:
        """Evaluate an AST node. Ranges evaluate to a list of rows."""
        if isinstance(node, (NumberLiteral, StringLiteral)):
            return node.value

        elif isinstance(node, CellReference):
            return self.provider.get_cell_value(node.cell_id)

        elif isinstance(node, CellRange):
            return self.provider.get_cell_range(node.start, node.end)

        elif isinstance(node, BinaryOperation):
            return self._evaluate_binary_op(node)

        elif isinstance(node, FunctionCall):
            return self._evaluate_function(node)

        return UNKNOWN_NODE

    def _evaluate_binary_op(self, node: BinaryOperation) -> FormulaValue:
        """Evaluate an arithmetic operation on the numeric values of both operands."""
        left = self.evaluate_node(node.left)
        right = self.evaluate_node(node.right)
        try:
            left_num = coerce_to_number(left)
            right_num = coerce_to_number(right)
        except CoercionError:
            return NOT_NUMERIC

        match node.operator:
            case "+":
                return left_num + right_num
            case "-":
                return left_num - right_num
            case "*":
                return left_num * right_num
            case "/":
                if right_num == 0:
                    return DIV_ZERO
                return left_num / right_num
            case _:
                raise ValueError(f"Unknown operator: {node.operator}")

    def _evaluate_function(self, node: FunctionCall) -> EvaluatedValue:
        """Evaluate the arguments left to right, then call the function."""
        args = [self.evaluate_node(arg) for arg in node.arguments]

        fn = lookup_function(node.name)
        if fn is None:
            logger.warning("Unknown function: %s", node.name)
            return f"{ERROR_PREFIX}: 未知函数 {node.name}"
        return fn(*args)


def evaluate(formula: str, provider: CellDataProvider) -> FormulaValue:
    """Evaluate a single formula against a provider."""
    return FormulaInterpreter(provider).evaluate(formula)
