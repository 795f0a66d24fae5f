import re

from openpyxl.utils import column_index_from_string, get_column_letter

import formula_engine.ast as ast

# Constants
CELL_ID_REGEX = re.compile(r"([A-Za-z]+)([0-9]+)")


def split_cell_id(ref: str) -> tuple[str, int] | None:
    """Split a cell id into its uppercase column label and row, or None if invalid."""
    match = CELL_ID_REGEX.fullmatch(ref)
    if match is None:
        return None
    col, row = match.groups()
    return col.upper(), int(row)


def _column_index(label: str) -> int:
    index = 0
    for char in label:
        index = index * 26 + ord(char) - ord("A") + 1
    return index


def _column_letters(index: int) -> str:
    letters = ""
    while index > 0:
        index, remainder = divmod(index - 1, 26)
        letters = chr(ord("A") + remainder) + letters
    return letters


# openpyxl only knows the columns up to ZZZ, longer labels are decoded by hand
def column_as_int(col: int | str) -> int:
    if isinstance(col, str):
        col = col.upper()
        try:
            col = column_index_from_string(col)
        except ValueError:
            if not col.isascii() or not col.isalpha():
                raise
            col = _column_index(col)
    return col


def column_as_str(col: int | str) -> str:
    if isinstance(col, int):
        try:
            col = get_column_letter(col)
        except ValueError:
            if col < 1:
                raise
            col = _column_letters(col)
    return col


def cell_id(column: int | str, row: int) -> str:
    return f"{column_as_str(column)}{row}"


def range_cell_ids(start: str, end: str) -> list[list[str]]:
    """Return the ids of every cell in the rectangle spanned by two corners.

    The corners may be given in any order: rows and columns are normalized
    independently. Rows come out in increasing order, and so do the columns
    within each row. Raises ValueError if either corner isn't a valid cell id.
    """
    start_ref = split_cell_id(start)
    end_ref = split_cell_id(end)
    if start_ref is None or end_ref is None:
        raise ValueError(f"Invalid cell range: {start}:{end}")

    start_col, start_row = column_as_int(start_ref[0]), start_ref[1]
    end_col, end_row = column_as_int(end_ref[0]), end_ref[1]
    min_col, max_col = min(start_col, end_col), max(start_col, end_col)
    min_row, max_row = min(start_row, end_row), max(start_row, end_row)

    return [
        [cell_id(col, row) for col in range(min_col, max_col + 1)]
        for row in range(min_row, max_row + 1)
    ]


def pretty_print_ast(node: ast.ASTNode, indent: int = 0) -> None:
    """Print AST in a human-readable format."""
    indent_str = "  " * indent
    if isinstance(node, ast.FunctionCall):
        print(f"{indent_str}Function: {node.name}")
        for i, arg in enumerate(node.arguments):
            print(f"{indent_str}  Argument {i + 1}:")
            pretty_print_ast(arg, indent + 2)
    elif isinstance(node, ast.BinaryOperation):
        print(f"{indent_str}Binary Operation: {node.operator}")
        print(f"{indent_str}  Left:")
        pretty_print_ast(node.left, indent + 2)
        print(f"{indent_str}  Right:")
        pretty_print_ast(node.right, indent + 2)
    elif isinstance(node, ast.CellReference):
        print(f"{indent_str}Cell Reference: {node.cell_id}")
    elif isinstance(node, ast.CellRange):
        print(f"{indent_str}Cell Range: {node.start}:{node.end}")
    elif isinstance(node, ast.NumberLiteral):
        print(f"{indent_str}Number: {node.value}")
    elif isinstance(node, ast.StringLiteral):
        print(f'{indent_str}String: "{node.value}"')
    else:
        print(f"{indent_str}Unknown node type: {type(node)}")


def _format_node(node: ast.ASTNode, nested: bool = False) -> str:
    if isinstance(node, ast.NumberLiteral):
        return str(node.value)
    if isinstance(node, ast.StringLiteral):
        return f'"{node.value}"'
    if isinstance(node, ast.CellReference):
        return node.cell_id
    if isinstance(node, ast.CellRange):
        return f"{node.start}:{node.end}"
    if isinstance(node, ast.FunctionCall):
        args = ", ".join(_format_node(arg) for arg in node.arguments)
        return f"{node.name}({args})"
    if isinstance(node, ast.BinaryOperation):
        text = (
            f"{_format_node(node.left, nested=True)} {node.operator} "
            f"{_format_node(node.right, nested=True)}"
        )
        return f"({text})" if nested else text
    raise ValueError(f"Unknown node type: {type(node)}")


def format_formula(node: ast.ASTNode) -> str:
    """Render an AST back to formula text, with a leading '='.

    Nested binary operations are always parenthesized, so the output parses
    back to the same tree.
    """
    return "=" + _format_node(node)
