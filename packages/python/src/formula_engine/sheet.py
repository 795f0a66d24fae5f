"""Cell data as the spreadsheet grid hands it over.

The grid addresses cells by 0-based column and row and stores every value as
the text the user typed, formulas included.
"""

from dataclasses import dataclass, field, replace
from typing import Iterable

from formula_engine.provider import CellDataProvider
from formula_engine.types import FormulaValue
from formula_engine.utils import cell_id, column_as_int, split_cell_id


@dataclass(frozen=True)
class CellData:
    col: int
    row: int
    value: str

    @property
    def cell_id(self) -> str:
        """The A1-style id of the cell, (0, 0) being A1."""
        return cell_id(self.col + 1, self.row + 1)


@dataclass(frozen=True)
class CellChange:
    row: int
    col: int
    before: str
    after: str


@dataclass(frozen=True)
class SheetData:
    cells: tuple[CellData, ...] = field(default_factory=tuple)


def update_cells(sheet: SheetData, changes: Iterable[CellChange]) -> SheetData:
    """Apply edits from the grid and return the updated sheet.

    Each change updates the first existing cell at its position; changes on
    positions without a cell add a new one, in the order they were given.
    """
    unhandled = list(changes)
    cells = []
    for cell in sheet.cells:
        for i, change in enumerate(unhandled):
            if change.col == cell.col and change.row == cell.row:
                del unhandled[i]
                cell = replace(cell, value=change.after)
                break
        cells.append(cell)

    cells.extend(CellData(col=c.col, row=c.row, value=c.after) for c in unhandled)
    return SheetData(cells=tuple(cells))


class SheetCellDataProvider(CellDataProvider):
    """Expose the values of a SheetData to the interpreter.

    Empty text reads as an empty cell. Stored formulas come back as raw text.
    """

    def __init__(self, sheet: SheetData):
        # Later cells win if the grid sent the same position twice
        self.values: dict[tuple[int, int], str] = {
            (cell.col, cell.row): cell.value for cell in sheet.cells
        }

    def get_cell_value(self, cell_id: str) -> FormulaValue:
        ref = split_cell_id(cell_id)
        if ref is None:
            return None
        column, row = ref
        value = self.values.get((column_as_int(column) - 1, row - 1))
        return value or None
