from abc import ABC, abstractmethod
from decimal import Decimal
from typing import Mapping, Optional

from openpyxl.worksheet.worksheet import Worksheet

from formula_engine.errors import InvalidCellRange
from formula_engine.types import FormulaValue, RangeValue
from formula_engine.utils import column_as_int, range_cell_ids, split_cell_id


class CellDataProvider(ABC):
    """Source of cell values for the interpreter.

    Implementations only need to resolve single cells: the default
    get_cell_range walks the rectangle between the two corners and looks up
    every cell with get_cell_value.
    """

    @abstractmethod
    def get_cell_value(self, cell_id: str) -> FormulaValue:
        """Return the value stored for the cell, or None if it is empty."""

    def get_cell_range(self, start_cell: str, end_cell: str) -> RangeValue:
        """Return the values of a rectangular range, one list per row."""
        try:
            cell_ids = range_cell_ids(start_cell, end_cell)
        except ValueError as e:
            raise InvalidCellRange("无效的单元格范围") from e
        return [[self.get_cell_value(ref) for ref in row] for row in cell_ids]


class DictCellDataProvider(CellDataProvider):
    """In-memory provider backed by a mapping of cell id to value."""

    def __init__(self, initial_data: Optional[Mapping[str, FormulaValue]] = None):
        self.data: dict[str, FormulaValue] = {}
        for ref, value in (initial_data or {}).items():
            self.set_cell_value(ref, value)

    def set_cell_value(self, cell_id: str, value: FormulaValue) -> None:
        self.data[cell_id.upper()] = value

    def get_cell_value(self, cell_id: str) -> FormulaValue:
        return self.data.get(cell_id.upper())


class WorksheetCellDataProvider(CellDataProvider):
    """Provider reading the stored values of an openpyxl worksheet.

    Formulas stored in cells are returned as their raw text, they are not
    evaluated.
    """

    def __init__(self, worksheet: Worksheet):
        self.worksheet = worksheet

    def get_cell_value(self, cell_id: str) -> FormulaValue:
        ref = split_cell_id(cell_id)
        if ref is None or ref[1] < 1:
            return None
        column, row = ref
        try:
            value = self.worksheet.cell(row=row, column=column_as_int(column)).value
        except ValueError:
            # Beyond the last row a worksheet can hold
            return None
        return self._to_formula_value(value)

    @staticmethod
    def _to_formula_value(value) -> FormulaValue:
        if value is None or isinstance(value, (bool, int, float, str)):
            return value
        if isinstance(value, Decimal):
            return float(value)
        return str(value)
