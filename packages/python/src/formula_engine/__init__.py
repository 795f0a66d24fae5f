from formula_engine.interpreter import FormulaInterpreter, evaluate
from formula_engine.provider import (
    CellDataProvider,
    DictCellDataProvider,
    WorksheetCellDataProvider,
)
from formula_engine.types import FormulaValue

__all__ = [
    "CellDataProvider",
    "DictCellDataProvider",
    "FormulaInterpreter",
    "FormulaValue",
    "WorksheetCellDataProvider",
    "evaluate",
]
