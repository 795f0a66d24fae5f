from decimal import Decimal
from datetime import datetime

import pytest
from openpyxl import Workbook

from formula_engine.errors import InvalidCellRange
from formula_engine.provider import (
    CellDataProvider,
    DictCellDataProvider,
    WorksheetCellDataProvider,
)


@pytest.fixture
def provider():
    return DictCellDataProvider({"A1": 10, "A2": 20, "B1": 30, "B2": 40})


class TestDictCellDataProvider:
    def test_get_cell_value(self, provider):
        assert provider.get_cell_value("A1") == 10
        assert provider.get_cell_value("b2") == 40

    def test_missing_cell_is_none(self, provider):
        assert provider.get_cell_value("Z99") is None

    def test_set_cell_value(self, provider):
        provider.set_cell_value("c3", "hello")
        assert provider.get_cell_value("C3") == "hello"
        provider.set_cell_value("A1", None)
        assert provider.get_cell_value("A1") is None

    def test_initial_data_is_copied(self):
        data = {"A1": 1}
        provider = DictCellDataProvider(data)
        provider.set_cell_value("A1", 2)
        assert data == {"A1": 1}

    def test_empty_provider(self):
        assert DictCellDataProvider().get_cell_value("A1") is None

    def test_abstract(self):
        with pytest.raises(TypeError):
            CellDataProvider()


class TestCellRange:
    def test_rows_then_columns(self, provider):
        assert provider.get_cell_range("A1", "B2") == [[10, 30], [20, 40]]

    def test_corner_order_is_normalized(self, provider):
        expected = [[10, 30], [20, 40]]
        assert provider.get_cell_range("B2", "A1") == expected
        assert provider.get_cell_range("A2", "B1") == expected
        assert provider.get_cell_range("B1", "A2") == expected

    def test_single_cell_and_lines(self, provider):
        assert provider.get_cell_range("A1", "A1") == [[10]]
        assert provider.get_cell_range("A1", "A2") == [[10], [20]]
        assert provider.get_cell_range("A1", "B1") == [[10, 30]]

    def test_missing_cells_are_none(self, provider):
        assert provider.get_cell_range("B2", "C3") == [[40, None], [None, None]]

    def test_case_insensitive(self, provider):
        assert provider.get_cell_range("a1", "b1") == [[10, 30]]

    def test_multi_letter_columns(self):
        provider = DictCellDataProvider({"Z1": 1, "AA1": 2, "AB1": 3})
        assert provider.get_cell_range("Y1", "AB1") == [[None, 1, 2, 3]]

    def test_columns_past_zzz(self):
        provider = DictCellDataProvider({"AAAA1": 5, "ZZZ2": 1})
        assert provider.get_cell_range("AAAA1", "AAAA1") == [[5]]
        assert provider.get_cell_range("aaaa2", "ZZZ1") == [[None, 5], [1, None]]

    @pytest.mark.parametrize("start,end", [("1A", "B2"), ("A1", "B"), ("A1", ""), ("A-1", "B2")])
    def test_invalid_range(self, provider, start, end):
        with pytest.raises(InvalidCellRange, match="无效的单元格范围"):
            provider.get_cell_range(start, end)


class TestWorksheetCellDataProvider:
    @pytest.fixture
    def worksheet(self):
        wb = Workbook()
        sheet = wb.active
        sheet["A1"] = 1
        sheet["A2"] = 2.5
        sheet["B1"] = "text"
        sheet["B2"] = True
        sheet["C1"] = Decimal("1.25")
        sheet["C2"] = datetime(2024, 1, 2)
        return sheet

    def test_values(self, worksheet):
        provider = WorksheetCellDataProvider(worksheet)
        assert provider.get_cell_value("A1") == 1
        assert provider.get_cell_value("a2") == 2.5
        assert provider.get_cell_value("B1") == "text"
        assert provider.get_cell_value("B2") is True

    def test_conversions(self, worksheet):
        provider = WorksheetCellDataProvider(worksheet)
        assert provider.get_cell_value("C1") == 1.25
        assert provider.get_cell_value("C2") == str(datetime(2024, 1, 2))

    def test_missing_and_invalid_cells(self, worksheet):
        provider = WorksheetCellDataProvider(worksheet)
        assert provider.get_cell_value("D10") is None
        assert provider.get_cell_value("A0") is None
        assert provider.get_cell_value("not a cell") is None
        assert provider.get_cell_value("ZZZZ1") is None

    def test_range(self, worksheet):
        provider = WorksheetCellDataProvider(worksheet)
        assert provider.get_cell_range("B2", "A1") == [[1, "text"], [2.5, True]]
