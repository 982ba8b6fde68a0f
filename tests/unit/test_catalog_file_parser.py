"""
Unit tests for the catalog file parser.

Run: pytest tests/unit/test_catalog_file_parser.py -v
"""

from io import BytesIO
import pytest
import pandas as pd

from parsers.catalog_file_parser import parse_catalog_file
from exceptions import ImportFileParseError


def create_excel_file(rows: list[dict], columns: list[str] = None) -> BytesIO:
    """Helper to create test Excel files in memory."""
    output = BytesIO()
    df = pd.DataFrame(rows, columns=columns)

    with pd.ExcelWriter(output, engine="openpyxl") as writer:
        df.to_excel(writer, sheet_name="Products", index=False)
        # Only the first sheet is read
        pd.DataFrame([{"ignored": 1}]).to_excel(writer, sheet_name="Notes", index=False)

    output.seek(0)
    return output


class TestExcelParsing:
    """Tests for .xlsx uploads."""

    def test_reads_first_sheet_rows(self):
        # Arrange
        file = create_excel_file([
            {"name": "Mug", "SKU": "MUG-1", "selling_price": 9.5},
            {"name": "Cup", "SKU": "CUP-1", "selling_price": 4},
        ])

        # Act
        rows = parse_catalog_file(file, filename="catalog.xlsx")

        # Assert
        assert len(rows) == 2
        assert rows[0]["name"] == "Mug"
        assert rows[0]["SKU"] == "MUG-1"
        assert rows[0]["selling_price"] == 9.5
        assert "ignored" not in rows[0]

    def test_blank_cells_become_none(self):
        file = create_excel_file([
            {"name": "Mug", "brand": None},
            {"name": None, "brand": "Acme"},
        ])

        rows = parse_catalog_file(file, filename="catalog.xlsx")

        assert rows[0]["brand"] is None
        assert rows[1]["name"] is None

    def test_headers_are_trimmed(self):
        file = create_excel_file([{" name ": "Mug"}])

        rows = parse_catalog_file(file, filename="catalog.xlsx")

        assert rows[0]["name"] == "Mug"

    def test_corrupt_workbook_raises(self):
        with pytest.raises(ImportFileParseError) as exc_info:
            parse_catalog_file(BytesIO(b"not a workbook"), filename="catalog.xlsx")

        assert exc_info.value.status_code == 422
        assert exc_info.value.details["filename"] == "catalog.xlsx"


class TestCsvParsing:
    """Tests for .csv uploads."""

    def test_reads_rows_as_text(self):
        file = BytesIO(b"name,SKU,selling_price\nMug,007,9.50\n")

        rows = parse_catalog_file(file, filename="catalog.csv")

        assert rows == [{"name": "Mug", "SKU": "007", "selling_price": "9.50"}]

    def test_blank_lines_keep_their_position(self):
        """Row numbers in reports must match the sheet."""
        file = BytesIO(b"name,price\nMug,1\n,\nCup,2\n")

        rows = parse_catalog_file(file, filename="catalog.csv")

        assert len(rows) == 3
        assert rows[1] == {"name": None, "price": None}
        assert rows[2]["name"] == "Cup"
