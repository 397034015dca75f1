"""
Tests for the Excel export.
"""

from dataclasses import replace
from datetime import datetime

import pytest
from openpyxl import load_workbook

from crawler.base import ExportError
from crawler.export import COLUMNS, ROW_HEIGHT, export_filename, export_to_excel

NOW = datetime(2026, 1, 2, 3, 4, 5)


class TestExportFilename:

    def test_host_and_timestamp(self):
        name = export_filename("https://www.takealot.com/all?qsearch=kettle", NOW)

        assert name == "products_www_takealot_com_20260102030405.xlsx"

    def test_unparseable_url(self):
        assert export_filename("not a url", NOW) == "products_unknown_20260102030405.xlsx"


class TestExportToExcel:
    """Test the written workbook."""

    def test_writes_header_and_rows(self, sample_item, tmp_path):
        second = replace(sample_item, title="Second Kettle", list_price="N/A")

        path = export_to_excel([sample_item, second], "https://www.takealot.com/all", tmp_path, NOW)

        assert path.exists()
        assert path.parent == tmp_path
        ws = load_workbook(path).active
        assert [cell.value for cell in ws[1]] == [header for header, _, _ in COLUMNS]
        assert [cell.value for cell in ws[2]] == [
            "Russell Hobbs Kettle",
            "R 399",
            "R 499",
            "https://media.takealot.com/kettle.jpg",
            "https://www.takealot.com/russell-hobbs-kettle/PLID1",
            "Acme Store",
            "Russell Hobbs",
            "1.7L cordless kettle",
            "3",
        ]
        assert ws["A3"].value == "Second Kettle"
        assert ws.max_row == 3

    def test_layout(self, sample_item, tmp_path):
        path = export_to_excel([sample_item], "https://www.takealot.com/all", tmp_path, NOW)

        ws = load_workbook(path).active
        assert ws.column_dimensions["A"].width == 50
        assert ws.column_dimensions["E"].width == 70
        assert ws.column_dimensions["H"].width == 100
        assert ws.row_dimensions[2].height == ROW_HEIGHT
        assert ws["H2"].alignment.wrap_text
        assert ws["H2"].alignment.vertical == "top"

    def test_control_characters_removed(self, sample_item, tmp_path):
        item = replace(sample_item, description="Line\x0bbreak")

        path = export_to_excel([item], "https://www.takealot.com/all", tmp_path, NOW)

        assert load_workbook(path).active["H2"].value == "Linebreak"

    def test_creates_output_dir(self, sample_item, tmp_path):
        target = tmp_path / "exports" / "nested"

        path = export_to_excel([sample_item], "https://www.takealot.com/all", target, NOW)

        assert path.parent == target

    def test_unwritable_target(self, sample_item, tmp_path):
        blocker = tmp_path / "blocker"
        blocker.write_text("")

        with pytest.raises(ExportError):
            export_to_excel([sample_item], "https://www.takealot.com/all", blocker, NOW)
