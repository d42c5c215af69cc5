"""Tests for SpreadsheetReader (CSV / XLSX loading)."""

from __future__ import annotations

import codecs

import pandas as pd
import pytest

from fleetdesk.core.errors import ParseError
from fleetdesk.core.spreadsheet import SpreadsheetReader


@pytest.fixture
def reader() -> SpreadsheetReader:
    return SpreadsheetReader()


class TestCsv:
    def test_comma_with_quoted_delimiters(self, tmp_path, reader):
        p = tmp_path / "people.csv"
        p.write_text(
            'Nom,Adresse,Téléphone\n'
            '"Mabiala, Jean","12 rue Mbemba, Bacongo",061\n'
            '"Nkounkou, Grâce",Poto-Poto,052\n'
            'Ngoma,"Moungali, BZV",065\n',
            encoding="utf-8",
        )
        sheet = reader.read(p)
        assert sheet.delimiter == ","
        assert sheet.headers == ["Nom", "Adresse", "Téléphone"]
        assert sheet.rows[0] == {
            "Nom": "Mabiala, Jean",
            "Adresse": "12 rue Mbemba, Bacongo",
            "Téléphone": "061",
        }
        assert len(sheet.rows) == 3

    def test_semicolon_delimiter(self, tmp_path, reader):
        p = tmp_path / "buses.csv"
        p.write_text(
            "plate;capacity;status\n"
            "BZV-001;70;active\n"
            "BZV-002;55;maintenance\n"
            "BZV-003;30;inactive\n",
            encoding="utf-8",
        )
        sheet = reader.read(p)
        assert sheet.delimiter == ";"
        assert sheet.rows[1]["capacity"] == "55"

    def test_bom_is_stripped(self, tmp_path, reader):
        p = tmp_path / "bom.csv"
        p.write_bytes(codecs.BOM_UTF8 + "plate,capacity\nBZV-001,70\nBZV-002,55\n".encode("utf-8"))
        sheet = reader.read(p)
        assert sheet.encoding == "utf-8-sig"
        assert sheet.headers[0] == "plate"

    def test_latin1_file_is_readable(self, tmp_path, reader):
        p = tmp_path / "latin1.csv"
        content = (
            "Nom,Rôle,Téléphone\n"
            "Grâce Nkounkou,Propriétaire,052\n"
            "Hélène Massamba,Receveur,067\n"
            "Frédéric Okemba,Chauffeur,064\n"
        )
        p.write_bytes(content.encode("latin-1"))
        sheet = reader.read(p)
        assert sheet.encoding != "utf-8"
        assert len(sheet.rows) == 3
        assert len(sheet.headers) == 3

    def test_blank_lines_dropped_and_short_rows_padded(self, tmp_path, reader):
        p = tmp_path / "gaps.csv"
        p.write_text("a,b,c\n1,2,3\n\n4,5\n,,\n7,8,9\n", encoding="utf-8")
        sheet = reader.read(p)
        assert len(sheet.rows) == 3
        assert sheet.rows[1] == {"a": "4", "b": "5", "c": ""}

    def test_duplicate_and_empty_headers(self, tmp_path, reader):
        p = tmp_path / "dupes.csv"
        p.write_text("name,,name,phone\nA,x,B,1\nC,y,D,2\nE,z,F,3\n", encoding="utf-8")
        sheet = reader.read(p)
        assert sheet.headers == ["name", "name.1", "phone"]
        assert sheet.rows[0] == {"name": "A", "name.1": "B", "phone": "1"}

    def test_cells_are_trimmed(self, tmp_path, reader):
        p = tmp_path / "spaces.csv"
        p.write_text(" plate , capacity \n BZV-001 , 70 \nBZV-002,55\n", encoding="utf-8")
        sheet = reader.read(p)
        assert sheet.headers == ["plate", "capacity"]
        assert sheet.rows[0]["plate"] == "BZV-001"

    def test_empty_file_returns_empty_sheet(self, tmp_path, reader):
        p = tmp_path / "empty.csv"
        p.write_bytes(b"")
        sheet = reader.read(p)
        assert sheet.is_empty

    def test_bytes_with_file_name(self, reader):
        sheet = reader.read("upload.csv", b"plate,capacity\nBZV-001,70\nBZV-002,55\n")
        assert sheet.source == "upload.csv"
        assert len(sheet.rows) == 2

    def test_missing_file_raises_parse_error(self, tmp_path, reader):
        with pytest.raises(ParseError):
            reader.read(tmp_path / "absent.csv")


class TestXlsx:
    def test_first_sheet_read_as_strings(self, tmp_path, reader):
        p = tmp_path / "buses.xlsx"
        with pd.ExcelWriter(p, engine="openpyxl") as writer:
            pd.DataFrame(
                {"Plate": ["BZV-001", "BZV-002"], "Capacity": [70, 55]}
            ).to_excel(writer, sheet_name="Bus", index=False)
            pd.DataFrame({"Other": ["x"]}).to_excel(writer, sheet_name="Notes", index=False)

        sheet = reader.read(p)
        assert sheet.sheet_name == "Bus"
        assert sheet.encoding is None
        assert sheet.headers == ["Plate", "Capacity"]
        assert sheet.rows[0]["Plate"] == "BZV-001"
        assert sheet.rows[1]["Capacity"] == "55"

    def test_corrupt_workbook_raises_parse_error(self, reader):
        with pytest.raises(ParseError):
            reader.read("broken.xlsx", b"not a zip archive")
