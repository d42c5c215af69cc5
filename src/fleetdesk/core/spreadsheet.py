"""SpreadsheetReader: read an uploaded CSV or XLSX file into headers + rows.

Handles:
- Encoding detection via chardet (first 32 KB), BOM-aware
- Delimiter detection via csv.Sniffer (fallback: , then ; \\t |)
- Quoted fields with embedded delimiters/newlines (csv module grammar)
- First worksheet only for XLSX
- Returns a ParsedSheet whose rows are header-keyed dicts of strings
"""

from __future__ import annotations

import codecs
import csv
import io
import logging
from pathlib import Path
from typing import Any

import chardet
import pandas as pd

from fleetdesk.core.errors import ParseError
from fleetdesk.core.models import ParsedSheet

_log = logging.getLogger(__name__)

WORKBOOK_SUFFIXES = {".xlsx", ".xlsm", ".xls"}
TEXT_SUFFIXES = {".csv", ".tsv", ".txt"}


class SpreadsheetReader:
    """Parse CSV or XLSX content. The first row holds the column headers."""

    _DELIMITERS = ",;\t|"

    def read(self, source: str | Path, data: bytes | None = None) -> ParsedSheet:
        """Parse a file and return a ParsedSheet.

        Args:
            source: File path, or just the original file name when *data*
                is given (the suffix selects the format).
            data: Raw file bytes (e.g. an upload). Read from *source* if None.

        Raises:
            ParseError: the content is unreadable or structurally broken.
                Empty results are returned as-is; the import session decides
                whether an empty sheet is an error.
        """
        name = Path(source).name
        suffix = Path(source).suffix.lower()
        try:
            raw_bytes = Path(source).read_bytes() if data is None else data
            if suffix in WORKBOOK_SUFFIXES:
                sheet = self._read_workbook(raw_bytes)
            else:
                # Unknown suffixes are tried as delimited text
                sheet = self._read_csv(raw_bytes)
        except ParseError:
            raise
        except Exception as exc:
            _log.warning("Could not parse %s: %s", name, exc)
            raise ParseError(str(exc)) from exc

        sheet.source = name
        _log.info("Parsed %s: %d column(s), %d row(s)", name, len(sheet.headers), len(sheet.rows))
        return sheet

    # ------------------------------------------------------------------
    # XLSX
    # ------------------------------------------------------------------

    def _read_workbook(self, raw_bytes: bytes) -> ParsedSheet:
        with pd.ExcelFile(io.BytesIO(raw_bytes), engine="openpyxl") as xf:
            if not xf.sheet_names:
                return ParsedSheet(headers=[], rows=[])
            sheet_name = xf.sheet_names[0]
            df_raw = xf.parse(sheet_name, header=None, dtype=str)

        if df_raw.empty:
            return ParsedSheet(headers=[], rows=[], sheet_name=sheet_name)

        matrix = [
            ["" if pd.isna(v) else str(v).strip() for v in row]
            for row in df_raw.itertuples(index=False, name=None)
        ]
        headers, rows = self._to_records(matrix)
        return ParsedSheet(headers=headers, rows=rows, sheet_name=sheet_name)

    # ------------------------------------------------------------------
    # CSV
    # ------------------------------------------------------------------

    def _read_csv(self, raw_bytes: bytes) -> ParsedSheet:
        encoding = self._detect_encoding(raw_bytes)
        text = raw_bytes.decode(encoding, errors="replace")
        delimiter = self._detect_delimiter(text)

        matrix: list[list[str]] = []
        for row in csv.reader(io.StringIO(text, newline=""), delimiter=delimiter):
            cells = [cell.strip() for cell in row]
            if any(cells):
                matrix.append(cells)

        headers, rows = self._to_records(matrix)
        return ParsedSheet(headers=headers, rows=rows, encoding=encoding, delimiter=delimiter)

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _to_records(matrix: list[list[str]]) -> tuple[list[str], list[dict[str, Any]]]:
        """Use the first row as headers and key every following row by them.

        Empty header cells are skipped (their column is dropped); duplicate
        names get a ``.1``, ``.2`` suffix. Blank data rows are dropped and
        short rows are padded with "".
        """
        if not matrix:
            return [], []

        seen: dict[str, int] = {}
        columns: list[tuple[int, str]] = []
        for idx, val in enumerate(matrix[0]):
            name = str(val).strip()
            if not name:
                continue
            if name in seen:
                seen[name] += 1
                name = f"{name}.{seen[name]}"
            else:
                seen[name] = 0
            columns.append((idx, name))

        rows: list[dict[str, Any]] = []
        for raw in matrix[1:]:
            if not any(raw):
                continue
            rows.append({name: (raw[idx] if idx < len(raw) else "") for idx, name in columns})
        return [name for _, name in columns], rows

    @staticmethod
    def _detect_encoding(raw_bytes: bytes) -> str:
        if raw_bytes.startswith(codecs.BOM_UTF8):
            return "utf-8-sig"
        try:
            raw_bytes[:32768].decode("utf-8")
            return "utf-8"
        except UnicodeDecodeError as exc:
            # A multi-byte sequence cut at the sample boundary is still utf-8
            if exc.start >= 32768 - 4:
                return "utf-8"

        result = chardet.detect(raw_bytes[:32768])
        encoding = result.get("encoding") or "utf-8"
        if result.get("confidence", 0.0) < 0.5:
            encoding = "cp1252"
        try:
            return codecs.lookup(encoding).name
        except LookupError:
            return "utf-8"

    @classmethod
    def _detect_delimiter(cls, text: str) -> str:
        sample = text[:32768]
        try:
            dialect = csv.Sniffer().sniff(sample, delimiters=cls._DELIMITERS)
            return dialect.delimiter
        except csv.Error:
            first_line = sample.splitlines()[0] if sample.strip() else ""
            counts = {d: first_line.count(d) for d in cls._DELIMITERS}
            best = max(counts, key=lambda k: counts[k])
            return best if counts[best] > 0 else ","
