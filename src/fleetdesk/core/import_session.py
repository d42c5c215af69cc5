"""ImportSession: upload → map → preview wizard over a spreadsheet file.

The session is a plain state machine so the whole lifecycle can be driven
without a dialog. ``reset()`` is the close transition: it wipes the session
and bumps a generation counter so a parse started before the reset cannot
land in the fresh session.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, Generic, Sequence

from fleetdesk.core.errors import (
    EmptyImportError,
    ParseError,
    RequiredFieldsError,
    WizardStateError,
)
from fleetdesk.core.models import IGNORE, FieldDescriptor, ImportStep, ParsedSheet, SkippedRow, T
from fleetdesk.core.spreadsheet import SpreadsheetReader
from fleetdesk.core.text_utils import normalize_header

_log = logging.getLogger(__name__)

DEFAULT_PREVIEW_LIMIT = 50


@dataclass(frozen=True)
class ParseTicket:
    """Issued when a parse starts; only honoured by the same session generation."""

    generation: int
    file_name: str


def auto_guess_mapping(
    fields: Sequence[FieldDescriptor],
    headers: Sequence[str],
    sample_headers: Sequence[str] = (),
) -> dict[str, str]:
    """Guess which file header feeds each field.

    Candidates for a field are its label, its key, its aliases and every
    entry of *sample_headers*. A header matches when its normalised form
    contains a normalised candidate; headers are tried in file order and the
    first match wins. Unmatched fields map to "".

    *sample_headers* are shared by all fields, so a broad list can map
    several fields onto the same column. Use ``FieldDescriptor.aliases``
    for hints that belong to one field.
    """
    normalized_headers = [(h, normalize_header(h)) for h in headers]
    shared = [h for h in sample_headers if h]

    mapping: dict[str, str] = {}
    for f in fields:
        candidates = [
            c for c in (normalize_header(v) for v in (f.label, f.key, *f.aliases, *shared) if v) if c
        ]
        mapping[f.key] = next(
            (h for h, norm in normalized_headers if any(c in norm for c in candidates)),
            "",
        )
    return mapping


class ImportSession(Generic[T]):
    """State of one import dialog.

    Args:
        fields: Target fields, in display order.
        sample_headers: Extra header aliases that help the auto-guess.
        transform: Turns a field-keyed raw record into a row, or returns
            None to drop it. Exceptions count as a dropped row.
        on_confirm: Receives the full list of transformed rows.
        reader: Spreadsheet parser (injectable for tests).
        preview_limit: Number of rows shown in the preview step.
    """

    def __init__(
        self,
        fields: Sequence[FieldDescriptor],
        *,
        sample_headers: Sequence[str] = (),
        transform: Callable[[dict[str, Any]], T | None] | None = None,
        on_confirm: Callable[[list[T]], Any] | None = None,
        reader: SpreadsheetReader | None = None,
        preview_limit: int = DEFAULT_PREVIEW_LIMIT,
    ) -> None:
        keys = [f.key for f in fields]
        if len(set(keys)) != len(keys):
            raise ValueError("field keys must be unique")
        self._fields = list(fields)
        self._sample_headers = list(sample_headers)
        self._transform = transform
        self._on_confirm = on_confirm
        self._reader = reader or SpreadsheetReader()
        self._preview_limit = preview_limit
        self._generation = 0
        self._clear()

    def _clear(self) -> None:
        self._step = ImportStep.UPLOAD
        self._file_name: str | None = None
        self._headers: list[str] = []
        self._raw_rows: list[dict[str, Any]] = []
        self._mapping: dict[str, str] = {}
        self._preview: list[T] = []
        self._skipped: list[SkippedRow] = []
        self._parsing = False

    # ------------------------------------------------------------------
    # Read-only state
    # ------------------------------------------------------------------

    @property
    def fields(self) -> list[FieldDescriptor]:
        return list(self._fields)

    @property
    def step(self) -> ImportStep:
        return self._step

    @property
    def file_name(self) -> str | None:
        return self._file_name

    @property
    def headers(self) -> list[str]:
        return list(self._headers)

    @property
    def raw_rows(self) -> list[dict[str, Any]]:
        return list(self._raw_rows)

    @property
    def mapping(self) -> dict[str, str]:
        return dict(self._mapping)

    @property
    def preview_rows(self) -> list[T]:
        return list(self._preview)

    @property
    def visible_preview(self) -> list[T]:
        return self._preview[: self._preview_limit]

    @property
    def hidden_count(self) -> int:
        return max(0, len(self._preview) - self._preview_limit)

    @property
    def skipped(self) -> list[SkippedRow]:
        return list(self._skipped)

    @property
    def parsing(self) -> bool:
        return self._parsing

    @property
    def generation(self) -> int:
        return self._generation

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def reset(self) -> None:
        """Close transition: discard everything, invalidate in-flight parses."""
        self._generation += 1
        self._clear()

    # ------------------------------------------------------------------
    # Step: upload
    # ------------------------------------------------------------------

    def begin_parse(self, file_name: str) -> ParseTicket:
        if self._step is not ImportStep.UPLOAD:
            raise WizardStateError(f"cannot upload from step {self._step.value}")
        self._parsing = True
        self._file_name = file_name
        return ParseTicket(generation=self._generation, file_name=file_name)

    def apply_parse(self, ticket: ParseTicket, sheet: ParsedSheet) -> bool:
        """Install a parse result. Stale tickets are ignored (returns False).

        Raises:
            ParseError: the sheet has no header or no data row; the session
                stays on the upload step.
        """
        if ticket.generation != self._generation:
            _log.debug("Discarding stale parse result for %s", ticket.file_name)
            return False
        self._parsing = False
        if sheet.is_empty:
            raise ParseError(f"{ticket.file_name}: no header or no data row")
        self._headers = list(sheet.headers)
        self._raw_rows = list(sheet.rows)
        self._mapping = auto_guess_mapping(self._fields, self._headers, self._sample_headers)
        self._step = ImportStep.MAP
        return True

    def fail_parse(self, ticket: ParseTicket) -> None:
        if ticket.generation == self._generation:
            self._parsing = False

    def parse(self, ticket: ParseTicket, path: str | Path, data: bytes | None = None) -> ParsedSheet:
        """Run the reader for *ticket*. Safe to call from a worker thread."""
        return self._reader.read(path if data is None else ticket.file_name, data)

    def load_file(self, path: str | Path) -> bool:
        """Parse *path* synchronously and advance to the map step."""
        return self._load(Path(path).name, path, None)

    def load_bytes(self, file_name: str, data: bytes) -> bool:
        return self._load(file_name, file_name, data)

    def _load(self, file_name: str, path: str | Path, data: bytes | None) -> bool:
        ticket = self.begin_parse(file_name)
        try:
            sheet = self.parse(ticket, path, data)
        except ParseError:
            self.fail_parse(ticket)
            raise
        try:
            return self.apply_parse(ticket, sheet)
        except ParseError:
            self.fail_parse(ticket)
            raise

    # ------------------------------------------------------------------
    # Step: map
    # ------------------------------------------------------------------

    def set_mapping(self, key: str, header: str) -> None:
        """Map *key* to *header*; ``IGNORE`` or "" leaves it unmapped."""
        if self._step is not ImportStep.MAP:
            raise WizardStateError(f"cannot map from step {self._step.value}")
        if key not in self._mapping:
            raise KeyError(key)
        value = "" if header in (IGNORE, "") else header
        if value and value not in self._headers:
            raise ValueError(f"Unknown column {header!r}")
        self._mapping[key] = value

    def missing_required(self) -> list[str]:
        return [f.label for f in self._fields if f.required and not self._mapping.get(f.key)]

    def project(self, raw: dict[str, Any]) -> dict[str, Any]:
        """Re-key one file row by field key through the current mapping."""
        record: dict[str, Any] = {}
        for f in self._fields:
            col = self._mapping.get(f.key)
            record[f.key] = raw.get(col) if col else None
        return record

    def build_preview(self) -> list[T]:
        """Map → preview. Applies the transform to every file row.

        Raises:
            RequiredFieldsError: a required field is unmapped; the session
                stays on the map step and no preview is computed.
        """
        if self._step is not ImportStep.MAP:
            raise WizardStateError(f"cannot preview from step {self._step.value}")
        missing = self.missing_required()
        if missing:
            raise RequiredFieldsError(missing)

        out: list[T] = []
        skipped: list[SkippedRow] = []
        for index, raw in enumerate(self._raw_rows):
            record = self.project(raw)
            if self._transform is None:
                out.append(record)  # type: ignore[arg-type]
                continue
            try:
                row = self._transform(record)
            except Exception as exc:
                _log.warning("Import row %d rejected by transform: %s", index + 1, exc)
                skipped.append(SkippedRow(index=index, reason=str(exc) or type(exc).__name__, raw=raw))
                continue
            if row:
                out.append(row)
            else:
                skipped.append(SkippedRow(index=index, reason="", raw=raw))

        if skipped:
            _log.info("Import preview: %d row(s) kept, %d skipped", len(out), len(skipped))
        self._preview = out
        self._skipped = skipped
        self._step = ImportStep.PREVIEW
        return list(out)

    # ------------------------------------------------------------------
    # Navigation / confirm
    # ------------------------------------------------------------------

    def back(self) -> None:
        """Preview → map (mapping kept); map → upload."""
        if self._step is ImportStep.PREVIEW:
            self._step = ImportStep.MAP
        elif self._step is ImportStep.MAP:
            self._step = ImportStep.UPLOAD
            self._headers = []
            self._raw_rows = []
            self._mapping = {}
        self._preview = []
        self._skipped = []

    def confirm(self) -> list[T]:
        """Emit the full transformed row set and close the session.

        Raises:
            EmptyImportError: no row survived the transform.
        """
        if self._step is not ImportStep.PREVIEW:
            raise WizardStateError(f"cannot confirm from step {self._step.value}")
        if not self._preview:
            raise EmptyImportError()
        rows = list(self._preview)
        if self._on_confirm is not None:
            self._on_confirm(rows)
        _log.info("Import confirmed: %d row(s)", len(rows))
        self.reset()
        return rows
