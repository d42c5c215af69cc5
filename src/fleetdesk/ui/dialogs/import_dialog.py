"""ImportDialog: three-step wizard (file → columns → preview) over an ImportSession.

Parsing runs on the global QThreadPool. Each parse carries a ParseTicket;
results for a ticket issued before the last reset are dropped by the
session, so closing the dialog mid-parse is safe.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Sequence

from PySide6.QtCore import QObject, QRunnable, QThreadPool, Signal
from PySide6.QtGui import QFont
from PySide6.QtWidgets import (
    QComboBox,
    QDialog,
    QFileDialog,
    QFormLayout,
    QGroupBox,
    QHBoxLayout,
    QLabel,
    QMessageBox,
    QPushButton,
    QStackedWidget,
    QTableWidget,
    QTableWidgetItem,
    QVBoxLayout,
    QWidget,
)

from fleetdesk.core.errors import ImportWizardError, ParseError
from fleetdesk.core.import_session import ImportSession, ParseTicket
from fleetdesk.core.models import IGNORE, ColumnDescriptor, ImportStep, ParsedSheet
from fleetdesk.ui.i18n import error_message, t

_log = logging.getLogger(__name__)

_PAGE = {ImportStep.UPLOAD: 0, ImportStep.MAP: 1, ImportStep.PREVIEW: 2}


class _ParseWorker(QRunnable):
    class _Signals(QObject):
        finished = Signal(object, object)  # ParseTicket, ParsedSheet
        failed = Signal(object, object)  # ParseTicket, Exception

    def __init__(self, session: ImportSession, ticket: ParseTicket, path: str) -> None:
        super().__init__()
        self.session = session
        self.ticket = ticket
        self.path = path
        self.signals = self._Signals()

    def run(self) -> None:
        try:
            sheet = self.session.parse(self.ticket, self.path)
        except ParseError as exc:
            self.signals.failed.emit(self.ticket, exc)
            return
        self.signals.finished.emit(self.ticket, sheet)


class ImportDialog(QDialog):
    """Import wizard for one resource page."""

    def __init__(
        self,
        session: ImportSession,
        title: str,
        description: str,
        preview_columns: Sequence[ColumnDescriptor],
        parent: QWidget | None = None,
    ) -> None:
        super().__init__(parent)
        self.setWindowTitle(title)
        self.setMinimumSize(820, 560)
        self._session = session
        self._description = description
        self._preview_columns = list(preview_columns)
        self._mapping_combos: dict[str, QComboBox] = {}
        self._thread_pool = QThreadPool.globalInstance()

        self._build_ui()
        self._show_step()

    # ------------------------------------------------------------------
    # UI construction
    # ------------------------------------------------------------------

    def _build_ui(self) -> None:
        layout = QVBoxLayout(self)
        layout.setSpacing(10)

        intro = QLabel(self._description)
        intro.setWordWrap(True)
        layout.addWidget(intro)

        steps = QHBoxLayout()
        self._step_labels: dict[ImportStep, QLabel] = {}
        for step in ImportStep:
            label = QLabel(t(f"import.step.{step.value}"))
            self._step_labels[step] = label
            steps.addWidget(label)
        steps.addStretch(1)
        layout.addLayout(steps)

        self._stack = QStackedWidget()
        self._stack.addWidget(self._build_upload_page())
        self._stack.addWidget(self._build_map_page())
        self._stack.addWidget(self._build_preview_page())
        layout.addWidget(self._stack, 1)

        buttons = QHBoxLayout()
        self._cancel_btn = QPushButton(t("import.cancel"))
        self._cancel_btn.clicked.connect(self.reject)
        self._back_btn = QPushButton(t("import.back"))
        self._back_btn.clicked.connect(self._on_back)
        self._next_btn = QPushButton(t("import.next"))
        self._next_btn.setDefault(True)
        self._next_btn.clicked.connect(self._on_next)
        buttons.addWidget(self._cancel_btn)
        buttons.addStretch(1)
        buttons.addWidget(self._back_btn)
        buttons.addWidget(self._next_btn)
        layout.addLayout(buttons)

    def _build_upload_page(self) -> QWidget:
        page = QWidget()
        layout = QVBoxLayout(page)
        self._choose_btn = QPushButton(t("import.choose_file"))
        self._choose_btn.clicked.connect(self._browse)
        self._file_label = QLabel(t("import.no_file"))
        self._file_label.setWordWrap(True)
        layout.addWidget(self._choose_btn)
        layout.addWidget(self._file_label)
        layout.addStretch(1)
        return page

    def _build_map_page(self) -> QWidget:
        page = QWidget()
        layout = QVBoxLayout(page)
        self._loaded_label = QLabel()
        layout.addWidget(self._loaded_label)
        box = QGroupBox(t("import.map.column"))
        self._map_form = QFormLayout(box)
        for f in self._session.fields:
            combo = QComboBox()
            if f.hint:
                combo.setToolTip(f.hint)
            self._mapping_combos[f.key] = combo
            label = t("import.map.required", label=f.label) if f.required else f.label
            self._map_form.addRow(label, combo)
        layout.addWidget(box, 1)
        return page

    def _build_preview_page(self) -> QWidget:
        page = QWidget()
        layout = QVBoxLayout(page)
        self._preview_summary = QLabel()
        layout.addWidget(self._preview_summary)
        self._preview_table = QTableWidget()
        self._preview_table.setEditTriggers(QTableWidget.EditTrigger.NoEditTriggers)
        self._preview_table.setSelectionMode(QTableWidget.SelectionMode.NoSelection)
        self._preview_table.verticalHeader().setDefaultSectionSize(22)
        layout.addWidget(self._preview_table, 1)
        self._preview_footer = QLabel()
        layout.addWidget(self._preview_footer)
        return page

    # ------------------------------------------------------------------
    # Step rendering
    # ------------------------------------------------------------------

    def _show_step(self) -> None:
        step = self._session.step
        self._stack.setCurrentIndex(_PAGE[step])
        for s, label in self._step_labels.items():
            font = QFont(label.font())
            font.setBold(s is step)
            label.setFont(font)
        self._back_btn.setEnabled(step is not ImportStep.UPLOAD)
        self._next_btn.setEnabled(step is not ImportStep.UPLOAD)
        self._next_btn.setText(t("import.confirm") if step is ImportStep.PREVIEW else t("import.next"))
        self._choose_btn.setEnabled(not self._session.parsing)

    def _populate_mapping(self) -> None:
        headers = self._session.headers
        mapping = self._session.mapping
        for key, combo in self._mapping_combos.items():
            combo.clear()
            combo.addItem(t("import.map.ignore"), IGNORE)
            for header in headers:
                combo.addItem(header, header)
            current = mapping.get(key) or IGNORE
            combo.setCurrentIndex(max(0, combo.findData(current)))
        self._loaded_label.setText(
            t(
                "import.loaded",
                name=self._session.file_name or "",
                rows=len(self._session.raw_rows),
                cols=len(headers),
            )
        )

    def _populate_preview(self) -> None:
        rows = self._session.visible_preview
        columns = self._preview_columns
        self._preview_table.clear()
        self._preview_table.setColumnCount(len(columns))
        self._preview_table.setRowCount(len(rows))
        self._preview_table.setHorizontalHeaderLabels([c.header for c in columns])
        for r, row in enumerate(rows):
            for c, column in enumerate(columns):
                self._preview_table.setItem(r, c, QTableWidgetItem(column.cell(row)))

        self._preview_summary.setText(
            t("import.preview.summary", count=len(self._session.preview_rows))
        )
        notes = []
        if self._session.hidden_count:
            notes.append(t("import.preview.hidden", count=self._session.hidden_count))
        if self._session.skipped:
            notes.append(t("import.preview.skipped", count=len(self._session.skipped)))
        self._preview_footer.setText("  ".join(notes))

    def _show_error(self, exc: ImportWizardError) -> None:
        QMessageBox.warning(self, t("import.error.title"), error_message(exc))

    # ------------------------------------------------------------------
    # Upload step
    # ------------------------------------------------------------------

    def _browse(self) -> None:
        path, _ = QFileDialog.getOpenFileName(
            self, t("import.choose_file"), "", t("import.file_filter")
        )
        if path:
            self.load_path(path)

    def load_path(self, path: str) -> None:
        """Start parsing *path* in the background."""
        try:
            ticket = self._session.begin_parse(Path(path).name)
        except ImportWizardError as exc:
            self._show_error(exc)
            return
        self._file_label.setText(t("import.parsing", name=ticket.file_name))
        worker = _ParseWorker(self._session, ticket, path)
        worker.signals.finished.connect(self._on_parsed)
        worker.signals.failed.connect(self._on_parse_failed)
        self._show_step()
        self._thread_pool.start(worker)

    def _on_parsed(self, ticket: ParseTicket, sheet: ParsedSheet) -> None:
        try:
            applied = self._session.apply_parse(ticket, sheet)
        except ParseError as exc:
            self._session.fail_parse(ticket)
            self._file_label.setText(t("import.no_file"))
            self._show_step()
            self._show_error(exc)
            return
        if not applied:
            return
        self._populate_mapping()
        self._show_step()

    def _on_parse_failed(self, ticket: ParseTicket, exc: ParseError) -> None:
        self._session.fail_parse(ticket)
        if ticket.generation != self._session.generation:
            return
        self._file_label.setText(t("import.no_file"))
        self._show_step()
        self._show_error(exc)

    # ------------------------------------------------------------------
    # Navigation
    # ------------------------------------------------------------------

    def _on_back(self) -> None:
        self._session.back()
        if self._session.step is ImportStep.UPLOAD:
            self._file_label.setText(t("import.no_file"))
        self._show_step()

    def _on_next(self) -> None:
        step = self._session.step
        try:
            if step is ImportStep.MAP:
                for key, combo in self._mapping_combos.items():
                    self._session.set_mapping(key, combo.currentData() or IGNORE)
                self._session.build_preview()
                self._populate_preview()
            elif step is ImportStep.PREVIEW:
                self._session.confirm()
                self.accept()
                return
        except ImportWizardError as exc:
            self._show_error(exc)
        self._show_step()

    def done(self, result: int) -> None:
        """Every close path (accept, cancel, Esc, window close) resets the session."""
        self._session.reset()
        self._file_label.setText(t("import.no_file"))
        self._show_step()
        super().done(result)
