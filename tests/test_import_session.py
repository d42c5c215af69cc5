"""Tests for ImportSession and the mapping auto-guess."""

from __future__ import annotations

from pathlib import Path

import pytest

from fleetdesk.core.errors import (
    EmptyImportError,
    ParseError,
    RequiredFieldsError,
    WizardStateError,
)
from fleetdesk.core.import_session import ImportSession, auto_guess_mapping
from fleetdesk.core.models import IGNORE, FieldDescriptor, ImportStep, ParsedSheet

FIELDS = (
    FieldDescriptor("plate", "Immatriculation", required=True),
    FieldDescriptor("capacity", "Capacité"),
    FieldDescriptor("model", "Modèle"),
)


def _sheet(rows: int = 10) -> ParsedSheet:
    return ParsedSheet(
        headers=["Plate Number", "Capacity", "Model"],
        rows=[
            {"Plate Number": f"BZV-{i:03d}", "Capacity": str(30 + i), "Model": "Yutong"}
            for i in range(rows)
        ],
        source="buses.csv",
    )


def _session(**kwargs) -> ImportSession:
    options = dict(transform=lambda raw: dict(raw))
    options.update(kwargs)
    return ImportSession(FIELDS, **options)


def _to_map(session: ImportSession, sheet: ParsedSheet | None = None) -> None:
    ticket = session.begin_parse("buses.csv")
    assert session.apply_parse(ticket, sheet or _sheet())


@pytest.fixture
def buses_csv(tmp_path) -> Path:
    p = tmp_path / "buses.csv"
    p.write_text(
        "Plate Number,Capacity,Model\n"
        "BZV-001,70,Yutong\n"
        "BZV-002,55,King Long\n",
        encoding="utf-8",
    )
    return p


# ---------------------------------------------------------------------------
# Auto-guess
# ---------------------------------------------------------------------------


class TestAutoGuess:
    def test_plate_number_matches_plate_via_sample_header(self):
        mapping = auto_guess_mapping(
            [FieldDescriptor("plate", "Immatriculation")],
            ["Plate Number", "Capacity", "Type"],
            ["plate"],
        )
        assert mapping == {"plate": "Plate Number"}

    def test_label_match_is_normalised(self):
        mapping = auto_guess_mapping(
            [FieldDescriptor("phone", "Téléphone")],
            ["Nom", "  TÉLÉPHONE  portable"],
        )
        assert mapping == {"phone": "  TÉLÉPHONE  portable"}

    def test_underscores_and_hyphens_count_as_spaces(self):
        mapping = auto_guess_mapping(
            [FieldDescriptor("passenger.name", "Nom", aliases=("passenger name",))],
            ["passenger_phone", "passenger_name"],
        )
        assert mapping == {"passenger.name": "passenger_name"}

    def test_first_header_in_file_order_wins(self):
        mapping = auto_guess_mapping(
            [FieldDescriptor("name", "Nom")],
            ["Nom du passager", "Nom"],
        )
        assert mapping["name"] == "Nom du passager"

    def test_unmatched_field_maps_to_empty(self):
        mapping = auto_guess_mapping([FieldDescriptor("year", "Année")], ["Plate"])
        assert mapping == {"year": ""}

    def test_sample_headers_are_candidates_for_every_field(self):
        fields = [
            FieldDescriptor("plate", "Immatriculation"),
            FieldDescriptor("model", "Modele"),
        ]
        mapping = auto_guess_mapping(fields, ["Plate Number", "Model"], ["plate"])
        assert mapping == {"plate": "Plate Number", "model": "Plate Number"}

    def test_aliases_only_apply_to_their_field(self):
        fields = [
            FieldDescriptor("plate", "Immatriculation", aliases=("plate",)),
            FieldDescriptor("model", "Modele"),
        ]
        mapping = auto_guess_mapping(fields, ["Plate Number", "Model"])
        assert mapping == {"plate": "Plate Number", "model": "Model"}

    def test_deterministic(self):
        headers = ["Plate Number", "Capacity", "Type"]
        first = auto_guess_mapping(FIELDS, headers, ["plate"])
        assert all(auto_guess_mapping(FIELDS, headers, ["plate"]) == first for _ in range(5))


# ---------------------------------------------------------------------------
# Wizard flow
# ---------------------------------------------------------------------------


class TestWizardFlow:
    def test_upload_to_map_auto_maps(self):
        session = _session()
        _to_map(session)
        assert session.step is ImportStep.MAP
        assert session.headers == ["Plate Number", "Capacity", "Model"]
        assert session.mapping == {
            "plate": "Plate Number",
            "capacity": "Capacity",
            "model": "Model",
        }
        assert len(session.raw_rows) == 10

    def test_required_field_gate_keeps_map_step(self):
        session = _session()
        _to_map(session)
        session.set_mapping("plate", IGNORE)
        with pytest.raises(RequiredFieldsError) as info:
            session.build_preview()
        assert info.value.missing == ["Immatriculation"]
        assert session.step is ImportStep.MAP
        assert session.preview_rows == []

    def test_transform_none_drops_rows(self):
        def transform(raw):
            number = int(raw["plate"][-3:])
            return None if number in (1, 4, 7) else raw["plate"]

        confirmed = []
        session = _session(transform=transform, on_confirm=confirmed.append)
        _to_map(session)
        preview = session.build_preview()
        assert len(preview) == 7
        assert [s.index for s in session.skipped] == [1, 4, 7]

        rows = session.confirm()
        assert len(rows) == 7
        assert confirmed == [rows]

    def test_transform_exception_counts_as_skipped(self):
        def transform(raw):
            if raw["plate"].endswith("2"):
                raise ValueError("bad plate")
            return raw

        session = _session(transform=transform)
        _to_map(session)
        assert len(session.build_preview()) == 9
        assert session.skipped[0].reason == "bad plate"

    def test_projection_keys_rows_by_field(self):
        session = _session()
        _to_map(session)
        session.set_mapping("model", "")
        preview = session.build_preview()
        assert preview[0] == {"plate": "BZV-000", "capacity": "30", "model": None}

    def test_preview_limit_hides_the_rest(self):
        session = _session(preview_limit=4)
        _to_map(session)
        session.build_preview()
        assert len(session.visible_preview) == 4
        assert session.hidden_count == 6
        assert len(session.preview_rows) == 10

    def test_confirm_emits_full_set_not_just_visible(self):
        confirmed = []
        session = _session(preview_limit=3, on_confirm=confirmed.append)
        _to_map(session)
        session.build_preview()
        session.confirm()
        assert len(confirmed[0]) == 10

    def test_confirm_with_nothing_left_is_refused(self):
        session = _session(transform=lambda raw: None)
        _to_map(session)
        session.build_preview()
        with pytest.raises(EmptyImportError):
            session.confirm()
        assert session.step is ImportStep.PREVIEW

    def test_unknown_header_rejected(self):
        session = _session()
        _to_map(session)
        with pytest.raises(ValueError):
            session.set_mapping("plate", "Nope")

    def test_back_navigation(self):
        session = _session()
        _to_map(session)
        session.set_mapping("model", IGNORE)
        session.build_preview()

        session.back()
        assert session.step is ImportStep.MAP
        assert session.mapping["model"] == ""
        assert session.preview_rows == []

        session.back()
        assert session.step is ImportStep.UPLOAD
        assert session.headers == []
        assert session.mapping == {}

    def test_steps_enforced(self):
        session = _session()
        with pytest.raises(WizardStateError):
            session.build_preview()
        with pytest.raises(WizardStateError):
            session.confirm()
        _to_map(session)
        with pytest.raises(WizardStateError):
            session.begin_parse("again.csv")

    def test_duplicate_field_keys_rejected(self):
        with pytest.raises(ValueError):
            ImportSession([FieldDescriptor("a", "A"), FieldDescriptor("a", "B")])


# ---------------------------------------------------------------------------
# Reset and stale parses
# ---------------------------------------------------------------------------


class TestReset:
    def test_reset_returns_to_clean_upload_step(self):
        session = _session()
        _to_map(session)
        session.build_preview()

        session.reset()
        assert session.step is ImportStep.UPLOAD
        assert session.headers == []
        assert session.raw_rows == []
        assert session.mapping == {}
        assert session.preview_rows == []
        assert session.file_name is None

    def test_confirm_resets(self):
        session = _session()
        _to_map(session)
        session.build_preview()
        session.confirm()
        assert session.step is ImportStep.UPLOAD
        assert session.mapping == {}

    def test_stale_parse_result_is_discarded(self):
        session = _session()
        ticket = session.begin_parse("slow.csv")
        assert session.parsing
        session.reset()

        assert session.apply_parse(ticket, _sheet()) is False
        assert session.step is ImportStep.UPLOAD
        assert session.headers == []

    def test_empty_sheet_is_a_parse_error(self):
        session = _session()
        ticket = session.begin_parse("empty.csv")
        with pytest.raises(ParseError):
            session.apply_parse(ticket, ParsedSheet(headers=["A"], rows=[]))
        assert session.step is ImportStep.UPLOAD
        assert not session.parsing


# ---------------------------------------------------------------------------
# Reading real files
# ---------------------------------------------------------------------------


class TestLoadFile:
    def test_load_file(self, buses_csv):
        session = _session()
        assert session.load_file(buses_csv)
        assert session.file_name == "buses.csv"
        assert session.mapping["plate"] == "Plate Number"
        assert len(session.raw_rows) == 2

    def test_load_bytes(self, buses_csv):
        session = _session()
        assert session.load_bytes("upload.csv", buses_csv.read_bytes())
        assert session.step is ImportStep.MAP

    def test_header_only_file_fails(self, tmp_path):
        p = tmp_path / "header_only.csv"
        p.write_text("Plate Number,Capacity\n", encoding="utf-8")
        session = _session()
        with pytest.raises(ParseError):
            session.load_file(p)
        assert session.step is ImportStep.UPLOAD
        assert not session.parsing
