"""Tests for the resource specs (columns, search, import transforms)."""

from __future__ import annotations

import pytest

from fleetdesk.core.data_table import DataTableState
from fleetdesk.core.entities import Bus, Person, Reservation, Staff
from fleetdesk.core.import_session import ImportSession, auto_guess_mapping
from fleetdesk.core.resources.base import registry
from fleetdesk.core.resources.buses import BusesSpec
from fleetdesk.core.resources.people import PeopleSpec
from fleetdesk.core.resources.reservations import ReservationsSpec, format_money
from fleetdesk.core.resources.staff import StaffSpec


class FakeOps:
    """Records the calls row actions make."""

    def __init__(self) -> None:
        self.updated: list = []
        self.deleted: list = []

    def update_row(self, row):
        self.updated.append(row)
        return True

    def delete_rows(self, rows):
        self.deleted.append(rows)
        return True


def _state(spec, ws) -> DataTableState:
    return DataTableState(
        ws.repository(spec.resource_id).list(),
        spec.columns(ws),
        get_row_id=lambda row, _index: spec.row_id(row),
        search=spec.search(),
        filters=spec.filters(ws),
        debounce_ms=0,
    )


class TestRegistry:
    def test_sidebar_order(self):
        assert registry.all_ids() == ["buses", "people", "staff", "reservations"]

    def test_lookup(self):
        assert registry.get("buses") is BusesSpec
        assert registry.get("trips") is None

    def test_every_spec_has_a_drawer_column_first(self, workspace):
        for spec_cls in registry.all_specs():
            columns = spec_cls().columns(workspace)
            assert columns[0].drawer is not None


class TestBusesSpec:
    def test_transform(self, workspace):
        bus = BusesSpec().transform(
            {
                "plate": " bzv-9000-zz ",
                "capacity": "45",
                "status": "MAINTENANCE",
                "operatorId": "Grâce Nkounkou",
                "assignedDriverId": "p1",
                "year": "",
            },
            workspace,
        )
        assert bus.plate == "BZV-9000-ZZ"
        assert bus.capacity == 45
        assert bus.status == "maintenance"
        assert bus.operator_id == "p2"
        assert bus.assigned_driver_id == "p1"
        assert bus.year is None
        assert bus.id

    def test_transform_skips_missing_plate(self, workspace):
        assert BusesSpec().transform({"plate": "  ", "capacity": "10"}, workspace) is None

    def test_unknown_status_becomes_inactive(self, workspace):
        bus = BusesSpec().transform({"plate": "X-1", "status": "broken"}, workspace)
        assert bus.status == "inactive"
        assert bus.capacity == 0

    def test_cells_resolve_people(self, workspace):
        spec = BusesSpec()
        columns = {c.id: c for c in spec.columns(workspace)}
        bus = workspace.buses.get("b1")
        assert columns["plate"].cell(bus) == "BZV-1024-AB"
        assert columns["operator"].cell(bus) == "Grâce Nkounkou"
        assert columns["driver"].cell(bus) == "—"
        assert columns["status"].cell(bus) == "Actif"

    def test_drawer_body(self, workspace):
        drawer = BusesSpec().columns(workspace)[0].drawer
        bus = workspace.buses.get("b1")
        assert drawer.title(bus) == "Bus BZV-1024-AB"
        assert ("Propriétaire", "Grâce Nkounkou") in drawer.body(bus)

    def test_import_headers_map_one_to_one(self):
        spec = BusesSpec()
        headers = ["plate", "model", "capacity", "year", "status", "owner", "driver"]
        mapping = auto_guess_mapping(spec.import_fields, headers, spec.sample_headers)
        assert mapping == {
            "plate": "plate",
            "model": "model",
            "capacity": "capacity",
            "year": "year",
            "status": "status",
            "operatorId": "owner",
            "assignedDriverId": "driver",
        }

    def test_toggle_action(self, workspace):
        ops = FakeOps()
        bus = workspace.buses.get("b1")
        actions = BusesSpec().row_actions(bus, ops)
        assert [a.label for a in actions] == ["Désactiver", "Supprimer"]
        assert actions[1].destructive

        actions[0].callback()
        assert ops.updated[0].status == "inactive"
        assert bus.status == "active"

        actions[1].callback()
        assert ops.deleted == [[bus]]

    def test_inactive_bus_offers_activate(self, workspace):
        bus = Bus(id="b2", plate="X", status="maintenance")
        labels = [a.label for a in BusesSpec().row_actions(bus, FakeOps())]
        assert labels[0] == "Activer"

    def test_search_and_filter_through_table_state(self, workspace):
        spec = BusesSpec()
        workspace.buses.upsert(Bus(id="b2", plate="PNR-0412-EF", status="inactive", model="Coaster"))
        state = _state(spec, workspace)
        state.set_search_input("coaster")
        state.flush_search()
        assert [row_id for row_id, _ in state.filtered_rows()] == ["b2"]

        state.set_search_input("")
        state.flush_search()
        state.set_filter("status", "active")
        assert [row_id for row_id, _ in state.filtered_rows()] == ["b1"]


class TestPeopleAndStaffSpecs:
    def test_people_transform(self, workspace):
        person = PeopleSpec().transform(
            {"name": "Sylvie Moukoko", "phone": "044", "role": "Conductor", "licenseNo": ""},
            workspace,
        )
        assert isinstance(person, Person)
        assert person.role == "conductor"
        assert person.license_no is None

    def test_people_require_name_and_phone(self, workspace):
        spec = PeopleSpec()
        assert spec.transform({"name": "A", "phone": ""}, workspace) is None
        assert spec.transform({"name": "", "phone": "1"}, workspace) is None

    def test_unknown_role_becomes_driver(self, workspace):
        person = PeopleSpec().transform({"name": "A", "phone": "1", "role": "pilot"}, workspace)
        assert person.role == "driver"

    def test_people_dedupe_key_ignores_name_case(self):
        spec = PeopleSpec()
        a = Person(id="1", name="Jean Mabiala", phone="061")
        b = Person(id="2", name="JEAN MABIALA", phone="061")
        assert spec.dedupe_key(a) == spec.dedupe_key(b)

    def test_staff_role_is_agent_unless_admin(self, workspace):
        spec = StaffSpec()
        admin = spec.transform({"name": "N", "phone": "1", "role": "Admin"}, workspace)
        other = spec.transform({"name": "R", "phone": "2", "role": "driver"}, workspace)
        assert isinstance(admin, Staff)
        assert admin.role == "admin"
        assert other.role == "agent"

    def test_people_import_end_to_end(self, workspace, tmp_path):
        spec = PeopleSpec()
        p = tmp_path / "people.csv"
        p.write_text(
            "Nom complet;Rôle;Tél;Email\n"
            "Patrick Okemba;driver;069;\n"
            ";owner;070;\n"
            "Aimé Bouanga;owner;071;aime@example.cg\n",
            encoding="utf-8",
        )
        confirmed = []
        session = ImportSession(
            spec.import_fields,
            sample_headers=spec.sample_headers,
            transform=lambda raw: spec.transform(raw, workspace),
            on_confirm=confirmed.append,
        )
        session.load_file(p)
        assert session.mapping["name"] == "Nom complet"
        assert session.mapping["phone"] == "Tél"
        session.build_preview()
        assert len(session.skipped) == 1
        rows = session.confirm()
        assert [r.name for r in rows] == ["Patrick Okemba", "Aimé Bouanga"]
        assert rows[1].email == "aime@example.cg"


class TestReservationsSpec:
    def test_transform(self, workspace):
        reservation = ReservationsSpec().transform(
            {
                "code": "",
                "tripDate": "2025-02-01",
                "route.from": "Brazzaville",
                "route.to": "Dolisie",
                "passenger.name": "Mireille Ibara",
                "passenger.phone": "055",
                "seats": "",
                "busIds": "b1, b2,",
                "priceTotal": "12 500",
                "status": "unknown",
            },
            workspace,
        )
        assert isinstance(reservation, Reservation)
        assert reservation.code.startswith("BZV-")
        assert len(reservation.code) == len("BZV-000000")
        assert reservation.seats == 1
        assert reservation.bus_ids == ["b1", "b2"]
        assert reservation.price_total == 12500.0
        assert reservation.status == "pending"
        assert reservation.created_at

    @pytest.mark.parametrize(
        "missing", ["tripDate", "route.from", "route.to", "passenger.name", "passenger.phone"]
    )
    def test_required_values(self, workspace, missing):
        raw = {
            "tripDate": "2025-02-01",
            "route.from": "A",
            "route.to": "B",
            "passenger.name": "C",
            "passenger.phone": "D",
        }
        raw[missing] = ""
        assert ReservationsSpec().transform(raw, workspace) is None

    def test_dedupe_key(self, workspace):
        spec = ReservationsSpec()
        r1 = workspace.reservations.get("r1")
        assert spec.dedupe_key(r1) == "code:BZV-000001"
        r1.code = ""
        assert spec.dedupe_key(r1) == "npd:chancel ngoma|065|2025-01-14"

    def test_cancel_action_hidden_when_cancelled(self, workspace):
        spec = ReservationsSpec()
        ops = FakeOps()
        r1 = workspace.reservations.get("r1")
        actions = spec.row_actions(r1, ops)
        assert [a.label for a in actions] == ["Annuler", "Supprimer"]
        actions[0].callback()
        assert ops.updated[0].status == "cancelled"
        assert [a.label for a in spec.row_actions(ops.updated[0], ops)] == ["Supprimer"]

    def test_payment_column_and_filter(self, workspace):
        spec = ReservationsSpec()
        columns = {c.id: c for c in spec.columns(workspace)}
        r1 = workspace.reservations.get("r1")
        assert columns["payment"].cell(r1) == "Payé"
        assert columns["total"].cell(r1) == "30\u202f000 FCFA"
        assert columns["buses"].cell(r1) == "BZV-1024-AB"

        state = _state(spec, workspace)
        state.set_filter("payment", "failed")
        assert state.filtered_rows() == []
        state.set_filter("payment", "paid")
        assert len(state.filtered_rows()) == 1

    def test_search_by_nested_fields(self, workspace):
        state = _state(ReservationsSpec(), workspace)
        state.set_search_input("pointe")
        state.flush_search()
        assert len(state.filtered_rows()) == 1
        state.set_search_input("kinshasa")
        state.flush_search()
        assert state.filtered_rows() == []

    def test_format_money(self):
        assert format_money(12500) == "12\u202f500 FCFA"
        assert format_money(None) == "—"
