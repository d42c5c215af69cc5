"""Tests for RowStore and the optimistic update helpers."""

from __future__ import annotations

import pytest

from fleetdesk.core.errors import OptimisticUpdateError
from fleetdesk.core.optimistic import RowStore, with_optimistic_update


@pytest.fixture
def store() -> RowStore:
    return RowStore(["a", "b", "c"])


class TestRowStore:
    def test_listeners_receive_new_rows(self, store):
        seen = []
        store.subscribe(seen.append)
        store.set_rows(["x"])
        assert seen == [["x"]]

    def test_rows_is_a_copy(self, store):
        store.rows.append("z")
        assert store.rows == ["a", "b", "c"]


class TestWithOptimisticUpdate:
    def test_success_keeps_optimistic_rows(self, store):
        seen = []
        store.subscribe(seen.append)
        result = with_optimistic_update(store, lambda rows: rows[1:], lambda: "ok")
        assert result == "ok"
        assert store.rows == ["b", "c"]
        assert seen == [["b", "c"]]

    def test_optimistic_state_visible_during_operation(self, store):
        during = []
        with_optimistic_update(store, ["only"], lambda: during.append(store.rows))
        assert during == [["only"]]

    def test_failure_rolls_back(self, store):
        def boom():
            raise RuntimeError("server down")

        with pytest.raises(OptimisticUpdateError) as info:
            with_optimistic_update(store, [], boom)
        assert store.rows == ["a", "b", "c"]
        assert isinstance(info.value.__cause__, RuntimeError)
        assert "server down" in str(info.value)

    def test_rollback_notifies_listeners(self, store):
        seen = []
        store.subscribe(seen.append)

        def boom():
            raise ValueError("nope")

        with pytest.raises(OptimisticUpdateError):
            with_optimistic_update(store, ["tmp"], boom)
        assert seen == [["tmp"], ["a", "b", "c"]]

