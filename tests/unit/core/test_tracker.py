"""
Tests for the patient tracker interaction boundary.

Covers:
- Mutations refreshing the view, report and dashboard
- Errors returned as Result values instead of raised
- Sample import order, export and theme persistence
"""

from __future__ import annotations

from pathlib import Path

import pytest

from core.config import AppConfig, StorageConfig
from core.domain.errors import EmptyStoreError, NotFoundError, ValidationError
from core.domain.models import ChartSpec, Condition, SortKey
from core.services.dashboard import DashboardService
from core.services.record_store import InMemoryKeyValueStore, JsonFileKeyValueStore
from core.services.tracker import PatientTracker, sample_records


class _Handle:
    def destroy(self) -> None:
        pass


class _NullRenderer:
    def __init__(self) -> None:
        self.specs: list[ChartSpec] = []

    def create(self, spec: ChartSpec) -> _Handle:
        self.specs.append(spec)
        return _Handle()


@pytest.fixture
def kv() -> InMemoryKeyValueStore:
    return InMemoryKeyValueStore()


@pytest.fixture
def tracker(kv: InMemoryKeyValueStore) -> PatientTracker:
    return PatientTracker(
        kv=kv, dashboard=DashboardService(_NullRenderer()), config=AppConfig()
    )


def test_submit_adds_and_refreshes(tracker: PatientTracker) -> None:
    result = tracker.submit(
        {"name": "Omar", "gender": "Male", "age": "61", "condition": "Diabetes"}
    )

    assert result.is_ok()
    assert [r.id for r in tracker.rows] == [result.unwrap()]
    assert tracker.report.total == 1
    assert tracker.dashboard is not None
    assert tracker.dashboard.age_averages[Condition.DIABETES] == 61


def test_submit_incomplete_form_returns_error(tracker: PatientTracker) -> None:
    result = tracker.submit({"name": "Omar", "gender": "Male", "age": "", "condition": ""})

    assert result.is_err()
    error = result.unwrap_err()
    assert isinstance(error, ValidationError)
    assert error.fields == ["age", "condition"]
    assert tracker.rows == []


def test_submit_with_id_updates(tracker: PatientTracker) -> None:
    record_id = tracker.submit(
        {"name": "Omar", "gender": "Male", "age": 61, "condition": "Diabetes"}
    ).unwrap()
    added = tracker.edit(record_id).unwrap().added

    result = tracker.submit(
        {"name": "Omar F.", "gender": "Male", "age": 62, "condition": "Thyroid"}, record_id
    )

    assert result.unwrap() == record_id
    edited = tracker.edit(record_id).unwrap()
    assert (edited.name, edited.age, edited.condition) == ("Omar F.", 62, Condition.THYROID)
    assert edited.added == added
    assert tracker.report.per_condition[Condition.THYROID] == 1


def test_submit_update_unknown_id_returns_not_found(tracker: PatientTracker) -> None:
    result = tracker.submit(
        {"name": "Omar", "gender": "Male", "age": 61, "condition": "Diabetes"}, "ghost"
    )
    assert isinstance(result.unwrap_err(), NotFoundError)


def test_edit_unknown_returns_error(tracker: PatientTracker) -> None:
    assert tracker.edit("ghost").is_err()


def test_delete_is_idempotent(tracker: PatientTracker) -> None:
    tracker.load_sample()
    victim = tracker.rows[0].id

    tracker.delete(victim)
    tracker.delete(victim)

    assert victim not in {r.id for r in tracker.rows}
    assert tracker.report.total == 2


def test_load_sample_prepends(tracker: PatientTracker) -> None:
    tracker.submit({"name": "Omar", "gender": "Male", "age": 61, "condition": "Diabetes"})

    assert tracker.load_sample() == 3

    assert [r.name for r in tracker.rows] == ["Aisha Khan", "Bilal Ahmed", "Sara Ali", "Omar"]


def test_query_filters_rows_but_not_report(tracker: PatientTracker) -> None:
    tracker.load_sample()

    rows = tracker.set_query("diab")

    assert [r.name for r in rows] == ["Aisha Khan"]
    assert tracker.report.total == 3


def test_sort_by_age(tracker: PatientTracker) -> None:
    tracker.load_sample()

    rows = tracker.set_sort(SortKey.AGE)

    assert [r.age for r in rows] == [30, 45, 52]
    assert tracker.sort_key is SortKey.AGE


def test_export(tracker: PatientTracker) -> None:
    empty = tracker.export()
    assert isinstance(empty.unwrap_err(), EmptyStoreError)

    tracker.load_sample()
    payload = tracker.export().unwrap()
    assert payload.count(b"\n") == 4


def test_dark_mode_round_trip(tracker: PatientTracker, kv: InMemoryKeyValueStore) -> None:
    assert tracker.dark_mode is False

    tracker.set_dark_mode(True)
    assert kv.get("dark") == "1"
    assert tracker.dark_mode is True

    tracker.set_dark_mode(False)
    assert kv.get("dark") == "0"
    assert tracker.dark_mode is False


def test_state_survives_restart_on_disk(tmp_path: Path) -> None:
    config = AppConfig(storage=StorageConfig(path=str(tmp_path / "store.json")))
    first = PatientTracker(config=config)
    first.load_sample()
    first.set_dark_mode(True)

    second = PatientTracker(kv=JsonFileKeyValueStore(config.storage.path), config=config)

    assert [r.name for r in second.rows] == [r.name for r in first.rows]
    assert second.dark_mode is True


def test_sample_records_are_fresh_each_call() -> None:
    first = {r.id for r in sample_records()}
    second = {r.id for r in sample_records()}
    assert first.isdisjoint(second)
