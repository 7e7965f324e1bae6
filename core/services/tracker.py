"""
Patient tracker: the interaction boundary tying the services together.

Control flow for every mutation:
1. Record Store validates and persists
2. Query Engine recomputes the displayed view
3. Report Aggregator and Dashboard re-run over the full store

Expected failures come back as `Result` values; nothing raised here escapes a
single user action.
"""

from collections.abc import Mapping
from typing import Any

import structlog

from core.config import AppConfig, get_config
from core.domain.errors import EmptyStoreError, NotFoundError, TrackerError
from core.domain.models import (
    Condition,
    ConditionReport,
    DashboardProjection,
    Gender,
    PatientRecord,
    SortKey,
)
from core.domain.result import Result
from core.services.csv_exporter import to_csv
from core.services.dashboard import DashboardService
from core.services.query_engine import view
from core.services.record_store import JsonFileKeyValueStore, KeyValueStore, RecordStore
from core.services.report_aggregator import report

logger = structlog.get_logger(__name__)


def sample_records() -> list[PatientRecord]:
    """The three demo patients offered by "Import sample"."""
    return [
        PatientRecord(
            name="Aisha Khan", gender=Gender.FEMALE, age=52, condition=Condition.DIABETES
        ),
        PatientRecord(
            name="Bilal Ahmed",
            gender=Gender.MALE,
            age=45,
            condition=Condition.HIGH_BLOOD_PRESSURE,
        ),
        PatientRecord(name="Sara Ali", gender=Gender.FEMALE, age=30, condition=Condition.THYROID),
    ]


class PatientTracker:
    """
    Owns the Record Store and the current search/sort state.

    Derived state (`rows`, `report`, `dashboard`) is recomputed on refresh and
    is disposable; only the store holds records long-term.
    """

    def __init__(
        self,
        kv: KeyValueStore | None = None,
        dashboard: DashboardService | None = None,
        config: AppConfig | None = None,
    ) -> None:
        self.config = config or get_config()
        self.kv = kv if kv is not None else JsonFileKeyValueStore(self.config.storage.path)
        self.store = RecordStore(self.kv, key=self.config.storage.patients_key)
        self.dashboard_service = dashboard
        self.logger = logger.bind(component="patient_tracker")

        self.query = ""
        self.sort_key = SortKey.NONE
        self.rows: list[PatientRecord] = []
        self.report: ConditionReport = report(())
        self.dashboard: DashboardProjection | None = None

        self.refresh()

    # Derived state

    def refresh_rows(self) -> list[PatientRecord]:
        self.rows = view(self.store.all(), self.query, self.sort_key)
        return self.rows

    def refresh(self) -> None:
        """Re-run the table view, the report and the dashboard."""
        records = self.store.all()
        self.refresh_rows()
        self.report = report(records)
        if self.dashboard_service is not None:
            self.dashboard = self.dashboard_service.refresh(records)

    def set_query(self, query: str) -> list[PatientRecord]:
        """Typing in the search box only re-renders the table."""
        self.query = query
        return self.refresh_rows()

    def set_sort(self, sort_key: SortKey | str) -> list[PatientRecord]:
        self.sort_key = SortKey(sort_key)
        self.refresh()
        return self.rows

    # Mutations

    def submit(
        self, fields: Mapping[str, Any], record_id: str | None = None
    ) -> Result[str, TrackerError]:
        """Add a new patient, or update `record_id` when given. Returns the record id."""
        try:
            if record_id:
                self.store.update(record_id, fields)
                saved_id = record_id
            else:
                saved_id = self.store.add(fields)
        except TrackerError as e:
            self.logger.warning("patient_submit_rejected", error=str(e), record_id=record_id)
            return Result.err(e)

        self.refresh()
        return Result.ok(saved_id)

    def edit(self, record_id: str) -> Result[PatientRecord, NotFoundError]:
        """Fetch a record to prefill the edit form."""
        try:
            return Result.ok(self.store.get(record_id))
        except NotFoundError as e:
            return Result.err(e)

    def delete(self, record_id: str) -> None:
        self.store.remove(record_id)
        self.refresh()

    def load_sample(self) -> int:
        count = self.store.import_records(sample_records(), prepend=True)
        self.refresh()
        return count

    def export(self) -> Result[bytes, EmptyStoreError]:
        try:
            return Result.ok(to_csv(self.store.all()))
        except EmptyStoreError as e:
            self.logger.warning("export_rejected", reason=str(e))
            return Result.err(e)

    # Theme

    @property
    def dark_mode(self) -> bool:
        return self.kv.get(self.config.storage.theme_key) == "1"

    def set_dark_mode(self, enabled: bool) -> None:
        self.kv.set(self.config.storage.theme_key, "1" if enabled else "0")
        self.logger.debug("theme_changed", dark=enabled)
