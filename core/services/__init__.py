"""
Core services for the application.

This package contains the main service implementations: the record store,
query and report derivations, the dashboard projector, condition lookup and
CSV export, plus the tracker that wires them together.
"""

from .condition_lookup import ConditionLookup, ConditionSearch, LookupOutcome, LookupStatus
from .csv_exporter import export_csv, to_csv
from .dashboard import ChartRenderer, DashboardService, chart_specs, project
from .query_engine import view
from .record_store import (
    InMemoryKeyValueStore,
    JsonFileKeyValueStore,
    KeyValueStore,
    RecordStore,
)
from .report_aggregator import report
from .tracker import PatientTracker, sample_records

__all__ = [
    "KeyValueStore",
    "InMemoryKeyValueStore",
    "JsonFileKeyValueStore",
    "RecordStore",
    "view",
    "report",
    "project",
    "chart_specs",
    "ChartRenderer",
    "DashboardService",
    "ConditionLookup",
    "ConditionSearch",
    "LookupOutcome",
    "LookupStatus",
    "to_csv",
    "export_csv",
    "PatientTracker",
    "sample_records",
]
