"""
Walk through the patient tracker end to end on the console.

This script exercises:
1. Configuration loading
2. Sample import, add, edit and delete
3. Search and sort views with the report line
4. Dashboard cards, charts and recent list
5. Condition lookup and CSV export

Run with: uv run python demo.py
"""

import asyncio

from rich.console import Console
from rich.panel import Panel

from adapters.console.rendering import (
    SORT_OPTIONS,
    ConsoleChartRenderer,
    condition_panel,
    patient_table,
    recent_list,
    report_text,
    summary_cards,
)
from core.config import get_config
from core.logging_conf import configure_logging
from core.services.condition_lookup import ConditionLookup, ConditionSearch
from core.services.dashboard import DashboardService
from core.services.record_store import InMemoryKeyValueStore
from core.services.tracker import PatientTracker

console = Console()


def show_list(tracker: PatientTracker) -> None:
    console.print(patient_table(tracker.rows))
    console.print(report_text(tracker.report))


async def run_demo() -> None:
    config = get_config()
    configure_logging(config.logging)

    console.print(Panel("Patient Tracker", style="bold blue"))

    renderer = ConsoleChartRenderer(console, draw_on_create=False)
    with DashboardService(renderer, recent_limit=config.dashboard.recent_limit) as dashboard:
        tracker = PatientTracker(kv=InMemoryKeyValueStore(), dashboard=dashboard, config=config)

        tracker.load_sample()
        added = tracker.submit(
            {"name": "Omar Farooq", "gender": "Male", "age": "61", "condition": "Diabetes"}
        )
        rejected = tracker.submit({"name": "", "gender": "Male", "age": "", "condition": ""})
        console.print(f"Added: {added.unwrap()}")
        console.print(f"Rejected: {rejected.unwrap_err()}", style="yellow")

        for key, label in SORT_OPTIONS:
            console.print(Panel(f"Sort by {label}", style="cyan"))
            tracker.set_sort(key)
            show_list(tracker)

        tracker.set_query("diab")
        console.print(Panel("Search: diab", style="cyan"))
        show_list(tracker)
        tracker.set_query("")

        if tracker.dashboard is not None:
            console.print(summary_cards(tracker.dashboard))
            for chart in renderer.live:
                chart.draw()
            console.print(recent_list(tracker.dashboard))

        search = ConditionSearch(
            ConditionLookup(config.lookup.source, timeout_seconds=config.lookup.timeout_seconds)
        )
        for query in ("", "diabetes", "Migraine"):
            console.print(condition_panel(await search.search(query)))

        exported = tracker.export()
        if exported.is_ok():
            console.print(exported.unwrap().decode("utf-8"))


if __name__ == "__main__":
    try:
        asyncio.run(run_demo())
    except KeyboardInterrupt:
        console.print("\nStopped by user", style="yellow")
