"""
Dashboard projection and chart lifecycle.

`project` is a pure derivation over the store. `DashboardService` owns the
chart handles created through a `ChartRenderer` and guarantees each prior
handle is destroyed before its replacement is created.
"""

from collections.abc import Iterable, Sequence
from decimal import ROUND_HALF_UP, Decimal
from types import TracebackType
from typing import Protocol

import structlog

from core.domain.models import (
    BUCKETS,
    ChartDataset,
    ChartSpec,
    Condition,
    DashboardProjection,
    PatientRecord,
    RecentItem,
    SummaryCards,
)
from core.services.report_aggregator import count_by_condition

logger = structlog.get_logger(__name__)

PIE_CANVAS = "condPie"
BAR_CANVAS = "ageBar"
RECENT_LIMIT = 6


def round_half_up(value: float) -> int:
    """Round x.5 up, matching how the page rounds averages."""
    return int(Decimal(str(value)).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def average_ages(records: Iterable[PatientRecord]) -> dict[Condition, int]:
    """Mean age per bucket, rounded to an integer; empty buckets are 0."""
    groups: dict[Condition, list[int]] = {bucket: [] for bucket in BUCKETS}
    for record in records:
        groups[record.condition].append(record.age)
    return {
        bucket: round_half_up(sum(ages) / len(ages)) if ages else 0
        for bucket, ages in groups.items()
    }


def project(
    records: Sequence[PatientRecord], recent_limit: int = RECENT_LIMIT
) -> DashboardProjection:
    """Chart-ready series for the dashboard, computed over the full store."""
    total, distribution = count_by_condition(records)
    summary = SummaryCards(
        total=total,
        diabetes=distribution[Condition.DIABETES],
        thyroid=distribution[Condition.THYROID],
        high_bp=distribution[Condition.HIGH_BLOOD_PRESSURE],
    )
    # A fixed window on store order, not a by-date ranking.
    recent = [
        RecentItem(id=r.id, name=r.name, condition=r.condition, age=r.age)
        for r in records[:recent_limit]
    ]
    return DashboardProjection(
        distribution=distribution,
        age_averages=average_ages(records),
        summary=summary,
        recent=recent,
    )


def chart_specs(projection: DashboardProjection) -> list[ChartSpec]:
    labels = [bucket.value for bucket in BUCKETS]
    return [
        ChartSpec(
            canvas_id=PIE_CANVAS,
            chart_type="pie",
            labels=labels,
            datasets=[ChartDataset(data=[projection.distribution[b] for b in BUCKETS])],
        ),
        ChartSpec(
            canvas_id=BAR_CANVAS,
            chart_type="bar",
            labels=labels,
            datasets=[
                ChartDataset(
                    label="Average age",
                    data=[projection.age_averages[b] for b in BUCKETS],
                )
            ],
        ),
    ]


class ChartHandle(Protocol):
    """A live chart instance held by the charting collaborator."""

    def destroy(self) -> None: ...


class ChartRenderer(Protocol):
    """Charting collaborator: turns a spec into a live chart on a canvas."""

    def create(self, spec: ChartSpec) -> ChartHandle: ...


class DashboardService:
    """
    Re-projects the dashboard and manages chart instances.

    One handle per canvas. Handles are released before re-creation, on
    `close()`, and on leaving the `with` block.
    """

    def __init__(self, renderer: ChartRenderer, recent_limit: int = RECENT_LIMIT) -> None:
        self.renderer = renderer
        self.recent_limit = recent_limit
        self.logger = logger.bind(component="dashboard")
        self._charts: dict[str, ChartHandle] = {}
        self.latest: DashboardProjection | None = None

    def _release(self, canvas_id: str) -> None:
        handle = self._charts.pop(canvas_id, None)
        if handle is not None:
            handle.destroy()

    def refresh(self, records: Sequence[PatientRecord]) -> DashboardProjection:
        projection = project(records, self.recent_limit)
        for spec in chart_specs(projection):
            self._release(spec.canvas_id)
            self._charts[spec.canvas_id] = self.renderer.create(spec)
        self.latest = projection
        self.logger.debug("dashboard_refreshed", total=projection.summary.total)
        return projection

    def close(self) -> None:
        for canvas_id in list(self._charts):
            self._release(canvas_id)

    @property
    def active_canvases(self) -> list[str]:
        return list(self._charts)

    def __enter__(self) -> "DashboardService":
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()
