"""
Console rendering surface for the patient tracker.

The page's table, report line, summary cards, recent list and condition panel,
drawn with rich. User-entered text is markup-escaped before it reaches a
renderable, the same job the page's HTML escaping did.
"""

from rich.columns import Columns
from rich.console import Console, Group
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from core.domain.models import (
    ChartSpec,
    ConditionReport,
    DashboardProjection,
    PatientRecord,
    SortKey,
)
from core.services.condition_lookup import LookupOutcome, LookupStatus

SORT_OPTIONS: list[tuple[SortKey, str]] = [
    (SortKey.NONE, "None"),
    (SortKey.NAME, "Name"),
    (SortKey.AGE, "Age"),
    (SortKey.CONDITION, "Condition"),
]

BAR_WIDTH = 30


def patient_table(rows: list[PatientRecord]) -> Table:
    table = Table(title="Patients")
    table.add_column("Name", style="cyan")
    table.add_column("Gender")
    table.add_column("Age", justify="right")
    table.add_column("Condition")
    table.add_column("Actions", style="dim")

    if not rows:
        table.add_row("[dim]No records[/dim]", "", "", "", "")
        return table

    for record in rows:
        table.add_row(
            escape(record.name),
            record.gender.value,
            str(record.age),
            record.condition.value,
            f"edit {record.id[:8]} | delete {record.id[:8]}",
        )
    return table


def report_text(report: ConditionReport) -> Text:
    return Text(report.summary_text())


def summary_cards(projection: DashboardProjection) -> Columns:
    return Columns(
        [
            Panel(Text(str(value), style="bold"), title=label, expand=False)
            for label, value in projection.summary.cards()
        ]
    )


def recent_list(projection: DashboardProjection) -> Group:
    return Group(
        *(
            Text(f"• {item.name} — {item.condition.value} ({item.age})")
            for item in projection.recent
        )
    )


def condition_panel(outcome: LookupOutcome) -> Panel:
    """Result region for a condition search."""
    if outcome.status is not LookupStatus.FOUND or outcome.condition is None:
        style = "red" if outcome.status is LookupStatus.ERROR else "dim"
        return Panel(Text(outcome.message, style=style), title="Condition")

    condition = outcome.condition
    body = Table.grid(padding=(0, 1))
    body.add_column(style="bold")
    body.add_column()
    if condition.imagesrc:
        body.add_row("Image:", escape(condition.imagesrc))
    body.add_row("Symptoms:", escape(", ".join(condition.symptoms)))
    body.add_row("Prevention:", escape(", ".join(condition.prevention)))
    body.add_row("Treatment:", escape(condition.treatment))
    return Panel(body, title=escape(condition.name))


class ConsoleChart:
    """A drawn chart. Destroyed charts refuse to draw again."""

    def __init__(self, spec: ChartSpec, console: Console) -> None:
        self.spec = spec
        self.console = console
        self.destroyed = False

    def renderable(self) -> Table:
        title = f"{self.spec.canvas_id} ({self.spec.chart_type})"
        table = Table(title=title, show_header=False, box=None)
        table.add_column("Label", style="cyan")
        table.add_column("Bar")
        table.add_column("Value", justify="right")

        values = self.spec.datasets[0].data if self.spec.datasets else []
        peak = max(values, default=0)
        for label, value in zip(self.spec.labels, values, strict=False):
            width = round(BAR_WIDTH * value / peak) if peak else 0
            table.add_row(label, "█" * width, str(value))
        return table

    def draw(self) -> None:
        if self.destroyed:
            raise RuntimeError(f"chart {self.spec.canvas_id} was destroyed")
        self.console.print(self.renderable())

    def destroy(self) -> None:
        self.destroyed = True


class ConsoleChartRenderer:
    """`ChartRenderer` that draws horizontal bar charts to a rich console."""

    def __init__(self, console: Console | None = None, draw_on_create: bool = True) -> None:
        self.console = console or Console()
        self.draw_on_create = draw_on_create
        self.created: list[ConsoleChart] = []

    def create(self, spec: ChartSpec) -> ConsoleChart:
        chart = ConsoleChart(spec, self.console)
        self.created.append(chart)
        if self.draw_on_create:
            chart.draw()
        return chart

    @property
    def live(self) -> list[ConsoleChart]:
        return [chart for chart in self.created if not chart.destroyed]
