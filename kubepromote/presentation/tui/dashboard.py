"""
Dashboard TUI

Architectural Intent:
- Textual-based pipeline dashboard: one row per workload label, one column
  per namespace in the promotion chain
- Highlights labels whose versions differ along the chain, i.e. workloads
  with something waiting to be promoted
- Configurable refresh interval (+/- keys)
"""

from textual.app import App, ComposeResult
from textual.widgets import Header, Footer, DataTable, Log
from textual.containers import Vertical
import logging
from datetime import datetime

from kubepromote.application.use_cases.observe_workloads import WorkloadObserver
from kubepromote.domain.errors import PromoterError
from kubepromote.domain.value_objects.promotion_chain import PromotionChain

logger = logging.getLogger(__name__)

SEVERITY_STYLES = {
    "info": "green",
    "warning": "yellow",
    "error": "red",
}

MISSING = "-"


def version_row(
    label: str, stages: tuple[str, ...], versions: dict[str, dict[str, str]]
) -> list[str]:
    """Cells for one label: the label, then its version in each stage."""
    return [label] + [versions.get(stage, {}).get(label, MISSING) for stage in stages]


def pending_promotion(row: list[str]) -> bool:
    """True when the versions present in the row are not all equal."""
    present = {cell for cell in row[1:] if cell != MISSING}
    return len(present) > 1


class PipelineDashboard(App):
    """A Textual app showing workload versions across the promotion chain."""

    CSS = """
    Screen {
        layout: vertical;
    }
    DataTable {
        height: 1fr;
        border: solid green;
    }
    Log {
        height: 1fr;
        border: solid yellow;
    }
    """

    BINDINGS = [
        ("q", "quit", "Quit"),
        ("r", "refresh", "Refresh"),
        ("+", "increase_interval", "Slower"),
        ("-", "decrease_interval", "Faster"),
    ]

    def __init__(
        self,
        observer: WorkloadObserver,
        chain: PromotionChain,
        labels: list[str],
        refresh_interval: float = 15.0,
    ):
        super().__init__()
        self.observer = observer
        self.chain = chain
        self.labels = labels
        self._refresh_interval = refresh_interval
        self._timer = None

    def compose(self) -> ComposeResult:
        yield Header()
        yield Vertical(DataTable(id="pipeline_table"), Log(id="activity_log"))
        yield Footer()

    def on_mount(self) -> None:
        table = self.query_one(DataTable)
        table.add_columns("Label", *self.chain.stages)
        for label in self.labels:
            table.add_row(*version_row(label, self.chain.stages, {}), key=label)

        self.log_message("Pipeline dashboard initialized.", severity="info")
        self._timer = self.set_interval(self._refresh_interval, self._refresh_versions)
        self.call_later(self._refresh_versions)

    def log_message(self, message: str, severity: str = "info") -> None:
        log_widget = self.query_one(Log)
        timestamp = datetime.now().strftime("%H:%M:%S")
        style = SEVERITY_STYLES.get(severity, "")
        line = f"[{timestamp}] [{severity.upper()}] {message}"
        if style:
            log_widget.write_line(f"[{style}]{line}[/{style}]")
        else:
            log_widget.write_line(line)

    async def action_refresh(self) -> None:
        await self._refresh_versions()

    def action_increase_interval(self) -> None:
        self._refresh_interval = min(300.0, self._refresh_interval + 5.0)
        self._restart_timer()
        self.log_message(f"Refresh interval: {self._refresh_interval}s")

    def action_decrease_interval(self) -> None:
        self._refresh_interval = max(5.0, self._refresh_interval - 5.0)
        self._restart_timer()
        self.log_message(f"Refresh interval: {self._refresh_interval}s")

    def _restart_timer(self) -> None:
        if self._timer:
            self._timer.stop()
        self._timer = self.set_interval(self._refresh_interval, self._refresh_versions)

    async def _refresh_versions(self) -> None:
        versions: dict[str, dict[str, str]] = {}
        for stage in self.chain.stages:
            try:
                listing = await self.observer.list_instances(stage)
            except PromoterError as e:
                logger.warning("Dashboard refresh of %s failed: %s", stage, e)
                self.log_message(f"{stage}: {e}", severity="warning")
                continue
            versions[stage] = {
                i.label: i.version for i in reversed(listing.instances) if i.label
            }

        table = self.query_one(DataTable)
        for index, label in enumerate(self.labels):
            row = version_row(label, self.chain.stages, versions)
            for column, value in enumerate(row[1:], start=1):
                table.update_cell_at((index, column), value)
            if pending_promotion(row):
                self.log_message(f"{label}: versions differ along the chain", severity="warning")

        self.log_message("Refresh complete.")
