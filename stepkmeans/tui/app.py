"""
K-Means TUI - Interactive stepwise clustering in the terminal.

Uses textual for terminal UI. The app only feeds points into the engine
and reads its view back; all clustering happens in IterationController.
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional

from textual import events
from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.containers import Horizontal, Vertical
from textual.widget import Widget
from textual.widgets import Button, DataTable, Footer, Header, Input, Static

from ..config import KMeansConfig, PlotBounds
from ..core.controller import IterationController
from ..core.errors import KMeansError
from ..core.logger import EventLog
from ..core.store import EngineView
from .render import cell_to_coords, render_plot, parse_point_input, table_rows


class PlotView(Widget):
    """Scatter plot of points and centroids. Click to add a point."""

    def __init__(self, bounds: PlotBounds, **kwargs):
        super().__init__(**kwargs)
        self.bounds = bounds
        self.engine_view: Optional[EngineView] = None

    def show(self, view: EngineView) -> None:
        self.engine_view = view
        self.refresh()

    def render(self):
        if self.engine_view is None:
            return ""
        size = self.content_size
        return render_plot(self.engine_view, self.bounds, size.width, size.height)

    def on_click(self, event: events.Click) -> None:
        offset = event.get_content_offset(self)
        if offset is None:
            return
        size = self.content_size
        x, y = cell_to_coords(offset.x, offset.y, self.bounds, size.width, size.height)
        self.app.add_point_from_plot(x, y)


class StatusPanel(Static):
    """Displays iteration status."""

    def refresh_status(self, view: EngineView) -> None:
        if view.converged:
            indicator = "[bold green]● converged[/]"
        elif view.can_step:
            indicator = "[bold cyan]● ready[/]"
        else:
            indicator = "[dim]● not initialized[/]"

        legend = "  ".join(
            f"[{color}]●[/] {i + 1}" for i, color in enumerate(view.colors)
        )

        self.update(
            f"{indicator}\n"
            f"[bold]Iteration:[/] {view.iteration}\n"
            f"[bold]Points:[/] {len(view.points)}\n"
            f"[bold]k:[/] {view.k if view.k is not None else '-'}\n"
            f"[bold]Phase:[/] {view.phase.value}\n"
            f"[bold]History:[/] {view.history_depth}\n"
            f"{legend}"
        )


class KMeansApp(App):
    """Main clustering application."""

    CSS = """
    #main {
        height: 3fr;
        layout: horizontal;
    }
    #plot-view {
        width: 3fr;
        border: solid green;
    }
    #side {
        width: 1fr;
        min-width: 28;
        border: solid blue;
        padding: 0 1;
    }
    #side Button {
        width: 100%;
        margin-bottom: 1;
    }
    #points-table {
        height: 2fr;
        border: solid grey;
    }
    #input-container {
        dock: bottom;
        height: 3;
        padding: 0 1;
    }
    #point-input {
        width: 100%;
    }
    """

    BINDINGS = [
        Binding("ctrl+q", "quit", "Quit", priority=True),
        Binding("ctrl+s", "initialize", "Initialize", priority=True),
        Binding("ctrl+n", "next_iteration", "Next", priority=True),
        Binding("ctrl+z", "previous_iteration", "Previous", priority=True),
        Binding("ctrl+r", "reset", "Reset", priority=True),
    ]

    def __init__(
        self,
        config: Optional[KMeansConfig] = None,
        initial_points: Optional[list[tuple[float, float]]] = None,
        **kwargs,
    ):
        super().__init__(**kwargs)
        self.config = config or KMeansConfig()
        self.event_log = EventLog(Path(self.config.log_dir)) if self.config.log_dir else None
        self.controller = IterationController.from_config(self.config, event_log=self.event_log)
        try:
            for x, y in initial_points or []:
                self.controller.add_point(x, y)
        except KMeansError:
            if self.event_log:
                self.event_log.close()
            raise

    def compose(self) -> ComposeResult:
        yield Header()
        with Horizontal(id="main"):
            yield PlotView(self.config.plot, id="plot-view")
            with Vertical(id="side"):
                yield StatusPanel(id="status-panel")
                yield Input(
                    value=str(self.config.k),
                    type="integer",
                    placeholder=f"clusters (1-{self.config.max_k})",
                    id="k-input",
                )
                yield Button("Initialize", id="initialize", variant="primary")
                yield Button("Next Iteration", id="next", variant="success")
                yield Button("Previous Iteration", id="previous", variant="warning")
                yield Button("Reset", id="reset", variant="error")
        yield DataTable(id="points-table", zebra_stripes=True)
        with Horizontal(id="input-container"):
            yield Input(placeholder="Add point: x y (or click the plot)", id="point-input")
        yield Footer()

    def on_mount(self) -> None:
        self.title = "K-Means Clustering"
        table = self.query_one("#points-table", DataTable)
        table.add_columns("Point", "X", "Y", "Cluster")
        self._refresh()

    def on_unmount(self) -> None:
        if self.event_log:
            self.event_log.close()

    def _requested_k(self) -> Optional[int]:
        """k from the input box, None if not a usable number."""
        raw = self.query_one("#k-input", Input).value.strip()
        try:
            k = int(raw)
        except ValueError:
            return None
        if not 1 <= k <= self.config.max_k:
            return None
        return k

    def _refresh(self) -> None:
        """Redraw every panel from the engine's current view."""
        view = self.controller.view()

        self.query_one("#plot-view", PlotView).show(view)
        self.query_one("#status-panel", StatusPanel).refresh_status(view)

        table = self.query_one("#points-table", DataTable)
        table.clear()
        for row in table_rows(view):
            table.add_row(*row)

        self._update_buttons(view)

        self.sub_title = f"iteration {view.iteration}" + (" (converged)" if view.converged else "")

    def _update_buttons(self, view: EngineView) -> None:
        """Enable only the operations the engine currently allows."""
        k = self._requested_k()
        self.query_one("#initialize", Button).disabled = k is None or not view.can_initialize(k)
        self.query_one("#next", Button).disabled = not view.can_step
        self.query_one("#previous", Button).disabled = not view.can_revert

    def add_point_from_plot(self, x: float, y: float) -> None:
        """Add a clicked point, snapped and range-checked like typed input."""
        if self.config.round_input:
            x, y = float(round(x)), float(round(y))
        if not self.config.plot.contains(x, y):
            return
        self._add_point(x, y)

    def _add_point(self, x: float, y: float) -> None:
        try:
            point = self.controller.add_point(x, y)
        except KMeansError as e:
            self.notify(str(e), severity="error")
            return
        self.notify(f"Added {point.name} ({point.x:g}, {point.y:g})")
        self._refresh()

    def on_input_submitted(self, event: Input.Submitted) -> None:
        if event.input.id == "k-input":
            self.action_initialize()
            return

        text = event.value.strip()
        if not text:
            return
        event.input.value = ""
        try:
            x, y = parse_point_input(text, self.config.plot, self.config.round_input)
        except KMeansError as e:
            self.notify(str(e), severity="error")
            return
        self._add_point(x, y)

    def on_input_changed(self, event: Input.Changed) -> None:
        if event.input.id == "k-input":
            self._update_buttons(self.controller.view())

    def on_button_pressed(self, event: Button.Pressed) -> None:
        actions = {
            "initialize": self.action_initialize,
            "next": self.action_next_iteration,
            "previous": self.action_previous_iteration,
            "reset": self.action_reset,
        }
        action = actions.get(event.button.id)
        if action:
            action()

    def action_initialize(self) -> None:
        k = self._requested_k()
        if k is None:
            self.notify(f"Number of clusters must be 1-{self.config.max_k}", severity="error")
            return
        try:
            self.controller.initialize(k)
        except KMeansError as e:
            self.notify(str(e), severity="error")
            return
        self.notify(f"Initialized {k} centroids")
        self._refresh()

    def action_next_iteration(self) -> None:
        result = self.controller.step()
        if result is None:
            view = self.controller.view()
            self.notify("Already converged" if view.converged else "Initialize first")
            return
        if result.converged:
            self.notify(f"Converged after {result.iteration} iterations")
        self._refresh()

    def action_previous_iteration(self) -> None:
        if self.controller.revert() is None:
            self.notify("No previous iteration")
            return
        self._refresh()

    def action_reset(self) -> None:
        self.controller.reset()
        self.notify("Reset")
        self._refresh()


def run_app(
    config: Optional[KMeansConfig] = None,
    initial_points: Optional[list[tuple[float, float]]] = None,
) -> None:
    """Run the clustering TUI."""
    app = KMeansApp(config, initial_points)
    app.run()
