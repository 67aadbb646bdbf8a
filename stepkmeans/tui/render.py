"""
Text rendering of a clustering session.

Pure functions mapping an EngineView onto a character grid, plus the
inverse mapping used when a cell is clicked. Kept free of textual so they
can be tested without running an app.
"""

from __future__ import annotations

import math
from typing import Optional

from rich.text import Text

from ..config import PlotBounds
from ..core.errors import InvalidParameter
from ..core.store import EngineView

POINT_GLYPH = "●"
CENTROID_GLYPH = "✚"
UNASSIGNED_STYLE = "bold dodger_blue2"
CENTROID_STYLE = "bold red"
GRID_STYLE = "grey30"


def coords_to_cell(
    x: float,
    y: float,
    bounds: PlotBounds,
    width: int,
    height: int,
) -> Optional[tuple[int, int]]:
    """Map plot coordinates to (col, row); None when outside the drawing domain."""
    if not (0 <= x <= bounds.x_max and 0 <= y <= bounds.y_max):
        return None
    col = round(x / bounds.x_max * (width - 1))
    row = (height - 1) - round(y / bounds.y_max * (height - 1))
    return col, row


def cell_to_coords(
    col: int,
    row: int,
    bounds: PlotBounds,
    width: int,
    height: int,
) -> tuple[float, float]:
    """Inverse of coords_to_cell (y axis points up)."""
    x = col / max(width - 1, 1) * bounds.x_max
    y = ((height - 1) - row) / max(height - 1, 1) * bounds.y_max
    return x, y


def render_plot(
    view: EngineView,
    bounds: PlotBounds,
    width: int,
    height: int,
) -> Text:
    """
    Draw gridlines, points and centroids into a width x height grid.

    Points take their cluster color (unassigned points are blue),
    centroids are drawn last in red so they sit on top.
    """
    width = max(width, 2)
    height = max(height, 2)
    cells: list[list[tuple[str, str]]] = [
        [(" ", "")] * width for _ in range(height)
    ]

    # Gridlines at integer ticks
    tick_cols = {coords_to_cell(t, 0, bounds, width, height)[0] for t in range(int(bounds.x_max) + 1)}
    tick_rows = {coords_to_cell(0, t, bounds, width, height)[1] for t in range(int(bounds.y_max) + 1)}
    for row in range(height):
        for col in range(width):
            on_col = col in tick_cols
            on_row = row in tick_rows
            if on_col and on_row:
                cells[row][col] = ("┼", GRID_STYLE)
            elif on_col:
                cells[row][col] = ("│", GRID_STYLE)
            elif on_row:
                cells[row][col] = ("─", GRID_STYLE)

    for point in view.points:
        cell = coords_to_cell(point.x, point.y, bounds, width, height)
        if cell is None:
            continue
        color = view.color_for(point)
        style = f"bold {color}" if color else UNASSIGNED_STYLE
        cells[cell[1]][cell[0]] = (POINT_GLYPH, style)

    for centroid in view.centroids:
        cell = coords_to_cell(centroid.x, centroid.y, bounds, width, height)
        if cell is None:
            continue
        cells[cell[1]][cell[0]] = (CENTROID_GLYPH, CENTROID_STYLE)

    text = Text(no_wrap=True)
    for i, row in enumerate(cells):
        for char, style in row:
            text.append(char, style=style or None)
        if i < height - 1:
            text.append("\n")
    return text


def parse_point_input(
    text: str,
    bounds: PlotBounds,
    round_input: bool = True,
) -> tuple[float, float]:
    """
    Parse "x y" or "x, y" into coordinates inside the accepted input range.

    Raises:
        InvalidParameter: If the text is not two numbers or lies outside bounds
    """
    parts = text.replace(",", " ").split()
    if len(parts) != 2:
        raise InvalidParameter(f"Expected 'x y', got {text!r}")
    try:
        x, y = float(parts[0]), float(parts[1])
    except ValueError as e:
        raise InvalidParameter(f"Coordinates must be numbers, got {text!r}") from e
    if not (math.isfinite(x) and math.isfinite(y)):
        raise InvalidParameter(f"Coordinates must be finite, got {text!r}")

    if round_input:
        x, y = float(round(x)), float(round(y))
    if not bounds.contains(x, y):
        raise InvalidParameter(
            f"({x:g}, {y:g}) is outside [0, {bounds.input_x_max:g}] x [0, {bounds.input_y_max:g}]"
        )
    return x, y


def format_cluster(cluster: Optional[int]) -> str:
    """Cluster label for display (1-based)."""
    return str(cluster + 1) if cluster is not None else "Unassigned"


def table_rows(view: EngineView) -> list[tuple[str, str, str, str]]:
    """Rows of (name, x, y, cluster) for the points table."""
    return [
        (p.name, f"{p.x:.2f}", f"{p.y:.2f}", format_cluster(p.cluster))
        for p in view.points
    ]
