"""Chart pixel geometry derived from the size of the containing box.

The title line is reserved above the plot; the fixed margins hold the y-axis
labels (left) and the x-axis plus the amplicon and gene bands (bottom).
"""

from __future__ import annotations

from dataclasses import dataclass

TITLE_HEIGHT = 20   # px reserved above the plot for the title line
SPACE_LEFT = 40     # y-axis labels
SPACE_RIGHT = 10
SPACE_BOTTOM = 60   # x-axis + amplicon band + gene band
SPACE_TOP = 10


@dataclass(frozen=True)
class ChartGeometry:
    width: float
    height: float
    space_left: float = SPACE_LEFT
    space_right: float = SPACE_RIGHT
    space_bottom: float = SPACE_BOTTOM
    space_top: float = SPACE_TOP

    @property
    def plot_left(self) -> float:
        return self.space_left

    @property
    def plot_right(self) -> float:
        return self.width - self.space_right

    @property
    def plot_top(self) -> float:
        return self.space_top

    @property
    def plot_bottom(self) -> float:
        return self.height - self.space_bottom

    @property
    def is_empty(self) -> bool:
        """True when the drawing region has no positive area."""
        return self.plot_right <= self.plot_left or self.plot_bottom <= self.plot_top


def _box_size(box) -> tuple[float, float]:
    if isinstance(box, dict):
        return float(box["width"]), float(box["height"])
    if isinstance(box, (tuple, list)):
        return float(box[0]), float(box[1])
    return float(box.width), float(box.height)


def compute_geometry(container_box) -> ChartGeometry:
    """Return the chart geometry for a container of the given size.

    *container_box* may be a ``{"width", "height"}`` mapping, a
    ``(width, height)`` pair, or any object with ``width`` / ``height``
    attributes.  Zero or negative sizes are passed through unchanged; check
    ``ChartGeometry.is_empty`` before drawing.
    """
    width, height = _box_size(container_box)
    return ChartGeometry(width=width, height=height - TITLE_HEIGHT)
