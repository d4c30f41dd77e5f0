"""Linear position -> pixel scales shared by both display modes.

Both scales are rebuilt on every render pass from the current
``ChartGeometry``.  The x-scale is the same in both modes; the y-scale
domain is ``[0, 1]`` for the normalized stream and ``[0, ceiling]`` for
absolute read depth, where the ceiling is the max depth rounded up to the
next multiple of 50.
"""

from __future__ import annotations

import math

import numpy as np

from .geometry import ChartGeometry

NORMALIZED_CEILING = 1
DEPTH_CEILING_STEP = 50


class LinearScale:
    """Affine map from ``domain`` onto ``range``.

    A zero-width domain maps every input to ``range[0]`` instead of dividing
    by zero (an empty genome or an all-zero y ceiling).
    """

    def __init__(self, domain: tuple[float, float], range: tuple[float, float]):
        self.domain = (float(domain[0]), float(domain[1]))
        self.range = (float(range[0]), float(range[1]))

    def __call__(self, value):
        d0, d1 = self.domain
        r0, r1 = self.range
        span = d1 - d0
        if span == 0:
            if np.ndim(value):
                return np.full(np.shape(value), r0)
            return r0
        t = (np.asarray(value, dtype=float) - d0) / span
        out = r0 + t * (r1 - r0)
        return float(out) if np.ndim(out) == 0 else out

    def __repr__(self) -> str:
        return f"LinearScale(domain={self.domain}, range={self.range})"

    def ticks(self, count: int = 5) -> list[float]:
        """Round tick values inside the domain, roughly *count* of them.

        The step is the power of ten nearest ``span / count`` multiplied by
        1, 2 or 5, so labels stay readable whatever the data range.
        """
        lo, hi = sorted(self.domain)
        span = hi - lo
        if span == 0 or count < 1:
            return [lo]
        raw = span / count
        power = 10 ** math.floor(math.log10(raw))
        error = raw / power
        if error >= math.sqrt(50):
            step = 10 * power
        elif error >= math.sqrt(10):
            step = 5 * power
        elif error >= math.sqrt(2):
            step = 2 * power
        else:
            step = power
        start = math.ceil(round(lo / step, 6))
        stop = math.floor(round(hi / step, 6))
        return [round(i * step, 10) for i in range(start, stop + 1)]


def x_scale(geometry: ChartGeometry, genome_length: float) -> LinearScale:
    """Genome position (bp) -> pixel x."""
    return LinearScale(
        domain=(0, genome_length),
        range=(geometry.space_left, geometry.width - geometry.space_right),
    )


def y_scale(geometry: ChartGeometry, ceiling: float) -> LinearScale:
    """Depth or fraction -> pixel y (inverted: larger values sit higher)."""
    return LinearScale(
        domain=(0, ceiling),
        range=(geometry.height - geometry.space_bottom, geometry.space_top),
    )


def depth_ceiling(coverage, step: int = DEPTH_CEILING_STEP) -> int:
    """Smallest multiple of *step* strictly above the max observed depth.

    An empty coverage matrix counts as a max depth of 0, so the ceiling is
    never below *step*.
    """
    arr = np.asarray(coverage, dtype=float)
    true_max = float(arr.max()) if arr.size else 0.0
    return (math.floor(true_max / step) + 1) * step
