"""Per-pass render context and the read-depth / reference-match toggle.

``build_context`` is the whole pipeline: geometry -> scales -> (depth lines
or stacked series) -> annotation boxes.  It is called again for every data,
size or mode change; a context is never patched in place.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

import numpy as np

from .annotation import GENE_LABEL_MAX_CHARS, AnnotationBoxes, layout_annotations
from .geometry import ChartGeometry, compute_geometry
from .normalize import MIN_TOTAL_READS, normalize
from .process import CoverageData
from .scales import NORMALIZED_CEILING, LinearScale, depth_ceiling, x_scale, y_scale


class DisplayMode(Enum):
    ABSOLUTE = "absolute"
    NORMALIZED = "normalized"

    def toggled(self) -> "DisplayMode":
        if self is DisplayMode.ABSOLUTE:
            return DisplayMode.NORMALIZED
        return DisplayMode.ABSOLUTE


@dataclass(frozen=True)
class RenderContext:
    data: CoverageData
    container_box: object
    mode: DisplayMode
    geometry: ChartGeometry
    x: LinearScale
    y: LinearScale
    ceiling: float
    positions: np.ndarray
    annotations: AnnotationBoxes
    series: np.ndarray | None = None
    min_total_reads: int = MIN_TOTAL_READS
    label_max_chars: int = GENE_LABEL_MAX_CHARS

    @property
    def lines(self) -> np.ndarray:
        """Per-sample depth rows drawn in absolute mode."""
        return self.data.coverage

    def toggle(self) -> "RenderContext":
        """Full rebuild in the other display mode."""
        return build_context(
            self.data,
            self.container_box,
            self.mode.toggled(),
            min_total_reads=self.min_total_reads,
            label_max_chars=self.label_max_chars,
        )

    def resize(self, container_box) -> "RenderContext":
        """Full rebuild for a new container size, same mode."""
        return build_context(
            self.data,
            container_box,
            self.mode,
            min_total_reads=self.min_total_reads,
            label_max_chars=self.label_max_chars,
        )


def build_context(
    data: CoverageData,
    container_box,
    mode: DisplayMode = DisplayMode.ABSOLUTE,
    min_total_reads: int = MIN_TOTAL_READS,
    label_max_chars: int = GENE_LABEL_MAX_CHARS,
) -> RenderContext:
    """Derive everything the renderer needs for one pass.

    Raises:
        ValueError: *mode* is ``NORMALIZED`` but the data has no reference
            hit matrix.
    """
    mode = DisplayMode(mode)
    geometry = compute_geometry(container_box)
    xs = x_scale(geometry, data.genome_length)

    series = None
    if mode is DisplayMode.NORMALIZED:
        if not data.has_reference_matches:
            raise ValueError("no reference hit matrix to normalize")
        series = normalize(data.hits, len(data.references), min_total_reads)
        ceiling = NORMALIZED_CEILING
        n_bins = series.shape[1]
    else:
        ceiling = depth_ceiling(data.coverage)
        n_bins = data.n_bins

    return RenderContext(
        data=data,
        container_box=container_box,
        mode=mode,
        geometry=geometry,
        x=xs,
        y=y_scale(geometry, ceiling),
        ceiling=ceiling,
        positions=np.arange(n_bins) * data.resolution,
        annotations=layout_annotations(geometry, data.annotation, xs, label_max_chars),
        series=series,
        min_total_reads=min_total_reads,
        label_max_chars=label_max_chars,
    )
