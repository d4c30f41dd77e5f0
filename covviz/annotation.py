"""Amplicon and gene annotation boxes beneath the coverage plot.

Both tracks sit in the bottom margin of the chart::

    plot bottom  ─────────────────────────────  (x-axis)
                 + 20 px
    amplicon_roof   odd-index amplicons          8 px
                    even-index amplicons         8 px
                 + 5 px
    gene_roof       strand == 1 genes           15 px
                    other genes                 15 px

Rows are fixed; overlapping intervals are separated only by the two-row
interleave, not by a packer.  Boxes are plain dicts in pixel coordinates
(``x``, ``x2``, ``y``, ``y2``) so they drop straight into a DataFrame.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from .geometry import ChartGeometry
from .scales import LinearScale

AMPLICON_OFFSET = 20      # px below the plot bottom
AMPLICON_HEIGHT = 8
GENE_GAP = 5              # px between the amplicon rows and the gene rows
GENE_HEIGHT = 15
GENE_LABEL_MAX_CHARS = 3  # longer names would overflow narrow boxes


@dataclass(frozen=True)
class Annotation:
    """Genome annotation supplied once per chart.

    ``genes`` maps name -> ``{"start", "end", "strand"}``; ``amplicons`` is
    ``None`` when the run has no primer scheme.
    """

    genes: dict
    amplicons: tuple | None = None
    genome_length: float | None = None

    @classmethod
    def from_dict(cls, raw: dict) -> "Annotation":
        if "genes" not in raw:
            raise ValueError("annotation must contain a 'genes' mapping")
        for name, gene in raw["genes"].items():
            if not isinstance(gene, dict) or "start" not in gene or "end" not in gene:
                raise ValueError(f"gene '{name}' needs 'start' and 'end'")
        amplicons = raw.get("amplicons")
        genome = raw.get("genome") or {}
        return cls(
            genes={str(name): dict(gene) for name, gene in raw["genes"].items()},
            amplicons=None if amplicons is None else tuple(
                (float(a[0]), float(a[1])) for a in amplicons
            ),
            genome_length=genome.get("length"),
        )


@dataclass(frozen=True)
class AnnotationBoxes:
    amplicons: list = field(default_factory=list)
    genes: list = field(default_factory=list)


def amplicon_roof(geometry: ChartGeometry) -> float:
    return geometry.height - geometry.space_bottom + AMPLICON_OFFSET


def gene_roof(geometry: ChartGeometry) -> float:
    return amplicon_roof(geometry) + 2 * AMPLICON_HEIGHT + GENE_GAP


def gene_label(name: str, max_chars: int = GENE_LABEL_MAX_CHARS) -> str:
    return "" if len(name) > max_chars else name


def _amplicon_boxes(amplicons, geometry: ChartGeometry, xs: LinearScale) -> list[dict]:
    roof = amplicon_roof(geometry)
    boxes = []
    for idx, (start, end) in enumerate(amplicons):
        y = roof if idx % 2 else roof + AMPLICON_HEIGHT
        boxes.append({
            "index": idx,
            "start": start,
            "end": end,
            "x": xs(start),
            "x2": xs(end),
            "y": y,
            "y2": y + AMPLICON_HEIGHT,
            "row": "upper" if idx % 2 else "lower",
        })
    return boxes


def _gene_boxes(
    genes: dict, geometry: ChartGeometry, xs: LinearScale, label_max_chars: int
) -> list[dict]:
    roof = gene_roof(geometry)
    boxes = []
    for name, gene in genes.items():
        strand = gene.get("strand")
        y = roof if strand == 1 else roof + GENE_HEIGHT
        x, x2 = xs(gene["start"]), xs(gene["end"])
        boxes.append({
            "name": name,
            "start": gene["start"],
            "end": gene["end"],
            "strand": strand,
            "x": x,
            "x2": x2,
            "y": y,
            "y2": y + GENE_HEIGHT,
            "label": gene_label(name, label_max_chars),
            "label_x": x + (x2 - x) / 2,
            "label_y": y,
        })
    return boxes


def layout_annotations(
    geometry: ChartGeometry,
    annotation: Annotation,
    xs: LinearScale,
    label_max_chars: int = GENE_LABEL_MAX_CHARS,
) -> AnnotationBoxes:
    """Place amplicon and gene boxes for one render pass.

    Args:
        geometry: current chart geometry.
        annotation: amplicons (optional) and genes.
        xs: genome position -> pixel x scale.
        label_max_chars: gene names longer than this get an empty label.
    """
    amplicons = []
    if annotation.amplicons:
        amplicons = _amplicon_boxes(annotation.amplicons, geometry, xs)
    return AnnotationBoxes(
        amplicons=amplicons,
        genes=_gene_boxes(annotation.genes, geometry, xs, label_max_chars),
    )
