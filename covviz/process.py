"""Turn loaded tables into the matrices the render pipeline works on."""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np
import pandas as pd

from .annotation import Annotation
from .normalize import ShapeMismatch, as_matrix

GENOME_RESOLUTION = 100   # bp per bin

_INDEX_COLUMNS = ["bin", "position"]


@dataclass(frozen=True)
class CoverageData:
    """Everything one chart needs, fully materialized.

    ``coverage`` is ``(samples, bins)`` read depth; ``hits`` is
    ``(references, bins)`` reference-panel hit counts or ``None`` when the
    run has no reference matching.
    """

    samples: list
    coverage: np.ndarray
    annotation: Annotation
    references: list | None = None
    hits: np.ndarray | None = None
    resolution: int = GENOME_RESOLUTION
    colours: list | None = None

    @property
    def n_bins(self) -> int:
        return self.coverage.shape[1] if self.coverage.size else 0

    @property
    def has_reference_matches(self) -> bool:
        return self.hits is not None and len(self.references or []) > 0

    @property
    def genome_length(self) -> float:
        if self.annotation.genome_length is not None:
            return float(self.annotation.genome_length)
        return float(self.n_bins * self.resolution)


def _value_columns(df: pd.DataFrame) -> list:
    return [c for c in df.columns if str(c).lower() not in _INDEX_COLUMNS]


def matrix_from_table(df: pd.DataFrame) -> tuple[list, np.ndarray]:
    """Split a bins-by-series table into (column names, series-by-bins matrix).

    A leading ``bin``/``position`` column is ignored.  Missing values count as
    zero depth.
    """
    cols = _value_columns(df)
    values = df[cols].apply(pd.to_numeric, errors="coerce").fillna(0)
    if (values < 0).any().any():
        raise ValueError("coverage and hit counts must be non-negative")
    return [str(c) for c in cols], values.to_numpy(dtype=float).T


def build_coverage_data(
    coverage,
    annotation: Annotation,
    samples: list | None = None,
    hits=None,
    references: list | None = None,
    resolution: int = GENOME_RESOLUTION,
    colours: list | None = None,
) -> CoverageData:
    """Validate shapes and bundle the inputs for ``context.build_context``.

    Raises:
        ShapeMismatch: ragged matrices, name/row count disagreement, or
            coverage and hit matrices with different bin counts.
    """
    cov = as_matrix(coverage, "coverage matrix")
    if samples is None:
        samples = [f"Sample {i + 1}" for i in range(cov.shape[0])]
    if len(samples) != cov.shape[0]:
        raise ShapeMismatch(
            f"{len(samples)} sample names for {cov.shape[0]} coverage rows"
        )

    hit_matrix = None
    if hits is not None:
        hit_matrix = as_matrix(hits)
        if references is None:
            references = [f"Reference {i + 1}" for i in range(hit_matrix.shape[0])]
        if len(references) != hit_matrix.shape[0]:
            raise ShapeMismatch(
                f"{len(references)} reference names for {hit_matrix.shape[0]} hit rows"
            )
        if cov.size and hit_matrix.size and hit_matrix.shape[1] != cov.shape[1]:
            raise ShapeMismatch(
                f"coverage has {cov.shape[1]} bins but the hit matrix has {hit_matrix.shape[1]}"
            )

    return CoverageData(
        samples=list(samples),
        coverage=cov,
        annotation=annotation,
        references=list(references) if references is not None else None,
        hits=hit_matrix,
        resolution=resolution,
        colours=colours,
    )


def depth_frame(data: CoverageData) -> pd.DataFrame:
    """Long-form read depth: one row per (sample, bin)."""
    bins = np.arange(data.n_bins)
    frames = [
        pd.DataFrame({
            "sample": name,
            "bin": bins,
            "position": bins * data.resolution,
            "depth": data.coverage[idx],
        })
        for idx, name in enumerate(data.samples)
    ]
    if not frames:
        return pd.DataFrame(columns=["sample", "bin", "position", "depth"])
    return pd.concat(frames, ignore_index=True)
