"""Stream-graph transform for per-reference hit counts.

A *series* is the stacked-area structure the renderer draws::

    series[ref][bin] = (start, end)

with ``start``/``end`` the cumulative fraction of reads at that bin assigned
to the references stacked below and including ``ref``.  Stacking follows the
declared reference order (never magnitude) so each reference keeps the same
layer from bin to bin.

Bins with too few reads in total get ``(0, 0)`` for every reference: there
is nothing meaningful to show there, and a zero-height band keeps the area
continuous without inventing proportions.
"""

from __future__ import annotations

import numpy as np
import pandas as pd

MIN_TOTAL_READS = 10   # a bin needs strictly more reads than this to be stacked


class ShapeMismatch(ValueError):
    """Per-reference (or per-sample) sequences do not share one bin count."""


def as_matrix(rows, name: str = "hit matrix") -> np.ndarray:
    """Convert a sequence of equal-length sequences to a 2-D float array.

    Raises ``ShapeMismatch`` for ragged input instead of truncating it.
    """
    if isinstance(rows, np.ndarray):
        if rows.ndim == 1 and rows.size == 0:
            return np.zeros((0, 0))
        if rows.ndim != 2:
            raise ShapeMismatch(f"{name} must be 2-D, got shape {rows.shape}")
        return rows.astype(float)

    rows = [list(r) for r in rows]
    lengths = {len(r) for r in rows}
    if len(lengths) > 1:
        raise ShapeMismatch(
            f"{name} rows have different bin counts: {sorted(lengths)}"
        )
    if not rows:
        return np.zeros((0, 0))
    return np.array(rows, dtype=float)


def normalize(
    hit_matrix,
    reference_count: int | None = None,
    min_total_reads: int = MIN_TOTAL_READS,
) -> np.ndarray:
    """Stack per-reference hit counts into proportional bands.

    Args:
        hit_matrix: ``[reference][bin]`` non-negative hit counts.
        reference_count: number of declared references; checked against the
            number of rows when given.
        min_total_reads: bins whose total is ``<=`` this value are left as
            ``(0, 0)`` for every reference.

    Returns:
        Array of shape ``(references, bins, 2)`` holding ``(start, end)``.

    Raises:
        ShapeMismatch: ragged rows or a row count different from
            *reference_count*.
        ValueError: negative hit counts.
    """
    hits = as_matrix(hit_matrix)
    n_refs = hits.shape[0]
    if reference_count is not None and reference_count != n_refs:
        raise ShapeMismatch(
            f"hit matrix has {n_refs} rows but {reference_count} references were declared"
        )
    if (hits < 0).any():
        raise ValueError("hit counts must be non-negative")

    n_bins = hits.shape[1] if n_refs else 0
    series = np.zeros((n_refs, n_bins, 2))
    if n_refs == 0 or n_bins == 0:
        return series

    totals = hits.sum(axis=0)
    supported = totals > min_total_reads
    # Unsupported bins divide by 1 and are zeroed below.
    shares = hits / np.where(supported, totals, 1.0)
    ends = np.cumsum(shares, axis=0)
    starts = np.vstack([np.zeros((1, n_bins)), ends[:-1]])

    series[:, :, 0] = np.where(supported, starts, 0.0)
    series[:, :, 1] = np.where(supported, ends, 0.0)
    return series


def series_frame(series: np.ndarray, references: list, resolution: int) -> pd.DataFrame:
    """Flatten a series into long form, one row per (reference, bin).

    Columns: ``reference``, ``order`` (stack index), ``bin``, ``position``
    (``bin * resolution``), ``start``, ``end``.
    """
    n_refs, n_bins = series.shape[:2]
    bins = np.arange(n_bins)
    frames = [
        pd.DataFrame({
            "reference": references[idx],
            "order": idx,
            "bin": bins,
            "position": bins * resolution,
            "start": series[idx, :, 0],
            "end": series[idx, :, 1],
        })
        for idx in range(n_refs)
    ]
    if not frames:
        return pd.DataFrame(columns=["reference", "order", "bin", "position", "start", "end"])
    return pd.concat(frames, ignore_index=True)
