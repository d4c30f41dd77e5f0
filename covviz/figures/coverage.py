"""Altair rendering of a coverage render context.

Every mark is positioned in pixels: the context's scales have already mapped
genome position and depth/fraction into chart coordinates, so all position
channels use ``scale=None`` and the view is sized to the chart geometry.

Public functions
----------------
make_plot   – full chart for one render context (axes, data, annotations).
"""

from __future__ import annotations

import altair as alt
import pandas as pd

from ..context import DisplayMode, RenderContext
from .base import (
    AMPLICON_FILL,
    AXIS_COLOR,
    GENE_STROKE,
    READ_DEPTH_TITLE,
    REFERENCE_MATCHES_TITLE,
    REFERENCE_PALETTE,
    SAMPLE_PALETTE,
    cycle,
)

_TICK_LEN = 5
_AXIS_FONTSIZE = 11
_GENE_FONTSIZE = 14


def _px(field: str) -> alt.X:
    return alt.X(f"{field}:Q", scale=None, axis=None)


def _py(field: str) -> alt.Y:
    return alt.Y(f"{field}:Q", scale=None, axis=None)


def _fill(field: str = "colour") -> alt.Color:
    return alt.Color(f"{field}:N", scale=None, legend=None)


# ── Title ─────────────────────────────────────────────────────────────────────

def chart_title(context: RenderContext) -> str:
    """Chart title; marks the active view when both views are available."""
    if not context.data.has_reference_matches:
        return READ_DEPTH_TITLE
    if context.mode is DisplayMode.NORMALIZED:
        return f"{READ_DEPTH_TITLE} | [{REFERENCE_MATCHES_TITLE}]"
    return f"[{READ_DEPTH_TITLE}] | {REFERENCE_MATCHES_TITLE}"


# ── Axes ──────────────────────────────────────────────────────────────────────

def _position_label(value: float) -> str:
    # Sub-base ticks only occur on very short genomes
    if float(value).is_integer():
        return f"{value:,.0f}"
    return f"{value:,g}"


def _axes_layers(context: RenderContext) -> list[alt.Chart]:
    geom = context.geometry
    bottom, left = geom.plot_bottom, geom.plot_left

    domain_df = pd.DataFrame([
        {"x": left, "x2": geom.plot_right, "y": bottom, "y2": bottom},
        {"x": left, "x2": left, "y": geom.plot_top, "y2": bottom},
    ])
    layers = [
        alt.Chart(domain_df)
        .mark_rule(color=AXIS_COLOR, strokeWidth=1)
        .encode(x=_px("x"), x2="x2:Q", y=_py("y"), y2="y2:Q")
    ]

    x_ticks = pd.DataFrame({"value": context.x.ticks(10)})
    x_ticks["px"] = context.x(x_ticks["value"].to_numpy())
    x_ticks["label"] = x_ticks["value"].map(_position_label)
    y_ticks = pd.DataFrame({"value": context.y.ticks(5)})
    y_ticks["py"] = context.y(y_ticks["value"].to_numpy())
    y_ticks["label"] = y_ticks["value"].map(lambda v: f"{v:g}")

    layers.append(
        alt.Chart(x_ticks)
        .mark_rule(color=AXIS_COLOR)
        .encode(x=_px("px"), y=alt.value(bottom), y2=alt.value(bottom + _TICK_LEN))
    )
    layers.append(
        alt.Chart(x_ticks)
        .mark_text(fontSize=_AXIS_FONTSIZE, baseline="top", align="center")
        .encode(x=_px("px"), y=alt.value(bottom + _TICK_LEN + 1), text="label:N")
    )
    layers.append(
        alt.Chart(y_ticks)
        .mark_rule(color=AXIS_COLOR)
        .encode(y=_py("py"), x=alt.value(left - _TICK_LEN), x2=alt.value(left))
    )
    layers.append(
        alt.Chart(y_ticks)
        .mark_text(fontSize=_AXIS_FONTSIZE, baseline="middle", align="right")
        .encode(y=_py("py"), x=alt.value(left - _TICK_LEN - 2), text="label:N")
    )
    return layers


# ── Data layers ───────────────────────────────────────────────────────────────

def _step_layer(context: RenderContext) -> alt.Chart | None:
    """One step-interpolated line per sample (absolute read depth)."""
    data = context.data
    if not data.n_bins or not data.samples:
        return None
    colours = data.colours or cycle(SAMPLE_PALETTE, len(data.samples))
    px = context.x(context.positions)
    frames = [
        pd.DataFrame({
            "sample": name,
            "position": context.positions,
            "depth": depth,
            "px": px,
            "py": context.y(depth),
            "colour": colours[idx],
        })
        for idx, (name, depth) in enumerate(zip(data.samples, context.lines))
    ]
    df = pd.concat(frames, ignore_index=True)
    return (
        alt.Chart(df)
        .mark_line(interpolate="step", strokeWidth=1)
        .encode(
            x=_px("px"),
            y=_py("py"),
            detail="sample:N",
            color=_fill(),
            tooltip=[
                alt.Tooltip("sample:N", title="Sample"),
                alt.Tooltip("position:Q", title="Position (bp)", format=","),
                alt.Tooltip("depth:Q", title="Depth"),
            ],
        )
    )


def _stream_layer(context: RenderContext) -> alt.Chart | None:
    """One filled band per reference, stacked in declared order."""
    series = context.series
    if series is None or series.shape[1] == 0:
        return None
    refs = context.data.references
    colours = cycle(REFERENCE_PALETTE, len(refs))
    px = context.x(context.positions)
    frames = [
        pd.DataFrame({
            "reference": refs[idx],
            "order": idx,
            "position": context.positions,
            "fraction": series[idx, :, 1] - series[idx, :, 0],
            "px": px,
            "py": context.y(series[idx, :, 1]),
            "py2": context.y(series[idx, :, 0]),
            "colour": colours[idx],
        })
        for idx in range(series.shape[0])
    ]
    df = pd.concat(frames, ignore_index=True)
    return (
        alt.Chart(df)
        .mark_area(interpolate="linear")
        .encode(
            x=_px("px"),
            y=_py("py"),
            y2="py2:Q",
            detail="reference:N",
            color=_fill(),
            tooltip=[
                alt.Tooltip("reference:N", title="Reference"),
                alt.Tooltip("position:Q", title="Position (bp)", format=","),
                alt.Tooltip("fraction:Q", title="Fraction", format=".2f"),
            ],
        )
    )


# ── Annotation layers ─────────────────────────────────────────────────────────

def _annotation_layers(context: RenderContext) -> list[alt.Chart]:
    boxes = context.annotations
    layers: list[alt.Chart] = []

    if boxes.amplicons:
        layers.append(
            alt.Chart(pd.DataFrame(boxes.amplicons))
            .mark_rect(fill=AMPLICON_FILL)
            .encode(
                x=_px("x"), x2="x2:Q", y=_py("y"), y2="y2:Q",
                tooltip=[
                    alt.Tooltip("start:Q", title="Start", format=","),
                    alt.Tooltip("end:Q", title="End", format=","),
                ],
            )
        )

    if boxes.genes:
        gene_df = pd.DataFrame(boxes.genes)
        layers.append(
            alt.Chart(gene_df)
            .mark_rect(fill="transparent", stroke=GENE_STROKE, strokeWidth=1)
            .encode(
                x=_px("x"), x2="x2:Q", y=_py("y"), y2="y2:Q",
                tooltip=alt.Tooltip("name:N", title="Gene"),
            )
        )
        labelled = gene_df.loc[gene_df["label"] != ""]
        if not labelled.empty:
            layers.append(
                alt.Chart(labelled)
                .mark_text(
                    fontSize=_GENE_FONTSIZE, color="black",
                    align="center", baseline="top", dy=2,
                )
                .encode(x=_px("label_x"), y=_py("label_y"), text="label:N")
            )
    return layers


# ── Public functions ──────────────────────────────────────────────────────────

def make_plot(context: RenderContext) -> alt.LayerChart:
    """Draw one render context: axes, depth lines or stream, annotations.

    The chart is rebuilt from scratch for every context; switching modes
    means calling this again with ``context.toggle()``.
    """
    alt.data_transformers.disable_max_rows()
    geom = context.geometry

    layers = []
    if context.mode is DisplayMode.NORMALIZED:
        data_layer = _stream_layer(context)
    else:
        data_layer = _step_layer(context)
    if data_layer is not None:
        layers.append(data_layer)
    layers.extend(_axes_layers(context))
    layers.extend(_annotation_layers(context))

    return (
        alt.layer(*layers)
        .properties(
            width=max(geom.width, 0),
            height=max(geom.height, 0),
            title=alt.TitleParams(text=chart_title(context), fontSize=16),
        )
        .configure_view(stroke=None)
    )
