"""Tests for covviz.context and covviz.process."""

import numpy as np
import pandas as pd
import pytest

from covviz.annotation import Annotation
from covviz.context import DisplayMode, build_context
from covviz.normalize import ShapeMismatch
from covviz.process import build_coverage_data, depth_frame, matrix_from_table


class TestDisplayMode:
    def test_toggle_flips(self):
        assert DisplayMode.ABSOLUTE.toggled() is DisplayMode.NORMALIZED
        assert DisplayMode.NORMALIZED.toggled() is DisplayMode.ABSOLUTE

    def test_from_string(self):
        assert DisplayMode("normalized") is DisplayMode.NORMALIZED


class TestBuildContext:
    def test_absolute_is_default(self, coverage_data, box):
        context = build_context(coverage_data, box)
        assert context.mode is DisplayMode.ABSOLUTE
        assert context.series is None
        assert context.ceiling == 150
        assert context.y.domain == (0, 150)

    def test_normalized_ceiling_is_one(self, coverage_data, box):
        context = build_context(coverage_data, box, DisplayMode.NORMALIZED)
        assert context.ceiling == 1
        assert context.y.domain == (0, 1)
        assert context.series.shape == (3, 10, 2)

    def test_positions_follow_resolution(self, coverage_data, box):
        context = build_context(coverage_data, box)
        np.testing.assert_array_equal(context.positions, np.arange(10) * 100)

    def test_shared_x_scale(self, coverage_data, box):
        absolute = build_context(coverage_data, box)
        normalized = absolute.toggle()
        assert normalized.mode is DisplayMode.NORMALIZED
        assert normalized.x.domain == absolute.x.domain == (0, 1000)
        assert normalized.x.range == absolute.x.range
        assert normalized.geometry == absolute.geometry
        assert normalized.annotations == absolute.annotations

    def test_toggle_rebuilds(self, coverage_data, box):
        absolute = build_context(coverage_data, box)
        again = absolute.toggle().toggle()
        assert again is not absolute
        assert again.mode is DisplayMode.ABSOLUTE
        assert again.y.domain == absolute.y.domain

    def test_toggle_keeps_configuration(self, coverage_data, box):
        context = build_context(coverage_data, box, min_total_reads=100, label_max_chars=10)
        normalized = context.toggle()
        assert normalized.min_total_reads == 100
        # no bin has more than 60 reads in total
        assert (normalized.series == 0).all()
        assert [g["label"] for g in normalized.annotations.genes] == ["E1", "ORF1ab"]

    def test_resize(self, coverage_data, box):
        context = build_context(coverage_data, box, DisplayMode.NORMALIZED)
        bigger = context.resize({"width": 1000, "height": 420})
        assert bigger.mode is DisplayMode.NORMALIZED
        assert bigger.geometry.width == 1000
        assert bigger.x(1000) == pytest.approx(990)

    def test_normalized_without_hits(self, annotation, box):
        data = build_coverage_data([[1, 2, 3]], annotation)
        with pytest.raises(ValueError, match="reference"):
            build_context(data, box, DisplayMode.NORMALIZED)

    def test_degenerate_box(self, coverage_data):
        context = build_context(coverage_data, {"width": 0, "height": 0})
        assert context.geometry.is_empty
        assert len(context.annotations.genes) == 2


class TestCoverageData:
    def test_default_names(self, annotation):
        data = build_coverage_data([[1, 2], [3, 4]], annotation, hits=[[1, 1]])
        assert data.samples == ["Sample 1", "Sample 2"]
        assert data.references == ["Reference 1"]
        assert data.has_reference_matches

    def test_bin_count_mismatch(self, annotation):
        with pytest.raises(ShapeMismatch):
            build_coverage_data([[1, 2, 3]], annotation, hits=[[1, 2]])

    def test_sample_name_mismatch(self, annotation):
        with pytest.raises(ShapeMismatch):
            build_coverage_data([[1, 2, 3]], annotation, samples=["a", "b"])

    def test_reference_name_mismatch(self, annotation):
        with pytest.raises(ShapeMismatch):
            build_coverage_data([[1, 2]], annotation, hits=[[1, 2]], references=["A", "B"])

    def test_genome_length_defaults_to_bins(self):
        data = build_coverage_data([[1, 2, 3]], Annotation(genes={}), resolution=50)
        assert data.genome_length == 150
        assert not data.has_reference_matches

    def test_depth_frame(self, coverage_data):
        df = depth_frame(coverage_data)
        assert len(df) == 20
        assert df.loc[(df["sample"] == "S2") & (df["bin"] == 4), "depth"].item() == 120
        assert df["position"].max() == 900


class TestMatrixFromTable:
    def test_index_column_ignored(self):
        df = pd.DataFrame({"bin": [0, 1], "A": [3, 4], "B": [5, None]})
        names, matrix = matrix_from_table(df)
        assert names == ["A", "B"]
        np.testing.assert_array_equal(matrix, [[3, 4], [5, 0]])

    def test_negative_values(self):
        with pytest.raises(ValueError):
            matrix_from_table(pd.DataFrame({"A": [1, -1]}))
