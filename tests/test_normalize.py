"""Tests for covviz.normalize."""

import numpy as np
import pytest

from covviz.normalize import ShapeMismatch, as_matrix, normalize, series_frame


@pytest.fixture
def hits():
    rng = np.random.default_rng(7)
    matrix = rng.integers(0, 40, size=(5, 200))
    matrix[:, :20] = 1  # totals of 5: below the threshold
    return matrix


class TestStacking:
    def test_supported_bins_end_at_one(self, hits):
        series = normalize(hits, 5)
        supported = hits.sum(axis=0) > 10
        np.testing.assert_allclose(series[-1, supported, 1], 1.0, atol=1e-9)

    def test_unsupported_bins_are_zero(self, hits):
        series = normalize(hits, 5)
        unsupported = hits.sum(axis=0) <= 10
        assert unsupported[:20].all()
        assert (series[:, unsupported, :] == 0).all()

    def test_bands_are_contiguous(self, hits):
        series = normalize(hits, 5)
        np.testing.assert_array_equal(series[:-1, :, 1], series[1:, :, 0])
        assert (series[:, :, 1] >= series[:, :, 0]).all()

    def test_first_band_starts_at_zero(self, hits):
        series = normalize(hits, 5)
        assert (series[0, :, 0] == 0).all()

    def test_shape(self, hits):
        assert normalize(hits).shape == (5, 200, 2)


class TestThreshold:
    def test_total_of_ten_is_insufficient(self):
        series = normalize([[4], [6]], 2)
        np.testing.assert_array_equal(series, [[[0, 0]], [[0, 0]]])

    def test_total_of_eleven_is_stacked(self):
        series = normalize([[4], [7]], 2)
        np.testing.assert_allclose(series[0, 0], [0, 4 / 11])
        np.testing.assert_allclose(series[1, 0], [4 / 11, 1.0])

    def test_threshold_is_configurable(self):
        series = normalize([[1], [2]], 2, min_total_reads=2)
        np.testing.assert_allclose(series[:, 0, 1], [1 / 3, 1.0])


class TestOrdering:
    def test_declared_order_not_magnitude(self):
        series = normalize([[1], [20]], 2)
        np.testing.assert_allclose(series[0, 0], [0, 1 / 21])
        np.testing.assert_allclose(series[1, 0], [1 / 21, 1.0])

    def test_zero_hit_reference_keeps_its_position(self):
        series = normalize([[6], [0], [6]], 3)
        np.testing.assert_allclose(series[1, 0], [0.5, 0.5])
        np.testing.assert_allclose(series[2, 0], [0.5, 1.0])


class TestExamples:
    def test_two_references_two_bins(self):
        series = normalize([[5, 0], [5, 20]], 2)
        # bin 0: total 10, not drawn
        np.testing.assert_array_equal(series[:, 0], [[0, 0], [0, 0]])
        # bin 1: A has no hits, B has them all
        np.testing.assert_allclose(series[0, 1], [0, 0])
        np.testing.assert_allclose(series[1, 1], [0, 1.0])

    def test_quarter_share(self):
        series = normalize([[5, 5], [5, 15]], 2)
        np.testing.assert_array_equal(series[:, 0], [[0, 0], [0, 0]])
        np.testing.assert_allclose(series[0, 1], [0, 0.25])
        np.testing.assert_allclose(series[1, 1], [0.25, 1.0])

    def test_input_not_mutated(self):
        matrix = [[5, 5], [5, 15]]
        normalize(matrix, 2)
        assert matrix == [[5, 5], [5, 15]]


class TestErrors:
    def test_ragged_rows(self):
        with pytest.raises(ShapeMismatch):
            normalize([[1, 2, 3], [1, 2]])

    def test_reference_count_mismatch(self):
        with pytest.raises(ShapeMismatch):
            normalize([[1, 2], [3, 4]], reference_count=3)

    def test_shape_mismatch_is_value_error(self):
        assert issubclass(ShapeMismatch, ValueError)

    def test_negative_counts(self):
        with pytest.raises(ValueError, match="non-negative"):
            normalize([[-1, 2], [3, 4]])

    def test_empty_matrix(self):
        assert normalize([], 0).shape == (0, 0, 2)

    def test_as_matrix_rejects_3d(self):
        with pytest.raises(ShapeMismatch):
            as_matrix(np.zeros((2, 2, 2)))


class TestSeriesFrame:
    def test_long_form(self):
        series = normalize([[5, 5], [5, 15]], 2)
        df = series_frame(series, ["A", "B"], resolution=100)
        assert list(df.columns) == ["reference", "order", "bin", "position", "start", "end"]
        assert len(df) == 4
        row = df.loc[(df["reference"] == "B") & (df["bin"] == 1)].iloc[0]
        assert row["position"] == 100
        assert row["order"] == 1
        assert row["start"] == pytest.approx(0.25)
        assert row["end"] == pytest.approx(1.0)

    def test_empty_series(self):
        df = series_frame(np.zeros((0, 0, 2)), [], resolution=100)
        assert df.empty
