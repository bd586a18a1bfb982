"""
Tests for the synthetic data generator.
"""

import pytest
import numpy as np
import pandas as pd

from mlcausal.data import (
    DGPShape,
    DGPSpec,
    Dataset,
    get_dgp_spec,
    mean_function,
    simulate_dataset,
    simulate_future,
)
from mlcausal.errors import UnknownDGPError


# =============================================================================
# FIXTURES
# =============================================================================

@pytest.fixture
def linear_spec():
    return get_dgp_spec("linear")


@pytest.fixture
def linear_data(linear_spec):
    return simulate_dataset(1000, linear_spec, seed=42)


# =============================================================================
# TEST: DGPSpec
# =============================================================================

class TestDGPSpec:

    def test_shape_from_string(self):
        assert DGPSpec(shape="nonlinear").shape == DGPShape.NONLINEAR

    def test_unknown_shape(self):
        with pytest.raises(UnknownDGPError):
            get_dgp_spec("quadratic")

    def test_unknown_shape_is_value_error(self):
        with pytest.raises(ValueError):
            DGPSpec(shape="bogus")

    def test_standardize_uses_population_moments(self, linear_spec):
        # Gamma(2, 1): mean 2, sd sqrt(2)
        z = linear_spec.standardize_x1([2.0, 2.0 + np.sqrt(2.0)])
        np.testing.assert_allclose(z, [0.0, 1.0])

    def test_overrides(self):
        spec = get_dgp_spec("constant", noise_sd=1.0, intercept=5.0)
        assert spec.noise_sd == 1.0
        assert spec.intercept == 5.0


# =============================================================================
# TEST: mean_function
# =============================================================================

class TestMeanFunction:

    @pytest.fixture
    def frame(self):
        return pd.DataFrame({"x1": [2.0, 2.0, 2.0 + np.sqrt(2.0)], "x2": [0, 1, 1]})

    def test_constant(self, frame):
        mu = mean_function(get_dgp_spec("constant"), frame)
        np.testing.assert_allclose(mu, [8.0, 8.0, 8.0])

    def test_linear(self, frame):
        mu = mean_function(get_dgp_spec("linear"), frame)
        np.testing.assert_allclose(mu, [8.0, 4.0, 6.0])

    def test_interaction(self, frame):
        mu = mean_function(get_dgp_spec("interaction"), frame)
        np.testing.assert_allclose(mu, [8.0, 4.0, 9.0])

    def test_nonlinear(self, frame):
        mu = mean_function(get_dgp_spec("nonlinear"), frame)
        x1 = frame["x1"].to_numpy()
        expected = np.array([
            8.0 + 1.5 * np.log(x1[0]),
            8.0 - 4.0 + 1.5 * np.log(x1[1]),
            8.0 + 2.0 - 4.0 + 3.0 + 1.5 * np.log(x1[2]),
        ])
        np.testing.assert_allclose(mu, expected)


# =============================================================================
# TEST: simulate_dataset
# =============================================================================

class TestSimulateDataset:

    def test_shape_and_columns(self, linear_data):
        assert linear_data.n_records == 1000
        assert len(linear_data) == 1000
        assert list(linear_data.frame.columns) == ["x1", "x2", "y"]
        assert linear_data.feature_names == ["x1", "x2"]

    def test_marginals(self, linear_data):
        assert (linear_data.frame["x1"] > 0).all()
        assert set(linear_data.frame["x2"].unique()) <= {0, 1}
        # right-skewed: mean above median
        assert linear_data.frame["x1"].mean() > linear_data.frame["x1"].median()

    def test_same_seed_bit_identical(self, linear_spec):
        a = simulate_dataset(500, linear_spec, seed=7)
        b = simulate_dataset(500, linear_spec, seed=7)
        pd.testing.assert_frame_equal(a.frame, b.frame)
        np.testing.assert_array_equal(a.mu, b.mu)

    def test_different_seed_different_noise(self, linear_spec):
        a = simulate_dataset(500, linear_spec, seed=42)
        b = simulate_future(linear_spec, 500, seed=68)
        assert not np.allclose(a.outcome(), b.outcome())

    def test_mean_function_shared_across_seeds(self, linear_spec):
        a = simulate_dataset(500, linear_spec, seed=42)
        b = simulate_future(linear_spec, 500, seed=68)
        np.testing.assert_allclose(a.mu, mean_function(linear_spec, a.frame))
        np.testing.assert_allclose(b.mu, mean_function(linear_spec, b.frame))

    def test_constant_dgp_expected_means_equal(self):
        spec = get_dgp_spec("constant")
        a = simulate_dataset(200, spec, seed=42)
        b = simulate_future(spec, 200, seed=68)
        np.testing.assert_array_equal(a.mu, b.mu)

    def test_noise_level(self):
        spec = get_dgp_spec("constant")
        ds = simulate_dataset(20000, spec, seed=1)
        residual = ds.outcome() - ds.mu
        assert abs(residual.std() - 3.0) < 0.1
        assert abs(ds.outcome().mean() - 8.0) < 0.1

    def test_zero_noise(self):
        spec = get_dgp_spec("linear", noise_sd=0.0)
        ds = simulate_dataset(100, spec, seed=3)
        np.testing.assert_array_equal(ds.outcome(), ds.mu)

    def test_invalid_size(self, linear_spec):
        with pytest.raises(ValueError):
            simulate_dataset(0, linear_spec)


# =============================================================================
# TEST: Dataset
# =============================================================================

class TestDataset:

    def test_features_and_outcome_by_index(self, linear_data):
        idx = [5, 1, 3]
        X = linear_data.features(idx)
        assert list(X.index) == idx
        np.testing.assert_array_equal(
            linear_data.outcome(idx), linear_data.frame["y"].to_numpy()[idx]
        )

    def test_subset(self, linear_data):
        sub = linear_data.subset([0, 2, 4])
        assert sub.n_records == 3
        np.testing.assert_array_equal(sub.mu, linear_data.mu[[0, 2, 4]])
        assert list(sub.frame.index) == [0, 1, 2]

    def test_missing_column(self):
        with pytest.raises(ValueError, match="missing columns"):
            Dataset(frame=pd.DataFrame({"x1": [1.0]}), feature_names=["x1", "x2"])
