"""
Tests for the model registry and Candidate wrapper.
"""

import pytest
import numpy as np
from sklearn.dummy import DummyRegressor
from sklearn.ensemble import GradientBoostingRegressor, RandomForestRegressor
from sklearn.linear_model import LinearRegression
from sklearn.pipeline import Pipeline

from mlcausal.data import get_dgp_spec, simulate_dataset
from mlcausal.errors import EmptyPartitionError, UnknownModelError
from mlcausal.models import (
    MODEL_REGISTRY,
    ModelFamily,
    create_local_model,
    default_candidates,
    get_model_spec,
    make_candidate,
    resolve_model_name,
)
from mlcausal.tuning import AutoTuner


@pytest.fixture
def dataset():
    return simulate_dataset(300, get_dgp_spec("linear"), seed=0)


class TestRegistry:

    @pytest.mark.parametrize("name, family", [
        ("mean", ModelFamily.MEAN),
        ("linear", ModelFamily.LINEAR),
        ("lm", ModelFamily.LINEAR),
        ("rf", ModelFamily.RANDOM_FOREST),
        ("random_forest", ModelFamily.RANDOM_FOREST),
        ("gbm", ModelFamily.GRADIENT_BOOSTING),
        ("enet", ModelFamily.ELASTIC_NET),
        ("elastic_net", ModelFamily.ELASTIC_NET),
        ("auto", ModelFamily.AUTO_TUNED),
    ])
    def test_names(self, name, family):
        assert get_model_spec(name).family == family

    def test_unknown(self):
        with pytest.raises(UnknownModelError):
            get_model_spec("svm")
        with pytest.raises(ValueError):
            create_local_model("svm")

    def test_estimator_types(self):
        assert isinstance(create_local_model("mean"), DummyRegressor)
        assert isinstance(create_local_model("linear"), LinearRegression)
        assert isinstance(create_local_model("rf"), RandomForestRegressor)
        assert isinstance(create_local_model("gbm"), GradientBoostingRegressor)
        assert isinstance(create_local_model("enet"), Pipeline)
        assert isinstance(create_local_model("auto", base_model="enet"), AutoTuner)

    def test_auto_takes_base_model(self):
        tuner = create_local_model("auto", base_model="rf", n_folds=3)
        assert tuner.base_model == "rf"
        assert tuner.n_folds == 3

    @pytest.mark.parametrize("alias, key", [
        ("lm", "linear"),
        ("elastic_net", "enet"),
        ("random_forest", "rf"),
        ("gbm", "gbm"),
    ])
    def test_resolve_model_name(self, alias, key):
        assert resolve_model_name(alias) == key

    def test_params_override_defaults(self):
        rf = create_local_model("rf", n_estimators=10)
        assert rf.n_estimators == 10
        assert rf.random_state == MODEL_REGISTRY["rf"].default_params["random_state"]


class TestCandidate:

    def test_fit_returns_fitted_copy(self, dataset):
        cand = make_candidate("lin", "linear")
        fitted = cand.fit(dataset)
        assert fitted.is_fitted
        assert not cand.is_fitted
        assert fitted.features == ["x1", "x2"]
        preds = fitted.predict(dataset.features())
        assert preds.shape == (dataset.n_records,)

    def test_fit_on_indices(self, dataset):
        fitted = make_candidate("mean", "mean").fit(dataset, np.arange(10))
        expected = dataset.outcome(np.arange(10)).mean()
        np.testing.assert_allclose(fitted.predict(dataset.features()[:3]), expected)

    def test_feature_subset(self, dataset):
        fitted = make_candidate("x2 only", "linear", features=["x2"]).fit(dataset)
        assert fitted.fitted_.coef_.shape == (1,)

    def test_predict_before_fit(self, dataset):
        with pytest.raises(RuntimeError):
            make_candidate("lin", "linear").predict(dataset.features())

    def test_predict_missing_column(self, dataset):
        fitted = make_candidate("lin", "linear").fit(dataset)
        with pytest.raises(ValueError, match="Missing feature"):
            fitted.predict(dataset.features()[["x1"]])

    def test_fit_empty(self, dataset):
        with pytest.raises(EmptyPartitionError):
            make_candidate("lin", "linear").fit(dataset, np.array([], dtype=int))

    def test_default_candidates(self):
        cands = default_candidates(["mean", "rf"])
        assert [c.identifier for c in cands] == ["mean", "rf"]
        assert cands[1].model_name == "rf"
