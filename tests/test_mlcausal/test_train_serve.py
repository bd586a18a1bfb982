"""
Tests for train -> save -> load -> predict -> serve.
"""

import json

import pytest
import numpy as np
import pandas as pd
from fastapi.testclient import TestClient

import mlcausal.predict as predict_mod
import mlcausal.serve as serve_mod
import mlcausal.train as train_mod
from mlcausal.predict import load_trained_model, predict_dataframe
from mlcausal.train import TrainConfig, run_benchmark, train


@pytest.fixture
def pretrained_dir(tmp_path, monkeypatch):
    monkeypatch.setattr(train_mod, "PRETRAINED_DIR", tmp_path)
    monkeypatch.setattr(predict_mod, "PRETRAINED_DIR", tmp_path)
    return tmp_path


@pytest.fixture
def small_config():
    return TrainConfig(
        dgp="linear",
        n_samples=600,
        models=("mean", "linear"),
        save_model_name="unit_test_model",
    )


@pytest.fixture
def trained(pretrained_dir, small_config):
    return train(small_config)


class TestTrain:

    def test_run_benchmark(self, small_config):
        bench = run_benchmark(small_config)
        assert bench["result"].winner == "linear"
        assert sum(len(v) for v in bench["partitions"].values()) == 600

    def test_artifacts_written(self, trained, pretrained_dir):
        model_dir = pretrained_dir / "unit_test_model"
        assert (model_dir / "model.joblib").exists()
        meta = json.loads((model_dir / "meta.json").read_text())
        assert meta["winner"] == "linear"
        assert meta["features"] == ["x1", "x2"]
        assert meta["extra"]["dgp"] == "linear"
        assert meta["extra"]["partition_sizes"] == {"train": 360, "validation": 120, "test": 120}
        assert "test" in meta["scoreboard"]["scores"]["linear"]
        assert "test" not in meta["scoreboard"]["scores"]["mean"]

    def test_summary(self, trained):
        assert trained["winner"] == "linear"
        assert set(trained["test_scores"]) == {"mae", "mse"}
        assert trained["config"]["models"] == ["mean", "linear"]


class TestPredict:

    def test_load_and_predict(self, trained):
        loaded = load_trained_model("unit_test_model")
        assert loaded.dgp == "linear"
        assert loaded.features == ["x1", "x2"]
        df = pd.DataFrame({"x1": [1.0, 3.0], "x2": [0, 1], "ignored": ["a", "b"]})
        preds = predict_dataframe(loaded, df)
        assert preds.shape == (2,)
        assert np.isfinite(preds).all()

    def test_missing_feature(self, trained):
        loaded = load_trained_model("unit_test_model")
        with pytest.raises(ValueError, match="Missing feature"):
            predict_dataframe(loaded, pd.DataFrame({"x1": [1.0]}))

    def test_not_a_dataframe(self, trained):
        loaded = load_trained_model("unit_test_model")
        with pytest.raises(TypeError):
            predict_dataframe(loaded, np.zeros((2, 2)))

    def test_missing_model(self, pretrained_dir):
        with pytest.raises(FileNotFoundError):
            load_trained_model("does_not_exist")


class TestServe:

    @pytest.fixture
    def client(self, trained, monkeypatch):
        loaded = load_trained_model("unit_test_model")
        monkeypatch.setattr(serve_mod, "get_loaded_model", lambda: loaded)
        return TestClient(serve_mod.app)

    def test_health(self, client):
        resp = client.get("/health")
        assert resp.status_code == 200
        body = resp.json()
        assert body["status"] == "ok"
        assert body["winner"] == "linear"
        assert body["features"] == ["x1", "x2"]

    def test_predict(self, client):
        resp = client.post("/predict", json={"records": [{"x1": 2.0, "x2": 0}, {"x1": 0.5, "x2": 1}]})
        assert resp.status_code == 200
        body = resp.json()
        assert body["n_instances"] == 2
        assert len(body["predictions"]) == 2
        assert body["dgp"] == "linear"

    def test_predict_empty(self, client):
        resp = client.post("/predict", json={"records": []})
        assert resp.status_code == 400

    def test_predict_missing_feature(self, client):
        resp = client.post("/predict", json={"records": [{"x1": 2.0}]})
        assert resp.status_code == 400
        assert "Missing feature" in resp.json()["detail"]
