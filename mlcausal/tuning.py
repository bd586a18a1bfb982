# mlcausal/tuning.py

from __future__ import annotations

from typing import Any, Dict, List, Optional

import numpy as np
import pandas as pd
from sklearn.base import BaseEstimator, RegressorMixin
from sklearn.model_selection import ParameterGrid, ParameterSampler

from .config import RANDOM_SEED
from .data import Dataset
from .harness import evaluate
from .metrics import get_metric
from .models import (
    ModelFamily,
    create_local_model,
    get_model_spec,
    make_candidate,
    resolve_model_name,
)
from .partition import kfold_split
from .utils import log


# Used when AutoTuner is given no search_space
DEFAULT_SEARCH_SPACES: Dict[str, Dict[str, List[Any]]] = {
    "enet": {"alpha": [0.01, 0.1, 1.0], "l1_ratio": [0.1, 0.5, 0.9]},
    "rf": {"max_features": [1, 2], "min_samples_leaf": [1, 5, 20]},
    "gbm": {"learning_rate": [0.05, 0.1], "max_depth": [2, 3], "n_estimators": [100, 200]},
}

_OUTCOME = "__outcome__"


class AutoTuner(RegressorMixin, BaseEstimator):
    """
    Base learner + inner cross-validated hyperparameter search.

    fit() runs the evaluation harness once per inner fold, with one
    candidate per configuration, averages each configuration's validation
    score over the folds, and refits the best configuration on all rows.
    After fitting it behaves like any other regressor.

    search_space is a dict of lists. With n_samples=None every combination
    is tried (ParameterGrid); otherwise n_samples configurations are drawn
    (ParameterSampler, which also accepts scipy.stats distributions).
    """

    def __init__(
        self,
        base_model: str = "enet",
        search_space: Optional[Dict[str, Any]] = None,
        n_folds: int = 5,
        metric: str = "mse",
        n_samples: Optional[int] = None,
        seed: int = RANDOM_SEED,
    ):
        self.base_model = base_model
        self.search_space = search_space
        self.n_folds = n_folds
        self.metric = metric
        self.n_samples = n_samples
        self.seed = seed

    def _configurations(self) -> List[Dict[str, Any]]:
        space = self.search_space
        if space is None:
            space = DEFAULT_SEARCH_SPACES.get(resolve_model_name(self.base_model), {})
        if self.n_samples is None:
            return list(ParameterGrid(space))
        return list(ParameterSampler(space, n_iter=self.n_samples, random_state=self.seed))

    def _as_frame(self, X) -> pd.DataFrame:
        if isinstance(X, pd.DataFrame):
            return X
        X = np.asarray(X)
        return pd.DataFrame(X, columns=[f"f{i}" for i in range(X.shape[1])])

    def fit(self, X, y):
        if get_model_spec(self.base_model).family == ModelFamily.AUTO_TUNED:
            raise ValueError("AutoTuner cannot tune another AutoTuner")

        frame = self._as_frame(X).reset_index(drop=True).copy()
        features = [str(c) for c in frame.columns]
        frame.columns = features
        frame[_OUTCOME] = np.asarray(y, dtype=float)
        dataset = Dataset(frame=frame, feature_names=features, outcome_name=_OUTCOME)

        configs = self._configurations()
        if not configs:
            raise ValueError("Search space produced no configurations")
        metric = get_metric(self.metric)

        candidates = [
            make_candidate(f"config_{i}", self.base_model, **params)
            for i, params in enumerate(configs)
        ]

        fold_scores: Dict[str, List[float]] = {c.identifier: [] for c in candidates}
        for fold in kfold_split(dataset.n_records, self.n_folds, seed=self.seed):
            result = evaluate(
                dataset,
                fold,
                candidates,
                metrics=[self.metric],
                selection_metric=self.metric,
                selection_partition="validation",
                test_partition=None,
                score_partitions=["validation"],
            )
            for ident, value in result.selection_scores.items():
                fold_scores[ident].append(value)

        self.cv_results_ = []
        best_idx = None
        for i, (cand, params) in enumerate(zip(candidates, configs)):
            scores = fold_scores[cand.identifier]
            mean_score = float(np.mean(scores))
            self.cv_results_.append(
                {"params": params, "mean_score": mean_score, "fold_scores": scores}
            )
            if best_idx is None or metric.is_better(mean_score, self.cv_results_[best_idx]["mean_score"]):
                best_idx = i

        self.best_params_ = configs[best_idx]
        self.best_score_ = self.cv_results_[best_idx]["mean_score"]
        log(
            f"{self.base_model}: best {self.metric}={self.best_score_:.4f} "
            f"with {self.best_params_}",
            tag="TUNE",
        )

        self.feature_names_in_ = np.asarray(features, dtype=object)
        self.best_estimator_ = create_local_model(self.base_model, **self.best_params_)
        self.best_estimator_.fit(frame[features], frame[_OUTCOME].to_numpy())
        return self

    def predict(self, X):
        frame = self._as_frame(X).copy()
        frame.columns = [str(c) for c in frame.columns]
        return self.best_estimator_.predict(frame[list(self.feature_names_in_)])
