# mlcausal/models.py

from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, Dict, List, Optional, Sequence

import numpy as np
import pandas as pd
from sklearn.base import clone
from sklearn.dummy import DummyRegressor
from sklearn.ensemble import GradientBoostingRegressor, RandomForestRegressor
from sklearn.linear_model import ElasticNet, LinearRegression
from sklearn.pipeline import Pipeline
from sklearn.preprocessing import StandardScaler

from .config import RANDOM_SEED
from .errors import EmptyPartitionError, UnknownModelError


class ModelFamily(str, Enum):
    MEAN = "mean"
    LINEAR = "linear"
    RANDOM_FOREST = "random_forest"
    GRADIENT_BOOSTING = "gradient_boosting"
    ELASTIC_NET = "elastic_net"
    AUTO_TUNED = "auto_tuned"


@dataclass
class ModelSpec:
    """
    High-level description of a model.
    - family: which estimator family it builds
    - default_params: constructor arguments used unless overridden
    - scale_features: wrap the estimator in a StandardScaler pipeline
    """
    family: ModelFamily
    default_params: Dict[str, Any] = field(default_factory=dict)
    scale_features: bool = False


# Short, user-facing names -> specs. This is where *all* supported models live.
MODEL_REGISTRY: Dict[str, ModelSpec] = {
    "mean": ModelSpec(family=ModelFamily.MEAN),
    "linear": ModelSpec(family=ModelFamily.LINEAR),
    "rf": ModelSpec(
        family=ModelFamily.RANDOM_FOREST,
        default_params={"n_estimators": 200, "min_samples_leaf": 5, "random_state": RANDOM_SEED},
    ),
    "gbm": ModelSpec(
        family=ModelFamily.GRADIENT_BOOSTING,
        default_params={"n_estimators": 200, "max_depth": 3, "learning_rate": 0.05,
                        "random_state": RANDOM_SEED},
    ),
    "enet": ModelSpec(
        family=ModelFamily.ELASTIC_NET,
        default_params={"alpha": 0.1, "l1_ratio": 0.5},
        scale_features=True,
    ),
    "auto": ModelSpec(family=ModelFamily.AUTO_TUNED),
}

ALIASES: Dict[str, str] = {
    "lm": "linear",
    "random_forest": "rf",
    "gradient_boosting": "gbm",
    "elastic_net": "enet",
    "auto_tuned": "auto",
}


def resolve_model_name(name: str) -> str:
    """Canonical registry key for a name or alias ("elastic_net" -> "enet")."""
    return ALIASES.get(name, name)


def get_model_spec(name: str) -> ModelSpec:
    """Map a short model name (or alias) to its spec."""
    key = resolve_model_name(name)
    try:
        return MODEL_REGISTRY[key]
    except KeyError:
        raise UnknownModelError(
            f"Unknown model name: {name!r} (choose from {', '.join(sorted(MODEL_REGISTRY))})"
        ) from None


def create_local_model(model_name: str, **params):
    """
    Create an unfitted, sklearn-compatible regressor for the given name.
    Keyword params override the registry defaults.
    """
    spec = get_model_spec(model_name)
    kwargs = {**spec.default_params, **params}

    if spec.family == ModelFamily.MEAN:
        base = DummyRegressor(strategy="mean")
    elif spec.family == ModelFamily.LINEAR:
        base = LinearRegression(**kwargs)
    elif spec.family == ModelFamily.RANDOM_FOREST:
        base = RandomForestRegressor(**kwargs)
    elif spec.family == ModelFamily.GRADIENT_BOOSTING:
        base = GradientBoostingRegressor(**kwargs)
    elif spec.family == ModelFamily.ELASTIC_NET:
        base = ElasticNet(**kwargs)
    elif spec.family == ModelFamily.AUTO_TUNED:
        # tuning builds on the harness, which builds on this module
        from .tuning import AutoTuner
        return AutoTuner(**kwargs)
    else:
        raise UnknownModelError(f"Unhandled model family: {spec.family}")

    if spec.scale_features:
        return Pipeline(
            steps=[
                ("scaler", StandardScaler()),
                ("model", base),
            ]
        )
    return base


@dataclass
class Candidate:
    """
    A named competitor in an evaluation run.

    estimator is the unfitted template; fit() clones it, so the same
    Candidate can be evaluated any number of times independently.
    features restricts the model to a subset of the dataset's columns
    (None = all feature columns).
    """
    identifier: str
    estimator: Any
    features: Optional[List[str]] = None
    model_name: Optional[str] = None
    fitted_: Any = field(default=None, repr=False)

    @property
    def is_fitted(self) -> bool:
        return self.fitted_ is not None

    def columns(self, dataset) -> List[str]:
        return list(self.features) if self.features is not None else list(dataset.feature_names)

    def fit(self, dataset, indices: Optional[Sequence[int]] = None) -> "Candidate":
        """Fit a fresh clone on the given records; returns a fitted copy."""
        cols = self.columns(dataset)
        X = dataset.features(indices)[cols]
        y = dataset.outcome(indices)
        if X.shape[0] == 0:
            raise EmptyPartitionError(f"Cannot fit {self.identifier!r} on zero records")

        model = clone(self.estimator)
        model.fit(X, y)
        return replace(self, features=cols, fitted_=model)

    def predict(self, X: pd.DataFrame) -> np.ndarray:
        if not self.is_fitted:
            raise RuntimeError(f"Candidate {self.identifier!r} has not been fitted")
        cols = self.features
        missing = [c for c in cols if c not in X.columns]
        if missing:
            raise ValueError(f"Missing feature columns for {self.identifier!r}: {missing}")
        return np.asarray(self.fitted_.predict(X[cols]), dtype=float)


def make_candidate(
    identifier: str,
    model_name: str,
    features: Optional[Sequence[str]] = None,
    **params,
) -> Candidate:
    return Candidate(
        identifier=identifier,
        estimator=create_local_model(model_name, **params),
        features=None if features is None else list(features),
        model_name=model_name,
    )


def default_candidates(names: Sequence[str]) -> List[Candidate]:
    """One candidate per registry name, identified by that name."""
    return [make_candidate(name, name) for name in names]
