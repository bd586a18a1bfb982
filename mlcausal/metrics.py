# mlcausal/metrics.py

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Dict

import numpy as np
from sklearn.metrics import mean_absolute_error, mean_squared_error

from .errors import EmptyPartitionError, UnknownMetricError


@dataclass(frozen=True)
class Metric:
    """Reduces a sequence of (truth, prediction) pairs to one number."""
    name: str
    func: Callable[[np.ndarray, np.ndarray], float]
    greater_is_better: bool = False

    def is_better(self, a: float, b: float) -> bool:
        """True if score a beats score b (strictly)."""
        return a > b if self.greater_is_better else a < b


def _rmse(truth, pred) -> float:
    return float(np.sqrt(mean_squared_error(truth, pred)))


METRICS: Dict[str, Metric] = {
    "mae": Metric("mae", mean_absolute_error),
    "mse": Metric("mse", mean_squared_error),
    "rmse": Metric("rmse", _rmse),
}


def get_metric(name: str) -> Metric:
    try:
        return METRICS[name]
    except KeyError:
        raise UnknownMetricError(
            f"Unknown metric: {name!r} (choose from {', '.join(METRICS)})"
        ) from None


def score(metric: Metric, truth, pred) -> float:
    """
    Apply metric to paired truths and predictions.

    Raises EmptyPartitionError for zero pairs; a score over nothing is
    undefined, not zero.
    """
    truth = np.asarray(truth, dtype=float).ravel()
    pred = np.asarray(pred, dtype=float).ravel()

    if truth.shape[0] != pred.shape[0]:
        raise ValueError(
            f"Got {truth.shape[0]} truths but {pred.shape[0]} predictions"
        )
    if truth.shape[0] == 0:
        raise EmptyPartitionError(f"Cannot compute {metric.name} over zero records")
    if not (np.isfinite(truth).all() and np.isfinite(pred).all()):
        raise ValueError(f"{metric.name} is only defined for finite values")

    return float(metric.func(truth, pred))
