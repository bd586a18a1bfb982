# mlcausal/data.py

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Sequence

import numpy as np
import pandas as pd

from . import config
from .errors import UnknownDGPError


FEATURE_NAMES = ["x1", "x2"]
OUTCOME_NAME = "y"


class DGPShape(str, Enum):
    CONSTANT = "constant"
    LINEAR = "linear"
    INTERACTION = "interaction"
    NONLINEAR = "nonlinear"


@dataclass
class DGPSpec:
    """
    Ground-truth data-generating process for the workshop simulations.

    - x1: right-skewed continuous feature, Gamma(x1_shape, x1_scale)
    - x2: binary feature, Bernoulli(x2_prob)
    - y:  mean_function(x1, x2) + Normal(0, noise_sd)

    The standardization of x1 uses the population moments of its Gamma
    marginal, never sample moments, so the mean function is the same for
    every seed and every sample size.
    """
    shape: DGPShape = DGPShape.LINEAR
    intercept: float = 8.0
    noise_sd: float = field(default_factory=lambda: config.NOISE_SD)
    x1_shape: float = 2.0
    x1_scale: float = 1.0
    x2_prob: float = 0.5

    def __post_init__(self):
        self.shape = _coerce_shape(self.shape)

    @property
    def x1_mean(self) -> float:
        return self.x1_shape * self.x1_scale

    @property
    def x1_sd(self) -> float:
        return float(np.sqrt(self.x1_shape) * self.x1_scale)

    def standardize_x1(self, x1) -> np.ndarray:
        return (np.asarray(x1, dtype=float) - self.x1_mean) / self.x1_sd


def _coerce_shape(shape) -> DGPShape:
    if isinstance(shape, DGPShape):
        return shape
    try:
        return DGPShape(str(shape).lower())
    except ValueError:
        choices = ", ".join(s.value for s in DGPShape)
        raise UnknownDGPError(f"Unknown DGP shape: {shape!r} (choose from {choices})")


def get_dgp_spec(name: str, **overrides) -> DGPSpec:
    """Map a short DGP name ("constant", "linear", ...) to a spec."""
    return DGPSpec(shape=_coerce_shape(name), **overrides)


def mean_function(spec: DGPSpec, frame: pd.DataFrame) -> np.ndarray:
    """Conditional mean E[y | x1, x2] under the given DGP."""
    x1 = frame["x1"].to_numpy(dtype=float)
    x2 = frame["x2"].to_numpy(dtype=float)
    z1 = spec.standardize_x1(x1)
    base = np.full(x1.shape[0], spec.intercept, dtype=float)

    if spec.shape == DGPShape.CONSTANT:
        return base

    if spec.shape == DGPShape.LINEAR:
        return base + 2.0 * z1 - 4.0 * x2

    if spec.shape == DGPShape.INTERACTION:
        return base + 2.0 * z1 - 4.0 * x2 + 3.0 * z1 * x2

    if spec.shape == DGPShape.NONLINEAR:
        # threshold at the marginal mean of x1, plus interaction and log term
        step = (x1 > spec.x1_mean).astype(float)
        return base + 2.0 * step - 4.0 * x2 + 3.0 * z1 * x2 + 1.5 * np.log(x1)

    raise UnknownDGPError(f"Unhandled DGP shape: {spec.shape}")


@dataclass
class Dataset:
    """
    Labeled synthetic sample.

    frame holds one row per record with the feature columns and the outcome;
    mu holds the noise-free conditional mean for each record.
    """
    frame: pd.DataFrame
    feature_names: List[str]
    outcome_name: str = OUTCOME_NAME
    mu: Optional[np.ndarray] = None
    spec: Optional[DGPSpec] = None
    seed: Optional[int] = None

    def __post_init__(self):
        missing = [c for c in self.feature_names + [self.outcome_name] if c not in self.frame.columns]
        if missing:
            raise ValueError(f"Dataset frame is missing columns: {missing}")

    @property
    def n_records(self) -> int:
        return int(self.frame.shape[0])

    def __len__(self) -> int:
        return self.n_records

    def features(self, indices: Optional[Sequence[int]] = None) -> pd.DataFrame:
        X = self.frame[self.feature_names]
        if indices is None:
            return X
        return X.iloc[np.asarray(indices, dtype=int)]

    def outcome(self, indices: Optional[Sequence[int]] = None) -> np.ndarray:
        y = self.frame[self.outcome_name].to_numpy(dtype=float)
        if indices is None:
            return y
        return y[np.asarray(indices, dtype=int)]

    def subset(self, indices: Sequence[int]) -> "Dataset":
        idx = np.asarray(indices, dtype=int)
        return Dataset(
            frame=self.frame.iloc[idx].reset_index(drop=True),
            feature_names=list(self.feature_names),
            outcome_name=self.outcome_name,
            mu=None if self.mu is None else self.mu[idx],
            spec=self.spec,
            seed=self.seed,
        )


def simulate_dataset(
    n_records: int,
    spec: DGPSpec,
    seed: int = config.RANDOM_SEED,
) -> Dataset:
    """
    Draw n_records from the DGP.

    Draw order is fixed (x1, then x2, then noise), so the same seed and
    spec always give a bit-identical Dataset.
    """
    if n_records < 1:
        raise ValueError(f"n_records must be >= 1, got {n_records}")

    rng = np.random.default_rng(seed)
    x1 = rng.gamma(shape=spec.x1_shape, scale=spec.x1_scale, size=n_records)
    x2 = rng.binomial(n=1, p=spec.x2_prob, size=n_records)
    noise = rng.normal(loc=0.0, scale=spec.noise_sd, size=n_records)

    frame = pd.DataFrame({"x1": x1, "x2": x2})
    mu = mean_function(spec, frame)
    frame[OUTCOME_NAME] = mu + noise

    return Dataset(
        frame=frame,
        feature_names=list(FEATURE_NAMES),
        mu=mu,
        spec=spec,
        seed=seed,
    )


def simulate_future(
    spec: DGPSpec,
    n_records: int,
    seed: int = config.FUTURE_SEED,
) -> Dataset:
    """Fresh draw from the identical DGP, standing in for unseen future data."""
    return simulate_dataset(n_records, spec, seed=seed)
