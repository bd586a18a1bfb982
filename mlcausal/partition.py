# mlcausal/partition.py

from __future__ import annotations

from typing import Dict, Iterable, List, Mapping, Union

import numpy as np
from sklearn.model_selection import KFold

from . import config
from .errors import InvalidFractionError, UnknownPartitionError


# name -> sorted record indices
Partitions = Dict[str, np.ndarray]

_TOL = 1e-9


def _normalize_fractions(fractions: Union[float, Mapping[str, float]]) -> Dict[str, float]:
    if isinstance(fractions, (int, float)):
        f = float(fractions)
        if not 0.0 < f < 1.0:
            raise InvalidFractionError(f"Holdout fraction must be in (0, 1), got {f}")
        return {"train": f, "test": 1.0 - f}

    out = dict(fractions)
    if not out:
        raise InvalidFractionError("At least one split fraction is required")

    for name, f in out.items():
        if not 0.0 < float(f) < 1.0:
            raise InvalidFractionError(
                f"Fraction for {name!r} must be in (0, 1), got {f}"
            )

    total = float(sum(out.values()))
    if total > 1.0 + _TOL:
        raise InvalidFractionError(f"Fractions must sum to <= 1, got {total:.6g}")
    return {name: float(f) for name, f in out.items()}


def holdout_split(
    n_records: int,
    fractions: Union[float, Mapping[str, float]] = 0.8,
    seed: int = config.RANDOM_SEED,
) -> Partitions:
    """
    Split range(n_records) into named, disjoint partitions.

    - fractions=0.8 gives {"train": 80%, "test": 20%}
    - fractions={"train": .6, "validation": .2, "test": .2} gives three parts

    Each partition gets floor(f * n) indices drawn without replacement.
    If the fractions sum to 1, the rounding remainder goes to the last
    partition so every index is assigned; otherwise leftovers are dropped.
    """
    fracs = _normalize_fractions(fractions)
    if n_records < 0:
        raise ValueError(f"n_records must be >= 0, got {n_records}")

    rng = np.random.default_rng(seed)
    order = rng.permutation(n_records)

    sizes = [int(np.floor(f * n_records + _TOL)) for f in fracs.values()]
    if abs(sum(fracs.values()) - 1.0) <= _TOL:
        sizes[-1] = n_records - sum(sizes[:-1])

    partitions: Partitions = {}
    start = 0
    for name, size in zip(fracs, sizes):
        partitions[name] = np.sort(order[start:start + size])
        start += size
    return partitions


def kfold_split(
    n_records: int,
    k: int = 5,
    seed: int = config.RANDOM_SEED,
) -> List[Partitions]:
    """
    k-fold assignment: fold i uses its own indices as "validation" and the
    other k-1 folds as "train". Every index is validated exactly once.
    """
    if k < 2:
        raise InvalidFractionError(f"k-fold needs k >= 2, got {k}")
    if k > n_records:
        raise InvalidFractionError(f"k={k} folds exceed n_records={n_records}")

    kf = KFold(n_splits=k, shuffle=True, random_state=seed)
    folds: List[Partitions] = []
    for tr, va in kf.split(np.arange(n_records)):
        folds.append({"train": np.sort(tr), "validation": np.sort(va)})
    return folds


def check_disjoint(partitions: Mapping[str, np.ndarray]) -> None:
    seen: Dict[int, str] = {}
    for name, idx in partitions.items():
        for i in np.asarray(idx, dtype=int).tolist():
            if i in seen:
                raise ValueError(
                    f"Record {i} appears in both {seen[i]!r} and {name!r}"
                )
            seen[i] = name


def require_partitions(partitions: Mapping[str, np.ndarray], names: Iterable[str]) -> None:
    for name in names:
        if name not in partitions:
            raise UnknownPartitionError(name, available=partitions.keys())
