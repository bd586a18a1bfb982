# mlcausal/harness.py

"""
Train / validate / test evaluation harness.

Control flow of one run:

    fit every candidate on "train"
      -> score every candidate on every non-test partition
      -> pick the winner on (selection metric, "validation")
      -> score only the winner on "test", once

Selection never reads the test partition. Scores land in a Scoreboard that
is frozen when the run completes.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, List, Mapping, Optional, Sequence, Tuple

import numpy as np
import pandas as pd
from joblib import Parallel, delayed

from . import config
from .data import Dataset, DGPSpec, simulate_dataset, simulate_future
from .errors import EmptyPartitionError
from .metrics import Metric, get_metric, score
from .models import Candidate
from .partition import require_partitions
from .utils import log


ScoreKey = Tuple[str, str, str]  # (model_id, partition, metric)


class Scoreboard:
    """
    Mapping (model_id, partition, metric) -> score, filled during one run.

    Pairs that could not be scored (e.g. an empty partition) have no
    entries; their error message is kept in `failures` instead.
    """

    def __init__(self):
        self._scores: Dict[ScoreKey, float] = {}
        self.failures: Dict[Tuple[str, str], str] = {}
        self._frozen = False

    @property
    def frozen(self) -> bool:
        return self._frozen

    def freeze(self) -> None:
        self._frozen = True

    def _check_writable(self):
        if self._frozen:
            raise RuntimeError("Scoreboard is frozen; the evaluation run has completed")

    def record(self, model_id: str, partition: str, metric: str, value: float) -> None:
        self._check_writable()
        self._scores[(model_id, partition, metric)] = float(value)

    def record_failure(self, model_id: str, partition: str, message: str) -> None:
        self._check_writable()
        self.failures[(model_id, partition)] = message

    def get(self, model_id: str, partition: str, metric: str, default=None) -> Optional[float]:
        return self._scores.get((model_id, partition, metric), default)

    def __getitem__(self, key: ScoreKey) -> float:
        return self._scores[key]

    def __contains__(self, key) -> bool:
        return key in self._scores

    def __len__(self) -> int:
        return len(self._scores)

    def __iter__(self) -> Iterator[ScoreKey]:
        return iter(self._scores)

    def items(self):
        return self._scores.items()

    def models(self) -> List[str]:
        return list(dict.fromkeys(k[0] for k in self._scores))

    def to_frame(self) -> pd.DataFrame:
        rows = [
            {"model": m, "partition": p, "metric": k, "value": v}
            for (m, p, k), v in self._scores.items()
        ]
        return pd.DataFrame(rows, columns=["model", "partition", "metric", "value"])

    def to_dict(self) -> Dict[str, Any]:
        """JSON-friendly nested view: {model: {partition: {metric: value}}}."""
        nested: Dict[str, Dict[str, Dict[str, float]]] = {}
        for (m, p, k), v in self._scores.items():
            nested.setdefault(m, {}).setdefault(p, {})[k] = v
        return {
            "scores": nested,
            "failures": {f"{m}/{p}": msg for (m, p), msg in self.failures.items()},
        }


@dataclass
class EvaluationResult:
    scoreboard: Scoreboard
    winner: str
    test_scores: Dict[str, float]
    fitted: Dict[str, Candidate]
    selection_metric: str
    selection_partition: str
    test_partition: Optional[str] = None
    selection_scores: Dict[str, float] = field(default_factory=dict)

    @property
    def winner_model(self) -> Candidate:
        return self.fitted[self.winner]


def score_partition(
    fitted: Candidate,
    dataset: Dataset,
    indices,
    metrics: Sequence[Metric],
    partition: str = "partition",
) -> Dict[str, float]:
    """Predict every record in `indices` and reduce with each metric."""
    idx = np.asarray(indices, dtype=int)
    if idx.shape[0] == 0:
        raise EmptyPartitionError(f"Partition {partition!r} has zero records")

    pred = fitted.predict(dataset.features(idx))
    truth = dataset.outcome(idx)
    return {m.name: score(m, truth, pred) for m in metrics}


def _fit_and_score(
    candidate: Candidate,
    dataset: Dataset,
    partitions: Mapping[str, np.ndarray],
    train_partition: str,
    score_partitions: Sequence[str],
    metrics: Sequence[Metric],
):
    """One candidate's pipeline: fit, then score. Runs in a worker when n_jobs > 1."""
    fitted = candidate.fit(dataset, partitions[train_partition])

    scores: Dict[Tuple[str, str], float] = {}
    failures: Dict[str, str] = {}
    for name in score_partitions:
        try:
            result = score_partition(fitted, dataset, partitions[name], metrics, partition=name)
        except EmptyPartitionError as exc:
            failures[name] = str(exc)
            continue
        for metric_name, value in result.items():
            scores[(name, metric_name)] = value
    return fitted, scores, failures


def _validate_inputs(
    partitions,
    candidates,
    metric_names,
    selection_metric,
    selection_partition,
    train_partition,
    test_partition,
    score_partitions,
):
    ids = [c.identifier for c in candidates]
    if not ids:
        raise ValueError("At least one candidate model is required")
    if any(not i for i in ids):
        raise ValueError("Candidate identifiers must be non-empty")
    if len(set(ids)) != len(ids):
        raise ValueError(f"Candidate identifiers must be unique, got {ids}")

    metrics = [get_metric(name) for name in metric_names]
    if selection_metric not in metric_names:
        raise ValueError(
            f"Selection metric {selection_metric!r} must be one of {list(metric_names)}"
        )

    required = [train_partition, selection_partition, *score_partitions]
    if test_partition is not None:
        required.append(test_partition)
    require_partitions(partitions, required)

    if selection_partition not in score_partitions:
        raise ValueError(
            f"Selection partition {selection_partition!r} must be scored"
        )
    if test_partition is not None and (
        test_partition in score_partitions or test_partition == selection_partition
    ):
        raise ValueError(
            f"Test partition {test_partition!r} is read only after selection; "
            "it cannot be a score or selection partition"
        )

    if len(partitions[train_partition]) == 0:
        raise EmptyPartitionError(f"Training partition {train_partition!r} has zero records")

    return metrics


def evaluate(
    dataset: Dataset,
    partitions: Mapping[str, np.ndarray],
    candidates: Sequence[Candidate],
    metrics: Sequence[str] = ("mae", "mse"),
    selection_metric: str = "mse",
    selection_partition: str = "validation",
    train_partition: str = "train",
    test_partition: Optional[str] = "test",
    score_partitions: Optional[Sequence[str]] = None,
    n_jobs: Optional[int] = None,
) -> EvaluationResult:
    """
    Fit, score, select and report.

    All configuration checks (unknown partitions/metrics, duplicate ids,
    empty train partition) happen before any model is fitted. An empty
    score partition is recorded as a failure for that (model, partition)
    pair and the run continues. Ties on the selection score go to the
    earliest candidate.

    n_jobs > 1 fits candidates in parallel with joblib; results are
    collected and written to the scoreboard in candidate order.
    """
    if score_partitions is None:
        score_partitions = [p for p in partitions if p != test_partition]
    score_partitions = list(score_partitions)

    metric_objs = _validate_inputs(
        partitions, candidates, list(metrics), selection_metric,
        selection_partition, train_partition, test_partition, score_partitions,
    )
    selector = get_metric(selection_metric)

    log(
        f"Evaluating {len(candidates)} candidates on {dataset.n_records} records "
        f"(select by {selection_metric} on {selection_partition!r})"
    )

    outputs = Parallel(n_jobs=n_jobs)(
        delayed(_fit_and_score)(
            c, dataset, partitions, train_partition, score_partitions, metric_objs
        )
        for c in candidates
    )

    board = Scoreboard()
    fitted: Dict[str, Candidate] = {}
    for cand, (fit_cand, scores, failures) in zip(candidates, outputs):
        fitted[cand.identifier] = fit_cand
        for (pname, mname), value in scores.items():
            board.record(cand.identifier, pname, mname, value)
        for pname, msg in failures.items():
            board.record_failure(cand.identifier, pname, msg)
            log(f"{cand.identifier}: skipped {pname!r} ({msg})")
        sel = board.get(cand.identifier, selection_partition, selection_metric)
        if sel is not None:
            log(f"{cand.identifier}: {selection_metric}[{selection_partition}] = {sel:.4f}")

    selection_scores: Dict[str, float] = {}
    winner: Optional[str] = None
    for cand in candidates:
        value = board.get(cand.identifier, selection_partition, selection_metric)
        if value is None:
            continue
        selection_scores[cand.identifier] = value
        if winner is None or selector.is_better(value, selection_scores[winner]):
            winner = cand.identifier

    if winner is None:
        board.freeze()
        raise EmptyPartitionError(
            f"No candidate could be scored on {selection_partition!r}; cannot select a winner",
            scoreboard=board,
        )
    log(f"Winner: {winner}")

    test_scores: Dict[str, float] = {}
    if test_partition is not None:
        try:
            test_scores = score_partition(
                fitted[winner], dataset, partitions[test_partition],
                metric_objs, partition=test_partition,
            )
        except EmptyPartitionError as exc:
            board.record_failure(winner, test_partition, str(exc))
            log(f"{winner}: skipped {test_partition!r} ({exc})")
        for mname, value in test_scores.items():
            board.record(winner, test_partition, mname, value)
            log(f"{winner}: {mname}[{test_partition}] = {value:.4f}")

    board.freeze()

    return EvaluationResult(
        scoreboard=board,
        winner=winner,
        test_scores=test_scores,
        fitted=fitted,
        selection_metric=selection_metric,
        selection_partition=selection_partition,
        test_partition=test_partition,
        selection_scores=selection_scores,
    )


def score_fitted(
    fitted: Sequence[Candidate],
    dataset: Dataset,
    metrics: Sequence[str] = ("mae", "mse"),
) -> Dict[str, Dict[str, float]]:
    """Score already-fitted candidates on every record of a separate dataset."""
    metric_objs = [get_metric(name) for name in metrics]
    all_idx = np.arange(dataset.n_records)
    return {
        c.identifier: score_partition(c, dataset, all_idx, metric_objs, partition="dataset")
        for c in fitted
    }


def compare_on_future(
    candidates: Sequence[Candidate],
    spec: DGPSpec,
    n_train: int = 10_000,
    n_future: int = 2_000,
    train_seed: int = config.RANDOM_SEED,
    future_seed: int = config.FUTURE_SEED,
    metrics: Sequence[str] = ("mae", "mse"),
) -> Dict[str, Dict[str, float]]:
    """
    Fit on one sample, score on a fresh "future" sample from the same DGP.

    This is the workshop's generalization check: does extra model capacity
    pay off on data the model has never seen?
    """
    train_ds = simulate_dataset(n_train, spec, seed=train_seed)
    future_ds = simulate_future(spec, n_future, seed=future_seed)

    log(
        f"Future comparison: {spec.shape.value} DGP, "
        f"{n_train} train (seed {train_seed}) / {n_future} future (seed {future_seed})"
    )
    fitted = [c.fit(train_ds) for c in candidates]
    results = score_fitted(fitted, future_ds, metrics)
    for ident, scores in results.items():
        log(f"{ident}: " + ", ".join(f"{k}={v:.4f}" for k, v in scores.items()))
    return results
