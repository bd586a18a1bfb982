# mlcausal/train.py

from dataclasses import dataclass, asdict, field
from typing import Any, Dict, Optional, Tuple
from pathlib import Path
import json

from joblib import dump

from .data import get_dgp_spec, simulate_dataset
from .harness import evaluate
from .models import default_candidates
from .partition import holdout_split
from .config import PRETRAINED_DIR, RANDOM_SEED
from .utils import log


@dataclass
class TrainConfig:
    # Which DGP to simulate: "constant", "linear", "interaction", "nonlinear"
    dgp: str = "linear"
    n_samples: int = 10000

    # Ordered partition name -> fraction
    fractions: Dict[str, float] = field(
        default_factory=lambda: {"train": 0.6, "validation": 0.2, "test": 0.2}
    )

    # Candidate models (resolved via models.py)
    models: Tuple[str, ...] = ("mean", "linear", "rf", "gbm", "enet")

    metrics: Tuple[str, ...] = ("mae", "mse")
    selection_metric: str = "mse"
    seed: int = RANDOM_SEED
    n_jobs: Optional[int] = None
    save_model_name: str = "default_model"  # folder under artifacts/pretrained


def run_benchmark(config: TrainConfig) -> Dict[str, Any]:
    """
    Simulate -> split -> evaluate, without touching disk.
    Returns the dataset, partitions and EvaluationResult.
    """
    spec = get_dgp_spec(config.dgp)
    dataset = simulate_dataset(config.n_samples, spec, seed=config.seed)
    partitions = holdout_split(dataset.n_records, config.fractions, seed=config.seed)

    result = evaluate(
        dataset,
        partitions,
        default_candidates(config.models),
        metrics=config.metrics,
        selection_metric=config.selection_metric,
        n_jobs=config.n_jobs,
    )
    return {"spec": spec, "dataset": dataset, "partitions": partitions, "result": result}


def train(config: TrainConfig) -> Dict[str, Any]:
    """
    High-level training entrypoint.

    - Simulates the chosen DGP and splits it train/validation/test
    - Runs the evaluation harness over all candidate models
    - Saves the winner + metadata to artifacts/pretrained/<save_model_name>/
    - Returns a dict with model_path, winner, scores, etc.
    """
    bench = run_benchmark(config)
    spec = bench["spec"]
    dataset = bench["dataset"]
    partitions = bench["partitions"]
    result = bench["result"]

    # Prepare directory for saving
    model_dir: Path = PRETRAINED_DIR / config.save_model_name
    model_dir.mkdir(parents=True, exist_ok=True)

    model_fp = model_dir / "model.joblib"
    meta_fp = model_dir / "meta.json"

    winner = result.winner_model
    dump(winner, model_fp)

    cfg = asdict(config)
    cfg["models"] = list(config.models)
    cfg["metrics"] = list(config.metrics)

    meta = {
        "config": cfg,
        "winner": result.winner,
        "features": list(winner.features),
        "test_scores": result.test_scores,
        "selection_scores": result.selection_scores,
        "scoreboard": result.scoreboard.to_dict(),
        "extra": {
            "dgp": spec.shape.value,
            "noise_sd": spec.noise_sd,
            "partition_sizes": {k: int(len(v)) for k, v in partitions.items()},
            "n_records": dataset.n_records,
        },
    }
    meta_fp.write_text(json.dumps(meta, indent=2))
    log(f"Saved {result.winner} to {model_fp}", tag="TRAIN")

    # Return a summary
    return {
        "model_path": str(model_fp),
        "config": cfg,
        "winner": result.winner,
        "selection_scores": result.selection_scores,
        "test_scores": result.test_scores,
        "extra": meta["extra"],
    }
