# mlcausal/cli/train.py

import argparse
import json

from mlcausal.config import RANDOM_SEED
from mlcausal.train import TrainConfig, train


def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Benchmark candidate models on simulated data and save the winner."
    )

    parser.add_argument(
        "--dgp",
        choices=["constant", "linear", "interaction", "nonlinear"],
        default="linear",
        help="Data-generating process to simulate.",
    )
    parser.add_argument(
        "--models",
        nargs="+",
        default=["mean", "linear", "rf", "gbm", "enet"],
        help="Candidate model names (defined in mlcausal.models, e.g. mean, linear, rf).",
    )
    parser.add_argument(
        "--n-samples",
        type=int,
        default=10000,
        help="Number of simulated records.",
    )
    parser.add_argument(
        "--train-size",
        type=float,
        default=0.6,
        help="Fraction of records used for fitting.",
    )
    parser.add_argument(
        "--validation-size",
        type=float,
        default=0.2,
        help="Fraction of records used to select the winner.",
    )
    parser.add_argument(
        "--test-size",
        type=float,
        default=0.2,
        help="Fraction of records used to report the winner's score.",
    )
    parser.add_argument(
        "--selection-metric",
        choices=["mae", "mse", "rmse"],
        default="mse",
    )
    parser.add_argument("--seed", type=int, default=RANDOM_SEED)
    parser.add_argument(
        "--n-jobs",
        type=int,
        default=None,
        help="Fit candidates in parallel (joblib).",
    )
    parser.add_argument(
        "--save-model-name",
        default="default_model",
        help="Name of folder under artifacts/pretrained/ to store the winner.",
    )

    return parser.parse_args(argv)


def main(argv=None):
    args = parse_args(argv)

    metrics = ["mae", "mse"]
    if args.selection_metric not in metrics:
        metrics.append(args.selection_metric)

    cfg = TrainConfig(
        dgp=args.dgp,
        n_samples=args.n_samples,
        fractions={
            "train": args.train_size,
            "validation": args.validation_size,
            "test": args.test_size,
        },
        models=tuple(args.models),
        metrics=tuple(metrics),
        selection_metric=args.selection_metric,
        seed=args.seed,
        n_jobs=args.n_jobs,
        save_model_name=args.save_model_name,
    )

    results = train(cfg)
    print(json.dumps(results, indent=2))


if __name__ == "__main__":
    main()
