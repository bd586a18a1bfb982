# mlcausal/cli/evaluate.py

import argparse
import json

from mlcausal.config import FUTURE_SEED, RANDOM_SEED
from mlcausal.data import get_dgp_spec
from mlcausal.harness import compare_on_future
from mlcausal.models import default_candidates


def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Fit models on one simulated sample and score them on a 'future' sample."
    )
    parser.add_argument(
        "--dgp",
        choices=["constant", "linear", "interaction", "nonlinear"],
        default="constant",
    )
    parser.add_argument("--models", nargs="+", default=["mean", "linear"])
    parser.add_argument("--n-train", type=int, default=10000)
    parser.add_argument("--n-future", type=int, default=2000)
    parser.add_argument("--train-seed", type=int, default=RANDOM_SEED)
    parser.add_argument("--future-seed", type=int, default=FUTURE_SEED)
    return parser.parse_args(argv)


def main(argv=None):
    args = parse_args(argv)

    scores = compare_on_future(
        default_candidates(args.models),
        get_dgp_spec(args.dgp),
        n_train=args.n_train,
        n_future=args.n_future,
        train_seed=args.train_seed,
        future_seed=args.future_seed,
    )

    output = {
        "dgp": args.dgp,
        "n_train": args.n_train,
        "n_future": args.n_future,
        "scores": scores,
    }
    print(json.dumps(output, indent=2))


if __name__ == "__main__":
    main()
