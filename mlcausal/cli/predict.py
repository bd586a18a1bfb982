# mlcausal/cli/predict.py

import argparse
import json

from mlcausal.config import FUTURE_SEED
from mlcausal.data import get_dgp_spec, simulate_future
from mlcausal.predict import load_trained_model, predict_dataframe


def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Run predictions with a saved mlcausal winner."
    )
    parser.add_argument(
        "--model-name",
        required=True,
        help="Name of the trained model directory under artifacts/pretrained/",
    )
    parser.add_argument(
        "--num-samples",
        type=int,
        default=5,
        help="How many future records to predict on.",
    )
    parser.add_argument("--seed", type=int, default=FUTURE_SEED)
    return parser.parse_args(argv)


def main(argv=None):
    args = parse_args(argv)

    loaded = load_trained_model(args.model_name)

    # Draw fresh records from the DGP the model was selected on
    spec = get_dgp_spec(loaded.dgp or "linear")
    future = simulate_future(spec, args.num_samples, seed=args.seed)
    X = future.features()

    preds = predict_dataframe(loaded, X)

    output = {
        "model_name": args.model_name,
        "winner": loaded.meta.get("winner"),
        "n_samples": int(X.shape[0]),
        "records": X.astype(float).to_dict(orient="records"),
        "predictions": [float(p) for p in preds],
        "outcomes": future.outcome().tolist(),
    }
    print(json.dumps(output, indent=2))


if __name__ == "__main__":
    main()
