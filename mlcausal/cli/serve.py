# mlcausal/cli/serve.py

import argparse

import uvicorn

from mlcausal import serve


def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Serve a model selected by mlcausal-train over HTTP."
    )
    parser.add_argument(
        "--model-name",
        default=serve.DEFAULT_MODEL_NAME,
        help="Directory under artifacts/pretrained/ holding model.joblib + meta.json.",
    )
    parser.add_argument("--host", default="127.0.0.1")
    parser.add_argument("--port", type=int, default=8000)
    parser.add_argument(
        "--log-level",
        choices=["critical", "error", "warning", "info", "debug"],
        default="info",
    )
    return parser.parse_args(argv)


def main(argv=None):
    args = parse_args(argv)

    # Point the app at the requested winner and load it now, so a missing
    # artifact fails here instead of on the first request.
    serve.DEFAULT_MODEL_NAME = args.model_name
    serve.get_loaded_model.cache_clear()
    loaded = serve.get_loaded_model()

    print(
        f"[SERVE] {loaded.path.name}: winner={loaded.meta.get('winner')} "
        f"dgp={loaded.dgp} features={loaded.features}"
    )

    uvicorn.run(serve.app, host=args.host, port=args.port, log_level=args.log_level)


if __name__ == "__main__":
    main()
