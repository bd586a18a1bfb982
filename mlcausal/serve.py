# mlcausal/serve.py

from __future__ import annotations

import os
from functools import lru_cache
from typing import Any, Dict, List

import pandas as pd
from fastapi import FastAPI, HTTPException
from pydantic import BaseModel

from .predict import load_trained_model, predict_dataframe


# ---------- Config ----------

DEFAULT_MODEL_NAME = os.getenv("MLCAUSAL_MODEL_NAME", "default_model")


# ---------- Request / Response schemas ----------

class PredictRequest(BaseModel):
    # each record is a dict of feature_name -> value, e.g. {"x1": 1.3, "x2": 0}
    records: List[Dict[str, Any]]


class PredictResponse(BaseModel):
    model_name: str
    winner: str | None
    dgp: str | None
    n_instances: int
    predictions: List[float]


# ---------- FastAPI app ----------

app = FastAPI(title="mlcausal Inference API")


@lru_cache(maxsize=1)
def get_loaded_model():
    """Load and cache the selected model named by MLCAUSAL_MODEL_NAME."""
    return load_trained_model(DEFAULT_MODEL_NAME)


@app.get("/health")
def health():
    loaded = get_loaded_model()
    return {
        "status": "ok",
        "model_name": str(loaded.path.name),
        "winner": loaded.meta.get("winner"),
        "dgp": loaded.dgp,
        "features": loaded.features,
    }


@app.post("/predict", response_model=PredictResponse)
def predict(req: PredictRequest):
    """
    Predict the outcome for each record.

    Expects:
      {
        "records": [
          {"x1": 2.1, "x2": 1},
          {...}
        ]
      }
    """
    loaded = get_loaded_model()

    if not req.records:
        raise HTTPException(status_code=400, detail="No records provided.")

    df = pd.DataFrame(req.records)

    try:
        preds = predict_dataframe(loaded, df)
    except (ValueError, TypeError) as e:
        raise HTTPException(
            status_code=400,
            detail=f"Error during prediction: {e}",
        )

    return PredictResponse(
        model_name=str(loaded.path.name),
        winner=loaded.meta.get("winner"),
        dgp=loaded.dgp,
        n_instances=df.shape[0],
        predictions=[float(p) for p in preds],
    )
