# mlcausal/predict.py

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Optional

import json
import numpy as np
import pandas as pd
from joblib import load

from .config import PRETRAINED_DIR


@dataclass
class LoadedModel:
    model: Any
    meta: Dict[str, Any]
    path: Path

    @property
    def dgp(self) -> Optional[str]:
        """DGP the model was selected on, from meta["extra"]["dgp"] or the config."""
        extra = self.meta.get("extra", {})
        if isinstance(extra, dict) and "dgp" in extra:
            return extra["dgp"]

        cfg = self.meta.get("config", {})
        if isinstance(cfg, dict) and "dgp" in cfg:
            return cfg["dgp"]

        return None

    @property
    def features(self) -> List[str]:
        feats = self.meta.get("features")
        if feats:
            return list(feats)
        return list(getattr(self.model, "features", None) or [])


def load_trained_model(name: str) -> LoadedModel:
    """
    Load a selected model and its metadata from artifacts/pretrained/<name>/.

    Assumes:
      - model.joblib (a fitted mlcausal.models.Candidate)
      - meta.json  (optional, but recommended)
    """
    model_dir = PRETRAINED_DIR / name
    model_fp = model_dir / "model.joblib"
    meta_fp = model_dir / "meta.json"

    if not model_fp.exists():
        raise FileNotFoundError(f"Model file not found: {model_fp}")

    model = load(model_fp)

    meta: Dict[str, Any] = {}
    if meta_fp.exists():
        meta = json.loads(meta_fp.read_text())

    return LoadedModel(model=model, meta=meta, path=model_dir)


def predict_dataframe(loaded: LoadedModel, df: pd.DataFrame) -> np.ndarray:
    """
    Predict the outcome for each row of df.

    df needs at least the feature columns the model was fitted on; any
    other columns (e.g. the outcome itself) are ignored.
    """
    if not isinstance(df, pd.DataFrame):
        raise TypeError(f"Expected pandas DataFrame, got {type(df)}")

    missing = [c for c in loaded.features if c not in df.columns]
    if missing:
        raise ValueError(f"Missing feature columns: {missing}")

    return loaded.model.predict(df)
