# mlcausal/config.py

from pathlib import Path
import os

# Root of the project; overridable via env for containers / CI runners
PROJECT_ROOT = Path(
    os.getenv("MLCAUSAL_ROOT", Path(__file__).resolve().parents[1])
)

# Base artifacts directory (trained winners, scoreboards)
ARTIFACTS_DIR = PROJECT_ROOT / "artifacts"

# Where selected models + meta.json are stored
PRETRAINED_DIR = ARTIFACTS_DIR / "pretrained"

# Seed for the training sample (overridable via env)
RANDOM_SEED = int(os.getenv("MLCAUSAL_RANDOM_SEED", "42"))

# Seed for the "future" sample drawn from the same DGP
FUTURE_SEED = int(os.getenv("MLCAUSAL_FUTURE_SEED", "68"))

# Standard deviation of the Gaussian outcome noise
NOISE_SD = float(os.getenv("MLCAUSAL_NOISE_SD", "3.0"))

# Print progress lines from the harness / trainer
VERBOSE = os.getenv("MLCAUSAL_VERBOSE", "1") not in ("0", "false", "False", "")
