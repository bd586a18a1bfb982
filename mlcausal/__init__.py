# mlcausal/__init__.py

"""
mlcausal: small library behind the ML & causal inference workshop.

Simulate data from a known DGP, split it, and compare candidate models
on held-out data with a train / validation / test harness.
"""

from . import config, data, partition, metrics, models, harness, tuning, train
