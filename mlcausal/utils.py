# mlcausal/utils.py

from . import config


def log(msg: str, tag: str = "HARNESS") -> None:
    """Simple logging"""
    if config.VERBOSE:
        print(f"[{tag}] {msg}")
