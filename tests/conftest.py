import pytest

from mlcausal import config


@pytest.fixture(autouse=True)
def quiet(monkeypatch):
    """Silence harness progress lines during tests."""
    monkeypatch.setattr(config, "VERBOSE", False)
