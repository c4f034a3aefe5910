import pytest


@pytest.fixture(autouse=True)
def _clean_environment(monkeypatch):
    """Ensure tests never pick up engine configuration from the host environment."""
    monkeypatch.delenv("OTTOMATON_COMMON", raising=False)
    monkeypatch.delenv("OTTOMATON_LOG_LEVEL", raising=False)
    yield
