import pytest

from photoalbum import session


@pytest.fixture(autouse=True)
def fresh_process_session(monkeypatch):
    """Each test starts without a process-wide session."""
    monkeypatch.setattr(session, "_session", None)
