"""API fixtures: the daemon app served in-process through FastAPI's TestClient."""

import pytest
from fastapi.testclient import TestClient

from recentdirs import config
from recentdirs.daemon.app import app
from recentdirs.daemon.deps import get_terminator


@pytest.fixture()
def daemon_env(tmp_path, monkeypatch):
    """Point the daemon at throwaway paths and disable process polling."""
    history_path = tmp_path / "state" / "rd-history"
    monkeypatch.setenv("RD_HISTORY_PATH", str(history_path))
    monkeypatch.setenv("RD_POLL_ENABLED", "false")
    monkeypatch.setenv("RD_SAVE_INTERVAL_S", "3600")
    monkeypatch.setenv("RD_SOCKET_PATH", str(tmp_path / "rd.sock"))
    monkeypatch.setattr(config, "_config", None)
    config.reset_config()
    return history_path


@pytest.fixture()
def stop_calls():
    """Records stop requests instead of signalling the test process."""
    calls: list[bool] = []
    app.dependency_overrides[get_terminator] = lambda: (lambda: calls.append(True))
    yield calls
    app.dependency_overrides.pop(get_terminator, None)


@pytest.fixture()
def api(daemon_env, stop_calls):
    """A TestClient with the engine started by the app lifespan."""
    with TestClient(app) as client:
        yield client
