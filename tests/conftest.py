"""Shared pytest configuration and fixtures for all test suites."""

import pytest
import pytest_asyncio

from recentdirs.engine import RecentDirServer

from helpers import MemoryStore


@pytest.fixture()
def make_dirs(tmp_path):
    """Create directories below a fresh root and return their absolute paths."""
    root = tmp_path / "h"

    def _make(*names: str) -> list[str]:
        paths = []
        for name in names:
            path = root / name
            path.mkdir(parents=True, exist_ok=True)
            paths.append(str(path))
        return paths

    return _make


@pytest_asyncio.fixture()
async def engine_factory():
    """Build started engines over a MemoryStore; all are stopped on teardown."""
    engines: list[RecentDirServer] = []

    async def _make(history=None, save_interval_s=3600.0, **kwargs):
        store = MemoryStore(history)
        engine = RecentDirServer(store=store, save_interval_s=save_interval_s, **kwargs)
        await engine.start()
        engines.append(engine)
        return engine, store

    yield _make
    for engine in engines:
        await engine.stop()
