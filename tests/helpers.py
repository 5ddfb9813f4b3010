"""Test helpers shared by the unit and API suites."""

import asyncio
import time
from datetime import datetime, timedelta, timezone

from recentdirs.engine import RecentDirServer
from recentdirs.models import DirUsage

BASE_TIME = datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)


def minutes_ago(n: int) -> datetime:
    return BASE_TIME - timedelta(minutes=n)


def history_of(*entries: tuple[str, datetime]) -> dict[str, DirUsage]:
    return {path: DirUsage(path=path, access_time=t) for path, t in entries}


class MemoryStore:
    """In-memory history store that records every save."""

    def __init__(self, history: dict[str, DirUsage] | None = None):
        self.history = dict(history or {})
        self.saves: list[dict[str, DirUsage]] = []

    def load(self) -> dict[str, DirUsage]:
        return dict(self.history)

    def save(self, history: dict[str, DirUsage]) -> bool:
        self.saves.append(dict(history))
        self.history = dict(history)
        return True


async def wait_until_listed(engine: RecentDirServer, path: str, timeout: float = 2.0) -> None:
    """Poll the engine until a pushed path has been recorded."""
    loop = asyncio.get_running_loop()
    deadline = loop.time() + timeout
    while loop.time() < deadline:
        if path in await engine.list_dirs():
            return
        await asyncio.sleep(0.01)
    raise TimeoutError(f"{path} was never recorded")


def wait_until_listed_over_http(api, path: str, timeout: float = 2.0) -> list[str]:
    """Poll GET /api/dirs/list until a pushed path shows up."""
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        dirs = api.get("/api/dirs/list").json()["dirs"]
        if path in dirs:
            return dirs
        time.sleep(0.01)
    raise TimeoutError(f"{path} was never recorded")
