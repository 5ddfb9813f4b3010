"""Directory usage engine: the single owner of the history map.

All state (history map, result ids, update/save timestamps) is read and
written only by the ``_serve`` loop. Sources, the save timer and RPC handlers
talk to it by putting messages into one bounded inbox, which serializes
every state transition and makes producers wait while the loop is busy.
"""

import asyncio
import logging
import os
import time
from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from typing import Callable, Optional

from .errors import EngineStoppedError, PathNotFoundError
from .matching import QUERY_ALL, parse_result_id, query_match, sort_group_matches, split_terms
from .models import DirUsage, DirUseEvent, QueryMatch
from .sources import DirUseSource, ManualDirSource
from .store import RecentDirStore

log = logging.getLogger("recentdirs.engine")


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


def file_exists(path: str) -> bool:
    return os.path.exists(path)


@dataclass(eq=False)
class Query:
    """A query from a client. ``reply`` is resolved exactly once."""

    query: str
    reply: asyncio.Future = field(default_factory=lambda: asyncio.get_running_loop().create_future())


class _SaveTick:
    pass


_SAVE_TICK = _SaveTick()


class RecentDirServer:
    """Tracks directory usage and answers ranked queries over it."""

    def __init__(
        self,
        store: RecentDirStore,
        sources: Optional[list[DirUseSource]] = None,
        save_interval_s: float = 5.0,
        clock: Callable[[], datetime] = _utc_now,
    ):
        self._store = store
        self._save_interval_s = save_interval_s
        self._clock = clock

        # an event source for manual reporting of dir usage via push()
        self.manual_source = ManualDirSource()
        self._sources: list[DirUseSource] = [*(sources or []), self.manual_source]

        self._inbox: asyncio.Queue = asyncio.Queue(maxsize=1)
        self._tasks: list[asyncio.Task] = []
        self._pending: set[Query] = set()
        self._running = False

        # path -> usage info for recently used dirs
        self._recent_dirs: dict[str, DirUsage] = {}
        # path -> id from the last pattern query
        self._path_ids: dict[str, int] = {}

        # monotonic timestamps of the last history mutation and last save
        self._last_update_time = 0.0
        self._last_save_time = 0.0

    @property
    def running(self) -> bool:
        return self._running

    # ── Lifecycle ───────────────────────────────────────────

    async def start(self) -> None:
        if self._running:
            return
        self._recent_dirs = await asyncio.to_thread(self._store.load)
        self._running = True

        self._tasks.append(asyncio.create_task(self._serve(), name="rd-serve"))
        self._tasks.append(asyncio.create_task(self._tick_saves(), name="rd-save-timer"))
        for source in self._sources:
            self._tasks.append(
                asyncio.create_task(self._forward_events(source), name=f"rd-source-{source.name}")
            )
        log.info(
            "Engine started with %d dirs, sources: %s",
            len(self._recent_dirs), ", ".join(s.name for s in self._sources),
        )

    async def stop(self) -> None:
        """Cancel all tasks, fail queued queries and flush unsaved history."""
        if not self._running:
            return
        self._running = False
        for task in self._tasks:
            task.cancel()
        await asyncio.gather(*self._tasks, return_exceptions=True)
        self._tasks.clear()

        for query in self._pending:
            if not query.reply.done():
                query.reply.set_exception(EngineStoppedError("engine stopped"))
        # let senders blocked on the full inbox observe the failure
        while self._pending:
            while not self._inbox.empty():
                self._inbox.get_nowait()
            await asyncio.sleep(0)

        await self._save_if_updated()
        log.info("Engine stopped")

    async def _forward_events(self, source: DirUseSource) -> None:
        async for event in source.events():
            await self._inbox.put(event)

    async def _tick_saves(self) -> None:
        while True:
            await asyncio.sleep(self._save_interval_s)
            await self._inbox.put(_SAVE_TICK)

    # ── Client operations ───────────────────────────────────

    async def query(self, text: str) -> list[QueryMatch]:
        if not self._running:
            raise EngineStoppedError("engine is not running")
        query = Query(query=text)
        self._pending.add(query)
        try:
            await self._inbox.put(query)
            return await query.reply
        finally:
            self._pending.discard(query)

    async def push(self, path: str) -> bool:
        if not os.path.isabs(path) or not file_exists(path):
            raise PathNotFoundError(path)
        self.manual_source.push(path)
        return True

    async def list_dirs(self) -> list[str]:
        matches = await self.query(QUERY_ALL)
        return sorted(m.path for m in matches)

    # ── Control loop ────────────────────────────────────────

    async def _serve(self) -> None:
        while True:
            message = await self._inbox.get()
            try:
                if isinstance(message, DirUseEvent):
                    self._record_event(message)
                elif isinstance(message, Query):
                    self._answer(message)
                elif message is _SAVE_TICK:
                    await self._save_if_updated()
            except Exception:
                log.exception("Failed to handle %r", message)

    def _record_event(self, event: DirUseEvent) -> None:
        now = self._clock()
        usage = self._recent_dirs.get(event.path)
        if usage is None:
            usage = DirUsage(path=event.path, access_time=now)
            log.info("recording new dir %s (total: %d)", event.path, len(self._recent_dirs) + 1)
        else:
            usage = replace(usage, access_time=max(now, usage.access_time))
        self._recent_dirs[event.path] = usage
        self._last_update_time = time.monotonic()

    async def _save_if_updated(self) -> None:
        if self._last_update_time <= self._last_save_time:
            return
        snapshot = dict(self._recent_dirs)
        if await asyncio.to_thread(self._store.save, snapshot):
            self._last_save_time = time.monotonic()

    def _answer(self, query: Query) -> None:
        try:
            result = self._run_query(query.query)
        except Exception as e:
            log.exception("Query %r failed", query.query)
            if not query.reply.done():
                query.reply.set_exception(e)
            return
        if not query.reply.done():
            query.reply.set_result(result)

    def _run_query(self, text: str) -> list[QueryMatch]:
        result_id = parse_result_id(text)
        if result_id is not None:
            return self._resolve_id(result_id)

        if text == QUERY_ALL:
            matches = self._collect(lambda usage: QueryMatch(dir=usage))
            return sorted(matches, key=lambda m: m.path)

        # no terms matches every entry
        terms = split_terms(text)
        matches = sort_group_matches(self._collect(lambda usage: query_match(terms, usage)))
        self._assign_result_ids(matches)
        return matches

    def _collect(self, match_fn: Callable[[DirUsage], Optional[QueryMatch]]) -> list[QueryMatch]:
        """Match every history entry, dropping entries which vanished from disk."""
        matches: list[QueryMatch] = []
        for path, usage in list(self._recent_dirs.items()):
            match = match_fn(usage)
            if match is None:
                continue
            if file_exists(path):
                match.dir = self._recent_dirs[path]
                matches.append(match)
            else:
                del self._recent_dirs[path]
                self._last_update_time = time.monotonic()
                log.info("removed stale dir %s", path)
        return matches

    def _resolve_id(self, result_id: int) -> list[QueryMatch]:
        for path, path_id in self._path_ids.items():
            if path_id == result_id:
                usage = self._recent_dirs.get(path, DirUsage(path=path))
                return [QueryMatch(dir=usage, id=path_id)]
        return []

    def _assign_result_ids(self, matches: list[QueryMatch]) -> None:
        self._path_ids = {}
        for match in matches:
            match.id = self._path_ids.setdefault(match.path, len(self._path_ids) + 1)
