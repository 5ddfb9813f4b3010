"""Sources of directory usage events."""

import abc
import asyncio
import logging
from typing import AsyncIterator, Callable

from . import procinfo
from .models import DirUseEvent

log = logging.getLogger("recentdirs.sources")


class DirUseSource(abc.ABC):
    """Produces a lazy, unbounded stream of DirUseEvents.

    Events from one source arrive in observation order. A source is started
    by iterating ``events()`` and restarted only by creating a new one.
    """

    name = "source"

    @abc.abstractmethod
    def events(self) -> AsyncIterator[DirUseEvent]:
        ...


class CurrentDirPoller(DirUseSource):
    """Polls the working dir of every process and reports changes."""

    name = "cwd-poller"

    def __init__(
        self,
        interval_s: float = 5.0,
        scan: Callable[[], list[procinfo.Proc]] = procinfo.scan_procs,
    ):
        self.interval_s = interval_s
        self._scan = scan

    async def events(self) -> AsyncIterator[DirUseEvent]:
        if self._scan is procinfo.scan_procs and not procinfo.is_supported():
            log.warning("No %s on this system, process polling disabled", procinfo.PROC_ROOT)

        # pid -> previous current dir
        prev_dirs: dict[int, str] = {}
        while True:
            await asyncio.sleep(self.interval_s)
            procs = await asyncio.to_thread(self._scan)
            live: dict[int, str] = {}
            for proc in procs:
                live[proc.id] = proc.current_dir
                if prev_dirs.get(proc.id) != proc.current_dir:
                    yield DirUseEvent(path=proc.current_dir, proc_id=proc.id)
            prev_dirs = live


class ManualDirSource(DirUseSource):
    """Events pushed explicitly by clients."""

    name = "manual"

    def __init__(self):
        self._queue: asyncio.Queue[str] = asyncio.Queue()

    def push(self, path: str) -> None:
        self._queue.put_nowait(path)

    async def events(self) -> AsyncIterator[DirUseEvent]:
        while True:
            path = await self._queue.get()
            yield DirUseEvent(path=path)
