"""FastAPI dependency injection: the engine singleton and the stop hook."""

import os
import signal
from typing import Callable

from fastapi import HTTPException

from ..engine import RecentDirServer

_engine: RecentDirServer | None = None


def set_engine(engine: RecentDirServer | None) -> None:
    global _engine
    _engine = engine


def get_engine() -> RecentDirServer:
    if _engine is None or not _engine.running:
        raise HTTPException(status_code=503, detail="Engine is not running")
    return _engine


def _terminate_process() -> None:
    # uvicorn turns SIGTERM into a graceful shutdown, which stops the engine
    os.kill(os.getpid(), signal.SIGTERM)


def get_terminator() -> Callable[[], None]:
    return _terminate_process
