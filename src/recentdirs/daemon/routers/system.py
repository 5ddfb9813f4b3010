"""System health and lifecycle endpoints."""

import logging
import os
import time
from typing import Callable

from fastapi import APIRouter, BackgroundTasks, Depends, Request

from ...config import get_config
from ...engine import RecentDirServer
from ..deps import get_engine, get_terminator

log = logging.getLogger("recentdirs.daemon.system")
router = APIRouter()


@router.get("/health")
async def health_check(request: Request, engine: RecentDirServer = Depends(get_engine)):
    cfg = get_config()
    started_at = getattr(request.app.state, "started_at", None)
    return {
        "status": "ok",
        "pid": os.getpid(),
        "history_path": cfg.store.history_path,
        "uptime_s": round(time.time() - started_at, 1) if started_at else 0.0,
    }


@router.post("/stop")
async def stop_daemon(
    background_tasks: BackgroundTasks,
    terminate: Callable[[], None] = Depends(get_terminator),
):
    log.info("Stop requested")
    # runs after the response is sent, so the caller usually gets a reply
    background_tasks.add_task(terminate)
    return {"status": "stopping"}
