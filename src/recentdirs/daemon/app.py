"""rd daemon: FastAPI application served on a Unix domain socket."""

import logging
import os
import sys
import time
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI

from ..client.daemon_client import DaemonClient
from ..config import AppConfig, get_config
from ..engine import RecentDirServer
from ..errors import DaemonUnavailableError
from ..sources import CurrentDirPoller, DirUseSource
from ..store import RecentDirStore
from . import deps
from .routers import dirs, system

log = logging.getLogger("recentdirs.daemon")


def build_engine(cfg: AppConfig) -> RecentDirServer:
    sources: list[DirUseSource] = []
    if cfg.poller.enabled:
        sources.append(CurrentDirPoller(interval_s=cfg.poller.interval_s))
    return RecentDirServer(
        store=RecentDirStore(cfg.store.history_path),
        sources=sources,
        save_interval_s=cfg.store.save_interval_s,
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    engine = build_engine(get_config())
    await engine.start()
    deps.set_engine(engine)
    app.state.started_at = time.time()
    try:
        yield
    finally:
        deps.set_engine(None)
        await engine.stop()


app = FastAPI(
    title="rd daemon",
    description="Recently used directories, ranked by fuzzy query",
    version="0.1.0",
    lifespan=lifespan,
)

app.include_router(dirs.router, prefix="/api/dirs", tags=["dirs"])
app.include_router(system.router, prefix="/api/system", tags=["system"])


def daemon_is_running(socket_path: str) -> bool:
    if not os.path.exists(socket_path):
        return False
    client = DaemonClient(socket_path, timeout=1.0)
    try:
        client.health()
        return True
    except DaemonUnavailableError:
        return False
    finally:
        client.close()


def run_daemon(cfg: AppConfig) -> int:
    """Serve until stopped. Returns the process exit code."""
    socket_path = cfg.daemon.socket_path
    if daemon_is_running(socket_path):
        print("Daemon is already running", file=sys.stderr)
        return 1

    try:
        os.remove(socket_path)
    except FileNotFoundError:
        pass
    except OSError as e:
        log.error("Unable to remove socket %s - %s", socket_path, e)
        return 1

    log.info("Starting rd daemon on %s", socket_path)
    log.info("  History: %s (save every %ss)", cfg.store.history_path, cfg.store.save_interval_s)
    uvicorn.run(app, uds=socket_path, log_level=cfg.daemon.log_level)
    return 0


def main():
    """Entry point for `rd-daemon`."""
    cfg = get_config()
    logging.basicConfig(
        level=cfg.daemon.log_level.upper(),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%H:%M:%S",
    )
    sys.exit(run_daemon(cfg))


if __name__ == "__main__":
    main()
