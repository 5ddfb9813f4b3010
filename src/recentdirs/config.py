"""recentdirs configuration: dataclass-based with env var overrides."""

import logging
import os
from dataclasses import dataclass, field

log = logging.getLogger("recentdirs.config")


def _to_bool(s: str) -> bool:
    return s.lower() in ("true", "1", "yes")


def _home_path(name: str) -> str:
    return os.path.join(os.path.expanduser("~"), name)


@dataclass(slots=True)
class StoreConfig:
    history_path: str = field(default_factory=lambda: os.getenv("RD_HISTORY_PATH", _home_path(".rd-history")))
    save_interval_s: float = field(default_factory=lambda: float(os.getenv("RD_SAVE_INTERVAL_S", "5")))


@dataclass(slots=True)
class PollerConfig:
    enabled: bool = field(default_factory=lambda: _to_bool(os.getenv("RD_POLL_ENABLED", "true")))
    interval_s: float = field(default_factory=lambda: float(os.getenv("RD_POLL_INTERVAL_S", "5")))


@dataclass(slots=True)
class DaemonConfig:
    socket_path: str = field(default_factory=lambda: os.getenv("RD_SOCKET_PATH", _home_path(".rd.sock")))
    log_level: str = field(default_factory=lambda: os.getenv("RD_LOG_LEVEL", "info"))


@dataclass(slots=True)
class ClientConfig:
    max_matches: int = field(default_factory=lambda: int(os.getenv("RD_MAX_MATCHES", "5")))
    timeout_s: float = field(default_factory=lambda: float(os.getenv("RD_CLIENT_TIMEOUT_S", "5")))
    startup_wait_s: float = field(default_factory=lambda: float(os.getenv("RD_STARTUP_WAIT_S", "1")))


@dataclass(slots=True)
class AppConfig:
    store: StoreConfig = field(default_factory=StoreConfig)
    poller: PollerConfig = field(default_factory=PollerConfig)
    daemon: DaemonConfig = field(default_factory=DaemonConfig)
    client: ClientConfig = field(default_factory=ClientConfig)


# Singleton instance
_config: AppConfig | None = None


def get_config() -> AppConfig:
    """Return the global AppConfig singleton, creating it on first call."""
    global _config
    if _config is None:
        _config = AppConfig()
    return _config


def reset_config() -> AppConfig:
    """Force re-creation of the config singleton from env vars.

    Tests call this after changing RD_* variables so the daemon picks up
    the new paths.
    """
    global _config
    _config = AppConfig()
    log.debug("Config singleton re-created from env vars")
    return _config
