"""recentdirs exception hierarchy."""


class RecentDirsError(Exception):
    """Base exception for all recentdirs errors."""


class ValidationError(RecentDirsError):
    """A request was rejected before touching any state."""


class PathNotFoundError(ValidationError):
    """A pushed directory does not exist on disk."""

    def __init__(self, path: str):
        super().__init__(f"Dir {path} does not exist")
        self.path = path


class DaemonUnavailableError(RecentDirsError):
    """The rd daemon could not be reached."""


class StoreError(RecentDirsError):
    """Reading or writing the history snapshot failed."""


class EngineStoppedError(RecentDirsError):
    """The engine stopped before answering a request."""


class ProcAccessError(RecentDirsError):
    """Process info could not be read (exited, or permission denied)."""
