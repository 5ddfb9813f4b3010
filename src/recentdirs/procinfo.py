"""Process information from /proc (Linux).

On systems without /proc the process list is simply empty.
"""

import logging
import os
from dataclasses import dataclass

from .errors import ProcAccessError

log = logging.getLogger("recentdirs.procinfo")

PROC_ROOT = "/proc"


@dataclass(frozen=True)
class Proc:
    id: int
    exe_path: str
    current_dir: str


def is_supported(proc_root: str = PROC_ROOT) -> bool:
    return os.path.isdir(proc_root)


def list_pids(proc_root: str = PROC_ROOT) -> list[int]:
    try:
        names = os.listdir(proc_root)
    except OSError:
        return []
    return [int(name) for name in names if name.isdigit()]


def get_proc_info(pid: int, proc_root: str = PROC_ROOT) -> Proc:
    try:
        exe_path = os.readlink(os.path.join(proc_root, str(pid), "exe"))
        cwd_path = os.readlink(os.path.join(proc_root, str(pid), "cwd"))
    except OSError as e:
        raise ProcAccessError(f"Unable to read process info for {pid}: {e}") from e
    return Proc(id=pid, exe_path=exe_path, current_dir=cwd_path)


def scan_procs(proc_root: str = PROC_ROOT) -> list[Proc]:
    """Return every process whose info is readable by the current user."""
    procs: list[Proc] = []
    for pid in list_pids(proc_root):
        try:
            procs.append(get_proc_info(pid, proc_root))
        except ProcAccessError:
            continue
    return procs
