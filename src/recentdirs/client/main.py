#!/usr/bin/env python3
"""
rd: jump back to recently used directories.

Usage:
  rd query <pattern>|<id>     (alias: q)
  rd push <path>              (alias: p)
  rd list
  rd stop
  rd --daemon
"""

import argparse
import logging
import os
import subprocess
import sys
import time

import httpx

from ..config import AppConfig, get_config
from ..errors import DaemonUnavailableError, ValidationError
from ..models import MatchOffset
from .daemon_client import DaemonClient

log = logging.getLogger("recentdirs.client")

COMMANDS = "query|q <pattern>|<id>, push|p <path>, list, stop"


class Colors:
    """ANSI color codes for terminal output."""
    RESET = "\033[0m"
    RED = "\033[1;31m"

    @classmethod
    def disable(cls):
        cls.RESET = ""
        cls.RED = ""


def highlight_matches(text: str, offsets: list[MatchOffset]) -> str:
    """Wrap each matched span of text in red. Overlapping spans are merged."""
    output = []
    pos = 0
    for match in sorted(offsets, key=lambda o: o.start):
        start = max(match.start, pos)
        if match.end <= start:
            continue
        output.append(text[pos:start])
        output.append(f"{Colors.RED}{text[start:match.end]}{Colors.RESET}")
        pos = match.end
    output.append(text[pos:])
    return "".join(output)


# ── Commands ────────────────────────────────────────────────


def handle_query_command(client: DaemonClient, args: list[str], use_colors: bool, quiet: bool, max_matches: int) -> int:
    query = " ".join(args)
    matches = client.query(query)

    if len(matches) == 1:
        print(matches[0].path)
    elif matches:
        for match in matches[:max_matches]:
            path = highlight_matches(match.path, match.offsets) if use_colors else match.path
            print(f"  {match.id}: {path}")
        if len(matches) > max_matches:
            print(f"  ... {len(matches) - max_matches} other matches not shown")
    elif not quiet:
        red, reset = (Colors.RED, Colors.RESET) if use_colors else ("", "")
        print(f"No matches for {red}{query}{reset}.", file=sys.stderr)
    return 0


def handle_push_command(client: DaemonClient, args: list[str]) -> int:
    if not args:
        print("No dir to push specified")
        return 1
    client.push(os.path.abspath(args[0]))
    return 0


def handle_list_command(client: DaemonClient) -> int:
    for path in client.list_dirs():
        print(path)
    return 0


# ── Daemon connection ───────────────────────────────────────


def start_daemon(cfg: AppConfig) -> None:
    """Spawn a detached daemon process and wait until it answers."""
    try:
        subprocess.Popen(
            [sys.executable, "-m", "recentdirs", "--daemon"],
            stdin=subprocess.DEVNULL,
            stdout=subprocess.DEVNULL,
            stderr=subprocess.DEVNULL,
            start_new_session=True,
        )
    except OSError as e:
        raise DaemonUnavailableError(f"Unable to start the rd daemon: {e}") from e

    deadline = time.time() + cfg.client.startup_wait_s
    while time.time() < deadline:
        time.sleep(0.01)
        client = DaemonClient(cfg.daemon.socket_path, timeout=cfg.client.timeout_s)
        try:
            client.health()
            return
        except DaemonUnavailableError:
            continue
        finally:
            client.close()
    raise DaemonUnavailableError("Unable to connect to the rd daemon")


def connect(cfg: AppConfig) -> DaemonClient:
    client = DaemonClient(cfg.daemon.socket_path, timeout=cfg.client.timeout_s)
    try:
        client.health()
    except DaemonUnavailableError:
        log.debug("Daemon not running, starting it")
        start_daemon(cfg)
    return client


def run_command(client: DaemonClient, command: str, args: list[str], use_colors: bool, quiet: bool, cfg: AppConfig) -> int:
    if command in ("query", "q"):
        return handle_query_command(client, args, use_colors, quiet, cfg.client.max_matches)
    if command in ("push", "p"):
        return handle_push_command(client, args)
    if command == "list":
        return handle_list_command(client)
    if command == "stop":
        client.stop()
        return 0
    print(f"Unknown command '{command}', use 'rd --help' for a list of supported commands")
    return 1


def build_arg_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="rd",
        description="Track recently used directories and jump back to them.",
        epilog=f"Commands: {COMMANDS}",
    )
    parser.add_argument("command", nargs="?", help="query, push, list or stop")
    parser.add_argument("args", nargs=argparse.REMAINDER, help="Command arguments")
    parser.add_argument("--daemon", action="store_true", help="Start rd in daemon mode")
    parser.add_argument(
        "--color", action=argparse.BooleanOptionalAction, default=sys.stdout.isatty(),
        help="Colorize matches in output",
    )
    parser.add_argument("--quiet", "-q", action="store_true", help="Do not print anything if there are no matches")
    parser.add_argument("--verbose", "-v", action="store_true")
    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_arg_parser().parse_args(argv)
    cfg = get_config()

    if args.daemon:
        from ..daemon.app import main as daemon_main
        daemon_main()
        return 0

    if args.verbose:
        logging.basicConfig(level=logging.DEBUG)
    else:
        logging.basicConfig(level=logging.WARNING, format="%(message)s")

    if not args.color:
        Colors.disable()

    if not args.command:
        print("No command given. Use 'rd --help' for a list of supported commands")
        return 1

    try:
        client = connect(cfg)
    except DaemonUnavailableError as e:
        print(f"{e}\n\nUse 'rd --daemon' to start it.\nThis should be set up to run at login.", file=sys.stderr)
        return 1

    try:
        return run_command(client, args.command, args.args, args.color, args.quiet, cfg)
    except ValidationError as e:
        print(f"Failed to push to the rd daemon: {e}", file=sys.stderr)
        return 1
    except (DaemonUnavailableError, httpx.HTTPError) as e:
        print(f"Failed to query the rd daemon: {e}", file=sys.stderr)
        return 1
    finally:
        client.close()


if __name__ == "__main__":
    sys.exit(main())
