"""Sync wrapper for the rd daemon API, spoken over a Unix domain socket."""

import logging
from typing import Optional

import httpx

from ..errors import DaemonUnavailableError, PathNotFoundError
from ..models import QueryMatch

log = logging.getLogger("recentdirs.client")

# host part is ignored on a Unix socket but httpx needs a full URL
BASE_URL = "http://rd"


class DaemonClient:
    """Wraps the daemon endpoints with httpx."""

    def __init__(
        self,
        socket_path: str,
        timeout: float = 5.0,
        http: Optional[httpx.Client] = None,
    ):
        self.socket_path = socket_path
        if http is None:
            http = httpx.Client(
                base_url=BASE_URL,
                transport=httpx.HTTPTransport(uds=socket_path),
                timeout=timeout,
            )
        self.http = http

    def close(self) -> None:
        self.http.close()

    def __enter__(self) -> "DaemonClient":
        return self

    def __exit__(self, *exc) -> None:
        self.close()

    def _request(self, method: str, path: str, **kwargs) -> httpx.Response:
        try:
            resp = self.http.request(method, path, **kwargs)
        except httpx.TransportError as e:
            raise DaemonUnavailableError(f"Unable to reach the rd daemon at {self.socket_path}: {e}") from e
        if resp.status_code >= 500:
            raise DaemonUnavailableError(f"rd daemon error {resp.status_code}: {resp.text}")
        return resp

    # ── Operations ──────────────────────────────────────────

    def health(self) -> dict:
        return self._request("GET", "/api/system/health").json()

    def query(self, query: str) -> list[QueryMatch]:
        resp = self._request("POST", "/api/dirs/query", json={"query": query})
        resp.raise_for_status()
        return [QueryMatch.from_dict(m) for m in resp.json()["matches"]]

    def push(self, path: str) -> bool:
        resp = self._request("POST", "/api/dirs/push", json={"path": path})
        if resp.status_code == 400:
            raise PathNotFoundError(path)
        resp.raise_for_status()
        return resp.json().get("status") == "ok"

    def list_dirs(self) -> list[str]:
        resp = self._request("GET", "/api/dirs/list")
        resp.raise_for_status()
        return resp.json()["dirs"]

    def stop(self) -> None:
        """Ask the daemon to exit. The reply may never arrive."""
        try:
            self.http.post("/api/system/stop")
        except httpx.TransportError as e:
            log.debug("No reply to stop request: %s", e)
