"""Thin client for the Marathon REST v2 API."""

from __future__ import annotations

import logging
import threading
from typing import Any, TypeVar
from urllib.parse import urlsplit, urlunsplit

import requests
import urllib3
from pydantic import BaseModel, ValidationError
from requests.adapters import HTTPAdapter

from marathon_exporter.errors import (
    MarathonAPIError,
    MarathonConnectionError,
    MarathonDecodeError,
)
from marathon_exporter.marathon.models import App, Deployment, MarathonInfo, QueueItem, Task

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 10.0
# Sized for one connection per state category across a few overlapping scrapes
DEFAULT_POOL_SIZE = 20

ModelT = TypeVar("ModelT", bound=BaseModel)


def split_credentials(uri: str) -> tuple[str, tuple[str, str] | None]:
    """Return (uri without userinfo, basic auth pair or None)."""
    parts = urlsplit(uri)
    if parts.username is None:
        return uri, None
    host = parts.hostname or ""
    if ":" in host:
        host = f"[{host}]"
    netloc = f"{host}:{parts.port}" if parts.port else host
    clean = urlunsplit((parts.scheme, netloc, parts.path, parts.query, parts.fragment))
    if parts.password is None:
        logger.debug("Marathon URI has a username but no password; basic auth disabled")
        return clean, None
    return clean, (parts.username, parts.password)


class MarathonClient:
    """Issues read-only queries against Marathon.

    Safe to share between threads: every thread gets its own ``requests.Session``
    while all of them reuse one pooled ``HTTPAdapter``, so connections are
    shared but no session state is.
    """

    def __init__(
        self,
        base_url: str,
        auth: tuple[str, str] | None = None,
        timeout: float = DEFAULT_TIMEOUT,
        verify: bool = False,
        pool_size: int = DEFAULT_POOL_SIZE,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._auth = auth
        self._verify = verify
        self._adapter = HTTPAdapter(pool_connections=1, pool_maxsize=pool_size)
        self._local = threading.local()
        if not verify:
            # Self-signed Marathon certificates are accepted on purpose
            urllib3.disable_warnings(urllib3.exceptions.InsecureRequestWarning)

    @classmethod
    def from_uri(cls, uri: str, timeout: float = DEFAULT_TIMEOUT) -> MarathonClient:
        """Build a client from a URI that may embed ``user:password@``."""
        base_url, auth = split_credentials(uri)
        return cls(base_url, auth=auth, timeout=timeout)

    def _session(self) -> requests.Session:
        session = getattr(self._local, "session", None)
        if session is None:
            session = requests.Session()
            session.mount("http://", self._adapter)
            session.mount("https://", self._adapter)
            session.auth = self._auth
            session.verify = self._verify
            session.headers["Accept"] = "application/json"
            self._local.session = session
        return session

    def _get(self, path: str, params: dict[str, str] | None = None) -> Any:
        """GET a path and return the decoded JSON body."""
        url = f"{self.base_url}{path}"
        try:
            response = self._session().get(url, params=params, timeout=(self.timeout, self.timeout))
        except requests.Timeout as e:
            raise MarathonConnectionError(f"timed out after {self.timeout}s: {e}", path) from e
        except requests.RequestException as e:
            raise MarathonConnectionError(f"request failed: {e}", path) from e

        if not response.ok:
            raise MarathonAPIError(
                f"HTTP {response.status_code} {response.reason}",
                path,
                status_code=response.status_code,
            )
        try:
            return response.json()
        except ValueError as e:
            raise MarathonDecodeError(f"invalid JSON body: {e}", path) from e

    def _list(self, path: str, key: str | None, model: type[ModelT], params: dict[str, str] | None = None) -> list[ModelT]:
        """GET a collection endpoint and validate each element into ``model``."""
        payload = self._get(path, params)
        if key is None:
            items = payload
        else:
            items = payload.get(key) if isinstance(payload, dict) else None
        if not isinstance(items, list):
            where = f" under {key!r}" if key else ""
            raise MarathonDecodeError(f"expected a list{where}", path)
        try:
            return [model.model_validate(item) for item in items]
        except ValidationError as e:
            raise MarathonDecodeError(f"unexpected {model.__name__} payload: {e}", path) from e

    def info(self) -> MarathonInfo:
        """Return cluster identity (name, version, leader)."""
        payload = self._get("/v2/info")
        try:
            return MarathonInfo.model_validate(payload)
        except ValidationError as e:
            raise MarathonDecodeError(f"unexpected info payload: {e}", "/v2/info") from e

    def list_applications(self) -> list[App]:
        return self._list("/v2/apps", "apps", App, params={"embed": "apps.counts"})

    def list_tasks(self) -> list[Task]:
        return self._list("/v2/tasks", "tasks", Task)

    def list_deployments(self) -> list[Deployment]:
        return self._list("/v2/deployments", None, Deployment)

    def list_queue(self) -> list[QueueItem]:
        return self._list("/v2/queue", "queue", QueueItem)

    def close(self) -> None:
        """Release pooled connections."""
        self._adapter.close()
