"""Remote substrate client over HTTP, built on httpx."""
from __future__ import annotations

import logging
from typing import Any

import httpx

from mountgrep.environment.types import DirEntry, GrepMatch
from mountgrep.errors import (
    BackendError,
    NetworkError,
    RequestTimeoutError,
    error_from_status_code,
)

logger = logging.getLogger("mountgrep")


class HttpBackend:
    """Talks to a storage/search service exposing ``/read``, ``/list`` and ``/grep``.

    Each call is a JSON POST. Transport failures and non-2xx statuses are
    raised as :class:`~mountgrep.errors.BackendError` subclasses. No retries
    are attempted here.
    """

    def __init__(
        self,
        base_url: str,
        headers: dict[str, str] | None = None,
        connect_timeout: float = 5.0,
        request_timeout: float = 30.0,
    ) -> None:
        self._client = httpx.Client(
            base_url=base_url,
            headers=headers or {},
            timeout=httpx.Timeout(
                connect=connect_timeout,
                read=request_timeout,
                write=request_timeout,
                pool=connect_timeout,
            ),
        )

    def read(self, path: str) -> str:
        body = self._post("/read", {"path": path})
        return str(body.get("content", ""))

    def list(self, path: str) -> list[DirEntry]:
        body = self._post("/list", {"path": path})
        try:
            return [
                DirEntry(
                    name=e["name"],
                    is_dir=bool(e.get("is_dir", False)),
                    size=e.get("size"),
                )
                for e in body.get("entries", [])
            ]
        except (KeyError, TypeError, AttributeError) as exc:
            raise BackendError("malformed response from /list", cause=exc) from exc

    def grep(self, pattern: str, path: str = "/") -> list[GrepMatch]:
        body = self._post("/grep", {"pattern": pattern, "path": path})
        try:
            return [
                GrepMatch(path=m["path"], line_number=int(m["line_number"]), line=m["line"])
                for m in body.get("matches", [])
            ]
        except (KeyError, TypeError, ValueError, AttributeError) as exc:
            raise BackendError("malformed response from /grep", cause=exc) from exc

    def close(self) -> None:
        """Close the underlying httpx client."""
        self._client.close()

    def _post(self, endpoint: str, payload: dict[str, Any]) -> dict[str, Any]:
        logger.debug("backend request: %s %s", endpoint, payload)
        try:
            resp = self._client.post(endpoint, json=payload)
        except httpx.TimeoutException as exc:
            raise RequestTimeoutError(str(exc), cause=exc) from exc
        except httpx.TransportError as exc:
            raise NetworkError(str(exc), cause=exc) from exc

        if resp.status_code >= 300:
            try:
                body = resp.json()
            except ValueError:
                body = {}
            error = body.get("error") if isinstance(body, dict) else None
            if isinstance(error, dict):
                msg = error.get("message", resp.text)
            elif isinstance(error, str):
                msg = error
            else:
                msg = resp.text or f"HTTP {resp.status_code}"
            raise error_from_status_code(resp.status_code, msg)

        try:
            body = resp.json()
        except ValueError as exc:
            raise BackendError(f"malformed response from {endpoint}", cause=exc) from exc
        if not isinstance(body, dict):
            raise BackendError(f"malformed response from {endpoint}")
        return body
