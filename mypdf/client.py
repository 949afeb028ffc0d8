"""HTTP client for the apply and merge endpoints."""

from __future__ import annotations

import logging

import httpx

from .models import ActionList

logger = logging.getLogger(__name__)


class RequestFailed(Exception):
    """A request did not produce a PDF. ``message`` is what the user is shown."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code


def _failure(resp: httpx.Response) -> RequestFailed:
    # Prefer the server's own message, fall back to the HTTP reason phrase
    message = None
    try:
        body = resp.json()
    except ValueError:
        body = None
    if isinstance(body, dict):
        message = body.get("error") or body.get("message")
    return RequestFailed(message or resp.reason_phrase, resp.status_code)


class PdfClient:
    def __init__(self, base_url: str = "http://localhost:3000", timeout: float = 120.0,
                 transport: httpx.BaseTransport | None = None) -> None:
        self._http = httpx.Client(base_url=base_url, timeout=timeout, transport=transport)

    def close(self) -> None:
        self._http.close()

    def __enter__(self) -> "PdfClient":
        return self

    def __exit__(self, *exc) -> None:
        self.close()

    def _post(self, path: str, **kwargs) -> bytes:
        try:
            resp = self._http.post(path, **kwargs)
        except httpx.HTTPError as e:
            logger.warning("Request to %s failed: %s", path, e)
            raise RequestFailed(str(e) or type(e).__name__) from e
        if not resp.is_success:
            raise _failure(resp)
        return resp.content

    def apply(self, filename: str, content: bytes, actions: ActionList) -> bytes:
        """Upload a PDF with its action list; returns the edited PDF."""
        return self._post(
            "/api/pdf/apply",
            files={"file": (filename, content, "application/pdf")},
            data={"actions": actions.to_json()},
        )

    def merge(self, sources: list[tuple[str, bytes]]) -> bytes:
        """Merge ``(filename, content)`` pairs in the given order."""
        files = [("files", (name, content, "application/pdf")) for name, content in sources]
        return self._post("/api/pdf/merge", files=files)

    def health(self) -> bool:
        try:
            return self._http.get("/health").is_success
        except httpx.HTTPError:
            return False
