"""Shared plumbing for AI backends: HTTP transport, errors and response parsing."""

from __future__ import annotations

import json
import os
import re
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Callable, Dict, Optional, Sequence
from urllib.error import HTTPError, URLError
from urllib.request import Request, urlopen

from ..logging import get_logger

_CODE_BLOCK = re.compile(r"```[\w+#.-]*[ \t]*\r?\n(.*?)\r?\n[ \t]*```", re.DOTALL)


class BackendError(RuntimeError):
    """Base error for a backend call that produced no usable test."""


class BackendAuthMissing(BackendError):
    """Raised before sending when credentials are not configured."""


class BackendHTTPError(BackendError):
    """Raised when the service answers with a non-200 status."""

    def __init__(self, backend: str, status: int, body: str) -> None:
        super().__init__(f"{backend} API returned status {status}: {body.strip()}")
        self.status = status
        self.body = body


class BackendResponseError(BackendError):
    """Raised when a 200 response does not have the expected shape."""


@dataclass
class HttpRequest:
    """An outbound POST request."""

    url: str
    body: bytes
    headers: Dict[str, str] = field(default_factory=dict)
    timeout: float = 60.0


@dataclass
class HttpResponse:
    """Status and decoded body of a completed request."""

    status: int
    body: str


Transport = Callable[[HttpRequest], HttpResponse]


def urllib_transport(request: HttpRequest) -> HttpResponse:
    """Send ``request`` with :func:`urllib.request.urlopen`.

    Error statuses are returned as responses; only connection-level failures
    raise.
    """
    http_request = Request(request.url, data=request.body, headers=request.headers, method="POST")
    try:
        with urlopen(http_request, timeout=request.timeout) as response:  # type: ignore[arg-type]
            raw = response.read()
            status = response.status
    except HTTPError as exc:
        detail = exc.read().decode("utf-8", errors="replace") if exc.fp is not None else ""
        return HttpResponse(status=exc.code, body=detail or str(exc.reason))
    except URLError as exc:
        raise BackendError(f"HTTP request to {request.url} failed: {exc.reason}") from exc
    except OSError as exc:
        raise BackendError(f"HTTP request to {request.url} failed: {exc}") from exc
    return HttpResponse(status=status, body=raw.decode("utf-8", errors="replace"))


def extract_code(text: str) -> str:
    """Return the trimmed body of the first fenced code block, or ``text`` unchanged."""
    match = _CODE_BLOCK.search(text)
    if match:
        return match.group(1).strip()
    return text


def first_env_value(keys: Sequence[str]) -> Optional[str]:
    for key in keys:
        value = os.getenv(key)
        if value:
            return value
    return None


def decode_json(body: str, backend: str) -> Dict[str, object]:
    try:
        payload = json.loads(body)
    except json.JSONDecodeError as exc:
        raise BackendResponseError(f"{backend} API returned invalid JSON") from exc
    if not isinstance(payload, dict):
        raise BackendResponseError(f"{backend} API returned an unexpected payload")
    return payload


class AIBackend(ABC):
    """Turns a prompt into generated test source through an external service.

    ``generate`` never raises for service problems: it logs them and returns
    None, which tells the caller to skip the gap.
    """

    name = "backend"

    def __init__(self, *, transport: Transport | None = None, request_timeout: float = 60.0) -> None:
        self._transport = transport or urllib_transport
        self.request_timeout = request_timeout
        self.logger = get_logger(f"backends.{self.name}")

    def generate(self, prompt: str) -> Optional[str]:
        try:
            content = self._invoke(prompt)
        except BackendHTTPError as exc:
            self.logger.error("Error from %s API: %s", self.name, exc.status)
            self.logger.error("%s", exc.body.strip())
            return None
        except BackendError as exc:
            self.logger.error("%s", exc)
            return None

        code = extract_code(content).strip()
        if not code:
            self.logger.warning("%s API returned an empty response", self.name)
            return None
        return code

    @abstractmethod
    def _invoke(self, prompt: str) -> str:
        """Perform the call and return the model's text, raising :class:`BackendError` on failure."""

    def _post(self, url: str, body: bytes, headers: Dict[str, str]) -> HttpResponse:
        self.logger.info("Sending request to %s API...", self.name)
        response = self._transport(
            HttpRequest(url=url, body=body, headers=headers, timeout=self.request_timeout)
        )
        if response.status != 200:
            raise BackendHTTPError(self.name, response.status, response.body)
        self.logger.info("Received response from %s API", self.name)
        return response


__all__ = [
    "AIBackend",
    "BackendAuthMissing",
    "BackendError",
    "BackendHTTPError",
    "BackendResponseError",
    "HttpRequest",
    "HttpResponse",
    "Transport",
    "decode_json",
    "extract_code",
    "first_env_value",
    "urllib_transport",
]
