"""Single-shot HTTP execution for parsed requests."""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field

import httpx

from httplens.exceptions import (
    ConnectionFailedError,
    ExecutionError,
    RequestTimeoutError,
    UnsupportedMethodError,
)
from httplens.parser import HttpMethod, RequestDescriptor

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT_SECONDS = 30.0


@dataclass(frozen=True)
class HttpResponse:
    status: int
    reason: str
    headers: list[tuple[str, str]] = field(default_factory=list)
    body: str = ""
    elapsed_ms: int = 0

    def header(self, name: str) -> str | None:
        wanted = name.lower()
        for key, value in self.headers:
            if key.lower() == wanted:
                return value
        return None

    def summary(self) -> str:
        return f"{self.status} {self.reason} ({self.elapsed_ms}ms)"


def _method_of(request: RequestDescriptor) -> HttpMethod:
    if isinstance(request.method, HttpMethod):
        return request.method
    method = HttpMethod.lookup(str(request.method))
    if method is None:
        raise UnsupportedMethodError(str(request.method))
    return method


def _read_body(response: httpx.Response, deadline: float, timeout: float) -> str:
    chunks: list[bytes] = []
    for chunk in response.iter_bytes():
        chunks.append(chunk)
        if time.perf_counter() > deadline:
            raise RequestTimeoutError(f"Request timed out after {timeout:g}s")
    return b"".join(chunks).decode(response.encoding or "utf-8", errors="replace")


def execute_request(
    request: RequestDescriptor,
    *,
    timeout: float = DEFAULT_TIMEOUT_SECONDS,
    transport: httpx.BaseTransport | None = None,
) -> HttpResponse:
    """Perform exactly one HTTP call for ``request``.

    ``timeout`` bounds the whole call, body included, not just each network
    phase. HEAD requests never carry a body. There are no retries: any
    transport failure, including the timeout, raises an :class:`ExecutionError`.
    """
    method = _method_of(request)
    content = None
    if request.body is not None and method is not HttpMethod.HEAD:
        content = request.body.encode("utf-8")

    logger.info("Executing %s request to %s", method.value, request.url)
    started = time.perf_counter()
    deadline = started + timeout
    try:
        with httpx.Client(timeout=timeout, transport=transport) as client:
            with client.stream(
                method.value,
                request.url,
                headers=request.headers,
                content=content,
            ) as response:
                body = _read_body(response, deadline, timeout)
    except httpx.TimeoutException as exc:
        raise RequestTimeoutError(
            f"Request timed out after {timeout:g}s: {exc}"
        ) from exc
    except httpx.TransportError as exc:
        raise ConnectionFailedError(f"Connection failed: {exc}") from exc
    except httpx.HTTPError as exc:
        raise ExecutionError(str(exc)) from exc
    except (httpx.InvalidURL, UnicodeEncodeError) as exc:
        raise ExecutionError(f"Invalid request: {exc}") from exc
    elapsed_ms = int((time.perf_counter() - started) * 1000)

    return HttpResponse(
        status=response.status_code,
        reason=response.reason_phrase or "Unknown",
        headers=list(response.headers.multi_items()),
        body=body,
        elapsed_ms=elapsed_ms,
    )
