"""Exception hierarchy for httplens."""

from __future__ import annotations


class HttpLensError(RuntimeError):
    """Base class for every error raised by httplens."""


class UrlRejected(HttpLensError):
    """A request line carried a URL that may not be sent.

    ``reason`` is the human-readable rejection cause; ``url`` is the raw
    token as it appeared in the document.
    """

    def __init__(self, url: str, reason: str) -> None:
        super().__init__(reason)
        self.url = url
        self.reason = reason


class ExecutionError(HttpLensError):
    """The outbound HTTP call did not produce a response."""


class UnsupportedMethodError(ExecutionError):
    def __init__(self, method: str) -> None:
        super().__init__(f"Unsupported HTTP method: {method}")
        self.method = method


class RequestTimeoutError(ExecutionError):
    pass


class ConnectionFailedError(ExecutionError):
    pass


class TranscriptWriteError(HttpLensError):
    """The transcript file could not be opened or appended to."""

    def __init__(self, path: object, cause: BaseException) -> None:
        super().__init__(f"{path}: {cause}")
        self.path = path
        self.cause = cause
