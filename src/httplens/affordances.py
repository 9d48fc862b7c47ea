"""Line-anchored "send this request" affordances.

Both generators re-parse the stored text on every call; nothing is cached
between calls.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence

from httplens.documents import DocumentStore
from httplens.parser import RequestDescriptor, parse_requests
from httplens.schema import CommandPayload

SEND_REQUEST_COMMAND = "http.sendRequest"


@dataclass(frozen=True)
class Affordance:
    line: int
    title: str
    payload: CommandPayload


def send_title(request: RequestDescriptor) -> str:
    return f"Send {request.method.value} Request"


def select_at_or_before(
    requests: Sequence[RequestDescriptor], line: int
) -> RequestDescriptor | None:
    """Closest request anchored at or above ``line``."""
    best: RequestDescriptor | None = None
    for request in requests:
        if request.line <= line and (best is None or request.line > best.line):
            best = request
    return best


def select_exact(
    requests: Sequence[RequestDescriptor], line: int
) -> RequestDescriptor | None:
    for request in requests:
        if request.line == line:
            return request
    return None


def _affordance(uri: str, request: RequestDescriptor) -> Affordance:
    return Affordance(
        line=request.line,
        title=send_title(request),
        payload=CommandPayload(uri=uri, line=request.line),
    )


def lenses_for(store: DocumentStore, uri: str) -> list[Affordance]:
    text = store.get(uri)
    if text is None:
        return []
    return [_affordance(uri, request) for request in parse_requests(text)]


def action_for(store: DocumentStore, uri: str, line: int) -> Affordance | None:
    text = store.get(uri)
    if text is None:
        return None
    request = select_at_or_before(parse_requests(text), line)
    if request is None:
        return None
    return _affordance(uri, request)
