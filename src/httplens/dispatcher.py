"""Resolution and execution of ``http.sendRequest`` invocations."""

from __future__ import annotations

import logging
from datetime import datetime
from pathlib import Path
from typing import Callable, Protocol

from httplens.affordances import select_exact
from httplens.documents import DocumentStore
from httplens.exceptions import ExecutionError, TranscriptWriteError
from httplens.executor import HttpResponse, execute_request
from httplens.parser import RequestDescriptor, parse_requests
from httplens.schema import CommandPayload
from httplens.transcript import (
    OutputDirStrategy,
    TranscriptSink,
    format_entry,
    project_root_strategy,
    transcript_dir_for_uri,
)

logger = logging.getLogger(__name__)

Executor = Callable[[RequestDescriptor], HttpResponse]
SinkFactory = Callable[[str], TranscriptSink]


class Notifier(Protocol):
    def show_info(self, message: str) -> None: ...

    def show_error(self, message: str) -> None: ...

    def log_info(self, message: str) -> None: ...

    def log_error(self, message: str) -> None: ...


class LoggingNotifier:
    """Notifier that only writes to the module logger."""

    def show_info(self, message: str) -> None:
        logger.info(message)

    def show_error(self, message: str) -> None:
        logger.error(message)

    def log_info(self, message: str) -> None:
        logger.info(message)

    def log_error(self, message: str) -> None:
        logger.error(message)


def transcript_sink_factory(
    strategy: OutputDirStrategy = project_root_strategy,
    fallback: Path | None = None,
) -> SinkFactory:
    def _factory(uri: str) -> TranscriptSink:
        return TranscriptSink(transcript_dir_for_uri(uri, strategy, fallback))

    return _factory


class CommandDispatcher:
    """Re-resolves a ``(uri, line)`` payload against the current text and runs it.

    The lookup is an exact anchor match. A payload whose line no longer
    carries a request is ignored without any message, since the document
    may have been edited after the affordance was produced.
    """

    def __init__(
        self,
        store: DocumentStore,
        *,
        executor: Executor = execute_request,
        sink_factory: SinkFactory | None = None,
        notifier: Notifier | None = None,
        clock: Callable[[], datetime] = datetime.now,
    ) -> None:
        self.store = store
        self.executor = executor
        self.sink_factory = sink_factory or transcript_sink_factory()
        self.notifier = notifier or LoggingNotifier()
        self.clock = clock

    def resolve(self, payload: CommandPayload) -> RequestDescriptor | None:
        text = self.store.get(payload.uri)
        if text is None:
            self.notifier.log_error(f"Document not found: {payload.uri}")
            return None
        request = select_exact(parse_requests(text), payload.line)
        if request is None:
            logger.debug("No request anchored at line %d of %s", payload.line, payload.uri)
        return request

    def invoke(self, payload: CommandPayload) -> str | None:
        """Execute the request anchored at ``payload.line``.

        Returns the response summary when the HTTP call succeeded, whether or
        not the transcript could be written; ``None`` otherwise.
        """
        request = self.resolve(payload)
        if request is None:
            return None

        self.notifier.log_info(f"Executing {request.method.value} request to {request.url}")
        try:
            response = self.executor(request)
        except ExecutionError as exc:
            self.notifier.show_error(f"Request failed: {exc}")
            return None

        summary = response.summary()
        entry = format_entry(request, response, self.clock())
        try:
            sink = self.sink_factory(payload.uri)
            sink.append(entry)
        except TranscriptWriteError as exc:
            self.notifier.show_error(f"Failed to write response: {exc.cause}")
            return summary
        self.notifier.show_info(f"✓ {summary} - Response appended to {sink.path.name}")
        return summary
