from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable

from lsprotocol import types as lsp
from pydantic import ValidationError
from pygls.lsp.server import LanguageServer

from httplens import __version__
from httplens.affordances import SEND_REQUEST_COMMAND, Affordance, action_for, lenses_for
from httplens.config import (
    log_file,
    log_level,
    logging_defaults,
    transcript_defaults,
    transcript_fallback_dir,
)
from httplens.dispatcher import CommandDispatcher, Executor, transcript_sink_factory
from httplens.documents import DocumentStore
from httplens.executor import execute_request
from httplens.logging_setup import configure_logging
from httplens.schema import CommandPayload
from httplens.transcript import OutputDirStrategy, project_root_strategy

logger = logging.getLogger(__name__)

PLAY_GLYPH = "▶"

server = LanguageServer(
    "httplens",
    __version__,
    text_document_sync_kind=lsp.TextDocumentSyncKind.Full,
)


class LspNotifier:
    """Routes dispatcher messages to ``window/showMessage`` and ``window/logMessage``."""

    def __init__(self, ls: LanguageServer) -> None:
        self.ls = ls

    def _show(self, kind: lsp.MessageType, message: str) -> None:
        self.ls.window_show_message(lsp.ShowMessageParams(type=kind, message=message))

    def _log(self, kind: lsp.MessageType, message: str) -> None:
        self.ls.window_log_message(lsp.LogMessageParams(type=kind, message=message))

    def show_info(self, message: str) -> None:
        logger.info(message)
        self._show(lsp.MessageType.Info, message)

    def show_error(self, message: str) -> None:
        logger.error(message)
        self._show(lsp.MessageType.Error, message)

    def log_info(self, message: str) -> None:
        logger.info(message)
        self._log(lsp.MessageType.Info, message)

    def log_error(self, message: str) -> None:
        logger.error(message)
        self._log(lsp.MessageType.Error, message)


@dataclass
class HttpLensSession:
    """Per-process state shared by the protocol handlers."""

    store: DocumentStore = field(default_factory=DocumentStore)
    executor: Executor = execute_request
    output_strategy: OutputDirStrategy = project_root_strategy
    fallback_dir: Path | None = None

    def dispatcher(self, ls: LanguageServer) -> CommandDispatcher:
        return CommandDispatcher(
            self.store,
            executor=self.executor,
            sink_factory=transcript_sink_factory(self.output_strategy, self.fallback_dir),
            notifier=LspNotifier(ls),
        )

    def configure(self, root: Path | None) -> None:
        logging_section = logging_defaults(root=root)
        log_path = configure_logging(
            log_level(logging_section), log_file(logging_section, root)
        )
        self.fallback_dir = transcript_fallback_dir(transcript_defaults(root=root), root)
        logger.info("httplens %s configured (root=%s, log=%s)", __version__, root, log_path)


session = HttpLensSession()


def _workspace_root(ls: LanguageServer) -> Path | None:
    root_path = getattr(ls.workspace, "root_path", None)
    return Path(root_path) if root_path else None


def _line_range(line: int) -> lsp.Range:
    position = lsp.Position(line=line, character=0)
    return lsp.Range(start=position, end=position)


def _command(affordance: Affordance) -> lsp.Command:
    return lsp.Command(
        title=affordance.title,
        command=SEND_REQUEST_COMMAND,
        arguments=affordance.payload.as_arguments(),
    )


@server.feature(lsp.INITIALIZED)
def initialized(ls: LanguageServer, params: lsp.InitializedParams) -> None:
    session.configure(_workspace_root(ls))
    ls.window_log_message(
        lsp.LogMessageParams(
            type=lsp.MessageType.Info, message="HTTP LSP server initialized"
        )
    )


@server.feature(lsp.TEXT_DOCUMENT_DID_OPEN)
def did_open(ls: LanguageServer, params: lsp.DidOpenTextDocumentParams) -> None:
    uri = params.text_document.uri
    session.store.open(uri, params.text_document.text)
    ls.window_log_message(
        lsp.LogMessageParams(type=lsp.MessageType.Info, message=f"Opened document: {uri}")
    )


@server.feature(lsp.TEXT_DOCUMENT_DID_CHANGE)
def did_change(ls: LanguageServer, params: lsp.DidChangeTextDocumentParams) -> None:
    session.store.update(
        params.text_document.uri,
        [change.text for change in params.content_changes],
    )


@server.feature(lsp.TEXT_DOCUMENT_DID_CLOSE)
def did_close(ls: LanguageServer, params: lsp.DidCloseTextDocumentParams) -> None:
    session.store.close(params.text_document.uri)


@server.feature(
    lsp.TEXT_DOCUMENT_CODE_LENS, lsp.CodeLensOptions(resolve_provider=False)
)
def code_lens(ls: LanguageServer, params: lsp.CodeLensParams) -> list[lsp.CodeLens]:
    uri = params.text_document.uri
    lenses = [
        lsp.CodeLens(
            range=_line_range(affordance.line),
            command=lsp.Command(
                title=f"{PLAY_GLYPH} {affordance.title}",
                command=SEND_REQUEST_COMMAND,
                arguments=affordance.payload.as_arguments(),
            ),
        )
        for affordance in lenses_for(session.store, uri)
    ]
    logger.debug("Returning %d code lenses for %s", len(lenses), uri)
    return lenses


@server.feature(lsp.TEXT_DOCUMENT_CODE_ACTION)
def code_action(
    ls: LanguageServer, params: lsp.CodeActionParams
) -> list[lsp.CodeAction] | None:
    affordance = action_for(
        session.store, params.text_document.uri, params.range.start.line
    )
    if affordance is None:
        return None
    return [
        lsp.CodeAction(
            title=f"{PLAY_GLYPH} {affordance.title}",
            kind=lsp.CodeActionKind.Empty,
            command=_command(affordance),
            is_preferred=True,
        )
    ]


@server.thread()
@server.command(SEND_REQUEST_COMMAND)
def send_request(ls: LanguageServer, uri=None, line=None) -> str | None:
    try:
        payload = CommandPayload.from_arguments([uri, line])
    except ValidationError as exc:
        logger.error("Invalid %s arguments: %s", SEND_REQUEST_COMMAND, exc)
        ls.window_log_message(
            lsp.LogMessageParams(
                type=lsp.MessageType.Error,
                message=f"Invalid {SEND_REQUEST_COMMAND} arguments: {uri!r}, {line!r}",
            )
        )
        return None
    return session.dispatcher(ls).invoke(payload)


def start(start_fn: Callable[[], None] | None = None) -> None:
    """Serve the protocol over stdin/stdout."""
    (start_fn or server.start_io)()


if __name__ == "__main__":  # pragma: no cover
    start()  # pragma: no cover
