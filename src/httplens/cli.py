from __future__ import annotations

from pathlib import Path
from typing import Optional

import typer

from httplens.config import (
    log_file,
    log_level,
    logging_defaults,
    transcript_defaults,
    transcript_fallback_dir,
)
from httplens.dispatcher import CommandDispatcher, transcript_sink_factory
from httplens.documents import DocumentStore
from httplens.executor import execute_request
from httplens.logging_setup import configure_logging
from httplens.parser import parse_report
from httplens.schema import CommandPayload, ParseReportDTO

app = typer.Typer(add_completion=False, no_args_is_help=False)


class ConsoleNotifier:
    def show_info(self, message: str) -> None:
        typer.echo(message)

    def show_error(self, message: str) -> None:
        typer.echo(message, err=True)

    def log_info(self, message: str) -> None:
        typer.echo(message, err=True)

    def log_error(self, message: str) -> None:
        typer.echo(message, err=True)


def _read_document(path: Path) -> str:
    try:
        return path.read_text(encoding="utf-8")
    except OSError as exc:
        raise typer.BadParameter(f"Cannot read {path}: {exc}") from exc


@app.callback(invoke_without_command=True)
def main(ctx: typer.Context) -> None:
    """Run requests from .http files; starts the language server by default."""
    if ctx.invoked_subcommand is None:
        serve()


@app.command()
def serve() -> None:
    """Start the language server on stdin/stdout."""
    from httplens.server import start

    start()


@app.command("requests")
def list_requests(
    path: Path = typer.Argument(..., exists=True, dir_okay=False),
    as_json: bool = typer.Option(False, "--json", help="Emit the parse report as JSON."),
) -> None:
    """List the requests in PATH with their anchor lines."""
    report = parse_report(_read_document(path))
    if as_json:
        typer.echo(ParseReportDTO.from_report(report).model_dump_json(indent=2))
        return
    for request in report.requests:
        typer.echo(f"{request.line}: {request.request_line}")
    for rejection in report.rejections:
        typer.echo(f"{rejection.line}: skipped ({rejection.reason})", err=True)


@app.command()
def send(
    path: Path = typer.Argument(..., exists=True, dir_okay=False),
    line: int = typer.Argument(..., min=0, help="Zero-based line of the request."),
    root: Optional[Path] = typer.Option(None, "--root", help="Directory holding httplens.toml."),
) -> None:
    """Execute the request anchored at LINE and append it to the transcript."""
    path = path.resolve()
    config_root = root or Path.cwd()
    logging_section = logging_defaults(root=config_root)
    configure_logging(log_level(logging_section), log_file(logging_section, config_root))

    store = DocumentStore()
    uri = path.as_uri()
    store.open(uri, _read_document(path))
    dispatcher = CommandDispatcher(
        store,
        executor=execute_request,
        sink_factory=transcript_sink_factory(
            fallback=transcript_fallback_dir(transcript_defaults(root=config_root), config_root)
        ),
        notifier=ConsoleNotifier(),
    )
    payload = CommandPayload(uri=uri, line=line)
    if dispatcher.resolve(payload) is None:
        typer.echo(f"No request starts at line {line} of {path}", err=True)
        raise typer.Exit(code=1)
    if dispatcher.invoke(payload) is None:
        raise typer.Exit(code=1)


if __name__ == "__main__":  # pragma: no cover
    app()  # pragma: no cover
