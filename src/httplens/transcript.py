"""Append-only transcript of executed requests and their responses."""

from __future__ import annotations

import json
import logging
import tempfile
from datetime import datetime
from pathlib import Path
from typing import Callable
from urllib.parse import unquote, urlparse

from httplens.exceptions import TranscriptWriteError
from httplens.executor import HttpResponse
from httplens.parser import RequestDescriptor

logger = logging.getLogger(__name__)

TRANSCRIPT_FILENAME = "http-responses.http"
SEPARATOR = "=" * 80
TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"
PROJECT_BOUNDARY_NAMES = frozenset({"test", "src"})

OutputDirStrategy = Callable[[Path], Path]


def _is_json_content_type(content_type: str | None) -> bool:
    if not content_type:
        return False
    media_type = content_type.split(";", 1)[0].strip().lower()
    return media_type == "application/json" or media_type.endswith("+json")


def format_body(response: HttpResponse) -> str:
    if _is_json_content_type(response.header("content-type")):
        try:
            parsed = json.loads(response.body)
        except ValueError:
            return response.body
        return json.dumps(parsed, indent=2, ensure_ascii=False)
    return response.body


def format_exchange(request: RequestDescriptor, response: HttpResponse) -> str:
    parts = ["### REQUEST ###\n", f"{request.request_line}\n"]
    if request.headers:
        parts.append("\n")
        parts.extend(f"{name}: {value}\n" for name, value in request.headers.items())
    if request.body is not None:
        parts.append(f"\n{request.body}\n")

    parts.append("\n### RESPONSE ###\n")
    parts.append(f"HTTP/1.1 {response.summary()}\n")
    parts.append("\n")
    parts.extend(f"{name}: {value}\n" for name, value in response.headers)
    parts.append(f"\n{format_body(response)}\n")
    return "".join(parts)


def format_entry(
    request: RequestDescriptor,
    response: HttpResponse,
    timestamp: datetime | None = None,
) -> str:
    stamp = (timestamp or datetime.now()).strftime(TIMESTAMP_FORMAT)
    header = f"{SEPARATOR}\n[{stamp}]\n{SEPARATOR}\n"
    return f"{header}{format_exchange(request, response)}\n\n"


def uri_to_path(uri: str) -> Path | None:
    parsed = urlparse(uri)
    if parsed.scheme != "file" or not parsed.path:
        return None
    return Path(unquote(parsed.path))


def project_root_strategy(path: Path) -> Path:
    """Directory holding the nearest ``test``/``src`` ancestor, else the parent."""
    for parent in path.parents:
        if parent.name in PROJECT_BOUNDARY_NAMES:
            return parent.parent
    return path.parent


def transcript_dir_for_uri(
    uri: str,
    strategy: OutputDirStrategy = project_root_strategy,
    fallback: Path | None = None,
) -> Path:
    path = uri_to_path(uri)
    if path is None:
        return fallback or Path(tempfile.gettempdir())
    return strategy(path)


class TranscriptSink:
    def __init__(self, directory: Path, filename: str = TRANSCRIPT_FILENAME) -> None:
        self.path = directory / filename

    def append(self, entry: str) -> Path:
        logger.info("Writing response to output file: %s", self.path)
        try:
            with self.path.open("a", encoding="utf-8") as handle:
                handle.write(entry)
        except OSError as exc:
            logger.error("Failed to write to output file %s: %s", self.path, exc)
            raise TranscriptWriteError(self.path, exc) from exc
        return self.path
