from __future__ import annotations

from datetime import datetime
from pathlib import Path

import pytest

from httplens.exceptions import TranscriptWriteError
from httplens.executor import HttpResponse
from httplens.parser import HttpMethod, RequestDescriptor
from httplens.transcript import (
    SEPARATOR,
    TRANSCRIPT_FILENAME,
    TranscriptSink,
    format_body,
    format_entry,
    format_exchange,
    project_root_strategy,
    transcript_dir_for_uri,
)


def _request(**kwargs) -> RequestDescriptor:
    return RequestDescriptor(method=HttpMethod.GET, url="http://example.com/api", **kwargs)


def _response(
    body: str = "",
    content_type: str = "application/json",
    status: int = 200,
    reason: str = "OK",
    elapsed_ms: int = 100,
) -> HttpResponse:
    return HttpResponse(
        status=status,
        reason=reason,
        headers=[("content-type", content_type)],
        body=body,
        elapsed_ms=elapsed_ms,
    )


def test_separator_and_filename() -> None:
    assert SEPARATOR == "=" * 80
    assert TRANSCRIPT_FILENAME == "http-responses.http"


def test_json_body_is_pretty_printed() -> None:
    body = format_body(_response('{"name":"test","value":123}'))
    assert body == '{\n  "name": "test",\n  "value": 123\n}'


@pytest.mark.parametrize(
    "content_type", ["application/json; charset=utf-8", "application/problem+json"]
)
def test_json_media_type_variants(content_type: str) -> None:
    assert format_body(_response("[1,2]", content_type)) == "[\n  1,\n  2\n]"


def test_plain_body_is_verbatim() -> None:
    assert format_body(_response("hello", "text/plain")) == "hello"


def test_invalid_json_body_is_verbatim() -> None:
    assert format_body(_response("{not json")) == "{not json"


def test_exchange_layout() -> None:
    request = _request(headers={"Accept": "application/json"}, body='{"q": 1}')
    text = format_exchange(request, _response('{"a":1}', elapsed_ms=42))
    assert text == (
        "### REQUEST ###\n"
        "GET http://example.com/api\n"
        "\n"
        "Accept: application/json\n"
        "\n"
        '{"q": 1}\n'
        "\n"
        "### RESPONSE ###\n"
        "HTTP/1.1 200 OK (42ms)\n"
        "\n"
        "content-type: application/json\n"
        "\n"
        '{\n  "a": 1\n}\n'
    )


def test_exchange_without_headers_or_body() -> None:
    text = format_exchange(_request(), _response("", "text/plain", status=204, reason="No Content"))
    assert text.startswith("### REQUEST ###\nGET http://example.com/api\n\n### RESPONSE ###\n")
    assert "HTTP/1.1 204 No Content (100ms)\n" in text


def test_entry_wraps_exchange() -> None:
    stamp = datetime(2024, 5, 6, 7, 8, 9)
    entry = format_entry(_request(), _response("ok", "text/plain"), stamp)
    assert entry.startswith(f"{SEPARATOR}\n[2024-05-06 07:08:09]\n{SEPARATOR}\n### REQUEST ###\n")
    assert entry.endswith("ok\n\n\n")


@pytest.mark.parametrize(
    "relative, expected",
    [
        ("proj/test/api/users.http", "proj"),
        ("proj/src/requests.http", "proj"),
        ("proj/src/test/deep.http", "proj/src"),
        ("proj/requests/users.http", "proj/requests"),
    ],
)
def test_project_root_strategy(tmp_path: Path, relative: str, expected: str) -> None:
    assert project_root_strategy(tmp_path / relative) == tmp_path / expected


def test_transcript_dir_for_file_uri(tmp_path: Path) -> None:
    document = tmp_path / "proj" / "test" / "api.http"
    assert transcript_dir_for_uri(document.as_uri()) == tmp_path / "proj"


def test_transcript_dir_uses_pluggable_strategy(tmp_path: Path) -> None:
    document = tmp_path / "a" / "b.http"
    assert transcript_dir_for_uri(document.as_uri(), lambda path: tmp_path) == tmp_path


def test_transcript_dir_falls_back_for_non_file_uri(tmp_path: Path) -> None:
    assert transcript_dir_for_uri("untitled:Untitled-1", fallback=tmp_path) == tmp_path


def test_sink_appends(tmp_path: Path) -> None:
    sink = TranscriptSink(tmp_path)
    sink.append("one\n")
    path = sink.append("two\n")
    assert path == tmp_path / TRANSCRIPT_FILENAME
    assert path.read_text(encoding="utf-8") == "one\ntwo\n"


def test_sink_write_failure(tmp_path: Path) -> None:
    sink = TranscriptSink(tmp_path / "missing-dir")
    with pytest.raises(TranscriptWriteError) as info:
        sink.append("entry")
    assert isinstance(info.value.cause, OSError)
