from __future__ import annotations

import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))


import httpx
import pytest

from httplens.documents import DocumentStore


@pytest.fixture
def store() -> DocumentStore:
    return DocumentStore()


@pytest.fixture
def write_http_file(tmp_path: Path):
    def _write(relative: str, text: str) -> Path:
        path = tmp_path / relative
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(text, encoding="utf-8")
        return path

    return _write


@pytest.fixture
def mock_transport():
    def _make(
        status: int = 200,
        body: str = "",
        headers: dict[str, str] | None = None,
        seen: list[httpx.Request] | None = None,
    ) -> httpx.MockTransport:
        def _handler(request: httpx.Request) -> httpx.Response:
            if seen is not None:
                request.read()
                seen.append(request)
            return httpx.Response(status, text=body, headers=headers or {})

        return httpx.MockTransport(_handler)

    return _make
