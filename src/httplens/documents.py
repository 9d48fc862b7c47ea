"""Thread-safe store of open document text, keyed by URI."""

from __future__ import annotations

import threading
from typing import Iterable


class DocumentStore:
    """Whole-document text store.

    Every mutation replaces the stored text wholesale; no incremental
    patching is attempted. Callers never see a partially written entry.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._texts: dict[str, str] = {}

    def open(self, uri: str, text: str) -> None:
        with self._lock:
            self._texts[uri] = text

    def replace(self, uri: str, text: str) -> None:
        with self._lock:
            self._texts[uri] = text

    def update(self, uri: str, changes: Iterable[str]) -> bool:
        """Apply the first change fragment as the new full text.

        Returns ``False`` when ``changes`` is empty and nothing was stored.
        """
        for text in changes:
            self.replace(uri, text)
            return True
        return False

    def close(self, uri: str) -> None:
        with self._lock:
            self._texts.pop(uri, None)

    def get(self, uri: str) -> str | None:
        with self._lock:
            return self._texts.get(uri)

    def uris(self) -> list[str]:
        with self._lock:
            return sorted(self._texts)

    def __contains__(self, uri: object) -> bool:
        with self._lock:
            return uri in self._texts

    def __len__(self) -> int:
        with self._lock:
            return len(self._texts)
