"""Process-wide logging configuration.

Server diagnostics go to a file (stdout carries the protocol stream and
must stay clean); user-facing messages are sent to the editor instead.
"""

from __future__ import annotations

import logging
import tempfile
from pathlib import Path

DEFAULT_LOG_NAME = "http-lsp.log"
LOG_FORMAT = "[%(asctime)s] %(levelname)s %(name)s: %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

_HANDLER_MARKER = "_httplens_handler"


def default_log_path() -> Path:
    return Path(tempfile.gettempdir()) / DEFAULT_LOG_NAME


def _level_from_name(name: str) -> int:
    level = logging.getLevelName(name.upper())
    return level if isinstance(level, int) else logging.INFO


def configure_logging(level: str = "INFO", path: Path | None = None) -> Path | None:
    """Attach a single file handler to the ``httplens`` logger.

    Calling again replaces the previous handler. Returns the log path, or
    ``None`` when the file could not be opened.
    """
    package_logger = logging.getLogger("httplens")
    package_logger.setLevel(_level_from_name(level))
    for handler in list(package_logger.handlers):
        if getattr(handler, _HANDLER_MARKER, False):
            package_logger.removeHandler(handler)
            handler.close()

    target = path or default_log_path()
    try:
        handler = logging.FileHandler(target, encoding="utf-8")
    except OSError:
        fallback = logging.NullHandler()
        setattr(fallback, _HANDLER_MARKER, True)
        package_logger.addHandler(fallback)
        return None
    handler.setFormatter(logging.Formatter(LOG_FORMAT, DATE_FORMAT))
    setattr(handler, _HANDLER_MARKER, True)
    package_logger.addHandler(handler)
    return target
