"""Request-block parser for ``.http`` documents.

A document is a sequence of blocks separated by lines whose trimmed text
starts with ``###``. Each block yields at most one request:

    # optional comments
    METHOD URL
    Header-Name: value

    body...

Every request is anchored at the zero-based line of its ``METHOD URL`` line
so editor affordances and command invocations can find it again.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from enum import Enum
from urllib.parse import urlsplit

from httplens.exceptions import UrlRejected

logger = logging.getLogger(__name__)

BLOCK_DELIMITER = "###"
COMMENT_PREFIXES = ("#", "//")
MAX_URL_LENGTH = 2048
ALLOWED_SCHEMES = frozenset({"http", "https"})

# Only the LSP line terminators; anchors must match editor line numbers.
_LINE_BREAK_RE = re.compile(r"\r\n|\r|\n")
# Code points a host name may not contain outside an IPv6 literal.
_FORBIDDEN_HOST_RE = re.compile(r"[\s^<>|%\\\[\]]")


class HttpMethod(str, Enum):
    GET = "GET"
    POST = "POST"
    PUT = "PUT"
    DELETE = "DELETE"
    PATCH = "PATCH"
    HEAD = "HEAD"
    OPTIONS = "OPTIONS"

    @classmethod
    def lookup(cls, token: str) -> HttpMethod | None:
        try:
            return cls(token.upper())
        except ValueError:
            return None


@dataclass(frozen=True)
class RequestDescriptor:
    method: HttpMethod
    url: str
    headers: dict[str, str] = field(default_factory=dict)
    body: str | None = None
    line: int = 0

    @property
    def request_line(self) -> str:
        return f"{self.method.value} {self.url}"


@dataclass(frozen=True)
class Block:
    """Half-open line range ``[start, end)`` of one request block."""

    start: int
    end: int


@dataclass(frozen=True)
class Rejection:
    line: int
    url: str
    reason: str


@dataclass
class ParseReport:
    requests: list[RequestDescriptor] = field(default_factory=list)
    rejections: list[Rejection] = field(default_factory=list)


def split_lines(text: str) -> list[str]:
    return _LINE_BREAK_RE.split(text)


def _is_valid_host(hostname: str) -> bool:
    if ":" in hostname:
        # IPv6 literal, already checked by urlsplit.
        return True
    if _FORBIDDEN_HOST_RE.search(hostname):
        return False
    labels = hostname.split(".")
    if labels[-1] == "" and len(labels) > 1:
        labels.pop()
    return all(labels)


def url_rejection(url: str) -> str | None:
    """Return why ``url`` may not be sent, or ``None`` when it is acceptable."""
    if len(url) > MAX_URL_LENGTH:
        return f"URL exceeds maximum length of {MAX_URL_LENGTH} characters"
    try:
        parts = urlsplit(url)
        # Accessing .port validates the numeric port range.
        parts.port
    except ValueError as exc:
        return f"Invalid URL '{url}': {exc}"
    if not parts.scheme:
        return f"Invalid URL '{url}': not an absolute URL"
    if parts.scheme not in ALLOWED_SCHEMES:
        return (
            f"Unsupported URL scheme '{parts.scheme}': only http and https are allowed"
        )
    if not parts.hostname:
        return f"Invalid URL '{url}': missing host"
    if not _is_valid_host(parts.hostname):
        return f"Invalid URL '{url}': invalid host"
    return None


def validate_url(url: str) -> str:
    reason = url_rejection(url)
    if reason is not None:
        raise UrlRejected(url, reason)
    return url


def _is_comment(trimmed: str) -> bool:
    return trimmed.startswith(COMMENT_PREFIXES)


def iter_blocks(lines: list[str]) -> list[Block]:
    blocks: list[Block] = []
    start = 0
    for index, line in enumerate(lines):
        if line.strip().startswith(BLOCK_DELIMITER):
            blocks.append(Block(start, index))
            start = index + 1
    blocks.append(Block(start, len(lines)))
    return blocks


def _find_request_line(
    lines: list[str], block: Block
) -> tuple[int, HttpMethod, str] | None:
    for index in range(block.start, block.end):
        trimmed = lines[index].strip()
        if not trimmed or _is_comment(trimmed):
            continue
        tokens = trimmed.split()
        if len(tokens) < 2:
            continue
        method = HttpMethod.lookup(tokens[0])
        if method is None:
            continue
        return index, method, tokens[1]
    return None


def parse_block(
    lines: list[str], block: Block, report: ParseReport | None = None
) -> RequestDescriptor | None:
    found = _find_request_line(lines, block)
    if found is None:
        return None
    anchor, method, url = found
    reason = url_rejection(url)
    if reason is not None:
        logger.warning("Skipping request at line %d: %s", anchor, reason)
        if report is not None:
            report.rejections.append(Rejection(line=anchor, url=url, reason=reason))
        return None

    headers: dict[str, str] = {}
    body_lines: list[str] = []
    in_body = False
    for index in range(anchor + 1, block.end):
        line = lines[index]
        if in_body:
            body_lines.append(line)
            continue
        trimmed = line.strip()
        if not trimmed:
            in_body = True
            continue
        if _is_comment(trimmed):
            continue
        name, sep, value = trimmed.partition(":")
        if sep:
            headers[name.strip()] = value.strip()

    body = "\n".join(body_lines).strip() or None
    return RequestDescriptor(
        method=method, url=url, headers=headers, body=body, line=anchor
    )


def parse_report(text: str) -> ParseReport:
    report = ParseReport()
    lines = split_lines(text)
    for block in iter_blocks(lines):
        request = parse_block(lines, block, report)
        if request is not None:
            report.requests.append(request)
    return report


def parse_requests(text: str) -> list[RequestDescriptor]:
    """Parse every request in ``text``, top to bottom."""
    return parse_report(text).requests
