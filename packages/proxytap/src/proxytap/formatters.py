"""Text rendering and export of transaction detail.

All functions are pure: the same TransactionDetail always renders the same.

PUBLIC API:
  - parse_headers: Decode a JSON header block
  - format_headers: Render a header block as "key: value" lines
  - format_body: Render a body as pretty JSON, text, or a binary marker
  - to_curl: Build a single-line curl command reproducing the request
  - render_detail: Render a whole transaction as text
  - diff_details: Unified diff of two rendered transactions
"""

import difflib
import json
import logging
from typing import Any

from proxytap.models import TransactionDetail

logger = logging.getLogger(__name__)

NO_HEADERS = "No Headers"
INVALID_HEADERS = "Invalid header data"
NO_CONTENT = "No Content"


def parse_headers(raw: str | None) -> tuple[dict[str, Any] | None, str | None]:
    """Decode a header block.

    Args:
        raw: JSON object text as stored by the proxy, or None.

    Returns:
        Tuple of (headers, error_message).
        Missing block: ({}, None)
        Valid block: (headers, None)
        Invalid block: (None, error_string)
    """
    if raw is None or not raw.strip():
        return {}, None
    try:
        headers = json.loads(raw)
    except json.JSONDecodeError as e:
        return None, f"Invalid JSON: {e}"
    if not isinstance(headers, dict):
        return None, f"Headers are {type(headers).__name__}, not object"
    return headers, None


def format_headers(raw: str | None) -> str:
    """Render a header block for display.

    Absent or empty blocks render as NO_HEADERS, undecodable ones as
    INVALID_HEADERS, so the two cases stay distinguishable.
    """
    headers, error = parse_headers(raw)
    if error:
        return INVALID_HEADERS
    if not headers:
        return NO_HEADERS
    return "\n".join(f"{key}: {value}" for key, value in headers.items())


def format_body(body: bytes | None) -> str:
    """Render a body for display.

    UTF-8 text is pretty-printed if it parses as JSON and shown as-is
    otherwise. Bytes that are not UTF-8 render as a size marker.
    """
    if not body:
        return NO_CONTENT
    try:
        text = body.decode("utf-8")
    except UnicodeDecodeError:
        return f"Binary data ({len(body)} bytes)"
    try:
        return json.dumps(json.loads(text), indent=2, ensure_ascii=False)
    except (json.JSONDecodeError, ValueError):
        return text


def quote_body(text: str) -> str:
    """Single-quote text for a POSIX shell, each ' becoming '\\''."""
    return "'" + text.replace("'", "'\\''") + "'"


def to_curl(detail: TransactionDetail) -> str:
    """Build a curl command that replays the request.

    Headers that cannot be decoded and bodies that are not UTF-8 are left
    out of the command.

    Args:
        detail: Transaction to export.

    Returns:
        Single-line command string.
    """
    parts = [f'curl -X {detail.method} "{detail.url}"']

    headers, error = parse_headers(detail.request_headers)
    if error:
        logger.warning(f"Skipping headers of {detail.id} in curl export: {error}")
    for key, value in (headers or {}).items():
        parts.append(f'-H "{key}: {value}"')

    if detail.request_body:
        try:
            parts.append(f"-d {quote_body(detail.request_body.decode('utf-8'))}")
        except UnicodeDecodeError:
            logger.warning(f"Skipping binary body of {detail.id} in curl export")

    return " ".join(parts)


def render_detail(detail: TransactionDetail) -> str:
    """Render a transaction as plain text, request then response."""
    status = str(detail.status) if detail.status is not None else "Pending..."
    sections = [
        f"{detail.method} {detail.url}",
        f"Status: {status}",
        "",
        "Request Headers",
        format_headers(detail.request_headers),
        "",
        "Request Body",
        format_body(detail.request_body),
        "",
        "Response Headers",
        format_headers(detail.response_headers),
        "",
        "Response Body",
        format_body(detail.response_body),
    ]
    return "\n".join(sections)


def diff_details(left: TransactionDetail, right: TransactionDetail) -> str:
    """Unified diff between two rendered transactions.

    Returns:
        Diff text, empty when the renderings are identical.
    """
    return "\n".join(
        difflib.unified_diff(
            render_detail(left).splitlines(),
            render_detail(right).splitlines(),
            fromfile=left.id,
            tofile=right.id,
            lineterm="",
        )
    )


__all__ = [
    "NO_HEADERS",
    "INVALID_HEADERS",
    "NO_CONTENT",
    "parse_headers",
    "format_headers",
    "format_body",
    "quote_body",
    "to_curl",
    "render_detail",
    "diff_details",
]
