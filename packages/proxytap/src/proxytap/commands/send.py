"""Ad-hoc request commands.

PUBLIC API:
  - send: Dispatch an HTTP request
  - history: List or recall dispatched requests
"""

import json
from datetime import datetime

from replkit2.textkit import markdown

from proxytap.app import app
from proxytap.commands._builders import error_response, table_response
from proxytap.errors import HeaderParseError
from proxytap.formatters import format_body


@app.command(display="markdown", fastmcp={"type": "tool", "mime_type": "text/markdown"})
def send(
    state,
    url: str,
    method: str = "GET",
    headers: str = "{}",
    body: str = None,  # type: ignore[reportArgumentType]
) -> dict:
    """Send an HTTP request and show the response.

    Args:
        url: Target URL
        method: HTTP method
        headers: Headers as JSON object text
        body: Optional request body

    Examples:
        send("https://httpbin.org/get")
        send("https://httpbin.org/post", method="POST", body='{"a": 1}',
             headers='{"Content-Type": "application/json"}')
    """
    try:
        result = state.service.dispatch.send(method, url, headers=headers, body=body)
    except HeaderParseError as e:
        return error_response(str(e), suggestions=['Headers take JSON object text, e.g. \'{"Accept": "*/*"}\''])

    if "error" in result:
        return error_response(result["error"])

    builder = markdown().heading(f"{result['status']} {method.upper()} {url}", level=2)
    builder.text(f"**Duration:** {result['duration_ms']}ms")
    builder.heading("Response Headers", level=3)
    builder.code_block(json.dumps(result["headers"], indent=2), language="json")
    builder.heading("Response Body", level=3)
    builder.code_block(format_body(result["body"].encode("utf-8")), language="")
    return builder.build()


@app.command(display="markdown")
def history(
    state,
    index: int = None,  # type: ignore[reportArgumentType]
) -> dict:
    """List recent send() requests, or show one for re-sending.

    Args:
        index: Entry number to show, None lists all

    Examples:
        history()      # Newest first
        history(0)     # Most recent request
    """
    dispatch = state.service.dispatch

    if index is not None:
        try:
            entry = dispatch.recall(index)
        except IndexError:
            return error_response(f"No history entry {index}")
        builder = markdown().heading(f"{entry.method} {entry.url}", level=2)
        builder.heading("Headers", level=3)
        builder.code_block(entry.headers, language="json")
        builder.heading("Body", level=3)
        builder.code_block(entry.body or "", language="")
        return builder.build()

    entries = dispatch.history()
    rows = [
        {
            "#": str(i),
            "Method": e.method,
            "URL": e.url,
            "Time": datetime.fromtimestamp(e.timestamp).strftime("%H:%M:%S"),
        }
        for i, e in enumerate(entries)
    ]
    return table_response(
        title="History",
        headers=["#", "Method", "URL", "Time"],
        rows=rows,
        summary=f"{len(entries)} requests" if entries else None,
    )
