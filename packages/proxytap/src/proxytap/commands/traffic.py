"""Traffic listing and detail commands.

PUBLIC API:
  - traffic: List observed requests with a free-text filter
  - detail: Show full request/response detail
  - curl: Export a request as a curl command
"""

from replkit2.textkit import markdown

from proxytap.app import app
from proxytap.commands._builders import code_response, error_response, table_response
from proxytap.commands._symbols import sym
from proxytap.errors import UnknownTransactionError
from proxytap.formatters import format_body, format_headers, to_curl
from proxytap.hydration import DETAIL_SLOT, DetailState, SlotView

_URL_MAX = 80


def _truncate(text: str, limit: int) -> str:
    return text if len(text) <= limit else text[: limit - 3] + "..."


@app.command(
    display="markdown",
    fastmcp=[{"type": "resource", "mime_type": "text/markdown"}, {"type": "tool", "mime_type": "text/markdown"}],
)
def traffic(
    state,
    filter: str = None,  # type: ignore[reportArgumentType]
    limit: int = 50,
) -> dict:
    """List observed requests, newest first.

    Args:
        filter: Case-insensitive text matched against URL and method.
            None keeps the current filter, "" clears it.
        limit: Max rows (default 50)

    Examples:
        traffic()                 # Current filter
        traffic("api/users")      # URLs containing api/users
        traffic("post")           # POST requests
        traffic("")               # Clear filter
    """
    service = state.service
    service.pump()
    if filter is not None:
        service.set_filter(filter)

    snapshot = service.snapshot()
    rows = [
        {
            "#": str(row),
            "Cmp": sym("selected") if s.id in snapshot.selection else sym("unselected"),
            "Method": s.method,
            "Status": str(s.status) if s.status is not None else (sym("empty") if s.completed else sym("pending")),
            "URL": _truncate(s.url, _URL_MAX),
            "Duration": f"{s.duration_ms}ms" if s.duration_ms is not None else sym("empty"),
            "ID": s.id,
        }
        for row, s in enumerate(snapshot.visible[:limit])
    ]

    warnings = []
    if snapshot.incomplete:
        warnings.append("Event stream dropped, some traffic may be missing")
    if snapshot.stream_status.value != "connected":
        warnings.append("Not connected to the event stream, use connect()")
    if len(snapshot.visible) > limit:
        warnings.append(f"Showing first {limit} of {len(snapshot.visible)} (use limit to see more)")

    summary = f"{len(snapshot.visible)} of {len(snapshot.transactions)} requests"
    if snapshot.query:
        summary += f" matching '{snapshot.query}'"

    return table_response(
        title="Traffic",
        headers=["#", "Cmp", "Method", "Status", "URL", "Duration", "ID"],
        rows=rows,
        summary=summary,
        warnings=warnings,
    )


def _slot_error(view: SlotView) -> dict | None:
    """Error response for a slot that has nothing to show, else None."""
    if view.state == DetailState.LOADING and view.detail is None:
        return error_response(f"Still loading {view.transaction_id}", suggestions=["Run the command again"])
    if view.state == DetailState.ERROR and view.detail is None:
        return error_response(f"Failed to load {view.transaction_id}: {view.error}")
    return None


@app.command(display="markdown", fastmcp={"type": "tool", "mime_type": "text/markdown"})
def detail(state, ref: str, wait: float = 2.0, refresh: bool = False) -> dict:
    """Show full detail of one request.

    Args:
        ref: Request ID or row number from traffic()
        wait: Seconds to wait for the detail fetch
        refresh: Refetch even if already loaded

    Examples:
        detail(0)              # Newest visible request
        detail("3f2c...")      # By ID
        detail(0, refresh=True)
    """
    service = state.service
    service.pump()
    try:
        service.select(ref, refresh=refresh)
    except UnknownTransactionError as e:
        return error_response(str(e), suggestions=["Use traffic() to list requests"])

    view = service.wait_for(DETAIL_SLOT, timeout=wait)
    if error := _slot_error(view):
        return error

    record = view.detail
    assert record is not None
    builder = markdown().heading(f"{record.method} {record.url}", level=2)
    builder.text(f"**ID:** {record.id}")
    builder.text(f"**Status:** {record.status if record.status is not None else 'Pending...'}")
    if view.state == DetailState.ERROR:
        builder.element("alert", message=f"Refresh failed, showing cached detail: {view.error}", level="warning")
    elif view.state == DetailState.LOADING:
        builder.element("alert", message="Refresh in progress, showing cached detail", level="warning")

    builder.heading("Request Headers", level=3)
    builder.code_block(format_headers(record.request_headers), language="")
    builder.heading("Request Body", level=3)
    builder.code_block(format_body(record.request_body), language="")
    builder.heading("Response Headers", level=3)
    builder.code_block(format_headers(record.response_headers), language="")
    builder.heading("Response Body", level=3)
    builder.code_block(format_body(record.response_body), language="")
    return builder.build()


@app.command(display="markdown", fastmcp={"type": "tool", "mime_type": "text/markdown"})
def curl(state, ref: str, wait: float = 2.0) -> dict:
    """Export a request as a curl command.

    Args:
        ref: Request ID or row number from traffic()
        wait: Seconds to wait for the detail fetch

    Examples:
        curl(0)
    """
    service = state.service
    service.pump()
    try:
        service.select(ref)
    except UnknownTransactionError as e:
        return error_response(str(e), suggestions=["Use traffic() to list requests"])

    view = service.wait_for(DETAIL_SLOT, timeout=wait)
    if error := _slot_error(view):
        return error

    assert view.detail is not None
    return code_response("cURL", to_curl(view.detail), language="bash")
