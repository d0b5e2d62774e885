"""Event stream connection commands.

PUBLIC API:
  - connect: Open the traffic event stream
  - disconnect: Close the traffic event stream
  - status: Show stream, capture and store state
  - clear: Forget observed traffic
"""

from proxytap.app import app
from proxytap.commands._builders import error_response, info_response
from proxytap.commands._symbols import sym


@app.command(display="markdown")
def connect(state) -> dict:
    """Connect to the proxy daemon's event stream.

    Only traffic observed after connecting is shown.

    Returns:
        Connection status in markdown
    """
    result = state.service.connect()

    if "error" in result:
        return error_response(
            result["error"],
            suggestions=[
                "Check the proxy daemon is running",
                f"Stream URL: {state.service.stream.url}",
                "Host and port are read from proxytap.toml [server]",
            ],
        )

    return info_response(
        title="Connected",
        fields={"Stream": result["url"], "Session": result["session"]},
    )


@app.command(display="markdown")
def disconnect(state) -> dict:
    """Disconnect from the event stream."""
    result = state.service.disconnect()
    return info_response(
        title="Disconnect Status",
        fields={"Status": "Disconnected" if result["was_connected"] else "Not connected"},
    )


@app.command(display="markdown", fastmcp={"type": "tool", "mime_type": "text/markdown"})
def status(state) -> dict:
    """Show stream, capture and traffic status.

    Returns:
        Status information in markdown
    """
    service = state.service
    service.pump()
    snapshot = service.snapshot()

    connected = snapshot.stream_status.value == "connected"
    capture = (
        f"{sym('running')} port {snapshot.capture_port}" if snapshot.capture_running else sym("stopped")
    )

    return info_response(
        title="Proxytap Status",
        fields={
            "Stream": f"{sym('connected') if connected else sym('disconnected')} {snapshot.stream_status.value}",
            "Session": snapshot.session or None,
            "Capture": capture,
            "Requests": f"{len(snapshot.transactions)} observed, {len(snapshot.visible)} visible",
            "Filter": snapshot.query or None,
            "Compare": ", ".join(snapshot.selection) or None,
        },
        extra=f"{sym('warning')} Stream dropped since last clear(), some traffic may be missing"
        if snapshot.incomplete
        else None,
    )


@app.command(display="markdown")
def clear(state) -> dict:
    """Forget all observed traffic, comparison selection and fetched details.

    Returns:
        Summary of what was cleared
    """
    state.service.pump()
    removed = state.service.reset()
    return info_response(title="Clear Status", fields={"Cleared": f"{removed} requests"})
