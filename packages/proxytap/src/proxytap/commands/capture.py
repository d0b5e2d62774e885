"""Capture control command."""

from proxytap.app import app
from proxytap.commands._builders import error_response, info_response


@app.command(display="markdown", fastmcp={"type": "tool", "mime_type": "text/markdown"})
def capture(
    state,
    action: str = "status",
    port: int = None,  # type: ignore[reportArgumentType]
) -> dict:
    """Start or stop traffic capture on the proxy daemon.

    Args:
        action: "start", "stop", or "status"
        port: Proxy listen port for start (default from proxytap.toml, 8888)

    Examples:
        capture("start")             # Default port
        capture("start", port=9090)
        capture("stop")
        capture()                    # Check status
    """
    service = state.service.capture

    if action == "start":
        result = service.start(port)
    elif action == "stop":
        result = service.stop()
    elif action == "status":
        result = service.status()
    else:
        return error_response(f"Unknown action: {action}", suggestions=['Use "start", "stop" or "status"'])

    if "error" in result:
        return error_response(result["error"])

    return info_response(
        title="Capture",
        fields={
            "Status": "Running" if result["running"] else "Stopped",
            "Port": result["port"],
            "Note": result.get("message"),
        },
    )
