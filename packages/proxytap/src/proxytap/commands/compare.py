"""Side-by-side comparison command."""

from replkit2.textkit import markdown

from proxytap.app import app
from proxytap.commands._builders import error_response, info_response
from proxytap.errors import UnknownTransactionError
from proxytap.formatters import diff_details, render_detail
from proxytap.hydration import LEFT_SLOT, RIGHT_SLOT, DetailState


@app.command(display="markdown", fastmcp={"type": "tool", "mime_type": "text/markdown"})
def compare(
    state,
    ref: str = None,  # type: ignore[reportArgumentType]
    wait: float = 2.0,
) -> dict:
    """Mark requests for comparison and diff them.

    Toggles a request in the comparison selection. Two requests at most are
    selected; marking a third drops the oldest. With two selected, both are
    fetched and shown with a unified diff.

    Args:
        ref: Request ID or row number to toggle, None to show the current pair
        wait: Seconds to wait for detail fetches

    Examples:
        compare(0)     # Mark newest request
        compare(3)     # Mark another, shows the diff
        compare()      # Show current comparison
        compare(3)     # Unmark
    """
    service = state.service
    service.pump()

    if ref is not None:
        try:
            service.toggle_compare(ref)
        except UnknownTransactionError as e:
            return error_response(str(e), suggestions=["Use traffic() to list requests"])

    if not service.selection.ready:
        selected = service.selection.ids
        return info_response(
            title="Compare",
            fields={
                "Selected": ", ".join(selected) if selected else "none",
                "Next": "Mark another request with compare(ref)" if selected else "Mark two requests with compare(ref)",
            },
        )

    service.wait_for(LEFT_SLOT, timeout=wait)
    service.wait_for(RIGHT_SLOT, timeout=wait)
    comparison = service.comparison()
    assert comparison is not None
    left, right = comparison

    for view in (left, right):
        if view.detail is None:
            if view.state == DetailState.LOADING:
                return error_response(f"Still loading {view.transaction_id}", suggestions=["Run compare() again"])
            return error_response(f"Failed to load {view.transaction_id}: {view.error}")

    assert left.detail is not None and right.detail is not None
    builder = markdown().heading("Compare Requests", level=2)
    builder.heading(f"A: {left.detail.id}", level=3)
    builder.code_block(render_detail(left.detail), language="")
    builder.heading(f"B: {right.detail.id}", level=3)
    builder.code_block(render_detail(right.detail), language="")
    builder.heading("Diff", level=3)
    builder.code_block(diff_details(left.detail, right.detail) or "(identical)", language="diff")
    return builder.build()
