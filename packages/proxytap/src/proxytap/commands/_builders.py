"""Markdown response builders shared by proxytap commands.

PUBLIC API:
  - error_response: Error alert with optional suggestions
  - info_response: Title plus key/value fields
  - table_response: Title plus table, warnings and summary
  - code_response: Title plus one code block
"""

from replkit2.textkit import markdown


def error_response(message: str, suggestions: list[str] | None = None) -> dict:
    """Build error response in markdown.

    Args:
        message: Error message.
        suggestions: Optional hints on how to fix it.

    Returns:
        Markdown dict with error formatting.
    """
    builder = markdown().element("alert", message=message, level="error")
    if suggestions:
        builder.text("**Try:**")
        builder.list(suggestions)
    return builder.build()


def info_response(title: str, fields: dict, extra: str | None = None) -> dict:
    """Build info display response in markdown.

    Args:
        title: Info display title.
        fields: Field names to values, None values are skipped.
        extra: Optional text appended after the fields.

    Returns:
        Markdown dict with formatted info display.
    """
    builder = markdown().heading(title, level=2)

    for key, value in fields.items():
        if value is not None:
            builder.text(f"**{key}:** {value}")

    if extra:
        builder.text(extra)

    return builder.build()


def table_response(
    title: str,
    headers: list[str],
    rows: list[dict],
    summary: str | None = None,
    warnings: list[str] | None = None,
) -> dict:
    """Build table response in markdown.

    Args:
        title: Table title.
        headers: Column headers.
        rows: Data rows as dicts.
        summary: Optional summary text.
        warnings: Optional warning messages.

    Returns:
        Markdown dict with formatted table.
    """
    builder = markdown().heading(title, level=2)

    for warning in warnings or []:
        builder.element("alert", message=warning, level="warning")

    if rows:
        builder.element("table", headers=headers, rows=rows)
    else:
        builder.text("_No matching requests_")

    if summary:
        builder.text(f"_{summary}_")

    return builder.build()


def code_response(title: str, content: str, language: str = "") -> dict:
    """Build a single code block response in markdown."""
    return markdown().heading(title, level=2).code_block(content, language=language).build()
