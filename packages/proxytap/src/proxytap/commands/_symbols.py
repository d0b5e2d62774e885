"""ASCII symbol registry for consistent display across proxytap commands.

PUBLIC API:
  - sym: Get ASCII symbol by name with fallback
"""

_SYMBOLS = {
    # Status indicators
    "success": "[OK]",
    "error": "[ERROR]",
    "warning": "[WARN]",
    # Connection states
    "connected": "[x]",
    "disconnected": "[ ]",
    "running": "[ON]",
    "stopped": "[OFF]",
    # Selection
    "selected": "[*]",
    "unselected": "[ ]",
    # Data placeholders
    "empty": "-",
    "pending": "...",
}


def sym(name: str) -> str:
    """Get ASCII symbol by name with fallback to dash.

    Args:
        name: Symbol name from the registry.

    Returns:
        ASCII symbol string, or "-" if name not found.
    """
    return _SYMBOLS.get(name, "-")
