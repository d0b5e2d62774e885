"""Exception types for proxytap.

Transport, decode and user-input failures each get their own type so callers
can decide where to surface them. Correlation drops (orphan responses,
duplicate requests) are not errors and have no exception.

PUBLIC API:
  - ProxyTapError: Base class for all proxytap errors
  - EventDecodeError: Malformed lifecycle event payload
  - DetailDecodeError: Malformed transaction detail payload
  - HeaderParseError: Malformed headers text supplied by the user
  - UnknownTransactionError: Reference to a transaction the store does not hold
  - ProxyConnectionError: Proxy daemon unreachable
"""


class ProxyTapError(Exception):
    """Base class for proxytap errors."""


class EventDecodeError(ProxyTapError, ValueError):
    """Raised when a stream message is not a valid lifecycle event."""


class DetailDecodeError(ProxyTapError, ValueError):
    """Raised when a detail payload cannot be turned into a TransactionDetail."""


class HeaderParseError(ProxyTapError, ValueError):
    """Raised when user-supplied headers text is not a JSON object."""


class UnknownTransactionError(ProxyTapError, LookupError):
    """Raised when a transaction id or row number does not resolve."""

    def __init__(self, ref):
        self.ref = ref
        super().__init__(f"Unknown transaction: {ref}")


class ProxyConnectionError(ProxyTapError, RuntimeError):
    """Raised when the proxy daemon cannot be reached."""


__all__ = [
    "ProxyTapError",
    "EventDecodeError",
    "DetailDecodeError",
    "HeaderParseError",
    "UnknownTransactionError",
    "ProxyConnectionError",
]
