"""Ledger error taxonomy. Each error carries the HTTP status and code it maps to."""

from __future__ import annotations


class LedgerError(Exception):
    """Base exception for market/bet ledger errors."""

    status_code: int = 500
    code: str = "ledger_error"

    def __init__(self, message: str = "") -> None:
        super().__init__(message)
        self.message = message


class ValidationError(LedgerError):
    """Missing or malformed input."""

    status_code = 400
    code = "validation_error"


class NotFound(LedgerError):
    """Referenced market or bet does not exist."""

    status_code = 404
    code = "not_found"


class MarketClosed(LedgerError):
    """Market is already resolved."""

    status_code = 400
    code = "market_closed"


class MarketExpired(LedgerError):
    """Market betting deadline has passed."""

    status_code = 400
    code = "market_expired"


class AccessDenied(LedgerError):
    """Identity is not on a private market's access list."""

    status_code = 403
    code = "access_denied"


class StoreError(LedgerError):
    """Backing store unreachable or returned malformed data."""

    status_code = 500
    code = "store_error"
