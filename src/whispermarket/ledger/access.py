"""Access policy for private markets."""

from __future__ import annotations

from whispermarket.models import Market


def normalize_identity(identity: str) -> str:
    """Wallet addresses are case-insensitive hex; feed ids are digits."""
    return (identity or "").strip().lower()


def is_permitted(market: Market, identity: str) -> bool:
    """True if identity may bet on market.

    public and whisper markets are open to everyone (whisper is a label for
    pseudonymous participation, not an extra restriction). private markets
    admit only identities on the access list; an empty list admits nobody.
    """
    if market.visibility != "private":
        return True
    wanted = normalize_identity(identity)
    if not wanted:
        return False
    return any(normalize_identity(member) == wanted for member in market.access_list or [])
