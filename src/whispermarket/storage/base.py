"""Ledger store contract - hash records, membership sets, append-only lists."""

from __future__ import annotations

from abc import ABC, abstractmethod
from contextlib import AbstractContextManager

# Key layout shared with the Redis deployment.
MARKETS_INDEX = "markets"
BETS_INDEX = "bets"
FRAME_INTERACTIONS = "frame_interactions"


def market_key(market_id: str) -> str:
    return f"market:{market_id}"


def market_bets_key(market_id: str) -> str:
    return f"market:{market_id}:bets"


def bet_key(bet_id: str) -> str:
    return f"bet:{bet_id}"


class LedgerStore(ABC):
    """Key-value/set store used by the registry and bet ledger.

    Every operation is individually atomic. `atomic()` groups several
    operations so readers observe all of them or none, and discards all of
    them if the block raises. Scopes nest; only the outermost one commits.
    Backend failures are raised as StoreError.
    """

    @abstractmethod
    def get_record(self, key: str) -> dict[str, str]:
        """Return all fields of a hash record ({} if absent)."""
        ...

    @abstractmethod
    def set_fields(self, key: str, fields: dict[str, str]) -> None:
        """Create or overwrite the given fields of a hash record."""
        ...

    @abstractmethod
    def increment_field(self, key: str, field: str, amount: int) -> int:
        """Add an integer to a base-10 string field (missing = 0). Return the new value."""
        ...

    @abstractmethod
    def delete(self, key: str) -> None:
        """Remove a record, set or list stored under key."""
        ...

    @abstractmethod
    def add_to_set(self, key: str, member: str) -> None:
        ...

    @abstractmethod
    def remove_from_set(self, key: str, member: str) -> None:
        ...

    @abstractmethod
    def set_members(self, key: str) -> list[str]:
        """Members in insertion order."""
        ...

    @abstractmethod
    def append_to_list(self, key: str, value: str) -> None:
        ...

    @abstractmethod
    def list_range(self, key: str, start: int = 0, stop: int | None = None) -> list[str]:
        """List items, newest first (slice semantics on start/stop)."""
        ...

    @abstractmethod
    def atomic(self) -> AbstractContextManager[None]:
        ...

    def close(self) -> None:
        """Release backend resources."""
        return None
