"""In-process ledger store (tests, dev profile)."""

from __future__ import annotations

import copy
from collections.abc import Iterator
from contextlib import contextmanager
from threading import RLock

from whispermarket.errors import StoreError
from whispermarket.storage.base import LedgerStore


class InMemoryLedgerStore(LedgerStore):
    """Dict-backed store. One re-entrant lock serializes all access; atomic scopes restore a snapshot on error."""

    def __init__(self) -> None:
        self._records: dict[str, dict[str, str]] = {}
        self._sets: dict[str, dict[str, None]] = {}  # dict keys keep insertion order
        self._lists: dict[str, list[str]] = {}
        self._lock = RLock()
        self._depth = 0

    @contextmanager
    def atomic(self) -> Iterator[None]:
        with self._lock:
            snapshot = None
            if self._depth == 0:
                snapshot = copy.deepcopy((self._records, self._sets, self._lists))
            self._depth += 1
            try:
                yield
            except BaseException:
                if snapshot is not None:
                    self._records, self._sets, self._lists = snapshot
                raise
            finally:
                self._depth -= 1

    def get_record(self, key: str) -> dict[str, str]:
        with self._lock:
            return dict(self._records.get(key, {}))

    def set_fields(self, key: str, fields: dict[str, str]) -> None:
        with self._lock:
            self._records.setdefault(key, {}).update({f: str(v) for f, v in fields.items()})

    def increment_field(self, key: str, field: str, amount: int) -> int:
        with self._lock:
            record = self._records.setdefault(key, {})
            try:
                current = int(record.get(field) or "0")
            except ValueError as e:
                raise StoreError(f"Field {key}.{field} is not an integer") from e
            new_value = current + amount
            record[field] = str(new_value)
            return new_value

    def delete(self, key: str) -> None:
        with self._lock:
            self._records.pop(key, None)
            self._sets.pop(key, None)
            self._lists.pop(key, None)

    def add_to_set(self, key: str, member: str) -> None:
        with self._lock:
            self._sets.setdefault(key, {})[member] = None

    def remove_from_set(self, key: str, member: str) -> None:
        with self._lock:
            members = self._sets.get(key)
            if members is not None:
                members.pop(member, None)
                if not members:
                    del self._sets[key]

    def set_members(self, key: str) -> list[str]:
        with self._lock:
            return list(self._sets.get(key, {}))

    def append_to_list(self, key: str, value: str) -> None:
        with self._lock:
            self._lists.setdefault(key, []).append(value)

    def list_range(self, key: str, start: int = 0, stop: int | None = None) -> list[str]:
        with self._lock:
            items = list(reversed(self._lists.get(key, [])))
        return items[start:stop]
