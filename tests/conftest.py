"""Shared fixtures: stores, a controllable clock, ledger components."""

import pytest

from whispermarket.ledger import BetLedger, MarketRegistry
from whispermarket.storage import InMemoryLedgerStore
from whispermarket.storage.duck import DuckDBLedgerStore

NOW = 1_700_000_000_000
DAY_MS = 24 * 3600 * 1000


class FakeClock:
    def __init__(self, now: int = NOW) -> None:
        self.now = now

    def __call__(self) -> int:
        return self.now

    def advance(self, ms: int) -> None:
        self.now += ms


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def store():
    s = InMemoryLedgerStore()
    yield s
    s.close()


@pytest.fixture
def duck_store(tmp_path):
    s = DuckDBLedgerStore.open(tmp_path / "ledger.duckdb")
    yield s
    s.close()


@pytest.fixture(params=["memory", "duckdb"])
def any_store(request, tmp_path):
    if request.param == "memory":
        s = InMemoryLedgerStore()
    else:
        s = DuckDBLedgerStore.open(tmp_path / "ledger.duckdb")
    yield s
    s.close()


@pytest.fixture
def registry(store, clock):
    return MarketRegistry(store, clock=clock)


@pytest.fixture
def ledger(registry):
    return BetLedger(registry)


@pytest.fixture
def make_market(registry):
    """Factory creating a public, day-long market; keyword overrides replace defaults."""

    def _make(**overrides):
        fields = {
            "question": "Will it rain tomorrow?",
            "description": "Resolves yes if any rain is recorded.",
            "creator": "0xCreator",
            "expires_at": registry.clock() + DAY_MS,
            "category": "weather",
            "visibility": "public",
        }
        fields.update(overrides)
        return registry.create(**fields)

    return _make
