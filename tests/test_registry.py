"""Market registry: create, filter, resolve, purge."""

import pytest

from whispermarket.errors import MarketClosed, NotFound, StoreError, ValidationError
from whispermarket.ledger import MarketRegistry
from whispermarket.models import Market
from whispermarket.storage.base import MARKETS_INDEX, market_key


def test_create_fills_defaults(registry, clock, make_market):
    m = make_market(tags=["rain", " ", "rain", "nyc"])
    assert m.id.startswith(f"market_{clock.now}_")
    assert m.created_at == clock.now
    assert (m.total_yes_amount, m.total_no_amount) == (0, 0)
    assert m.resolved is False and m.outcome is None
    assert m.tags == ["rain", "nyc"]
    assert m.access_list is None
    assert registry.get(m.id) == m


def test_create_rejects_missing_and_bad_fields(make_market):
    with pytest.raises(ValidationError, match="question"):
        make_market(question="  ")
    with pytest.raises(ValidationError, match="expiresAt"):
        make_market(expires_at=None)
    with pytest.raises(ValidationError, match="visibility"):
        make_market(visibility="secret")


def test_access_list_kept_for_private_only(make_market):
    private = make_market(visibility="private", access_list=["0xA", "0xB"])
    public = make_market(access_list=["0xA"])
    assert private.access_list == ["0xA", "0xB"]
    assert public.access_list is None


def test_ids_are_unique_at_same_instant(make_market):
    ids = {make_market().id for _ in range(20)}
    assert len(ids) == 20


def test_get_unknown_market(registry):
    assert registry.find("market_0_nope") is None
    with pytest.raises(NotFound):
        registry.get("market_0_nope")


def test_list_filters_combine(registry, make_market):
    a = make_market(category="sports", tags=["nba"])
    b = make_market(category="sports", visibility="whisper")
    c = make_market(category="politics", creator="0xOther")
    registry.resolve(b.id, True)

    assert [m.id for m in registry.list_markets()] == [a.id, b.id, c.id]
    assert [m.id for m in registry.list_markets(category="sports")] == [a.id, b.id]
    assert [m.id for m in registry.list_markets(category="sports", resolved=False)] == [a.id]
    assert [m.id for m in registry.list_markets(visibility="whisper")] == [b.id]
    assert [m.id for m in registry.list_markets(creator="0xOther")] == [c.id]
    assert [m.id for m in registry.list_markets(tag="nba")] == [a.id]
    assert registry.list_markets(category="sports", creator="0xOther") == []


def test_list_viewer_hides_inaccessible_private(registry, make_market):
    open_market = make_market()
    private = make_market(visibility="private", access_list=["0xAlice"])
    assert [m.id for m in registry.list_markets(viewer="0xalice")] == [open_market.id, private.id]
    assert [m.id for m in registry.list_markets(viewer="0xBob")] == [open_market.id]


def test_list_skips_dangling_index_entries(registry, store, make_market):
    m = make_market()
    store.add_to_set(MARKETS_INDEX, "market_0_gone")
    assert [x.id for x in registry.list_markets()] == [m.id]


def test_resolve_is_final(registry, make_market):
    m = make_market()
    resolved = registry.resolve(m.id, False)
    assert resolved.resolved is True and resolved.outcome is False
    assert registry.get(m.id).outcome is False
    with pytest.raises(MarketClosed):
        registry.resolve(m.id, True)
    assert registry.get(m.id).outcome is False


def test_resolve_before_expiry_is_allowed(registry, make_market):
    m = make_market()
    assert registry.resolve(m.id, True).outcome is True


def test_resolve_unknown_market(registry):
    with pytest.raises(NotFound):
        registry.resolve("market_0_nope", True)


def test_delete_then_not_found(registry, make_market):
    m = make_market()
    registry.delete(m.id)
    assert registry.find(m.id) is None
    assert registry.list_markets() == []
    with pytest.raises(NotFound):
        registry.delete(m.id)


def test_malformed_record_is_store_error(registry, store):
    store.set_fields(market_key("market_1_bad"), {"id": "market_1_bad", "resolved": "maybe"})
    with pytest.raises(StoreError):
        registry.get("market_1_bad")


def test_registry_on_duckdb(duck_store, clock):
    registry = MarketRegistry(duck_store, clock=clock)
    m = registry.create(
        question="Q?",
        description="D",
        creator="0xC",
        expires_at=clock.now + 1000,
        category="misc",
        visibility="private",
        tags=["t"],
        access_list=["0xA"],
    )
    loaded = registry.get(m.id)
    assert isinstance(loaded, Market)
    assert loaded == m
    assert registry.resolve(m.id, True).outcome is True
