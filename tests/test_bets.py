"""Bet ledger: placement rules, pool accounting, positions."""

import pytest

from whispermarket.errors import AccessDenied, MarketClosed, MarketExpired, NotFound, ValidationError
from whispermarket.ledger import BetLedger, MarketRegistry, parse_amount
from whispermarket.storage.base import BETS_INDEX, bet_key, market_bets_key

ONE_ETH = 10**18


def test_parse_amount():
    assert parse_amount(5) == 5
    assert parse_amount(" 1000000000000000000000000000000 ") == 10**30
    for bad in ["0", "-1", "1.5", "abc", "", 0, -3, True, 1.0, "１２"]:
        with pytest.raises(ValidationError):
            parse_amount(bad)


def test_pools_track_bets(ledger, registry, make_market):
    m = make_market()
    ledger.place_bet(m.id, "0xA", True, "100")
    ledger.place_bet(m.id, "0xB", False, 30)
    ledger.place_bet(m.id, "0xA", True, "20")

    market = registry.get(m.id)
    bets = ledger.list_bets(market_id=m.id)
    assert market.total_yes_amount == 120
    assert market.total_no_amount == 30
    assert market.total_yes_amount == sum(b.amount for b in bets if b.outcome)
    assert market.total_no_amount == sum(b.amount for b in bets if not b.outcome)


def test_bet_record_shape(ledger, clock, make_market):
    m = make_market()
    bet = ledger.place_bet(m.id, "0xA", True, "7")
    assert bet.id.startswith(f"bet_{clock.now}_")
    assert bet.timestamp == clock.now
    assert ledger.find(bet.id) == bet


def test_missing_fields(ledger, make_market):
    m = make_market()
    for args in [(None, "0xA", True, "1"), (m.id, "", True, "1"), (m.id, "0xA", None, "1"), (m.id, "0xA", True, None)]:
        with pytest.raises(ValidationError):
            ledger.place_bet(*args)


def test_unknown_market(ledger):
    with pytest.raises(NotFound):
        ledger.place_bet("market_0_nope", "0xA", True, "1")


def test_bad_amount_leaves_pools_untouched(ledger, registry, make_market):
    m = make_market()
    with pytest.raises(ValidationError):
        ledger.place_bet(m.id, "0xA", True, "-5")
    assert registry.get(m.id).total_pool == 0
    assert ledger.list_bets() == []


def test_resolved_market_rejects_bets(ledger, registry, make_market):
    m = make_market()
    registry.resolve(m.id, True)
    with pytest.raises(MarketClosed):
        ledger.place_bet(m.id, "0xA", True, "1")


def test_expired_market_rejects_bets(ledger, registry, clock, make_market):
    m = make_market(expires_at=clock.now + 1000)
    ledger.place_bet(m.id, "0xA", True, "1")
    clock.advance(1000)  # deadline itself is closed
    with pytest.raises(MarketExpired):
        ledger.place_bet(m.id, "0xA", True, "1")
    assert registry.get(m.id).total_yes_amount == 1


def test_closed_reported_before_expired(ledger, registry, clock, make_market):
    m = make_market(expires_at=clock.now + 10)
    registry.resolve(m.id, False)
    clock.advance(100)
    with pytest.raises(MarketClosed):
        ledger.place_bet(m.id, "0xA", True, "1")


def test_private_market_access(ledger, make_market):
    m = make_market(visibility="private", access_list=["0xAbC"])
    ledger.place_bet(m.id, "0xabc", True, "1")
    with pytest.raises(AccessDenied):
        ledger.place_bet(m.id, "0xdef", True, "1")

    nobody = make_market(visibility="private", access_list=[])
    with pytest.raises(AccessDenied):
        ledger.place_bet(nobody.id, "0xabc", True, "1")


def test_whisper_market_open_to_all(ledger, make_market):
    m = make_market(visibility="whisper")
    assert ledger.place_bet(m.id, "0xanyone", False, "1").outcome is False


def test_list_bets_filters(ledger, make_market):
    m1, m2 = make_market(), make_market()
    b1 = ledger.place_bet(m1.id, "0xA", True, "1")
    b2 = ledger.place_bet(m2.id, "0xA", False, "2")
    b3 = ledger.place_bet(m1.id, "0xB", True, "3")
    assert [b.id for b in ledger.list_bets()] == [b1.id, b2.id, b3.id]
    assert [b.id for b in ledger.list_bets(market_id=m1.id)] == [b1.id, b3.id]
    assert [b.id for b in ledger.list_bets(bettor="0xA")] == [b1.id, b2.id]
    assert [b.id for b in ledger.list_bets(market_id=m1.id, bettor="0xA")] == [b1.id]


def test_bet_without_stored_id_uses_key(ledger, store, make_market):
    m = make_market()
    bet = ledger.place_bet(m.id, "0xA", True, "1")
    fields = store.get_record(bet_key(bet.id))
    store.delete(bet_key(bet.id))
    store.set_fields(bet_key(bet.id), {k: v for k, v in fields.items() if k != "id"})
    assert ledger.find(bet.id) == bet


def test_delete_market_purges_bets(ledger, registry, store, make_market):
    keep, drop = make_market(), make_market()
    kept = ledger.place_bet(keep.id, "0xA", True, "1")
    gone = ledger.place_bet(drop.id, "0xA", True, "1")
    registry.delete(drop.id)
    assert ledger.find(gone.id) is None
    assert store.set_members(market_bets_key(drop.id)) == []
    assert store.set_members(BETS_INDEX) == [kept.id]
    assert [b.id for b in ledger.list_bets()] == [kept.id]


def test_position(ledger, registry, make_market):
    m = make_market()
    ledger.place_bet(m.id, "0xAlice", True, "10")
    ledger.place_bet(m.id, "0xalice", False, "4")
    ledger.place_bet(m.id, "0xBob", False, "9")

    p = ledger.position(m.id, "0xALICE")
    assert (p.yes_amount, p.no_amount, p.bet_count) == (10, 4, 2)
    assert p.resolved is False and p.winning is False

    registry.resolve(m.id, True)
    assert ledger.position(m.id, "0xAlice").winning is True
    assert ledger.position(m.id, "0xBob").winning is False
    assert ledger.position(m.id, "0xCarol").bet_count == 0


def test_three_bettor_scenario(ledger, registry, make_market):
    m = make_market(question="Q")
    ledger.place_bet(m.id, "alice", True, str(ONE_ETH))
    ledger.place_bet(m.id, "bob", False, str(3 * ONE_ETH))
    ledger.place_bet(m.id, "carol", True, str(2 * ONE_ETH))
    market = registry.get(m.id)
    assert market.total_yes_amount == 3 * ONE_ETH
    assert market.total_no_amount == 3 * ONE_ETH
    assert len(ledger.list_bets(market_id=m.id)) == 3

    registry.resolve(m.id, True)
    with pytest.raises(MarketClosed):
        ledger.place_bet(m.id, "dave", True, "1")


def test_ledger_on_duckdb(duck_store, clock):
    registry = MarketRegistry(duck_store, clock=clock)
    bets = BetLedger(registry)
    m = registry.create("Q?", "D", "0xC", clock.now + 1000, "misc", "public")
    big = 2**80
    bets.place_bet(m.id, "0xA", True, str(big))
    bets.place_bet(m.id, "0xB", True, "1")
    with pytest.raises(ValidationError):
        bets.place_bet(m.id, "0xB", False, "x")
    market = registry.get(m.id)
    assert market.total_yes_amount == big + 1
    assert market.total_no_amount == 0
    registry.delete(m.id)
    assert bets.list_bets() == []


def test_list_bets_bettor_filter_matches_position(ledger, make_market):
    m = make_market()
    ledger.place_bet(m.id, "0xAbC", True, "3")
    ledger.place_bet(m.id, " 0xabc ", False, "2")
    ledger.place_bet(m.id, "0xDef", True, "1")
    assert len(ledger.list_bets(bettor="0xABC")) == 2
    assert len(ledger.list_bets(market_id=m.id, bettor="0xabc")) == 2
    assert ledger.position(m.id, "0xabc").bet_count == 2
