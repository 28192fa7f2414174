"""Contract-call builders."""

import pytest

from whispermarket.chain import ContractCallBuilder
from whispermarket.chain.contracts import BASE_CHAIN_ID, parse_ether
from whispermarket.errors import ValidationError

ADDRESS = "0x1234567890123456789012345678901234567890"


@pytest.fixture
def builder():
    return ContractCallBuilder(ADDRESS, paymaster_url="https://paymaster.example")


def test_parse_ether():
    assert parse_ether("0.01") == 10**16
    assert parse_ether("1") == 10**18
    assert parse_ether("0.000000000000000001") == 1
    for bad in ["-1", "abc", "0.0000000000000000001", "NaN", True]:
        with pytest.raises(ValidationError):
            parse_ether(bad)


def test_bet_call(builder):
    out = builder.bet("7", True, "0.5").to_dict()
    assert out["chainId"] == BASE_CHAIN_ID
    assert out["capabilities"] == {"paymasterService": {"url": "https://paymaster.example"}}
    (call,) = out["contracts"]
    assert call["address"] == ADDRESS
    assert call["functionName"] == "bet"
    assert call["args"] == ["7", True]
    assert call["value"] == str(5 * 10**17)
    assert any(entry["name"] == "bet" for entry in call["abi"])


def test_create_market_call(builder):
    out = builder.create_market("Q?", "D", 1_700_000_000, "misc", "whisper", ["0xA"]).to_dict()
    call = out["contracts"][0]
    assert call["functionName"] == "createMarket"
    assert call["args"] == ["Q?", "D", "1700000000", "misc", "2", ["0xA"]]
    assert "value" not in call
    with pytest.raises(ValidationError):
        builder.create_market("Q?", "D", 1, "misc", "secret")


def test_resolve_and_claim_calls():
    builder = ContractCallBuilder(ADDRESS, chain_id=84532)
    resolve = builder.resolve_market(3, False).to_dict()
    assert resolve["chainId"] == 84532
    assert "capabilities" not in resolve
    assert resolve["contracts"][0]["args"] == ["3", False]
    claim = builder.claim_winnings(3).to_dict()
    assert claim["contracts"][0]["functionName"] == "claimWinnings"


def test_market_id_must_be_uint256(builder):
    for bad in ["market_1_abc", -1, 2**256, True]:
        with pytest.raises(ValidationError):
            builder.claim_winnings(bad)
