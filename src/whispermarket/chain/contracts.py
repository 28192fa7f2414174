"""Prediction-market contract ABI and transaction-parameter builders.

Nothing here talks to a chain: builders return the call bundle a wallet
(or paymaster-enabled client) submits on the user's behalf.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation
from typing import Any

from whispermarket.errors import ValidationError

BASE_CHAIN_ID = 8453
ETHER_DECIMALS = 18

VISIBILITY_CODES: dict[str, int] = {"public": 0, "private": 1, "whisper": 2}

PREDICTION_MARKET_ABI: list[dict[str, Any]] = [
    {
        "inputs": [
            {"name": "marketId", "type": "uint256"},
            {"name": "outcome", "type": "bool"},
        ],
        "name": "bet",
        "outputs": [],
        "type": "function",
        "stateMutability": "payable",
    },
    {
        "inputs": [
            {"name": "question", "type": "string"},
            {"name": "description", "type": "string"},
            {"name": "expiresAt", "type": "uint256"},
            {"name": "category", "type": "string"},
            {"name": "visibility", "type": "uint8"},  # 0 = public, 1 = private, 2 = whisper
            {"name": "accessList", "type": "address[]"},
        ],
        "name": "createMarket",
        "outputs": [{"name": "marketId", "type": "uint256"}],
        "type": "function",
        "stateMutability": "nonpayable",
    },
    {
        "inputs": [
            {"name": "marketId", "type": "uint256"},
            {"name": "outcome", "type": "bool"},
        ],
        "name": "resolveMarket",
        "outputs": [],
        "type": "function",
        "stateMutability": "nonpayable",
    },
    {
        "inputs": [{"name": "marketId", "type": "uint256"}],
        "name": "claimWinnings",
        "outputs": [],
        "type": "function",
        "stateMutability": "nonpayable",
    },
    {
        "inputs": [{"name": "marketId", "type": "uint256"}],
        "name": "getMarket",
        "outputs": [
            {
                "components": [
                    {"name": "id", "type": "uint256"},
                    {"name": "question", "type": "string"},
                    {"name": "description", "type": "string"},
                    {"name": "creator", "type": "address"},
                    {"name": "createdAt", "type": "uint256"},
                    {"name": "expiresAt", "type": "uint256"},
                    {"name": "totalYesAmount", "type": "uint256"},
                    {"name": "totalNoAmount", "type": "uint256"},
                    {"name": "resolved", "type": "bool"},
                    {"name": "outcome", "type": "bool"},
                    {"name": "category", "type": "string"},
                    {"name": "visibility", "type": "uint8"},
                ],
                "name": "market",
                "type": "tuple",
            }
        ],
        "type": "function",
        "stateMutability": "view",
    },
    {
        "inputs": [],
        "name": "getMarkets",
        "outputs": [{"name": "marketIds", "type": "uint256[]"}],
        "type": "function",
        "stateMutability": "view",
    },
]


def parse_ether(amount: str | int | Decimal) -> int:
    """Ether amount ("0.01") to wei. Rejects negatives and more than 18 decimals."""
    if isinstance(amount, bool):
        raise ValidationError(f"Invalid ether amount: {amount!r}")
    try:
        value = Decimal(str(amount).strip())
    except InvalidOperation as e:
        raise ValidationError(f"Invalid ether amount: {amount!r}") from e
    if not value.is_finite() or value < 0:
        raise ValidationError(f"Invalid ether amount: {amount!r}")
    wei = value.scaleb(ETHER_DECIMALS)
    if wei != wei.to_integral_value():
        raise ValidationError(f"Ether amount has more than {ETHER_DECIMALS} decimals: {amount!r}")
    return int(wei)


def visibility_code(visibility: str) -> int:
    try:
        return VISIBILITY_CODES[visibility]
    except KeyError:
        raise ValidationError(f"Invalid visibility {visibility!r}") from None


def _uint256(value: int | str, name: str) -> int:
    if isinstance(value, bool):
        raise ValidationError(f"{name} must be an unsigned integer")
    try:
        n = int(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{name} must be an unsigned integer") from None
    if n < 0 or n >= 2**256:
        raise ValidationError(f"{name} out of uint256 range")
    return n


@dataclass
class ContractCall:
    """One contract write, as a wallet transaction request."""

    chain_id: int
    address: str
    function_name: str
    args: list[Any]
    value: int | None = None  # wei sent with the call
    paymaster_url: str | None = None
    abi: list[dict[str, Any]] = field(default_factory=lambda: PREDICTION_MARKET_ABI, repr=False)

    def to_dict(self) -> dict[str, Any]:
        """JSON-safe form; integers as decimal strings so uint256 survives JS clients."""

        def _enc(v: Any) -> Any:
            if isinstance(v, bool):
                return v
            if isinstance(v, int):
                return str(v)
            if isinstance(v, list):
                return [_enc(x) for x in v]
            return v

        contract: dict[str, Any] = {
            "address": self.address,
            "abi": self.abi,
            "functionName": self.function_name,
            "args": _enc(self.args),
        }
        if self.value is not None:
            contract["value"] = str(self.value)
        out: dict[str, Any] = {"chainId": self.chain_id, "contracts": [contract]}
        if self.paymaster_url:
            out["capabilities"] = {"paymasterService": {"url": self.paymaster_url}}
        return out


class ContractCallBuilder:
    """Builds calls against one deployed prediction-market contract."""

    def __init__(
        self,
        address: str,
        chain_id: int = BASE_CHAIN_ID,
        paymaster_url: str | None = None,
    ) -> None:
        self.address = address
        self.chain_id = chain_id
        self.paymaster_url = paymaster_url

    def _call(self, function_name: str, args: list[Any], value: int | None = None) -> ContractCall:
        return ContractCall(
            chain_id=self.chain_id,
            address=self.address,
            function_name=function_name,
            args=args,
            value=value,
            paymaster_url=self.paymaster_url,
        )

    def bet(self, market_id: int | str, outcome: bool, amount_ether: str) -> ContractCall:
        return self._call(
            "bet",
            [_uint256(market_id, "marketId"), bool(outcome)],
            value=parse_ether(amount_ether),
        )

    def create_market(
        self,
        question: str,
        description: str,
        expires_at: int,
        category: str,
        visibility: str,
        access_list: list[str] | None = None,
    ) -> ContractCall:
        return self._call(
            "createMarket",
            [
                question,
                description,
                _uint256(expires_at, "expiresAt"),
                category,
                visibility_code(visibility),
                list(access_list or []),
            ],
        )

    def resolve_market(self, market_id: int | str, outcome: bool) -> ContractCall:
        return self._call("resolveMarket", [_uint256(market_id, "marketId"), bool(outcome)])

    def claim_winnings(self, market_id: int | str) -> ContractCall:
        return self._call("claimWinnings", [_uint256(market_id, "marketId")])
