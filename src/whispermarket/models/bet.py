"""Bet - immutable stake on one side of a market."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, field_serializer
from pydantic.alias_generators import to_camel

from whispermarket.errors import StoreError
from whispermarket.models.market import bool_field, parse_bool_field


class Bet(BaseModel):
    """Accepted bet. `outcome` True = Yes side."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    id: str
    market_id: str
    bettor: str
    outcome: bool
    amount: int = Field(..., gt=0)  # wei
    timestamp: int  # ms epoch

    @field_serializer("amount")
    def _amount_as_string(self, value: int) -> str:
        return str(value)

    def to_fields(self) -> dict[str, str]:
        return {
            "id": self.id,
            "marketId": self.market_id,
            "bettor": self.bettor,
            "outcome": bool_field(self.outcome),
            "amount": str(self.amount),
            "timestamp": str(self.timestamp),
        }

    @classmethod
    def from_fields(cls, fields: dict[str, str], bet_id: str | None = None) -> Bet:
        """Rebuild from a store field map; `bet_id` fills in records written without an id."""
        try:
            data: dict = dict(fields)
            data.setdefault("id", bet_id)
            data["outcome"] = parse_bool_field(data["outcome"])
            return cls.model_validate(data)
        except (KeyError, ValueError) as e:
            raise StoreError(f"Malformed bet record {bet_id or fields.get('id')!r}") from e


class Position(BaseModel):
    """A bettor's stake on each side of one market."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    market_id: str
    bettor: str
    yes_amount: int = 0
    no_amount: int = 0
    bet_count: int = 0
    resolved: bool = False
    winning: bool = False  # holds stake on the resolved outcome

    @field_serializer("yes_amount", "no_amount")
    def _amount_as_string(self, value: int) -> str:
        return str(value)
