"""Market - binary prediction question with Yes/No pools."""

from __future__ import annotations

import json
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_serializer
from pydantic.alias_generators import to_camel

from whispermarket.errors import StoreError

Visibility = Literal["public", "private", "whisper"]
VISIBILITIES: tuple[str, ...] = ("public", "private", "whisper")


def bool_field(value: bool) -> str:
    return "true" if value else "false"


def parse_bool_field(raw: str | bool) -> bool:
    """Parse a stored boolean ("true"/"false"; legacy records may hold real bools)."""
    if isinstance(raw, bool):
        return raw
    s = str(raw).strip().lower()
    if s in ("true", "1"):
        return True
    if s in ("false", "0"):
        return False
    raise ValueError(f"not a boolean: {raw!r}")


def _json_list(raw: str | list[str] | None) -> list[str] | None:
    if raw is None or isinstance(raw, list):
        return raw
    value = json.loads(raw)
    if not isinstance(value, list):
        raise ValueError(f"expected JSON array, got {raw!r}")
    return [str(v) for v in value]


class Market(BaseModel):
    """Binary market. Pool totals are integer base units (wei), serialized as strings."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    id: str
    question: str
    description: str
    creator: str
    created_at: int  # ms epoch
    expires_at: int  # ms epoch
    total_yes_amount: int = Field(0, ge=0)
    total_no_amount: int = Field(0, ge=0)
    resolved: bool = False
    outcome: bool | None = None  # set only once resolved
    category: str
    tags: list[str] = Field(default_factory=list)
    visibility: Visibility = "public"
    access_list: list[str] | None = None  # private markets only

    @field_serializer("total_yes_amount", "total_no_amount")
    def _amount_as_string(self, value: int) -> str:
        return str(value)

    def to_fields(self) -> dict[str, str]:
        """Flatten to the store's string field map."""
        fields = {
            "id": self.id,
            "question": self.question,
            "description": self.description,
            "creator": self.creator,
            "createdAt": str(self.created_at),
            "expiresAt": str(self.expires_at),
            "totalYesAmount": str(self.total_yes_amount),
            "totalNoAmount": str(self.total_no_amount),
            "resolved": bool_field(self.resolved),
            "category": self.category,
            "tags": json.dumps(self.tags),
            "visibility": self.visibility,
        }
        if self.outcome is not None:
            fields["outcome"] = bool_field(self.outcome)
        if self.access_list is not None:
            fields["accessList"] = json.dumps(self.access_list)
        return fields

    @classmethod
    def from_fields(cls, fields: dict[str, str]) -> Market:
        """Rebuild from a store field map. Raises StoreError on malformed records."""
        try:
            data: dict = dict(fields)
            data["resolved"] = parse_bool_field(data.get("resolved", "false"))
            if data.get("outcome") is not None:
                data["outcome"] = parse_bool_field(data["outcome"])
            data["tags"] = _json_list(data.get("tags")) or []
            data["accessList"] = _json_list(data.get("accessList"))
            return cls.model_validate(data)
        except ValueError as e:
            raise StoreError(f"Malformed market record {fields.get('id')!r}") from e

    @property
    def total_pool(self) -> int:
        return self.total_yes_amount + self.total_no_amount
