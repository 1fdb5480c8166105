"""Kitty record and id helpers."""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Any

from .constants import KITTY_ID_LENGTH

KittyId = bytes
AccountId = str
Balance = int


def kitty_id_to_hex(kitty_id: KittyId) -> str:
    """Render a kitty id as a 0x-prefixed hex string."""
    return "0x" + kitty_id.hex()


def kitty_id_from_hex(value: str) -> KittyId:
    """Parse a hex kitty id (with or without 0x prefix).

    Raises:
        ValueError: If the value is not valid hex or has the wrong length
    """
    raw = value[2:] if value.startswith("0x") else value
    kitty_id = bytes.fromhex(raw)
    if len(kitty_id) != KITTY_ID_LENGTH:
        raise ValueError(
            f"kitty id must be {KITTY_ID_LENGTH} bytes, got {len(kitty_id)}"
        )
    return kitty_id


@dataclass(frozen=True)
class Kitty:
    """A uniquely identified kitty.

    Frozen so that registry snapshots can share records safely; use
    with_owner()/with_price() to derive updated copies.

    - id: 32-byte identifier, immutable after creation
    - owner: account currently holding the kitty
    - price: None when not for sale, otherwise the asking price
    """

    id: KittyId
    owner: AccountId
    price: Balance | None = None

    @property
    def for_sale(self) -> bool:
        return self.price is not None

    def with_owner(self, owner: AccountId) -> Kitty:
        return replace(self, owner=owner)

    def with_price(self, price: Balance | None) -> Kitty:
        return replace(self, price=price)

    def to_dict(self) -> dict[str, Any]:
        """Convert to a JSON-compatible dictionary."""
        return {
            "id": kitty_id_to_hex(self.id),
            "owner": self.owner,
            "price": self.price,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Kitty:
        price = data.get("price")
        return cls(
            id=kitty_id_from_hex(data["id"]),
            owner=data["owner"],
            price=int(price) if price is not None else None,
        )
