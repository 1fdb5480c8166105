"""Events emitted by kitty operations.

Operations emit into an EventSink. Inside the runtime the sink is a
PendingEvents buffer: events of a call are only forwarded to the event
log once the call commits, and are discarded when it rolls back.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, ClassVar, Protocol, Union

from .models import AccountId, Balance, KittyId, kitty_id_to_hex


@dataclass(frozen=True)
class Created:
    """A new kitty was created."""

    event_type: ClassVar[str] = "created"
    owner: AccountId
    kitty_id: KittyId

    def to_dict(self) -> dict[str, Any]:
        return {"owner": self.owner, "kitty_id": kitty_id_to_hex(self.kitty_id)}


@dataclass(frozen=True)
class Transferred:
    """A kitty changed hands."""

    event_type: ClassVar[str] = "transferred"
    from_account: AccountId
    to_account: AccountId
    kitty_id: KittyId

    def to_dict(self) -> dict[str, Any]:
        return {
            "from": self.from_account,
            "to": self.to_account,
            "kitty_id": kitty_id_to_hex(self.kitty_id),
        }


@dataclass(frozen=True)
class PriceSet:
    """A kitty was listed, relisted or delisted (new_price None)."""

    event_type: ClassVar[str] = "price_set"
    owner: AccountId
    kitty_id: KittyId
    new_price: Balance | None

    def to_dict(self) -> dict[str, Any]:
        return {
            "owner": self.owner,
            "kitty_id": kitty_id_to_hex(self.kitty_id),
            "new_price": self.new_price,
        }


@dataclass(frozen=True)
class Sold:
    """A kitty was bought at its asking price."""

    event_type: ClassVar[str] = "sold"
    buyer: AccountId
    kitty_id: KittyId
    price: Balance

    def to_dict(self) -> dict[str, Any]:
        return {
            "buyer": self.buyer,
            "kitty_id": kitty_id_to_hex(self.kitty_id),
            "price": self.price,
        }


KittyEvent = Union[Created, Transferred, PriceSet, Sold]


class EventSink(Protocol):
    """Fire-and-forget receiver of kitty events."""

    def emit(self, event: KittyEvent) -> None: ...


class PendingEvents:
    """Buffers the events of the call in progress."""

    _events: list[KittyEvent]

    def __init__(self) -> None:
        self._events = []

    def __len__(self) -> int:
        return len(self._events)

    def emit(self, event: KittyEvent) -> None:
        self._events.append(event)

    def mark(self) -> int:
        """Position to truncate back to on rollback."""
        return len(self._events)

    def truncate(self, mark: int) -> None:
        del self._events[mark:]

    def drain(self) -> list[KittyEvent]:
        """Return and clear all buffered events."""
        events, self._events = self._events, []
        return events
