"""Owner index - per-account bounded list of owned kitty ids.

Each account maps to a BoundedIdList that refuses to grow past its
capacity. Capacity is checked before the write, never discovered after
it. Removal swaps the last element into the vacated slot, so list order
carries no meaning.

Usage:
    index = OwnerIndex(max_owned=100)
    index.append("alice", dna)
    index.list("alice")            # [dna]
    index.remove("alice", dna)
    index.list("alice")            # []
"""

from __future__ import annotations

from typing import Iterator

from .constants import MAX_OWNED_KITTIES
from .errors import NotFoundError, OwnerCapacityExceededError
from .models import AccountId, KittyId, kitty_id_to_hex


class BoundedIdList:
    """Fixed-capacity list of kitty ids."""

    capacity: int
    _items: list[KittyId]

    def __init__(self, capacity: int, items: list[KittyId] | None = None) -> None:
        if items is not None and len(items) > capacity:
            raise ValueError(f"{len(items)} items exceed capacity {capacity}")
        self.capacity = capacity
        self._items = list(items) if items else []

    def __len__(self) -> int:
        return len(self._items)

    def __iter__(self) -> Iterator[KittyId]:
        return iter(self._items)

    def __contains__(self, kitty_id: object) -> bool:
        return kitty_id in self._items

    def is_full(self) -> bool:
        return len(self._items) >= self.capacity

    def try_push(self, kitty_id: KittyId) -> bool:
        """Append if there is room. Returns False (and changes nothing) when full."""
        if self.is_full():
            return False
        self._items.append(kitty_id)
        return True

    def position(self, kitty_id: KittyId) -> int | None:
        for i, item in enumerate(self._items):
            if item == kitty_id:
                return i
        return None

    def swap_remove(self, index: int) -> KittyId:
        """Remove the item at index by moving the last item into its place."""
        removed = self._items[index]
        last = self._items.pop()
        if index < len(self._items):
            self._items[index] = last
        return removed

    def to_list(self) -> list[KittyId]:
        return list(self._items)


class OwnerIndex:
    """Maps each account to the kitties it currently holds.

    Accounts that never owned anything and accounts that owned and then
    gave everything away look the same: list() returns [].
    """

    max_owned: int
    _owned: dict[AccountId, BoundedIdList]

    def __init__(self, max_owned: int = MAX_OWNED_KITTIES) -> None:
        """Initialize an empty index.

        Args:
            max_owned: Capacity of each account's list
        """
        self.max_owned = max_owned
        self._owned = {}

    def _get(self, owner: AccountId) -> BoundedIdList | None:
        return self._owned.get(owner)

    def owners(self) -> list[AccountId]:
        """Accounts that currently hold at least one kitty."""
        return [owner for owner, ids in self._owned.items() if len(ids) > 0]

    def list(self, owner: AccountId) -> list[KittyId]:
        """Ids held by owner (a copy). Empty for unknown accounts."""
        ids = self._get(owner)
        return ids.to_list() if ids is not None else []

    def count_for(self, owner: AccountId) -> int:
        ids = self._get(owner)
        return len(ids) if ids is not None else 0

    def contains(self, owner: AccountId, kitty_id: KittyId) -> bool:
        ids = self._get(owner)
        return ids is not None and kitty_id in ids

    def has_headroom(self, owner: AccountId) -> bool:
        return self.count_for(owner) < self.max_owned

    def append(self, owner: AccountId, kitty_id: KittyId) -> None:
        """Add kitty_id to owner's list.

        Raises:
            OwnerCapacityExceededError: If the list is already at capacity
        """
        ids = self._get(owner)
        if ids is None:
            ids = BoundedIdList(self.max_owned)
            self._owned[owner] = ids
        if not ids.try_push(kitty_id):
            raise OwnerCapacityExceededError(
                f"{owner} already owns {len(ids)} kitties (max {self.max_owned})",
                owner=owner,
                max_owned=self.max_owned,
            )

    def remove(self, owner: AccountId, kitty_id: KittyId) -> None:
        """Remove kitty_id from owner's list (swap-with-last).

        Raises:
            NotFoundError: If owner does not list kitty_id
        """
        ids = self._get(owner)
        index = ids.position(kitty_id) if ids is not None else None
        if ids is None or index is None:
            raise NotFoundError(
                f"{owner} does not list kitty {kitty_id_to_hex(kitty_id)}",
                owner=owner,
                kitty_id=kitty_id_to_hex(kitty_id),
            )
        ids.swap_remove(index)
        if len(ids) == 0:
            del self._owned[owner]

    def snapshot(self) -> dict[AccountId, list[KittyId]]:
        return {owner: ids.to_list() for owner, ids in self._owned.items()}

    def restore(self, snapshot: dict[AccountId, list[KittyId]]) -> None:
        self._owned = {
            owner: BoundedIdList(self.max_owned, ids)
            for owner, ids in snapshot.items()
            if ids
        }
