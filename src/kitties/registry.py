"""Kitty registry - primary id -> Kitty store with a checked counter.

The counter always equals the number of entries and is bounded by
max_count (the u32 range by default). insert() validates both the id and
the counter headroom before touching anything, so a failed insert leaves
the registry unchanged.

Usage:
    registry = KittyRegistry()
    registry.insert(Kitty(id=dna, owner="alice"))
    registry.get(dna)          # Kitty(...)
    registry.count             # 1

Thread-safety: This class is NOT thread-safe. Calls are expected to be
sequenced by the runtime, one at a time.
"""

from __future__ import annotations

from typing import Iterator

from .constants import MAX_KITTY_COUNT
from .errors import DuplicateIdError, InconsistentStateError, RegistryFullError
from .models import Kitty, KittyId, kitty_id_to_hex


class KittyRegistry:
    """Central map of every kitty that exists."""

    _kitties: dict[KittyId, Kitty]
    _count: int
    max_count: int

    def __init__(self, max_count: int = MAX_KITTY_COUNT) -> None:
        """Initialize an empty registry.

        Args:
            max_count: Largest value the counter may reach
        """
        self._kitties = {}
        self._count = 0
        self.max_count = max_count

    @property
    def count(self) -> int:
        return self._count

    def __len__(self) -> int:
        return len(self._kitties)

    def __iter__(self) -> Iterator[Kitty]:
        return iter(self._kitties.values())

    def contains(self, kitty_id: KittyId) -> bool:
        return kitty_id in self._kitties

    def has_headroom(self) -> bool:
        """Whether the counter can be incremented once more."""
        return self._count < self.max_count

    def get(self, kitty_id: KittyId) -> Kitty | None:
        """Look up a kitty. No side effects."""
        return self._kitties.get(kitty_id)

    def insert(self, kitty: Kitty) -> None:
        """Register a new kitty and bump the counter.

        Raises:
            DuplicateIdError: If the id is already registered
            RegistryFullError: If the counter would exceed max_count
        """
        if kitty.id in self._kitties:
            raise DuplicateIdError(
                f"kitty {kitty_id_to_hex(kitty.id)} already exists",
                kitty_id=kitty_id_to_hex(kitty.id),
            )
        if not self.has_headroom():
            raise RegistryFullError(
                f"registry is full ({self._count}/{self.max_count})",
                count=self._count,
                max_count=self.max_count,
            )
        self._kitties[kitty.id] = kitty
        self._count += 1

    def update(self, kitty: Kitty) -> None:
        """Overwrite an existing kitty.

        Raises:
            InconsistentStateError: If the kitty was never registered
        """
        if kitty.id not in self._kitties:
            raise InconsistentStateError(
                f"cannot update unknown kitty {kitty_id_to_hex(kitty.id)}",
                kitty_id=kitty_id_to_hex(kitty.id),
            )
        self._kitties[kitty.id] = kitty

    def ids(self) -> list[KittyId]:
        return list(self._kitties.keys())

    def snapshot(self) -> tuple[dict[KittyId, Kitty], int]:
        """Copy the registry contents. Kitty records are frozen, so a shallow copy suffices."""
        return dict(self._kitties), self._count

    def restore(self, snapshot: tuple[dict[KittyId, Kitty], int]) -> None:
        kitties, count = snapshot
        self._kitties = dict(kitties)
        self._count = count

    def load(self, kitties: list[Kitty]) -> None:
        """Replace the contents wholesale (used when restoring persisted state).

        Raises:
            DuplicateIdError: If two records share an id
            RegistryFullError: If there are more records than max_count allows
        """
        loaded: dict[KittyId, Kitty] = {}
        for kitty in kitties:
            if kitty.id in loaded:
                raise DuplicateIdError(
                    f"kitty {kitty_id_to_hex(kitty.id)} appears twice",
                    kitty_id=kitty_id_to_hex(kitty.id),
                )
            loaded[kitty.id] = kitty
        if len(loaded) > self.max_count:
            raise RegistryFullError(
                f"cannot load {len(loaded)} kitties (max {self.max_count})",
                count=len(loaded),
                max_count=self.max_count,
            )
        self._kitties = loaded
        self._count = len(loaded)
