"""Explicit kitty state: registry plus owner index.

KittyState is the single object the operations layer mutates. It starts
empty at genesis; the runtime snapshots it around each call and the host
may persist it between calls through to_dict()/from_dict(), which
produce plain JSON-compatible structures (ids as hex strings).
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

from .constants import MAX_KITTY_COUNT, MAX_OWNED_KITTIES
from .models import AccountId, Kitty, KittyId, kitty_id_from_hex, kitty_id_to_hex
from .owner_index import OwnerIndex
from .registry import KittyRegistry

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StateSnapshot:
    """Opaque in-memory copy of a KittyState."""

    kitties: dict[KittyId, Kitty]
    count: int
    owned: dict[AccountId, list[KittyId]]


class KittyState:
    """Registry and owner index, kept consistent by the operations layer."""

    registry: KittyRegistry
    owners: OwnerIndex

    def __init__(
        self,
        max_owned: int = MAX_OWNED_KITTIES,
        max_count: int = MAX_KITTY_COUNT,
    ) -> None:
        self.registry = KittyRegistry(max_count=max_count)
        self.owners = OwnerIndex(max_owned=max_owned)

    def snapshot(self) -> StateSnapshot:
        kitties, count = self.registry.snapshot()
        return StateSnapshot(kitties=kitties, count=count, owned=self.owners.snapshot())

    def restore(self, snapshot: StateSnapshot) -> None:
        self.registry.restore((snapshot.kitties, snapshot.count))
        self.owners.restore(snapshot.owned)

    def check_integrity(self) -> list[str]:
        """Report every broken cross-structure invariant.

        Returns:
            Human-readable violations; empty when registry and owner
            index agree.
        """
        problems: list[str] = []
        if self.registry.count != len(self.registry):
            problems.append(
                f"count {self.registry.count} != {len(self.registry)} registered kitties"
            )

        listed_by: dict[KittyId, list[AccountId]] = {}
        for owner in self.owners.owners():
            ids = self.owners.list(owner)
            if len(set(ids)) != len(ids):
                problems.append(f"{owner} lists the same kitty more than once")
            for kitty_id in ids:
                listed_by.setdefault(kitty_id, []).append(owner)

        for kitty in self.registry:
            holders = listed_by.pop(kitty.id, [])
            hex_id = kitty_id_to_hex(kitty.id)
            if kitty.owner not in holders:
                problems.append(f"kitty {hex_id} missing from owner {kitty.owner}'s list")
            others = [h for h in holders if h != kitty.owner]
            if others:
                problems.append(f"kitty {hex_id} also listed under {sorted(others)}")

        for kitty_id, holders in listed_by.items():
            problems.append(
                f"unregistered kitty {kitty_id_to_hex(kitty_id)} listed under {sorted(holders)}"
            )

        if problems:
            logger.error("Kitty state integrity check failed: %s", problems)
        return problems

    def to_dict(self) -> dict[str, Any]:
        """Convert to a JSON-compatible dictionary."""
        return {
            "count": self.registry.count,
            "kitties": [kitty.to_dict() for kitty in self.registry],
            "owned": {
                owner: [kitty_id_to_hex(k) for k in self.owners.list(owner)]
                for owner in self.owners.owners()
            },
        }

    @classmethod
    def from_dict(
        cls,
        data: dict[str, Any],
        max_owned: int = MAX_OWNED_KITTIES,
        max_count: int = MAX_KITTY_COUNT,
    ) -> KittyState:
        """Rebuild state persisted with to_dict().

        Raises:
            ValueError: If a stored id is malformed, an owner list exceeds
                max_owned, the stored count disagrees with the records, or
                the owner lists disagree with the records
            DuplicateIdError: If two records share an id
            RegistryFullError: If there are more records than max_count
        """
        state = cls(max_owned=max_owned, max_count=max_count)
        kitties = [Kitty.from_dict(k) for k in data.get("kitties", [])]
        state.registry.load(kitties)
        stored_count = data.get("count", len(kitties))
        if stored_count != state.registry.count:
            raise ValueError(
                f"stored count {stored_count} does not match {state.registry.count} kitties"
            )
        state.owners.restore({
            owner: [kitty_id_from_hex(k) for k in ids]
            for owner, ids in data.get("owned", {}).items()
        })
        problems = state.check_integrity()
        if problems:
            raise ValueError(f"stored state is inconsistent: {problems}")
        return state
