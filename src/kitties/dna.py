"""Kitty id generation.

A kitty id ("dna") is the BLAKE2b-256 digest of the execution context
entropy followed by the current registry count:

    blake2b(entropy || count.to_bytes(4, "little"), digest_size=32)

Two calls that differ in context (block, extrinsic index) or in count
yield different ids with overwhelming probability. Nothing here checks
uniqueness - the operations layer still rejects collisions with
DuplicateIdError before committing.
"""

from __future__ import annotations

import hashlib
from typing import Protocol

from .constants import KITTY_ID_LENGTH
from .models import KittyId


class EntropySource(Protocol):
    """Supplies bytes unique to the current execution step."""

    def context_entropy(self) -> bytes: ...


def encode_count(count: int) -> bytes:
    """Encode the registry count as a little-endian u32."""
    return count.to_bytes(4, "little")


def generate_dna(entropy: bytes, count: int) -> KittyId:
    """Hash context entropy and count into a 32-byte kitty id.

    Args:
        entropy: Opaque bytes unique to the execution step
        count: Current number of registered kitties

    Returns:
        32-byte digest
    """
    hasher = hashlib.blake2b(digest_size=KITTY_ID_LENGTH)
    hasher.update(entropy)
    hasher.update(encode_count(count))
    return hasher.digest()


class DnaGenerator:
    """Binds an entropy source to generate_dna()."""

    source: EntropySource

    def __init__(self, source: EntropySource) -> None:
        self.source = source

    def generate(self, count: int) -> KittyId:
        return generate_dna(self.source.context_entropy(), count)
