"""Centralized constants for the kitties module.

Capacity limits and id sizes live here to avoid magic numbers
scattered across modules. Runtime values come from config; these are
the defaults used when no config is supplied.
"""

# Length of a kitty id in bytes (BLAKE2b-256 digest)
KITTY_ID_LENGTH = 32

# Maximum kitties a single account may hold
MAX_OWNED_KITTIES = 100

# Upper bound of the registry counter (u32 range)
MAX_KITTY_COUNT = 2**32 - 1

# Minimum balance an account must keep to exist in the ledger
DEFAULT_EXISTENTIAL_DEPOSIT = 1

# Hash of the block before genesis
GENESIS_PARENT_HASH = bytes(32)
