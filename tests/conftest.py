"""Pytest fixtures for kitty registry tests.

Common fixtures for testing kitty state, the ledger and the runtime.
"""

from __future__ import annotations

# Load environment variables from .env before any tests run
# (e.g. KITTIES_CONFIG pointing at an alternate config file)
from dotenv import load_dotenv

load_dotenv()

from typing import Iterator

import pytest

from src import config as config_module
from src.kitties.events import PendingEvents
from src.kitties.ledger import Ledger
from src.kitties.operations import KittyOperations
from src.kitties.runtime import Runtime
from src.kitties.state import KittyState

ALICE = "alice"
BOB = "bob"
CHARLIE = "charlie"


class FixedEntropy:
    """Entropy source whose bytes the test controls."""

    def __init__(self, value: bytes = b"\x00" * 40) -> None:
        self.value = value

    def context_entropy(self) -> bytes:
        return self.value


def pytest_configure(config: pytest.Config) -> None:
    """Register custom markers."""
    config.addinivalue_line(
        "markers",
        "invariants: randomized call sequences checked against state invariants",
    )


@pytest.fixture(autouse=True)
def reset_global_config() -> Iterator[None]:
    """Make every test start and end without a cached config."""
    config_module.reset_config()
    yield
    config_module.reset_config()


@pytest.fixture
def state() -> KittyState:
    """Empty kitty state with default limits."""
    return KittyState()


@pytest.fixture
def ledger() -> Ledger:
    """Ledger with funded test accounts.

    - alice: 1000
    - bob: 1000
    - charlie: 10
    """
    ledger = Ledger(existential_deposit=1)
    ledger.set_balance(ALICE, 1000)
    ledger.set_balance(BOB, 1000)
    ledger.set_balance(CHARLIE, 10)
    return ledger


@pytest.fixture
def entropy() -> FixedEntropy:
    return FixedEntropy()


@pytest.fixture
def events() -> PendingEvents:
    return PendingEvents()


@pytest.fixture
def ops(
    state: KittyState, ledger: Ledger, entropy: FixedEntropy, events: PendingEvents
) -> KittyOperations:
    """Operations layer over the state and ledger fixtures."""
    return KittyOperations(state, ledger, entropy, events)


@pytest.fixture
def runtime(state: KittyState, ledger: Ledger) -> Runtime:
    """Runtime over the state and ledger fixtures."""
    return Runtime(state=state, ledger=ledger)
