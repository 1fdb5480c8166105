"""End-to-end marketplace flows through the runtime.

Covers the full create → list → buy → resell cycle, failure atomicity
across calls and blocks, and a randomized walk that checks registry and
owner index never disagree.
"""

from __future__ import annotations

import random

import pytest

from src.config_schema import AppConfig
from src.kitties.ledger import Ledger
from src.kitties.runtime import Runtime
from src.kitties.state import KittyState

ACCOUNTS = ["alice", "bob", "carol", "dave"]


@pytest.fixture
def market() -> Runtime:
    config = AppConfig.model_validate({
        "genesis": {"balances": {"alice": 1000, "bob": 1000, "carol": 1000, "dave": 30}},
    })
    return Runtime.from_config(config)


class TestMarketplaceFlow:
    """Listing and buying between accounts."""

    def test_list_and_buy(self, market: Runtime) -> None:
        """A lists at 100, B buys offering up to 150 and pays exactly 100."""
        dna = market.create_kitty("alice").kitty_id
        assert dna is not None
        assert market.set_price("alice", dna, 100).success

        result = market.buy_kitty("bob", dna, 150)

        assert result.success
        assert market.get_kitty(dna).owner == "bob"
        assert market.get_kitty(dna).price is None
        assert market.balance_of("alice") == 1100
        assert market.balance_of("bob") == 900
        assert market.list_owned("alice") == []
        assert market.list_owned("bob") == [dna]

    def test_offer_below_price(self, market: Runtime) -> None:
        """B offering 50 for a kitty listed at 100 changes nothing."""
        dna = market.create_kitty("alice").kitty_id
        assert dna is not None
        market.set_price("alice", dna, 100)
        before = market.state.to_dict()

        result = market.buy_kitty("bob", dna, 50)

        assert result.error_code == "price_too_low"
        assert market.state.to_dict() == before
        assert market.balance_of("bob") == 1000

    def test_resale_across_blocks(self, market: Runtime) -> None:
        dna = market.create_kitty("alice").kitty_id
        assert dna is not None
        market.set_price("alice", dna, 100)
        market.next_block()

        market.buy_kitty("bob", dna, 100)
        market.set_price("bob", dna, 250)
        market.next_block()
        result = market.buy_kitty("carol", dna, 300)

        assert result.success
        assert result.block_number == 2
        assert market.get_kitty(dna).owner == "carol"
        assert market.balance_of("alice") == 1100
        assert market.balance_of("bob") == 1150
        assert market.balance_of("carol") == 750
        assert [e["block_number"] for e in market.events("sold")] == [1, 2]

    def test_gift_keeps_listing(self, market: Runtime) -> None:
        """A listed kitty given away stays listed at the same price for the new owner."""
        dna = market.create_kitty("alice").kitty_id
        assert dna is not None
        market.set_price("alice", dna, 20)

        market.transfer("alice", "dave", dna)
        result = market.buy_kitty("carol", dna, 20)

        assert result.success
        assert market.balance_of("dave") == 50

    def test_registry_full(self) -> None:
        runtime = Runtime(state=KittyState(max_count=3), ledger=Ledger())
        for _ in range(3):
            assert runtime.create_kitty("alice").success

        result = runtime.create_kitty("bob")

        assert result.error_code == "registry_full"
        assert runtime.count() == 3
        assert runtime.list_owned("bob") == []

    def test_total_issuance_conserved(self, market: Runtime) -> None:
        """Sales move balance between accounts without creating any."""
        total = market.ledger.total_issuance()
        ids = [market.create_kitty(a).kitty_id for a in ("alice", "bob")]
        market.set_price("alice", ids[0], 300)
        market.set_price("bob", ids[1], 200)

        market.buy_kitty("carol", ids[0], 300)
        market.buy_kitty("carol", ids[1], 200)

        assert market.ledger.total_issuance() == total


@pytest.mark.invariants
@pytest.mark.parametrize("seed", [1, 7, 42])
def test_random_calls_keep_state_consistent(seed: int) -> None:
    """Random mixes of calls, most of them failing, never break the state."""
    rng = random.Random(seed)
    runtime = Runtime(
        state=KittyState(max_owned=4, max_count=40),
        ledger=Ledger(existential_deposit=1),
    )
    for account in ACCOUNTS:
        runtime.ledger.set_balance(account, rng.randint(1, 200))
    total = runtime.ledger.total_issuance()

    for step in range(300):
        known = [k.id for k in runtime.state.registry]
        origin = rng.choice(ACCOUNTS + [None])
        choice = rng.random()
        if choice < 0.25 or not known:
            result = runtime.create_kitty(origin)
        elif choice < 0.5:
            result = runtime.transfer(origin, rng.choice(ACCOUNTS), rng.choice(known))
        elif choice < 0.75:
            price = rng.choice([None, 0, rng.randint(1, 150), -1])
            result = runtime.set_price(origin, rng.choice(known), price)
        else:
            result = runtime.buy_kitty(origin, rng.choice(known), rng.randint(0, 150))

        if not result.success:
            assert result.events == []
        if step % 25 == 0:
            runtime.next_block()

        assert runtime.state.check_integrity() == []
        assert runtime.ledger.total_issuance() <= total
        for account in ACCOUNTS:
            assert len(runtime.list_owned(account)) <= 4
