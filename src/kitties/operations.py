"""Kitty operations - create, transfer, set_price and buy.

This is the only code that mutates KittyState. Every operation follows
validate-then-commit: all preconditions on the registry, both owner
lists and the buyer's funds are checked before the first write, so a
failed call raises a KittyError having changed nothing. Once validation
passes, the commit steps cannot fail.

buy() is the one operation with an external side effect (the payment).
The payment is the first mutation of the call, made only after every
ownership precondition passed; the runtime's transaction still wraps
the whole call so a payment can never stand without the ownership move.

Usage:
    ops = KittyOperations(KittyState(), ledger, entropy_source)
    dna = ops.create("alice")
    ops.set_price("alice", dna, 100)
    ops.buy("bob", dna, max_price=150)
    ops.get_kitty(dna).owner        # "bob"
"""

from __future__ import annotations

import logging

from .dna import DnaGenerator, EntropySource
from .errors import (
    DuplicateIdError,
    InconsistentStateError,
    InvalidArgumentError,
    NotForSaleError,
    NotFoundError,
    NotOwnerError,
    OwnerCapacityExceededError,
    PaymentFailureError,
    PriceTooLowError,
    RegistryFullError,
    SelfTransferError,
)
from .events import Created, EventSink, PendingEvents, PriceSet, Sold, Transferred
from .ledger import Currency, LedgerError
from .models import AccountId, Balance, Kitty, KittyId, kitty_id_to_hex
from .state import KittyState

logger = logging.getLogger(__name__)


class KittyOperations:
    """The four state transitions over a KittyState.

    Dependencies:
        state: Registry and owner index (exclusively mutated here)
        currency: Pays the seller during buy()
        entropy: Execution-context entropy for new kitty ids
        events: Receives Created/Transferred/PriceSet/Sold
    """

    state: KittyState
    currency: Currency
    dna: DnaGenerator
    events: EventSink

    def __init__(
        self,
        state: KittyState,
        currency: Currency,
        entropy: EntropySource,
        events: EventSink | None = None,
    ) -> None:
        self.state = state
        self.currency = currency
        self.dna = DnaGenerator(entropy)
        self.events = events if events is not None else PendingEvents()

    # ===== READ-ONLY =====

    def get_kitty(self, kitty_id: KittyId) -> Kitty | None:
        return self.state.registry.get(kitty_id)

    def list_owned(self, owner: AccountId) -> list[KittyId]:
        return self.state.owners.list(owner)

    def count(self) -> int:
        return self.state.registry.count

    # ===== CREATE =====

    def create(self, owner: AccountId) -> KittyId:
        """Create a kitty with a freshly generated id.

        Returns:
            The new kitty id

        Raises:
            DuplicateIdError: Generated id already registered
            RegistryFullError: Registry counter has no headroom
            OwnerCapacityExceededError: Owner already holds the maximum
        """
        kitty_id = self.dna.generate(self.state.registry.count)
        self.mint(owner, kitty_id)
        return kitty_id

    def mint(self, owner: AccountId, kitty_id: KittyId) -> None:
        """Register a kitty with a given id for owner.

        Raises:
            DuplicateIdError, RegistryFullError, OwnerCapacityExceededError
        """
        registry = self.state.registry
        owners = self.state.owners
        if registry.contains(kitty_id):
            raise DuplicateIdError(
                f"kitty {kitty_id_to_hex(kitty_id)} already exists",
                kitty_id=kitty_id_to_hex(kitty_id),
            )
        if not registry.has_headroom():
            raise RegistryFullError(
                f"registry is full ({registry.count}/{registry.max_count})",
                count=registry.count,
                max_count=registry.max_count,
            )
        if not owners.has_headroom(owner):
            raise OwnerCapacityExceededError(
                f"{owner} already owns {owners.max_owned} kitties",
                owner=owner,
                max_owned=owners.max_owned,
            )

        registry.insert(Kitty(id=kitty_id, owner=owner, price=None))
        owners.append(owner, kitty_id)
        logger.debug("Created kitty %s for %s", kitty_id_to_hex(kitty_id), owner)
        self.events.emit(Created(owner=owner, kitty_id=kitty_id))

    # ===== TRANSFER =====

    def transfer(self, from_account: AccountId, to_account: AccountId, kitty_id: KittyId) -> None:
        """Give a kitty to another account. The asking price is kept.

        Raises:
            SelfTransferError: from_account == to_account
            NotFoundError: Kitty does not exist
            NotOwnerError: from_account does not own the kitty
            InconsistentStateError: Kitty missing from the owner's list
            OwnerCapacityExceededError: Recipient already holds the maximum
        """
        kitty = self._check_transfer(from_account, to_account, kitty_id)
        self._move(kitty, to_account, kitty.price)
        self.events.emit(Transferred(from_account=from_account, to_account=to_account, kitty_id=kitty_id))

    def _check_transfer(
        self, from_account: AccountId, to_account: AccountId, kitty_id: KittyId
    ) -> Kitty:
        """Validate every transfer precondition. Returns the current record."""
        if from_account == to_account:
            raise SelfTransferError(
                f"{from_account} cannot transfer to itself",
                account=from_account,
            )
        kitty = self._require(kitty_id)
        if kitty.owner != from_account:
            raise NotOwnerError(
                f"{from_account} does not own kitty {kitty_id_to_hex(kitty_id)}",
                kitty_id=kitty_id_to_hex(kitty_id),
                caller=from_account,
            )
        if not self.state.owners.contains(from_account, kitty_id):
            logger.error(
                "Kitty %s owned by %s but absent from its owner list",
                kitty_id_to_hex(kitty_id),
                from_account,
            )
            raise InconsistentStateError(
                f"kitty {kitty_id_to_hex(kitty_id)} missing from {from_account}'s owner list",
                kitty_id=kitty_id_to_hex(kitty_id),
                owner=from_account,
            )
        if not self.state.owners.has_headroom(to_account):
            raise OwnerCapacityExceededError(
                f"{to_account} already owns {self.state.owners.max_owned} kitties",
                owner=to_account,
                max_owned=self.state.owners.max_owned,
            )
        return kitty

    def _move(self, kitty: Kitty, to_account: AccountId, price: Balance | None) -> None:
        """Commit an already validated ownership change."""
        self.state.registry.update(kitty.with_owner(to_account).with_price(price))
        self.state.owners.append(to_account, kitty.id)
        self.state.owners.remove(kitty.owner, kitty.id)
        logger.debug(
            "Moved kitty %s from %s to %s", kitty_id_to_hex(kitty.id), kitty.owner, to_account
        )

    # ===== SET PRICE =====

    def set_price(self, owner: AccountId, kitty_id: KittyId, price: Balance | None) -> None:
        """List a kitty for sale at price, or delist it with None.

        Raises:
            InvalidArgumentError: price is negative
            NotFoundError: Kitty does not exist
            NotOwnerError: owner does not own the kitty
        """
        if price is not None and price < 0:
            raise InvalidArgumentError(f"price cannot be negative: {price}", price=price)
        kitty = self._require(kitty_id)
        if kitty.owner != owner:
            raise NotOwnerError(
                f"{owner} does not own kitty {kitty_id_to_hex(kitty_id)}",
                kitty_id=kitty_id_to_hex(kitty_id),
                caller=owner,
            )
        self.state.registry.update(kitty.with_price(price))
        self.events.emit(PriceSet(owner=owner, kitty_id=kitty_id, new_price=price))

    # ===== BUY =====

    def buy(self, buyer: AccountId, kitty_id: KittyId, max_price: Balance) -> Balance:
        """Buy a listed kitty, paying its asking price to the current owner.

        On success the kitty belongs to buyer and is no longer for sale.

        Returns:
            The price paid

        Raises:
            NotFoundError: Kitty does not exist
            NotForSaleError: Kitty has no asking price
            PriceTooLowError: Asking price exceeds max_price
            SelfTransferError: Buyer already owns the kitty
            InconsistentStateError: Kitty missing from the seller's list
            OwnerCapacityExceededError: Buyer already holds the maximum
            PaymentFailureError: Ledger refused the payment
        """
        kitty = self._require(kitty_id)
        if kitty.price is None:
            raise NotForSaleError(
                f"kitty {kitty_id_to_hex(kitty_id)} is not for sale",
                kitty_id=kitty_id_to_hex(kitty_id),
            )
        price = kitty.price
        if price > max_price:
            raise PriceTooLowError(
                f"asking price {price} exceeds max price {max_price}",
                price=price,
                max_price=max_price,
            )
        seller = kitty.owner
        self._check_transfer(seller, buyer, kitty_id)

        try:
            self.currency.transfer(buyer, seller, price, preserve=True)
        except LedgerError as e:
            logger.warning("Payment of %d from %s to %s refused: %s", price, buyer, seller, e)
            raise PaymentFailureError(
                f"payment of {price} from {buyer} failed: {e}",
                buyer=buyer,
                seller=seller,
                price=price,
            ) from e

        self._move(kitty, buyer, None)
        self.events.emit(Transferred(from_account=seller, to_account=buyer, kitty_id=kitty_id))
        self.events.emit(PriceSet(owner=buyer, kitty_id=kitty_id, new_price=None))
        self.events.emit(Sold(buyer=buyer, kitty_id=kitty_id, price=price))
        logger.info("Kitty %s sold by %s to %s for %d", kitty_id_to_hex(kitty_id), seller, buyer, price)
        return price

    def _require(self, kitty_id: KittyId) -> Kitty:
        kitty = self.state.registry.get(kitty_id)
        if kitty is None:
            raise NotFoundError(
                f"kitty {kitty_id_to_hex(kitty_id)} does not exist",
                kitty_id=kitty_id_to_hex(kitty_id),
            )
        return kitty
