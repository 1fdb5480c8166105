"""Runtime - the host that sequences kitty calls.

The runtime owns the execution context (parent hash, block number,
extrinsic index), checks that each call is signed, runs the call inside
the transactional envelope and turns its outcome into a CallResult. It
is also the entropy source for new kitty ids.

Calls are applied strictly one at a time. Each dispatched call consumes
one extrinsic index whether it succeeds or fails; next_block() seals the
current block and starts the next one.

Usage:
    runtime = Runtime.from_config(get_validated_config())
    result = runtime.create_kitty("alice")
    dna = result.kitty_id
    runtime.set_price("alice", dna, 100)
    runtime.buy_kitty("bob", dna, max_price=150)
"""

from __future__ import annotations

import hashlib
import logging
from dataclasses import dataclass, field
from typing import Any, Callable, TYPE_CHECKING

from ..config import configure_logging
from .constants import GENESIS_PARENT_HASH
from .errors import BadOriginError, ErrorCode, KittyError, validation_error
from .events import PendingEvents
from .ledger import Ledger
from .logger import EventLogger
from .models import AccountId, Balance, Kitty, KittyId, kitty_id_from_hex, kitty_id_to_hex
from .operations import KittyOperations
from .state import KittyState
from .transaction import transactional

if TYPE_CHECKING:
    from ..config_schema import AppConfig

logger = logging.getLogger(__name__)

# Position of the kitty id among each call's arguments (after origin)
_KITTY_ID_ARG: dict[str, int] = {"transfer": 1, "set_price": 0, "buy_kitty": 0}


@dataclass
class ExecutionContext:
    """Position of the call currently being applied."""

    parent_hash: bytes = GENESIS_PARENT_HASH
    block_number: int = 0
    extrinsic_index: int = 0

    def encode(self) -> bytes:
        """parent_hash || block_number (u32 LE) || extrinsic_index (u32 LE)"""
        return (
            self.parent_hash
            + self.block_number.to_bytes(4, "little")
            + self.extrinsic_index.to_bytes(4, "little")
        )


@dataclass
class CallResult:
    """Outcome of a dispatched call.

    Error fields are only set on failure:
    - error_code: Machine-readable error code (e.g., "not_owner")
    - error_category: Error category (e.g., "permission")
    - retriable: Whether retrying the same call could succeed
    - error_details: Additional context for programmatic handling
    """

    success: bool
    message: str
    data: dict[str, Any] | None = None
    block_number: int = 0
    extrinsic_index: int = 0
    error_code: str | None = None
    error_category: str | None = None
    retriable: bool = False
    error_details: dict[str, Any] | None = None
    events: list[str] = field(default_factory=list)

    @property
    def kitty_id(self) -> KittyId | None:
        """Id of the kitty created by a successful create_kitty call."""
        if not self.data or "kitty_id" not in self.data:
            return None
        return kitty_id_from_hex(self.data["kitty_id"])

    @classmethod
    def from_error_response(
        cls, response: dict[str, object], context: ExecutionContext
    ) -> CallResult:
        details = response.get("details")
        return cls(
            success=False,
            message=str(response["error"]),
            block_number=context.block_number,
            extrinsic_index=context.extrinsic_index,
            error_code=str(response["code"]),
            error_category=str(response["category"]),
            retriable=bool(response["retriable"]),
            error_details=dict(details) if isinstance(details, dict) else None,
        )

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {
            "success": self.success,
            "message": self.message,
            "data": self.data,
            "block_number": self.block_number,
            "extrinsic_index": self.extrinsic_index,
        }
        if self.events:
            result["events"] = self.events
        if self.error_code is not None:
            result["error_code"] = self.error_code
            result["error_category"] = self.error_category
            result["retriable"] = self.retriable
        if self.error_details is not None:
            result["error_details"] = self.error_details
        return result


class Runtime:
    """Applies signed kitty calls against one state, ledger and event log."""

    state: KittyState
    ledger: Ledger
    event_log: EventLogger
    context: ExecutionContext
    pending: PendingEvents
    ops: KittyOperations

    def __init__(
        self,
        state: KittyState | None = None,
        ledger: Ledger | None = None,
        event_log: EventLogger | None = None,
        context: ExecutionContext | None = None,
    ) -> None:
        self.state = state if state is not None else KittyState()
        self.ledger = ledger if ledger is not None else Ledger()
        self.event_log = event_log if event_log is not None else EventLogger()
        self.context = context if context is not None else ExecutionContext()
        self.pending = PendingEvents()
        self.ops = KittyOperations(self.state, self.ledger, self, self.pending)

    @classmethod
    def from_config(cls, config: AppConfig) -> Runtime:
        """Build a runtime from validated config, seeding genesis balances.

        Also applies logging.level to the src.kitties loggers.
        """
        configure_logging(config)
        state = KittyState(
            max_owned=config.kitties.max_owned,
            max_count=config.kitties.max_count,
        )
        ledger = Ledger.from_config(
            config.ledger.model_dump(),
            genesis_balances=dict(config.genesis.balances),
        )
        event_log = EventLogger(
            output_file=config.logging.events_file,
            default_recent=config.logging.default_recent,
        )
        logger.info(
            "Runtime initialized: max_owned=%d, max_count=%d, %d genesis accounts",
            config.kitties.max_owned,
            config.kitties.max_count,
            len(config.genesis.balances),
        )
        return cls(state=state, ledger=ledger, event_log=event_log)

    # ===== EXECUTION CONTEXT =====

    def context_entropy(self) -> bytes:
        return self.context.encode()

    def next_block(self) -> int:
        """Seal the current block and start the next one.

        The new parent hash is the BLAKE2b-256 digest of the sealed
        block's parent hash, number and extrinsic count.

        Returns:
            The new block number
        """
        header = hashlib.blake2b(self.context.encode(), digest_size=32).digest()
        self.context = ExecutionContext(
            parent_hash=header,
            block_number=self.context.block_number + 1,
            extrinsic_index=0,
        )
        logger.info("Block %d started", self.context.block_number)
        return self.context.block_number

    # ===== DISPATCH =====

    def _ensure_signed(self, origin: AccountId | None) -> AccountId:
        if not origin:
            raise BadOriginError("call must be signed by an account")
        return origin

    def _apply(self, call: str, body: Callable[[], dict[str, Any] | None]) -> CallResult:
        """Run body in the envelope and consume one extrinsic index."""
        context = ExecutionContext(
            parent_hash=self.context.parent_hash,
            block_number=self.context.block_number,
            extrinsic_index=self.context.extrinsic_index,
        )
        try:
            try:
                with transactional(self.state, self.ledger, self.pending):
                    data = body()
            except KittyError as e:
                logger.debug("%s failed: %s", call, e.message)
                return CallResult.from_error_response(e.to_response(), context)

            committed = self.pending.drain()
            for event in committed:
                self.event_log.log_event(event, context.block_number, context.extrinsic_index)
            return CallResult(
                success=True,
                message=f"{call} applied",
                data=data,
                block_number=context.block_number,
                extrinsic_index=context.extrinsic_index,
                events=[event.event_type for event in committed],
            )
        finally:
            self.context.extrinsic_index += 1

    def dispatch(self, call: str, origin: AccountId | None, *args: Any) -> CallResult:
        """Dispatch a call by name ("create_kitty", "transfer", "set_price", "buy_kitty").

        Kitty ids may be given as bytes or hex strings. Unknown calls and
        malformed hex ids are rejected without consuming an extrinsic index.
        """
        handlers: dict[str, Callable[..., CallResult]] = {
            "create_kitty": self.create_kitty,
            "transfer": self.transfer,
            "set_price": self.set_price,
            "buy_kitty": self.buy_kitty,
        }
        handler = handlers.get(call)
        if handler is None:
            return CallResult.from_error_response(
                validation_error(
                    f"unknown call '{call}'",
                    code=ErrorCode.INVALID_ARGUMENT,
                    available=sorted(handlers),
                ),
                self.context,
            )
        position = _KITTY_ID_ARG.get(call)
        if position is not None and len(args) > position and isinstance(args[position], str):
            try:
                kitty_id = kitty_id_from_hex(args[position])
            except ValueError as e:
                return CallResult.from_error_response(
                    validation_error(
                        f"malformed kitty id: {e}",
                        code=ErrorCode.INVALID_ARGUMENT,
                        kitty_id=args[position],
                    ),
                    self.context,
                )
            args = args[:position] + (kitty_id,) + args[position + 1:]
        return handler(origin, *args)

    # ===== CALLS =====

    def create_kitty(self, origin: AccountId | None) -> CallResult:
        def body() -> dict[str, Any]:
            owner = self._ensure_signed(origin)
            return {"kitty_id": kitty_id_to_hex(self.ops.create(owner))}

        return self._apply("create_kitty", body)

    def transfer(self, origin: AccountId | None, to: AccountId, kitty_id: KittyId) -> CallResult:
        def body() -> None:
            self.ops.transfer(self._ensure_signed(origin), to, kitty_id)

        return self._apply("transfer", body)

    def set_price(
        self, origin: AccountId | None, kitty_id: KittyId, price: Balance | None
    ) -> CallResult:
        def body() -> None:
            self.ops.set_price(self._ensure_signed(origin), kitty_id, price)

        return self._apply("set_price", body)

    def buy_kitty(
        self, origin: AccountId | None, kitty_id: KittyId, max_price: Balance
    ) -> CallResult:
        def body() -> dict[str, Any]:
            price = self.ops.buy(self._ensure_signed(origin), kitty_id, max_price)
            return {"price": price}

        return self._apply("buy_kitty", body)

    # ===== QUERIES =====

    def get_kitty(self, kitty_id: KittyId) -> Kitty | None:
        return self.ops.get_kitty(kitty_id)

    def list_owned(self, owner: AccountId) -> list[KittyId]:
        return self.ops.list_owned(owner)

    def count(self) -> int:
        return self.ops.count()

    def balance_of(self, account: AccountId) -> Balance:
        return self.ledger.balance_of(account)

    def events(self, event_type: str | None = None) -> list[dict[str, Any]]:
        return self.event_log.entries(event_type)
