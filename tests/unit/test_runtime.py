"""Tests for the runtime: signed dispatch, execution context and event flushing."""

from __future__ import annotations

import hashlib
import logging
from pathlib import Path

import pytest

from src.config_schema import AppConfig
from src.kitties.dna import generate_dna
from src.kitties.models import kitty_id_to_hex
from src.kitties.runtime import CallResult, ExecutionContext, Runtime

MISSING = bytes([0xEE]) * 32


class TestExecutionContext:
    """Context encoding and block progression."""

    def test_encode_layout(self) -> None:
        context = ExecutionContext(parent_hash=bytes([1]) * 32, block_number=2, extrinsic_index=3)

        encoded = context.encode()

        assert len(encoded) == 40
        assert encoded[:32] == bytes([1]) * 32
        assert encoded[32:36] == b"\x02\x00\x00\x00"
        assert encoded[36:] == b"\x03\x00\x00\x00"

    def test_next_block(self, runtime: Runtime) -> None:
        runtime.create_kitty("alice")
        sealed = runtime.context.encode()

        number = runtime.next_block()

        assert number == 1
        assert runtime.context.block_number == 1
        assert runtime.context.extrinsic_index == 0
        assert runtime.context.parent_hash == hashlib.blake2b(sealed, digest_size=32).digest()


class TestCalls:
    """Signed calls through the runtime."""

    def test_create_kitty(self, runtime: Runtime) -> None:
        result = runtime.create_kitty("alice")

        assert result.success
        assert result.events == ["created"]
        assert result.extrinsic_index == 0
        assert result.kitty_id == generate_dna(ExecutionContext().encode(), 0)
        assert runtime.list_owned("alice") == [result.kitty_id]
        assert runtime.count() == 1

    def test_each_call_consumes_an_index(self, runtime: Runtime) -> None:
        """Successful and failed calls both advance the extrinsic index"""
        first = runtime.create_kitty("alice")
        failed = runtime.transfer("alice", "bob", MISSING)
        second = runtime.create_kitty("alice")

        assert [first.extrinsic_index, failed.extrinsic_index, second.extrinsic_index] == [0, 1, 2]
        assert first.kitty_id != second.kitty_id
        assert runtime.context.extrinsic_index == 3

    def test_failed_call_result(self, runtime: Runtime) -> None:
        result = runtime.transfer("alice", "bob", MISSING)

        assert not result.success
        assert result.error_code == "not_found"
        assert result.error_category == "resource"
        assert result.retriable is False
        assert result.error_details == {"kitty_id": kitty_id_to_hex(MISSING)}
        assert result.events == []
        assert result.to_dict()["error_code"] == "not_found"

    def test_unsigned_call_rejected(self, runtime: Runtime) -> None:
        for origin in (None, ""):
            result = runtime.create_kitty(origin)
            assert not result.success
            assert result.error_code == "bad_origin"
        assert runtime.count() == 0

    def test_unsigned_buy_moves_nothing(self, runtime: Runtime) -> None:
        dna = runtime.create_kitty("alice").kitty_id
        assert dna is not None
        runtime.set_price("alice", dna, 10)

        result = runtime.buy_kitty(None, dna, 10)

        assert result.error_code == "bad_origin"
        assert runtime.get_kitty(dna).owner == "alice"
        assert runtime.balance_of("alice") == 1000

    def test_buy_kitty(self, runtime: Runtime) -> None:
        dna = runtime.create_kitty("alice").kitty_id
        assert dna is not None
        runtime.set_price("alice", dna, 100)

        result = runtime.buy_kitty("bob", dna, 150)

        assert result.success
        assert result.data == {"price": 100}
        assert result.events == ["transferred", "price_set", "sold"]
        assert runtime.balance_of("alice") == 1100
        assert runtime.balance_of("bob") == 900

    def test_payment_failure(self, runtime: Runtime) -> None:
        dna = runtime.create_kitty("alice").kitty_id
        assert dna is not None
        runtime.set_price("alice", dna, 100)

        result = runtime.buy_kitty("charlie", dna, 100)

        assert result.error_code == "insufficient_funds"
        assert result.error_category == "permission"
        assert runtime.balance_of("charlie") == 10
        assert runtime.get_kitty(dna).price == 100


class TestDispatch:
    """Dispatch by call name."""

    def test_dispatch_with_hex_ids(self, runtime: Runtime) -> None:
        created = runtime.dispatch("create_kitty", "alice")
        hex_id = created.data["kitty_id"]

        assert runtime.dispatch("set_price", "alice", hex_id, 100).success
        assert runtime.dispatch("transfer", "alice", "bob", hex_id).success
        bought = runtime.dispatch("buy_kitty", "alice", hex_id, 100)

        assert bought.success
        assert runtime.list_owned("alice") == [created.kitty_id]

    def test_unknown_call(self, runtime: Runtime) -> None:
        """Unknown calls are rejected without consuming an index"""
        result = runtime.dispatch("burn", "alice")

        assert not result.success
        assert result.error_code == "invalid_argument"
        assert result.error_category == "validation"
        assert result.error_details is not None
        assert "create_kitty" in result.error_details["available"]
        assert runtime.context.extrinsic_index == 0

    @pytest.mark.parametrize(
        "call,args",
        [
            ("transfer", ("bob", "0xzz")),
            ("set_price", ("0xabcd", 5)),
            ("buy_kitty", ("not hex", 5)),
        ],
    )
    def test_malformed_hex_id(self, runtime: Runtime, call: str, args: tuple[object, ...]) -> None:
        """Bad hex ids come back as a failed result without consuming an index"""
        result = runtime.dispatch(call, "alice", *args)

        assert not result.success
        assert result.error_code == "invalid_argument"
        assert result.error_category == "validation"
        assert result.error_details is not None
        assert result.error_details["kitty_id"] in args
        assert runtime.context.extrinsic_index == 0


class TestEventLog:
    """Committed events reach the event log, rolled back ones do not."""

    def test_committed_events_logged(self, runtime: Runtime) -> None:
        dna = runtime.create_kitty("alice").kitty_id
        assert dna is not None
        runtime.set_price("alice", dna, 100)
        runtime.buy_kitty("bob", dna, 100)

        entries = runtime.events()
        assert [e["event_type"] for e in entries] == [
            "created", "price_set", "transferred", "price_set", "sold",
        ]
        assert [e["extrinsic_index"] for e in entries] == [0, 1, 2, 2, 2]
        assert runtime.events("sold")[0]["price"] == 100

    def test_failed_calls_log_nothing(self, runtime: Runtime) -> None:
        dna = runtime.create_kitty("alice").kitty_id
        assert dna is not None
        runtime.set_price("alice", dna, 100)
        before = runtime.events()

        runtime.buy_kitty("bob", dna, 50)
        runtime.buy_kitty("charlie", dna, 100)
        runtime.transfer("bob", "alice", dna)

        assert runtime.events() == before


class TestFromConfig:
    """Building a runtime from validated config."""

    def test_genesis_and_limits(self, tmp_path: Path) -> None:
        events_file = tmp_path / "events.jsonl"
        config = AppConfig.model_validate({
            "kitties": {"max_owned": 2},
            "ledger": {"existential_deposit": 5},
            "genesis": {"balances": {"alice": 500}},
            "logging": {"events_file": str(events_file)},
        })

        runtime = Runtime.from_config(config)

        assert runtime.balance_of("alice") == 500
        assert runtime.ledger.existential_deposit == 5
        assert runtime.create_kitty("alice").success
        assert runtime.create_kitty("alice").success
        third = runtime.create_kitty("alice")
        assert third.error_code == "quota_exceeded"
        assert len(runtime.event_log.read_file()) == 2

    def test_applies_logging_level(self) -> None:
        kitties_logger = logging.getLogger("src.kitties")
        previous = kitties_logger.level
        try:
            Runtime.from_config(AppConfig.model_validate({"logging": {"level": "WARNING"}}))
            assert kitties_logger.level == logging.WARNING
        finally:
            kitties_logger.setLevel(previous)

    def test_default_runtime(self) -> None:
        runtime = Runtime()

        result = runtime.create_kitty("alice")

        assert isinstance(result, CallResult)
        assert result.success
