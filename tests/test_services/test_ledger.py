"""Tests for the in-process ledger substrate and its atomic blocks."""

from __future__ import annotations

import pytest

from title_escrow.domain.enums import EventType
from title_escrow.domain.exceptions import (
    InsufficientFundsError,
    InvalidAmountError,
    TransferFailed,
)
from title_escrow.infrastructure.event_log import EventLog
from title_escrow.infrastructure.ledger import Ledger, new_address


class TestTransfers:
    def test_transfer_moves_value(self) -> None:
        ledger = Ledger()
        ledger.credit("alice", 10)
        ledger.transfer("alice", "bob", 4)
        assert ledger.balance_of("alice") == 6
        assert ledger.balance_of("bob") == 4

    def test_transfer_records_event(self) -> None:
        ledger = Ledger()
        ledger.credit("alice", 10)
        ledger.transfer("alice", "bob", 4)
        evt = ledger.events.last()
        assert evt is not None
        assert evt.event_type == EventType.VALUE_TRANSFERRED
        assert evt.data == {"to": "bob", "amount": 4}

    def test_insufficient_funds(self) -> None:
        ledger = Ledger()
        ledger.credit("alice", 3)
        with pytest.raises(InsufficientFundsError) as exc_info:
            ledger.transfer("alice", "bob", 4)
        assert exc_info.value.code == "INSUFFICIENT_FUNDS"
        assert ledger.balance_of("alice") == 3
        assert ledger.balance_of("bob") == 0

    @pytest.mark.parametrize("amount", [-1, 1.5, True, "3"])
    def test_invalid_amounts_rejected(self, amount: object) -> None:
        ledger = Ledger()
        ledger.credit("alice", 10)
        with pytest.raises(InvalidAmountError):
            ledger.transfer("alice", "bob", amount)  # type: ignore[arg-type]

    def test_zero_transfer_allowed(self) -> None:
        ledger = Ledger()
        ledger.transfer("alice", "bob", 0)
        assert ledger.balance_of("bob") == 0


class TestReceiveHooks:
    def test_recipient_can_reject(self) -> None:
        ledger = Ledger()
        ledger.credit("alice", 10)
        ledger.set_receive_hook("bob", lambda sender, amount: False)
        with pytest.raises(TransferFailed, match="rejected"):
            ledger.transfer("alice", "bob", 5)
        assert ledger.balance_of("alice") == 10
        assert len(ledger.events) == 0

    def test_hook_exception_is_a_failed_transfer(self) -> None:
        def explode(sender: str, amount: int) -> bool:
            raise RuntimeError("boom")

        ledger = Ledger()
        ledger.credit("alice", 10)
        ledger.set_receive_hook("bob", explode)
        with pytest.raises(TransferFailed, match="boom"):
            ledger.transfer("alice", "bob", 5)

    def test_reentrant_hook_conserves_value(self) -> None:
        ledger = Ledger()
        ledger.credit("alice", 10)

        def move_alice_funds(sender: str, amount: int) -> bool:
            ledger.transfer("alice", "carol", 5)
            return True

        ledger.set_receive_hook("bob", move_alice_funds)
        ledger.transfer("alice", "bob", 4)

        assert ledger.balance_of("alice") == 1
        assert ledger.balance_of("bob") == 4
        assert ledger.balance_of("carol") == 5
        assert sum(ledger.accounts().values()) == 10

    def test_reentrant_hook_draining_sender_fails_transfer(self) -> None:
        ledger = Ledger()
        ledger.credit("alice", 10)

        def drain_alice(sender: str, amount: int) -> bool:
            ledger.transfer("alice", "carol", 8)
            return True

        ledger.set_receive_hook("bob", drain_alice)
        with pytest.raises(InsufficientFundsError):
            ledger.transfer("alice", "bob", 4)

        assert ledger.balance_of("bob") == 0
        assert ledger.balance_of("alice") + ledger.balance_of("carol") == 10

    def test_hook_can_be_removed(self) -> None:
        ledger = Ledger()
        ledger.credit("alice", 10)
        ledger.set_receive_hook("bob", lambda sender, amount: False)
        ledger.set_receive_hook("bob", None)
        ledger.transfer("alice", "bob", 5)
        assert ledger.balance_of("bob") == 5


class _Counter:
    def __init__(self) -> None:
        self.value = 0

    def snapshot(self) -> int:
        return self.value

    def restore(self, snap: int) -> None:
        self.value = snap


class TestAtomic:
    def test_failure_restores_everything(self) -> None:
        ledger = Ledger()
        ledger.credit("alice", 10)
        counter = _Counter()

        with pytest.raises(InsufficientFundsError):
            with ledger.atomic(counter):
                ledger.transfer("alice", "bob", 6)
                counter.value = 42
                ledger.transfer("alice", "bob", 6)

        assert ledger.balance_of("alice") == 10
        assert ledger.balance_of("bob") == 0
        assert counter.value == 0
        assert len(ledger.events) == 0

    def test_success_commits(self) -> None:
        ledger = Ledger()
        ledger.credit("alice", 10)
        counter = _Counter()

        with ledger.atomic(counter):
            ledger.transfer("alice", "bob", 6)
            counter.value = 1

        assert ledger.balance_of("bob") == 6
        assert counter.value == 1


class TestEventLog:
    def test_sequence_and_filter(self) -> None:
        log = EventLog()
        log.record(EventType.TITLE_MINTED, actor="s", title_id=1)
        log.record(EventType.TITLE_MINTED, actor="s", title_id=2)
        log.record(EventType.TITLE_LISTED, actor="s", title_id=1)

        assert [e.sequence for e in log.all()] == [1, 2, 3]
        assert [e.event_type for e in log.by_title(1)] == [
            EventType.TITLE_MINTED,
            EventType.TITLE_LISTED,
        ]
        assert log.last(EventType.TITLE_MINTED).title_id == 2

    def test_restore_truncates(self) -> None:
        log = EventLog()
        log.record(EventType.TITLE_MINTED, actor="s", title_id=1)
        snap = log.snapshot()
        log.record(EventType.TITLE_MINTED, actor="s", title_id=2)
        log.restore(snap)
        assert len(log) == 1


def test_new_address_shape() -> None:
    address = new_address()
    assert address.startswith("0x")
    assert len(address) == 42
    assert new_address() != address
