"""Tests for the TitleRegistry: minting, approval delegation and transfers."""

from __future__ import annotations

import pytest
from conftest import BUYER, METADATA, SELLER, STRANGER

from title_escrow.domain.enums import EventType
from title_escrow.domain.exceptions import NotFound, PreconditionFailed, Unauthorized
from title_escrow.infrastructure.ledger import Ledger
from title_escrow.services.title_registry import TitleRegistry


class TestMint:
    def test_ids_are_sequential_from_one(self, registry: TitleRegistry) -> None:
        assert registry.mint(SELLER, METADATA) == 1
        assert registry.mint(SELLER, METADATA + "/2") == 2
        assert registry.total_supply == 2

    def test_minted_title_owned_by_caller(self, registry: TitleRegistry) -> None:
        tid = registry.mint(SELLER, METADATA)
        assert registry.owner_of(tid) == SELLER
        assert registry.token_uri(tid) == METADATA
        assert registry.balance_of(SELLER) == 1

    def test_mint_event_carries_title_id(self, registry: TitleRegistry, ledger: Ledger) -> None:
        tid = registry.mint(SELLER, METADATA)
        evt = ledger.events.last(EventType.TITLE_MINTED)
        assert evt is not None
        assert evt.title_id == tid
        assert evt.data["metadata_locator"] == METADATA

    def test_only_minter_can_mint(self, registry: TitleRegistry) -> None:
        with pytest.raises(Unauthorized):
            registry.mint(STRANGER, METADATA)
        assert registry.total_supply == 0

    def test_open_registry_without_minter(self, ledger: Ledger) -> None:
        registry = TitleRegistry(ledger)
        tid = registry.mint(STRANGER, METADATA)
        assert registry.owner_of(tid) == STRANGER


class TestLookup:
    def test_owner_of_unknown_title(self, registry: TitleRegistry) -> None:
        with pytest.raises(NotFound) as exc_info:
            registry.owner_of(99)
        assert exc_info.value.code == "NOT_FOUND"

    def test_get_title_is_a_copy(self, registry: TitleRegistry) -> None:
        tid = registry.mint(SELLER, METADATA)
        record = registry.get_title(tid)
        record.owner = STRANGER
        assert registry.owner_of(tid) == SELLER


class TestApprove:
    def test_owner_approves_delegate(self, registry: TitleRegistry) -> None:
        tid = registry.mint(SELLER, METADATA)
        registry.approve(SELLER, tid, BUYER)
        assert registry.get_approved(tid) == BUYER

    def test_non_owner_cannot_approve(self, registry: TitleRegistry) -> None:
        tid = registry.mint(SELLER, METADATA)
        with pytest.raises(Unauthorized):
            registry.approve(STRANGER, tid, STRANGER)
        assert registry.get_approved(tid) is None

    def test_approve_none_clears(self, registry: TitleRegistry) -> None:
        tid = registry.mint(SELLER, METADATA)
        registry.approve(SELLER, tid, BUYER)
        registry.approve(SELLER, tid, None)
        assert registry.get_approved(tid) is None


class TestTransferFrom:
    def test_owner_transfers(self, registry: TitleRegistry) -> None:
        tid = registry.mint(SELLER, METADATA)
        registry.transfer_from(SELLER, SELLER, BUYER, tid)
        assert registry.owner_of(tid) == BUYER

    def test_delegate_transfers_once(self, registry: TitleRegistry) -> None:
        tid = registry.mint(SELLER, METADATA)
        registry.approve(SELLER, tid, STRANGER)
        registry.transfer_from(STRANGER, SELLER, BUYER, tid)
        assert registry.owner_of(tid) == BUYER
        assert registry.get_approved(tid) is None

        # The approval was consumed; the delegate cannot move it again.
        with pytest.raises(Unauthorized):
            registry.transfer_from(STRANGER, BUYER, STRANGER, tid)

    def test_stranger_cannot_transfer(self, registry: TitleRegistry) -> None:
        tid = registry.mint(SELLER, METADATA)
        with pytest.raises(Unauthorized):
            registry.transfer_from(STRANGER, SELLER, STRANGER, tid)
        assert registry.owner_of(tid) == SELLER

    def test_from_must_be_owner(self, registry: TitleRegistry) -> None:
        tid = registry.mint(SELLER, METADATA)
        with pytest.raises(Unauthorized):
            registry.transfer_from(BUYER, BUYER, STRANGER, tid)

    def test_unknown_title(self, registry: TitleRegistry) -> None:
        with pytest.raises(NotFound):
            registry.transfer_from(SELLER, SELLER, BUYER, 7)

    def test_empty_recipient_rejected(self, registry: TitleRegistry) -> None:
        tid = registry.mint(SELLER, METADATA)
        with pytest.raises(PreconditionFailed):
            registry.transfer_from(SELLER, SELLER, "", tid)

    def test_snapshot_restore(self, registry: TitleRegistry) -> None:
        tid = registry.mint(SELLER, METADATA)
        snap = registry.snapshot()
        registry.transfer_from(SELLER, SELLER, BUYER, tid)
        registry.mint(SELLER, METADATA)
        registry.restore(snap)
        assert registry.owner_of(tid) == SELLER
        assert registry.total_supply == 1
        assert registry.mint(SELLER, METADATA) == 2
