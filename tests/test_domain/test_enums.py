"""Tests for domain enumerations and records."""

from __future__ import annotations

import pytest

from title_escrow.domain.enums import APPROVING_ROLES, EventType, ListingStatus, Role
from title_escrow.domain.models import EscrowRoles, Listing


class TestListingStatus:
    def test_all_statuses_exist(self) -> None:
        expected = {"UNLISTED", "LISTED", "FINALIZED", "CANCELLED"}
        assert {s.value for s in ListingStatus} == expected

    def test_status_is_str_enum(self) -> None:
        assert isinstance(ListingStatus.LISTED, str)
        assert ListingStatus.LISTED == "LISTED"


class TestRoles:
    def test_approving_roles_exclude_inspector(self) -> None:
        assert set(APPROVING_ROLES) == {Role.BUYER, Role.SELLER, Role.LENDER}

    def test_event_types_are_str_enum(self) -> None:
        # 3 registry + 1 value + 6 escrow lifecycle
        assert len(EventType) == 10
        assert EventType.SALE_FINALIZED == "SALE_FINALIZED"


class TestEscrowRoles:
    def test_roles_are_immutable(self) -> None:
        roles = EscrowRoles(seller="s", inspector="i", lender="l")
        with pytest.raises(AttributeError):
            roles.seller = "someone-else"  # type: ignore[misc]

    def test_empty_role_rejected(self) -> None:
        with pytest.raises(ValueError, match="inspector"):
            EscrowRoles(seller="s", inspector="", lender="l")


class TestListing:
    def test_new_listing_defaults(self) -> None:
        listing = Listing(title_id=1, buyer="b", purchase_price=10, escrow_amount=5)
        assert listing.is_listed is True
        assert listing.deposit_balance == 0
        assert listing.inspection_passed is False
        assert listing.approvals == {Role.BUYER: False, Role.SELLER: False, Role.LENDER: False}
        assert listing.fully_approved is False

    def test_fully_approved(self) -> None:
        listing = Listing(title_id=1, buyer="b", purchase_price=10, escrow_amount=5)
        for role in APPROVING_ROLES:
            listing.approvals[role] = True
        assert listing.fully_approved is True
