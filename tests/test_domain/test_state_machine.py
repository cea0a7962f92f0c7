"""Tests for the ListingStateMachine domain guard.

These tests verify that:
    1. All valid transitions are allowed.
    2. All invalid transitions are blocked.
    3. The convenience function validate_transition works.
    4. Relisting after settlement or cancellation is possible.
"""

from __future__ import annotations

import pytest
from statemachine.exceptions import TransitionNotAllowed

from title_escrow.domain.state_machine import (
    ListingStateMachine,
    validate_transition,
)


class TestHappyPath:
    """Test the sale lifecycle: UNLISTED -> FINALIZED."""

    def test_full_lifecycle(self) -> None:
        sm = ListingStateMachine("UNLISTED")
        assert sm.status == "UNLISTED"

        sm.list_title()
        assert sm.status == "LISTED"

        sm.finalize_sale()
        assert sm.status == "FINALIZED"


class TestCancelPath:
    def test_cancel_from_listed(self) -> None:
        sm = ListingStateMachine("LISTED")
        sm.cancel_sale()
        assert sm.status == "CANCELLED"

    def test_relist_after_cancel(self) -> None:
        sm = ListingStateMachine("CANCELLED")
        sm.list_title()
        assert sm.status == "LISTED"

    def test_relist_after_finalize(self) -> None:
        sm = ListingStateMachine("FINALIZED")
        sm.list_title()
        assert sm.status == "LISTED"


class TestIllegalTransitions:
    """Verify that illegal transitions raise TransitionNotAllowed."""

    def test_unlisted_to_finalized(self) -> None:
        sm = ListingStateMachine("UNLISTED")
        with pytest.raises(TransitionNotAllowed):
            sm.finalize_sale()

    def test_unlisted_cannot_cancel(self) -> None:
        sm = ListingStateMachine("UNLISTED")
        with pytest.raises(TransitionNotAllowed):
            sm.cancel_sale()

    def test_listed_cannot_be_listed_again(self) -> None:
        sm = ListingStateMachine("LISTED")
        with pytest.raises(TransitionNotAllowed):
            sm.list_title()

    def test_finalized_cannot_be_cancelled(self) -> None:
        sm = ListingStateMachine("FINALIZED")
        with pytest.raises(TransitionNotAllowed):
            sm.cancel_sale()

    def test_cancelled_cannot_be_finalized(self) -> None:
        sm = ListingStateMachine("CANCELLED")
        with pytest.raises(TransitionNotAllowed):
            sm.finalize_sale()


class TestAllowedEvents:
    def test_unlisted_allowed(self) -> None:
        assert ListingStateMachine("UNLISTED").get_allowed_events() == ["list_title"]

    def test_listed_allowed(self) -> None:
        allowed = ListingStateMachine("LISTED").get_allowed_events()
        assert set(allowed) == {"finalize_sale", "cancel_sale"}

    def test_settled_states_only_allow_relisting(self) -> None:
        assert ListingStateMachine("FINALIZED").get_allowed_events() == ["list_title"]
        assert ListingStateMachine("CANCELLED").get_allowed_events() == ["list_title"]


class TestValidateTransitionFunction:
    def test_valid_transition(self) -> None:
        assert validate_transition("LISTED", "finalize_sale") == "FINALIZED"

    def test_illegal_transition(self) -> None:
        with pytest.raises(TransitionNotAllowed):
            validate_transition("UNLISTED", "finalize_sale")

    def test_invalid_event_name(self) -> None:
        with pytest.raises(ValueError, match="Unknown event"):
            validate_transition("LISTED", "nonexistent_event")

    def test_invalid_status(self) -> None:
        with pytest.raises(ValueError, match="Unknown status"):
            ListingStateMachine("INVALID_STATUS")
