"""Listing State Machine Guard.

Uses python-statemachine to enforce legal listing transitions at the domain
level. Whatever the API or a misbehaving party attempts, an illegal
transition (e.g., UNLISTED -> FINALIZED) raises TransitionNotAllowed.

The state machine is instantiated per listing and validates transitions
before the listing's status field is updated.

Transition table:
    UNLISTED   -> LISTED      (list_title)
    FINALIZED  -> LISTED      (list_title, seller owns the title again)
    CANCELLED  -> LISTED      (list_title)
    LISTED     -> FINALIZED   (finalize_sale)
    LISTED     -> CANCELLED   (cancel_sale)
"""

from __future__ import annotations

from statemachine import State, StateMachine


class ListingStateMachine(StateMachine):
    """State machine that guards a title's listing lifecycle.

    Usage:
        sm = ListingStateMachine(current_status="LISTED")
        sm.finalize_sale()   # transitions to FINALIZED
        sm.status            # "FINALIZED"
    """

    # --- States ---
    UNLISTED = State("UNLISTED", initial=True)
    LISTED = State("LISTED")
    FINALIZED = State("FINALIZED")
    CANCELLED = State("CANCELLED")

    # --- Events / Transitions ---

    # Custody
    list_title = UNLISTED.to(LISTED) | FINALIZED.to(LISTED) | CANCELLED.to(LISTED)

    # Settlement outcomes
    finalize_sale = LISTED.to(FINALIZED)
    cancel_sale = LISTED.to(CANCELLED)

    def __init__(self, current_status: str = "UNLISTED") -> None:
        """Initialize the state machine at a given status.

        Args:
            current_status: The current ListingStatus value (e.g., "LISTED").
                           Must match one of the State value strings exactly.
        """
        valid_values = {s.value for s in self.states}
        if current_status not in valid_values:
            valid = ", ".join(sorted(valid_values))
            raise ValueError(
                f"Unknown status '{current_status}'. Valid states: {valid}"
            )
        super().__init__(start_value=current_status)

    @property
    def status(self) -> str:
        """Return the current state value as a string (matches ListingStatus)."""
        return str(self.current_state.value)

    def get_allowed_events(self) -> list[str]:
        """Return a list of event names that can fire from the current state."""
        return [event.id for event in self.allowed_events]


def validate_transition(current_status: str, event_name: str) -> str:
    """Validate a listing transition and return the new status.

    Args:
        current_status: Current ListingStatus value.
        event_name: The event to fire (e.g., "finalize_sale").

    Returns:
        The new status string after the transition.

    Raises:
        TransitionNotAllowed: If the transition is illegal.
        ValueError: If the status or event name is invalid.
    """
    sm = ListingStateMachine(current_status=current_status)

    event_method = getattr(sm, event_name, None)
    if event_method is None or not callable(event_method):
        raise ValueError(
            f"Unknown event '{event_name}'. "
            f"Allowed events from {current_status}: {sm.get_allowed_events()}"
        )

    event_method()
    return sm.status
