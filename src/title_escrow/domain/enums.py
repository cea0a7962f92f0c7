"""Domain enumerations for Title Escrow.

These enums define the canonical states, roles and event types used
throughout the system. They are framework-agnostic (no FastAPI imports).
"""

import enum


class ListingStatus(enum.StrEnum):
    """Lifecycle states of a title's sale listing.

    State transitions are enforced by the ListingStateMachine guard.
    See domain/state_machine.py for the transition table.
    """

    UNLISTED = "UNLISTED"
    LISTED = "LISTED"
    FINALIZED = "FINALIZED"
    CANCELLED = "CANCELLED"


class Role(enum.StrEnum):
    """Parties to a sale.

    Seller, inspector and lender are fixed when the engine is created;
    the buyer is designated per listing.
    """

    SELLER = "seller"
    BUYER = "buyer"
    INSPECTOR = "inspector"
    LENDER = "lender"


# Parties whose consent is required before a sale can be finalized.
APPROVING_ROLES: tuple[Role, ...] = (Role.BUYER, Role.SELLER, Role.LENDER)


class EventType(enum.StrEnum):
    """Types of events appended to the ledger's audit log.

    Every committed state change produces exactly one event; events of a
    failed operation are discarded with the rest of its effects.
    """

    # Registry events
    TITLE_MINTED = "TITLE_MINTED"
    TITLE_APPROVED = "TITLE_APPROVED"
    TITLE_TRANSFERRED = "TITLE_TRANSFERRED"

    # Value events
    VALUE_TRANSFERRED = "VALUE_TRANSFERRED"

    # Escrow lifecycle events
    TITLE_LISTED = "TITLE_LISTED"
    EARNEST_DEPOSITED = "EARNEST_DEPOSITED"
    INSPECTION_UPDATED = "INSPECTION_UPDATED"
    SALE_APPROVED = "SALE_APPROVED"
    SALE_FINALIZED = "SALE_FINALIZED"
    SALE_CANCELLED = "SALE_CANCELLED"
