"""Domain layer — pure business logic with zero framework dependencies."""

from title_escrow.domain.enums import (
    APPROVING_ROLES,
    EventType,
    ListingStatus,
    Role,
)
from title_escrow.domain.exceptions import (
    EscrowError,
    InsufficientFundsError,
    InvalidAmountError,
    InvalidStateTransitionError,
    NotFound,
    PreconditionFailed,
    TransferFailed,
    Unauthorized,
)
from title_escrow.domain.models import (
    EscrowEvent,
    EscrowRoles,
    Listing,
    TitleRecord,
)
from title_escrow.domain.state_machine import (
    ListingStateMachine,
    validate_transition,
)

__all__ = [
    "APPROVING_ROLES",
    "EventType",
    "ListingStatus",
    "Role",
    "EscrowError",
    "InsufficientFundsError",
    "InvalidAmountError",
    "InvalidStateTransitionError",
    "NotFound",
    "PreconditionFailed",
    "TransferFailed",
    "Unauthorized",
    "EscrowEvent",
    "EscrowRoles",
    "Listing",
    "TitleRecord",
    "ListingStateMachine",
    "validate_transition",
]
