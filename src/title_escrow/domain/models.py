"""Domain records for titles, listings and the fixed escrow roles.

Plain dataclasses with no framework imports. The registry and engine own
the mutable instances; everything returned to callers is a copy.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any

from title_escrow.domain.enums import APPROVING_ROLES, EventType, ListingStatus, Role


@dataclass(frozen=True)
class EscrowRoles:
    """Identities fixed at engine creation and immutable thereafter.

    Attributes:
        seller: The only party allowed to list, finalize and (by convention) mint.
        inspector: The only party allowed to attest inspection results.
        lender: Third required approver; funds the remainder of the price.
    """

    seller: str
    inspector: str
    lender: str

    def __post_init__(self) -> None:
        for role_name in ("seller", "inspector", "lender"):
            if not getattr(self, role_name):
                raise ValueError(f"{role_name} address must not be empty")


@dataclass
class TitleRecord:
    """A non-fungible record of ownership for one property."""

    title_id: int
    owner: str
    metadata_locator: str
    approved: str | None = None


def _no_approvals() -> dict[Role, bool]:
    return {role: False for role in APPROVING_ROLES}


@dataclass
class Listing:
    """Per-title sale workflow state held by the escrow engine.

    Attributes:
        title_id: The title under sale.
        buyer: Buyer designated by the seller when listing.
        purchase_price: Total settlement amount.
        escrow_amount: Requested earnest deposit (not enforced at deposit time).
        status: Current ListingStatus; see ListingStateMachine.
        deposit_balance: Earnest money received for this title.
        inspection_passed: Inspector's last attestation, False until set.
        inspection_recorded: Whether the inspector has attested at all.
        approvals: Consent flags for buyer, seller and lender.
    """

    title_id: int
    buyer: str
    purchase_price: int
    escrow_amount: int
    status: ListingStatus = ListingStatus.LISTED
    deposit_balance: int = 0
    inspection_passed: bool = False
    inspection_recorded: bool = False
    approvals: dict[Role, bool] = field(default_factory=_no_approvals)

    @property
    def is_listed(self) -> bool:
        return self.status == ListingStatus.LISTED

    @property
    def fully_approved(self) -> bool:
        return all(self.approvals.get(role, False) for role in APPROVING_ROLES)


@dataclass(frozen=True)
class EscrowEvent:
    """One entry of the append-only audit log.

    Attributes:
        sequence: Position in the log, starting at 1.
        event_type: What happened.
        actor: Identity that caused the event.
        title_id: Title concerned, if any (value transfers have none).
        data: Event-specific payload (amounts, counterparties, flags).
        created_at: UTC timestamp of the append.
    """

    sequence: int
    event_type: EventType
    actor: str
    title_id: int | None = None
    data: dict[str, Any] = field(default_factory=dict)
    created_at: datetime = field(default_factory=lambda: datetime.now(UTC))
