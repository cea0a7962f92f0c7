"""Escrow Engine — the custodial state machine for title sales.

This is the application layer that coordinates between:
    - Domain state machine (listing transition guard)
    - Title registry (custody of the title record)
    - Ledger (custody and disbursement of funds, audit log)

Both REST routes and the simulation call into this engine, ensuring a single
source of truth for all business rules.

Every state-changing operation runs inside ``Ledger.atomic``: preconditions
are checked against current state when the operation executes, and if any
step fails (including an outbound payment) the ledger, the registry and the
engine's listings are restored, so no partial effect is ever observable.
"""

from __future__ import annotations

from dataclasses import replace
from typing import TYPE_CHECKING

from statemachine.exceptions import TransitionNotAllowed

from title_escrow.domain.enums import APPROVING_ROLES, EventType, ListingStatus, Role
from title_escrow.domain.exceptions import (
    InvalidStateTransitionError,
    NotFound,
    PreconditionFailed,
    Unauthorized,
)
from title_escrow.domain.models import Listing
from title_escrow.domain.state_machine import ListingStateMachine, validate_transition
from title_escrow.infrastructure.ledger import ensure_amount, new_address
from title_escrow.logging_config import get_logger

if TYPE_CHECKING:
    from contextlib import AbstractContextManager

    from title_escrow.domain.models import EscrowRoles
    from title_escrow.infrastructure.ledger import Ledger
    from title_escrow.services.title_registry import TitleRegistry

logger = get_logger(__name__)


def _copy_listing(listing: Listing) -> Listing:
    return replace(listing, approvals=dict(listing.approvals))


class EscrowEngine:
    """Holds titles and funds in custody until a sale can settle."""

    def __init__(
        self,
        registry: TitleRegistry,
        roles: EscrowRoles,
        ledger: Ledger,
        address: str | None = None,
    ) -> None:
        """Create an engine bound to one registry and one set of roles.

        Args:
            registry: The title registry the engine takes custody through.
            roles: Seller, inspector and lender; immutable for the engine's lifetime.
            ledger: Value substrate; the engine's own account lives there.
            address: Engine address; generated when omitted.
        """
        self._registry = registry
        self._roles = roles
        self._ledger = ledger
        self.address = address or new_address()
        self._listings: dict[int, Listing] = {}

        logger.info(
            "escrow.created",
            address=self.address,
            registry=registry.address,
            seller=roles.seller,
            inspector=roles.inspector,
            lender=roles.lender,
        )

    # ------------------------------------------------------------------
    # Fixed identities
    # ------------------------------------------------------------------

    @property
    def registry(self) -> TitleRegistry:
        return self._registry

    @property
    def roles(self) -> EscrowRoles:
        return self._roles

    @property
    def seller(self) -> str:
        return self._roles.seller

    @property
    def inspector(self) -> str:
        return self._roles.inspector

    @property
    def lender(self) -> str:
        return self._roles.lender

    # ------------------------------------------------------------------
    # Listing
    # ------------------------------------------------------------------

    def list(
        self,
        caller: str,
        title_id: int,
        buyer: str,
        purchase_price: int,
        escrow_amount: int,
    ) -> Listing:
        """Take custody of a title and open it for sale to ``buyer``.

        The seller must have approved this engine on the registry first;
        custody moves to the engine as part of listing.

        Raises:
            Unauthorized: If the caller is not the seller.
            NotFound: If the title does not exist.
            PreconditionFailed: If the title is already listed or the
                registry refuses the custody transfer (e.g., no approval).
        """
        self._require(caller, self._roles.seller, "list titles")
        purchase_price = ensure_amount("purchase_price", purchase_price)
        escrow_amount = ensure_amount("escrow_amount", escrow_amount)
        if not buyer:
            raise PreconditionFailed("A buyer must be designated when listing", title_id)
        if escrow_amount > purchase_price:
            logger.warning(
                "escrow.earnest_exceeds_price",
                title_id=title_id,
                escrow_amount=escrow_amount,
                purchase_price=purchase_price,
            )

        with self._atomic():
            new_status = self._fire_transition(self.status(title_id), "list_title")
            try:
                self._registry.transfer_from(
                    self.address, self._roles.seller, self.address, title_id
                )
            except (Unauthorized, PreconditionFailed) as err:
                raise PreconditionFailed(
                    f"Custody transfer of title {title_id} was rejected: {err.message}",
                    title_id,
                ) from err

            listing = Listing(
                title_id=title_id,
                buyer=buyer,
                purchase_price=purchase_price,
                escrow_amount=escrow_amount,
                status=new_status,
            )
            self._listings[title_id] = listing
            self._ledger.events.record(
                EventType.TITLE_LISTED,
                actor=caller,
                title_id=title_id,
                data={
                    "buyer": buyer,
                    "purchase_price": purchase_price,
                    "escrow_amount": escrow_amount,
                },
            )

        logger.info(
            "escrow.listed",
            title_id=title_id,
            buyer=buyer,
            purchase_price=purchase_price,
            escrow_amount=escrow_amount,
        )
        return _copy_listing(listing)

    # ------------------------------------------------------------------
    # Funding
    # ------------------------------------------------------------------

    def deposit_earnest(self, caller: str, title_id: int, value: int) -> int:
        """Move ``value`` from the buyer into custody for this title.

        The amount is not compared with ``escrow_amount``; sufficiency is
        only checked when the sale is finalized. Returns the title's new
        deposit balance.
        """
        value = ensure_amount("value", value)
        with self._atomic():
            listing = self._active_listing_or_raise(title_id)
            self._require(caller, listing.buyer, f"deposit earnest for title {title_id}")

            self._ledger.transfer(caller, self.address, value)
            listing.deposit_balance += value
            self._ledger.events.record(
                EventType.EARNEST_DEPOSITED,
                actor=caller,
                title_id=title_id,
                data={"amount": value, "deposit_balance": listing.deposit_balance},
            )

        logger.info(
            "escrow.earnest_deposited",
            title_id=title_id,
            amount=value,
            deposit_balance=listing.deposit_balance,
        )
        return listing.deposit_balance

    def receive(self, caller: str, value: int) -> int:
        """Accept a direct value transfer into the engine's pool (lender funding).

        Returns the engine's new aggregate balance.
        """
        with self._ledger.lock:
            self._ledger.transfer(caller, self.address, value)
            balance = self.get_balance()
        logger.info("escrow.funds_received", sender=caller, amount=value, balance=balance)
        return balance

    # ------------------------------------------------------------------
    # Conditions
    # ------------------------------------------------------------------

    def update_inspection_status(self, caller: str, title_id: int, passed: bool) -> None:
        """Record the inspector's attestation. Last write wins."""
        self._require(caller, self._roles.inspector, "update inspection status")
        with self._atomic():
            listing = self._active_listing_or_raise(title_id)
            listing.inspection_passed = bool(passed)
            listing.inspection_recorded = True
            self._ledger.events.record(
                EventType.INSPECTION_UPDATED,
                actor=caller,
                title_id=title_id,
                data={"passed": listing.inspection_passed},
            )
        logger.info("escrow.inspection_updated", title_id=title_id, passed=bool(passed))

    def approve_sale(self, caller: str, title_id: int) -> dict[Role, bool]:
        """Record the caller's consent to the sale. Idempotent.

        Returns a copy of the listing's approval flags.
        """
        with self._atomic():
            listing = self._active_listing_or_raise(title_id)
            roles = self._approving_roles_of(caller, listing)
            if not roles:
                raise Unauthorized(caller, f"approve the sale of title {title_id}")

            for role in roles:
                listing.approvals[role] = True
            self._ledger.events.record(
                EventType.SALE_APPROVED,
                actor=caller,
                title_id=title_id,
                data={"roles": [str(r) for r in roles]},
            )

        logger.info(
            "escrow.sale_approved",
            title_id=title_id,
            by=caller,
            roles=[str(r) for r in roles],
        )
        return dict(listing.approvals)

    # ------------------------------------------------------------------
    # Settlement
    # ------------------------------------------------------------------

    def finalize_sale(self, caller: str, title_id: int) -> None:
        """Pay the seller and hand the title to the buyer, atomically.

        Raises:
            Unauthorized: If the caller is not the seller.
            PreconditionFailed: If the listing is inactive, inspection has not
                passed, an approval is missing, or custodied funds are short.
            TransferFailed: If the seller refuses the payment; nothing changes.
        """
        self._require(caller, self._roles.seller, "finalize sales")
        with self._atomic():
            listing = self._active_listing_or_raise(title_id)
            new_status = self._fire_transition(listing.status, "finalize_sale")
            self._check_settlement_conditions(listing)

            price = listing.purchase_price
            self._ledger.transfer(self.address, self._roles.seller, price)
            self._registry.transfer_from(self.address, self.address, listing.buyer, title_id)

            listing.status = new_status
            listing.deposit_balance = 0
            self._ledger.events.record(
                EventType.SALE_FINALIZED,
                actor=caller,
                title_id=title_id,
                data={"buyer": listing.buyer, "purchase_price": price},
            )

        logger.info(
            "escrow.sale_finalized",
            title_id=title_id,
            buyer=listing.buyer,
            purchase_price=price,
            balance=self.get_balance(),
        )

    def cancel_sale(self, caller: str, title_id: int) -> int:
        """Abandon an active listing and return the title to the seller.

        The earnest deposit goes back to the buyer unless inspection has
        passed, in which case it is forfeited to the seller. Lender funding
        sent directly to the engine stays in the pool.

        Returns the amount paid out of the deposit.
        """
        with self._atomic():
            listing = self._active_listing_or_raise(title_id)
            if caller not in (listing.buyer, self._roles.seller):
                raise Unauthorized(caller, f"cancel the sale of title {title_id}")
            new_status = self._fire_transition(listing.status, "cancel_sale")

            refund = listing.deposit_balance
            recipient = self._roles.seller if listing.inspection_passed else listing.buyer
            if refund:
                self._ledger.transfer(self.address, recipient, refund)
            self._registry.transfer_from(self.address, self.address, self._roles.seller, title_id)

            listing.status = new_status
            listing.deposit_balance = 0
            self._ledger.events.record(
                EventType.SALE_CANCELLED,
                actor=caller,
                title_id=title_id,
                data={
                    "paid_to": recipient,
                    "amount": refund,
                    "forfeited": listing.inspection_passed,
                },
            )

        logger.info(
            "escrow.sale_cancelled",
            title_id=title_id,
            by=caller,
            paid_to=recipient,
            amount=refund,
        )
        return refund

    # ------------------------------------------------------------------
    # Read helpers
    # ------------------------------------------------------------------

    def get_balance(self) -> int:
        """Total value custodied by the engine across all titles."""
        return self._ledger.balance_of(self.address)

    def status(self, title_id: int) -> ListingStatus:
        listing = self._listings.get(title_id)
        return listing.status if listing else ListingStatus.UNLISTED

    def is_listed(self, title_id: int) -> bool:
        listing = self._listings.get(title_id)
        return listing is not None and listing.is_listed

    def buyer(self, title_id: int) -> str | None:
        listing = self._listings.get(title_id)
        return listing.buyer if listing else None

    def purchase_price(self, title_id: int) -> int:
        listing = self._listings.get(title_id)
        return listing.purchase_price if listing else 0

    def escrow_amount(self, title_id: int) -> int:
        listing = self._listings.get(title_id)
        return listing.escrow_amount if listing else 0

    def deposit_balance(self, title_id: int) -> int:
        listing = self._listings.get(title_id)
        return listing.deposit_balance if listing else 0

    def inspection_passed(self, title_id: int) -> bool:
        listing = self._listings.get(title_id)
        return listing.inspection_passed if listing else False

    def approval(self, title_id: int, party: str) -> bool:
        """Whether ``party`` has consented to the sale of this title."""
        listing = self._listings.get(title_id)
        if listing is None:
            return False
        roles = self._approving_roles_of(party, listing)
        return bool(roles) and all(listing.approvals[r] for r in roles)

    def get_listing(self, title_id: int) -> Listing | None:
        """Return a copy of the title's latest listing, None if never listed."""
        if not self._registry.exists(title_id):
            raise NotFound(title_id)
        listing = self._listings.get(title_id)
        return _copy_listing(listing) if listing else None

    def allowed_actions(self, title_id: int) -> list[str]:
        """State machine events that can fire from the listing's current status."""
        sm = ListingStateMachine(current_status=str(self.status(title_id)))
        return sm.get_allowed_events()

    # ------------------------------------------------------------------
    # Snapshots (used by Ledger.atomic)
    # ------------------------------------------------------------------

    def snapshot(self) -> dict[int, Listing]:
        return {tid: _copy_listing(item) for tid, item in self._listings.items()}

    def restore(self, snap: dict[int, Listing]) -> None:
        self._listings = {tid: _copy_listing(item) for tid, item in snap.items()}

    # ------------------------------------------------------------------
    # Private helpers
    # ------------------------------------------------------------------

    def _atomic(self) -> AbstractContextManager[None]:
        return self._ledger.atomic(self._registry, self)

    @staticmethod
    def _require(caller: str, expected: str, action: str) -> None:
        if caller != expected:
            raise Unauthorized(caller, action)

    def _active_listing_or_raise(self, title_id: int) -> Listing:
        listing = self._listings.get(title_id)
        if listing is None or not listing.is_listed:
            raise PreconditionFailed(f"Title {title_id} is not listed", title_id)
        return listing

    def _approving_roles_of(self, party: str, listing: Listing) -> list[Role]:
        holders = {
            Role.BUYER: listing.buyer,
            Role.SELLER: self._roles.seller,
            Role.LENDER: self._roles.lender,
        }
        return [role for role in APPROVING_ROLES if holders[role] == party]

    def _check_settlement_conditions(self, listing: Listing) -> None:
        title_id = listing.title_id
        if not listing.inspection_passed:
            logger.warning("escrow.finalize_blocked", title_id=title_id, reason="inspection")
            raise PreconditionFailed(f"Inspection has not passed for title {title_id}", title_id)

        missing = [str(r) for r in APPROVING_ROLES if not listing.approvals.get(r, False)]
        if missing:
            logger.warning("escrow.finalize_blocked", title_id=title_id, missing=missing)
            raise PreconditionFailed(
                f"Sale of title {title_id} is missing approvals from: {', '.join(missing)}",
                title_id,
            )

        balance = self.get_balance()
        if balance < listing.purchase_price:
            logger.warning(
                "escrow.finalize_blocked",
                title_id=title_id,
                balance=balance,
                purchase_price=listing.purchase_price,
            )
            raise PreconditionFailed(
                f"Insufficient funds in escrow: required {listing.purchase_price}, "
                f"available {balance}",
                title_id,
            )

    @staticmethod
    def _fire_transition(current: ListingStatus, event_name: str) -> ListingStatus:
        """Validate a listing transition and return the resulting status.

        Raises InvalidStateTransitionError if the transition is illegal.
        """
        try:
            new_status = validate_transition(str(current), event_name)
        except TransitionNotAllowed as err:
            raise InvalidStateTransitionError(str(current), event_name) from err
        return ListingStatus(new_status)
