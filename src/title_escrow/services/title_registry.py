"""Title Registry — issues non-fungible title records and tracks ownership.

Each title is bound at mint time to an immutable metadata locator and has
exactly one owner at any time. Owners may delegate a one-time transfer
right for a specific title; the escrow engine relies on that delegation to
take custody when a title is listed.

The registry never calls back into the escrow engine.
"""

from __future__ import annotations

from dataclasses import replace
from typing import TYPE_CHECKING

from title_escrow.domain.enums import EventType
from title_escrow.domain.exceptions import NotFound, PreconditionFailed, Unauthorized
from title_escrow.domain.models import TitleRecord
from title_escrow.infrastructure.ledger import new_address
from title_escrow.logging_config import get_logger

if TYPE_CHECKING:
    from title_escrow.infrastructure.ledger import Ledger

logger = get_logger(__name__)


class TitleRegistry:
    """Registry of title records, ERC-721 style."""

    def __init__(
        self,
        ledger: Ledger,
        minter: str | None = None,
        address: str | None = None,
    ) -> None:
        """Create an empty registry.

        Args:
            ledger: Substrate providing serialization and the shared event log.
            minter: Identity allowed to mint. None lets anyone mint.
            address: Registry address; generated when omitted.
        """
        self._ledger = ledger
        self._minter = minter
        self.address = address or new_address()
        self._titles: dict[int, TitleRecord] = {}
        self._next_id = 1

    @property
    def minter(self) -> str | None:
        return self._minter

    @property
    def total_supply(self) -> int:
        return len(self._titles)

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def exists(self, title_id: int) -> bool:
        return title_id in self._titles

    def owner_of(self, title_id: int) -> str:
        """Return the current owner of a title or raise NotFound."""
        return self._get_or_raise(title_id).owner

    def token_uri(self, title_id: int) -> str:
        """Return the metadata locator bound to a title at mint time."""
        return self._get_or_raise(title_id).metadata_locator

    def get_approved(self, title_id: int) -> str | None:
        """Return the delegate currently allowed to transfer a title, if any."""
        return self._get_or_raise(title_id).approved

    def get_title(self, title_id: int) -> TitleRecord:
        """Return a copy of a title record."""
        return replace(self._get_or_raise(title_id))

    def balance_of(self, owner: str) -> int:
        """Count the titles held by ``owner``."""
        return sum(1 for t in self._titles.values() if t.owner == owner)

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def mint(self, caller: str, metadata_locator: str) -> int:
        """Create a new title owned by ``caller`` and return its id.

        Ids are assigned sequentially starting at 1 and never reused.
        """
        with self._ledger.lock:
            if self._minter is not None and caller != self._minter:
                raise Unauthorized(caller, "mint titles")

            title_id = self._next_id
            self._titles[title_id] = TitleRecord(
                title_id=title_id,
                owner=caller,
                metadata_locator=metadata_locator,
            )
            self._next_id += 1

            self._ledger.events.record(
                EventType.TITLE_MINTED,
                actor=caller,
                title_id=title_id,
                data={"owner": caller, "metadata_locator": metadata_locator},
            )
            logger.info("registry.minted", title_id=title_id, owner=caller)
            return title_id

    def approve(self, caller: str, title_id: int, delegate: str | None) -> None:
        """Grant ``delegate`` a one-time right to transfer this title.

        Passing None clears an existing approval. Only the owner may approve.
        """
        with self._ledger.lock:
            title = self._get_or_raise(title_id)
            if caller != title.owner:
                raise Unauthorized(caller, f"approve a delegate for title {title_id}")

            title.approved = delegate or None
            self._ledger.events.record(
                EventType.TITLE_APPROVED,
                actor=caller,
                title_id=title_id,
                data={"owner": caller, "delegate": title.approved},
            )
            logger.info("registry.approved", title_id=title_id, delegate=title.approved)

    def transfer_from(self, caller: str, from_: str, to: str, title_id: int) -> None:
        """Move a title from ``from_`` to ``to``.

        Succeeds only if ``from_`` is the current owner and ``caller`` is
        either ``from_`` or the title's approved delegate. Any approval is
        cleared by the transfer.

        Raises:
            NotFound: If the title does not exist.
            Unauthorized: If ``from_`` is not the owner or ``caller`` may not move it.
            PreconditionFailed: If ``to`` is empty.
        """
        with self._ledger.lock:
            title = self._get_or_raise(title_id)
            if from_ != title.owner:
                raise Unauthorized(caller, f"transfer title {title_id} from non-owner {from_}")
            if caller != from_ and caller != title.approved:
                raise Unauthorized(caller, f"transfer title {title_id}")
            if not to:
                raise PreconditionFailed("Cannot transfer a title to an empty address", title_id)

            title.owner = to
            title.approved = None
            self._ledger.events.record(
                EventType.TITLE_TRANSFERRED,
                actor=caller,
                title_id=title_id,
                data={"from": from_, "to": to},
            )
            logger.info("registry.transferred", title_id=title_id, from_=from_, to=to, by=caller)

    # ------------------------------------------------------------------
    # Snapshots (used by Ledger.atomic)
    # ------------------------------------------------------------------

    def snapshot(self) -> tuple[dict[int, TitleRecord], int]:
        return {tid: replace(t) for tid, t in self._titles.items()}, self._next_id

    def restore(self, snap: tuple[dict[int, TitleRecord], int]) -> None:
        titles, next_id = snap
        self._titles = {tid: replace(t) for tid, t in titles.items()}
        self._next_id = next_id

    # ------------------------------------------------------------------
    # Private helpers
    # ------------------------------------------------------------------

    def _get_or_raise(self, title_id: int) -> TitleRecord:
        title = self._titles.get(title_id)
        if title is None:
            raise NotFound(title_id)
        return title
