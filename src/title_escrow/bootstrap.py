"""Wiring of the ledger, title registry and escrow engine.

``build_system`` creates an empty system from settings (used by the API);
``deploy`` additionally mints titles and lists them for a buyer, the same
steps an operator performs before a sale can start: mint as the seller,
approve the engine on the registry, then list through the engine.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from title_escrow.config import get_settings
from title_escrow.domain.models import EscrowRoles
from title_escrow.infrastructure.ledger import Ledger
from title_escrow.logging_config import get_logger
from title_escrow.services.escrow_engine import EscrowEngine
from title_escrow.services.title_registry import TitleRegistry

if TYPE_CHECKING:
    from collections.abc import Sequence

    from title_escrow.config import Settings

logger = get_logger(__name__)

# Listing terms of the three demo properties: (purchase_price, escrow_amount).
DEFAULT_TERMS: tuple[tuple[int, int], ...] = ((20, 10), (15, 5), (10, 0))

DEFAULT_METADATA = tuple(
    f"https://ipfs.io/ipfs/QmQVcpsjrA6cr1iJjZAodYwmPekYgbnXGo4DFubJiLc2EB/{i}.json"
    for i in range(1, 4)
)


@dataclass
class EscrowSystem:
    """A ledger with one title registry and one escrow engine on it."""

    ledger: Ledger
    registry: TitleRegistry
    engine: EscrowEngine
    title_ids: list[int] = field(default_factory=list)

    @property
    def roles(self) -> EscrowRoles:
        return self.engine.roles


def build_system(
    roles: EscrowRoles | None = None,
    settings: Settings | None = None,
    ledger: Ledger | None = None,
) -> EscrowSystem:
    """Create a ledger, registry and engine with fixed role assignments.

    Roles default to the configured seller, inspector and lender. The
    registry's minter defaults to the seller.
    """
    settings = settings or get_settings()
    roles = roles or EscrowRoles(
        seller=settings.seller_address,
        inspector=settings.inspector_address,
        lender=settings.lender_address,
    )
    ledger = ledger or Ledger()
    registry = TitleRegistry(ledger, minter=settings.registry_minter or roles.seller)
    engine = EscrowEngine(
        registry,
        roles,
        ledger,
        address=settings.escrow_address or None,
    )

    if settings.faucet_amount > 0:
        for address in (roles.seller, roles.inspector, roles.lender):
            ledger.credit(address, settings.faucet_amount)

    logger.info(
        "bootstrap.system_built",
        registry=registry.address,
        engine=engine.address,
        faucet=settings.faucet_amount,
    )
    return EscrowSystem(ledger=ledger, registry=registry, engine=engine)


def deploy(
    roles: EscrowRoles,
    buyer: str,
    metadata_locators: Sequence[str] = DEFAULT_METADATA,
    terms: Sequence[tuple[int, int]] = DEFAULT_TERMS,
    settings: Settings | None = None,
    ledger: Ledger | None = None,
) -> EscrowSystem:
    """Build a system, then mint, approve and list one title per locator.

    Args:
        roles: Fixed seller, inspector and lender identities.
        buyer: Buyer designated on every listing.
        metadata_locators: One locator per title to mint.
        terms: (purchase_price, escrow_amount) per title, same order.
        settings: Optional settings override.
        ledger: Optional pre-funded ledger.
    """
    if len(terms) != len(metadata_locators):
        raise ValueError("terms and metadata_locators must have the same length")

    system = build_system(roles=roles, settings=settings, ledger=ledger)
    for locator, (price, earnest) in zip(metadata_locators, terms, strict=True):
        title_id = system.registry.mint(roles.seller, locator)
        system.registry.approve(roles.seller, title_id, system.engine.address)
        system.engine.list(roles.seller, title_id, buyer, price, earnest)
        system.title_ids.append(title_id)

    logger.info("bootstrap.deployed", titles=system.title_ids, buyer=buyer)
    return system
