"""Shared test fixtures for the Title Escrow test suite.

Provides:
    - Fixed party addresses and escrow roles
    - A fresh ledger, registry and engine per test
    - A title minted, approved and listed the same way a deployment does it
"""

from __future__ import annotations

import pytest

from title_escrow.domain.models import EscrowRoles
from title_escrow.infrastructure.ledger import Ledger
from title_escrow.services.escrow_engine import EscrowEngine
from title_escrow.services.title_registry import TitleRegistry

BUYER = "0x" + "b" * 40
SELLER = "0x" + "5" * 40
INSPECTOR = "0x" + "1" * 40
LENDER = "0x" + "7" * 40
STRANGER = "0x" + "e" * 40

METADATA = "https://ipfs.io/ipfs/QmTudSYeM7mz3PkYEWXWqPjomRPHogcMFSq7XAvsvsgAPS"

PURCHASE_PRICE = 10
ESCROW_AMOUNT = 5

# ---------------------------------------------------------------------------
# Domain Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def roles() -> EscrowRoles:
    """Return the fixed seller/inspector/lender identities."""
    return EscrowRoles(seller=SELLER, inspector=INSPECTOR, lender=LENDER)


@pytest.fixture
def ledger() -> Ledger:
    """Return a ledger where buyer and lender each hold 100."""
    ledger = Ledger()
    ledger.credit(BUYER, 100)
    ledger.credit(LENDER, 100)
    return ledger


@pytest.fixture
def registry(ledger: Ledger) -> TitleRegistry:
    """Return an empty registry whose minter is the seller."""
    return TitleRegistry(ledger, minter=SELLER)


@pytest.fixture
def engine(registry: TitleRegistry, roles: EscrowRoles, ledger: Ledger) -> EscrowEngine:
    """Return an escrow engine with no listings."""
    return EscrowEngine(registry, roles, ledger)


@pytest.fixture
def title_id(registry: TitleRegistry, engine: EscrowEngine) -> int:
    """Mint a title as the seller, approve the engine and list it (price 10, earnest 5)."""
    tid = registry.mint(SELLER, METADATA)
    registry.approve(SELLER, tid, engine.address)
    engine.list(SELLER, tid, BUYER, PURCHASE_PRICE, ESCROW_AMOUNT)
    return tid


@pytest.fixture
def ready_title(engine: EscrowEngine, title_id: int) -> int:
    """A listed title with every settlement condition satisfied."""
    engine.deposit_earnest(BUYER, title_id, ESCROW_AMOUNT)
    engine.update_inspection_status(INSPECTOR, title_id, True)
    for party in (BUYER, SELLER, LENDER):
        engine.approve_sale(party, title_id)
    engine.receive(LENDER, PURCHASE_PRICE - ESCROW_AMOUNT)
    return title_id
