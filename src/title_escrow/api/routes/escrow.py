"""Escrow engine REST API routes.

These endpoints provide the HTTP interface for listing titles, funding,
attesting inspection, approving and settling sales. The simulation calls
the same engine directly, ensuring consistency.

Routes:
    GET    /api/v1/escrow                  — Engine identities
    GET    /api/v1/escrow/balance          — Aggregate custodied balance
    GET    /api/v1/escrow/{id}             — Listing details
    GET    /api/v1/escrow/{id}/status      — Lightweight status check
    POST   /api/v1/escrow/{id}/list        — List a title (seller)
    POST   /api/v1/escrow/{id}/deposit     — Earnest deposit (buyer)
    POST   /api/v1/escrow/{id}/inspection  — Inspection attestation (inspector)
    POST   /api/v1/escrow/{id}/approve     — Consent (buyer, seller, lender)
    POST   /api/v1/escrow/{id}/finalize    — Settle the sale (seller)
    POST   /api/v1/escrow/{id}/cancel      — Cancel the sale (buyer, seller)
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException

from title_escrow.api.deps import get_caller, get_engine
from title_escrow.domain.models import Listing
from title_escrow.logging_config import get_logger
from title_escrow.schemas.escrow import (
    BalanceResponse,
    DepositRequest,
    EngineInfoResponse,
    InspectionRequest,
    ListingResponse,
    ListingStatusResponse,
    ListTitleRequest,
)
from title_escrow.services.escrow_engine import EscrowEngine

router = APIRouter(prefix="/api/v1/escrow", tags=["Escrow"])
logger = get_logger(__name__)


def _listing_response(listing: Listing) -> ListingResponse:
    return ListingResponse(
        title_id=listing.title_id,
        buyer=listing.buyer,
        purchase_price=listing.purchase_price,
        escrow_amount=listing.escrow_amount,
        status=str(listing.status),
        is_listed=listing.is_listed,
        deposit_balance=listing.deposit_balance,
        inspection_passed=listing.inspection_passed,
        inspection_recorded=listing.inspection_recorded,
        approvals={str(role): flag for role, flag in listing.approvals.items()},
    )


def _current_listing(engine: EscrowEngine, title_id: int) -> ListingResponse:
    listing = engine.get_listing(title_id)
    if listing is None:
        raise HTTPException(status_code=404, detail=f"Title {title_id} has never been listed")
    return _listing_response(listing)


# ---------------------------------------------------------------------------
# Read endpoints
# ---------------------------------------------------------------------------


@router.get("", response_model=EngineInfoResponse, summary="Get engine identities")
async def get_engine_info(engine: EscrowEngine = Depends(get_engine)) -> EngineInfoResponse:
    """Return the engine's address, its registry and the fixed roles."""
    return EngineInfoResponse(
        address=engine.address,
        registry_address=engine.registry.address,
        seller=engine.seller,
        inspector=engine.inspector,
        lender=engine.lender,
    )


@router.get("/balance", response_model=BalanceResponse, summary="Get custodied balance")
async def get_balance(engine: EscrowEngine = Depends(get_engine)) -> BalanceResponse:
    """Return the total value held by the engine across all titles."""
    return BalanceResponse(address=engine.address, balance=engine.get_balance())


@router.get("/{title_id}", response_model=ListingResponse, summary="Get listing details")
async def get_listing(
    title_id: int,
    engine: EscrowEngine = Depends(get_engine),
) -> ListingResponse:
    """Fetch the latest listing of a title."""
    return _current_listing(engine, title_id)


@router.get(
    "/{title_id}/status",
    response_model=ListingStatusResponse,
    summary="Get lightweight status check",
)
async def get_status(
    title_id: int,
    engine: EscrowEngine = Depends(get_engine),
) -> ListingStatusResponse:
    """Return the listing status and the actions allowed next."""
    return ListingStatusResponse(
        title_id=title_id,
        status=str(engine.status(title_id)),
        is_listed=engine.is_listed(title_id),
        allowed_actions=engine.allowed_actions(title_id),
    )


# ---------------------------------------------------------------------------
# Listing
# ---------------------------------------------------------------------------


@router.post(
    "/{title_id}/list",
    response_model=ListingResponse,
    status_code=201,
    summary="List a title for sale",
)
async def list_title(
    title_id: int,
    request: ListTitleRequest,
    caller: str = Depends(get_caller),
    engine: EscrowEngine = Depends(get_engine),
) -> ListingResponse:
    """Seller lists a title; custody moves to the engine. UNLISTED -> LISTED."""
    listing = engine.list(
        caller,
        title_id,
        buyer=request.buyer,
        purchase_price=request.purchase_price,
        escrow_amount=request.escrow_amount,
    )
    return _listing_response(listing)


# ---------------------------------------------------------------------------
# Funding & conditions
# ---------------------------------------------------------------------------


@router.post(
    "/{title_id}/deposit",
    response_model=ListingResponse,
    summary="Deposit earnest money",
)
async def deposit_earnest(
    title_id: int,
    request: DepositRequest,
    caller: str = Depends(get_caller),
    engine: EscrowEngine = Depends(get_engine),
) -> ListingResponse:
    """Buyer moves value into custody for this title."""
    engine.deposit_earnest(caller, title_id, request.value)
    return _current_listing(engine, title_id)


@router.post(
    "/{title_id}/inspection",
    response_model=ListingResponse,
    summary="Record inspection result",
)
async def update_inspection(
    title_id: int,
    request: InspectionRequest,
    caller: str = Depends(get_caller),
    engine: EscrowEngine = Depends(get_engine),
) -> ListingResponse:
    """Inspector attests pass or fail. Last write wins."""
    engine.update_inspection_status(caller, title_id, request.passed)
    return _current_listing(engine, title_id)


@router.post(
    "/{title_id}/approve",
    response_model=ListingResponse,
    summary="Approve the sale",
)
async def approve_sale(
    title_id: int,
    caller: str = Depends(get_caller),
    engine: EscrowEngine = Depends(get_engine),
) -> ListingResponse:
    """Buyer, seller or lender records consent."""
    engine.approve_sale(caller, title_id)
    return _current_listing(engine, title_id)


# ---------------------------------------------------------------------------
# Settlement
# ---------------------------------------------------------------------------


@router.post(
    "/{title_id}/finalize",
    response_model=ListingResponse,
    summary="Finalize the sale",
)
async def finalize_sale(
    title_id: int,
    caller: str = Depends(get_caller),
    engine: EscrowEngine = Depends(get_engine),
) -> ListingResponse:
    """Seller settles: price to seller and title to buyer, atomically. LISTED -> FINALIZED."""
    engine.finalize_sale(caller, title_id)
    return _current_listing(engine, title_id)


@router.post(
    "/{title_id}/cancel",
    response_model=ListingResponse,
    summary="Cancel the sale",
)
async def cancel_sale(
    title_id: int,
    caller: str = Depends(get_caller),
    engine: EscrowEngine = Depends(get_engine),
) -> ListingResponse:
    """Buyer or seller abandons the sale; title returns to seller. LISTED -> CANCELLED."""
    engine.cancel_sale(caller, title_id)
    return _current_listing(engine, title_id)
