"""Ledger and audit-trail REST API routes.

Routes:
    GET    /api/v1/ledger/{address}/balance  — Balance of an identity
    POST   /api/v1/ledger/transfer           — Direct value transfer (e.g., lender funding)
    POST   /api/v1/ledger/{address}/credit   — Faucet, development only
    GET    /api/v1/events                    — Audit trail, optionally for one title
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException

from title_escrow.api.deps import get_app_settings, get_caller, get_engine, get_ledger
from title_escrow.config import Settings
from title_escrow.infrastructure.ledger import Ledger
from title_escrow.logging_config import get_logger
from title_escrow.schemas.escrow import (
    BalanceResponse,
    DepositRequest,
    EscrowEventResponse,
    LedgerTransferRequest,
)
from title_escrow.services.escrow_engine import EscrowEngine

router = APIRouter(prefix="/api/v1", tags=["Ledger"])
logger = get_logger(__name__)


@router.get(
    "/ledger/{address}/balance",
    response_model=BalanceResponse,
    summary="Get an identity's balance",
)
async def get_balance(address: str, ledger: Ledger = Depends(get_ledger)) -> BalanceResponse:
    """Return the value currently held by ``address``."""
    return BalanceResponse(address=address, balance=ledger.balance_of(address))


@router.post(
    "/ledger/transfer",
    response_model=BalanceResponse,
    summary="Transfer value",
)
async def transfer(
    request: LedgerTransferRequest,
    caller: str = Depends(get_caller),
    ledger: Ledger = Depends(get_ledger),
    engine: EscrowEngine = Depends(get_engine),
) -> BalanceResponse:
    """Move value from the caller to another identity.

    Transfers addressed to the escrow engine land in its custodied pool.
    Returns the caller's remaining balance.
    """
    if request.to_address == engine.address:
        engine.receive(caller, request.value)
    else:
        ledger.transfer(caller, request.to_address, request.value)
    return BalanceResponse(address=caller, balance=ledger.balance_of(caller))


@router.post(
    "/ledger/{address}/credit",
    response_model=BalanceResponse,
    summary="Credit an identity (development only)",
)
async def credit(
    address: str,
    request: DepositRequest,
    ledger: Ledger = Depends(get_ledger),
    settings: Settings = Depends(get_app_settings),
) -> BalanceResponse:
    """Issue new value to an identity. Disabled outside development."""
    if not settings.is_development:
        raise HTTPException(status_code=403, detail="Faucet is only available in development")
    balance = ledger.credit(address, request.value)
    logger.info("ledger.faucet", address=address, amount=request.value)
    return BalanceResponse(address=address, balance=balance)


@router.get(
    "/events",
    response_model=list[EscrowEventResponse],
    summary="Get audit trail",
)
async def get_events(
    title_id: int | None = None,
    ledger: Ledger = Depends(get_ledger),
) -> list[EscrowEventResponse]:
    """Return committed events in order, optionally filtered to one title."""
    events = ledger.events.all() if title_id is None else ledger.events.by_title(title_id)
    return [EscrowEventResponse.model_validate(e) for e in events]
