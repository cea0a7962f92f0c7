"""Title registry REST API routes.

Routes:
    POST   /api/v1/titles                 — Mint a new title (seller)
    GET    /api/v1/titles/{id}            — Get a title record
    POST   /api/v1/titles/{id}/approve    — Delegate a one-time transfer right
    POST   /api/v1/titles/{id}/transfer   — Transfer a title
"""

from __future__ import annotations

from fastapi import APIRouter, Depends

from title_escrow.api.deps import get_caller, get_registry
from title_escrow.logging_config import get_logger
from title_escrow.schemas.escrow import (
    ApproveTitleRequest,
    MintTitleRequest,
    TitleResponse,
    TransferTitleRequest,
)
from title_escrow.services.title_registry import TitleRegistry

router = APIRouter(prefix="/api/v1/titles", tags=["Titles"])
logger = get_logger(__name__)


@router.post(
    "",
    response_model=TitleResponse,
    status_code=201,
    summary="Mint a new title",
)
async def mint_title(
    request: MintTitleRequest,
    caller: str = Depends(get_caller),
    registry: TitleRegistry = Depends(get_registry),
) -> TitleResponse:
    """Create a title owned by the caller, bound to the given metadata locator."""
    title_id = registry.mint(caller, request.metadata_locator)
    return TitleResponse.model_validate(registry.get_title(title_id))


@router.get(
    "/{title_id}",
    response_model=TitleResponse,
    summary="Get a title record",
)
async def get_title(
    title_id: int,
    registry: TitleRegistry = Depends(get_registry),
) -> TitleResponse:
    """Fetch a title's owner, metadata locator and approved delegate."""
    return TitleResponse.model_validate(registry.get_title(title_id))


@router.post(
    "/{title_id}/approve",
    response_model=TitleResponse,
    summary="Approve a transfer delegate",
)
async def approve_title(
    title_id: int,
    request: ApproveTitleRequest,
    caller: str = Depends(get_caller),
    registry: TitleRegistry = Depends(get_registry),
) -> TitleResponse:
    """Owner grants (or clears) a one-time transfer right on this title."""
    registry.approve(caller, title_id, request.delegate)
    return TitleResponse.model_validate(registry.get_title(title_id))


@router.post(
    "/{title_id}/transfer",
    response_model=TitleResponse,
    summary="Transfer a title",
)
async def transfer_title(
    title_id: int,
    request: TransferTitleRequest,
    caller: str = Depends(get_caller),
    registry: TitleRegistry = Depends(get_registry),
) -> TitleResponse:
    """Move a title; the caller must be the owner or its approved delegate."""
    registry.transfer_from(caller, request.from_address, request.to_address, title_id)
    return TitleResponse.model_validate(registry.get_title(title_id))
