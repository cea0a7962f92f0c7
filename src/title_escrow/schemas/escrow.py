"""Pydantic schemas for the Title Escrow API.

These schemas define the request/response shapes for the REST API. They
are separate from the domain dataclasses to keep clean boundaries between
the HTTP layer and the engine.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

# ---------------------------------------------------------------------------
# Request Schemas
# ---------------------------------------------------------------------------


class MintTitleRequest(BaseModel):
    """Request body for minting a new title record."""

    metadata_locator: str = Field(
        ...,
        min_length=1,
        max_length=2048,
        description="Opaque locator of the title's metadata, fixed at mint time",
        examples=["https://ipfs.io/ipfs/QmTudSYeM7mz3PkYEWXWqPjomRPHogcMFSq7XAvsvsgAPS"],
    )


class ApproveTitleRequest(BaseModel):
    """Request body for delegating a one-time transfer right."""

    delegate: str | None = Field(
        default=None,
        description="Identity allowed to transfer the title; null clears the approval",
    )


class TransferTitleRequest(BaseModel):
    """Request body for moving a title between identities."""

    from_address: str = Field(..., min_length=1, description="Current owner of the title")
    to_address: str = Field(..., min_length=1, description="New owner of the title")


class ListTitleRequest(BaseModel):
    """Request body for listing a title for sale."""

    buyer: str = Field(..., min_length=1, description="Identity designated as buyer")
    purchase_price: int = Field(..., ge=0, description="Total settlement amount")
    escrow_amount: int = Field(..., ge=0, description="Requested earnest deposit")


class DepositRequest(BaseModel):
    """Request body for an earnest deposit or a direct value transfer."""

    value: int = Field(..., ge=0, description="Amount of value attached to the call")


class InspectionRequest(BaseModel):
    """Request body for the inspector's attestation."""

    passed: bool


class LedgerTransferRequest(BaseModel):
    """Request body for a plain ledger transfer (e.g., lender funding)."""

    to_address: str = Field(..., min_length=1)
    value: int = Field(..., ge=0)


# ---------------------------------------------------------------------------
# Response Schemas
# ---------------------------------------------------------------------------


class TitleResponse(BaseModel):
    """Response schema for a title record."""

    model_config = ConfigDict(from_attributes=True)

    title_id: int
    owner: str
    metadata_locator: str
    approved: str | None


class ListingResponse(BaseModel):
    """Response schema for a title's listing."""

    model_config = ConfigDict(from_attributes=True)

    title_id: int
    buyer: str
    purchase_price: int
    escrow_amount: int
    status: str
    is_listed: bool
    deposit_balance: int
    inspection_passed: bool
    inspection_recorded: bool
    approvals: dict[str, bool]


class ListingStatusResponse(BaseModel):
    """Lightweight status check response."""

    title_id: int
    status: str
    is_listed: bool
    allowed_actions: list[str] = Field(
        description="State machine events that can fire from the current status"
    )


class BalanceResponse(BaseModel):
    """Value held by one identity."""

    address: str
    balance: int


class EscrowEventResponse(BaseModel):
    """Response schema for an audit event."""

    model_config = ConfigDict(from_attributes=True)

    sequence: int
    event_type: str
    actor: str
    title_id: int | None
    data: dict[str, Any]
    created_at: datetime


class EngineInfoResponse(BaseModel):
    """Fixed identities of the escrow engine."""

    address: str
    registry_address: str
    seller: str
    inspector: str
    lender: str


class HealthResponse(BaseModel):
    """Health check response."""

    status: str = "ok"
    version: str = "0.1.0"
    titles: int = 0
    escrow_balance: int = 0
