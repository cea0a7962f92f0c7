"""Pydantic schemas for API request/response validation."""

from title_escrow.schemas.escrow import (
    ApproveTitleRequest,
    BalanceResponse,
    DepositRequest,
    EngineInfoResponse,
    EscrowEventResponse,
    HealthResponse,
    InspectionRequest,
    LedgerTransferRequest,
    ListingResponse,
    ListingStatusResponse,
    ListTitleRequest,
    MintTitleRequest,
    TitleResponse,
    TransferTitleRequest,
)

__all__ = [
    "ApproveTitleRequest",
    "BalanceResponse",
    "DepositRequest",
    "EngineInfoResponse",
    "EscrowEventResponse",
    "HealthResponse",
    "InspectionRequest",
    "LedgerTransferRequest",
    "ListingResponse",
    "ListingStatusResponse",
    "ListTitleRequest",
    "MintTitleRequest",
    "TitleResponse",
    "TransferTitleRequest",
]
