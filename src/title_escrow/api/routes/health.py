"""Health check endpoint.

Reports the number of minted titles and the engine's custodied balance.
Used by container healthchecks and load balancers.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends

from title_escrow import __version__
from title_escrow.api.deps import get_system
from title_escrow.bootstrap import EscrowSystem
from title_escrow.schemas.escrow import HealthResponse

router = APIRouter(tags=["Health"])


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Health check",
    description="Returns the health status of the application.",
)
async def health_check(system: EscrowSystem = Depends(get_system)) -> HealthResponse:
    """Summarize registry and engine state."""
    return HealthResponse(
        status="ok",
        version=__version__,
        titles=system.registry.total_supply,
        escrow_balance=system.engine.get_balance(),
    )
