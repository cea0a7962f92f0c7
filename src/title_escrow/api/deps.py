"""FastAPI dependency injection providers.

These are used with Depends() in route handlers to inject the escrow
system, the caller identity and configuration.
"""

from __future__ import annotations

from fastapi import Depends, Header, Request

from title_escrow.bootstrap import EscrowSystem
from title_escrow.config import Settings, get_settings
from title_escrow.domain.exceptions import Unauthorized
from title_escrow.infrastructure.ledger import Ledger
from title_escrow.services.escrow_engine import EscrowEngine
from title_escrow.services.title_registry import TitleRegistry


def get_system(request: Request) -> EscrowSystem:
    """Provide the escrow system attached to the application."""
    return request.app.state.system


def get_engine(system: EscrowSystem = Depends(get_system)) -> EscrowEngine:
    """Provide the escrow engine."""
    return system.engine


def get_registry(system: EscrowSystem = Depends(get_system)) -> TitleRegistry:
    """Provide the title registry."""
    return system.registry


def get_ledger(system: EscrowSystem = Depends(get_system)) -> Ledger:
    """Provide the ledger substrate."""
    return system.ledger


def get_caller(
    x_caller_address: str = Header(
        ..., min_length=1, description="Identity invoking the operation"
    ),
    system: EscrowSystem = Depends(get_system),
) -> str:
    """Provide the identity of the party making the request.

    The engine and registry have no external key, so their addresses are
    never accepted as callers.

    Raises:
        Unauthorized: If the header names the engine or the registry.
    """
    if x_caller_address in (system.engine.address, system.registry.address):
        raise Unauthorized(x_caller_address, "act on behalf of a system account")
    return x_caller_address


def get_app_settings() -> Settings:
    """Provide the application settings."""
    return get_settings()
