"""Application services — the title registry and the escrow engine."""

from title_escrow.services.escrow_engine import EscrowEngine
from title_escrow.services.title_registry import TitleRegistry

__all__ = ["EscrowEngine", "TitleRegistry"]
