"""Infrastructure layer — the in-process ledger substrate and audit log."""

from title_escrow.infrastructure.event_log import EventLog
from title_escrow.infrastructure.ledger import Journaled, Ledger, ensure_amount, new_address

__all__ = ["EventLog", "Journaled", "Ledger", "ensure_amount", "new_address"]
