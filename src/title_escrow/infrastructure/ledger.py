"""In-process ledger substrate: identities, balances and value transfers.

The ledger is the trust anchor the escrow engine relies on. It
    - holds the balance of every identity (parties and the engine itself),
    - moves value between identities and reports failures as TransferFailed,
    - serializes state-changing operations with a re-entrant lock,
    - provides ``atomic()`` blocks that snapshot every participant and
      restore them if anything inside the block raises.

Recipients may refuse incoming value by registering a receive hook, the
same way a contract account can reject a payment.
"""

from __future__ import annotations

import threading
import uuid
from contextlib import contextmanager
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

from title_escrow.domain.enums import EventType
from title_escrow.domain.exceptions import (
    InsufficientFundsError,
    InvalidAmountError,
    TransferFailed,
)
from title_escrow.infrastructure.event_log import EventLog
from title_escrow.logging_config import get_logger

if TYPE_CHECKING:
    from collections.abc import Callable, Iterator

    ReceiveHook = Callable[[str, int], bool]

logger = get_logger(__name__)


def new_address() -> str:
    """Return a fresh random 0x-prefixed 40-hex-character address."""
    return "0x" + uuid.uuid4().hex + uuid.uuid4().hex[:8]


def ensure_amount(name: str, amount: Any) -> int:
    """Validate a value amount: a non-negative int (bools rejected)."""
    if isinstance(amount, bool) or not isinstance(amount, int) or amount < 0:
        raise InvalidAmountError(name, amount)
    return amount


@runtime_checkable
class Journaled(Protocol):
    """Anything whose state can be captured and rolled back by ``Ledger.atomic``."""

    def snapshot(self) -> Any: ...

    def restore(self, snap: Any) -> None: ...


class Ledger:
    """Balances of all identities plus the shared audit log."""

    @dataclass(frozen=True)
    class Snapshot:
        balances: tuple[tuple[str, int], ...]
        event_count: int

    def __init__(self, events: EventLog | None = None) -> None:
        self._balances: dict[str, int] = {}
        self._receive_hooks: dict[str, ReceiveHook] = {}
        self._lock = threading.RLock()
        self.events = events if events is not None else EventLog()

    # -------- Queries --------

    def balance_of(self, address: str) -> int:
        return self._balances.get(address, 0)

    def accounts(self) -> dict[str, int]:
        """Return a copy of all non-zero balances."""
        return {a: b for a, b in self._balances.items() if b}

    # -------- Value movement --------

    def credit(self, address: str, amount: int) -> int:
        """Issue new value to an identity (used by bootstrap to fund parties).

        Returns the identity's new balance.
        """
        amount = ensure_amount("amount", amount)
        with self._lock:
            self._balances[address] = self.balance_of(address) + amount
            logger.debug("ledger.credited", address=address, amount=amount)
            return self._balances[address]

    def transfer(self, sender: str, recipient: str, amount: int) -> None:
        """Move ``amount`` from ``sender`` to ``recipient``.

        Raises:
            InvalidAmountError: If the amount is negative or not an int.
            InsufficientFundsError: If the sender cannot cover the amount.
            TransferFailed: If the recipient's receive hook refuses the value.
        """
        amount = ensure_amount("amount", amount)
        with self._lock:
            self._ensure_covered(sender, recipient, amount)
            self._check_recipient_accepts(sender, recipient, amount)
            # Read after the hook returns: it may have re-entered the ledger.
            available = self._ensure_covered(sender, recipient, amount)

            self._balances[sender] = available - amount
            self._balances[recipient] = self.balance_of(recipient) + amount
            self.events.record(
                EventType.VALUE_TRANSFERRED,
                actor=sender,
                data={"to": recipient, "amount": amount},
            )
            logger.info("ledger.transferred", sender=sender, recipient=recipient, amount=amount)

    def set_receive_hook(self, address: str, hook: ReceiveHook | None) -> None:
        """Install (or remove, with None) a hook deciding whether ``address`` accepts value.

        The hook is called as ``hook(sender, amount)`` and must return True to
        accept the transfer.
        """
        if hook is None:
            self._receive_hooks.pop(address, None)
        else:
            self._receive_hooks[address] = hook

    def _ensure_covered(self, sender: str, recipient: str, amount: int) -> int:
        available = self.balance_of(sender)
        if available < amount:
            logger.warning(
                "ledger.insufficient_funds",
                sender=sender,
                required=amount,
                available=available,
            )
            raise InsufficientFundsError(sender, recipient, amount, available)
        return available

    def _check_recipient_accepts(self, sender: str, recipient: str, amount: int) -> None:
        hook = self._receive_hooks.get(recipient)
        if hook is None:
            return
        try:
            accepted = hook(sender, amount)
        except Exception as exc:
            logger.warning("ledger.transfer_rejected", recipient=recipient, error=str(exc))
            raise TransferFailed(sender, recipient, amount, f"recipient raised: {exc}") from exc
        if not accepted:
            logger.warning("ledger.transfer_rejected", recipient=recipient, amount=amount)
            raise TransferFailed(sender, recipient, amount, "recipient rejected the transfer")

    # -------- Atomicity --------

    @property
    def lock(self) -> threading.RLock:
        return self._lock

    def snapshot(self) -> Ledger.Snapshot:
        return Ledger.Snapshot(tuple(self._balances.items()), self.events.snapshot())

    def restore(self, snap: Ledger.Snapshot) -> None:
        if not isinstance(snap, Ledger.Snapshot):
            raise ValueError("invalid ledger snapshot")
        self._balances = dict(snap.balances)
        self.events.restore(snap.event_count)

    @contextmanager
    def atomic(self, *participants: Journaled) -> Iterator[None]:
        """Run a block as one all-or-nothing operation.

        Holds the ledger lock for the whole block, so no other operation can
        interleave with it. If the block raises, the ledger (balances and
        events) and every participant are restored before the exception
        propagates.
        """
        with self._lock:
            saved_ledger = self.snapshot()
            saved = [(p, p.snapshot()) for p in participants]
            try:
                yield
            except Exception:
                for participant, snap in reversed(saved):
                    participant.restore(snap)
                self.restore(saved_ledger)
                raise
