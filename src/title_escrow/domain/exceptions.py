"""Domain exceptions for Title Escrow.

These exceptions are framework-agnostic and represent business rule violations.
They are caught and translated to HTTP responses by the API layer's middleware.
A failed operation never leaves partial state behind, so callers may retry
once the blocking condition has been resolved.
"""


class EscrowError(Exception):
    """Base exception for all domain errors."""

    def __init__(self, message: str, code: str = "ESCROW_ERROR") -> None:
        self.message = message
        self.code = code
        super().__init__(self.message)


# --- Access Control ---


class Unauthorized(EscrowError):
    """Raised when the caller lacks the role an operation requires."""

    def __init__(self, caller: str, action: str) -> None:
        super().__init__(
            message=f"{caller} is not allowed to {action}",
            code="UNAUTHORIZED",
        )
        self.caller = caller
        self.action = action


# --- Lookup ---


class NotFound(EscrowError):
    """Raised when a referenced title does not exist."""

    def __init__(self, title_id: int) -> None:
        super().__init__(
            message=f"Title not found: {title_id}",
            code="NOT_FOUND",
        )
        self.title_id = title_id


# --- Gating Conditions ---


class PreconditionFailed(EscrowError):
    """Raised when state does not satisfy an operation's gating conditions.

    Examples: inactive listing, missing approvals, failed inspection,
    insufficient custodied funds.
    """

    def __init__(self, message: str, title_id: int | None = None) -> None:
        super().__init__(message=message, code="PRECONDITION_FAILED")
        self.title_id = title_id


class InvalidStateTransitionError(PreconditionFailed):
    """Raised when an attempted listing transition is not allowed.

    Example: UNLISTED -> FINALIZED (must be LISTED first).
    """

    def __init__(self, current_state: str, attempted_event: str) -> None:
        super().__init__(
            message=f"Invalid state transition: {attempted_event} from {current_state}",
        )
        self.code = "INVALID_STATE_TRANSITION"
        self.current_state = current_state
        self.attempted_event = attempted_event


class InvalidAmountError(PreconditionFailed):
    """Raised when a value amount is negative or not an integer."""

    def __init__(self, name: str, amount: object) -> None:
        super().__init__(message=f"{name} must be a non-negative integer, got {amount!r}")
        self.code = "INVALID_AMOUNT"


# --- Value Transfers ---


class TransferFailed(EscrowError):
    """Raised when an external value or ownership transfer does not complete."""

    def __init__(self, sender: str, recipient: str, amount: int, reason: str) -> None:
        super().__init__(
            message=f"Transfer of {amount} from {sender} to {recipient} failed: {reason}",
            code="TRANSFER_FAILED",
        )
        self.sender = sender
        self.recipient = recipient
        self.amount = amount
        self.reason = reason


class InsufficientFundsError(TransferFailed):
    """Raised when the sender's ledger balance cannot cover a transfer."""

    def __init__(self, sender: str, recipient: str, required: int, available: int) -> None:
        super().__init__(
            sender,
            recipient,
            required,
            reason=f"insufficient funds: required {required}, available {available}",
        )
        self.code = "INSUFFICIENT_FUNDS"
        self.required = required
        self.available = available
