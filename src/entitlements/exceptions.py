import typing as t

if t.TYPE_CHECKING:
    from .models import EntitlementRecord


class LedgerError(Exception):
    """Base class for entitlement ledger failures."""

    code = "ledger_error"


class RecordVanishedError(LedgerError):
    """Raised when an entitlement record disappears between lookup and redemption."""

    code = "record_vanished"

    def __init__(self, record_id: t.Any) -> None:
        super().__init__("This guest's entitlement record no longer exists.")
        self.record_id = record_id


class AlreadyExhaustedError(LedgerError):
    """Raised when a guest has no units left of the requested kind."""

    code = "already_exhausted"

    def __init__(self, kind: str, record: "EntitlementRecord") -> None:
        name = record.attendee_name or record.email or "This guest"
        super().__init__(f"No {kind}s remaining for {name}.")
        self.kind = kind
        self.record = record


class LedgerWriteFailedError(LedgerError):
    """Raised when the ledger cannot be written. No counter has been changed."""

    code = "ledger_write_failed"

    def __init__(self, message: str = "The redemption could not be saved. Please scan again.") -> None:
        super().__init__(message)


class LedgerTimeoutError(LedgerWriteFailedError):
    """Raised when a ledger statement exceeds the database statement timeout."""

    code = "ledger_timeout"

    def __init__(self, message: str = "The ledger did not respond in time. Please scan again.") -> None:
        super().__init__(message)
