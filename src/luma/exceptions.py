class ResolutionError(Exception):
    """Base class for failures turning a scanned credential into a verified guest."""

    code = "resolution_error"


class UnrecognizedFormatError(ResolutionError):
    """Raised when the scanned text is not a Lu.ma check-in URL."""

    code = "unrecognized_format"

    def __init__(self, message: str = "The scanned code is not a recognized Lu.ma check-in URL.") -> None:
        super().__init__(message)


class EventMismatchError(ResolutionError):
    """Raised when a credential belongs to a different event than the configured one."""

    code = "event_mismatch"

    def __init__(self, scanned_event_id: str, configured_event_id: str) -> None:
        super().__init__(
            f"This ticket is for event {scanned_event_id}, but this terminal is configured for {configured_event_id}."
        )
        self.scanned_event_id = scanned_event_id
        self.configured_event_id = configured_event_id


class ProviderUnavailableError(ResolutionError):
    """Raised when the Lu.ma API cannot be reached or answers with an error.

    Attributes:
        status_code: HTTP status code returned by Lu.ma, if any.
    """

    code = "provider_unavailable"

    def __init__(
        self, message: str = "Lu.ma is unavailable. Please scan again.", status_code: int | None = None
    ) -> None:
        super().__init__(message)
        self.status_code = status_code


class ProviderTimeoutError(ProviderUnavailableError):
    """Raised when the Lu.ma API does not answer within the configured timeout."""

    code = "provider_timeout"

    def __init__(self, message: str = "Lu.ma did not respond in time. Please scan again.") -> None:
        super().__init__(message)


class ProviderNotConfiguredError(ProviderUnavailableError):
    """Raised when no Lu.ma API key is configured."""

    code = "provider_not_configured"

    def __init__(self, message: str = "Lu.ma API key not configured.") -> None:
        super().__init__(message)


class GuestNotVerifiableError(ResolutionError):
    """Raised when Lu.ma answers without a guest or without the guest's email."""

    code = "guest_not_verifiable"

    def __init__(self, message: str = "This guest could not be verified against the Lu.ma guest list.") -> None:
        super().__init__(message)
