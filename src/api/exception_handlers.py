"""Exception handlers for the API."""

import traceback
import typing as t
from copy import deepcopy

import structlog
from django.conf import settings
from django.core.exceptions import ValidationError
from django.http import HttpRequest
from ninja.responses import Response

from attendees.exceptions import AttendeeNotFoundError, AttendeePassError
from entitlements.exceptions import (
    AlreadyExhaustedError,
    LedgerError,
    LedgerTimeoutError,
    LedgerWriteFailedError,
    RecordVanishedError,
)
from luma.exceptions import (
    EventMismatchError,
    GuestNotVerifiableError,
    ProviderNotConfiguredError,
    ProviderTimeoutError,
    ResolutionError,
    UnrecognizedFormatError,
)
from pos.exceptions import TerminalError

logger = structlog.get_logger(__name__)

# Most specific class first; the first isinstance match wins.
RESOLUTION_STATUS: list[tuple[type[ResolutionError], int]] = [
    (UnrecognizedFormatError, 400),
    (EventMismatchError, 403),
    (GuestNotVerifiableError, 422),
    (ProviderTimeoutError, 504),
    (ProviderNotConfiguredError, 503),
]

LEDGER_STATUS: list[tuple[type[LedgerError], int]] = [
    (RecordVanishedError, 410),
    (AlreadyExhaustedError, 409),
    (LedgerTimeoutError, 504),
    (LedgerWriteFailedError, 503),
]


def _status_for(exc: Exception, table: t.Sequence[tuple[type[Exception], int]], default: int) -> int:
    for exc_class, status in table:
        if isinstance(exc, exc_class):
            return status
    return default


def handle_general_exception(request: HttpRequest, exc: Exception | t.Type[Exception]) -> Response:
    """Handle a general exception.

    Args:
        request: The incoming HTTP request.
        exc: The exception.

    Returns:
        The response.
    """
    logger.exception(
        "INTERNAL_SERVER_ERROR",
        exc_info=True,
        stack_info=True,
        path=f"{request.method} {request.path}",
        headers=obfuscate(dict(request.headers)),
    )
    data = {"code": "internal_error", "detail": "Internal Server Error."}
    is_staff = getattr(request, "user", None) and request.user.is_staff
    if settings.DEBUG or is_staff:  # pragma: no cover
        data["traceback"] = traceback.format_exc()
    return Response(status=500, data=data)


def handle_django_validation_error(request: HttpRequest, exc: ValidationError | t.Type[ValidationError]) -> Response:
    """Handle a validation error.

    Args:
        request: The incoming HTTP request.
        exc: The exception.
    """
    logger.error("VALIDATION_ERROR", exc_info=True, stack_info=True)
    if hasattr(exc, "error_dict"):
        error_dict = {k: [ee for e in v for ee in e] for k, v in exc.error_dict.items()}
    else:
        error_dict = {"__all__": list(exc.messages)}
    return Response(status=400, data={"errors": error_dict})


def handle_resolution_error(request: HttpRequest, exc: ResolutionError | t.Type[ResolutionError]) -> Response:
    """Handle a failure to resolve a scanned credential into a verified guest.

    Anything not listed in RESOLUTION_STATUS is an upstream failure (502).
    """
    status = _status_for(exc, RESOLUTION_STATUS, 502)
    data: dict[str, t.Any] = {"code": exc.code, "detail": str(exc)}
    if isinstance(exc, EventMismatchError):
        data["scanned_event_id"] = exc.scanned_event_id
        data["configured_event_id"] = exc.configured_event_id
    logger.info("resolution_rejected", code=exc.code, status=status)
    return Response(status=status, data=data)


def handle_ledger_error(request: HttpRequest, exc: LedgerError | t.Type[LedgerError]) -> Response:
    """Handle an entitlement ledger failure."""
    status = _status_for(exc, LEDGER_STATUS, 503)
    data: dict[str, t.Any] = {"code": exc.code, "detail": str(exc)}
    if isinstance(exc, AlreadyExhaustedError):
        data["kind"] = exc.kind
        data["remaining_drinks"] = exc.record.remaining_drinks
        data["remaining_meals"] = exc.record.remaining_meals
    logger.info("ledger_rejected", code=exc.code, status=status)
    return Response(status=status, data=data)


def handle_terminal_error(request: HttpRequest, exc: TerminalError | t.Type[TerminalError]) -> Response:
    """Handle a rejected terminal state change."""
    return Response(status=409, data={"code": exc.code, "detail": str(exc), "state": exc.state})


def handle_attendee_pass_error(request: HttpRequest, exc: AttendeePassError | t.Type[AttendeePassError]) -> Response:
    """Handle a refused attendee pass request."""
    status = 404 if isinstance(exc, AttendeeNotFoundError) else 400
    return Response(status=status, data={"code": exc.code, "detail": str(exc)})


SENSITIVE_KEYS = {"password", "token", "x-api-key", "x-luma-api-key", "authorization", "authentication", "cookie"}


def obfuscate(data: dict[str, t.Any]) -> dict[str, t.Any]:
    """Obfuscate sensitive data in payloads and headers."""
    new_data = deepcopy(data)
    for key in data.keys():
        if key.lower() in SENSITIVE_KEYS:
            new_data[key] = "********"
    return new_data
