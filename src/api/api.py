from django.conf import settings
from django.core.exceptions import ValidationError
from django.http import HttpRequest
from ninja_extra import NinjaExtraAPI

from attendees.controllers import AttendeePassController
from attendees.exceptions import AttendeePassError
from common.schema import ResponseOk, VersionResponse
from common.throttling import AnonDefaultThrottle, UserDefaultThrottle
from entitlements.exceptions import LedgerError
from luma.controllers import LumaProxyController
from luma.exceptions import ResolutionError
from pos.controllers import PosController
from pos.exceptions import TerminalError

from .auth import OperatorTokenController
from .exception_handlers import (
    handle_attendee_pass_error,
    handle_django_validation_error,
    handle_general_exception,
    handle_ledger_error,
    handle_resolution_error,
    handle_terminal_error,
)

api = NinjaExtraAPI(
    title="Popup POS API",
    docs_url="/docs",
    version=settings.VERSION,
    description=f"Popup POS API {settings.VERSION}",
    app_name=f"popup-api-{settings.VERSION}",
    urls_namespace="api",
    servers=[
        {"url": settings.SERVICE_URL, "description": settings.SERVICE_DESCRIPTION},
    ],
    throttle=[AnonDefaultThrottle(), UserDefaultThrottle()],
)


@api.get("/version", tags=["Version"], response={200: VersionResponse})
def version(request: HttpRequest) -> tuple[int, VersionResponse]:
    """Get the API version.

    Args:
        request: The incoming HTTP request.

    Returns:
        The response status code and message.
    """
    return 200, VersionResponse(version=settings.VERSION)


@api.get("/healthcheck", tags=["Healthcheck"], response={200: ResponseOk})
def healthcheck(request: HttpRequest) -> tuple[int, ResponseOk]:
    """Check the health of the API.

    Args:
        request: The incoming HTTP request.

    Returns:
        The response status code and message.
    """
    return 200, ResponseOk()


api.register_controllers(
    # Auth
    OperatorTokenController,
    # POS controllers
    PosController,
    LumaProxyController,
    # Attendee controllers
    AttendeePassController,
)

EXCEPTION_HANDLERS = {
    Exception: handle_general_exception,
    ValidationError: handle_django_validation_error,
    ResolutionError: handle_resolution_error,
    LedgerError: handle_ledger_error,
    TerminalError: handle_terminal_error,
    AttendeePassError: handle_attendee_pass_error,
}

for exc, handler in EXCEPTION_HANDLERS.items():
    api.add_exception_handler(exc, handler)
