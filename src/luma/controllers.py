import typing as t

from django.conf import settings
from ninja_extra import api_controller, route
from ninja_jwt.authentication import JWTAuth

from common.controllers import UserAwareController
from common.permissions import IsOperator
from common.schema import ErrorResponse
from common.throttling import UserDefaultThrottle

from .client import LumaClient
from .exceptions import EventMismatchError


@api_controller("/luma", auth=JWTAuth(), permissions=[IsOperator], tags=["Lu.ma"], throttle=UserDefaultThrottle())
class LumaProxyController(UserAwareController):
    @route.get(
        "/guest",
        url_name="luma_get_guest",
        response={
            200: dict[str, t.Any],
            403: ErrorResponse,
            502: ErrorResponse,
            503: ErrorResponse,
            504: ErrorResponse,
        },
    )
    def get_guest(self, event_api_id: str, proxy_key: str) -> dict[str, t.Any]:
        """Look up a guest on Lu.ma by event id and check-in proxy key.

        The Lu.ma payload is returned unchanged. Requests for an event other than the
        configured one are refused.
        """
        self.bind_user_context()
        configured = settings.EVENT_ID
        if configured and configured != event_api_id:
            raise EventMismatchError(scanned_event_id=event_api_id, configured_event_id=configured)
        return LumaClient.from_settings().get_guest(event_api_id, proxy_key)
