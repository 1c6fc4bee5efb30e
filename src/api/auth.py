from ninja_extra import api_controller
from ninja_extra.permissions import AllowAny
from ninja_jwt.controller import TokenObtainPairController, TokenVerificationController

from common.throttling import AuthThrottle


@api_controller("/token", tags=["Auth"], permissions=[AllowAny], auth=None, throttle=AuthThrottle())
class OperatorTokenController(TokenVerificationController, TokenObtainPairController):
    """Obtain, refresh and verify the JWT pair POS operators authenticate with."""
