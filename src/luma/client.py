"""HTTP client for the Lu.ma public API.

Only the guest lookup used at the POS is implemented. Every call is bounded
by a timeout and is never retried: a failed lookup is reported to the operator,
who rescans.
"""

import typing as t

import httpx
import structlog
from django.conf import settings

from .exceptions import ProviderNotConfiguredError, ProviderTimeoutError, ProviderUnavailableError

logger = structlog.get_logger(__name__)

GET_GUEST_PATH = "/v1/event/get-guest"


class LumaClient:
    """Client for the Lu.ma public API."""

    def __init__(
        self,
        api_key: str,
        base_url: str = "https://public-api.luma.com",
        timeout: float = 5.0,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        """Initialize the client.

        Args:
            api_key: Lu.ma API key sent as `x-luma-api-key`.
            base_url: Base URL of the public API.
            timeout: Seconds before a request is abandoned.
            transport: Optional httpx transport, used to stub the API.
        """
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._transport = transport

    @classmethod
    def from_settings(cls) -> "LumaClient":
        """Build a client from Django settings."""
        return cls(
            api_key=settings.LUMA_API_KEY,
            base_url=settings.LUMA_API_BASE_URL,
            timeout=settings.LUMA_TIMEOUT_SECONDS,
        )

    def _build_client(self) -> httpx.Client:
        return httpx.Client(
            base_url=self.base_url,
            timeout=httpx.Timeout(self.timeout),
            headers={"accept": "application/json", "x-luma-api-key": self.api_key},
            transport=self._transport,
        )

    def get_guest(self, event_id: str, public_key: str) -> dict[str, t.Any]:
        """Fetch a guest of an event by its check-in public key.

        Args:
            event_id: The Lu.ma event API id.
            public_key: The guest's proxy key from the check-in URL.

        Returns:
            The decoded JSON body, unchanged.

        Raises:
            ProviderNotConfiguredError: If no API key is configured.
            ProviderTimeoutError: If Lu.ma does not answer in time.
            ProviderUnavailableError: On network errors, non-2xx answers or non-JSON bodies.
        """
        if not self.api_key:
            raise ProviderNotConfiguredError()

        params = {"event_api_id": event_id, "proxy_key": public_key}
        try:
            with self._build_client() as client:
                response = client.get(GET_GUEST_PATH, params=params)
        except httpx.TimeoutException as e:
            logger.warning("luma_request_timeout", event_id=event_id, timeout=self.timeout)
            raise ProviderTimeoutError() from e
        except httpx.RequestError as e:
            logger.warning("luma_request_error", event_id=event_id, error=str(e))
            raise ProviderUnavailableError() from e

        if not response.is_success:
            logger.warning(
                "luma_request_failed",
                event_id=event_id,
                status=response.status_code,
                body=response.text[:200],
            )
            raise ProviderUnavailableError(
                f"Lu.ma returned status {response.status_code}. Please scan again.",
                status_code=response.status_code,
            )

        try:
            data = response.json()
        except ValueError as e:
            logger.warning("luma_invalid_json", event_id=event_id, status=response.status_code)
            raise ProviderUnavailableError("Lu.ma returned an invalid response. Please scan again.") from e

        if not isinstance(data, dict):
            raise ProviderUnavailableError("Lu.ma returned an invalid response. Please scan again.")

        logger.info("luma_guest_fetched", event_id=event_id, has_guest=bool(data.get("guest")))
        return data
