"""Guest identity resolution: scanned text in, verified Lu.ma guest out."""

import typing as t
from dataclasses import dataclass

import structlog
from django.conf import settings
from pydantic import ValidationError

from .client import LumaClient
from .credentials import GuestCredential, parse_scan
from .exceptions import EventMismatchError, GuestNotVerifiableError, ProviderUnavailableError
from .schema import LumaGuest, LumaGuestResponse, ResolvedGuest

logger = structlog.get_logger(__name__)

UNKNOWN_GUEST_NAME = "Unknown Guest"


@dataclass(frozen=True)
class ResolverOptions:
    check_in_bases: tuple[str, ...]
    configured_event_id: str | None = None

    @classmethod
    def from_settings(cls) -> t.Self:
        """Build resolver options from Django settings."""
        return cls(
            check_in_bases=tuple(settings.LUMA_CHECK_IN_BASES),
            configured_event_id=settings.EVENT_ID or None,
        )


def normalize_email(email: str) -> str:
    """Trim and lower-case an email address."""
    return email.strip().lower()


def display_name(name: str | None, email: str) -> str:
    """Provider name, else the local part of the email, else a placeholder."""
    if name and name.strip():
        return name.strip()
    local_part = email.split("@", 1)[0].strip()
    return local_part or UNKNOWN_GUEST_NAME


class GuestResolver:
    """Resolves a scanned check-in URL to a verified Lu.ma guest.

    Resolution fails closed: a guest without an email on the Lu.ma side is
    never treated as verified.
    """

    def __init__(self, client: LumaClient, options: ResolverOptions) -> None:
        self.client = client
        self.options = options

    def parse(self, scanned_text: str) -> GuestCredential:
        """Parse the scan and check it against the configured event.

        Raises:
            UnrecognizedFormatError: If the text is not a check-in URL.
            EventMismatchError: If a configured event id differs from the scanned one.
        """
        credential = parse_scan(scanned_text, self.options.check_in_bases)
        configured = self.options.configured_event_id
        if configured and configured != credential.event_id:
            raise EventMismatchError(scanned_event_id=credential.event_id, configured_event_id=configured)
        return credential

    def resolve(self, scanned_text: str) -> ResolvedGuest:
        """Resolve scanned text to a guest identity.

        Raises:
            UnrecognizedFormatError: Malformed scan; no network call is made.
            EventMismatchError: Scan for another event; no network call is made.
            ProviderUnavailableError: Lu.ma could not be queried.
            GuestNotVerifiableError: Lu.ma did not return a guest with an email.
        """
        credential = self.parse(scanned_text)
        data = self.client.get_guest(credential.event_id, credential.public_key)
        try:
            guest = LumaGuestResponse.model_validate(data).guest
        except ValidationError as e:
            logger.warning("luma_guest_malformed", event_id=credential.event_id, errors=e.error_count())
            raise ProviderUnavailableError("Lu.ma returned an invalid response. Please scan again.") from e

        if guest is None or not guest.user_email or not guest.user_email.strip():
            logger.warning(
                "luma_guest_not_verifiable",
                event_id=credential.event_id,
                public_key=credential.public_key,
                has_guest=guest is not None,
            )
            raise GuestNotVerifiableError()

        return self._to_resolved(credential, guest)

    @staticmethod
    def _to_resolved(credential: GuestCredential, guest: LumaGuest) -> ResolvedGuest:
        email = normalize_email(t.cast(str, guest.user_email))
        ticket = guest.event_ticket
        return ResolvedGuest(
            event_id=credential.event_id,
            public_key=credential.public_key,
            email=email,
            name=display_name(guest.user_name, email),
            approval_status=guest.approval_status or "",
            checked_in_at=guest.checked_in_at or (ticket.checked_in_at if ticket else None),
            ticket_name=(ticket.name if ticket and ticket.name else ""),
        )
