"""Self-service drinks passes for people on the attendee list."""

from dataclasses import dataclass
from datetime import date, datetime
from uuid import UUID
from zoneinfo import ZoneInfo

import orjson
import structlog
from django.conf import settings
from django.core.exceptions import ValidationError
from django.core.validators import validate_email
from django.utils import timezone

from attendees.exceptions import AttendeeIneligibleError, AttendeeNotFoundError, InvalidEmailError
from attendees.models import Participant

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class AttendeePass:
    email: str
    attendee_id: UUID
    full_name: str
    valid_from: date | None
    valid_to: date | None
    drinks_allowed: int
    generated_at: datetime

    @property
    def qr_data(self) -> str:
        """Compact JSON rendered as a QR code by the front-end."""
        return orjson.dumps(
            {
                "email": self.email,
                "attendeeId": str(self.attendee_id),
                "validFrom": self.valid_from.isoformat() if self.valid_from else None,
                "validTo": self.valid_to.isoformat() if self.valid_to else None,
                "drinksAllowed": self.drinks_allowed,
                "generatedAt": self.generated_at.isoformat(),
            }
        ).decode()


def normalize_pass_email(raw: str) -> str:
    """Trim and lower-case an email, rejecting blank or malformed input."""
    email = (raw or "").strip().lower()
    if not email:
        raise InvalidEmailError("Please enter your email.")
    try:
        validate_email(email)
    except ValidationError:
        raise InvalidEmailError() from None
    return email


def issue_pass(raw_email: str) -> AttendeePass:
    """Issue a drinks pass for the participant registered under the given email.

    Raises:
        InvalidEmailError: If the email is blank or malformed.
        AttendeeNotFoundError: If no participant has this email.
        AttendeeIneligibleError: If the participant has no role.
    """
    email = normalize_pass_email(raw_email)
    participant = Participant.objects.filter(email=email).first()
    if participant is None:
        logger.info("attendee_pass_unknown_email")
        raise AttendeeNotFoundError()
    if not participant.role.strip():
        logger.info("attendee_pass_no_role", attendee_id=str(participant.pk))
        raise AttendeeIneligibleError()

    attendee_pass = AttendeePass(
        email=participant.email,
        attendee_id=participant.pk,
        full_name=participant.full_name,
        valid_from=participant.valid_from,
        valid_to=participant.valid_to,
        drinks_allowed=participant.drinks_allowed or settings.DEFAULT_PASS_DRINKS,
        generated_at=timezone.now().astimezone(ZoneInfo(settings.ATTENDEE_PASS_TIMEZONE)),
    )
    logger.info("attendee_pass_issued", attendee_id=str(participant.pk), role=participant.role)
    return attendee_pass
