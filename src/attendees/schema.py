from datetime import date, datetime
from uuid import UUID

from ninja import Schema

from common.schema import StrippedString


class PassRequestSchema(Schema):
    email: StrippedString


class AttendeePassSchema(Schema):
    email: str
    attendee_id: UUID
    full_name: str
    valid_from: date | None = None
    valid_to: date | None = None
    drinks_allowed: int
    generated_at: datetime
    qr_data: str
