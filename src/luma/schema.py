"""Schemas for the Lu.ma guest list provider and the resolver output."""

from datetime import datetime

from ninja import Schema
from pydantic import BaseModel, ConfigDict


class LumaEventTicket(BaseModel):
    model_config = ConfigDict(extra="ignore")

    name: str | None = None
    checked_in_at: datetime | None = None


class LumaGuest(BaseModel):
    model_config = ConfigDict(extra="ignore")

    api_id: str | None = None
    user_email: str | None = None
    user_name: str | None = None
    approval_status: str | None = None
    checked_in_at: datetime | None = None
    event_ticket: LumaEventTicket | None = None


class LumaGuestResponse(BaseModel):
    """Body of `GET /v1/event/get-guest`. Everything is optional: the provider is untrusted."""

    model_config = ConfigDict(extra="ignore")

    guest: LumaGuest | None = None


class ResolvedGuest(Schema):
    """A scanned credential resolved to a verified Lu.ma guest."""

    event_id: str
    public_key: str
    email: str
    name: str
    approval_status: str
    checked_in_at: datetime | None = None
    ticket_name: str
