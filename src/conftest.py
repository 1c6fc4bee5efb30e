"""Shared fixtures: operators, authenticated clients and a stubbed Lu.ma API."""

import typing as t
from dataclasses import dataclass, field

import httpx
import pytest
from django.contrib.auth import get_user_model
from django.contrib.auth.models import AbstractUser, Permission
from django.core.cache import cache
from django.test.client import Client
from ninja_jwt.tokens import RefreshToken
from pytest import MonkeyPatch

from luma.client import LumaClient

EVENT_ID = "evt-popup"
CHECK_IN_BASE = "https://lu.ma/check-in"


def check_in_url(public_key: str, event_id: str = EVENT_ID) -> str:
    """A check-in URL as printed in a guest's QR code."""
    return f"{CHECK_IN_BASE}/{event_id}?pk={public_key}"


def guest_payload(
    public_key: str = "g-abc123",
    email: str | None = "Alice@Example.com",
    name: str | None = "Alice Liddell",
    **overrides: t.Any,
) -> dict[str, t.Any]:
    """A Lu.ma get-guest response body."""
    guest: dict[str, t.Any] = {
        "api_id": f"gst-{public_key}",
        "user_email": email,
        "user_name": name,
        "approval_status": "approved",
        "checked_in_at": None,
        "event_ticket": {"name": "General Admission", "checked_in_at": None},
    }
    guest.update(overrides)
    return {"guest": guest}


@dataclass
class LumaStub:
    """In-memory Lu.ma API keyed by proxy key.

    Unknown keys answer 404. A key mapped to an exception raises it from the transport.
    """

    guests: dict[str, t.Any] = field(default_factory=dict)
    calls: list[httpx.Request] = field(default_factory=list)

    def add_guest(self, public_key: str = "g-abc123", **kwargs: t.Any) -> dict[str, t.Any]:
        payload = guest_payload(public_key, **kwargs)
        self.guests[public_key] = payload
        return payload

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.calls.append(request)
        answer = self.guests.get(request.url.params.get("proxy_key", ""))
        if answer is None:
            return httpx.Response(404, json={"message": "Guest not found"})
        if isinstance(answer, Exception):
            raise answer
        if isinstance(answer, httpx.Response):
            return answer
        return httpx.Response(200, json=answer)

    def client(self, api_key: str = "test-luma-key") -> LumaClient:
        return LumaClient(
            api_key=api_key, base_url="https://luma.test", timeout=1.0, transport=httpx.MockTransport(self.handler)
        )


@pytest.fixture(autouse=True)
def clear_cache() -> t.Iterator[None]:
    """Terminal state and throttle history live in the cache; start every test clean."""
    cache.clear()
    yield
    cache.clear()


@pytest.fixture(autouse=True)
def pos_settings(settings: t.Any) -> None:
    settings.EVENT_ID = EVENT_ID
    settings.DRINKS_LIMIT = 3
    settings.MEALS_LIMIT = 1
    settings.LUMA_API_KEY = "test-luma-key"
    settings.LUMA_CHECK_IN_BASES = [CHECK_IN_BASE]
    settings.POS_PROCESSING_TIMEOUT = 30


@pytest.fixture
def luma_api(monkeypatch: MonkeyPatch) -> LumaStub:
    """Route every Lu.ma call made through ``LumaClient.from_settings`` to an in-memory stub."""
    stub = LumaStub()
    monkeypatch.setattr(LumaClient, "from_settings", classmethod(lambda cls: stub.client()))
    return stub


@pytest.fixture
def operator(django_user_model: t.Type[AbstractUser]) -> AbstractUser:
    """A staff member allowed to redeem entitlements."""
    user = django_user_model.objects.create_user(username="bar-volunteer", password="pass", email="bar@example.com")
    user.user_permissions.add(Permission.objects.get(codename="redeem_entitlements"))
    return get_user_model().objects.get(pk=user.pk)


@pytest.fixture
def other_operator(django_user_model: t.Type[AbstractUser]) -> AbstractUser:
    user = django_user_model.objects.create_user(username="food-volunteer", password="pass")
    user.user_permissions.add(Permission.objects.get(codename="redeem_entitlements"))
    return get_user_model().objects.get(pk=user.pk)


@pytest.fixture
def member(django_user_model: t.Type[AbstractUser]) -> AbstractUser:
    """An authenticated user without POS permissions."""
    return django_user_model.objects.create_user(username="member", password="pass")


def _bearer_client(user: AbstractUser) -> Client:
    refresh = RefreshToken.for_user(user)
    return Client(HTTP_AUTHORIZATION=f"Bearer {refresh.access_token}")  # type: ignore[attr-defined]


@pytest.fixture
def operator_client(operator: AbstractUser) -> Client:
    return _bearer_client(operator)


@pytest.fixture
def member_client(member: AbstractUser) -> Client:
    return _bearer_client(member)
