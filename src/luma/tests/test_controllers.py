import httpx
import pytest
from django.test.client import Client
from django.urls import reverse

from api.api import api
from conftest import EVENT_ID, LumaStub

pytestmark = pytest.mark.django_db

URL = reverse("api:luma_get_guest")


def test_proxy_returns_provider_payload_unchanged(operator_client: Client, luma_api: LumaStub) -> None:
    payload = luma_api.add_guest("g-abc", email="alice@example.com", extra_field="kept")

    response = operator_client.get(URL, {"event_api_id": EVENT_ID, "proxy_key": "g-abc"})

    assert response.status_code == 200
    assert response.json() == payload
    assert luma_api.calls[0].headers["x-luma-api-key"] == "test-luma-key"


def test_proxy_refuses_other_events(operator_client: Client, luma_api: LumaStub) -> None:
    response = operator_client.get(URL, {"event_api_id": "evt-other", "proxy_key": "g-abc"})

    assert response.status_code == 403
    data = response.json()
    assert data["code"] == "event_mismatch"
    assert data["scanned_event_id"] == "evt-other"
    assert data["configured_event_id"] == EVENT_ID
    assert luma_api.calls == []


def test_proxy_requires_both_parameters(operator_client: Client, luma_api: LumaStub) -> None:
    response = operator_client.get(URL, {"event_api_id": EVENT_ID})

    assert response.status_code == 422
    assert luma_api.calls == []


def test_proxy_upstream_error(operator_client: Client, luma_api: LumaStub) -> None:
    response = operator_client.get(URL, {"event_api_id": EVENT_ID, "proxy_key": "g-missing"})

    assert response.status_code == 502
    assert response.json()["code"] == "provider_unavailable"


def test_proxy_upstream_timeout(operator_client: Client, luma_api: LumaStub) -> None:
    luma_api.guests["g-slow"] = httpx.ReadTimeout("too slow")

    response = operator_client.get(URL, {"event_api_id": EVENT_ID, "proxy_key": "g-slow"})

    assert response.status_code == 504
    assert response.json()["code"] == "provider_timeout"


def test_proxy_without_api_key(operator_client: Client, settings: object) -> None:
    settings.LUMA_API_KEY = ""  # type: ignore[attr-defined]

    response = operator_client.get(URL, {"event_api_id": EVENT_ID, "proxy_key": "g-abc"})

    assert response.status_code == 503
    assert response.json() == {"code": "provider_not_configured", "detail": "Lu.ma API key not configured."}


def test_proxy_requires_operator(member_client: Client, client: Client, luma_api: LumaStub) -> None:
    assert client.get(URL, {"event_api_id": EVENT_ID, "proxy_key": "g-abc"}).status_code == 401
    assert member_client.get(URL, {"event_api_id": EVENT_ID, "proxy_key": "g-abc"}).status_code == 403
    assert luma_api.calls == []


def test_proxy_documents_every_error_status() -> None:
    responses = api.get_openapi_schema()["paths"]["/api/luma/guest"]["get"]["responses"]

    assert {"200", "403", "502", "503", "504"} <= {str(status) for status in responses}
