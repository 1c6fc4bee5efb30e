import orjson
import pytest
from django.test.client import Client
from django.urls import reverse

from attendees.models import Participant

pytestmark = pytest.mark.django_db

URL = reverse("api:issue_attendee_pass")


def _post(client: Client, email: str) -> tuple[int, dict]:
    response = client.post(URL, {"email": email}, content_type="application/json")
    return response.status_code, response.json()


def test_issue_pass_anonymously(client: Client) -> None:
    participant = Participant.objects.create(email="alice@example.com", full_name="Alice", role="volunteer")

    status, data = _post(client, "Alice@Example.com")

    assert status == 200
    assert data["attendee_id"] == str(participant.pk)
    assert data["full_name"] == "Alice"
    assert data["drinks_allowed"] == 3
    assert data["valid_from"] is None
    assert orjson.loads(data["qr_data"])["email"] == "alice@example.com"


def test_unknown_email(client: Client) -> None:
    status, data = _post(client, "nobody@example.com")

    assert status == 404
    assert data == {"code": "attendee_not_found", "detail": "Email not found in our database."}


def test_no_role(client: Client) -> None:
    Participant.objects.create(email="alice@example.com")

    status, data = _post(client, "alice@example.com")

    assert status == 400
    assert data["code"] == "attendee_ineligible"


def test_invalid_email(client: Client) -> None:
    status, data = _post(client, "nope")

    assert status == 400
    assert data == {"code": "invalid_email", "detail": "Please enter a valid email address."}
