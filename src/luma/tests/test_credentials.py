import pytest

from luma.credentials import GuestCredential, parse_scan
from luma.exceptions import UnrecognizedFormatError

BASES = ("https://lu.ma/check-in", "https://luma.com/check-in")


@pytest.mark.parametrize(
    "text",
    [
        "https://lu.ma/check-in/evt-1?pk=g-abc",
        "https://luma.com/check-in/evt-1?pk=g-abc",
        "  https://lu.ma/check-in/evt-1?pk=g-abc\n",
        "https://lu.ma/check-in/evt-1?pk=g-abc&utm_source=qr",
        "https://lu.ma/check-in/evt-1?pk=g-abc#ticket",
        "https%3A%2F%2Flu.ma%2Fcheck-in%2Fevt-1%3Fpk%3Dg-abc",
    ],
)
def test_parse_scan_accepts_check_in_urls(text: str) -> None:
    assert parse_scan(text, BASES) == GuestCredential(event_id="evt-1", public_key="g-abc")


@pytest.mark.parametrize(
    "text",
    [
        "",
        "hello world",
        '{"email": "alice@example.com", "attendeeId": "123"}',
        "https://lu.ma/check-in/evt-1",
        "https://lu.ma/check-in/evt-1?pk=",
        "https://lu.ma/check-in/?pk=g-abc",
        "https://lu.ma/event/evt-1?pk=g-abc",
        "https://evil.example/check-in/evt-1?pk=g-abc",
        "http://lu.ma/check-in/evt-1?pk=g-abc",
        "https://lu.ma/check-in/evt-1/extra?pk=g-abc",
        "https://lu.ma/check-in/evt-1?other=1&pk=g-abc",
    ],
)
def test_parse_scan_rejects_anything_else(text: str) -> None:
    with pytest.raises(UnrecognizedFormatError):
        parse_scan(text, BASES)


def test_parse_scan_decodes_only_once() -> None:
    """A doubly encoded URL is still encoded after one pass and is rejected."""
    with pytest.raises(UnrecognizedFormatError):
        parse_scan("https%253A%252F%252Flu.ma%252Fcheck-in%252Fevt-1%253Fpk%253Dg-abc", BASES)


def test_parse_scan_uses_configured_bases_only() -> None:
    assert parse_scan("https://checkin.example.org/evt-9?pk=k1", ["https://checkin.example.org/"]) == GuestCredential(
        event_id="evt-9", public_key="k1"
    )
    with pytest.raises(UnrecognizedFormatError):
        parse_scan("https://lu.ma/check-in/evt-9?pk=k1", ["https://checkin.example.org"])


def test_parse_scan_rejects_oversized_identifiers() -> None:
    with pytest.raises(UnrecognizedFormatError):
        parse_scan(f"https://lu.ma/check-in/evt-1?pk={'k' * 256}", BASES)
    with pytest.raises(UnrecognizedFormatError):
        parse_scan(f"https://lu.ma/check-in/{'e' * 256}?pk=g-abc", BASES)
    assert parse_scan(f"https://lu.ma/check-in/evt-1?pk={'k' * 255}", BASES).public_key == "k" * 255
