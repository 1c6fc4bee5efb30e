"""Parsing of scanned check-in credentials."""

import re
import typing as t
from dataclasses import dataclass
from functools import lru_cache
from urllib.parse import unquote

from .exceptions import UnrecognizedFormatError


@dataclass(frozen=True)
class GuestCredential:
    event_id: str
    public_key: str


@lru_cache(maxsize=32)
def _check_in_pattern(base: str) -> re.Pattern[str]:
    prefix = re.escape(base.rstrip("/"))
    return re.compile(
        rf"^{prefix}/(?P<event_id>[^/?#\s]{{1,255}})"
        r"\?pk=(?P<public_key>[^&#\s]{1,255})(?:[&#].*)?$"
    )


def parse_scan(text: str, check_in_bases: t.Iterable[str]) -> GuestCredential:
    """Extract the event id and guest public key from a scanned check-in URL.

    The text is URL-decoded exactly once, so both raw and percent-encoded
    URLs are accepted. Anything that is not `<base>/<event_id>?pk=<public_key>`
    for one of the given bases is rejected. Event ids and public keys are at most
    255 characters long.

    Raises:
        UnrecognizedFormatError: If the text does not match any check-in base.
    """
    decoded = unquote(text.strip())
    for base in check_in_bases:
        if match := _check_in_pattern(base).match(decoded):
            return GuestCredential(event_id=match["event_id"], public_key=match["public_key"])
    raise UnrecognizedFormatError()
