"""Event, Lu.ma and POS terminal settings."""

from decouple import Csv, config

# Scans for any other event are rejected when set.
EVENT_ID: str | None = config("EVENT_ID", default="") or None

DRINKS_LIMIT = config("DRINKS_LIMIT", default=3, cast=int)
MEALS_LIMIT = config("MEALS_LIMIT", default=1, cast=int)

LUMA_API_KEY = config("LUMA_API_KEY", default="")
LUMA_API_BASE_URL = config("LUMA_API_BASE_URL", default="https://public-api.luma.com")
LUMA_CHECK_IN_BASES = config(
    "LUMA_CHECK_IN_BASES",
    default="https://lu.ma/check-in,https://luma.com/check-in",
    cast=Csv(),
)
LUMA_TIMEOUT_SECONDS = config("LUMA_TIMEOUT_SECONDS", default=5.0, cast=float)

POS_PROCESSING_TIMEOUT = config("POS_PROCESSING_TIMEOUT", default=30, cast=int)

ATTENDEE_PASS_TIMEZONE = config("ATTENDEE_PASS_TIMEZONE", default="America/Los_Angeles")
DEFAULT_PASS_DRINKS = config("DEFAULT_PASS_DRINKS", default=3, cast=int)
