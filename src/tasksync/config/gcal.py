"""Google Calendar configuration values."""

from __future__ import annotations

from dataclasses import dataclass

from .env import require_env_vars
from .http_resilience import RateLimit, ResilienceConfig, RetryPolicy

GCAL_BASE_URL = "https://www.googleapis.com/calendar/v3"
GCAL_SCOPES = ("https://www.googleapis.com/auth/calendar",)


@dataclass(frozen=True)
class GoogleCalendarConfig:
    service_account_json: str
    scopes: tuple[str, ...]
    resilience: ResilienceConfig


def get_gcal_config(*, resilience: ResilienceConfig | None = None) -> GoogleCalendarConfig:
    """``GOOGLE_SERVICE_ACCOUNT_JSON`` may hold plain or base64 encoded JSON."""

    values = require_env_vars(("GOOGLE_SERVICE_ACCOUNT_JSON",))
    return GoogleCalendarConfig(
        service_account_json=values["GOOGLE_SERVICE_ACCOUNT_JSON"],
        scopes=GCAL_SCOPES,
        resilience=resilience
        or ResilienceConfig(
            name="gcal",
            base_url=GCAL_BASE_URL,
            ratelimit=RateLimit(max_calls=10, per_seconds=1.0),
            retry=RetryPolicy(total=4),
        ),
    )
