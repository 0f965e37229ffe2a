"""Linear configuration values."""

from __future__ import annotations

from dataclasses import dataclass

from .env import require_env_vars
from .http_resilience import RateLimit, ResilienceConfig, RetryPolicy

LINEAR_API_URL = "https://api.linear.app/graphql"
LINEAR_TIMEOUT_SECONDS = 15.0


@dataclass(frozen=True)
class LinearConfig:
    """Holds Linear API configuration values."""

    api_key: str
    team_id: str
    resilience: ResilienceConfig


def get_linear_config(*, resilience: ResilienceConfig | None = None) -> LinearConfig:
    values = require_env_vars(("LINEAR_API_KEY", "LINEAR_TEAM_ID"))
    return LinearConfig(
        api_key=values["LINEAR_API_KEY"],
        team_id=values["LINEAR_TEAM_ID"],
        resilience=resilience
        or ResilienceConfig(
            name="linear",
            base_url=LINEAR_API_URL,
            timeout_seconds=LINEAR_TIMEOUT_SECONDS,
            ratelimit=RateLimit(max_calls=20, per_seconds=1.0),
            retry=RetryPolicy(total=3),
        ),
    )
