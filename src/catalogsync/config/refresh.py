"""Offer refresh window configuration."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import timedelta
from typing import Final

from .env import optional_int_env_var

DEFAULT_OLDER_THAN_DAYS: Final[int] = 2
DEFAULT_REFRESH_LIMIT: Final[int] = 30
DEFAULT_PROBE_TIMEOUT_SECONDS: Final[int] = 10


@dataclass(frozen=True, slots=True)
class OfferRefreshConfig:
    """How stale an offer must be before a head refresh re-probes it, and how many per run."""

    older_than: timedelta = timedelta(days=DEFAULT_OLDER_THAN_DAYS)
    limit: int = DEFAULT_REFRESH_LIMIT
    probe_timeout_seconds: int = DEFAULT_PROBE_TIMEOUT_SECONDS

    @classmethod
    def from_environment(cls) -> OfferRefreshConfig:
        days = optional_int_env_var(
            "OFFER_REFRESH_OLDER_THAN_DAYS", default=DEFAULT_OLDER_THAN_DAYS
        )
        limit = optional_int_env_var("OFFER_REFRESH_LIMIT", default=DEFAULT_REFRESH_LIMIT)
        timeout = optional_int_env_var(
            "OFFER_PROBE_TIMEOUT_SECONDS", default=DEFAULT_PROBE_TIMEOUT_SECONDS, minimum=1
        )
        return cls(older_than=timedelta(days=days), limit=limit, probe_timeout_seconds=timeout)


def get_offer_refresh_config() -> OfferRefreshConfig:
    return OfferRefreshConfig.from_environment()
