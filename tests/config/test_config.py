from __future__ import annotations

import logging
from datetime import timedelta

import pytest

from catalogsync.config import (
    ConfigurationError,
    OfferRefreshConfig,
    configure_logging,
    optional_int_env_var,
)


def test_optional_int_env_var_falls_back_to_default(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("SOME_LIMIT", "")

    assert optional_int_env_var("SOME_LIMIT", default=7) == 7


@pytest.mark.parametrize("raw", ["ten", "-1"])
def test_optional_int_env_var_rejects_bad_values(
    monkeypatch: pytest.MonkeyPatch, raw: str
) -> None:
    monkeypatch.setenv("SOME_LIMIT", raw)

    with pytest.raises(ConfigurationError, match="SOME_LIMIT"):
        optional_int_env_var("SOME_LIMIT", default=7)


def test_offer_refresh_config_defaults(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in (
        "OFFER_REFRESH_OLDER_THAN_DAYS",
        "OFFER_REFRESH_LIMIT",
        "OFFER_PROBE_TIMEOUT_SECONDS",
    ):
        monkeypatch.delenv(name, raising=False)

    config = OfferRefreshConfig.from_environment()

    assert config == OfferRefreshConfig(
        older_than=timedelta(days=2), limit=30, probe_timeout_seconds=10
    )


def test_offer_refresh_config_reads_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("OFFER_REFRESH_OLDER_THAN_DAYS", "5")
    monkeypatch.setenv("OFFER_REFRESH_LIMIT", "100")
    monkeypatch.setenv("OFFER_PROBE_TIMEOUT_SECONDS", "3")

    config = OfferRefreshConfig.from_environment()

    assert config.older_than == timedelta(days=5)
    assert config.limit == 100
    assert config.probe_timeout_seconds == 3


def test_offer_probe_timeout_must_be_positive(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("OFFER_PROBE_TIMEOUT_SECONDS", "0")

    with pytest.raises(ConfigurationError):
        OfferRefreshConfig.from_environment()


def test_configure_logging_reads_level_from_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    captured: dict[str, object] = {}
    monkeypatch.setenv("CATALOGSYNC_LOG_LEVEL", "warning")
    monkeypatch.setattr(logging, "basicConfig", lambda **kwargs: captured.update(kwargs))

    configure_logging()

    assert captured["level"] == "WARNING"
    assert logging.getLogger("catalogsync.audit").level == logging.INFO
