"""Offer reachability probe issuing HTTP HEAD requests."""

from __future__ import annotations

from dataclasses import dataclass, field
from logging import getLogger
from typing import TYPE_CHECKING

import httpx
from httpx_retries import Retry, RetryTransport

from catalogsync import __version__

if TYPE_CHECKING:
    from types import TracebackType

log = getLogger(__name__)

DEFAULT_USER_AGENT = f"catalogsync-offer-checker/{__version__}"
DEFAULT_ACCEPT = "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8"


@dataclass(slots=True, frozen=True)
class RetryPolicy:
    total: int = 2
    backoff_factor: float = 0.5
    max_backoff_wait: float = 10.0
    respect_retry_after_header: bool = True
    status_forcelist: frozenset[int] = field(
        default_factory=lambda: frozenset({429, 502, 503, 504})
    )
    retry_on_exceptions: tuple[type[httpx.HTTPError], ...] = (
        httpx.TimeoutException,
        httpx.NetworkError,
        httpx.RemoteProtocolError,
    )

    def build(self) -> Retry:
        return Retry(
            total=self.total,
            backoff_factor=self.backoff_factor,
            max_backoff_wait=self.max_backoff_wait,
            respect_retry_after_header=self.respect_retry_after_header,
            allowed_methods=("HEAD",),
            status_forcelist=tuple(self.status_forcelist),
            retry_on_exceptions=self.retry_on_exceptions,
        )


class HttpHeadProbe:
    """Answer whether an offer URL still resolves.

    Any status in ``[200, 400)`` after following redirects counts as reachable. Transport
    errors and timeouts count as unreachable rather than propagating, so a single dead shop
    does not abort a refresh run.
    """

    def __init__(
        self,
        *,
        timeout_seconds: float = 10.0,
        user_agent: str = DEFAULT_USER_AGENT,
        retry: RetryPolicy | None = None,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self._client = httpx.Client(
            timeout=timeout_seconds,
            follow_redirects=True,
            headers={"User-Agent": user_agent, "Accept": DEFAULT_ACCEPT},
            transport=RetryTransport(
                transport=transport or httpx.HTTPTransport(),
                retry=(retry or RetryPolicy()).build(),
            ),
        )

    def __call__(self, url: str) -> bool | None:
        try:
            response = self._client.head(url)
        except httpx.HTTPError as exc:
            log.warning("HEAD %s failed: %s", url, exc)
            return False
        reachable = 200 <= response.status_code < 400
        log.debug("HEAD %s -> %s (reachable=%s)", url, response.status_code, reachable)
        return reachable

    def close(self) -> None:
        self._client.close()

    def __enter__(self) -> HttpHeadProbe:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_value: BaseException | None,
        traceback: TracebackType | None,
    ) -> None:
        self.close()
