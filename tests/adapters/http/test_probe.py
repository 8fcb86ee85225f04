from __future__ import annotations

import httpx
import pytest

from catalogsync.adapters.http import HttpHeadProbe, RetryPolicy

NO_RETRY = RetryPolicy(total=0)


@pytest.mark.parametrize(
    ("status", "expected"), [(200, True), (204, True), (404, False), (500, False)]
)
def test_probe_maps_status_to_reachability(status: int, expected: bool) -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(status)

    with HttpHeadProbe(retry=NO_RETRY, transport=httpx.MockTransport(handler)) as probe:
        assert probe("https://shop.example.com/p/1") is expected

    (request,) = seen
    assert request.method == "HEAD"
    assert request.headers["User-Agent"].startswith("catalogsync-offer-checker/")


def test_probe_follows_redirects() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        if request.url.path == "/old":
            return httpx.Response(302, headers={"Location": "https://shop.example.com/new"})
        return httpx.Response(200)

    with HttpHeadProbe(retry=NO_RETRY, transport=httpx.MockTransport(handler)) as probe:
        assert probe("https://shop.example.com/old") is True


def test_transport_error_counts_as_unreachable() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    with HttpHeadProbe(retry=NO_RETRY, transport=httpx.MockTransport(handler)) as probe:
        assert probe("https://gone.example.com/p/1") is False
