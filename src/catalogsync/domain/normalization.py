"""Identifier canonicalization shared by every matcher.

All functions are pure and total except :func:`normalize_offer_url`, which refuses input that
does not parse as an absolute URL.
"""

from __future__ import annotations

import re
from typing import Final
from urllib.parse import parse_qsl, quote, urlencode, urlsplit

_NON_ALNUM_RE: Final = re.compile(r"[^a-z0-9]+")
_REPEATED_SLASH_RE: Final = re.compile(r"/{2,}")
_DEFAULT_PORTS: Final[dict[str, int]] = {"http": 80, "https": 443}
_PATH_SAFE: Final = "/%:@!$&'()*+,;="


class InvalidUrlError(ValueError):
    """Raised when an offer URL cannot be parsed into a stable fingerprint."""

    def __init__(self, url: str, detail: str) -> None:
        super().__init__(f"Invalid offer URL {url!r}: {detail}")
        self.url = url


def normalize_identifier(value: str) -> str:
    """Fold an identifier (SKU, UPC, model number, ...) to lower-case alphanumerics."""

    return _NON_ALNUM_RE.sub("", value.strip().lower())


def normalize_free_text(value: str) -> str:
    """Lower-case and collapse every non-alphanumeric run to a single space."""

    return _NON_ALNUM_RE.sub(" ", value.strip().lower()).strip()


def normalize_scientific_name(value: str) -> str:
    """Normalize a botanical name; an empty result is never a usable match key."""

    return normalize_free_text(value)


def normalize_slug(value: str) -> str:
    return _NON_ALNUM_RE.sub("-", value.strip().lower()).strip("-")


def normalize_offer_url(url: str) -> str:
    """Return a byte-stable key for an offer URL.

    Scheme and host are lower-cased and internationalized hosts IDNA-encoded. Default ports and
    the fragment are dropped. Repeated path slashes collapse, a trailing slash is removed (the
    root path stays ``/``) and non-ASCII path characters are percent-encoded. Query pairs are
    sorted by key then value.
    """

    try:
        parsed = urlsplit(url.strip())
        port = parsed.port
    except ValueError as exc:
        raise InvalidUrlError(url, str(exc)) from exc

    scheme = parsed.scheme.lower()
    hostname = parsed.hostname
    if not scheme:
        raise InvalidUrlError(url, "missing scheme")
    if not hostname:
        raise InvalidUrlError(url, "missing host")
    if not hostname.isascii():
        try:
            hostname = hostname.encode("idna").decode("ascii")
        except UnicodeError as exc:
            raise InvalidUrlError(url, "host is not a valid domain name") from exc

    host = f"[{hostname}]" if ":" in hostname else hostname
    if port is not None and _DEFAULT_PORTS.get(scheme) != port:
        host = f"{host}:{port}"

    path = quote(_normalize_path(parsed.path), safe=_PATH_SAFE)
    query = urlencode(sorted(parse_qsl(parsed.query, keep_blank_values=True)))
    return f"{scheme}://{host}{path}{'?' + query if query else ''}"


def _normalize_path(path: str) -> str:
    collapsed = _REPEATED_SLASH_RE.sub("/", path) or "/"
    if collapsed == "/":
        return collapsed
    return collapsed.rstrip("/") or "/"
