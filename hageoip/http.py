"""
HTTP layer. One GET per call, no retries.

Pipeline functions take a ``fetch`` callable with the same signature as
:func:`fetch`, so the transport can be swapped out.
"""

from collections import namedtuple
from email.utils import parsedate_to_datetime

import requests

from .errors import TransportError

_UA = {"User-Agent": "ha-geo-ip"}

FetchResult = namedtuple("FetchResult", ["status", "body", "last_modified"])
"""status: int, body: bytes, last_modified: epoch seconds or None"""


def parse_last_modified(value):
    """Convert a Last-Modified header to epoch seconds, None if absent or invalid."""
    if not value:
        return None
    try:
        return parsedate_to_datetime(value).timestamp()
    except (TypeError, ValueError):
        return None


def fetch(url, headers=None, timeout=30):
    """GET url and return a FetchResult. Network failures raise TransportError."""
    h = dict(_UA)
    if headers:
        h.update(headers)
    try:
        resp = requests.get(url, headers=h, timeout=timeout)
    except requests.RequestException as e:
        raise TransportError(f"request to {url} failed: {e}") from e
    return FetchResult(
        resp.status_code,
        resp.content,
        parse_last_modified(resp.headers.get("Last-Modified")),
    )
