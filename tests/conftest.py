import hashlib

import pytest

from hageoip.errors import TransportError
from hageoip.http import FetchResult

FEED_URL = "https://feed.test/haproxy_geo_ip.txt"
SHA_URL = "https://feed.test/haproxy_geo_ip.sha256"
ASN_BASE = "https://asn.test/as"

FEED = b"10.0.0.0/8 DK\n192.168.0.0/16 SE\n203.0.113.0/24 DK"


def sha256_line(content, name="haproxy_geo_ip.txt"):
    return f"{hashlib.sha256(content).hexdigest()}  {name}\n".encode()


class FakeFetch:
    """Maps URLs to FetchResults (or exceptions) and records every request."""

    def __init__(self, routes=None):
        self.routes = dict(routes or {})
        self.calls = []

    def __call__(self, url, headers=None, timeout=30):
        self.calls.append((url, dict(headers or {})))
        if url not in self.routes:
            return FetchResult(404, b"", None)
        res = self.routes[url]
        if isinstance(res, Exception):
            raise res
        return res

    def urls(self):
        return [url for url, _ in self.calls]

    def headers_for(self, url):
        return [h for u, h in self.calls if u == url]


def ok(body, last_modified=None):
    if isinstance(body, str):
        body = body.encode()
    return FetchResult(200, body, last_modified)


NOT_MODIFIED = FetchResult(304, b"", None)


@pytest.fixture
def fake_fetch():
    return FakeFetch()


@pytest.fixture
def feed_routes():
    return {
        FEED_URL: ok(FEED),
        SHA_URL: ok(sha256_line(FEED)),
    }


@pytest.fixture
def unreachable():
    return TransportError("connection refused")
