"""
Conditional refresh of the local feed snapshot.

The snapshot's mtime is the only freshness token: it is sent back as
If-Modified-Since, and the snapshot is only ever replaced by a body that
passed SHA-256 verification.
"""

import os
import stat
import tempfile
from email.utils import formatdate

from .errors import TransportError
from .http import fetch as http_fetch
from .integrity import verify

FRESH = "fresh"
CACHED = "cached"


def http_date(timestamp):
    """Epoch seconds -> IMF-fixdate, e.g. 'Sun, 06 Nov 1994 08:49:37 GMT'."""
    return formatdate(timestamp, usegmt=True)


def conditional_headers(snapshot_path):
    if not os.path.isfile(snapshot_path):
        return {}
    return {"If-Modified-Since": http_date(os.path.getmtime(snapshot_path))}


def read_snapshot(snapshot_path):
    with open(snapshot_path, "rb") as f:
        return f.read()


def _snapshot_mode(snapshot_path):
    """Mode of the existing snapshot, else 0666 minus the umask (mkstemp uses 0600)."""
    if os.path.isfile(snapshot_path):
        return stat.S_IMODE(os.stat(snapshot_path).st_mode)
    umask = os.umask(0)
    os.umask(umask)
    return 0o666 & ~umask


def commit_snapshot(snapshot_path, content, last_modified=None):
    """
    Atomically replace the snapshot with content.

    Written to a temp file in the same directory and renamed over the old
    snapshot, so a failed write never leaves a truncated snapshot behind.
    When last_modified is given, the snapshot mtime is set to it.
    """
    directory = os.path.dirname(os.path.abspath(snapshot_path))
    os.makedirs(directory, exist_ok=True)
    fd, tmp_path = tempfile.mkstemp(
        dir=directory, prefix=".", suffix=".tmp"
    )
    try:
        with os.fdopen(fd, "wb") as f:
            f.write(content)
        os.chmod(tmp_path, _snapshot_mode(snapshot_path))
        if last_modified is not None:
            os.utime(tmp_path, (last_modified, last_modified))
        os.replace(tmp_path, snapshot_path)
    except BaseException:
        if os.path.exists(tmp_path):
            os.unlink(tmp_path)
        raise


def resolve_content(feed_url, digest_url, snapshot_path, fetch=http_fetch, timeout=30):
    """
    Return (content, source) where source is FRESH or CACHED.

    200 -> verify, commit, FRESH
    304 -> local snapshot, CACHED
    anything else -> TransportError
    """
    headers = conditional_headers(snapshot_path)
    if headers:
        print(f"  [FEED] Local snapshot modified {headers['If-Modified-Since']}")
    print(f"  [FEED] Fetching IP geolocation data from: {feed_url}")
    resp = fetch(feed_url, headers=headers, timeout=timeout)

    if resp.status == 200:
        print("  [FEED] New version of the file found")
        verify(resp.body, digest_url, fetch=fetch, timeout=timeout)
        commit_snapshot(snapshot_path, resp.body, resp.last_modified)
        print(f"  [OK] Local snapshot updated -> {snapshot_path}")
        return resp.body, FRESH

    if resp.status == 304:
        if not os.path.isfile(snapshot_path):
            raise TransportError(
                f"{feed_url} answered 304 but there is no local snapshot at {snapshot_path}"
            )
        print("  [FEED] Local snapshot is already up-to-date")
        return read_snapshot(snapshot_path), CACHED

    raise TransportError(f"Failed to fetch {feed_url}: HTTP {resp.status}")
