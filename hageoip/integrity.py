"""
SHA-256 verification of a downloaded feed against its published checksum file.

The checksum file follows the ``sha256sum`` layout (``<hex digest>  <name>``),
so only the first token is used.
"""

import hashlib

from .errors import IntegrityError, TransportError
from .http import fetch as http_fetch


def sha256_hex(content):
    return hashlib.sha256(content).hexdigest()


def expected_digest(digest_text):
    """First whitespace-delimited token of the checksum file, lower-cased."""
    tokens = digest_text.split()
    if not tokens:
        return ""
    return tokens[0].lower()


def verify_digest(content, digest_text):
    """Raise IntegrityError unless sha256(content) matches digest_text."""
    expected = expected_digest(digest_text)
    calculated = sha256_hex(content)
    if calculated != expected:
        raise IntegrityError(expected, calculated)
    return calculated


def verify(content, digest_url, fetch=http_fetch, timeout=30):
    """Fetch the checksum from digest_url and verify content against it."""
    print(f"  [SHA256] Verifying integrity with SHA256 from: {digest_url}")
    resp = fetch(digest_url, timeout=timeout)
    if resp.status != 200:
        raise TransportError(
            f"Failed to fetch checksum {digest_url}: HTTP {resp.status}"
        )
    digest = verify_digest(content, resp.body.decode("utf-8", errors="replace"))
    print("  [OK] SHA256 verification successful")
    return digest
