"""
Per-ASN prefix lists from ipverse/asn-ip.

Every target is fetched on its own; a failing target is reported as a warning
and contributes nothing, the rest of the run carries on.
"""

import ipaddress

from aggregate_prefixes import aggregate_prefixes

from .errors import TransportError
from .http import fetch as http_fetch

ASN_BASE_URL = "https://raw.githubusercontent.com/ipverse/asn-ip/master/as"


# ---------------------------------------------------------------------------
# ASN validation
# ---------------------------------------------------------------------------


def validate_asn(asn):
    """Classify an ASN. Returns:
    0 = private, 1 = public, 2 = AS pool transition,
    3 = documentation, 4 = reserved, 5 = reserved block, -1 = invalid
    """
    asn = int(asn)
    if 1 <= asn <= 23455:
        return 1
    elif asn == 23456:
        return 2
    elif 23457 <= asn <= 64495:
        return 1
    elif 64496 <= asn <= 64511:
        return 3
    elif 64512 <= asn <= 65534:
        return 0
    elif asn == 65535:
        return 4
    elif 65536 <= asn <= 65551:
        return 3
    elif 65552 <= asn <= 131071:
        return 5
    elif 131072 <= asn <= 4199999999:
        return 1
    elif 4200000000 <= asn <= 4294967294:
        return 0
    elif asn == 4294967295:
        return 4
    return -1


_ASN_TYPE_NAMES = {
    -1: "invalid",
    0: "private",
    2: "AS pool transition",
    3: "documentation",
    4: "reserved",
    5: "reserved",
}


# ---------------------------------------------------------------------------
# Fetching
# ---------------------------------------------------------------------------


class AsnResult:
    """Outcome of aggregate(): lines in target order, per-ASN counts, warnings."""

    def __init__(self):
        self.lines = []
        self.counts = {}
        """asn:raw source line count"""
        self.warnings = []

    @property
    def total(self):
        return sum(self.counts.values())


def asn_url(base_url, asn, ipversion=4):
    if ipversion not in (4, 6):
        raise ValueError("ipversion must be 4 or 6")
    return f"{base_url.rstrip('/')}/{asn}/ipv{ipversion}-aggregated.txt"


def parse_asn_lines(text):
    """
    Return (cidrs, raw_count).

    raw_count is the number of lines the source returned, blank ones
    included. cidrs holds the stripped, non-empty, non-comment lines.
    """
    raw = text.splitlines()
    cidrs = []
    for line in raw:
        line = line.strip()
        if line and not line.startswith("#"):
            cidrs.append(line)
    return cidrs, len(raw)


def fetch_asn(asn, ipversion=4, base_url=ASN_BASE_URL, fetch=http_fetch, timeout=30):
    """Fetch one ASN list. Raises TransportError on failure or non-2xx status."""
    url = asn_url(base_url, asn, ipversion)
    print(f"  [ASN] Fetching AS{asn} ipv{ipversion} from: {url}")
    resp = fetch(url, timeout=timeout)
    if not 200 <= resp.status < 300:
        raise TransportError(f"HTTP {resp.status}")
    return parse_asn_lines(resp.body.decode("utf-8", errors="replace"))


def aggregate(targets, base_url=ASN_BASE_URL, ipversions=(4,), fetch=http_fetch, timeout=30):
    """
    Fetch every target in order and concatenate their CIDRs.

    Nothing is de-duplicated across targets. Targets whose fetches all
    failed, and non-public ASNs, are left out of result.counts.
    """
    result = AsnResult()
    for asn in targets:
        try:
            asn_type = validate_asn(asn)
        except ValueError:
            asn_type = -1
        if asn_type != 1:
            msg = f"Warning: AS{asn} is not a public ASN ({_ASN_TYPE_NAMES[asn_type]}), skipped"
            print(f"  [SKIP] {msg}")
            result.warnings.append(msg)
            continue

        fetched = False
        count = 0
        for ipversion in ipversions:
            try:
                cidrs, raw_count = fetch_asn(
                    asn, ipversion, base_url=base_url, fetch=fetch, timeout=timeout
                )
            except TransportError as e:
                msg = f"Warning: Failed to fetch AS{asn} ipv{ipversion}: {e}"
                print(f"  [FAIL] {msg}")
                result.warnings.append(msg)
                continue
            fetched = True
            count += raw_count
            result.lines.extend(cidrs)

        if fetched:
            result.counts[asn] = count
            print(f"  [OK] AS{asn} CIDR blocks fetched: {count}")
    return result


# ---------------------------------------------------------------------------
# Prefix aggregation
# ---------------------------------------------------------------------------


def aggregate_cidrs(lines, warnings=None):
    """
    Collapse adjacent and overlapping prefixes, IPv4 first, then IPv6.

    Lines that are not valid networks are dropped; a message is appended to
    warnings for each when a list is given.
    """
    by_version = {4: [], 6: []}
    for line in lines:
        try:
            network = ipaddress.ip_network(line, strict=False)
        except ValueError:
            if warnings is not None:
                warnings.append(f"Warning: '{line}' is not a valid CIDR, dropped")
            continue
        by_version[network.version].append(str(network))

    res = []
    for ipversion in (4, 6):
        if by_version[ipversion]:
            res += [str(p) for p in aggregate_prefixes(by_version[ipversion])]
    return res
