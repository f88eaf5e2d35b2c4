"""
Run settings: built-in defaults, overlaid by an optional config.yaml, overlaid
by command-line flags.

Example config.yaml::

    country: [DK, SE]
    asn: [1234]
    ipversion: [4, 6]
    output: /etc/haproxy/okcidr.txt
"""

import os
import re

import yaml

from .asn import ASN_BASE_URL
from .errors import ConfigError

DEFAULTS = {
    "feed-url": "https://wetmore.ca/ip/haproxy_geo_ip.txt",
    "sha256-url": "https://wetmore.ca/ip/haproxy_geo_ip.sha256",
    "asn-base-url": ASN_BASE_URL,
    "snapshot": "haproxy_geo_ip.txt",
    "output": "okcidr.txt",
    "country": [],
    "asn": [],
    "ipversion": [4],
    "aggregate": False,
    "timeout": 30,
}


def load_config(path):
    """Read a YAML config file. Unknown keys are rejected."""
    if not os.path.isfile(path):
        raise ConfigError(f"{path} not found")
    try:
        with open(path, "r", encoding="utf-8") as f:
            config = yaml.safe_load(f) or {}
    except yaml.YAMLError as e:
        raise ConfigError(f"{path} is not valid YAML: {e}") from e
    if not isinstance(config, dict):
        raise ConfigError(f"{path} must contain a mapping")
    unknown = sorted(set(config) - set(DEFAULTS))
    if unknown:
        raise ConfigError(f"{path}: unknown keys {unknown}")
    return config


def _as_list(value):
    if value is None:
        return []
    if isinstance(value, (list, tuple)):
        return list(value)
    return [value]


def normalize_country_codes(codes):
    """Upper-case, strip and de-duplicate, keeping the caller's order."""
    res = []
    for code in _as_list(codes):
        # YAML reads bare NO, ON, YES as booleans
        if not isinstance(code, str):
            raise ConfigError(
                f"country code {code!r} is not a string, quote it in the config (e.g. \"NO\")"
            )
        code = code.strip().upper()
        if code and code not in res:
            res.append(code)
    return res


def normalize_asns(asns):
    """
    'AS1234', 'as1234', 1234 -> '1234'. Order kept.

    Repeated ASNs are fetched once; counts are keyed by ASN.
    """
    res = []
    for asn in _as_list(asns):
        asn = str(asn).strip()
        m = re.fullmatch(r"(?i)(?:as)?(\d+)", asn)
        if not m:
            raise ConfigError(f"invalid ASN: {asn!r}")
        asn = str(int(m.group(1)))
        if asn not in res:
            res.append(asn)
    return res


def build_settings(config=None, args=None):
    """
    Merge DEFAULTS, a loaded config dict and parsed command-line args.

    Non-empty list flags on the command line replace the config lists.
    """
    settings = dict(DEFAULTS)
    settings.update(config or {})

    if args is not None:
        if args.country:
            settings["country"] = args.country
        if args.asn:
            settings["asn"] = args.asn
        if args.snapshot:
            settings["snapshot"] = args.snapshot
        if args.output:
            settings["output"] = args.output
        if args.timeout is not None:
            settings["timeout"] = args.timeout
        if args.ipv6:
            settings["ipversion"] = _as_list(settings["ipversion"]) + [6]
        if args.aggregate:
            settings["aggregate"] = True

    settings["country"] = normalize_country_codes(settings["country"])
    if not settings["country"]:
        raise ConfigError("at least one country code is required")
    settings["asn"] = normalize_asns(settings["asn"])

    ipversions = []
    for v in _as_list(settings["ipversion"]):
        try:
            v = int(v)
        except (TypeError, ValueError):
            v = None
        if v not in (4, 6):
            raise ConfigError("ipversion must be 4 or 6")
        if v not in ipversions:
            ipversions.append(v)
    settings["ipversion"] = ipversions or [4]

    try:
        settings["timeout"] = float(settings["timeout"])
    except (TypeError, ValueError):
        raise ConfigError(f"invalid timeout: {settings['timeout']!r}") from None
    if settings["timeout"] <= 0:
        raise ConfigError("timeout must be positive")
    settings["aggregate"] = bool(settings["aggregate"])
    return settings
