"""
generate.py: refresh the geo-ip snapshot and write the filtered CIDR list.

Usage:
    ha-geo-ip -c DK -c SE
    ha-geo-ip -c DK -a 1234 -a 5678 --ipv6
    ha-geo-ip --config config.yaml --output /etc/haproxy/okcidr.txt
"""

import argparse
import sys

from .asn import aggregate, aggregate_cidrs
from .cache import resolve_content
from .cidr_filter import filter_to_file
from .config import build_settings, load_config
from .errors import GeoIPError, IntegrityError
from .http import fetch as http_fetch
from .merge import append_lines


class RunReport:
    def __init__(self, source, lines, summary, asn=None):
        self.source = source
        self.lines = lines
        self.summary = summary
        self.asn = asn

    @property
    def total(self):
        return sum(self.summary.values())

    @property
    def warnings(self):
        return self.asn.warnings if self.asn is not None else []


def banner(title):
    print("=" * 60)
    print(title)
    print("=" * 60)


# ---------------------------------------------------------------------------
# Pipeline
# ---------------------------------------------------------------------------


def run(settings, fetch=http_fetch):
    """
    Refresh, filter and merge according to settings (see config.build_settings).

    Raises GeoIPError subclasses for anything fatal; ASN failures end up in
    the report's warnings instead.
    """
    timeout = settings["timeout"]

    banner("Updating geo-ip feed")
    content, source = resolve_content(
        settings["feed-url"],
        settings["sha256-url"],
        settings["snapshot"],
        fetch=fetch,
        timeout=timeout,
    )
    lines, summary = filter_to_file(content, settings["country"], settings["output"])
    report = RunReport(source, lines, summary)

    if settings["asn"]:
        print()
        banner("Fetching ASN prefixes")
        result = aggregate(
            settings["asn"],
            base_url=settings["asn-base-url"],
            ipversions=settings["ipversion"],
            fetch=fetch,
            timeout=timeout,
        )
        asn_lines = result.lines
        if settings["aggregate"] and asn_lines:
            asn_lines = aggregate_cidrs(asn_lines, result.warnings)
            print(f"  [AGGREGATE] {len(result.lines)} -> {len(asn_lines)} prefixes")
        append_lines(settings["output"], asn_lines)
        report.asn = result

    return report


def format_summary(report, settings):
    """Render the country and ASN summaries, in the order they were requested."""
    out = ["Summary:"]
    for code in settings["country"]:
        out.append(f"  {code} CIDR blocks: {report.summary.get(code, 0)}")
    out.append(f"  Total matching blocks: {report.total}")

    if report.asn is not None and report.asn.counts:
        out.append("ASN Summary:")
        for asn in settings["asn"]:
            if asn in report.asn.counts:
                out.append(f"  AS{asn} CIDR blocks: {report.asn.counts[asn]}")
        out.append(f"  Total ASN blocks: {report.asn.total}")
    return "\n".join(out)


# ---------------------------------------------------------------------------
# Command line
# ---------------------------------------------------------------------------


def parse_args(argv=None):
    parser = argparse.ArgumentParser(
        prog="ha-geo-ip",
        description="Filter IP geolocation data by country codes",
    )
    parser.add_argument(
        "-c",
        "--country",
        action="append",
        default=[],
        help="Country code to keep (repeatable)",
    )
    parser.add_argument(
        "-a",
        "--asn",
        action="append",
        default=[],
        help="ASN whose prefixes are appended to the output (repeatable)",
    )
    parser.add_argument("--config", default=None, help="Path to a YAML config file")
    parser.add_argument("--snapshot", default=None, help="Local copy of the geo-ip feed")
    parser.add_argument("--output", default=None, help="Filtered CIDR list to write")
    parser.add_argument(
        "--ipv6", action="store_true", help="Also fetch IPv6 prefixes for the ASNs"
    )
    parser.add_argument(
        "--aggregate",
        action="store_true",
        help="Aggregate the ASN prefixes before appending them",
    )
    parser.add_argument(
        "--timeout", type=float, default=None, help="HTTP timeout in seconds"
    )
    return parser.parse_args(argv)


def main(argv=None, fetch=http_fetch):
    args = parse_args(argv)
    try:
        config = load_config(args.config) if args.config else {}
        settings = build_settings(config, args)
        report = run(settings, fetch=fetch)
    except IntegrityError as e:
        print(f"  [FAIL] {e}")
        print("  Local snapshot left unchanged.")
        return 1
    except (GeoIPError, OSError) as e:
        print(f"  [FAIL] {e}")
        return 1

    print()
    print(format_summary(report, settings))

    if report.warnings:
        print()
        print("All done. Below is the warnings: ----------------------------------")
        for w in report.warnings:
            print(w)
    return 0


if __name__ == "__main__":
    sys.exit(main())
