"""
Country filter for the geo-ip feed.

Feed lines look like ``10.0.0.0/8 DK``. Lines that do not split into exactly
two columns are skipped.
"""


def _text(content):
    if isinstance(content, bytes):
        return content.decode("utf-8", errors="replace")
    return content


def parse_records(content):
    """Yield (cidr, country_code) for every well-formed line."""
    for line in _text(content).splitlines():
        columns = line.split()
        if len(columns) == 2:
            yield columns[0], columns[1]


def filter_records(content, country_codes):
    """
    Select the CIDRs whose country code is in country_codes.

    country_codes must already be upper-cased. Returns (lines, summary):
    lines in feed order, summary as {code: count} for every requested code.
    """
    wanted = set(country_codes)
    counts = {}
    lines = []
    for cidr, code in parse_records(content):
        if code in wanted:
            lines.append(cidr)
            counts[code] = counts.get(code, 0) + 1
    summary = {code: counts.get(code, 0) for code in country_codes}
    return lines, summary


def write_lines(path, lines):
    """Replace the contents of path with one CIDR per line, no trailing newline."""
    with open(path, "w", encoding="utf-8", newline="\n") as f:
        f.write("\n".join(lines))


def filter_to_file(content, country_codes, output_path):
    print(f"  [FILTER] Processing CIDR blocks for country codes: {list(country_codes)}")
    lines, summary = filter_records(content, country_codes)
    write_lines(output_path, lines)
    print(f"  [OK] {len(lines)} filtered CIDR blocks written to: {output_path}")
    return lines, summary
