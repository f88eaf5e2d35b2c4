"""Append the ASN block to the filtered output without touching what is already there."""

import os


def append_lines(path, new_lines):
    if not new_lines:
        return

    existing = ""
    if os.path.isfile(path):
        with open(path, "r", encoding="utf-8", newline="") as f:
            existing = f.read()

    # exactly one separator between the old content and the new block
    existing = existing.rstrip("\n")
    if existing:
        existing += "\n"
    existing += "\n".join(new_lines)

    with open(path, "w", encoding="utf-8", newline="\n") as f:
        f.write(existing)
    print(f"  [OK] {len(new_lines)} ASN CIDR blocks appended to: {path}")
