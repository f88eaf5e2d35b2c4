import pytest

from hageoip.cidr_filter import filter_records, filter_to_file, parse_records, write_lines

from .conftest import FEED


def test_parse_records_drops_malformed_lines():
    content = b"10.0.0.0/8 DK\n\n# comment line here\n1.1.1.0/24\n2.2.2.0/24 SE extra\n  3.3.3.0/24\tNO  \r\n"
    assert list(parse_records(content)) == [("10.0.0.0/8", "DK"), ("3.3.3.0/24", "NO")]


def test_filter_single_code():
    lines, summary = filter_records(FEED, ["DK"])
    assert lines == ["10.0.0.0/8", "203.0.113.0/24"]
    assert summary == {"DK": 2}


def test_filter_reports_zero_for_unmatched_codes():
    lines, summary = filter_records(FEED, ["DK", "NO"])
    assert lines == ["10.0.0.0/8", "203.0.113.0/24"]
    assert summary == {"DK": 2, "NO": 0}
    assert list(summary) == ["DK", "NO"]


def test_filter_keeps_feed_order_across_codes():
    lines, summary = filter_records(FEED, ["SE", "DK"])
    assert lines == ["10.0.0.0/8", "192.168.0.0/16", "203.0.113.0/24"]
    assert list(summary) == ["SE", "DK"]


def test_filter_is_exact_match():
    content = "10.0.0.0/8 dk\n11.0.0.0/8 DKX\n12.0.0.0/8 D\n13.0.0.0/8 DK"
    lines, summary = filter_records(content, ["DK"])
    assert lines == ["13.0.0.0/8"]
    assert summary == {"DK": 1}


@pytest.mark.parametrize(
    "codes", [["DK"], ["SE"], ["DK", "SE"], ["NO"], ["DK", "SE", "NO", "FI"]]
)
def test_summary_total_matches_line_count(codes):
    lines, summary = filter_records(FEED, codes)
    assert sum(summary.values()) == len(lines)
    assert set(summary) == set(codes)


def test_filter_tolerates_invalid_utf8():
    lines, _ = filter_records(b"10.0.0.0/8 DK\n\xff\xfe junk\n", ["DK"])
    assert lines == ["10.0.0.0/8"]


def test_write_lines_truncates(tmp_path):
    out = tmp_path / "okcidr.txt"
    out.write_text("stale\nstale\nstale\n")
    write_lines(str(out), ["1.0.0.0/8", "2.0.0.0/8"])
    assert out.read_bytes() == b"1.0.0.0/8\n2.0.0.0/8"


def test_filter_to_file(tmp_path):
    out = tmp_path / "okcidr.txt"
    lines, summary = filter_to_file(FEED, ["DK"], str(out))
    assert out.read_text() == "10.0.0.0/8\n203.0.113.0/24"
    assert summary == {"DK": 2}


def test_filter_to_file_no_matches_leaves_empty_file(tmp_path):
    out = tmp_path / "okcidr.txt"
    out.write_text("stale")
    filter_to_file(FEED, ["NO"], str(out))
    assert out.read_text() == ""
