"""Unit tests for the CSV codec."""

import math

from weight_log_sync.domain.record import WeightRecord
from weight_log_sync.infrastructure.codec.csv_codec import decode, encode, format_weight


def test_decode_skips_header_and_blank_lines() -> None:
    """Test that the header and blank lines are not records."""
    text = "Date,Name,Weight\n\n2026-01-05,User,70.2\n   \n2026-01-06,User,69.8\n"

    records = decode(text)

    if len(records) != 2:
        raise AssertionError(f"Expected 2 records, got {len(records)}")
    if records[0] != WeightRecord(date="2026-01-05", name="User", weight=70.2):
        raise AssertionError(f"Unexpected first record: {records[0]}")


def test_decode_without_header() -> None:
    """Test that a file without header keeps its first row."""
    records = decode("2026-01-05,User,70.2")

    if len(records) != 1:
        raise AssertionError(f"Expected 1 record, got {len(records)}")


def test_decode_header_detection_is_case_insensitive() -> None:
    """Test header detection on a differently cased header."""
    records = decode("DATE,NAME,WEIGHT\r\n2026-01-05,User,70.2\r\n")

    if len(records) != 1 or records[0].weight != 70.2:
        raise AssertionError(f"Unexpected records: {records}")


def test_decode_drops_short_rows() -> None:
    """Test that rows with fewer than three fields are dropped silently."""
    text = "Date,Name,Weight\n2026-01-05,User\ngarbage\n2026-01-06,User,69.8,extra\n"

    records = decode(text)

    if [r.date for r in records] != ["2026-01-06"]:
        raise AssertionError(f"Expected only the 2026-01-06 row, got {records}")


def test_decode_unparsable_weight_is_nan() -> None:
    """Test that a bad weight yields NaN instead of an error."""
    records = decode("2026-01-05, User , heavy\n")

    if records[0].name != "User":
        raise AssertionError(f"Expected stripped name, got {records[0].name!r}")
    if not math.isnan(records[0].weight):
        raise AssertionError(f"Expected NaN, got {records[0].weight}")


def test_encode_sorts_by_date() -> None:
    """Test that output is sorted ascending by date regardless of input order."""
    records = [
        WeightRecord(date="2026-01-09", name="User", weight=69.5),
        WeightRecord(date="2025-12-31", name="User", weight=71.0),
        WeightRecord(date="2026-01-02", name="Other", weight=55.25),
    ]

    text = encode(records)

    expected = (
        "Date,Name,Weight\n"
        "2025-12-31,User,71\n"
        "2026-01-02,Other,55.25\n"
        "2026-01-09,User,69.5\n"
    )
    if text != expected:
        raise AssertionError(f"Unexpected encoding:\n{text}")
    if records[0].date != "2026-01-09":
        raise AssertionError("encode must not reorder its input")


def test_encode_empty_set() -> None:
    """Test that an empty set encodes to just the header."""
    if encode([]) != "Date,Name,Weight\n":
        raise AssertionError(f"Unexpected encoding: {encode([])!r}")


def test_format_weight() -> None:
    """Test integral and fractional weight formatting."""
    if format_weight(70.0) != "70":
        raise AssertionError(format_weight(70.0))
    if format_weight(69.8) != "69.8":
        raise AssertionError(format_weight(69.8))
    if format_weight(math.nan) != "nan":
        raise AssertionError(format_weight(math.nan))


def test_round_trip_reaches_fixpoint() -> None:
    """Test that a second decode/encode pass changes nothing."""
    hand_written = "date,name,weight\n2026-01-07,User,70.1\nbroken,row\n2026-01-03,User,71\n"

    first = encode(decode(hand_written))
    second = encode(decode(first))

    if first != second:
        raise AssertionError(f"Not a fixpoint:\n{first}\n!=\n{second}")
    if len(decode(first)) != 2:
        raise AssertionError("Expected the malformed row to be dropped on first decode")


def test_round_trip_preserves_valid_records() -> None:
    """Test that valid records survive encode/decode as a set."""
    records = [
        WeightRecord(date="2026-01-05", name="User", weight=70.2),
        WeightRecord(date="2026-01-01", name="User", weight=0.1 + 0.2),
        WeightRecord(date="2026-01-03", name="Other", weight=80.0),
    ]

    decoded = decode(encode(records))

    if {r.key(): r.weight for r in decoded} != {r.key(): r.weight for r in records}:
        raise AssertionError(f"Round trip changed records: {decoded}")
