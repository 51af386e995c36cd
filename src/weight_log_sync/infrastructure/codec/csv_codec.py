"""
CSV codec for the weight log file.

Converts between the flat ``Date,Name,Weight`` text format and
WeightRecord lists. Decoding is intentionally lossy: rows with fewer
than three fields are dropped and unparsable weights become NaN, so a
hand-edited file never blocks a sync.
"""

import logging
import math
from collections.abc import Iterable

from weight_log_sync.domain.record import WeightRecord

logger = logging.getLogger(__name__)

HEADER = "Date,Name,Weight"
HEADER_MARKER = "date"
FIELD_COUNT = 3


def _parse_weight(value: str) -> float:
    """
    Parse a weight field, returning NaN instead of raising.

    Args:
        value: Stripped field text.

    Returns:
        Float value, or NaN if the text is not a number.
    """
    try:
        return float(value)
    except ValueError:
        return math.nan


def format_weight(weight: float) -> str:
    """
    Format a weight for the file.

    Integral values are written without a fractional part (``70``), others
    with the shortest representation that parses back to the same float.
    """
    if math.isfinite(weight) and weight.is_integer():
        return str(int(weight))
    return repr(weight)


def decode(text: str) -> list[WeightRecord]:
    """
    Decode file text into records.

    Args:
        text: Decoded (plain) file content.

    Returns:
        Records in file order.
    """
    lines = [line for line in text.split("\n") if line.strip()]
    if lines and HEADER_MARKER in lines[0].lower():
        lines = lines[1:]

    records: list[WeightRecord] = []
    dropped = 0

    for line in lines:
        parts = line.split(",")
        if len(parts) < FIELD_COUNT:
            dropped += 1
            continue

        records.append(
            WeightRecord(
                date=parts[0].strip(),
                name=parts[1].strip(),
                weight=_parse_weight(parts[2].strip()),
            )
        )

    if dropped:
        logger.debug(f"Dropped {dropped} malformed rows")

    return records


def encode(records: Iterable[WeightRecord]) -> str:
    """
    Encode records as file text sorted by date.

    Args:
        records: Records to write. The input is not modified.

    Returns:
        File text with a header line and one line per record.
    """
    ordered = sorted(records, key=lambda record: record.date)

    lines = [HEADER]
    lines.extend(
        f"{record.date},{record.name},{format_weight(record.weight)}" for record in ordered
    )
    return "\n".join(lines) + "\n"
