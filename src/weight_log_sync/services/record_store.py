"""
Record store service.

Holds the full record set last observed from the remote and derives the
per-identity, per-month view from it.
"""

import logging
import math
from collections.abc import Iterable

from weight_log_sync.domain.record import WeightRecord

logger = logging.getLogger(__name__)


def _parse_year_month(year_month: str) -> tuple[int, int]:
    """
    Split a YYYY-MM period into integers.

    Raises:
        ValueError: If the period is not in YYYY-MM form.
    """
    parts = year_month.split("-")
    if len(parts) != 2:
        raise ValueError(f"Invalid period (expected YYYY-MM): {year_month!r}")
    return int(parts[0]), int(parts[1])


class RecordStore:
    """
    In-memory record set.

    ``upsert`` is the only way to change individual records; everything else
    replaces the set wholesale. Views are recomputed on every call so they
    can never go stale.
    """

    def __init__(self, records: Iterable[WeightRecord] | None = None) -> None:
        self._records: list[WeightRecord] = list(records) if records else []

    def __len__(self) -> int:
        return len(self._records)

    @property
    def records(self) -> list[WeightRecord]:
        """Copy of the current record set."""
        return [record.model_copy() for record in self._records]

    def replace_all(self, records: Iterable[WeightRecord]) -> None:
        """
        Swap the entire record set.

        Args:
            records: New authoritative records.
        """
        self._records = list(records)
        logger.debug(f"Record set replaced ({len(self._records)} records)")

    def clear(self) -> None:
        """Reset to the empty set."""
        self._records = []

    def upsert(self, date: str, name: str, weight: float) -> WeightRecord:
        """
        Update the record for (date, name) in place, or append a new one.

        Args:
            date: Calendar date (YYYY-MM-DD).
            name: Identity label.
            weight: New value.

        Returns:
            The stored record.
        """
        for record in self._records:
            if record.date == date and record.name == name:
                record.weight = weight
                return record

        record = WeightRecord(date=date, name=name, weight=weight)
        self._records.append(record)
        return record

    def filter_for(self, name: str, year_month: str) -> dict[int, float]:
        """
        Project one identity's records in one month to day -> value.

        Args:
            name: Identity label.
            year_month: Period in YYYY-MM form.

        Returns:
            Mapping of day of month to value. Unparsable dates and NaN
            values are left out.
        """
        year, month = _parse_year_month(year_month)
        view: dict[int, float] = {}

        for record in self._records:
            if record.name != name:
                continue

            parts = record.date.split("-")
            if len(parts) != 3:
                continue

            try:
                y, m, d = (int(part) for part in parts)
            except ValueError:
                continue

            if y == year and m == month and not math.isnan(record.weight):
                view[d] = record.weight

        return view
