"""
Edit reconciler.

Merges the caller's pending input into the record store, both for a direct
save and when replaying the same input on top of a freshly re-read file.
"""

import logging
import math
import re
from datetime import datetime

from weight_log_sync.domain.record import EditOutcome, PendingEdit
from weight_log_sync.services.record_store import RecordStore

logger = logging.getLogger(__name__)

DATE_PATTERN = re.compile(r"\d{4}-\d{2}-\d{2}")
FORBIDDEN_NAME_CHARS = (",", "\n", "\r")


def is_valid_date(date: str) -> bool:
    """Check for a real calendar date in zero-padded YYYY-MM-DD form."""
    if not DATE_PATTERN.fullmatch(date):
        return False
    try:
        datetime.strptime(date, "%Y-%m-%d")
    except ValueError:
        return False
    return True


def is_valid_name(name: str) -> bool:
    """Check that a name is non-blank and fits in one CSV field."""
    return bool(name.strip()) and name == name.strip() and not any(
        char in name for char in FORBIDDEN_NAME_CHARS
    )


def parse_positive_value(raw_value: str | float) -> float | None:
    """
    Parse a raw input value.

    Args:
        raw_value: Value as typed by the caller, or already numeric.

    Returns:
        Positive finite float, or None if the input is not one.
    """
    if isinstance(raw_value, bool):
        return None

    try:
        value = float(raw_value.strip()) if isinstance(raw_value, str) else float(raw_value)
    except (TypeError, ValueError):
        return None

    if not math.isfinite(value) or value <= 0:
        return None
    return value


class EditReconciler:
    """Applies one pending edit to a record store, keyed by (date, name)."""

    def __init__(self, store: RecordStore) -> None:
        self.store = store

    def apply_pending_input(self, date: str, name: str, raw_value: str | float) -> EditOutcome:
        """
        Merge a pending input into the store.

        Args:
            date: Calendar date (YYYY-MM-DD).
            name: Identity label.
            raw_value: Input value; must be a positive number.

        Returns:
            ACCEPTED if the store was updated, REJECTED otherwise.
        """
        if not is_valid_date(date) or not is_valid_name(name):
            logger.debug(f"Rejected key ({date!r}, {name!r})")
            return EditOutcome.REJECTED

        value = parse_positive_value(raw_value)
        if value is None:
            logger.debug(f"Rejected input {raw_value!r} for {name} on {date}")
            return EditOutcome.REJECTED

        self.store.upsert(date, name, value)
        return EditOutcome.ACCEPTED

    def apply(self, edit: PendingEdit) -> EditOutcome:
        """Merge a PendingEdit into the store."""
        return self.apply_pending_input(edit.date, edit.name, edit.raw_value)
