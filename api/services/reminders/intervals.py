# api/services/reminders/intervals.py

"""
Accountability reminder interval settings.

The interval set is a list of day offsets after note creation (1-365),
stored as one JSON blob in app_settings.
"""

import json
import logging
from datetime import datetime, timezone
from typing import Iterable, List

from utils.db import Database

logger = logging.getLogger(__name__)

SETTINGS_KEY = "accountability_intervals"

DEFAULT_INTERVALS = [5]

MIN_INTERVAL_DAYS = 1
MAX_INTERVAL_DAYS = 365


class ValidationError(ValueError):
    """Raised when an interval set has no usable values."""
    pass


def normalize_intervals(candidate: Iterable) -> List[int]:
    """
    Keep integer day counts in 1..365, de-duplicated and sorted.

    Booleans and non-integers are dropped.
    """
    valid = {
        n for n in candidate
        if isinstance(n, int) and not isinstance(n, bool)
        and MIN_INTERVAL_DAYS <= n <= MAX_INTERVAL_DAYS
    }
    return sorted(valid)


class ReminderIntervalSettings:
    """Reads and writes the accountability interval set."""

    def __init__(self, db: Database):
        self.db = db

    def get(self) -> List[int]:
        """
        Get the current interval set.

        Falls back to DEFAULT_INTERVALS when nothing is stored or the
        stored blob is unreadable.
        """
        conn = self.db.connect()
        try:
            cur = conn.execute(
                "SELECT value FROM app_settings WHERE key = ?",
                (SETTINGS_KEY,),
            )
            row = cur.fetchone()
        finally:
            conn.close()

        if row:
            try:
                stored = json.loads(row["value"])
                if isinstance(stored, list):
                    intervals = normalize_intervals(stored)
                    if intervals:
                        return intervals
                logger.warning(f"Ignoring invalid stored intervals: {row['value']!r}")
            except (json.JSONDecodeError, TypeError) as e:
                logger.error(f"Failed to load accountability intervals: {e}")

        return list(DEFAULT_INTERVALS)

    def set(self, candidate: Iterable) -> List[int]:
        """
        Validate and store a new interval set.

        Returns:
            The normalized intervals that were stored

        Raises:
            ValidationError: no value in 1..365 survives validation
        """
        if not isinstance(candidate, (list, tuple, set, frozenset)):
            raise ValidationError("Intervals must be a list of day counts")

        valid = normalize_intervals(candidate)
        if not valid:
            raise ValidationError(
                f"At least one valid interval ({MIN_INTERVAL_DAYS}-{MAX_INTERVAL_DAYS} days) is required"
            )

        value = json.dumps(valid)
        conn = self.db.connect()
        try:
            conn.execute(
                """
                INSERT INTO app_settings (key, value, updated_at)
                VALUES (?, ?, ?)
                ON CONFLICT(key) DO UPDATE SET value = excluded.value,
                                               updated_at = excluded.updated_at
                """,
                (SETTINGS_KEY, value, datetime.now(timezone.utc).isoformat()),
            )
            conn.commit()
        finally:
            conn.close()

        return valid

    def reset(self) -> List[int]:
        """Forget the stored set; get() returns the default afterwards."""
        conn = self.db.connect()
        try:
            conn.execute("DELETE FROM app_settings WHERE key = ?", (SETTINGS_KEY,))
            conn.commit()
        finally:
            conn.close()
        return list(DEFAULT_INTERVALS)
