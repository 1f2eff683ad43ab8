# app/utils/datetime_utils.py
"""
Central time handling for the forum backend.

Conventions:
1. Posts and comments carry `createdAt` as epoch milliseconds (int).
2. Presence records carry `lastSeen` as a timezone-aware UTC datetime
   (Firestore stores it as a native timestamp).
3. Everything leaving the API is epoch milliseconds.
"""

import logging
from datetime import datetime, timezone
from typing import Any, Union

from dateutil import parser as dateutil_parser

logger = logging.getLogger(__name__)


class DateTimeUtils:
    """Time helpers shared by services, schemas and event streams."""

    @staticmethod
    def now() -> datetime:
        """Current time as a UTC timezone-aware datetime."""
        return datetime.now(timezone.utc)

    @staticmethod
    def now_ms() -> int:
        """Current time in epoch milliseconds."""
        return DateTimeUtils.to_timestamp_ms(DateTimeUtils.now())

    @staticmethod
    def parse_iso_datetime(iso_string: str) -> datetime:
        """
        Parse an ISO 8601 string into a UTC datetime.

        Supported forms:
        - 2024-01-15T10:30:00Z
        - 2024-01-15T10:30:00+09:00
        - 2024-01-15T10:30:00.123456Z
        - 2024-01-15T10:30:00 (assumed UTC)
        """
        try:
            if not iso_string:
                raise ValueError("cannot parse an empty string")

            if iso_string.endswith('Z'):
                iso_string = iso_string[:-1] + '+00:00'

            dt = dateutil_parser.isoparse(iso_string)
            if dt.tzinfo is None:
                dt = dt.replace(tzinfo=timezone.utc)
            return dt.astimezone(timezone.utc)

        except Exception as e:
            logger.error(f"ISO datetime parse failed: {iso_string} - {e}")
            raise ValueError(f"Invalid ISO datetime: {iso_string}")

    @staticmethod
    def from_timestamp_ms(timestamp_ms: Union[int, float]) -> datetime:
        """Epoch milliseconds to a UTC datetime."""
        if isinstance(timestamp_ms, bool) or not isinstance(timestamp_ms, (int, float)):
            raise ValueError(f"timestamp_ms must be a number: {timestamp_ms!r}")
        return datetime.fromtimestamp(timestamp_ms / 1000.0, tz=timezone.utc)

    @staticmethod
    def to_timestamp_ms(value: Any) -> int:
        """
        Convert a stored time value to epoch milliseconds.

        Accepts epoch milliseconds, datetimes (naive ones are taken as UTC),
        Firestore timestamps (anything exposing `timestamp()`) and ISO strings.
        """
        if isinstance(value, bool):
            raise ValueError(f"Cannot convert {value!r} to a timestamp")
        if isinstance(value, (int, float)):
            return int(value)
        if isinstance(value, str):
            return DateTimeUtils.to_timestamp_ms(DateTimeUtils.parse_iso_datetime(value))
        if isinstance(value, datetime):
            if value.tzinfo is None:
                value = value.replace(tzinfo=timezone.utc)
            return int(value.timestamp() * 1000)
        if hasattr(value, 'timestamp'):
            return int(value.timestamp() * 1000)
        raise ValueError(f"Cannot convert {type(value).__name__} to a timestamp")

    @staticmethod
    def to_datetime(value: Any) -> datetime:
        """Inverse of to_timestamp_ms for comparisons on presence records."""
        if isinstance(value, datetime):
            if value.tzinfo is None:
                return value.replace(tzinfo=timezone.utc)
            return value.astimezone(timezone.utc)
        return DateTimeUtils.from_timestamp_ms(DateTimeUtils.to_timestamp_ms(value))

    @staticmethod
    def for_json(obj: Any) -> Any:
        """
        Make Firestore data JSON friendly.

        - datetime / Firestore timestamp -> epoch milliseconds
        - dict/list converted recursively
        """
        if isinstance(obj, datetime):
            return DateTimeUtils.to_timestamp_ms(obj)
        elif isinstance(obj, dict):
            return {k: DateTimeUtils.for_json(v) for k, v in obj.items()}
        elif isinstance(obj, (list, tuple)):
            return [DateTimeUtils.for_json(item) for item in obj]
        return obj
