"""Conversions shared by the Supabase row mappers."""

from datetime import datetime
from uuid import UUID


def parse_timestamp(value: object) -> datetime:
    """Parse a timestamptz column value."""
    if isinstance(value, datetime):
        return value
    if isinstance(value, str) and value:
        return datetime.fromisoformat(value)
    raise ValueError(f"Invalid timestamp value: {value!r}")


def parse_optional_timestamp(value: object) -> datetime | None:
    """Parse a nullable timestamptz column value."""
    if value is None or value == "":
        return None
    return parse_timestamp(value)


def parse_optional_uuid(value: object) -> UUID | None:
    """Parse a nullable uuid column value."""
    if not value:
        return None
    return UUID(str(value))
