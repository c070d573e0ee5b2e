"""Parse-or-omit helpers.

The appointment endpoints tolerate malformed optional values: an unparseable
timestamp or date is treated as if it had not been supplied at all, instead
of failing the whole request. That permissiveness lives here and nowhere
else.
"""

from datetime import date, datetime, time, timezone
from typing import Any, Optional
import re

from pydantic import AwareDatetime, TypeAdapter
from pydantic import ValidationError as PydanticValidationError

_timestamp = TypeAdapter(AwareDatetime)
_date = TypeAdapter(date)

# Date and time parts of an RFC3339 timestamp; rules out epoch numbers.
RFC3339_SHAPE = re.compile(r"^\d{4}-\d{2}-\d{2}[Tt ]\d{2}:\d{2}")
DATE_SHAPE = re.compile(r"^\d{4}-\d{2}-\d{2}$")


def is_rfc3339_text(value: Any) -> bool:
    return isinstance(value, str) and RFC3339_SHAPE.match(value) is not None


def parse_timestamp_or_none(value: Any) -> Optional[datetime]:
    """RFC3339 timestamp with an explicit offset, or None if malformed."""
    if value is None:
        return None
    if isinstance(value, datetime):
        return value if value.tzinfo is not None else None
    if not is_rfc3339_text(value):
        return None
    try:
        return _timestamp.validate_python(value)
    except PydanticValidationError:
        return None


def parse_date_or_none(value: Any) -> Optional[datetime]:
    """``YYYY-MM-DD`` as midnight UTC of that day, or None if malformed."""
    if not isinstance(value, str) or not DATE_SHAPE.match(value):
        return None
    try:
        day = _date.validate_python(value)
    except PydanticValidationError:
        return None
    return datetime.combine(day, time.min, tzinfo=timezone.utc)
