# brewtrack/utils/timeutil.py
from datetime import datetime, timezone
from typing import Optional, Union

from brewtrack.errors import ValidationError


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def ensure_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Naive datetimes are taken as UTC; aware ones are converted to UTC."""
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def parse_timestamp(value: Union[str, datetime, None], field: str, required: bool = True) -> Optional[datetime]:
    """
    Accepts a datetime or an RFC 3339 / ISO-8601 string and returns an aware
    UTC datetime. Empty values are only allowed when ``required`` is False.
    """
    if value is None or value == "":
        if required:
            raise ValidationError("This field is required.", field=field)
        return None
    if isinstance(value, datetime):
        return ensure_utc(value)
    if not isinstance(value, str):
        raise ValidationError(f"Error parsing {field} time", field=field)

    text = value.strip()
    if text.endswith(("Z", "z")):
        text = text[:-1] + "+00:00"
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError:
        raise ValidationError(f"Error parsing {field} time", field=field) from None
    return ensure_utc(parsed)


def isoformat(value: Optional[datetime]) -> Optional[str]:
    return ensure_utc(value).isoformat() if value else None
