import re
from datetime import datetime, timedelta, timezone
from pathlib import Path, PureWindowsPath
from typing import Optional, Union

EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)

# yyyymmddHHMMSS.ffffff followed by the UTC offset in minutes, e.g. 20240105093000.000000+060
_DMTF_PATTERN = re.compile(
    r"^(\d{4})(\d{2})(\d{2})(\d{2})(\d{2})(\d{2})\.(\d{6})([+-])(\d{3})$"
)
_JSON_DATE_PATTERN = re.compile(r"^/Date\((-?\d+)\)/$")


def parse_dmtf(value: str) -> datetime:
    """
    parse a CIM datetime string into an aware UTC datetime.

    raises:
        ValueError: if the string is not a complete CIM datetime
    """
    match = _DMTF_PATTERN.match(value.strip())
    if not match:
        raise ValueError(f"not a CIM datetime: {value!r}")

    year, month, day, hour, minute, second, micro, sign, offset = match.groups()
    offset_minutes = int(offset) if sign == "+" else -int(offset)
    try:
        local = datetime(
            int(year), int(month), int(day),
            int(hour), int(minute), int(second), int(micro),
            tzinfo=timezone(timedelta(minutes=offset_minutes)),
        )
        return local.astimezone(timezone.utc)
    except OverflowError as e:
        raise ValueError(f"CIM datetime out of range: {value!r}") from e


def normalize_timestamp(value: Union[None, str, datetime]) -> Optional[datetime]:
    """
    normalize a source timestamp to an aware UTC datetime.

    accepts CIM datetimes, /Date(ms)/ json dates and ISO-8601 strings with an
    explicit offset. values without a timezone are rejected.
    """
    if value is None:
        return None

    if isinstance(value, datetime):
        if value.tzinfo is None or value.tzinfo.utcoffset(value) is None:
            raise ValueError(f"timestamp has no timezone: {value.isoformat()}")
        try:
            return value.astimezone(timezone.utc)
        except OverflowError as e:
            raise ValueError(f"timestamp out of range: {value!r}") from e

    if not isinstance(value, str):
        raise ValueError(f"unsupported timestamp value: {value!r}")

    text = value.strip()
    if not text:
        return None

    if _DMTF_PATTERN.match(text):
        return parse_dmtf(text)

    json_date = _JSON_DATE_PATTERN.match(text)
    if json_date:
        try:
            return EPOCH + timedelta(milliseconds=int(json_date.group(1)))
        except OverflowError as e:
            raise ValueError(f"json date out of range: {text!r}") from e

    parsed = datetime.fromisoformat(text.replace("Z", "+00:00"))
    return normalize_timestamp(parsed)


def age_in_days(now: datetime, then: datetime) -> int:
    """whole days elapsed between two aware datetimes, rounded down."""
    return (now - then) // timedelta(days=1)


def account_id_from_path(local_path: str) -> str:
    """lowercase leaf segment of a profile path, using windows path rules."""
    return PureWindowsPath(local_path).name.lower()


def directory_mtime(local_path: str) -> Optional[datetime]:
    """last-modified time of a profile directory, or None if it is not on disk."""
    path = Path(local_path)
    try:
        if not path.is_dir():
            return None
        return datetime.fromtimestamp(path.stat().st_mtime, tz=timezone.utc)
    except OSError:
        return None
