"""Input normalization for booking payloads."""
from datetime import date, datetime
from typing import Union

import pytz
from dateutil import parser as date_parser

from agenda.core.exceptions import ValidationError

# Defaults differing in the hour: a value parsing to the same hour under both
# carried its own time of day
_MIDNIGHT = datetime(2000, 1, 1, 0, 0, 0)
_NOT_MIDNIGHT = datetime(2000, 1, 1, 1, 1, 1)


def normalize_email(value: str) -> str:
    return value.strip().lower()


def normalize_slot(value: str) -> str:
    return value.strip()


def _utc_date(moment: datetime, timezone: str) -> date:
    if moment.tzinfo is None:
        moment = pytz.timezone(timezone).localize(moment)
    return moment.astimezone(pytz.utc).date()


def normalize_date(value: Union[str, date, datetime], timezone: str = "UTC") -> str:
    """
    Returns the ISO ``YYYY-MM-DD`` form of ``value``.

    Any format ``dateutil`` parses strictly is accepted (ISO with or without
    zero padding, ``2024/03/05``, ``March 5, 2024``, ``Tue Mar 05 2024`` ...),
    month first when ambiguous. Date-only input is kept as the calendar date
    it names. Input carrying a time of day is resolved to UTC first: an
    explicit offset wins, naive times are read in ``timezone``. So
    ``"2024-3-5T00:00:00Z"`` and ``"2024-03-05"`` both give ``"2024-03-05"``.
    """
    if isinstance(value, datetime):
        return _utc_date(value, timezone).isoformat()
    if isinstance(value, date):
        return value.isoformat()

    text = str(value).strip()
    if not text:
        raise ValidationError(f"Invalid date: {value}")

    try:
        moment = date_parser.parse(text, default=_MIDNIGHT)
        has_time = moment.tzinfo is not None or moment.hour == date_parser.parse(text, default=_NOT_MIDNIGHT).hour
    except (ValueError, OverflowError):
        raise ValidationError(f"Invalid date: {value}")

    if not has_time:
        return moment.date().isoformat()
    return _utc_date(moment, timezone).isoformat()
