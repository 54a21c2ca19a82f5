"""
Civil time <-> epoch instant conversion in the salon's operating time zone.

Every date the business talks about (a checkout time, "today", "March") is a
civil date in one fixed named zone, regardless of where the server or the
caller runs. Instants are stored as epoch milliseconds.
"""

import calendar
import time
from datetime import date, datetime, timedelta
from datetime import timezone as dt_timezone
from typing import Optional, Tuple
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from django.conf import settings

from apps.core.exceptions import ValidationError

CIVIL_FORMAT = "%Y-%m-%dT%H:%M"
DATE_FORMAT = "%Y-%m-%d"
MONTH_FORMAT = "%Y-%m"

# Civil years accepted by the resolver and by report parameters.
MIN_YEAR = 1900
MAX_YEAR = 9998


class TimeResolver:
    """
    Resolve civil date-time strings against a single fixed time zone.

    to_instant() does not rely on the zone database's own disambiguation:
    the offset is state-dependent, so it is evaluated at a first guess and
    then once more at the corrected candidate. Inside the yearly DST gap or
    overlap the result is whatever those two passes produce.
    """

    def __init__(self, time_zone_name: Optional[str] = None):
        self.time_zone_name = time_zone_name or settings.BUSINESS_TIME_ZONE
        try:
            self.zone = ZoneInfo(self.time_zone_name)
        except (ZoneInfoNotFoundError, ValueError):
            raise ValidationError(
                f"Unknown time zone '{self.time_zone_name}'", field="time_zone"
            )

    @classmethod
    def for_business(cls) -> "TimeResolver":
        """Build a resolver for the zone stored in the business settings."""
        from apps.core.models import BusinessSettings

        return cls(BusinessSettings.load().time_zone)

    def offset_ms(self, epoch_ms: int) -> int:
        """UTC offset of the zone at the given instant, in milliseconds."""
        at = datetime.fromtimestamp(epoch_ms / 1000, tz=self.zone)
        return int(at.utcoffset().total_seconds() * 1000)

    def to_instant(self, civil: str, field: str = "checkout_at") -> int:
        """Convert 'YYYY-MM-DDTHH:MM' in the business zone to epoch ms."""
        try:
            parsed = datetime.strptime(civil, CIVIL_FORMAT)
        except (TypeError, ValueError):
            raise ValidationError(
                f"Expected a civil date-time formatted as YYYY-MM-DDTHH:MM, got {civil!r}",
                field=field,
            )
        check_year(parsed.year, field)
        return self.instant_of(parsed)

    def instant_of(self, civil: datetime) -> int:
        """Epoch ms of a naive civil datetime read in the business zone."""
        guess = calendar.timegm(civil.timetuple()) * 1000
        candidate = guess - self.offset_ms(guess)
        return guess - self.offset_ms(candidate)

    def to_civil_string(self, epoch_ms: int) -> str:
        """Format an epoch instant as 'YYYY-MM-DDTHH:MM' in the business zone."""
        return self.to_datetime(epoch_ms).strftime(CIVIL_FORMAT)

    def to_datetime(self, epoch_ms: int) -> datetime:
        return datetime.fromtimestamp(epoch_ms / 1000, tz=self.zone)

    def civil_date(self, epoch_ms: int) -> date:
        """Civil calendar date of an instant in the business zone."""
        return self.to_datetime(epoch_ms).date()

    def now_ms(self) -> int:
        return now_ms()

    def now_civil(self) -> str:
        return self.to_civil_string(self.now_ms())

    def today(self) -> date:
        return self.civil_date(self.now_ms())

    def start_of_day(self, day: date) -> int:
        """Epoch ms of civil midnight starting ``day``."""
        return self.instant_of(datetime(day.year, day.month, day.day))

    def day_bounds(self, day: date) -> Tuple[int, int]:
        """Half-open [start, end) instants covering one civil day."""
        return self.start_of_day(day), self.start_of_day(day + timedelta(days=1))

    def month_bounds(self, year: int, month: int) -> Tuple[int, int]:
        """Half-open [start, end) instants covering one civil month."""
        first = date(year, month, 1)
        if month == 12:
            following = date(year + 1, 1, 1)
        else:
            following = date(year, month + 1, 1)
        return self.start_of_day(first), self.start_of_day(following)

    def range_bounds(self, start: date, end: date) -> Tuple[int, int]:
        """Half-open instants covering the inclusive civil range [start, end]."""
        if end < start:
            raise ValidationError("Range end is before range start", field="end")
        return self.start_of_day(start), self.start_of_day(end + timedelta(days=1))


def now_ms() -> int:
    """Current instant in epoch milliseconds."""
    return int(time.time() * 1000)


def utc_datetime(epoch_ms: int) -> datetime:
    """Aware UTC datetime for an epoch instant."""
    return datetime.fromtimestamp(epoch_ms / 1000, tz=dt_timezone.utc)


def parse_civil_date(value: str, field: str = "day") -> date:
    """Parse 'YYYY-MM-DD', raising ValidationError naming ``field``."""
    try:
        parsed = datetime.strptime(value, DATE_FORMAT).date()
    except (TypeError, ValueError):
        raise ValidationError(
            f"Expected a date formatted as YYYY-MM-DD, got {value!r}", field=field
        )
    check_year(parsed.year, field)
    return parsed


def parse_civil_month(value: str, field: str = "month") -> Tuple[int, int]:
    """Parse 'YYYY-MM' into (year, month), raising ValidationError naming ``field``."""
    try:
        parsed = datetime.strptime(value, MONTH_FORMAT)
    except (TypeError, ValueError):
        raise ValidationError(f"Expected a month formatted as YYYY-MM, got {value!r}", field=field)
    check_year(parsed.year, field)
    return parsed.year, parsed.month


def check_year(year: int, field: str) -> int:
    if not MIN_YEAR <= year <= MAX_YEAR:
        raise ValidationError(f"Year must be between {MIN_YEAR} and {MAX_YEAR}", field=field)
    return year
