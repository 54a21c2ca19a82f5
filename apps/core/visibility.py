"""
Per-staff visibility masks.

A mask hides whole months, or day windows within a month, from a staff
member's own aggregated views. It is a presentation filter only: records are
never deleted and business-wide figures ignore every mask.
"""

from dataclasses import dataclass
from typing import FrozenSet, Iterable, Tuple

from apps.core.exceptions import ValidationError


@dataclass(frozen=True)
class HiddenWindow:
    year: int
    month: int
    start_day: int
    end_day: int

    def covers(self, year: int, month: int, day: int) -> bool:
        return (
            self.year == year
            and self.month == month
            and self.start_day <= day <= self.end_day
        )

    def as_dict(self):
        return {
            "year": self.year,
            "month": self.month,
            "start_day": self.start_day,
            "end_day": self.end_day,
        }


@dataclass(frozen=True)
class VisibilityMask:
    hidden_months: FrozenSet[Tuple[int, int]] = frozenset()
    hidden_windows: Tuple[HiddenWindow, ...] = ()

    @classmethod
    def from_json(cls, hidden_months: Iterable[dict], hidden_windows: Iterable[dict]):
        """Build a mask from the JSON lists stored on a staff member."""
        months = frozenset(
            _parse_month(entry, index) for index, entry in enumerate(hidden_months or [])
        )
        windows = tuple(
            _parse_window(entry, index) for index, entry in enumerate(hidden_windows or [])
        )
        return cls(hidden_months=months, hidden_windows=windows)

    @property
    def is_empty(self) -> bool:
        return not self.hidden_months and not self.hidden_windows

    def hides(self, year: int, month: int, day: int) -> bool:
        """True when a record on this civil date must be left out of staff views."""
        if (year, month) in self.hidden_months:
            return True
        return any(window.covers(year, month, day) for window in self.hidden_windows)

    def months_as_json(self):
        return [{"year": year, "month": month} for year, month in sorted(self.hidden_months)]

    def windows_as_json(self):
        return [window.as_dict() for window in self.hidden_windows]


def _as_int(entry, key, field):
    try:
        value = entry[key]
    except (KeyError, TypeError):
        raise ValidationError(f"Missing '{key}'", field=field)
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValidationError(f"'{key}' must be an integer", field=field)
    return value


def _parse_month(entry, index):
    field = f"hidden_months[{index}]"
    year = _as_int(entry, "year", field)
    month = _as_int(entry, "month", field)
    if not 1 <= month <= 12:
        raise ValidationError("Month must be between 1 and 12", field=field)
    return year, month


def _parse_window(entry, index):
    field = f"hidden_windows[{index}]"
    year = _as_int(entry, "year", field)
    month = _as_int(entry, "month", field)
    start_day = _as_int(entry, "start_day", field)
    end_day = _as_int(entry, "end_day", field)
    if not 1 <= month <= 12:
        raise ValidationError("Month must be between 1 and 12", field=field)
    if not 1 <= start_day <= 31 or not 1 <= end_day <= 31:
        raise ValidationError("Days must be between 1 and 31", field=field)
    if end_day < start_day:
        raise ValidationError("end_day is before start_day", field=field)
    return HiddenWindow(year=year, month=month, start_day=start_day, end_day=end_day)
