"""
Period windows: closed date intervals for a calendar month or a calendar year.

Months cross the API boundary as "YYYY-MM" tokens, days as "YYYY-MM-DD".
"""
import calendar
from dataclasses import dataclass
from datetime import date, datetime
from typing import List

MONTH_FORMAT = "%Y-%m"
DATE_FORMAT = "%Y-%m-%d"

_MONTH_LABELS = {
    1: "Jan", 2: "Feb", 3: "Mar", 4: "Apr", 5: "May", 6: "Jun",
    7: "Jul", 8: "Aug", 9: "Sep", 10: "Oct", 11: "Nov", 12: "Dec",
}


@dataclass(frozen=True)
class PeriodWindow:
    """Closed interval [start, end] of calendar days."""
    start: date
    end: date

    def __post_init__(self):
        if self.start > self.end:
            raise ValueError(f"window start {self.start} is after end {self.end}")

    def contains(self, day: date) -> bool:
        return self.start <= day <= self.end


def parse_month(token: str) -> date:
    """
    Parse a "YYYY-MM" token into the first day of that month.

    Raises:
        ValueError: token is not a valid month
    """
    if not isinstance(token, str) or len(token) != 7:
        raise ValueError(f"invalid month token: {token!r}")
    return datetime.strptime(token, MONTH_FORMAT).date()


def parse_day(token: str) -> date:
    """Parse a "YYYY-MM-DD" token. Raises ValueError on anything else."""
    if not isinstance(token, str) or len(token) != 10:
        raise ValueError(f"invalid date: {token!r}")
    return datetime.strptime(token, DATE_FORMAT).date()


def month_token(day: date) -> str:
    return day.strftime(MONTH_FORMAT)


def month_window(year: int, month: int) -> PeriodWindow:
    last_day = calendar.monthrange(year, month)[1]
    return PeriodWindow(date(year, month, 1), date(year, month, last_day))


def year_window(year: int) -> PeriodWindow:
    return PeriodWindow(date(year, 1, 1), date(year, 12, 31))


def months_of_year(year: int) -> List[date]:
    """First day of every month of the year, Jan..Dec."""
    return [date(year, m, 1) for m in range(1, 13)]


def month_label(month: int) -> str:
    return _MONTH_LABELS[month]
