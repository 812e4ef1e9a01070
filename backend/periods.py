"""Reporting-period boundaries for the leaderboard programs.

Every mode is a pure function of ``now`` and returns a ``PeriodPair``.
All datetimes are timezone-aware UTC.
"""
import calendar
import enum
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

UTC = timezone.utc

PERIOD_DAYS = 7
ANCHOR = datetime(2025, 10, 21, tzinfo=UTC)

CYCLE_START_DAY = 8
CYCLE_END_DAY = 7


class PeriodMode(enum.Enum):
    CALENDAR_MONTH = 'calendar-month'
    ANCHORED_ROLLING = 'anchored-rolling'
    CUSTOM_EIGHTH_TO_SEVENTH = 'eighth-to-seventh'


@dataclass(frozen=True)
class TimeWindow:
    start: datetime
    end: datetime

    def __post_init__(self):
        if self.start >= self.end:
            raise ValueError('window start must be before end: %s >= %s' % (self.start, self.end))


@dataclass(frozen=True)
class PeriodPair:
    current: TimeWindow
    previous: TimeWindow


def utcnow():
    return datetime.now(UTC)


def as_utc(dt):
    if dt.tzinfo is None:
        return dt.replace(tzinfo=UTC)
    return dt.astimezone(UTC)


def isoformat_z(dt):
    """``2025-11-01T00:00:00.000Z``, millisecond precision."""
    dt = as_utc(dt)
    return dt.strftime('%Y-%m-%dT%H:%M:%S') + '.%03dZ' % (dt.microsecond // 1000)


def shift_month(year, month, delta):
    index = year * 12 + (month - 1) + delta
    return index // 12, index % 12 + 1


def _month_window(year, month):
    last_day = calendar.monthrange(year, month)[1]
    return TimeWindow(
        start=datetime(year, month, 1, 0, 0, 0, tzinfo=UTC),
        end=datetime(year, month, last_day, 23, 59, 59, tzinfo=UTC),
    )


def calendar_month(now):
    # end is the last second of the month, not midnight of the next one
    now = as_utc(now)
    if now.month == 1:
        prev_year, prev_month = now.year - 1, 12
    else:
        prev_year, prev_month = now.year, now.month - 1
    return PeriodPair(
        current=_month_window(now.year, now.month),
        previous=_month_window(prev_year, prev_month),
    )


def anchored_rolling(now, anchor=ANCHOR, period_days=PERIOD_DAYS):
    now = as_utc(now)
    period = timedelta(days=period_days)
    if now < anchor:
        start = anchor
    else:
        # floor division on whole milliseconds
        elapsed_ms = (now - anchor) // timedelta(milliseconds=1)
        periods_passed = elapsed_ms // (period // timedelta(milliseconds=1))
        start = anchor + periods_passed * period
    current = TimeWindow(start, start + period)
    return PeriodPair(current=current, previous=TimeWindow(start - period, start))


def _cycle_start(year, month):
    return datetime(year, month, CYCLE_START_DAY, 0, 0, 1, tzinfo=UTC)


def _cycle_end(year, month):
    return datetime(year, month, CYCLE_END_DAY, 23, 59, 59, tzinfo=UTC)


def eighth_to_seventh(now):
    """8th 00:00:01 to the following 7th 23:59:59.

    Consecutive windows leave a one-second gap between them.
    """
    now = as_utc(now)
    if now.day < CYCLE_START_DAY:
        start_ym = shift_month(now.year, now.month, -1)
        end_ym = (now.year, now.month)
    else:
        start_ym = (now.year, now.month)
        end_ym = shift_month(now.year, now.month, 1)
    current = TimeWindow(_cycle_start(*start_ym), _cycle_end(*end_ym))

    prev_end = current.start - timedelta(seconds=1)
    prev_start = _cycle_start(*shift_month(prev_end.year, prev_end.month, -1))
    return PeriodPair(current=current, previous=TimeWindow(prev_start, prev_end))


_CALCULATORS = {
    PeriodMode.CALENDAR_MONTH: calendar_month,
    PeriodMode.ANCHORED_ROLLING: anchored_rolling,
    PeriodMode.CUSTOM_EIGHTH_TO_SEVENTH: eighth_to_seventh,
}


def period_bounds(mode, now=None):
    if now is None:
        now = utcnow()
    return _CALCULATORS[PeriodMode(mode)](now)
