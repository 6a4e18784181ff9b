"""Aggregation of log entries for the dashboard and reports."""

import math
from dataclasses import dataclass
from datetime import UTC, date, datetime, time, timedelta
from enum import Enum
from uuid import UUID
from zoneinfo import ZoneInfo

from baby_tracker.domain.logs import LogEntry, LogFilters, LogType
from baby_tracker.domain.models import Profile
from baby_tracker.domain.reports import (
    ChartPoint,
    Dashboard,
    DayGroup,
    WeeklyReport,
    WeeklyStats,
)
from baby_tracker.services.logs import LogRepository

WINDOW_DAYS = 7
MINUTES_PER_HOUR = 60
END_OF_DAY = time(23, 59, 59)


class DateRange(str, Enum):
    """Date range presets offered by the reports filter."""

    TODAY = "today"
    LAST_7 = "last7"
    CUSTOM = "custom"
    ALL = "all"


def local_date_key(timestamp: datetime, tz: ZoneInfo) -> date:
    """Return the calendar date of ``timestamp`` in the viewer's timezone."""
    return timestamp.astimezone(tz).date()


def group_by_day(entries: list[LogEntry], tz: ZoneInfo) -> list[DayGroup]:
    """Group entries by local calendar day, keeping their order."""
    grouped: dict[date, list[LogEntry]] = {}
    for entry in entries:
        grouped.setdefault(local_date_key(entry.timestamp, tz), []).append(entry)
    return [DayGroup(day=day, entries=items) for day, items in grouped.items()]


def latest_of_type(entries: list[LogEntry], log_type: LogType) -> LogEntry | None:
    """Return the first entry of a type in a newest-first list."""
    return next((entry for entry in entries if entry.type is log_type), None)


def weekly_stats(entries: list[LogEntry]) -> WeeklyStats:
    """Compute totals and the daily average over a seven day window."""
    total_ml = sum(entry.feeding_ml for entry in entries)
    diapers = sum(1 for entry in entries if entry.type is LogType.DIAPER)
    return WeeklyStats(
        total_ml=total_ml,
        daily_average_ml=_round_half_up(total_ml / WINDOW_DAYS),
        total_diapers=diapers,
    )


def seven_day_series(
    entries: list[LogEntry], tz: ZoneInfo, today: date
) -> list[ChartPoint]:
    """Return daily feeding totals for the seven days ending ``today``."""
    days = [today - timedelta(days=offset) for offset in range(WINDOW_DAYS - 1, -1, -1)]
    totals = dict.fromkeys(days, 0.0)
    for entry in entries:
        if entry.type is not LogType.FEEDING:
            continue
        day = local_date_key(entry.timestamp, tz)
        if day in totals:
            totals[day] += entry.feeding_ml
    return [
        ChartPoint(day=day, label=f"{day:%a} {day.day}", total_ml=totals[day])
        for day in days
    ]


def time_ago(timestamp: datetime, now: datetime) -> str:
    """Return a short relative time such as ``2h 5m ago``."""
    minutes = max(0, math.floor((now - timestamp).total_seconds() / 60))
    if minutes < 1:
        return "just now"
    hours, minutes = divmod(minutes, MINUTES_PER_HOUR)
    if hours == 0:
        return f"{minutes}m ago"
    return f"{hours}h {minutes}m ago"


def resolve_range(
    preset: DateRange,
    tz: ZoneInfo,
    now: datetime,
    custom_from: date | None = None,
    custom_to: date | None = None,
) -> tuple[datetime | None, datetime | None]:
    """Return UTC bounds for a reports date range preset.

    A custom range with a missing endpoint is unbounded.
    """
    today = now.astimezone(tz).date()
    if preset is DateRange.TODAY:
        return _day_bounds(today, today, tz)
    if preset is DateRange.LAST_7:
        return _day_bounds(today - timedelta(days=WINDOW_DAYS - 1), today, tz)
    if preset is DateRange.CUSTOM and custom_from and custom_to:
        return _day_bounds(custom_from, custom_to, tz)
    return None, None


def build_dashboard(
    profile: Profile | None, entries: list[LogEntry], tz: ZoneInfo
) -> Dashboard:
    """Assemble the home screen from a newest-first list of entries."""
    return Dashboard(
        profile=profile,
        last_feeding=latest_of_type(entries, LogType.FEEDING),
        last_diaper=latest_of_type(entries, LogType.DIAPER),
        days=group_by_day(entries, tz),
    )


@dataclass
class StatsService:
    """Service for reading logs and aggregating them in a timezone."""

    repository: LogRepository

    def get_dashboard(
        self, user_id: UUID, profile: Profile | None, timezone_name: str
    ) -> Dashboard:
        """Return the dashboard built from all of a user's logs."""
        entries = self.repository.list_logs(user_id, LogFilters())
        return build_dashboard(profile, entries, ZoneInfo(timezone_name))

    def get_weekly_report(
        self,
        user_id: UUID,
        timezone_name: str,
        filters: LogFilters | None = None,
        now: datetime | None = None,
    ) -> WeeklyReport:
        """Return filtered logs plus statistics for the trailing week."""
        tz = ZoneInfo(timezone_name)
        current = now or datetime.now(tz=UTC)
        start, end = resolve_range(DateRange.LAST_7, tz, current)
        weekly = self.repository.list_logs(user_id, LogFilters(start=start, end=end))
        logs = self.repository.list_logs(user_id, filters or LogFilters())
        return WeeklyReport(
            logs=logs,
            stats=weekly_stats(weekly),
            chart=seven_day_series(weekly, tz, current.astimezone(tz).date()),
        )


def _day_bounds(first: date, last: date, tz: ZoneInfo) -> tuple[datetime, datetime]:
    start = datetime.combine(first, time.min, tzinfo=tz)
    end = datetime.combine(last, END_OF_DAY, tzinfo=tz)
    return start.astimezone(UTC), end.astimezone(UTC)


def _round_half_up(value: float) -> int:
    return math.floor(value + 0.5)
