"""Domain models for aggregated log views."""

from dataclasses import dataclass
from datetime import date

from baby_tracker.domain.logs import LogEntry, LogType
from baby_tracker.domain.models import Profile


@dataclass(frozen=True)
class DayGroup:
    """Log entries that fall on one local calendar day."""

    day: date
    entries: list[LogEntry]

    @property
    def feeding_total_ml(self) -> float:
        """Total milliliters fed on this day."""
        return sum(entry.feeding_ml for entry in self.entries)

    @property
    def diaper_count(self) -> int:
        """Number of diaper changes on this day."""
        return sum(1 for entry in self.entries if entry.type is LogType.DIAPER)

    @property
    def entry_count(self) -> int:
        return len(self.entries)


@dataclass(frozen=True)
class WeeklyStats:
    """Totals over the trailing seven days."""

    total_ml: float
    daily_average_ml: int
    total_diapers: int


@dataclass(frozen=True)
class ChartPoint:
    """Feeding total for one day of the seven day chart."""

    day: date
    label: str
    total_ml: float


@dataclass(frozen=True)
class Dashboard:
    """Data shown on the home screen."""

    profile: Profile | None
    last_feeding: LogEntry | None
    last_diaper: LogEntry | None
    days: list[DayGroup]


@dataclass(frozen=True)
class WeeklyReport:
    """Data shown on the reports screen."""

    logs: list[LogEntry]
    stats: WeeklyStats
    chart: list[ChartPoint]
