"""Domain models for feeding and diaper logs."""

import math
from dataclasses import dataclass, replace
from datetime import datetime
from enum import Enum
from uuid import UUID

PLACEHOLDER_PREFIX = "temp-"
FEEDING_UNIT = "ml"


class LogType(str, Enum):
    """Kind of event a log entry records."""

    FEEDING = "feeding"
    DIAPER = "diaper"


def unit_for(log_type: LogType) -> str | None:
    """Return the stored unit for a log type."""
    return FEEDING_UNIT if log_type is LogType.FEEDING else None


@dataclass(frozen=True)
class LogEntry:
    """A single feeding or diaper change row."""

    id: str
    user_id: UUID
    type: LogType
    amount: float | None
    unit: str | None
    timestamp: datetime
    recorded_by: str
    created_at: datetime

    @property
    def is_placeholder(self) -> bool:
        """Return True for locally synthesized entries not yet stored."""
        return self.id.startswith(PLACEHOLDER_PREFIX)

    @property
    def feeding_ml(self) -> float:
        """Milliliters consumed, zero for diaper changes."""
        if self.type is not LogType.FEEDING:
            return 0.0
        return self.amount or 0.0

    def with_input(self, payload: "LogInput") -> "LogEntry":
        """Return a copy carrying the editable fields of ``payload``."""
        return replace(
            self,
            type=payload.type,
            amount=payload.amount,
            unit=unit_for(payload.type),
            timestamp=payload.timestamp,
            recorded_by=payload.recorded_by,
        )


@dataclass(frozen=True)
class LogInput:
    """Editable fields of a log entry as submitted by a parent."""

    type: LogType
    amount: float | None
    timestamp: datetime
    recorded_by: str

    def normalized(self) -> "LogInput":
        """Return the input with the amount invariant enforced.

        Diaper changes never carry an amount. Feedings require a
        non-negative amount in milliliters.
        """
        if self.type is LogType.DIAPER:
            return replace(self, amount=None)
        if self.amount is None:
            raise ValueError("Feeding entries require an amount.")
        if not math.isfinite(self.amount):
            raise ValueError("Feeding amount must be a number.")
        if self.amount < 0:
            raise ValueError("Feeding amount cannot be negative.")
        return replace(self, amount=float(self.amount))


@dataclass(frozen=True)
class LogFilters:
    """Optional filters for listing logs."""

    start: datetime | None = None
    end: datetime | None = None
    type: LogType | None = None
    recorded_by: str | None = None
