"""Supabase repository for feeding and diaper logs."""

import math
from dataclasses import dataclass
from datetime import UTC, datetime
from uuid import UUID

from supabase import Client

from baby_tracker.domain.logs import LogEntry, LogFilters, LogInput, LogType, unit_for
from baby_tracker.services.logs import LogRepository

LOG_COLUMNS = "id, user_id, type, amount, unit, timestamp, recorded_by, created_at"


@dataclass
class SupabaseLogRepository(LogRepository):
    """Supabase implementation for the ``logs`` table."""

    client: Client

    def list_logs(self, user_id: UUID, filters: LogFilters) -> list[LogEntry]:
        """Return a user's logs matching the filters, newest first."""
        query = (
            self.client.table("logs")
            .select(LOG_COLUMNS)
            .eq("user_id", str(user_id))
            .order("timestamp", desc=True)
        )
        if filters.start is not None:
            query = query.gte("timestamp", filters.start.isoformat())
        if filters.end is not None:
            query = query.lte("timestamp", filters.end.isoformat())
        if filters.type is not None:
            query = query.eq("type", filters.type.value)
        if filters.recorded_by:
            query = query.eq("recorded_by", filters.recorded_by)
        response = query.execute()
        return [parse_log_row(row) for row in response.data or []]

    def create_log(self, user_id: UUID, payload: LogInput) -> LogEntry:
        """Insert a log row and return the stored entry."""
        row = _payload_row(payload)
        row["user_id"] = str(user_id)
        response = self.client.table("logs").insert(row).execute()
        if not response.data:
            raise RuntimeError("Failed to create log")
        return parse_log_row(response.data[0])

    def update_log(self, user_id: UUID, log_id: str, payload: LogInput) -> LogEntry:
        """Update a log row scoped to its owner."""
        response = (
            self.client.table("logs")
            .update(_payload_row(payload))
            .eq("id", log_id)
            .eq("user_id", str(user_id))
            .execute()
        )
        if not response.data:
            raise RuntimeError("Failed to update log")
        return parse_log_row(response.data[0])


def parse_log_row(row: dict[str, object]) -> LogEntry:
    """Build a log entry from a ``logs`` row."""
    log_type = LogType(str(row.get("type")))
    return LogEntry(
        id=str(row["id"]),
        user_id=UUID(str(row["user_id"])),
        type=log_type,
        amount=_parse_amount(log_type, row.get("amount")),
        unit=unit_for(log_type),
        timestamp=_parse_datetime(row, "timestamp"),
        recorded_by=str(row.get("recorded_by") or ""),
        created_at=_parse_datetime(row, "created_at"),
    )


def _payload_row(payload: LogInput) -> dict[str, object]:
    return {
        "type": payload.type.value,
        "amount": payload.amount,
        "unit": unit_for(payload.type),
        "timestamp": payload.timestamp.isoformat(),
        "recorded_by": payload.recorded_by,
    }


def _parse_amount(log_type: LogType, value: object) -> float | None:
    if log_type is LogType.DIAPER:
        return None
    if isinstance(value, str):
        try:
            value = float(value)
        except ValueError:
            return 0.0
    if not isinstance(value, int | float) or not math.isfinite(value):
        return 0.0
    return max(float(value), 0.0)


def _parse_datetime(row: dict[str, object], column: str) -> datetime:
    value = row.get(column)
    if not isinstance(value, str) or not value:
        raise ValueError(f"Log row {row.get('id')} has no {column}")
    parsed = datetime.fromisoformat(value)
    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=UTC)
    return parsed
