"""Log entry data access service."""

from dataclasses import dataclass
from typing import Protocol
from uuid import UUID

from baby_tracker.domain.logs import LogEntry, LogFilters, LogInput


class LogRepository(Protocol):
    """Persistence interface for feeding and diaper logs."""

    def list_logs(self, user_id: UUID, filters: LogFilters) -> list[LogEntry]:
        """Return a user's logs, newest first."""

    def create_log(self, user_id: UUID, payload: LogInput) -> LogEntry:
        """Insert a log row and return the stored entry."""

    def update_log(self, user_id: UUID, log_id: str, payload: LogInput) -> LogEntry:
        """Update a log row owned by the user and return it."""


@dataclass
class LogService:
    """Application service for reading and writing logs."""

    repository: LogRepository

    def fetch_logs(
        self, user_id: UUID, filters: LogFilters | None = None
    ) -> list[LogEntry]:
        """Return logs matching the filters, newest first."""
        return self.repository.list_logs(user_id, filters or LogFilters())

    def create_log(self, user_id: UUID, payload: LogInput) -> LogEntry:
        """Validate and persist a new log entry."""
        return self.repository.create_log(user_id, payload.normalized())

    def update_log(self, user_id: UUID, log_id: str, payload: LogInput) -> LogEntry:
        """Validate and persist changes to an existing log entry."""
        return self.repository.update_log(user_id, log_id, payload.normalized())
