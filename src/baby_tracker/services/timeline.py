"""Optimistically updated list of a user's log entries."""

import asyncio
import logging
from dataclasses import dataclass, field
from datetime import UTC, datetime, timedelta
from uuid import UUID

from baby_tracker.domain.errors import error_message
from baby_tracker.domain.logs import (
    PLACEHOLDER_PREFIX,
    LogEntry,
    LogFilters,
    LogInput,
    unit_for,
)
from baby_tracker.services.logs import LogService

logger = logging.getLogger(__name__)

LOAD_FAILED = "Failed to load logs."
SAVE_FAILED = "Failed to save log."
UPDATE_FAILED = "Failed to update log."


@dataclass
class LogTimeline:
    """In-memory, newest-first log list for one user.

    Creates and edits are applied locally before the backend call and are
    reconciled with the stored row or rolled back when the call fails.
    Nothing is retried. After ``close`` pending results are discarded.
    """

    user_id: UUID
    log_service: LogService
    entries: list[LogEntry] = field(default_factory=list)
    error_message: str | None = None
    mounted: bool = True
    pending: int = 0
    revision: int = 0

    async def load(self, filters: LogFilters | None = None) -> bool:
        """Replace the list with the user's stored logs.

        The result is dropped when a create or edit started during the fetch.
        """
        revision = self.revision
        try:
            entries = await asyncio.to_thread(
                self.log_service.fetch_logs, self.user_id, filters
            )
        except Exception as exc:
            logger.exception("Failed to load logs", extra={"user_id": self.user_id})
            if self.mounted:
                self.error_message = error_message(exc, LOAD_FAILED)
            return False
        if self.mounted and self.revision == revision:
            self.entries = entries
            self.error_message = None
        return True

    async def create(self, payload: LogInput) -> LogEntry | None:
        """Insert a placeholder at the head, then store the entry."""
        try:
            payload = payload.normalized()
        except ValueError as exc:
            self.error_message = str(exc)
            return None
        self.error_message = None
        placeholder = self._placeholder(payload)
        self.entries = [placeholder, *self.entries]

        self.pending += 1
        self.revision += 1
        try:
            stored = await asyncio.to_thread(
                self.log_service.create_log, self.user_id, payload
            )
        except Exception as exc:
            logger.exception("Failed to save log", extra={"user_id": self.user_id})
            if self.mounted:
                self.entries = [
                    entry for entry in self.entries if entry.id != placeholder.id
                ]
                self.error_message = error_message(exc, SAVE_FAILED)
            return None
        finally:
            self.pending -= 1

        if self.mounted:
            self.entries = [
                stored if entry.id == placeholder.id else entry
                for entry in self.entries
            ]
        return stored

    async def update(self, log_id: str, payload: LogInput) -> LogEntry | None:
        """Edit an entry in place, restoring that entry on failure."""
        if log_id.startswith(PLACEHOLDER_PREFIX):
            self.error_message = "This entry is still being saved."
            return None
        try:
            payload = payload.normalized()
        except ValueError as exc:
            self.error_message = str(exc)
            return None
        self.error_message = None
        original = next((entry for entry in self.entries if entry.id == log_id), None)
        self.entries = [
            entry.with_input(payload) if entry.id == log_id else entry
            for entry in self.entries
        ]

        self.pending += 1
        self.revision += 1
        try:
            stored = await asyncio.to_thread(
                self.log_service.update_log, self.user_id, log_id, payload
            )
        except Exception as exc:
            logger.exception(
                "Failed to update log",
                extra={"user_id": self.user_id, "log_id": log_id},
            )
            if self.mounted and original is not None:
                self.entries = [
                    original if entry.id == log_id else entry
                    for entry in self.entries
                ]
            if self.mounted:
                self.error_message = error_message(exc, UPDATE_FAILED)
            return None
        finally:
            self.pending -= 1

        if self.mounted:
            self.entries = [
                stored if entry.id == log_id else entry for entry in self.entries
            ]
        return stored

    def close(self) -> None:
        """Stop applying results of operations that are still pending."""
        self.mounted = False

    def _placeholder(self, payload: LogInput) -> LogEntry:
        now = datetime.now(tz=UTC)
        millis = int(now.timestamp() * 1000)
        taken = {entry.id for entry in self.entries}
        while f"{PLACEHOLDER_PREFIX}{millis}" in taken:
            millis += 1
        return LogEntry(
            id=f"{PLACEHOLDER_PREFIX}{millis}",
            user_id=self.user_id,
            type=payload.type,
            amount=payload.amount,
            unit=unit_for(payload.type),
            timestamp=payload.timestamp,
            recorded_by=payload.recorded_by,
            created_at=now,
        )


@dataclass
class _StoredTimeline:
    timeline: LogTimeline
    expires_at: datetime


@dataclass
class TimelineStore:
    """Keeps one loaded timeline per user for a limited time."""

    log_service: LogService
    ttl_seconds: int = 1800
    _timelines: dict[UUID, _StoredTimeline] = field(default_factory=dict)

    async def get(self, user_id: UUID, refresh: bool = False) -> LogTimeline:
        """Return the user's timeline, loading it when missing or expired.

        With ``refresh`` a cached timeline is reloaded from the backend,
        unless one of its operations is still in flight.
        """
        now = datetime.now(tz=UTC)
        self._evict_expired(now)
        stored = self._timelines.get(user_id)
        if stored is not None:
            stored.expires_at = now + timedelta(seconds=self.ttl_seconds)
            if refresh and stored.timeline.pending == 0:
                await stored.timeline.load()
            return stored.timeline

        timeline = LogTimeline(user_id=user_id, log_service=self.log_service)
        if await timeline.load():
            self._timelines[user_id] = _StoredTimeline(
                timeline=timeline,
                expires_at=now + timedelta(seconds=self.ttl_seconds),
            )
        return timeline

    def discard(self, user_id: UUID) -> None:
        """Forget a user's timeline and drop its pending results."""
        stored = self._timelines.pop(user_id, None)
        if stored is not None:
            stored.timeline.close()

    def close_all(self) -> None:
        """Discard every stored timeline."""
        for user_id in list(self._timelines):
            self.discard(user_id)

    def _evict_expired(self, now: datetime) -> None:
        expired = [
            user_id
            for user_id, stored in self._timelines.items()
            if now >= stored.expires_at
        ]
        for user_id in expired:
            self.discard(user_id)
