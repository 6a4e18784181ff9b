"""FastAPI application factory."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from datetime import UTC, date, datetime
from zoneinfo import ZoneInfo

from fastapi import Depends, FastAPI, HTTPException, Query, Request, status

from baby_tracker.api.auth import require_user
from baby_tracker.api.auth import router as auth_router
from baby_tracker.api.models import LogRequest, ProfileUpdateRequest
from baby_tracker.app_logging import configure_logging
from baby_tracker.containers import AppContainer
from baby_tracker.domain.errors import error_message
from baby_tracker.domain.logs import LogEntry, LogFilters, LogInput, LogType
from baby_tracker.domain.models import AuthUser, Profile
from baby_tracker.domain.reports import ChartPoint, DayGroup, WeeklyStats
from baby_tracker.services.profiles import profile_zone
from baby_tracker.services.reports import (
    DateRange,
    build_dashboard,
    resolve_range,
    time_ago,
)
from baby_tracker.services.timeline import LogTimeline

MAX_PHOTO_BYTES = 5 * 1024 * 1024


def create_app(container: AppContainer) -> FastAPI:  # noqa: PLR0915
    """Create a FastAPI app configured with dependencies."""
    configure_logging(container.settings.log_level)
    logger = logging.getLogger(__name__)
    default_timezone = container.settings.default_timezone

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        yield
        await app.state.container.close_resources()

    app = FastAPI(lifespan=lifespan)
    app.state.container = container

    app.include_router(auth_router)

    def load_profile(user: AuthUser) -> Profile:
        try:
            profile = container.profile_service.get_profile(user.id)
        except Exception as exc:
            logger.exception("Failed to load profile", extra={"user_id": user.id})
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=error_message(exc, "Failed to load profile."),
            ) from exc
        return profile or container.auth_service.fallback_profile(user)

    def to_input(body: LogRequest, tz: ZoneInfo) -> LogInput:
        timestamp = body.timestamp
        if timestamp.tzinfo is None:
            timestamp = timestamp.replace(tzinfo=tz)
        return LogInput(
            type=body.type,
            amount=body.amount,
            timestamp=timestamp.astimezone(UTC),
            recorded_by=body.recorded_by,
        )

    @app.get("/health")
    async def health() -> dict[str, str]:
        """Simple health check endpoint."""
        return {"status": "ok"}

    @app.get("/dashboard")
    async def dashboard(user: AuthUser = Depends(require_user)) -> dict[str, object]:
        """Return the home screen: latest entries and daily groups."""
        profile = load_profile(user)
        tz = profile_zone(profile, default_timezone)
        timeline = await container.timeline_store.get(user.id, refresh=True)
        view = build_dashboard(profile, timeline.entries, tz)
        now = datetime.now(tz=UTC)
        today = now.astimezone(tz).date()
        return {
            "profile": _serialize_profile(profile),
            "last_feeding": _serialize_latest(view.last_feeding, now),
            "last_diaper": _serialize_latest(view.last_diaper, now),
            "days": [_serialize_day(group, today) for group in view.days],
            "error_message": timeline.error_message,
        }

    @app.post("/logs", status_code=status.HTTP_201_CREATED)
    async def create_log(
        body: LogRequest, user: AuthUser = Depends(require_user)
    ) -> dict[str, object]:
        """Add an entry, showing it immediately and rolling back on failure."""
        profile = load_profile(user)
        timeline = await container.timeline_store.get(user.id)
        entry = await timeline.create(
            to_input(body, profile_zone(profile, default_timezone))
        )
        return _timeline_result(timeline, entry)

    @app.put("/logs/{log_id}")
    async def update_log(
        log_id: str, body: LogRequest, user: AuthUser = Depends(require_user)
    ) -> dict[str, object]:
        """Edit an entry in place, restoring the previous list on failure."""
        profile = load_profile(user)
        timeline = await container.timeline_store.get(user.id)
        entry = await timeline.update(
            log_id, to_input(body, profile_zone(profile, default_timezone))
        )
        return _timeline_result(timeline, entry)

    @app.get("/reports")
    async def reports(  # noqa: PLR0913
        date_range: DateRange = Query(default=DateRange.LAST_7, alias="range"),
        custom_from: date | None = Query(default=None, alias="from"),
        custom_to: date | None = Query(default=None, alias="to"),
        log_type: str = Query(default="all", alias="type"),
        recorded_by: str | None = None,
        user: AuthUser = Depends(require_user),
    ) -> dict[str, object]:
        """Return filtered logs, weekly statistics and the seven day chart."""
        profile = load_profile(user)
        tz = profile_zone(profile, default_timezone)
        now = datetime.now(tz=UTC)
        start, end = resolve_range(date_range, tz, now, custom_from, custom_to)
        filters = LogFilters(
            start=start,
            end=end,
            type=_parse_type_filter(log_type),
            recorded_by=None if recorded_by in {None, "", "all"} else recorded_by,
        )
        try:
            report = container.stats_service.get_weekly_report(
                user.id, tz.key, filters=filters, now=now
            )
        except Exception as exc:
            logger.exception("Failed to load reports", extra={"user_id": user.id})
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=error_message(exc, "Failed to load logs."),
            ) from exc
        return {
            "parents": profile.parents,
            "logs": [_serialize_log(entry) for entry in report.logs],
            "stats": _serialize_stats(report.stats),
            "chart": [_serialize_point(point) for point in report.chart],
        }

    @app.get("/profile")
    async def get_profile(user: AuthUser = Depends(require_user)) -> dict[str, object]:
        """Return the stored family profile."""
        try:
            profile = container.profile_service.get_profile(user.id)
        except Exception as exc:
            logger.exception("Failed to load profile", extra={"user_id": user.id})
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=error_message(exc, "Failed to load profile."),
            ) from exc
        if profile is None:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND, detail="Profile not found."
            )
        return _serialize_profile(profile)

    @app.put("/profile")
    async def update_profile(
        body: ProfileUpdateRequest, user: AuthUser = Depends(require_user)
    ) -> dict[str, object]:
        """Save the settings form."""
        changes = {
            key: value
            for key, value in body.model_dump(exclude_unset=True).items()
            if value is not None or key == "profile_pic_url"
        }
        try:
            profile = container.profile_service.update_profile(user.id, changes)
        except ValueError as exc:
            raise HTTPException(
                status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(exc)
            ) from exc
        except Exception as exc:
            logger.exception("Failed to save profile", extra={"user_id": user.id})
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=error_message(exc, "Failed to save profile."),
            ) from exc
        return _serialize_profile(profile)

    @app.post("/profile/photo")
    async def upload_photo(
        request: Request,
        filename: str = "photo.jpg",
        user: AuthUser = Depends(require_user),
    ) -> dict[str, str]:
        """Store a profile photo; the returned URL applies on the next save."""
        content = await request.body()
        if not content:
            raise HTTPException(
                status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
                detail="Photo is empty.",
            )
        if len(content) > MAX_PHOTO_BYTES:
            raise HTTPException(
                status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
                detail="Photo is too large.",
            )
        content_type = request.headers.get("content-type") or "image/jpeg"
        try:
            url = container.profile_service.upload_photo(
                user.id, filename, content, content_type
            )
        except Exception as exc:
            logger.exception("Failed to upload photo", extra={"user_id": user.id})
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=error_message(exc, "Failed to upload photo."),
            ) from exc
        return {"profile_pic_url": url}

    return app


def _timeline_result(
    timeline: LogTimeline, entry: LogEntry | None
) -> dict[str, object]:
    """Return the stored entry and the current list, or raise the failure."""
    if entry is None:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=timeline.error_message or "Operation failed.",
        )
    return {
        "entry": _serialize_log(entry),
        "logs": [_serialize_log(item) for item in timeline.entries],
    }


def _parse_type_filter(value: str) -> LogType | None:
    """Map the reports activity filter to a log type."""
    if value == "all":
        return None
    try:
        return LogType(value)
    except ValueError as exc:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=f"Unknown activity type: {value}",
        ) from exc


def _serialize_log(entry: LogEntry) -> dict[str, object]:
    return {
        "id": entry.id,
        "type": entry.type.value,
        "amount": entry.amount,
        "unit": entry.unit,
        "timestamp": entry.timestamp.isoformat(),
        "recorded_by": entry.recorded_by,
        "created_at": entry.created_at.isoformat(),
        "pending": entry.is_placeholder,
    }


def _serialize_latest(
    entry: LogEntry | None, now: datetime
) -> dict[str, object] | None:
    if entry is None:
        return None
    payload = _serialize_log(entry)
    payload["ago"] = time_ago(entry.timestamp, now)
    return payload


def _serialize_day(group: DayGroup, today: date) -> dict[str, object]:
    return {
        "day": group.day.isoformat(),
        "is_today": group.day == today,
        "entry_count": group.entry_count,
        "feeding_total_ml": group.feeding_total_ml,
        "diaper_count": group.diaper_count,
        "entries": [_serialize_log(entry) for entry in group.entries],
    }


def _serialize_stats(stats: WeeklyStats) -> dict[str, object]:
    return {
        "total_ml": stats.total_ml,
        "daily_average_ml": stats.daily_average_ml,
        "total_diapers": stats.total_diapers,
    }


def _serialize_point(point: ChartPoint) -> dict[str, object]:
    return {
        "day": point.day.isoformat(),
        "label": point.label,
        "total_ml": point.total_ml,
    }


def _serialize_profile(profile: Profile) -> dict[str, object]:
    return {
        "id": str(profile.id),
        "email": profile.email,
        "father_name": profile.father_name,
        "mother_name": profile.mother_name,
        "baby_name": profile.baby_name,
        "profile_pic_url": profile.profile_pic_url,
        "timezone": profile.timezone,
        "parents": profile.parents,
        "created_at": profile.created_at.isoformat() if profile.created_at else None,
    }
