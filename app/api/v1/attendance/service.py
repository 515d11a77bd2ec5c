"""
Geofenced attendance: the check-in / check-out state machine and ledger queries.

A mark passes through fixed gates (input, time window, geofence, daily ledger
state); the first failing gate raises a typed ServiceError and nothing is
written. No step is retried.
"""

import logging
import math
from datetime import date, datetime
from typing import List, Optional, Tuple
from uuid import UUID
from zoneinfo import ZoneInfo

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.v1.attendance_settings.schemas import AttendancePolicy
from app.api.v1.locations.schemas import LocationResponse
from app.api.v1.locations.service import find_nearest_location, list_active_locations
from app.core.enums import AttendanceAction
from app.core.exceptions import (
    AlreadyCheckedInError,
    AlreadyCheckedOutError,
    InvalidInputError,
    NotCheckedInError,
    OutOfRangeError,
    OutsideCheckInWindowError,
    OutsideCheckOutWindowError,
    StorageError,
)
from app.core.geo import round_meters
from app.core.models import AttendanceLocation, AttendanceRecord
from app.core.models.attendance_record import ATTENDANCE_STATUS_CHECKED_IN, ATTENDANCE_STATUS_CHECKED_OUT
from app.core.timezone_utils import ensure_utc, local_date_bounds, local_day_bounds, local_hour, utc_now

from .schemas import AttendanceMarkResponse, AttendanceRecordResponse, LocationSnapshot, MyAttendanceResponse

logger = logging.getLogger(__name__)

DEFAULT_LIST_LIMIT = 100
MY_ATTENDANCE_LIMIT = 31


# ----- Helpers -----
def _record_to_response(r: AttendanceRecord) -> AttendanceRecordResponse:
    check_out_location = None
    if r.check_out is not None:
        check_out_location = LocationSnapshot(
            latitude=r.check_out_latitude,
            longitude=r.check_out_longitude,
            location_id=r.check_out_location_id,
            location_name=r.check_out_location_name,
            distance=r.check_out_distance,
        )
    return AttendanceRecordResponse(
        id=r.id,
        user_id=r.user_id,
        date=ensure_utc(r.date),
        check_in=ensure_utc(r.check_in),
        check_in_location=LocationSnapshot(
            latitude=r.check_in_latitude,
            longitude=r.check_in_longitude,
            location_id=r.check_in_location_id,
            location_name=r.check_in_location_name,
            distance=r.check_in_distance,
        ),
        check_out=ensure_utc(r.check_out),
        check_out_location=check_out_location,
        status=r.status,
        work_hours=r.work_hours,
        notes=r.notes,
        created_at=ensure_utc(r.created_at),
        updated_at=ensure_utc(r.updated_at),
    )


def compute_work_hours(check_in: datetime, check_out: datetime) -> float:
    """Elapsed hours between check-in and check-out, 2 decimal places."""
    elapsed = ensure_utc(check_out) - ensure_utc(check_in)
    return round(elapsed.total_seconds() / 3600, 2)


def _parse_action(action) -> AttendanceAction:
    try:
        return AttendanceAction(action)
    except ValueError:
        raise InvalidInputError('Invalid action. Use "check-in" or "check-out"')


def _validate_coordinates(latitude: Optional[float], longitude: Optional[float]) -> Tuple[float, float]:
    if latitude is None or longitude is None:
        raise InvalidInputError("Location coordinates are required")
    try:
        lat, lng = float(latitude), float(longitude)
    except (TypeError, ValueError):
        raise InvalidInputError("Location coordinates must be numbers")
    if not (math.isfinite(lat) and math.isfinite(lng)):
        raise InvalidInputError("Location coordinates must be finite numbers")
    if not -90 <= lat <= 90 or not -180 <= lng <= 180:
        raise InvalidInputError("Location coordinates are out of range")
    return lat, lng


def _check_time_window(policy: AttendancePolicy, action: AttendanceAction, hour: int) -> None:
    if action == AttendanceAction.CHECK_IN:
        if not policy.allows_check_in(hour):
            raise OutsideCheckInWindowError(policy.check_in_start_hour, policy.check_in_end_hour)
    elif not policy.allows_check_out(hour):
        raise OutsideCheckOutWindowError(policy.check_out_start_hour)


async def _resolve_location(
    db: AsyncSession,
    latitude: float,
    longitude: float,
) -> Tuple[AttendanceLocation, float]:
    """Nearest active location, which must contain the caller within its radius."""
    locations = await list_active_locations(db)
    nearest, distance = find_nearest_location(locations, latitude, longitude)
    if nearest is None:
        raise OutOfRangeError()
    if distance > nearest.radius:
        raise OutOfRangeError(nearest.name, round_meters(distance), nearest.radius)
    return nearest, distance


async def get_attendance_for_day(
    db: AsyncSession,
    user_id: UUID,
    day_start: datetime,
    day_end: datetime,
) -> Optional[AttendanceRecord]:
    """The user's record keyed inside [day_start, day_end)."""
    result = await db.execute(
        select(AttendanceRecord).where(
            AttendanceRecord.user_id == user_id,
            AttendanceRecord.date >= day_start,
            AttendanceRecord.date < day_end,
        )
    )
    return result.scalars().first()


# ----- Mark -----
async def _check_in(
    db: AsyncSession,
    user_id: UUID,
    latitude: float,
    longitude: float,
    location: AttendanceLocation,
    distance: int,
    now: datetime,
    day_start: datetime,
    day_end: datetime,
) -> AttendanceRecord:
    existing = await get_attendance_for_day(db, user_id, day_start, day_end)
    if existing:
        raise AlreadyCheckedInError(_record_to_response(existing).model_dump(mode="json"))

    record = AttendanceRecord(
        user_id=user_id,
        date=day_start,
        check_in=now,
        check_in_latitude=latitude,
        check_in_longitude=longitude,
        check_in_location_id=location.id,
        check_in_location_name=location.name,
        check_in_distance=distance,
        status=ATTENDANCE_STATUS_CHECKED_IN,
    )
    db.add(record)
    try:
        await db.commit()
    except IntegrityError:
        # (user_id, date) unique constraint: a concurrent check-in won the race
        await db.rollback()
        existing = await get_attendance_for_day(db, user_id, day_start, day_end)
        if existing is None:
            raise
        logger.info("Concurrent check-in rejected for user %s", user_id)
        raise AlreadyCheckedInError(_record_to_response(existing).model_dump(mode="json"))
    await db.refresh(record)
    return record


async def _check_out(
    db: AsyncSession,
    user_id: UUID,
    latitude: float,
    longitude: float,
    location: AttendanceLocation,
    distance: int,
    now: datetime,
    day_start: datetime,
    day_end: datetime,
) -> AttendanceRecord:
    record = await get_attendance_for_day(db, user_id, day_start, day_end)
    if record is None:
        raise NotCheckedInError()
    if record.status == ATTENDANCE_STATUS_CHECKED_OUT:
        raise AlreadyCheckedOutError()

    record.check_out = now
    record.check_out_latitude = latitude
    record.check_out_longitude = longitude
    record.check_out_location_id = location.id
    record.check_out_location_name = location.name
    record.check_out_distance = distance
    record.status = ATTENDANCE_STATUS_CHECKED_OUT
    record.work_hours = compute_work_hours(record.check_in, now)
    await db.commit()
    await db.refresh(record)
    return record


async def mark_attendance(
    db: AsyncSession,
    policy: AttendancePolicy,
    zone: ZoneInfo,
    user_id: UUID,
    latitude: Optional[float],
    longitude: Optional[float],
    action: str,
    now: Optional[datetime] = None,
) -> AttendanceMarkResponse:
    """
    Check in or check out for the current local day.

    Gates, in order: valid action and coordinates, the policy's time window on
    the operating timezone's clock, the nearest active location's radius, and
    the user's record for the day. Raises the matching ServiceError subclass on
    the first failure; storage failures surface as StorageError.
    """
    act = _parse_action(action)
    lat, lng = _validate_coordinates(latitude, longitude)
    now = ensure_utc(now) if now is not None else utc_now()

    hour = local_hour(now, zone)
    try:
        _check_time_window(policy, act, hour)
    except (OutsideCheckInWindowError, OutsideCheckOutWindowError):
        logger.debug("Rejected %s for user %s at local hour %s", act.value, user_id, hour)
        raise

    try:
        location, raw_distance = await _resolve_location(db, lat, lng)
        distance = round_meters(raw_distance)
        day_start, day_end = local_day_bounds(now, zone)

        if act == AttendanceAction.CHECK_IN:
            record = await _check_in(db, user_id, lat, lng, location, distance, now, day_start, day_end)
        else:
            record = await _check_out(db, user_id, lat, lng, location, distance, now, day_start, day_end)
    except SQLAlchemyError:
        await db.rollback()
        logger.exception("Error marking attendance (%s) for user %s", act.value, user_id)
        raise StorageError("Failed to mark attendance")

    logger.info(
        "User %s %s at %s (%sm)", user_id, act.value, location.name, distance,
    )
    if act == AttendanceAction.CHECK_IN:
        return AttendanceMarkResponse(
            message="Checked in successfully",
            attendance=_record_to_response(record),
            location=location.name,
            distance=distance,
        )
    return AttendanceMarkResponse(
        message="Checked out successfully",
        attendance=_record_to_response(record),
        location=location.name,
        distance=distance,
        work_hours=record.work_hours,
    )


# ----- Reporting -----
async def get_today_attendance(
    db: AsyncSession,
    zone: ZoneInfo,
    user_id: UUID,
    now: Optional[datetime] = None,
) -> Optional[AttendanceRecordResponse]:
    day_start, day_end = local_day_bounds(now or utc_now(), zone)
    record = await get_attendance_for_day(db, user_id, day_start, day_end)
    return _record_to_response(record) if record else None


def _month_bounds(year: int, month: int, zone: ZoneInfo) -> Tuple[datetime, datetime]:
    first = date(year, month, 1)
    next_first = date(year + 1, 1, 1) if month == 12 else date(year, month + 1, 1)
    start, _ = local_date_bounds(first, zone)
    end, _ = local_date_bounds(next_first, zone)
    return start, end


async def get_my_attendance(
    db: AsyncSession,
    zone: ZoneInfo,
    user_id: UUID,
    month: Optional[int] = None,
    year: Optional[int] = None,
    now: Optional[datetime] = None,
) -> MyAttendanceResponse:
    """Newest-first records (one month when month and year are both given), today's record, active locations."""
    q = select(AttendanceRecord).where(AttendanceRecord.user_id == user_id)
    if month is not None and year is not None:
        start, end = _month_bounds(year, month, zone)
        q = q.where(AttendanceRecord.date >= start, AttendanceRecord.date < end)
    q = q.order_by(AttendanceRecord.date.desc()).limit(MY_ATTENDANCE_LIMIT)
    result = await db.execute(q)
    records = result.scalars().all()

    today = await get_today_attendance(db, zone, user_id, now=now)
    locations = await list_active_locations(db)
    return MyAttendanceResponse(
        attendance=[_record_to_response(r) for r in records],
        today_attendance=today,
        locations=[LocationResponse.model_validate(loc) for loc in locations],
    )


async def list_attendance(
    db: AsyncSession,
    zone: ZoneInfo,
    user_id: Optional[UUID] = None,
    on_date: Optional[date] = None,
    from_date: Optional[date] = None,
    to_date: Optional[date] = None,
    location_id: Optional[UUID] = None,
    limit: int = DEFAULT_LIST_LIMIT,
) -> List[AttendanceRecordResponse]:
    """Read-only reporting query. Dates are local calendar dates; ranges are inclusive."""
    if from_date and to_date and to_date < from_date:
        raise InvalidInputError("to_date must be on or after from_date")

    q = select(AttendanceRecord)
    if user_id:
        q = q.where(AttendanceRecord.user_id == user_id)
    if on_date:
        start, end = local_date_bounds(on_date, zone)
        q = q.where(AttendanceRecord.date >= start, AttendanceRecord.date < end)
    if from_date:
        q = q.where(AttendanceRecord.date >= local_date_bounds(from_date, zone)[0])
    if to_date:
        q = q.where(AttendanceRecord.date < local_date_bounds(to_date, zone)[1])
    if location_id:
        q = q.where(AttendanceRecord.check_in_location_id == location_id)
    q = q.order_by(AttendanceRecord.date.desc(), AttendanceRecord.check_in.desc()).limit(limit)
    result = await db.execute(q)
    return [_record_to_response(r) for r in result.scalars().all()]
