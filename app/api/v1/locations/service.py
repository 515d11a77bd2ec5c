"""Attendance location registry: active geofences and nearest-location lookup."""

import logging
import math
from typing import List, Optional, Sequence, Tuple
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import NotFoundError
from app.core.geo import haversine_distance
from app.core.models import AttendanceLocation

from .schemas import LocationCreate, LocationResponse, LocationUpdate

logger = logging.getLogger(__name__)


async def list_active_locations(db: AsyncSession) -> List[AttendanceLocation]:
    """Locations eligible for marking attendance (is_active only)."""
    result = await db.execute(
        select(AttendanceLocation)
        .where(AttendanceLocation.is_active.is_(True))
        .order_by(AttendanceLocation.name)
    )
    return list(result.scalars().all())


def find_nearest_location(
    locations: Sequence[AttendanceLocation],
    latitude: float,
    longitude: float,
) -> Tuple[Optional[AttendanceLocation], float]:
    """
    Linear scan for the closest location to (latitude, longitude).

    Returns (None, inf) when there are no locations. Ties keep the first seen.
    """
    nearest: Optional[AttendanceLocation] = None
    nearest_distance = math.inf
    for location in locations:
        distance = haversine_distance(latitude, longitude, location.latitude, location.longitude)
        if distance < nearest_distance:
            nearest = location
            nearest_distance = distance
    return nearest, nearest_distance


# ----- Admin management -----
async def list_locations(db: AsyncSession) -> List[LocationResponse]:
    result = await db.execute(select(AttendanceLocation).order_by(AttendanceLocation.created_at.desc()))
    return [LocationResponse.model_validate(loc) for loc in result.scalars().all()]


async def create_location(db: AsyncSession, payload: LocationCreate) -> LocationResponse:
    location = AttendanceLocation(
        name=payload.name.strip(),
        address=payload.address.strip(),
        latitude=payload.latitude,
        longitude=payload.longitude,
        radius=payload.radius,
        is_active=True,
    )
    db.add(location)
    await db.commit()
    await db.refresh(location)
    logger.info("Created attendance location %s (%s)", location.id, location.name)
    return LocationResponse.model_validate(location)


async def _get_location(db: AsyncSession, location_id: UUID) -> AttendanceLocation:
    location = await db.get(AttendanceLocation, location_id)
    if not location:
        raise NotFoundError("Location not found")
    return location


async def update_location(db: AsyncSession, location_id: UUID, payload: LocationUpdate) -> LocationResponse:
    location = await _get_location(db, location_id)
    changes = payload.model_dump(exclude_unset=True, exclude_none=True)
    for field in ("name", "address"):
        if field in changes:
            changes[field] = changes[field].strip()
    for field, value in changes.items():
        setattr(location, field, value)
    await db.commit()
    await db.refresh(location)
    return LocationResponse.model_validate(location)


async def delete_location(db: AsyncSession, location_id: UUID) -> None:
    location = await _get_location(db, location_id)
    await db.delete(location)
    await db.commit()
    logger.info("Deleted attendance location %s", location_id)
