"""Geofences employees may mark attendance from. Managed by administrators."""

import uuid
from datetime import datetime

from sqlalchemy import Boolean, Column, DateTime, Float, Integer, String
from sqlalchemy.dialects.postgresql import UUID

from app.db.session import Base

DEFAULT_RADIUS_M = 100
MIN_RADIUS_M = 10
MAX_RADIUS_M = 5000


class AttendanceLocation(Base):
    __tablename__ = "attendance_locations"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    name = Column(String(255), nullable=False)
    address = Column(String(500), nullable=False)
    latitude = Column(Float, nullable=False)
    longitude = Column(Float, nullable=False)
    # Maximum accepted distance from (latitude, longitude), in meters
    radius = Column(Integer, nullable=False, default=DEFAULT_RADIUS_M)
    is_active = Column(Boolean, nullable=False, default=True, index=True)
    created_at = Column(DateTime(timezone=True), default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)
