"""Singleton attendance policy row: the local-clock hours that bound check-in and check-out."""

import uuid
from datetime import datetime

from sqlalchemy import Column, DateTime, ForeignKey, Integer, String
from sqlalchemy.dialects.postgresql import UUID

from app.db.session import Base

SETTINGS_KEY = "attendance"

DEFAULT_CHECK_IN_START_HOUR = 10
DEFAULT_CHECK_IN_END_HOUR = 11
DEFAULT_CHECK_OUT_START_HOUR = 19


class AttendanceSettings(Base):
    __tablename__ = "attendance_settings"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    # Unique key keeps the table to a single logical row
    key = Column(String(50), nullable=False, unique=True, default=SETTINGS_KEY)
    check_in_start_hour = Column(Integer, nullable=False, default=DEFAULT_CHECK_IN_START_HOUR)
    check_in_end_hour = Column(Integer, nullable=False, default=DEFAULT_CHECK_IN_END_HOUR)
    check_out_start_hour = Column(Integer, nullable=False, default=DEFAULT_CHECK_OUT_START_HOUR)
    updated_by = Column(UUID(as_uuid=True), ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    created_at = Column(DateTime(timezone=True), default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)
