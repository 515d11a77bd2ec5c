import uuid
from datetime import datetime

from sqlalchemy import Column, DateTime, Float, ForeignKey, Integer, String, Text, UniqueConstraint
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import relationship

from app.core.enums import AttendanceStatus
from app.db.session import Base

ATTENDANCE_STATUS_CHECKED_IN = AttendanceStatus.CHECKED_IN.value
ATTENDANCE_STATUS_CHECKED_OUT = AttendanceStatus.CHECKED_OUT.value


class AttendanceRecord(Base):
    """
    One check-in/check-out pair per user per local calendar day.

    `date` is the UTC instant of local midnight for the operating timezone; it is
    both the display date and, with user_id, the uniqueness key.
    """

    __tablename__ = "attendance_records"
    __table_args__ = (
        UniqueConstraint("user_id", "date", name="uq_attendance_user_date"),
    )

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    user_id = Column(UUID(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    date = Column(DateTime(timezone=True), nullable=False, index=True)

    check_in = Column(DateTime(timezone=True), nullable=False)
    check_in_latitude = Column(Float, nullable=False)
    check_in_longitude = Column(Float, nullable=False)
    check_in_location_id = Column(
        UUID(as_uuid=True), ForeignKey("attendance_locations.id", ondelete="SET NULL"), nullable=True, index=True
    )
    check_in_location_name = Column(String(255), nullable=False)
    check_in_distance = Column(Integer, nullable=False)

    # Unset until checkout
    check_out = Column(DateTime(timezone=True), nullable=True)
    check_out_latitude = Column(Float, nullable=True)
    check_out_longitude = Column(Float, nullable=True)
    check_out_location_id = Column(
        UUID(as_uuid=True), ForeignKey("attendance_locations.id", ondelete="SET NULL"), nullable=True
    )
    check_out_location_name = Column(String(255), nullable=True)
    check_out_distance = Column(Integer, nullable=True)

    status = Column(String(20), nullable=False, default=ATTENDANCE_STATUS_CHECKED_IN)
    work_hours = Column(Float, nullable=True)
    notes = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    user = relationship("User", foreign_keys=[user_id])
