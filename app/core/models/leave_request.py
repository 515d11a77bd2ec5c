"""Employee leave requests: created pending, reviewed once by an administrator."""

import uuid
from datetime import datetime

from sqlalchemy import Column, Date, DateTime, ForeignKey, Index, Integer, String, Text
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import relationship

from app.core.enums import LeaveStatus, LeaveType
from app.db.session import Base


# Status and type constants
LEAVE_STATUS_PENDING = LeaveStatus.PENDING.value
LEAVE_STATUS_APPROVED = LeaveStatus.APPROVED.value
LEAVE_STATUS_REJECTED = LeaveStatus.REJECTED.value

LEAVE_TYPES = tuple(t.value for t in LeaveType)

REASON_MAX_LENGTH = 500
REVIEW_NOTE_MAX_LENGTH = 300


class LeaveRequest(Base):
    __tablename__ = "leave_requests"
    __table_args__ = (
        Index("ix_leave_requests_employee_start", "employee_id", "start_date"),
        Index("ix_leave_requests_status_created", "status", "created_at"),
    )

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    employee_id = Column(UUID(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    leave_type = Column(String(20), nullable=False)
    # Inclusive range
    start_date = Column(Date, nullable=False)
    end_date = Column(Date, nullable=False)
    reason = Column(Text, nullable=False)
    total_days = Column(Integer, nullable=False, default=1)
    status = Column(String(20), nullable=False, default=LEAVE_STATUS_PENDING)
    reviewed_by = Column(UUID(as_uuid=True), ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    reviewed_at = Column(DateTime(timezone=True), nullable=True)
    review_note = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    employee = relationship("User", foreign_keys=[employee_id])
    reviewer = relationship("User", foreign_keys=[reviewed_by])
