from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, Field


class AttendancePolicy(BaseModel):
    """
    Immutable snapshot of the attendance time policy, in local-clock hours.

    No ordering is enforced: check_in_start_hour >= check_in_end_hour is a valid
    (if unusual) configuration whose check-in window is empty.
    """

    check_in_start_hour: int
    check_in_end_hour: int
    check_out_start_hour: int
    updated_by: Optional[UUID] = None
    updated_at: Optional[datetime] = None

    class Config:
        frozen = True
        from_attributes = True

    def allows_check_in(self, hour: int) -> bool:
        return self.check_in_start_hour <= hour < self.check_in_end_hour

    def allows_check_out(self, hour: int) -> bool:
        return hour >= self.check_out_start_hour


class AttendanceSettingsUpdate(BaseModel):
    """Partial update; omitted fields keep their current value."""

    check_in_start_hour: Optional[int] = Field(None, ge=0, le=23)
    check_in_end_hour: Optional[int] = Field(None, ge=0, le=23)
    check_out_start_hour: Optional[int] = Field(None, ge=0, le=23)
