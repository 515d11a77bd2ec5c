from datetime import datetime
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, Field

from app.api.v1.locations.schemas import LocationResponse


# ----- Mark -----
class AttendanceMarkRequest(BaseModel):
    """Check-in or check-out from the caller's current position."""

    latitude: Optional[float] = Field(None, description="Degrees, -90..90")
    longitude: Optional[float] = Field(None, description="Degrees, -180..180")
    action: str = Field(..., description="check-in or check-out")


class LocationSnapshot(BaseModel):
    """Where a mark was accepted: caller coordinates and the matched location."""

    latitude: float
    longitude: float
    location_id: Optional[UUID] = None
    location_name: str
    distance: int = Field(..., description="Meters from the location center, rounded")


class AttendanceRecordResponse(BaseModel):
    id: UUID
    user_id: UUID
    date: datetime = Field(..., description="Local midnight of the attendance day, as a UTC instant")
    check_in: datetime
    check_in_location: LocationSnapshot
    check_out: Optional[datetime] = None
    check_out_location: Optional[LocationSnapshot] = None
    status: str
    work_hours: Optional[float] = None
    notes: Optional[str] = None
    created_at: datetime
    updated_at: datetime


class AttendanceMarkResponse(BaseModel):
    success: bool = True
    message: str
    attendance: AttendanceRecordResponse
    location: str
    distance: int
    work_hours: Optional[float] = None


# ----- Reporting -----
class MyAttendanceResponse(BaseModel):
    """Employee view: recent records, today's record and where attendance can be marked."""

    attendance: List[AttendanceRecordResponse]
    today_attendance: Optional[AttendanceRecordResponse] = None
    locations: List[LocationResponse]
