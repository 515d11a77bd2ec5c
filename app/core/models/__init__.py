from app.auth.models import User
from app.core.models.attendance_location import AttendanceLocation
from app.core.models.attendance_record import AttendanceRecord
from app.core.models.attendance_settings import AttendanceSettings
from app.core.models.leave_request import LeaveRequest

__all__ = [
    "AttendanceLocation",
    "AttendanceRecord",
    "AttendanceSettings",
    "LeaveRequest",
    "User",
]
