from typing import Any, Dict, Optional

from fastapi import status


class ServiceError(Exception):
    """Base exception for service layer errors."""

    code = "ServiceError"

    def __init__(
        self,
        message: str,
        status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR,
        extra: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.extra = extra or {}

    @property
    def detail(self) -> Dict[str, Any]:
        """Body for HTTPException.detail: kind, user-facing message and any context."""
        return {"code": self.code, "message": self.message, **self.extra}


class InvalidInputError(ServiceError):
    code = "InvalidInput"

    def __init__(self, message: str) -> None:
        super().__init__(message, status.HTTP_400_BAD_REQUEST)


class StorageError(ServiceError):
    """Infrastructure failure; never retried, surfaced as a generic failure."""

    code = "StorageError"

    def __init__(self, message: str = "Storage operation failed") -> None:
        super().__init__(message, status.HTTP_500_INTERNAL_SERVER_ERROR)


class NotFoundError(ServiceError):
    code = "NotFound"

    def __init__(self, message: str) -> None:
        super().__init__(message, status.HTTP_404_NOT_FOUND)


# ----- Attendance -----
class OutsideCheckInWindowError(ServiceError):
    code = "OutsideCheckInWindow"

    def __init__(self, start_hour: int, end_hour: int) -> None:
        super().__init__(
            f"Check-in is only allowed between {start_hour:02d}:00 and {end_hour:02d}:00.",
            status.HTTP_400_BAD_REQUEST,
            {"start_hour": start_hour, "end_hour": end_hour},
        )
        self.start_hour = start_hour
        self.end_hour = end_hour


class OutsideCheckOutWindowError(ServiceError):
    code = "OutsideCheckOutWindow"

    def __init__(self, start_hour: int) -> None:
        super().__init__(
            f"Check-out is only allowed after {start_hour:02d}:00.",
            status.HTTP_400_BAD_REQUEST,
            {"start_hour": start_hour},
        )
        self.start_hour = start_hour


class OutOfRangeError(ServiceError):
    """No active location within its radius. Always names the closest one when any exist."""

    code = "OutOfRange"

    def __init__(
        self,
        location_name: Optional[str] = None,
        distance: Optional[int] = None,
        required_radius: Optional[int] = None,
    ) -> None:
        nearest = None
        if location_name is not None:
            nearest = {
                "name": location_name,
                "distance": distance,
                "required_radius": required_radius,
            }
        super().__init__(
            "You are not within any allowed attendance location",
            status.HTTP_400_BAD_REQUEST,
            {"nearest_location": nearest},
        )
        self.location_name = location_name
        self.distance = distance
        self.required_radius = required_radius


class AlreadyCheckedInError(ServiceError):
    code = "AlreadyCheckedIn"

    def __init__(self, attendance: Optional[Dict[str, Any]] = None) -> None:
        super().__init__(
            "You have already checked in today",
            status.HTTP_400_BAD_REQUEST,
            {"attendance": attendance},
        )
        self.attendance = attendance


class AlreadyCheckedOutError(ServiceError):
    code = "AlreadyCheckedOut"

    def __init__(self) -> None:
        super().__init__("You have already checked out today", status.HTTP_400_BAD_REQUEST)


class NotCheckedInError(ServiceError):
    code = "NotCheckedIn"

    def __init__(self) -> None:
        super().__init__("You have not checked in today", status.HTTP_400_BAD_REQUEST)


# ----- Leave -----
class OverlappingLeaveError(ServiceError):
    code = "OverlappingLeave"

    def __init__(self) -> None:
        super().__init__(
            "You already have a leave request for overlapping dates",
            status.HTTP_400_BAD_REQUEST,
        )


class NotPendingError(ServiceError):
    code = "NotPending"

    def __init__(self) -> None:
        super().__init__("Only pending leave requests can be reviewed", status.HTTP_400_BAD_REQUEST)
