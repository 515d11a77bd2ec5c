from datetime import date, datetime
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, Field


# ----- Apply Leave -----
class LeaveApply(BaseModel):
    """
    Leave application. Fields are validated by the service so that missing or
    malformed values are reported the same way from every entry point.
    """

    leave_type: Optional[str] = Field(None, description="annual, sick, personal, unpaid, other")
    start_date: Optional[str] = Field(None, description="YYYY-MM-DD")
    end_date: Optional[str] = Field(None, description="YYYY-MM-DD, inclusive")
    reason: Optional[str] = None


# ----- Review -----
class LeaveReview(BaseModel):
    status: Optional[str] = Field(None, description="approved or rejected")
    review_note: Optional[str] = None


# ----- Leave Request Response -----
class LeaveRequestResponse(BaseModel):
    id: UUID
    employee_id: UUID
    leave_type: str
    start_date: date
    end_date: date
    reason: str
    total_days: int
    status: str
    reviewed_by: Optional[UUID] = None
    reviewed_at: Optional[datetime] = None
    review_note: Optional[str] = None
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class LeaveStatusCounts(BaseModel):
    pending: int = 0
    approved: int = 0
    rejected: int = 0


class LeaveSummary(LeaveStatusCounts):
    """Per-employee counts plus the days covered by approved requests."""

    total_approved_days: int = 0


class Pagination(BaseModel):
    total: int
    page: int
    limit: int
    pages: int


class MyLeavesResponse(BaseModel):
    leaves: List[LeaveRequestResponse]
    summary: LeaveSummary
    pagination: Pagination


class AllLeavesResponse(BaseModel):
    leaves: List[LeaveRequestResponse]
    summary: LeaveStatusCounts
    pagination: Pagination
