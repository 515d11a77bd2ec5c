"""Leave apply, review, listing and summaries."""

import logging
import math
from datetime import date, datetime, timezone
from typing import Optional, Tuple, Union
from uuid import UUID

from sqlalchemy import delete, func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import (
    InvalidInputError,
    NotFoundError,
    NotPendingError,
    OverlappingLeaveError,
    StorageError,
)
from app.core.models import LeaveRequest
from app.core.models.leave_request import (
    LEAVE_STATUS_APPROVED,
    LEAVE_STATUS_PENDING,
    LEAVE_STATUS_REJECTED,
    LEAVE_TYPES,
    REASON_MAX_LENGTH,
    REVIEW_NOTE_MAX_LENGTH,
)
from app.core.timezone_utils import ensure_utc

from .schemas import (
    AllLeavesResponse,
    LeaveRequestResponse,
    LeaveStatusCounts,
    LeaveSummary,
    MyLeavesResponse,
    Pagination,
)

logger = logging.getLogger(__name__)

LEAVE_STATUSES = (LEAVE_STATUS_PENDING, LEAVE_STATUS_APPROVED, LEAVE_STATUS_REJECTED)
REVIEW_STATUSES = (LEAVE_STATUS_APPROVED, LEAVE_STATUS_REJECTED)

MY_LEAVES_DEFAULT_LIMIT = 20
MY_LEAVES_MAX_LIMIT = 50
ALL_LEAVES_DEFAULT_LIMIT = 50


def _request_to_response(r: LeaveRequest) -> LeaveRequestResponse:
    return LeaveRequestResponse(
        id=r.id,
        employee_id=r.employee_id,
        leave_type=r.leave_type,
        start_date=r.start_date,
        end_date=r.end_date,
        reason=r.reason,
        total_days=r.total_days,
        status=r.status,
        reviewed_by=r.reviewed_by,
        reviewed_at=ensure_utc(r.reviewed_at),
        review_note=r.review_note,
        created_at=ensure_utc(r.created_at),
        updated_at=ensure_utc(r.updated_at),
    )


def _parse_date(value: Union[date, datetime, str, None], field: str) -> date:
    """Accept a date, a datetime, or an ISO string (YYYY-MM-DD or a full ISO timestamp)."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    text = str(value).strip()
    try:
        return date.fromisoformat(text)
    except ValueError:
        pass
    try:
        return datetime.fromisoformat(text.replace("Z", "+00:00")).date()
    except ValueError:
        raise InvalidInputError(f"Invalid date format for {field}")


def inclusive_days(start: date, end: date) -> int:
    return (end - start).days + 1


def _paginate(page: int, limit: int, max_limit: int) -> Tuple[int, int]:
    page = max(1, page)
    limit = max(1, min(max_limit, limit))
    return page, limit


def _pagination(total: int, page: int, limit: int) -> Pagination:
    return Pagination(total=total, page=page, limit=limit, pages=math.ceil(total / limit))


async def find_overlapping_leave(
    db: AsyncSession,
    employee_id: UUID,
    start: date,
    end: date,
) -> Optional[LeaveRequest]:
    """First pending/approved request of the employee whose range intersects [start, end]."""
    result = await db.execute(
        select(LeaveRequest).where(
            LeaveRequest.employee_id == employee_id,
            LeaveRequest.status != LEAVE_STATUS_REJECTED,
            LeaveRequest.start_date <= end,
            LeaveRequest.end_date >= start,
        ).limit(1)
    )
    return result.scalar_one_or_none()


async def create_leave_request(
    db: AsyncSession,
    employee_id: UUID,
    leave_type: Optional[str],
    start_date: Union[date, str, None],
    end_date: Union[date, str, None],
    reason: Optional[str],
) -> LeaveRequestResponse:
    """Validate and store a pending leave request; ranges of non-rejected requests may not overlap."""
    if not leave_type or not start_date or not end_date or not reason or not str(reason).strip():
        raise InvalidInputError("All fields are required: leave_type, start_date, end_date, reason")
    if leave_type not in LEAVE_TYPES:
        raise InvalidInputError(f"Invalid leave type. Use one of: {', '.join(LEAVE_TYPES)}")
    reason = reason.strip()
    if len(reason) > REASON_MAX_LENGTH:
        raise InvalidInputError(f"Reason cannot exceed {REASON_MAX_LENGTH} characters")

    start = _parse_date(start_date, "start_date")
    end = _parse_date(end_date, "end_date")
    if end < start:
        raise InvalidInputError("End date cannot be before start date")

    try:
        # Not serialized against a concurrent submit for the same employee
        if await find_overlapping_leave(db, employee_id, start, end):
            raise OverlappingLeaveError()

        req = LeaveRequest(
            employee_id=employee_id,
            leave_type=leave_type,
            start_date=start,
            end_date=end,
            reason=reason,
            total_days=inclusive_days(start, end),
            status=LEAVE_STATUS_PENDING,
        )
        db.add(req)
        await db.commit()
        await db.refresh(req)
    except SQLAlchemyError:
        await db.rollback()
        logger.exception("Error creating leave request for %s", employee_id)
        raise StorageError("Failed to create leave request")
    logger.info("Leave request %s created for %s (%s, %s..%s)", req.id, employee_id, leave_type, start, end)
    return _request_to_response(req)


async def review_leave_request(
    db: AsyncSession,
    leave_id: UUID,
    reviewer_id: UUID,
    status: Optional[str],
    note: Optional[str] = None,
    now: Optional[datetime] = None,
) -> LeaveRequestResponse:
    """Approve or reject a pending request. Reviewed requests are final."""
    if status not in REVIEW_STATUSES:
        raise InvalidInputError("Status must be either approved or rejected")
    if note and len(note) > REVIEW_NOTE_MAX_LENGTH:
        raise InvalidInputError(f"Review note cannot exceed {REVIEW_NOTE_MAX_LENGTH} characters")

    try:
        req = await db.get(LeaveRequest, leave_id)
        if not req:
            raise NotFoundError("Leave request not found")
        if req.status != LEAVE_STATUS_PENDING:
            raise NotPendingError()

        req.status = status
        req.reviewed_by = reviewer_id
        req.reviewed_at = now or datetime.now(timezone.utc)
        if note:
            req.review_note = note
        await db.commit()
        await db.refresh(req)
    except SQLAlchemyError:
        await db.rollback()
        logger.exception("Error reviewing leave request %s", leave_id)
        raise StorageError("Failed to review leave request")
    logger.info("Leave request %s %s by %s", leave_id, status, reviewer_id)
    return _request_to_response(req)


async def delete_leave_request(db: AsyncSession, leave_id: UUID) -> None:
    try:
        result = await db.execute(delete(LeaveRequest).where(LeaveRequest.id == leave_id))
        if result.rowcount == 0:
            raise NotFoundError("Leave request not found")
        await db.commit()
    except SQLAlchemyError:
        await db.rollback()
        logger.exception("Error deleting leave request %s", leave_id)
        raise StorageError("Failed to delete leave request")
    logger.info("Leave request %s deleted", leave_id)


async def get_leave_summary(db: AsyncSession, employee_id: UUID) -> LeaveSummary:
    """Counts per status and the total days of approved requests."""
    result = await db.execute(
        select(
            LeaveRequest.status,
            func.count(LeaveRequest.id),
            func.coalesce(func.sum(LeaveRequest.total_days), 0),
        )
        .where(LeaveRequest.employee_id == employee_id)
        .group_by(LeaveRequest.status)
    )
    summary = LeaveSummary()
    for status, count, total_days in result.all():
        if status == LEAVE_STATUS_PENDING:
            summary.pending = count
        elif status == LEAVE_STATUS_APPROVED:
            summary.approved = count
            summary.total_approved_days = int(total_days)
        elif status == LEAVE_STATUS_REJECTED:
            summary.rejected = count
    return summary


async def _status_counts(db: AsyncSession) -> LeaveStatusCounts:
    result = await db.execute(
        select(LeaveRequest.status, func.count(LeaveRequest.id)).group_by(LeaveRequest.status)
    )
    counts = LeaveStatusCounts()
    for status, count in result.all():
        if status in LEAVE_STATUSES:
            setattr(counts, status, count)
    return counts


async def list_my_leaves(
    db: AsyncSession,
    employee_id: UUID,
    status: Optional[str] = None,
    page: int = 1,
    limit: int = MY_LEAVES_DEFAULT_LIMIT,
) -> MyLeavesResponse:
    """Employee's own requests, newest first, with their summary."""
    page, limit = _paginate(page, limit, MY_LEAVES_MAX_LIMIT)
    conditions = [LeaveRequest.employee_id == employee_id]
    if status in LEAVE_STATUSES:
        conditions.append(LeaveRequest.status == status)

    total = (await db.execute(select(func.count(LeaveRequest.id)).where(*conditions))).scalar_one()
    result = await db.execute(
        select(LeaveRequest)
        .where(*conditions)
        .order_by(LeaveRequest.created_at.desc())
        .offset((page - 1) * limit)
        .limit(limit)
    )
    return MyLeavesResponse(
        leaves=[_request_to_response(r) for r in result.scalars().all()],
        summary=await get_leave_summary(db, employee_id),
        pagination=_pagination(total, page, limit),
    )


async def list_all_leaves(
    db: AsyncSession,
    status: Optional[str] = None,
    employee_id: Optional[UUID] = None,
    page: int = 1,
    limit: int = ALL_LEAVES_DEFAULT_LIMIT,
) -> AllLeavesResponse:
    """All requests (admin), newest first, with platform-wide status counts."""
    page = max(1, page)
    limit = max(1, limit)
    conditions = []
    if status in LEAVE_STATUSES:
        conditions.append(LeaveRequest.status == status)
    if employee_id:
        conditions.append(LeaveRequest.employee_id == employee_id)

    total = (await db.execute(select(func.count(LeaveRequest.id)).where(*conditions))).scalar_one()
    result = await db.execute(
        select(LeaveRequest)
        .where(*conditions)
        .order_by(LeaveRequest.created_at.desc())
        .offset((page - 1) * limit)
        .limit(limit)
    )
    return AllLeavesResponse(
        leaves=[_request_to_response(r) for r in result.scalars().all()],
        summary=await _status_counts(db),
        pagination=_pagination(total, page, limit),
    )
