"""Leave apply / review lifecycle and the per-employee overlap rule."""

from datetime import date, datetime, timezone
from uuid import uuid4

import pytest
from sqlalchemy import text

from app.api.v1.leaves import service
from app.core.exceptions import (
    InvalidInputError,
    NotFoundError,
    NotPendingError,
    OverlappingLeaveError,
    StorageError,
)


async def _apply(db, employee_id, start: str, end: str, leave_type: str = "annual", reason: str = "Family trip"):
    return await service.create_leave_request(db, employee_id, leave_type, start, end, reason)


@pytest.mark.asyncio
async def test_create_is_pending_with_inclusive_days(db_session, employee) -> None:
    leave = await _apply(db_session, employee.id, "2026-11-02", "2026-11-06")
    assert leave.status == "pending"
    assert leave.total_days == 5
    assert leave.start_date == date(2026, 11, 2)
    assert leave.reviewed_by is None


@pytest.mark.asyncio
async def test_single_day_and_iso_timestamps(db_session, employee) -> None:
    leave = await _apply(db_session, employee.id, "2026-11-02T00:00:00.000Z", "2026-11-02T00:00:00.000Z", "sick")
    assert leave.total_days == 1
    assert leave.end_date == date(2026, 11, 2)


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "leave_type,start,end,reason",
    [
        (None, "2026-11-02", "2026-11-03", "x"),
        ("annual", None, "2026-11-03", "x"),
        ("annual", "2026-11-02", "", "x"),
        ("annual", "2026-11-02", "2026-11-03", "   "),
        ("vacation", "2026-11-02", "2026-11-03", "x"),
        ("annual", "next monday", "2026-11-03", "x"),
        ("annual", "2026-11-05", "2026-11-03", "x"),
        ("annual", "2026-11-02", "2026-11-03", "x" * 501),
    ],
)
async def test_invalid_applications(db_session, employee, leave_type, start, end, reason) -> None:
    with pytest.raises(InvalidInputError):
        await service.create_leave_request(db_session, employee.id, leave_type, start, end, reason)


@pytest.mark.asyncio
async def test_reason_at_limit_is_accepted(db_session, employee) -> None:
    leave = await _apply(db_session, employee.id, "2026-11-02", "2026-11-02", reason="x" * 500)
    assert len(leave.reason) == 500


@pytest.mark.asyncio
async def test_overlap_with_pending_or_approved_is_rejected(db_session, employee, admin) -> None:
    pending = await _apply(db_session, employee.id, "2026-11-02", "2026-11-06")

    with pytest.raises(OverlappingLeaveError):
        await _apply(db_session, employee.id, "2026-11-06", "2026-11-08")

    await service.review_leave_request(db_session, pending.id, admin.id, "approved")
    with pytest.raises(OverlappingLeaveError):
        await _apply(db_session, employee.id, "2026-10-30", "2026-11-02")
    with pytest.raises(OverlappingLeaveError):
        await _apply(db_session, employee.id, "2026-11-03", "2026-11-04")


@pytest.mark.asyncio
async def test_rejected_requests_do_not_block(db_session, employee, admin) -> None:
    first = await _apply(db_session, employee.id, "2026-11-02", "2026-11-06")
    await service.review_leave_request(db_session, first.id, admin.id, "rejected", note="Release week")

    second = await _apply(db_session, employee.id, "2026-11-03", "2026-11-04")
    assert second.status == "pending"


@pytest.mark.asyncio
async def test_adjacent_ranges_and_other_employees_are_fine(db_session, employee, other_employee) -> None:
    await _apply(db_session, employee.id, "2026-11-02", "2026-11-06")
    await _apply(db_session, employee.id, "2026-11-07", "2026-11-08")
    await _apply(db_session, employee.id, "2026-11-01", "2026-11-01")
    await _apply(db_session, other_employee.id, "2026-11-02", "2026-11-06")


@pytest.mark.asyncio
async def test_review_sets_reviewer_fields(db_session, employee, admin) -> None:
    leave = await _apply(db_session, employee.id, "2026-11-02", "2026-11-03")
    reviewed_at = datetime(2026, 10, 20, 9, 0, tzinfo=timezone.utc)

    reviewed = await service.review_leave_request(
        db_session, leave.id, admin.id, "approved", note="Enjoy", now=reviewed_at
    )

    assert reviewed.status == "approved"
    assert reviewed.reviewed_by == admin.id
    assert reviewed.reviewed_at == reviewed_at
    assert reviewed.review_note == "Enjoy"


@pytest.mark.asyncio
async def test_review_without_note_leaves_it_unset(db_session, employee, admin) -> None:
    leave = await _apply(db_session, employee.id, "2026-11-02", "2026-11-03")
    reviewed = await service.review_leave_request(db_session, leave.id, admin.id, "rejected")
    assert reviewed.review_note is None
    assert reviewed.reviewed_at is not None


@pytest.mark.asyncio
async def test_review_happens_once(db_session, employee, admin) -> None:
    leave = await _apply(db_session, employee.id, "2026-11-02", "2026-11-03")
    await service.review_leave_request(db_session, leave.id, admin.id, "approved")
    with pytest.raises(NotPendingError):
        await service.review_leave_request(db_session, leave.id, admin.id, "rejected")


@pytest.mark.asyncio
async def test_review_errors(db_session, employee, admin) -> None:
    leave = await _apply(db_session, employee.id, "2026-11-02", "2026-11-03")
    with pytest.raises(InvalidInputError):
        await service.review_leave_request(db_session, leave.id, admin.id, "pending")
    with pytest.raises(InvalidInputError):
        await service.review_leave_request(db_session, leave.id, admin.id, "approved", note="n" * 301)
    with pytest.raises(NotFoundError):
        await service.review_leave_request(db_session, uuid4(), admin.id, "approved")


@pytest.mark.asyncio
async def test_summary(db_session, employee, admin) -> None:
    a = await _apply(db_session, employee.id, "2026-11-02", "2026-11-06")
    b = await _apply(db_session, employee.id, "2026-12-01", "2026-12-02")
    await _apply(db_session, employee.id, "2027-01-04", "2027-01-04")
    await service.review_leave_request(db_session, a.id, admin.id, "approved")
    await service.review_leave_request(db_session, b.id, admin.id, "rejected")

    summary = await service.get_leave_summary(db_session, employee.id)
    assert (summary.pending, summary.approved, summary.rejected) == (1, 1, 1)
    assert summary.total_approved_days == 5

    empty = await service.get_leave_summary(db_session, uuid4())
    assert (empty.pending, empty.approved, empty.rejected, empty.total_approved_days) == (0, 0, 0, 0)


@pytest.mark.asyncio
async def test_list_my_leaves_pages_and_filters(db_session, employee, other_employee, admin) -> None:
    for day in range(1, 6):
        await _apply(db_session, employee.id, f"2026-11-{day:02d}", f"2026-11-{day:02d}")
    await _apply(db_session, other_employee.id, "2026-11-01", "2026-11-01")

    page = await service.list_my_leaves(db_session, employee.id, page=2, limit=2)
    assert page.pagination.total == 5
    assert page.pagination.pages == 3
    assert len(page.leaves) == 2
    assert all(leave.employee_id == employee.id for leave in page.leaves)

    newest_first = await service.list_my_leaves(db_session, employee.id)
    assert [leave.start_date.day for leave in newest_first.leaves] == [5, 4, 3, 2, 1]

    capped = await service.list_my_leaves(db_session, employee.id, limit=500)
    assert capped.pagination.limit == 50

    approved = await service.list_my_leaves(db_session, employee.id, status="approved")
    assert approved.leaves == []
    assert approved.summary.pending == 5


@pytest.mark.asyncio
async def test_list_all_leaves_counts_globally(db_session, employee, other_employee, admin) -> None:
    mine = await _apply(db_session, employee.id, "2026-11-02", "2026-11-03")
    await _apply(db_session, other_employee.id, "2026-11-02", "2026-11-03")
    await service.review_leave_request(db_session, mine.id, admin.id, "approved")

    pending = await service.list_all_leaves(db_session, status="pending")
    assert [leave.employee_id for leave in pending.leaves] == [other_employee.id]
    assert (pending.summary.pending, pending.summary.approved, pending.summary.rejected) == (1, 1, 0)

    by_employee = await service.list_all_leaves(db_session, employee_id=employee.id)
    assert by_employee.pagination.total == 1


@pytest.mark.asyncio
async def test_delete(db_session, employee) -> None:
    leave = await _apply(db_session, employee.id, "2026-11-02", "2026-11-03")
    await service.delete_leave_request(db_session, leave.id)
    with pytest.raises(NotFoundError):
        await service.delete_leave_request(db_session, leave.id)

    # The freed range can be requested again
    await _apply(db_session, employee.id, "2026-11-02", "2026-11-03")


def test_inclusive_days() -> None:
    assert service.inclusive_days(date(2026, 2, 27), date(2026, 3, 2)) == 4


@pytest.mark.asyncio
async def test_storage_failures_become_storage_error(db_session, employee, admin) -> None:
    employee_id, admin_id = employee.id, admin.id
    await db_session.execute(text("DROP TABLE leave_requests"))
    await db_session.commit()

    with pytest.raises(StorageError) as exc:
        await _apply(db_session, employee_id, "2026-11-02", "2026-11-03")
    assert exc.value.detail["code"] == "StorageError"
    assert exc.value.status_code == 500

    with pytest.raises(StorageError):
        await service.review_leave_request(db_session, uuid4(), admin_id, "approved")
    with pytest.raises(StorageError):
        await service.delete_leave_request(db_session, uuid4())
