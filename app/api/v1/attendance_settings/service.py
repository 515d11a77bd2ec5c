"""Attendance settings store: lazily created singleton row, cached per process."""

import asyncio
import logging
import time
from typing import Optional
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import settings
from app.core.models import AttendanceSettings
from app.core.models.attendance_settings import (
    DEFAULT_CHECK_IN_END_HOUR,
    DEFAULT_CHECK_IN_START_HOUR,
    DEFAULT_CHECK_OUT_START_HOUR,
    SETTINGS_KEY,
)

from .schemas import AttendancePolicy, AttendanceSettingsUpdate

logger = logging.getLogger(__name__)


def _to_policy(row: AttendanceSettings) -> AttendancePolicy:
    return AttendancePolicy.model_validate(row)


async def _get_or_create_settings(db: AsyncSession) -> AttendanceSettings:
    """Load the singleton row, creating it with default hours when absent."""
    result = await db.execute(
        select(AttendanceSettings)
        .where(AttendanceSettings.key == SETTINGS_KEY)
        .execution_options(populate_existing=True)
    )
    row = result.scalar_one_or_none()
    if row:
        return row

    row = AttendanceSettings(
        key=SETTINGS_KEY,
        check_in_start_hour=DEFAULT_CHECK_IN_START_HOUR,
        check_in_end_hour=DEFAULT_CHECK_IN_END_HOUR,
        check_out_start_hour=DEFAULT_CHECK_OUT_START_HOUR,
    )
    db.add(row)
    try:
        await db.commit()
    except IntegrityError:
        # Another worker created it first
        await db.rollback()
        result = await db.execute(select(AttendanceSettings).where(AttendanceSettings.key == SETTINGS_KEY))
        return result.scalar_one()
    await db.refresh(row)
    logger.info(
        "Created default attendance settings (check-in %s-%s, check-out from %s)",
        row.check_in_start_hour,
        row.check_in_end_hour,
        row.check_out_start_hour,
    )
    return row


class AttendanceSettingsStore:
    """
    Process-wide holder of the current AttendancePolicy.

    Created once in create_app and injected into request handlers. The policy is
    loaded on first use and re-read once it is older than ttl_seconds, so an
    update made through another worker process is picked up within that time.
    ttl_seconds=0 reads the row on every call.
    """

    def __init__(
        self,
        policy: Optional[AttendancePolicy] = None,
        ttl_seconds: Optional[float] = None,
    ) -> None:
        self._policy = policy
        self._loaded_at = time.monotonic() if policy is not None else None
        self.ttl_seconds = settings.attendance_settings_ttl_seconds if ttl_seconds is None else ttl_seconds
        self._lock = asyncio.Lock()

    @property
    def loaded(self) -> bool:
        return self._policy is not None

    def _is_stale(self) -> bool:
        if self._policy is None:
            return True
        return time.monotonic() - self._loaded_at >= self.ttl_seconds

    def _set(self, row: AttendanceSettings) -> AttendancePolicy:
        self._policy = _to_policy(row)
        self._loaded_at = time.monotonic()
        return self._policy

    async def get(self, db: AsyncSession) -> AttendancePolicy:
        if self._is_stale():
            async with self._lock:
                if self._is_stale():
                    await self.reload(db)
        return self._policy

    async def reload(self, db: AsyncSession) -> AttendancePolicy:
        row = await _get_or_create_settings(db)
        return self._set(row)

    async def update(
        self,
        db: AsyncSession,
        payload: AttendanceSettingsUpdate,
        updated_by: Optional[UUID] = None,
    ) -> AttendancePolicy:
        """Overwrite only the provided hours and persist. Hour ordering is not validated."""
        row = await _get_or_create_settings(db)
        changes = payload.model_dump(exclude_unset=True, exclude_none=True)
        for field, value in changes.items():
            setattr(row, field, value)
        row.updated_by = updated_by
        await db.commit()
        await db.refresh(row)
        policy = self._set(row)
        logger.info("Attendance settings updated by %s: %s", updated_by, changes)
        return policy
