"""
Create the Time & Presence tables if they do not exist and seed the attendance
settings row with its default hours.

Run once per environment (DATABASE_URL must be set):
  python -m app.db.init_db
"""
import asyncio
import logging

import app.core.models  # noqa: F401  (registers every table on Base.metadata)
from app.api.v1.attendance_settings.service import AttendanceSettingsStore
from app.core.logging_config import configure_logging
from app.db.session import AsyncSessionLocal, Base, engine

logger = logging.getLogger(__name__)


async def init_db() -> None:
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("Tables ensured: %s", ", ".join(sorted(Base.metadata.tables)))

    async with AsyncSessionLocal() as db:
        policy = await AttendanceSettingsStore().reload(db)
    logger.info(
        "Attendance settings: check-in %s-%s, check-out from %s",
        policy.check_in_start_hour,
        policy.check_in_end_hour,
        policy.check_out_start_hour,
    )
    await engine.dispose()


def main() -> None:
    configure_logging()
    asyncio.run(init_db())


if __name__ == "__main__":
    main()
