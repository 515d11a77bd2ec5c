from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.api.v1.attendance.router import router as attendance_router
from app.api.v1.attendance_settings.router import router as attendance_settings_router
from app.api.v1.attendance_settings.service import AttendanceSettingsStore
from app.api.v1.leaves.router import router as leaves_router
from app.api.v1.locations.router import router as locations_router
from app.core.config import settings
from app.core.logging_config import configure_logging


def create_app() -> FastAPI:
    configure_logging()
    app = FastAPI(title="Time & Presence API")

    # One settings store per process; handlers receive it through get_settings_store
    app.state.attendance_settings_store = AttendanceSettingsStore()

    # CORS: allow the web portal to call this API
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origin_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Routers
    app.include_router(attendance_settings_router)
    app.include_router(locations_router)
    app.include_router(attendance_router)
    app.include_router(leaves_router)

    return app


app = create_app()
