from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.auth.rbac import ADMIN_PANEL_ROLES, require_roles
from app.core.exceptions import ServiceError
from app.db.session import get_db

from . import service
from .schemas import LocationCreate, LocationResponse, LocationUpdate

router = APIRouter(
    prefix="/api/v1/attendance/locations",
    tags=["attendance-locations"],
    dependencies=[Depends(require_roles(*ADMIN_PANEL_ROLES, detail="Unauthorized"))],
)


@router.get("", response_model=List[LocationResponse])
async def list_locations(db: AsyncSession = Depends(get_db)) -> List[LocationResponse]:
    """All locations, newest first, including inactive ones."""
    return await service.list_locations(db)


@router.post("", response_model=LocationResponse, status_code=status.HTTP_201_CREATED)
async def create_location(
    payload: LocationCreate,
    db: AsyncSession = Depends(get_db),
) -> LocationResponse:
    return await service.create_location(db, payload)


@router.put("/{location_id}", response_model=LocationResponse)
async def update_location(
    location_id: UUID,
    payload: LocationUpdate,
    db: AsyncSession = Depends(get_db),
) -> LocationResponse:
    """Edit or deactivate a location (set is_active=false)."""
    try:
        return await service.update_location(db, location_id, payload)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.detail)


@router.delete("/{location_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_location(location_id: UUID, db: AsyncSession = Depends(get_db)) -> None:
    try:
        await service.delete_location(db, location_id)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.detail)
