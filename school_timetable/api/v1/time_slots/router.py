from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from school_timetable.auth.dependencies import get_current_user
from school_timetable.auth.rbac import require_admin
from school_timetable.core.schemas import ApiResponse
from school_timetable.db.session import get_db

from .schemas import TimeSlotCreate, TimeSlotResponse
from . import service

router = APIRouter(prefix="/api/v1/timetables/time-slots", tags=["time-slots"])


@router.post(
    "",
    response_model=ApiResponse[TimeSlotResponse],
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(require_admin)],
)
async def create_time_slot(
    payload: TimeSlotCreate,
    db: AsyncSession = Depends(get_db),
):
    slot = await service.create_time_slot(db, payload)
    return ApiResponse[TimeSlotResponse](data=slot, message="Time slot created successfully")


@router.get(
    "",
    response_model=ApiResponse[List[TimeSlotResponse]],
    dependencies=[Depends(get_current_user)],
)
async def list_time_slots(
    exclude_breaks: bool = Query(False, description="Only slots that can hold a period"),
    db: AsyncSession = Depends(get_db),
):
    slots = await service.list_time_slots(db, exclude_breaks=exclude_breaks)
    return ApiResponse[List[TimeSlotResponse]](data=slots, message="Time slots retrieved successfully")


@router.get(
    "/{time_slot_id}",
    response_model=ApiResponse[TimeSlotResponse],
    dependencies=[Depends(get_current_user)],
)
async def get_time_slot(
    time_slot_id: UUID,
    db: AsyncSession = Depends(get_db),
):
    slot = await service.get_time_slot(db, time_slot_id)
    return ApiResponse[TimeSlotResponse](data=slot, message="Time slot retrieved successfully")


@router.delete(
    "/{time_slot_id}",
    response_model=ApiResponse[None],
    dependencies=[Depends(require_admin)],
)
async def delete_time_slot(
    time_slot_id: UUID,
    db: AsyncSession = Depends(get_db),
):
    await service.delete_time_slot(db, time_slot_id)
    return ApiResponse[None](message="Time slot deleted successfully")
