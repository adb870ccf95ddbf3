"""Timetable API.
RBAC: ADMIN full access; the class teacher of a class-section may create its
timetable and add/delete its periods; any authenticated user may read."""

from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from school_timetable.auth.dependencies import get_current_user
from school_timetable.auth.rbac import ensure_can_manage_section, is_admin
from school_timetable.auth.schemas import CurrentUser
from school_timetable.core.schemas import ApiResponse
from school_timetable.db.session import get_db

from .schemas import (
    PeriodCreate,
    PeriodResponse,
    TeacherSchedule,
    TimetableGrid,
    TimetableKey,
    TimetableResponse,
)
from . import service

router = APIRouter(prefix="/api/v1/timetables", tags=["timetables"])


@router.post(
    "",
    response_model=ApiResponse[TimetableResponse],
    status_code=status.HTTP_201_CREATED,
)
async def get_or_create_timetable(
    payload: TimetableKey,
    response: Response,
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
):
    await ensure_can_manage_section(db, current_user, payload.class_id, payload.section_id)
    timetable, created = await service.get_or_create_timetable(db, payload)
    if not created:
        response.status_code = status.HTTP_200_OK
    message = "Timetable created successfully" if created else "Timetable already exists"
    return ApiResponse[TimetableResponse](data=timetable, message=message)


@router.get(
    "/lookup",
    response_model=ApiResponse[Optional[TimetableResponse]],
    dependencies=[Depends(get_current_user)],
)
async def get_timetable_by_key(
    class_id: UUID = Query(...),
    section_id: UUID = Query(...),
    academic_year: str = Query(..., min_length=1, max_length=20),
    term: str = Query(..., min_length=1, max_length=50),
    db: AsyncSession = Depends(get_db),
):
    key = TimetableKey(class_id=class_id, section_id=section_id, academic_year=academic_year, term=term)
    timetable = await service.get_timetable_by_key(db, key)
    if timetable is None:
        return ApiResponse[Optional[TimetableResponse]](data=None, message="No timetable exists for this class and section yet")
    return ApiResponse[Optional[TimetableResponse]](data=timetable, message="Timetable retrieved successfully")


@router.get(
    "/teachers/me/schedule",
    response_model=ApiResponse[TeacherSchedule],
)
async def get_my_schedule(
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
):
    if current_user.teacher_id is None:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Current user is not linked to a teacher",
        )
    schedule = await service.get_teacher_schedule(db, current_user.teacher_id)
    return ApiResponse[TeacherSchedule](data=schedule, message="Teacher schedule retrieved successfully")


@router.get(
    "/teachers/{teacher_id}/schedule",
    response_model=ApiResponse[TeacherSchedule],
)
async def get_teacher_schedule(
    teacher_id: UUID,
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
):
    if not is_admin(current_user) and current_user.teacher_id != teacher_id:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Teachers can only view their own schedule",
        )
    schedule = await service.get_teacher_schedule(db, teacher_id)
    return ApiResponse[TeacherSchedule](data=schedule, message="Teacher schedule retrieved successfully")


@router.delete(
    "/periods/{period_id}",
    response_model=ApiResponse[None],
)
async def delete_period(
    period_id: UUID,
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
):
    period = await service.get_period(db, period_id)
    await ensure_can_manage_section(db, current_user, period.class_id, period.section_id)
    await service.delete_period(db, period_id)
    return ApiResponse[None](message="Period deleted successfully")


@router.get(
    "/{timetable_id}",
    response_model=ApiResponse[TimetableResponse],
    dependencies=[Depends(get_current_user)],
)
async def get_timetable_by_id(
    timetable_id: UUID,
    db: AsyncSession = Depends(get_db),
):
    timetable = await service.get_timetable_by_id(db, timetable_id)
    return ApiResponse[TimetableResponse](data=timetable, message="Timetable retrieved successfully")


@router.get(
    "/{timetable_id}/grid",
    response_model=ApiResponse[Optional[TimetableGrid]],
    dependencies=[Depends(get_current_user)],
)
async def project_grid(
    timetable_id: UUID,
    db: AsyncSession = Depends(get_db),
):
    grid = await service.project_grid_for_timetable(db, timetable_id)
    return ApiResponse[Optional[TimetableGrid]](data=grid, message="Timetable grid retrieved successfully")


@router.post(
    "/{timetable_id}/periods",
    response_model=ApiResponse[PeriodResponse],
    status_code=status.HTTP_201_CREATED,
)
async def add_period(
    timetable_id: UUID,
    payload: PeriodCreate,
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
):
    timetable = await service.get_timetable_by_id(db, timetable_id)
    await ensure_can_manage_section(db, current_user, timetable.class_id, timetable.section_id)
    period = await service.add_period(db, timetable_id, payload)
    return ApiResponse[PeriodResponse](data=period, message="Period added to timetable successfully")
