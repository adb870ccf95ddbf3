from uuid import UUID

from fastapi import Depends, HTTPException, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from school_timetable.auth.dependencies import get_current_user
from school_timetable.auth.schemas import CurrentUser
from school_timetable.core.enums import ADMIN_ROLES
from school_timetable.core.models import ClassTeacherAssignment


def is_admin(current_user: CurrentUser) -> bool:
    return current_user.role in ADMIN_ROLES


async def require_admin(
    current_user: CurrentUser = Depends(get_current_user),
) -> CurrentUser:
    """Only administrators can manage the time slot catalog."""
    if not is_admin(current_user):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Only administrators can perform this action",
        )
    return current_user


async def is_class_teacher(
    db: AsyncSession,
    teacher_id: UUID,
    class_id: UUID,
    section_id: UUID,
) -> bool:
    result = await db.execute(
        select(ClassTeacherAssignment.id).where(
            ClassTeacherAssignment.teacher_id == teacher_id,
            ClassTeacherAssignment.class_id == class_id,
            ClassTeacherAssignment.section_id == section_id,
        ).limit(1)
    )
    return result.scalar_one_or_none() is not None


async def ensure_can_manage_section(
    db: AsyncSession,
    current_user: CurrentUser,
    class_id: UUID,
    section_id: UUID,
) -> None:
    """Admins manage every timetable; a teacher only the class-section they are class teacher of."""
    if is_admin(current_user):
        return
    if current_user.teacher_id is not None and await is_class_teacher(
        db, current_user.teacher_id, class_id, section_id
    ):
        return
    raise HTTPException(
        status_code=status.HTTP_403_FORBIDDEN,
        detail="Only administrators or the class teacher can manage this timetable",
    )
