from typing import Optional
from uuid import UUID

from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer
from jose import JWTError, jwt

from school_timetable.auth.schemas import CurrentUser
from school_timetable.core.config import settings


# Tokens are issued by the external auth service; only verification happens here.
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/v1/auth/login")


async def get_current_user(token: str = Depends(oauth2_scheme)) -> CurrentUser:
    """Resolve the authenticated user and role from the access token."""
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )

    try:
        payload = jwt.decode(
            token,
            settings.jwt_secret_key,
            algorithms=[settings.jwt_algorithm],
        )
    except JWTError:
        raise credentials_exception

    user_id_str = payload.get("user_id") or payload.get("sub")
    role_name = payload.get("role")
    if not user_id_str or not role_name:
        raise credentials_exception

    try:
        user_id = UUID(user_id_str)
    except ValueError:
        raise credentials_exception

    teacher_id: Optional[UUID] = None
    teacher_id_str = payload.get("teacher_id")
    if teacher_id_str:
        try:
            teacher_id = UUID(teacher_id_str)
        except ValueError:
            raise credentials_exception

    return CurrentUser(id=user_id, role=role_name, teacher_id=teacher_id)
