from typing import Optional
from uuid import UUID

from pydantic import BaseModel


class CurrentUser(BaseModel):
    """Lightweight representation of the authenticated caller, taken from the access token.
    teacher_id is present only for users backed by a teacher record.
    """

    id: UUID
    role: str
    teacher_id: Optional[UUID] = None
