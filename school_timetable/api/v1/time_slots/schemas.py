from datetime import datetime, time
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, Field, field_serializer


class TimeSlotCreate(BaseModel):
    # Format and ordering are enforced by the service so in-process callers get the same errors.
    start_time: str = Field(..., description="24-hour format, e.g. 09:00")
    end_time: str = Field(..., description="24-hour format, e.g. 09:45")
    is_break: bool = False
    break_type: Optional[str] = Field(None, description="Required when is_break, e.g. SHORT BREAK, LUNCH")


class TimeSlotResponse(BaseModel):
    id: UUID
    start_time: time
    end_time: time
    is_break: bool
    break_type: Optional[str] = None
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True

    @field_serializer("start_time", "end_time")
    def serialize_time_24(self, t: time) -> str:
        """Output as 24-hour string HH:MM (e.g. 09:00, 09:45)."""
        return t.strftime("%H:%M")
