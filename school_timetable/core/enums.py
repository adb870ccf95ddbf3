from enum import Enum
from typing import List


class Role(str, Enum):
    SUPER_ADMIN = "SUPER_ADMIN"
    ADMIN = "ADMIN"
    TEACHER = "TEACHER"
    STUDENT = "STUDENT"


ADMIN_ROLES = (Role.SUPER_ADMIN.value, Role.ADMIN.value)


class ConflictOutcome(str, Enum):
    OK = "OK"
    SLOT_OCCUPIED = "SLOT_OCCUPIED"
    TEACHER_DOUBLE_BOOKED = "TEACHER_DOUBLE_BOOKED"


class TimetableStatus(str, Enum):
    EMPTY = "EMPTY"
    POPULATED = "POPULATED"


# Index is the stored day_of_week: 0=Sunday .. 6=Saturday.
DAYS_OF_WEEK: List[str] = [
    "Sunday",
    "Monday",
    "Tuesday",
    "Wednesday",
    "Thursday",
    "Friday",
    "Saturday",
]
