from school_timetable.core.models.class_teacher_assignment import ClassTeacherAssignment
from school_timetable.core.models.period import Period
from school_timetable.core.models.time_slot import TimeSlot
from school_timetable.core.models.timetable import Timetable

__all__ = [
    "ClassTeacherAssignment",
    "Period",
    "TimeSlot",
    "Timetable",
]
