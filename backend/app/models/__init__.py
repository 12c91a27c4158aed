from app.models.syllabus import Syllabus, SyllabusChapter, SyllabusTopic  # noqa: F401
from app.models.timetable_slot import SlotType, TimetableSlot  # noqa: F401
