from datetime import datetime

from beanie import Document, Indexed
from pydantic import BaseModel, Field

PRESENT = "present"
ABSENT = "absent"
ATTENDANCE_STATUSES = (PRESENT, ABSENT)


class AttendanceEntry(BaseModel):
    status: str  # present, absent
    time: str = ""  # HH:MM when marked
    marked_at: str = ""  # display timestamp, e.g. 10/19/2026, 9:15 AM


class AttendanceDay(Document):
    """Single per-day aggregate: one entry per child name, overwritten on re-mark."""

    date: Indexed(datetime)
    attendance: dict[str, AttendanceEntry] = Field(default_factory=dict)

    class Settings:
        name = "attendance"
        use_state_management = True


class AttendanceMarkRequest(BaseModel):
    child_name: str
    status: str
