import enum

from pydantic import BaseModel

from .models import UserRole


class ConflictRule(str, enum.Enum):
    TEACHER = "TEACHER"
    ROOM = "ROOM"


class ConflictStatus(str, enum.Enum):
    OK = "OK"
    INVALID = "INVALID"
    CONFLICT = "CONFLICT"


class Decision(str, enum.Enum):
    ALLOW = "ALLOW"
    DENY = "DENY"


class TimeSlot(BaseModel):
    """A weekly class meeting.

    Day and times stay plain strings so malformed values reach the checker
    and come back as an INVALID result instead of a parse error.
    """

    id: str | None = None
    course_id: str
    teacher_id: str | None = None
    day_of_week: str
    start_time: str
    end_time: str
    room: str | None = None
    course_name: str | None = None


class Principal(BaseModel):
    user_id: str
    role: UserRole


class ConflictResult(BaseModel):
    ok: bool
    rule: ConflictRule | None = None
    conflicting_slot: TimeSlot | None = None
    error: str | None = None

    @property
    def status(self) -> ConflictStatus:
        if self.ok:
            return ConflictStatus.OK
        if self.error is not None:
            return ConflictStatus.INVALID
        return ConflictStatus.CONFLICT
