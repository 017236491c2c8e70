from sqlalchemy import select
from sqlalchemy.orm import Session

from .models import Course, DayOfWeek, Enrollment, Parent, Schedule, Student, Teacher
from .schemas import TimeSlot


def to_time_slot(schedule: Schedule) -> TimeSlot:
    return TimeSlot(
        id=schedule.id,
        course_id=schedule.course_id,
        teacher_id=schedule.course.teacher_id,
        day_of_week=schedule.day_week.value,
        start_time=schedule.start_time,
        end_time=schedule.end_time,
        room=schedule.classroom,
        course_name=schedule.course.name,
    )


class SqlSlotRepository:
    """Read-only slot lookups backed by the ``schedules`` table."""

    def __init__(self, db: Session):
        self.db = db

    def _find(self, *criteria) -> list[TimeSlot]:
        stmt = (
            select(Schedule)
            .join(Schedule.course)
            .where(*criteria)
            .order_by(Schedule.start_time, Schedule.id)
        )
        return [to_time_slot(schedule) for schedule in self.db.scalars(stmt)]

    def find_slots_by_day_and_teacher(self, day: str, teacher_id: str) -> list[TimeSlot]:
        return self._find(Schedule.day_week == DayOfWeek(day), Course.teacher_id == teacher_id)

    def find_slots_by_day_and_room(self, day: str, room: str) -> list[TimeSlot]:
        return self._find(Schedule.day_week == DayOfWeek(day), Schedule.classroom == room)

    def find_slot(self, slot_id: str) -> TimeSlot | None:
        schedule = self.db.get(Schedule, slot_id)
        return to_time_slot(schedule) if schedule else None


class SqlRelationshipRepository:
    def __init__(self, db: Session):
        self.db = db

    def resolve_student_by_user(self, user_id: str) -> str | None:
        return self.db.scalar(select(Student.id).where(Student.user_id == user_id))

    def resolve_teacher_by_user(self, user_id: str) -> str | None:
        return self.db.scalar(select(Teacher.id).where(Teacher.user_id == user_id))

    def resolve_parent_by_user(self, user_id: str) -> str | None:
        return self.db.scalar(select(Parent.id).where(Parent.user_id == user_id))

    def students_of_parent(self, parent_id: str) -> list[str]:
        return list(self.db.scalars(select(Student.id).where(Student.parent_id == parent_id)))

    def courses_of_teacher(self, teacher_id: str) -> list[str]:
        return list(self.db.scalars(select(Course.id).where(Course.teacher_id == teacher_id)))

    def is_student_enrolled_in_any_of(self, student_id: str, course_ids: list[str]) -> bool:
        if not course_ids:
            return False
        stmt = select(Enrollment.id).where(
            Enrollment.student_id == student_id,
            Enrollment.course_id.in_(course_ids),
        )
        return self.db.scalar(stmt.limit(1)) is not None

    def is_student_enrolled_in_course(self, student_id: str, course_id: str) -> bool:
        stmt = select(Enrollment.id).where(
            Enrollment.student_id == student_id,
            Enrollment.course_id == course_id,
        )
        return self.db.scalar(stmt) is not None

    def course_owner_teacher(self, course_id: str) -> str | None:
        return self.db.scalar(select(Course.teacher_id).where(Course.id == course_id))
