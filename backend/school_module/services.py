import logging

from fastapi import HTTPException, status
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from .models import Course, DayOfWeek, Schedule
from .repositories import SqlSlotRepository
from .scheduling import ScheduleConflictChecker, describe_conflict
from .schemas import TimeSlot


logger = logging.getLogger(__name__)


def _day_value(day_week) -> str:
    return day_week.value if isinstance(day_week, DayOfWeek) else day_week


def _get_course(db: Session, course_id: str) -> Course:
    course = db.get(Course, course_id)
    if not course:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Course not found")
    return course


def _ensure_free(db: Session, candidate: TimeSlot, exclude_id: str | None = None) -> None:
    result = ScheduleConflictChecker(SqlSlotRepository(db)).check_conflicts(candidate, exclude_id=exclude_id)
    if result.ok:
        return
    if result.error:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=result.error)
    raise HTTPException(
        status_code=status.HTTP_409_CONFLICT,
        detail=describe_conflict(result, candidate.day_of_week),
    )


def _commit_schedule(db: Session, schedule: Schedule) -> Schedule:
    try:
        db.commit()
    except IntegrityError as exc:
        db.rollback()
        logger.warning(f"Schedule write rejected by storage constraint: {exc.orig}")
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Schedule conflict: an identical slot was saved concurrently",
        ) from exc
    db.refresh(schedule)
    return schedule


def create_schedule(
    db: Session,
    *,
    course_id: str,
    day_week: str,
    start_time: str,
    end_time: str,
    classroom: str | None = None,
) -> Schedule:
    if not course_id or not day_week or not start_time or not end_time:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="course_id, day_week, start_time and end_time are required",
        )
    course = _get_course(db, course_id)
    day = _day_value(day_week)

    _ensure_free(
        db,
        TimeSlot(
            course_id=course.id,
            teacher_id=course.teacher_id,
            day_of_week=day,
            start_time=start_time,
            end_time=end_time,
            room=classroom or None,
        ),
    )

    schedule = Schedule(
        course_id=course.id,
        day_week=DayOfWeek(day),
        start_time=start_time,
        end_time=end_time,
        classroom=classroom or None,
    )
    db.add(schedule)
    schedule = _commit_schedule(db, schedule)
    logger.info(f"Created schedule {schedule.id} for course {course.id} on {day} {start_time}-{end_time}")
    return schedule


def update_schedule(
    db: Session,
    *,
    schedule_id: str,
    course_id: str | None = None,
    day_week: str | None = None,
    start_time: str | None = None,
    end_time: str | None = None,
    classroom: str | None = None,
) -> Schedule:
    schedule = db.get(Schedule, schedule_id)
    if not schedule:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Schedule not found")

    course = _get_course(db, course_id) if course_id else schedule.course
    day = _day_value(day_week) if day_week else schedule.day_week.value
    final_start = start_time or schedule.start_time
    final_end = end_time or schedule.end_time
    final_room = classroom if classroom is not None else schedule.classroom

    _ensure_free(
        db,
        TimeSlot(
            id=schedule.id,
            course_id=course.id,
            teacher_id=course.teacher_id,
            day_of_week=day,
            start_time=final_start,
            end_time=final_end,
            room=final_room or None,
        ),
        exclude_id=schedule.id,
    )

    schedule.course_id = course.id
    schedule.day_week = DayOfWeek(day)
    schedule.start_time = final_start
    schedule.end_time = final_end
    schedule.classroom = final_room or None
    schedule = _commit_schedule(db, schedule)
    logger.info(f"Updated schedule {schedule.id}")
    return schedule


def delete_schedule(db: Session, *, schedule_id: str) -> None:
    schedule = db.get(Schedule, schedule_id)
    if not schedule:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Schedule not found")
    db.delete(schedule)
    db.commit()
    logger.info(f"Deleted schedule {schedule_id}")
