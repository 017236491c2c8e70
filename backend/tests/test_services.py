import pytest
from fastapi import HTTPException

from school_module.models import DayOfWeek, Schedule
from school_module.services import create_schedule, delete_schedule, update_schedule


@pytest.fixture
def timetable(school):
    school.teacher("T1")
    school.teacher("T2")
    school.course("C1", "T1", name="Algebra")
    school.course("C2", "T1", name="Physics")
    school.course("C3", "T2", name="History")
    school.schedule("S-1", "C1", DayOfWeek.MONDAY, "08:00", "10:00", classroom="A1")
    return school


def test_create_schedule_persists_free_slot(db, timetable):
    schedule = create_schedule(
        db, course_id="C2", day_week="MONDAY", start_time="10:00", end_time="12:00", classroom="B2"
    )

    assert schedule.id
    assert schedule.day_week is DayOfWeek.MONDAY
    assert db.get(Schedule, schedule.id).classroom == "B2"


def test_create_schedule_rejects_teacher_double_booking(db, timetable):
    with pytest.raises(HTTPException) as exc_info:
        create_schedule(db, course_id="C2", day_week="MONDAY", start_time="09:00", end_time="11:00")

    assert exc_info.value.status_code == 409
    assert exc_info.value.detail == (
        "Schedule conflict: the teacher already has class on MONDAY from 08:00 to 10:00 (Algebra)"
    )
    assert db.query(Schedule).count() == 1


def test_create_schedule_rejects_room_double_booking(db, timetable):
    with pytest.raises(HTTPException) as exc_info:
        create_schedule(
            db, course_id="C3", day_week="MONDAY", start_time="09:30", end_time="10:30", classroom="A1"
        )

    assert exc_info.value.status_code == 409
    assert exc_info.value.detail.startswith("Room conflict: room A1")


@pytest.mark.parametrize(
    "payload,status_code",
    [
        ({"course_id": "C2", "day_week": "MONDAY", "start_time": "", "end_time": "11:00"}, 400),
        ({"course_id": "C2", "day_week": "MONDAY", "start_time": "9:00", "end_time": "11:00"}, 400),
        ({"course_id": "C2", "day_week": "MONDAY", "start_time": "12:00", "end_time": "11:00"}, 400),
        ({"course_id": "C2", "day_week": "HOLIDAY", "start_time": "12:00", "end_time": "13:00"}, 400),
        ({"course_id": "nope", "day_week": "MONDAY", "start_time": "12:00", "end_time": "13:00"}, 404),
    ],
)
def test_create_schedule_validation(db, timetable, payload, status_code):
    with pytest.raises(HTTPException) as exc_info:
        create_schedule(db, **payload)
    assert exc_info.value.status_code == status_code


def test_update_schedule_keeps_own_slot_out_of_conflict_set(db, timetable):
    updated = update_schedule(db, schedule_id="S-1", start_time="08:30")

    assert updated.start_time == "08:30"
    assert updated.end_time == "10:00"
    assert updated.classroom == "A1"


def test_update_schedule_checks_room_rule(db, timetable):
    timetable.schedule("S-2", "C3", DayOfWeek.TUESDAY, "08:00", "10:00", classroom="A1")

    with pytest.raises(HTTPException) as exc_info:
        update_schedule(db, schedule_id="S-2", day_week="MONDAY")

    assert exc_info.value.status_code == 409
    assert "room A1" in exc_info.value.detail
    assert db.get(Schedule, "S-2").day_week is DayOfWeek.TUESDAY


def test_update_schedule_moving_course_checks_new_teacher(db, timetable):
    timetable.schedule("S-2", "C3", DayOfWeek.MONDAY, "09:00", "11:00")

    with pytest.raises(HTTPException) as exc_info:
        update_schedule(db, schedule_id="S-2", course_id="C2")

    assert exc_info.value.status_code == 409


def test_update_unknown_schedule_is_not_found(db, timetable):
    with pytest.raises(HTTPException) as exc_info:
        update_schedule(db, schedule_id="missing", start_time="08:00")
    assert exc_info.value.status_code == 404


def test_identical_slot_is_rejected_by_storage_constraint(db, timetable, monkeypatch):
    import school_module.services as services

    monkeypatch.setattr(services, "_ensure_free", lambda *args, **kwargs: None)

    with pytest.raises(HTTPException) as exc_info:
        create_schedule(db, course_id="C2", day_week="MONDAY", start_time="08:00", end_time="09:00", classroom="A1")

    assert exc_info.value.status_code == 409
    assert db.query(Schedule).count() == 1


def test_delete_schedule(db, timetable):
    delete_schedule(db, schedule_id="S-1")
    assert db.get(Schedule, "S-1") is None

    with pytest.raises(HTTPException):
        delete_schedule(db, schedule_id="S-1")


def test_create_schedule_next_to_legacy_slot_with_loose_time(db, timetable):
    timetable.schedule("S-legacy", "C1", DayOfWeek.MONDAY, "8:00", "10:00")

    schedule = create_schedule(db, course_id="C2", day_week="MONDAY", start_time="11:00", end_time="12:00")

    assert schedule.start_time == "11:00"


def test_update_schedule_rejected_by_storage_constraint(db, timetable, monkeypatch):
    import school_module.services as services

    timetable.schedule("S-2", "C3", DayOfWeek.MONDAY, "12:00", "13:00", classroom="A1")
    monkeypatch.setattr(services, "_ensure_free", lambda *args, **kwargs: None)

    with pytest.raises(HTTPException) as exc_info:
        update_schedule(db, schedule_id="S-2", start_time="08:00", end_time="09:00")

    assert exc_info.value.status_code == 409
    db.expire_all()
    assert db.get(Schedule, "S-2").start_time == "12:00"
