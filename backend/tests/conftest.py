import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from school_module.database import Base
from school_module.models import (
    Course,
    DayOfWeek,
    Enrollment,
    Parent,
    Schedule,
    Student,
    Teacher,
    User,
    UserRole,
)


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
        future=True,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(bind=engine, autoflush=False, autocommit=False, future=True)


@pytest.fixture
def db(session_factory) -> Session:
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


class SchoolFactory:
    """Inserts linked users and profiles with readable ids."""

    def __init__(self, db: Session):
        self.db = db

    def user(self, user_id: str, role: UserRole, is_active: bool = True) -> User:
        user = User(id=user_id, email=f"{user_id}@school.test", role=role, is_active=is_active)
        self.db.add(user)
        self.db.commit()
        return user

    def teacher(self, teacher_id: str, user_id: str | None = None) -> Teacher:
        user = self.user(user_id or f"u-{teacher_id}", UserRole.TEACHER)
        teacher = Teacher(id=teacher_id, user_id=user.id, name="Ana", last_name="Ruiz")
        self.db.add(teacher)
        self.db.commit()
        return teacher

    def parent(self, parent_id: str, user_id: str | None = None) -> Parent:
        user = self.user(user_id or f"u-{parent_id}", UserRole.PARENT)
        parent = Parent(id=parent_id, user_id=user.id, name="Carlos", last_name="Perez")
        self.db.add(parent)
        self.db.commit()
        return parent

    def student(self, student_id: str, user_id: str | None = None, parent_id: str | None = None) -> Student:
        user = self.user(user_id or f"u-{student_id}", UserRole.STUDENT)
        student = Student(id=student_id, user_id=user.id, name="Luis", last_name="Perez", parent_id=parent_id)
        self.db.add(student)
        self.db.commit()
        return student

    def course(self, course_id: str, teacher_id: str, name: str | None = None) -> Course:
        course = Course(id=course_id, name=name or course_id, teacher_id=teacher_id)
        self.db.add(course)
        self.db.commit()
        return course

    def enroll(self, student_id: str, course_id: str) -> Enrollment:
        enrollment = Enrollment(student_id=student_id, course_id=course_id)
        self.db.add(enrollment)
        self.db.commit()
        return enrollment

    def schedule(
        self,
        schedule_id: str,
        course_id: str,
        day: DayOfWeek,
        start: str,
        end: str,
        classroom: str | None = None,
    ) -> Schedule:
        schedule = Schedule(
            id=schedule_id,
            course_id=course_id,
            day_week=day,
            start_time=start,
            end_time=end,
            classroom=classroom,
        )
        self.db.add(schedule)
        self.db.commit()
        return schedule


@pytest.fixture
def school(db) -> SchoolFactory:
    return SchoolFactory(db)
