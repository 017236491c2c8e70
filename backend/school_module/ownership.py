"""Per-resource ownership checks for non-admin principals.

Each ``(resource_type, role)`` pair maps to a resolver that answers whether
the principal has the relationship the resource requires. Any missing link
along the way (no profile, no course, no enrollment) is a denial, never an
error, so callers cannot tell "not yours" apart from "does not exist".
"""

import logging
from collections.abc import Callable
from typing import Protocol

from .models import UserRole
from .schemas import Decision, Principal


logger = logging.getLogger(__name__)


class RelationshipLookup(Protocol):
    def resolve_student_by_user(self, user_id: str) -> str | None: ...

    def resolve_teacher_by_user(self, user_id: str) -> str | None: ...

    def resolve_parent_by_user(self, user_id: str) -> str | None: ...

    def students_of_parent(self, parent_id: str) -> list[str]: ...

    def courses_of_teacher(self, teacher_id: str) -> list[str]: ...

    def is_student_enrolled_in_any_of(self, student_id: str, course_ids: list[str]) -> bool: ...

    def is_student_enrolled_in_course(self, student_id: str, course_id: str) -> bool: ...

    def course_owner_teacher(self, course_id: str) -> str | None: ...


Resolver = Callable[[RelationshipLookup, str, str], bool]


def _student_is_self(lookup: RelationshipLookup, user_id: str, student_id: str) -> bool:
    return lookup.resolve_student_by_user(user_id) == student_id


def _student_is_child(lookup: RelationshipLookup, user_id: str, student_id: str) -> bool:
    parent_id = lookup.resolve_parent_by_user(user_id)
    if parent_id is None:
        return False
    return student_id in lookup.students_of_parent(parent_id)


def _student_in_teacher_course(lookup: RelationshipLookup, user_id: str, student_id: str) -> bool:
    teacher_id = lookup.resolve_teacher_by_user(user_id)
    if teacher_id is None:
        return False
    course_ids = lookup.courses_of_teacher(teacher_id)
    if not course_ids:
        return False
    return lookup.is_student_enrolled_in_any_of(student_id, course_ids)


def _teacher_is_self(lookup: RelationshipLookup, user_id: str, teacher_id: str) -> bool:
    return lookup.resolve_teacher_by_user(user_id) == teacher_id


def _course_taught_by_self(lookup: RelationshipLookup, user_id: str, course_id: str) -> bool:
    teacher_id = lookup.resolve_teacher_by_user(user_id)
    if teacher_id is None:
        return False
    return lookup.course_owner_teacher(course_id) == teacher_id


def _course_enrolled_by_self(lookup: RelationshipLookup, user_id: str, course_id: str) -> bool:
    student_id = lookup.resolve_student_by_user(user_id)
    if student_id is None:
        return False
    return lookup.is_student_enrolled_in_course(student_id, course_id)


def _parent_is_self(lookup: RelationshipLookup, user_id: str, parent_id: str) -> bool:
    return lookup.resolve_parent_by_user(user_id) == parent_id


OWNERSHIP_RULES: dict[tuple[str, UserRole], Resolver] = {
    ("student", UserRole.STUDENT): _student_is_self,
    ("student", UserRole.PARENT): _student_is_child,
    ("student", UserRole.TEACHER): _student_in_teacher_course,
    ("teacher", UserRole.TEACHER): _teacher_is_self,
    ("course", UserRole.TEACHER): _course_taught_by_self,
    ("course", UserRole.STUDENT): _course_enrolled_by_self,
    ("parent", UserRole.PARENT): _parent_is_self,
}

GUARDED_RESOURCES = frozenset(resource_type for resource_type, _ in OWNERSHIP_RULES)


class ResourceAccessGuard:
    def __init__(self, relationships: RelationshipLookup, unlisted_policy: Decision = Decision.DENY):
        self.relationships = relationships
        self.unlisted_policy = unlisted_policy

    def authorize(self, principal: Principal | None, resource_type: str, resource_id: str) -> Decision:
        if principal is None:
            raise ValueError("authorize() requires an authenticated principal")

        if principal.role == UserRole.ADMIN:
            return Decision.ALLOW

        if resource_type not in GUARDED_RESOURCES:
            return Decision.ALLOW

        resolver = OWNERSHIP_RULES.get((resource_type, principal.role))
        if resolver is None:
            logger.warning(
                f"No ownership rule for role {principal.role.value} on {resource_type}; "
                f"applying {self.unlisted_policy.value}"
            )
            return self.unlisted_policy

        if resolver(self.relationships, principal.user_id, resource_id):
            return Decision.ALLOW

        logger.info(f"Denied {principal.role.value} user {principal.user_id} access to {resource_type} {resource_id}")
        return Decision.DENY
