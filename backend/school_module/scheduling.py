"""Teacher and room double-booking detection for weekly class slots.

Slots are half-open ``[start, end)`` ranges on one day of the week, so a
class ending at 10:00 and another starting at 10:00 do not collide.
"""

import logging
import re
from datetime import time
from typing import Protocol

from .models import DayOfWeek
from .schemas import ConflictResult, ConflictRule, TimeSlot


logger = logging.getLogger(__name__)

TIME_PATTERN = re.compile(r"^([01]\d|2[0-3]):([0-5]\d)$")
VALID_DAYS = {day.value for day in DayOfWeek}


class SlotLookup(Protocol):
    def find_slots_by_day_and_teacher(self, day: str, teacher_id: str) -> list[TimeSlot]: ...

    def find_slots_by_day_and_room(self, day: str, room: str) -> list[TimeSlot]: ...


def parse_clock(value: str) -> time:
    match = TIME_PATTERN.match(value)
    if not match:
        raise ValueError(f"Invalid time '{value}', use HH:MM (24 hours)")
    return time(int(match.group(1)), int(match.group(2)))


def overlaps(start1: time, end1: time, start2: time, end2: time) -> bool:
    return start1 < end2 and start2 < end1


def validate_slot(candidate: TimeSlot) -> str | None:
    """Return an error message for a malformed slot, or None when it is well formed."""
    for field in ("start_time", "end_time"):
        value = getattr(candidate, field)
        if not TIME_PATTERN.match(value):
            return f"Invalid {field} format, use HH:MM (24 hours)"
    if parse_clock(candidate.start_time) >= parse_clock(candidate.end_time):
        return "start_time must be earlier than end_time"
    if candidate.day_of_week not in VALID_DAYS:
        return "Invalid day of week"
    if not candidate.teacher_id:
        return "Slot has no teacher assigned"
    return None


class ScheduleConflictChecker:
    def __init__(self, slots: SlotLookup):
        self.slots = slots

    def check_conflicts(self, candidate: TimeSlot, exclude_id: str | None = None) -> ConflictResult:
        error = validate_slot(candidate)
        if error:
            return ConflictResult(ok=False, error=error)

        for rule in (ConflictRule.TEACHER, ConflictRule.ROOM):
            result = self._evaluate(candidate, rule, exclude_id)
            if not result.ok:
                return result
        return ConflictResult(ok=True)

    def check_rule(self, candidate: TimeSlot, rule: ConflictRule, exclude_id: str | None = None) -> ConflictResult:
        error = validate_slot(candidate)
        if error:
            return ConflictResult(ok=False, error=error)
        return self._evaluate(candidate, rule, exclude_id)

    def _evaluate(self, candidate: TimeSlot, rule: ConflictRule, exclude_id: str | None) -> ConflictResult:
        if rule is ConflictRule.TEACHER:
            existing = self.slots.find_slots_by_day_and_teacher(candidate.day_of_week, candidate.teacher_id)
        elif candidate.room:
            existing = self.slots.find_slots_by_day_and_room(candidate.day_of_week, candidate.room)
        else:
            return ConflictResult(ok=True)

        start, end = parse_clock(candidate.start_time), parse_clock(candidate.end_time)
        for slot in existing:
            if exclude_id is not None and slot.id == exclude_id:
                continue
            try:
                slot_start, slot_end = parse_clock(slot.start_time), parse_clock(slot.end_time)
            except ValueError as exc:
                logger.warning(f"Skipping stored slot {slot.id} with unreadable time: {exc}")
                continue
            if overlaps(start, end, slot_start, slot_end):
                logger.info(
                    f"{rule.value} conflict on {candidate.day_of_week} "
                    f"{candidate.start_time}-{candidate.end_time} with slot {slot.id}"
                )
                return ConflictResult(ok=False, rule=rule, conflicting_slot=slot)
        return ConflictResult(ok=True)


def describe_conflict(result: ConflictResult, day: str) -> str:
    slot = result.conflicting_slot
    course = f" ({slot.course_name})" if slot.course_name else ""
    if result.rule is ConflictRule.ROOM:
        return (
            f"Room conflict: room {slot.room} is already taken on {day} "
            f"from {slot.start_time} to {slot.end_time}{course}"
        )
    return f"Schedule conflict: the teacher already has class on {day} from {slot.start_time} to {slot.end_time}{course}"
