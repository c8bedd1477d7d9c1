"""
assignment_engine.py
--------------------
Creates, edits and removes staff-to-room-per-shift assignments and answers
the derived questions the console asks about them.

Rules:
- One staff member may hold at most ONE active assignment for a given
  (room, shift). A second create() is rejected with DuplicateAssignmentError
  and nothing is written.
- start_time/end_time are the shift's wall-clock bounds merged onto "today"
  in the current Django timezone. Any shift of the active ShiftConfig can be
  used, not only Morning/Evening.
- update() is a plain merge. It does NOT re-run the duplicate check, but
  moving an assignment to another room or staff member re-links
  room.assigned_staff.
- status is only ever changed by an explicit update(); the Upcoming/Active/
  Completed label shown in lists is derived from the clock (display_status).

Bulk assign:
- bulk_create() tries every (staff x room) pair on its own. A failing pair
  is reported and the loop carries on; earlier successes are kept.
"""

import logging
from uuid import uuid4

from django.core.exceptions import ValidationError
from django.utils import timezone

from ..exceptions import (
    DuplicateAssignmentError,
    RecordNotFoundError,
    StorageError,
    error_message,
)
from .record_store import ASSIGNMENTS, ROOMS
from .shift_policy import ShiftPolicy
from .time_utils import combine, local_day, make_aware, parse_timestamp

logger = logging.getLogger(__name__)

ACTIVE = "active"
COMPLETED = "completed"
STATUSES = (ACTIVE, COMPLETED)

UPCOMING_LABEL = "Upcoming"
ACTIVE_LABEL = "Active"
COMPLETED_LABEL = "Completed"
UNKNOWN_LABEL = "Unknown"

DUPLICATE_MESSAGE = "Staff member is already assigned to this room for this shift"

EDITABLE_FIELDS = ("staff_id", "room_id", "shift", "status", "start_time", "end_time")


def has_active_assignment(assignments, staff_id, room_id, shift):
    """True if an active assignment already exists for (staff, room, shift)."""
    for a in assignments:
        if (
            a.get("staff_id") == staff_id
            and a.get("room_id") == room_id
            and a.get("shift") == shift
            and a.get("status") == ACTIVE
        ):
            return True
    return False


def display_status(assignment, now=None):
    """
    Upcoming / Active / Completed from the clock, or Unknown when a bound
    does not parse. Stored status is not consulted.
    """
    start = parse_timestamp(assignment.get("start_time"))
    end = parse_timestamp(assignment.get("end_time"))
    if start is None or end is None:
        return UNKNOWN_LABEL

    now = make_aware(now or timezone.now())
    if now < start:
        return UPCOMING_LABEL
    if now > end:
        return COMPLETED_LABEL
    return ACTIVE_LABEL


class AssignmentEngine:
    """
    Args:
        store: the hotel's RecordStore
        shift_policy: ShiftPolicy to resolve shift names (defaults to one on the same store)
    """

    def __init__(self, store, shift_policy=None):
        self.store = store
        self.shift_policy = shift_policy or ShiftPolicy(store)

    # -------------------- reads --------------------
    def get_all(self):
        return self.store.get_all(ASSIGNMENTS)

    def get(self, assignment_id):
        assignment = self.store.get(ASSIGNMENTS, assignment_id)
        if assignment is None:
            raise RecordNotFoundError(ASSIGNMENTS, assignment_id)
        return assignment

    def assignments_for_room(self, room_id):
        return [a for a in self.get_all() if a.get("room_id") == room_id]

    def current_assignment_for_room(self, room_id, now=None):
        """First active assignment of the room whose [start, end] contains now."""
        now = make_aware(now or timezone.now())
        for a in self.assignments_for_room(room_id):
            if a.get("status") != ACTIVE:
                continue
            start = parse_timestamp(a.get("start_time"))
            end = parse_timestamp(a.get("end_time"))
            if start is None or end is None:
                continue
            if start <= now <= end:
                return a
        return None

    def assignments_for_day(self, day):
        """Assignments whose start falls on the given local date."""
        result = []
        for a in self.get_all():
            start = parse_timestamp(a.get("start_time"))
            if start is not None and timezone.localtime(start).date() == day:
                result.append(a)
        return result

    # -------------------- writes --------------------
    def shift_window(self, shift_name, now=None):
        """
        Concrete (start, end) for today of a named shift.

        Raises:
            ValidationError: shift not in the active configuration, or inactive.
        """
        shift = self.shift_policy.get_shift(shift_name)
        if shift is None:
            raise ValidationError(f'Unknown shift "{shift_name}"')
        if not shift.get("is_active", True):
            raise ValidationError(f'Shift "{shift_name}" is not active')

        day = local_day(now)
        return combine(day, shift["start_time"]), combine(day, shift["end_time"])

    def create(self, staff_id, room_id, shift_name, now=None):
        """
        Create an active assignment for today.

        Raises:
            DuplicateAssignmentError: an active one already exists for the triple.
            ValidationError: unknown or inactive shift.
        """
        with self.store.atomic():
            if has_active_assignment(self.get_all(), staff_id, room_id, shift_name):
                logger.warning(
                    "Duplicate assignment attempt (staff=%s, room=%s, shift=%s)",
                    staff_id, room_id, shift_name,
                )
                raise DuplicateAssignmentError(DUPLICATE_MESSAGE)

            start, end = self.shift_window(shift_name, now)
            assignment = {
                "id": uuid4().hex,
                "staff_id": staff_id,
                "room_id": room_id,
                "shift": shift_name,
                "status": ACTIVE,
                "start_time": start.isoformat(),
                "end_time": end.isoformat(),
                "created_at": timezone.now().isoformat(),
            }
            self.store.add(ASSIGNMENTS, assignment)
            self._link_staff(room_id, staff_id)

        logger.info("Created assignment %s (staff=%s, room=%s, shift=%s)",
                    assignment["id"], staff_id, room_id, shift_name)
        return assignment

    def bulk_create(self, staff_ids, room_ids, shift_name, now=None):
        """
        Assign every staff member to every room for one shift.

        Returns:
            list of {"staff_id", "room_id", "success", "assignment" | "error"},
            one per pair, in (room, staff) order.
        """
        outcomes = []
        for room_id in room_ids:
            for staff_id in staff_ids:
                try:
                    assignment = self.create(staff_id, room_id, shift_name, now=now)
                except (ValidationError, StorageError) as e:
                    logger.warning("Assignment failed (staff=%s, room=%s): %s", staff_id, room_id, error_message(e))
                    outcomes.append({
                        "staff_id": staff_id,
                        "room_id": room_id,
                        "success": False,
                        "error": error_message(e),
                    })
                else:
                    outcomes.append({
                        "staff_id": staff_id,
                        "room_id": room_id,
                        "success": True,
                        "assignment": assignment,
                    })
        return outcomes

    def update(self, assignment_id, fields):
        """
        Merge editable fields onto an assignment (no duplicate re-check).

        Raises:
            ValidationError: unknown status value.
            RecordNotFoundError: no such assignment.
        """
        fields = {k: v for k, v in fields.items() if k in EDITABLE_FIELDS}
        if "status" in fields and fields["status"] not in STATUSES:
            raise ValidationError(f'Invalid assignment status "{fields["status"]}"')

        with self.store.atomic():
            previous = self.get(assignment_id)
            updated = self.store.update(ASSIGNMENTS, assignment_id, fields)
            moved = (
                previous.get("room_id") != updated.get("room_id")
                or previous.get("staff_id") != updated.get("staff_id")
            )
            if moved:
                self._unlink_staff(previous.get("room_id"), previous.get("staff_id"))
                self._link_staff(updated.get("room_id"), updated.get("staff_id"))

        logger.info("Updated assignment %s (%s)", assignment_id, ", ".join(sorted(fields)))
        return updated

    def delete(self, assignment_id):
        """
        Raises:
            RecordNotFoundError: no such assignment.
        """
        with self.store.atomic():
            assignment = self.get(assignment_id)
            self.store.remove(ASSIGNMENTS, assignment_id)
            self._unlink_staff(assignment.get("room_id"), assignment.get("staff_id"))
        logger.info("Deleted assignment %s", assignment_id)

    # -------------------- room.assigned_staff (denormalized) --------------------
    def _link_staff(self, room_id, staff_id):
        room = self.store.get(ROOMS, room_id)
        if room is None:
            return
        assigned = list(room.get("assigned_staff") or [])
        if staff_id not in assigned:
            assigned.append(staff_id)
            self.store.update(ROOMS, room_id, {"assigned_staff": assigned})

    def _unlink_staff(self, room_id, staff_id):
        room = self.store.get(ROOMS, room_id)
        if room is None:
            return
        still_assigned = any(
            a.get("staff_id") == staff_id for a in self.assignments_for_room(room_id)
        )
        assigned = list(room.get("assigned_staff") or [])
        if not still_assigned and staff_id in assigned:
            assigned.remove(staff_id)
            self.store.update(ROOMS, room_id, {"assigned_staff": assigned})
