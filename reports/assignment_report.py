"""
assignment_report.py
--------------------
Builds the rows of the assignment report and the dashboard summary from a
hotel's Record Store.

Report rows:
    date, staff_name, staff_code, room_number, shift, start_time, end_time, status
Staff or rooms deleted after the assignment was made show up as
"Unknown" (names/numbers) and "N/A" (staff code) rather than dropping the row.
"""

import logging

from django.utils import timezone

from hotels.services.assignment_engine import ACTIVE, AssignmentEngine
from hotels.services.onboarding import OnboardingProgression
from hotels.services.record_store import ASSIGNMENTS, ROOMS, STAFF
from hotels.services.time_utils import parse_timestamp
from hotels.services.tips import TipLedger

logger = logging.getLogger(__name__)

UNKNOWN = "Unknown"
NOT_AVAILABLE = "N/A"
INVALID_DATE = "Invalid date"
INVALID_TIME = "--:--"


def _format_date(value):
    if value is None:
        return INVALID_DATE
    return timezone.localtime(value).strftime("%b %d, %Y")


def _format_time(value):
    if value is None:
        return INVALID_TIME
    return timezone.localtime(value).strftime("%H:%M")


def build_assignment_report(store, start_date=None, end_date=None, staff_ids=None, room_ids=None, shifts=None):
    """
    Filter assignments and turn them into report rows.

    Args:
        store: the hotel's RecordStore
        start_date, end_date: inclusive local-date range (date objects); default today
        staff_ids, room_ids, shifts: empty/None means "all"

    Returns:
        list of row dicts, in assignment order
    """
    today = timezone.localdate()
    start_date = start_date or today
    end_date = end_date or today

    staff_by_id = {s.get("id"): s for s in store.get_all(STAFF)}
    rooms_by_id = {r.get("id"): r for r in store.get_all(ROOMS)}

    rows = []
    for a in store.get_all(ASSIGNMENTS):
        start = parse_timestamp(a.get("start_time"))
        if start is None:
            continue
        if not start_date <= timezone.localtime(start).date() <= end_date:
            continue
        if staff_ids and a.get("staff_id") not in staff_ids:
            continue
        if room_ids and a.get("room_id") not in room_ids:
            continue
        if shifts and a.get("shift") not in shifts:
            continue

        member = staff_by_id.get(a.get("staff_id")) or {}
        room = rooms_by_id.get(a.get("room_id")) or {}
        rows.append({
            "date": _format_date(start),
            "staff_name": member.get("name") or UNKNOWN,
            "staff_code": member.get("staff_code") or NOT_AVAILABLE,
            "room_number": room.get("number") or UNKNOWN,
            "shift": a.get("shift"),
            "start_time": _format_time(start),
            "end_time": _format_time(parse_timestamp(a.get("end_time"))),
            "status": a.get("status"),
        })

    logger.info("Assignment report generated (%d rows, %s..%s)", len(rows), start_date, end_date)
    return rows


def build_summary(store, now=None):
    """Counts for the dashboard cards."""
    now = now or timezone.now()
    engine = AssignmentEngine(store)
    rooms = store.get_all(ROOMS)

    active_now = sum(
        1 for room in rooms
        if engine.current_assignment_for_room(room.get("id"), now=now) is not None
    )
    progression = OnboardingProgression(store)
    return {
        "staff_count": len(store.get_all(STAFF)),
        "room_count": len(rooms),
        "active_assignments": sum(1 for a in engine.get_all() if a.get("status") == ACTIVE),
        "rooms_staffed_now": active_now,
        "tips": TipLedger(store, engine).stats(),
        "onboarding_complete": progression.is_complete(),
        "next_onboarding_step": progression.next_step(),
        "generated_at": timezone.localtime(now).isoformat(),
    }
