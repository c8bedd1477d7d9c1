"""
roster.py
---------
Staff and room management for one hotel.

Staff codes (the human-facing id, separate from the record id):
- auto    -> "001", "002", ...
- prefix  -> "<PREFIX>-001" (prefix defaults to "STAFF")
- manual  -> whatever the manager typed
Codes are unique within the hotel and at least 3 characters long.
Generated codes skip numbers already taken; a taken manual code is an error.

Room numbers:
- floor + two-digit sequence on that floor ("3" -> "301", "302", ...)
  unless the manager gives an explicit number. Numbers are unique.

Storing the first staff member / room also tells the onboarding tracker,
inside the same atomic block as the write.
"""

import logging
from uuid import uuid4

from django.core.exceptions import ValidationError
from django.utils import timezone

from ..exceptions import RecordNotFoundError, StorageError, error_message
from .onboarding import OnboardingProgression
from .record_store import ROOMS, STAFF

logger = logging.getLogger(__name__)

ROLES = ("housekeeper", "concierge", "bellhop", "valet", "room-service")
ROOM_TYPES = ("standard", "suite", "deluxe")

CODE_AUTO = "auto"
CODE_PREFIX = "prefix"
CODE_MANUAL = "manual"
CODE_TYPES = (CODE_AUTO, CODE_PREFIX, CODE_MANUAL)

MIN_STAFF_CODE_LENGTH = 3

STAFF_FIELDS = ("staff_code", "name", "role", "email", "phone", "image")
ROOM_FIELDS = ("number", "floor", "type")


def _text(value):
    """Trimmed string form of a submitted value ("" for None)."""
    if value is None:
        return ""
    return str(value).strip()


def generate_staff_code(sequence, code_config=None):
    """
    Build a staff code for the given 1-based sequence number.

    Args:
        sequence: position of the new staff member (existing count + 1)
        code_config: {"type": auto|prefix|manual, "prefix": str, "manual_id": str}
    """
    config = code_config or {}
    code_type = config.get("type") or CODE_AUTO
    number = str(sequence).zfill(3)

    if code_type == CODE_PREFIX:
        return f"{config.get('prefix') or 'STAFF'}-{number}"
    if code_type == CODE_MANUAL:
        return _text(config.get("manual_id"))
    return number


def generate_room_number(rooms, floor, sequence=None):
    """Floor + two-digit sequence of rooms already on that floor."""
    if sequence is None:
        sequence = sum(1 for r in rooms if r.get("floor") == floor) + 1
    return f"{floor}{sequence:02d}"


def _batch(items, add):
    """Run add() per item; one failure doesn't stop the rest."""
    outcomes = []
    for item in items:
        try:
            if not isinstance(item, dict):
                raise ValidationError("Each entry must be an object")
            record = add(item)
        except (ValidationError, StorageError) as e:
            outcomes.append({"success": False, "input": item, "error": error_message(e)})
        else:
            outcomes.append({"success": True, "record": record})
    return outcomes


class Roster:
    """
    Args:
        store: the hotel's RecordStore
        onboarding: OnboardingProgression on the same store (created if omitted)
    """

    def __init__(self, store, onboarding=None):
        self.store = store
        self.onboarding = onboarding or OnboardingProgression(store)

    # ==================== staff ====================
    def list_staff(self, search=None, role=None):
        staff = self.store.get_all(STAFF)
        if role:
            staff = [s for s in staff if s.get("role") == role]
        if search:
            term = search.strip().lower()
            staff = [
                s for s in staff
                if term in (s.get("name") or "").lower()
                or term in (s.get("staff_code") or "").lower()
                or term in (s.get("email") or "").lower()
            ]
        return staff

    def get_staff(self, staff_id):
        member = self.store.get(STAFF, staff_id)
        if member is None:
            raise RecordNotFoundError(STAFF, staff_id)
        return member

    def validate_staff_code(self, code, exclude_id=None):
        """Return an error message for a taken/short code, else None."""
        taken = {
            s.get("staff_code") for s in self.store.get_all(STAFF)
            if s.get("id") != exclude_id
        }
        if code in taken:
            return "Staff ID already exists"
        if len(code or "") < MIN_STAFF_CODE_LENGTH:
            return f"Staff ID must be at least {MIN_STAFF_CODE_LENGTH} characters long"
        return None

    def _next_staff_code(self, code_config):
        staff = self.store.get_all(STAFF)
        taken = {s.get("staff_code") for s in staff}
        sequence = len(staff) + 1
        code = generate_staff_code(sequence, code_config)
        while code in taken and (code_config or {}).get("type") != CODE_MANUAL:
            sequence += 1
            code = generate_staff_code(sequence, code_config)
        return code

    def add_staff(self, data, code_config=None):
        """
        Store a new staff member.

        Args:
            data: name, role, email, phone, optional image, optional staff_code
            code_config: how to build the staff code when data has none

        Raises:
            ValidationError: missing name, unknown role, bad/taken staff code.
        """
        name = _text(data.get("name"))
        if not name:
            raise ValidationError("Staff name is required")
        role = data.get("role")
        if not isinstance(role, str) or role not in ROLES:
            raise ValidationError(f'Invalid staff role "{role}"')

        with self.store.atomic():
            if code_config and code_config.get("type") == CODE_MANUAL and not code_config.get("manual_id"):
                raise ValidationError("Please enter a staff ID")
            code = _text(data.get("staff_code")) or self._next_staff_code(code_config)
            error = self.validate_staff_code(code)
            if error:
                logger.warning("Rejected staff code %s: %s", code, error)
                raise ValidationError(error)

            member = {
                "id": uuid4().hex,
                "staff_code": code,
                "name": name,
                "role": role,
                "email": _text(data.get("email")),
                "phone": _text(data.get("phone")),
                "image": data.get("image") or None,
                "created_at": timezone.now().isoformat(),
            }
            self.store.add(STAFF, member)
            self.onboarding.record_collection_added(STAFF)

        logger.info("Staff member added (%s, %s)", member["id"], code)
        return member

    def add_staff_batch(self, items, code_config=None):
        return _batch(items, lambda item: self.add_staff(item, code_config))

    def update_staff(self, staff_id, fields):
        """
        Raises:
            ValidationError: unknown role, taken staff code.
            RecordNotFoundError: no such staff member.
        """
        fields = {k: v for k, v in fields.items() if k in STAFF_FIELDS}
        if "role" in fields and fields["role"] not in ROLES:
            raise ValidationError(f'Invalid staff role "{fields["role"]}"')

        with self.store.atomic():
            if "staff_code" in fields:
                error = self.validate_staff_code(fields["staff_code"], exclude_id=staff_id)
                if error:
                    raise ValidationError(error)
            updated = self.store.update(STAFF, staff_id, fields)
        if updated is None:
            raise RecordNotFoundError(STAFF, staff_id)
        return updated

    def remove_staff(self, staff_id):
        if not self.store.remove(STAFF, staff_id):
            raise RecordNotFoundError(STAFF, staff_id)
        logger.info("Staff member removed (%s)", staff_id)

    # ==================== rooms ====================
    def list_rooms(self, search=None, floor=None):
        rooms = self.store.get_all(ROOMS)
        if floor:
            rooms = [r for r in rooms if r.get("floor") == floor]
        if search:
            term = search.strip().lower()
            rooms = [r for r in rooms if term in (r.get("number") or "").lower()]
        return rooms

    def get_room(self, room_id):
        room = self.store.get(ROOMS, room_id)
        if room is None:
            raise RecordNotFoundError(ROOMS, room_id)
        return room

    def _next_room_number(self, rooms, floor):
        taken = {r.get("number") for r in rooms}
        sequence = sum(1 for r in rooms if r.get("floor") == floor) + 1
        number = generate_room_number(rooms, floor, sequence)
        while number in taken:
            sequence += 1
            number = generate_room_number(rooms, floor, sequence)
        return number

    def add_room(self, data):
        """
        Store a new room.

        Args:
            data: floor, type, optional number

        Raises:
            ValidationError: missing floor, unknown type, taken number.
        """
        floor = _text(data.get("floor"))
        if not floor:
            raise ValidationError("Please enter a floor number")
        room_type = data.get("type") or "standard"
        if not isinstance(room_type, str) or room_type not in ROOM_TYPES:
            raise ValidationError(f'Invalid room type "{room_type}"')

        with self.store.atomic():
            rooms = self.store.get_all(ROOMS)
            number = _text(data.get("number")) or self._next_room_number(rooms, floor)
            if any(r.get("number") == number for r in rooms):
                raise ValidationError(f"Room {number} already exists")

            room = {
                "id": uuid4().hex,
                "number": number,
                "floor": floor,
                "type": room_type,
                "assigned_staff": [],
                "created_at": timezone.now().isoformat(),
            }
            self.store.add(ROOMS, room)
            self.onboarding.record_collection_added(ROOMS)

        logger.info("Room added (%s, number %s)", room["id"], number)
        return room

    def add_rooms(self, items):
        return _batch(items, self.add_room)

    def update_room(self, room_id, fields):
        fields = {k: v for k, v in fields.items() if k in ROOM_FIELDS}
        if "type" in fields and fields["type"] not in ROOM_TYPES:
            raise ValidationError(f'Invalid room type "{fields["type"]}"')

        with self.store.atomic():
            if "number" in fields:
                clash = any(
                    r.get("number") == fields["number"] and r.get("id") != room_id
                    for r in self.store.get_all(ROOMS)
                )
                if clash:
                    raise ValidationError(f"Room {fields['number']} already exists")
            updated = self.store.update(ROOMS, room_id, fields)
        if updated is None:
            raise RecordNotFoundError(ROOMS, room_id)
        return updated

    def remove_room(self, room_id):
        if not self.store.remove(ROOMS, room_id):
            raise RecordNotFoundError(ROOMS, room_id)
        logger.info("Room removed (%s)", room_id)
