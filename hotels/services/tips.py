"""
tips.py
-------
Guest-facing side of the console: what a guest sees after scanning a room's
QR code, and recording the tip once the payment processor has accepted it.

Payment capture itself happens outside this system; record_tip() only keeps
the ledger entry (with the processor's reference, if any).
"""

import logging
from decimal import Decimal, InvalidOperation
from uuid import uuid4

from django.core.exceptions import ValidationError
from django.utils import timezone

from ..exceptions import RecordNotFoundError
from .assignment_engine import ACTIVE, AssignmentEngine
from .record_store import HOTEL, ROOMS, STAFF, TIPS

logger = logging.getLogger(__name__)

PRESET_AMOUNTS = (10, 20, 30)
MAX_AMOUNT = Decimal("10000.00")


def tip_url(base_url, hotel_id, room_id):
    """URL encoded into a room's QR code."""
    return f"{base_url.rstrip('/')}/tip/{hotel_id}/{room_id}"


def _validate_amount(amount):
    try:
        value = Decimal(str(amount))
        if not value.is_finite():
            raise ValidationError("Please enter a valid amount")
        value = value.quantize(Decimal("0.01"))
    except (InvalidOperation, ValueError, TypeError):
        raise ValidationError("Please enter a valid amount")
    if value <= 0 or value > MAX_AMOUNT:
        raise ValidationError("Please enter a valid amount")
    return value


class TipLedger:
    """
    Args:
        store: the hotel's RecordStore
        engine: AssignmentEngine on the same store (created if omitted)
    """

    def __init__(self, store, engine=None):
        self.store = store
        self.engine = engine or AssignmentEngine(store)

    def room_context(self, room_id, now=None):
        """
        Room, hotel name and staff on an active assignment to the room.

        Raises:
            RecordNotFoundError: unknown room.
        """
        room = self.store.get(ROOMS, room_id)
        if room is None:
            raise RecordNotFoundError(ROOMS, room_id)

        active_staff_ids = {
            a.get("staff_id") for a in self.engine.assignments_for_room(room_id)
            if a.get("status") == ACTIVE
        }
        staff = [s for s in self.store.get_all(STAFF) if s.get("id") in active_staff_ids]
        if not staff:
            logger.warning("No staff assigned to room %s", room_id)

        current = self.engine.current_assignment_for_room(room_id, now=now)
        hotel = self.store.read(HOTEL) or {}
        return {
            "room": {"id": room["id"], "number": room.get("number"), "floor": room.get("floor")},
            "hotel_name": hotel.get("hotel_name", ""),
            "staff": [
                {"id": s["id"], "name": s.get("name"), "role": s.get("role"), "image": s.get("image")}
                for s in staff
            ],
            "on_shift_staff_id": current.get("staff_id") if current else None,
            "preset_amounts": list(PRESET_AMOUNTS),
        }

    def record_tip(self, room_id, amount, staff_id=None, rating=None, feedback="",
                   payment_reference="", now=None):
        """
        Store a tip for a room. Without staff_id, the staff member on the
        room's current assignment (if any) is credited.

        Raises:
            ValidationError: bad amount/rating, staff not found.
            RecordNotFoundError: unknown room.
        """
        value = _validate_amount(amount)
        if rating is not None:
            try:
                rating = int(rating)
            except (TypeError, ValueError):
                raise ValidationError("Rating must be between 1 and 5.")
            if not 1 <= rating <= 5:
                raise ValidationError("Rating must be between 1 and 5.")

        if self.store.get(ROOMS, room_id) is None:
            raise RecordNotFoundError(ROOMS, room_id)

        if staff_id:
            if self.store.get(STAFF, staff_id) is None:
                raise ValidationError("Selected staff member was not found")
        else:
            current = self.engine.current_assignment_for_room(room_id, now=now)
            staff_id = current.get("staff_id") if current else None

        tip = {
            "id": uuid4().hex,
            "room_id": room_id,
            "staff_id": staff_id,
            "amount": str(value),
            "rating": rating,
            "feedback": (feedback or "").strip(),
            "payment_reference": payment_reference or "",
            "created_at": timezone.now().isoformat(),
        }
        self.store.add(TIPS, tip)
        logger.info("Tip recorded (%s, room=%s, staff=%s, amount=%s)", tip["id"], room_id, staff_id, tip["amount"])
        return tip

    def list_tips(self, staff_id=None):
        tips = self.store.get_all(TIPS)
        if staff_id:
            tips = [t for t in tips if t.get("staff_id") == staff_id]
        return tips

    def stats(self, staff_id=None):
        """Total, count and average of tips (optionally for one staff member)."""
        amounts = [Decimal(t.get("amount") or "0") for t in self.list_tips(staff_id)]
        total = sum(amounts, Decimal("0"))
        count = len(amounts)
        average = (total / count).quantize(Decimal("0.01")) if count else Decimal("0.00")
        return {"total": str(total.quantize(Decimal("0.01"))), "count": count, "average": str(average)}
