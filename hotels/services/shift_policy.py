"""
shift_policy.py
---------------
Named shift windows of a hotel and their validation.

Rules:
- A shift's start must be strictly earlier than its end (same-day wall clock).
- No two shifts may overlap; intervals are half-open [start, end), so
  Morning 06:00-14:00 and Evening 14:00-22:00 touch but do not overlap.
- Shifts are checked in list order and the FIRST violation is reported.
- A "default" configuration is always exactly Morning + Evening; any shift
  list supplied with it is discarded.

Storage:
- The config is written twice: standalone under "shift_config" and embedded
  in the hotel record as "shift_config". load() prefers the embedded copy.
"""

import copy
import logging
from uuid import uuid4

from django.core.exceptions import ValidationError

from ..exceptions import RecordNotFoundError
from .record_store import HOTEL, SHIFT_CONFIG
from .time_utils import parse_hhmm

logger = logging.getLogger(__name__)

DEFAULT = "default"
CUSTOM = "custom"

DEFAULT_SHIFTS = [
    {
        "id": "morning",
        "name": "Morning",
        "start_time": "06:00",
        "end_time": "14:00",
        "is_active": True,
    },
    {
        "id": "evening",
        "name": "Evening",
        "start_time": "14:00",
        "end_time": "22:00",
        "is_active": True,
    },
]


def default_config():
    return {"type": DEFAULT, "shifts": copy.deepcopy(DEFAULT_SHIFTS)}


def validate_shift_times(shifts):
    """
    Check a list of shifts for bad ranges and pairwise overlap.

    Args:
        shifts: list of dicts with name, start_time, end_time ("HH:MM")

    Returns:
        str | None: the first error message, or None when the list is valid.
    """
    try:
        for i, current in enumerate(shifts):
            current_start = parse_hhmm(current["start_time"])
            current_end = parse_hhmm(current["end_time"])

            if current_start >= current_end:
                return f'Invalid time range for shift "{current["name"]}"'

            for other in shifts[i + 1:]:
                other_start = parse_hhmm(other["start_time"])
                other_end = parse_hhmm(other["end_time"])

                if current_start < other_end and other_start < current_end:
                    return f'Shift "{current["name"]}" overlaps with "{other["name"]}"'
    except (AttributeError, KeyError, TypeError, ValueError) as e:
        logger.warning("Shift validation error: %s", e)
        return "Invalid shift times"

    return None


def validate_config(config):
    """
    Validate a whole ShiftConfig. Default configs always pass.

    Returns:
        str | None: the first error message, or None.
    """
    if config.get("type") != CUSTOM:
        return None

    shifts = config.get("shifts") or []
    if not shifts:
        return "Please add at least one shift"

    for shift in shifts:
        values = [shift.get(k) for k in ("name", "start_time", "end_time")]
        if not all(isinstance(v, str) and v.strip() for v in values):
            return "All shift details are required"

    return validate_shift_times(shifts)


def _clean_shift(shift):
    return {
        "id": shift.get("id") or uuid4().hex,
        "name": shift["name"].strip(),
        "start_time": shift["start_time"].strip(),
        "end_time": shift["end_time"].strip(),
        "is_active": bool(shift.get("is_active", True)),
    }


def _normalize(config):
    if not isinstance(config, dict) or config.get("type") != CUSTOM:
        return default_config()
    return {"type": CUSTOM, "shifts": list(config.get("shifts") or [])}


class ShiftPolicy:
    """
    Load/save the shift configuration of one hotel.

    Args:
        store: the hotel's RecordStore
    """

    def __init__(self, store):
        self.store = store

    def load(self):
        """
        Embedded hotel config first, then the standalone record, then the
        default pair.
        """
        hotel = self.store.read(HOTEL) or {}
        config = hotel.get("shift_config") if isinstance(hotel, dict) else None
        if not config:
            config = self.store.read(SHIFT_CONFIG)
        if not config:
            return default_config()
        return _normalize(config)

    def save(self, config):
        """
        Validate (custom only) and persist to both locations.

        Raises:
            ValidationError: unknown config type or invalid custom shifts.
        """
        config_type = config.get("type", DEFAULT)
        if config_type not in (DEFAULT, CUSTOM):
            raise ValidationError("Unknown shift configuration type")

        if config_type == DEFAULT:
            config = default_config()
        else:
            error = validate_config(config)
            if error:
                logger.warning("Rejected shift configuration: %s", error)
                raise ValidationError(error)
            config = {"type": CUSTOM, "shifts": [_clean_shift(s) for s in config["shifts"]]}

        with self.store.atomic():
            self.store.write(SHIFT_CONFIG, config)
            self.store.merge(HOTEL, {"shift_config": config})

        logger.info(
            "Shift configuration saved (type=%s, shifts=%d)",
            config["type"],
            len(config["shifts"]),
        )
        return config

    def add_custom_shift(self, name, start_time, end_time):
        """Append a new active shift; the config becomes custom."""
        current = self.load()
        shift = {
            "id": uuid4().hex,
            "name": name,
            "start_time": start_time,
            "end_time": end_time,
            "is_active": True,
        }
        config = self.save({"type": CUSTOM, "shifts": current["shifts"] + [shift]})
        logger.info("Added custom shift %s (%s-%s)", name, start_time, end_time)
        return config

    def remove_shift(self, shift_id):
        """
        Drop one shift from a custom config.

        Raises:
            ValidationError: the config is the default pair.
            RecordNotFoundError: no shift with that id.
        """
        current = self.load()
        if current["type"] != CUSTOM:
            raise ValidationError("Default shifts cannot be removed. Switch to custom shifts first.")

        kept = [s for s in current["shifts"] if s.get("id") != shift_id]
        if len(kept) == len(current["shifts"]):
            raise RecordNotFoundError("shifts", shift_id)

        config = self.save({"type": CUSTOM, "shifts": kept})
        logger.info("Removed shift %s", shift_id)
        return config

    def get_shift(self, name):
        """Shift of the active configuration with this name, or None."""
        for shift in self.load()["shifts"]:
            if shift.get("name") == name:
                return shift
        return None
