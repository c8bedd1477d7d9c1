# hotels/tests/test_shift_policy.py

from django.core.exceptions import ValidationError
from django.test import TestCase

from hotels.exceptions import RecordNotFoundError
from hotels.services.record_store import HOTEL, SHIFT_CONFIG, MemoryRecordStore
from hotels.services.shift_policy import (
    CUSTOM,
    DEFAULT,
    ShiftPolicy,
    validate_config,
    validate_shift_times,
)


def shift(name, start, end):
    return {"name": name, "start_time": start, "end_time": end}


class ValidateShiftTimesTests(TestCase):
    def test_overlap_is_reported(self):
        error = validate_shift_times([
            shift("Morning", "06:00", "14:00"),
            shift("Midday", "12:00", "16:00"),
        ])
        self.assertEqual(error, 'Shift "Morning" overlaps with "Midday"')

    def test_touching_shifts_do_not_overlap(self):
        self.assertIsNone(validate_shift_times([
            shift("Morning", "06:00", "14:00"),
            shift("Evening", "14:00", "22:00"),
        ]))

    def test_start_must_be_before_end(self):
        self.assertEqual(
            validate_shift_times([shift("Night", "22:00", "06:00")]),
            'Invalid time range for shift "Night"',
        )
        self.assertEqual(
            validate_shift_times([shift("Zero", "09:00", "09:00")]),
            'Invalid time range for shift "Zero"',
        )

    def test_first_violation_wins(self):
        error = validate_shift_times([
            shift("A", "10:00", "09:00"),
            shift("B", "06:00", "12:00"),
            shift("C", "11:00", "13:00"),
        ])
        self.assertEqual(error, 'Invalid time range for shift "A"')

    def test_contained_shift_overlaps(self):
        self.assertEqual(
            validate_shift_times([shift("A", "06:00", "18:00"), shift("B", "09:00", "12:00")]),
            'Shift "A" overlaps with "B"',
        )
        self.assertEqual(
            validate_shift_times([shift("B", "09:00", "12:00"), shift("A", "06:00", "18:00")]),
            'Shift "B" overlaps with "A"',
        )

    def test_malformed_times(self):
        self.assertEqual(validate_shift_times([shift("X", "6am", "14:00")]), "Invalid shift times")
        self.assertEqual(validate_shift_times([shift("X", None, "14:00")]), "Invalid shift times")

    def test_config_level_messages(self):
        self.assertIsNone(validate_config({"type": DEFAULT}))
        self.assertEqual(validate_config({"type": CUSTOM, "shifts": []}), "Please add at least one shift")
        self.assertEqual(
            validate_config({"type": CUSTOM, "shifts": [shift("", "06:00", "14:00")]}),
            "All shift details are required",
        )


class ShiftPolicyTests(TestCase):
    def setUp(self):
        self.store = MemoryRecordStore()
        self.store.write(HOTEL, {"id": "1", "hotel_name": "Test Hotel"})
        self.policy = ShiftPolicy(self.store)

    def test_load_defaults_to_morning_and_evening(self):
        config = ShiftPolicy(MemoryRecordStore()).load()
        self.assertEqual(config["type"], DEFAULT)
        self.assertEqual(
            [(s["name"], s["start_time"], s["end_time"]) for s in config["shifts"]],
            [("Morning", "06:00", "14:00"), ("Evening", "14:00", "22:00")],
        )

    def test_default_config_discards_supplied_shifts(self):
        config = self.policy.save({"type": DEFAULT, "shifts": [shift("Odd", "01:00", "02:00")]})
        self.assertEqual([s["name"] for s in config["shifts"]], ["Morning", "Evening"])

    def test_save_writes_both_locations(self):
        config = self.policy.save({"type": CUSTOM, "shifts": [shift("Early", "05:00", "13:00")]})

        self.assertEqual(self.store.read(SHIFT_CONFIG), config)
        self.assertEqual(self.store.read(HOTEL)["shift_config"], config)
        self.assertEqual(self.policy.load(), config)

    def test_switching_back_to_default_drops_custom_shifts(self):
        self.policy.save({"type": CUSTOM, "shifts": [shift("Early", "05:00", "13:00")]})
        self.policy.save({"type": DEFAULT})

        config = self.policy.load()
        self.assertEqual(config["type"], DEFAULT)
        self.assertEqual(
            [(s["name"], s["start_time"], s["end_time"]) for s in config["shifts"]],
            [("Morning", "06:00", "14:00"), ("Evening", "14:00", "22:00")],
        )
        self.assertEqual(self.store.read(SHIFT_CONFIG), config)

    def test_stored_default_config_ignores_its_shift_list(self):
        self.store.merge(HOTEL, {"shift_config": {"type": DEFAULT, "shifts": [shift("Odd", "01:00", "02:00")]}})

        config = self.policy.load()
        self.assertEqual([s["name"] for s in config["shifts"]], ["Morning", "Evening"])

    def test_invalid_custom_config_is_not_persisted(self):
        with self.assertRaises(ValidationError) as cm:
            self.policy.save({"type": CUSTOM, "shifts": [
                shift("Morning", "06:00", "14:00"),
                shift("Midday", "12:00", "16:00"),
            ]})
        self.assertEqual(cm.exception.messages[0], 'Shift "Morning" overlaps with "Midday"')
        self.assertIsNone(self.store.read(SHIFT_CONFIG))
        self.assertNotIn("shift_config", self.store.read(HOTEL))

    def test_add_custom_shift_extends_current_config(self):
        config = self.policy.add_custom_shift("Night", "22:00", "23:30")

        self.assertEqual(config["type"], CUSTOM)
        self.assertEqual([s["name"] for s in config["shifts"]], ["Morning", "Evening", "Night"])

    def test_add_overlapping_custom_shift_is_rejected(self):
        with self.assertRaises(ValidationError):
            self.policy.add_custom_shift("Late", "21:00", "23:00")
        self.assertEqual(self.policy.load()["type"], DEFAULT)

    def test_remove_shift(self):
        config = self.policy.add_custom_shift("Night", "22:00", "23:30")
        night = config["shifts"][-1]

        config = self.policy.remove_shift(night["id"])
        self.assertEqual([s["name"] for s in config["shifts"]], ["Morning", "Evening"])
        self.assertEqual(config["type"], CUSTOM)

    def test_remove_from_default_or_unknown_id(self):
        with self.assertRaises(ValidationError):
            self.policy.remove_shift("morning")

        self.policy.add_custom_shift("Night", "22:00", "23:30")
        with self.assertRaises(RecordNotFoundError):
            self.policy.remove_shift("does-not-exist")

    def test_get_shift_by_name(self):
        self.assertEqual(self.policy.get_shift("Evening")["start_time"], "14:00")
        self.assertIsNone(self.policy.get_shift("Night"))
