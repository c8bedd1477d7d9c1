# hotels/tests/test_onboarding.py

from django.core.exceptions import ValidationError
from django.test import TestCase

from hotels.services.onboarding import (
    BANK,
    COMPLETED,
    DASHBOARD_URL,
    QR,
    REGISTRATION,
    ROOMS,
    SIGN_IN_URL,
    STAFF,
    STEPS,
    OnboardingProgression,
    gate_step,
)
from hotels.services.record_store import HOTEL, MemoryRecordStore


def without_timestamp(progress):
    return {k: v for k, v in progress.items() if k != "timestamp"}


class OnboardingProgressionTests(TestCase):
    def setUp(self):
        self.store = MemoryRecordStore()
        self.store.write(HOTEL, {
            "id": "1",
            "bank_account_added": False,
            "rooms_added": False,
            "staff_added": False,
        })
        self.progression = OnboardingProgression(self.store)

    def test_initial_progress(self):
        progress = self.progression.get_progress()
        self.assertEqual(progress["step"], REGISTRATION)
        self.assertFalse(progress["completed"])
        self.assertEqual(self.progression.next_step(), REGISTRATION)

    def test_advance_sets_step_and_hotel_flag(self):
        self.progression.advance(REGISTRATION)
        progress = self.progression.advance(BANK)

        self.assertEqual(progress["step"], BANK)
        self.assertEqual(progress["completed_steps"], {REGISTRATION: True, BANK: True})
        self.assertTrue(self.store.read(HOTEL)["bank_account_added"])
        self.assertFalse(self.store.read(HOTEL)["rooms_added"])
        self.assertEqual(self.progression.next_step(), ROOMS)

    def test_advance_is_idempotent(self):
        first = self.progression.advance(ROOMS)
        second = self.progression.advance(ROOMS)

        self.assertEqual(without_timestamp(first), without_timestamp(second))
        self.assertTrue(self.store.read(HOTEL)["rooms_added"])

    def test_unknown_step(self):
        with self.assertRaises(ValidationError):
            self.progression.advance("payment")

    def test_complete_is_terminal(self):
        progress = self.progression.complete()

        self.assertEqual(progress["step"], COMPLETED)
        self.assertTrue(progress["completed"])
        self.assertEqual(progress["completed_steps"], {step: True for step in STEPS})
        self.assertIsNone(self.progression.next_step())

        after = self.progression.advance(BANK)
        self.assertEqual(after["step"], COMPLETED)
        self.assertTrue(self.progression.is_complete())

    def test_record_collection_added(self):
        self.progression.record_collection_added(STAFF)

        self.assertTrue(self.progression.is_step_complete(STAFF))
        # the hotel flag is left to advance()
        self.assertFalse(self.store.read(HOTEL)["staff_added"])

        with self.assertRaises(ValueError):
            self.progression.record_collection_added("tips")

    def test_gate_uses_hotel_flags(self):
        self.assertTrue(self.progression.gate(BANK).allowed)
        self.progression.advance(BANK)

        decision = self.progression.gate(BANK)
        self.assertFalse(decision.allowed)
        self.assertEqual(decision.redirect_to, DASHBOARD_URL)


class GateStepTests(TestCase):
    def test_registration_is_for_visitors_only(self):
        self.assertTrue(gate_step(REGISTRATION, is_authenticated=False).allowed)

        decision = gate_step(REGISTRATION, is_authenticated=True)
        self.assertFalse(decision.allowed)
        self.assertEqual(decision.redirect_to, DASHBOARD_URL)

    def test_other_steps_require_sign_in(self):
        for step in (BANK, ROOMS, STAFF, QR):
            decision = gate_step(step, is_authenticated=False)
            self.assertFalse(decision.allowed)
            self.assertEqual(decision.redirect_to, SIGN_IN_URL)

    def test_completed_step_redirects_to_dashboard(self):
        hotel = {"rooms_added": True}
        self.assertEqual(gate_step(ROOMS, True, hotel).redirect_to, DASHBOARD_URL)
        self.assertTrue(gate_step(STAFF, True, hotel).allowed)
        # qr has no flag
        self.assertTrue(gate_step(QR, True, hotel).allowed)

    def test_unknown_step(self):
        with self.assertRaises(ValidationError):
            gate_step("payment", is_authenticated=True)
