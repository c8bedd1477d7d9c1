"""
onboarding.py
-------------
Tracks which setup steps a hotel account has finished and decides whether a
step screen may be entered.

Steps, in order:
    registration -> bank -> rooms -> staff -> qr -> (completed)

- advance(step) marks the step done, makes it the current step and, for
  bank/rooms/staff, sets the matching flag on the hotel record.
  Calling it twice leaves the same state.
- complete() is terminal: every step done, completed=True. advance() after
  that leaves the progress untouched.
- record_collection_added("staff" | "rooms") is the explicit call made when
  the first staff member / room is stored outside the wizard.

Gate rule (what the step screens rely on):
- registration: anonymous visitors only; signed-in users go to the dashboard.
- other steps: sign-in required; a step whose hotel flag is already set
  redirects to the dashboard instead of showing the form again.
"""

import logging
from dataclasses import dataclass
from typing import Optional

from django.core.exceptions import ValidationError
from django.utils import timezone

from .record_store import HOTEL, ONBOARDING_PROGRESS

logger = logging.getLogger(__name__)

REGISTRATION = "registration"
BANK = "bank"
ROOMS = "rooms"
STAFF = "staff"
QR = "qr"
COMPLETED = "completed"

STEPS = (REGISTRATION, BANK, ROOMS, STAFF, QR)

# registration and qr have no hotel flag
HOTEL_FLAGS = {
    BANK: "bank_account_added",
    ROOMS: "rooms_added",
    STAFF: "staff_added",
}

DASHBOARD_URL = "/"
SIGN_IN_URL = "/signin"


@dataclass(frozen=True)
class GateDecision:
    allowed: bool
    redirect_to: Optional[str] = None


def initial_progress():
    return {
        "step": REGISTRATION,
        "completed": False,
        "timestamp": timezone.now().isoformat(),
        "completed_steps": {},
    }


def _check_step(step):
    if step not in STEPS:
        raise ValidationError(f'Unknown onboarding step "{step}"')


def gate_step(step, is_authenticated, hotel=None):
    """
    Decide whether a step screen may be entered.

    Args:
        step: one of STEPS
        is_authenticated: whether the visitor is signed in
        hotel: the hotel record (flags), when the visitor has one

    Returns:
        GateDecision
    """
    _check_step(step)

    if step == REGISTRATION:
        if is_authenticated:
            return GateDecision(False, DASHBOARD_URL)
        return GateDecision(True)

    if not is_authenticated:
        logger.warning("Unauthorized access to onboarding step %s", step)
        return GateDecision(False, SIGN_IN_URL)

    flag = HOTEL_FLAGS.get(step)
    if flag and (hotel or {}).get(flag):
        logger.info("Step %s already completed, redirecting to dashboard", step)
        return GateDecision(False, DASHBOARD_URL)

    return GateDecision(True)


class OnboardingProgression:
    """
    Onboarding state of one hotel.

    Args:
        store: the hotel's RecordStore
    """

    def __init__(self, store):
        self.store = store

    def get_progress(self):
        return self.store.read(ONBOARDING_PROGRESS) or initial_progress()

    def advance(self, step):
        """
        Mark a step complete and make it current.

        Raises:
            ValidationError: unknown step name.
        """
        _check_step(step)

        with self.store.atomic():
            progress = self.get_progress()
            if progress.get("completed"):
                logger.info("Onboarding already completed; ignoring step %s", step)
                return progress

            progress["completed_steps"] = {**(progress.get("completed_steps") or {}), step: True}
            progress["step"] = step
            progress["timestamp"] = timezone.now().isoformat()
            self.store.write(ONBOARDING_PROGRESS, progress)

            flag = HOTEL_FLAGS.get(step)
            if flag:
                self.store.merge(HOTEL, {flag: True})

        logger.info("Completed onboarding step: %s", step)
        return progress

    def complete(self):
        progress = {
            "step": COMPLETED,
            "completed": True,
            "timestamp": timezone.now().isoformat(),
            "completed_steps": {step: True for step in STEPS},
        }
        self.store.write(ONBOARDING_PROGRESS, progress)
        logger.info("Onboarding completed")
        return progress

    def record_collection_added(self, collection):
        """
        Note that a staff member or room now exists.
        Only touches completed_steps; the hotel flag is set by advance().
        """
        if collection not in (STAFF, ROOMS):
            raise ValueError(f"No onboarding step tracks '{collection}'.")

        with self.store.atomic():
            progress = self.get_progress()
            steps = progress.get("completed_steps") or {}
            if steps.get(collection):
                return progress
            steps[collection] = True
            progress["completed_steps"] = steps
            self.store.write(ONBOARDING_PROGRESS, progress)
        return progress

    def is_step_complete(self, step):
        return bool((self.get_progress().get("completed_steps") or {}).get(step))

    def is_complete(self):
        return bool(self.get_progress().get("completed"))

    def next_step(self):
        """First step not yet completed, or None when all are done."""
        done = self.get_progress().get("completed_steps") or {}
        for step in STEPS:
            if not done.get(step):
                return step
        return None

    def gate(self, step, is_authenticated=True):
        return gate_step(step, is_authenticated, self.store.read(HOTEL))
