"""
seed_demo_hotel.py
------------------
Creates a demo hotel account with rooms, staff and today's assignments so
the console has something to show. Safe to run again: an existing demo
owner is left as it is unless --reset is given.

Usage:
    python manage.py seed_demo_hotel
    python manage.py seed_demo_hotel --email demo@grandhotel.com --reset
"""

from django.contrib.auth.models import User
from django.core.management.base import BaseCommand
from django.db import transaction
from django.utils import timezone

from hotels.models import Hotel
from hotels.services.assignment_engine import AssignmentEngine
from hotels.services.onboarding import BANK, QR, REGISTRATION, ROOMS, STAFF, OnboardingProgression
from hotels.services.record_store import BANK_DETAILS, HOTEL, SHIFT_CONFIG, DatabaseRecordStore
from hotels.services.roster import Roster
from hotels.services.shift_policy import default_config

DEMO_PASSWORD = "demo123456"

ROOMS_BY_FLOOR = {
    "1": ["standard", "standard", "deluxe"],
    "2": ["standard", "suite", "deluxe"],
}

DEMO_STAFF = [
    {"name": "Maria Lopez",  "role": "housekeeper",  "email": "maria@example.com"},
    {"name": "James Carter", "role": "housekeeper",  "email": "james@example.com"},
    {"name": "Aisha Khan",   "role": "concierge",    "email": "aisha@example.com"},
    {"name": "Tom Becker",   "role": "room-service", "email": "tom@example.com"},
]


class Command(BaseCommand):
    help = "Seed a demo hotel (owner, rooms, staff, today's assignments)."

    def add_arguments(self, parser):
        parser.add_argument("--email", default="demo@grandhotel.com")
        parser.add_argument("--reset", action="store_true", help="Delete the demo owner first.")

    def handle(self, *args, **options):
        email = options["email"].strip().lower()

        if options["reset"]:
            deleted, _ = User.objects.filter(username=email).delete()
            if deleted:
                self.stdout.write(f"Removed existing demo account {email}")

        if User.objects.filter(username=email).exists():
            self.stdout.write(self.style.WARNING(f"{email} already exists; use --reset to recreate it."))
            return

        with transaction.atomic():
            user = User.objects.create_user(username=email, email=email, password=DEMO_PASSWORD)
            hotel = Hotel.objects.create(owner=user, name="Grand Demo Hotel", email=email)
            store = DatabaseRecordStore(hotel)

            shift_config = default_config()
            store.write(HOTEL, {
                "id": str(hotel.pk),
                "hotel_name": hotel.name,
                "email": email,
                "phone": "+15550100",
                "address": "1 Demo Street",
                "city": "Springfield",
                "state": "IL",
                "zip_code": "62701",
                "shift_config": shift_config,
                "bank_account_added": False,
                "rooms_added": False,
                "staff_added": False,
                "created_at": timezone.now().isoformat(),
            })
            store.write(SHIFT_CONFIG, shift_config)
            store.write(BANK_DETAILS, {
                "account_name": "Grand Demo Hotel LLC",
                "bank_name": "Demo Bank",
                "routing_number": "011000015",
                "account_number": "000123456789",
                "status": "pending_verification",
                "created_at": timezone.now().isoformat(),
            })

            roster = Roster(store)
            rooms = roster.add_rooms([
                {"floor": floor, "type": room_type}
                for floor, types in ROOMS_BY_FLOOR.items()
                for room_type in types
            ])
            staff = roster.add_staff_batch(DEMO_STAFF, {"type": "prefix", "prefix": "DEMO"})

            progression = OnboardingProgression(store)
            for step in (REGISTRATION, BANK, ROOMS, STAFF, QR):
                progression.advance(step)
            progression.complete()

            room_ids = [o["record"]["id"] for o in rooms if o["success"]]
            staff_ids = [o["record"]["id"] for o in staff if o["success"]]
            engine = AssignmentEngine(store)
            created = 0
            for i, room_id in enumerate(room_ids):
                outcome = engine.bulk_create([staff_ids[i % len(staff_ids)]], [room_id], "Morning")
                created += sum(1 for o in outcome if o["success"])

        self.stdout.write(self.style.SUCCESS(
            f"Seed complete. Hotel={hotel.pk}, Rooms={len(room_ids)}, Staff={len(staff_ids)}, "
            f"Assignments={created}. Sign in as {email} / {DEMO_PASSWORD}"
        ))
