# hotels/tests/test_api.py

from django.contrib.auth.models import User
from django.test import TestCase
from rest_framework.test import APIClient

from hotels.models import Hotel
from hotels.services.assignment_engine import DUPLICATE_MESSAGE
from hotels.services.record_store import BANK_DETAILS, DatabaseRecordStore


def register(client, email="manager@grandhotel.com", hotel_name="Grand Hotel"):
    resp = client.post(
        "/api/auth/register",
        data={
            "hotel_name": hotel_name,
            "email": email,
            "password": "demo123456",
            "confirm_password": "demo123456",
            "phone": "+15550100",
            "city": "Springfield",
        },
        format="json",
    )
    assert resp.status_code == 201, resp.data
    return resp


class AuthApiTests(TestCase):
    def setUp(self):
        self.client = APIClient()

    def test_register_creates_tenant_and_logs_in(self):
        resp = register(self.client)

        self.assertEqual(resp.data["hotel_name"], "Grand Hotel")
        self.assertEqual(resp.data["shift_config"]["type"], "default")
        self.assertFalse(resp.data["bank_account_added"])

        user = User.objects.get(username="manager@grandhotel.com")
        self.assertTrue(user.check_password("demo123456"))
        self.assertEqual(user.hotel.name, "Grand Hotel")

        progress = self.client.get("/api/onboarding/").data
        self.assertTrue(progress["progress"]["completed_steps"]["registration"])
        self.assertEqual(progress["next_step"], "bank")

    def test_register_rejects_duplicates_and_mismatched_passwords(self):
        register(self.client)
        other = APIClient()
        resp = other.post(
            "/api/auth/register",
            data={"hotel_name": "X", "email": "manager@grandhotel.com",
                  "password": "demo123456", "confirm_password": "demo123456"},
            format="json",
        )
        self.assertEqual(resp.status_code, 400)

        resp = other.post(
            "/api/auth/register",
            data={"hotel_name": "X", "email": "new@example.com",
                  "password": "demo123456", "confirm_password": "different"},
            format="json",
        )
        self.assertEqual(resp.status_code, 400)
        self.assertFalse(User.objects.filter(username="new@example.com").exists())

    def test_login_and_logout(self):
        register(self.client)
        self.client.post("/api/auth/logout")
        self.assertIn(self.client.get("/api/staff/").status_code, (401, 403))

        bad = self.client.post("/api/auth/login", {"email": "manager@grandhotel.com", "password": "nope"}, format="json")
        self.assertEqual(bad.status_code, 400)

        ok = self.client.post("/api/auth/login", {"email": "manager@grandhotel.com", "password": "demo123456"}, format="json")
        self.assertEqual(ok.status_code, 200)
        self.assertEqual(self.client.get("/api/staff/").status_code, 200)


class ConsoleApiTests(TestCase):
    def setUp(self):
        self.client = APIClient()
        register(self.client)
        self.hotel = Hotel.objects.get(email="manager@grandhotel.com")

        self.staff = self.client.post("/api/staff/", {"name": "Ann", "role": "housekeeper"}, format="json").data
        self.room = self.client.post("/api/rooms/", {"floor": "1"}, format="json").data

    def test_staff_and_room_creation(self):
        self.assertEqual(self.staff["staff_code"], "001")
        self.assertEqual(self.room["number"], "101")

        resp = self.client.post("/api/staff/", {"name": "Ben", "role": "pilot"}, format="json")
        self.assertEqual(resp.status_code, 400)

        resp = self.client.get("/api/staff/", {"search": "ann"})
        self.assertEqual([s["name"] for s in resp.data], ["Ann"])

    def test_missing_records_are_404(self):
        self.assertEqual(self.client.get("/api/staff/unknown/").status_code, 404)
        self.assertEqual(self.client.delete("/api/rooms/unknown/").status_code, 404)
        self.assertEqual(self.client.patch("/api/assignments/unknown/", {"status": "completed"}, format="json").status_code, 404)

    def test_assignment_duplicate_is_409(self):
        payload = {"staff_id": self.staff["id"], "room_id": self.room["id"], "shift": "Morning"}
        first = self.client.post("/api/assignments/", payload, format="json")
        self.assertEqual(first.status_code, 201)
        self.assertIn(first.data["display_status"], ("Upcoming", "Active", "Completed"))

        second = self.client.post("/api/assignments/", payload, format="json")
        self.assertEqual(second.status_code, 409)
        self.assertEqual(second.data["detail"], DUPLICATE_MESSAGE)

        resp = self.client.get(f"/api/rooms/{self.room['id']}/assignments/")
        self.assertEqual(len(resp.data), 1)

    def test_assignment_with_unknown_staff_is_400(self):
        payload = {"staff_id": "ghost", "room_id": self.room["id"], "shift": "Morning"}
        self.assertEqual(self.client.post("/api/assignments/", payload, format="json").status_code, 400)

        payload = {"staff_id": self.staff["id"], "room_id": self.room["id"], "shift": "Graveyard"}
        self.assertEqual(self.client.post("/api/assignments/", payload, format="json").status_code, 400)

    def test_bulk_assign_groups_by_room(self):
        room2 = self.client.post("/api/rooms/", {"floor": "1"}, format="json").data
        self.client.post(
            "/api/assignments/",
            {"staff_id": self.staff["id"], "room_id": self.room["id"], "shift": "Evening"},
            format="json",
        )

        resp = self.client.post(
            "/api/assignments/bulk/",
            {"staff_ids": [self.staff["id"]], "room_ids": [self.room["id"], room2["id"]], "shift": "Evening"},
            format="json",
        )
        self.assertEqual(resp.status_code, 201)
        self.assertEqual(resp.data["created"], 1)
        self.assertEqual(resp.data["failed"], 1)
        self.assertEqual([r["room_number"] for r in resp.data["results"]], ["101", "102"])
        self.assertFalse(resp.data["results"][0]["outcomes"][0]["success"])

    def test_assignment_list_date_filter(self):
        self.client.post(
            "/api/assignments/",
            {"staff_id": self.staff["id"], "room_id": self.room["id"], "shift": "Morning"},
            format="json",
        )
        self.assertEqual(len(self.client.get("/api/assignments/").data), 1)
        self.assertEqual(len(self.client.get("/api/assignments/", {"date": "1999-01-01"}).data), 0)
        self.assertEqual(self.client.get("/api/assignments/", {"date": "yesterday"}).status_code, 400)

    def test_shift_config_validation(self):
        resp = self.client.put(
            "/api/shifts/",
            {"type": "custom", "shifts": [
                {"name": "Morning", "start_time": "06:00", "end_time": "14:00"},
                {"name": "Midday", "start_time": "12:00", "end_time": "16:00"},
            ]},
            format="json",
        )
        self.assertEqual(resp.status_code, 400)
        self.assertEqual(resp.data["detail"], 'Shift "Morning" overlaps with "Midday"')

        resp = self.client.post("/api/shifts/custom/", {"name": "Night", "start_time": "22:00", "end_time": "23:30"}, format="json")
        self.assertEqual(resp.status_code, 201)
        night = resp.data["shifts"][-1]

        self.assertEqual(self.client.get("/api/hotel/").data["shift_config"]["type"], "custom")
        resp = self.client.delete(f"/api/shifts/custom/{night['id']}/")
        self.assertEqual(len(resp.data["shifts"]), 2)

    def test_hotel_profile_update(self):
        resp = self.client.patch("/api/hotel/", {"hotel_name": "Grand Hotel & Spa", "city": "Shelbyville"}, format="json")
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.data["city"], "Shelbyville")

        self.hotel.refresh_from_db()
        self.assertEqual(self.hotel.name, "Grand Hotel & Spa")

    def test_tenants_are_isolated(self):
        other = APIClient()
        register(other, email="other@example.com", hotel_name="Other Hotel")

        self.assertEqual(other.get("/api/staff/").data, [])
        self.assertEqual(other.get(f"/api/staff/{self.staff['id']}/").status_code, 404)


class OnboardingApiTests(TestCase):
    def setUp(self):
        self.client = APIClient()
        register(self.client)
        self.hotel = Hotel.objects.get(email="manager@grandhotel.com")

    def test_gate(self):
        anonymous = APIClient()
        self.assertTrue(anonymous.get("/api/onboarding/gate/registration/").data["allowed"])
        self.assertEqual(anonymous.get("/api/onboarding/gate/bank/").data["redirect_to"], "/signin")

        self.assertEqual(self.client.get("/api/onboarding/gate/registration/").data["redirect_to"], "/")
        self.assertTrue(self.client.get("/api/onboarding/gate/bank/").data["allowed"])
        self.assertEqual(self.client.get("/api/onboarding/gate/payment/").status_code, 400)

    def test_bank_step_masks_account_number(self):
        resp = self.client.post(
            "/api/onboarding/bank/",
            {"account_name": "Grand Hotel LLC", "bank_name": "Demo Bank",
             "routing_number": "011000015", "account_number": "000123456789"},
            format="json",
        )
        self.assertEqual(resp.status_code, 201)
        self.assertEqual(resp.data["account_last4"], "6789")
        self.assertNotIn("account_number", resp.data)
        self.assertEqual(resp.data["status"], "pending_verification")

        self.assertEqual(DatabaseRecordStore(self.hotel).read(BANK_DETAILS)["account_number"], "000123456789")
        self.assertTrue(self.client.get("/api/hotel/").data["bank_account_added"])
        self.assertEqual(self.client.get("/api/onboarding/gate/bank/").data["redirect_to"], "/")

    def test_rooms_and_staff_steps(self):
        resp = self.client.post("/api/onboarding/rooms/", {"rooms": [{"floor": "2"}, {"floor": ""}]}, format="json")
        self.assertEqual(resp.status_code, 201)
        self.assertEqual(resp.data["added"], 1)

        resp = self.client.post(
            "/api/onboarding/staff/",
            {"code_config": {"type": "prefix", "prefix": "HK"}, "staff": [{"name": "Ann", "role": "housekeeper"}]},
            format="json",
        )
        self.assertEqual(resp.status_code, 201)
        self.assertEqual(resp.data["results"][0]["record"]["staff_code"], "HK-001")

        hotel = self.client.get("/api/hotel/").data
        self.assertTrue(hotel["rooms_added"])
        self.assertTrue(hotel["staff_added"])

        resp = self.client.post("/api/onboarding/staff/", {"staff": [{"name": "", "role": "valet"}]}, format="json")
        self.assertEqual(resp.status_code, 400)

        resp = self.client.post(
            "/api/onboarding/staff/",
            {"staff": [{"name": "Ben", "role": "valet", "staff_code": 12345}]},
            format="json",
        )
        self.assertEqual(resp.status_code, 201)
        self.assertEqual(resp.data["results"][0]["record"]["staff_code"], "12345")

    def test_qr_step_completes_onboarding(self):
        room = self.client.post("/api/rooms/", {"floor": "1"}, format="json").data

        codes = self.client.get("/api/onboarding/qr/").data["rooms"]
        self.assertEqual(len(codes), 1)
        self.assertTrue(codes[0]["tip_url"].endswith(f"/tip/{self.hotel.pk}/{room['id']}"))

        resp = self.client.post("/api/onboarding/qr/")
        self.assertTrue(resp.data["is_complete"])
        self.assertIsNone(resp.data["next_step"])


class GuestApiTests(TestCase):
    def setUp(self):
        manager = APIClient()
        register(manager)
        self.hotel = Hotel.objects.get(email="manager@grandhotel.com")
        self.room = manager.post("/api/rooms/", {"floor": "1"}, format="json").data
        self.guest = APIClient()

    def test_guest_can_view_room_and_tip(self):
        base = f"/api/guest/{self.hotel.pk}/rooms/{self.room['id']}/"
        resp = self.guest.get(base)
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.data["hotel_name"], "Grand Hotel")

        resp = self.guest.post(base + "tips/", {"amount": 15, "rating": 5}, format="json")
        self.assertEqual(resp.status_code, 201)
        self.assertEqual(resp.data["amount"], "15.00")

        resp = self.guest.post(base + "tips/", {"amount": "0"}, format="json")
        self.assertEqual(resp.status_code, 400)
        self.assertEqual(resp.data["detail"], "Please enter a valid amount")

        resp = self.guest.post(base + "tips/", {"amount": "1e30"}, format="json")
        self.assertEqual(resp.status_code, 400)
        self.assertEqual(resp.data["detail"], "Please enter a valid amount")

    def test_unknown_hotel_or_room(self):
        self.assertEqual(self.guest.get(f"/api/guest/{self.hotel.pk}/rooms/nope/").status_code, 404)
        self.assertEqual(self.guest.get(f"/api/guest/999/rooms/{self.room['id']}/").status_code, 404)

        self.hotel.is_active = False
        self.hotel.save()
        self.assertEqual(self.guest.get(f"/api/guest/{self.hotel.pk}/rooms/{self.room['id']}/").status_code, 404)
