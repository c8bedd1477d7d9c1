# superadmin/tests.py

from django.contrib.auth.models import User
from django.test import TestCase
from rest_framework.test import APIClient

from hotels.models import Hotel, StoredCollection
from hotels.tests.test_api import register


class SuperAdminApiTests(TestCase):
    def setUp(self):
        self.manager = APIClient()
        register(self.manager)
        self.manager.post("/api/rooms/", {"floor": "1"}, format="json")
        self.hotel = Hotel.objects.get(email="manager@grandhotel.com")

        self.admin = User.objects.create_superuser("root", "root@example.com", "rootpass123")
        self.client = APIClient()
        self.client.force_authenticate(self.admin)

    def test_hotel_managers_are_forbidden(self):
        self.assertEqual(self.manager.get("/api/superadmin/hotels/").status_code, 403)
        self.assertEqual(self.manager.delete(f"/api/superadmin/hotels/{self.hotel.pk}/").status_code, 403)

    def test_list_hotels(self):
        resp = self.client.get("/api/superadmin/hotels/")
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.data["totals"]["hotel_count"], 1)
        self.assertEqual(resp.data["totals"]["completion_rate"], 0)

        row = resp.data["hotels"][0]
        self.assertEqual(row["name"], "Grand Hotel")
        self.assertEqual(row["room_count"], 1)
        self.assertEqual(row["tips"]["total"], "0.00")
        self.assertFalse(row["onboarding_complete"])

    def test_purge_removes_tenant_and_data(self):
        resp = self.client.delete(f"/api/superadmin/hotels/{self.hotel.pk}/")
        self.assertEqual(resp.status_code, 204)

        self.assertFalse(Hotel.objects.exists())
        self.assertFalse(StoredCollection.objects.exists())
        self.assertFalse(User.objects.filter(username="manager@grandhotel.com").exists())
        self.assertEqual(self.client.delete(f"/api/superadmin/hotels/{self.hotel.pk}/").status_code, 404)
