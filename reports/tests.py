# reports/tests.py

from datetime import date, datetime

from django.test import TestCase, override_settings
from django.utils import timezone
from rest_framework.test import APIClient

from hotels.services.assignment_engine import AssignmentEngine
from hotels.services.record_store import ROOMS, STAFF, MemoryRecordStore
from hotels.services.tips import TipLedger
from hotels.tests.test_api import register

from .assignment_report import build_assignment_report, build_summary


@override_settings(TIME_ZONE="UTC")
class AssignmentReportTests(TestCase):
    def setUp(self):
        self.store = MemoryRecordStore()
        self.store.add(STAFF, {"id": "s1", "name": "Ann", "staff_code": "001", "role": "valet"})
        self.store.add(STAFF, {"id": "s2", "name": "Ben", "staff_code": "002", "role": "valet"})
        self.store.add(ROOMS, {"id": "r1", "number": "101", "floor": "1", "assigned_staff": []})
        self.store.add(ROOMS, {"id": "r2", "number": "102", "floor": "1", "assigned_staff": []})

        engine = AssignmentEngine(self.store)
        may1 = timezone.make_aware(datetime(2024, 5, 1, 9, 0))
        may2 = timezone.make_aware(datetime(2024, 5, 2, 9, 0))
        engine.create("s1", "r1", "Morning", now=may1)
        engine.create("s2", "r2", "Evening", now=may1)
        engine.create("s1", "r2", "Morning", now=may2)

    def report(self, **filters):
        filters.setdefault("start_date", date(2024, 5, 1))
        filters.setdefault("end_date", date(2024, 5, 2))
        return build_assignment_report(self.store, **filters)

    def test_rows(self):
        rows = self.report(start_date=date(2024, 5, 1), end_date=date(2024, 5, 1))

        self.assertEqual(len(rows), 2)
        self.assertEqual(rows[0], {
            "date": "May 01, 2024",
            "staff_name": "Ann",
            "staff_code": "001",
            "room_number": "101",
            "shift": "Morning",
            "start_time": "06:00",
            "end_time": "14:00",
            "status": "active",
        })

    def test_filters(self):
        self.assertEqual(len(self.report()), 3)
        self.assertEqual(len(self.report(staff_ids=["s1"])), 2)
        self.assertEqual(len(self.report(room_ids=["r2"])), 2)
        self.assertEqual(len(self.report(shifts=["Evening"])), 1)
        self.assertEqual(len(self.report(start_date=date(2024, 5, 3), end_date=date(2024, 5, 3))), 0)

    def test_deleted_staff_and_rooms(self):
        self.store.remove(STAFF, "s2")
        self.store.remove(ROOMS, "r2")

        row = self.report(shifts=["Evening"])[0]
        self.assertEqual(row["staff_name"], "Unknown")
        self.assertEqual(row["staff_code"], "N/A")
        self.assertEqual(row["room_number"], "Unknown")

    def test_summary(self):
        TipLedger(self.store).record_tip("r1", "12", staff_id="s1")
        summary = build_summary(self.store, now=timezone.make_aware(datetime(2024, 5, 1, 10, 0)))

        self.assertEqual(summary["staff_count"], 2)
        self.assertEqual(summary["room_count"], 2)
        self.assertEqual(summary["active_assignments"], 3)
        self.assertEqual(summary["rooms_staffed_now"], 1)
        self.assertEqual(summary["tips"]["total"], "12.00")
        self.assertEqual(summary["next_onboarding_step"], "registration")


class ReportsApiTests(TestCase):
    def setUp(self):
        self.client = APIClient()
        register(self.client)
        staff = self.client.post("/api/staff/", {"name": "Ann", "role": "valet"}, format="json").data
        room = self.client.post("/api/rooms/", {"floor": "1"}, format="json").data
        self.client.post(
            "/api/assignments/",
            {"staff_id": staff["id"], "room_id": room["id"], "shift": "Morning"},
            format="json",
        )

    def test_assignment_report_defaults_to_today(self):
        resp = self.client.get("/api/reports/assignments/")
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.data["count"], 1)
        self.assertEqual(resp.data["rows"][0]["staff_name"], "Ann")

        resp = self.client.get("/api/reports/assignments/", {"shifts": "Evening,Night"})
        self.assertEqual(resp.data["count"], 0)
        self.assertEqual(resp.data["filters"]["shifts"], ["Evening", "Night"])

    def test_bad_dates(self):
        self.assertEqual(self.client.get("/api/reports/assignments/", {"start_date": "May 1"}).status_code, 400)
        resp = self.client.get("/api/reports/assignments/", {"start_date": "2024-05-02", "end_date": "2024-05-01"})
        self.assertEqual(resp.status_code, 400)

    def test_summary(self):
        resp = self.client.get("/api/reports/summary/")
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.data["staff_count"], 1)
        self.assertEqual(resp.data["next_onboarding_step"], "bank")

    def test_requires_hotel_account(self):
        self.assertIn(APIClient().get("/api/reports/summary/").status_code, (401, 403))
