# hotels/views.py
#
# Purpose:
# - Console APIs for the signed-in hotel manager: hotel profile, shifts,
#   staff, rooms and assignments.
# - Every request works on a DatabaseRecordStore for request.user.hotel,
#   built per request (HotelScopedMixin.get_store). Nothing is shared
#   between tenants.
# - Domain errors (ValidationError, DuplicateAssignmentError,
#   RecordNotFoundError, StorageError) are raised by the services and turned
#   into {"detail": ...} responses by hotels.exceptions.api_exception_handler.
#
# Onboarding endpoints live in views_onboarding.py, the public guest tip
# page in views_guest.py.
#
import logging

from django.utils.dateparse import parse_date
from rest_framework import status, viewsets
from rest_framework.decorators import action
from rest_framework.permissions import BasePermission
from rest_framework.response import Response
from rest_framework.views import APIView

from .exceptions import RecordNotFoundError
from .serializers import (
    AssignmentCreateSerializer,
    AssignmentUpdateSerializer,
    BulkAssignmentSerializer,
    HotelProfileSerializer,
    RoomSerializer,
    RoomUpdateSerializer,
    ShiftConfigSerializer,
    ShiftSerializer,
    StaffSerializer,
    StaffUpdateSerializer,
)
from .services.assignment_engine import AssignmentEngine, display_status
from .services.record_store import HOTEL, ROOMS, DatabaseRecordStore
from .services.roster import Roster
from .services.shift_policy import ShiftPolicy

logger = logging.getLogger(__name__)


# -------------------- Permissions --------------------
class HasHotel(BasePermission):
    """Signed-in user who owns an active hotel account."""
    message = "A hotel account is required."

    def has_permission(self, request, view):
        user = request.user
        if not (user and user.is_authenticated):
            return False
        hotel = getattr(user, "hotel", None)
        return bool(hotel and hotel.is_active)


class HotelScopedMixin:
    permission_classes = [HasHotel]

    def get_store(self):
        if getattr(self, "_store", None) is None:
            self._store = DatabaseRecordStore(self.request.user.hotel)
        return self._store


def _with_display_status(assignment):
    return {**assignment, "display_status": display_status(assignment)}


# -------------------- Hotel --------------------
class HotelView(HotelScopedMixin, APIView):
    """
    GET   /api/hotel/   hotel record
    PATCH /api/hotel/   update account settings
    """

    def get(self, request):
        hotel = self.get_store().read(HOTEL)
        if hotel is None:
            raise RecordNotFoundError(HOTEL, request.user.hotel.pk)
        return Response(hotel)

    def patch(self, request):
        serializer = HotelProfileSerializer(data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)
        fields = serializer.validated_data

        updated = self.get_store().merge(HOTEL, fields)
        if updated is None:
            raise RecordNotFoundError(HOTEL, request.user.hotel.pk)

        # keep the tenant row in step with the record
        tenant = request.user.hotel
        changed = []
        if "hotel_name" in fields:
            tenant.name = fields["hotel_name"]
            changed.append("name")
        if "email" in fields:
            tenant.email = fields["email"]
            changed.append("email")
        if changed:
            tenant.save(update_fields=changed)

        logger.info("Hotel %s updated (%s)", tenant.pk, ", ".join(sorted(fields)))
        return Response(updated)


# -------------------- Shifts --------------------
class ShiftConfigView(HotelScopedMixin, APIView):
    """
    GET /api/shifts/   active ShiftConfig
    PUT /api/shifts/   replace it ({"type": "default"} or {"type": "custom", "shifts": [...]})
    """

    def get(self, request):
        return Response(ShiftPolicy(self.get_store()).load())

    def put(self, request):
        serializer = ShiftConfigSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        config = ShiftPolicy(self.get_store()).save(serializer.validated_data)
        return Response(config)


class CustomShiftView(HotelScopedMixin, APIView):
    """POST /api/shifts/custom/  {"name", "start_time", "end_time"}"""

    def post(self, request):
        serializer = ShiftSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data
        config = ShiftPolicy(self.get_store()).add_custom_shift(
            data["name"].strip(), data["start_time"], data["end_time"]
        )
        return Response(config, status=status.HTTP_201_CREATED)


class CustomShiftDetailView(HotelScopedMixin, APIView):
    """DELETE /api/shifts/custom/<shift_id>/"""

    def delete(self, request, shift_id):
        config = ShiftPolicy(self.get_store()).remove_shift(shift_id)
        return Response(config)


# -------------------- Staff --------------------
class StaffViewSet(HotelScopedMixin, viewsets.ViewSet):
    """
    GET    /api/staff/?search=&role=
    POST   /api/staff/                 (optional "code_config" for the staff code)
    GET    /api/staff/<id>/
    PATCH  /api/staff/<id>/
    DELETE /api/staff/<id>/
    """

    def get_roster(self):
        return Roster(self.get_store())

    def list(self, request):
        staff = self.get_roster().list_staff(
            search=request.query_params.get("search"),
            role=request.query_params.get("role"),
        )
        return Response(staff)

    def create(self, request):
        serializer = StaffSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = dict(serializer.validated_data)
        code_config = data.pop("code_config", None)
        member = self.get_roster().add_staff(data, code_config)
        return Response(member, status=status.HTTP_201_CREATED)

    def retrieve(self, request, pk=None):
        return Response(self.get_roster().get_staff(pk))

    def partial_update(self, request, pk=None):
        serializer = StaffUpdateSerializer(data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)
        return Response(self.get_roster().update_staff(pk, serializer.validated_data))

    def destroy(self, request, pk=None):
        self.get_roster().remove_staff(pk)
        return Response(status=status.HTTP_204_NO_CONTENT)


# -------------------- Rooms --------------------
class RoomViewSet(HotelScopedMixin, viewsets.ViewSet):
    """
    GET    /api/rooms/?search=&floor=
    POST   /api/rooms/
    GET    /api/rooms/<id>/
    PATCH  /api/rooms/<id>/
    DELETE /api/rooms/<id>/
    GET    /api/rooms/<id>/assignments/   every assignment of the room
    GET    /api/rooms/<id>/current/       assignment on shift right now (or null)
    """

    def get_roster(self):
        return Roster(self.get_store())

    def list(self, request):
        rooms = self.get_roster().list_rooms(
            search=request.query_params.get("search"),
            floor=request.query_params.get("floor"),
        )
        return Response(rooms)

    def create(self, request):
        serializer = RoomSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        room = self.get_roster().add_room(serializer.validated_data)
        return Response(room, status=status.HTTP_201_CREATED)

    def retrieve(self, request, pk=None):
        return Response(self.get_roster().get_room(pk))

    def partial_update(self, request, pk=None):
        serializer = RoomUpdateSerializer(data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)
        return Response(self.get_roster().update_room(pk, serializer.validated_data))

    def destroy(self, request, pk=None):
        self.get_roster().remove_room(pk)
        return Response(status=status.HTTP_204_NO_CONTENT)

    @action(detail=True, methods=["get"])
    def assignments(self, request, pk=None):
        self.get_roster().get_room(pk)
        engine = AssignmentEngine(self.get_store())
        return Response([_with_display_status(a) for a in engine.assignments_for_room(pk)])

    @action(detail=True, methods=["get"])
    def current(self, request, pk=None):
        self.get_roster().get_room(pk)
        current = AssignmentEngine(self.get_store()).current_assignment_for_room(pk)
        return Response({"assignment": current})


# -------------------- Assignments --------------------
class AssignmentViewSet(HotelScopedMixin, viewsets.ViewSet):
    """
    GET    /api/assignments/?date=YYYY-MM-DD   list (display_status added per row)
    POST   /api/assignments/                   {"staff_id", "room_id", "shift"}
    POST   /api/assignments/bulk/              {"staff_ids", "room_ids", "shift"}
    GET    /api/assignments/<id>/
    PATCH  /api/assignments/<id>/
    DELETE /api/assignments/<id>/
    """

    def get_engine(self):
        return AssignmentEngine(self.get_store())

    def list(self, request):
        engine = self.get_engine()
        date_raw = (request.query_params.get("date") or "").strip()
        if date_raw:
            day = parse_date(date_raw)
            if day is None:
                return Response(
                    {"detail": "Invalid date format. Use YYYY-MM-DD."},
                    status=status.HTTP_400_BAD_REQUEST,
                )
            assignments = engine.assignments_for_day(day)
        else:
            assignments = engine.get_all()
        return Response([_with_display_status(a) for a in assignments])

    def create(self, request):
        serializer = AssignmentCreateSerializer(data=request.data, context={"store": self.get_store()})
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data
        assignment = self.get_engine().create(data["staff_id"], data["room_id"], data["shift"])
        return Response(_with_display_status(assignment), status=status.HTTP_201_CREATED)

    @action(detail=False, methods=["post"])
    def bulk(self, request):
        """
        Every staff x room pair is tried on its own. Outcomes are grouped by
        room; 201 when at least one assignment was created, else 400.
        """
        store = self.get_store()
        serializer = BulkAssignmentSerializer(data=request.data, context={"store": store})
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        outcomes = self.get_engine().bulk_create(data["staff_ids"], data["room_ids"], data["shift"])

        by_room = {}
        for outcome in outcomes:
            by_room.setdefault(outcome["room_id"], []).append(outcome)
        results = []
        for room_id, room_outcomes in by_room.items():
            room = store.get(ROOMS, room_id) or {}
            results.append({
                "room_id": room_id,
                "room_number": room.get("number"),
                "outcomes": room_outcomes,
            })

        created = sum(1 for o in outcomes if o["success"])
        failed = len(outcomes) - created
        if failed:
            logger.warning("Bulk assignment: %d created, %d failed", created, failed)
        body = {"created": created, "failed": failed, "results": results}
        code = status.HTTP_201_CREATED if created else status.HTTP_400_BAD_REQUEST
        return Response(body, status=code)

    def retrieve(self, request, pk=None):
        return Response(_with_display_status(self.get_engine().get(pk)))

    def partial_update(self, request, pk=None):
        serializer = AssignmentUpdateSerializer(data=request.data, partial=True, context={"store": self.get_store()})
        serializer.is_valid(raise_exception=True)
        updated = self.get_engine().update(pk, serializer.validated_data)
        return Response(_with_display_status(updated))

    def destroy(self, request, pk=None):
        self.get_engine().delete(pk)
        return Response(status=status.HTTP_204_NO_CONTENT)

