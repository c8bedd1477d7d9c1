# hotels/views_onboarding.py
#
# Purpose:
# - Onboarding wizard API: progress, step gate, advance, and the three
#   data-entry steps (bank, rooms, staff) plus the QR step.
# - Each data-entry step stores its data and then advances its step, so the
#   hotel flag (bank_account_added / rooms_added / staff_added) is only set
#   once something was actually saved.
#
import logging

from django.conf import settings
from django.utils import timezone
from rest_framework import status
from rest_framework.permissions import AllowAny
from rest_framework.response import Response
from rest_framework.views import APIView

from .serializers import (
    BankDetailsSerializer,
    RoomBatchSerializer,
    StaffBatchSerializer,
    mask_bank_details,
)
from .services.onboarding import BANK, QR, ROOMS, STAFF, OnboardingProgression, gate_step
from .services.record_store import BANK_DETAILS, HOTEL, DatabaseRecordStore
from .services.roster import Roster
from .services.tips import tip_url
from .views import HotelScopedMixin

logger = logging.getLogger(__name__)


def _progress_body(progression):
    return {
        "progress": progression.get_progress(),
        "next_step": progression.next_step(),
        "is_complete": progression.is_complete(),
    }


def _batch_response(outcomes, noun):
    added = sum(1 for o in outcomes if o["success"])
    body = {"added": added, "results": outcomes}
    if not added:
        body["detail"] = f"No {noun} were added."
        return Response(body, status=status.HTTP_400_BAD_REQUEST)
    return Response(body, status=status.HTTP_201_CREATED)


class OnboardingView(HotelScopedMixin, APIView):
    """GET /api/onboarding/  progress + next step"""

    def get(self, request):
        return Response(_progress_body(OnboardingProgression(self.get_store())))


class OnboardingGateView(APIView):
    """
    GET /api/onboarding/gate/<step>/
    Open to anonymous visitors (the registration screen asks it too).
    """
    permission_classes = [AllowAny]

    def get(self, request, step):
        user = request.user
        is_authenticated = bool(user and user.is_authenticated)
        hotel_record = None
        tenant = getattr(user, "hotel", None) if is_authenticated else None
        if tenant is not None:
            hotel_record = DatabaseRecordStore(tenant).read(HOTEL)

        decision = gate_step(step, is_authenticated, hotel_record)
        return Response({"allowed": decision.allowed, "redirect_to": decision.redirect_to})


class OnboardingAdvanceView(HotelScopedMixin, APIView):
    """POST /api/onboarding/advance/<step>/"""

    def post(self, request, step):
        progression = OnboardingProgression(self.get_store())
        progression.advance(step)
        return Response(_progress_body(progression))


class BankDetailsView(HotelScopedMixin, APIView):
    """
    POST /api/onboarding/bank/
    {"account_name", "bank_name", "routing_number", "account_number"}

    Stored with status pending_verification; only the last four digits of
    the account number are ever sent back.
    """

    def post(self, request):
        serializer = BankDetailsSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        store = self.get_store()
        details = {
            **serializer.validated_data,
            "status": "pending_verification",
            "created_at": timezone.now().isoformat(),
        }
        with store.atomic():
            store.write(BANK_DETAILS, details)
            OnboardingProgression(store).advance(BANK)

        logger.info("Bank details saved for hotel %s", request.user.hotel.pk)
        return Response(mask_bank_details(details), status=status.HTTP_201_CREATED)

    def get(self, request):
        details = self.get_store().read(BANK_DETAILS)
        return Response({"bank_details": mask_bank_details(details)})


class RoomSetupView(HotelScopedMixin, APIView):
    """
    POST /api/onboarding/rooms/  {"rooms": [{"floor", "type", "number"?}, ...]}
    Rooms are added one by one; the step advances when at least one was stored.
    """

    def post(self, request):
        serializer = RoomBatchSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        store = self.get_store()
        outcomes = Roster(store).add_rooms(serializer.validated_data["rooms"])
        if any(o["success"] for o in outcomes):
            OnboardingProgression(store).advance(ROOMS)
        return _batch_response(outcomes, "rooms")


class StaffSetupView(HotelScopedMixin, APIView):
    """
    POST /api/onboarding/staff/
    {"code_config": {"type": "auto"|"prefix"|"manual", ...}, "staff": [{...}, ...]}
    """

    def post(self, request):
        serializer = StaffBatchSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        store = self.get_store()
        outcomes = Roster(store).add_staff_batch(data["staff"], data.get("code_config"))
        if any(o["success"] for o in outcomes):
            OnboardingProgression(store).advance(STAFF)
        return _batch_response(outcomes, "staff members")


class QrSetupView(HotelScopedMixin, APIView):
    """
    GET  /api/onboarding/qr/  tip URL for every room (what each QR code encodes)
    POST /api/onboarding/qr/  finish the wizard
    """

    def get_base_url(self):
        return settings.TIP_BASE_URL or self.request.build_absolute_uri("/")

    def get(self, request):
        hotel_id = request.user.hotel.pk
        base_url = self.get_base_url()
        rooms = Roster(self.get_store()).list_rooms()
        codes = [
            {"room_id": r["id"], "room_number": r.get("number"), "tip_url": tip_url(base_url, hotel_id, r["id"])}
            for r in rooms
        ]
        return Response({"rooms": codes})

    def post(self, request):
        progression = OnboardingProgression(self.get_store())
        progression.advance(QR)
        progression.complete()
        return Response(_progress_body(progression))
