# hotels/views_guest.py
#
# Purpose:
# - Public tip page API reached from a room's QR code. No login.
#     * GET  /api/guest/<hotel_id>/rooms/<room_id>/        room + staff on duty
#     * POST /api/guest/<hotel_id>/rooms/<room_id>/tips/   record a tip
# - Unknown or deactivated hotels are a 404, same as an unknown room.
#
from django.shortcuts import get_object_or_404
from rest_framework import status
from rest_framework.permissions import AllowAny
from rest_framework.response import Response
from rest_framework.views import APIView

from .models import Hotel
from .serializers import TipSerializer
from .services.record_store import DatabaseRecordStore
from .services.tips import TipLedger


class GuestMixin:
    authentication_classes = []
    permission_classes = [AllowAny]

    def get_ledger(self, hotel_id):
        hotel = get_object_or_404(Hotel, pk=hotel_id, is_active=True)
        return TipLedger(DatabaseRecordStore(hotel))


class GuestRoomView(GuestMixin, APIView):
    def get(self, request, hotel_id, room_id):
        return Response(self.get_ledger(hotel_id).room_context(room_id))


class GuestTipView(GuestMixin, APIView):
    def post(self, request, hotel_id, room_id):
        ledger = self.get_ledger(hotel_id)
        serializer = TipSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data
        tip = ledger.record_tip(
            room_id,
            data["amount"],
            staff_id=data.get("staff_id") or None,
            rating=data.get("rating"),
            feedback=data.get("feedback", ""),
            payment_reference=data.get("payment_reference", ""),
        )
        return Response(tip, status=status.HTTP_201_CREATED)
