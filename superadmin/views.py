# superadmin/views.py
#
# Purpose:
# - Platform-wide view over every hotel tenant (superusers only).
#     * GET    /api/superadmin/hotels/        hotels + platform totals
#     * DELETE /api/superadmin/hotels/<id>/   purge a hotel
# - Purging deletes the owner account; Hotel and its StoredCollection rows
#   go with it through on_delete=CASCADE.
#
import logging
from decimal import Decimal

from django.db import transaction
from django.shortcuts import get_object_or_404
from rest_framework import status
from rest_framework.permissions import BasePermission
from rest_framework.response import Response
from rest_framework.views import APIView

from hotels.models import Hotel
from hotels.services.onboarding import OnboardingProgression
from hotels.services.record_store import ROOMS, STAFF, DatabaseRecordStore
from hotels.services.tips import TipLedger

logger = logging.getLogger(__name__)


class IsSuperAdmin(BasePermission):
    """
    Only allow requests from logged-in superusers.
    """
    def has_permission(self, request, view):
        return bool(request.user and request.user.is_authenticated and request.user.is_superuser)


def hotel_overview(hotel):
    store = DatabaseRecordStore(hotel)
    progression = OnboardingProgression(store)
    return {
        "id": hotel.pk,
        "name": hotel.name,
        "email": hotel.email,
        "owner": hotel.owner.username,
        "is_active": hotel.is_active,
        "created_at": hotel.created_at.isoformat(),
        "staff_count": len(store.get_all(STAFF)),
        "room_count": len(store.get_all(ROOMS)),
        "onboarding_complete": progression.is_complete(),
        "next_onboarding_step": progression.next_step(),
        "tips": TipLedger(store).stats(),
    }


class HotelListView(APIView):
    permission_classes = [IsSuperAdmin]

    def get(self, request):
        hotels = [hotel_overview(h) for h in Hotel.objects.select_related("owner").order_by("id")]

        completed = sum(1 for h in hotels if h["onboarding_complete"])
        totals = {
            "hotel_count": len(hotels),
            "staff_count": sum(h["staff_count"] for h in hotels),
            "tip_total": str(sum((Decimal(h["tips"]["total"]) for h in hotels), Decimal("0.00"))),
            "completion_rate": round(100 * completed / len(hotels)) if hotels else 0,
        }
        return Response({"totals": totals, "hotels": hotels})


class HotelPurgeView(APIView):
    permission_classes = [IsSuperAdmin]

    def delete(self, request, hotel_id):
        hotel = get_object_or_404(Hotel.objects.select_related("owner"), pk=hotel_id)
        if hotel.owner_id == request.user.pk:
            return Response(
                {"detail": "You cannot purge your own hotel account."},
                status=status.HTTP_400_BAD_REQUEST,
            )

        with transaction.atomic():
            name = hotel.name
            hotel.owner.delete()

        logger.warning("Hotel %s (%s) purged by %s", hotel_id, name, request.user.username)
        return Response(status=status.HTTP_204_NO_CONTENT)
