# hotels/urls.py
#
# Purpose:
# - Hotel console API (mounted under /api/ in tipping_console/urls.py).
# - Staff, rooms and assignments are ViewSets on a DefaultRouter; the rest
#   are plain APIViews wired below.

from django.urls import include, path
from rest_framework.routers import DefaultRouter

from .auth_views import LoginView, LogoutView, RegisterView
from .views import (
    AssignmentViewSet,
    CustomShiftDetailView,
    CustomShiftView,
    HotelView,
    RoomViewSet,
    ShiftConfigView,
    StaffViewSet,
)
from .views_guest import GuestRoomView, GuestTipView
from . import views_onboarding

# --------------------------
# DRF Router registrations
# --------------------------
router = DefaultRouter()
router.register(r"staff", StaffViewSet, basename="staff")
router.register(r"rooms", RoomViewSet, basename="room")
router.register(r"assignments", AssignmentViewSet, basename="assignment")

# --------------------------
# URL patterns
# --------------------------
urlpatterns = [
    path("", include(router.urls)),

    # Auth (session)
    path("auth/register", RegisterView.as_view(), name="register"),
    path("auth/login", LoginView.as_view(), name="login"),
    path("auth/logout", LogoutView.as_view(), name="logout"),

    # Hotel + shifts
    path("hotel/", HotelView.as_view(), name="hotel"),
    path("shifts/", ShiftConfigView.as_view(), name="shifts"),
    path("shifts/custom/", CustomShiftView.as_view(), name="shift-custom"),
    path("shifts/custom/<str:shift_id>/", CustomShiftDetailView.as_view(), name="shift-custom-detail"),

    # Onboarding wizard
    path("onboarding/", views_onboarding.OnboardingView.as_view(), name="onboarding"),
    path("onboarding/gate/<str:step>/", views_onboarding.OnboardingGateView.as_view(), name="onboarding-gate"),
    path("onboarding/advance/<str:step>/", views_onboarding.OnboardingAdvanceView.as_view(), name="onboarding-advance"),
    path("onboarding/bank/", views_onboarding.BankDetailsView.as_view(), name="onboarding-bank"),
    path("onboarding/rooms/", views_onboarding.RoomSetupView.as_view(), name="onboarding-rooms"),
    path("onboarding/staff/", views_onboarding.StaffSetupView.as_view(), name="onboarding-staff"),
    path("onboarding/qr/", views_onboarding.QrSetupView.as_view(), name="onboarding-qr"),

    # Public guest tip page (QR code target)
    path("guest/<int:hotel_id>/rooms/<str:room_id>/", GuestRoomView.as_view(), name="guest-room"),
    path("guest/<int:hotel_id>/rooms/<str:room_id>/tips/", GuestTipView.as_view(), name="guest-tip"),
]
