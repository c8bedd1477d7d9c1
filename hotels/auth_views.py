import logging

from django.contrib.auth import authenticate, login, logout
from django.contrib.auth.models import User
from django.db import transaction
from django.utils import timezone
from django.utils.decorators import method_decorator
from django.views.decorators.csrf import csrf_exempt
from rest_framework import status
from rest_framework.permissions import AllowAny
from rest_framework.response import Response
from rest_framework.views import APIView

from .models import Hotel
from .serializers import LoginSerializer, RegistrationSerializer
from .services.onboarding import REGISTRATION, OnboardingProgression
from .services.record_store import HOTEL, SHIFT_CONFIG, DatabaseRecordStore
from .services.shift_policy import default_config

logger = logging.getLogger(__name__)


@method_decorator(csrf_exempt, name="dispatch")
class RegisterView(APIView):
    """
    POST /api/auth/register
    {
      "hotel_name": "Grand Hotel",
      "email": "manager@grandhotel.com",
      "password": "demo123456",
      "confirm_password": "demo123456",
      "phone": "+15550100", "address": "...", "city": "...", "state": "...", "zip_code": "..."
    }
    Creates the Django user (username = email), the Hotel tenant and its
    hotel record, completes the registration step and logs the manager in.
    """
    permission_classes = [AllowAny]

    def post(self, request):
        serializer = RegistrationSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data
        email = data["email"].strip().lower()

        if User.objects.filter(username=email).exists():
            return Response(
                {"detail": "An account with this email already exists."},
                status=status.HTTP_400_BAD_REQUEST,
            )

        with transaction.atomic():
            user = User.objects.create_user(username=email, email=email, password=data["password"])
            hotel = Hotel.objects.create(owner=user, name=data["hotel_name"], email=email)

            store = DatabaseRecordStore(hotel)
            shift_config = default_config()
            record = {
                "id": str(hotel.pk),
                "hotel_name": data["hotel_name"],
                "email": email,
                "phone": data["phone"],
                "address": data["address"],
                "city": data["city"],
                "state": data["state"],
                "zip_code": data["zip_code"],
                "shift_config": shift_config,
                "bank_account_added": False,
                "rooms_added": False,
                "staff_added": False,
                "created_at": timezone.now().isoformat(),
            }
            store.write(HOTEL, record)
            store.write(SHIFT_CONFIG, shift_config)
            OnboardingProgression(store).advance(REGISTRATION)

        login(request, user, backend="django.contrib.auth.backends.ModelBackend")
        logger.info("Registered hotel %s (%s)", hotel.pk, email)
        return Response(record, status=status.HTTP_201_CREATED)


@method_decorator(csrf_exempt, name="dispatch")
class LoginView(APIView):
    """
    POST /api/auth/login
    { "email": "manager@grandhotel.com", "password": "demo123456" }
    """
    permission_classes = [AllowAny]

    def post(self, request):
        serializer = LoginSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        email = serializer.validated_data["email"].strip().lower()

        user = authenticate(request, username=email, password=serializer.validated_data["password"])
        if not user:
            logger.warning("Failed sign-in for %s", email)
            return Response({"detail": "Invalid email or password."}, status=status.HTTP_400_BAD_REQUEST)

        login(request, user)
        return Response({"detail": "Logged in.", "is_superuser": user.is_superuser}, status=status.HTTP_200_OK)


class LogoutView(APIView):
    """
    POST /api/auth/logout
    """
    permission_classes = [AllowAny]

    def post(self, request):
        logout(request)
        return Response({"detail": "Logged out."}, status=status.HTTP_200_OK)
