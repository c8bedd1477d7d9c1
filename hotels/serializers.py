# hotels/serializers.py
#
# Purpose:
# - Input validation for the hotel console API.
# - Records live in the Record Store as plain dicts, so these are plain
#   Serializers (no ModelSerializer); services do the writing.
# - Serializers that take ids look them up in the store passed as
#   context["store"] so a bad id is a 400 instead of a dangling reference.
#
from rest_framework import serializers

from .services.record_store import ROOMS, STAFF
from .services.roster import CODE_AUTO, CODE_TYPES, ROLES, ROOM_TYPES
from .services.shift_policy import CUSTOM, DEFAULT

HHMM_RE = r"^([01]\d|2[0-3]):[0-5]\d$"


def _require_in_store(serializer, collection, record_id, label):
    store = serializer.context.get("store")
    if store is not None and store.get(collection, record_id) is None:
        raise serializers.ValidationError(f"{label} not found.")
    return record_id


# -------------------- Auth --------------------
class RegistrationSerializer(serializers.Serializer):
    hotel_name = serializers.CharField(max_length=200)
    email = serializers.EmailField()
    password = serializers.CharField(write_only=True)
    confirm_password = serializers.CharField(write_only=True)
    phone = serializers.CharField(max_length=32, required=False, allow_blank=True, default="")
    address = serializers.CharField(max_length=255, required=False, allow_blank=True, default="")
    city = serializers.CharField(max_length=100, required=False, allow_blank=True, default="")
    state = serializers.CharField(max_length=100, required=False, allow_blank=True, default="")
    zip_code = serializers.CharField(max_length=20, required=False, allow_blank=True, default="")

    def validate(self, attrs):
        if attrs["password"] != attrs["confirm_password"]:
            raise serializers.ValidationError("Passwords do not match")
        if len(attrs["password"]) < 6:
            raise serializers.ValidationError("Password must be at least 6 characters long")
        return attrs


class LoginSerializer(serializers.Serializer):
    email = serializers.EmailField()
    password = serializers.CharField(write_only=True)


# -------------------- Hotel --------------------
class HotelProfileSerializer(serializers.Serializer):
    """Account settings; every field optional (PATCH)."""
    hotel_name = serializers.CharField(max_length=200, required=False)
    email = serializers.EmailField(required=False)
    phone = serializers.CharField(max_length=32, required=False, allow_blank=True)
    address = serializers.CharField(max_length=255, required=False, allow_blank=True)
    city = serializers.CharField(max_length=100, required=False, allow_blank=True)
    state = serializers.CharField(max_length=100, required=False, allow_blank=True)
    zip_code = serializers.CharField(max_length=20, required=False, allow_blank=True)


class BankDetailsSerializer(serializers.Serializer):
    account_name = serializers.CharField(max_length=200)
    bank_name = serializers.CharField(max_length=200)
    routing_number = serializers.RegexField(r"^\d{9}$", error_messages={"invalid": "Routing number must be 9 digits."})
    account_number = serializers.RegexField(r"^\d{4,17}$", error_messages={"invalid": "Account number must be 4 to 17 digits."})


def mask_bank_details(details):
    """Bank details as returned by the API: account number reduced to its last 4 digits."""
    if not details:
        return None
    masked = dict(details)
    number = masked.pop("account_number", "") or ""
    masked["account_last4"] = number[-4:]
    return masked


# -------------------- Shifts --------------------
class ShiftSerializer(serializers.Serializer):
    id = serializers.CharField(required=False)
    name = serializers.CharField(max_length=100)
    start_time = serializers.RegexField(HHMM_RE, error_messages={"invalid": "Use HH:MM (24h)."})
    end_time = serializers.RegexField(HHMM_RE, error_messages={"invalid": "Use HH:MM (24h)."})
    is_active = serializers.BooleanField(required=False, default=True)


class ShiftConfigSerializer(serializers.Serializer):
    """
    Shape check only. Range/overlap rules (and their messages) belong to
    ShiftPolicy.save().
    """
    type = serializers.ChoiceField(choices=[DEFAULT, CUSTOM])
    shifts = serializers.ListField(child=serializers.DictField(), required=False, default=list)


# -------------------- Staff --------------------
class StaffCodeConfigSerializer(serializers.Serializer):
    type = serializers.ChoiceField(choices=CODE_TYPES, default=CODE_AUTO)
    prefix = serializers.CharField(max_length=20, required=False, allow_blank=True)
    manual_id = serializers.CharField(max_length=40, required=False, allow_blank=True)


class StaffSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=200)
    role = serializers.ChoiceField(choices=ROLES)
    email = serializers.EmailField(required=False, allow_blank=True, default="")
    phone = serializers.CharField(max_length=32, required=False, allow_blank=True, default="")
    image = serializers.CharField(required=False, allow_blank=True, allow_null=True, default=None)
    staff_code = serializers.CharField(max_length=40, required=False, allow_blank=True)
    code_config = StaffCodeConfigSerializer(required=False)


class StaffUpdateSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=200, required=False)
    role = serializers.ChoiceField(choices=ROLES, required=False)
    email = serializers.EmailField(required=False, allow_blank=True)
    phone = serializers.CharField(max_length=32, required=False, allow_blank=True)
    image = serializers.CharField(required=False, allow_blank=True, allow_null=True)
    staff_code = serializers.CharField(max_length=40, required=False)


class StaffBatchSerializer(serializers.Serializer):
    code_config = StaffCodeConfigSerializer(required=False)
    staff = serializers.ListField(child=serializers.DictField(), allow_empty=False)


# -------------------- Rooms --------------------
class RoomSerializer(serializers.Serializer):
    number = serializers.CharField(max_length=20, required=False, allow_blank=True)
    floor = serializers.CharField(max_length=10)
    type = serializers.ChoiceField(choices=ROOM_TYPES, default="standard")


class RoomUpdateSerializer(serializers.Serializer):
    number = serializers.CharField(max_length=20, required=False)
    floor = serializers.CharField(max_length=10, required=False)
    type = serializers.ChoiceField(choices=ROOM_TYPES, required=False)


class RoomBatchSerializer(serializers.Serializer):
    rooms = serializers.ListField(child=serializers.DictField(), allow_empty=False)


# -------------------- Assignments --------------------
class AssignmentCreateSerializer(serializers.Serializer):
    staff_id = serializers.CharField()
    room_id = serializers.CharField()
    shift = serializers.CharField(max_length=100)

    def validate_staff_id(self, value):
        return _require_in_store(self, STAFF, value, "Staff member")

    def validate_room_id(self, value):
        return _require_in_store(self, ROOMS, value, "Room")


class BulkAssignmentSerializer(serializers.Serializer):
    staff_ids = serializers.ListField(child=serializers.CharField(), allow_empty=False)
    room_ids = serializers.ListField(child=serializers.CharField(), allow_empty=False)
    shift = serializers.CharField(max_length=100)

    def validate_staff_ids(self, value):
        return [_require_in_store(self, STAFF, v, "Staff member") for v in value]

    def validate_room_ids(self, value):
        return [_require_in_store(self, ROOMS, v, "Room") for v in value]


class AssignmentUpdateSerializer(serializers.Serializer):
    staff_id = serializers.CharField(required=False)
    room_id = serializers.CharField(required=False)
    shift = serializers.CharField(max_length=100, required=False)
    status = serializers.CharField(required=False)
    start_time = serializers.DateTimeField(required=False)
    end_time = serializers.DateTimeField(required=False)

    def validate_staff_id(self, value):
        return _require_in_store(self, STAFF, value, "Staff member")

    def validate_room_id(self, value):
        return _require_in_store(self, ROOMS, value, "Room")

    def validate(self, attrs):
        start = attrs.get("start_time")
        end = attrs.get("end_time")
        if start and end and start >= end:
            raise serializers.ValidationError("End time must be after start time.")
        # stored as ISO strings
        for key in ("start_time", "end_time"):
            if key in attrs:
                attrs[key] = attrs[key].isoformat()
        return attrs


# -------------------- Tips (guest) --------------------
class TipSerializer(serializers.Serializer):
    # CharField so TipLedger reports amount errors with its own message
    amount = serializers.CharField()
    staff_id = serializers.CharField(required=False, allow_blank=True, allow_null=True)
    rating = serializers.IntegerField(required=False, allow_null=True, min_value=1, max_value=5)
    feedback = serializers.CharField(required=False, allow_blank=True, max_length=1000, default="")
    payment_reference = serializers.CharField(required=False, allow_blank=True, max_length=100, default="")
