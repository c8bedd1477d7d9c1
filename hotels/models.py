# hotels/models.py
#
# Purpose:
# - Tenant and persistence models for the hotel tipping console.
#
# Design highlights:
# - Hotel: one row per registered property (tenant). Owned by exactly one
#   auth User (the hotel manager). Deleting it purges everything it owns.
# - StoredCollection: simple key/value store, one row per (hotel, key).
#   The value is the whole JSON collection (list of records) or a single
#   JSON record (hotel profile, shift config, onboarding progress).
#
# Notes for developers:
# - Domain records (staff, rooms, assignments, tips) are NOT individual
#   tables. They live inside StoredCollection.value and are only reached
#   through hotels.services.record_store.DatabaseRecordStore.
# - Cross references inside records (staff_id, room_id) are opaque ids.
#

from django.contrib.auth.models import User
from django.db import models


# -------------------------
# Hotel (tenant account)
# -------------------------
class Hotel(models.Model):
    """
    A registered property using the console.
    - 'owner' is the manager account that signed up the hotel.
    - Profile details, shift config and onboarding flags live in the
      tenant's record store under the "hotel" key.
    """
    owner = models.OneToOneField(
        User,
        on_delete=models.CASCADE,
        related_name="hotel",
    )
    name = models.CharField(max_length=200)
    email = models.EmailField()
    created_at = models.DateTimeField(auto_now_add=True)
    is_active = models.BooleanField(default=True)

    class Meta:
        ordering = ["id"]

    def __str__(self):
        return self.name


# -------------------------
# Key/value collection row
# -------------------------
class StoredCollection(models.Model):
    """
    One named collection (or single record) of a hotel.
    Example keys:
      - hotel, staff, rooms, assignments, tips
      - shift_config, onboarding_progress, bank_details
    """
    hotel = models.ForeignKey(
        Hotel,
        on_delete=models.CASCADE,
        related_name="collections",
    )
    key = models.CharField(max_length=64)
    value = models.JSONField(default=list, blank=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["hotel_id", "key"]
        constraints = [
            models.UniqueConstraint(fields=["hotel", "key"], name="uniq_collection_per_hotel"),
        ]

    def __str__(self):
        return f"{self.hotel_id}:{self.key}"
