from django.contrib import admin
from .models import Hotel, StoredCollection


class StoredCollectionInline(admin.TabularInline):
    model = StoredCollection
    fields = ("key", "updated_at")
    readonly_fields = ("key", "updated_at")
    extra = 0
    can_delete = False
    show_change_link = True


@admin.register(Hotel)
class HotelAdmin(admin.ModelAdmin):
    list_display = ("id", "name", "email", "owner", "is_active", "created_at")
    list_filter = ("is_active",)
    search_fields = ("name", "email", "owner__username")
    inlines = [StoredCollectionInline]


@admin.register(StoredCollection)
class StoredCollectionAdmin(admin.ModelAdmin):
    list_display = ("hotel", "key", "updated_at")
    list_filter = ("key",)
    search_fields = ("hotel__name",)
    # Raw JSON; edit through the API so validation runs.
    readonly_fields = ("hotel", "key", "value", "updated_at")
