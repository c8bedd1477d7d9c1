# superadmin/urls.py

from django.urls import path
from .views import HotelListView, HotelPurgeView

urlpatterns = [
    path("hotels/", HotelListView.as_view(), name="superadmin-hotels"),
    path("hotels/<int:hotel_id>/", HotelPurgeView.as_view(), name="superadmin-hotel-purge"),
]
