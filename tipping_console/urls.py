# tipping_console/urls.py
#
# Purpose:
# - Project URL router.
# - Keeps every JSON API under /api/ and Django admin under /admin/.
#
from django.conf import settings
from django.conf.urls.static import static
from django.contrib import admin
from django.urls import include, path

urlpatterns = [
    # Django admin
    path("admin/", admin.site.urls),

    # =====
    # API's
    # =====
    # Hotel console (auth, onboarding, staff, rooms, shifts, assignments, guest tips)
    path("api/", include("hotels.urls")),
    path("api/reports/", include("reports.urls")),
    path("api/superadmin/", include("superadmin.urls")),
]

# Static files in DEBUG (dev only). In production, serve via web server / CDN.
if settings.DEBUG:
    urlpatterns += static(settings.STATIC_URL, document_root=settings.STATIC_ROOT)
